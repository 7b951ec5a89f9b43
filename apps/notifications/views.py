# apps/notifications/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.core.permissions import token_required
from .service import notification_sink


@require_GET
@token_required
def list_notifications(request):
    """Notificações do usuário autenticado, mais recentes primeiro"""
    notifications = notification_sink.list_for_user(request.api_user.user_id)
    return JsonResponse({'success': True, 'notifications': notifications})


@csrf_exempt
@require_POST
@token_required
def mark_read(request, notification_id):
    notification_sink.mark_read(notification_id, request.api_user.user_id)
    return JsonResponse({'success': True})
