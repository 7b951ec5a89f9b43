# apps/core/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .auth_service import auth_service
from .permissions import bearer_token, token_required
from .utils import now_iso, parse_json_body


def _user_payload(user):
    return {
        'id': user.user_id,
        'email': user.email,
        'name': user.display_name,
    }


# =================== AUTENTICAÇÃO ===================

@csrf_exempt
@require_POST
def register_view(request):
    """
    Cadastro de nova conta

    Validação e criação ficam no serviço de autenticação
    """
    data = parse_json_body(request)
    user = auth_service.register_user(
        data.get('email'), data.get('password'), data.get('name')
    )

    return JsonResponse({'success': True, 'user': _user_payload(user)})


@csrf_exempt
@require_POST
def login_view(request):
    """Login por email/senha - responde com um token bearer"""
    data = parse_json_body(request)
    user, token = auth_service.login(data.get('email'), data.get('password'))

    return JsonResponse({
        'success': True,
        'user': _user_payload(user),
        'session': {
            'access_token': token.key,
            'expires_at': token.expires_at.isoformat(),
        }
    })


@csrf_exempt
@require_POST
@token_required
def verify_view(request):
    return JsonResponse({'success': True, 'user': _user_payload(request.api_user)})


@csrf_exempt
@require_POST
def logout_view(request):
    auth_service.logout(bearer_token(request))
    return JsonResponse({'success': True})


# =================== PERFIL ===================

@csrf_exempt
@require_POST
@token_required
def update_profile_view(request):
    """Novo nome e/ou email; os projetos do usuário são atualizados junto"""
    data = parse_json_body(request)
    user = auth_service.update_profile(request.api_user, data.get('name'), data.get('email'))
    return JsonResponse({'success': True, 'user': _user_payload(user)})


@csrf_exempt
@require_POST
@token_required
def change_password_view(request):
    data = parse_json_body(request)
    auth_service.change_password(
        request.api_user, data.get('currentPassword'), data.get('newPassword')
    )
    return JsonResponse({'success': True, 'message': 'Password changed successfully'})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@token_required
def user_settings_view(request):
    """
    GET  - preferências do usuário (darkMode)
    POST - grava as preferências
    """
    if request.method == 'GET':
        user_settings = auth_service.get_user_settings(request.api_user)
    else:
        data = parse_json_body(request)
        user_settings = auth_service.save_user_settings(request.api_user, data.get('darkMode'))

    return JsonResponse({'success': True, 'settings': user_settings})


# =================== MONITORAMENTO ===================

@require_GET
def health_check(request):
    """Health check para monitoramento"""
    return JsonResponse({'status': 'ok', 'timestamp': now_iso()})
