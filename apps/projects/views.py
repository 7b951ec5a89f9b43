# apps/projects/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.permissions import token_required
from apps.core.utils import parse_json_body
from . import services
from .deletion import DELETED_MESSAGE, deletion_coordinator


# =================== PROJETOS & EQUIPE ===================

@csrf_exempt
@require_http_methods(['GET', 'POST'])
@token_required
def projects(request):
    """
    GET  - projetos em que o usuário é dono ou membro
    POST - cria um projeto do usuário
    """
    if request.method == 'GET':
        return JsonResponse({'success': True, 'projects': services.list_projects(request.api_user)})

    data = parse_json_body(request)
    project = services.create_project(request.api_user, data.get('name'))
    return JsonResponse({'success': True, 'project': project})


@require_GET
@token_required
def members(request, project_id):
    return JsonResponse({
        'success': True,
        'members': services.list_members(project_id, request.api_user),
    })


@csrf_exempt
@require_http_methods(['DELETE'])
@token_required
def remove_member(request, project_id, member_id):
    project = services.remove_member(project_id, member_id, request.api_user)
    return JsonResponse({'success': True, 'project': project})


@csrf_exempt
@require_POST
@token_required
def invite(request, project_id):
    data = parse_json_body(request)
    services.invite_member(project_id, data.get('email'), request.api_user)
    return JsonResponse({'success': True, 'message': 'Invitation sent successfully'})


@require_GET
@token_required
def pending_invitations(request):
    return JsonResponse({
        'success': True,
        'invitations': services.pending_invitations(request.api_user),
    })


@csrf_exempt
@require_POST
@token_required
def accept_invitation(request, invitation_id):
    project = services.accept_invitation(invitation_id, request.api_user)
    return JsonResponse({'success': True, 'project': project})


@csrf_exempt
@require_POST
@token_required
def decline_invitation(request, invitation_id):
    services.decline_invitation(invitation_id, request.api_user)
    return JsonResponse({'success': True})


# =================== EXCLUSÃO & VOTAÇÃO ===================

@csrf_exempt
@require_POST
@token_required
def delete_request(request, project_id):
    """
    Dono pede a exclusão do projeto

    Responde com deleted, requiresConfirmation ou votingRequired
    """
    user = request.api_user
    outcome = deletion_coordinator.request_deletion(project_id, user.user_id, user.display_name)
    return JsonResponse(outcome.to_response())


@csrf_exempt
@require_http_methods(['DELETE'])
@token_required
def force_delete(request, project_id):
    """Exclusão forçada pelo dono - ignora tarefas e votação"""
    deletion_coordinator.force_delete(project_id, request.api_user.user_id)
    return JsonResponse({'success': True, 'message': DELETED_MESSAGE})


@csrf_exempt
@require_POST
@token_required
def vote_delete(request, project_id):
    """Membro aprova ou rejeita a votação de exclusão em aberto"""
    user = request.api_user
    data = parse_json_body(request)
    outcome = deletion_coordinator.cast_vote(
        project_id, user.user_id, data.get('approve'), user.display_name
    )
    return JsonResponse(outcome.to_response())


@require_GET
@token_required
def deletion_vote_status(request, project_id):
    """Consultado pelos membros enquanto a votação está aberta"""
    status = deletion_coordinator.get_vote_status(project_id, request.api_user.user_id)
    return JsonResponse(status.to_response())
