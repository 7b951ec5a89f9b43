# apps/core/permissions.py

import logging
from functools import wraps

from .auth_service import auth_service
from .exceptions import PermissionDenied

logger = logging.getLogger(__name__)


class TeamPermissions:
    """
    Sistema de permissões do Teamboard
    Só existem dois papéis por projeto: dono e membro
    """

    @staticmethod
    def is_owner(user_id, project):
        """Verifica se user_id é dono do documento de projeto"""
        return project.get('ownerId') == user_id

    @staticmethod
    def is_member(user_id, project):
        """Verifica se user_id está na lista de membros do projeto"""
        return user_id in (project.get('members') or [])

    @staticmethod
    def require_owner(user_id, project, message='Only project owner can perform this action'):
        if not TeamPermissions.is_owner(user_id, project):
            logger.warning("❌ Acesso negado (dono) - usuário %s no projeto %s", user_id, project.get('id'))
            raise PermissionDenied(message)

    @staticmethod
    def require_member(user_id, project, message='Not a member of this project'):
        if not TeamPermissions.is_member(user_id, project):
            logger.warning("❌ Acesso negado (membro) - usuário %s no projeto %s", user_id, project.get('id'))
            raise PermissionDenied(message)


def bearer_token(request):
    """Extrai o token de um header 'Authorization: Bearer <token>'"""
    header = request.headers.get('Authorization', '')
    parts = header.split(' ')
    if len(parts) == 2 and parts[1]:
        return parts[1]
    return None


# Decorators para views

def token_required(view_func):
    """
    Decorator que autentica o token bearer
    Coloca o usuário em request.api_user; levanta Unauthorized caso contrário
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        request.api_user = auth_service.verify_token(bearer_token(request))
        return view_func(request, *args, **kwargs)

    return wrapped_view
