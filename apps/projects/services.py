# apps/projects/services.py

"""
Operações de projetos e equipe

Projetos são documentos JSON em project:<id>. A equipe muda por
convites (o dono convida, o usuário aceita) e pela remoção de membros
feita pelo dono.
"""

import logging
from typing import Dict, List

from django.db import transaction

from apps.board.utils import clear_assignee, rename_assignee
from apps.core.exceptions import InvalidRequest, NotFound
from apps.core.kv_store import invitation_key, kv_store, project_key, tasks_key
from apps.core.models import User
from apps.core.permissions import TeamPermissions
from apps.core.utils import new_id, now_iso
from .deletion import deletion_coordinator

logger = logging.getLogger(__name__)

PENDING = 'pending'
ACCEPTED = 'accepted'
DECLINED = 'declined'


def get_project(project_id, for_update=False) -> Dict:
    """Carrega o documento do projeto ou levanta NotFound"""
    project = kv_store.get(project_key(project_id), for_update=for_update)
    if not project:
        raise NotFound('Project not found')
    return project


def list_projects(user) -> List[Dict]:
    """Projetos em que o usuário é dono ou membro"""
    return [
        project for project in kv_store.get_by_prefix('project:')
        if project.get('ownerId') == user.user_id or user.user_id in (project.get('members') or [])
    ]


def create_project(user, name) -> Dict:
    name = (name or '').strip()
    if not name:
        raise InvalidRequest('Project name is required')

    project = {
        'id': new_id(),
        'name': name,
        'ownerId': user.user_id,
        'ownerEmail': user.email,
        'ownerName': user.display_name,
        'members': [user.user_id],
        'memberDetails': [user.as_member()],
        'createdAt': now_iso(),
    }
    kv_store.set(project_key(project['id']), project)

    logger.info("📁 Projeto %s criado por %s", project['id'], user.user_id)
    return project


def list_members(project_id, user) -> List[Dict]:
    project = get_project(project_id)
    TeamPermissions.require_member(user.user_id, project)
    return project.get('memberDetails') or []


@transaction.atomic
def remove_member(project_id, member_id, user) -> Dict:
    """
    Remove um membro (só o dono)

    Também apaga os convites dele para este projeto, limpa as tarefas
    atribuídas a ele e cancela a votação de exclusão em aberto.
    """
    project = get_project(project_id, for_update=True)
    TeamPermissions.require_owner(user.user_id, project, 'Only project owner can remove members')

    if member_id == project['ownerId']:
        raise InvalidRequest('Cannot remove project owner')

    project['members'] = [m for m in project['members'] if m != member_id]
    project['memberDetails'] = [
        m for m in (project.get('memberDetails') or []) if m.get('id') != member_id
    ]
    kv_store.set(project_key(project_id), project)

    for invitation in kv_store.get_by_prefix(f'invitation:{member_id}:'):
        if invitation.get('projectId') == project_id:
            kv_store.delete(invitation_key(member_id, invitation['id']))

    tasks = kv_store.get(tasks_key(project_id))
    if tasks:
        kv_store.set(tasks_key(project_id), clear_assignee(tasks, member_id))

    deletion_coordinator.member_removed(project_id, member_id, user.user_id)

    logger.info("Membro %s removido do projeto %s", member_id, project_id)
    return project


def refresh_member_details(user):
    """
    Atualiza nome e email do usuário nos projetos e tarefas dele

    Deve rodar dentro da transação que alterou o usuário.
    """
    for record in kv_store.get_by_prefix('project:'):
        if not TeamPermissions.is_member(user.user_id, record):
            continue

        project = get_project(record['id'], for_update=True)
        project['memberDetails'] = [
            user.as_member() if member.get('id') == user.user_id else member
            for member in (project.get('memberDetails') or [])
        ]
        if TeamPermissions.is_owner(user.user_id, project):
            project['ownerName'] = user.display_name
            project['ownerEmail'] = user.email
        kv_store.set(project_key(project['id']), project)

        tasks = kv_store.get(tasks_key(project['id']))
        if tasks:
            kv_store.set(tasks_key(project['id']), rename_assignee(tasks, user.user_id, user.display_name))


def invite_member(project_id, email, user) -> Dict:
    email = (email or '').strip().lower()
    if not email:
        raise InvalidRequest('Email is required')

    project = get_project(project_id)
    TeamPermissions.require_owner(user.user_id, project, 'Only project owner can invite members')

    invited = User.objects.filter(email=email, is_active=True).first()
    if invited is None:
        raise NotFound('User with this email not found')

    if TeamPermissions.is_member(invited.user_id, project):
        raise InvalidRequest('User is already a member of this project')

    for existing in kv_store.get_by_prefix(f'invitation:{invited.user_id}:'):
        if existing.get('projectId') == project_id and existing.get('status') == PENDING:
            raise InvalidRequest('User already has a pending invitation for this project')

    invitation = {
        'id': new_id(),
        'projectId': project_id,
        'projectName': project.get('name'),
        'inviterId': user.user_id,
        'inviterName': user.display_name,
        'invitedUserId': invited.user_id,
        'status': PENDING,
        'invitedAt': now_iso(),
    }
    kv_store.set(invitation_key(invited.user_id, invitation['id']), invitation)

    logger.info("✉️ %s convidado para o projeto %s", invited.user_id, project_id)
    return invitation


def pending_invitations(user) -> List[Dict]:
    return [
        invitation for invitation in kv_store.get_by_prefix(f'invitation:{user.user_id}:')
        if invitation.get('status') == PENDING
    ]


def _get_pending_invitation(invitation_id, user) -> Dict:
    invitation = kv_store.get(invitation_key(user.user_id, invitation_id))
    if not invitation:
        raise NotFound('Invitation not found')

    if invitation.get('status') != PENDING:
        raise InvalidRequest('Invitation is not pending')

    return invitation


@transaction.atomic
def accept_invitation(invitation_id, user) -> Dict:
    """Coloca o usuário no projeto e marca o convite como aceito"""
    invitation = _get_pending_invitation(invitation_id, user)
    project = get_project(invitation['projectId'], for_update=True)

    if not TeamPermissions.is_member(user.user_id, project):
        project['members'] = (project.get('members') or []) + [user.user_id]
        project['memberDetails'] = (project.get('memberDetails') or []) + [user.as_member()]
        kv_store.set(project_key(project['id']), project)

    invitation['status'] = ACCEPTED
    invitation['acceptedAt'] = now_iso()
    kv_store.set(invitation_key(user.user_id, invitation_id), invitation)

    logger.info("🤝 %s entrou no projeto %s", user.user_id, project['id'])
    return project


def decline_invitation(invitation_id, user) -> Dict:
    invitation = _get_pending_invitation(invitation_id, user)

    invitation['status'] = DECLINED
    invitation['declinedAt'] = now_iso()
    kv_store.set(invitation_key(user.user_id, invitation_id), invitation)
    return invitation
