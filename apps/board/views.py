# apps/board/views.py

import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from apps.core.exceptions import InvalidRequest
from apps.core.kv_store import kv_store, tasks_key
from apps.core.permissions import TeamPermissions, token_required
from apps.core.utils import parse_json_body
from apps.notifications.service import TASK_COMPLETED, notification_sink
from apps.projects.services import get_project
from .utils import empty_task_set, is_valid_task_set

logger = logging.getLogger(__name__)

OWNER_ONLY_ACTIONS = ('add', 'delete')


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@token_required
def project_tasks(request, project_id):
    """
    GET  - tarefas do projeto (colunas vazias se nada foi salvo)
    POST - substitui as tarefas; ações 'add'/'delete' só para o dono
    """
    user_id = request.api_user.user_id
    project = get_project(project_id)
    TeamPermissions.require_member(user_id, project)

    if request.method == 'GET':
        tasks = kv_store.get(tasks_key(project_id))
        return JsonResponse({'success': True, 'tasks': tasks or empty_task_set()})

    data = parse_json_body(request)
    tasks = data.get('tasks')
    action = data.get('action')

    if action in OWNER_ONLY_ACTIONS:
        TeamPermissions.require_owner(
            user_id, project, 'Only the project owner can add or delete tasks'
        )

    if not is_valid_task_set(tasks):
        raise InvalidRequest('Tasks must be an object of todo/in-progress/done lists')

    kv_store.set(tasks_key(project_id), tasks)
    return JsonResponse({'success': True, 'tasks': tasks})


@csrf_exempt
@require_POST
@token_required
def complete_task(request, task_id):
    """Avisa os outros membros que uma tarefa foi concluída"""
    user = request.api_user
    data = parse_json_body(request)
    project_id = data.get('projectId')

    if not project_id:
        raise InvalidRequest('Project ID is required')

    project = get_project(project_id)
    TeamPermissions.require_member(user.user_id, project)

    task_title = data.get('taskTitle', '')
    for member_id in project['members']:
        if member_id == user.user_id:
            continue
        notification_sink.create(
            member_id,
            TASK_COMPLETED,
            f'{user.display_name} completed task: "{task_title}"',
            project_id,
            taskId=task_id,
        )

    logger.info("✅ Tarefa %s concluída por %s no projeto %s", task_id, user.user_id, project_id)
    return JsonResponse({'success': True})
