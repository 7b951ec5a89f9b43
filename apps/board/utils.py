# apps/board/utils.py

from typing import Dict, List

TODO = 'todo'
IN_PROGRESS = 'in-progress'
DONE = 'done'

BUCKETS = (TODO, IN_PROGRESS, DONE)


def empty_task_set() -> Dict[str, List]:
    """Tarefas de um projeto que ainda não tem nenhuma"""
    return {bucket: [] for bucket in BUCKETS}


def all_tasks(task_set) -> List[Dict]:
    """
    Junta todas as colunas em uma lista

    Registros antigos guardavam uma lista simples de tarefas em vez das
    colunas; esses são retornados como estão.
    """
    if not task_set:
        return []
    if isinstance(task_set, list):
        return list(task_set)
    tasks = []
    for bucket in BUCKETS:
        tasks.extend(task_set.get(bucket) or [])
    return tasks


def count_incomplete(task_set) -> int:
    """
    Quantidade de tarefas cujo id não está na coluna done

    A comparação é só pelo id: uma tarefa que aparece em outra coluna
    e também em done conta como concluída.
    """
    done = [] if isinstance(task_set, list) or not task_set else (task_set.get(DONE) or [])
    done_ids = {task.get('id') for task in done}
    return sum(1 for task in all_tasks(task_set) if task.get('id') not in done_ids)


def clear_assignee(task_set, member_id):
    """Cópia de task_set sem member_id em assignedTo"""
    return _map_tasks(task_set, member_id, {'assignedTo': None})


def rename_assignee(task_set, member_id, name):
    """Cópia de task_set com assignedToName atualizado nas tarefas de member_id"""
    return _map_tasks(task_set, member_id, {'assignedToName': name})


def is_valid_task_set(tasks) -> bool:
    """As tarefas devem ser um objeto JSON cujas colunas são listas de objetos"""
    if not isinstance(tasks, dict):
        return False
    for bucket in BUCKETS:
        value = tasks.get(bucket, [])
        if not isinstance(value, list):
            return False
        if not all(isinstance(task, dict) for task in value):
            return False
    return True


def _map_tasks(task_set, member_id, changes):
    """Aplica changes às tarefas atribuídas a member_id, sem alterar o original"""

    def _apply(task):
        if task.get('assignedTo') == member_id:
            return {**task, **changes}
        return task

    if not task_set:
        return task_set
    if isinstance(task_set, list):
        return [_apply(task) for task in task_set]
    return {
        bucket: [_apply(task) for task in tasks] if isinstance(tasks, list) else tasks
        for bucket, tasks in task_set.items()
    }
