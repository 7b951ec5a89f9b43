"""
Fixtures compartilhadas dos testes do Teamboard.
"""

import json
import secrets

import pytest
from django.core.cache import cache
from django.test import Client

from apps.core.kv_store import kv_store, project_key, tasks_key
from apps.core.models import AuthToken, User

# Duas tarefas fora de done (t1, t2) e uma concluída (t3)
OPEN_TASKS = {
    'todo': [{'id': 't1', 'title': 'Design'}],
    'in-progress': [{'id': 't2', 'title': 'Build'}],
    'done': [{'id': 't3', 'title': 'Plan'}],
}

FINISHED_TASKS = {
    'todo': [],
    'in-progress': [],
    'done': [{'id': 't3', 'title': 'Plan'}],
}


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make_user(name, password='secret123'):
        email = f'{name.lower()}@example.com'
        return User.objects.create_user(username=email, email=email, password=password, name=name)

    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user('Olivia')


@pytest.fixture
def alice(make_user):
    return make_user('Alice')


@pytest.fixture
def bob(make_user):
    return make_user('Bob')


@pytest.fixture
def make_project(db):
    """Grava o documento do projeto (e as tarefas, se houver) direto no store"""

    def _make_project(owner, members=(), tasks=None, project_id='p1', name='Apollo'):
        everyone = [owner] + [member for member in members if member != owner]
        project = {
            'id': project_id,
            'name': name,
            'ownerId': owner.user_id,
            'ownerEmail': owner.email,
            'ownerName': owner.display_name,
            'members': [user.user_id for user in everyone],
            'memberDetails': [user.as_member() for user in everyone],
            'createdAt': '2026-01-01T00:00:00+00:00',
        }
        kv_store.set(project_key(project_id), project)
        if tasks is not None:
            kv_store.set(tasks_key(project_id), tasks)
        return project

    return _make_project


class ApiClient:
    """Client do Django que autentica cada chamada como o usuário informado"""

    def __init__(self):
        self.client = Client()

    def _headers(self, user):
        if user is None:
            return {}
        token = AuthToken.objects.create(
            key=secrets.token_urlsafe(32),
            user=user,
            expires_at=AuthToken.expiry_from_now(1),
        )
        return {'HTTP_AUTHORIZATION': f'Bearer {token.key}'}

    def get(self, path, user=None):
        return self.client.get(path, **self._headers(user))

    def post(self, path, data=None, user=None):
        return self.client.post(
            path,
            data=json.dumps(data if data is not None else {}),
            content_type='application/json',
            **self._headers(user),
        )

    def delete(self, path, user=None):
        return self.client.delete(path, **self._headers(user))


@pytest.fixture
def api(db):
    return ApiClient()
