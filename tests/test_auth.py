"""
Cadastro, login, tokens, perfil e preferências.
"""

import pytest

from apps.core.exceptions import Unauthorized
from apps.core.kv_store import kv_store, project_key, tasks_key
from apps.core.models import AuthToken, User
from apps.core.auth_service import auth_service

pytestmark = pytest.mark.django_db


def register(api, **overrides):
    data = {'email': 'Carol@Example.com', 'password': 'secret123', 'name': 'Carol'}
    data.update(overrides)
    return api.post('/api/auth/register', data)


def login(api, email='carol@example.com', password='secret123'):
    return api.post('/api/auth/login', {'email': email, 'password': password})


class TestRegister:

    def test_creates_user_with_normalised_email(self, api):
        response = register(api)

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['user']['email'] == 'carol@example.com'
        assert body['user']['name'] == 'Carol'
        assert User.objects.get(email='carol@example.com').check_password('secret123')

    def test_duplicate_email(self, api):
        register(api)

        response = register(api, email='carol@example.com')

        assert response.status_code == 409
        assert response.json() == {'error': 'Email already registered'}

    @pytest.mark.parametrize('overrides, error', [
        ({'name': ''}, 'Email, password, and name are required'),
        ({'password': None}, 'Email, password, and name are required'),
        ({'email': 'not-an-email'}, 'Invalid email format'),
        ({'password': '123'}, 'Password must be at least 6 characters long'),
    ])
    def test_validation(self, api, overrides, error):
        response = register(api, **overrides)

        assert response.status_code == 400
        assert response.json() == {'error': error}
        assert not User.objects.exists()

    def test_malformed_json(self, api):
        response = api.client.post('/api/auth/register', data='{oops', content_type='application/json')

        assert response.status_code == 400
        assert response.json() == {'error': 'Malformed JSON body'}


class TestLogin:

    def test_issues_token_accepted_by_verify(self, api):
        register(api)

        response = login(api)

        assert response.status_code == 200
        session = response.json()['session']
        assert session['access_token']
        assert session['expires_at']

        response = api.client.post(
            '/api/auth/verify', HTTP_AUTHORIZATION=f"Bearer {session['access_token']}"
        )
        assert response.status_code == 200
        assert response.json()['user']['email'] == 'carol@example.com'
        assert response['X-User-Id'] == response.json()['user']['id']

    def test_wrong_password(self, api):
        register(api)

        response = login(api, password='wrong-password')

        assert response.status_code == 401
        assert response.json() == {'error': 'Invalid email or password'}

    def test_missing_credentials(self, api):
        response = api.post('/api/auth/login', {'email': 'carol@example.com'})

        assert response.status_code == 400

    def test_locks_account_after_repeated_failures(self, api):
        register(api)
        for _ in range(5):
            login(api, password='wrong-password')

        response = login(api)

        assert response.status_code == 401
        assert response.json() == {'error': 'Too many failed attempts. Try again later.'}

    def test_success_resets_failure_count(self, api):
        register(api)
        for _ in range(4):
            login(api, password='wrong-password')
        login(api)
        for _ in range(4):
            login(api, password='wrong-password')

        assert login(api).status_code == 200


class TestTokens:

    def test_logout_revokes_token(self, api, owner):
        _, token = auth_service.login(owner.email, 'secret123')
        headers = {'HTTP_AUTHORIZATION': f'Bearer {token.key}'}

        assert api.client.post('/api/auth/logout', **headers).status_code == 200
        assert api.client.post('/api/auth/verify', **headers).status_code == 401

    def test_expired_token_is_refused_and_removed(self, owner):
        token = AuthToken.objects.create(
            key='expired', user=owner, expires_at=AuthToken.expiry_from_now(-1)
        )

        with pytest.raises(Unauthorized):
            auth_service.verify_token(token.key)
        assert not AuthToken.objects.filter(key='expired').exists()

    def test_inactive_user_is_refused(self, owner):
        _, token = auth_service.login(owner.email, 'secret123')
        owner.is_active = False
        owner.save()

        with pytest.raises(Unauthorized):
            auth_service.verify_token(token.key)


class TestUpdateProfile:

    def test_rename_reaches_projects_and_tasks(self, api, make_project, owner, alice):
        tasks = {
            'todo': [{'id': 't1', 'assignedTo': owner.user_id, 'assignedToName': 'Olivia'}],
            'in-progress': [{'id': 't2', 'assignedTo': alice.user_id, 'assignedToName': 'Alice'}],
            'done': [],
        }
        make_project(owner, members=[alice], tasks=tasks)

        response = api.post('/api/auth/update-profile', {'name': 'Olivia Lima'}, user=owner)

        assert response.status_code == 200
        assert response.json()['user'] == {
            'id': owner.user_id, 'email': owner.email, 'name': 'Olivia Lima',
        }
        project = kv_store.get(project_key('p1'))
        assert project['ownerName'] == 'Olivia Lima'
        assert [m['name'] for m in project['memberDetails']] == ['Olivia Lima', 'Alice']

        stored = kv_store.get(tasks_key('p1'))
        assert stored['todo'][0]['assignedToName'] == 'Olivia Lima'
        assert stored['in-progress'][0]['assignedToName'] == 'Alice'

    def test_other_users_projects_are_untouched(self, api, make_project, owner, alice):
        make_project(alice, project_id='p2', name='Gemini')

        api.post('/api/auth/update-profile', {'name': 'Olivia Lima'}, user=owner)

        assert kv_store.get(project_key('p2'))['ownerName'] == 'Alice'

    def test_email_change_is_used_for_login(self, api, make_project, owner):
        make_project(owner)

        response = api.post('/api/auth/update-profile', {'email': 'Olivia@New.com'}, user=owner)

        assert response.json()['user']['email'] == 'olivia@new.com'
        assert User.objects.get(pk=owner.pk).username == 'olivia@new.com'
        assert kv_store.get(project_key('p1'))['ownerEmail'] == 'olivia@new.com'
        assert login(api, 'olivia@new.com').status_code == 200

    def test_empty_fields_keep_current_values(self, api, owner):
        response = api.post('/api/auth/update-profile', {'name': '  ', 'email': ''}, user=owner)

        assert response.status_code == 200
        assert response.json()['user']['name'] == 'Olivia'
        assert response.json()['user']['email'] == 'olivia@example.com'

    def test_email_taken_by_someone_else(self, api, owner, alice):
        response = api.post('/api/auth/update-profile', {'email': alice.email}, user=owner)

        assert response.status_code == 409
        assert response.json() == {'error': 'Email already registered'}
        assert User.objects.get(pk=owner.pk).email == 'olivia@example.com'

    def test_invalid_email(self, api, owner):
        response = api.post('/api/auth/update-profile', {'email': 'not-an-email'}, user=owner)

        assert response.status_code == 400
        assert response.json() == {'error': 'Invalid email format'}

    def test_requires_token(self, api):
        assert api.post('/api/auth/update-profile', {'name': 'X'}).status_code == 401


class TestChangePassword:

    def change(self, api, user, current='secret123', new='newsecret'):
        return api.post(
            '/api/auth/change-password',
            {'currentPassword': current, 'newPassword': new},
            user=user,
        )

    def test_new_password_replaces_old(self, api, owner):
        response = self.change(api, owner)

        assert response.status_code == 200
        assert response.json() == {'success': True, 'message': 'Password changed successfully'}
        assert login(api, owner.email, 'newsecret').status_code == 200
        assert login(api, owner.email, 'secret123').status_code == 401

    def test_current_password_must_match(self, api, owner):
        response = self.change(api, owner, current='wrong-password')

        assert response.status_code == 400
        assert response.json() == {'error': 'Current password is incorrect'}
        assert User.objects.get(pk=owner.pk).check_password('secret123')

    def test_new_password_length(self, api, owner):
        response = self.change(api, owner, new='short')

        assert response.status_code == 400
        assert response.json() == {'error': 'New password must be at least 6 characters long'}

    def test_both_fields_required(self, api, owner):
        response = api.post('/api/auth/change-password', {'newPassword': 'newsecret'}, user=owner)

        assert response.status_code == 400
        assert response.json() == {'error': 'Current password and new password are required'}


class TestUserSettings:

    def test_defaults(self, api, owner):
        response = api.get('/api/user/settings', user=owner)

        assert response.status_code == 200
        assert response.json() == {'success': True, 'settings': {'darkMode': False}}

    def test_saved_settings_are_returned(self, api, owner, alice):
        response = api.post('/api/user/settings', {'darkMode': True}, user=owner)
        assert response.json()['settings']['darkMode'] is True
        assert response.json()['settings']['updatedAt']

        assert api.get('/api/user/settings', user=owner).json()['settings']['darkMode'] is True
        assert api.get('/api/user/settings', user=alice).json()['settings'] == {'darkMode': False}

    def test_dark_mode_must_be_boolean(self, api, owner):
        response = api.post('/api/user/settings', {'darkMode': 'yes'}, user=owner)

        assert response.status_code == 400
        assert response.json() == {'error': 'darkMode must be true or false'}


def test_health_check(client):
    response = client.get('/api/health')

    assert response.status_code == 200
    assert response.json()['status'] == 'ok'
