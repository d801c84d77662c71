# Overview: Pytest coverage for registration, login, logout and session checks.

"""
Authentication Tests

- Registration: validation, password strength, duplicate email
- Login: cookie + token issued, bad credentials rejected
- Sessions: Bearer header accepted, logout revokes, expiry enforced
- Protected routes answer 401 without a session
"""

from datetime import timedelta

import pytest

from tcoffice.extensions import db
from tcoffice.models import SessionToken
from tcoffice.services import session_service
from tcoffice.services.auth_service import (
    PasswordValidationError,
    authenticate,
    validate_password_strength,
)
from tcoffice.time_utils import utcnow


def login(client, email="owner@tc.local", password="Password123!"):
    return client.post('/login', json={'email': email, 'password': password})


class TestRegister:
    def test_register_creates_user(self, client):
        response = client.post('/register', json={
            'email': 'New.User@TC.local',
            'password': 'Password123!',
            'name': 'New User',
        })

        assert response.status_code == 201
        assert response.json['user']['email'] == 'new.user@tc.local'
        assert 'password_hash' not in response.json['user']

    def test_register_requires_email_and_password(self, client):
        response = client.post('/register', json={'email': 'x@tc.local'})
        assert response.status_code == 400

    def test_register_rejects_weak_password(self, client):
        response = client.post('/register', json={'email': 'weak@tc.local', 'password': 'password'})
        assert response.status_code == 400
        assert 'uppercase' in response.json['error']

    def test_register_rejects_bad_email(self, client):
        response = client.post('/register', json={'email': 'not-an-email', 'password': 'Password123!'})
        assert response.status_code == 400

    def test_register_duplicate_email_conflicts(self, client, user):
        response = client.post('/register', json={'email': 'OWNER@tc.local', 'password': 'Password123!'})
        assert response.status_code == 409

    @pytest.mark.parametrize('body', [['x'], 'owner@tc.local', 7])
    def test_register_rejects_non_object_body(self, client, body):
        response = client.post('/register', json=body)
        assert response.status_code == 400
        assert response.json['error'] == 'Invalid JSON payload'

    def test_register_rejects_non_string_email(self, client):
        response = client.post('/register', json={'email': 123, 'password': 'Password123!'})
        assert response.status_code == 400


class TestPasswordPolicy:
    @pytest.mark.parametrize('password', ['Sh0rt!', 'alllower123!', 'ALLUPPER123!', 'NoDigits!!', 'NoSpecial123'])
    def test_weak_passwords_rejected(self, password):
        with pytest.raises(PasswordValidationError):
            validate_password_strength(password)

    def test_strong_password_accepted(self):
        validate_password_strength('Password123!')


class TestLogin:
    def test_login_sets_cookie_and_returns_token(self, app, client, user):
        response = login(client)

        assert response.status_code == 200
        assert response.json['token']
        assert response.json['user']['email'] == 'owner@tc.local'

        cookie = response.headers.get('Set-Cookie')
        assert cookie.startswith(app.config['SESSION_COOKIE_NAME'] + '=')
        assert 'HttpOnly' in cookie
        assert 'SameSite=Lax' in cookie

    def test_login_wrong_password(self, client, user):
        response = login(client, password='WrongPass123!')
        assert response.status_code == 401
        assert response.json['error'] == 'Invalid email or password'

    def test_login_unknown_email(self, client, user):
        response = login(client, email='nobody@tc.local')
        assert response.status_code == 401

    def test_login_missing_fields(self, client):
        response = client.post('/login', json={'email': 'owner@tc.local'})
        assert response.status_code == 400

    def test_login_rejects_non_object_body(self, client, user):
        response = client.post('/login', json=['owner@tc.local', 'Password123!'])
        assert response.status_code == 400
        assert response.json['error'] == 'Invalid JSON payload'

    def test_inactive_user_cannot_authenticate(self, user):
        user.is_active = False
        db.session.commit()
        assert authenticate('owner@tc.local', 'Password123!') is None

    def test_only_token_hash_is_stored(self, client, user):
        token = login(client).json['token']
        stored = db.session.query(SessionToken).one()
        assert stored.token_hash == session_service.hash_token(token)
        assert stored.token_hash != token


class TestSessions:
    def test_me_with_cookie(self, auth_client):
        response = auth_client.get('/me')
        assert response.status_code == 200
        assert response.json['user']['email'] == 'owner@tc.local'

    def test_me_with_bearer_token(self, app, user):
        token = login(app.test_client()).json['token']

        response = app.test_client().get('/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 200

    @pytest.mark.parametrize('path', ['/me', '/attendance', '/newattendance', '/newattendance/6', '/stock'])
    def test_protected_routes_require_session(self, client, path):
        response = client.get(path)
        assert response.status_code == 401
        assert response.json['error'] == 'Authentication required'

    def test_unknown_token_rejected(self, client):
        response = client.get('/me', headers={'Authorization': 'Bearer not-a-real-token'})
        assert response.status_code == 401

    def test_logout_revokes_session(self, app, user):
        token = login(app.test_client()).json['token']
        headers = {'Authorization': f'Bearer {token}'}
        other = app.test_client()

        response = other.post('/logout', headers=headers)
        assert response.status_code == 200

        assert other.get('/me', headers=headers).status_code == 401
        stored = db.session.query(SessionToken).one()
        assert stored.is_revoked is True
        assert stored.revoked_reason == 'User logout'

    def test_logout_without_session(self, client):
        assert client.post('/logout').status_code == 401

    def test_expired_session_rejected(self, user):
        session, token = session_service.create_session(user_id=user.id)
        session.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()

        assert session_service.validate_session(token) is None

    def test_idle_session_rejected(self, user):
        session, token = session_service.create_session(user_id=user.id)
        session.last_used_at = utcnow() - session_service.SESSION_IDLE_TIMEOUT - timedelta(minutes=1)
        db.session.commit()

        assert session_service.validate_session(token) is None

    def test_valid_session_touches_last_used(self, user):
        session, token = session_service.create_session(user_id=user.id)
        session.last_used_at = utcnow() - timedelta(minutes=30)
        db.session.commit()
        before = session.last_used_at

        context = session_service.validate_session(token)

        assert context is not None
        assert context.user.id == user.id
        assert context.session.last_used_at > before

    def test_cleanup_removes_old_revoked_sessions(self, user):
        session, token = session_service.create_session(user_id=user.id)
        session_service.revoke_session(token)
        session.created_at = utcnow() - timedelta(days=45)
        db.session.commit()

        assert session_service.cleanup_expired_sessions(retention_days=30) == 1
        assert db.session.query(SessionToken).count() == 0
