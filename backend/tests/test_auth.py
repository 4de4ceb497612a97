"""
Identity tests.

Verifies:
- Signup rejects duplicate loginid/email without creating a second user
- Login tokens are accepted by /auth/me
- The auth gate answers 401/403/404 for missing, bad and orphaned tokens
- Admin-only routes reject plain users
"""

from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from stockroom.extensions import db
from stockroom.models import User
from tests.conftest import signup, get_auth_token, auth_headers


def _user_count(app) -> int:
    with app.app_context():
        return db.session.query(User).count()


# =============================================================================
# SIGNUP
# =============================================================================


class TestSignup:

    def test_signup_returns_token_and_public_user(self, client):
        resp = signup(client, 'alice')
        assert resp.status_code == 201

        data = resp.get_json()
        assert data['message'] == 'User registered successfully'
        assert data['token']
        assert data['user']['loginid'] == 'alice'
        assert data['user']['email'] == 'alice@stockroom.test'
        assert data['user']['role'] == 'user'
        assert 'password' not in data['user']
        assert 'password_hash' not in data['user']

    def test_password_is_stored_hashed(self, app, client):
        signup(client, 'alice', password='plain-text-pw')
        with app.app_context():
            user = db.session.query(User).filter_by(loginid='alice').one()
            assert user.password_hash != 'plain-text-pw'
            assert user.password_hash.startswith('$2')

    def test_duplicate_email_rejected(self, app, client):
        assert signup(client, 'alice', email='shared@stockroom.test').status_code == 201

        resp = signup(client, 'bob', email='shared@stockroom.test')
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'User already exists'
        assert _user_count(app) == 1

    def test_duplicate_loginid_rejected(self, app, client):
        assert signup(client, 'alice').status_code == 201

        resp = signup(client, 'alice', email='other@stockroom.test')
        assert resp.status_code == 400
        assert _user_count(app) == 1

    @pytest.mark.parametrize("missing", ["loginid", "email", "password"])
    def test_missing_field_rejected(self, client, missing):
        body = {'loginid': 'alice', 'email': 'alice@stockroom.test', 'password': 'pw'}
        body.pop(missing)
        resp = client.post('/auth/signup', json=body)
        assert resp.status_code == 400


# =============================================================================
# LOGIN + /auth/me
# =============================================================================


class TestLogin:

    def test_login_token_resolves_to_same_user(self, client):
        signup(client, 'alice')

        token = get_auth_token(client, 'alice')
        assert token

        resp = client.get('/auth/me', headers=auth_headers(token))
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['loginid'] == 'alice'
        assert data['role'] == 'user'
        assert data['createdAt'].endswith('Z')

    def test_wrong_password_is_401(self, client):
        signup(client, 'alice')
        resp = client.post('/auth/login', json={'loginid': 'alice', 'password': 'wrong'})
        assert resp.status_code == 401
        assert resp.get_json()['error'] == 'Invalid credentials'

    def test_unknown_loginid_is_401(self, client):
        resp = client.post('/auth/login', json={'loginid': 'ghost', 'password': 'whatever'})
        assert resp.status_code == 401

    def test_missing_credentials_is_400(self, client):
        resp = client.post('/auth/login', json={'loginid': 'alice'})
        assert resp.status_code == 400


# =============================================================================
# AUTH GATE
# =============================================================================


class TestAuthGate:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/auth/me"),
            ("POST", "/product"),
            ("GET", "/products"),
            ("PUT", "/products/1"),
            ("DELETE", "/products/1"),
            ("POST", "/products/1/transfer"),
            ("POST", "/warehouse"),
            ("GET", "/warehouses"),
            ("POST", "/orders/receipt"),
            ("GET", "/orders/receipt"),
            ("GET", "/orders/delivery"),
            ("PUT", "/delivery/1"),
            ("GET", "/transfers"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_malformed_token_is_403(self, client):
        resp = client.get('/auth/me', headers=auth_headers('not-a-jwt'))
        assert resp.status_code == 403
        assert resp.get_json()['error'] == 'Invalid or expired token'

    def test_non_bearer_scheme_is_401(self, client):
        resp = client.get('/auth/me', headers={'Authorization': 'Basic abc'})
        assert resp.status_code == 401

    def test_expired_token_is_403(self, app, client):
        signup(client, 'alice')
        with app.app_context():
            user = db.session.query(User).filter_by(loginid='alice').one()
            token = create_access_token(identity=str(user.id), expires_delta=timedelta(seconds=-5))

        resp = client.get('/auth/me', headers=auth_headers(token))
        assert resp.status_code == 403

    def test_token_signed_with_other_key_is_403(self, app, client):
        signup(client, 'alice')
        with app.app_context():
            app.config['JWT_SECRET_KEY'] = 'a-completely-different-signing-key-000'
            forged = create_access_token(identity='1')
            app.config['JWT_SECRET_KEY'] = 'test-jwt-secret-that-is-long-enough-for-hs256'

        resp = client.get('/auth/me', headers=auth_headers(forged))
        assert resp.status_code == 403

    def test_token_of_deleted_user_is_404(self, app, client):
        token = signup(client, 'alice').get_json()['token']
        with app.app_context():
            db.session.query(User).filter_by(loginid='alice').delete()
            db.session.commit()

        resp = client.get('/auth/me', headers=auth_headers(token))
        assert resp.status_code == 404
        assert resp.get_json()['error'] == 'User not found'


# =============================================================================
# ADMIN-ONLY ROUTES
# =============================================================================


class TestAdminAccess:

    def test_plain_user_cannot_list_users(self, client, user_headers):
        resp = client.get('/auth/users', headers=user_headers)
        assert resp.status_code == 403
        assert resp.get_json()['error'] == 'Access denied. Admins only.'

    def test_admin_can_list_users(self, client, admin_headers):
        signup(client, 'alice')

        resp = client.get('/auth/users', headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['count'] == 2
        assert [u['loginid'] for u in data['users']] == ['alice', 'root']
