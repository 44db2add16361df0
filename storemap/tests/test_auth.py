"""
Integration tests for the Authentication API endpoints.

Tests all authentication routes:
- POST /api/auth/login - Login with username/password
- POST /api/auth/logout - Logout
- GET /api/auth/me - Current user info

Also covers bearer-token validation and the admin role check.
"""

from storemap.models import UserSession
from storemap.tests.conftest import create_test_session, get_auth_headers


# =============================================================================
# Login API Tests (POST /api/auth/login)
# =============================================================================

class TestLoginAPI:
    """Tests for POST /api/auth/login endpoint."""

    def test_login_success(self, client, app, sample_admin):
        """POST /auth/login should return a token for valid credentials."""
        response = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'TestPassword123!'
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['token']
        assert data['expires_at']
        assert data['user']['username'] == 'admin'
        assert data['user']['role'] == 'admin'
        assert 'password_hash' not in data['user']

        assert UserSession.query.filter_by(token=data['token']).first() is not None

    def test_login_token_works(self, client, app, sample_admin):
        """The returned token should authenticate later requests."""
        token = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'TestPassword123!'
        }).get_json()['token']

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200
        assert response.get_json()['user']['username'] == 'admin'

    def test_login_wrong_password(self, client, app, sample_admin):
        """POST /auth/login should reject a wrong password with 401."""
        response = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'wrong'
        })

        assert response.status_code == 401
        assert response.get_json()['code'] == 'invalid_credentials'

    def test_login_unknown_user(self, client, app):
        """POST /auth/login should reject an unknown username with 401."""
        response = client.post('/api/auth/login', json={
            'username': 'ghost',
            'password': 'whatever'
        })

        assert response.status_code == 401

    def test_login_missing_username(self, client, app):
        """POST /auth/login without username should return 400."""
        response = client.post('/api/auth/login', json={'password': 'x'})

        assert response.status_code == 400
        assert 'username' in response.get_json()['error']

    def test_login_missing_body(self, client, app):
        """POST /auth/login without a body should return 400."""
        response = client.post('/api/auth/login')

        assert response.status_code == 400


# =============================================================================
# Session Validation Tests
# =============================================================================

class TestSessionValidation:
    """Tests for bearer-token resolution."""

    def test_me_without_token(self, client, app):
        """GET /auth/me without a header should return missing_token."""
        response = client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.get_json()['code'] == 'missing_token'

    def test_me_with_unknown_token(self, client, app):
        """GET /auth/me with an unknown token should return invalid_session."""
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})

        assert response.status_code == 401
        assert response.get_json()['code'] == 'invalid_session'

    def test_malformed_header(self, client, app, admin_session):
        """A header without the Bearer scheme should be rejected."""
        response = client.get('/api/auth/me', headers={'Authorization': admin_session.token})

        assert response.status_code == 401

    def test_expired_session_rejected_and_deleted(self, client, app, db_session, sample_admin):
        """An expired session should be rejected and removed."""
        session = create_test_session(db_session, sample_admin.id, hours=-1)
        token = session.token

        response = client.get('/api/auth/me', headers=get_auth_headers(session))

        assert response.status_code == 401
        assert UserSession.query.filter_by(token=token).first() is None

    def test_activity_updated(self, client, app, db_session, admin_session):
        """Using a session should refresh its last_active timestamp."""
        before = admin_session.last_active

        client.get('/api/auth/me', headers=get_auth_headers(admin_session))

        db_session.refresh(admin_session)
        assert admin_session.last_active >= before


# =============================================================================
# Logout API Tests (POST /api/auth/logout)
# =============================================================================

class TestLogoutAPI:
    """Tests for POST /api/auth/logout endpoint."""

    def test_logout_revokes_token(self, client, app, admin_headers):
        """POST /auth/logout should delete the session so the token stops working."""
        response = client.post('/api/auth/logout', headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['message'] == 'Logged out successfully'
        assert client.get('/api/auth/me', headers=admin_headers).status_code == 401

    def test_logout_requires_token(self, client, app):
        """POST /auth/logout without a token should return 401."""
        assert client.post('/api/auth/logout').status_code == 401


# =============================================================================
# Role Tests
# =============================================================================

class TestAdminRole:
    """Tests for the admin role requirement."""

    def test_non_admin_forbidden(self, client, app, user_headers):
        """A non-admin user should get 403 from admin endpoints."""
        response = client.post('/api/admin/stores', json={'name': 'X'}, headers=user_headers)

        assert response.status_code == 403
        assert response.get_json()['code'] == 'forbidden'

    def test_anonymous_unauthorized(self, client, app):
        """Admin endpoints without a token should return 401."""
        response = client.post('/api/admin/stores', json={'name': 'X'})

        assert response.status_code == 401

    def test_non_admin_can_read_me(self, client, app, user_headers):
        """A non-admin user should still authenticate for /auth/me."""
        response = client.get('/api/auth/me', headers=user_headers)

        assert response.status_code == 200
        assert response.get_json()['user']['role'] == 'user'
