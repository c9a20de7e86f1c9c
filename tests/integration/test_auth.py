"""
Integration tests for session authentication and store selection.
"""

import pytest

from crediario.models import AuditAction, AuditLog, StoreMember


class TestLogin:
    """POST /auth/login"""

    def test_login_selects_only_store(self, client, owner1, store1, session):
        response = client.post('/auth/login', json={'email': owner1.email, 'password': 'password123'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['id'] == owner1.id
        assert data['store']['id'] == store1.id
        assert data['role'] == 'OWNER'

        assert client.get('/sales').status_code == 200
        assert session.query(AuditLog).filter_by(
            user_id=owner1.id, action=AuditAction.USER_LOGIN
        ).count() == 1

    def test_email_is_case_insensitive(self, client, owner1):
        response = client.post('/auth/login', json={'email': owner1.email.upper(), 'password': 'password123'})

        assert response.status_code == 200

    @pytest.mark.parametrize('password', ['wrong', ''])
    def test_bad_credentials(self, client, owner1, password):
        response = client.post('/auth/login', json={'email': owner1.email, 'password': password})

        assert response.status_code in (400, 401)
        assert client.get('/auth/me').status_code == 401

    def test_unknown_user(self, client):
        response = client.post('/auth/login', json={'email': 'nobody@test.com', 'password': 'password123'})

        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid email or password'

    def test_multi_store_user_must_choose(self, client, session, owner1, store1, store2):
        session.add(StoreMember(user_id=owner1.id, store_id=store2.id, role='SELLER'))
        session.commit()

        response = client.post('/auth/login', json={'email': owner1.email, 'password': 'password123'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['store'] is None
        assert {s['id'] for s in data['stores']} == {store1.id, store2.id}
        assert client.get('/sales').status_code == 403

        selected = client.post('/auth/select-store', json={'storeId': store2.id})
        assert selected.status_code == 200
        assert selected.get_json()['role'] == 'SELLER'
        assert client.get('/sales').status_code == 200

    def test_login_to_foreign_store(self, client, owner1, store2):
        response = client.post('/auth/login', json={
            'email': owner1.email,
            'password': 'password123',
            'storeId': store2.id,
        })

        assert response.status_code == 403


class TestSession:
    """GET /auth/me, POST /auth/logout, POST /auth/select-store"""

    def test_me(self, seller_client, seller1, store1):
        data = seller_client.get('/auth/me').get_json()

        assert data['user']['email'] == seller1.email
        assert data['store']['id'] == store1.id
        assert data['role'] == 'SELLER'

    def test_logout(self, owner_client):
        assert owner_client.post('/auth/logout').status_code == 204
        assert owner_client.get('/auth/me').status_code == 401
        assert owner_client.get('/sales').status_code == 401

    def test_select_foreign_store(self, owner_client, store2):
        response = owner_client.post('/auth/select-store', json={'storeId': store2.id})

        assert response.status_code == 403

    def test_revoked_membership_drops_store(self, owner_client, session, owner1, store1):
        member = session.query(StoreMember).filter_by(user_id=owner1.id, store_id=store1.id).one()
        member.active = False
        session.commit()

        assert owner_client.get('/sales').status_code == 403

    def test_csrf_token_endpoint(self, client):
        data = client.get('/auth/csrf-token').get_json()

        assert data['csrfToken']
