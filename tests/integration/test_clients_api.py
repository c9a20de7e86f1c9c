"""
Integration tests for the /clients API.
"""

from decimal import Decimal


def _client_body(**overrides):
    body = {
        'name': 'Roberto Alves',
        'phone': '(11) 99876-5432',
        'birthDate': '1979-08-21',
        'observations': '  Pays on the 10th  ',
    }
    body.update(overrides)
    return body


class TestClientsApi:
    """CRUD over /clients"""

    def test_create_client(self, owner_client, store1):
        response = owner_client.post('/clients', json=_client_body())

        assert response.status_code == 201
        data = response.get_json()
        assert data['name'] == 'Roberto Alves'
        assert data['phone'] == '11998765432'
        assert data['birthDate'] == '1979-08-21'
        assert data['observations'] == 'Pays on the 10th'
        assert data['debitBalance'] == 0.0
        assert data['storeId'] == store1.id

    def test_create_validation(self, owner_client):
        response = owner_client.post('/clients', json={'name': 'Al', 'phone': '123'})

        assert response.status_code == 400
        errors = response.get_json()['errors']
        assert set(errors) == {'name', 'phone', 'birthDate'}

    def test_wrongly_typed_fields(self, owner_client):
        response = owner_client.post('/clients', json=_client_body(phone=11998765432, birthDate=19790821, name=['x']))

        assert response.status_code == 400
        assert set(response.get_json()['errors']) == {'name', 'phone', 'birthDate'}

    def test_search_is_literal(self, owner_client, client_store1):
        data = owner_client.get('/clients?search=%25').get_json()

        assert data['pagination']['total'] == 0

    def test_duplicate_name(self, owner_client, client_store1):
        response = owner_client.post('/clients', json=_client_body(name=client_store1.name))

        assert response.status_code == 400
        assert 'name' in response.get_json()['errors']

    def test_list_and_search(self, owner_client, client_store1, other_client_store1, client_store2):
        data = owner_client.get('/clients').get_json()

        assert [c['id'] for c in data['clients']] == [other_client_store1.id, client_store1.id]
        assert data['pagination']['total'] == 2

        found = owner_client.get('/clients?search=maria').get_json()
        assert [c['id'] for c in found['clients']] == [client_store1.id]

    def test_get_client(self, owner_client, client_store1, client_store2):
        assert owner_client.get(f'/clients/{client_store1.id}').status_code == 200
        assert owner_client.get(f'/clients/{client_store2.id}').status_code == 404

    def test_update_client(self, seller_client, client_store1):
        response = seller_client.patch(f'/clients/{client_store1.id}', json={'phone': '11 3333-4444'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['phone'] == '1133334444'
        assert data['name'] == client_store1.name

    def test_balance_not_writable(self, owner_client, client_store1, balance):
        response = owner_client.patch(f'/clients/{client_store1.id}', json={'debitBalance': 999})

        assert response.status_code == 400
        assert 'debitBalance' in response.get_json()['errors']
        assert balance(client_store1.id) == Decimal('0.00')

    def test_delete_requires_elevated_role(self, seller_client, owner_client, client_store1):
        assert seller_client.delete(f'/clients/{client_store1.id}').status_code == 403
        assert owner_client.delete(f'/clients/{client_store1.id}').status_code == 204
        assert owner_client.get(f'/clients/{client_store1.id}').status_code == 404

    def test_delete_client_with_sales(self, owner_client, client_store1):
        owner_client.post('/sales', json={
            'value': 10,
            'dueDate': '2026-12-31',
            'clientId': client_store1.id,
        })

        response = owner_client.delete(f'/clients/{client_store1.id}')

        assert response.status_code == 409
