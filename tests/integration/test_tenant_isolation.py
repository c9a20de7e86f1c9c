"""
Critical integration tests for tenant isolation.
These tests ensure that ledger data never leaks between stores.
"""

from decimal import Decimal


def _create_sale(http, ledger_client, value=100):
    response = http.post('/sales', json={
        'value': value,
        'description': 'Isolated sale',
        'dueDate': '2026-12-31',
        'clientId': ledger_client.id,
    })
    assert response.status_code == 201
    return response.get_json()


class TestSaleIsolation:
    """Sales of one store are invisible to another."""

    def test_lists_are_scoped(self, owner_client, owner2_client, client_store1, client_store2):
        sale1 = _create_sale(owner_client, client_store1)
        sale2 = _create_sale(owner2_client, client_store2, value=50)

        store1_sales = owner_client.get('/sales').get_json()['sales']
        store2_sales = owner2_client.get('/sales').get_json()['sales']

        assert [s['id'] for s in store1_sales] == [sale1['id']]
        assert [s['id'] for s in store2_sales] == [sale2['id']]

    def test_cross_tenant_access_is_not_found(self, owner_client, owner2_client, client_store1, balance):
        sale = _create_sale(owner_client, client_store1)

        assert owner2_client.get(f"/sales/{sale['id']}").status_code == 404
        assert owner2_client.patch(f"/sales/{sale['id']}", json={'value': 1}).status_code == 404
        assert owner2_client.delete(f"/sales/{sale['id']}").status_code == 404
        assert owner2_client.get(f"/sales/{sale['id']}/payments").status_code == 404
        assert owner2_client.post(f"/sales/{sale['id']}/payments", json={'value': 10}).status_code == 404

        assert balance(client_store1.id) == Decimal('100.00')
        assert owner_client.get(f"/sales/{sale['id']}").status_code == 200

    def test_cannot_sell_to_foreign_client(self, owner2_client, client_store1, balance):
        response = owner2_client.post('/sales', json={
            'value': 75,
            'dueDate': '2026-12-31',
            'clientId': client_store1.id,
        })

        assert response.status_code == 404
        assert balance(client_store1.id) == Decimal('0.00')

    def test_cannot_move_sale_to_foreign_client(self, owner_client, client_store1, client_store2, balance):
        sale = _create_sale(owner_client, client_store1)

        response = owner_client.patch(f"/sales/{sale['id']}", json={'clientId': client_store2.id})

        assert response.status_code == 404
        assert balance(client_store1.id) == Decimal('100.00')
        assert balance(client_store2.id) == Decimal('0.00')


class TestClientIsolation:
    """Clients of one store are invisible to another."""

    def test_client_lists_are_scoped(self, owner_client, owner2_client, client_store1, client_store2):
        store1_clients = owner_client.get('/clients').get_json()['clients']
        store2_clients = owner2_client.get('/clients').get_json()['clients']

        assert [c['id'] for c in store1_clients] == [client_store1.id]
        assert [c['id'] for c in store2_clients] == [client_store2.id]

    def test_cross_tenant_client_access(self, owner2_client, client_store1):
        assert owner2_client.get(f'/clients/{client_store1.id}').status_code == 404
        assert owner2_client.patch(f'/clients/{client_store1.id}', json={'name': 'Hijacked'}).status_code == 404
        assert owner2_client.delete(f'/clients/{client_store1.id}').status_code == 404
