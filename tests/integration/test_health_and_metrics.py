"""
Integration tests for the health check and Prometheus endpoints.
"""


class TestHealth:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'healthy', 'database': 'connected'}


class TestMetrics:

    def test_metrics_exposes_ledger_counters(self, owner_client, client_store1):
        owner_client.post('/sales', json={
            'value': 10,
            'dueDate': '2026-12-31',
            'clientId': client_store1.id,
        })

        response = owner_client.get('/metrics')

        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert 'ledger_sales_created_total{paid="false"}' in body
        assert 'http_requests_total' in body

    def test_unknown_route_is_json(self, client):
        response = client.get('/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['status'] == 'error'
