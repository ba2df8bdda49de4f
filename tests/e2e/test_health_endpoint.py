"""End-to-end tests for health endpoint."""


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_endpoint_returns_200(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200

    def test_health_endpoint_response_format(self, test_client):
        response = test_client.get("/health")

        assert response.json() == {"status": "ok", "environment": "local"}

    def test_correlation_id_echoed(self, test_client):
        response = test_client.get("/health", headers={"X-Correlation-ID": "corr-1"})

        assert response.headers["X-Correlation-ID"] == "corr-1"

    def test_correlation_id_generated(self, test_client):
        response = test_client.get("/health")

        assert response.headers["X-Correlation-ID"]
