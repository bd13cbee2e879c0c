"""Tests for the app factory: routing and correlation IDs."""

from fastapi.testclient import TestClient

from hotelmgmt.api.factory import create_app
from hotelmgmt.observability.correlation import CORRELATION_ID_HEADER


def _client() -> TestClient:
    return TestClient(create_app())


class TestRoutes:
    def test_health(self):
        response = _client().get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_docs_disabled(self):
        assert _client().get("/docs").status_code == 404

    def test_unknown_route(self):
        assert _client().get("/tasks/health").status_code == 404

    def test_protected_routes_mounted(self):
        client = _client()
        assert client.get("/reservations/mine").status_code == 401
        assert client.get("/hotels/1/rooms").status_code == 401
        assert client.get("/auth/whoami").status_code == 401


class TestCorrelationId:
    def test_generated_when_absent(self):
        response = _client().get("/health")
        assert response.headers[CORRELATION_ID_HEADER]

    def test_echoed_when_given(self):
        response = _client().get("/health", headers={CORRELATION_ID_HEADER: "req-42"})
        assert response.headers[CORRELATION_ID_HEADER] == "req-42"
