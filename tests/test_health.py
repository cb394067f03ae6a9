from unittest.mock import patch

from sqlalchemy.exc import OperationalError


class TestHealth:
    '''The unauthenticated liveness and readiness endpoints.'''

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["version"]

    def test_live(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"] == {"database": "ok"}

    def test_ready_when_database_fails(self, client):
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with patch("sqlalchemy.ext.asyncio.AsyncSession.execute", side_effect=error):
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
        assert response.json()["checks"] == {"database": "error"}

    def test_api_health_and_root(self, client):
        assert client.get("/api/health").json()["status"] == "ok"
        assert client.get("/").json() == {"hello": "world"}

    def test_process_time_header(self, client):
        response = client.get("/health")
        assert response.headers["x-process-time"].endswith("ms")


class TestErrorEnvelope:
    '''Errors share one JSON shape.'''

    def test_unknown_route(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found", "code": "NOT_FOUND"}

    def test_method_not_allowed(self, client):
        response = client.patch("/health")
        assert response.status_code == 405
        assert response.json()["code"] == "METHOD_NOT_ALLOWED"

    def test_unauthenticated(self, client):
        response = client.get("/api/issues")
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"
        assert response.json()["success"] is False
