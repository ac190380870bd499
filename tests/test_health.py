from fastapi.testclient import TestClient

from sweetshop.main import app


def test_health_endpoint():
    """Health check does not touch the database."""
    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
