"""Basic smoke tests for the service wiring."""
from fastapi.testclient import TestClient


def test_imports():
    import api_server
    from config.settings import settings

    assert settings.APP_CONFIG_PATH.endswith(".json")

    client = TestClient(api_server.app)
    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.post("/api/interview/turn", json={}).status_code == 400
