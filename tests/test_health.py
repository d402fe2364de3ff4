from tasklist.core.config import settings


def test_health_z(client):
    """Test : l'endpoint health fonctionne"""
    response = client.get("/health/z")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_keep_alive_open_without_secret(client, monkeypatch, user):
    monkeypatch.setattr(settings, "CRON_SECRET", "")
    response = client.post("/health/keep-alive")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["stats"] == {"users": 1, "tasks": 0, "categories": 0}


def test_keep_alive_requires_cron_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
    assert client.get("/health/keep-alive").status_code == 401
    assert client.get("/health/keep-alive", headers={"Authorization": "Bearer wrong"}).status_code == 401

    response = client.get("/health/keep-alive", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 200
