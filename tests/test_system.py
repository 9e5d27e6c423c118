"""Tests for GET /health."""

from app.config import settings


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "model": settings.inference_model}
