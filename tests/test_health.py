"""
Tests for the public health endpoint.
"""

from fastapi.testclient import TestClient

from invoice_dashboard.main import app

client = TestClient(app)


def test_health_is_public():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "invoice-dashboard"}
