"""Integration tests for GET /health."""

from fastapi.testclient import TestClient

from app import create_app
from config import AppSettings


def _get_health(settings: AppSettings):
    with TestClient(create_app(settings)) as client:
        return client.get("/health")


class TestHealthEndpoint:
    def test_degraded_when_nothing_configured(self):
        resp = _get_health(AppSettings())
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"] == {
            "bypass": "disabled",
            "private_access_token": "not_configured",
            "recaptcha": "not_configured",
            "contact_webhook": "not_configured",
        }

    def test_healthy_with_recaptcha(self, monkeypatch):
        monkeypatch.setenv("RECAPTCHA_SECRET_KEY", "secret")
        resp = _get_health(AppSettings())
        assert resp.json()["status"] == "healthy"
        assert resp.json()["checks"]["recaptcha"] == "ok"

    def test_healthy_with_pat(self, monkeypatch):
        monkeypatch.setenv("PAT_ISSUER_ID", "issuer")
        monkeypatch.setenv("PAT_KEY_ID", "key")
        resp = _get_health(AppSettings())
        assert resp.json()["status"] == "healthy"
        assert resp.json()["checks"]["private_access_token"] == "ok"

    def test_bypass_reported(self, monkeypatch):
        monkeypatch.setenv("HUMAN_VERIFICATION_BYPASS", "1")
        resp = _get_health(AppSettings())
        assert resp.json()["status"] == "healthy"
        assert resp.json()["checks"]["bypass"] == "enabled"
