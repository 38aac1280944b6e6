"""Startup behaviour of the relay app when run through its lifespan."""

from fastapi.testclient import TestClient

import main


class TestLifespan:
    def test_missing_key_leaves_client_unset(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        app = main.create_app()
        with TestClient(app) as client:
            assert app.state.openai_client is None
            resp = client.post("/session", json={})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Missing OPENAI_API_KEY in env."}

    def test_key_builds_client_without_retries(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        app = main.create_app()
        with TestClient(app):
            assert app.state.openai_client is not None
            assert app.state.openai_client.max_retries == 0

    def test_logging_configured_from_debug_flag(self, monkeypatch):
        calls = []
        monkeypatch.setattr(main, "configure_logging", calls.append)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.setenv("DEBUG", "1")
        with TestClient(main.create_app()):
            pass
        assert calls == [True]
