"""
Shared fixtures for the relay test suite.

The OpenAI client used by the app is a real AsyncOpenAI instance whose
transport is an httpx.MockTransport, so the SDK's request building and error
mapping run exactly as in production without network access.
"""

import json
from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient
from openai import AsyncOpenAI

from main import create_app


def make_openai_client(handler: Callable[[httpx.Request], httpx.Response]) -> AsyncOpenAI:
    """Build an AsyncOpenAI client that answers every call with ``handler``."""
    return AsyncOpenAI(
        api_key="sk-test",
        base_url="https://api.openai.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class RecordingHandler:
    """MockTransport handler that records requests and replays a fixed response."""

    def __init__(self, status_code: int = 200, *, json_body=None, text: str = None) -> None:
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def app(monkeypatch):
    """Fresh app with no OpenAI key in the environment."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    return create_app()


@pytest.fixture
def client(app):
    # Not used as a context manager, so the lifespan does not replace app.state.openai_client.
    return TestClient(app)


@pytest.fixture
def use_openai(app):
    """Install a mock-backed OpenAI client on the app and return the handler."""

    def _install(handler: RecordingHandler) -> RecordingHandler:
        app.state.openai_client = make_openai_client(handler)
        return handler

    return _install
