"""Pytest fixtures and helpers."""

import httpx
import pytest

from ollama_client.client import Client


@pytest.fixture(autouse=True)
def env_cleanup(monkeypatch):
    """Keep the developer's OLLAMA_* settings out of tests."""
    for name in (
        "OLLAMA_HOST",
        "OLLAMA_BASE_URL",
        "OLLAMA_TIMEOUT",
        "OLLAMA_STRICT_STREAM_END",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def make_client():
    """Client whose transport is an httpx.MockTransport around `handler`."""

    def _make(handler, **kwargs) -> Client:
        return Client(base_url="http://test", transport=httpx.MockTransport(handler), **kwargs)

    return _make
