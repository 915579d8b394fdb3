from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


def _completion(content):
    """Shape of an OpenAI chat completion with a single choice."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture(autouse=True)
def _safe_test_config(monkeypatch):
    """Force deterministic, offline-safe config for tests.

    The package loads .env on import; these overrides keep a dummy key
    configured and render timestamps in UTC.
    """
    from callflow.config import Config

    monkeypatch.setattr(Config, "OPENAI_API_KEY", "test", raising=False)
    monkeypatch.setattr(Config, "OPENAI_MODEL", "gpt-4o-mini", raising=False)
    monkeypatch.setattr(Config, "OPENAI_TEMPERATURE", 0.25, raising=False)
    monkeypatch.setattr(Config, "OPENAI_MAX_TOKENS", 600, raising=False)
    monkeypatch.setattr(Config, "DISPLAY_TIMEZONE", "UTC", raising=False)
    monkeypatch.setattr(Config, "DEBUG", False, raising=False)

    return Config


@pytest.fixture
def fake_openai(monkeypatch):
    """Replace the OpenAI client with a mock that records every completion call."""
    from callflow import llm_agent

    client = MagicMock()
    client.chat.completions.create.return_value = _completion("Call Jordan first; the SLA renewal is at risk.")
    monkeypatch.setattr(llm_agent, "get_client", lambda: client)
    return client


@pytest.fixture
def make_completion():
    return _completion
