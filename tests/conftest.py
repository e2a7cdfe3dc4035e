"""Root pytest fixtures for zai-lib-python tests."""

from __future__ import annotations

import pytest

TEST_API_KEY = "0123456789abcdef0123456789abcdef.testsecret"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's ZAI_* settings out of the tests."""
    for name in (
        "ZAI_API_KEY",
        "ZAI_BASE_URL",
        "ZAI_REALTIME_URL",
        "ZAI_HTTP_TIMEOUT_SECS",
        "ZAI_HTTP_TRUST_ENV",
        "ZAI_PROXY_URL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key() -> str:
    return TEST_API_KEY


@pytest.fixture
def env_api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Provide the key through ZAI_API_KEY only."""
    monkeypatch.setenv("ZAI_API_KEY", TEST_API_KEY)
    return TEST_API_KEY
