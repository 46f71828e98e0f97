"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("GOOGLE_CLOUD_PROJECT", "test-project")
os.environ.setdefault("ENVIRONMENT", "test")

from media_review.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    monkeypatch.setenv("ENVIRONMENT", "test")


@pytest.fixture
def app():
    return create_app()


class StaticToken:
    """Token source that never talks to Google."""

    def __init__(self, value: str = "test-token") -> None:
        self.value = value
        self.calls = 0

    async def token(self) -> str:
        self.calls += 1
        return self.value


@pytest.fixture
def token_source() -> StaticToken:
    return StaticToken()
