"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

os.environ["ANTHROPIC_API_KEY"] = os.environ.get("ANTHROPIC_API_KEY") or "test-anthropic-key"
os.environ["AI_PROVIDER"] = "anthropic"

from app.config import Settings
from app.logging_config import configure_logging

configure_logging()

from app.main import app

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StubAIClient:
    """Provider stand-in returning canned text and recording the messages it saw."""

    def __init__(self, reply: str | Callable[[list[dict[str, Any]]], str]):
        self.reply = reply
        self.calls: list[list[dict[str, Any]]] = []

    def generate_text(self, messages: list[dict[str, Any]]) -> str:
        self.calls.append(messages)
        if callable(self.reply):
            return self.reply(messages)
        return self.reply


@pytest.fixture(scope="session")
def test_client() -> TestClient:
    """Provide a FastAPI test client."""

    return TestClient(app)


@pytest.fixture
def settings() -> Settings:
    return Settings(anthropic_api_key="test-anthropic-key", _env_file=None)


@pytest.fixture
def stub_client() -> type[StubAIClient]:
    return StubAIClient


@pytest.fixture
def raw_response() -> Callable[[str], str]:
    """Load a saved provider response from tests/fixtures."""

    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def override_dependency():
    """Override a FastAPI dependency for the duration of one test."""

    def _override(dependency, factory) -> None:
        app.dependency_overrides[dependency] = factory

    yield _override
    app.dependency_overrides.clear()
