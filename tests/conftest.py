"""Pytest configuration and fixtures."""

import json
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path for direct import
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from locator_healer.config import reset_settings
from locator_healer.healing.model_client import ModelClient
from locator_healer.reporting import get_event_registry


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep LOCATOR_HEALER_* variables of the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("LOCATOR_HEALER_"):
            monkeypatch.delenv(name)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def clean_event_registry():
    """Start every test with no event callbacks."""
    registry = get_event_registry()
    registry.clear()
    registry.enable()
    yield
    registry.clear()


def model_answer(locator_type, locator_value, reason="found by test", fenced=True) -> str:
    """Build a model answer in the format the prompts ask for."""
    body = json.dumps(
        {
            "failedElement": "id=old",
            "newValidElementType": locator_type,
            "newValidElement": locator_value,
            "reason": reason,
            "suggestion": "add a stable test id",
        },
        indent=2,
    )
    return f"```json\n{body}\n```" if fenced else body


@pytest.fixture
def answer():
    """Factory for model answers."""
    return model_answer


@pytest.fixture
def model_client():
    """ModelClient mock returning a resolvable answer by default."""
    client = MagicMock(spec=ModelClient)
    client.generate.return_value = model_answer("id", "login_btn")
    return client


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for test files."""
    return tmp_path
