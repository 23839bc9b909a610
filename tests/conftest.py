"""Test configuration and fixtures."""

import os
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from command_orchestrator.core.config import AIConfig, OrchestratorConfig, TelemetryConfig
from command_orchestrator.core.context import RunContext, create_context
from command_orchestrator.core.hooks import DEBUG_ENV_VAR, HookBus, set_default_hooks

FIXED_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_default_hooks(monkeypatch: pytest.MonkeyPatch) -> Iterator[HookBus]:
    """Give every test its own fallback hook bus and a clean debug flag."""
    monkeypatch.delenv(DEBUG_ENV_VAR, raising=False)
    bus = HookBus()
    previous = set_default_hooks(bus)
    yield bus
    set_default_hooks(previous)
    os.environ.pop(DEBUG_ENV_VAR, None)


@pytest.fixture
def hooks() -> HookBus:
    """Provide an explicit, empty hook bus."""
    return HookBus()


@pytest.fixture
def ctx(tmp_path: Path) -> RunContext:
    """Provide a bare run context rooted in a temporary directory."""
    return create_context(cwd=tmp_path, env={"APP_ENV": "test"}, now=lambda: FIXED_NOW)


@pytest.fixture
def ai_config() -> AIConfig:
    """Provide a test AI configuration."""
    return AIConfig(
        provider="openai",
        openai_api_key="test-key",
        model="gpt-4o-mini",
    )


@pytest.fixture
def orchestrator_config() -> OrchestratorConfig:
    """Provide a test orchestrator configuration."""
    return OrchestratorConfig(
        log_level="DEBUG",
        debug=True,
        ai=AIConfig(provider="simulated"),
        telemetry=TelemetryConfig(enabled=True),
    )
