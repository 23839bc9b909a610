"""Run context: the explicit capability bag handed to every task and step.

A context is created fresh for each top-level invocation. ``memo`` is the only
sanctioned channel for side information between tasks of one invocation and
is never shared between two contexts.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from command_orchestrator.core.asyncutils import resolve
from command_orchestrator.core.errors import CapabilityMissingError

if TYPE_CHECKING:
    from command_orchestrator.core.config import OrchestratorConfig
    from command_orchestrator.llm.provider import GenerateRequest, GenerateResponse


@runtime_checkable
class AICapability(Protocol):
    model: str

    async def generate(self, request: GenerateRequest) -> GenerateResponse: ...


class Counter(Protocol):
    def add(self, n: float = 1) -> None: ...


@runtime_checkable
class TelemetryCapability(Protocol):
    async def span(self, name: str, fn: Callable[[], Any]) -> Any:
        """Run ``fn`` inside a timed span, returning or raising exactly what it does."""
        ...

    def counter(self, name: str) -> Counter: ...


@runtime_checkable
class FileSystemCapability(Protocol):
    async def read(self, path: str | Path) -> str: ...

    async def write(self, path: str | Path, content: str) -> None: ...

    async def exists(self, path: str | Path) -> bool: ...


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class RunContext:
    cwd: Path
    env: Mapping[str, str]
    now: Callable[[], datetime] = _utc_now
    memo: dict[str, Any] = field(default_factory=dict)
    ai: AICapability | None = None
    otel: TelemetryCapability | None = None
    fs: FileSystemCapability | None = None
    plugins: set[str] = field(default_factory=set)

    def require_ai(self) -> AICapability:
        if self.ai is None:
            raise CapabilityMissingError("ai")
        return self.ai

    def require_otel(self) -> TelemetryCapability:
        if self.otel is None:
            raise CapabilityMissingError("otel")
        return self.otel

    def require_fs(self) -> FileSystemCapability:
        if self.fs is None:
            raise CapabilityMissingError("fs")
        return self.fs

    async def traced(self, name: str, fn: Callable[[], Awaitable[Any] | Any]) -> Any:
        """Run ``fn`` in a telemetry span when telemetry is configured."""

        if self.otel is None:
            return await resolve(fn())
        return await self.otel.span(name, fn)


def create_context(
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    *,
    now: Callable[[], datetime] | None = None,
    ai: AICapability | None = None,
    otel: TelemetryCapability | None = None,
    fs: FileSystemCapability | None = None,
) -> RunContext:
    """Create a fresh context; defaults come from the current process."""

    return RunContext(
        cwd=Path(cwd) if cwd is not None else Path.cwd(),
        env=dict(env) if env is not None else dict(os.environ),
        now=now or _utc_now,
        ai=ai,
        otel=otel,
        fs=fs,
    )


def build_context(
    config: OrchestratorConfig,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> RunContext:
    """Create a context whose capability slots are built from configuration."""

    from command_orchestrator.llm.factory import LLMFactory
    from command_orchestrator.runtime.filesystem import LocalFileSystem
    from command_orchestrator.runtime.telemetry import LoggingTelemetry

    root = Path(cwd) if cwd is not None else Path.cwd()
    return create_context(
        cwd=root,
        env=env,
        ai=LLMFactory.create(config.ai),
        otel=LoggingTelemetry() if config.telemetry.enabled else None,
        fs=LocalFileSystem(root) if config.filesystem_enabled else None,
    )
