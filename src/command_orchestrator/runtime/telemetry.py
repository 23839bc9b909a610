"""Telemetry capability backed by standard logging."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from command_orchestrator.core.asyncutils import resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SpanRecord:
    name: str
    duration_ms: float
    ok: bool


class LoggingCounter:
    def __init__(self, name: str) -> None:
        self.name = name
        self.total: float = 0

    def add(self, n: float = 1) -> None:
        self.total += n
        logger.debug("Counter incremented", extra={"counter": self.name, "total": self.total})


class LoggingTelemetry:
    """Times spans and keeps counters in memory, reporting through logging.

    ``span`` never alters what the wrapped function returns or raises.
    """

    def __init__(self) -> None:
        self.spans: list[SpanRecord] = []
        self._counters: dict[str, LoggingCounter] = {}

    async def span(self, name: str, fn: Callable[[], Any]) -> Any:
        started = time.perf_counter()
        ok = False
        try:
            result = await resolve(fn())
            ok = True
            return result
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            self.spans.append(SpanRecord(name=name, duration_ms=duration_ms, ok=ok))
            logger.debug(
                "Span finished",
                extra={"span": name, "duration_ms": round(duration_ms, 3), "ok": ok},
            )

    def counter(self, name: str) -> LoggingCounter:
        if name not in self._counters:
            self._counters[name] = LoggingCounter(name)
        return self._counters[name]

    def counters(self) -> dict[str, float]:
        return {name: c.total for name, c in self._counters.items()}
