"""Local implementations of the run context capabilities."""

from command_orchestrator.runtime.filesystem import LocalFileSystem
from command_orchestrator.runtime.telemetry import LoggingTelemetry

__all__ = ["LocalFileSystem", "LoggingTelemetry"]
