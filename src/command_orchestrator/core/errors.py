"""Error taxonomy for the orchestration core.

Errors raised by user-supplied run/step functions are never wrapped; only the
engine's own contract failures use the classes below.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from command_orchestrator.core.validation import Violation


class OrchestratorError(Exception):
    """Base class for errors raised by the engine itself."""


class ValidationError(OrchestratorError):
    """A value did not satisfy a task or tool contract.

    Attributes:
        subject: Task id or tool name whose contract was violated.
        category: Which contract failed ("input", "output", "tool input").
        violations: Every path/message pair reported by the validator.
    """

    def __init__(self, subject: str, category: str, violations: Iterable[Violation]) -> None:
        self.subject = subject
        self.category = category
        self.violations: tuple[Violation, ...] = tuple(violations)
        details = "; ".join(str(v) for v in self.violations) or "value rejected"
        super().__init__(f"'{subject}' {category} validation failed: {details}")


class ToolNotFoundError(OrchestratorError):
    """The model requested a tool that has no registration."""

    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        self.name = name
        self.available = tuple(sorted(available))
        listing = ", ".join(self.available) or "none"
        super().__init__(f"Tool not found: {name!r} (available: {listing})")


class DuplicateToolError(OrchestratorError):
    """A tool name was registered twice in the same registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name!r}")


class WorkflowDefinitionError(OrchestratorError, ValueError):
    """A workflow or step definition is malformed."""


class CapabilityMissingError(OrchestratorError):
    """A run context lacks a capability the caller needs."""

    def __init__(self, capability: str) -> None:
        self.capability = capability
        super().__init__(f"Run context has no '{capability}' capability configured")
