"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from command_orchestrator.ai.tools import AITool


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool invocation requested by the model."""

    name: str
    args: Any = None


@dataclass(frozen=True, slots=True)
class GenerateRequest:
    prompt: str
    tools: Mapping[str, AITool] | None = None
    system: str | None = None


@dataclass(frozen=True, slots=True)
class GenerateResponse:
    text: str
    tool_calls: tuple[ToolCall, ...] = field(default_factory=tuple)


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This interface allows pluggable AI backends (OpenAI, a local simulation,
    etc.) to fill the ``ai`` slot of a run context.
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Identifier of the model this provider talks to."""

    @abstractmethod
    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate a completion for a prompt.

        Args:
            request: Prompt, optional tool declarations and system prompt.

        Returns:
            The generated text plus any tool calls the model requested.
        """
