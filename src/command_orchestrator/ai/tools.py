"""Tools a model may ask an AI wrapper command to run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from command_orchestrator.core.asyncutils import resolve
from command_orchestrator.core.errors import DuplicateToolError, ToolNotFoundError, ValidationError
from command_orchestrator.core.validation import Validator
from command_orchestrator.llm.provider import ToolCall

logger = logging.getLogger(__name__)

ToolObserver = Callable[[str, Any, Any], Any]


@dataclass(frozen=True, slots=True)
class AITool:
    description: str
    input_contract: Validator
    execute: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ToolResult:
    name: str
    input: Any
    output: Any


class ToolRegistry(Mapping[str, AITool]):
    """Tool name to tool, with names checked for uniqueness on registration."""

    def __init__(self, tools: Mapping[str, AITool] | Iterable[tuple[str, AITool]] = ()) -> None:
        self._tools: dict[str, AITool] = {}
        items = tools.items() if isinstance(tools, Mapping) else tools
        for name, tool in items:
            self.register(name, tool)

    def register(self, name: str, tool: AITool) -> None:
        if not name:
            raise ValueError("Tool name must be a non-empty string")
        if name in self._tools:
            raise DuplicateToolError(name)
        if not isinstance(tool, AITool):
            raise TypeError(f"Tool {name!r} must be an AITool, got {type(tool).__name__}")
        self._tools[name] = tool

    def __getitem__(self, name: str) -> AITool:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def lookup(self, name: str) -> AITool:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name, self._tools) from None

    async def invoke(self, call: ToolCall, on_tool_call: ToolObserver | None = None) -> ToolResult:
        """Validate and execute one requested call.

        Raises:
            ToolNotFoundError: No tool is registered under ``call.name``.
            ValidationError: ``call.args`` violates the tool's input contract.
        """

        tool = self.lookup(call.name)
        checked = tool.input_contract.validate(call.args)
        if not checked.ok:
            raise ValidationError(call.name, "tool input", checked.violations)

        logger.debug("Executing tool", extra={"tool": call.name})
        output = await resolve(tool.execute(checked.value))
        if on_tool_call is not None:
            await resolve(on_tool_call(call.name, checked.value, output))
        return ToolResult(name=call.name, input=checked.value, output=output)

    async def dispatch(
        self, calls: Iterable[ToolCall], on_tool_call: ToolObserver | None = None
    ) -> list[ToolResult]:
        """Run calls one after another; the first failure aborts the rest."""

        return [await self.invoke(call, on_tool_call) for call in calls]
