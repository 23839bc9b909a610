"""AI wrapper commands.

An AI wrapper command runs in four phases:

1. ``plan(args, ctx)`` builds a prompt (skipped when no planner is given);
2. the context's AI capability generates a response for it;
3. every tool call in that response is validated and executed in order;
4. ``run(args, ctx)`` produces the command output, reading the planning
   results from ``ctx.memo["ai"]``.

During ``run`` the context's AI capability is bound to the command, so
requests made there inherit the command's tools and system prompt too.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from command_orchestrator.ai.tools import AITool, ToolObserver, ToolRegistry, ToolResult
from command_orchestrator.core.asyncutils import resolve
from command_orchestrator.core.command import ArgSpec, CommandMeta
from command_orchestrator.core.context import AICapability, RunContext
from command_orchestrator.llm.provider import GenerateRequest, GenerateResponse
from command_orchestrator.llm.simulated_provider import SimulatedProvider

logger = logging.getLogger(__name__)

AI_MEMO_KEY = "ai"

Planner = Callable[[Mapping[str, Any], RunContext], Any]
Handler = Callable[[Mapping[str, Any], RunContext], Any]


@dataclass(frozen=True, slots=True)
class AISpec:
    model: str
    tools: ToolRegistry = field(default_factory=ToolRegistry)
    system: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.tools, ToolRegistry):
            object.__setattr__(self, "tools", ToolRegistry(self.tools))


@dataclass(frozen=True, slots=True)
class AIPlanResult:
    """What the planning phase leaves in ``ctx.memo["ai"]``."""

    prompt: str
    text: str
    tool_results: tuple[ToolResult, ...] = ()

    def outputs(self, name: str) -> list[Any]:
        return [r.output for r in self.tool_results if r.name == name]


class BoundAI:
    """An AI capability that applies a command's tools and system prompt.

    Request-level tools are merged over the command's tools; the command's
    system prompt applies only when the request has none.
    """

    def __init__(self, inner: AICapability, spec: AISpec) -> None:
        self.inner = inner
        self.spec = spec

    @property
    def model(self) -> str:
        return self.spec.model

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        tools: dict[str, AITool] = {**self.spec.tools, **(request.tools or {})}
        system = request.system if request.system is not None else self.spec.system
        return await self.inner.generate(GenerateRequest(request.prompt, tools, system))


@dataclass(frozen=True, slots=True)
class AIWrapperCommand:
    meta: CommandMeta
    ai: AISpec
    handler: Handler
    args: Mapping[str, ArgSpec] = field(default_factory=dict)
    plan: Planner | None = None
    on_tool_call: ToolObserver | None = None

    def bind(self, ctx: RunContext) -> RunContext:
        """Return a context view whose ``ai`` is bound to this command.

        The view shares ``memo`` and ``plugins`` with ``ctx``.
        """

        inner = ctx.ai
        if inner is None:
            logger.info(
                "No AI capability in context, using simulated provider",
                extra={"command": self.meta.name, "model": self.ai.model},
            )
            inner = SimulatedProvider(model=self.ai.model)
        return replace(ctx, ai=BoundAI(inner, self.ai))

    async def run(self, args: Mapping[str, Any], ctx: RunContext) -> Any:
        """Plan, dispatch requested tools, then return ``handler``'s output verbatim.

        Raises:
            ToolNotFoundError: The model requested an unregistered tool.
            ValidationError: A tool call's input violates its contract.
            Exception: Errors from the AI provider, tools or handler, unchanged.
        """

        bound = self.bind(ctx)
        if self.plan is not None:
            ctx.memo[AI_MEMO_KEY] = await self._plan(self.plan, args, bound)
        return await resolve(self.handler(args, bound))

    async def _plan(
        self, plan: Planner, args: Mapping[str, Any], ctx: RunContext
    ) -> AIPlanResult:
        ai = ctx.require_ai()
        prompt = await resolve(plan(args, ctx))
        response = await ctx.traced(
            f"ai:{self.meta.name}:generate", lambda: ai.generate(GenerateRequest(prompt))
        )
        logger.debug(
            "AI planning response",
            extra={
                "command": self.meta.name,
                "tool_calls": [call.name for call in response.tool_calls],
            },
        )
        results = await self.ai.tools.dispatch(response.tool_calls, self.on_tool_call)
        return AIPlanResult(prompt=prompt, text=response.text, tool_results=tuple(results))


def define_ai_wrapper_command(
    *,
    meta: CommandMeta | Mapping[str, Any],
    ai: AISpec,
    run: Handler,
    args: Mapping[str, ArgSpec] | None = None,
    plan: Planner | None = None,
    on_tool_call: ToolObserver | None = None,
) -> AIWrapperCommand:
    if not isinstance(meta, CommandMeta):
        meta = CommandMeta(**meta)
    if not callable(run):
        raise TypeError(f"AI wrapper command {meta.name!r} run must be callable")
    return AIWrapperCommand(
        meta=meta,
        ai=ai,
        handler=run,
        args=dict(args or {}),
        plan=plan,
        on_tool_call=on_tool_call,
    )
