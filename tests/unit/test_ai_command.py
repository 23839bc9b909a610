"""Unit tests for AI wrapper commands and tool dispatch."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from command_orchestrator.ai.command import (
    AI_MEMO_KEY,
    AIPlanResult,
    AISpec,
    BoundAI,
    define_ai_wrapper_command,
)
from command_orchestrator.ai.tools import AITool, ToolRegistry
from command_orchestrator.core.command import run_command
from command_orchestrator.core.context import RunContext
from command_orchestrator.core.errors import (
    DuplicateToolError,
    ToolNotFoundError,
    ValidationError,
)
from command_orchestrator.core.hooks import HookBus
from command_orchestrator.core.lifecycle import Output
from command_orchestrator.core.validation import (
    EnumValidator,
    ObjectValidator,
    PrimitiveValidator,
)
from command_orchestrator.llm.provider import GenerateRequest, GenerateResponse, ToolCall


def _calculate(input: dict[str, Any]) -> float:  # noqa: A002
    a, b = input["a"], input["b"]
    return {"add": a + b, "subtract": a - b, "multiply": a * b}[input["operation"]]


CALCULATOR = AITool(
    description="Performs mathematical calculations",
    input_contract=ObjectValidator(
        fields={
            "operation": EnumValidator(("add", "subtract", "multiply")),
            "a": PrimitiveValidator(float),
            "b": PrimitiveValidator(float),
        }
    ),
    execute=_calculate,
)


def _ai(*responses: GenerateResponse) -> Mock:
    ai = Mock()
    ai.model = "test-model"
    ai.generate = AsyncMock(side_effect=list(responses))
    return ai


def _answer_from_memo(_args: dict[str, Any], ctx: RunContext) -> Output:
    plan: AIPlanResult = ctx.memo[AI_MEMO_KEY]
    return Output(text=plan.text, json=[r.output for r in plan.tool_results])


@pytest.mark.asyncio
async def test_plan_generate_dispatch_then_run(ctx: RunContext) -> None:
    ctx.ai = _ai(
        GenerateResponse(
            text="Let me calculate",
            tool_calls=(
                ToolCall("calculator", {"operation": "add", "a": 2, "b": 3}),
                ToolCall("calculator", {"operation": "multiply", "a": 4, "b": 5}),
            ),
        )
    )
    observed: list[tuple[str, Any, Any]] = []

    command = define_ai_wrapper_command(
        meta={"name": "math-ai", "description": "Math helper"},
        ai=AISpec(model="math-model", tools={"calculator": CALCULATOR}, system="You do math"),
        plan=lambda args, _ctx: f"Solve: {args['query']}",
        on_tool_call=lambda name, input, output: observed.append((name, input, output)),
        run=_answer_from_memo,
    )

    out = await command.run({"query": "2+3 and 4*5"}, ctx)

    assert out == Output(text="Let me calculate", json=[5, 20])
    request: GenerateRequest = ctx.ai.generate.await_args.args[0]
    assert request.prompt == "Solve: 2+3 and 4*5"
    assert request.system == "You do math"
    assert set(request.tools) == {"calculator"}
    assert [(name, output) for name, _input, output in observed] == [
        ("calculator", 5),
        ("calculator", 20),
    ]


@pytest.mark.asyncio
async def test_run_result_is_returned_verbatim(ctx: RunContext) -> None:
    ctx.ai = _ai(GenerateResponse(text="ignored"))
    sentinel = {"text": "from run", "json": {"k": 1}}

    command = define_ai_wrapper_command(
        meta={"name": "verbatim"},
        ai=AISpec(model="m"),
        plan=lambda _a, _c: "p",
        run=lambda _a, _c: sentinel,
    )

    assert await command.run({}, ctx) is sentinel


@pytest.mark.asyncio
async def test_unknown_tool_aborts_before_run(ctx: RunContext) -> None:
    ctx.ai = _ai(GenerateResponse(text="", tool_calls=(ToolCall("missing", {}),)))
    run = Mock()

    command = define_ai_wrapper_command(
        meta={"name": "missing-tool"},
        ai=AISpec(model="m", tools={"calculator": CALCULATOR}),
        plan=lambda _a, _c: "p",
        run=run,
    )

    with pytest.raises(ToolNotFoundError) as excinfo:
        await command.run({}, ctx)

    assert excinfo.value.name == "missing"
    run.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_tool_input_raises_validation_error(ctx: RunContext) -> None:
    ctx.ai = _ai(
        GenerateResponse(
            text="",
            tool_calls=(ToolCall("calculator", {"operation": "pow", "a": "x"}),),
        )
    )
    execute = Mock()
    tool = AITool("calc", CALCULATOR.input_contract, execute)

    command = define_ai_wrapper_command(
        meta={"name": "bad-input"},
        ai=AISpec(model="m", tools={"calculator": tool}),
        plan=lambda _a, _c: "p",
        run=Mock(),
    )

    with pytest.raises(ValidationError) as excinfo:
        await command.run({}, ctx)

    assert excinfo.value.subject == "calculator"
    assert excinfo.value.category == "tool input"
    assert len(excinfo.value.violations) == 3
    execute.assert_not_called()


@pytest.mark.asyncio
async def test_tool_and_provider_errors_propagate(ctx: RunContext) -> None:
    failure = ConnectionError("provider down")
    ai = Mock()
    ai.model = "m"
    ai.generate = AsyncMock(side_effect=failure)
    ctx.ai = ai

    command = define_ai_wrapper_command(
        meta={"name": "down"}, ai=AISpec(model="m"), plan=lambda _a, _c: "p", run=Mock()
    )

    with pytest.raises(ConnectionError) as excinfo:
        await command.run({}, ctx)
    assert excinfo.value is failure

    def broken(_input: Any) -> None:
        raise RuntimeError("tool crashed")

    ctx.ai = _ai(GenerateResponse(text="", tool_calls=(ToolCall("broken", {}),)))
    command = define_ai_wrapper_command(
        meta={"name": "crash"},
        ai=AISpec(model="m", tools={"broken": AITool("b", ObjectValidator({}), broken)}),
        plan=lambda _a, _c: "p",
        run=Mock(),
    )
    with pytest.raises(RuntimeError, match="tool crashed"):
        await command.run({}, ctx)


@pytest.mark.asyncio
async def test_without_planner_run_sees_bound_ai(ctx: RunContext) -> None:
    ctx.ai = _ai(GenerateResponse(text="Execution complete"))
    extra = AITool("Extra tool", PrimitiveValidator(str), lambda s: f"Extra: {s}")

    async def run(args: dict[str, Any], run_ctx: RunContext) -> Output:
        response = await run_ctx.require_ai().generate(
            GenerateRequest(prompt=args["query"], tools={"extra_tool": extra})
        )
        return Output(text=response.text)

    command = define_ai_wrapper_command(
        meta={"name": "bound"},
        ai=AISpec(model="m", tools={"calculator": CALCULATOR}, system="Default system"),
        run=run,
    )

    out = await command.run({"query": "What is 2 + 3?"}, ctx)

    assert out.text == "Execution complete"
    request: GenerateRequest = ctx.ai.generate.await_args.args[0]
    assert set(request.tools) == {"calculator", "extra_tool"}
    assert request.system == "Default system"
    assert AI_MEMO_KEY not in ctx.memo


@pytest.mark.asyncio
async def test_request_system_prompt_wins_over_command_default() -> None:
    inner = _ai(GenerateResponse(text="ok"))
    bound = BoundAI(inner, AISpec(model="m", system="default"))

    await bound.generate(GenerateRequest(prompt="hi", system="custom"))

    assert inner.generate.await_args.args[0].system == "custom"
    assert bound.model == "m"


@pytest.mark.asyncio
async def test_falls_back_to_simulated_provider(ctx: RunContext) -> None:
    command = define_ai_wrapper_command(
        meta={"name": "offline"},
        ai=AISpec(model="fallback-model"),
        plan=lambda args, _ctx: args["prompt"],
        run=_answer_from_memo,
    )

    out = await command.run({"prompt": "hello there"}, ctx)

    assert out.text == "[Simulated AI response for: hello there]"
    assert ctx.ai is None


@pytest.mark.asyncio
async def test_memo_is_shared_with_run_context(ctx: RunContext) -> None:
    ctx.ai = _ai(GenerateResponse(text="planned"))
    ctx.memo["caller"] = "value"
    seen: dict[str, Any] = {}

    def run(_args: dict[str, Any], run_ctx: RunContext) -> None:
        seen.update(run_ctx.memo)
        run_ctx.memo["from_run"] = True

    command = define_ai_wrapper_command(
        meta={"name": "memo"}, ai=AISpec(model="m"), plan=lambda _a, _c: "p", run=run
    )
    await command.run({}, ctx)

    assert seen["caller"] == "value"
    assert seen[AI_MEMO_KEY].text == "planned"
    assert ctx.memo["from_run"] is True


@pytest.mark.asyncio
async def test_ai_command_runs_through_lifecycle(ctx: RunContext, hooks: HookBus) -> None:
    ctx.ai = _ai(GenerateResponse(text="answer"))
    announced: list[str] = []
    hooks.hook("output:will:emit", lambda p: announced.append(p["out"].text))

    command = define_ai_wrapper_command(
        meta={"name": "ask"},
        ai=AISpec(model="m"),
        plan=lambda args, _c: args["q"],
        run=_answer_from_memo,
    )

    out = await run_command(command, {"q": "why?"}, ctx, hooks=hooks, emit=lambda _t: None)

    assert out.text == "answer"
    assert announced == ["answer"]


def test_tool_registry_rejects_duplicates_and_bad_entries() -> None:
    registry = ToolRegistry({"calculator": CALCULATOR})

    with pytest.raises(DuplicateToolError):
        registry.register("calculator", CALCULATOR)
    with pytest.raises(ValueError):
        registry.register("", CALCULATOR)
    with pytest.raises(TypeError):
        registry.register("raw", {"execute": print})  # type: ignore[arg-type]

    assert list(registry) == ["calculator"]
    with pytest.raises(ToolNotFoundError, match="available: calculator"):
        registry.lookup("nope")
