"""Unit tests for the command lifecycle runner."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from command_orchestrator.core.command import Command, CommandMeta, run_command
from command_orchestrator.core.context import RunContext
from command_orchestrator.core.hooks import HookBus
from command_orchestrator.core.lifecycle import SUCCESS_SEQUENCE, Output, run_lifecycle
from command_orchestrator.core.plugins import PluginRegistry

EXPECTED_SUCCESS = [
    "cli:boot",
    "config:load",
    "ctx:ready",
    "args:parsed",
    "command:resolved",
    "workflow:compile",
    "output:will:emit",
    "output:did:emit",
    "persist:will",
    "persist:did",
    "report:will",
    "report:did",
    "cli:done",
]

CMD = Command(meta=CommandMeta(name="test-command"), run=Mock())


def _record_all(hooks: HookBus) -> list[tuple[str, Any]]:
    events: list[tuple[str, Any]] = []
    for name in EXPECTED_SUCCESS:
        hooks.hook(name, lambda payload, name=name: events.append((name, payload)))
    return events


@pytest.mark.asyncio
async def test_success_path_announces_every_hook_in_order(
    ctx: RunContext, hooks: HookBus
) -> None:
    events = _record_all(hooks)
    run_step = AsyncMock(return_value=Output(text="done"))
    written: list[str] = []

    out = await run_lifecycle(
        cmd=CMD, args={"_": []}, ctx=ctx, run_step=run_step, hooks=hooks, emit=written.append
    )

    assert [name for name, _ in events] == EXPECTED_SUCCESS
    assert [name.value for name in SUCCESS_SEQUENCE] == EXPECTED_SUCCESS
    run_step.assert_awaited_once_with(ctx)
    assert out == Output(text="done")
    assert written == ["done"]


@pytest.mark.asyncio
async def test_hook_payload_contents(ctx: RunContext, hooks: HookBus) -> None:
    events = _record_all(hooks)
    args = {"_": [], "name": "x"}

    await run_lifecycle(
        cmd=CMD,
        args=args,
        ctx=ctx,
        run_step=lambda _ctx: {"text": "hi"},
        hooks=hooks,
        argv=["--name", "x"],
        config={"log_level": "INFO"},
        emit=lambda _text: None,
    )

    payloads = dict(events)
    assert payloads["cli:boot"] == {"argv": ["--name", "x"]}
    assert payloads["config:load"] == {"config": {"log_level": "INFO"}}
    assert payloads["ctx:ready"] == {"ctx": ctx}
    assert payloads["args:parsed"] == {"args": args}
    assert payloads["command:resolved"] == {"cmd": CMD}
    assert payloads["output:will:emit"] == {"out": {"text": "hi"}}
    assert payloads["report:did"] == {"out": {"text": "hi"}}
    assert payloads["cli:done"] == {}


@pytest.mark.asyncio
async def test_failure_path_announces_diagnostic_and_reraises(
    ctx: RunContext, hooks: HookBus, capsys: pytest.CaptureFixture[str]
) -> None:
    events = _record_all(hooks)
    boom = RuntimeError("boom")

    async def run_step(_ctx: RunContext) -> None:
        raise boom

    with pytest.raises(RuntimeError) as excinfo:
        await run_lifecycle(cmd=CMD, args={}, ctx=ctx, run_step=run_step, hooks=hooks)

    assert excinfo.value is boom
    names = [name for name, _ in events]
    assert names == EXPECTED_SUCCESS[:7]
    assert events[-1] == ("output:will:emit", {"out": Output(text="Error: boom")})
    assert "Error: boom" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_failing_hook_aborts_lifecycle(ctx: RunContext, hooks: HookBus) -> None:
    run_step = AsyncMock()

    def broken(_payload: object) -> None:
        raise RuntimeError("Hook error occurred")

    hooks.hook("config:load", broken)

    with pytest.raises(RuntimeError, match="Hook error occurred"):
        await run_lifecycle(cmd=CMD, args={}, ctx=ctx, run_step=run_step, hooks=hooks)

    run_step.assert_not_awaited()


@pytest.mark.asyncio
async def test_json_output_is_pretty_printed(
    ctx: RunContext, hooks: HookBus, capsys: pytest.CaptureFixture[str]
) -> None:
    data = {"key": "value", "items": [1, 2]}

    await run_lifecycle(
        cmd=CMD, args={}, ctx=ctx, run_step=lambda _c: Output(json=data), hooks=hooks
    )

    assert capsys.readouterr().out == json.dumps(data, indent=2) + "\n"


@pytest.mark.asyncio
async def test_empty_output_writes_nothing(ctx: RunContext, hooks: HookBus) -> None:
    events = _record_all(hooks)
    emit = Mock()

    out = await run_lifecycle(
        cmd=CMD, args={}, ctx=ctx, run_step=lambda _c: None, hooks=hooks, emit=emit
    )

    assert out is None
    emit.assert_not_called()
    assert [name for name, _ in events] == EXPECTED_SUCCESS


@pytest.mark.asyncio
async def test_run_command_applies_plugins_then_runs(ctx: RunContext, hooks: HookBus) -> None:
    order: list[str] = []
    plugins = PluginRegistry()

    def audit(bus: HookBus, _ctx: RunContext) -> None:
        bus.hook("cli:done", lambda _p: order.append("done"))

    plugins.register("audit", audit)

    async def body(args: dict[str, Any], run_ctx: RunContext) -> Output:
        order.append("run")
        return Output(text=f"hello {args['name']}")

    cmd = Command(meta=CommandMeta(name="hello"), run=body)

    out = await run_command(
        cmd, {"name": "world"}, ctx, hooks=hooks, plugins=plugins, emit=lambda _t: None
    )

    assert out.text == "hello world"
    assert order == ["run", "done"]
    assert ctx.plugins == {"audit"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("returned", "expected_text"),
    [
        ({"initialized": True, "result": {"sum": 6}}, None),
        ({"files": ["/a.txt"]}, None),
        ([1, 2, 3], None),
        (42, None),
        ("plain text", "plain text"),
        ({"json": {"k": 1}}, json.dumps({"k": 1}, indent=2)),
    ],
)
async def test_step_output_reaches_hooks_and_caller_unchanged(
    ctx: RunContext, hooks: HookBus, returned: Any, expected_text: str | None
) -> None:
    events = _record_all(hooks)
    written: list[str] = []

    out = await run_lifecycle(
        cmd=CMD, args={}, ctx=ctx, run_step=lambda _c: returned, hooks=hooks, emit=written.append
    )

    assert out is returned
    payloads = dict(events)
    for name in EXPECTED_SUCCESS[6:12]:
        assert payloads[name]["out"] is returned
    assert [name for name, _ in events] == EXPECTED_SUCCESS
    assert written == ([] if expected_text is None else [expected_text])


@pytest.mark.asyncio
async def test_failing_diagnostic_hook_keeps_original_error(
    ctx: RunContext, hooks: HookBus, caplog: pytest.LogCaptureFixture
) -> None:
    boom = ValueError("boom")

    def run_step(_ctx: RunContext) -> None:
        raise boom

    def broken_logger(_payload: object) -> None:
        raise RuntimeError("logger down")

    hooks.hook("output:will:emit", broken_logger)
    errors: list[str] = []

    with pytest.raises(ValueError) as excinfo:
        await run_lifecycle(
            cmd=CMD, args={}, ctx=ctx, run_step=run_step, hooks=hooks, emit_error=errors.append
        )

    assert excinfo.value is boom
    assert errors == ["Error: boom"]
    assert "logger down" in caplog.text


@pytest.mark.asyncio
async def test_failure_diagnostic_goes_through_emit_error(
    ctx: RunContext, hooks: HookBus, capsys: pytest.CaptureFixture[str]
) -> None:
    errors: list[str] = []
    written: list[str] = []

    async def run_step(_ctx: RunContext) -> None:
        raise KeyError("missing")

    with pytest.raises(KeyError):
        await run_command(
            Command(meta=CommandMeta(name="fails"), run=lambda _a, c: run_step(c)),
            {},
            ctx,
            hooks=hooks,
            emit=written.append,
            emit_error=errors.append,
        )

    assert errors == ["Error: 'missing'"]
    assert written == []
    assert capsys.readouterr().err == ""
