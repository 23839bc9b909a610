"""Command lifecycle runner.

The lifecycle is a fixed, linear sequence of hook announcements around one
execution step. The only branch is success versus failure of that step, and
both paths end the run:

    cli:boot -> config:load -> ctx:ready -> args:parsed -> command:resolved
    -> workflow:compile -> (run step)
    success: output:will:emit -> output:did:emit -> persist:will -> persist:did
             -> report:will -> report:did -> cli:done
    failure: output:will:emit (diagnostic) -> re-raise
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from command_orchestrator.core.asyncutils import resolve
from command_orchestrator.core.context import RunContext
from command_orchestrator.core.hooks import HookBus, HookName, get_default_hooks

logger = logging.getLogger(__name__)

SUCCESS_SEQUENCE: tuple[HookName, ...] = (
    HookName.CLI_BOOT,
    HookName.CONFIG_LOAD,
    HookName.CTX_READY,
    HookName.ARGS_PARSED,
    HookName.COMMAND_RESOLVED,
    HookName.WORKFLOW_COMPILE,
    HookName.OUTPUT_WILL_EMIT,
    HookName.OUTPUT_DID_EMIT,
    HookName.PERSIST_WILL,
    HookName.PERSIST_DID,
    HookName.REPORT_WILL,
    HookName.REPORT_DID,
    HookName.CLI_DONE,
)


@dataclass(frozen=True, slots=True)
class Output:
    """The result a command hands back: rendered text and/or structured data."""

    text: str | None = None
    json: Any = None

    @property
    def empty(self) -> bool:
        return self.text is None and self.json is None

    def render(self) -> str | None:
        if self.text is not None:
            return self.text
        if self.json is not None:
            return json.dumps(self.json, indent=2, ensure_ascii=False, default=str)
        return None


def render_output(out: Any) -> str | None:
    """Text to write for a command's output, or ``None`` to write nothing.

    ``Output`` renders its text or pretty-printed JSON, a string is written
    as-is, and a mapping renders its ``text``/``json`` keys when it has them.
    Anything else is returned to the caller without being written.
    """

    if isinstance(out, Output):
        return out.render()
    if isinstance(out, str):
        return out
    if isinstance(out, Mapping) and ("text" in out or "json" in out):
        return Output(text=out.get("text"), json=out.get("json")).render()
    return None


Emitter = Callable[[str], Any]
RunStep = Callable[[RunContext], Awaitable[Any] | Any]


def _stdout(text: str) -> None:
    print(text)


def _stderr(text: str) -> None:
    print(text, file=sys.stderr)


async def run_lifecycle(
    *,
    cmd: Any,
    args: Mapping[str, Any],
    ctx: RunContext,
    run_step: RunStep,
    hooks: HookBus | None = None,
    argv: Sequence[str] | None = None,
    config: Mapping[str, Any] | None = None,
    emit: Emitter | None = None,
    emit_error: Emitter | None = None,
) -> Any:
    """Drive one command invocation through the lifecycle hooks.

    Args:
        cmd: The resolved command (opaque to the runner, passed to hooks).
        args: Parsed arguments.
        ctx: The invocation's run context.
        run_step: Executes the command body and returns its output.
        hooks: Bus to announce on; the default bus when omitted.
        argv: Raw arguments, announced on ``cli:boot``.
        config: Resolved configuration, announced on ``config:load``.
        emit: Writes the rendered output; ``print`` when omitted.
        emit_error: Writes the failure diagnostic; stderr when omitted.

    Returns:
        Exactly what ``run_step`` returned.

    Raises:
        Exception: Whatever ``run_step`` raised, unchanged, after the
            diagnostic ``output:will:emit`` announcement.
    """

    bus = hooks if hooks is not None else get_default_hooks()
    write = emit or _stdout
    write_error = emit_error or _stderr

    await bus.call_hook(HookName.CLI_BOOT, {"argv": list(argv or ())})
    await bus.call_hook(HookName.CONFIG_LOAD, {"config": dict(config or {})})
    await bus.call_hook(HookName.CTX_READY, {"ctx": ctx})
    await bus.call_hook(HookName.ARGS_PARSED, {"args": args})
    await bus.call_hook(HookName.COMMAND_RESOLVED, {"cmd": cmd})
    await bus.call_hook(HookName.WORKFLOW_COMPILE, {"cmd": cmd})

    try:
        out = await resolve(run_step(ctx))
    except Exception as err:
        diagnostic = Output(text=f"Error: {err}")
        logger.error("Command failed", extra={"error": str(err)}, exc_info=err)
        await resolve(write_error(diagnostic.text))
        try:
            await bus.call_hook(HookName.OUTPUT_WILL_EMIT, {"out": diagnostic})
        except Exception:
            logger.exception("Failure diagnostic hook raised; re-raising the command error")
        raise err

    await bus.call_hook(HookName.OUTPUT_WILL_EMIT, {"out": out})
    rendered = render_output(out)
    if rendered is not None:
        await resolve(write(rendered))
    await bus.call_hook(HookName.OUTPUT_DID_EMIT, {"out": out})
    await bus.call_hook(HookName.PERSIST_WILL, {"out": out})
    await bus.call_hook(HookName.PERSIST_DID, {"out": out})
    await bus.call_hook(HookName.REPORT_WILL, {"out": out})
    await bus.call_hook(HookName.REPORT_DID, {"out": out})
    await bus.call_hook(HookName.CLI_DONE, {})
    return out
