"""Commands and the entry point that runs one through the lifecycle."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from command_orchestrator.core.context import RunContext
from command_orchestrator.core.hooks import HookBus, get_default_hooks
from command_orchestrator.core.lifecycle import Emitter, run_lifecycle
from command_orchestrator.core.plugins import PluginRegistry


@dataclass(frozen=True, slots=True)
class CommandMeta:
    name: str
    description: str = ""
    version: str | None = None


@dataclass(frozen=True, slots=True)
class ArgSpec:
    """Declared argument; parsing itself belongs to the command host."""

    type: str = "string"
    description: str = ""
    required: bool = False
    default: Any = None


class Runnable(Protocol):
    meta: CommandMeta
    args: Mapping[str, ArgSpec]

    async def run(self, args: Mapping[str, Any], ctx: RunContext) -> Any: ...


@dataclass(frozen=True, slots=True)
class Command:
    meta: CommandMeta
    run: Callable[[Mapping[str, Any], RunContext], Any]
    args: Mapping[str, ArgSpec] = field(default_factory=dict)


async def run_command(
    cmd: Command | Runnable,
    args: Mapping[str, Any],
    ctx: RunContext,
    *,
    hooks: HookBus | None = None,
    plugins: PluginRegistry | None = None,
    argv: Sequence[str] | None = None,
    config: Mapping[str, Any] | None = None,
    emit: Emitter | None = None,
    emit_error: Emitter | None = None,
) -> Any:
    """Apply plugins, then run ``cmd`` through :func:`run_lifecycle`."""

    bus = hooks if hooks is not None else get_default_hooks()
    if plugins is not None:
        await plugins.apply(bus, ctx)

    return await run_lifecycle(
        cmd=cmd,
        args=args,
        ctx=ctx,
        run_step=lambda run_ctx: cmd.run(args, run_ctx),
        hooks=bus,
        argv=argv,
        config=config,
        emit=emit,
        emit_error=emit_error,
    )
