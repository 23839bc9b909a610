#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the orchestrator components directly:

* define two validated tasks and chain them in a workflow
* wrap the workflow in a command and run it through the lifecycle
* trace every hook announcement with ``--debug``

The numbers to sum are passed as arguments.
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from typing import Any

from command_orchestrator import (
    Command,
    CommandMeta,
    HookBus,
    OrchestratorConfig,
    Output,
    RunContext,
    Step,
    define_task,
    define_workflow,
    run_command,
)
from command_orchestrator.core.context import build_context
from command_orchestrator.core.hooks import register_core_hooks
from command_orchestrator.core.validation import ArrayValidator, ObjectValidator, PrimitiveValidator
from command_orchestrator.logging import configure_logging
from command_orchestrator.runtime.telemetry import LoggingTelemetry


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sum numbers through a two-step workflow.")
    parser.add_argument("numbers", nargs="+", type=float, help="Numbers to sum")
    parser.add_argument("--debug", action="store_true", help="Trace hook announcements")
    return parser.parse_args(argv)


DATA_CONTRACT = ObjectValidator(
    fields={"data": ArrayValidator(PrimitiveValidator(float), min_length=1)}
)


def build_command(numbers: list[float], hooks: HookBus) -> Command:
    fetch = define_task(
        "fetch",
        lambda state, _ctx: {"data": state["numbers"]},
        output_contract=DATA_CONTRACT,
        hooks=hooks,
    )
    total = define_task(
        "sum",
        lambda data, _ctx: {"sum": sum(data["data"]), "count": len(data["data"])},
        input_contract=DATA_CONTRACT,
        hooks=hooks,
    )
    workflow = define_workflow(
        "sum-numbers",
        seed={"numbers": numbers},
        steps=[
            Step(id="fetch", use=fetch),
            Step(id="sum", use=total, select=lambda state: state["fetch"], output_key="result"),
        ],
    )

    async def run(_args: dict[str, Any], ctx: RunContext) -> Output:
        state = await workflow.run(ctx)
        return Output(json=state["result"])

    return Command(meta=CommandMeta(name="sum", description="Sum numbers"), run=run)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = OrchestratorConfig()
    configure_logging("DEBUG" if args.debug else settings.effective_log_level, json_output=False)

    hooks = HookBus()
    register_core_hooks(hooks, debug=args.debug)
    ctx = build_context(settings)

    out = asyncio.run(run_command(build_command(args.numbers, hooks), {}, ctx, hooks=hooks))
    if isinstance(ctx.otel, LoggingTelemetry):
        print(f"Task calls: {ctx.otel.counters().get('task.calls', 0):g}")
    return 0 if not out.empty else 1


if __name__ == "__main__":
    raise SystemExit(main())
