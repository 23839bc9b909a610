"""CLI entrypoint for the command orchestrator."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from command_orchestrator import __version__
from command_orchestrator.ai import (
    AI_MEMO_KEY,
    AIPlanResult,
    AISpec,
    AITool,
    AIWrapperCommand,
    define_ai_wrapper_command,
)
from command_orchestrator.core.command import ArgSpec, CommandMeta, run_command
from command_orchestrator.core.config import OrchestratorConfig
from command_orchestrator.core.context import RunContext, build_context
from command_orchestrator.core.hooks import HookBus, register_core_hooks
from command_orchestrator.core.lifecycle import SUCCESS_SEQUENCE, Output
from command_orchestrator.core.validation import ObjectValidator, PrimitiveValidator
from command_orchestrator.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="command-orchestrator",
        description="Run commands through the hook-driven command lifecycle",
    )
    parser.add_argument(
        "--version", action="version", version=f"command-orchestrator {__version__}"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Trace every hook announcement at DEBUG level",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("hooks", help="Print the lifecycle hook sequence")

    ask = subparsers.add_parser(
        "ask",
        help="Ask the configured AI; it may call the built-in 'now' and 'read_file' tools",
    )
    ask.add_argument("prompt", help="Prompt sent to the model")
    ask.add_argument("--system", default=None, help="Optional system prompt")
    ask.add_argument(
        "--json",
        action="store_true",
        help="Emit the answer and tool results as JSON",
    )

    return parser


def build_ask_command(ctx: RunContext, system: str | None = None) -> AIWrapperCommand:
    """The ``ask`` command: plan with the prompt, answer with the model's text."""

    async def read_file(input: Mapping[str, Any]) -> str:  # noqa: A002
        return await ctx.require_fs().read(input["path"])

    tools = {
        "now": AITool(
            description="Current date and time (ISO 8601, UTC)",
            input_contract=ObjectValidator(fields={}),
            execute=lambda _input: ctx.now().isoformat(),
        ),
        "read_file": AITool(
            description="Read a UTF-8 text file relative to the working directory",
            input_contract=ObjectValidator(
                fields={"path": PrimitiveValidator(str, min_length=1)},
                allow_extra=False,
            ),
            execute=read_file,
        ),
    }

    def answer(args: Mapping[str, Any], run_ctx: RunContext) -> Output:
        result: AIPlanResult = run_ctx.memo[AI_MEMO_KEY]
        if not args.get("json"):
            return Output(text=result.text)
        return Output(
            json={
                "text": result.text,
                "tools": [
                    {"name": r.name, "input": r.input, "output": r.output}
                    for r in result.tool_results
                ],
            }
        )

    return define_ai_wrapper_command(
        meta=CommandMeta(name="ask", description="Ask the configured AI", version=__version__),
        args={
            "prompt": ArgSpec(description="Prompt sent to the model", required=True),
            "json": ArgSpec(type="boolean", description="Emit JSON"),
        },
        ai=AISpec(model=ctx.ai.model if ctx.ai else "simulated", tools=tools, system=system),
        plan=lambda args, _ctx: args["prompt"],
        run=answer,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = OrchestratorConfig()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(
        "DEBUG" if args.debug else settings.effective_log_level,
        json_output=settings.json_logs,
    )

    if args.command == "hooks":
        for name in SUCCESS_SEQUENCE:
            print(name.value)
        return 0

    hooks = HookBus()
    register_core_hooks(hooks, debug=settings.debug or args.debug)

    try:
        ctx = build_context(settings)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.command == "ask":
        cmd = build_ask_command(ctx, system=args.system)
        cmd_args = {"prompt": args.prompt, "json": args.json}
    else:  # pragma: no cover - argparse rejects unknown commands
        parser.error(f"Unknown command: {args.command}")

    try:
        asyncio.run(
            run_command(
                cmd,
                cmd_args,
                ctx,
                hooks=hooks,
                argv=list(argv if argv is not None else sys.argv[1:]),
                config=settings.model_dump(mode="json", exclude={"ai": {"openai_api_key"}}),
            )
        )
    except Exception:
        # The lifecycle already reported the failure on stderr.
        logger.debug("Command failed", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
