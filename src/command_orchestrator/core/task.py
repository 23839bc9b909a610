"""Validated tasks: the atomic unit of work."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from command_orchestrator.core.context import RunContext
from command_orchestrator.core.errors import ValidationError
from command_orchestrator.core.hooks import HookBus, HookName, get_default_hooks
from command_orchestrator.core.validation import Validator

logger = logging.getLogger(__name__)

RunFn = Callable[[Any, RunContext], Any]


@dataclass(frozen=True, slots=True)
class Task:
    """An identified run function with optional input/output contracts.

    Tasks hold no mutable state and can be shared across any number of
    concurrent invocations.
    """

    id: str
    run: RunFn
    input_contract: Validator | None = None
    output_contract: Validator | None = None
    hooks: HookBus | None = None

    @property
    def bus(self) -> HookBus:
        return self.hooks if self.hooks is not None else get_default_hooks()

    async def call(self, input: Any, ctx: RunContext) -> Any:  # noqa: A002
        """Validate, announce, run, validate the result, announce again.

        Raises:
            ValidationError: The input or the result violates its contract.
                Neither ``task:did:call`` nor (for input) ``task:will:call``
                is announced in that case.
        """

        if self.input_contract is not None:
            checked = self.input_contract.validate(input)
            if not checked.ok:
                raise ValidationError(self.id, "input", checked.violations)
            input = checked.value  # noqa: A001

        bus = self.bus
        await bus.call_hook(HookName.TASK_WILL_CALL, {"id": self.id, "input": input})

        logger.debug("Running task", extra={"task_id": self.id})
        res = await ctx.traced(f"task:{self.id}", lambda: self.run(input, ctx))

        if self.output_contract is not None:
            checked = self.output_contract.validate(res)
            if not checked.ok:
                raise ValidationError(self.id, "output", checked.violations)
            res = checked.value

        if ctx.otel is not None:
            ctx.otel.counter("task.calls").add(1)
        await bus.call_hook(HookName.TASK_DID_CALL, {"id": self.id, "res": res})
        return res


def define_task(
    id: str,  # noqa: A002
    run: RunFn,
    *,
    input_contract: Validator | None = None,
    output_contract: Validator | None = None,
    hooks: HookBus | None = None,
) -> Task:
    if not id:
        raise ValueError("Task id must be a non-empty string")
    if not callable(run):
        raise TypeError(f"Task {id!r} run must be callable")
    return Task(
        id=id,
        run=run,
        input_contract=input_contract,
        output_contract=output_contract,
        hooks=hooks,
    )

