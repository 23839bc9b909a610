"""Workflows: ordered steps threading an accumulating state record.

Each step reads a projection of the state built so far and contributes one
keyed entry to it. Keys are only ever added or overwritten; a later step that
reuses a key replaces the earlier entry, which is how refinement passes are
expressed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from command_orchestrator.core.asyncutils import resolve
from command_orchestrator.core.context import RunContext
from command_orchestrator.core.errors import WorkflowDefinitionError
from command_orchestrator.core.task import Task

logger = logging.getLogger(__name__)

State = dict[str, Any]
StepFn = Callable[[Any, RunContext], Any]
Selector = Callable[[State], Any]
Seed = Mapping[str, Any] | Callable[[RunContext], Any] | None


@dataclass(frozen=True, slots=True)
class Step:
    """One workflow stage.

    ``select`` defaults to passing the whole state. The output is stored under
    ``output_key`` when given, otherwise under ``id``.
    """

    id: str
    use: Task | StepFn
    select: Selector | None = None
    output_key: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise WorkflowDefinitionError("Step id must be a non-empty string")
        if not isinstance(self.use, Task) and not callable(self.use):
            raise WorkflowDefinitionError(
                f"Invalid step.use in workflow step {self.id!r}: "
                f"expected a Task or a callable, got {type(self.use).__name__}"
            )

    @property
    def key(self) -> str:
        return self.output_key or self.id

    async def execute(self, state: State, ctx: RunContext) -> Any:
        input = self.select(state) if self.select is not None else state  # noqa: A001
        if isinstance(self.use, Task):
            return await self.use.call(input, ctx)
        return await resolve(self.use(input, ctx))


@dataclass(frozen=True, slots=True)
class Workflow:
    id: str
    steps: tuple[Step, ...]
    seed: Seed = None

    async def initial_state(self, ctx: RunContext) -> State:
        if self.seed is None:
            return {}
        if callable(self.seed):
            seeded = await resolve(self.seed(ctx))
            return dict(seeded or {})
        return dict(self.seed)

    async def run(self, ctx: RunContext) -> State:
        """Execute every step in order and return the final state.

        The first failing step aborts the run; its exception propagates as-is
        and no later step executes.
        """

        state = await self.initial_state(ctx)
        logger.debug(
            "Workflow started", extra={"workflow_id": self.id, "steps": len(self.steps)}
        )
        for index, step in enumerate(self.steps):
            output = await step.execute(state, ctx)
            state = {**state, step.key: output}
            logger.debug(
                "Workflow step completed",
                extra={"workflow_id": self.id, "step_id": step.id, "index": index},
            )
        logger.debug("Workflow completed", extra={"workflow_id": self.id})
        return state


def define_workflow(
    id: str,  # noqa: A002
    steps: Sequence[Step | Mapping[str, Any]],
    seed: Seed = None,
) -> Workflow:
    """Build a workflow from :class:`Step` objects or plain step mappings.

    Mappings use the keys ``id``, ``use``, ``select`` and ``as`` (or
    ``output_key``).
    """

    if not id:
        raise WorkflowDefinitionError("Workflow id must be a non-empty string")
    return Workflow(id=id, steps=tuple(_coerce_step(id, s) for s in steps), seed=seed)


def _coerce_step(workflow_id: str, step: Step | Mapping[str, Any]) -> Step:
    if isinstance(step, Step):
        return step
    if not isinstance(step, Mapping):
        raise WorkflowDefinitionError(
            f"Invalid step in workflow {workflow_id!r}: {type(step).__name__}"
        )
    return Step(
        id=step.get("id", ""),
        use=step.get("use"),  # type: ignore[arg-type]
        select=step.get("select"),
        output_key=step.get("as", step.get("output_key")),
    )
