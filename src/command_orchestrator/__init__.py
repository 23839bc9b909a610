"""Command Orchestrator.

A small, composable engine for in-process command execution:
- validated tasks announcing their lifecycle on a hook bus
- workflows threading an accumulating state through ordered steps
- a fixed command lifecycle driven through named hooks
- AI wrapper commands that plan, dispatch model-requested tools and answer
"""

__version__ = "0.1.0"

from command_orchestrator.ai import AISpec, AITool, define_ai_wrapper_command
from command_orchestrator.core import (
    Command,
    CommandMeta,
    HookBus,
    OrchestratorConfig,
    Output,
    RunContext,
    Step,
    create_context,
    define_task,
    define_workflow,
    run_command,
    run_lifecycle,
)

__all__ = [
    "__version__",
    "AISpec",
    "AITool",
    "Command",
    "CommandMeta",
    "HookBus",
    "OrchestratorConfig",
    "Output",
    "RunContext",
    "Step",
    "create_context",
    "define_ai_wrapper_command",
    "define_task",
    "define_workflow",
    "run_command",
    "run_lifecycle",
]
