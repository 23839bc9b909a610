"""Core package initialization."""

from command_orchestrator.core.command import ArgSpec, Command, CommandMeta, run_command
from command_orchestrator.core.config import AIConfig, OrchestratorConfig, TelemetryConfig
from command_orchestrator.core.context import RunContext, build_context, create_context
from command_orchestrator.core.errors import (
    CapabilityMissingError,
    DuplicateToolError,
    OrchestratorError,
    ToolNotFoundError,
    ValidationError,
    WorkflowDefinitionError,
)
from command_orchestrator.core.hooks import (
    HookBus,
    HookName,
    get_default_hooks,
    register_core_hooks,
    set_default_hooks,
)
from command_orchestrator.core.lifecycle import (
    SUCCESS_SEQUENCE,
    Output,
    render_output,
    run_lifecycle,
)
from command_orchestrator.core.plugins import PluginRegistry
from command_orchestrator.core.task import Task, define_task
from command_orchestrator.core.workflow import Step, Workflow, define_workflow

__all__ = [
    "AIConfig",
    "ArgSpec",
    "CapabilityMissingError",
    "Command",
    "CommandMeta",
    "DuplicateToolError",
    "HookBus",
    "HookName",
    "OrchestratorConfig",
    "OrchestratorError",
    "Output",
    "PluginRegistry",
    "RunContext",
    "SUCCESS_SEQUENCE",
    "Step",
    "Task",
    "TelemetryConfig",
    "ToolNotFoundError",
    "ValidationError",
    "Workflow",
    "WorkflowDefinitionError",
    "build_context",
    "create_context",
    "define_task",
    "define_workflow",
    "get_default_hooks",
    "register_core_hooks",
    "run_command",
    "render_output",
    "run_lifecycle",
    "set_default_hooks",
]
