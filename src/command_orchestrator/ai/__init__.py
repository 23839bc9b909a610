"""AI wrapper commands and their tools."""

from command_orchestrator.ai.command import (
    AI_MEMO_KEY,
    AIPlanResult,
    AISpec,
    AIWrapperCommand,
    BoundAI,
    define_ai_wrapper_command,
)
from command_orchestrator.ai.tools import AITool, ToolRegistry, ToolResult

__all__ = [
    "AI_MEMO_KEY",
    "AIPlanResult",
    "AISpec",
    "AITool",
    "AIWrapperCommand",
    "BoundAI",
    "ToolRegistry",
    "ToolResult",
    "define_ai_wrapper_command",
]
