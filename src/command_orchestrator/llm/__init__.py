"""LLM package initialization."""

from command_orchestrator.llm.factory import LLMFactory
from command_orchestrator.llm.provider import (
    GenerateRequest,
    GenerateResponse,
    LLMProvider,
    ToolCall,
)
from command_orchestrator.llm.simulated_provider import SimulatedProvider

__all__ = [
    "GenerateRequest",
    "GenerateResponse",
    "LLMFactory",
    "LLMProvider",
    "SimulatedProvider",
    "ToolCall",
]
