"""Offline provider used when no real AI backend is configured."""

import logging

from command_orchestrator.llm.provider import GenerateRequest, GenerateResponse, LLMProvider

logger = logging.getLogger(__name__)


class SimulatedProvider(LLMProvider):
    """Echoes the prompt back instead of calling a model.

    Never requests tools, so commands run end-to-end without network access.
    """

    def __init__(self, model: str = "simulated") -> None:
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        logger.info(
            "Simulated AI generation",
            extra={
                "model": self._model,
                "prompt": request.prompt,
                "tools": sorted(request.tools or {}),
                "system": request.system,
            },
        )
        return GenerateResponse(text=f"[Simulated AI response for: {request.prompt}]")
