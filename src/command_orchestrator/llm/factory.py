"""Factory for creating LLM providers."""

import logging

from command_orchestrator.core.config import AIConfig
from command_orchestrator.llm.openai_provider import OpenAIProvider
from command_orchestrator.llm.provider import LLMProvider
from command_orchestrator.llm.simulated_provider import SimulatedProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(config: AIConfig) -> LLMProvider:
        """Create an LLM provider based on configuration.

        Args:
            config: AI configuration specifying the provider.

        Returns:
            Configured LLM provider instance.

        Raises:
            ValueError: If provider type is not supported.
        """
        logger.info(f"Creating LLM provider: {config.provider}")

        if config.provider == "openai":
            return OpenAIProvider(config)
        elif config.provider == "simulated":
            return SimulatedProvider(model=config.model)
        else:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
