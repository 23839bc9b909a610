"""Core configuration for the orchestrator."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIConfig(BaseSettings):
    """Configuration for the AI capability."""

    provider: Literal["openai", "simulated"] = Field(
        default="simulated",
        description="AI provider backing ctx.ai",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Override for OpenAI-compatible endpoints (e.g. a local Ollama)",
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier passed to the provider",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_tokens: int | None = Field(
        default=None,
        gt=0,
        description="Upper bound on generated tokens (None = provider default)",
    )

    model_config = SettingsConfigDict(
        env_prefix="COMMAND_ORCHESTRATOR_AI_",
        env_file=".env",
        extra="ignore",
    )


class TelemetryConfig(BaseSettings):
    """Configuration for the logging-backed telemetry capability."""

    enabled: bool = Field(
        default=True,
        description="Attach a telemetry capability to new run contexts",
    )

    model_config = SettingsConfigDict(
        env_prefix="COMMAND_ORCHESTRATOR_TELEMETRY_",
        env_file=".env",
        extra="ignore",
    )


class OrchestratorConfig(BaseSettings):
    """Main configuration for the orchestrator."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (hook tracing, DEBUG logs)",
    )
    json_logs: bool = Field(
        default=True,
        description="Emit logs as JSON lines",
    )
    filesystem_enabled: bool = Field(
        default=True,
        description="Attach a local filesystem capability rooted at cwd",
    )

    ai: AIConfig = Field(
        default_factory=AIConfig,
        description="AI configuration",
    )
    telemetry: TelemetryConfig = Field(
        default_factory=TelemetryConfig,
        description="Telemetry configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="COMMAND_ORCHESTRATOR_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()
