"""OpenAI LLM provider implementation."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from openai import AsyncOpenAI

from command_orchestrator.core.config import AIConfig
from command_orchestrator.llm.provider import (
    GenerateRequest,
    GenerateResponse,
    LLMProvider,
    ToolCall,
)

logger = logging.getLogger(__name__)

# Function-calling parameters must be a JSON object; scalar contracts are
# wrapped under this property and unwrapped again when the call comes back.
_WRAPPED_INPUT = "input"


def _tool_parameters(schema: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    if schema.get("type") == "object":
        return schema, False
    return {
        "type": "object",
        "properties": {_WRAPPED_INPUT: schema},
        "required": [_WRAPPED_INPUT],
    }, True


class OpenAIProvider(LLMProvider):
    """OpenAI API provider implementation."""

    def __init__(self, config: AIConfig, client: AsyncOpenAI | None = None) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: AI configuration.
            client: Pre-built client (tests inject a fake here).

        Raises:
            ValueError: If API key is not provided.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.client = client or AsyncOpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
        )
        self._model = config.model
        self.temperature = config.temperature

        logger.info(f"OpenAI provider initialized with model: {self._model}")

    @property
    def model(self) -> str:
        return self._model

    def _tool_declarations(
        self, tools: Mapping[str, Any]
    ) -> tuple[list[dict[str, Any]], set[str]]:
        declarations: list[dict[str, Any]] = []
        wrapped: set[str] = set()
        for name, tool in tools.items():
            parameters, is_wrapped = _tool_parameters(tool.input_contract.json_schema())
            if is_wrapped:
                wrapped.add(name)
            declarations.append(
                {
                    "type": "function",
                    "function": {
                        "name": name,
                        "description": tool.description,
                        "parameters": parameters,
                    },
                }
            )
        return declarations, wrapped

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate a completion using the OpenAI chat completions API.

        Args:
            request: Prompt, optional tools and system prompt.

        Returns:
            Generated text and any tool calls the model requested.
        """
        messages: list[dict[str, str]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        kwargs: dict[str, Any] = {}
        wrapped: set[str] = set()
        if request.tools:
            kwargs["tools"], wrapped = self._tool_declarations(request.tools)
        if self.config.max_tokens is not None:
            kwargs["max_tokens"] = self.config.max_tokens

        logger.debug(f"Generating completion for prompt: {request.prompt[:100]}...")

        response = await self.client.chat.completions.create(
            model=self._model,
            messages=messages,  # type: ignore[arg-type]
            temperature=self.temperature,
            **kwargs,
        )

        message = response.choices[0].message
        content = message.content or ""
        tool_calls = tuple(
            self._parse_tool_call(call.function.name, call.function.arguments, wrapped)
            for call in (message.tool_calls or ())
        )
        logger.debug(
            f"Generated {len(content)} characters",
            extra={"tool_calls": [c.name for c in tool_calls]},
        )

        return GenerateResponse(text=content, tool_calls=tool_calls)

    @staticmethod
    def _parse_tool_call(name: str, arguments: str, wrapped: set[str]) -> ToolCall:
        try:
            args: Any = json.loads(arguments) if arguments else {}
        except json.JSONDecodeError:
            # Left raw; the tool's input contract rejects it during dispatch.
            args = arguments
        if name in wrapped and isinstance(args, dict):
            args = args.get(_WRAPPED_INPUT)
        return ToolCall(name=name, args=args)
