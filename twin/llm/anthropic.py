"""Anthropic Claude LLM provider implementation."""

import logging
from typing import Any

import anthropic
from pydantic import BaseModel

from twin.llm.base import ContentPolicyError, EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class AnthropicConfig(BaseModel):
    """Configuration for Anthropic provider."""

    api_key: str
    model: str = "claude-3-5-haiku-20241022"
    # Note: Anthropic doesn't provide embeddings, so another provider serves search
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation."""

    def __init__(self, config: AnthropicConfig | None = None, **kwargs: Any) -> None:
        """Initialize Anthropic provider.

        Args:
            config: Anthropic configuration
            **kwargs: Additional configuration options
        """
        self.config = config or AnthropicConfig(**kwargs)
        self.client = anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            timeout=self.config.timeout,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding - Anthropic doesn't provide embeddings.

        Raises:
            NotImplementedError: Anthropic doesn't provide embeddings
        """
        raise NotImplementedError(
            "Anthropic doesn't provide embeddings. Use a different provider for embeddings "
            "(e.g., OpenAI or Ollama)."
        )

    async def generate_response(
        self,
        prompt: str,
        context: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using Anthropic's Claude model.

        Args:
            prompt: User prompt or question
            context: Optional context information
            system: Optional system instructions
            temperature: Override for the configured temperature
            max_tokens: Override for the configured token limit

        Returns:
            ResponseResult with generated response
        """
        if context:
            content = f"Context: {context}\n\nQuestion: {prompt}"
        else:
            content = prompt

        request: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            request["system"] = system

        try:
            response = await self.client.messages.create(**request)

        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")

        if response.stop_reason == "refusal":
            logger.warning("Anthropic declined the request under its usage policy")
            raise ContentPolicyError("Request refused by content policy")

        # Anthropic returns content as a list of blocks
        text = ""
        for block in response.content:
            if block.type == "text":
                text += block.text

        return ResponseResult(
            content=text,
            model=self.config.model,
            token_count=response.usage.output_tokens + response.usage.input_tokens,
            finish_reason=response.stop_reason,
        )

    async def health_check(self) -> bool:
        """Check if Anthropic service is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.client.messages.create(
                model=self.config.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "Hi"}],
            )
            return True
        except Exception as e:
            logger.warning(f"Anthropic health check failed: {e}")
            return False
