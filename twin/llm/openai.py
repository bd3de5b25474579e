"""OpenAI and Azure OpenAI LLM provider implementation."""

import logging
from typing import Any

import openai
from pydantic import BaseModel

from twin.llm.base import ContentPolicyError, EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)

CONTENT_FILTER = "content_filter"


class OpenAIConfig(BaseModel):
    """Configuration for OpenAI provider.

    Setting ``azure_endpoint`` switches the client to Azure OpenAI, where
    ``model`` is the deployment name.
    """

    api_key: str
    model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30
    max_retries: int = 3
    azure_endpoint: str | None = None
    api_version: str = "2024-06-01"


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation."""

    def __init__(self, config: OpenAIConfig | None = None, **kwargs: Any) -> None:
        """Initialize OpenAI provider.

        Args:
            config: OpenAI configuration
            **kwargs: Additional configuration options
        """
        self.config = config or OpenAIConfig(**kwargs)
        if self.config.azure_endpoint:
            self.client = openai.AsyncAzureOpenAI(
                api_key=self.config.api_key,
                azure_endpoint=self.config.azure_endpoint,
                api_version=self.config.api_version,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )
        else:
            self.client = openai.AsyncOpenAI(
                api_key=self.config.api_key,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding using OpenAI's embedding model.

        Args:
            text: Text to embed

        Returns:
            EmbeddingResult with embedding vector
        """
        try:
            response = await self.client.embeddings.create(
                model=self.config.embedding_model,
                input=text,
            )

            embedding_data = response.data[0]

            return EmbeddingResult(
                embedding=embedding_data.embedding,
                model=self.config.embedding_model,
                token_count=response.usage.total_tokens,
            )

        except openai.OpenAIError as e:
            logger.error(f"OpenAI embedding request failed: {e}")
            raise RuntimeError(f"Failed to generate embedding: {e}")

    async def generate_response(
        self,
        prompt: str,
        context: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using OpenAI's chat model.

        Args:
            prompt: User prompt or question
            context: Optional context information
            system: Optional system instructions
            temperature: Override for the configured temperature
            max_tokens: Override for the configured token limit

        Returns:
            ResponseResult with generated response
        """
        messages = []

        if system:
            messages.append({"role": "system", "content": system})

        if context:
            messages.append(
                {
                    "role": "system",
                    "content": f"Use the following context to answer the user's question: {context}",
                }
            )

        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                max_tokens=max_tokens or self.config.max_tokens,
                temperature=self.config.temperature if temperature is None else temperature,
            )

        except openai.BadRequestError as e:
            if getattr(e, "code", None) == CONTENT_FILTER:
                logger.warning(f"OpenAI request blocked by content filter: {e}")
                raise ContentPolicyError(f"Request blocked by content filter: {e}")
            logger.error(f"OpenAI response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")
        except openai.OpenAIError as e:
            logger.error(f"OpenAI response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")

        choice = response.choices[0]

        if choice.finish_reason == CONTENT_FILTER:
            logger.warning("OpenAI answer withheld by content filter")
            raise ContentPolicyError("Answer withheld by content filter")

        return ResponseResult(
            content=choice.message.content or "",
            model=self.config.model,
            token_count=response.usage.total_tokens if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    async def health_check(self) -> bool:
        """Check if OpenAI service is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.client.models.list()
            return True
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False
