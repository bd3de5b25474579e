"""Google Gemini LLM provider implementation."""

import logging
from typing import Any

import google.generativeai as genai
from pydantic import BaseModel

from twin.llm.base import ContentPolicyError, EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)

BLOCKED_FINISH_REASONS = {"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}


class GeminiConfig(BaseModel):
    """Configuration for Gemini provider."""

    api_key: str
    model: str = "gemini-1.5-flash"
    embedding_model: str = "models/text-embedding-004"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 30


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation."""

    def __init__(self, config: GeminiConfig | None = None, **kwargs: Any) -> None:
        """Initialize Gemini provider.

        Args:
            config: Gemini configuration
            **kwargs: Additional configuration options
        """
        self.config = config or GeminiConfig(**kwargs)
        genai.configure(api_key=self.config.api_key)
        self.model = genai.GenerativeModel(self.config.model)

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding using Gemini's embedding model.

        Args:
            text: Text to embed

        Returns:
            EmbeddingResult with embedding vector
        """
        try:
            result = await genai.embed_content_async(
                model=self.config.embedding_model,
                content=text,
                task_type="retrieval_query",
            )

            return EmbeddingResult(
                embedding=result["embedding"],
                model=self.config.embedding_model,
                token_count=None,  # Gemini doesn't return token count for embeddings
            )

        except Exception as e:
            logger.error(f"Gemini embedding request failed: {e}")
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
        """Generate response using Gemini's chat model.

        Args:
            prompt: User prompt or question
            context: Optional context information
            system: Optional system instructions
            temperature: Override for the configured temperature
            max_tokens: Override for the configured token limit

        Returns:
            ResponseResult with generated response
        """
        full_prompt = prompt
        if context:
            full_prompt = f"Context: {context}\n\nQuestion: {prompt}"

        model = self.model
        if system:
            model = genai.GenerativeModel(self.config.model, system_instruction=system)

        try:
            response = await model.generate_content_async(
                full_prompt,
                generation_config=genai.types.GenerationConfig(
                    max_output_tokens=max_tokens or self.config.max_tokens,
                    temperature=self.config.temperature if temperature is None else temperature,
                ),
            )
        except Exception as e:
            logger.error(f"Gemini response request failed: {e}")
            raise RuntimeError(f"Failed to generate response: {e}")

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and feedback.block_reason:
            logger.warning(f"Gemini blocked the prompt: {feedback.block_reason}")
            raise ContentPolicyError(f"Prompt blocked: {feedback.block_reason}")

        finish_reason = response.candidates[0].finish_reason.name if response.candidates else None
        if finish_reason in BLOCKED_FINISH_REASONS:
            logger.warning(f"Gemini withheld the answer: {finish_reason}")
            raise ContentPolicyError(f"Answer withheld: {finish_reason}")

        return ResponseResult(
            content=response.text,
            model=self.config.model,
            token_count=response.usage_metadata.total_token_count
            if response.usage_metadata
            else None,
            finish_reason=finish_reason,
        )

    async def health_check(self) -> bool:
        """Check if Gemini service is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await genai.embed_content_async(
                model=self.config.embedding_model,
                content="health check",
            )
            return True
        except Exception as e:
            logger.warning(f"Gemini health check failed: {e}")
            return False
