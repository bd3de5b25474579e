"""Ollama LLM provider implementation."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from twin.llm.base import EmbeddingResult, LLMProvider, ResponseResult

logger = logging.getLogger(__name__)


class OllamaConfig(BaseModel):
    """Configuration for Ollama provider."""

    host: str = "http://localhost:11434"
    model: str = "llama3.2"
    embedding_model: str = "nomic-embed-text"
    temperature: float = 0.7
    timeout: int = 30
    generate_timeout: float = 180.0


class OllamaProvider(LLMProvider):
    """Ollama LLM provider implementation."""

    def __init__(self, config: OllamaConfig | None = None, **kwargs: Any) -> None:
        """Initialize Ollama provider.

        Args:
            config: Ollama configuration
            **kwargs: Additional configuration options
        """
        self.config = config or OllamaConfig(**kwargs)
        self.client = httpx.AsyncClient(
            base_url=self.config.host,
            timeout=self.config.timeout,
        )

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding using Ollama's embedding model.

        Args:
            text: Text to embed

        Returns:
            EmbeddingResult with embedding vector
        """
        try:
            response = await self.client.post(
                "/api/embed",
                json={
                    "model": self.config.embedding_model,
                    "input": text,
                },
            )
            response.raise_for_status()
            data = response.json()

            # Ollama returns a list of embeddings, one per input
            embedding = data["embeddings"][0] if data.get("embeddings") else []

            return EmbeddingResult(
                embedding=embedding,
                model=self.config.embedding_model,
                token_count=None,  # Ollama doesn't return token count for embeddings
            )

        except httpx.RequestError as e:
            logger.error(f"Ollama embedding request failed: {e}")
            raise RuntimeError(f"Failed to generate embedding: {e}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama embedding HTTP error: {e}")
            raise RuntimeError(f"Ollama API error: {e}")

    async def generate_response(
        self,
        prompt: str,
        context: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ResponseResult:
        """Generate response using Ollama's generate endpoint.

        Args:
            prompt: User prompt or question
            context: Optional context information
            system: Optional system instructions
            temperature: Override for the configured temperature
            max_tokens: Optional cap on generated tokens

        Returns:
            ResponseResult with generated response
        """
        full_prompt = prompt
        if context:
            full_prompt = f"Context: {context}\n\nQuestion: {prompt}"

        options: dict[str, Any] = {
            "temperature": self.config.temperature if temperature is None else temperature,
        }
        if max_tokens:
            options["num_predict"] = max_tokens

        payload: dict[str, Any] = {
            "model": self.config.model,
            "prompt": full_prompt,
            "stream": False,
            "options": options,
        }
        if system:
            payload["system"] = system

        try:
            logger.debug(f"Sending request to Ollama with model: {self.config.model}")
            logger.debug(f"Prompt length: {len(full_prompt)} characters")

            response = await self.client.post(
                "/api/generate",
                json=payload,
                timeout=self.config.generate_timeout,
            )
            response.raise_for_status()
            data = response.json()

            return ResponseResult(
                content=data["response"],
                model=self.config.model,
                token_count=data.get("eval_count"),
                finish_reason=data.get("done_reason"),
            )

        except httpx.TimeoutException as e:
            logger.error(f"Ollama request timed out after {self.config.generate_timeout}s: {e}")
            raise RuntimeError(f"Ollama request timed out: {e}")
        except httpx.RequestError as e:
            logger.error(f"Ollama response request failed: {e}")
            logger.error(f"Model: {self.config.model}, Host: {self.config.host}")
            raise RuntimeError(f"Failed to generate response: {e}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama response HTTP error: {e}")
            logger.error(f"Status: {e.response.status_code}")
            raise RuntimeError(f"Ollama API error: {e}")

    async def health_check(self) -> bool:
        """Check if Ollama service is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = await self.client.get("/api/tags")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
