"""LLM providers module."""

from twin.llm.anthropic import AnthropicConfig, AnthropicProvider
from twin.llm.base import ContentPolicyError, LLMProvider, LLMProviderFactory, ResponseResult
from twin.llm.factory import create_embedding_provider, create_llm_provider
from twin.llm.gemini import GeminiConfig, GeminiProvider
from twin.llm.ollama import OllamaConfig, OllamaProvider
from twin.llm.openai import OpenAIConfig, OpenAIProvider

# Register all providers
LLMProviderFactory.register("ollama", OllamaProvider)
LLMProviderFactory.register("openai", OpenAIProvider)
LLMProviderFactory.register("gemini", GeminiProvider)
LLMProviderFactory.register("anthropic", AnthropicProvider)

__all__ = [
    "AnthropicConfig",
    "AnthropicProvider",
    "ContentPolicyError",
    "GeminiConfig",
    "GeminiProvider",
    "LLMProvider",
    "LLMProviderFactory",
    "OllamaConfig",
    "OllamaProvider",
    "OpenAIConfig",
    "OpenAIProvider",
    "ResponseResult",
    "create_embedding_provider",
    "create_llm_provider",
]
