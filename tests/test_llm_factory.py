"""Tests for LLM factory functions."""

from unittest.mock import patch

import openai
import pytest

from twin.config import LLMProvider as LLMProviderEnum
from twin.llm.anthropic import AnthropicProvider
from twin.llm.factory import create_embedding_provider, create_llm_provider
from twin.llm.ollama import OllamaProvider
from twin.llm.openai import OpenAIProvider


def _configure(mock_settings, **overrides):
    mock_settings.ollama_host = "http://test:11434"
    mock_settings.ollama_model = "llama3.2"
    mock_settings.ollama_embedding_model = "nomic-embed-text"
    mock_settings.openai_model = "gpt-4o-mini"
    mock_settings.openai_api_key = None
    mock_settings.azure_openai_endpoint = None
    mock_settings.azure_openai_api_version = "2024-06-01"
    mock_settings.anthropic_api_key = None
    for name, value in overrides.items():
        setattr(mock_settings, name, value)


class TestLLMFactory:
    """Test LLM factory functions."""

    @patch("twin.llm.factory.get_settings")
    def test_create_ollama_provider(self, mock_get_settings):
        """Test creating Ollama provider."""
        _configure(mock_get_settings.return_value, llm_provider=LLMProviderEnum.OLLAMA)

        provider = create_llm_provider()
        assert isinstance(provider, OllamaProvider)
        assert provider.config.host == "http://test:11434"
        assert provider.config.model == "llama3.2"

    @patch("twin.llm.factory.get_settings")
    def test_create_openai_provider(self, mock_get_settings):
        """Test creating OpenAI provider."""
        _configure(
            mock_get_settings.return_value,
            llm_provider=LLMProviderEnum.OPENAI,
            openai_api_key="test-key",
        )

        provider = create_llm_provider()
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.api_key == "test-key"
        assert isinstance(provider.client, openai.AsyncOpenAI)

    @patch("twin.llm.factory.get_settings")
    def test_create_azure_openai_provider(self, mock_get_settings):
        """Test creating an Azure OpenAI provider."""
        _configure(
            mock_get_settings.return_value,
            llm_provider=LLMProviderEnum.AZURE_OPENAI,
            openai_api_key="test-key",
            azure_openai_endpoint="https://twin.openai.azure.com",
        )

        provider = create_llm_provider()
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.azure_endpoint == "https://twin.openai.azure.com"
        assert isinstance(provider.client, openai.AsyncAzureOpenAI)

    @patch("twin.llm.factory.get_settings")
    def test_create_azure_openai_provider_missing_endpoint(self, mock_get_settings):
        """Test creating an Azure OpenAI provider without an endpoint."""
        _configure(
            mock_get_settings.return_value,
            llm_provider=LLMProviderEnum.AZURE_OPENAI,
            openai_api_key="test-key",
        )

        with pytest.raises(ValueError, match="Azure OpenAI endpoint is required"):
            create_llm_provider()

    @patch("twin.llm.factory.get_settings")
    def test_create_openai_provider_missing_key(self, mock_get_settings):
        """Test creating OpenAI provider without API key."""
        _configure(mock_get_settings.return_value, llm_provider=LLMProviderEnum.OPENAI)

        with pytest.raises(ValueError, match="OpenAI API key is required"):
            create_llm_provider()

    @patch("twin.llm.factory.get_settings")
    def test_create_anthropic_provider(self, mock_get_settings):
        """Test creating Anthropic provider."""
        _configure(
            mock_get_settings.return_value,
            llm_provider=LLMProviderEnum.ANTHROPIC,
            anthropic_api_key="test-key",
        )

        provider = create_llm_provider()
        assert isinstance(provider, AnthropicProvider)

    @patch("twin.llm.factory.get_settings")
    def test_create_embedding_provider_anthropic_fallback(self, mock_get_settings):
        """Test embedding provider fallback for Anthropic."""
        _configure(
            mock_get_settings.return_value,
            llm_provider=LLMProviderEnum.ANTHROPIC,
            openai_api_key="test-key",
        )

        provider = create_embedding_provider()
        assert isinstance(provider, OpenAIProvider)

    @patch("twin.llm.factory.get_settings")
    def test_create_embedding_provider_anthropic_fallback_ollama(self, mock_get_settings):
        """Test embedding provider fallback to Ollama for Anthropic."""
        _configure(mock_get_settings.return_value, llm_provider=LLMProviderEnum.ANTHROPIC)

        provider = create_embedding_provider()
        assert isinstance(provider, OllamaProvider)

    @patch("twin.llm.factory.get_settings")
    def test_unknown_provider(self, mock_get_settings):
        """Test creating an unknown provider."""
        _configure(mock_get_settings.return_value, llm_provider=LLMProviderEnum.OLLAMA)

        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_llm_provider("mistral")
