"""Configuration management using pydantic-settings."""

from enum import Enum

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    AZURE_OPENAI = "azure_openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class FallbackConfidence(BaseModel):
    """Calibrated confidence reported by the keyword classifier, per rule family."""

    generic_default: float = Field(default=0.6, ge=0.0, le=1.0)
    keyword_match: float = Field(default=0.7, ge=0.0, le=1.0)
    profile: float = Field(default=0.8, ge=0.0, le=1.0)
    photo: float = Field(default=0.8, ge=0.0, le=1.0)
    document: float = Field(default=0.8, ge=0.0, le=1.0)
    invoice: float = Field(default=0.9, ge=0.0, le=1.0)
    contact: float = Field(default=0.9, ge=0.0, le=1.0)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # LLM Provider Configuration
    llm_provider: LLMProvider = Field(
        default=LLMProvider.OLLAMA,
        description="LLM provider used for classification and answers",
    )

    # Ollama Configuration
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama API host URL",
    )
    ollama_model: str = Field(
        default="llama3.2",
        description="Ollama model to use",
    )
    ollama_embedding_model: str = Field(
        default="nomic-embed-text",
        description="Ollama embedding model to use",
    )

    # OpenAI / Azure OpenAI Configuration
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI or Azure OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model, or deployment name when using Azure",
    )
    azure_openai_endpoint: str | None = Field(
        default=None,
        description="Azure OpenAI resource endpoint",
    )
    azure_openai_api_version: str = Field(
        default="2024-06-01",
        description="Azure OpenAI API version",
    )

    # Google Gemini Configuration
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Google Gemini model to use",
    )

    # Anthropic Configuration
    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key",
    )

    # ChromaDB Configuration
    chroma_host: str = Field(
        default="localhost",
        description="ChromaDB host",
    )
    chroma_port: int = Field(
        default=8000,
        description="ChromaDB port",
    )

    # Classification Configuration
    classifier_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for the intent classifier call",
    )
    classifier_max_tokens: int = Field(
        default=200,
        description="Token limit for the intent classifier answer",
    )
    answer_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for handler answers",
    )
    fallback_on_parse_error: bool = Field(
        default=True,
        description="Use keyword classification when the classifier answer has no usable INTENT line",
    )
    min_routing_confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Results below this confidence are routed to the generic handler (0 disables)",
    )
    fallback_confidence: FallbackConfidence = Field(
        default_factory=FallbackConfidence,
        description="Confidence constants reported by the keyword classifier",
    )
    request_timeout_seconds: float = Field(
        default=120.0,
        gt=0.0,
        description="Deadline for classifying and answering one question",
    )

    # Twin Configuration
    twin_timezone: str = Field(
        default="America/Chicago",
        description="IANA time zone the twin reports local time in",
    )
    twin_location: str = Field(
        default="Austin, Texas",
        description="Location label shown with the local time",
    )

    # Application Configuration
    server_port: int = Field(
        default=7071,
        description="HTTP port for the question API",
    )
    cors_allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000",
        description="Comma-separated origins echoed back in CORS responses",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )

    @property
    def chroma_url(self) -> str:
        """Get the full ChromaDB URL."""
        return f"http://{self.chroma_host}:{self.chroma_port}"

    @property
    def allowed_origins(self) -> list[str]:
        """Get the CORS origin allow-list."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def validate_provider_config(self) -> None:
        """Validate that required API keys are set for the selected provider."""
        if self.llm_provider == LLMProvider.OPENAI and not self.openai_api_key:
            raise ValueError("OpenAI API key is required when using OpenAI provider")
        elif self.llm_provider == LLMProvider.AZURE_OPENAI:
            if not self.openai_api_key:
                raise ValueError("OpenAI API key is required when using Azure OpenAI provider")
            if not self.azure_openai_endpoint:
                raise ValueError("Azure OpenAI endpoint is required when using Azure OpenAI provider")
        elif self.llm_provider == LLMProvider.GEMINI and not self.gemini_api_key:
            raise ValueError("Gemini API key is required when using Gemini provider")
        elif self.llm_provider == LLMProvider.ANTHROPIC and not self.anthropic_api_key:
            raise ValueError("Anthropic API key is required when using Anthropic provider")


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
