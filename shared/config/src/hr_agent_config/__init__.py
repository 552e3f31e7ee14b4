"""Configuration management for HR Agent.

This module provides centralized configuration using Pydantic Settings.
All services should use get_settings() instead of os.getenv() directly.
Configuration is loaded from environment variables and .env files.

Example:
    >>> from hr_agent_config import get_settings
    >>> settings = get_settings()
    >>> db_url = settings.database.connection_string
    >>> model_name = settings.llm.chat_model_name
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_MESSAGE = "You are helpful HR Chatbot Agent."


class Environment(str, Enum):
    """Application environment enum."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class DatabaseConfig(BaseSettings):
    """PostgreSQL database configuration.

    Loads configuration from environment variables with POSTGRES_ prefix.
    The database stores per-thread conversation state.

    Attributes:
        host: Database host address
        port: Database port number
        db: Database name
        user: Database username
        password: Database password (required)
    """

    model_config = SettingsConfigDict(
        env_prefix="POSTGRES_",
        env_file=".env",
        extra="ignore"
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="hr_database", description="Database name")
    user: str = Field(default="hragent", description="Database username")
    password: str = Field(description="Database password (required)")

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection URL.

        Returns:
            PostgreSQL connection string for SQLAlchemy
        """
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"


class QdrantConfig(BaseSettings):
    """Qdrant vector database configuration.

    Loads configuration from environment variables with QDRANT_ prefix.
    The collection holds one point per employee record.

    Attributes:
        host: Qdrant host address
        port: Qdrant port number
        collection_name: Name of the employee vector collection
    """

    model_config = SettingsConfigDict(
        env_prefix="QDRANT_",
        env_file=".env",
        extra="ignore"
    )

    host: str = Field(default="localhost", description="Qdrant host")
    port: int = Field(default=6333, description="Qdrant port")
    collection_name: str = Field(
        default="employees",
        description="Employee vector collection name"
    )

    @property
    def url(self) -> str:
        """Build Qdrant connection URL.

        Returns:
            Qdrant HTTP API URL
        """
        return f"http://{self.host}:{self.port}"


class LLMConfig(BaseSettings):
    """LLM configuration with environment-aware model selection.

    Switches between Ollama (development) and OpenRouter (production)
    based on the environment setting. OpenRouter is reached through the
    OpenAI-compatible chat client; production embeddings come from OpenAI.

    Attributes:
        environment: Current application environment
        ollama_base_url: Ollama API base URL
        ollama_model: Ollama chat model name
        ollama_embedding_model: Ollama embedding model name
        openrouter_api_key: OpenRouter API key (required for production)
        openrouter_base_url: OpenRouter OpenAI-compatible endpoint
        openrouter_model: OpenRouter chat model name
        http_referer: Referer header sent to OpenRouter
        app_title: Application title header sent to OpenRouter
        openai_api_key: OpenAI API key for embeddings (production)
        openai_embedding_model: OpenAI embedding model name
        max_tokens: Maximum tokens per completion
        max_retries: Client-side retries for LLM calls
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )

    # Ollama configuration (development)
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama API base URL"
    )
    ollama_model: str = Field(
        default="mistral",
        description="Ollama chat model"
    )
    ollama_embedding_model: str = Field(
        default="nomic-embed-text",
        description="Ollama embedding model"
    )

    # OpenRouter configuration (production)
    openrouter_api_key: str | None = Field(
        default=None,
        description="OpenRouter API key"
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL"
    )
    openrouter_model: str = Field(
        default="mistralai/mistral-7b-instruct",
        description="OpenRouter chat model"
    )
    http_referer: str = Field(
        default="http://localhost:3000",
        description="HTTP-Referer header for OpenRouter"
    )
    app_title: str = Field(
        default="HR Chatbot Agent",
        description="X-Title header for OpenRouter"
    )

    # OpenAI configuration (production embeddings)
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key"
    )
    openai_embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model"
    )

    max_tokens: int = Field(default=1000, ge=1, description="Maximum completion tokens")
    max_retries: int = Field(default=3, ge=0, description="LLM client retries")

    @property
    def is_local(self) -> bool:
        """Check if using local Ollama models.

        Returns:
            True if environment is development, False otherwise
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def chat_model_name(self) -> str:
        """Get the appropriate chat model name for current environment.

        Returns:
            Ollama model name if development, OpenRouter model name if production
        """
        return self.ollama_model if self.is_local else self.openrouter_model

    @property
    def embedding_model_name(self) -> str:
        """Get the appropriate embedding model name for current environment.

        Returns:
            Ollama embedding model if development, OpenAI embedding model
            if production
        """
        return (
            self.ollama_embedding_model
            if self.is_local
            else self.openai_embedding_model
        )

    @property
    def default_headers(self) -> dict[str, str]:
        """Get attribution headers expected by OpenRouter.

        Returns:
            Dict with HTTP-Referer and X-Title headers
        """
        return {
            "HTTP-Referer": self.http_referer,
            "X-Title": self.app_title,
        }


class AgentConfig(BaseSettings):
    """Conversational agent configuration.

    Loads configuration from environment variables with AGENT_ prefix.

    Attributes:
        recursion_limit: Maximum graph steps per invocation
        default_lookup_results: Default number of employee search results
        temperature: Sampling temperature for the agent model
        system_message: Persona line injected into the system prompt
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file=".env",
        extra="ignore"
    )

    recursion_limit: int = Field(
        default=15,
        ge=2,
        le=100,
        description="Maximum graph steps per invocation"
    )
    default_lookup_results: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Default number of employee lookup results"
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Agent model temperature"
    )
    system_message: str = Field(
        default=DEFAULT_SYSTEM_MESSAGE,
        description="Persona line for the system prompt"
    )


class SeedConfig(BaseSettings):
    """Database seeding configuration.

    Loads configuration from environment variables with SEED_ prefix.
    Controls synthetic data generation and the throttled insert queue.

    Attributes:
        rate_limit_ms: Minimum spacing between insert job starts
        max_retries: Retries per rate-limited insert job
        record_count: Number of employee records to generate
        retry_delay_seconds: Wait before regenerating after an empty batch
        max_attempts: Generation attempts before giving up
        temperature: Sampling temperature for data generation
    """

    model_config = SettingsConfigDict(
        env_prefix="SEED_",
        env_file=".env",
        extra="ignore"
    )

    rate_limit_ms: int = Field(
        default=2000,
        ge=0,
        description="Minimum spacing between insert job starts (ms)"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries per rate-limited insert"
    )
    record_count: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Number of employee records to generate"
    )
    retry_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Wait before regenerating after an empty batch"
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Generation attempts before giving up"
    )
    temperature: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="LLM temperature for data generation"
    )


class Settings(BaseSettings):
    """Master configuration class for HR Agent.

    Aggregates all configuration sections and provides access to them
    through properties. Loads configuration from environment variables
    and .env file.

    Attributes:
        environment: Current application environment (DEVELOPMENT/PRODUCTION)
        port: HTTP port for the API server
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )
    port: int = Field(default=3000, description="HTTP port for the API server")

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration.

        Returns:
            DatabaseConfig instance with PostgreSQL settings
        """
        return DatabaseConfig()

    @property
    def qdrant(self) -> QdrantConfig:
        """Get Qdrant configuration.

        Returns:
            QdrantConfig instance with vector database settings
        """
        return QdrantConfig()

    @property
    def llm(self) -> LLMConfig:
        """Get LLM configuration.

        Returns:
            LLMConfig instance with environment-aware model settings
        """
        return LLMConfig(environment=self.environment)

    @property
    def agent(self) -> AgentConfig:
        """Get agent configuration.

        Returns:
            AgentConfig instance with graph and tool settings
        """
        return AgentConfig()

    @property
    def seed(self) -> SeedConfig:
        """Get seeding configuration.

        Returns:
            SeedConfig instance with generation and throttling settings
        """
        return SeedConfig()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns a singleton Settings instance that is cached after first call.
    This ensures configuration is loaded only once and reused across the
    application.

    Returns:
        Settings instance with all configuration sections

    Example:
        >>> settings = get_settings()
        >>> db_url = settings.database.connection_string
        >>> is_dev = settings.llm.is_local
    """
    return Settings()


__all__ = [
    "Environment",
    "DatabaseConfig",
    "QdrantConfig",
    "LLMConfig",
    "AgentConfig",
    "SeedConfig",
    "Settings",
    "get_settings",
]
