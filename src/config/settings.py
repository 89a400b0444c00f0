"""Application configuration settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "recipe-rag-search"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_json: bool = False
    api_prefix: str = ""
    cors_allow_origins: list[str] = ["*"]
    request_timeout_seconds: float | None = None

    # Generative text provider
    llm_provider: Literal["openai", "gemini"] = "openai"
    # Must match the model the stored recipe vectors were built with
    embedding_provider: Literal["openai", "gemini"] = "openai"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_embedding_model: str = "embedding-001"
    gemini_embedding_task_type: str = "RETRIEVAL_QUERY"

    # Generation defaults (deterministic, permissive safety)
    generation_temperature: float = 0.0
    generation_top_k: int = 1
    generation_top_p: float = 1.0
    generation_safety_threshold: Literal[
        "BLOCK_NONE",
        "BLOCK_ONLY_HIGH",
        "BLOCK_MEDIUM_AND_ABOVE",
        "BLOCK_LOW_AND_ABOVE",
    ] = "BLOCK_NONE"
    generation_max_output_tokens: int | None = None

    # Retries against embedding / generation providers (1 = no retry)
    upstream_max_attempts: int = 1

    # PostgreSQL / pgvector (primary recipe store)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "recipes"
    recipes_table: str = "recipes"
    recipe_embedding_column: str = "recipe_text_embedding"

    # PostgreSQL (secondary image store)
    images_postgres_host: str = "localhost"
    images_postgres_port: int = 5432
    images_postgres_user: str = "postgres"
    images_postgres_password: str = "postgres"
    images_postgres_db: str = "recipe_images"
    images_table: str = "recipe_images"

    db_pool_min_size: int = 2
    db_pool_max_size: int = 10

    # Search Configuration
    vector_top_k: int = 5
    vector_num_candidates: int = 5000
    max_query_length: int = 500

    # Tracing
    otel_tracing_enabled: bool = False
    otel_service_name: str = "recipe-rag-search"
    otel_exporter_otlp_endpoint: str = "http://localhost:4318/v1/traces"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def postgres_dsn(self) -> str:
        """Primary store connection string."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def images_postgres_dsn(self) -> str:
        """Image store connection string."""
        return (
            f"postgresql://{self.images_postgres_user}:{self.images_postgres_password}"
            f"@{self.images_postgres_host}:{self.images_postgres_port}/{self.images_postgres_db}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
