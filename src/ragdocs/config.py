"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Embedding
    embedding_provider: str = Field(default="ollama", description="Embedding provider: 'ollama' or 'openai'")
    embedding_model: str | None = Field(default=None, description="Model override; provider default when unset")
    embedding_dimensions: int | None = Field(
        default=None,
        description="Vector size override for models missing from the provider's known-model table",
    )
    openai_api_key: str = Field(default="", description="OpenAI API key (required for the openai provider)")
    ollama_url: str = "http://localhost:11434"
    embedding_timeout: float = 60.0

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    collection_name: str = "documentation"
    scroll_batch_size: int = 256

    # Acquisition
    chunk_size: int = 1000
    max_pdf_bytes: int = 20 * 1024 * 1024
    head_timeout: float = 5.0
    download_timeout: float = 15.0
    page_timeout_ms: int = 30_000

    # Retrieval
    default_search_limit: int = 5

    # Serving
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Module-level instance shared by all components.
settings = Settings()
