"""Application settings loaded from environment variables via pydantic-settings.

Sources, highest priority first:

  1. Environment variables (``OPENAI_API_KEY=...``)
  2. ``.env`` in the working directory
  3. ``config/config.yaml`` (merged in by :func:`ragchat.config.loader.load_settings`)
  4. The defaults below

Field ``openai_api_key`` maps to ``OPENAI_API_KEY``; it also accepts
``OPENROUTER_API_KEY`` since OpenRouter is the default endpoint.
"""

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ragchat.utils.errors import ConfigurationError

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class Settings(BaseSettings):
    """ragchat application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === Generation / embedding endpoint ===
    # Empty key = "not configured"; the app starts but reports "initializing".
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("openai_api_key", "openrouter_api_key"),
    )
    openai_base_url: str = OPENROUTER_BASE_URL
    chat_model: str = "google/gemma-2-9b-it"
    embedding_backend: str = "openai"  # "openai" | "sentence_transformer"
    embedding_model: str = "text-embedding-3-small"

    # === Ingestion ===
    chunk_size: int = 1000
    chunk_overlap: int = 200
    max_upload_bytes: int = 10 * 1024 * 1024

    # === Retrieval / synthesis ===
    retrieval_top_k: int = 3
    answer_timeout_seconds: float = 10.0
    chat_timeout_seconds: float | None = None
    embedding_timeout_seconds: float = 30.0
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1000
    max_concurrent_generations: int = 8

    # === Summarization ===
    summary_max_input_chars: int = 3000
    summary_timeout_seconds: float = 30.0

    # === Conversational memory ===
    memory_session_ttl_seconds: int = 86400
    memory_max_sessions: int = 10000
    memory_max_messages: int = 0  # 0 = keep every message
    default_user_id: str = "default"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunking(self) -> "Settings":
        if self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigurationError("chunk_overlap must be >= 0 and smaller than chunk_size")
        if self.retrieval_top_k <= 0:
            raise ConfigurationError("retrieval_top_k must be positive")
        return self

    def get_available_providers(self) -> list[str]:
        """Return the collaborator backends that have enough configuration to run."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("llm")
        if self.embedding_backend == "sentence_transformer" or self.openai_api_key:
            providers.append("embedding")
        return providers
