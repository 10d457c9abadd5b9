"""ragchat FastAPI application entry point.

Loads configuration from ``config/config.yaml``, ``.env`` and the
environment, configures structured logging, builds the collaborators and
the :class:`~ragchat.services.rag_service.RAGService`, and exposes them to
request handlers through ``app.state``.

Run with ``python -m ragchat.main`` or ``uvicorn ragchat.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from ragchat.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from ragchat.api.routes import router as api_router
from ragchat.config.loader import load_settings
from ragchat.config.settings import Settings
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.providers.extraction.document_text_extractor import DocumentTextExtractor
from ragchat.providers.llm.openai_provider import OpenAILLMProvider
from ragchat.services.rag_service import RAGService
from ragchat.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Return the OpenAI-compatible LLM provider, or ``None`` without an API key."""
    provider = OpenAILLMProvider(settings=app_settings)
    if provider.is_available():
        return provider
    _logger.warning(
        "llm_provider_unavailable",
        msg="OPENAI_API_KEY / OPENROUTER_API_KEY not set; ask, chat and summarize are disabled.",
    )
    return None


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider | None:
    """Select the embedding backend named by ``embedding_backend``.

    ``sentence_transformer`` runs a local model (optional dependency);
    anything else uses the OpenAI-compatible API.  Returns ``None`` when
    the chosen backend cannot run.
    """
    if app_settings.embedding_backend == "sentence_transformer":
        from ragchat.providers.embedding.sentence_transformer_embedding_provider import (
            SentenceTransformerEmbeddingProvider,
        )

        local = SentenceTransformerEmbeddingProvider(model_name=app_settings.embedding_model)
        if local.is_available():
            return local
        _logger.warning(
            "embedding_provider_unavailable",
            backend="sentence_transformer",
            msg="sentence-transformers is not installed.",
        )
        return None

    from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

    provider: IEmbeddingProvider = OpenAIEmbeddingProvider(settings=app_settings)
    if provider.is_available():
        return provider
    _logger.warning(
        "embedding_provider_unavailable",
        backend="openai",
        msg="No API key configured; ingestion and ask are disabled.",
    )
    return None


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every collaborator and the core service.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    llm = _build_llm_provider(app_settings)
    embedding_provider = _build_embedding_provider(app_settings)

    rag_service = RAGService(
        settings=app_settings,
        llm=llm,
        embedding_provider=embedding_provider,
        extractor=DocumentTextExtractor(),
    )

    return {
        "settings": app_settings,
        "rag_service": rag_service,
        "llm_provider_name": llm.get_provider_name() if llm else None,
        "embedding_provider_name": (
            embedding_provider.get_provider_name() if embedding_provider else None
        ),
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(app_settings: Settings):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Build all components on startup and publish them on ``app.state``."""
        components = _build_all(app_settings)
        for key, value in components.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=_VERSION,
            environment=app_settings.app_env,
            llm=components["llm_provider_name"],
            embedding=components["embedding_provider_name"],
            ready=components["rag_service"].is_ready,
        )

        yield

        _logger.info("app_shutdown")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or load_settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    application = FastAPI(
        title="ragchat API",
        version=_VERSION,
        description=(
            "Upload documents, ask questions answered from their content, "
            "chat with per-user memory, and summarise text or documents."
        ),
        lifespan=_make_lifespan(app_settings),
    )

    # Last added = first executed.
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    _settings = load_settings()
    uvicorn.run(
        "ragchat.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=_settings.app_env == "development",
    )
