"""In-process embeddings from a HuggingFace sentence-transformers model.

Needs no API key.  ``sentence-transformers`` ships as the optional
``local`` extra and is imported the first time text is embedded, so the
rest of the app starts without it.  ``encode`` is CPU-bound and runs in a
worker thread.
"""

from __future__ import annotations

import asyncio
import importlib.util
from typing import Any

import structlog

from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
_ENCODE_BATCH = 64
_DEFAULT_WIDTH = 384


class SentenceTransformerEmbeddingProvider(IEmbeddingProvider):
    """Local embedding backend; vectors come back L2-normalised."""

    def __init__(self, model_name: str | None = None) -> None:
        self._model_name = model_name or _DEFAULT_MODEL
        self._width = _DEFAULT_WIDTH
        self._encoder: Any = None

    def _load_model(self) -> Any:
        if self._encoder is None:
            logger.info("local_embedding_model_loading", model=self._model_name)
            try:
                from sentence_transformers import SentenceTransformer

                encoder = SentenceTransformer(self._model_name)
            except Exception as exc:
                raise EmbeddingError(
                    message=f"Could not load local model {self._model_name!r}: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            self._width = encoder.get_sentence_embedding_dimension() or self._width
            self._encoder = encoder
            logger.info("local_embedding_model_ready", model=self._model_name, width=self._width)
        return self._encoder

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        encoder = self._load_model()

        vectors: list[list[float]] = []
        try:
            for offset in range(0, len(texts), _ENCODE_BATCH):
                matrix = await asyncio.to_thread(
                    encoder.encode,
                    texts[offset : offset + _ENCODE_BATCH],
                    normalize_embeddings=True,
                    show_progress_bar=False,
                )
                vectors.extend(matrix.tolist())
        except Exception as exc:
            raise EmbeddingError(
                message=f"Local encoding failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        [vector] = await self.embed([text])
        return vector

    def get_dimension(self) -> int:
        return self._width

    def get_provider_name(self) -> str:
        short_name = self._model_name.rsplit("/", 1)[-1]
        return f"sentence_transformer_{short_name}"

    def is_available(self) -> bool:
        return importlib.util.find_spec("sentence_transformers") is not None
