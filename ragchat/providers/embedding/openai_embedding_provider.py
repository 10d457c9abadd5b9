"""Embeddings through any endpoint that speaks the OpenAI embeddings protocol.

The request goes to ``settings.openai_base_url`` (OpenRouter unless
overridden).  Long inputs are sent in slices no larger than the API's
per-request ceiling, and the vector width reported by :meth:`get_dimension`
is corrected from the first real response.
"""

from __future__ import annotations

from collections.abc import Iterator

import openai
import structlog

from ragchat.config.settings import Settings
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

# Per-request input ceiling of the embeddings endpoint.
_MAX_INPUTS_PER_REQUEST = 2048

# Width hints used until the first response arrives.
_KNOWN_WIDTHS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}
_FALLBACK_WIDTH = 1536


def _slices(texts: list[str], size: int) -> Iterator[list[str]]:
    for offset in range(0, len(texts), size):
        yield texts[offset : offset + size]


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Remote embedding backend configured from :class:`Settings`.

    ``embedding_model`` may carry a vendor prefix (``openai/...``) when the
    base URL is a router; the prefix is ignored for the width lookup.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.embedding_model
        self._routed = bool(settings.openai_base_url)

        client_args: dict = {"api_key": self._api_key}
        if self._routed:
            client_args["base_url"] = settings.openai_base_url
        self._client = openai.AsyncOpenAI(**client_args)

        bare_model = self._model.rsplit("/", 1)[-1]
        self._width = _KNOWN_WIDTHS.get(bare_model, _FALLBACK_WIDTH)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts*; the result is aligned with the input order."""
        if not texts:
            return []

        vectors: list[list[float]] = []
        for piece in _slices(texts, _MAX_INPUTS_PER_REQUEST):
            vectors.extend(await self._request(piece))

        if len(vectors) != len(texts):
            raise EmbeddingError(
                message=f"Received {len(vectors)} vectors for {len(texts)} inputs",
                provider_name=self.get_provider_name(),
            )
        self._width = len(vectors[0])
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        [vector] = await self.embed([text])
        return vector

    async def _request(self, piece: list[str]) -> list[list[float]]:
        try:
            response = await self._client.embeddings.create(model=self._model, input=piece)
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"Embeddings request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        usage = response.usage
        logger.info(
            "embedding_request",
            model=self._model,
            inputs=len(piece),
            tokens=usage.total_tokens if usage else None,
        )
        # Items carry their input position; the list order is not guaranteed.
        by_position = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in by_position]

    def get_dimension(self) -> int:
        return self._width

    def get_provider_name(self) -> str:
        return "openai-compatible_embedding" if self._routed else "openai_embedding"

    def is_available(self) -> bool:
        return bool(self._api_key)
