"""Single-pass summarization of raw text or a stored document.

A document's text is rebuilt from its chunks (ordered by ``chunk_index``,
joined with blank lines), then truncated to ``max_input_chars`` before a
single stateless generation.  Overlapping chunk text is not de-duplicated,
so each overlap appears twice in the rebuilt input.  Long documents are
therefore summarised from their opening only.  Unlike ask/chat there is no
degraded fallback; a failed generation raises :class:`GenerationError`.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ragchat.models.synthesis import SummaryResult
from ragchat.utils.errors import GenerationError, NotFoundError, RagChatError, ValidationError

if TYPE_CHECKING:
    from ragchat.interfaces.llm_provider import ILLMProvider
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
    from ragchat.services.document_registry import DocumentRegistry

logger = structlog.get_logger(logger_name=__name__)

_SYSTEM_PROMPT = (
    "You write clear, well-structured summaries. Use **bold** for important "
    "terms and bullet points for lists."
)

_SUMMARY_TEMPLATE = """Please provide a comprehensive yet concise summary of the following text. Focus on:

**MAIN POINTS:**
- Key ideas and concepts
- Important findings
- Major conclusions

**STRUCTURE:**
- Start with an overview
- List key points with bullet points
- End with main takeaways

TEXT TO SUMMARIZE:
{text}

SUMMARY:"""


class SummarizationService:
    """Summarises caller-supplied text or an ingested document.

    Parameters
    ----------
    llm:
        Generation backend.
    registry:
        Resolves document ids to records.
    vector_store:
        Source of a document's chunks.
    max_input_chars:
        Input is truncated to this many characters before generation.
    timeout:
        Seconds allowed for generation; ``None`` means no deadline.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        registry: DocumentRegistry,
        vector_store: IVectorStoreProvider,
        max_input_chars: int = 3000,
        timeout: float | None = 30.0,
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> None:
        self._llm = llm
        self._registry = registry
        self._vector_store = vector_store
        self._max_input_chars = max_input_chars
        self._timeout = timeout
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def summarize(
        self,
        text: str | None = None,
        document_id: str | None = None,
    ) -> SummaryResult:
        """Summarise *text*, or the document identified by *document_id*.

        When both are given the document wins.

        Raises
        ------
        ValidationError
            If neither input is given, or *text* is blank.
        NotFoundError
            If the document is unknown or has no chunks.
        GenerationError
            If generation fails or times out.
        """
        document_name: str | None = None
        if document_id:
            source_text, document_name = await self._document_text(document_id)
            kind = "document"
        elif text is not None:
            if not text.strip():
                raise ValidationError("Text to summarize must not be empty")
            source_text = text
            kind = "text"
        else:
            raise ValidationError("Either text or documentId is required")

        truncated = source_text[: self._max_input_chars]
        summary = await self._generate(truncated)

        logger.info(
            "summary_generated",
            type=kind,
            document_id=document_id,
            original_length=len(source_text),
            input_length=len(truncated),
            summary_length=len(summary),
        )
        return SummaryResult(
            summary=summary,
            original_length=len(source_text),
            summary_length=len(summary),
            type=kind,
            document_name=document_name,
        )

    async def _document_text(self, document_id: str) -> tuple[str, str]:
        record = self._registry.get(document_id)
        if record is None:
            raise NotFoundError("Document not found")

        chunks = await self._vector_store.list_chunks(document_id=document_id)
        if not chunks:
            raise NotFoundError(f"No content found for document '{record.filename}'")

        ordered = sorted(chunks, key=lambda c: c.chunk_index)
        return "\n\n".join(c.text for c in ordered), record.filename

    async def _generate(self, text: str) -> str:
        try:
            completion = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=_SYSTEM_PROMPT,
                    user_prompt=_SUMMARY_TEMPLATE.format(text=text),
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("summary_generation_failed", reason="timeout", timeout=self._timeout)
            raise GenerationError("Summary generation timed out") from exc
        except RagChatError as exc:
            logger.error("summary_generation_failed", reason=type(exc).__name__, error=str(exc))
            raise GenerationError(
                f"Summary generation failed: {exc.message}",
                provider_name=exc.provider_name,
            ) from exc

        if not completion.text.strip():
            raise GenerationError("Summary generation returned no text")
        return completion.text
