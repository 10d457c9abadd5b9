"""Core facade: the single object the request layer talks to.

:class:`RAGService` owns all in-process state (vector index, document
registry, conversation memory) and wires the ingestion, retrieval,
synthesis and summarization components around the injected collaborators.
It is created once at startup and handed to request handlers through
``app.state``.

Collaborators may be missing (no API key configured).  Operations that
need a missing collaborator raise :class:`UnavailableError`, which the
API reports as "system not ready".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ragchat.models.synthesis import AskResult, ChatResult, MemorySnapshot, SystemStatus
from ragchat.providers.vector_store.memory_vector_store import InMemoryVectorStore
from ragchat.services.document_registry import DocumentRegistry
from ragchat.services.ingestion.chunker import TextChunker
from ragchat.services.ingestion.ingestion_service import IngestionService
from ragchat.services.memory_store import ConversationMemoryStore
from ragchat.services.retrieval_service import RetrievalService
from ragchat.services.summarization import SummarizationService
from ragchat.services.synthesis import AnswerSynthesizer
from ragchat.utils.concurrency import generation_semaphore
from ragchat.utils.errors import UnavailableError, ValidationError

if TYPE_CHECKING:
    from ragchat.config.settings import Settings
    from ragchat.interfaces.embedding_provider import IEmbeddingProvider
    from ragchat.interfaces.llm_provider import ILLMProvider
    from ragchat.interfaces.text_extractor import ITextExtractor
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
    from ragchat.models.rag import DocumentRecord, IngestionResult
    from ragchat.models.synthesis import SummaryResult

logger = structlog.get_logger(logger_name=__name__)

_RECENT_MESSAGES = 10


class RAGService:
    """Document Q&A, chat and summarization over an in-memory corpus.

    Parameters
    ----------
    settings:
        Tunables (chunking, retrieval depth, timeouts, memory bounds).
    llm:
        Generation backend, or ``None`` when not configured.
    embedding_provider:
        Embedding backend, or ``None`` when not configured.
    extractor:
        Text extractor for binary uploads.
    vector_store:
        Similarity index.  Defaults to an :class:`InMemoryVectorStore`
        over *embedding_provider*.
    """

    def __init__(
        self,
        settings: Settings,
        llm: ILLMProvider | None = None,
        embedding_provider: IEmbeddingProvider | None = None,
        extractor: ITextExtractor | None = None,
        vector_store: IVectorStoreProvider | None = None,
    ) -> None:
        self._settings = settings
        self._llm = llm
        self._embedding_provider = embedding_provider

        self.registry = DocumentRegistry()
        self.memory = ConversationMemoryStore(
            max_sessions=settings.memory_max_sessions,
            session_ttl=settings.memory_session_ttl_seconds,
            max_messages=settings.memory_max_messages,
        )

        if vector_store is None and embedding_provider is not None:
            vector_store = InMemoryVectorStore(embedding_provider=embedding_provider)
        self.vector_store = vector_store

        self._ingestion: IngestionService | None = None
        self._retrieval: RetrievalService | None = None
        if embedding_provider is not None and vector_store is not None:
            self._ingestion = IngestionService(
                chunker=TextChunker(settings.chunk_size, settings.chunk_overlap),
                embedding_provider=embedding_provider,
                vector_store=vector_store,
                registry=self.registry,
                extractor=extractor,
                embedding_timeout=settings.embedding_timeout_seconds,
            )
            self._retrieval = RetrievalService(
                vector_store, timeout=settings.embedding_timeout_seconds
            )

        self._synthesizer: AnswerSynthesizer | None = None
        self._summarizer: SummarizationService | None = None
        if llm is not None:
            self._synthesizer = AnswerSynthesizer(
                llm=llm,
                memory=self.memory,
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
                semaphore=generation_semaphore(settings.max_concurrent_generations),
            )
            if vector_store is not None:
                self._summarizer = SummarizationService(
                    llm=llm,
                    registry=self.registry,
                    vector_store=vector_store,
                    max_input_chars=settings.summary_max_input_chars,
                    timeout=settings.summary_timeout_seconds,
                    temperature=settings.llm_temperature,
                    max_tokens=settings.llm_max_tokens,
                )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def ingest_document(self, pages: list[str], filename: str) -> IngestionResult:
        return await self._require_ingestion().ingest_document(pages, filename)

    async def ingest_text(self, text: str, filename: str) -> IngestionResult:
        return await self._require_ingestion().ingest_text(text, filename)

    async def ingest_file(self, data: bytes, filename: str) -> IngestionResult:
        return await self._require_ingestion().ingest_file(data, filename)

    async def ingest_base64(self, payload: str, filename: str) -> IngestionResult:
        return await self._require_ingestion().ingest_base64(payload, filename)

    # ------------------------------------------------------------------
    # Question answering and chat
    # ------------------------------------------------------------------

    async def ask(self, user_id: str | None, question: str) -> AskResult:
        """Answer *question* from the corpus, within the user's conversation."""
        if not question or not question.strip():
            raise ValidationError("Question is required")
        synthesizer = self._require_synthesizer()
        if self._retrieval is None:
            raise UnavailableError("Embedding provider is not configured")

        user = self._resolve_user(user_id)
        chunks = await self._retrieval.search(question, self._settings.retrieval_top_k)
        result = await synthesizer.answer(
            user,
            question,
            chunks,
            timeout=self._settings.answer_timeout_seconds,
        )
        return AskResult(
            answer=result.text,
            sources=result.sources,
            user_id=user,
            relevant_chunks=len(chunks),
            degraded=result.degraded,
        )

    async def chat(
        self,
        user_id: str | None,
        message: str,
        clear_memory: bool = False,
    ) -> ChatResult:
        """Continue the user's conversation without document retrieval."""
        if not message or not message.strip():
            raise ValidationError("Message is required")
        synthesizer = self._require_synthesizer()

        user = self._resolve_user(user_id)
        result = await synthesizer.answer(
            user,
            message,
            [],
            timeout=self._settings.chat_timeout_seconds,
            reset_history=clear_memory,
        )
        return ChatResult(
            response=result.text,
            user_id=user,
            memory_length=result.memory_length,
            degraded=result.degraded,
        )

    # ------------------------------------------------------------------
    # Summarization and catalogue
    # ------------------------------------------------------------------

    async def summarize(
        self,
        text: str | None = None,
        document_id: str | None = None,
    ) -> SummaryResult:
        if not text and not document_id:
            raise ValidationError("Either text or documentId is required")
        if self._summarizer is None:
            raise UnavailableError("Language model is not configured")
        return await self._summarizer.summarize(text=text, document_id=document_id)

    def list_documents(self) -> list[DocumentRecord]:
        return self.registry.list()

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    def get_memory(self, user_id: str | None) -> MemorySnapshot:
        user = self._resolve_user(user_id)
        messages = self.memory.get_messages(user)
        return MemorySnapshot(
            user_id=user,
            message_count=len(messages),
            recent_messages=messages[-_RECENT_MESSAGES:],
        )

    def clear_memory(self, user_id: str | None) -> bool:
        return self.memory.clear(self._resolve_user(user_id))

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def get_status(self) -> SystemStatus:
        chunks = 0
        if self.vector_store is not None:
            chunks = (await self.vector_store.get_stats()).total_chunks
        return SystemStatus(
            ready=self.is_ready,
            documents=len(self.registry),
            users=self.memory.session_count(),
            chunks=chunks,
            llm_provider=self._llm.get_provider_name() if self._llm else None,
            embedding_provider=(
                self._embedding_provider.get_provider_name()
                if self._embedding_provider
                else None
            ),
        )

    @property
    def is_ready(self) -> bool:
        return self._synthesizer is not None and self._ingestion is not None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_user(self, user_id: str | None) -> str:
        if user_id is None or not user_id.strip():
            return self._settings.default_user_id
        return user_id.strip()

    def _require_ingestion(self) -> IngestionService:
        if self._ingestion is None:
            raise UnavailableError("Embedding provider is not configured")
        return self._ingestion

    def _require_synthesizer(self) -> AnswerSynthesizer:
        if self._synthesizer is None:
            raise UnavailableError("Language model is not configured")
        return self._synthesizer
