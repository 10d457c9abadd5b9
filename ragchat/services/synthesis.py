"""Answer synthesis: retrieved context + conversation history -> one generation.

:class:`AnswerSynthesizer` is shared by ``ask`` (with retrieved chunks and
a deadline) and ``chat`` (no chunks, no deadline).  For one user it runs
this sequence under the user's memory lock:

    1. clear history, only when the caller asks for a fresh conversation
    2. read history
    3. generate (bounded by the timeout and the generation semaphore)
    4. append the user turn
    5. append the assistant turn

Holding the lock throughout means concurrent calls for the same user see
consistent history and their message pairs never interleave.  A failed or
timed-out generation returns a fixed apology and appends nothing.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ragchat.models.conversation import MessageRole
from ragchat.models.synthesis import AnswerResult, SourceReference
from ragchat.utils.errors import RagChatError

if TYPE_CHECKING:
    from ragchat.interfaces.llm_provider import ILLMProvider
    from ragchat.models.conversation import ChatMessage
    from ragchat.models.rag import RetrievedChunk
    from ragchat.models.synthesis import Completion
    from ragchat.services.memory_store import ConversationMemoryStore

logger = structlog.get_logger(logger_name=__name__)

DEGRADED_ANSWER = (
    "I'm having trouble generating a response right now. "
    "Please try again in a moment."
)

_PREVIEW_CHARS = 150

_SYSTEM_PROMPT = (
    "You are a friendly, knowledgeable assistant that helps users understand "
    "the documents they have uploaded.\n\n"
    "Instructions:\n"
    "- Answer conversationally, like a helpful colleague.\n"
    "- Use **bold** for important terms and key concepts.\n"
    "- Use bullet points or numbered lists when listing several items or steps.\n"
    "- Keep answers concise and well organised.\n"
    "- When you use information from a document, mention the source naturally "
    '(e.g. "According to report.pdf, ...").\n'
    "- If the provided documents do not contain the answer, say so politely and "
    "answer from general knowledge only when you are confident, making clear "
    "that it does not come from the documents.\n"
    "- Use the earlier conversation to resolve follow-up questions."
)


def build_context_block(chunks: list[RetrievedChunk]) -> str:
    """Render retrieved chunks as labelled source blocks, in rank order."""
    blocks = [
        f'[Source {i} from "{item.chunk.filename}"]:\n{item.chunk.text}\n'
        for i, item in enumerate(chunks, start=1)
    ]
    return "\n".join(blocks)


def build_user_prompt(query: str, chunks: list[RetrievedChunk]) -> str:
    if not chunks:
        return query
    return (
        "Context from the uploaded documents:\n\n"
        f"{build_context_block(chunks)}\n"
        f"Question: {query}"
    )


def to_source_reference(item: RetrievedChunk) -> SourceReference:
    chunk = item.chunk
    return SourceReference(
        source=chunk.filename,
        page=str(chunk.page_number) if chunk.page_number is not None else "N/A",
        content_preview=chunk.text[:_PREVIEW_CHARS] + "...",
        chunk_id=chunk.chunk_id,
        score=item.similarity_score,
    )


class AnswerSynthesizer:
    """Assembles prompts, calls the LLM and records successful exchanges.

    Parameters
    ----------
    llm:
        Generation backend.
    memory:
        Per-user conversation store; read for history and appended to on
        success.
    temperature, max_tokens:
        Sampling parameters passed to every generation.
    semaphore:
        Optional process-wide bound on concurrent generations.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        memory: ConversationMemoryStore,
        temperature: float = 0.1,
        max_tokens: int = 1000,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        self._llm = llm
        self._memory = memory
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._semaphore = semaphore

    async def answer(
        self,
        user_id: str,
        query: str,
        context_chunks: list[RetrievedChunk],
        timeout: float | None = None,
        reset_history: bool = False,
    ) -> AnswerResult:
        """Produce a reply for *query* and record the exchange in memory.

        Parameters
        ----------
        user_id:
            Conversation owner.
        query:
            The user's question or message.
        context_chunks:
            Retrieved chunks to ground the answer; may be empty.
        timeout:
            Seconds allowed for generation; ``None`` means no deadline.
        reset_history:
            Clear the user's memory before reading history, inside the same
            critical section as the generation and the appends.

        Returns
        -------
        AnswerResult
            The reply.  On generation failure or timeout, ``text`` is
            :data:`DEGRADED_ANSWER`, ``degraded`` is true and memory is
            unchanged apart from a requested reset.
        """
        sources = [to_source_reference(c) for c in context_chunks]
        used_context = bool(context_chunks)
        user_prompt = build_user_prompt(query, context_chunks)

        async with self._memory.lock(user_id):
            if reset_history:
                self._memory.clear(user_id)
            history = self._memory.get_messages(user_id)
            try:
                completion = await asyncio.wait_for(
                    self._generate(user_prompt, history),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "synthesis_degraded",
                    user_id=user_id,
                    reason="timeout",
                    timeout=timeout,
                )
                return AnswerResult(
                    text=DEGRADED_ANSWER,
                    used_context=used_context,
                    sources=sources,
                    degraded=True,
                    memory_length=len(history),
                )
            except RagChatError as exc:
                logger.error(
                    "synthesis_degraded",
                    user_id=user_id,
                    reason=type(exc).__name__,
                    error=str(exc),
                )
                return AnswerResult(
                    text=DEGRADED_ANSWER,
                    used_context=used_context,
                    sources=sources,
                    degraded=True,
                    memory_length=len(history),
                )

            self._memory.append(user_id, MessageRole.USER, query)
            self._memory.append(user_id, MessageRole.ASSISTANT, completion.text)
            memory_length = len(self._memory.get_messages(user_id))

        logger.info(
            "synthesis_complete",
            user_id=user_id,
            context_chunks=len(context_chunks),
            history_turns=len(history),
            tokens=completion.total_tokens,
        )
        return AnswerResult(
            text=completion.text,
            used_context=used_context,
            sources=sources,
            memory_length=memory_length,
        )

    async def _generate(self, user_prompt: str, history: list[ChatMessage]) -> Completion:
        if self._semaphore is None:
            return await self._call_llm(user_prompt, history)
        async with self._semaphore:
            return await self._call_llm(user_prompt, history)

    async def _call_llm(self, user_prompt: str, history: list[ChatMessage]) -> Completion:
        return await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            history=history,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
