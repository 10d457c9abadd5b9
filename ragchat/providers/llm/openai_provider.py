"""Chat completions through any OpenAI-protocol endpoint.

OpenRouter is the default base URL, so the same adapter reaches OpenAI,
OpenRouter, TogetherAI or a self-hosted gateway.  It is the only module
that imports ``openai`` for generation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import openai
import structlog

from ragchat.config.settings import Settings
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.models.synthesis import Completion
from ragchat.utils.errors import LLMError

if TYPE_CHECKING:
    from ragchat.models.conversation import ChatMessage

logger = structlog.get_logger(logger_name=__name__)

# Transport-level ceiling; callers apply their own (usually tighter)
# deadline with asyncio.wait_for.
_CLIENT_TIMEOUT = openai.Timeout(60.0, connect=5.0)


def build_messages(
    system_prompt: str,
    user_prompt: str,
    history: list[ChatMessage] | None,
) -> list[dict[str, str]]:
    """System prompt, then prior turns in order, then the new user turn."""
    turns = [{"role": m.role.value, "content": m.content} for m in history or []]
    return [
        {"role": "system", "content": system_prompt},
        *turns,
        {"role": "user", "content": user_prompt},
    ]


class OpenAILLMProvider(ILLMProvider):
    """Generation backend using ``settings.chat_model`` (``google/gemma-2-9b-it`` by default)."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.chat_model
        self._routed = bool(settings.openai_base_url)

        client_args: dict = {"api_key": self._api_key, "timeout": _CLIENT_TIMEOUT}
        if self._routed:
            client_args["base_url"] = settings.openai_base_url
        self._client = openai.AsyncOpenAI(**client_args)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        history: list[ChatMessage] | None = None,
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> Completion:
        messages = build_messages(system_prompt, user_prompt, history)
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise self._failure("request timed out") from exc
        except openai.APIError as exc:
            raise self._failure(f"request failed: {exc}") from exc

        choice = response.choices[0] if response.choices else None
        text = choice.message.content if choice is not None else None
        if text is None:
            raise self._failure("response contained no message text")

        usage = response.usage
        completion = Completion(
            text=text,
            model=self._model,
            total_tokens=usage.total_tokens if usage else None,
        )
        logger.info(
            "llm_completion",
            model=self._model,
            turns=len(messages),
            tokens=completion.total_tokens,
        )
        return completion

    async def validate_credentials(self) -> bool:
        """Check the key with a model listing, which costs nothing."""
        if not self._api_key:
            return False
        try:
            await self._client.models.list()
        except openai.APIError:
            logger.warning("llm_credentials_rejected", provider=self.get_provider_name())
            return False
        return True

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "openai-compatible" if self._routed else "openai"

    def _failure(self, detail: str) -> LLMError:
        return LLMError(message=f"Chat completion {detail}", provider_name=self.get_provider_name())
