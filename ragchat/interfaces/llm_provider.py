"""Abstract base class for LLM service providers.

Defines the contract for the text-generation backend used to answer
questions, continue conversations and write summaries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ragchat.models.conversation import ChatMessage
    from ragchat.models.synthesis import Completion


# Concrete implementation: OpenAILLMProvider (ragchat/providers/llm/)
class ILLMProvider(ABC):
    """Contract for chat-style text generation."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        history: list[ChatMessage] | None = None,
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> Completion:
        """Generate a reply from the model.

        Parameters
        ----------
        system_prompt:
            Instruction message that sets the model's behaviour.
        user_prompt:
            The current user turn (question plus any context blocks).
        history:
            Earlier turns of the conversation, oldest first.  They are sent
            as separate chat messages between the system prompt and the
            current user turn.
        temperature:
            Sampling temperature.
        max_tokens:
            Upper bound on the number of tokens in the reply.

        Returns
        -------
        Completion
            The generated text and usage metadata.

        Raises
        ------
        ragchat.utils.errors.LLMError
            If the API call fails or returns no text.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are present (no network call)."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm credentials are valid."""
