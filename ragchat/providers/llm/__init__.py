"""LLM provider adapters.

OpenAILLMProvider implements ILLMProvider against any OpenAI-compatible
chat-completions endpoint (OpenRouter by default).
"""

from ragchat.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider"]
