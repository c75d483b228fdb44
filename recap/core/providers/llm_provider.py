"""
Abstract base class for LLM providers.

Summaries are generated through this vendor-neutral interface so the
concrete model (Gemini, Groq) is a configuration choice and tests can plug
in a fake.
"""
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict

from recap.models.enums import LLMRole


class LLMMessage(BaseModel):
    """Vendor-neutral message format for LLM conversations."""

    role: LLMRole
    content: str

    model_config = ConfigDict(frozen=True)


class LLMResponse(BaseModel):
    """Standardized response from an LLM provider."""

    content: str
    model: str
    usage: Optional[dict[str, int]] = None

    model_config = ConfigDict(frozen=True)


class LLMProvider(ABC):
    """
    Abstract interface for LLM providers.

    Example:
        provider = GeminiProvider(api_key="...", model_name="gemini-2.0-flash")
        response = await provider.generate_text([
            LLMMessage(role=LLMRole.SYSTEM, content="You summarize videos."),
            LLMMessage(role=LLMRole.USER, content="Transcript: ..."),
        ])
        print(response.content)
    """

    @abstractmethod
    async def generate_text(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate text completion from messages.

        Args:
            messages: List of conversation messages.
            temperature: Sampling temperature (0.0-1.0).
            max_tokens: Maximum tokens to generate (None for model default).

        Returns:
            LLMResponse containing generated content and metadata.
        """
        ...
