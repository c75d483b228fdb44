"""
Google Gemini implementation of LLMProvider.
"""
from typing import Optional

import google.generativeai as genai
from loguru import logger

from recap.core.providers.llm_provider import LLMProvider, LLMMessage, LLMResponse
from recap.models.enums import LLMRole


class GeminiProvider(LLMProvider):
    """
    Google Gemini implementation of LLMProvider.

    Gemini takes the system instructions at model construction time, so
    SYSTEM messages are folded into ``system_instruction`` and the remaining
    turns are sent as chat contents.
    """

    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash"):
        """
        Initialize the Gemini provider.

        Args:
            api_key: Google AI API key.
            model_name: Gemini model to use (e.g., "gemini-2.0-flash").
        """
        genai.configure(api_key=api_key)
        self.model_name = model_name

    async def generate_text(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        system_parts = [m.content for m in messages if m.role == LLMRole.SYSTEM]
        contents = [
            {
                "role": "model" if m.role == LLMRole.ASSISTANT else "user",
                "parts": [m.content],
            }
            for m in messages
            if m.role != LLMRole.SYSTEM
        ]

        model = genai.GenerativeModel(
            self.model_name,
            system_instruction="\n\n".join(system_parts) or None,
        )
        config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

        logger.debug(f"Sending request to Gemini ({self.model_name})")
        response = await model.generate_content_async(
            contents,
            generation_config=config,
        )

        usage = None
        if response.usage_metadata:
            usage = {
                "prompt_tokens": response.usage_metadata.prompt_token_count,
                "completion_tokens": response.usage_metadata.candidates_token_count,
                "total_tokens": response.usage_metadata.total_token_count,
            }
            logger.debug(f"Gemini token usage: {usage}")

        return LLMResponse(
            content=response.text,
            model=self.model_name,
            usage=usage,
        )
