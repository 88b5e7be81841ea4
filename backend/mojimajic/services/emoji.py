"""
Emoji conversion through OpenAI chat completions.

The model is non-deterministic (temperature > 0); callers only get the
guarantee that some string comes back or ConversionError is raised.
"""

from __future__ import annotations

import logging
from typing import Sequence

from openai import APIError as OpenAIAPIError
from openai import AsyncOpenAI

from ..core.config import Settings, get_settings
from ..core.constants import EmojiMode
from ..core.exceptions import ConversionError
from .prompt_builder import build_prompt

logger = logging.getLogger(__name__)


class EmojiConverter:
    """Turns text into an emoji (or mixed emoji/text) rendering."""

    def __init__(self, client: AsyncOpenAI | None = None, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._client = client or AsyncOpenAI(api_key=self._settings.openai_api_key or None)

    def _model_for(self, mode: EmojiMode) -> str:
        if mode is EmojiMode.MIXED:
            return self._settings.mixed_emoji_model
        return self._settings.emoji_model

    async def convert(
        self,
        text: str,
        mode: EmojiMode = EmojiMode.EMOJI,
        languages: Sequence[str] | None = None,
    ) -> str:
        """
        Convert text and return the model's answer, stripped.

        No retries: a failed conversion is reported and the user resubmits.
        """
        mode = EmojiMode(mode)
        prompt = build_prompt(text, mode=mode, languages=languages)
        try:
            completion = await self._client.chat.completions.create(
                model=self._model_for(mode),
                messages=prompt.messages,
                temperature=self._settings.emoji_temperature,
                max_tokens=self._settings.emoji_max_tokens,
            )
        except OpenAIAPIError as e:
            logger.warning("Emoji conversion failed", extra={"style": prompt.style_id, "error": str(e)})
            raise ConversionError() from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            logger.warning("Emoji conversion returned no content", extra={"style": prompt.style_id})
            raise ConversionError("Emoji conversion returned no content")

        logger.info(
            "Emoji conversion successful",
            extra={"style": prompt.style_id, "input_length": len(text.strip())},
        )
        return content.strip()
