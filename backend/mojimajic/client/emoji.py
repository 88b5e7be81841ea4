from __future__ import annotations

import logging
from typing import Sequence

from ..core.constants import EmojiMode, is_text_present
from ..core.exceptions import APIError, ConversionError
from .api_client import MojimajicAPI

logger = logging.getLogger(__name__)


class EmojiConversionClient:
    """Sends text to the backend and returns its emoji rendering. Never retries."""

    def __init__(self, api: MojimajicAPI) -> None:
        self._api = api
        self.calls = 0

    async def convert(
        self,
        text: str,
        mode: EmojiMode = EmojiMode.EMOJI,
        languages: Sequence[str] | None = None,
    ) -> str:
        if not is_text_present(text):
            raise ValueError("Cannot convert empty text")

        self.calls += 1
        try:
            data = await self._api.convert_emojis(text, mode=mode, languages=languages)
        except APIError as e:
            logger.warning("Emoji conversion request failed", extra={"category": e.category})
            raise ConversionError(e.detail) from e

        emojis = data.get("emojis")
        if not isinstance(emojis, str) or not emojis.strip():
            raise ConversionError("Emoji conversion returned no content")
        return emojis
