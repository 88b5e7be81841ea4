"""
Async HTTP client for the Mojimajic backend.

Uses ``httpx.AsyncClient`` so network round-trips are suspension points
and the session stays responsive while a job is polled.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ..core.config import get_settings
from ..core.constants import DEFAULT_LANGUAGE, EmojiMode
from ..core.exceptions import APIError

logger = logging.getLogger(__name__)


class MojimajicAPI:
    """Thin wrapper around httpx. Every method returns parsed JSON or raises APIError."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout if timeout is not None else settings.api_timeout_s,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Execute a request and return the JSON body; map httpx failures to APIError."""
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. Start it with: `uvicorn mojimajic.main:app`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError("Request timed out.", category="timeout") from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("detail", exc.response.text)
            except ValueError:
                detail = exc.response.text or str(exc)
            raise APIError(str(detail), category="http", status_code=exc.response.status_code) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None
        except ValueError:
            raise APIError("Backend returned a non-JSON response", category="http") from None

    async def submit_transcription(self, audio: bytes, language: str = DEFAULT_LANGUAGE) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/transcribe",
            files={"audio": ("audio.wav", audio, "audio/wav")},
            data={"language": language},
        )

    async def transcription_status(self, job_id: str) -> dict[str, Any]:
        return await self._request("GET", "/transcribe/status", params={"jobId": job_id})

    async def convert_emojis(
        self,
        text: str,
        mode: EmojiMode = EmojiMode.EMOJI,
        languages: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/emojis",
            json={"text": text, "mode": EmojiMode(mode).value, "languages": list(languages or [])},
        )

    async def aclose(self) -> None:
        await self._client.aclose()
