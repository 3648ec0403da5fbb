from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from common.config import RecorderSettings
from common.errors import TranscriptionFailed
from common.schemas import TranscribeRequest, TranscribeResponse, WordSpeakerPair

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Posts one encoded recording to the gateway and returns its words."""

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/transcribe"
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: RecorderSettings) -> "TranscriptionClient":
        return cls(settings.gateway_url, timeout_s=settings.timeout_s)

    async def transcribe(self, payload: TranscribeRequest) -> list[WordSpeakerPair]:
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            try:
                resp = await client.post(self.url, json=payload.model_dump(by_alias=True))
            except httpx.HTTPError as exc:
                raise TranscriptionFailed(f"Gateway unreachable: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise TranscriptionFailed(
                f"Gateway returned non-JSON response ({resp.status_code})", resp.status_code
            ) from exc

        if isinstance(data, dict) and data.get("transcriptionData") is not None:
            try:
                return TranscribeResponse.model_validate(data).transcription_data
            except ValidationError as exc:
                raise TranscriptionFailed(f"Malformed transcription data: {exc}") from exc

        error = data.get("error") if isinstance(data, dict) else None
        logger.error("Transcription failed (%d): %s", resp.status_code, error)
        raise TranscriptionFailed(error or "No transcription data", resp.status_code)
