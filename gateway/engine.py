from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import speech
from google.protobuf.json_format import MessageToDict

from common.config import GatewaySettings
from common.errors import ConfigurationError, EngineError
from gateway.recognition import RecognitionRequest

logger = logging.getLogger(__name__)


class RecognitionEngine(ABC):
    """Remote speech recognizer returning a REST-shaped response mapping."""

    @abstractmethod
    def recognize(self, request: RecognitionRequest) -> dict[str, Any]:
        ...


def load_credentials(settings: GatewaySettings) -> dict[str, Any]:
    """Parse the service-account JSON blob from settings."""
    raw = settings.google_cloud_credentials.strip()
    if not raw:
        raise ConfigurationError("GOOGLE_CLOUD_CREDENTIALS is not set")
    try:
        credentials = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"GOOGLE_CLOUD_CREDENTIALS is not valid JSON: {exc}") from exc
    if not isinstance(credentials, dict) or not credentials:
        raise ConfigurationError("GOOGLE_CLOUD_CREDENTIALS must be a non-empty JSON object")
    return credentials


def build_recognition_config(request: RecognitionRequest) -> speech.RecognitionConfig:
    return speech.RecognitionConfig(
        encoding=speech.RecognitionConfig.AudioEncoding[request.encoding],
        sample_rate_hertz=request.sample_rate_hertz,
        language_code=request.language_code,
        enable_automatic_punctuation=request.enable_automatic_punctuation,
        enable_word_time_offsets=request.enable_word_time_offsets,
        diarization_config=speech.SpeakerDiarizationConfig(
            enable_speaker_diarization=request.enable_speaker_diarization,
            min_speaker_count=request.min_speaker_count,
            max_speaker_count=request.max_speaker_count,
        ),
        model=request.model,
    )


class GoogleSpeechEngine(RecognitionEngine):
    """Google Cloud Speech-to-Text v1 synchronous ``recognize``."""

    def __init__(self, client: speech.SpeechClient, timeout_s: Optional[float] = None) -> None:
        self._client = client
        self.timeout_s = timeout_s

    @classmethod
    def from_credentials(
        cls, credentials: dict[str, Any], settings: GatewaySettings
    ) -> "GoogleSpeechEngine":
        try:
            client = speech.SpeechClient.from_service_account_info(credentials)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid Google Cloud credentials: {exc}") from exc
        logger.info("Speech client created for %s", credentials.get("client_email", "unknown"))
        return cls(client, timeout_s=settings.engine_timeout_s)

    def recognize(self, request: RecognitionRequest) -> dict[str, Any]:
        config = build_recognition_config(request)
        audio = speech.RecognitionAudio(content=request.content)

        kwargs: dict[str, Any] = {}
        if self.timeout_s is not None:
            kwargs["timeout"] = self.timeout_s

        try:
            response = self._client.recognize(config=config, audio=audio, **kwargs)
        except google_exceptions.GoogleAPICallError as exc:
            raise EngineError(exc.message) from exc
        return MessageToDict(speech.RecognizeResponse.pb(response))
