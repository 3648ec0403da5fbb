from __future__ import annotations

import base64
import binascii
import logging
import threading
from typing import Any, Callable, Optional

from common.config import GatewaySettings
from common.errors import BadRequest, ConfigurationError, EngineError, TranscriptionError
from common.schemas import WordSpeakerPair
from gateway.engine import GoogleSpeechEngine, RecognitionEngine, load_credentials
from gateway.recognition import build_recognition_request, normalize_response

logger = logging.getLogger(__name__)

EngineFactory = Callable[[dict[str, Any], GatewaySettings], RecognitionEngine]


class TranscriptionGateway:
    """Translates one upload into one engine call and a flat word list.

    Credentials are read from the injected settings on first use and the
    resulting engine is kept for the lifetime of the gateway.
    """

    def __init__(
        self,
        settings: GatewaySettings,
        engine_factory: EngineFactory = GoogleSpeechEngine.from_credentials,
    ) -> None:
        self.settings = settings
        self._engine_factory = engine_factory
        self._engine: Optional[RecognitionEngine] = None
        self._lock = threading.Lock()

    def engine(self) -> RecognitionEngine:
        with self._lock:
            if self._engine is None:
                credentials = load_credentials(self.settings)
                try:
                    self._engine = self._engine_factory(credentials, self.settings)
                except TranscriptionError:
                    raise
                except Exception as exc:
                    raise ConfigurationError(f"Could not create speech engine: {exc}") from exc
            return self._engine

    def transcribe(self, audio_content: Optional[str]) -> list[WordSpeakerPair]:
        if not audio_content:
            raise BadRequest("No audioContent provided")
        try:
            content = base64.b64decode(audio_content, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise BadRequest(f"audioContent is not valid base64: {exc}") from exc

        try:
            engine = self.engine()
        except ConfigurationError:
            logger.exception("Speech engine unavailable")
            raise

        request = build_recognition_request(content, self.settings)
        logger.info(
            "Recognizing %d bytes (speakers %d-%d)",
            len(content), request.min_speaker_count, request.max_speaker_count,
        )

        try:
            response = engine.recognize(request)
            words = normalize_response(response)
        except TranscriptionError:
            logger.exception("Speech recognition failed")
            raise
        except Exception as exc:
            logger.exception("Speech recognition failed")
            raise EngineError(str(exc)) from exc

        logger.info("Recognized %d words", len(words))
        return words
