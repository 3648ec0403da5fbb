"""Recognition request policy and response normalization."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from common.config import GatewaySettings
from common.errors import EngineError
from common.schemas import WordSpeakerPair

# Must match what the recorder produces: audio/webm; codecs=opus at 48 kHz.
CAPTURE_ENCODING = "WEBM_OPUS"
CAPTURE_SAMPLE_RATE = 48000
LANGUAGE_CODE = "en-US"


class RecognitionRequest(BaseModel):
    content: bytes
    encoding: str = CAPTURE_ENCODING
    sample_rate_hertz: int = CAPTURE_SAMPLE_RATE
    language_code: str = LANGUAGE_CODE
    enable_speaker_diarization: bool = True
    min_speaker_count: int = 2
    max_speaker_count: int = 2
    enable_automatic_punctuation: bool = True
    enable_word_time_offsets: bool = True
    model: str = "default"


def build_recognition_request(content: bytes, settings: GatewaySettings) -> RecognitionRequest:
    return RecognitionRequest(
        content=content,
        min_speaker_count=settings.min_speaker_count,
        max_speaker_count=settings.max_speaker_count,
        model=settings.recognition_model,
    )


def normalize_response(response: Mapping[str, Any]) -> list[WordSpeakerPair]:
    """Flatten an engine response into (word, speaker) pairs.

    Only the first alternative of each result is used. Results whose first
    alternative carries no ``words`` contribute nothing. Word order follows
    the engine's order across results.
    """
    if not isinstance(response, Mapping):
        raise EngineError(f"Unexpected engine response type: {type(response).__name__}")

    results = response.get("results") or []
    if not isinstance(results, list):
        raise EngineError("Engine response 'results' is not a list")

    pairs: list[WordSpeakerPair] = []
    for result in results:
        if not isinstance(result, Mapping):
            raise EngineError("Engine result is not an object")
        alternatives = result.get("alternatives") or []
        if not alternatives:
            continue
        first = alternatives[0]
        if not isinstance(first, Mapping):
            raise EngineError("Engine alternative is not an object")
        words = first.get("words")
        if not words:
            continue
        for info in words:
            if not isinstance(info, Mapping):
                raise EngineError("Engine word entry is not an object")
            speaker = info.get("speakerTag") or 0
            if isinstance(speaker, bool) or not isinstance(speaker, int):
                raise EngineError(f"Invalid speakerTag: {speaker!r}")
            pairs.append(WordSpeakerPair(word=info.get("word") or "", speaker=speaker))
    return pairs
