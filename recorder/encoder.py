from __future__ import annotations

import base64
import binascii

from common.errors import EncodingError
from common.schemas import TranscribeRequest
from recorder.capture import AudioBlob


def encode_audio(blob: AudioBlob) -> str:
    """Standard base64 of the blob bytes, unwrapped and padded."""
    data = blob.data
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise EncodingError(f"Audio blob is not readable as bytes: {type(data).__name__}")
    if len(data) == 0:
        raise EncodingError("Audio blob is empty; nothing was recorded")
    return base64.b64encode(data).decode("ascii")


def decode_audio(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"Invalid base64 audio: {exc}") from exc


def build_payload(blob: AudioBlob) -> TranscribeRequest:
    return TranscribeRequest(audio_content=encode_audio(blob))
