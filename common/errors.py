"""Error taxonomy shared by the recorder and the gateway."""

from __future__ import annotations


class TranscriptionError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EncodingError(TranscriptionError):
    """Audio blob is empty or cannot be read as bytes."""


class BadRequest(TranscriptionError):
    status_code = 400


class ConfigurationError(TranscriptionError):
    """Engine credentials are absent or malformed."""


class EngineError(TranscriptionError):
    """The speech engine failed or returned data we cannot interpret."""


class TranscriptionFailed(TranscriptionError):
    """Gateway answered with an error body instead of a transcript."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


class CaptureStateError(RuntimeError):
    pass
