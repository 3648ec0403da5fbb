from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- HTTP messages: recorder ↔ gateway ---

class TranscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_content: Optional[str] = Field(default=None, alias="audioContent")


class WordSpeakerPair(BaseModel):
    word: str = ""
    speaker: int = 0  # 1-based diarization tag, 0 when the engine assigned none


class TranscribeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transcription_data: list[WordSpeakerPair] = Field(
        default_factory=list, alias="transcriptionData"
    )


class ErrorResponse(BaseModel):
    error: str
