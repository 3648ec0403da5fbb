from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


class GatewaySettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    google_cloud_credentials: str = Field(
        default="",
        validation_alias=AliasChoices("GOOGLE_CLOUD_CREDENTIALS", "google_cloud_credentials"),
    )
    min_speaker_count: int = 2
    max_speaker_count: int = 2
    recognition_model: str = "default"
    engine_timeout_s: Optional[float] = None

    model_config = {"env_prefix": "GATEWAY_"}

    @model_validator(mode="after")
    def _check_speaker_range(self) -> "GatewaySettings":
        if self.min_speaker_count < 1:
            raise ValueError("min_speaker_count must be at least 1")
        if self.min_speaker_count > self.max_speaker_count:
            raise ValueError(
                f"min_speaker_count ({self.min_speaker_count}) exceeds "
                f"max_speaker_count ({self.max_speaker_count})"
            )
        return self


class RecorderSettings(BaseSettings):
    gateway_url: str = "http://localhost:8000"
    input_format: str = "pulse"
    input_device: str = "default"
    ffmpeg_path: str = "ffmpeg"
    timeout_s: float = 120.0

    model_config = {"env_prefix": "RECORDER_"}
