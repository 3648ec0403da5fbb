"""Record one session from the microphone and print the diarized transcript.

Usage:
    python -m recorder.main [--gateway-url URL] [--html transcript.html]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from common.config import RecorderSettings
from common.errors import EncodingError, TranscriptionFailed
from recorder.capture import AudioCapturer, FfmpegMicrophoneSource
from recorder.client import TranscriptionClient
from recorder.encoder import build_payload
from recorder.render import TranscriptView

logger = logging.getLogger("recorder")


def run(settings: RecorderSettings, view: TranscriptView, html_path: Path | None = None) -> int:
    source = FfmpegMicrophoneSource(
        input_format=settings.input_format,
        input_device=settings.input_device,
        ffmpeg_path=settings.ffmpeg_path,
    )
    capturer = AudioCapturer(source)
    client = TranscriptionClient.from_settings(settings)

    view.clear()
    try:
        capturer.start()
    except PermissionError as exc:
        logger.error("Microphone unavailable: %s", exc)
        return 1

    try:
        input("Recording... press Enter to stop.\n")
    finally:
        blob = capturer.stop()

    try:
        payload = build_payload(blob)
    except EncodingError as exc:
        logger.error("Nothing to send: %s", exc)
        return 1

    try:
        words = asyncio.run(client.transcribe(payload))
    except TranscriptionFailed as exc:
        logger.error("Transcription failed: %s", exc.message)
        return 1

    view.show(words)
    print(view.render_ansi())
    if html_path is not None:
        html_path.write_text(view.render_html(), encoding="utf-8")
        logger.info("Wrote %s", html_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Record speech and show it color-coded by speaker.")
    parser.add_argument("--gateway-url", help="Gateway base URL (overrides RECORDER_GATEWAY_URL)")
    parser.add_argument("--html", type=Path, help="Also write the transcript as HTML to this file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = RecorderSettings()
    if args.gateway_url:
        settings = settings.model_copy(update={"gateway_url": args.gateway_url})
    return run(settings, TranscriptView(), html_path=args.html)


if __name__ == "__main__":
    sys.exit(main())
