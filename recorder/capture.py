"""Microphone capture producing one WebM/Opus blob per recording session."""

from __future__ import annotations

import logging
import signal
import subprocess
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from common.errors import CaptureStateError

logger = logging.getLogger(__name__)

CAPTURE_MEDIA_TYPE = "audio/webm; codecs=opus"
CAPTURE_SAMPLE_RATE = 48000

ChunkCallback = Callable[[bytes], None]


@dataclass(frozen=True)
class AudioBlob:
    data: bytes
    media_type: str = CAPTURE_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)


class CaptureState(str, Enum):
    idle = "idle"
    recording = "recording"


class ChunkSource(ABC):
    """Produces encoded audio chunks between ``open`` and ``close``."""

    @abstractmethod
    def open(self, on_chunk: ChunkCallback) -> None:
        """Acquire the input device. Raises PermissionError when unavailable."""

    @abstractmethod
    def close(self) -> None:
        """Stop producing chunks. Any trailing chunk is delivered before returning."""


class RecordingSession:
    """Chunk buffer owned by exactly one recording."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._lock = threading.Lock()

    def add(self, chunk: bytes) -> None:
        if not chunk:
            return
        with self._lock:
            self._chunks.append(bytes(chunk))

    @property
    def chunk_count(self) -> int:
        with self._lock:
            return len(self._chunks)

    def assemble(self, media_type: str) -> AudioBlob:
        with self._lock:
            return AudioBlob(data=b"".join(self._chunks), media_type=media_type)


class AudioCapturer:
    """Idle → Recording → Idle around a chunk source."""

    def __init__(
        self,
        source: ChunkSource,
        media_type: str = CAPTURE_MEDIA_TYPE,
        on_stop: Optional[Callable[[AudioBlob], None]] = None,
    ) -> None:
        self.source = source
        self.media_type = media_type
        self.on_stop = on_stop
        self._session: Optional[RecordingSession] = None
        self._state_lock = threading.Lock()

    @property
    def state(self) -> CaptureState:
        return CaptureState.recording if self._session is not None else CaptureState.idle

    def start(self) -> None:
        with self._state_lock:
            if self._session is not None:
                raise CaptureStateError("Capture already in progress")
            session = RecordingSession()
            # PermissionError propagates; the capturer stays idle.
            self.source.open(session.add)
            self._session = session
        logger.info("Recording started (%s)", self.media_type)

    def stop(self) -> AudioBlob:
        with self._state_lock:
            session = self._session
            if session is None:
                raise CaptureStateError("Capture is not running")
            try:
                self.source.close()
            finally:
                self._session = None
            blob = session.assemble(self.media_type)

        logger.info("Recording stopped: %d chunks, %d bytes", session.chunk_count, blob.size)
        if self.on_stop is not None:
            self.on_stop(blob)
        return blob


class FfmpegMicrophoneSource(ChunkSource):
    """Capture the system microphone via ffmpeg, emitting WebM/Opus on stdout."""

    READ_SIZE = 4096
    STARTUP_GRACE_S = 0.3

    def __init__(
        self,
        input_format: str = "pulse",
        input_device: str = "default",
        ffmpeg_path: str = "ffmpeg",
        sample_rate: int = CAPTURE_SAMPLE_RATE,
    ) -> None:
        self.input_format = input_format
        self.input_device = input_device
        self.ffmpeg_path = ffmpeg_path
        self.sample_rate = sample_rate
        self._proc: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._stderr = None

    def command(self) -> list[str]:
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-f", self.input_format,
            "-i", self.input_device,
            "-ac", "1",
            "-ar", str(self.sample_rate),
            "-c:a", "libopus",
            "-f", "webm",
            "pipe:1",
        ]

    def open(self, on_chunk: ChunkCallback) -> None:
        # Not a pipe: nothing reads stderr while recording.
        stderr = tempfile.TemporaryFile()
        try:
            proc = subprocess.Popen(
                self.command(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=stderr,
            )
        except FileNotFoundError as exc:
            stderr.close()
            raise PermissionError(f"Audio recorder not available: {self.ffmpeg_path}") from exc

        try:
            returncode = proc.wait(timeout=self.STARTUP_GRACE_S)
        except subprocess.TimeoutExpired:
            returncode = None
        if returncode is not None:
            detail = _drain(stderr)
            raise PermissionError(
                f"Cannot open input device {self.input_device!r} ({self.input_format}): "
                f"{detail or f'exit code {returncode}'}"
            )

        self._proc = proc
        self._stderr = stderr
        self._reader = threading.Thread(
            target=self._pump, args=(proc, on_chunk), name="ffmpeg-capture", daemon=True
        )
        self._reader.start()
        logger.info("ffmpeg capturing %s:%s", self.input_format, self.input_device)

    def _pump(self, proc: subprocess.Popen, on_chunk: ChunkCallback) -> None:
        while True:
            chunk = proc.stdout.read1(self.READ_SIZE)
            if not chunk:
                break
            on_chunk(chunk)

    def close(self) -> None:
        proc, reader, stderr_file = self._proc, self._reader, self._stderr
        self._proc = self._reader = self._stderr = None
        if proc is None:
            return
        if proc.poll() is None:
            # SIGINT lets ffmpeg write the container trailer before exiting.
            proc.send_signal(signal.SIGINT)
        if reader is not None:
            reader.join()
        proc.wait()
        stderr = _drain(stderr_file) if stderr_file is not None else ""
        if stderr:
            logger.warning("ffmpeg: %s", stderr)


def _drain(stderr_file) -> str:
    """Read and close a spooled stderr file."""
    with stderr_file:
        stderr_file.seek(0)
        return stderr_file.read().decode(errors="replace").strip()
