import pytest

from common.config import RecorderSettings
from common.errors import TranscriptionFailed
from common.schemas import WordSpeakerPair
from recorder import main as cli
from recorder.capture import ChunkSource
from recorder.render import TranscriptView


class ScriptedSource(ChunkSource):
    def __init__(self, chunks=(), deny=False):
        self.chunks = list(chunks)
        self.deny = deny

    def open(self, on_chunk):
        if self.deny:
            raise PermissionError("no microphone")
        self.on_chunk = on_chunk

    def close(self):
        for chunk in self.chunks:
            self.on_chunk(chunk)


@pytest.fixture
def uploads(monkeypatch):
    sent = []

    async def fake_transcribe(self, payload):
        sent.append(payload)
        return [WordSpeakerPair(word="hi", speaker=1), WordSpeakerPair(word="there", speaker=2)]

    monkeypatch.setattr(cli.TranscriptionClient, "transcribe", fake_transcribe)
    monkeypatch.setattr("builtins.input", lambda prompt="": "")
    return sent


def _use_source(monkeypatch, source):
    monkeypatch.setattr(cli, "FfmpegMicrophoneSource", lambda **kwargs: source)


class TestRun:
    def test_full_session(self, monkeypatch, uploads, tmp_path, capsys):
        _use_source(monkeypatch, ScriptedSource([b"webm"]))
        view = TranscriptView()
        out = tmp_path / "t.html"

        assert cli.run(RecorderSettings(), view, html_path=out) == 0
        assert uploads[0].audio_content == "d2VibQ=="
        assert [w.word for w in view.words] == ["hi", "there"]
        assert "there" in capsys.readouterr().out
        assert "#FF5349" in out.read_text()

    def test_permission_denied_sends_nothing(self, monkeypatch, uploads):
        _use_source(monkeypatch, ScriptedSource(deny=True))
        assert cli.run(RecorderSettings(), TranscriptView()) == 1
        assert uploads == []

    def test_empty_recording_sends_nothing(self, monkeypatch, uploads):
        _use_source(monkeypatch, ScriptedSource())
        assert cli.run(RecorderSettings(), TranscriptView()) == 1
        assert uploads == []

    def test_gateway_error_keeps_view_cleared(self, monkeypatch):
        async def failing(self, payload):
            raise TranscriptionFailed("quota exceeded")

        monkeypatch.setattr(cli.TranscriptionClient, "transcribe", failing)
        monkeypatch.setattr("builtins.input", lambda prompt="": "")
        _use_source(monkeypatch, ScriptedSource([b"webm"]))
        view = TranscriptView()
        view.show([WordSpeakerPair(word="stale", speaker=1)])

        assert cli.run(RecorderSettings(), view) == 1
        assert view.words == []
