from __future__ import annotations

import html
from typing import Iterable, Optional

from common.schemas import WordSpeakerPair

SPEAKER_COLORS = {
    1: "#1F75FE",  # blue
    2: "#FF5349",  # red
    3: "#FFA500",  # orange
}
FALLBACK_COLOR = "#2E8B57"  # green: untagged and speakers beyond 3


def color_for_speaker(speaker: Optional[int]) -> str:
    if isinstance(speaker, bool) or not isinstance(speaker, int):
        return FALLBACK_COLOR
    return SPEAKER_COLORS.get(speaker, FALLBACK_COLOR)


def _ansi_fg(hex_color: str) -> str:
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
    return f"\x1b[38;2;{r};{g};{b}m"


class TranscriptView:
    """Currently displayed transcript; each ``show`` replaces the previous one."""

    def __init__(self) -> None:
        self._words: list[WordSpeakerPair] = []

    @property
    def words(self) -> list[WordSpeakerPair]:
        return list(self._words)

    def show(self, words: Iterable[WordSpeakerPair]) -> None:
        self._words = list(words)

    def clear(self) -> None:
        self._words = []

    def render_html(self) -> str:
        if not self._words:
            return ""
        spans = "\n".join(
            f'    <span style="color: {color_for_speaker(w.speaker)}">{html.escape(w.word)}</span>'
            for w in self._words
        )
        return (
            '<div class="transcript">\n'
            "  <h2>Diarized Transcript</h2>\n"
            '  <div class="words">\n'
            f"{spans}\n"
            "  </div>\n"
            "</div>\n"
        )

    def render_ansi(self) -> str:
        reset = "\x1b[0m"
        return " ".join(
            f"{_ansi_fg(color_for_speaker(w.speaker))}{w.word}{reset}" for w in self._words
        )
