"""Match targets — per-word typing automaton + headless word label."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, runtime_checkable

from typecast import korean

log = logging.getLogger(__name__)


class Script(str, Enum):
    LATIN = "latin"
    HANGUL = "hangul"


@runtime_checkable
class Display(Protocol):
    """Observer for a target's visible label. Never feeds back into matching."""

    def set_word(self, text: str) -> None: ...

    def update_progress(self, progress: int) -> None: ...

    def show_completion(self) -> None: ...

    def show_typo(self) -> None: ...


def to_symbols(word: str, script: Script) -> list[str]:
    """Symbol sequence a typist must enter for ``word``."""
    if script is Script.HANGUL:
        return korean.split(word)
    return [c for c in word.lower() if not c.isspace()]


def is_typable(word: str, script: Script) -> bool:
    """Whether every symbol of ``word`` can be entered in the ``script`` input mode.

    Latin words may hold letters and spaces only. Hangul words must be
    whole syllables whose jamo all sit on a key, so cluster finals such
    as ㄺ (닭) are rejected.
    """
    chars = [c for c in word if not c.isspace()]
    if not chars:
        return False
    if script is Script.HANGUL:
        return all(korean.is_syllable(c) for c in chars) and all(
            j in korean.KEY_JAMO for j in korean.split(word)
        )
    return all(c.isalpha() and not korean.is_hangul(c) for c in chars)


class MatchTarget:
    """Typing state of one word: Idle → InProgress → Completed.

    Any rejected symbol resets progress to 0 (individual typo). A
    completed target stays completed until :meth:`reassign`.
    """

    def __init__(
        self,
        target_id: int,
        word: str,
        script: Script = Script.LATIN,
        display: Display | None = None,
    ) -> None:
        self.id = target_id
        self.display = display
        self.word = ""
        self.script = script
        self.symbols: list[str] = []
        self.progress = 0
        self.completed = False
        self.reassign(word, script)

    def __repr__(self) -> str:
        return f"MatchTarget(id={self.id}, word={self.word!r}, progress={self.progress}/{len(self.symbols)})"

    def __len__(self) -> int:
        return len(self.symbols)

    # ── Matching ─────────────────────────────────────────────────

    def expected(self) -> str | None:
        if self.completed or self.progress >= len(self.symbols):
            return None
        return self.symbols[self.progress]

    def can_accept(self, symbol: str) -> bool:
        expected = self.expected()
        if expected is None:
            return False
        if self.script is Script.LATIN:
            return expected == symbol.lower()
        return expected == symbol

    def accept(self, symbol: str) -> None:
        if not self.can_accept(symbol):
            raise ValueError(f"{self!r} cannot accept {symbol!r}")
        self.progress += 1
        self._notify_progress()

    def backspace(self) -> None:
        if self.progress > 0:
            self.progress -= 1
            self._notify_progress()

    def trigger_individual_typo(self) -> None:
        log.debug("Individual typo: %s reset from %d", self.word, self.progress)
        self.progress = 0
        self._notify_progress()

    def is_complete(self) -> bool:
        """Reached the end this pass and not yet handled."""
        return not self.completed and self.progress == len(self.symbols)

    def mark_completed(self) -> None:
        self.completed = True
        if self.display:
            self.display.show_completion()

    def show_typo(self) -> None:
        if self.display:
            self.display.show_typo()

    # ── Lifecycle ────────────────────────────────────────────────

    def reassign(self, word: str, script: Script) -> None:
        if not is_typable(word, script):
            raise ValueError(f"Word {word!r} cannot be typed in {script.value} mode")
        symbols = to_symbols(word, script)
        self.word = word
        self.script = script
        self.symbols = symbols
        self.progress = 0
        self.completed = False
        if self.display:
            self.display.set_word(word)
        self._notify_progress()

    def typed_text(self) -> str:
        """Text of the typed prefix, composed back into syllables for Hangul."""
        if self.script is Script.HANGUL:
            return korean.combine(self.symbols[: self.progress])
        return self.word[: self.progress]

    def _notify_progress(self) -> None:
        if self.display:
            self.display.update_progress(self.progress)


class WordLabel:
    """Headless Display: records what a floating label would show."""

    def __init__(self) -> None:
        self.word = ""
        self.progress = 0
        self.completions = 0
        self.typo_flashes = 0

    def set_word(self, text: str) -> None:
        self.word = text

    def update_progress(self, progress: int) -> None:
        self.progress = progress

    def show_completion(self) -> None:
        self.completions += 1

    def show_typo(self) -> None:
        self.typo_flashes += 1

    def to_dict(self) -> dict[str, object]:
        return {
            "word": self.word,
            "progress": self.progress,
            "completions": self.completions,
            "typo_flashes": self.typo_flashes,
        }
