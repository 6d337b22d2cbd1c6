"""Scoreboard — the scoring collaborator."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from typecast.sequencer import CastOutcome, CastSession

log = logging.getLogger(__name__)


@dataclass(slots=True)
class Scoreboard:
    words_completed: int = 0
    global_typos: int = 0
    casts_fired: int = 0
    casts_missed: int = 0
    kills: int = 0

    def on_global_typo(self) -> None:
        self.global_typos += 1

    def on_word_completed(self) -> None:
        self.words_completed += 1

    def on_cast_done(self, session: CastSession) -> None:
        if session.outcome is CastOutcome.FIRED:
            self.casts_fired += 1
        else:
            self.casts_missed += 1

    def on_kill(self) -> None:
        self.kills += 1

    @property
    def accuracy(self) -> float:
        """Completed words over completed words plus global typos."""
        total = self.words_completed + self.global_typos
        return self.words_completed / total if total else 1.0

    def to_dict(self) -> dict[str, float | int]:
        return {
            "words_completed": self.words_completed,
            "global_typos": self.global_typos,
            "casts_fired": self.casts_fired,
            "casts_missed": self.casts_missed,
            "kills": self.kills,
            "accuracy": round(self.accuracy, 3),
        }
