"""Input router — broadcasts each keystroke to every live target and classifies typos."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from typecast import korean
from typecast.events import EventChannel, WordCompleted
from typecast.target import MatchTarget, Script

log = logging.getLogger(__name__)

# Used when the word supply comes back empty
PLACEHOLDER_WORDS = {Script.LATIN: "word", Script.HANGUL: "단어"}

BACKSPACE_CHARS = ("\b", "\x7f")


@runtime_checkable
class Scoring(Protocol):
    def on_global_typo(self) -> None: ...


@runtime_checkable
class WordSupply(Protocol):
    def next_word(self, script: Script) -> str: ...


@dataclass(slots=True)
class SubmitResult:
    """Outcome of one classification pass."""

    symbol: str
    accepted: list[int] = field(default_factory=list)
    typos: dict[int, int] = field(default_factory=dict)  # target_id → progress before reset
    global_typo: bool = False
    completed: list[int] = field(default_factory=list)


class InputRouter:
    """Owns the live target registry and resolves each symbol across all of it."""

    def __init__(
        self,
        events: EventChannel,
        scoring: Scoring | None = None,
        word_supply: WordSupply | None = None,
        *,
        korean_mode: bool = False,
        allow_backspace: bool = True,
        significant_progress: int = 2,
        typo_effect_duration: float = 0.5,
        reassign_delay: float = 0.5,
        is_eligible: Callable[[int], bool] | None = None,
        ui: Any = None,
    ) -> None:
        self.events = events
        self.scoring = scoring
        self.word_supply = word_supply
        self.korean_mode = korean_mode
        self.allow_backspace = allow_backspace
        self.significant_progress = significant_progress
        self.typo_effect_duration = typo_effect_duration
        self.reassign_delay = reassign_delay
        self.is_eligible = is_eligible
        self.ui = ui

        self.active = True  # False while paused / game over
        self.registry: dict[int, MatchTarget] = {}
        self._pending: list[list[Any]] = []  # [remaining_seconds, target]
        self._typo_timer = 0.0

    @property
    def script(self) -> Script:
        return Script.HANGUL if self.korean_mode else Script.LATIN

    @property
    def is_global_typo(self) -> bool:
        """True while the global typo effect window is open."""
        return self._typo_timer > 0

    # ── Registry ─────────────────────────────────────────────────

    def register(self, target: MatchTarget) -> None:
        if target.id not in self.registry:
            self.registry[target.id] = target
            log.debug("Registered target #%d (%s)", target.id, target.word)

    def unregister(self, target: MatchTarget | int) -> None:
        target_id = target if isinstance(target, int) else target.id
        self.registry.pop(target_id, None)
        self._pending = [p for p in self._pending if p[1].id != target_id]

    def targets(self) -> list[MatchTarget]:
        return list(self.registry.values())

    # ── Input entry points ───────────────────────────────────────

    def submit_symbol(self, symbol: str) -> SubmitResult:
        """Run one atomic classification pass for ``symbol``."""
        result = SubmitResult(symbol=symbol)
        if not self.active:
            return result

        snapshot = list(self.registry.values())
        prev = {t.id: t.progress for t in snapshot}
        accepting: list[MatchTarget] = []
        typo_targets: list[MatchTarget] = []

        for target in snapshot:
            if target.can_accept(symbol):
                target.accept(symbol)
                accepting.append(target)
                result.accepted.append(target.id)
                log.debug("%s: %r accepted, %d → %d",
                          target.word, symbol, prev[target.id], target.progress)
            elif prev[target.id] > 0:
                target.trigger_individual_typo()
                typo_targets.append(target)
                result.typos[target.id] = prev[target.id]

        if result.typos and self._is_global_typo(result.typos, accepting):
            result.global_typo = True
            self._trigger_global_typo(typo_targets)

        for target in snapshot:
            if target.is_complete():
                self._complete(target)
                result.completed.append(target.id)

        return result

    def submit_backspace(self) -> bool:
        if not self.active or not self.allow_backspace:
            return False
        for target in list(self.registry.values()):
            target.backspace()
        log.debug("Backspace")
        return True

    def submit_key(self, key: str, shift: bool = False) -> SubmitResult | None:
        """Raw key entry: key label plus shift state."""
        if self.korean_mode:
            jamo = korean.key_to_jamo(key, shift)
            if jamo is None:
                return None
            return self.submit_symbol(jamo)
        return self._submit_char(key)

    def submit_text(self, text: str) -> list[SubmitResult]:
        """Feed a run of typed characters, e.g. one websocket frame."""
        results: list[SubmitResult] = []
        for char in text:
            if char in BACKSPACE_CHARS:
                self.submit_backspace()
                continue
            if self.korean_mode:
                for symbol in self._korean_symbols(char):
                    results.append(self.submit_symbol(symbol))
            else:
                result = self._submit_char(char)
                if result is not None:
                    results.append(result)
        return results

    def _submit_char(self, char: str) -> SubmitResult | None:
        if len(char) != 1:
            return None
        if korean.is_hangul(char):
            # Hangul while in English mode: IME is on the wrong layout
            if self.ui is not None:
                self.ui.show_ime_warning()
            log.debug("Hangul input %r ignored in English mode", char)
            return None
        if not char.isalpha():
            return None
        return self.submit_symbol(char.lower())

    @staticmethod
    def _korean_symbols(char: str) -> list[str]:
        if korean.is_syllable(char):
            return korean.split(char)
        if korean.is_vowel(char) or korean.is_consonant(char):
            return [char]
        if char.isascii() and char.isalpha():
            jamo = korean.key_to_jamo(char, shift=char.isupper())
            return [jamo] if jamo else []
        return []

    # ── Global typo rule ─────────────────────────────────────────

    def _is_global_typo(self, typos: dict[int, int], accepting: list[MatchTarget]) -> bool:
        significant = [p for p in typos.values() if p >= self.significant_progress]
        if not significant:
            log.debug("Global typo avoided: first-letter pick only")
            return False

        max_typo_progress = max(typos.values())
        for target in accepting:
            if target.progress > max_typo_progress:
                log.debug("Global typo avoided: %s ahead (%d > %d)",
                          target.word, target.progress, max_typo_progress)
                return False
        return True

    def _trigger_global_typo(self, typo_targets: list[MatchTarget]) -> None:
        log.info("Global typo (%d targets reset)", len(typo_targets))
        self._typo_timer = self.typo_effect_duration
        if self.scoring is not None:
            self.scoring.on_global_typo()
        for target in typo_targets:
            target.show_typo()

    # ── Completion + reassignment ────────────────────────────────

    def _complete(self, target: MatchTarget) -> None:
        log.info("Word completed: %s (#%d)", target.word, target.id)
        target.mark_completed()
        self.events.publish(WordCompleted(target.id, target.word))
        self.unregister(target)
        self._pending.append([self.reassign_delay, target])

    def tick(self, dt: float) -> None:
        """Advance the typo effect window and due reassignments."""
        if self._typo_timer > 0:
            self._typo_timer = max(0.0, self._typo_timer - dt)

        due: list[MatchTarget] = []
        for entry in self._pending:
            entry[0] -= dt
            if entry[0] <= 0:
                due.append(entry[1])
        if not due:
            return
        self._pending = [p for p in self._pending if p[0] > 0]
        for target in due:
            self._reassign(target)

    def _reassign(self, target: MatchTarget) -> None:
        if self.is_eligible is not None and not self.is_eligible(target.id):
            log.debug("Target #%d no longer eligible, not reassigned", target.id)
            return
        if self.word_supply is None:
            return
        script = self.script
        word = self.word_supply.next_word(script) or PLACEHOLDER_WORDS[script]
        try:
            target.reassign(word, script)
        except ValueError:
            log.warning("Word %r unusable for %s, using placeholder", word, script.value)
            target.reassign(PLACEHOLDER_WORDS[script], script)
        self.register(target)
