"""Word database — difficulty tiers, weighted random pick, JSON word lists."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any

from typecast import korean
from typecast.target import Script, is_typable

log = logging.getLogger(__name__)

EASY, MEDIUM, HARD = 0, 1, 2
TIER_NAMES = ["easy", "medium", "hard"]

# Last resort when every list is empty
FALLBACK_WORD = {Script.LATIN: "word", Script.HANGUL: "단어"}

DEFAULT_WORDS: dict[Script, list[list[str]]] = {
    Script.LATIN: [
        ["cat", "dog", "run", "jump", "fire", "ice", "rock", "tree", "bird", "fish"],
        ["house", "water", "green", "black", "white", "quick", "brave", "smart", "ghost", "magic"],
        ["dragon", "wizard", "castle", "forest", "lightning", "thunder", "crystal", "shadow",
         "warrior", "monster"],
    ],
    Script.HANGUL: [
        ["나무", "바다", "사자", "모자", "구두", "오리"],
        ["불꽃", "얼음", "바람", "번개", "전사", "괴물"],
        ["마법사", "드래곤", "그림자", "수정구슬", "천둥번개", "마법의숲", "어둠의성"],
    ],
}


class WordList:
    """One script's words, bucketed by length."""

    def __init__(self, script: Script, easy_max_length: int = 4, medium_max_length: int = 6) -> None:
        self.script = script
        self.easy_max_length = easy_max_length
        self.medium_max_length = medium_max_length
        self.all_words: list[str] = []
        self.tiers: list[list[str]] = [[], [], []]

    def _length(self, word: str) -> int:
        # Hangul difficulty counts keystrokes, not syllables
        if self.script is Script.HANGUL:
            return len(korean.split(word))
        return len(word)

    def set_words(self, words: list[str]) -> None:
        self.all_words = []
        self.tiers = [[], [], []]
        for raw in words:
            if not isinstance(raw, str):
                continue
            word = raw.strip().lower()
            if len(word) < 2:
                continue
            if not is_typable(word, self.script):
                log.debug("%s: dropping untypable word %r", self.script.value, word)
                continue
            self.all_words.append(word)
            n = self._length(word)
            if n <= self.easy_max_length:
                self.tiers[EASY].append(word)
            elif n <= self.medium_max_length:
                self.tiers[MEDIUM].append(word)
            else:
                self.tiers[HARD].append(word)

        if self.all_words and not all(self.tiers):
            log.warning("%s: some difficulty tiers are empty, falling back to all words",
                        self.script.value)

    def load_defaults(self) -> None:
        log.info("Using built-in %s word list", self.script.value)
        self.set_words([w for tier in DEFAULT_WORDS[self.script] for w in tier])

    def load_file(self, path: Path) -> bool:
        """Load a JSON array of words. Falls back to defaults on any problem."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            log.warning("Word list not found: %s", path)
            self.load_defaults()
            return False
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("Word list %s unreadable: %s", path, e)
            self.load_defaults()
            return False

        if isinstance(data, dict):
            data = data.get("words")
        if not isinstance(data, list):
            log.warning("Word list %s is not a JSON array", path)
            self.load_defaults()
            return False

        self.set_words(data)
        if not self.all_words:
            self.load_defaults()
            return False
        log.info("Loaded %d %s words from %s (easy %d / medium %d / hard %d)",
                 len(self.all_words), self.script.value, path.name,
                 *(len(t) for t in self.tiers))
        return True

    def pick(self, tier: int, rng: random.Random) -> str:
        words = self.tiers[tier] if 0 <= tier < len(self.tiers) else []
        if not words:
            if self.all_words:
                return rng.choice(self.all_words)
            return FALLBACK_WORD[self.script]
        return rng.choice(words)


class WordDatabase:
    """Word supply for match targets (one list per script)."""

    def __init__(self, config: dict[str, Any] | None = None, base_dir: Path | None = None,
                 rng: random.Random | None = None) -> None:
        cfg = config or {}
        self.base_dir = base_dir or Path.cwd()
        self.easy_chance: float = cfg.get("easy_chance", 0.5)
        self.medium_chance: float = cfg.get("medium_chance", 0.3)
        self.paths: dict[Script, Path | None] = {
            Script.LATIN: self._resolve(cfg.get("english")),
            Script.HANGUL: self._resolve(cfg.get("korean")),
        }
        easy_max = cfg.get("easy_max_length", 4)
        medium_max = cfg.get("medium_max_length", 6)
        self.lists = {
            script: WordList(script, easy_max, medium_max) for script in Script
        }
        self.rng = rng or random.Random()
        self._reload_pending = False

    def _resolve(self, path: str | None) -> Path | None:
        if not path:
            return None
        p = Path(path)
        return p if p.is_absolute() else self.base_dir / p

    def load(self) -> None:
        for script, wl in self.lists.items():
            path = self.paths[script]
            if path is None:
                wl.load_defaults()
            else:
                wl.load_file(path)

    # ── Picking ──────────────────────────────────────────────────

    def next_word(self, script: Script) -> str:
        roll = self.rng.random()
        if roll < self.easy_chance:
            tier = EASY
        elif roll < self.easy_chance + self.medium_chance:
            tier = MEDIUM
        else:
            tier = HARD
        return self.lists[script].pick(tier, self.rng)

    def word_by_difficulty(self, script: Script, difficulty: int) -> str:
        if difficulty not in (EASY, MEDIUM, HARD):
            return self.next_word(script)
        return self.lists[script].pick(difficulty, self.rng)

    # ── Reload (applied at tick boundary) ────────────────────────

    def queue_reload(self) -> None:
        if not self._reload_pending:
            self._reload_pending = True
            log.info("Queued word list reload")

    def apply_pending(self) -> bool:
        if not self._reload_pending:
            return False
        self._reload_pending = False
        self.load()
        return True

    def stats(self) -> dict[str, dict[str, int]]:
        out: dict[str, dict[str, int]] = {}
        for script, wl in self.lists.items():
            entry = {"all": len(wl.all_words)}
            for name, tier in zip(TIER_NAMES, wl.tiers):
                entry[name] = len(tier)
            out[script.value] = entry
        return out
