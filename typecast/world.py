"""World model — enemies that carry words, the player, spawning and hits."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field

from typecast.target import MatchTarget, WordLabel

log = logging.getLogger(__name__)


# ── Runtime instances ────────────────────────────────────────────

_next_instance_id = 0


def _next_id() -> int:
    global _next_instance_id
    _next_instance_id += 1
    return _next_instance_id


@dataclass(slots=True)
class Enemy:
    id: int
    name: str
    hp: int
    max_hp: int
    bearing: float = 0.0  # degrees around the player
    active: bool = True
    dead: bool = False
    target: MatchTarget | None = None
    label: WordLabel = field(default_factory=WordLabel)

    @property
    def is_dead(self) -> bool:
        return self.dead

    @property
    def hit_points(self) -> int:
        return self.hp

    def on_hit(self, damage: int) -> None:
        if self.dead:
            return
        self.hp = max(0, self.hp - damage)
        if self.hp <= 0:
            self.dead = True


@dataclass(slots=True)
class Player:
    hp: int = 100
    max_hp: int = 100
    facing: float = 0.0
    invincible_time: float = 1.5
    invincible_until: float = 0.0

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    def is_invincible(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now < self.invincible_until

    def on_hit(self, damage: int, now: float | None = None) -> bool:
        """Apply damage unless invincible. Returns True if the hit landed."""
        now = time.monotonic() if now is None else now
        if self.is_dead or self.is_invincible(now):
            return False
        self.hp = max(0, self.hp - damage)
        self.invincible_until = now + self.invincible_time
        return True


def angle_between(a: float, b: float) -> float:
    """Smallest absolute difference between two bearings, in degrees."""
    diff = (b - a) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


# ── World ────────────────────────────────────────────────────────

ENEMY_NAMES = ["goblin", "skeleton", "slime", "wraith", "orc", "imp"]


class World:
    """Live enemies keyed by id. The sequencer resolves target ids here."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.enemies: dict[int, Enemy] = {}
        self.player = Player()
        self.rng = rng or random.Random()
        self.kills = 0

    def get_enemy(self, enemy_id: int) -> Enemy | None:
        return self.enemies.get(enemy_id)

    def alive(self) -> list[Enemy]:
        return [e for e in self.enemies.values() if e.active and not e.dead]

    def spawn(self, hp: int = 1, name: str | None = None, bearing: float | None = None) -> Enemy:
        enemy = Enemy(
            id=_next_id(),
            name=name or self.rng.choice(ENEMY_NAMES),
            hp=hp,
            max_hp=hp,
            bearing=self.rng.uniform(0.0, 360.0) if bearing is None else bearing,
        )
        self.enemies[enemy.id] = enemy
        log.info("Spawned %s #%d (hp %d)", enemy.name, enemy.id, hp)
        return enemy

    def apply_hit(self, enemy_id: int, damage: int = 1) -> bool:
        """Hit an enemy. Returns True if this hit killed it."""
        enemy = self.enemies.get(enemy_id)
        if enemy is None or enemy.dead:
            return False
        enemy.on_hit(damage)
        if enemy.dead:
            self.kills += 1
            log.info("%s #%d died", enemy.name, enemy.id)
            return True
        return False

    def despawn(self, enemy_id: int) -> Enemy | None:
        enemy = self.enemies.pop(enemy_id, None)
        if enemy is not None:
            enemy.active = False
        return enemy

    def is_eligible(self, enemy_id: int) -> bool:
        """Whether the enemy may (still) carry a word."""
        enemy = self.enemies.get(enemy_id)
        return enemy is not None and enemy.active and not enemy.dead
