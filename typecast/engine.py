"""typecast engine — boot sequence, tick loop, service wiring."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from pathlib import Path
from typing import Any

import yaml

from typecast.avatar import PlayerAvatar
from typecast.events import EventChannel
from typecast.router import PLACEHOLDER_WORDS, InputRouter, SubmitResult
from typecast.score import Scoreboard
from typecast.sequencer import ActionSequencer
from typecast.target import MatchTarget
from typecast.words import WordDatabase
from typecast.world import Enemy, World

log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent


class Engine:
    """Owns the world and every typing/combat service; drives the tick loop."""

    def __init__(self, config_path: str | Path | None = None, config: dict[str, Any] | None = None) -> None:
        if config is None:
            config_path = config_path or BASE_DIR / "config" / "default.yaml"
            with open(config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        self.config: dict[str, Any] = config

        typing_cfg = self.config.get("typing", {})
        combat_cfg = self.config.get("combat", {})
        spawner_cfg = self.config.get("spawner", {})

        self.korean_mode = self.config.get("language", "english") == "korean"
        self.max_enemies: int = spawner_cfg.get("max_enemies", 5)
        self.spawn_interval: float = spawner_cfg.get("spawn_interval", 2.5)
        self.enemy_hp: int = spawner_cfg.get("enemy_hp", 1)
        self.damage: int = combat_cfg.get("damage", 1)

        self.world = World()
        self.world.player.invincible_time = combat_cfg.get("hit_invincible_time", 1.5)
        self.score = Scoreboard()
        self.words = WordDatabase(self.config.get("words", {}), base_dir=BASE_DIR)
        self.events = EventChannel(typing_cfg.get("event_channel_size", 64))

        self.router = InputRouter(
            self.events,
            scoring=self.score,
            word_supply=self.words,
            korean_mode=self.korean_mode,
            allow_backspace=typing_cfg.get("allow_backspace", True),
            significant_progress=typing_cfg.get("significant_progress", 2),
            typo_effect_duration=typing_cfg.get("typo_effect_duration", 0.5),
            reassign_delay=typing_cfg.get("reassign_delay", 0.5),
            is_eligible=self.world.is_eligible,
            ui=self,
        )
        self.avatar = PlayerAvatar(
            self.world,
            rotation_speed=combat_cfg.get("rotation_speed", 720.0),
            fire_delay=combat_cfg.get("cast_fire_delay", 0.4),
            cast_duration=combat_cfg.get("cast_duration", 0.9),
        )
        self.sequencer = ActionSequencer(
            self.world.get_enemy,
            combat=self,
            caster=self.avatar,
            events=self.events,
            queue_enabled=combat_cfg.get("queue_enabled", True),
            queue_capacity=combat_cfg.get("queue_capacity", 3),
            cast_timeout=combat_cfg.get("cast_timeout", 3.0),
            smooth_rotation=combat_cfg.get("smooth_rotation", True),
            on_cast_done=self.score.on_cast_done,
        )
        self.avatar.bind(self.sequencer)

        self.ime_warnings = 0
        self._running = False
        self._tick = 0
        self._spawn_timer = 0.0
        self._watcher_task: asyncio.Task | None = None

    # ── Boot sequence ────────────────────────────────────────────

    async def boot(self) -> None:
        log.info("=== typecast booting: %s (%s) ===",
                 self.config.get("name", "typecast"), "korean" if self.korean_mode else "english")

        # 1. Word lists
        self.words.load()

        # 2. Initial enemies
        for _ in range(self.max_enemies):
            self.spawn_enemy()

        # 3. API
        api_cfg = self.config.get("api", {})
        if api_cfg.get("enabled", False):
            from typecast.api import start_api
            await start_api(self, host=api_cfg.get("host", "0.0.0.0"), port=api_cfg.get("port", 8080))

        # 4. Word list watcher (dev mode)
        if self.config.get("dev", {}).get("hot_reload", False):
            from typecast.watcher import start_watcher
            self._watcher_task = await start_watcher(BASE_DIR / "data" / "words", self.words)

        self._running = True
        log.info("=== Boot complete: %d targets live ===", len(self.router.registry))

    async def shutdown(self) -> None:
        log.info("Shutting down...")
        self._running = False
        await self.sequencer.stop()

        if self._watcher_task:
            self._watcher_task.cancel()

        if self.config.get("api", {}).get("enabled", False):
            from typecast.api import stop_api
            await stop_api()
        log.info("Shutdown complete — %s", self.score.to_dict())

    # ── Game loop ────────────────────────────────────────────────

    async def run_loop(self) -> None:
        """Main loop — fixed tick rate."""
        tick_interval = 1.0 / self.config.get("engine", {}).get("tick_rate", 30)
        last = time.monotonic()

        while self._running:
            tick_start = time.monotonic()
            self.update(tick_start - last)
            last = tick_start

            elapsed = time.monotonic() - tick_start
            sleep_time = tick_interval - elapsed
            await asyncio.sleep(sleep_time if sleep_time > 0 else 0)

    def update(self, dt: float) -> None:
        """One tick: reloads, timers, completions → sequencer, spawning."""
        self._tick += 1

        # Apply word list reloads at tick boundary
        self.words.apply_pending()

        self.router.tick(dt)
        self.sequencer.pump()

        self._spawn_timer += dt
        if self._spawn_timer >= self.spawn_interval:
            self._spawn_timer = 0.0
            if len(self.world.alive()) < self.max_enemies and self.router.active:
                self.spawn_enemy()

    # ── World / typing glue ──────────────────────────────────────

    def spawn_enemy(self) -> Enemy:
        enemy = self.world.spawn(hp=self.enemy_hp)
        script = self.router.script
        word = self.words.next_word(script)
        try:
            enemy.target = MatchTarget(enemy.id, word, script, display=enemy.label)
        except ValueError:
            log.warning("Word %r unusable for %s, using placeholder", word, script.value)
            enemy.target = MatchTarget(enemy.id, PLACEHOLDER_WORDS[script], script, display=enemy.label)
        self.router.register(enemy.target)
        return enemy

    def handle_input(self, text: str) -> list[SubmitResult]:
        results = self.router.submit_text(text)
        for result in results:
            for _ in result.completed:
                self.score.on_word_completed()
        return results

    def handle_key(self, key: str, shift: bool = False) -> SubmitResult | None:
        if key.lower() == "backspace":
            self.router.submit_backspace()
            return None
        result = self.router.submit_key(key, shift)
        if result is not None:
            for _ in result.completed:
                self.score.on_word_completed()
        return result

    def fire(self, target_id: int) -> None:
        """Combat collaborator: one projectile hit on the target."""
        killed = self.world.apply_hit(target_id, self.damage)
        log.info("Fired at #%d%s", target_id, " (killed)" if killed else "")
        if killed:
            self.score.on_kill()
            self.router.unregister(target_id)
            self.world.despawn(target_id)

    def hit_player(self, damage: int) -> bool:
        landed = self.world.player.on_hit(damage)
        if not landed:
            return False
        self.sequencer.interrupt()
        if self.world.player.is_dead:
            log.info("Player died — input disabled")
            self.router.active = False
        return True

    def show_ime_warning(self) -> None:
        self.ime_warnings += 1
        log.warning("Hangul input while in English mode — check the IME (한/영)")

    def pause(self) -> None:
        self.router.active = False

    def resume(self) -> None:
        if not self.world.player.is_dead:
            self.router.active = True

    def snapshot(self) -> dict[str, Any]:
        targets = []
        for enemy in self.world.alive():
            t = enemy.target
            targets.append({
                "id": enemy.id,
                "name": enemy.name,
                "hp": enemy.hp,
                "word": t.word if t else "",
                "typed": t.typed_text() if t else "",
                "progress": t.progress if t else 0,
                "length": len(t.symbols) if t else 0,
                "registered": enemy.id in self.router.registry,
            })
        return {
            "tick": self._tick,
            "targets": targets,
            "queue": list(self.sequencer.queue),
            "phase": self.sequencer.phase.value,
            "global_typo": self.router.is_global_typo,
            "player_hp": self.world.player.hp,
            "score": self.score.to_dict(),
        }

    # ── Entry point ──────────────────────────────────────────────

    async def run(self) -> None:
        """Boot and run the engine."""
        await self.boot()
        try:
            await self.run_loop()
        except asyncio.CancelledError:
            pass
        finally:
            await self.shutdown()


# ── Main ─────────────────────────────────────────────────────────

def main() -> None:
    name = os.environ.get("CONFIG", "default")
    config_path = BASE_DIR / "config" / f"{name}.yaml"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    engine = Engine(config_path)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def _signal_handler() -> None:
        engine._running = False

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    try:
        loop.run_until_complete(engine.run())
    finally:
        loop.close()


if __name__ == "__main__":
    main()
