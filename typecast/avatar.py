"""Player avatar — turns toward targets and stands in for the cast animation.

The animation is simulated with timers: ``fire_delay`` seconds after
``play_cast`` the fire cue is signalled, ``cast_duration`` seconds after
it the cast completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from typecast.world import World, angle_between

if TYPE_CHECKING:
    from typecast.sequencer import ActionSequencer

log = logging.getLogger(__name__)


class PlayerAvatar:
    def __init__(
        self,
        world: World,
        rotation_speed: float = 720.0,
        fire_delay: float = 0.4,
        cast_duration: float = 0.9,
    ) -> None:
        self.world = world
        self.rotation_speed = rotation_speed
        self.fire_delay = fire_delay
        self.cast_duration = cast_duration
        self.sequencer: ActionSequencer | None = None
        self._timers: list[asyncio.TimerHandle] = []

    def bind(self, sequencer: ActionSequencer) -> None:
        self.sequencer = sequencer

    def rotation_time(self, target_id: int) -> float:
        enemy = self.world.get_enemy(target_id)
        if enemy is None or self.rotation_speed <= 0:
            return 0.0
        return angle_between(self.world.player.facing, enemy.bearing) / self.rotation_speed

    def face(self, target_id: int) -> None:
        enemy = self.world.get_enemy(target_id)
        if enemy is not None:
            self.world.player.facing = enemy.bearing

    def play_cast(self, target_id: int) -> None:
        if self.sequencer is None:
            return
        loop = asyncio.get_running_loop()
        self.cancel_cast()
        self._timers = [
            loop.call_later(self.fire_delay, self.sequencer.signal_fire_cue),
            loop.call_later(self.cast_duration, self.sequencer.signal_cast_complete),
        ]
        log.debug("Cast animation started on #%d", target_id)

    def cancel_cast(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers = []
