"""Action sequencer — bounded attack queue + single-flight cast session."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, runtime_checkable

from typecast.events import EventChannel

log = logging.getLogger(__name__)


@runtime_checkable
class Liveness(Protocol):
    """Capability the sequencer revalidates a target against."""

    active: bool

    @property
    def is_dead(self) -> bool: ...

    @property
    def hit_points(self) -> int: ...

    def on_hit(self, damage: int) -> None: ...


@runtime_checkable
class Caster(Protocol):
    """The player-side actor that turns and plays the cast animation."""

    def rotation_time(self, target_id: int) -> float: ...

    def face(self, target_id: int) -> None: ...

    def play_cast(self, target_id: int) -> None: ...

    def cancel_cast(self) -> None: ...


@runtime_checkable
class Combat(Protocol):
    def fire(self, target_id: int) -> None: ...


class CastPhase(str, Enum):
    IDLE = "idle"
    ROTATING = "rotating"
    ANIMATING = "animating"
    FIRED = "fired"
    DONE = "done"


class CastOutcome(str, Enum):
    FIRED = "fired"          # fire() called
    SKIPPED = "skipped"      # reached the fire cue but the target was gone
    ABORTED = "aborted"      # target invalid before animating, or player hit
    TIMED_OUT = "timed_out"  # no fire cue before the deadline


@dataclass(slots=True)
class CastSession:
    target_id: int
    started: float
    deadline: float
    phase: CastPhase = CastPhase.IDLE
    outcome: CastOutcome | None = None
    timed_out: bool = False


class ActionSequencer:
    """Serializes completed words into one cast at a time.

    Queueing enabled: completions go into a FIFO of ``queue_capacity``
    and a single worker drains it. Queueing disabled: a completion casts
    immediately when idle and is dropped otherwise.
    """

    def __init__(
        self,
        resolve: Callable[[int], Liveness | None],
        combat: Combat,
        caster: Caster,
        events: EventChannel | None = None,
        *,
        queue_enabled: bool = True,
        queue_capacity: int = 3,
        cast_timeout: float = 3.0,
        smooth_rotation: bool = True,
        on_cast_done: Callable[[CastSession], None] | None = None,
    ) -> None:
        self._resolve = resolve
        self.combat = combat
        self.caster = caster
        self.events = events
        self.queue_enabled = queue_enabled
        self.queue_capacity = queue_capacity
        self.cast_timeout = cast_timeout
        self.smooth_rotation = smooth_rotation
        self.on_cast_done = on_cast_done

        self.queue: deque[int] = deque()
        self.session: CastSession | None = None
        self.history: list[CastSession] = []
        self.dropped = 0

        self._worker: asyncio.Task | None = None
        self._signal = asyncio.Event()
        self._fire_cue = False
        self._cast_complete = False
        self._interrupted = False

    # ── State ────────────────────────────────────────────────────

    @property
    def phase(self) -> CastPhase:
        return self.session.phase if self.session else CastPhase.IDLE

    @property
    def is_idle(self) -> bool:
        return self.session is None

    @property
    def is_draining(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def is_valid(self, target_id: int) -> bool:
        entity = self._resolve(target_id)
        if entity is None:
            return False
        return bool(entity.active) and not entity.is_dead and entity.hit_points > 0

    # ── Intake ───────────────────────────────────────────────────

    def pump(self) -> int:
        """Consume the event channel; called once per tick."""
        if self.events is None:
            return 0
        events = self.events.drain()
        for event in events:
            self.on_word_completed(event.target_id)
        return len(events)

    def on_word_completed(self, target_id: int) -> bool:
        """Enqueue or immediately cast. Returns False when dropped."""
        if not self.queue_enabled:
            if not self.is_idle or self.is_draining:
                log.debug("Casting, completion ignored: #%d", target_id)
                self.dropped += 1
                return False
            self._worker = asyncio.create_task(self._cast_one(target_id))
            return True

        if len(self.queue) >= self.queue_capacity:
            log.debug("Attack queue full, completion ignored: #%d", target_id)
            self.dropped += 1
            return False

        self.queue.append(target_id)
        log.debug("Queued attack on #%d (queue %d)", target_id, len(self.queue))
        if not self.is_draining:
            self._worker = asyncio.create_task(self._drain())
        return True

    async def wait_idle(self) -> None:
        """Wait until the worker has drained everything."""
        while self.is_draining:
            await asyncio.shield(self._worker)

    async def stop(self) -> None:
        self.queue.clear()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        self.session = None

    # ── External animation signals ───────────────────────────────

    def signal_fire_cue(self) -> None:
        self._fire_cue = True
        self._signal.set()

    def signal_cast_complete(self) -> None:
        self._cast_complete = True
        self._signal.set()

    def interrupt(self) -> None:
        """Player was hit: abort whatever cast is in flight."""
        if self.session is None:
            return
        log.info("Cast on #%d interrupted", self.session.target_id)
        self._interrupted = True
        self._signal.set()

    # ── Worker ───────────────────────────────────────────────────

    async def _drain(self) -> None:
        while self.queue:
            target_id = self.queue.popleft()
            if not self.is_valid(target_id):
                log.debug("Skipping invalid target #%d (queue %d)", target_id, len(self.queue))
                continue
            await self._cast_one(target_id)
        log.debug("Attack queue drained")

    async def _cast_one(self, target_id: int) -> CastSession:
        loop = asyncio.get_running_loop()
        now = loop.time()
        session = CastSession(target_id=target_id, started=now, deadline=now + self.cast_timeout)
        self.session = session
        self._fire_cue = False
        self._cast_complete = False
        self._interrupted = False
        self._signal.clear()
        try:
            await self._run_session(session)
        finally:
            session.phase = CastPhase.DONE
            self.session = None
            self.history.append(session)
            log.info("Cast on #%d done: %s", target_id, session.outcome.value if session.outcome else "?")
            if self.on_cast_done is not None:
                self.on_cast_done(session)
        return session

    async def _run_session(self, session: CastSession) -> None:
        target_id = session.target_id

        # Rotating
        session.phase = CastPhase.ROTATING
        if not self.is_valid(target_id):
            log.debug("Target #%d gone before rotating", target_id)
            session.outcome = CastOutcome.ABORTED
            return
        if self.smooth_rotation:
            duration = self.caster.rotation_time(target_id)
            if duration > 0:
                await self._wait(lambda: False, duration, session)
        if self._interrupted:
            session.outcome = CastOutcome.ABORTED
            return
        if self._remaining(session) <= 0:
            log.warning("Rotation toward #%d ran past the deadline", target_id)
            session.outcome = CastOutcome.TIMED_OUT
            session.timed_out = True
            return
        self.caster.face(target_id)

        # Animating
        session.phase = CastPhase.ANIMATING
        if not self.is_valid(target_id):
            log.debug("Target #%d gone before animating", target_id)
            session.outcome = CastOutcome.ABORTED
            return
        self.caster.play_cast(target_id)
        await self._wait(lambda: self._fire_cue or self._cast_complete, self._remaining(session), session)
        if self._interrupted:
            self._abort(session)
            return
        if not self._fire_cue:
            if self._cast_complete:
                # Animation ended without a fire cue
                session.outcome = CastOutcome.SKIPPED
                return
            log.warning("Cast animation timeout on #%d, forcing completion", target_id)
            self.caster.cancel_cast()
            session.outcome = CastOutcome.TIMED_OUT
            session.timed_out = True
            return

        # Fire cue
        if self.is_valid(target_id):
            try:
                self.combat.fire(target_id)
            except Exception:
                log.exception("fire(#%d) failed", target_id)
            session.outcome = CastOutcome.FIRED
        else:
            log.debug("Target #%d gone at fire cue, not firing", target_id)
            session.outcome = CastOutcome.SKIPPED
        session.phase = CastPhase.FIRED

        await self._wait(lambda: self._cast_complete, self._remaining(session), session)
        if self._interrupted:
            self.caster.cancel_cast()
        elif not self._cast_complete:
            log.warning("Cast completion signal lost on #%d, forcing completion", target_id)
            self.caster.cancel_cast()
            session.timed_out = True

    def _abort(self, session: CastSession) -> None:
        self.caster.cancel_cast()
        session.outcome = CastOutcome.ABORTED

    def _remaining(self, session: CastSession) -> float:
        return session.deadline - asyncio.get_running_loop().time()

    async def _wait(self, done: Callable[[], bool], timeout: float, session: CastSession) -> None:
        """Suspend until ``done()``, an interrupt, or ``timeout`` seconds pass.

        ``timeout`` is clipped to the session deadline.
        """
        loop = asyncio.get_running_loop()
        until = min(loop.time() + max(timeout, 0.0), session.deadline)
        while not done() and not self._interrupted:
            remaining = until - loop.time()
            if remaining <= 0:
                return
            self._signal.clear()
            if done() or self._interrupted:
                return
            try:
                await asyncio.wait_for(self._signal.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                return
