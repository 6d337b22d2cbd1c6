"""Bounded notification channel between the input router and the sequencer."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WordCompleted:
    target_id: int
    word: str = ""


class EventChannel:
    """FIFO of notifications, published during a pass and drained once per tick."""

    def __init__(self, capacity: int = 64) -> None:
        self.capacity = capacity
        self._events: deque[WordCompleted] = deque()
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._events)

    def publish(self, event: WordCompleted) -> bool:
        if len(self._events) >= self.capacity:
            self.dropped += 1
            log.warning("Event channel full (%d), dropping %s", self.capacity, event)
            return False
        self._events.append(event)
        return True

    def drain(self) -> list[WordCompleted]:
        events = list(self._events)
        self._events.clear()
        return events
