"""Dev-mode file watcher — auto-detect word list changes and queue reloads."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import awatch

if TYPE_CHECKING:
    from typecast.words import WordDatabase

log = logging.getLogger(__name__)


def is_word_list(path_str: str) -> bool:
    return Path(path_str).suffix == ".json"


async def start_watcher(words_dir: Path, words: WordDatabase) -> asyncio.Task:
    """Start watchfiles-based auto-reload for the word list directory."""

    async def _watch() -> None:
        log.info("File watcher started for %s", words_dir)
        async for changes in awatch(words_dir):
            changed = [p for _, p in changes if is_word_list(p)]
            if changed:
                log.debug("Word lists changed: %s", changed)
                words.queue_reload()

    return asyncio.create_task(_watch())
