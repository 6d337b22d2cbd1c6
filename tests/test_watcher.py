"""Tests for the dev-mode word list watcher."""

import asyncio

import pytest
from unittest.mock import MagicMock, patch

from typecast.watcher import is_word_list, start_watcher


class TestWatcher:
    def test_is_word_list(self):
        assert is_word_list("/data/words/english.json") is True
        assert is_word_list("/data/words/english.json.swp") is False
        assert is_word_list("/data/words/README.md") is False

    @pytest.mark.asyncio
    async def test_changes_queue_reload(self, tmp_path):
        async def fake_awatch(path):
            yield {(2, str(tmp_path / "notes.txt"))}
            yield {(2, str(tmp_path / "english.json"))}

        words = MagicMock()
        with patch("typecast.watcher.awatch", fake_awatch):
            task = await start_watcher(tmp_path, words)
            await task
        words.queue_reload.assert_called_once()
