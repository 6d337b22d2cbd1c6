"""REST + WebSocket frame handling tests."""

import json

import pytest
from fastapi import HTTPException

import typecast.api as api_mod
from typecast.api import api_reload, api_stats, api_targets, get_engine, handle_frame
from typecast.engine import Engine
from typecast.target import Script


def _make_engine(language="english"):
    eng = Engine(config={"language": language, "api": {"enabled": False}})
    eng.words.load()
    enemy = eng.spawn_enemy()
    enemy.target.reassign("alpha" if language == "english" else "가", eng.router.script)
    return eng, enemy


class TestEngineRef:
    def test_not_ready(self):
        api_mod._engine = None
        with pytest.raises(HTTPException) as exc:
            get_engine()
        assert exc.value.status_code == 503


class TestREST:
    @pytest.mark.asyncio
    async def test_targets(self):
        eng, enemy = _make_engine()
        api_mod._engine = eng

        response = await api_targets()
        result = json.loads(response.body)
        assert result["count"] == 1
        assert result["targets"][0]["word"] == "alpha"
        assert result["targets"][0]["id"] == enemy.id

        api_mod._engine = None

    @pytest.mark.asyncio
    async def test_stats(self):
        eng, _ = _make_engine()
        api_mod._engine = eng

        response = await api_stats()
        result = json.loads(response.body)
        assert result["language"] == "english"
        assert result["phase"] == "idle"
        assert result["score"]["words_completed"] == 0
        assert result["words"]["latin"]["all"] > 0

        api_mod._engine = None

    @pytest.mark.asyncio
    async def test_reload_is_queued(self):
        eng, _ = _make_engine()
        api_mod._engine = eng

        response = await api_reload()
        assert json.loads(response.body) == {"status": "queued"}
        assert eng.words.apply_pending() is True

        api_mod._engine = None


class TestFrames:
    def test_plain_text(self):
        eng, enemy = _make_engine()
        reply = handle_frame(eng, "alp")
        assert reply["input"]["accepted"] == 3
        assert reply["state"]["targets"][0]["progress"] == 3

    def test_completion_reported(self):
        eng, enemy = _make_engine()
        reply = handle_frame(eng, "alpha")
        assert reply["input"]["completed"] == [enemy.id]

    def test_global_typo_reported(self):
        eng, _ = _make_engine()
        reply = handle_frame(eng, "alx")
        assert reply["input"]["global_typo"] is True
        assert reply["input"]["typos"] == 1

    def test_backspace(self):
        eng, enemy = _make_engine()
        handle_frame(eng, "al")
        handle_frame(eng, "backspace")
        assert enemy.target.progress == 1

    def test_key_event_korean(self):
        eng, enemy = _make_engine("korean")
        handle_frame(eng, json.dumps({"key": "R"}))
        reply = handle_frame(eng, json.dumps({"key": "K", "shift": False}))
        assert reply["input"]["completed"] == [enemy.id]

    def test_key_event_shift(self):
        eng, enemy = _make_engine("korean")
        enemy.target.reassign("까", Script.HANGUL)
        reply = handle_frame(eng, json.dumps({"key": "R", "shift": True}))
        assert reply["input"]["accepted"] == 1

    def test_unmapped_key(self):
        eng, _ = _make_engine("korean")
        reply = handle_frame(eng, json.dumps({"key": "1"}))
        assert reply["input"]["accepted"] == 0

    @pytest.mark.parametrize("frame", ["{not json", json.dumps({"shift": True}), json.dumps({"key": 5})])
    def test_bad_frames(self, frame):
        eng, _ = _make_engine()
        assert "error" in handle_frame(eng, frame)
