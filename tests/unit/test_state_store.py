"""
State Store Tests
Level 2: AppState snapshot round trip on disk (tmp_path).
"""

from __future__ import annotations

import pytest

from capital_agents.exceptions import OutputWriteError, StateLoadError, StateNotFoundError
from capital_agents.schemas.app_state import AppState
from capital_agents.tools.state_store import JsonStateStore

from tests.fixtures.conftest import (
    FIXED_NOW,
    build_sample_opportunities,
    build_sample_priorities,
    build_sample_projects,
)


def _state() -> AppState:
    return AppState(
        total_capital=90e9,
        priorities=build_sample_priorities(),
        opportunities=build_sample_opportunities(),
        validated_projects=build_sample_projects(),
    )


class TestJsonStateStore:

    @pytest.mark.behavior
    def test_round_trip(self, tmp_path):
        store = JsonStateStore(tmp_path / "state.json")
        state = _state()
        store.save(state)
        assert store.load() == state

    @pytest.mark.behavior
    def test_datetimes_survive(self, tmp_path):
        store = JsonStateStore(tmp_path / "state.json")
        store.save(_state())
        loaded = store.load()
        assert loaded.opportunities[0].updated_date == FIXED_NOW
        assert loaded.validated_projects[0].created_at == FIXED_NOW

    @pytest.mark.behavior
    def test_creates_parent_directories(self, tmp_path):
        store = JsonStateStore(tmp_path / "nested" / "dir" / "state.json")
        assert not store.exists()
        store.save(AppState())
        assert store.exists()

    @pytest.mark.behavior
    def test_missing_file(self, tmp_path):
        with pytest.raises(StateNotFoundError):
            JsonStateStore(tmp_path / "absent.json").load()

    @pytest.mark.behavior
    def test_garbage_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StateLoadError):
            JsonStateStore(path).load()

    @pytest.mark.behavior
    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text('{"total_capital": -5}', encoding="utf-8")
        with pytest.raises(StateLoadError):
            JsonStateStore(path).load()

    @pytest.mark.behavior
    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(OutputWriteError):
            JsonStateStore(blocker / "state.json").save(AppState())
