"""Tests for session state and its on-disk store."""

import json

from mama_gateway.session import (
    CANDIDATE_MAX_CHARS,
    MAX_CAPTURE_CANDIDATES,
    PROMPT_MAX_CHARS,
    SessionState,
    SessionStateStore,
)


class TestSessionState:
    def test_defaults(self):
        state = SessionState()
        assert state.session_started_at is None
        assert state.last_user_prompt is None
        assert state.last_compaction_at is None
        assert state.auto_capture_candidates == []
        assert state.compaction_occurred is False

    def test_reset_clears_everything(self):
        state = SessionState(
            session_started_at="old",
            last_user_prompt="prompt",
            last_compaction_at="then",
            auto_capture_candidates=["a"],
            compaction_occurred=True,
        )
        state.reset("now")
        assert state == SessionState(session_started_at="now")

    def test_record_prompt_truncates(self):
        state = SessionState()
        state.record_prompt("p" * 500)
        assert state.last_user_prompt == "p" * PROMPT_MAX_CHARS + "..."

    def test_record_empty_prompt(self):
        state = SessionState(last_user_prompt="before")
        state.record_prompt("")
        assert state.last_user_prompt is None

    def test_candidates_newest_first_capped(self):
        state = SessionState()
        for text in ["one", "two", "three", "four"]:
            state.add_capture_candidate(text)
        assert state.auto_capture_candidates == ["four", "three", "two"]
        assert len(state.auto_capture_candidates) == MAX_CAPTURE_CANDIDATES

    def test_duplicate_candidate_ignored(self):
        state = SessionState()
        state.add_capture_candidate("same")
        state.add_capture_candidate("other")
        state.add_capture_candidate("same")
        assert state.auto_capture_candidates == ["other", "same"]

    def test_candidate_truncated(self):
        state = SessionState()
        stored = state.add_capture_candidate("c" * 300)
        assert stored == "c" * CANDIDATE_MAX_CHARS + "..."
        assert state.auto_capture_candidates == [stored]

    def test_compaction_flag_consumed_once(self):
        state = SessionState()
        state.mark_compaction("T")
        assert state.last_compaction_at == "T"
        assert state.consume_compaction_flag() is True
        assert state.consume_compaction_flag() is False


class TestSessionStateStore:
    def test_missing_file_gives_fresh_state(self, tmp_path):
        store = SessionStateStore(tmp_path / "state.json")
        assert store.load() == SessionState()

    def test_save_then_load(self, tmp_path):
        store = SessionStateStore(tmp_path / "nested" / "state.json")
        state = SessionState(session_started_at="S", auto_capture_candidates=["x"])
        state.mark_compaction("C")
        store.save(state)
        assert store.load() == state
        assert not (tmp_path / "nested" / "state.json.tmp").exists()

    def test_corrupt_file_gives_fresh_state(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        assert SessionStateStore(path).load() == SessionState()

    def test_non_object_gives_fresh_state(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")
        assert SessionStateStore(path).load() == SessionState()

    def test_oversized_file_gives_fresh_state(self, tmp_path, monkeypatch):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"last_user_prompt": "x" * 100}))
        monkeypatch.setattr(SessionStateStore, "MAX_STATE_SIZE", 10)
        assert SessionStateStore(path).load() == SessionState()

    def test_bad_fields_dropped(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(
            json.dumps(
                {
                    "auto_capture_candidates": ["a", 1, "b", "c", "d"],
                    "compaction_occurred": "yes",
                }
            )
        )
        state = SessionStateStore(path).load()
        assert state.auto_capture_candidates == ["a", "b", "c"]
        assert state.compaction_occurred is False
