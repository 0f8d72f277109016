"""Tests for mama-gateway hook CLI commands."""

import io
import json
import sys
from argparse import Namespace
from unittest.mock import patch

import pytest

from mama_gateway.cli.__main__ import build_parser
from mama_gateway.cli.commands.hook import (
    HOOK_EVENTS,
    SESSION_STATE_FILE,
    _event_payload,
    _read_transcript_messages,
    cmd_hook,
    run_hook,
)
from mama_gateway.session import SessionStateStore

DECISION_TEXT = "We decided to use PostgreSQL for storage"

# --- Fixtures ---


def make_args(**kwargs):
    """Create an argparse Namespace with defaults."""
    defaults = {"db_path": None, "hook_event": None}
    defaults.update(kwargs)
    return Namespace(**defaults)


def run_cmd(stdin_data, args):
    """Run cmd_hook with mocked stdin/stdout, return (output, exit_code)."""
    old_stdin = sys.stdin
    old_stdout = sys.stdout

    sys.stdin = io.StringIO(stdin_data if isinstance(stdin_data, str) else json.dumps(stdin_data))
    captured = io.StringIO()
    sys.stdout = captured

    exit_code = None
    try:
        cmd_hook(args)
    except SystemExit as e:
        exit_code = e.code
    finally:
        sys.stdin = old_stdin
        sys.stdout = old_stdout

    output = captured.getvalue()
    if output:
        try:
            return json.loads(output), exit_code
        except json.JSONDecodeError:
            return output, exit_code
    return None, exit_code


def write_transcript(path, entries):
    path.write_text("\n".join(json.dumps(e) for e in entries) + "\n")
    return str(path)


@pytest.fixture
def store(tmp_path):
    return SessionStateStore(tmp_path / "state" / SESSION_STATE_FILE)


# --- Transcript reading ---


class TestReadTranscriptMessages:
    def test_no_path(self):
        assert _read_transcript_messages(None) == []

    def test_missing_file(self, tmp_path):
        assert _read_transcript_messages(str(tmp_path / "nope.jsonl")) == []

    def test_wrapped_and_bare_messages(self, tmp_path):
        path = write_transcript(
            tmp_path / "t.jsonl",
            [
                {"type": "user", "message": {"role": "user", "content": "hi"}},
                {"role": "assistant", "content": "hello"},
                {"type": "summary", "summary": "no role"},
            ],
        )
        assert _read_transcript_messages(path) == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_malformed_lines_skipped(self, tmp_path):
        path = tmp_path / "t.jsonl"
        path.write_text('not json\n[1]\n{"role": "user", "content": "ok"}\n')
        assert _read_transcript_messages(str(path)) == [{"role": "user", "content": "ok"}]


class TestEventPayload:
    def test_agent_end_reads_transcript_and_defaults_success(self, tmp_path):
        path = write_transcript(tmp_path / "t.jsonl", [{"role": "user", "content": "x"}])
        payload = _event_payload("agent-end", {"transcript_path": path})
        assert payload["success"] is True
        assert payload["messages"] == [{"role": "user", "content": "x"}]

    def test_agent_end_keeps_explicit_fields(self):
        payload = _event_payload("agent-end", {"success": False, "messages": []})
        assert payload == {"success": False, "messages": []}

    def test_non_dict_input(self):
        assert _event_payload("session-start", ["x"]) == {}


# --- run_hook ---


class TestRunHook:
    @pytest.mark.asyncio
    async def test_context_wrapped_for_host(self, gate, backend, store, make_record):
        backend.records = [make_record(topic="database", decision="Postgres")]

        output = await run_hook("before-agent-start", {"prompt": "which db?"}, gate, store)

        hook_output = output["hookSpecificOutput"]
        assert hook_output["hookEventName"] == "UserPromptSubmit"
        assert "**database**: Postgres" in hook_output["additionalContext"]

    @pytest.mark.asyncio
    async def test_no_output_for_other_events(self, gate, store):
        assert await run_hook("session-start", {}, gate, store) is None

    @pytest.mark.asyncio
    async def test_state_survives_between_invocations(self, gate, backend, store):
        await run_hook("session-start", {}, gate, store)
        await run_hook(
            "agent-end",
            {"messages": [{"role": "user", "content": DECISION_TEXT}]},
            gate,
            store,
        )
        assert store.load().auto_capture_candidates == [DECISION_TEXT]

        await run_hook("session-end", {}, gate, store)
        assert DECISION_TEXT in backend.saved_checkpoints[0]["next_steps"]

    @pytest.mark.asyncio
    async def test_compaction_flag_survives(self, gate, backend, store):
        await run_hook("before-compaction", {}, gate, store)
        assert store.load().compaction_occurred is True

        await run_hook("before-agent-start", {"prompt": "carry on please"}, gate, store)
        assert store.load().compaction_occurred is False

    @pytest.mark.asyncio
    async def test_unknown_event(self, gate, store):
        with pytest.raises(ValueError):
            await run_hook("pre-tool-use", {}, gate, store)


# --- cmd_hook ---


class TestCmdHook:
    def test_usage_for_missing_event(self):
        output, code = run_cmd({}, make_args())
        assert code == 0
        assert output.startswith("Usage: mama-gateway hook {session-start|")

    def test_prints_context_and_exits_zero(self, gate, backend, make_record):
        backend.records = [make_record(topic="database", decision="Postgres")]
        with patch("mama_gateway.cli.commands.hook.InitGate", return_value=gate):
            output, code = run_cmd(
                {"prompt": "which database?"}, make_args(hook_event="before-agent-start")
            )
        assert code == 0
        assert "Postgres" in output["hookSpecificOutput"]["additionalContext"]

    def test_state_file_in_data_dir(self, gate, isolated_env):
        with patch("mama_gateway.cli.commands.hook.InitGate", return_value=gate):
            run_cmd({}, make_args(hook_event="session-start"))
        assert (isolated_env / "data" / SESSION_STATE_FILE).exists()

    def test_db_path_flag_passed_to_gate(self, gate):
        with patch("mama_gateway.cli.commands.hook.InitGate", return_value=gate) as init_gate:
            run_cmd({}, make_args(hook_event="session-start", db_path="/custom/mama.db"))
        config = init_gate.call_args[0][0]
        assert config.db_path == "/custom/mama.db"

    def test_invalid_json_exits_zero_silently(self):
        output, code = run_cmd("{broken", make_args(hook_event="session-start"))
        assert code == 0
        assert output is None

    def test_no_backend_exits_zero_silently(self, monkeypatch):
        monkeypatch.setattr("mama_gateway.discovery._get_entry_points", lambda group: [])
        output, code = run_cmd({"prompt": "hello there"}, make_args(hook_event="before-agent-start"))
        assert code == 0
        assert output is None

    def test_empty_stdin(self, gate):
        with patch("mama_gateway.cli.commands.hook.InitGate", return_value=gate):
            output, code = run_cmd("", make_args(hook_event="session-end"))
        assert code == 0
        assert output is None


class TestParser:
    def test_hook_events(self):
        assert HOOK_EVENTS == [
            "session-start",
            "before-agent-start",
            "agent-end",
            "session-end",
            "before-compaction",
            "after-compaction",
        ]

    def test_parses_hook_with_db_path(self):
        args = build_parser().parse_args(["--db-path", "/x.db", "hook", "agent-end"])
        assert args.command == "hook"
        assert args.hook_event == "agent-end"
        assert args.db_path == "/x.db"

    def test_rejects_unknown_event(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["hook", "pre-tool-use"])
