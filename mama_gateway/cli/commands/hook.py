"""Hook commands for command-line agent hosts.

Each invocation handles one lifecycle event in a fresh process: it reads
the event payload as JSON from stdin, restores the session state saved by
the previous hook, dispatches the event, and saves the state again.

CRITICAL: All hook commands MUST exit 0 regardless of errors. A non-zero
exit from a hook breaks the host session.

Every event is FAIL-OPEN: on any error the hook produces no output and
exits 0. Missing memory context is acceptable; a broken session is not.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from mama_gateway.config import PluginConfig, get_config, get_data_dir
from mama_gateway.coordinator import LifecycleCoordinator
from mama_gateway.events import EventKind, parse_event
from mama_gateway.init_gate import InitGate
from mama_gateway.session import SessionStateStore

logger = logging.getLogger(__name__)

HOOK_EVENTS = [kind.value.replace("_", "-") for kind in EventKind]

SESSION_STATE_FILE = "session-state.json"

# Host hook name reported with injected context.
_CONTEXT_HOOK_NAME = "UserPromptSubmit"


def _read_transcript_messages(transcript_path: Optional[str]) -> List[Dict[str, Any]]:
    """Read messages from a transcript JSONL file.

    Entries are either messages themselves or wrap one under ``message``.
    Unreadable files and malformed lines are skipped.
    """
    if not transcript_path:
        return []

    try:
        lines = Path(transcript_path).read_text(encoding="utf-8").strip().split("\n")
    except OSError as exc:
        logger.debug("Swallowed %s reading transcript: %s", type(exc).__name__, exc)
        return []

    messages = []
    for line in lines:
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(entry, dict):
            continue
        message = entry.get("message") if isinstance(entry.get("message"), dict) else entry
        if "role" in message:
            messages.append(message)
    return messages


def _event_payload(hook_event: str, hook_input: Any) -> Dict[str, Any]:
    """Normalize stdin JSON into the payload shape ``parse_event`` expects."""
    payload = dict(hook_input) if isinstance(hook_input, dict) else {}
    if hook_event == "agent-end":
        if "messages" not in payload:
            payload["messages"] = _read_transcript_messages(payload.get("transcript_path"))
        payload.setdefault("success", True)
    return payload


async def run_hook(
    hook_event: str,
    hook_input: Any,
    gate: InitGate,
    store: SessionStateStore,
    config: Optional[PluginConfig] = None,
) -> Optional[Dict[str, Any]]:
    """Dispatch one hook event with persisted session state.

    Returns the JSON document to print, if any.

    Raises:
        ValueError: If ``hook_event`` is not a lifecycle event
    """
    event = parse_event(hook_event.replace("-", "_"), _event_payload(hook_event, hook_input))

    coordinator = LifecycleCoordinator(gate, state=store.load(), config=config)
    result = await coordinator.handle(event)
    store.save(coordinator.state)

    if result and result.get("prependContext"):
        return {
            "hookSpecificOutput": {
                "hookEventName": _CONTEXT_HOOK_NAME,
                "additionalContext": result["prependContext"],
            }
        }
    return None


def cmd_hook(args) -> None:
    """Run a lifecycle hook. Always exits 0."""
    hook_event = getattr(args, "hook_event", None)
    if hook_event not in HOOK_EVENTS:
        print(f"Usage: mama-gateway hook {{{'|'.join(HOOK_EVENTS)}}}")
        sys.exit(0)

    try:
        raw = sys.stdin.read()
        hook_input = json.loads(raw) if raw.strip() else {}

        config = get_config()
        db_path = getattr(args, "db_path", None)
        if db_path:
            config.db_path = db_path

        gate = InitGate(config)
        store = SessionStateStore(get_data_dir() / SESSION_STATE_FILE)

        output = asyncio.run(run_hook(hook_event, hook_input, gate, store, config))
        if output:
            json.dump(output, sys.stdout)
    except Exception as exc:
        # FAIL-OPEN: swallow all errors, produce no output
        logger.debug("Swallowed %s in %s hook: %s", type(exc).__name__, hook_event, exc)

    sys.exit(0)
