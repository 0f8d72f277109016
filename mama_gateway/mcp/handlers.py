"""Validators and handlers for the memory tools: search, save, load_checkpoint, update."""

from typing import Any, Callable, Dict

from mama_gateway.mcp.sanitize import (
    clamp_limit,
    sanitize_string,
    validate_enum,
    validate_number,
)
from mama_gateway.mcp.tool_definitions import (
    DEFAULT_CONFIDENCE,
    DEFAULT_SEARCH_LIMIT,
    MAX_SEARCH_LIMIT,
)
from mama_gateway.protocols import MemoryBackend
from mama_gateway.render import format_checkpoint, format_search_results
from mama_gateway.types import UPDATABLE_OUTCOMES, Outcome

SEARCH_THRESHOLD = 0.5
LOAD_CHECKPOINT_RECENT_LIMIT = 5
SAVED_DECISION_TYPE = "assistant_insight"

# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_mama_search(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["query"] = sanitize_string(arguments.get("query"), "query", 500, required=True)
    sanitized["limit"] = clamp_limit(
        arguments.get("limit"), DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT
    )
    return sanitized


def validate_mama_save(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["type"] = validate_enum(arguments.get("type"), "type", ["decision", "checkpoint"])

    if sanitized["type"] == "checkpoint":
        summary = sanitize_string(arguments.get("summary"), "summary", 5000, required=False)
        if not summary:
            raise ValueError("summary required for checkpoint")
        sanitized["summary"] = summary
        sanitized["next_steps"] = sanitize_string(
            arguments.get("next_steps"), "next_steps", 5000, required=False
        )
        return sanitized

    for field_name, max_length in (("topic", 200), ("decision", 2000), ("reasoning", 5000)):
        sanitized[field_name] = sanitize_string(
            arguments.get(field_name), field_name, max_length, required=False
        )
    if not (sanitized["topic"] and sanitized["decision"] and sanitized["reasoning"]):
        raise ValueError("topic, decision, and reasoning all required")

    sanitized["confidence"] = validate_number(
        arguments.get("confidence"), "confidence", 0.0, 1.0, DEFAULT_CONFIDENCE
    )
    return sanitized


def validate_mama_load_checkpoint(arguments: Dict[str, Any]) -> Dict[str, Any]:
    return {}


def validate_mama_update(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["id"] = sanitize_string(arguments.get("id"), "id", 200, required=True)
    sanitized["outcome"] = validate_enum(
        arguments.get("outcome"), "outcome", UPDATABLE_OUTCOMES, case_insensitive=True
    )
    sanitized["reason"] = sanitize_string(arguments.get("reason"), "reason", 2000, required=False)
    return sanitized


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def handle_mama_search(args: Dict[str, Any], backend: MemoryBackend) -> str:
    query = args["query"]
    result = await backend.search(query, limit=args["limit"], threshold=SEARCH_THRESHOLD)
    return format_search_results(query, result.results if result else [])


async def handle_mama_save(args: Dict[str, Any], backend: MemoryBackend) -> str:
    if args["type"] == "checkpoint":
        checkpoint_id = await backend.save_checkpoint(
            args["summary"], [], args.get("next_steps", "")
        )
        return f"Checkpoint saved (id: {checkpoint_id})"

    result = await backend.save(
        topic=args["topic"],
        decision=args["decision"],
        reasoning=args["reasoning"],
        confidence=args["confidence"],
        type=SAVED_DECISION_TYPE,
    )
    msg = f"Decision saved (id: {result.id})"
    if result.warning:
        msg += f"\n⚠️ {result.warning}"
    if result.collaboration_hint:
        msg += f"\n\U0001f4a1 {result.collaboration_hint}"
    return msg


async def handle_mama_load_checkpoint(args: Dict[str, Any], backend: MemoryBackend) -> str:
    checkpoint = await backend.load_checkpoint()
    recent = await backend.list_recent(limit=LOAD_CHECKPOINT_RECENT_LIMIT)
    return format_checkpoint(checkpoint, recent or [])


async def handle_mama_update(args: Dict[str, Any], backend: MemoryBackend) -> str:
    decision_id = args["id"]
    outcome = args["outcome"]
    reason = args.get("reason") or None

    await backend.update_outcome(
        decision_id,
        outcome=outcome,
        failure_reason=reason if outcome == Outcome.FAILED.value else None,
        limitation=reason if outcome == Outcome.PARTIAL.value else None,
    )
    return f"Decision {decision_id} updated to {outcome}"


HANDLERS: Dict[str, Callable] = {
    "mama_search": handle_mama_search,
    "mama_save": handle_mama_save,
    "mama_load_checkpoint": handle_mama_load_checkpoint,
    "mama_update": handle_mama_update,
}

VALIDATORS: Dict[str, Callable] = {
    "mama_search": validate_mama_search,
    "mama_save": validate_mama_save,
    "mama_load_checkpoint": validate_mama_load_checkpoint,
    "mama_update": validate_mama_update,
}
