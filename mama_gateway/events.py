"""
Lifecycle events delivered by the host.

Raw host payloads are untyped. ``parse_event`` validates them once, at the
boundary, into one of six frozen dataclasses; the coordinator only ever
sees these.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Tuple, Union


class EventKind(str, Enum):
    SESSION_START = "session_start"
    BEFORE_AGENT_START = "before_agent_start"
    AGENT_END = "agent_end"
    SESSION_END = "session_end"
    BEFORE_COMPACTION = "before_compaction"
    AFTER_COMPACTION = "after_compaction"


@dataclass(frozen=True)
class SessionStart:
    kind: ClassVar[EventKind] = EventKind.SESSION_START


@dataclass(frozen=True)
class BeforeAgentStart:
    kind: ClassVar[EventKind] = EventKind.BEFORE_AGENT_START
    prompt: str = ""


@dataclass(frozen=True)
class AgentEnd:
    kind: ClassVar[EventKind] = EventKind.AGENT_END
    success: bool = False
    messages: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SessionEnd:
    kind: ClassVar[EventKind] = EventKind.SESSION_END


@dataclass(frozen=True)
class BeforeCompaction:
    kind: ClassVar[EventKind] = EventKind.BEFORE_COMPACTION


@dataclass(frozen=True)
class AfterCompaction:
    kind: ClassVar[EventKind] = EventKind.AFTER_COMPACTION


LifecycleEvent = Union[
    SessionStart, BeforeAgentStart, AgentEnd, SessionEnd, BeforeCompaction, AfterCompaction
]


def parse_event(kind: Union[str, EventKind], payload: Optional[Any] = None) -> LifecycleEvent:
    """Build a typed event from a host event name and raw payload.

    Malformed fields degrade to their defaults (an empty prompt, an
    unsuccessful run with no messages); only an unknown event name is an
    error.

    Raises:
        ValueError: If ``kind`` is not a lifecycle event name
    """
    try:
        event_kind = EventKind(kind)
    except ValueError:
        raise ValueError(f"Unknown lifecycle event: {kind!r}") from None

    data = payload if isinstance(payload, dict) else {}

    if event_kind is EventKind.BEFORE_AGENT_START:
        prompt = data.get("prompt")
        return BeforeAgentStart(prompt=prompt if isinstance(prompt, str) else "")

    if event_kind is EventKind.AGENT_END:
        messages = data.get("messages")
        return AgentEnd(
            success=data.get("success") is True,
            messages=tuple(messages) if isinstance(messages, list) else (),
        )

    return {
        EventKind.SESSION_START: SessionStart,
        EventKind.SESSION_END: SessionEnd,
        EventKind.BEFORE_COMPACTION: BeforeCompaction,
        EventKind.AFTER_COMPACTION: AfterCompaction,
    }[event_kind]()
