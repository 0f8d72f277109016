"""
Shared memory types for mama_gateway.

These dataclasses are the vocabulary between the memory backend, the
lifecycle coordinator and the tool handlers. Backends return them; the
coordinator and renderer only ever read them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from dateutil.parser import isoparse

# === Shared Utility Functions ===

Timestamp = Union[str, datetime]


def parse_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    """Parse an ISO timestamp into an aware UTC datetime.

    Naive values are assumed to be UTC. Returns None for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = isoparse(str(value))
        except (TypeError, ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# === Enums ===


class Outcome(str, Enum):
    """Outcome of a recorded decision.

    Values are lower case everywhere: tool input is normalised to this
    convention before it reaches the backend.
    """

    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"
    PENDING = "pending"


# Outcomes a caller may report through the update tool.
UPDATABLE_OUTCOMES = [Outcome.SUCCESS.value, Outcome.FAILED.value, Outcome.PARTIAL.value]


# === Memory Records ===


@dataclass
class MemoryRecord:
    """A persisted decision record.

    ``similarity`` is only populated on semantic search results.
    """

    id: str
    topic: str
    decision: str
    reasoning: str = ""
    confidence: Optional[float] = None
    outcome: Optional[str] = None
    similarity: Optional[float] = None
    created_at: Optional[Timestamp] = None


@dataclass
class Checkpoint:
    """A session-resumption snapshot."""

    id: Union[int, str]
    summary: str
    timestamp: Timestamp
    next_steps: Optional[str] = None


@dataclass
class SearchResult:
    """Result envelope for a semantic search."""

    query: str
    results: List[MemoryRecord] = field(default_factory=list)


@dataclass
class SaveResult:
    """Backend acknowledgement of a saved decision."""

    id: str
    success: bool = True
    similar_decisions: List[MemoryRecord] = field(default_factory=list)
    warning: Optional[str] = None
    collaboration_hint: Optional[str] = None
