"""Auto-checkpoint policy: staleness checks and checkpoint text composition."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from mama_gateway.config import DEFAULT_CHECKPOINT_THRESHOLD_MS
from mama_gateway.session import SessionState
from mama_gateway.types import Checkpoint, MemoryRecord, Timestamp, parse_timestamp

logger = logging.getLogger(__name__)

MAX_SUMMARY_TOPICS = 5
RESUME_INSTRUCTION = "On next session start: load checkpoint and continue from the last prompt."
PRE_COMPACTION_NEXT_STEPS = "Resume after compaction - check previous context"


def is_recent_checkpoint(
    timestamp: Timestamp,
    threshold_ms: int = DEFAULT_CHECKPOINT_THRESHOLD_MS,
    now: Optional[datetime] = None,
) -> bool:
    """Check if a checkpoint timestamp is within ``threshold_ms`` of ``now``.

    Unparseable timestamps are never recent.
    """
    checkpoint_time = parse_timestamp(timestamp)
    if checkpoint_time is None:
        logger.debug("Unparseable checkpoint timestamp: %r", timestamp)
        return False
    current = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    elapsed_ms = (current - checkpoint_time).total_seconds() * 1000
    return elapsed_ms < threshold_ms


def pre_compaction_summary(now: str) -> str:
    return f"Pre-compaction checkpoint: {now}. Context will be compressed."


@dataclass
class CheckpointPolicy:
    """Decides when an automatic checkpoint is written and what it says."""

    threshold_ms: int = DEFAULT_CHECKPOINT_THRESHOLD_MS

    def should_skip(
        self,
        existing: Optional[Checkpoint],
        now: Optional[datetime] = None,
        threshold_ms: Optional[int] = None,
    ) -> bool:
        """True iff ``existing`` is younger than the threshold."""
        if existing is None:
            return False
        threshold = self.threshold_ms if threshold_ms is None else threshold_ms
        return is_recent_checkpoint(existing.timestamp, threshold, now)

    def compose_summary(
        self,
        state: SessionState,
        ended_at: str,
        recent: Sequence[MemoryRecord],
    ) -> str:
        parts: List[str] = [f"Session ended: {ended_at}"]
        if state.session_started_at:
            parts.append(f"Session started: {state.session_started_at}")
        if state.last_user_prompt:
            parts.append(f"Last user prompt: {state.last_user_prompt}")
        if state.last_compaction_at:
            parts.append(f"Last compaction: {state.last_compaction_at}")
        parts.append(f"Decisions recorded (recent): {len(recent)}")

        topics = [
            r.topic for r in recent if isinstance(r.topic, str) and r.topic.strip()
        ][:MAX_SUMMARY_TOPICS]
        if topics:
            parts.append(f"Recent topics: {', '.join(topics)}")
        return "\n".join(parts)

    def compose_next_steps(self, state: SessionState, recent: Sequence[MemoryRecord]) -> str:
        parts: List[str] = []
        if state.auto_capture_candidates:
            candidates = "\n- ".join(state.auto_capture_candidates)
            parts.append(f"Review auto-capture candidates:\n- {candidates}")
        if recent:
            last_topic = recent[0].topic or "unknown"
            parts.append(f"Review recent decisions (count: {len(recent)}). Last topic: {last_topic}")
        else:
            parts.append("No new decisions recorded in this session.")
        parts.append(RESUME_INSTRUCTION)
        return "\n\n".join(parts)
