"""Cross-event session state and its on-disk mirror for hook processes."""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from mama_gateway.render import truncate_text

logger = logging.getLogger(__name__)

PROMPT_MAX_CHARS = 200
CANDIDATE_MAX_CHARS = 160
MAX_CAPTURE_CANDIDATES = 3


@dataclass
class SessionState:
    """State shared between lifecycle events of one session.

    ``compaction_occurred`` is raised by the pre-compaction handler and
    consumed by the next pre-agent-turn handler.
    """

    session_started_at: Optional[str] = None
    last_user_prompt: Optional[str] = None
    last_compaction_at: Optional[str] = None
    auto_capture_candidates: List[str] = field(default_factory=list)
    compaction_occurred: bool = False

    def reset(self, started_at: str) -> None:
        """Start a fresh session."""
        self.session_started_at = started_at
        self.last_user_prompt = None
        self.last_compaction_at = None
        self.auto_capture_candidates = []
        self.compaction_occurred = False

    def record_prompt(self, prompt: str) -> None:
        self.last_user_prompt = truncate_text(prompt, PROMPT_MAX_CHARS) if prompt else None

    def add_capture_candidate(self, text: str) -> str:
        """Insert a candidate newest-first, skipping exact duplicates.

        Returns the truncated candidate text.
        """
        candidate = truncate_text(text, CANDIDATE_MAX_CHARS)
        if candidate not in self.auto_capture_candidates:
            self.auto_capture_candidates = [candidate, *self.auto_capture_candidates][
                :MAX_CAPTURE_CANDIDATES
            ]
        return candidate

    def mark_compaction(self, at: str) -> None:
        self.last_compaction_at = at
        self.compaction_occurred = True

    def consume_compaction_flag(self) -> bool:
        """Return and clear the compaction flag."""
        occurred = self.compaction_occurred
        self.compaction_occurred = False
        return occurred

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        candidates = data.get("auto_capture_candidates") or []
        return cls(
            session_started_at=data.get("session_started_at"),
            last_user_prompt=data.get("last_user_prompt"),
            last_compaction_at=data.get("last_compaction_at"),
            auto_capture_candidates=[c for c in candidates if isinstance(c, str)][
                :MAX_CAPTURE_CANDIDATES
            ],
            compaction_occurred=data.get("compaction_occurred") is True,
        )


class SessionStateStore:
    """JSON file mirror of a SessionState.

    Hosts that run each hook in a fresh process restore the state before
    dispatching an event and save it afterwards.
    """

    # Refuse to parse anything larger than this
    MAX_STATE_SIZE = 1024 * 1024

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> SessionState:
        """Load saved state, or a fresh one if missing or unreadable."""
        if not self.path.exists():
            return SessionState()
        try:
            if self.path.stat().st_size > self.MAX_STATE_SIZE:
                logger.warning("Session state file too large, starting fresh: %s", self.path)
                return SessionState()
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load session state: {e}")
            return SessionState()
        if not isinstance(data, dict):
            logger.warning("Session state file is not an object, starting fresh")
            return SessionState()
        return SessionState.from_dict(data)

    def save(self, state: SessionState) -> None:
        """Write state atomically.

        Raises:
            OSError: If the state cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)
        tmp_path.replace(self.path)
