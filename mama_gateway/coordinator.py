"""
Lifecycle event coordinator.

Turns host lifecycle events into memory operations:

- session_start: reset session state, peek at checkpoint and recent decisions
- before_agent_start: auto-recall; returns the context block to prepend
- agent_end: auto-capture; collects decision candidates for review
- session_end: auto-checkpoint unless a recent checkpoint exists
- before_compaction: unconditional checkpoint, flag the next turn
- after_compaction: log what is available for re-injection

Failure semantics
-----------------
Every event is FAIL-OPEN. Any error (initialization, backend, detection,
rendering) is logged with the event name and swallowed; ``handle`` never
raises into the host. Inside an event, a failed search, checkpoint load or
listing is treated as an empty result so the event completes with partial
data.

Concurrency
-----------
Events must arrive one at a time. Session state and the init gate are
mutated without locks.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from mama_gateway.checkpoint import (
    PRE_COMPACTION_NEXT_STEPS,
    CheckpointPolicy,
    pre_compaction_summary,
)
from mama_gateway.config import PluginConfig
from mama_gateway.detection import find_decision_candidates
from mama_gateway.events import (
    AfterCompaction,
    AgentEnd,
    BeforeAgentStart,
    BeforeCompaction,
    EventKind,
    LifecycleEvent,
    SessionEnd,
    SessionStart,
)
from mama_gateway.init_gate import InitGate
from mama_gateway.logging_config import log_capture, log_checkpoint, log_recall
from mama_gateway.protocols import MemoryBackend
from mama_gateway.render import COMPACTION_NOTE, render_memory_context
from mama_gateway.session import SessionState
from mama_gateway.types import Checkpoint, MemoryRecord

logger = logging.getLogger(__name__)

MIN_RECALL_PROMPT_CHARS = 5
RECALL_LIMIT = 3
RECALL_THRESHOLD = 0.5
RECALL_RECENT_LIMIT = 3
SESSION_START_RECENT_LIMIT = 5
AFTER_COMPACTION_RECENT_LIMIT = 5
SESSION_END_RECENT_LIMIT = 10


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleCoordinator:
    """Per-session coordinator.

    Args:
        gate: Shared init gate providing the backend
        state: Session state to start from (a fresh one by default)
        policy: Auto-checkpoint policy
        log: Log sink for everything the coordinator reports
        clock: Returns the current time as an aware datetime
    """

    def __init__(
        self,
        gate: InitGate,
        state: Optional[SessionState] = None,
        policy: Optional[CheckpointPolicy] = None,
        config: Optional[PluginConfig] = None,
        log: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.gate = gate
        self.config = config
        self.state = state if state is not None else SessionState()
        threshold = (config or gate.config).checkpoint_threshold_ms
        self.policy = policy or CheckpointPolicy(threshold_ms=threshold)
        self.log = log or logger
        self.clock = clock

        self._handlers: Dict[EventKind, Callable[[Any], Any]] = {
            EventKind.SESSION_START: self._session_start,
            EventKind.BEFORE_AGENT_START: self._before_agent_start,
            EventKind.AGENT_END: self._agent_end,
            EventKind.SESSION_END: self._session_end,
            EventKind.BEFORE_COMPACTION: self._before_compaction,
            EventKind.AFTER_COMPACTION: self._after_compaction,
        }

    async def handle(self, event: LifecycleEvent) -> Optional[Dict[str, str]]:
        """Dispatch one event. Never raises.

        Returns ``{"prependContext": ...}`` for a before_agent_start event
        that produced context, otherwise None.
        """
        handler = self._handlers[event.kind]
        try:
            return await handler(event)
        except Exception as exc:
            self.log.error("%s error: %s", event.kind.value, exc)
            return None

    # -- convenience entry points --------------------------------------------

    async def on_session_start(self) -> None:
        await self.handle(SessionStart())

    async def on_before_agent_start(self, prompt: str = "") -> Optional[Dict[str, str]]:
        return await self.handle(BeforeAgentStart(prompt=prompt))

    async def on_agent_end(self, success: bool, messages: List[Any]) -> None:
        await self.handle(AgentEnd(success=success, messages=tuple(messages)))

    async def on_session_end(self) -> None:
        await self.handle(SessionEnd())

    async def on_before_compaction(self) -> None:
        await self.handle(BeforeCompaction())

    async def on_after_compaction(self) -> None:
        await self.handle(AfterCompaction())

    # -- helpers --------------------------------------------------------------

    def _now_iso(self) -> str:
        return self.clock().isoformat()

    async def _backend(self) -> MemoryBackend:
        return await self.gate.ensure_initialized(self.config)

    async def _load_checkpoint(self, backend: MemoryBackend, context: str) -> Optional[Checkpoint]:
        try:
            return await backend.load_checkpoint()
        except Exception as exc:
            self.log.error("%s: checkpoint load failed: %s", context, exc)
            return None

    async def _list_recent(
        self, backend: MemoryBackend, limit: int, context: str
    ) -> List[MemoryRecord]:
        try:
            return list(await backend.list_recent(limit=limit) or [])
        except Exception as exc:
            self.log.error("%s: listing recent decisions failed: %s", context, exc)
            return []

    # -- handlers -------------------------------------------------------------

    async def _session_start(self, event: SessionStart) -> None:
        backend = await self._backend()
        self.state.reset(self._now_iso())

        checkpoint = await backend.load_checkpoint()
        recent = await backend.list_recent(limit=SESSION_START_RECENT_LIMIT)

        if checkpoint is not None:
            self.log.info("Session start: loaded checkpoint from %s", checkpoint.timestamp)
        if recent:
            self.log.info("Session start: %d recent decisions available", len(recent))

    async def _before_agent_start(self, event: BeforeAgentStart) -> Optional[Dict[str, str]]:
        backend = await self._backend()
        context = event.kind.value

        prompt = event.prompt
        self.state.record_prompt(prompt)

        semantic: List[MemoryRecord] = []
        if prompt and len(prompt) >= MIN_RECALL_PROMPT_CHARS:
            try:
                result = await backend.search(
                    prompt, limit=RECALL_LIMIT, threshold=RECALL_THRESHOLD
                )
                semantic = list(result.results) if result else []
            except Exception as exc:
                self.log.error("Semantic search error: %s", exc)

        checkpoint = await self._load_checkpoint(backend, context)

        recent: List[MemoryRecord] = []
        if not semantic:
            recent = await self._list_recent(backend, RECALL_RECENT_LIMIT, context)

        compacted = self.state.consume_compaction_flag()
        note = COMPACTION_NOTE if compacted else None

        if checkpoint is None and not semantic and not recent:
            return None

        content = render_memory_context(semantic, checkpoint, recent, note)
        self.log.info(
            "Auto-recall: %d semantic matches, %d recent, checkpoint: %s%s",
            len(semantic),
            len(recent),
            checkpoint is not None,
            ", post-compaction" if compacted else "",
        )
        log_recall(len(semantic), len(recent), checkpoint is not None, compacted)
        return {"prependContext": content}

    async def _agent_end(self, event: AgentEnd) -> None:
        if not event.success or not event.messages:
            return

        await self._backend()

        for text in find_decision_candidates(event.messages):
            candidate = self.state.add_capture_candidate(text)
            self.log.info("Auto-capture candidate: %s", candidate)
            log_capture(candidate)

    async def _session_end(self, event: SessionEnd) -> None:
        backend = await self._backend()
        context = event.kind.value

        existing = await self._load_checkpoint(backend, context)
        if self.policy.should_skip(existing, self.clock()):
            self.log.info("Session end: skipping auto-save (recent checkpoint exists)")
            return

        ended_at = self._now_iso()
        recent = await self._list_recent(backend, SESSION_END_RECENT_LIMIT, context)

        summary = self.policy.compose_summary(self.state, ended_at, recent)
        next_steps = self.policy.compose_next_steps(self.state, recent)

        checkpoint_id = await backend.save_checkpoint(summary, [], next_steps)
        self.log.info(
            "Session end: auto-saved checkpoint (id: %s, decisions: %d)",
            checkpoint_id,
            len(recent),
        )
        log_checkpoint(checkpoint_id, "session-end", len(summary))

    async def _before_compaction(self, event: BeforeCompaction) -> None:
        backend = await self._backend()

        now = self._now_iso()
        self.state.last_compaction_at = now
        summary = pre_compaction_summary(now)
        checkpoint_id = await backend.save_checkpoint(summary, [], PRE_COMPACTION_NEXT_STEPS)

        self.state.mark_compaction(now)
        self.log.info("Before compaction: saved checkpoint (id: %s)", checkpoint_id)
        log_checkpoint(checkpoint_id, "pre-compaction", len(summary))

    async def _after_compaction(self, event: AfterCompaction) -> None:
        backend = await self._backend()

        checkpoint = await backend.load_checkpoint()
        recent = await backend.list_recent(limit=AFTER_COMPACTION_RECENT_LIMIT)

        self.log.info("After compaction: context compressed")
        if checkpoint is not None:
            self.log.info("Checkpoint available: %s...", (checkpoint.summary or "")[:50])
        if recent:
            self.log.info("%d recent decisions ready for re-injection", len(recent))
