"""
Pytest fixtures and test configuration for mama_gateway tests.
"""

from datetime import datetime, timezone
from typing import List, Optional

import pytest

from mama_gateway.config import PluginConfig
from mama_gateway.coordinator import LifecycleCoordinator
from mama_gateway.init_gate import InitGate
from mama_gateway.types import Checkpoint, MemoryRecord, SaveResult, SearchResult

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeBackend:
    """In-memory MemoryBackend that records every call."""

    def __init__(self):
        self.records: List[MemoryRecord] = []
        self.search_results: List[MemoryRecord] = []
        self.checkpoint: Optional[Checkpoint] = None
        self.saved_checkpoints: list = []
        self.saved_decisions: list = []
        self.outcome_updates: list = []
        self.calls: list = []
        self.fail: dict = {}
        self.initialized = False
        self._next_checkpoint_id = 1

    def _enter(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    async def initialize(self):
        self.initialized = True

    async def search(self, query, *, limit, threshold):
        self._enter("search")
        return SearchResult(query=query, results=self.search_results[:limit])

    async def save(self, *, topic, decision, reasoning, confidence, type):
        self._enter("save")
        self.saved_decisions.append(
            {
                "topic": topic,
                "decision": decision,
                "reasoning": reasoning,
                "confidence": confidence,
                "type": type,
            }
        )
        return SaveResult(id=f"decision_{len(self.saved_decisions)}")

    async def save_checkpoint(self, summary, open_files, next_steps):
        self._enter("save_checkpoint")
        checkpoint_id = self._next_checkpoint_id
        self._next_checkpoint_id += 1
        self.saved_checkpoints.append(
            {"summary": summary, "open_files": open_files, "next_steps": next_steps}
        )
        return checkpoint_id

    async def load_checkpoint(self):
        self._enter("load_checkpoint")
        return self.checkpoint

    async def list_recent(self, *, limit):
        self._enter("list_recent")
        return self.records[:limit]

    async def update_outcome(self, id, *, outcome, failure_reason=None, limitation=None):
        self._enter("update_outcome")
        self.outcome_updates.append(
            {
                "id": id,
                "outcome": outcome,
                "failure_reason": failure_reason,
                "limitation": limitation,
            }
        )


@pytest.fixture
def make_record():
    """Factory for decision records with overridable fields."""

    def _make(id="d1", topic="auth", decision="Use JWT", reasoning="Stateless", **kwargs):
        return MemoryRecord(id=id, topic=topic, decision=decision, reasoning=reasoning, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep logs, session state and storage paths inside tmp_path."""
    monkeypatch.setenv("MAMA_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("MAMA_DB_PATH", raising=False)
    monkeypatch.delenv("MAMA_BACKEND", raising=False)
    monkeypatch.delenv("MAMA_LOG_LEVEL", raising=False)
    monkeypatch.delenv("MAMA_CHECKPOINT_THRESHOLD_MS", raising=False)
    return tmp_path


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def gate(backend, tmp_path):
    return InitGate(
        PluginConfig(db_path=str(tmp_path / "mama.db")),
        backend_factory=lambda db_path: backend,
    )


@pytest.fixture
def coordinator(gate):
    return LifecycleCoordinator(gate, clock=lambda: FIXED_NOW)
