"""
mama_gateway Protocol Definitions
=================================

Interface contracts at the edges of the gateway:

- MemoryBackend: the semantic memory store (search, save, checkpoints,
  listing, outcome updates). Treated as a black box; the gateway never
  computes embeddings or touches storage itself.
- HostApi: the agent-hosting runtime that delivers lifecycle events and
  hosts tools.

Error handling philosophy:
- Backend construction failures raise InitializationError
- Failing backend calls are caught by the caller, logged, and treated as
  empty results
- Invalid tool arguments raise ValueError and are reported as text
- Nothing raised here ever propagates into the host
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from mama_gateway.types import Checkpoint, MemoryRecord, SaveResult, SearchResult

# =============================================================================
# ERRORS
# =============================================================================


class MamaError(Exception):
    """Base class for gateway errors."""


class InitializationError(MamaError):
    """The memory backend could not be constructed."""


# =============================================================================
# MEMORY BACKEND
# =============================================================================


@runtime_checkable
class MemoryBackend(Protocol):
    """Semantic decision memory.

    All operations are coroutines; they are the only suspension points in
    the gateway.
    """

    async def search(self, query: str, *, limit: int, threshold: float) -> Optional[SearchResult]:
        """Semantic search. Results carry a similarity score."""
        ...

    async def save(
        self,
        *,
        topic: str,
        decision: str,
        reasoning: str,
        confidence: float,
        type: str,
    ) -> SaveResult:
        """Persist a decision record."""
        ...

    async def save_checkpoint(
        self, summary: str, open_files: list[str], next_steps: str
    ) -> Union[int, str]:
        """Persist a checkpoint and return its id."""
        ...

    async def load_checkpoint(self) -> Optional[Checkpoint]:
        """Return the most recent checkpoint, if any."""
        ...

    async def list_recent(self, *, limit: int) -> list[MemoryRecord]:
        """Return the most recent decisions, newest first."""
        ...

    async def update_outcome(
        self,
        id: str,
        *,
        outcome: str,
        failure_reason: Optional[str] = None,
        limitation: Optional[str] = None,
    ) -> None:
        """Record how a decision turned out."""
        ...


# A factory receives the resolved storage path and returns a backend, or an
# awaitable resolving to one.
BackendFactory = Callable[[str], Union[MemoryBackend, Awaitable[MemoryBackend]]]


# =============================================================================
# HOST
# =============================================================================


@runtime_checkable
class HostApi(Protocol):
    """Plugin registration surface of the agent host."""

    def on(self, event: str, handler: Callable[[Any], Awaitable[Any]]) -> None:
        """Subscribe a coroutine handler to a lifecycle event."""
        ...

    def register_tool(self, tool: dict[str, Any]) -> None:
        """Expose a tool to the agent."""
        ...
