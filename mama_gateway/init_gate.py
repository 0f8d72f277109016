"""
Lazy, idempotent backend initialization.

Every lifecycle handler and tool invocation calls
``InitGate.ensure_initialized`` first. The first call resolves the storage
location and constructs the backend; later calls return the same handle.
A later request for a different storage location is logged and ignored:
the location in effect never changes for the lifetime of the gate.
"""

import inspect
import logging
import os
from dataclasses import dataclass
from typing import Optional

from mama_gateway.config import DB_PATH_ENV, PluginConfig, resolve_db_path
from mama_gateway.discovery import resolve_backend_factory
from mama_gateway.protocols import BackendFactory, InitializationError, MemoryBackend

logger = logging.getLogger(__name__)


@dataclass
class InitState:
    """Set exactly once, on the first successful initialization."""

    initialized: bool = False
    resolved_db_path: Optional[str] = None


class InitGate:
    """Owns the backend handle and the init-once state.

    Not safe for overlapping calls: hosts deliver one event or tool call
    at a time.
    """

    def __init__(
        self,
        config: Optional[PluginConfig] = None,
        backend_factory: Optional[BackendFactory] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.config = config or PluginConfig()
        self._factory = backend_factory
        self._log = log or logger
        self._backend: Optional[MemoryBackend] = None
        self.state = InitState()

    @property
    def initialized(self) -> bool:
        return self.state.initialized

    @property
    def backend(self) -> MemoryBackend:
        """The backend handle.

        Raises:
            InitializationError: If ``ensure_initialized`` has not succeeded yet
        """
        if self._backend is None:
            raise InitializationError("MAMA not initialized. Call ensure_initialized() first.")
        return self._backend

    async def ensure_initialized(self, config: Optional[PluginConfig] = None) -> MemoryBackend:
        """Return the backend, constructing it on first use.

        Args:
            config: Configuration for this call. Defaults to the gate's own.

        Raises:
            InitializationError: If the backend cannot be constructed
        """
        db_path = resolve_db_path(config or self.config)

        if self.state.initialized:
            if self.state.resolved_db_path and db_path != self.state.resolved_db_path:
                self._log.warning(
                    "ensure_initialized called with different db_path (%s) after "
                    "initialization with (%s). Using original path.",
                    db_path,
                    self.state.resolved_db_path,
                )
            return self.backend

        os.environ[DB_PATH_ENV] = db_path

        try:
            factory = self._factory or resolve_backend_factory((config or self.config).backend)
            backend = factory(db_path)
            if inspect.isawaitable(backend):
                backend = await backend
            initialize = getattr(backend, "initialize", None)
            if callable(initialize):
                result = initialize()
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            self._log.error("Init failed: %s", e)
            if isinstance(e, InitializationError):
                raise
            raise InitializationError(f"Backend initialization failed: {e}") from e

        self._backend = backend
        self.state.initialized = True
        self.state.resolved_db_path = db_path
        self._log.info("Initialized memory backend (db: %s)", db_path)
        return backend
