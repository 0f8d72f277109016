"""
Host plugin wiring.

``MamaPlugin.register(api)`` subscribes the coordinator to the host's six
lifecycle events and registers the four memory tools.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from mama_gateway.config import PluginConfig
from mama_gateway.coordinator import LifecycleCoordinator
from mama_gateway.events import EventKind, parse_event
from mama_gateway.init_gate import InitGate
from mama_gateway.mcp.server import execute_tool
from mama_gateway.mcp.tool_definitions import TOOLS
from mama_gateway.protocols import BackendFactory, HostApi

logger = logging.getLogger(__name__)


class MamaPlugin:
    """Semantic decision memory with auto-recall and auto-capture."""

    id = "openclaw-mama"
    name = "MAMA Memory"
    description = "Semantic decision memory - direct gateway integration"
    kind = "memory"

    def __init__(
        self,
        config: Optional[PluginConfig] = None,
        backend_factory: Optional[BackendFactory] = None,
        log: Optional[logging.Logger] = None,
    ):
        self._explicit_config = config is not None
        self._backend_factory = backend_factory
        self._log = log
        self._configure(config or PluginConfig())

    def _configure(self, config: PluginConfig) -> None:
        self.config = config
        self.gate = InitGate(config, backend_factory=self._backend_factory, log=self._log)
        self.coordinator = LifecycleCoordinator(self.gate, config=config, log=self._log)

    @classmethod
    def from_host_config(cls, raw: Optional[Mapping[str, Any]], **kwargs) -> "MamaPlugin":
        return cls(PluginConfig.from_mapping(raw), **kwargs)

    def _event_handler(self, kind: EventKind) -> Callable[[Any], Awaitable[Any]]:
        async def handler(payload: Any = None) -> Any:
            return await self.coordinator.handle(parse_event(kind, payload))

        handler.__name__ = f"on_{kind.value}"
        return handler

    def _tool_spec(self, name: str, description: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        async def execute(call_id: str, params: Any) -> Dict[str, Any]:
            text = await self.execute_tool(name, params)
            return {"content": [{"type": "text", "text": text}]}

        return {"name": name, "description": description, "parameters": schema, "execute": execute}

    async def execute_tool(self, name: str, params: Any) -> str:
        return await execute_tool(name, params, gate=self.gate, config=self.config)

    def register(self, api: HostApi) -> None:
        """Register lifecycle hooks and tools with the host.

        A host that exposes its plugin config as ``api.config`` supplies the
        configuration here, unless the plugin was built with an explicit one.
        """
        host_config = getattr(api, "config", None)
        if isinstance(host_config, Mapping) and host_config and not self._explicit_config:
            self._configure(PluginConfig.from_mapping(host_config))

        for kind in EventKind:
            api.on(kind.value, self._event_handler(kind))

        for tool in TOOLS:
            api.register_tool(self._tool_spec(tool.name, tool.description or "", tool.inputSchema))

        logger.debug(
            "Registered %d lifecycle hooks and %d tools", len(EventKind), len(TOOLS)
        )
