"""
mama_gateway - Session memory orchestration for agent hosts.

Auto-recall, auto-capture and auto-checkpointing around a semantic
decision memory backend.
"""

from .config import PluginConfig
from .coordinator import LifecycleCoordinator
from .init_gate import InitGate
from .plugin import MamaPlugin
from .session import SessionState

try:
    from importlib.metadata import version

    __version__ = version("mama-gateway")
except Exception:
    __version__ = "0.0.0"

__all__ = ["LifecycleCoordinator", "InitGate", "MamaPlugin", "PluginConfig", "SessionState"]
