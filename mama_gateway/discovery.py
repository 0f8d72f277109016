"""
Backend factory discovery.

A memory backend is provided by another distribution. It is found either
through an explicit ``module:attr`` reference (config or MAMA_BACKEND) or
through the ``mama_gateway.backends`` entry point group.
"""

import importlib
import importlib.metadata
import logging
from typing import Optional

from mama_gateway.protocols import BackendFactory, InitializationError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP_BACKENDS = "mama_gateway.backends"
DEFAULT_BACKEND_NAME = "default"


def _get_entry_points(group: str) -> list[importlib.metadata.EntryPoint]:
    """Get entry points for a group."""
    try:
        return list(importlib.metadata.entry_points(group=group))
    except Exception as exc:
        logger.warning("Failed to read entry points for group '%s': %s", group, exc)
        return []


def load_reference(reference: str) -> BackendFactory:
    """Import a ``module:attr`` reference.

    Raises:
        InitializationError: If the reference is malformed or cannot be imported
    """
    module_name, sep, attr_path = reference.strip().partition(":")
    if not sep or not module_name or not attr_path:
        raise InitializationError(f"Invalid backend reference {reference!r} (expected module:attr)")

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise InitializationError(f"Cannot import backend module {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise InitializationError(
                f"Backend module {module_name!r} has no attribute {attr_path!r}"
            ) from e

    if not callable(target):
        raise InitializationError(f"Backend reference {reference!r} is not callable")
    return target


def discover_backend_factory() -> Optional[BackendFactory]:
    """Load the installed backend factory, preferring one named ``default``."""
    eps = _get_entry_points(ENTRY_POINT_GROUP_BACKENDS)
    if not eps:
        return None

    eps.sort(key=lambda ep: (ep.name != DEFAULT_BACKEND_NAME, ep.name))
    chosen = eps[0]
    if len(eps) > 1:
        logger.info(
            "Multiple memory backends installed (%s); using '%s'",
            ", ".join(ep.name for ep in eps),
            chosen.name,
        )
    try:
        return chosen.load()
    except Exception as e:
        raise InitializationError(f"Failed to load backend entry point '{chosen.name}': {e}") from e


def resolve_backend_factory(reference: Optional[str] = None) -> BackendFactory:
    """Resolve a backend factory from a reference or the installed entry points.

    Raises:
        InitializationError: If no backend is available
    """
    if reference:
        return load_reference(reference)

    factory = discover_backend_factory()
    if factory is None:
        raise InitializationError(
            f"No memory backend installed (entry point group '{ENTRY_POINT_GROUP_BACKENDS}') "
            "and no backend reference configured"
        )
    return factory
