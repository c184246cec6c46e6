"""
Bridge registry.

Bridges are looked up by EngineKind. The built-in bridges are registered
lazily on first lookup.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .base import SolverBridge

logger = logging.getLogger(__name__)


class BridgeRegistry:
    """
    Registry for solver bridges.

    Usage:
        registry = BridgeRegistry()
        bridge = registry.get("glpk")
        registry.register(MyBridge())   # replaces the bridge of MyBridge().kind
    """

    def __init__(self):
        """Initialize empty registry."""
        self._bridges: Dict[str, "SolverBridge"] = {}
        self._initialized = False

    def register(self, bridge: "SolverBridge") -> None:
        """
        Register a bridge under its kind.

        Args:
            bridge: Bridge instance to register
        """
        self._ensure_initialized()
        self._bridges[bridge.kind] = bridge
        logger.debug(f"Registered bridge: {bridge.kind}")

    def get(self, kind: str) -> Optional["SolverBridge"]:
        """
        Get bridge by engine kind (case-insensitive).

        Returns:
            Bridge instance or None if not found
        """
        self._ensure_initialized()
        if not isinstance(kind, str):
            return None
        return self._bridges.get(kind.lower())

    def list_all(self) -> Dict[str, Dict[str, Any]]:
        """
        List all bridges with their capabilities.

        Returns:
            Dict mapping engine kind to info dict
        """
        self._ensure_initialized()
        return {
            kind: {
                "name": bridge.name,
                "supports_quadratic": bridge.supports_quadratic,
                "objective_includes_constant": bridge.objective_includes_constant,
            }
            for kind, bridge in self._bridges.items()
        }

    def kinds(self) -> List[str]:
        self._ensure_initialized()
        return list(self._bridges)

    def _ensure_initialized(self) -> None:
        """Lazy initialization of bridges."""
        if not self._initialized:
            self._initialized = True
            self._initialize_bridges()

    def _initialize_bridges(self) -> None:
        """Register the built-in bridges."""
        # Imported here to avoid circular imports
        from .glpk import GLPKBridge
        from .highs import HighsBridge
        from .jslp import JSLPBridge

        for bridge in (GLPKBridge(), HighsBridge(), JSLPBridge()):
            self._bridges[bridge.kind] = bridge

        logger.info(f"Initialized {len(self._bridges)} solver bridges")


# Global registry instance
_REGISTRY: Optional[BridgeRegistry] = None


def get_registry() -> BridgeRegistry:
    """Get the global bridge registry."""
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = BridgeRegistry()
    return _REGISTRY


def get_bridge(kind: str) -> Optional["SolverBridge"]:
    """
    Get bridge by engine kind (convenience function).

    Args:
        kind: EngineKind value ("glpk", "highs", "jslp")

    Returns:
        Bridge instance or None if not found
    """
    return get_registry().get(kind)


def list_bridges() -> Dict[str, Dict[str, Any]]:
    """List all bridges with capabilities (convenience function)."""
    return get_registry().list_all()


def register_bridge(bridge: "SolverBridge") -> None:
    """Register a bridge in the global registry (convenience function)."""
    get_registry().register(bridge)
