"""
Solver bridges: encode a Model into an engine request and decode the
engine response back into the Model.

Usage:
    from lpmodel.bridges import get_bridge, EngineKind

    bridge = get_bridge(EngineKind.GLPK)
    request = bridge.encode(model)
    result = bridge.decode(model, response)
"""

from .base import EngineKind, SolverBridge, SolveStatus
from .glpk import GLPKBridge
from .highs import HighsBridge
from .jslp import JSLPBridge
from .registry import (
    BridgeRegistry,
    get_bridge,
    get_registry,
    list_bridges,
    register_bridge,
)
from .result import SolutionNameMismatch, SolveResult

__all__ = [
    # Base
    "SolverBridge",
    "EngineKind",
    "SolveStatus",
    # Results
    "SolveResult",
    "SolutionNameMismatch",
    # Bridges
    "GLPKBridge",
    "HighsBridge",
    "JSLPBridge",
    # Registry
    "BridgeRegistry",
    "get_registry",
    "get_bridge",
    "list_bridges",
    "register_bridge",
]
