"""
Solve result and decoding diagnostics.

Decoding never raises on a column or row name it cannot place in the model.
Such cases are collected as SolutionNameMismatch entries on the SolveResult
so the caller can inspect them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


@dataclass
class SolutionNameMismatch:
    """
    A response entry that could not be matched to the model.

    Attributes:
        kind: "variable" for columns, "row" for constraints
        name: Name (or index) reported by the engine
        message: Human-readable explanation
    """
    kind: Literal["variable", "row"]
    name: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "message": self.message}


@dataclass
class SolveResult:
    """
    Outcome of decoding one engine response.

    The model itself holds the decoded values (Var.value, Constr.primal/dual);
    this object is a summary plus the diagnostics list.
    """

    # Status
    status: Optional[str]
    objective_value: Optional[float] = None

    # Decoded variable values by name
    values: Dict[str, Optional[float]] = field(default_factory=dict)

    # Non-fatal decoding problems
    diagnostics: List[SolutionNameMismatch] = field(default_factory=list)

    # Engine identity and untouched response
    engine_kind: Optional[str] = None
    raw_response: Any = None

    @property
    def is_optimal(self) -> bool:
        return self.status == "Optimal"

    @property
    def has_diagnostics(self) -> bool:
        return len(self.diagnostics) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary (raw response omitted)."""
        return {
            "status": self.status,
            "objective_value": self.objective_value,
            "values": dict(self.values),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "engine_kind": self.engine_kind,
        }
