"""
Abstract base class for solver bridges.

A bridge translates between the canonical Model and one engine family's
request/response schema:
- encode(model) builds the request the engine consumes
- decode(model, response) writes variable values, row primal/dual values,
  status and objective value back into the model

Bridges are picked by an explicit EngineKind, never by inspecting the engine.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, TYPE_CHECKING
import logging

from ..errors import QuadraticUnsupportedByBackend
from .result import SolutionNameMismatch, SolveResult

if TYPE_CHECKING:
    from ..modeling.model import Model

logger = logging.getLogger(__name__)


class EngineKind:
    """Engine families understood by the bridges."""

    GLPK = "glpk"     # direction/bound-code JSON schema (glpk.js)
    HIGHS = "highs"   # LP text in, named column/row maps out (HiGHS)
    JSLP = "jslp"     # sparse per-variable map schema (jsLPSolver)

    @classmethod
    def all_types(cls) -> List[str]:
        return [cls.GLPK, cls.HIGHS, cls.JSLP]

    @classmethod
    def is_valid(cls, kind: str) -> bool:
        return kind in cls.all_types()


class SolveStatus:
    """Canonical solution statuses."""

    OPTIMAL = "Optimal"
    FEASIBLE = "Feasible"
    INFEASIBLE = "Infeasible"
    UNBOUNDED = "Unbounded"
    UNDEFINED = "Undefined"

    @classmethod
    def all_types(cls) -> List[str]:
        return [cls.OPTIMAL, cls.FEASIBLE, cls.INFEASIBLE, cls.UNBOUNDED, cls.UNDEFINED]

    @classmethod
    def has_solution(cls, status: Optional[str]) -> bool:
        """Whether a status carries usable variable values."""
        return status in (cls.OPTIMAL, cls.FEASIBLE)


class SolverBridge(ABC):
    """
    Abstract base class for solver bridges.

    Each bridge provides:
    - Its engine kind (used for registry lookup)
    - Capability flags (quadratic support, constant handling)
    - encode/decode between the Model and the engine schema
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """EngineKind handled by this bridge."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name of the engine family (used in error messages)."""
        pass

    @property
    def supports_quadratic(self) -> bool:
        """Whether quadratic terms can be encoded."""
        return False

    @property
    def objective_includes_constant(self) -> bool:
        """
        Whether the request carries the objective constant.

        When False, decode() adds the model's own constant back to the
        objective value reported by the engine.
        """
        return False

    @abstractmethod
    def encode(self, model: "Model", options: Optional[Dict[str, Any]] = None) -> Any:
        """
        Build the engine request for a model.

        Args:
            model: Model to encode
            options: Engine option bag (opaque, only embedded where the
                schema carries options)

        Returns:
            Engine request
        """
        pass

    @abstractmethod
    def decode(self, model: "Model", response: Any) -> SolveResult:
        """
        Write an engine response into the model.

        Unmatched column/row names never raise: they are recorded as
        diagnostics on the returned SolveResult.

        Args:
            model: Model whose solution fields are updated in place
            response: Engine response (schema model or plain dict)

        Returns:
            SolveResult summarizing what was decoded
        """
        pass

    def check_supported(self, model: "Model") -> None:
        """Raise if the model uses features this schema cannot carry."""
        if not self.supports_quadratic and model.is_quadratic():
            raise QuadraticUnsupportedByBackend(self.name)

    def objective_value(self, model: "Model", reported: Optional[float]) -> Optional[float]:
        """Objective value in model terms from the engine's reported value."""
        if reported is None:
            return None
        if self.objective_includes_constant:
            return reported
        return reported + model.objective.expression.constant

    def record_mismatch(self, result: SolveResult, kind: str, name: Any, message: str) -> None:
        """Log an unmatched response entry and keep it on the result."""
        logger.warning(f"[{self.name}] {message}")
        result.diagnostics.append(SolutionNameMismatch(kind=kind, name=str(name), message=message))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"
