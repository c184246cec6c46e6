"""
Constraints and the constraint builder.

build_constraint() folds "lhs <op> rhs" into a single normalized row:
all variable terms move to the left side, all constants to the right side.

    x + 2y + 3 <= 8          ->  x + 2y <= 5
    3x + 4y >= 12 - x        ->  4x + 4y >= 12
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from ..errors import InvalidComparisonOperator
from .expressions import Expression, canonicalize, negate
from .variables import VariableRegistry, is_number


class Comparison:
    """Comparison operators of a constraint."""

    LE = "<="
    EQ = "="
    GE = ">="

    @classmethod
    def all_types(cls) -> List[str]:
        return [cls.LE, cls.EQ, cls.GE]

    @classmethod
    def normalize(cls, comparison: Any) -> str:
        """Map '==' to '=' and reject anything outside <=, =, >=."""
        if comparison == "==":
            return cls.EQ
        if comparison not in cls.all_types():
            raise InvalidComparisonOperator(comparison)
        return comparison


@dataclass(eq=False)
class Constr:
    """
    Linear (or quadratic) constraint: lhs <comparison> rhs.

    Attributes:
        lhs: Canonical left side; its constant is always zero
        comparison: "<=", "=" or ">="
        rhs: Right-hand side number
        primal: Row activity reported by the engine (if any)
        dual: Shadow price reported by the engine (continuous solves only)
    """
    lhs: Expression
    comparison: str
    rhs: float
    primal: Optional[float] = None
    dual: Optional[float] = None

    def is_satisfied(self, tolerance: float = 1e-6) -> Optional[bool]:
        """Check the row at current variable values (None if values are unset)."""
        activity = self.lhs.evaluate()
        if activity is None:
            return None
        if self.comparison == Comparison.LE:
            return activity <= self.rhs + tolerance
        if self.comparison == Comparison.GE:
            return activity >= self.rhs - tolerance
        return abs(activity - self.rhs) <= tolerance

    def __repr__(self) -> str:
        return f"Constr({self.lhs!r} {self.comparison} {self.rhs!r})"


def build_constraint(
    lhs: Any,
    comparison: str,
    rhs: Any,
    registry: Optional[VariableRegistry] = None,
) -> Constr:
    """
    Build a normalized constraint from two sides.

    Args:
        lhs: Expression items for the left side
        comparison: "<=", "=", "==" or ">="
        rhs: A number or expression items for the right side
        registry: When given, every variable must belong to it

    Returns:
        Constr with merged left side and scalar right side

    Raises:
        InvalidComparisonOperator: for unknown operators
        InvalidExpressionTerm: for malformed sides
    """
    comparison = Comparison.normalize(comparison)

    left = canonicalize(lhs, registry)
    right = canonicalize([rhs] if is_number(rhs) else rhs, registry)

    # Second pass merges terms that appear on both sides
    combined = canonicalize(left.to_list() + negate(right), registry)
    rhs_value = -combined.constant if combined.constant else 0
    combined.constant = 0

    return Constr(lhs=combined, comparison=comparison, rhs=rhs_value)
