"""
LP text writer.

Output layout (one canonical rendering):

    Maximize
    obj: 2 + 4 x + 5 y
    Subject To
     c1: 1 x + 2 y <= 5
     c2: 4 x + 4 y >= 12
    Bounds
     -inf <= z <= 10
    General
     n
    Binary
     x
    End

- A non-zero objective constant is written as the leading term; a zero
  constant is omitted.
- Bounds are always written in the double form, and only for variables
  whose bounds differ from the default [0, +inf).
- Quadratic terms use the doubled bracket form "[ 2c a * b ]/2".
- Every variable name must survive a read back (see is_lp_safe_name);
  anything else is rejected rather than written ambiguously.
"""

from typing import List
import math

from ..errors import InvalidVariableSpec
from ..modeling.expressions import Expression, LinearTerm
from ..modeling.variables import VarType
from .grammar import is_lp_safe_name


def format_number(value: float) -> str:
    """Render a number: integral values without a decimal point, infinities as +inf/-inf."""
    if math.isinf(value):
        return "+inf" if value > 0 else "-inf"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_expression(expression: Expression, include_constant: bool = True) -> str:
    """Render an expression as LP text terms."""
    parts: List[str] = []
    if include_constant and expression.constant != 0:
        parts.append(format_number(expression.constant))

    for term in expression.terms:
        if isinstance(term, LinearTerm):
            parts.append(f"{format_number(term.coefficient)} {term.var.name}")
        else:
            coefficient, var1, var2 = term
            parts.append(f"[ {format_number(2 * coefficient)} {var1.name} * {var2.name} ]/2")

    return " + ".join(parts).replace("+ -", "- ")


def _check_names(model) -> None:
    for var in model.variables:
        if not is_lp_safe_name(var.name):
            raise InvalidVariableSpec(
                f"Variable name '{var.name}' cannot be written as LP text"
            )


def _bounds_lines(model) -> List[str]:
    lines = []
    for var in model.variables:
        if not var.has_default_bounds():
            lines.append(f" {format_number(var.lb)} <= {var.name} <= {format_number(var.ub)}")
    return lines


def to_lp_format(model) -> str:
    """
    Serialize a model to CPLEX LP text.

    Args:
        model: Model to serialize

    Returns:
        LP text, newline-terminated

    Raises:
        InvalidVariableSpec: If a variable name cannot be read back from LP text
    """
    _check_names(model)

    lines = ["Maximize" if model.objective.is_maximize else "Minimize"]
    lines.append(f"obj: {format_expression(model.objective.expression)}".rstrip())

    lines.append("Subject To")
    for i, constraint in enumerate(model.constraints):
        lhs = format_expression(constraint.lhs, include_constant=False)
        lines.append(
            f" c{i + 1}: {lhs} {constraint.comparison} {format_number(constraint.rhs)}"
            if lhs else
            f" c{i + 1}: {constraint.comparison} {format_number(constraint.rhs)}"
        )

    bounds = _bounds_lines(model)
    if bounds:
        lines.append("Bounds")
        lines.extend(bounds)

    generals = [var.name for var in model.variables if var.vtype == VarType.INTEGER]
    if generals:
        lines.append("General")
        lines.extend(f" {name}" for name in generals)

    binaries = [var.name for var in model.variables if var.vtype == VarType.BINARY]
    if binaries:
        lines.append("Binary")
        lines.extend(f" {name}" for name in binaries)

    lines.append("End")
    return "\n".join(lines) + "\n"
