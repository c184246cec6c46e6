"""
Model validation utilities.

Validates models for:
- Consistency (bounds, trivially unsatisfiable rows)
- Portability (names the LP text format cannot carry, quadratic terms)
- Solution feasibility (decoded values against bounds and rows)
"""

from typing import Any, Dict, List, Set
import math

from ..formats.grammar import is_lp_safe_name
from .constraints import Comparison


def _trivially_infeasible(comparison: str, rhs: float) -> bool:
    """Row with no terms: 0 <op> rhs."""
    if comparison == Comparison.LE:
        return rhs < 0
    if comparison == Comparison.GE:
        return rhs > 0
    return rhs != 0


def validate_model(model) -> Dict[str, Any]:
    """
    Validate a model.

    Checks:
    - Lower bound does not exceed upper bound
    - Rows without terms are satisfiable
    - Binary variables have default bounds (they are solved within [0, 1])
    - Integer variables have integral bounds
    - Names are safe in LP text
    - Every variable is used
    - Quadratic terms (only the HiGHS bridge carries them)

    Args:
        model: Model to validate

    Returns:
        Dict with:
        - valid: bool
        - errors: List[str] (if any)
        - warnings: List[str] (if any)
        - summary: sizes of the model
    """
    errors: List[str] = []
    warnings: List[str] = []

    # Variables
    for var in model.variables:
        if var.lb > var.ub:
            errors.append(
                f"Variable {var.name}: lower bound ({var.lb}) > upper bound ({var.ub})"
            )

        if var.is_binary and not var.has_default_bounds():
            warnings.append(
                f"Variable {var.name}: binary variable bounds [{var.lb}, {var.ub}] "
                f"are ignored (solved within [0, 1])"
            )
        elif var.is_integer:
            for side, bound in (("lower", var.lb), ("upper", var.ub)):
                if not math.isinf(bound) and not float(bound).is_integer():
                    warnings.append(
                        f"Variable {var.name}: non-integral {side} bound ({bound}) "
                        f"on an integer variable"
                    )

        if not is_lp_safe_name(var.name):
            warnings.append(
                f"Variable {var.name!r}: name cannot be written to LP text (LP output and the HiGHS schema reject it)"
            )

    # Constraints
    for i, constraint in enumerate(model.constraints):
        if not constraint.lhs.terms and _trivially_infeasible(
            constraint.comparison, constraint.rhs
        ):
            errors.append(
                f"Constraint {i}: 0 {constraint.comparison} {constraint.rhs} "
                f"can never be satisfied"
            )

    # Usage
    used: Set[str] = {v.name for v in model.objective.expression.variables()}
    for constraint in model.constraints:
        used.update(v.name for v in constraint.lhs.variables())
    unused = [name for name in model.variables.names() if name not in used]
    if unused:
        warnings.append(f"Unused variables: {', '.join(unused)}")

    quadratic = model.is_quadratic()
    if quadratic:
        warnings.append(
            "Model has quadratic terms: only the HiGHS bridge can encode it"
        )

    n_vars = len(model.variables)
    n_integer = sum(1 for var in model.variables if var.is_integer)

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "summary": {
            "n_variables": n_vars,
            "n_integer": n_integer,
            "n_constraints": len(model.constraints),
            "sense": model.objective.sense,
            "quadratic": quadratic,
        },
    }


def check_solution_feasibility(model, tolerance: float = 1e-6) -> Dict[str, Any]:
    """
    Check decoded values against bounds, integrality and rows.

    This is a feasibility check only; optimality is the engine's business.

    Args:
        model: Model after a solve
        tolerance: Tolerance for bound, integrality and row checks

    Returns:
        Dict with feasibility information
    """
    violations: List[Dict[str, Any]] = []
    unset = [var.name for var in model.variables if var.value is None]

    for var in model.variables:
        if var.value is None:
            continue

        lb, ub = var.effective_bounds()
        if var.value < lb - tolerance:
            violations.append({
                "variable": var.name,
                "type": "lower_bound",
                "value": var.value,
                "bound": lb,
            })
        if var.value > ub + tolerance:
            violations.append({
                "variable": var.name,
                "type": "upper_bound",
                "value": var.value,
                "bound": ub,
            })
        if var.is_integer and abs(var.value - round(var.value)) > tolerance:
            violations.append({
                "variable": var.name,
                "type": "integrality",
                "value": var.value,
            })

    for i, constraint in enumerate(model.constraints):
        satisfied = constraint.is_satisfied(tolerance)
        if satisfied is False:
            violations.append({
                "constraint": i,
                "type": "row",
                "value": constraint.lhs.evaluate(),
                "comparison": constraint.comparison,
                "bound": constraint.rhs,
            })

    return {
        "feasible": len(violations) == 0 and not unset,
        "violations": violations,
        "n_violations": len(violations),
        "unset_variables": unset,
    }
