"""
GLPK bridge (glpk.js JSON schema).

Request:
    {"name": "LP",
     "objective": {"direction": GLP_MAX, "name": "obj", "vars": [{"name", "coef"}]},
     "subjectTo": [{"name": "cons1", "vars": [...], "bnds": {"type", "ub", "lb"}}],
     "bounds":    [{"name": "x", "type", "ub", "lb"}],
     "binaries":  [...], "generals": [...]}

Response:
    {"name": "LP", "time": 0.0,
     "result": {"status": GLP_OPT, "z": 14.0, "vars": {...}, "dual": {...}}}

The objective constant is not part of the request; it is added back to "z".
"""

from typing import Any, Dict, List, Optional
import logging
import math

from ..modeling.constraints import Comparison
from ..modeling.expressions import Expression
from .base import EngineKind, SolverBridge, SolveStatus
from .result import SolveResult
from .schemas import (
    GLPK,
    GLPKBounds,
    GLPKColumnBounds,
    GLPKObjective,
    GLPKRequest,
    GLPKResponse,
    GLPKRow,
    GLPKTerm,
)

logger = logging.getLogger(__name__)


STATUS_MAP: Dict[int, str] = {
    GLPK.GLP_OPT: SolveStatus.OPTIMAL,
    GLPK.GLP_FEAS: SolveStatus.FEASIBLE,
    GLPK.GLP_INFEAS: SolveStatus.INFEASIBLE,
    GLPK.GLP_NOFEAS: SolveStatus.INFEASIBLE,
    GLPK.GLP_UNBND: SolveStatus.UNBOUNDED,
    GLPK.GLP_UNDEF: SolveStatus.UNDEFINED,
}


def row_name(index: int) -> str:
    """Name of the row for constraint index (0-based)."""
    return f"cons{index + 1}"


def _terms(expression: Expression) -> List[GLPKTerm]:
    return [GLPKTerm(name=term.var.name, coef=term.coefficient) for term in expression.linear_terms]


def row_bounds(comparison: str, rhs: float) -> GLPKBounds:
    """Bound record of a row."""
    if comparison == Comparison.LE:
        return GLPKBounds(type=GLPK.GLP_UP, ub=rhs, lb=0)
    if comparison == Comparison.GE:
        return GLPKBounds(type=GLPK.GLP_LO, ub=0, lb=rhs)
    return GLPKBounds(type=GLPK.GLP_FX, ub=rhs, lb=rhs)


def column_bounds(name: str, lb: float, ub: float) -> GLPKColumnBounds:
    """Bound record of a column; infinite sides become 0 placeholders."""
    if math.isinf(lb) and math.isinf(ub):
        return GLPKColumnBounds(name=name, type=GLPK.GLP_FR, ub=0, lb=0)
    if math.isinf(lb):
        return GLPKColumnBounds(name=name, type=GLPK.GLP_UP, ub=ub, lb=0)
    if math.isinf(ub):
        return GLPKColumnBounds(name=name, type=GLPK.GLP_LO, ub=0, lb=lb)
    if lb == ub:
        return GLPKColumnBounds(name=name, type=GLPK.GLP_FX, ub=ub, lb=lb)
    return GLPKColumnBounds(name=name, type=GLPK.GLP_DB, ub=ub, lb=lb)


class GLPKBridge(SolverBridge):
    """Bridge for engines speaking the glpk.js problem/result schema."""

    @property
    def kind(self) -> str:
        return EngineKind.GLPK

    @property
    def name(self) -> str:
        return "GLPK"

    def encode(self, model, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Build the glpk.js problem object.

        Options are not part of this schema; they are handed to the engine
        next to the request.
        """
        self.check_supported(model)

        request = GLPKRequest(
            objective=GLPKObjective(
                direction=GLPK.GLP_MAX if model.objective.is_maximize else GLPK.GLP_MIN,
                vars=_terms(model.objective.expression),
            ),
            subjectTo=[
                GLPKRow(
                    name=row_name(i),
                    vars=_terms(constraint.lhs),
                    bnds=row_bounds(constraint.comparison, constraint.rhs),
                )
                for i, constraint in enumerate(model.constraints)
            ],
            bounds=[column_bounds(var.name, var.lb, var.ub) for var in model.variables],
            binaries=[var.name for var in model.variables if var.is_binary],
            generals=[
                var.name for var in model.variables if var.is_integer and not var.is_binary
            ],
        )

        logger.debug(
            f"Encoded GLPK request: {len(request.bounds)} columns, {len(request.subjectTo)} rows"
        )
        return request.model_dump()

    def decode(self, model, response: Any) -> SolveResult:
        solution = GLPKResponse.model_validate(response)
        status = STATUS_MAP.get(solution.result.status, SolveStatus.UNDEFINED)

        result = SolveResult(status=status, engine_kind=self.kind, raw_response=response)
        model.status = status

        if SolveStatus.has_solution(status):
            for name, value in solution.result.vars.items():
                var = model.variables.get(name)
                if var is None:
                    self.record_mismatch(
                        result, "variable", name,
                        f"Variable {name} from the solution was not found in the model.",
                    )
                    continue
                var.value = value
                result.values[name] = value

            if solution.result.dual is not None:
                self._read_duals(model, solution.result.dual, result)

            result.objective_value = self.objective_value(model, solution.result.z)
            model.objective_value = result.objective_value

        logger.debug(f"Decoded GLPK response: status={status}, z={solution.result.z}")
        return result

    def _read_duals(self, model, duals: Dict[str, float], result: SolveResult) -> None:
        known = set()
        for i, constraint in enumerate(model.constraints):
            name = row_name(i)
            known.add(name)
            if name in duals:
                constraint.dual = duals[name]

        for name in duals:
            if name not in known:
                self.record_mismatch(
                    result, "row", name,
                    f"Row {name} from the solution does not correspond to any model constraint.",
                )
