"""
jsLPSolver bridge.

Request:
    {"optimize": "objective", "opType": "max",
     "constraints": {"c0": {"max": 5}, "x_ub": {"max": 10}},
     "variables":   {"x": {"objective": 4, "c0": 1, "x_ub": 1}},
     "ints": {}, "binaries": {"x": 1}, "unrestricted": {}, "options": {...}}

Response (flat):
    {"feasible": true, "result": 14, "bounded": true, "isIntegral": true,
     "x": 1, "y": 2}

The schema has no bound records: a bound other than the default becomes a
row "<var>_lb" / "<var>_ub" in which the variable has coefficient 1, and a
lower bound below zero marks the variable unrestricted. Variables missing
from the response are zero. The schema carries no duals.
"""

from typing import Any, Dict, Optional
import logging
import math

from ..modeling.constraints import Comparison
from .base import EngineKind, SolverBridge, SolveStatus
from .result import SolveResult
from .schemas import JSLPRequest, JSLPResponse

logger = logging.getLogger(__name__)


OBJECTIVE_KEY = "objective"

_ROW_KEYS = {Comparison.LE: "max", Comparison.GE: "min", Comparison.EQ: "equal"}


def row_name(index: int) -> str:
    """Name of the row for constraint index (0-based)."""
    return f"c{index}"


def decode_status(feasible: Optional[bool], bounded: Optional[bool]) -> str:
    """Map the feasible/bounded flags to a SolveStatus."""
    if feasible is None:
        return SolveStatus.UNDEFINED
    if not feasible:
        return SolveStatus.INFEASIBLE
    if bounded is False:
        return SolveStatus.UNBOUNDED
    return SolveStatus.OPTIMAL


class JSLPBridge(SolverBridge):
    """Bridge for engines speaking the jsLPSolver model schema."""

    @property
    def kind(self) -> str:
        return EngineKind.JSLP

    @property
    def name(self) -> str:
        return "jsLPSolver"

    def encode(self, model, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Build the jsLPSolver model.

        Args:
            model: Model to encode
            options: Embedded verbatim under "options"
        """
        self.check_supported(model)

        constraints: Dict[str, Dict[str, float]] = {}
        variables: Dict[str, Dict[str, float]] = {}
        ints: Dict[str, int] = {}
        binaries: Dict[str, int] = {}
        unrestricted: Dict[str, int] = {}

        for var in model.variables:
            coefficients: Dict[str, float] = {}
            variables[var.name] = coefficients

            if var.lb < 0:
                unrestricted[var.name] = 1
            if var.lb != 0 and not math.isinf(var.lb):
                constraints[f"{var.name}_lb"] = {"min": var.lb}
                coefficients[f"{var.name}_lb"] = 1
            if not math.isinf(var.ub):
                constraints[f"{var.name}_ub"] = {"max": var.ub}
                coefficients[f"{var.name}_ub"] = 1

            if var.is_binary:
                binaries[var.name] = 1
            elif var.is_integer:
                ints[var.name] = 1

        for term in model.objective.expression.linear_terms:
            variables[term.var.name][OBJECTIVE_KEY] = term.coefficient

        for index, constraint in enumerate(model.constraints):
            name = row_name(index)
            constraints[name] = {_ROW_KEYS[constraint.comparison]: constraint.rhs}
            for term in constraint.lhs.linear_terms:
                coefficients = variables[term.var.name]
                coefficients[name] = coefficients.get(name, 0) + term.coefficient

        request = JSLPRequest(
            opType="max" if model.objective.is_maximize else "min",
            constraints=constraints,
            variables=variables,
            ints=ints,
            binaries=binaries,
            unrestricted=unrestricted,
            options=dict(options or {}),
        )

        logger.debug(
            f"Encoded jsLPSolver request: {len(variables)} variables, {len(constraints)} rows"
        )
        return request.model_dump()

    def decode(self, model, response: Any) -> SolveResult:
        solution = JSLPResponse.model_validate(response)
        status = decode_status(solution.feasible, solution.bounded)

        result = SolveResult(status=status, engine_kind=self.kind, raw_response=response)
        model.status = status

        if not solution.feasible:
            logger.debug(f"jsLPSolver reported {status}; no values read")
            return result

        reported = solution.variable_values()
        for var in model.variables:
            value = reported.get(var.name, 0)
            var.value = value
            result.values[var.name] = value

        for name in reported:
            if name not in model.variables:
                self.record_mismatch(
                    result, "variable", name,
                    f"Variable {name} from the solution was not found in the model.",
                )

        result.objective_value = self.objective_value(model, solution.result)
        model.objective_value = result.objective_value

        logger.debug(f"Decoded jsLPSolver response: status={status}, result={solution.result}")
        return result
