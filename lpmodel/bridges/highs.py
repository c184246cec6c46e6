"""
HiGHS bridge.

The request is the model's LP text (objective constant included), so this
is the only bridge that can carry quadratic terms. The response uses HiGHS'
native status strings, a column map keyed by variable name and a row list
in constraint order.
"""

from typing import Any, Dict, Optional
import logging

from ..formats.writer import to_lp_format
from .base import EngineKind, SolverBridge, SolveStatus
from .result import SolveResult
from .schemas import HighsResponse

logger = logging.getLogger(__name__)


class HighsBridge(SolverBridge):
    """Bridge for engines that solve LP text and answer in the HiGHS layout."""

    @property
    def kind(self) -> str:
        return EngineKind.HIGHS

    @property
    def name(self) -> str:
        return "HiGHS"

    @property
    def supports_quadratic(self) -> bool:
        return True

    @property
    def objective_includes_constant(self) -> bool:
        return True

    def encode(self, model, options: Optional[Dict[str, Any]] = None) -> str:
        text = to_lp_format(model)
        logger.debug(f"Encoded HiGHS request: {len(text)} characters of LP text")
        return text

    def decode(self, model, response: Any) -> SolveResult:
        solution = HighsResponse.model_validate(response)
        status = solution.Status

        result = SolveResult(status=status, engine_kind=self.kind, raw_response=response)
        model.status = status

        if not SolveStatus.has_solution(status):
            logger.debug(f"HiGHS reported {status}; no values read")
            return result

        for name, column in solution.Columns.items():
            var = model.variables.get(name)
            if var is None:
                self.record_mismatch(
                    result, "variable", name,
                    f"Variable {name} from the solution was not found in the model.",
                )
                continue
            var.value = column.Primal
            result.values[name] = column.Primal

        # Rows follow constraint order
        for index, row in enumerate(solution.Rows):
            if index >= len(model.constraints):
                self.record_mismatch(
                    result, "row", row.Name if row.Name is not None else index,
                    f"Row {row.Name} from the solution does not correspond to any model constraint.",
                )
                continue
            constraint = model.constraints[index]
            constraint.primal = row.Primal
            constraint.dual = row.Dual

        result.objective_value = self.objective_value(model, solution.ObjectiveValue)
        model.objective_value = result.objective_value

        logger.debug(f"Decoded HiGHS response: status={status}, objective={result.objective_value}")
        return result
