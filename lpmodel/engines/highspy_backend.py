"""
HiGHS engine through highspy (optional, extra "highs").

Feeds the LP text request to highspy.Highs and reports HiGHS' own status
strings, so it handles everything the HiGHS bridge can encode, quadratic
objectives included.
"""

from typing import Any, Dict, Optional
import logging
import os
import tempfile

from ..bridges.base import EngineKind
from .base import SolverEngine

logger = logging.getLogger(__name__)


# Option bag keys that highspy understands under a different name
_OPTION_ALIASES = {
    "tmlim": "time_limit",
    "mipgap": "mip_rel_gap",
    "presol": "presolve",
    "disp": "log_to_console",
}


class HighsPyEngine(SolverEngine):
    """Solves LP text with the real HiGHS solver."""

    @property
    def kind(self) -> str:
        return EngineKind.HIGHS

    @property
    def name(self) -> str:
        return "highspy"

    def is_available(self) -> bool:
        try:
            import highspy
            return True
        except ImportError:
            return False

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "methods": ["simplex", "ipm", "mip", "qp"],
        }

    def _apply_options(self, highs, options: Optional[Dict[str, Any]]) -> None:
        highs.setOptionValue("output_flag", False)
        for key, value in (options or {}).items():
            key = _OPTION_ALIASES.get(key, key)
            if key == "presolve" and isinstance(value, bool):
                value = "on" if value else "off"
            if key == "log_to_console":
                highs.setOptionValue("output_flag", bool(value))
            highs.setOptionValue(key, value)

    def solve(self, request: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        import highspy

        highs = highspy.Highs()
        self._apply_options(highs, options)

        # highspy reads models from files only
        fd, path = tempfile.mkstemp(suffix=".lp", text=True)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(request)
            highs.readModel(path)
        finally:
            os.remove(path)

        highs.run()

        status = highs.modelStatusToString(highs.getModelStatus())
        response: Dict[str, Any] = {"Status": status}
        logger.info(f"{self.name}: {status}")

        solution = highs.getSolution()
        if not solution.value_valid:
            return response

        lp = highs.getLp()
        response["ObjectiveValue"] = highs.getInfo().objective_function_value

        columns = {}
        for j, name in enumerate(lp.col_names_):
            column = {"Index": j, "Name": name, "Primal": solution.col_value[j]}
            if solution.dual_valid:
                column["Dual"] = solution.col_dual[j]
            columns[name] = column
        response["Columns"] = columns

        rows = []
        for i, name in enumerate(lp.row_names_):
            row = {"Index": i, "Name": name, "Primal": solution.row_value[i]}
            if solution.dual_valid:
                row["Dual"] = solution.row_dual[i]
            rows.append(row)
        response["Rows"] = rows

        return response
