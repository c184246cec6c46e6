"""
Engine settings.

Option bags are opaque to the bridges. The bundled scipy engines read them
through SolverSettings, which understands the native option names of all
three engine families:

    time limit        time_limit (s), tmlim (s, GLPK), timeout (ms, jsLPSolver)
    relative MIP gap  mip_rel_gap, mipgap (GLPK), tolerance (jsLPSolver)
    presolve          presolve, presol (GLPK)
    solver output     disp, msglev (GLPK), log_to_console (HiGHS)
"""

from typing import Any, Dict, Optional
import logging

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# GLPK message level at which the solver prints its normal output
_GLP_MSG_ON = 2


class SolverSettings(BaseModel):
    """Settings understood by the scipy reference engines."""

    model_config = ConfigDict(frozen=True)

    time_limit: Optional[float] = Field(None, gt=0, description="Wall-clock limit in seconds")
    mip_rel_gap: Optional[float] = Field(None, ge=0, description="Relative MIP gap")
    presolve: bool = Field(True, description="Run presolve")
    disp: bool = Field(False, description="Print solver progress")
    primal_feasibility_tolerance: Optional[float] = Field(None, gt=0)
    dual_feasibility_tolerance: Optional[float] = Field(None, gt=0)

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "SolverSettings":
        """
        Read an engine option bag.

        Args:
            options: Option bag in any engine's native naming; unknown keys
                are ignored

        Returns:
            SolverSettings

        Example:
            >>> SolverSettings.from_options({"tmlim": 10, "mipgap": 0.01})
            SolverSettings(time_limit=10.0, mip_rel_gap=0.01, ...)
        """
        if isinstance(options, SolverSettings):
            return options
        options = dict(options or {})
        values: Dict[str, Any] = {}

        if "time_limit" in options:
            values["time_limit"] = options.pop("time_limit")
        elif "tmlim" in options:
            values["time_limit"] = options.pop("tmlim")
        elif "timeout" in options:
            values["time_limit"] = options.pop("timeout") / 1000.0

        for key in ("mip_rel_gap", "mipgap", "tolerance"):
            if key in options:
                values["mip_rel_gap"] = options.pop(key)
                break

        for key in ("presolve", "presol"):
            if key in options:
                values["presolve"] = bool(options.pop(key))
                break

        if "disp" in options:
            values["disp"] = bool(options.pop("disp"))
        elif "msglev" in options:
            values["disp"] = options.pop("msglev") >= _GLP_MSG_ON
        elif "log_to_console" in options:
            values["disp"] = bool(options.pop("log_to_console"))

        for key in ("primal_feasibility_tolerance", "dual_feasibility_tolerance"):
            if key in options:
                values[key] = options.pop(key)

        if options:
            logger.debug(f"Ignoring engine options: {sorted(options)}")

        return cls(**values)

    def _common_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"presolve": self.presolve, "disp": self.disp}
        if self.time_limit is not None:
            options["time_limit"] = self.time_limit
        return options

    def to_linprog_options(self) -> Dict[str, Any]:
        """Options for scipy.optimize.linprog(method="highs")."""
        options = self._common_options()
        if self.primal_feasibility_tolerance is not None:
            options["primal_feasibility_tolerance"] = self.primal_feasibility_tolerance
        if self.dual_feasibility_tolerance is not None:
            options["dual_feasibility_tolerance"] = self.dual_feasibility_tolerance
        return options

    def to_milp_options(self) -> Dict[str, Any]:
        """Options for scipy.optimize.milp."""
        options = self._common_options()
        if self.mip_rel_gap is not None:
            options["mip_rel_gap"] = self.mip_rel_gap
        return options
