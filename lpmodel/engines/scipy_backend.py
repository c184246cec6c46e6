"""
SciPy reference engines.

Three engines, one per request schema, that delegate the numerical work to
scipy.optimize (HiGHS under the hood):
- linprog(method="highs") for continuous problems (row duals available)
- milp for problems with integer or binary columns (no duals)

Each engine reads its request into a LinearProgram (dense numpy matrices),
solves it with solve_linear_program(), and answers in the response schema of
its kind.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import math
import time

import numpy as np

from ..bridges.base import EngineKind, SolveStatus
from ..bridges.schemas import GLPK, GLPKRequest, JSLPRequest
from ..config import SolverSettings
from ..errors import QuadraticUnsupportedByBackend
from .base import SolverEngine

logger = logging.getLogger(__name__)


@dataclass
class LinearProgram:
    """
    Dense (mixed-integer) linear program.

        opt   objective @ x + offset
        s.t.  row_lower <= matrix @ x <= row_upper
              lower <= x <= upper
              x[j] integral where integrality[j] == 1
    """
    column_names: List[str]
    objective: np.ndarray
    maximize: bool
    lower: np.ndarray
    upper: np.ndarray
    integrality: np.ndarray
    row_names: List[str] = field(default_factory=list)
    matrix: Optional[np.ndarray] = None
    row_lower: Optional[np.ndarray] = None
    row_upper: Optional[np.ndarray] = None
    offset: float = 0.0

    def __post_init__(self):
        n, m = len(self.column_names), len(self.row_names)
        if self.matrix is None:
            self.matrix = np.zeros((m, n))
        if self.row_lower is None:
            self.row_lower = np.full(m, -np.inf)
        if self.row_upper is None:
            self.row_upper = np.full(m, np.inf)

    @property
    def n_columns(self) -> int:
        return len(self.column_names)

    @property
    def n_rows(self) -> int:
        return len(self.row_names)

    @property
    def is_mip(self) -> bool:
        return bool(np.any(self.integrality))


@dataclass
class LinearProgramSolution:
    """Solution of a LinearProgram in canonical SolveStatus terms."""
    status: str
    x: Optional[np.ndarray] = None
    objective_value: Optional[float] = None
    row_activity: Optional[np.ndarray] = None
    row_duals: Optional[np.ndarray] = None
    column_duals: Optional[np.ndarray] = None
    message: str = ""

    @property
    def has_solution(self) -> bool:
        return self.x is not None and SolveStatus.has_solution(self.status)


class _ProgramBuilder:
    """Accumulates columns and sparse rows, then densifies."""

    def __init__(self):
        self.columns: Dict[str, int] = {}
        self.lower: List[float] = []
        self.upper: List[float] = []
        self.integral: List[int] = []
        self.costs: Dict[int, float] = {}
        self.rows: List[Dict[int, float]] = []
        self.row_names: List[str] = []
        self.row_lower: List[float] = []
        self.row_upper: List[float] = []

    def column(self, name: str, lb: float = 0.0, ub: float = math.inf) -> int:
        if name not in self.columns:
            self.columns[name] = len(self.lower)
            self.lower.append(lb)
            self.upper.append(ub)
            self.integral.append(0)
        return self.columns[name]

    def set_bounds(self, name: str, lb: float, ub: float) -> None:
        j = self.column(name)
        self.lower[j], self.upper[j] = lb, ub

    def mark_integer(self, name: str, binary: bool = False) -> None:
        j = self.column(name)
        self.integral[j] = 1
        if binary:
            self.lower[j] = max(self.lower[j], 0.0)
            self.upper[j] = min(self.upper[j], 1.0)

    def add_cost(self, name: str, coefficient: float) -> None:
        j = self.column(name)
        self.costs[j] = self.costs.get(j, 0.0) + coefficient

    def add_row(self, name: str, coefficients: Dict[str, float], lb: float, ub: float) -> None:
        row: Dict[int, float] = {}
        for var_name, coefficient in coefficients.items():
            j = self.column(var_name)
            row[j] = row.get(j, 0.0) + coefficient
        self.rows.append(row)
        self.row_names.append(name)
        self.row_lower.append(lb)
        self.row_upper.append(ub)

    def build(self, maximize: bool, offset: float = 0.0) -> LinearProgram:
        n, m = len(self.columns), len(self.rows)
        objective = np.zeros(n)
        for j, coefficient in self.costs.items():
            objective[j] = coefficient
        matrix = np.zeros((m, n))
        for i, row in enumerate(self.rows):
            for j, coefficient in row.items():
                matrix[i, j] = coefficient
        return LinearProgram(
            column_names=list(self.columns),
            objective=objective,
            maximize=maximize,
            lower=np.array(self.lower, dtype=float),
            upper=np.array(self.upper, dtype=float),
            integrality=np.array(self.integral, dtype=int),
            row_names=list(self.row_names),
            matrix=matrix,
            row_lower=np.array(self.row_lower, dtype=float),
            row_upper=np.array(self.row_upper, dtype=float),
            offset=offset,
        )


# =============================================================================
# Solving
# =============================================================================

def _decode_scipy_status(code: int, x: Optional[np.ndarray]) -> str:
    """Map a linprog/milp status code to a SolveStatus."""
    if code == 0:
        return SolveStatus.OPTIMAL
    if code == 2:
        return SolveStatus.INFEASIBLE
    if code == 3:
        return SolveStatus.UNBOUNDED
    if code == 1 and x is not None:
        return SolveStatus.FEASIBLE
    return SolveStatus.UNDEFINED


def _solve_without_columns(lp: LinearProgram, tolerance: float = 1e-9) -> LinearProgramSolution:
    """Every row reads 0 <op> rhs; nothing is left to decide."""
    feasible = bool(np.all(lp.row_lower <= tolerance) and np.all(lp.row_upper >= -tolerance))
    if not feasible:
        return LinearProgramSolution(
            status=SolveStatus.INFEASIBLE, message="rows without columns are violated"
        )
    return LinearProgramSolution(
        status=SolveStatus.OPTIMAL,
        x=np.zeros(0),
        objective_value=lp.offset,
        row_activity=np.zeros(lp.n_rows),
        row_duals=None if lp.is_mip else np.zeros(lp.n_rows),
        column_duals=None if lp.is_mip else np.zeros(0),
        message="no columns",
    )


def _solve_milp(lp: LinearProgram, c: np.ndarray, settings: SolverSettings):
    from scipy.optimize import Bounds, LinearConstraint, milp

    constraints = None
    if lp.n_rows:
        constraints = LinearConstraint(lp.matrix, lp.row_lower, lp.row_upper)

    return milp(
        c,
        integrality=lp.integrality,
        bounds=Bounds(lp.lower, lp.upper),
        constraints=constraints,
        options=settings.to_milp_options(),
    )


def _solve_linprog(lp: LinearProgram, c: np.ndarray, settings: SolverSettings):
    """
    Solve with linprog, splitting ranged rows into A_ub/A_eq parts.

    Returns:
        (scipy result, function mapping the result to row duals)
    """
    from scipy.optimize import linprog

    A_ub, b_ub, A_eq, b_eq = [], [], [], []
    # (row index, +1 for "<= upper", -1 for ">= lower") per A_ub row
    ub_rows = []
    eq_rows = []

    for i in range(lp.n_rows):
        lo, hi = lp.row_lower[i], lp.row_upper[i]
        if lo == hi:
            A_eq.append(lp.matrix[i])
            b_eq.append(hi)
            eq_rows.append(i)
            continue
        if not math.isinf(hi):
            A_ub.append(lp.matrix[i])
            b_ub.append(hi)
            ub_rows.append((i, 1.0))
        if not math.isinf(lo):
            A_ub.append(-lp.matrix[i])
            b_ub.append(-lo)
            ub_rows.append((i, -1.0))

    bounds = [
        (None if math.isinf(lo) else lo, None if math.isinf(hi) else hi)
        for lo, hi in zip(lp.lower, lp.upper)
    ]

    res = linprog(
        c=c,
        A_ub=np.array(A_ub) if A_ub else None,
        b_ub=np.array(b_ub) if b_ub else None,
        A_eq=np.array(A_eq) if A_eq else None,
        b_eq=np.array(b_eq) if b_eq else None,
        bounds=bounds,
        method="highs",
        options=settings.to_linprog_options(),
    )

    def row_duals(result) -> Optional[np.ndarray]:
        duals = np.zeros(lp.n_rows)
        ineqlin = getattr(result, "ineqlin", None)
        eqlin = getattr(result, "eqlin", None)
        if (ub_rows and ineqlin is None) or (eq_rows and eqlin is None):
            return None
        for k, (i, sign) in enumerate(ub_rows):
            duals[i] += sign * ineqlin.marginals[k]
        for k, i in enumerate(eq_rows):
            duals[i] += eqlin.marginals[k]
        return duals

    return res, row_duals


def solve_linear_program(
    lp: LinearProgram,
    settings: Optional[SolverSettings] = None,
) -> LinearProgramSolution:
    """
    Solve a LinearProgram with scipy.optimize.

    Duals are reported as sensitivities of the (max or min) objective to
    the row bounds, for continuous problems only.

    Args:
        lp: Program to solve
        settings: Engine settings (time limit, gap, presolve, output)

    Returns:
        LinearProgramSolution
    """
    settings = settings or SolverSettings()

    if lp.n_columns == 0:
        return _solve_without_columns(lp)

    # scipy minimizes
    direction = -1.0 if lp.maximize else 1.0
    c = direction * lp.objective

    if lp.is_mip:
        res = _solve_milp(lp, c, settings)
        row_duals = None
    else:
        res, row_duals = _solve_linprog(lp, c, settings)

    x = getattr(res, "x", None)
    status = _decode_scipy_status(res.status, x)
    solution = LinearProgramSolution(status=status, message=str(res.message))

    if x is None or not SolveStatus.has_solution(status):
        logger.debug(f"scipy finished without a solution: {res.message}")
        return solution

    solution.x = np.asarray(x, dtype=float)
    solution.objective_value = float(lp.objective @ solution.x) + lp.offset
    solution.row_activity = lp.matrix @ solution.x

    if row_duals is not None and status == SolveStatus.OPTIMAL:
        duals = row_duals(res)
        if duals is not None:
            solution.row_duals = direction * duals
        lower, upper = getattr(res, "lower", None), getattr(res, "upper", None)
        if lower is not None and upper is not None:
            solution.column_duals = direction * (
                np.asarray(lower.marginals) + np.asarray(upper.marginals)
            )

    return solution


# =============================================================================
# Request readers
# =============================================================================

def _glpk_bounds(type_code: int, lb: float, ub: float):
    if type_code == GLPK.GLP_FR:
        return -math.inf, math.inf
    if type_code == GLPK.GLP_LO:
        return lb, math.inf
    if type_code == GLPK.GLP_UP:
        return -math.inf, ub
    if type_code == GLPK.GLP_FX:
        return lb, lb
    return lb, ub


def program_from_glpk(request: Any) -> LinearProgram:
    """Read a glpk.js problem object."""
    problem = GLPKRequest.model_validate(request)
    builder = _ProgramBuilder()

    for bound in problem.bounds:
        builder.set_bounds(bound.name, *_glpk_bounds(bound.type, bound.lb, bound.ub))
    for term in problem.objective.vars:
        builder.add_cost(term.name, term.coef)
    for row in problem.subjectTo:
        coefficients: Dict[str, float] = {}
        for term in row.vars:
            coefficients[term.name] = coefficients.get(term.name, 0.0) + term.coef
        builder.add_row(row.name, coefficients, *_glpk_bounds(row.bnds.type, row.bnds.lb, row.bnds.ub))
    for name in problem.generals:
        builder.mark_integer(name)
    for name in problem.binaries:
        builder.mark_integer(name, binary=True)

    return builder.build(maximize=problem.objective.direction == GLPK.GLP_MAX)


def program_from_jslp(request: Any) -> LinearProgram:
    """Read a jsLPSolver model."""
    problem = JSLPRequest.model_validate(request)
    builder = _ProgramBuilder()

    for name in problem.variables:
        lb = -math.inf if problem.unrestricted.get(name) else 0.0
        builder.set_bounds(name, lb, math.inf)

    row_terms: Dict[str, Dict[str, float]] = {row: {} for row in problem.constraints}
    for name, coefficients in problem.variables.items():
        for key, coefficient in coefficients.items():
            if key == problem.optimize:
                builder.add_cost(name, coefficient)
            elif key in row_terms:
                row_terms[key][name] = coefficient

    for row, limits in problem.constraints.items():
        if "equal" in limits:
            lb = ub = limits["equal"]
        else:
            lb = limits.get("min", -math.inf)
            ub = limits.get("max", math.inf)
        builder.add_row(row, row_terms[row], lb, ub)

    for name, flag in problem.ints.items():
        if flag:
            builder.mark_integer(name)
    for name, flag in problem.binaries.items():
        if flag:
            builder.mark_integer(name, binary=True)

    return builder.build(maximize=problem.opType == "max")


def program_from_model(model, engine_name: str = "scipy") -> LinearProgram:
    """
    Read a Model (used for LP text requests after parsing).

    Raises:
        QuadraticUnsupportedByBackend: if the model has quadratic terms
    """
    from ..modeling.constraints import Comparison

    if model.is_quadratic():
        raise QuadraticUnsupportedByBackend(engine_name)

    builder = _ProgramBuilder()
    for var in model.variables:
        builder.set_bounds(var.name, var.lb, var.ub)
        if var.is_integer:
            builder.mark_integer(var.name, binary=var.is_binary)

    for term in model.objective.expression.linear_terms:
        builder.add_cost(term.var.name, term.coefficient)

    for i, constraint in enumerate(model.constraints):
        coefficients = {term.var.name: term.coefficient for term in constraint.lhs.linear_terms}
        if constraint.comparison == Comparison.LE:
            lb, ub = -math.inf, constraint.rhs
        elif constraint.comparison == Comparison.GE:
            lb, ub = constraint.rhs, math.inf
        else:
            lb = ub = constraint.rhs
        builder.add_row(f"c{i + 1}", coefficients, lb, ub)

    return builder.build(
        maximize=model.objective.is_maximize,
        offset=model.objective.expression.constant,
    )


# =============================================================================
# Engines
# =============================================================================

class ScipyEngine(SolverEngine):
    """Common part of the scipy reference engines."""

    def is_available(self) -> bool:
        try:
            import scipy.optimize
            return True
        except ImportError:
            return False

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "methods": ["linprog (highs)", "milp"],
            "duals": "continuous models only",
        }

    def _run(self, lp: LinearProgram, options: Optional[Dict[str, Any]]):
        settings = SolverSettings.from_options(options)
        logger.info(
            f"{self.name}: solving {lp.n_columns} columns x {lp.n_rows} rows"
            f"{' (MIP)' if lp.is_mip else ''}"
        )
        start = time.perf_counter()
        solution = solve_linear_program(lp, settings)
        elapsed = time.perf_counter() - start
        logger.info(f"{self.name}: {solution.status} in {elapsed:.3f}s")
        return solution, elapsed


_GLPK_STATUS = {
    SolveStatus.OPTIMAL: GLPK.GLP_OPT,
    SolveStatus.FEASIBLE: GLPK.GLP_FEAS,
    SolveStatus.INFEASIBLE: GLPK.GLP_NOFEAS,
    SolveStatus.UNBOUNDED: GLPK.GLP_UNBND,
    SolveStatus.UNDEFINED: GLPK.GLP_UNDEF,
}


class ScipyGLPKEngine(ScipyEngine):
    """Answers glpk.js problem objects with glpk.js result objects."""

    @property
    def kind(self) -> str:
        return EngineKind.GLPK

    @property
    def name(self) -> str:
        return "scipy-glpk"

    def solve(self, request: Any, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        lp = program_from_glpk(request)
        solution, elapsed = self._run(lp, options)

        result: Dict[str, Any] = {"status": _GLPK_STATUS[solution.status], "z": 0.0, "vars": {}}
        if solution.has_solution:
            result["z"] = solution.objective_value
            result["vars"] = {
                name: float(value) for name, value in zip(lp.column_names, solution.x)
            }
            if solution.row_duals is not None:
                result["dual"] = {
                    name: float(dual) for name, dual in zip(lp.row_names, solution.row_duals)
                }

        name = request.get("name", "LP") if isinstance(request, dict) else request.name
        return {"name": name, "time": elapsed, "result": result}


_HIGHS_STATUS = {
    SolveStatus.OPTIMAL: "Optimal",
    SolveStatus.FEASIBLE: "Feasible",
    SolveStatus.INFEASIBLE: "Infeasible",
    SolveStatus.UNBOUNDED: "Unbounded",
    SolveStatus.UNDEFINED: "Unknown",
}


class ScipyHighsEngine(ScipyEngine):
    """Solves LP text and answers in the HiGHS solution layout."""

    @property
    def kind(self) -> str:
        return EngineKind.HIGHS

    @property
    def name(self) -> str:
        return "scipy-highs"

    def solve(self, request: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        from ..modeling.model import Model

        lp = program_from_model(Model.from_lp_format(request), self.name)
        solution, _ = self._run(lp, options)

        response: Dict[str, Any] = {"Status": _HIGHS_STATUS[solution.status]}
        if not solution.has_solution:
            return response

        response["ObjectiveValue"] = solution.objective_value

        columns = {}
        for j, name in enumerate(lp.column_names):
            column = {"Index": j, "Name": name, "Primal": float(solution.x[j])}
            if solution.column_duals is not None:
                column["Dual"] = float(solution.column_duals[j])
            columns[name] = column
        response["Columns"] = columns

        rows = []
        for i, name in enumerate(lp.row_names):
            row = {"Index": i, "Name": name, "Primal": float(solution.row_activity[i])}
            if solution.row_duals is not None:
                row["Dual"] = float(solution.row_duals[i])
            rows.append(row)
        response["Rows"] = rows

        return response


class ScipyJSLPEngine(ScipyEngine):
    """Answers jsLPSolver models with flat jsLPSolver results."""

    @property
    def kind(self) -> str:
        return EngineKind.JSLP

    @property
    def name(self) -> str:
        return "scipy-jslp"

    def solve(self, request: Any, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        lp = program_from_jslp(request)
        if not options:
            # Fall back to the options embedded in the request
            options = request.get("options") if isinstance(request, dict) else request.options
        solution, _ = self._run(lp, options)

        if solution.status == SolveStatus.INFEASIBLE:
            return {"feasible": False, "result": 0, "bounded": True}
        if solution.status == SolveStatus.UNBOUNDED:
            return {
                "feasible": True,
                "result": math.inf if lp.maximize else -math.inf,
                "bounded": False,
            }
        if not solution.has_solution:
            return {"feasible": None, "result": 0}

        response: Dict[str, Any] = {
            "feasible": True,
            "result": solution.objective_value,
            "bounded": True,
            "isIntegral": lp.is_mip,
        }
        # Variables at zero are left out
        for name, value in zip(lp.column_names, solution.x):
            if value != 0:
                response[name] = float(value)
        return response
