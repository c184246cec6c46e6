"""
lpmodel - linear and quadratic optimization models for external solvers

Build a model programmatically or from CPLEX LP text, then solve it with any
engine speaking one of three schemas (glpk.js, HiGHS, jsLPSolver):

    import asyncio
    from lpmodel import Model
    from lpmodel.engines import ScipyGLPKEngine

    m = Model()
    x = m.add_var(vtype="BINARY", name="x")
    y = m.add_var(name="y")
    m.set_objective([[4, x], [5, y]], "MAXIMIZE")
    m.add_constr([x, [2, y], 3], "<=", 8)

    result = asyncio.run(m.solve(ScipyGLPKEngine()))
    print(m.status, m.objective_value, x.value, y.value)
"""

__version__ = "0.1.0"

from .bridges import EngineKind, SolutionNameMismatch, SolveResult, SolveStatus, get_bridge
from .config import SolverSettings
from .errors import (
    DuplicateVariableName,
    InvalidComparisonOperator,
    InvalidExpressionTerm,
    InvalidObjectiveSense,
    InvalidVariableSpec,
    LPModelError,
    ParseError,
    QuadraticUnsupportedByBackend,
    UnknownEngineKind,
)
from .formats import parse_lp, read_lp, to_lp_format
from .modeling import (
    MAXIMIZE,
    MINIMIZE,
    Comparison,
    Constr,
    Expression,
    Model,
    Var,
    VarType,
    canonicalize,
    check_solution_feasibility,
    validate_model,
)

__all__ = [
    "__version__",
    # Modeling
    "Model",
    "Var",
    "VarType",
    "Constr",
    "Comparison",
    "Expression",
    "canonicalize",
    "MAXIMIZE",
    "MINIMIZE",
    "validate_model",
    "check_solution_feasibility",
    # LP text
    "parse_lp",
    "read_lp",
    "to_lp_format",
    # Bridges
    "EngineKind",
    "SolveStatus",
    "SolveResult",
    "SolutionNameMismatch",
    "get_bridge",
    # Config
    "SolverSettings",
    # Errors
    "LPModelError",
    "InvalidVariableSpec",
    "DuplicateVariableName",
    "InvalidExpressionTerm",
    "InvalidComparisonOperator",
    "InvalidObjectiveSense",
    "QuadraticUnsupportedByBackend",
    "ParseError",
    "UnknownEngineKind",
]
