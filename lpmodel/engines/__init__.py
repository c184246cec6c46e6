"""
Solving engines.

Engines take a request in the schema of their EngineKind and return the
matching response (or an awaitable of it).

Bundled:
- ScipyGLPKEngine, ScipyHighsEngine, ScipyJSLPEngine: scipy.optimize
  reference engines for the three schemas
- HighsPyEngine: the real HiGHS solver (pip install lp-model[highs])
- FunctionEngine: wrap any sync or async callable
"""

from ..errors import UnknownEngineKind
from .base import FunctionEngine, SolverEngine
from .highspy_backend import HighsPyEngine
from .scipy_backend import (
    LinearProgram,
    LinearProgramSolution,
    ScipyEngine,
    ScipyGLPKEngine,
    ScipyHighsEngine,
    ScipyJSLPEngine,
    solve_linear_program,
)


def get_engine(kind: str) -> SolverEngine:
    """Default bundled engine for an engine kind."""
    engines = {
        "glpk": ScipyGLPKEngine,
        "highs": ScipyHighsEngine,
        "jslp": ScipyJSLPEngine,
    }
    if kind not in engines:
        raise UnknownEngineKind(kind, list(engines))
    return engines[kind]()


__all__ = [
    "SolverEngine",
    "FunctionEngine",
    "ScipyEngine",
    "ScipyGLPKEngine",
    "ScipyHighsEngine",
    "ScipyJSLPEngine",
    "HighsPyEngine",
    "LinearProgram",
    "LinearProgramSolution",
    "solve_linear_program",
    "get_engine",
]
