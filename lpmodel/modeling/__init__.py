"""
Modeling layer: variables, canonical expressions, constraints and the Model.
"""

from .constraints import Comparison, Constr, build_constraint
from .expressions import Expression, LinearTerm, QuadraticTerm, canonicalize, pair_key
from .model import MAXIMIZE, MINIMIZE, Model, Objective
from .validation import check_solution_feasibility, validate_model
from .variables import NEG_INF, POS_INF, Var, VarType, VariableRegistry

__all__ = [
    # Variables
    "Var",
    "VarType",
    "VariableRegistry",
    "NEG_INF",
    "POS_INF",
    # Expressions
    "Expression",
    "LinearTerm",
    "QuadraticTerm",
    "canonicalize",
    "pair_key",
    # Constraints
    "Constr",
    "Comparison",
    "build_constraint",
    # Model
    "Model",
    "Objective",
    "MAXIMIZE",
    "MINIMIZE",
    # Validation
    "validate_model",
    "check_solution_feasibility",
]
