"""
Exception taxonomy for lpmodel.

Structural violations are raised at the call that introduced them:
- InvalidVariableSpec: bad kind token, name or bound
- DuplicateVariableName: variable name already registered
- InvalidExpressionTerm: expression item of an unsupported shape
- InvalidComparisonOperator: operator outside <=, =, >=, ==
- InvalidObjectiveSense: sense other than maximize/minimize
- QuadraticUnsupportedByBackend: quadratic model sent to a linear-only schema
- UnknownEngineKind: engine kind with no bridge or bundled engine
- ParseError: LP text that does not match the grammar

Solution name mismatches are not exceptions; see
lpmodel.bridges.result.SolutionNameMismatch.
"""

from typing import Optional


class LPModelError(Exception):
    """Base class for all lpmodel errors."""
    pass


class InvalidVariableSpec(LPModelError, ValueError):
    """Raised when a variable is declared with an invalid kind, name or bound."""
    pass


class DuplicateVariableName(LPModelError, KeyError):
    """Raised when a variable name has already been used in a model."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Variable name '{name}' has already been used.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class InvalidExpressionTerm(LPModelError, TypeError):
    """Raised when an expression item is not a number, Var, or coefficient tuple."""

    def __init__(self, message: str, item: object = None):
        self.item = item
        super().__init__(message)


class InvalidComparisonOperator(LPModelError, ValueError):
    """Raised when a constraint uses an unknown comparison operator."""

    def __init__(self, operator: object):
        self.operator = operator
        super().__init__(
            f"Invalid comparison operator: {operator!r}. "
            f"Must be one of '<=', '=', '>=' or '=='."
        )


class InvalidObjectiveSense(LPModelError, ValueError):
    """Raised when the objective sense is neither maximize nor minimize."""
    pass


class QuadraticUnsupportedByBackend(LPModelError, ValueError):
    """Raised when a quadratic model is encoded for a linear-only engine schema."""

    def __init__(self, backend: str):
        self.backend = backend
        super().__init__(f"{backend} does not support quadratic models.")


class UnknownEngineKind(LPModelError, ValueError):
    """Raised when an engine kind has no registered bridge or bundled engine."""

    def __init__(self, kind: object, known: Optional[list] = None):
        self.kind = kind
        message = f"Unknown engine kind: {kind!r}."
        if known:
            message += f" Must be one of {known}."
        super().__init__(message)


class ParseError(LPModelError, ValueError):
    """
    Raised when LP text does not match the grammar.

    Attributes:
        position: 0-based character offset of the failure
        line: 1-based line number
        column: 1-based column number
    """

    def __init__(
        self,
        message: str,
        position: int = 0,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.position = position
        self.line = line
        self.column = column
        super().__init__(message)
