"""
Model aggregate: variables, objective, constraints, and solve dispatch.

Usage:
    from lpmodel import Model
    from lpmodel.engines import ScipyGLPKEngine

    m = Model()
    x = m.add_var(vtype="BINARY")
    y = m.add_var(name="y")
    m.set_objective([[4, x], [5, y]], "MAXIMIZE")
    m.add_constr([x, [2, y], 3], "<=", 8)
    m.add_constr([[3, x], [4, y]], ">=", [12, [-1, x]])

    result = await m.solve(ScipyGLPKEngine())
    print(m.status, x.value, y.value)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
import inspect
import logging

from ..errors import InvalidObjectiveSense, UnknownEngineKind
from .constraints import Constr, build_constraint
from .expressions import Expression, canonicalize
from .variables import BoundLike, POS_INF, Var, VarType, VariableRegistry

logger = logging.getLogger(__name__)


MAXIMIZE = "MAXIMIZE"
MINIMIZE = "MINIMIZE"


@dataclass
class Objective:
    """Objective function: canonical expression plus sense."""
    expression: Expression = field(default_factory=Expression)
    sense: str = MAXIMIZE

    @property
    def is_maximize(self) -> bool:
        return self.sense == MAXIMIZE


class Model:
    """
    Linear / quadratic optimization model.

    Holds an ordered variable registry, an ordered list of constraints, and
    one objective. Solution fields (status, objective_value, solver_response,
    diagnostics, Var.value, Constr.primal/dual) are cleared at the start of
    every solve.
    """

    def __init__(self):
        """Create an empty model (objective 0, maximize)."""
        self.variables = VariableRegistry()
        self.constraints: List[Constr] = []
        self.objective = Objective()

        # Solve session
        self.status: Optional[str] = None
        self.objective_value: Optional[float] = None
        self.solver_response: Any = None
        self.diagnostics: List[Any] = []

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add_var(
        self,
        lb: BoundLike = 0,
        ub: BoundLike = POS_INF,
        vtype: str = VarType.CONTINUOUS,
        name: Optional[str] = None,
    ) -> Var:
        """
        Add a variable to the model.

        Args:
            lb: Lower bound (number, or "-infinity" / -inf for none)
            ub: Upper bound (number, or "+infinity" / inf for none)
            vtype: "CONTINUOUS", "BINARY" or "INTEGER"
            name: Variable name; Var<N> is generated when omitted

        Returns:
            The created Var

        Raises:
            DuplicateVariableName: if the name is already used
            InvalidVariableSpec: if the kind or a bound is invalid
        """
        return self.variables.add(name=name, lb=lb, ub=ub, vtype=vtype)

    def add_vars(
        self,
        names: Iterable[str],
        lb: BoundLike = 0,
        ub: BoundLike = POS_INF,
        vtype: str = VarType.CONTINUOUS,
    ) -> Dict[str, Var]:
        """
        Add several variables sharing the same options.

        Returns:
            Dict mapping each name to its Var
        """
        return self.variables.add_many(names, lb=lb, ub=ub, vtype=vtype)

    def parse_expression(self, expression: Any) -> Expression:
        """Canonicalize expression items against this model's variables."""
        return canonicalize(expression, self.variables)

    def set_objective(self, expression: Any, sense: str = MAXIMIZE) -> None:
        """
        Set the objective function.

        Args:
            expression: Expression items (numbers, Vars, coefficient tuples)
            sense: "MAXIMIZE" or "MINIMIZE" (case-insensitive)
        """
        if not isinstance(sense, str) or sense.upper() not in (MAXIMIZE, MINIMIZE):
            raise InvalidObjectiveSense(
                f"Invalid sense: {sense!r}. Must be one of \"MAXIMIZE\" or \"MINIMIZE\"."
            )
        parsed = self.parse_expression(expression)
        self.objective = Objective(expression=parsed, sense=sense.upper())

    def add_constr(self, lhs: Any, comparison: str, rhs: Any) -> Constr:
        """
        Add a constraint.

        Args:
            lhs: Left-hand side expression items
            comparison: "<=", "=", "==" or ">="
            rhs: Number or expression items

        Returns:
            The created Constr
        """
        constraint = build_constraint(lhs, comparison, rhs, self.variables)
        self.constraints.append(constraint)
        return constraint

    def clear(self) -> None:
        """Remove all variables and constraints and reset the objective."""
        self.variables.clear()
        self.constraints = []
        self.objective = Objective()
        self._reset_solution()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def is_quadratic(self) -> bool:
        """Whether the objective or any constraint has quadratic terms."""
        return self.objective.expression.is_quadratic() or any(
            c.lhs.is_quadratic() for c in self.constraints
        )

    def is_mip(self) -> bool:
        """Whether any variable is integer or binary."""
        return any(var.is_integer for var in self.variables)

    def validate(self) -> Dict[str, Any]:
        """Check the model for inconsistencies; see validation.validate_model."""
        from .validation import validate_model
        return validate_model(self)

    # ------------------------------------------------------------------
    # LP text format
    # ------------------------------------------------------------------

    def to_lp_format(self) -> str:
        """Serialize the model to CPLEX LP text."""
        from ..formats.writer import to_lp_format
        return to_lp_format(self)

    def read_lp_format(self, text: str) -> "Model":
        """
        Replace the model's contents with a model parsed from LP text.

        The model is left untouched if parsing or reconstruction fails.
        """
        from ..formats.parser import build_model, parse_lp

        parsed = parse_lp(text)
        fresh = build_model(parsed, Model())

        self.variables = fresh.variables
        self.constraints = fresh.constraints
        self.objective = fresh.objective
        self._reset_solution()
        logger.debug(
            f"Read LP text: {len(self.variables)} variables, {len(self.constraints)} constraints"
        )
        return self

    @classmethod
    def from_lp_format(cls, text: str) -> "Model":
        """Create a model from LP text."""
        return cls().read_lp_format(text)

    # ------------------------------------------------------------------
    # Bridges and solving
    # ------------------------------------------------------------------

    def to_request(self, kind: str, options: Optional[Dict[str, Any]] = None) -> Any:
        """Encode the model into the request schema of an engine kind."""
        return self._bridge(kind).encode(self, options)

    def read_solution(self, kind: str, response: Any):
        """
        Decode an engine response of the given kind into the model.

        Returns:
            SolveResult with status, objective value and diagnostics
        """
        self._reset_solution()
        result = self._bridge(kind).decode(self, response)
        self.solver_response = response
        self.diagnostics = result.diagnostics
        return result

    async def solve(
        self,
        engine: Any,
        options: Optional[Dict[str, Any]] = None,
        kind: Optional[str] = None,
    ):
        """
        Solve the model with an external engine.

        Args:
            engine: Object with a solve(request, options) method that
                returns a response or an awaitable of one
            options: Engine option bag, passed through untouched
            kind: EngineKind to use; defaults to engine.kind

        Returns:
            SolveResult; values are also written into the model's
            variables and constraints
        """
        self._reset_solution()

        kind = kind if kind is not None else getattr(engine, "kind", None)
        bridge = self._bridge(kind)
        options = options or {}

        request = bridge.encode(self, options)
        logger.info(f"Solving with {bridge.name} engine {type(engine).__name__}")

        response = engine.solve(request, options)
        if inspect.isawaitable(response):
            response = await response

        self.solver_response = response
        result = bridge.decode(self, response)
        self.diagnostics = result.diagnostics
        logger.info(f"Solve finished: status={self.status}, objective={self.objective_value}")
        return result

    def _bridge(self, kind: Optional[str]):
        from ..bridges.registry import get_bridge, get_registry

        bridge = get_bridge(kind) if kind is not None else None
        if bridge is None:
            raise UnknownEngineKind(kind, get_registry().kinds())
        return bridge

    def _reset_solution(self) -> None:
        """Clear every solution-session field."""
        self.status = None
        self.objective_value = None
        self.solver_response = None
        self.diagnostics = []
        for var in self.variables:
            var.value = None
        for constraint in self.constraints:
            constraint.primal = None
            constraint.dual = None

    def __repr__(self) -> str:
        return (
            f"Model(variables={len(self.variables)}, constraints={len(self.constraints)}, "
            f"sense={self.objective.sense})"
        )
