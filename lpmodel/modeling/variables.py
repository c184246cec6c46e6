"""
Decision variables and the variable registry.

A Var is identified by its name, which is unique within a Model. Bounds are
stored as floats, with -inf and +inf acting as the "unbounded" sentinels.
The registry keeps variables in an index-stable list plus a name -> index
lookup, so the position of a variable never changes once it is created.
"""

from dataclasses import dataclass
from numbers import Real
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union
import logging
import math

from ..errors import DuplicateVariableName, InvalidVariableSpec

logger = logging.getLogger(__name__)


NEG_INF = float("-inf")
POS_INF = float("inf")

_LOWER_SENTINELS = ("-infinity", "-inf")
_UPPER_SENTINELS = ("+infinity", "+inf", "infinity", "inf")

BoundLike = Union[Real, str]


class VarType:
    """Variable kinds."""

    CONTINUOUS = "CONTINUOUS"
    BINARY = "BINARY"
    INTEGER = "INTEGER"

    @classmethod
    def all_types(cls) -> List[str]:
        """Get all valid variable kinds."""
        return [cls.CONTINUOUS, cls.BINARY, cls.INTEGER]

    @classmethod
    def is_valid(cls, vtype: str) -> bool:
        """Check if a kind token is valid (case-insensitive)."""
        return isinstance(vtype, str) and vtype.upper() in cls.all_types()

    @classmethod
    def normalize(cls, vtype: str) -> str:
        """Return the canonical upper-case kind or raise InvalidVariableSpec."""
        if not cls.is_valid(vtype):
            raise InvalidVariableSpec(
                f"Invalid variable type: {vtype!r}. "
                f"Must be one of {', '.join(cls.all_types())}."
            )
        return vtype.upper()


def is_number(value: object) -> bool:
    """True for real numbers, excluding bools."""
    return isinstance(value, Real) and not isinstance(value, bool)


def _normalize_bound(value: BoundLike, side: str) -> float:
    """Validate one bound and map infinity sentinels to floats."""
    if side == "lower":
        sentinels, infinity, wrong = _LOWER_SENTINELS, NEG_INF, POS_INF
        label = '"-infinity"'
    else:
        sentinels, infinity, wrong = _UPPER_SENTINELS, POS_INF, NEG_INF
        label = '"+infinity"'

    if isinstance(value, str):
        if value.strip().lower() in sentinels:
            return infinity
        raise InvalidVariableSpec(
            f"Invalid {side} bound: {value!r}. Must be a number or {label}."
        )
    if not is_number(value):
        raise InvalidVariableSpec(
            f"Invalid {side} bound: {value!r}. Must be a number or {label}."
        )
    if math.isnan(value) or value == wrong:
        raise InvalidVariableSpec(
            f"Invalid {side} bound: {value!r}. Must be a number or {label}."
        )
    if math.isinf(value):
        return infinity
    return value


@dataclass(eq=False)
class Var:
    """
    Decision variable.

    Attributes:
        name: Unique, case-sensitive identifier within a model
        lb: Lower bound (number or -inf)
        ub: Upper bound (number or +inf)
        vtype: "CONTINUOUS", "BINARY" or "INTEGER"
        value: Solution value, set only by solution decoding

    Examples:
        Var(name="x")                              # [0, +inf), continuous
        Var(name="y", lb="-infinity", ub=10)
        Var(name="pick", vtype="binary")           # solved within [0, 1]
    """
    name: str
    lb: BoundLike = 0
    ub: BoundLike = POS_INF
    vtype: str = VarType.CONTINUOUS
    value: Optional[float] = None

    def __post_init__(self):
        """Validate and normalize the specification."""
        if not isinstance(self.name, str) or not self.name:
            raise InvalidVariableSpec(
                f"Variable name must be a non-empty string, got {self.name!r}."
            )
        self.vtype = VarType.normalize(self.vtype)
        self.lb = _normalize_bound(self.lb, "lower")
        self.ub = _normalize_bound(self.ub, "upper")

    @property
    def is_binary(self) -> bool:
        return self.vtype == VarType.BINARY

    @property
    def is_integer(self) -> bool:
        """True for integer and binary kinds."""
        return self.vtype in (VarType.INTEGER, VarType.BINARY)

    def has_default_bounds(self) -> bool:
        """Whether the bounds are the implicit [0, +inf)."""
        return self.lb == 0 and self.ub == POS_INF

    def effective_bounds(self) -> Tuple[float, float]:
        """Bounds used for solving; binary variables always live in [0, 1]."""
        if self.is_binary:
            return 0, 1
        return self.lb, self.ub

    def __repr__(self) -> str:
        return (
            f"Var(name={self.name!r}, lb={self.lb!r}, ub={self.ub!r}, "
            f"vtype={self.vtype!r}, value={self.value!r})"
        )


class VariableRegistry:
    """
    Ordered store of a model's variables.

    Variables are appended to an arena list and never removed (except by
    clear()), so a variable's index is stable and can be correlated with
    engine column positions.

    Usage:
        registry = VariableRegistry()
        x = registry.add(name="x", ub=4)
        registry.index_of("x")     # 0
        registry["x"] is x         # True
    """

    def __init__(self):
        """Initialize empty registry."""
        self._vars: List[Var] = []
        self._index: Dict[str, int] = {}
        self._counter = 0

    def _next_name(self) -> str:
        name = f"Var{self._counter}"
        self._counter += 1
        while name in self._index:
            name = f"Var{self._counter}"
            self._counter += 1
        return name

    def add(
        self,
        name: Optional[str] = None,
        lb: BoundLike = 0,
        ub: BoundLike = POS_INF,
        vtype: str = VarType.CONTINUOUS,
    ) -> Var:
        """
        Create and register a variable.

        Args:
            name: Variable name; auto-generated as Var<N> when None
            lb: Lower bound
            ub: Upper bound
            vtype: Variable kind

        Returns:
            The new Var

        Raises:
            DuplicateVariableName: if the name is taken
            InvalidVariableSpec: if the spec is invalid
        """
        # Validate before consuming an auto-name
        var = Var(name=name if name is not None else "_", lb=lb, ub=ub, vtype=vtype)
        if name is None:
            var.name = self._next_name()
        elif name in self._index:
            raise DuplicateVariableName(name)

        self._insert(var)
        return var

    def add_many(
        self,
        names: Iterable[str],
        lb: BoundLike = 0,
        ub: BoundLike = POS_INF,
        vtype: str = VarType.CONTINUOUS,
    ) -> Dict[str, Var]:
        """
        Create several variables sharing the same options.

        Either all variables are added or none is.

        Returns:
            Dict mapping each name to its Var, in the given order
        """
        names = list(names)
        seen = set()
        for name in names:
            if not isinstance(name, str):
                raise InvalidVariableSpec(
                    f"Variable name must be a string, got '{type(name).__name__}' for '{name}'."
                )
            if name in self._index or name in seen:
                raise DuplicateVariableName(name)
            seen.add(name)

        created = [Var(name=name, lb=lb, ub=ub, vtype=vtype) for name in names]
        for var in created:
            self._insert(var)
        return {var.name: var for var in created}

    def _insert(self, var: Var) -> None:
        self._index[var.name] = len(self._vars)
        self._vars.append(var)
        logger.debug(f"Registered variable {var.name} ({var.vtype}, [{var.lb}, {var.ub}])")

    def get(self, name: str, default: Optional[Var] = None) -> Optional[Var]:
        """Get variable by name."""
        idx = self._index.get(name)
        return self._vars[idx] if idx is not None else default

    def index_of(self, name: str) -> int:
        """Position of a variable in insertion order."""
        return self._index[name]

    def owns(self, var: object) -> bool:
        """Check that this exact Var object belongs to the registry."""
        return isinstance(var, Var) and self.get(var.name) is var

    def names(self) -> List[str]:
        return [var.name for var in self._vars]

    def items(self) -> Iterator[Tuple[str, Var]]:
        return ((var.name, var) for var in self._vars)

    def clear(self) -> None:
        """Remove all variables and reset auto-naming."""
        self._vars.clear()
        self._index.clear()
        self._counter = 0

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Var):
            return self.owns(item)
        return item in self._index

    def __getitem__(self, name: str) -> Var:
        return self._vars[self._index[name]]

    def __iter__(self) -> Iterator[Var]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"VariableRegistry({self.names()!r})"
