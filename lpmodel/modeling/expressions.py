"""
Canonical linear/quadratic expressions.

canonicalize() reduces a flexible list of items into an Expression:
- a bare number is added to the constant
- a bare Var counts as (1, var)
- (coefficient, var) is a linear term
- (coefficient, var1, var2) is a quadratic term

Terms on the same variable (or the same unordered pair of variables) are
merged, terms whose merged coefficient is exactly zero are dropped, and the
surviving terms keep the order in which they were first seen.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from ..errors import InvalidExpressionTerm
from .variables import Var, VariableRegistry, is_number


class LinearTerm(NamedTuple):
    coefficient: float
    var: Var


class QuadraticTerm(NamedTuple):
    """coefficient * var1 * var2, with var1.name <= var2.name."""
    coefficient: float
    var1: Var
    var2: Var


Term = Union[LinearTerm, QuadraticTerm]


def pair_key(name1: str, name2: str) -> Tuple[str, str]:
    """Order-independent key of a quadratic pair (lexicographic by name)."""
    return (name1, name2) if name1 <= name2 else (name2, name1)


@dataclass
class Expression:
    """
    Canonical expression: a constant followed by deduplicated non-zero terms.

    Iterating yields the constant first, then the terms, so an Expression can
    be fed back into canonicalize() unchanged.
    """
    constant: float = 0
    terms: List[Term] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.constant
        yield from self.terms

    def __len__(self) -> int:
        return 1 + len(self.terms)

    def to_list(self) -> List[Any]:
        """[constant, term, term, ...]"""
        return list(self)

    @property
    def linear_terms(self) -> List[LinearTerm]:
        return [t for t in self.terms if isinstance(t, LinearTerm)]

    @property
    def quadratic_terms(self) -> List[QuadraticTerm]:
        return [t for t in self.terms if isinstance(t, QuadraticTerm)]

    def is_quadratic(self) -> bool:
        return any(isinstance(t, QuadraticTerm) for t in self.terms)

    def variables(self) -> List[Var]:
        """Distinct variables referenced, in first-seen order."""
        seen: Dict[str, Var] = {}
        for term in self.terms:
            for var in term[1:]:
                seen.setdefault(var.name, var)
        return list(seen.values())

    def signature(self) -> Tuple[float, Tuple[Tuple[Any, ...], ...]]:
        """
        Name-based view of the expression.

        Two expressions built in different models (for example one built
        programmatically and one parsed from LP text) are equivalent when
        their signatures are equal.
        """
        return (
            self.constant,
            tuple((t[0],) + tuple(v.name for v in t[1:]) for t in self.terms),
        )

    def evaluate(self) -> Optional[float]:
        """Value at the current variable values, or None if any value is unset."""
        total = self.constant
        for term in self.terms:
            product = term[0]
            for var in term[1:]:
                if var.value is None:
                    return None
                product *= var.value
            total += product
        return total

    def __repr__(self) -> str:
        parts = [repr(self.constant)]
        for term in self.terms:
            names = " * ".join(v.name for v in term[1:])
            parts.append(f"{term[0]!r} {names}")
        return f"Expression({' + '.join(parts)})"


def _check_var(var: object, item: object, registry: Optional[VariableRegistry]) -> Var:
    if not isinstance(var, Var):
        raise InvalidExpressionTerm(
            f"Invalid term: {item!r}. {var!r} is not a variable.", item
        )
    if registry is not None and not registry.owns(var):
        raise InvalidExpressionTerm(
            f"Invalid term: {item!r}. Variable '{var.name}' does not belong to this model.",
            item,
        )
    return var


def canonicalize(items: Iterable[Any], registry: Optional[VariableRegistry] = None) -> Expression:
    """
    Reduce a list of items into a canonical Expression.

    Args:
        items: Numbers, Vars, (coef, var) and (coef, var1, var2) tuples or lists
        registry: When given, every variable must belong to it

    Returns:
        Expression with merged terms in first-seen order

    Raises:
        InvalidExpressionTerm: if an item has an unsupported shape, a
            non-numeric coefficient, or references an unknown variable

    Example:
        >>> canonicalize([[2, x], 3, [3, x], [1, y, x]])
        Expression(3 + 5 x + 1 x * y)
    """
    if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        raise InvalidExpressionTerm(
            f"Expression must be a sequence of terms, got {items!r}.", items
        )

    constant = 0
    # key -> [coefficient, var(s)]; dict order is first-seen order
    combined: Dict[Any, List[Any]] = {}

    for item in items:
        if is_number(item):
            constant += item
            continue

        if isinstance(item, Var):
            var = _check_var(item, item, registry)
            entry = combined.get(var.name)
            if entry is None:
                combined[var.name] = [1, var]
            else:
                entry[0] += 1
            continue

        if not isinstance(item, (tuple, list)) or len(item) not in (2, 3):
            raise InvalidExpressionTerm(
                f"Invalid expression item: {item!r}. Must be a number, a variable, "
                f"[coefficient, variable] or [coefficient, variable1, variable2].",
                item,
            )

        coeff = item[0]
        if not is_number(coeff):
            raise InvalidExpressionTerm(
                f"Invalid term: {item!r}. Coefficient must be a number.", item
            )

        if len(item) == 2:
            var = _check_var(item[1], item, registry)
            entry = combined.get(var.name)
            if entry is None:
                combined[var.name] = [coeff, var]
            else:
                entry[0] += coeff
        else:
            var1 = _check_var(item[1], item, registry)
            var2 = _check_var(item[2], item, registry)
            if var1.name > var2.name:
                var1, var2 = var2, var1
            key = pair_key(var1.name, var2.name)
            entry = combined.get(key)
            if entry is None:
                combined[key] = [coeff, var1, var2]
            else:
                entry[0] += coeff

    terms: List[Term] = []
    for entry in combined.values():
        if entry[0] == 0:
            continue
        if len(entry) == 2:
            terms.append(LinearTerm(entry[0], entry[1]))
        else:
            terms.append(QuadraticTerm(entry[0], entry[1], entry[2]))

    return Expression(constant=constant, terms=terms)


def negate(expression: Expression) -> List[Any]:
    """Items of -expression (constant and every coefficient sign-flipped)."""
    return [-expression.constant] + [
        (-term[0],) + tuple(term[1:]) for term in expression.terms
    ]
