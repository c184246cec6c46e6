"""
LP text parser.

Two stages:
1. parse_lp(text) runs the PEG grammar and a NodeVisitor that produces a
   ParsedLP tree of plain dataclasses.
2. build_model(parsed, model) replays the tree through the same Model API a
   caller would use, so parsed and programmatic models canonicalize the
   same way:
     - variables named in Bounds (bounds merged per variable)
     - Binary / General names (created, or kind upgraded)
     - remaining names from the objective and constraints (default spec)
     - the objective
     - the constraints, in source order
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from parsimonious.exceptions import ParseError as GrammarParseError
from parsimonious.nodes import NodeVisitor

from ..errors import LPModelError, ParseError
from ..modeling.variables import NEG_INF, POS_INF, VarType
from .grammar import LP_GRAMMAR

logger = logging.getLogger(__name__)


# =============================================================================
# Parse tree
# =============================================================================

@dataclass
class ParsedTerm:
    """coefficient * variable (* variable2); variable is None for a constant."""
    coefficient: float
    variable: Optional[str] = None
    variable2: Optional[str] = None

    def scaled(self, factor: float) -> "ParsedTerm":
        return ParsedTerm(self.coefficient * factor, self.variable, self.variable2)

    def names(self) -> List[str]:
        return [n for n in (self.variable, self.variable2) if n is not None]


@dataclass
class ParsedObjective:
    sense: str
    name: Optional[str] = None
    terms: List[ParsedTerm] = field(default_factory=list)


@dataclass
class ParsedConstraint:
    sense: str
    rhs: float
    name: Optional[str] = None
    terms: List[ParsedTerm] = field(default_factory=list)


@dataclass
class ParsedBound:
    """One Bounds entry; None means the entry leaves that side unchanged."""
    variable: str
    lower: Optional[float] = None
    upper: Optional[float] = None


@dataclass
class ParsedLP:
    objective: ParsedObjective
    constraints: List[ParsedConstraint] = field(default_factory=list)
    bounds: List[ParsedBound] = field(default_factory=list)
    general: List[str] = field(default_factory=list)
    binary: List[str] = field(default_factory=list)


# =============================================================================
# Visitor
# =============================================================================

_SENSES = {"<": "<=", "=<": "<=", "<=": "<=", ">": ">=", "=>": ">=", ">=": ">=", "=": "="}


def _optional(value: Any) -> Any:
    """Result of an optional (?) term: the visited child, or None."""
    if isinstance(value, list):
        return value[0] if value else None
    return None


def _many(value: Any) -> List[Any]:
    """Result of a repeated (*) term: the visited children, possibly empty."""
    return value if isinstance(value, list) else []


class LPTreeBuilder(NodeVisitor):
    """Turn the parsimonious parse tree into a ParsedLP."""

    grammar = LP_GRAMMAR
    unwrapped_exceptions = (LPModelError,)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit__(self, node, visited_children):
        return None

    # ── file structure ────────────────────────────────────────────

    def visit_lp_file(self, node, visited_children):
        _, objective, constraints, sections, _end, _ = visited_children
        parsed = ParsedLP(objective=objective, constraints=_optional(constraints) or [])
        for kind, entries in _many(sections):
            getattr(parsed, kind).extend(entries)
        return parsed

    def visit_objective_section(self, node, visited_children):
        sense, _, label, expression = visited_children
        return ParsedObjective(
            sense=sense, name=_optional(label), terms=_optional(expression) or []
        )

    def visit_objective_sense(self, node, visited_children):
        return "MAXIMIZE" if node.text.lower().startswith("max") else "MINIMIZE"

    def visit_constraints_section(self, node, visited_children):
        _kw, _, constraints = visited_children
        return _many(constraints)

    def visit_constraint(self, node, visited_children):
        label, expression, sense, _, rhs, _ = visited_children
        return ParsedConstraint(
            sense=sense, rhs=rhs, name=_optional(label), terms=_optional(expression) or []
        )

    def visit_section(self, node, visited_children):
        return visited_children[0]

    # ── expressions ───────────────────────────────────────────────

    def visit_label(self, node, visited_children):
        return visited_children[0]

    def visit_expression(self, node, visited_children):
        first, rest = visited_children
        terms = list(first)
        for sign, _, term in _many(rest):
            terms.extend(t.scaled(sign) for t in term)
        return terms

    def visit_term(self, node, visited_children):
        sign, _, body, _ = visited_children
        sign = _optional(sign) or 1.0
        return [t.scaled(sign) for t in body]

    def visit_term_body(self, node, visited_children):
        body = visited_children[0]
        if isinstance(body, list):
            return body
        if isinstance(body, str):
            return [ParsedTerm(1.0, body)]
        return [ParsedTerm(body)]

    def visit_coef_variable(self, node, visited_children):
        coefficient, _, name = visited_children
        return [ParsedTerm(coefficient, name)]

    def visit_quadratic_block(self, node, visited_children):
        _open, _, first, rest, _close, _, half = visited_children
        terms = [first] + [term.scaled(sign) for sign, _, term in _many(rest)]
        divisor = _optional(half)
        if divisor:
            terms = [t.scaled(1.0 / divisor) for t in terms]
        return terms

    def visit_quad_term(self, node, visited_children):
        sign, _, coefficient, name, _, other = visited_children
        sign = _optional(sign) or 1.0
        coefficient = _optional(coefficient)
        coefficient = 1.0 if coefficient is None else coefficient
        return ParsedTerm(sign * coefficient, name, other or name)

    def visit_quad_coef(self, node, visited_children):
        return visited_children[0]

    def visit_quad_op(self, node, visited_children):
        return visited_children[0]

    def visit_product(self, node, visited_children):
        return visited_children[2]

    def visit_square(self, node, visited_children):
        return None

    def visit_half(self, node, visited_children):
        return visited_children[2]

    def visit_sense(self, node, visited_children):
        return _SENSES[node.text]

    # ── bounds ────────────────────────────────────────────────────

    def visit_bounds_section(self, node, visited_children):
        _kw, _, bounds = visited_children
        return "bounds", _many(bounds)

    def visit_bound(self, node, visited_children):
        return visited_children[0]

    def visit_double_bound(self, node, visited_children):
        lower, _, _le, _, name, _, _le2, _, upper, _ = visited_children
        return ParsedBound(name, lower=lower, upper=upper)

    def visit_lower_bound(self, node, visited_children):
        lower, _, _le, _, name, _ = visited_children
        return ParsedBound(name, lower=lower)

    def visit_free_bound(self, node, visited_children):
        return ParsedBound(visited_children[0], lower=NEG_INF, upper=POS_INF)

    def visit_upper_bound(self, node, visited_children):
        name, _, _le, _, upper, _ = visited_children
        return ParsedBound(name, upper=upper)

    def visit_ge_bound(self, node, visited_children):
        name, _, _ge, _, lower, _ = visited_children
        return ParsedBound(name, lower=lower)

    def visit_fixed_bound(self, node, visited_children):
        name, _, _eq, _, value, _ = visited_children
        return ParsedBound(name, lower=value, upper=value)

    def visit_bound_value(self, node, visited_children):
        return visited_children[0]

    def visit_infinity(self, node, visited_children):
        return NEG_INF if node.text.lstrip().startswith("-") else POS_INF

    # ── integrality ───────────────────────────────────────────────

    def visit_generals_section(self, node, visited_children):
        return "general", visited_children[2]

    def visit_binaries_section(self, node, visited_children):
        return "binary", visited_children[2]

    def visit_name_list(self, node, visited_children):
        return [name for name, _ in _many(visited_children)]

    # ── tokens ────────────────────────────────────────────────────

    def visit_variable_name(self, node, visited_children):
        return node.text

    def visit_signed_number(self, node, visited_children):
        sign, _, number = visited_children
        return (_optional(sign) or 1.0) * number

    def visit_number(self, node, visited_children):
        return float(node.text)

    def visit_sign(self, node, visited_children):
        return -1.0 if node.text == "-" else 1.0


# =============================================================================
# Entry points
# =============================================================================

def parse_lp(text: str) -> ParsedLP:
    """
    Parse LP text into a ParsedLP tree.

    Raises:
        ParseError: with position, line and column of the mismatch
    """
    try:
        tree = LP_GRAMMAR.parse(text)
    except GrammarParseError as exc:
        line, column = exc.line(), exc.column()
        snippet = text[exc.pos:exc.pos + 20].split("\n")[0]
        raise ParseError(
            f"Invalid LP format at line {line}, column {column}: "
            f"unexpected {snippet!r}",
            position=exc.pos,
            line=line,
            column=column,
        ) from exc
    return LPTreeBuilder().visit(tree)


def _merge_bounds(bounds: List[ParsedBound]) -> Dict[str, Dict[str, float]]:
    """Collapse several Bounds entries per variable, later entries winning."""
    merged: Dict[str, Dict[str, float]] = {}
    for bound in bounds:
        spec = merged.setdefault(bound.variable, {})
        if bound.lower is not None:
            spec["lb"] = bound.lower
        if bound.upper is not None:
            spec["ub"] = bound.upper
    return merged


def _items(terms: List[ParsedTerm], model) -> List[Any]:
    items: List[Any] = []
    for term in terms:
        if term.variable is None:
            items.append(term.coefficient)
        elif term.variable2 is None:
            items.append((term.coefficient, model.variables[term.variable]))
        else:
            items.append((
                term.coefficient,
                model.variables[term.variable],
                model.variables[term.variable2],
            ))
    return items


def build_model(parsed: ParsedLP, model):
    """
    Populate an empty model from a ParsedLP tree.

    Args:
        parsed: Result of parse_lp()
        model: Empty Model to fill

    Returns:
        The same model
    """
    # 1. Variables declared in Bounds
    for name, spec in _merge_bounds(parsed.bounds).items():
        model.add_var(name=name, **spec)

    # 2. Integrality sections
    for names, vtype in ((parsed.binary, VarType.BINARY), (parsed.general, VarType.INTEGER)):
        for name in names:
            var = model.variables.get(name)
            if var is None:
                model.add_var(name=name, vtype=vtype)
            else:
                var.vtype = vtype

    # 3. Undeclared variables, in order of appearance
    for terms in [parsed.objective.terms] + [c.terms for c in parsed.constraints]:
        for term in terms:
            for name in term.names():
                if name not in model.variables:
                    model.add_var(name=name)

    # 4. Objective
    model.set_objective(_items(parsed.objective.terms, model), parsed.objective.sense)

    # 5. Constraints, in source order
    for constraint in parsed.constraints:
        model.add_constr(_items(constraint.terms, model), constraint.sense, constraint.rhs)

    logger.debug(
        f"Built model from LP text: {len(model.variables)} variables, "
        f"{len(model.constraints)} constraints"
    )
    return model


def read_lp(text: str):
    """Parse LP text into a new Model."""
    from ..modeling.model import Model
    return Model.from_lp_format(text)
