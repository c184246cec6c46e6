"""
PEG grammar for the CPLEX LP text format (parsimonious).

    lp_file = objective [constraints] (bounds | generals | binaries)* End

Keywords are case-insensitive. Whitespace and backslash line comments may
appear between any two tokens. Every rule consumes its own trailing
whitespace, so rules can be chained without explicit separators.
"""

import re

from parsimonious.grammar import Grammar


# Characters allowed in a variable or row name (CPLEX LP, minus quotes)
NAME_START = r"A-Za-z_!#$%&()/,;?@`{}|~"
NAME_CHAR = r"A-Za-z0-9_!#$%&()/,.;?@`{}|~"

_NAME_PATTERN = re.compile(f"[{NAME_START}][{NAME_CHAR}]*")
_KEYWORD_PATTERN = re.compile(
    r"(st|s\.t\.|bounds?|gen(erals?)?|bin(ar(y|ies))?|end|free|inf(inity)?)",
    re.IGNORECASE,
)


def is_lp_safe_name(name: str) -> bool:
    """Whether a name can be written to and read back from LP text."""
    return bool(_NAME_PATTERN.fullmatch(name)) and not _KEYWORD_PATTERN.fullmatch(name)


LP_GRAMMAR_TEXT = r'''
    # ─────────────────────────────────────────────────────────────
    # File structure
    # ─────────────────────────────────────────────────────────────

    lp_file             = _ objective_section constraints_section? section* end_kw _

    objective_section   = objective_sense _ label? expression?
    objective_sense     = ~r'(maximi[sz]e|maximum|max|minimi[sz]e|minimum|min)(?![<NAME_CHAR>])'i

    constraints_section = subject_to _ constraint*
    subject_to          = ~r'(subject\s+to|such\s+that|s\.t\.|st)(?![<NAME_CHAR>])'i
    constraint          = label? expression? sense _ signed_number _

    section             = bounds_section / generals_section / binaries_section

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    label               = variable_name _ ":" _
    expression          = term (sign _ term)*
    term                = sign? _ term_body _
    term_body           = quadratic_block / coef_variable / number / variable_name
    coef_variable       = number _ variable_name

    quadratic_block     = "[" _ quad_term (sign _ quad_term)* "]" _ half?
    quad_term           = sign? _ quad_coef? variable_name _ quad_op
    quad_coef           = number _
    quad_op             = product / square
    product             = "*" _ variable_name _
    square              = "^" _ "2" _
    half                = "/" _ number _

    sense               = "<=" / "=<" / ">=" / "=>" / "<" / ">" / "="

    # ─────────────────────────────────────────────────────────────
    # Bounds
    # ─────────────────────────────────────────────────────────────

    bounds_section      = bounds_kw _ bound*
    bound               = double_bound / lower_bound / free_bound / upper_bound
                        / ge_bound / fixed_bound
    double_bound        = bound_value _ le _ variable_name _ le _ bound_value _
    lower_bound         = bound_value _ le _ variable_name _
    free_bound          = variable_name _ free_kw _
    upper_bound         = variable_name _ le _ bound_value _
    ge_bound            = variable_name _ ge _ bound_value _
    fixed_bound         = variable_name _ "=" _ bound_value _
    le                  = "<=" / "=<" / "<"
    ge                  = ">=" / "=>" / ">"
    bound_value         = infinity / signed_number
    infinity            = ~r'([+-])?\s*inf(inity)?(?![<NAME_CHAR>])'i

    # ─────────────────────────────────────────────────────────────
    # Integrality sections
    # ─────────────────────────────────────────────────────────────

    generals_section    = generals_kw _ name_list
    binaries_section    = binaries_kw _ name_list
    name_list           = (variable_name _)*

    # ─────────────────────────────────────────────────────────────
    # Tokens
    # ─────────────────────────────────────────────────────────────

    bounds_kw           = ~r'bounds?(?![<NAME_CHAR>])'i
    generals_kw         = ~r'gen(erals?)?(?![<NAME_CHAR>])'i
    binaries_kw         = ~r'bin(ar(y|ies))?(?![<NAME_CHAR>])'i
    end_kw              = ~r'end(?![<NAME_CHAR>])'i
    free_kw             = ~r'free(?![<NAME_CHAR>])'i
    reserved            = subject_to / bounds_kw / generals_kw / binaries_kw / end_kw

    variable_name       = !reserved ~r'[<NAME_START>][<NAME_CHAR>]*'
    signed_number       = sign? _ number
    number              = ~r'(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?'
    sign                = "+" / "-"

    _                   = meaninglessness*
    meaninglessness     = ~r'\s+' / comment
    comment             = ~r'\\[^\n]*'
'''.replace("<NAME_START>", NAME_START).replace("<NAME_CHAR>", NAME_CHAR)


LP_GRAMMAR = Grammar(LP_GRAMMAR_TEXT)
