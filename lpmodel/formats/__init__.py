"""
CPLEX LP text format: PEG grammar, parser and writer.
"""

from .parser import ParsedLP, build_model, parse_lp, read_lp
from .writer import format_expression, format_number, to_lp_format

__all__ = [
    "ParsedLP",
    "parse_lp",
    "build_model",
    "read_lp",
    "to_lp_format",
    "format_expression",
    "format_number",
]
