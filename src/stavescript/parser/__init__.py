"""Parser package: scan DSL source into a parse tree."""

from stavescript.errors import ParseError
from stavescript.parser.scanner import Scanner
from stavescript.parser.stave import lex_bar
from stavescript.parser.structure import parse

__all__ = [
    "parse",
    "lex_bar",
    "Scanner",
    "ParseError",
]
