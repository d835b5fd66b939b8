"""
Lispy Parser
pyparsing grammar producing a generic CST (tag, literal text, ordered children)
"""

from typing import List, Optional
from dataclasses import dataclass, field

from pyparsing import (
    Forward, Literal, Regex, ZeroOrMore, StringEnd, ParserElement,
    ParseBaseException, lineno, col
)

from error_handling import LispyParseError

# Enable packrat parsing for performance
ParserElement.enable_packrat()


ROOT_TAG = ">"


@dataclass(frozen=True)
class SourceSpan:
    """Source location information for preserving CST"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class CSTNode:
    """Concrete Syntax Tree node: classification tag, literal text, children"""
    type: str
    value: Optional[str]
    children: List['CSTNode'] = field(default_factory=list)
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.type}([{children_str}])"
        return f"{self.type}({self.value})"


class LispyGrammar:
    r"""Lispy grammar definition using pyparsing

    number  : /-?[0-9]+/
    symbol  : /[a-zA-Z0-9_+\-*\/\\=<>!&.]+/
    string  : /"(\\.|[^"\\])*"/
    comment : /;[^\r\n]*/
    sexpr   : '(' <expr>* ')'
    qexpr   : '{' <expr>* '}'
    expr    : <number> | <symbol> | <string> | <comment> | <sexpr> | <qexpr>
    program : <expr>* end-of-input
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.filename = "<input>"
        self._setup_grammar()

    def _span(self, s: str, start: int, end: int) -> SourceSpan:
        return SourceSpan(
            self.filename, lineno(start, s), col(start, s),
            lineno(end, s), col(end, s), s[start:end]
        )

    def _leaf(self, tag: str):
        """Parse action building a childless node from the matched text"""
        def make_leaf(s, loc, toks):
            text = toks[0]
            return CSTNode(tag, text, [], self._span(s, loc, loc + len(text)))
        return make_leaf

    def _branch(self, tag: str):
        """Parse action wrapping all matched nodes as children of a new node"""
        def make_branch(s, loc, toks):
            children = list(toks)
            if children:
                first, last = children[0].span, children[-1].span
                span = SourceSpan(self.filename, first.start_line, first.start_col,
                                  last.end_line, last.end_col)
            else:
                span = SourceSpan(self.filename, lineno(loc, s), col(loc, s),
                                  lineno(loc, s), col(loc, s))
            return CSTNode(tag, None, children, span)
        return make_branch

    def _setup_grammar(self):
        expression = Forward()

        number = Regex(r"-?[0-9]+").set_parse_action(self._leaf("number"))
        symbol = Regex(r"[a-zA-Z0-9_+\-*/\\=<>!&.]+").set_parse_action(self._leaf("symbol"))
        string = Regex(r'"(?:\\.|[^"\\])*"').set_parse_action(self._leaf("string"))
        comment = Regex(r";[^\r\n]*").set_parse_action(self._leaf("comment"))

        def punct(char):
            return Literal(char).set_parse_action(self._leaf("char"))

        sexpr = (punct("(") + ZeroOrMore(expression) + punct(")")).set_parse_action(self._branch("sexpr"))
        qexpr = (punct("{") + ZeroOrMore(expression) + punct("}")).set_parse_action(self._branch("qexpr"))

        # number before symbol, so "-5" is a number and "-" a symbol
        expression <<= number | symbol | string | comment | sexpr | qexpr

        program = (ZeroOrMore(expression) + StringEnd()).set_parse_action(self._branch(ROOT_TAG))
        # tabs inside string literals are data, and error columns index the raw text
        program.parse_with_tabs()

        self.number = number
        self.symbol = symbol
        self.string = string
        self.comment = comment
        self.sexpr = sexpr
        self.qexpr = qexpr
        self.expression = expression
        self.program = program

    def parse_program(self, text: str, filename: str = "<input>") -> CSTNode:
        """Parse a complete source text into a root node"""
        self.filename = filename
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise LispyParseError.from_parse_exception(e, text, filename) from e
        return result[0]


class LispyParser:
    """Main Lispy parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = LispyGrammar(debug)

    def parse_file(self, filepath: str) -> CSTNode:
        """Parse a Lispy source file

        File system errors (OSError, UnicodeDecodeError) propagate to the caller.
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> CSTNode:
        """Parse Lispy source code from string"""
        root = self.grammar.parse_program(text, filename)
        if self.debug:
            print(f"Parsed {filename}:")
            print(pretty_print_cst(root))
        return root


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> LispyParser:
    """Create a Lispy parser"""
    return LispyParser(debug=debug)


def create_debug_parser() -> LispyParser:
    """Create a Lispy parser with debug enabled"""
    return LispyParser(debug=True)


def pretty_print_cst(cst: CSTNode, indent: int = 0) -> str:
    """Pretty print a CST node for debugging"""
    result = "  " * indent + f"{cst.type}"
    if cst.value is not None:
        result += f"({repr(cst.value)})"
    result += "\n"

    for child in cst.children:
        result += pretty_print_cst(child, indent + 1)

    return result
