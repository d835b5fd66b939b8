"""
Parse error reporting for the Lispy front-end
Turns pyparsing exceptions into readable errors with context and hints
"""

from typing import List, Optional, Dict
from pyparsing import ParseBaseException


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict, filename: str = "<input>") -> str:
    """Format parse error as string"""
    error_msg = f"{filename}:{error['line']}:{error['column']}: {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg.rstrip("\n")


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract what the grammar was looking for from the exception message"""
    msg = exc.msg or ""
    if msg.startswith("Expected "):
        return [msg[len("Expected "):]]
    return []


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        if line_num == len(lines):
            return "end of input"
        return "end of line"
    return "end of input"


def count_unbalanced(source_text: str, open_char: str, close_char: str) -> int:
    """Net count of unmatched openers, ignoring strings and comments"""
    depth = 0
    in_string = False
    in_comment = False
    escaped = False
    for ch in source_text:
        if in_comment:
            in_comment = ch != '\n'
        elif in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == ';':
            in_comment = True
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
    return depth


def generate_suggestions(source_text: str, got: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    parens = count_unbalanced(source_text, '(', ')')
    braces = count_unbalanced(source_text, '{', '}')
    if parens > 0:
        suggestions.append(f"{parens} unclosed '(' - add the matching ')'")
    elif parens < 0:
        suggestions.append(f"{-parens} unexpected ')' - remove it or add a matching '('")
    if braces > 0:
        suggestions.append(f"{braces} unclosed '{{' - add the matching '}}'")
    elif braces < 0:
        suggestions.append(f"{-braces} unexpected '}}' - remove it or add a matching '{{'")

    if (source_text.count('"') - source_text.count('\\"')) % 2 == 1:
        suggestions.append("String literals must be closed with a double quote")

    if any(ch in got for ch in "[],"):
        suggestions.append("Lispy uses () for expressions and {} for lists, without commas")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_text: str) -> Dict:
    """Convert pyparsing exception to enhanced Lispy error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(source_text, got)

    return make_parse_error(
        message=exc.msg or str(exc),
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# EXCEPTION CLASS
# ============================================================================

class LispyParseError(Exception):
    """Syntax error raised by the parser front-end"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    @classmethod
    def from_parse_exception(cls, exc: ParseBaseException, source_text: str,
                             filename: str = "<input>") -> 'LispyParseError':
        error_dict = enhance_parse_exception_dict(exc, source_text)
        return cls(filename=filename, **error_dict)

    def summary(self) -> str:
        """Single-line form, used when the error is wrapped into an Error value"""
        return f"{self.filename}:{self.line}:{self.column}: {self.message}"

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict, self.filename)
