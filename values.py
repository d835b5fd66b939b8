"""
Lispy Value Model
Tagged variants for every runtime entity, plus copy/equality/printing
Values own their children; storing a value always goes through copy_value
"""

from typing import Any, Callable, List, Optional, Tuple, Union
from dataclasses import dataclass, field


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

REST_MARKER = "&"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class Number:
  """64-bit signed integer"""
  value: int


@dataclass
class Error:
  """First-class error value"""
  message: str


@dataclass
class Symbol:
  name: str


@dataclass
class String:
  """String literal, holding the unescaped text"""
  text: str


@dataclass(eq=False)
class Builtin:
  """Native operation, compared by identity of `func`"""
  name: str
  func: Callable[..., Any]


@dataclass(frozen=True)
class Formals:
  """Parameter specification of a closure

  Required names are bound in order; `rest` (if any) collects
  the surplus arguments into a Q-Expression.
  """
  required: Tuple[str, ...] = ()
  rest: Optional[str] = None


@dataclass(eq=False)
class Closure:
  """User-defined function

  `env` is private to the closure and holds arguments bound by partial
  application. Its parent is the environment the lambda was built in.
  """
  formals: Formals
  body: 'QExpr'
  env: Any


@dataclass
class SExpr:
  """Executable list, evaluated eagerly"""
  cells: List[Any] = field(default_factory=list)


@dataclass
class QExpr:
  """Literal list, never evaluated until converted"""
  cells: List[Any] = field(default_factory=list)


Value = Union[Number, Error, Symbol, String, Builtin, Closure, SExpr, QExpr]


# ============================================================================
# HELPERS
# ============================================================================

def wrap_int64(n: int) -> int:
  """Wrap an arbitrary Python int onto 64-bit two's complement"""
  return ((n - INT64_MIN) % (2 ** 64)) + INT64_MIN


def is_function(v: Value) -> bool:
  return isinstance(v, (Builtin, Closure))


_VARIANT_NAMES = {
    Number: "Number",
    Error: "Error",
    Symbol: "Symbol",
    String: "String",
    Builtin: "Function",
    Closure: "Function",
    SExpr: "S-Expression",
    QExpr: "Q-Expression",
}


def variant_name(cls: type) -> str:
  """Human readable name of a value class, used in error messages"""
  return _VARIANT_NAMES.get(cls, "Unknown")


def type_name(v: Value) -> str:
  return variant_name(type(v))


def formals_from_qexpr(params: QExpr) -> Optional[Formals]:
  """Build Formals from a Q-Expression of symbols

  Returns None when `&` is not followed by exactly one symbol.
  Callers must have checked that every cell is a Symbol.
  """
  names = [cell.name for cell in params.cells]
  if REST_MARKER not in names:
    return Formals(tuple(names), None)

  idx = names.index(REST_MARKER)
  tail = names[idx + 1:]
  if len(tail) != 1 or tail[0] == REST_MARKER:
    return None
  return Formals(tuple(names[:idx]), tail[0])


def formals_to_qexpr(formals: Formals) -> QExpr:
  """Render Formals back into the `{x y & rest}` list form"""
  cells = [Symbol(name) for name in formals.required]
  if formals.rest is not None:
    cells.append(Symbol(REST_MARKER))
    cells.append(Symbol(formals.rest))
  return QExpr(cells)


# ============================================================================
# COPY
# ============================================================================

def copy_value(v: Value) -> Value:
  """Deep copy a value

  Closures get a copy of their private bindings; the parent link of the
  copied environment still points at the original definition site.
  """
  if isinstance(v, Number):
    return Number(v.value)
  elif isinstance(v, Error):
    return Error(v.message)
  elif isinstance(v, Symbol):
    return Symbol(v.name)
  elif isinstance(v, String):
    return String(v.text)
  elif isinstance(v, Builtin):
    return v
  elif isinstance(v, Closure):
    from environment import copy_env
    return Closure(v.formals, copy_value(v.body), copy_env(v.env))
  elif isinstance(v, SExpr):
    return SExpr([copy_value(cell) for cell in v.cells])
  elif isinstance(v, QExpr):
    return QExpr([copy_value(cell) for cell in v.cells])
  raise TypeError(f"Cannot copy non-value {v!r}")


# ============================================================================
# EQUALITY
# ============================================================================

def values_equal(x: Value, y: Value) -> bool:
  """Structural equality between two values"""
  if isinstance(x, Builtin) or isinstance(y, Builtin):
    return isinstance(x, Builtin) and isinstance(y, Builtin) and x.func is y.func
  if type(x) is not type(y):
    return False

  if isinstance(x, Number):
    return x.value == y.value
  elif isinstance(x, Error):
    return x.message == y.message
  elif isinstance(x, Symbol):
    return x.name == y.name
  elif isinstance(x, String):
    return x.text == y.text
  elif isinstance(x, Closure):
    # private environment is deliberately left out
    return x.formals == y.formals and values_equal(x.body, y.body)
  elif isinstance(x, (SExpr, QExpr)):
    if len(x.cells) != len(y.cells):
      return False
    return all(values_equal(a, b) for a, b in zip(x.cells, y.cells))
  return False


# ============================================================================
# PRINTING
# ============================================================================

_ESCAPES = {
    '\n': '\\n', '\t': '\\t', '\r': '\\r', '\\': '\\\\', '"': '\\"',
    '\0': '\\0', '\a': '\\a', '\b': '\\b', '\f': '\\f', '\v': '\\v'
}
_UNESCAPES = {escaped[1]: raw for raw, escaped in _ESCAPES.items()}


def escape_string(s: str) -> str:
  return ''.join(_ESCAPES.get(ch, ch) for ch in s)


def unescape_string(s: str) -> str:
  """Process backslash escape sequences; unknown escapes are kept as-is"""
  result = []
  i = 0
  while i < len(s):
    if s[i] == '\\' and i + 1 < len(s) and s[i + 1] in _UNESCAPES:
      result.append(_UNESCAPES[s[i + 1]])
      i += 2
    else:
      result.append(s[i])
      i += 1
  return ''.join(result)


def _show_cells(cells: List[Value], open_: str, close: str) -> str:
  return open_ + " ".join(show_value(cell) for cell in cells) + close


def show_value(v: Value) -> str:
  """Render a value the way the REPL prints it"""
  if isinstance(v, Number):
    return str(v.value)
  elif isinstance(v, Error):
    return f"Error: {v.message}"
  elif isinstance(v, Symbol):
    return v.name
  elif isinstance(v, String):
    return f'"{escape_string(v.text)}"'
  elif isinstance(v, Builtin):
    return "<builtin>"
  elif isinstance(v, Closure):
    params = formals_to_qexpr(v.formals)
    return f"(\\ {show_value(params)} {show_value(v.body)})"
  elif isinstance(v, SExpr):
    return _show_cells(v.cells, "(", ")")
  elif isinstance(v, QExpr):
    return _show_cells(v.cells, "{", "}")
  return f"<{type_name(v)}>"
