"""
Lispy Standard Library
Native operations installed into the root environment
Every builtin takes (env, args, context) and returns a Value; failures are Error values
"""

from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional
import operator

from values import (
  Value, Number, Error, Symbol, String, Builtin, Closure, SExpr, QExpr,
  wrap_int64, values_equal, formals_from_qexpr, show_value
)
from environment import (
  Environment, make_runtime_env, env_bind_local, env_bind_global
)
from utilities import (
  arity_error,
  type_mismatch_error,
  non_symbol_error,
  division_by_zero_error,
  malformed_variadic_error,
  validate_arg_count,
  validate_arg_type,
  validate_function_args,
  validate_non_empty
)


# ============================================================================
# ARITHMETIC
# ============================================================================

def _truncating_div(x: int, y: int) -> int:
  """Integer division rounding toward zero"""
  q = abs(x) // abs(y)
  return q if (x >= 0) == (y >= 0) else -q


def arithmetic_builtin(op_name: str, op: Callable[[int, int], int]) -> Callable:
  """
  Factory for variadic arithmetic builtins

  Args:
    op_name: Name for error messages
    op: Binary integer operation folded left over the arguments

  Returns:
    Builtin function; unary `-` negates its single operand
  """
  def arithmetic(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
    for position, arg in enumerate(args):
      if not isinstance(arg, Number):
        return type_mismatch_error(op_name, position, "Number", arg)
    if not args:
      return arity_error(op_name, 1, 0)

    x = args[0].value
    if op_name == "-" and len(args) == 1:
      return Number(wrap_int64(-x))

    for y in args[1:]:
      if op_name == "/" and y.value == 0:
        return division_by_zero_error()
      x = wrap_int64(op(x, y.value))
    return Number(x)

  arithmetic.__name__ = f"lispy_{op.__name__.strip('_')}"
  return arithmetic


lispy_add = arithmetic_builtin("+", operator.add)
lispy_sub = arithmetic_builtin("-", operator.sub)
lispy_mul = arithmetic_builtin("*", operator.mul)
lispy_div = arithmetic_builtin("/", _truncating_div)


# ============================================================================
# COMPARISON
# ============================================================================

def comparison_builtin(op_name: str, op: Callable[[int, int], bool]) -> Callable:
  """Factory for binary numeric comparisons returning 1 or 0"""
  def comparison(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
    error = validate_function_args(op_name, args, [Number, Number])
    if error:
      return error
    return Number(1 if op(args[0].value, args[1].value) else 0)

  comparison.__name__ = f"lispy_{op.__name__}"
  return comparison


lispy_gt = comparison_builtin(">", operator.gt)
lispy_lt = comparison_builtin("<", operator.lt)
lispy_ge = comparison_builtin(">=", operator.ge)
lispy_le = comparison_builtin("<=", operator.le)


def lispy_eq(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Structural equality of any two values"""
  error = validate_arg_count("==", args, 2)
  if error:
    return error
  return Number(1 if values_equal(args[0], args[1]) else 0)


def lispy_ne(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  error = validate_arg_count("!=", args, 2)
  if error:
    return error
  return Number(0 if values_equal(args[0], args[1]) else 1)


def lispy_if(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Evaluate exactly one of two Q-Expression branches; nonzero is true"""
  from interpreter import eval_value

  error = validate_function_args("if", args, [Number, QExpr, QExpr])
  if error:
    return error
  branch = args[1] if args[0].value != 0 else args[2]
  return eval_value(env, SExpr(list(branch.cells)), context)


# ============================================================================
# LIST FUNCTIONS
# ============================================================================

def lispy_list(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Turn the arguments into a Q-Expression"""
  return QExpr(list(args))


def lispy_head(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Keep only the first element of a list"""
  error = validate_function_args("head", args, [QExpr]) or validate_non_empty("head", args, 0)
  if error:
    return error
  return QExpr(args[0].cells[:1])


def lispy_tail(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Drop the first element of a list"""
  error = validate_function_args("tail", args, [QExpr]) or validate_non_empty("tail", args, 0)
  if error:
    return error
  return QExpr(args[0].cells[1:])


def lispy_init(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Drop the last element of a list"""
  error = validate_function_args("init", args, [QExpr]) or validate_non_empty("init", args, 0)
  if error:
    return error
  return QExpr(args[0].cells[:-1])


def lispy_len(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  error = validate_function_args("len", args, [QExpr])
  if error:
    return error
  return Number(len(args[0].cells))


def lispy_join(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Concatenate any number of lists"""
  cells = []
  for position in range(len(args)):
    error = validate_arg_type("join", args, position, QExpr)
    if error:
      return error
    cells.extend(args[position].cells)
  return QExpr(cells)


def lispy_cons(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Prepend a value to a list"""
  error = validate_arg_count("cons", args, 2) or validate_arg_type("cons", args, 1, QExpr)
  if error:
    return error
  return QExpr([args[0]] + args[1].cells)


def lispy_eval(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Evaluate a Q-Expression as an S-Expression"""
  from interpreter import eval_value

  error = validate_function_args("eval", args, [QExpr])
  if error:
    return error
  return eval_value(env, SExpr(list(args[0].cells)), context)


# ============================================================================
# BINDING AND FUNCTIONS
# ============================================================================

def _define(func_name: str, bind: Callable[[Environment, str, Value], None]) -> Callable:
  """Factory for `def` and `=`: bind N symbols to the N values that follow"""
  def define(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
    if not args:
      return arity_error(func_name, 1, 0)
    error = validate_arg_type(func_name, args, 0, QExpr)
    if error:
      return error

    symbols = args[0].cells
    for symbol in symbols:
      if not isinstance(symbol, Symbol):
        return non_symbol_error(func_name, symbol)

    if len(symbols) != len(args) - 1:
      return arity_error(func_name, len(symbols) + 1, len(args))

    for symbol, value in zip(symbols, args[1:]):
      bind(env, symbol.name, value)
    return SExpr()

  return define


lispy_def = _define("def", env_bind_global)
lispy_put = _define("=", env_bind_local)


def lispy_lambda(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Build a closure from a formals list and a body, capturing `env`"""
  error = validate_function_args("\\", args, [QExpr, QExpr])
  if error:
    return error

  for cell in args[0].cells:
    if not isinstance(cell, Symbol):
      return non_symbol_error("\\", cell)

  formals = formals_from_qexpr(args[0])
  if formals is None:
    return malformed_variadic_error()
  return Closure(formals, args[1], make_runtime_env(parent=env))


# ============================================================================
# STRINGS, ERRORS AND I/O
# ============================================================================

def lispy_error(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Construct an error value from a string"""
  error = validate_function_args("error", args, [String])
  if error:
    return error
  return Error(args[0].text)


def lispy_print(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Print the arguments separated by spaces, followed by a newline"""
  print(" ".join(show_value(arg) for arg in args))
  return SExpr()


def lispy_load(env: Environment, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Load and evaluate a source file"""
  from interpreter import load_file

  error = validate_function_args("load", args, [String])
  if error:
    return error
  return load_file(env, args[0].text, context)


# ============================================================================
# REGISTRY
# ============================================================================

BUILTINS: Mapping[str, Callable] = MappingProxyType({
    # list functions
    "list": lispy_list,
    "head": lispy_head,
    "tail": lispy_tail,
    "init": lispy_init,
    "len": lispy_len,
    "eval": lispy_eval,
    "join": lispy_join,
    "cons": lispy_cons,
    # arithmetic
    "+": lispy_add,
    "-": lispy_sub,
    "*": lispy_mul,
    "/": lispy_div,
    # binding and functions
    "def": lispy_def,
    "=": lispy_put,
    "put": lispy_put,
    "\\": lispy_lambda,
    "fun": lispy_lambda,
    # comparison
    "if": lispy_if,
    ">": lispy_gt,
    "<": lispy_lt,
    ">=": lispy_ge,
    "<=": lispy_le,
    "==": lispy_eq,
    "!=": lispy_ne,
    # strings and I/O
    "error": lispy_error,
    "print": lispy_print,
    "load": lispy_load,
})


def create_builtin_runtime_env(registry: Mapping[str, Callable] = BUILTINS) -> Environment:
  """Create a root environment holding one Builtin per registry entry"""
  env = make_runtime_env()
  for name, func in registry.items():
    env_bind_local(env, name, Builtin(name, func))
  return env
