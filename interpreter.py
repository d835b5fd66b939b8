"""
Lispy Interpreter
Tree-walking evaluator over Value trees
Errors are ordinary values: the first error in an S-Expression becomes its result

Recursion depth follows the Python call stack. Unbounded recursion in a Lispy
program raises RecursionError, which is not caught here.
"""

import sys
from typing import Dict, List, Optional

from values import (
  Value, Error, Symbol, Builtin, Closure, Formals, SExpr, QExpr,
  copy_value, is_function, show_value
)
from environment import Environment, make_runtime_env, env_lookup, env_bind_local
from utilities import (
  not_a_function_error,
  too_many_arguments_error,
  parse_failure_error,
  load_failure_error
)
from stdlib import BUILTINS, create_builtin_runtime_env
from parsing import LispyParser, create_parser
from reader import read_value, read_program
from error_handling import LispyParseError


# Each Lispy call level costs about ten Python frames
RECURSION_LIMIT = 10000


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

def make_execution_context(debug: bool = False, parser: Optional[LispyParser] = None) -> Dict:
  """Create the context threaded through evaluation and builtins"""
  return {
      'debug': debug,
      'parser': parser or create_parser(debug),
      'depth': 0
  }


def _trace(context: Optional[Dict], message: str) -> None:
  if context and context['debug']:
    print(f"{'  ' * context['depth']}{message}")


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_value(env: Environment, v: Value, context: Optional[Dict] = None) -> Value:
  """Reduce a value to its result in `env`"""
  _trace(context, f"Evaluating: {show_value(v)}")

  if isinstance(v, Symbol):
    return env_lookup(env, v.name)
  elif isinstance(v, SExpr):
    return eval_sexpr(env, v, context)
  return v


def eval_sexpr(env: Environment, v: SExpr, context: Optional[Dict] = None) -> Value:
  """Evaluate every child, then apply the first to the rest

  All children are evaluated before any error is checked, so side effects
  of later children happen even when an earlier one failed.
  """
  if context:
    context['depth'] += 1
  try:
    cells = []
    for cell in v.cells:
      cells.append(eval_value(env, cell, context))
  finally:
    if context:
      context['depth'] -= 1

  for cell in cells:
    if isinstance(cell, Error):
      return cell

  if not cells:
    return SExpr()
  if len(cells) == 1:
    return cells[0]

  func = cells[0]
  if not is_function(func):
    return not_a_function_error(func)
  return call_function(env, func, cells[1:], context)


def call_function(env: Environment, func: Value, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Apply a builtin or closure to already-evaluated arguments"""
  _trace(context, f"Calling: {show_value(func)} with {len(args)} argument(s)")

  if isinstance(func, Builtin):
    return func.func(env, args, context)
  return call_closure(func, args, context)


def call_closure(func: Closure, args: List[Value], context: Optional[Dict] = None) -> Value:
  """Bind arguments to formals in a fresh frame and evaluate the body

  Free variables resolve through the closure's own environment to the
  environment the lambda was built in; the caller's environment plays no part.
  Too few arguments yields a partially applied closure.
  """
  formals = func.formals
  required = len(formals.required)
  if len(args) > required and formals.rest is None:
    return too_many_arguments_error(required, len(args))

  frame = make_runtime_env(parent=func.env)
  for name, arg in zip(formals.required, args):
    env_bind_local(frame, name, arg)

  remaining = formals.required[len(args):]
  if remaining:
    bound = dict(func.env.bindings)
    bound.update(frame.bindings)
    return Closure(
        Formals(remaining, formals.rest),
        copy_value(func.body),
        make_runtime_env(func.env.parent, bound)
    )

  if formals.rest is not None:
    env_bind_local(frame, formals.rest, QExpr(list(args[required:])))

  return eval_value(frame, SExpr(list(func.body.cells)), context)


# ============================================================================
# SOURCE LOADING
# ============================================================================

def eval_forms(env: Environment, forms: List[Value], context: Optional[Dict] = None) -> List[Value]:
  """Evaluate top-level forms in order

  An error is printed and does not stop the remaining forms.
  """
  results = []
  for form in forms:
    result = eval_value(env, form, context)
    if isinstance(result, Error):
      print(show_value(result))
    results.append(result)
  return results


def load_file(env: Environment, path: str, context: Optional[Dict] = None) -> Value:
  """Parse a file and evaluate each top-level form in `env`

  Returns an empty S-Expression, or a load failure if the file cannot be
  read or parsed (in which case nothing from it is evaluated).
  """
  if context is None:
    context = make_execution_context()

  try:
    root = context['parser'].parse_file(path)
  except LispyParseError as e:
    return load_failure_error(path, e.summary())
  except (OSError, UnicodeDecodeError) as e:
    return load_failure_error(path, str(e))

  eval_forms(env, read_program(root), context)
  return SExpr()


# ============================================================================
# INTERPRETER
# ============================================================================

class LispyInterpreter:
  """Root environment plus parser, kept alive for a whole session"""

  def __init__(self, debug: bool = False, registry=BUILTINS):
    if sys.getrecursionlimit() < RECURSION_LIMIT:
      sys.setrecursionlimit(RECURSION_LIMIT)
    self.debug = debug
    self.parser = create_parser(debug)
    self.context = make_execution_context(debug, self.parser)
    self.global_env = create_builtin_runtime_env(registry)

  def eval(self, value: Value) -> Value:
    return eval_value(self.global_env, value, self.context)

  def eval_string(self, text: str, filename: str = "<input>") -> Value:
    """Evaluate a line of input as one implicit S-Expression"""
    try:
      root = self.parser.parse_string(text, filename)
    except LispyParseError as e:
      return parse_failure_error(e.summary())
    return self.eval(read_value(root))

  def run_source(self, text: str, filename: str = "<input>") -> List[Value]:
    """Evaluate each top-level form of a source text, file style"""
    try:
      root = self.parser.parse_string(text, filename)
    except LispyParseError as e:
      error = load_failure_error(filename, e.summary())
      print(show_value(error))
      return [error]
    return eval_forms(self.global_env, read_program(root), self.context)

  def load_file(self, path: str) -> Value:
    return load_file(self.global_env, path, self.context)


def create_interpreter(debug: bool = False) -> LispyInterpreter:
  """Factory function returning an interpreter"""
  return LispyInterpreter(debug=debug)


def create_debug_interpreter() -> LispyInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
