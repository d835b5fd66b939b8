"""
Utilities module for the Lispy interpreter
Error taxonomy constructors and argument validation shared by builtins
Errors are returned as values, never raised
"""

from typing import List, Optional, Type

from values import Error, Value, type_name, variant_name


# ==================== ERROR MESSAGE BUILDERS ====================

def unbound_symbol_error(name: str) -> Error:
  return Error(f"Unbound Symbol '{name}'")


def type_mismatch_error(
  func_name: str,
  position: int,
  expected: str,
  actual: Value
) -> Error:
  """
  Generate type mismatch error

  Args:
    func_name: Function name
    position: Zero-based argument index
    expected: Expected type name
    actual: Offending value

  Returns:
    Error value with formatted message
  """
  return Error(
    f"Function '{func_name}' passed incorrect type for argument {position}. "
    f"Got {type_name(actual)}, Expected {expected}."
  )


def arity_error(func_name: str, expected: int, got: int) -> Error:
  """
  Generate arity mismatch error

  Args:
    func_name: Function name
    expected: Expected number of arguments
    got: Actual number of arguments

  Returns:
    Error value with formatted message
  """
  return Error(
    f"Function '{func_name}' passed incorrect number of arguments. "
    f"Got {got}, Expected {expected}."
  )


def non_symbol_error(func_name: str, actual: Value) -> Error:
  return Error(
    f"Function '{func_name}' cannot define non-symbol. "
    f"Got {type_name(actual)}, Expected Symbol."
  )


def too_many_arguments_error(expected: int, got: int) -> Error:
  return Error(f"Function passed too many arguments. Got {got}, Expected {expected}.")


def empty_list_error(func_name: str, position: int) -> Error:
  return Error(f"Function '{func_name}' passed {{}} for argument {position}.")


def division_by_zero_error() -> Error:
  return Error("Division By Zero!")


def not_a_function_error(actual: Value) -> Error:
  return Error(
    f"S-Expression starts with incorrect type. "
    f"Got {type_name(actual)}, Expected Function."
  )


def malformed_variadic_error() -> Error:
  return Error("Function format invalid. Symbol '&' not followed by single symbol.")


def parse_failure_error(message: str) -> Error:
  return Error(f"Could not parse input: {message}")


def load_failure_error(path: str, message: str) -> Error:
  return Error(f"Could not load Library {path}: {message}")


# ==================== VALIDATION UTILITIES ====================

def validate_arg_count(func_name: str, args: List[Value], expected: int) -> Optional[Error]:
  """Return an arity error unless exactly `expected` arguments were passed"""
  if len(args) != expected:
    return arity_error(func_name, expected, len(args))
  return None


def validate_arg_type(
  func_name: str,
  args: List[Value],
  position: int,
  expected: Type
) -> Optional[Error]:
  """
  Check the variant of a single argument

  Args:
    func_name: Function name for error messages
    args: List of argument values
    position: Index of the argument to check
    expected: Value class the argument must be an instance of

  Returns:
    Error value if the check fails, None otherwise
  """
  arg = args[position]
  if not isinstance(arg, expected):
    return type_mismatch_error(func_name, position, variant_name(expected), arg)
  return None


def validate_function_args(
  func_name: str,
  args: List[Value],
  expected_types: List[Type]
) -> Optional[Error]:
  """
  Validate argument count and variants in one go

  Args:
    func_name: Function name for error messages
    args: List of argument values
    expected_types: Value classes, one per expected argument

  Returns:
    The first Error found, or None if every argument matches
  """
  error = validate_arg_count(func_name, args, len(expected_types))
  if error:
    return error

  for position, expected in enumerate(expected_types):
    error = validate_arg_type(func_name, args, position, expected)
    if error:
      return error
  return None


def validate_non_empty(func_name: str, args: List[Value], position: int) -> Optional[Error]:
  if not args[position].cells:
    return empty_list_error(func_name, position)
  return None
