"""
Lispy Reader
Converts the parser's CST into Value trees
"""

from typing import List

from parsing import CSTNode, ROOT_TAG
from values import (
  Value, Number, Error, Symbol, String, SExpr, QExpr,
  INT64_MIN, INT64_MAX, unescape_string
)


_PUNCTUATION = {"(", ")", "{", "}"}


def read_number(node: CSTNode) -> Value:
  """Read an integer literal, rejecting anything outside 64 bits"""
  try:
    n = int(node.value, 10)
  except ValueError:
    return Error("invalid number")
  if n < INT64_MIN or n > INT64_MAX:
    return Error("invalid number")
  return Number(n)


def read_string(node: CSTNode) -> Value:
  """Strip the surrounding quotes and process escape sequences"""
  return String(unescape_string(node.value[1:-1]))


def _is_skipped(node: CSTNode) -> bool:
  if node.value in _PUNCTUATION:
    return True
  if node.type in ("regex", "char"):
    return True
  return "comment" in node.type


def read_value(node: CSTNode) -> Value:
  """Convert one CST node (and its children) into a Value"""
  if "number" in node.type:
    return read_number(node)
  if "string" in node.type:
    return read_string(node)
  if "symbol" in node.type:
    return Symbol(node.value)

  # root or sexpr then create an empty list to fill
  if node.type == ROOT_TAG or "sexpr" in node.type:
    result = SExpr()
  elif "qexpr" in node.type:
    result = QExpr()
  else:
    return Error(f"Unknown syntax node '{node.type}'")

  for child in node.children:
    if _is_skipped(child):
      continue
    result.cells.append(read_value(child))
  return result


def read_program(root: CSTNode) -> List[Value]:
  """Read every top-level form of a root node, in order"""
  value = read_value(root)
  if root.type == ROOT_TAG:
    return value.cells
  return [value]
