"""
Lispy Runtime Environment
Name -> Value bindings with a single parent back-reference
"""

from typing import Dict, List, Optional
from dataclasses import dataclass, field

from values import Value, copy_value
from utilities import unbound_symbol_error


@dataclass(eq=False)
class Environment:
  """One scope in the environment chain

  `parent` is a back-reference only; a child never owns its parent.
  """
  bindings: Dict[str, Value] = field(default_factory=dict)
  parent: Optional['Environment'] = None


def make_runtime_env(parent: Optional[Environment] = None, bindings: Optional[Dict[str, Value]] = None) -> Environment:
  """Create a runtime environment, copying any initial bindings"""
  env = Environment(parent=parent)
  for name, value in (bindings or {}).items():
    env_bind_local(env, name, value)
  return env


def copy_env(env: Environment) -> Environment:
  """Copy the local bindings of `env`, sharing its parent"""
  return make_runtime_env(env.parent, env.bindings)


def env_root(env: Environment) -> Environment:
  while env.parent is not None:
    env = env.parent
  return env


def env_lookup(env: Environment, name: str) -> Value:
  """Look up a name in the environment chain

  Returns a copy of the bound value, or an UnboundSymbol error value.
  """
  if name in env.bindings:
    return copy_value(env.bindings[name])
  elif env.parent is not None:
    return env_lookup(env.parent, name)
  return unbound_symbol_error(name)


def env_bind_local(env: Environment, name: str, value: Value) -> None:
  """Bind a copy of `value` to `name` in this scope only"""
  env.bindings[name] = copy_value(value)


def env_bind_global(env: Environment, name: str, value: Value) -> None:
  """Bind a copy of `value` to `name` in the root of the chain"""
  env_bind_local(env_root(env), name, value)


def env_names(env: Environment) -> List[str]:
  """All names visible from `env`, innermost scope first"""
  names = []
  seen = set()
  scope = env
  while scope is not None:
    for name in scope.bindings:
      if name not in seen:
        seen.add(name)
        names.append(name)
    scope = scope.parent
  return names
