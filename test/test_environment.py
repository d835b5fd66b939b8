"""
Environment tests: lookup chain, local and global binding, copy-on-store
"""

from environment import (
  make_runtime_env, copy_env, env_root, env_lookup,
  env_bind_local, env_bind_global, env_names
)
from values import Number, Error, QExpr


class TestEnvironment:

  def test_unbound_symbol(self):
    env = make_runtime_env()
    assert env_lookup(env, "nope") == Error("Unbound Symbol 'nope'")

  def test_lookup_walks_parents(self):
    root = make_runtime_env()
    child = make_runtime_env(parent=root)
    env_bind_local(root, "x", Number(5))
    assert env_lookup(child, "x") == Number(5)

  def test_local_shadows_parent(self):
    root = make_runtime_env()
    child = make_runtime_env(parent=root)
    env_bind_local(root, "x", Number(1))
    env_bind_local(child, "x", Number(2))
    assert env_lookup(child, "x") == Number(2)
    assert env_lookup(root, "x") == Number(1)

  def test_bind_global_goes_to_root(self):
    root = make_runtime_env()
    grandchild = make_runtime_env(parent=make_runtime_env(parent=root))
    env_bind_global(grandchild, "g", Number(7))
    assert "g" in root.bindings
    assert "g" not in grandchild.bindings
    assert env_root(grandchild) is root

  def test_bind_upserts(self):
    env = make_runtime_env()
    env_bind_local(env, "x", Number(1))
    env_bind_local(env, "x", Number(2))
    assert env_lookup(env, "x") == Number(2)
    assert len(env.bindings) == 1

  def test_store_and_lookup_copy(self):
    """Neither the stored value nor a looked-up value alias the caller's"""
    env = make_runtime_env()
    value = QExpr([Number(1)])
    env_bind_local(env, "xs", value)

    value.cells.append(Number(2))
    looked_up = env_lookup(env, "xs")
    assert looked_up == QExpr([Number(1)])

    looked_up.cells.append(Number(3))
    assert env_lookup(env, "xs") == QExpr([Number(1)])

  def test_copy_env_shares_parent(self):
    root = make_runtime_env()
    env = make_runtime_env(parent=root, bindings={"a": Number(1)})
    copied = copy_env(env)
    env_bind_local(copied, "a", Number(2))
    assert env_lookup(env, "a") == Number(1)
    assert copied.parent is root

  def test_env_names(self):
    root = make_runtime_env(bindings={"a": Number(1), "b": Number(2)})
    child = make_runtime_env(parent=root, bindings={"b": Number(3), "c": Number(4)})
    assert env_names(child) == ["b", "c", "a"]
