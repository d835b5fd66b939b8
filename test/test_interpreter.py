"""
Evaluator tests: S-Expression reduction, closures, partial application, scoping
"""

import pytest
from interpreter import create_debug_interpreter, eval_value, call_function
from environment import make_runtime_env
from values import Number, Error, Symbol, QExpr, Builtin
from stdlib import lispy_add


class TestEvaluation:
  """Test S-Expression evaluation rules"""

  def test_arithmetic(self, run):
    assert run("+ 1 2 3") == "6"
    assert run("- 5") == "-5"
    assert run("- 10 1 2") == "7"
    assert run("* 2 (+ 1 2)") == "6"

  def test_division(self, run):
    """Integer division truncates toward zero; zero divisor is an error value"""
    assert run("/ 7 2") == "3"
    assert run("/ -7 2") == "-3"
    assert run("/ 1 0") == "Error: Division By Zero!"

  def test_int64_wraparound(self, run):
    assert run("+ 9223372036854775807 1") == "-9223372036854775808"
    assert run("* 4611686018427387904 2") == "-9223372036854775808"

  def test_empty_and_single(self, run):
    """() is a terminal value and a one-element list unwraps"""
    assert run("()") == "()"
    assert run("(5)") == "5"
    assert run("((((7))))") == "7"

  def test_qexpr_is_inert(self, run):
    assert run("{1 (+ 1 1) undefined}") == "{1 (+ 1 1) undefined}"

  def test_unbound_symbol(self, run):
    assert run("foo") == "Error: Unbound Symbol 'foo'"

  def test_not_a_function(self, run):
    assert run("(1 2)") == "Error: S-Expression starts with incorrect type. Got Number, Expected Function."

  def test_first_error_wins(self, run):
    assert run("+ (error \"first\") (error \"second\")") == "Error: first"
    assert run("+ 1 (/ 1 0) nope") == "Error: Division By Zero!"

  def test_later_children_still_evaluated(self, run):
    """Every child runs before errors are checked"""
    assert run("(error \"early\") (def {late} 5)") == "Error: early"
    assert run("late") == "5"

  def test_side_effect_order(self, run, capsys):
    assert run("(print \"a\") (error \"x\") (print \"b\")") == "Error: x"
    assert capsys.readouterr().out == '"a"\n"b"\n'

  def test_builtin_evaluates_to_itself(self, run):
    assert run("+") == "<builtin>"

  def test_eval_value_direct(self):
    env = make_runtime_env()
    assert eval_value(env, Number(3)) == Number(3)
    assert eval_value(env, QExpr([Symbol("x")])) == QExpr([Symbol("x")])
    assert eval_value(env, Symbol("x")) == Error("Unbound Symbol 'x'")

  def test_call_function_builtin(self):
    result = call_function(make_runtime_env(), Builtin("+", lispy_add), [Number(2), Number(3)])
    assert result == Number(5)


class TestDefinitions:

  def test_def_then_lookup(self, run):
    assert run("def {x} 5") == "()"
    assert run("x") == "5"
    assert run("+ x 1") == "6"

  def test_def_many(self, run):
    run("def {a b} 1 2")
    assert run("list a b") == "{1 2}"

  def test_def_visible_from_function(self, run):
    run("def {x} 5")
    run("def {addx} (\\ {y} {+ x y})")
    assert run("addx 1") == "6"

  def test_recursion(self, run):
    run("def {fact} (\\ {n} {if (== n 0) {1} {* n (fact (- n 1))}})")
    assert run("fact 5") == "120"
    assert run("fact 20") == "2432902008176640000"

  def test_deep_bounded_recursion(self, run):
    """A few hundred nested calls stay within the host stack"""
    run("def {count} (\\ {n} {if (== n 0) {0} {+ 1 (count (- n 1))}})")
    assert run("count 500") == "500"

  def test_unbounded_recursion_is_fatal(self, interpreter):
    """Stack exhaustion is a host failure, not an error value"""
    interpreter.eval_string("def {loop} (\\ {n} {loop n})")
    with pytest.raises(RecursionError):
      interpreter.eval_string("loop 1")


class TestClosures:
  """Test closure application, partial application and rest parameters"""

  def test_apply(self, run):
    assert run("(\\ {x y} {+ x y}) 1 2") == "3"

  def test_fun_alias(self, run):
    assert run("(fun {x} {* x x}) 4") == "16"

  def test_partial_application(self, run):
    assert run("(\\ {x y} {+ x y}) 1") == "(\\ {y} {+ x y})"
    run("def {add1} ((\\ {x y} {+ x y}) 1)")
    assert run("add1 2") == "3"
    assert run("add1 40") == "41"

  def test_partial_does_not_mutate_original(self, run):
    run("def {add} (\\ {x y} {+ x y})")
    assert run("add 1") == "(\\ {y} {+ x y})"
    assert run("add 10 20") == "30"
    assert run("add") == "(\\ {x y} {+ x y})"

  def test_rest_parameter(self, run):
    assert run("(\\ {x & xs} {xs}) 1 2 3") == "{2 3}"
    assert run("(\\ {x & xs} {xs}) 1") == "{}"
    assert run("(\\ {& xs} {xs}) 1 2") == "{1 2}"

  def test_partial_with_rest(self, run):
    assert run("(\\ {a b & r} {r}) 1") == "(\\ {b & r} {r})"
    run("def {p} ((\\ {a b & r} {cons a (cons b r)}) 1)")
    assert run("p 2 3 4") == "{1 2 3 4}"
    assert run("p 2") == "{1 2}"

  def test_too_many_arguments(self, run):
    assert run("(\\ {x} {x}) 1 2") == "Error: Function passed too many arguments. Got 2, Expected 1."

  def test_malformed_variadic(self, run):
    expected = "Error: Function format invalid. Symbol '&' not followed by single symbol."
    assert run("\\ {x &} {x}") == expected
    assert run("\\ {& a b} {a}") == expected

  def test_formals_must_be_symbols(self, run):
    assert run("\\ {x 1} {x}") == "Error: Function '\\' cannot define non-symbol. Got Number, Expected Symbol."

  def test_closure_equality(self, run):
    """Closures compare by formals and body"""
    assert run("== (\\ {x} {x}) (\\ {x} {x})") == "1"
    assert run("== (\\ {x} {x}) (\\ {y} {y})") == "0"
    assert run("== + +") == "1"
    assert run("== + -") == "0"


class TestScoping:
  """Closures are strictly lexical: a fresh frame per call, parented at the definition site"""

  def test_free_variable_resolves_at_definition_site(self, run):
    run("def {x} 10")
    run("def {getx} (\\ {_} {x})")
    run("def {call-with-x} (\\ {x} {getx 0})")
    assert run("call-with-x 99") == "10"

  def test_nested_lambda_captures_argument(self, run):
    assert run("((\\ {x} {\\ {y} {+ x y}}) 1) 2") == "3"
    run("def {adder} (\\ {x} {\\ {y} {+ x y}})")
    run("def {add5} (adder 5)")
    run("def {add7} (adder 7)")
    assert run("add5 1") == "6"
    assert run("add7 1") == "8"

  def test_frames_do_not_persist(self, run):
    run("def {remember} (\\ {v} {= {seen} v})")
    assert run("remember 5") == "()"
    assert run("seen") == "Error: Unbound Symbol 'seen'"

  def test_def_inside_function_is_global(self, run):
    run("def {setg} (\\ {v} {def {gv} v})")
    run("setg 3")
    assert run("gv") == "3"

  def test_local_put_shadows(self, run):
    run("def {x} 1")
    run("def {shadow} (\\ {_} {list (= {x} 2) x})")
    assert run("shadow 0") == "{() 2}"
    assert run("x") == "1"


class TestDebugTracing:

  def test_trace_output(self, capsys):
    interpreter = create_debug_interpreter()
    capsys.readouterr()
    result = interpreter.eval_string("+ 1 2")
    out = capsys.readouterr().out
    assert result == Number(3)
    assert "Evaluating: (+ 1 2)" in out
    assert "Calling: <builtin> with 2 argument(s)" in out
