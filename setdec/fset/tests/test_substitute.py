"""Tests for equality elimination."""

from setdec.fset.context import Context
from setdec.fset.language import (
    Add,
    App,
    Eq,
    In,
    Not,
    Or,
    SetEq,
    Var,
)
from setdec.fset.substitute import Equation, apply_substitution, substitute
from setdec.fset.trace import Trace

x, y, z = Var("x"), Var("y"), Var("z")
s, t = Var("s"), Var("t")
fx, fy = App("f", (x,)), App("f", (y,))


def test_equation_view():
    equation = Equation.read(SetEq(s, t))
    assert equation == Equation(SetEq, s, t)
    assert equation.to_formula() == SetEq(s, t)
    assert Equation.read(In(x, s)) is None
    assert Equation.read(Eq(x, x)).is_trivial()


def test_elimination_choice():
    assert Equation(Eq, x, y).elimination() == (y, x)
    assert Equation(Eq, fx, y).elimination() == (y, fx)
    assert Equation(SetEq, s, Add(x, t)).elimination() == (s, Add(x, t))
    # occurs check
    assert Equation(Eq, App("f", (x,)), x).elimination() is None
    assert Equation(Eq, fx, fy).elimination() is None


def test_apply_substitution_restores_normal_form():
    formula = In(y, Add(x, s))
    assert apply_substitution(formula, y, x) == Or(Eq(x, x), In(x, s))
    assert apply_substitution(Eq(y, z), y, x) == Eq(x, z)
    assert apply_substitution(Eq(x, z), x, y) == Eq(y, z)
    assert apply_substitution(Eq(z, x), z, y) == Eq(x, y)


def test_substitute_element_equality():
    trace = Trace()
    context = Context.build([Eq(x, y), In(y, s)], In(y, t))
    result = substitute(context, trace)
    assert [h.formula for h in result.hypotheses] == [In(x, s)]
    assert result.goal == In(x, t)
    assert trace.steps[0].description == "subst y := x using H0"


def test_substitute_set_equality():
    context = Context.build([In(x, s), SetEq(s, Add(y, t))], In(x, t))
    result = substitute(context)
    assert [h.formula for h in result.hypotheses] == [Or(Eq(x, y), In(x, t))]
    assert result.goal == In(x, t)


def test_substitute_chains_to_fixpoint():
    context = Context.build([Eq(x, y), Eq(y, z), In(z, s)], In(x, s))
    result = substitute(context)
    assert [h.formula for h in result.hypotheses] == [In(x, s)]
    assert result.goal == In(x, s)


def test_substitute_drops_trivial_equations():
    context = Context.build([Eq(x, x), Not(In(x, s))], In(x, s))
    result = substitute(context)
    assert [h.formula for h in result.hypotheses] == [Not(In(x, s))]


def test_substitute_keeps_equations_between_applications():
    context = Context.build([Eq(fx, fy), In(fx, s)], In(fy, s))
    assert substitute(context) == context
