"""Tests for the concrete syntax."""

import pytest

from setdec.fset.context import Hypothesis
from setdec.fset.language import (
    FALSE,
    TRUE,
    Add,
    And,
    App,
    Diff,
    EmptySet,
    Eq,
    ForAll,
    Iff,
    Implies,
    In,
    Inter,
    IsEmpty,
    Not,
    Or,
    Pred,
    Remove,
    SetEq,
    Singleton,
    Subset,
    Union,
    Var,
)
from setdec.fset.parser import lex, parse, parse_problem
from setdec.utils.exceptions import ParseError

x, y, z = Var("x"), Var("y"), Var("z")
s, t = Var("s"), Var("t")


def test_lex():
    assert lex("x in add(y, s)") == ["x", "in", "add", "(", "y", ",", "s", ")"]
    assert lex("  not  P_1 ") == ["not", "P_1"]


def test_atoms():
    assert parse("x = y") == Eq(x, y)
    assert parse("Eq(x, y)") == Eq(x, y)
    assert parse("x in s") == In(x, s)
    assert parse("In(x, s)") == In(x, s)
    assert parse("Empty(s)") == IsEmpty(s)
    assert parse("Subset(s, t)") == Subset(s, t)
    assert parse("Equal(s, t)") == SetEq(s, t)
    assert parse("true") == TRUE
    assert parse("false") == FALSE


def test_set_terms():
    assert parse("x in empty") == In(x, EmptySet())
    assert parse("x in singleton(y)") == In(x, Singleton(y))
    assert parse("x in add(y, remove(z, s))") == In(x, Add(y, Remove(z, s)))
    assert parse("x in union(s, inter(s, diff(s, t)))") == In(
        x, Union(s, Inter(s, Diff(s, t)))
    )
    assert parse("f(x, g(y)) = y") == Eq(App("f", (x, App("g", (y,)))), y)


def test_predicates():
    assert parse("P(x, s)") == Pred("P", (x, s))
    assert parse("Q") == Pred("Q", ())


def test_precedence_and_associativity():
    a, b, c = Eq(x, y), In(x, s), In(y, t)
    assert parse("x = y or x in s and y in t") == Or(a, And(b, c))
    assert parse("x = y implies x in s implies y in t") == Implies(a, Implies(b, c))
    assert parse("x = y iff x in s or y in t") == Iff(a, Or(b, c))
    assert parse("(x = y or x in s) and y in t") == And(Or(a, b), c)
    assert parse("not x = y and x in s") == And(Not(a), b)


def test_forall():
    assert parse("forall x. x in s") == ForAll(x, In(x, s))
    assert parse("forall x, y. x = y") == ForAll(x, ForAll(y, Eq(x, y)))
    assert parse("x in s implies forall y. y in s") == Implies(
        In(x, s), ForAll(y, In(y, s))
    )


def test_printed_form_parses_back():
    formulas = [
        Not(Or(In(x, Union(s, t)), Eq(App("f", (x,)), y))),
        Implies(Not(Not(Eq(x, y))), Iff(In(x, Add(y, s)), In(x, Remove(z, s)))),
        And(Subset(s, t), SetEq(Singleton(x), Diff(s, Inter(s, t)))),
        Or(Pred("P", (x,)), Not(IsEmpty(EmptySet()))),
    ]
    for formula in formulas:
        assert parse(str(formula)) == formula


@pytest.mark.parametrize(
    "text",
    [
        "",
        "x in",
        "(x = y",
        "x = y or",
        "Subset(s)",
        "x in singleton(y, z)",
        "q",
        "forall . x in s",
        "forall x x in s",
    ],
)
def test_parse_errors(text):
    with pytest.raises(ParseError):
        parse(text)


def test_parse_problem():
    text = """
    # membership survives equality
    eq: x = y
    x in s   # unnamed
    goal: y in s
    """
    hypotheses, goal = parse_problem(text)
    assert hypotheses == [Hypothesis("eq", Eq(x, y)), Hypothesis("H1", In(x, s))]
    assert goal == In(y, s)


def test_parse_problem_errors():
    with pytest.raises(ParseError, match="Missing goal"):
        parse_problem("x in s\n")
    with pytest.raises(ParseError, match="line 2"):
        parse_problem("goal: x in s\ngoal: y in s\n")
    with pytest.raises(ParseError, match="line 1"):
        parse_problem("h: x in\ngoal: true\n")
