"""End-to-end tests of the decision procedure."""

import pytest

from setdec.fset.certificate import Rule, verify_certificate
from setdec.fset.config import DecideConfig
from setdec.fset.context import Hypothesis
from setdec.fset.decidability import default_table
from setdec.fset.decide import Verdict, decide
from setdec.fset.language import (
    FALSE,
    Add,
    App,
    Eq,
    ForAll,
    Iff,
    Implies,
    In,
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
    conjunction,
    disjunction,
)
from setdec.fset.parser import parse
from setdec.fset.trace import DiagnosticKind

x, y, z = Var("x"), Var("y"), Var("z")
r, s, t = Var("r"), Var("s"), Var("t")
s1, s2, s3, s4 = Var("s1"), Var("s2"), Var("s3"), Var("s4")


def _assert_proved(result):
    assert result.verdict is Verdict.PROVED
    assert result.proved
    assert result.certificate is not None
    assert result.certificate.tree.is_closed()
    assert verify_certificate(result.certificate) == []


def test_membership_in_own_singleton():
    _assert_proved(decide([], In(x, Singleton(x))))


def test_equalities_carry_membership():
    hypotheses = [Eq(x, y), Not(Not(Eq(z, y))), In(x, s)]
    _assert_proved(decide(hypotheses, In(z, s)))


def test_subset_of_add_remove():
    _assert_proved(decide([], Subset(s, Add(x, Remove(x, s)))))


def test_nested_union():
    hypothesis = Not(In(x, Union(s1, Union(s2, Union(s3, Add(y, s4))))))
    goal = Not(Or(In(x, s1), Or(In(x, s4), Eq(y, x))))
    result = decide([hypothesis], goal)
    _assert_proved(result)
    assert result.certificate.tree.rule is Rule.FALSITY


def test_subset_without_membership_is_not_proved():
    result = decide([Eq(x, y), Subset(r, s)], In(x, s))
    assert result.verdict is Verdict.NOT_PROVED
    assert result.certificate is None
    assert result.open_branch is not None
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.STUCK]


def test_equal_applications_are_not_substituted():
    fx, fy = App("f", (x,)), App("f", (y,))
    result = decide([Eq(fx, fy), In(fx, s)], In(fy, s))
    assert result.verdict is Verdict.NOT_PROVED


def test_equal_applications_need_a_variable_side():
    x1, x2 = Var("x1"), Var("x2")
    g_x2 = App("g", (x2,))
    g_g_x2 = App("g", (g_x2,))
    f_s2 = App("f", (s2,))

    proved = decide([SetEq(s1, f_s2), Eq(x1, g_g_x2), In(x1, s1)], In(g_g_x2, f_s2))
    _assert_proved(proved)

    hypotheses = [SetEq(s1, f_s2), Eq(x1, g_x2), Eq(g_x2, g_g_x2), In(x1, s1)]
    result = decide(hypotheses, In(g_g_x2, f_s2))
    assert result.verdict is Verdict.NOT_PROVED
    assert result.diagnostics[-1].kind is DiagnosticKind.STUCK


@pytest.mark.parametrize("use_pull", [True, False])
def test_pull_is_optional(use_pull):
    hypothesis = Not(In(x, Union(s1, Add(y, s4))))
    goal = Not(Or(In(x, s4), Eq(y, x)))
    config = DecideConfig(use_pull=use_pull)
    _assert_proved(decide([hypothesis], goal, config))


@pytest.mark.parametrize(
    "hypotheses, goal",
    [
        ([], "Subset(s, union(s, t))"),
        ([], "Equal(inter(s, t), inter(t, s))"),
        (["Empty(s)"], "not x in s"),
        (["Subset(r, s)", "Subset(s, t)"], "Subset(r, t)"),
        (["Equal(s, add(x, t))"], "x in s"),
        (["x in s implies y in s", "x in s or y in s"], "y in s"),
        (["x in diff(s, t)"], "not x in t and x in s"),
        ([], "x in remove(y, s) iff (x in s and not x = y)"),
        ([], "Empty(diff(s, s))"),
    ],
)
def test_valid_problems(hypotheses, goal):
    _assert_proved(decide([parse(h) for h in hypotheses], parse(goal)))


@pytest.mark.parametrize(
    "hypotheses, goal",
    [
        ([], "x in s"),
        (["x in s"], "y in s"),
        (["Subset(s, t)"], "Subset(t, s)"),
        (["x in union(s, t)"], "x in s"),
        (["not x = y"], "x in singleton(y)"),
    ],
)
def test_invalid_problems(hypotheses, goal):
    result = decide([parse(h) for h in hypotheses], parse(goal))
    assert result.verdict is Verdict.NOT_PROVED
    assert result.diagnostics[-1].kind is DiagnosticKind.STUCK


def test_declared_predicate():
    p = Pred("P", (x,))
    hypotheses = [p, Implies(p, In(x, s))]

    result = decide(hypotheses, In(x, s))
    assert result.verdict is Verdict.NOT_PROVED
    assert result.certificate is None
    kinds = {d.kind for d in result.diagnostics}
    assert DiagnosticKind.OUT_OF_FRAGMENT in kinds

    config = DecideConfig(decidability=default_table().register_predicate("P"))
    _assert_proved(decide(hypotheses, In(x, s), config))


def test_quantified_hypothesis_is_dropped():
    result = decide([ForAll(x, In(x, s))], In(y, s))
    assert result.verdict is Verdict.NOT_PROVED
    assert result.diagnostics[0].kind is DiagnosticKind.OUT_OF_FRAGMENT


def test_contradictory_hypotheses_prove_anything():
    _assert_proved(decide([In(x, s), IsEmpty(s)], Pred("Q", ())))


def test_goal_negation_is_introduced():
    _assert_proved(decide([In(x, s)], Not(Not(In(x, s)))))
    _assert_proved(decide([Not(In(x, s))], Implies(In(x, s), FALSE)))


def test_named_hypotheses_appear_in_certificate():
    hypotheses = [Hypothesis("eq", Eq(x, y)), Hypothesis("mem", In(y, s))]
    result = decide(hypotheses, In(x, s))
    _assert_proved(result)
    assert "subst y := x using eq" in result.certificate.render()


def test_set_equality_is_substituted():
    result = decide([SetEq(s, t), In(x, t)], In(x, s))
    _assert_proved(result)


def test_split_budget():
    hypotheses = [parse("x in s or x in t"), parse("not x in s or x in t"),
                  parse("x in s or not x in t")]
    goal = parse("x in s and x in t")

    _assert_proved(decide(hypotheses, goal))

    result = decide(hypotheses, goal, DecideConfig(max_splits=0))
    assert result.verdict is Verdict.NOT_PROVED
    assert [d.kind for d in result.diagnostics][-1] is DiagnosticKind.BUDGET_EXHAUSTED


def _membership_chain(n):
    sets = [Var(f"s{i}") for i in range(1, n + 1)]
    chain = Add(y, sets[-1])
    for set_var in reversed(sets[:-1]):
        chain = Union(set_var, chain)
    members = [In(x, set_var) for set_var in sets]
    return chain, members


@pytest.mark.parametrize("n", [2, 4, 8, 16])
def test_nested_constructors_stay_polynomial(n):
    chain, members = _membership_chain(n)
    result = decide([Not(In(x, chain))], Not(disjunction(*members, Eq(y, x))))
    _assert_proved(result)
    assert len(result.certificate.steps) <= 8 * n * n
    assert result.certificate.tree.size() <= 8 * n * n
    assert result.splits <= n


@pytest.mark.parametrize("n", [2, 4, 8, 16])
def test_negated_atoms_stay_polynomial(n):
    chain, members = _membership_chain(n)
    hypotheses = [In(x, chain), Not(Eq(x, y))]
    hypotheses += [Iff(left, right) for left, right in zip(members, members[1:])]
    result = decide(hypotheses, conjunction(*members))
    _assert_proved(result)
    assert len(result.certificate.steps) <= 8 * n * n
    assert result.certificate.tree.size() <= 8 * n * n
    assert result.splits <= n
