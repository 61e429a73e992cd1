"""Stage 1: goal introduction and removal of facts outside the fragment."""

from __future__ import annotations

import logging
from typing import List, Optional

from setdec.fset.context import Context, Hypothesis
from setdec.fset.decidability import DecidabilityTable
from setdec.fset.language import (
    BINARY_CONNECTIVES,
    FALSE,
    Add,
    And,
    App,
    Atom,
    Bottom,
    Diff,
    EmptySet,
    Eq,
    Formula,
    Implies,
    In,
    Inter,
    IsEmpty,
    Not,
    Pred,
    Remove,
    SetEq,
    Singleton,
    Subset,
    Term,
    Top,
    Union,
    Var,
)
from setdec.fset.trace import DiagnosticKind, Trace

logger = logging.getLogger(__name__)

STAGE = "classify"


def is_element_term(term: Term) -> bool:
    if isinstance(term, Var):
        return True
    if isinstance(term, App):
        return all(is_element_term(arg) or is_set_term(arg) for arg in term.args)
    return False


def is_set_term(term: Term) -> bool:
    if isinstance(term, (Var, App)):
        return is_element_term(term)
    if isinstance(term, EmptySet):
        return True
    if isinstance(term, Singleton):
        return is_element_term(term.elem)
    if isinstance(term, (Add, Remove)):
        return is_element_term(term.elem) and is_set_term(term.base)
    if isinstance(term, (Union, Inter, Diff)):
        return is_set_term(term.left) and is_set_term(term.right)
    return False


def is_relevant(
    formula: Formula, table: DecidabilityTable, top_level: bool = False
) -> bool:
    """Whether ``formula`` is built purely from the supported grammar.

    Set relations are universal statements, so they are only accepted as a
    whole hypothesis or goal (``top_level``).
    """
    if isinstance(formula, (Top, Bottom)):
        return True
    if isinstance(formula, Eq):
        return is_element_term(formula.left) and is_element_term(formula.right)
    if isinstance(formula, In):
        return is_element_term(formula.elem) and is_set_term(formula.container)
    if isinstance(formula, IsEmpty):
        return top_level and is_set_term(formula.container)
    if isinstance(formula, (Subset, SetEq)):
        return top_level and is_set_term(formula.left) and is_set_term(formula.right)
    if isinstance(formula, Pred):
        return table.declares(formula) and all(
            is_element_term(arg) or is_set_term(arg) for arg in formula.args
        )
    if isinstance(formula, Atom):
        return table.declares(formula)
    if isinstance(formula, Not):
        return is_relevant(formula.body, table)
    if isinstance(formula, BINARY_CONNECTIVES):
        return is_relevant(formula.left, table) and is_relevant(formula.right, table)
    return False


def introduce_goal(context: Context, trace: Optional[Trace] = None) -> Context:
    """Move premises of the goal into the hypotheses."""
    hypotheses = list(context.hypotheses)
    goal = context.goal
    while True:
        current = Context(tuple(hypotheses), goal)
        if isinstance(goal, Implies):
            premise, goal = goal.left, goal.right
        elif isinstance(goal, Not):
            premise, goal = goal.body, FALSE
        else:
            break
        hypothesis = Hypothesis(current.fresh_name("I"), premise)
        hypotheses.append(hypothesis)
        if trace is not None:
            trace.step(STAGE, f"intro {hypothesis}")
    return Context(tuple(hypotheses), goal)


def split_conjunctions(context: Context) -> Context:
    hypotheses: List[Hypothesis] = []
    for hypothesis in context.hypotheses:
        pending = [hypothesis.formula]
        parts = []
        while pending:
            formula = pending.pop(0)
            if isinstance(formula, And):
                pending[:0] = [formula.left, formula.right]
            else:
                parts.append(formula)
        if len(parts) == 1:
            hypotheses.append(hypothesis)
            continue
        for index, part in enumerate(parts):
            hypotheses.append(
                Hypothesis(f"{hypothesis.name}.{index}", part, hypothesis.injected)
            )
    return context.with_hypotheses(hypotheses)


def classify(
    context: Context, table: DecidabilityTable, trace: Optional[Trace] = None
) -> Context:
    """Introduce the goal, split conjunctions and drop irrelevant entries."""
    trace = trace if trace is not None else Trace()
    context = split_conjunctions(introduce_goal(context, trace))

    kept = []
    for hypothesis in context.hypotheses:
        if is_relevant(hypothesis.formula, table, top_level=True):
            kept.append(hypothesis)
            continue
        logger.debug("Dropping hypothesis outside the fragment: %s", hypothesis)
        trace.diagnose(DiagnosticKind.OUT_OF_FRAGMENT, f"dropped {hypothesis}")
        trace.step(STAGE, f"clear {hypothesis.name}")

    goal = context.goal
    if not is_relevant(goal, table, top_level=True):
        trace.diagnose(DiagnosticKind.OUT_OF_FRAGMENT, f"goal {goal} replaced by false")
        trace.step(STAGE, f"goal {goal} replaced by false")
        goal = FALSE
    return Context(tuple(kept), goal)
