"""Stage 3: unfold membership in compound sets.

After :func:`rewrite` every ``In`` atom mentions an atomic set (a variable or
an opaque application) and every ``Eq`` atom is oriented.
"""

from __future__ import annotations

import logging
from typing import Optional

from setdec.fset.context import Context
from setdec.fset.language import (
    BINARY_CONNECTIVES,
    FALSE,
    Add,
    And,
    Diff,
    EmptySet,
    Eq,
    Formula,
    In,
    Inter,
    Not,
    Or,
    Remove,
    Singleton,
    Union,
    orient,
)
from setdec.fset.trace import Trace

logger = logging.getLogger(__name__)

STAGE = "rewrite"


def unfold_membership(atom: In) -> Optional[Formula]:
    """One rewrite step on a membership atom; ``None`` when the set is atomic."""
    x, s = atom.elem, atom.container
    if isinstance(s, EmptySet):
        return FALSE
    if isinstance(s, Singleton):
        return Eq(x, s.elem)
    if isinstance(s, Add):
        return Or(Eq(x, s.elem), In(x, s.base))
    if isinstance(s, Remove):
        return And(Not(Eq(x, s.elem)), In(x, s.base))
    if isinstance(s, Union):
        return Or(In(x, s.left), In(x, s.right))
    if isinstance(s, Inter):
        return And(In(x, s.left), In(x, s.right))
    if isinstance(s, Diff):
        return And(In(x, s.left), Not(In(x, s.right)))
    return None


def rewrite(formula: Formula) -> Formula:
    """Apply the membership table everywhere until nothing matches."""
    if isinstance(formula, In):
        unfolded = unfold_membership(formula)
        if unfolded is None:
            return formula
        # the set argument of every new membership atom is strictly smaller
        return rewrite(unfolded)
    if isinstance(formula, Eq):
        return orient(formula)
    if isinstance(formula, Not):
        return Not(rewrite(formula.body))
    if isinstance(formula, BINARY_CONNECTIVES):
        return type(formula)(rewrite(formula.left), rewrite(formula.right))
    return formula


def rewrite_context(context: Context, trace: Optional[Trace] = None) -> Context:
    hypotheses = []
    for hypothesis in context.hypotheses:
        formula = rewrite(hypothesis.formula)
        if formula != hypothesis.formula:
            if trace is not None:
                trace.step(STAGE, f"{hypothesis.name}: {formula}")
            hypothesis = type(hypothesis)(hypothesis.name, formula, hypothesis.injected)
        hypotheses.append(hypothesis)
    goal = rewrite(context.goal)
    if goal != context.goal and trace is not None:
        trace.step(STAGE, f"goal: {goal}")
    return Context(tuple(hypotheses), goal)
