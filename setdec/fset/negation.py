"""Stage 4: push negations to the atoms, or pull them to the root.

Both directions are rewrite systems over a fixed table of equivalences.  The
rules that only hold classically are guarded: they fire only when the
decidability table covers the sub-formula named in the guard.

=======================  ===========================  ==============
push                     result                       guard
=======================  ===========================  ==============
``not not a``            ``a``                        ``a``
``not (a or b)``         ``not a and not b``
``not (a and b)``        ``not a or not b``           ``a``
``not (a implies b)``    ``a and not b``              ``a``
``not (a iff b)``        ``(a and not b) or``         ``a``, ``b``
                         ``(not a and b)``
=======================  ===========================  ==============

Pull runs the first four rows backwards (``not a or not b`` needs ``a``,
``a and not b`` needs ``a``), plus contraposition
``(not a implies not b) -> (b implies a)`` guarded by ``a``.
"""

from __future__ import annotations

import logging
from typing import Optional

from setdec.fset.context import Context, Hypothesis
from setdec.fset.decidability import DecidabilityTable
from setdec.fset.language import (
    BINARY_CONNECTIVES,
    FALSE,
    TRUE,
    And,
    Bottom,
    Formula,
    Iff,
    Implies,
    Not,
    Or,
    Top,
    negation_count,
)
from setdec.fset.trace import DiagnosticKind, Trace

logger = logging.getLogger(__name__)

STAGE = "negation"


def _guard(
    table: DecidabilityTable, trace: Optional[Trace], rule: str, formula, *needed
) -> bool:
    for sub in needed:
        if not table.is_decidable(sub):
            if trace is not None:
                trace.diagnose(
                    DiagnosticKind.DECIDABILITY_OBLIGATION_UNMET,
                    f"{rule} on {formula}: {sub} is not known to be decidable",
                )
            return False
    return True


def push_step(
    formula: Formula, table: DecidabilityTable, trace: Optional[Trace] = None
) -> Optional[Formula]:
    """Apply one push rule at the root, or return ``None``."""
    if not isinstance(formula, Not):
        return None
    body = formula.body
    if isinstance(body, Top):
        return FALSE
    if isinstance(body, Bottom):
        return TRUE
    if isinstance(body, Not):
        if _guard(table, trace, "double negation", formula, body.body):
            return body.body
        return None
    if isinstance(body, Or):
        return And(Not(body.left), Not(body.right))
    if isinstance(body, And):
        if _guard(table, trace, "de Morgan", formula, body.left):
            return Or(Not(body.left), Not(body.right))
        return None
    if isinstance(body, Implies):
        if _guard(table, trace, "negated implication", formula, body.left):
            return And(body.left, Not(body.right))
        return None
    if isinstance(body, Iff):
        if _guard(table, trace, "negated iff", formula, body.left, body.right):
            return Or(
                And(body.left, Not(body.right)), And(Not(body.left), body.right)
            )
        return None
    return None


def push(
    formula: Formula, table: DecidabilityTable, trace: Optional[Trace] = None
) -> Formula:
    """Drive negations towards the atoms as far as the guards allow."""
    if isinstance(formula, Not):
        stepped = push_step(formula, table, trace)
        if stepped is not None:
            return push(stepped, table, trace)
        return Not(push(formula.body, table, trace))
    if isinstance(formula, BINARY_CONNECTIVES):
        return type(formula)(
            push(formula.left, table, trace), push(formula.right, table, trace)
        )
    return formula


def pull_step(
    formula: Formula, table: DecidabilityTable, trace: Optional[Trace] = None
) -> Optional[Formula]:
    """Apply one pull rule at the root, or return ``None``."""
    if isinstance(formula, Not) and isinstance(formula.body, Not):
        if _guard(table, trace, "double negation", formula, formula.body.body):
            return formula.body.body
        return None
    if isinstance(formula, And):
        left, right = formula.left, formula.right
        if isinstance(left, Not) and isinstance(right, Not):
            return Not(Or(left.body, right.body))
        if isinstance(right, Not):
            if _guard(table, trace, "negated implication", formula, left):
                return Not(Implies(left, right.body))
        return None
    if isinstance(formula, Or):
        left, right = formula.left, formula.right
        if isinstance(left, Not) and isinstance(right, Not):
            if _guard(table, trace, "de Morgan", formula, left.body):
                return Not(And(left.body, right.body))
        return None
    if isinstance(formula, Implies):
        left, right = formula.left, formula.right
        if isinstance(left, Not) and isinstance(right, Not):
            if _guard(table, trace, "contraposition", formula, left.body):
                return Implies(right.body, left.body)
        return None
    return None


def pull(
    formula: Formula, table: DecidabilityTable, trace: Optional[Trace] = None
) -> Formula:
    """Collect negations towards the root, bottom-up."""
    if isinstance(formula, Not):
        formula = Not(pull(formula.body, table, trace))
    elif isinstance(formula, BINARY_CONNECTIVES):
        formula = type(formula)(
            pull(formula.left, table, trace), pull(formula.right, table, trace)
        )
    stepped = pull_step(formula, table, trace)
    while stepped is not None:
        formula = stepped
        stepped = pull_step(formula, table, trace)
    return formula


def normalize(
    formula: Formula,
    table: DecidabilityTable,
    use_pull: bool = True,
    trace: Optional[Trace] = None,
) -> Formula:
    """Push, then keep the pulled form if it has strictly fewer negations."""
    pushed = push(formula, table, trace)
    if not use_pull:
        return pushed
    pulled = pull(pushed, table, trace)
    if negation_count(pulled) < negation_count(pushed):
        return pulled
    return pushed


def normalize_context(
    context: Context,
    table: DecidabilityTable,
    use_pull: bool = True,
    trace: Optional[Trace] = None,
) -> Context:
    hypotheses = []
    for hypothesis in context.hypotheses:
        formula = normalize(hypothesis.formula, table, use_pull, trace)
        if formula != hypothesis.formula:
            if trace is not None:
                trace.step(STAGE, f"{hypothesis.name}: {formula}")
            hypothesis = Hypothesis(hypothesis.name, formula, hypothesis.injected)
        hypotheses.append(hypothesis)
    goal = normalize(context.goal, table, use_pull, trace)
    if goal != context.goal and trace is not None:
        trace.step(STAGE, f"goal: {goal}")
    return Context(tuple(hypotheses), goal)
