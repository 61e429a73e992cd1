"""Stage 2: instantiate the universal set relations.

``Empty(s)``, ``Subset(s, t)`` and ``Equal(s, t)`` hypotheses are statements
about every element.  They are replaced by their instances at the relevant
element terms, and a set relation in the goal is opened at a fresh element.
Instantiation is interleaved with :mod:`setdec.fset.rewrite` until the set of
relevant element terms is stable.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from setdec.fset.context import Context, Hypothesis
from setdec.fset.language import (
    Iff,
    Implies,
    In,
    IsEmpty,
    Not,
    SetEq,
    Subset,
    Term,
    element_terms,
    is_set_relation,
)
from setdec.fset.rewrite import rewrite, rewrite_context
from setdec.fset.trace import Trace

logger = logging.getLogger(__name__)

STAGE = "instantiate"


def instance(relation, term: Term):
    """The membership statement ``relation`` makes about ``term``."""
    if isinstance(relation, IsEmpty):
        return Not(In(term, relation.container))
    if isinstance(relation, Subset):
        return Implies(In(term, relation.left), In(term, relation.right))
    if isinstance(relation, SetEq):
        return Iff(In(term, relation.left), In(term, relation.right))
    raise TypeError(f"not a set relation: {relation}")


def relevant_elements(context: Context) -> List[Term]:
    found: List[Term] = []
    for formula in context.formulas():
        for term in element_terms(formula):
            if term not in found:
                found.append(term)
    return found


def open_goal(
    context: Context, fresh_prefix: str = "z", trace: Optional[Trace] = None
) -> Context:
    """Replace a set-relation goal by its instance at a fresh element."""
    if not is_set_relation(context.goal):
        return context
    fresh = context.fresh_variable(fresh_prefix)
    goal = instance(context.goal, fresh)
    if trace is not None:
        trace.step(STAGE, f"intro {fresh}: {goal}")
    return context.with_goal(goal)


def instantiate(
    context: Context,
    fresh_prefix: str = "z",
    max_rounds: int = 16,
    trace: Optional[Trace] = None,
) -> Context:
    """Instantiate and rewrite to a joint fixpoint, then drop the universals."""
    trace = trace if trace is not None else Trace()
    context = open_goal(context, fresh_prefix, trace)
    universals = [h for h in context.hypotheses if is_set_relation(h.formula)]
    working = rewrite_context(
        context.with_hypotheses(
            [h for h in context.hypotheses if not is_set_relation(h.formula)]
        ),
        trace,
    )

    done: List[Term] = []
    for _ in range(max_rounds):
        scope = working.with_hypotheses(list(working.hypotheses) + universals)
        fresh_terms = [t for t in relevant_elements(scope) if t not in done]
        if not fresh_terms:
            break
        known = working.facts()
        added: List[Hypothesis] = []
        for universal in universals:
            for term in fresh_terms:
                formula = rewrite(instance(universal.formula, term))
                if formula in known:
                    continue
                known.add(formula)
                added.append(Hypothesis(f"{universal.name}[{term}]", formula))
                trace.step(STAGE, f"{universal.name} at {term}: {formula}")
        done.extend(fresh_terms)
        working = rewrite_context(
            working.with_hypotheses(list(working.hypotheses) + added), trace
        )
    else:
        logger.warning(
            "Instantiation did not stabilise within %d rounds", max_rounds
        )

    for universal in universals:
        trace.step(STAGE, f"clear {universal.name}")
    return working
