"""Stage 6: assert excluded middle for the atoms the search may split on."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from setdec.fset.context import Context, Hypothesis
from setdec.fset.decidability import DecidabilityTable
from setdec.fset.language import (
    Atom,
    Formula,
    Iff,
    Implies,
    Not,
    Or,
    atoms,
    orient,
)
from setdec.fset.trace import DiagnosticKind, Trace

logger = logging.getLogger(__name__)

STAGE = "inject"


def negated_atoms(formula: Formula, negated: bool = False) -> Iterator[Atom]:
    """Atoms in negative position: under ``not``, in an implication premise,
    or on either side of an ``iff``."""
    if isinstance(formula, Atom):
        if negated:
            yield orient(formula)
    elif isinstance(formula, Not):
        yield from negated_atoms(formula.body, True)
    elif isinstance(formula, Implies):
        yield from negated_atoms(formula.left, True)
        yield from negated_atoms(formula.right, negated)
    elif isinstance(formula, Iff):
        yield from negated_atoms(formula.left, True)
        yield from negated_atoms(formula.right, True)
    else:
        for child in formula.children():
            if isinstance(child, Formula):
                yield from negated_atoms(child, negated)


def decidability_fact(atom: Atom) -> Formula:
    return Or(atom, Not(atom))


def inject(
    context: Context, table: DecidabilityTable, trace: Optional[Trace] = None
) -> Context:
    """Add ``A or not A`` once for every distinct atom occurring negated.

    The goal is refuted by the search, so all of its atoms count as negated.
    """
    candidates: List[Atom] = []
    for hypothesis in context.hypotheses:
        candidates.extend(negated_atoms(hypothesis.formula))
    candidates.extend(orient(atom) for atom in atoms(context.goal))

    facts = context.facts()
    hypotheses = list(context.hypotheses)
    seen = set()
    for atom in candidates:
        if atom in seen:
            continue
        seen.add(atom)
        if atom in facts or Not(atom) in facts:
            continue
        if not table.is_decidable(atom):
            if trace is not None:
                trace.diagnose(
                    DiagnosticKind.DECIDABILITY_OBLIGATION_UNMET,
                    f"no excluded middle for {atom}",
                )
            continue
        current = Context(tuple(hypotheses), context.goal)
        hypothesis = Hypothesis(current.fresh_name("D"), decidability_fact(atom), True)
        hypotheses.append(hypothesis)
        if trace is not None:
            trace.step(STAGE, str(hypothesis))
    return Context(tuple(hypotheses), context.goal)
