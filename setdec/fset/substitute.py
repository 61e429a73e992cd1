"""Stage 5: eliminate equations by substitution.

Element equalities (``Eq``) and set equalities (``SetEq``) are both viewed as
an :class:`Equation`, so one elimination loop serves both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from setdec.fset.context import Context, Hypothesis
from setdec.fset.language import Eq, Formula, SetEq, Term, Var, occurs
from setdec.fset.rewrite import rewrite
from setdec.fset.trace import Trace

logger = logging.getLogger(__name__)

STAGE = "substitute"


@dataclass(frozen=True)
class Equation:
    """``lhs = rhs`` together with the atom class it was read from."""

    kind: type
    lhs: Term
    rhs: Term

    @classmethod
    def read(cls, formula: Formula) -> Optional["Equation"]:
        if isinstance(formula, (Eq, SetEq)):
            return cls(type(formula), formula.left, formula.right)
        return None

    def to_formula(self) -> Formula:
        return self.kind(self.lhs, self.rhs)

    def is_trivial(self) -> bool:
        return self.lhs == self.rhs

    def elimination(self) -> Optional[Tuple[Var, Term]]:
        """The variable to eliminate and its replacement, if any."""
        if isinstance(self.rhs, Var) and not occurs(self.rhs, self.lhs):
            return self.rhs, self.lhs
        if isinstance(self.lhs, Var) and not occurs(self.lhs, self.rhs):
            return self.lhs, self.rhs
        return None


def apply_substitution(formula: Formula, var: Var, term: Term) -> Formula:
    """Replace ``var`` by ``term`` and restore the rewritten normal form."""
    return rewrite(formula.replace(var, term))


def substitute(context: Context, trace: Optional[Trace] = None) -> Context:
    """Eliminate equations with a variable side until none is left."""
    hypotheses = list(context.hypotheses)
    goal = context.goal
    # every round removes one hypothesis
    while True:
        for index, hypothesis in enumerate(hypotheses):
            equation = Equation.read(hypothesis.formula)
            if equation is None:
                continue
            if equation.is_trivial():
                if trace is not None:
                    trace.step(STAGE, f"clear trivial {hypothesis}")
                del hypotheses[index]
                break
            elimination = equation.elimination()
            if elimination is None:
                continue
            var, term = elimination
            if trace is not None:
                trace.step(
                    STAGE, f"subst {var} := {term} using {hypothesis.name}"
                )
            del hypotheses[index]
            hypotheses = [
                Hypothesis(h.name, apply_substitution(h.formula, var, term), h.injected)
                for h in hypotheses
            ]
            goal = apply_substitution(goal, var, term)
            break
        else:
            return Context(tuple(hypotheses), goal)
