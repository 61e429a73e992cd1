"""Stage 7: refutation by case splitting.

The negated goal joins the hypotheses.  A branch is closed when a formula
simplifies to ``false``, when an atom is assumed both true and false, or when
``t != t`` is assumed.  Literals ``x = t`` with a variable side are eliminated
by substitution as soon as they surface.  Splitting first consumes the
injected excluded-middle facts and then unfolds the remaining disjunctive
formulae; every split strictly shrinks the branch, so the search terminates.
Closed leaves keep the literals of their branch so the certificate can be
checked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

from setdec.fset.certificate import ProofNode, Rule
from setdec.fset.context import Context
from setdec.fset.decidability import DecidabilityTable
from setdec.fset.evaluate import as_literal, simplify, split_cases
from setdec.fset.language import (
    FALSE,
    TRUE,
    And,
    Atom,
    Eq,
    Formula,
    Iff,
    Implies,
    Not,
    Or,
    Term,
    Var,
    orient,
)
from setdec.fset.negation import push_step
from setdec.fset.substitute import Equation, apply_substitution
from setdec.fset.trace import DiagnosticKind, Trace
from setdec.utils.exceptions import SearchBudgetExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Branch:
    pending: Tuple[Formula, ...]
    candidates: Tuple[Atom, ...]
    true_atoms: FrozenSet[Atom] = frozenset()
    false_atoms: FrozenSet[Atom] = frozenset()

    def is_decided(self, atom: Atom) -> bool:
        if isinstance(atom, Eq) and atom.left == atom.right:
            return True
        return atom in self.true_atoms or atom in self.false_atoms


def _sorted(atoms) -> Tuple[Atom, ...]:
    return tuple(sorted(atoms, key=str))


class ClosureSearch:
    """Case-split search over a fully preprocessed context."""

    def __init__(
        self,
        table: DecidabilityTable,
        max_splits: Optional[int] = None,
        trace: Optional[Trace] = None,
    ):
        self.table = table
        self.max_splits = max_splits
        self.trace = trace if trace is not None else Trace()
        self.splits = 0

    def refute(self, context: Context) -> ProofNode:
        """Search for a closed tree refuting ``hypotheses and not goal``."""
        pending: List[Formula] = []
        candidates: List[Atom] = []
        for hypothesis in context.hypotheses:
            formula = hypothesis.formula
            if hypothesis.injected and isinstance(formula, Or):
                atom = orient(formula.left)
                if atom not in candidates:
                    candidates.append(atom)
            else:
                pending.append(formula)
        pending.append(Not(context.goal))
        return self._search(Branch(tuple(pending), tuple(candidates)))

    def _search(self, branch: Branch) -> ProofNode:
        closed, branch, substitutions = self._propagate(branch)
        node = closed if closed is not None else self._split(branch)
        for var, term in reversed(substitutions):
            if node.rule is Rule.STUCK:
                break
            node = ProofNode(Rule.SUBSTITUTE, f"{var} := {term}", children=[node])
        return node

    def _propagate(
        self, branch: Branch
    ) -> Tuple[Optional[ProofNode], Branch, List[Tuple[Var, Term]]]:
        """Consume literals and conjunctions until nothing new is learned."""
        true_atoms = set(branch.true_atoms)
        false_atoms = set(branch.false_atoms)
        candidates = list(branch.candidates)
        substitutions: List[Tuple[Var, Term]] = []
        queue = list(branch.pending)
        residual: List[Formula] = []

        while True:
            learned = False
            while queue:
                formula = queue.pop(0)
                literal = as_literal(formula)
                if literal is None:
                    original = formula
                    formula = simplify(formula, true_atoms, false_atoms)
                    if formula == FALSE:
                        leaf = ProofNode(
                            Rule.FALSITY,
                            f"{original} evaluates to false",
                            formula=original,
                            true_atoms=_sorted(true_atoms),
                            false_atoms=_sorted(false_atoms),
                        )
                        return leaf, branch, substitutions
                    if formula == TRUE:
                        continue
                    literal = as_literal(formula)

                if literal is not None:
                    atom, positive = literal
                    if isinstance(atom, Eq) and atom.left == atom.right:
                        if positive:
                            continue
                        leaf = ProofNode(Rule.REFLEXIVITY, f"not {atom}", atom=atom)
                        return leaf, branch, substitutions
                    if atom in (false_atoms if positive else true_atoms):
                        leaf = ProofNode(
                            Rule.CONTRADICTION,
                            f"{atom} and not {atom}",
                            atom=atom,
                            true_atoms=_sorted(true_atoms | {atom}),
                            false_atoms=_sorted(false_atoms | {atom}),
                        )
                        return leaf, branch, substitutions
                    if atom in (true_atoms if positive else false_atoms):
                        continue
                    elimination = None
                    if positive and isinstance(atom, Eq):
                        elimination = Equation(Eq, atom.left, atom.right).elimination()
                    if elimination is not None:
                        var, term = elimination
                        logger.debug("Substituting %s := %s in branch", var, term)
                        substitutions.append((var, term))
                        queue = [
                            apply_substitution(f, var, term)
                            for f in queue
                            + residual
                            + sorted(true_atoms, key=str)
                            + [Not(a) for a in sorted(false_atoms, key=str)]
                        ]
                        candidates = _dedupe(
                            apply_substitution(a, var, term) for a in candidates
                        )
                        true_atoms.clear()
                        false_atoms.clear()
                        residual = []
                    elif positive:
                        true_atoms.add(atom)
                    else:
                        false_atoms.add(atom)
                    learned = True
                    continue

                if isinstance(formula, And):
                    queue[:0] = [formula.left, formula.right]
                    continue
                if isinstance(formula, Not):
                    stepped = push_step(formula, self.table, self.trace)
                    if stepped is not None:
                        queue.insert(0, stepped)
                        continue
                residual.append(formula)

            if not learned or not residual:
                break
            queue, residual = residual, []

        propagated = Branch(
            tuple(residual),
            tuple(candidates),
            frozenset(true_atoms),
            frozenset(false_atoms),
        )
        return None, propagated, substitutions

    def _split(self, branch: Branch) -> ProofNode:
        for atom in branch.candidates:
            if branch.is_decided(atom):
                continue
            remaining = tuple(a for a in branch.candidates if a != atom)
            return self._branch(
                f"{atom} or not {atom}",
                branch,
                [atom, Not(atom)],
                candidates=remaining,
                atom=atom,
            )
        for index, formula in enumerate(branch.pending):
            if not self._splittable(formula):
                continue
            rest = branch.pending[:index] + branch.pending[index + 1:]
            return self._branch(
                str(formula),
                Branch(rest, branch.candidates, branch.true_atoms, branch.false_atoms),
                split_cases(formula),
                formula=formula,
            )
        return ProofNode(Rule.STUCK, _describe(branch))

    def _splittable(self, formula: Formula) -> bool:
        if isinstance(formula, Or):
            return True
        if isinstance(formula, Implies):
            return self._decidable(formula, formula.left)
        if isinstance(formula, Iff):
            return self._decidable(formula, formula.left, formula.right)
        return False

    def _decidable(self, formula: Formula, *subformulas: Formula) -> bool:
        for sub in subformulas:
            if not self.table.is_decidable(sub):
                self.trace.diagnose(
                    DiagnosticKind.DECIDABILITY_OBLIGATION_UNMET,
                    f"cannot unfold {formula}: {sub} is not known to be decidable",
                )
                return False
        return True

    def _branch(
        self,
        detail: str,
        branch: Branch,
        cases: Sequence[Formula],
        candidates: Optional[Tuple[Atom, ...]] = None,
        atom: Optional[Atom] = None,
        formula: Optional[Formula] = None,
    ) -> ProofNode:
        self.splits += 1
        if self.max_splits is not None and self.splits > self.max_splits:
            raise SearchBudgetExhausted(self.max_splits)
        logger.debug("Split %d on %s", self.splits, detail)
        if candidates is None:
            candidates = branch.candidates
        children = []
        for case in cases:
            child = self._search(
                Branch(
                    (case,) + branch.pending,
                    candidates,
                    branch.true_atoms,
                    branch.false_atoms,
                )
            )
            if child.rule is Rule.STUCK:
                return child
            children.append(child)
        return ProofNode(
            Rule.SPLIT,
            detail,
            atom=atom,
            assumptions=tuple(cases),
            children=children,
            formula=formula,
        )


def _dedupe(atoms) -> List[Atom]:
    found: List[Atom] = []
    for atom in atoms:
        atom = orient(atom)
        if atom not in found:
            found.append(atom)
    return found


def _describe(branch: Branch) -> str:
    parts = [str(a) for a in sorted(branch.true_atoms, key=str)]
    parts += [f"not {a}" for a in sorted(branch.false_atoms, key=str)]
    parts += [str(f) for f in branch.pending]
    return ", ".join(parts) if parts else "no facts"
