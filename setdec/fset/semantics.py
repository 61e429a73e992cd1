"""Finite-model semantics of the fragment.

Elements are the integers ``0 .. n-1`` and sets are frozensets of them.  The
exhaustive :func:`find_countermodel` is meant for small instances: it backs
the soundness checks of the test-suite and the ``--crosscheck`` option.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from setdec.fset.context import Hypothesis
from setdec.fset.language import (
    Add,
    And,
    App,
    Bottom,
    Diff,
    EmptySet,
    Eq,
    ForAll,
    Formula,
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
    Term,
    Top,
    Union,
    Var,
    set_variable_names,
    variables,
)


@dataclass
class Interpretation:
    domain: Sequence[int]
    elements: Dict[str, int] = field(default_factory=dict)
    sets: Dict[str, FrozenSet[int]] = field(default_factory=dict)
    predicates: Dict[str, Callable[..., bool]] = field(default_factory=dict)

    def __str__(self):
        parts = [f"{name}={value}" for name, value in sorted(self.elements.items())]
        parts += [
            f"{name}={{{', '.join(map(str, sorted(value)))}}}"
            for name, value in sorted(self.sets.items())
        ]
        return ", ".join(parts)


def evaluate_term(term: Term, interp: Interpretation):
    if isinstance(term, Var):
        if term.name in interp.sets:
            return interp.sets[term.name]
        return interp.elements[term.name]
    if isinstance(term, EmptySet):
        return frozenset()
    if isinstance(term, Singleton):
        return frozenset([evaluate_term(term.elem, interp)])
    if isinstance(term, Add):
        return evaluate_term(term.base, interp) | {evaluate_term(term.elem, interp)}
    if isinstance(term, Remove):
        return evaluate_term(term.base, interp) - {evaluate_term(term.elem, interp)}
    if isinstance(term, Union):
        return evaluate_term(term.left, interp) | evaluate_term(term.right, interp)
    if isinstance(term, Inter):
        return evaluate_term(term.left, interp) & evaluate_term(term.right, interp)
    if isinstance(term, Diff):
        return evaluate_term(term.left, interp) - evaluate_term(term.right, interp)
    if isinstance(term, App):
        raise ValueError(f"no interpretation for function application {term}")
    raise TypeError(f"not a term: {term!r}")


def holds(formula: Formula, interp: Interpretation) -> bool:
    """Truth of ``formula`` in ``interp``."""
    if isinstance(formula, Top):
        return True
    if isinstance(formula, Bottom):
        return False
    if isinstance(formula, Eq):
        return evaluate_term(formula.left, interp) == evaluate_term(formula.right, interp)
    if isinstance(formula, In):
        return evaluate_term(formula.elem, interp) in evaluate_term(
            formula.container, interp
        )
    if isinstance(formula, IsEmpty):
        return not evaluate_term(formula.container, interp)
    if isinstance(formula, Subset):
        return evaluate_term(formula.left, interp) <= evaluate_term(formula.right, interp)
    if isinstance(formula, SetEq):
        return evaluate_term(formula.left, interp) == evaluate_term(formula.right, interp)
    if isinstance(formula, Pred):
        args = [evaluate_term(arg, interp) for arg in formula.args]
        return bool(interp.predicates[formula.name](*args))
    if isinstance(formula, Not):
        return not holds(formula.body, interp)
    if isinstance(formula, And):
        return holds(formula.left, interp) and holds(formula.right, interp)
    if isinstance(formula, Or):
        return holds(formula.left, interp) or holds(formula.right, interp)
    if isinstance(formula, Implies):
        return not holds(formula.left, interp) or holds(formula.right, interp)
    if isinstance(formula, Iff):
        return holds(formula.left, interp) == holds(formula.right, interp)
    if isinstance(formula, ForAll):
        name = formula.variable.name
        saved = interp.elements.get(name)
        try:
            for value in interp.domain:
                interp.elements[name] = value
                if not holds(formula.body, interp):
                    return False
            return True
        finally:
            if saved is None:
                interp.elements.pop(name, None)
            else:
                interp.elements[name] = saved
    raise TypeError(f"not a formula: {formula!r}")


def interpretations(
    formulas: Iterable[Formula], domain_size: int = 3
) -> Iterable[Interpretation]:
    """Every interpretation of the free variables of ``formulas``."""
    formulas = list(formulas)
    set_names = set_variable_names(formulas)
    names = sorted({v.name for f in formulas for v in variables(f)})
    element_names = [name for name in names if name not in set_names]
    set_names = sorted(set_names)
    domain = list(range(domain_size))
    subsets = [
        frozenset(value for value in domain if mask >> value & 1)
        for mask in range(1 << domain_size)
    ]
    for element_values in itertools.product(domain, repeat=len(element_names)):
        for set_values in itertools.product(subsets, repeat=len(set_names)):
            yield Interpretation(
                domain,
                dict(zip(element_names, element_values)),
                dict(zip(set_names, set_values)),
            )


def find_countermodel(
    hypotheses: Iterable, goal: Formula, domain_size: int = 3
) -> Optional[Interpretation]:
    """An interpretation satisfying every hypothesis and falsifying ``goal``."""
    facts: List[Formula] = [
        h.formula if isinstance(h, Hypothesis) else h for h in hypotheses
    ]
    for interp in interpretations(facts + [goal], domain_size):
        if all(holds(fact, interp) for fact in facts) and not holds(goal, interp):
            return interp
    return None
