"""Partial evaluation of formulae under a set of known literals."""

from __future__ import annotations

from typing import List, Optional, Tuple

from setdec.fset.language import (
    BINARY_CONNECTIVES,
    FALSE,
    TRUE,
    And,
    Atom,
    Bottom,
    Eq,
    Formula,
    Iff,
    Implies,
    Not,
    Or,
    Top,
    orient,
)


def as_literal(formula: Formula) -> Optional[Tuple[Atom, bool]]:
    if isinstance(formula, Atom):
        return orient(formula), True
    if isinstance(formula, Not) and isinstance(formula.body, Atom):
        return orient(formula.body), False
    return None


def simplify(formula: Formula, true_atoms, false_atoms) -> Formula:
    """Evaluate the known atoms and fold the constants."""
    if isinstance(formula, (Top, Bottom)):
        return formula
    if isinstance(formula, Atom):
        atom = orient(formula)
        if isinstance(atom, Eq) and atom.left == atom.right:
            return TRUE
        if atom in true_atoms:
            return TRUE
        if atom in false_atoms:
            return FALSE
        return atom
    if isinstance(formula, Not):
        body = simplify(formula.body, true_atoms, false_atoms)
        if body == TRUE:
            return FALSE
        if body == FALSE:
            return TRUE
        return Not(body)
    if not isinstance(formula, BINARY_CONNECTIVES):
        return formula

    left = simplify(formula.left, true_atoms, false_atoms)
    right = simplify(formula.right, true_atoms, false_atoms)
    if isinstance(formula, And):
        if FALSE in (left, right):
            return FALSE
        if left == TRUE:
            return right
        if right == TRUE:
            return left
        return And(left, right)
    if isinstance(formula, Or):
        if TRUE in (left, right):
            return TRUE
        if left == FALSE:
            return right
        if right == FALSE:
            return left
        return Or(left, right)
    if isinstance(formula, Implies):
        if left == FALSE or right == TRUE:
            return TRUE
        if left == TRUE:
            return right
        if right == FALSE:
            return Not(left)
        return Implies(left, right)
    if isinstance(formula, Iff):
        if left == TRUE:
            return right
        if right == TRUE:
            return left
        if left == FALSE:
            return Not(right)
        if right == FALSE:
            return Not(left)
        return Iff(left, right)
    return formula


def split_cases(formula: Formula) -> Optional[List[Formula]]:
    """The exhaustive cases of a disjunctive formula, or ``None``."""
    if isinstance(formula, Or):
        return [formula.left, formula.right]
    if isinstance(formula, Implies):
        return [Not(formula.left), formula.right]
    if isinstance(formula, Iff):
        return [
            And(formula.left, formula.right),
            And(Not(formula.left), Not(formula.right)),
        ]
    return None
