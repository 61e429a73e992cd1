"""Certificates produced for ``Proved`` verdicts.

A certificate is the list of deterministic pipeline steps followed by the
case-split tree of the closure search.  Every leaf of a closed tree names the
reason the branch is contradictory and keeps the literals that witness it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from setdec.fset.evaluate import simplify, split_cases
from setdec.fset.language import FALSE, Atom, Eq, Formula, Not
from setdec.fset.trace import Step


class Rule(Enum):
    REFLEXIVITY = "reflexivity"
    CONTRADICTION = "contradiction"
    FALSITY = "falsity"
    SUBSTITUTE = "substitute"
    SPLIT = "split"
    STUCK = "stuck"


CLOSING_RULES = (Rule.REFLEXIVITY, Rule.CONTRADICTION, Rule.FALSITY)


@dataclass
class ProofNode:
    """One node of the case-split tree.

    ``atom`` is the closing atom of a leaf or the atom of an excluded-middle
    split; ``assumptions`` holds what each child branch assumes.  ``formula``
    is the fact a ``falsity`` leaf evaluates or the formula a split unfolds,
    and ``true_atoms``/``false_atoms`` are the literals of a closed branch.
    """

    rule: Rule
    detail: str = ""
    atom: Optional[Formula] = None
    assumptions: Tuple[Formula, ...] = ()
    children: List["ProofNode"] = field(default_factory=list)
    formula: Optional[Formula] = None
    true_atoms: Tuple[Atom, ...] = ()
    false_atoms: Tuple[Atom, ...] = ()

    def is_closed(self) -> bool:
        if self.rule in CLOSING_RULES:
            return True
        if self.rule is Rule.STUCK or not self.children:
            return False
        return all(child.is_closed() for child in self.children)

    def size(self) -> int:
        return 1 + sum(child.size() for child in self.children)

    def depth(self) -> int:
        return 1 + max((child.depth() for child in self.children), default=0)

    def render(self, indent: int = 0) -> List[str]:
        pad = "  " * indent
        line = f"{pad}{self.rule.value}"
        if self.detail:
            line += f": {self.detail}"
        lines = [line]
        for index, child in enumerate(self.children):
            if index < len(self.assumptions):
                lines.append(f"{pad}  case {self.assumptions[index]}")
            lines.extend(child.render(indent + 2))
        return lines


@dataclass
class Certificate:
    steps: List[Step]
    tree: ProofNode

    def render(self) -> str:
        lines = [str(step) for step in self.steps]
        lines.extend(self.tree.render())
        return "\n".join(lines)


def _check(node: ProofNode, errors: List[str]) -> None:
    if node.rule is Rule.STUCK:
        errors.append(f"open branch: {node.detail}")
    elif node.rule is Rule.REFLEXIVITY:
        if not (isinstance(node.atom, Eq) and node.atom.left == node.atom.right):
            errors.append(f"reflexivity leaf without t = t: {node.atom}")
    elif node.rule is Rule.CONTRADICTION:
        if node.atom is None:
            errors.append("contradiction leaf without an atom")
        elif node.atom not in node.true_atoms or node.atom not in node.false_atoms:
            errors.append(f"{node.atom} is not both assumed and refuted")
    elif node.rule is Rule.FALSITY:
        if node.formula is None:
            errors.append("falsity leaf without a formula")
        elif simplify(node.formula, node.true_atoms, node.false_atoms) != FALSE:
            errors.append(f"{node.formula} does not evaluate to false")
    elif node.rule is Rule.SUBSTITUTE:
        if len(node.children) != 1:
            errors.append(f"substitution with {len(node.children)} children")
    elif node.rule is Rule.SPLIT:
        if len(node.children) < 2 or len(node.children) != len(node.assumptions):
            errors.append(f"malformed split on {node.detail}")
        elif node.atom is not None:
            if node.assumptions != (node.atom, Not(node.atom)):
                errors.append(f"split on {node.atom} does not cover both cases")
        elif node.formula is None:
            errors.append(f"split on {node.detail} without a formula")
        elif list(node.assumptions) != split_cases(node.formula):
            errors.append(f"split on {node.formula} does not cover its cases")
    if node.rule in CLOSING_RULES and node.children:
        errors.append(f"{node.rule.value} leaf with children")
    for child in node.children:
        _check(child, errors)


def verify_certificate(certificate: Certificate) -> List[str]:
    """Return the problems found in ``certificate``; empty when it is sound.

    Each leaf is checked against the literals recorded for its branch and
    each split against the cases of the formula it unfolds.
    """
    errors: List[str] = []
    _check(certificate.tree, errors)
    return errors
