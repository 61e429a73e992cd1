"""Hypotheses and goal of one proof attempt."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Set, Tuple, Union

from setdec.fset.language import Formula, Var, variables


@dataclass(frozen=True)
class Hypothesis:
    name: str
    formula: Formula
    injected: bool = False

    def __str__(self):
        return f"{self.name}: {self.formula}"


@dataclass(frozen=True)
class Context:
    """An ordered tuple of hypotheses plus the goal."""

    hypotheses: Tuple[Hypothesis, ...]
    goal: Formula

    @classmethod
    def build(
        cls, hypotheses: Iterable[Union[Hypothesis, Formula]], goal: Formula
    ) -> "Context":
        """Accept bare formulae as well; they are named ``H0``, ``H1``, ..."""
        named = []
        for index, hypothesis in enumerate(hypotheses):
            if not isinstance(hypothesis, Hypothesis):
                hypothesis = Hypothesis(f"H{index}", hypothesis)
            named.append(hypothesis)
        return cls(tuple(named), goal)

    def formulas(self) -> List[Formula]:
        return [h.formula for h in self.hypotheses] + [self.goal]

    def facts(self) -> Set[Formula]:
        return {h.formula for h in self.hypotheses}

    def with_hypotheses(self, hypotheses: Sequence[Hypothesis]) -> "Context":
        return replace(self, hypotheses=tuple(hypotheses))

    def with_goal(self, goal: Formula) -> "Context":
        return replace(self, goal=goal)

    def fresh_name(self, prefix: str) -> str:
        taken = {h.name for h in self.hypotheses}
        for index in itertools.count():
            name = f"{prefix}{index}"
            if name not in taken:
                return name
        raise AssertionError("unreachable")

    def fresh_variable(self, prefix: str) -> Var:
        taken = {v.name for f in self.formulas() for v in variables(f)}
        for index in itertools.count():
            name = f"{prefix}{index}"
            if name not in taken:
                return Var(name)
        raise AssertionError("unreachable")

    def __str__(self):
        lines = [str(h) for h in self.hypotheses]
        lines.append(f"goal: {self.goal}")
        return "\n".join(lines)
