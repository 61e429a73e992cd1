"""Random problems over two element and two set variables."""

import random

import pytest

from setdec.fset.language import (
    Add,
    And,
    Diff,
    EmptySet,
    Eq,
    Iff,
    Implies,
    In,
    Inter,
    IsEmpty,
    Not,
    Or,
    Remove,
    SetEq,
    Singleton,
    Subset,
    Union,
    Var,
)

ELEMENTS = [Var("x"), Var("y")]
SETS = [Var("s"), Var("t")]


class ProblemGenerator:
    """Hypotheses and goal in the fragment, drawn from a seeded ``Random``."""

    def __init__(self, seed: int):
        self.rng = random.Random(seed)

    def element(self):
        return self.rng.choice(ELEMENTS)

    def set_term(self, depth: int):
        if depth == 0 or self.rng.random() < 0.5:
            return self.rng.choice(SETS)
        kind = self.rng.randrange(7)
        if kind == 0:
            return EmptySet()
        if kind == 1:
            return Singleton(self.element())
        if kind == 2:
            return Add(self.element(), self.set_term(depth - 1))
        if kind == 3:
            return Remove(self.element(), self.set_term(depth - 1))
        constructor = [Union, Inter, Diff][kind - 4]
        return constructor(self.set_term(depth - 1), self.set_term(depth - 1))

    def atom(self):
        if self.rng.random() < 0.3:
            return Eq(self.element(), self.element())
        return In(self.element(), self.set_term(1))

    def formula(self, depth: int):
        if depth == 0 or self.rng.random() < 0.3:
            return self.atom()
        kind = self.rng.randrange(5)
        if kind == 0:
            return Not(self.formula(depth - 1))
        connective = [And, Or, Implies, Iff][kind - 1]
        return connective(self.formula(depth - 1), self.formula(depth - 1))

    def relation(self):
        kind = self.rng.randrange(3)
        if kind == 0:
            return IsEmpty(self.set_term(1))
        constructor = [Subset, SetEq][kind - 1]
        return constructor(self.set_term(1), self.set_term(1))

    def fact(self):
        if self.rng.random() < 0.25:
            return self.relation()
        return self.formula(2)

    def problem(self):
        hypotheses = [self.fact() for _ in range(self.rng.randint(0, 3))]
        return hypotheses, self.fact()


@pytest.fixture
def problems():
    """Yield ``count`` reproducible random problems."""

    def generate(count: int, seed: int = 0):
        generator = ProblemGenerator(seed)
        for _ in range(count):
            yield generator.problem()

    return generate
