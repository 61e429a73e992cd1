"""The decidability fact base.

A rewrite that is only classically valid may fire on a sub-formula only when
the table can tell why that sub-formula is decidable.  ``Eq`` and ``In`` are
decidable out of the box; callers extend the table with further atom shapes
or with named predicates.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from setdec.fset.language import (
    BINARY_CONNECTIVES,
    Atom,
    Bottom,
    Eq,
    Formula,
    In,
    Not,
    Pred,
    Top,
)

Strategy = Callable[[Atom], Optional[str]]


class DecidabilityTable:
    """Map from atom shape to a strategy that discharges ``A or not A``."""

    def __init__(self) -> None:
        self._strategies: Dict[type, Strategy] = {}
        self._predicates: Dict[str, str] = {}

    def register(self, shape: type, strategy: Strategy) -> "DecidabilityTable":
        """Register ``strategy`` for atoms of class ``shape``.

        The strategy returns the name of the fact that proves the atom
        decidable, or ``None`` when it cannot.
        """
        self._strategies[shape] = strategy
        return self

    def register_predicate(self, name: str, reason: Optional[str] = None):
        """Declare every ``Pred`` atom called ``name`` decidable."""
        self._predicates[name] = reason or f"{name}_dec"
        return self

    def declares(self, atom: Atom) -> bool:
        if isinstance(atom, Pred):
            return atom.name in self._predicates
        return type(atom) in self._strategies

    def reason(self, formula: Formula) -> Optional[str]:
        """Why ``formula`` is decidable, or ``None`` if the table cannot tell."""
        if isinstance(formula, (Top, Bottom)):
            return "constant"
        if isinstance(formula, Pred):
            return self._predicates.get(formula.name)
        if isinstance(formula, Atom):
            strategy = self._strategies.get(type(formula))
            return strategy(formula) if strategy is not None else None
        if isinstance(formula, Not):
            return self.reason(formula.body)
        if isinstance(formula, BINARY_CONNECTIVES):
            if self.reason(formula.left) and self.reason(formula.right):
                return "compound"
        return None

    def is_decidable(self, formula: Formula) -> bool:
        return self.reason(formula) is not None

    def copy(self) -> "DecidabilityTable":
        table = DecidabilityTable()
        table._strategies = dict(self._strategies)
        table._predicates = dict(self._predicates)
        return table


def default_table() -> DecidabilityTable:
    """Element equality and membership are decidable."""
    return (
        DecidabilityTable()
        .register(Eq, lambda atom: "eq_dec")
        .register(In, lambda atom: "mem_dec")
    )
