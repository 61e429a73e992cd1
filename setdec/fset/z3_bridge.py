"""Translation of the fragment into z3's theory of sets.

Elements live in an uninterpreted sort ``Elem`` and sets in ``SetSort(Elem)``.
Variables and function symbols are sorted by how they are used: one that
appears as the container of a membership or as an argument of a set relation
is a set, everything else is an element.
"""

from typing import Dict, Iterable, Optional

import z3

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
    set_function_names,
    set_variable_names,
)


class Z3Translator:
    """Map terms and formulae to z3 expressions, sharing one signature."""

    def __init__(
        self, set_names: Iterable[str] = (), set_functions: Iterable[str] = ()
    ):
        self.elem = z3.DeclareSort("Elem")
        self.set_sort = z3.SetSort(self.elem)
        self.set_names = set(set_names)
        self.set_functions = set(set_functions)
        self.constants: Dict[str, z3.ExprRef] = {}
        self.functions: Dict[str, z3.FuncDeclRef] = {}

    def _constant(self, name: str, sort=None) -> z3.ExprRef:
        if name not in self.constants:
            if sort is None:
                sort = self.set_sort if name in self.set_names else self.elem
            self.constants[name] = z3.Const(name, sort)
        return self.constants[name]

    def _function(self, name: str, args, result) -> z3.FuncDeclRef:
        key = f"{name}/{len(args)}"
        if key not in self.functions:
            sorts = [arg.sort() for arg in args] + [result]
            self.functions[key] = z3.Function(name, *sorts)
        return self.functions[key]

    def term(self, term: Term) -> z3.ExprRef:
        if isinstance(term, Var):
            return self._constant(term.name)
        if isinstance(term, App):
            result = self.set_sort if term.name in self.set_functions else self.elem
            args = [self.term(arg) for arg in term.args]
            if not args:
                return self._constant(term.name, result)
            return self._function(term.name, args, result)(*args)
        if isinstance(term, EmptySet):
            return z3.EmptySet(self.elem)
        if isinstance(term, Singleton):
            return z3.SetAdd(z3.EmptySet(self.elem), self.term(term.elem))
        if isinstance(term, Add):
            return z3.SetAdd(self.term(term.base), self.term(term.elem))
        if isinstance(term, Remove):
            return z3.SetDel(self.term(term.base), self.term(term.elem))
        if isinstance(term, Union):
            return z3.SetUnion(self.term(term.left), self.term(term.right))
        if isinstance(term, Inter):
            return z3.SetIntersect(self.term(term.left), self.term(term.right))
        if isinstance(term, Diff):
            return z3.SetDifference(self.term(term.left), self.term(term.right))
        raise TypeError(f"not a term: {term!r}")

    def formula(self, formula: Formula) -> z3.BoolRef:
        if isinstance(formula, Top):
            return z3.BoolVal(True)
        if isinstance(formula, Bottom):
            return z3.BoolVal(False)
        if isinstance(formula, (Eq, SetEq)):
            return self.term(formula.left) == self.term(formula.right)
        if isinstance(formula, In):
            return z3.IsMember(self.term(formula.elem), self.term(formula.container))
        if isinstance(formula, IsEmpty):
            return self.term(formula.container) == z3.EmptySet(self.elem)
        if isinstance(formula, Subset):
            return z3.IsSubset(self.term(formula.left), self.term(formula.right))
        if isinstance(formula, Pred):
            if not formula.args:
                return z3.Bool(formula.name)
            args = [self.term(arg) for arg in formula.args]
            return self._function(formula.name, args, z3.BoolSort())(*args)
        if isinstance(formula, Not):
            return z3.Not(self.formula(formula.body))
        if isinstance(formula, And):
            return z3.And(self.formula(formula.left), self.formula(formula.right))
        if isinstance(formula, Or):
            return z3.Or(self.formula(formula.left), self.formula(formula.right))
        if isinstance(formula, Implies):
            return z3.Implies(self.formula(formula.left), self.formula(formula.right))
        if isinstance(formula, Iff):
            return self.formula(formula.left) == self.formula(formula.right)
        if isinstance(formula, ForAll):
            name = formula.variable.name
            bound = z3.Const(name, self.elem)
            saved = self.constants.get(name)
            self.constants[name] = bound
            try:
                body = self.formula(formula.body)
            finally:
                if saved is None:
                    del self.constants[name]
                else:
                    self.constants[name] = saved
            return z3.ForAll([bound], body)
        raise TypeError(f"not a formula: {formula!r}")


def prove_with_z3(
    hypotheses: Iterable, goal: Formula, timeout_ms: int = 5000
) -> Optional[bool]:
    """Check ``hypotheses |- goal`` with z3.

    Returns ``True`` when z3 proves the sequent, ``False`` when it finds a
    counter-model and ``None`` when it gives up.
    """
    facts = [h.formula if isinstance(h, Hypothesis) else h for h in hypotheses]
    formulas = facts + [goal]
    translator = Z3Translator(
        set_variable_names(formulas), set_function_names(formulas)
    )
    solver = z3.Solver()
    solver.set("timeout", timeout_ms)
    for fact in facts:
        solver.add(translator.formula(fact))
    solver.add(z3.Not(translator.formula(goal)))
    result = solver.check()
    if result == z3.unsat:
        return True
    if result == z3.sat:
        return False
    return None
