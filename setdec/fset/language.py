"""Terms and formulae of the finite-set fragment.

Every node is an immutable dataclass, so structural equality is the
syntactic identity used throughout the decision procedure.  The printed
form of a node is the concrete syntax accepted by
:mod:`setdec.fset.parser`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator, List, Set, Tuple

from setdec.utils.exceptions import MalformedFormulaError


class Node:
    """Common behaviour of terms and formulae."""

    def children(self) -> Iterator["Node"]:
        """Yield the immediate sub-nodes in field order."""
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, tuple):
                for item in value:
                    yield item

    def replace(self, old: "Term", new: "Term"):
        """Replace every occurrence of term ``old`` by ``new``."""
        if self == old:
            return new
        values = []
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Node):
                value = value.replace(old, new)
            elif isinstance(value, tuple):
                value = tuple(item.replace(old, new) for item in value)
            values.append(value)
        return type(self)(*values)

    def _check(self, kind, *values):
        for value in values:
            if not isinstance(value, kind):
                raise MalformedFormulaError(
                    f"{type(self).__name__} expects {kind.__name__} arguments, "
                    f"got {value!r}"
                )


##############################################################################
# Terms
##############################################################################


class Term(Node):
    """Element- or set-sorted term."""


@dataclass(frozen=True)
class Var(Term):
    """A variable (or any opaque constant) of either sort."""

    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class App(Term):
    """An application of an uninterpreted function symbol."""

    name: str
    args: Tuple[Term, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        self._check(Term, *self.args)

    def __str__(self):
        return f"{self.name}({', '.join(str(arg) for arg in self.args)})"


@dataclass(frozen=True)
class EmptySet(Term):
    """The empty set."""

    def __str__(self):
        return "empty"


@dataclass(frozen=True)
class Singleton(Term):
    """``{elem}``."""

    elem: Term

    def __post_init__(self):
        self._check(Term, self.elem)

    def __str__(self):
        return f"singleton({self.elem})"


@dataclass(frozen=True)
class Add(Term):
    """``base`` with ``elem`` added."""

    elem: Term
    base: Term

    def __post_init__(self):
        self._check(Term, self.elem, self.base)

    def __str__(self):
        return f"add({self.elem}, {self.base})"


@dataclass(frozen=True)
class Remove(Term):
    """``base`` with ``elem`` removed."""

    elem: Term
    base: Term

    def __post_init__(self):
        self._check(Term, self.elem, self.base)

    def __str__(self):
        return f"remove({self.elem}, {self.base})"


@dataclass(frozen=True)
class Union(Term):
    left: Term
    right: Term

    def __post_init__(self):
        self._check(Term, self.left, self.right)

    def __str__(self):
        return f"union({self.left}, {self.right})"


@dataclass(frozen=True)
class Inter(Term):
    left: Term
    right: Term

    def __post_init__(self):
        self._check(Term, self.left, self.right)

    def __str__(self):
        return f"inter({self.left}, {self.right})"


@dataclass(frozen=True)
class Diff(Term):
    left: Term
    right: Term

    def __post_init__(self):
        self._check(Term, self.left, self.right)

    def __str__(self):
        return f"diff({self.left}, {self.right})"


SET_CONSTRUCTORS = (EmptySet, Singleton, Add, Remove, Union, Inter, Diff)


def is_atomic_term(term) -> bool:
    """Variables and function applications are atomic."""
    return isinstance(term, (Var, App))


def is_set_constructor(term) -> bool:
    return isinstance(term, SET_CONSTRUCTORS)


def term_key(term) -> str:
    """Total order on terms used to orient equations."""
    return str(term)


##############################################################################
# Formulae
##############################################################################


class Formula(Node):
    """Base class of formulae."""


class Atom(Formula):
    """Base class of atomic formulae."""


@dataclass(frozen=True)
class Top(Formula):
    def __str__(self):
        return "true"


@dataclass(frozen=True)
class Bottom(Formula):
    def __str__(self):
        return "false"


@dataclass(frozen=True)
class Eq(Atom):
    """Equality of two elements."""

    left: Term
    right: Term

    def __post_init__(self):
        self._check(Term, self.left, self.right)

    def __str__(self):
        return f"{self.left} = {self.right}"


@dataclass(frozen=True)
class In(Atom):
    """Membership of ``elem`` in ``container``."""

    elem: Term
    container: Term

    def __post_init__(self):
        self._check(Term, self.elem, self.container)

    def __str__(self):
        return f"{self.elem} in {self.container}"


@dataclass(frozen=True)
class IsEmpty(Atom):
    container: Term

    def __post_init__(self):
        self._check(Term, self.container)

    def __str__(self):
        return f"Empty({self.container})"


@dataclass(frozen=True)
class Subset(Atom):
    left: Term
    right: Term

    def __post_init__(self):
        self._check(Term, self.left, self.right)

    def __str__(self):
        return f"Subset({self.left}, {self.right})"


@dataclass(frozen=True)
class SetEq(Atom):
    """Extensional equality of two sets."""

    left: Term
    right: Term

    def __post_init__(self):
        self._check(Term, self.left, self.right)

    def __str__(self):
        return f"Equal({self.left}, {self.right})"


@dataclass(frozen=True)
class Pred(Atom):
    """A caller-declared atom, opaque to the procedure."""

    name: str
    args: Tuple[Term, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        self._check(Term, *self.args)

    def __str__(self):
        if not self.args:
            return self.name
        return f"{self.name}({', '.join(str(arg) for arg in self.args)})"


@dataclass(frozen=True)
class Not(Formula):
    body: Formula

    def __post_init__(self):
        self._check(Formula, self.body)

    def __str__(self):
        return f"not {self.body}"


@dataclass(frozen=True)
class And(Formula):
    left: Formula
    right: Formula

    def __post_init__(self):
        self._check(Formula, self.left, self.right)

    def __str__(self):
        return f"({self.left} and {self.right})"


@dataclass(frozen=True)
class Or(Formula):
    left: Formula
    right: Formula

    def __post_init__(self):
        self._check(Formula, self.left, self.right)

    def __str__(self):
        return f"({self.left} or {self.right})"


@dataclass(frozen=True)
class Implies(Formula):
    left: Formula
    right: Formula

    def __post_init__(self):
        self._check(Formula, self.left, self.right)

    def __str__(self):
        return f"({self.left} implies {self.right})"


@dataclass(frozen=True)
class Iff(Formula):
    left: Formula
    right: Formula

    def __post_init__(self):
        self._check(Formula, self.left, self.right)

    def __str__(self):
        return f"({self.left} iff {self.right})"


@dataclass(frozen=True)
class ForAll(Formula):
    """Universal quantification; always outside the fragment."""

    variable: Var
    body: Formula

    def __post_init__(self):
        self._check(Var, self.variable)
        self._check(Formula, self.body)

    def replace(self, old, new):
        if old == self.variable:
            return self
        return ForAll(self.variable, self.body.replace(old, new))

    def __str__(self):
        return f"(forall {self.variable}. {self.body})"


TRUE = Top()
FALSE = Bottom()
SET_RELATIONS = (IsEmpty, Subset, SetEq)
BINARY_CONNECTIVES = (And, Or, Implies, Iff)


def is_set_relation(formula) -> bool:
    return isinstance(formula, SET_RELATIONS)


def conjunction(*formulas: Formula) -> Formula:
    """Right-nested conjunction; ``true`` when empty."""
    if not formulas:
        return TRUE
    result = formulas[-1]
    for formula in reversed(formulas[:-1]):
        result = And(formula, result)
    return result


def disjunction(*formulas: Formula) -> Formula:
    """Right-nested disjunction; ``false`` when empty."""
    if not formulas:
        return FALSE
    result = formulas[-1]
    for formula in reversed(formulas[:-1]):
        result = Or(formula, result)
    return result


def orient(atom: Formula) -> Formula:
    """Put the arguments of an equation in canonical order."""
    if isinstance(atom, Eq) and term_key(atom.right) < term_key(atom.left):
        return Eq(atom.right, atom.left)
    return atom


def atoms(formula: Formula) -> Iterator[Atom]:
    """Yield the atoms of a formula, left to right, with repetitions."""
    if isinstance(formula, Atom):
        yield formula
        return
    for child in formula.children():
        if isinstance(child, Formula):
            yield from atoms(child)


def subterms(node: Node) -> Iterator[Term]:
    """Yield every term occurring in ``node``, outermost first."""
    for child in node.children():
        if isinstance(child, Term):
            yield child
        yield from subterms(child)


def variables(node: Node) -> Set[Var]:
    found = {term for term in subterms(node) if isinstance(term, Var)}
    if isinstance(node, Var):
        found.add(node)
    return found


def occurs(term: Term, node: Node) -> bool:
    if node == term:
        return True
    return any(occurs(term, child) for child in node.children())


def negation_count(formula: Formula) -> int:
    count = 1 if isinstance(formula, Not) else 0
    return count + sum(
        negation_count(child)
        for child in formula.children()
        if isinstance(child, Formula)
    )


def constructor_elements(term: Term) -> List[Term]:
    """Element arguments of the set constructors inside a set term."""
    if isinstance(term, (Singleton, Add, Remove)):
        found = [term.elem]
        if not isinstance(term, Singleton):
            found.extend(constructor_elements(term.base))
        return found
    if isinstance(term, (Union, Inter, Diff)):
        return constructor_elements(term.left) + constructor_elements(term.right)
    return []


def element_terms(formula: Formula) -> List[Term]:
    """Element terms of ``formula`` that bound universal instantiation.

    These are the arguments of ``Eq`` and the element side of ``In`` atoms,
    together with the element arguments of set constructors in any atom.
    """
    found: List[Term] = []
    for atom in atoms(formula):
        if isinstance(atom, Eq):
            candidates = [atom.left, atom.right]
        elif isinstance(atom, In):
            candidates = [atom.elem] + constructor_elements(atom.container)
        elif isinstance(atom, IsEmpty):
            candidates = constructor_elements(atom.container)
        elif isinstance(atom, (Subset, SetEq)):
            candidates = constructor_elements(atom.left) + constructor_elements(
                atom.right
            )
        else:
            candidates = []
        for term in candidates:
            if term not in found:
                found.append(term)
    return found


def _set_position_names(term: Term, kind, found: Set[str]) -> None:
    if isinstance(term, kind):
        found.add(term.name)
    elif isinstance(term, (Add, Remove)):
        _set_position_names(term.base, kind, found)
    elif isinstance(term, (Union, Inter, Diff)):
        _set_position_names(term.left, kind, found)
        _set_position_names(term.right, kind, found)


def _set_names(formulas, kind) -> Set[str]:
    found: Set[str] = set()
    for formula in formulas:
        for atom in atoms(formula):
            if isinstance(atom, (In, IsEmpty)):
                _set_position_names(atom.container, kind, found)
            elif isinstance(atom, (Subset, SetEq)):
                _set_position_names(atom.left, kind, found)
                _set_position_names(atom.right, kind, found)
    return found


def set_variable_names(formulas) -> Set[str]:
    """Names of the variables used as sets somewhere in ``formulas``."""
    return _set_names(formulas, Var)


def set_function_names(formulas) -> Set[str]:
    """Names of the function symbols whose applications are used as sets."""
    return _set_names(formulas, App)
