"""Concrete syntax for formulae, terms and problems.

Formulae::

  true | false | not P | P and Q | P or Q | P implies Q | P iff Q
  forall x. P
  x = y | x in s | Eq(x, y) | In(x, s) | Empty(s) | Subset(s, t) | Equal(s, t)
  Name(term, ...)                       (declared predicate)

Terms::

  x | f(term, ...) | empty | singleton(x) | add(x, s) | remove(x, s)
  union(s, t) | inter(s, t) | diff(s, t)

Binary connectives bind, from loosest to tightest, ``iff``, ``implies``,
``or``, ``and``; all of them associate to the right.  A problem is a list of
lines ``name: formula`` or bare formulae (hypotheses) plus one line
``goal: formula``; ``#`` starts a comment.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from setdec.fset.context import Hypothesis
from setdec.fset.language import (
    FALSE,
    TRUE,
    Add,
    And,
    App,
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
    Union,
    Var,
)
from setdec.utils.exceptions import ParseError

KEYWORDS = ["not", "and", "or", "implies", "iff", "forall", "in", "true", "false"]

# loosest first
BINARY = [("iff", Iff), ("implies", Implies), ("or", Or), ("and", And)]

ATOMS = {"Eq": (Eq, 2), "In": (In, 2), "Empty": (IsEmpty, 1),
         "Subset": (Subset, 2), "Equal": (SetEq, 2)}

SET_TERMS = {"singleton": (Singleton, 1), "add": (Add, 2), "remove": (Remove, 2),
             "union": (Union, 2), "inter": (Inter, 2), "diff": (Diff, 2)}

_LABEL = re.compile(r"^([A-Za-z_][\w.]*)\s*:(?!=)\s*(.*)$")


def lex(inp: str) -> List[str]:
    """Perform lexical analysis on input string."""
    tokens = []
    pos = 0
    while pos < len(inp):
        # skip whitespace
        if inp[pos].isspace():
            pos += 1
            continue

        # identifiers
        identifier = ""
        while pos < len(inp) and (inp[pos].isalnum() or inp[pos] == "_"):
            identifier += inp[pos]
            pos += 1
        if len(identifier) > 0:
            tokens.append(identifier)
            continue

        # symbols
        tokens.append(inp[pos])
        pos += 1

    return tokens


def _is_name(token: str) -> bool:
    return (token[0].isalpha() or token[0] == "_") and token not in KEYWORDS


def _top_level(tokens: List[str], keyword: str) -> Optional[int]:
    """Position of the first ``keyword`` outside parentheses and quantifiers."""
    depth = 0
    for i, token in enumerate(tokens):
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        elif depth == 0 and token == "forall":
            return None
        elif depth == 0 and token == keyword:
            return i
    return None


def _closing(tokens: List[str], start: int) -> int:
    """Index of the parenthesis closing the one at ``start``."""
    depth = 0
    for i in range(start, len(tokens)):
        if tokens[i] == "(":
            depth += 1
        elif tokens[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    raise ParseError("Missing ')'.")


def _arguments(tokens: List[str]) -> Tuple[str, List[List[str]]]:
    """Split ``name ( a , b )`` into the name and the argument token lists."""
    name = tokens[0]
    if _closing(tokens, 1) != len(tokens) - 1:
        raise ParseError(f"Unexpected tokens after {name}(...).")
    inner = tokens[2:-1]
    if not inner:
        return name, []
    args, depth, current = [], 0, []
    for token in inner:
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        if depth == 0 and token == ",":
            if not current:
                raise ParseError(f"Missing argument of {name}.")
            args.append(current)
            current = []
        else:
            current.append(token)
    if not current:
        raise ParseError(f"Missing argument of {name}.")
    args.append(current)
    return name, args


def parse_term(tokens: List[str]) -> Term:
    """Parse tokens into a term."""
    if len(tokens) == 0:
        raise ParseError("Missing term.")
    if not _is_name(tokens[0]):
        raise ParseError(f"Unable to parse term: {' '.join(tokens)}")
    if len(tokens) == 1:
        if tokens[0] == "empty":
            return EmptySet()
        return Var(tokens[0])
    if tokens[1] != "(":
        raise ParseError(f"Unable to parse term: {' '.join(tokens)}")
    name, args = _arguments(tokens)
    terms = [parse_term(arg) for arg in args]
    if name in SET_TERMS:
        constructor, arity = SET_TERMS[name]
        if len(terms) != arity:
            raise ParseError(f"{name} expects {arity} argument(s), got {len(terms)}.")
        return constructor(*terms)
    if name == "empty":
        raise ParseError("empty takes no arguments.")
    return App(name, tuple(terms))


def parse_formula(tokens: List[str]) -> Formula:
    """Parse tokens into a formula."""
    if len(tokens) == 0:
        raise ParseError("Empty formula.")

    if tokens[0] == "forall":
        if "." not in tokens:
            raise ParseError("Missing '.' in forall quantifier.")
        dot = tokens.index(".")
        names = [token for token in tokens[1:dot] if token != ","]
        if not names or not all(_is_name(name) for name in names):
            raise ParseError("Missing variable in forall quantifier.")
        if dot == len(tokens) - 1:
            raise ParseError("Missing formula in forall quantifier.")
        formula = parse_formula(tokens[dot + 1:])
        for name in reversed(names):
            formula = ForAll(Var(name), formula)
        return formula

    for keyword, connective in BINARY:
        pos = _top_level(tokens, keyword)
        if pos is None:
            continue
        if pos in (0, len(tokens) - 1):
            raise ParseError(f"Missing formula in {keyword.upper()} connective.")
        return connective(parse_formula(tokens[:pos]), parse_formula(tokens[pos + 1:]))

    if tokens[0] == "not":
        if len(tokens) < 2:
            raise ParseError("Missing formula in NOT connective.")
        return Not(parse_formula(tokens[1:]))

    if tokens == ["true"]:
        return TRUE
    if tokens == ["false"]:
        return FALSE

    if tokens[0] == "(" and _closing(tokens, 0) == len(tokens) - 1:
        if len(tokens) == 2:
            raise ParseError("Missing formula in parenthetical group.")
        return parse_formula(tokens[1:-1])

    for symbol, atom in (("=", Eq), ("in", In)):
        pos = _top_level(tokens, symbol)
        if pos is not None:
            return atom(parse_term(tokens[:pos]), parse_term(tokens[pos + 1:]))

    if _is_name(tokens[0]) and tokens[0][0].isupper():
        if len(tokens) == 1:
            return Pred(tokens[0], ())
        if tokens[1] != "(":
            raise ParseError(f"Unable to parse: {' '.join(tokens)}")
        name, args = _arguments(tokens)
        terms = [parse_term(arg) for arg in args]
        if name in ATOMS:
            atom, arity = ATOMS[name]
            if len(terms) != arity:
                raise ParseError(f"{name} expects {arity} argument(s), got {len(terms)}.")
            return atom(*terms)
        return Pred(name, tuple(terms))

    raise ParseError(f"Unable to parse: {tokens[0]}...")


def parse(text: str) -> Formula:
    """Parse the concrete syntax of one formula."""
    return parse_formula(lex(text))


def parse_problem(text: str) -> Tuple[List[Hypothesis], Formula]:
    """Parse a problem: hypotheses, one per line, and a ``goal:`` line."""
    hypotheses: List[Hypothesis] = []
    goal = None
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        name, body = None, line
        match = _LABEL.match(line)
        if match:
            name, body = match.group(1), match.group(2)
        try:
            formula = parse(body)
        except ParseError as exc:
            raise ParseError(f"line {lineno}: {exc.message}") from exc
        if name == "goal":
            if goal is not None:
                raise ParseError(f"line {lineno}: more than one goal.")
            goal = formula
        else:
            hypotheses.append(Hypothesis(name or f"H{len(hypotheses)}", formula))
    if goal is None:
        raise ParseError("Missing goal.")
    return hypotheses, goal
