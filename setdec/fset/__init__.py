"""Decision procedure for entailments over finite sets of elements."""

from .certificate import Certificate, ProofNode, Rule, verify_certificate
from .config import DecideConfig
from .context import Context, Hypothesis
from .decidability import DecidabilityTable, default_table
from .decide import DecisionResult, Verdict, decide
from .language import (
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
from .parser import parse, parse_problem
from .trace import Diagnostic, DiagnosticKind

__all__ = [
    "Certificate",
    "ProofNode",
    "Rule",
    "verify_certificate",
    "DecideConfig",
    "Context",
    "Hypothesis",
    "DecidabilityTable",
    "default_table",
    "DecisionResult",
    "Verdict",
    "decide",
    "FALSE",
    "TRUE",
    "Add",
    "And",
    "App",
    "Diff",
    "EmptySet",
    "Eq",
    "ForAll",
    "Formula",
    "Iff",
    "Implies",
    "In",
    "Inter",
    "IsEmpty",
    "Not",
    "Or",
    "Pred",
    "Remove",
    "SetEq",
    "Singleton",
    "Subset",
    "Term",
    "Union",
    "Var",
    "parse",
    "parse_problem",
    "Diagnostic",
    "DiagnosticKind",
]
