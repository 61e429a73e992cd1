"""Shared utilities for setdec."""

from .exceptions import (  # noqa: F401
    MalformedFormulaError,
    ParseError,
    SearchBudgetExhausted,
    SetDecError,
)
