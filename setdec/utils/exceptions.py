# coding: utf-8
"""
Public subclasses of different Exceptions
"""


class SetDecError(Exception):
    """Base class for setdec exceptions"""

    pass


class ParseError(SetDecError):
    """Raised when a formula, term or problem text cannot be parsed."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class MalformedFormulaError(SetDecError):
    """Raised when a formula is built from values that are not terms or formulas."""

    pass


class SearchBudgetExhausted(SetDecError):
    """The closure search ran out of the split budget imposed by the caller."""

    def __init__(self, splits):
        super().__init__(f"split budget exhausted after {splits} splits")
        self.splits = splits
