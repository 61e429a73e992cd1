"""
setdec: a decision procedure for quantifier-free finite-set entailments.

- `fset/`: the pipeline (classification, instantiation, rewriting, negation
  normalization, substitution, decidability injection, closure search), its
  textual syntax, certificates and cross-checking against z3.
- `cli/`: the ``fsetdec`` command-line tool.
- `utils/`: shared exceptions.

Example:
    >>> from setdec.fset import decide, parse
    >>> decide([parse("x in empty")], parse("false")).verdict.value
    'proved'
"""

from . import fset

__all__ = ["fset"]
