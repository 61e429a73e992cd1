"""Configuration of the decision procedure."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from setdec.fset.decidability import DecidabilityTable, default_table

# Debug flag - can be set via environment variable SETDEC_DEBUG
SETDEC_DEBUG = os.environ.get("SETDEC_DEBUG", "False").lower() in ("true", "1", "yes")


@dataclass
class DecideConfig:
    """Knobs of one call to :func:`setdec.fset.decide.decide`."""

    decidability: DecidabilityTable = field(default_factory=default_table)
    use_pull: bool = True  # keep pulled forms that have fewer negations
    max_splits: Optional[int] = None  # None: no budget
    max_rounds: int = 16  # cap of the instantiate/rewrite loop
    fresh_prefix: str = "z"  # names of elements introduced for set goals
