"""Pipeline steps and diagnostics recorded during one proof attempt."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Reasons why part of the procedure did not apply."""

    OUT_OF_FRAGMENT = "OutOfFragment"
    DECIDABILITY_OBLIGATION_UNMET = "DecidabilityObligationUnmet"
    STUCK = "Stuck"
    BUDGET_EXHAUSTED = "BudgetExhausted"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    detail: str

    def __str__(self):
        return f"{self.kind.value}: {self.detail}"


@dataclass(frozen=True)
class Step:
    """One deterministic rewrite applied before the search."""

    stage: str
    description: str

    def __str__(self):
        return f"[{self.stage}] {self.description}"


@dataclass
class Trace:
    """Collects steps and diagnostics; passed through every stage."""

    steps: List[Step] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def step(self, stage: str, description: str) -> None:
        logger.debug("[%s] %s", stage, description)
        self.steps.append(Step(stage, description))

    def diagnose(self, kind: DiagnosticKind, detail: str) -> None:
        diagnostic = Diagnostic(kind, detail)
        if diagnostic not in self.diagnostics:
            logger.debug("%s", diagnostic)
            self.diagnostics.append(diagnostic)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]
