"""End-to-end entry point of the finite-set decision procedure."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from setdec.fset.certificate import Certificate, Rule
from setdec.fset.classify import classify
from setdec.fset.config import DecideConfig
from setdec.fset.context import Context, Hypothesis
from setdec.fset.inject import inject
from setdec.fset.instantiate import instantiate
from setdec.fset.language import Formula
from setdec.fset.negation import normalize_context
from setdec.fset.search import ClosureSearch
from setdec.fset.substitute import substitute
from setdec.fset.trace import Diagnostic, DiagnosticKind, Trace
from setdec.utils.exceptions import SearchBudgetExhausted

logger = logging.getLogger(__name__)


class Verdict(Enum):
    PROVED = "proved"
    NOT_PROVED = "not proved"


@dataclass
class DecisionResult:
    """Verdict of one attempt, with its certificate when proved."""

    verdict: Verdict
    context: Context  # what the search worked on
    certificate: Optional[Certificate] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    open_branch: Optional[str] = None
    splits: int = 0

    @property
    def proved(self) -> bool:
        return self.verdict is Verdict.PROVED


def prepare(context: Context, config: DecideConfig, trace: Trace) -> Context:
    """Run stages 1 to 6 on ``context``."""
    table = config.decidability
    context = classify(context, table, trace)
    context = substitute(context, trace)
    context = instantiate(context, config.fresh_prefix, config.max_rounds, trace)
    context = normalize_context(context, table, config.use_pull, trace)
    context = substitute(context, trace)
    context = inject(context, table, trace)
    logger.debug("Prepared context:\n%s", context)
    return context


def decide(
    hypotheses: Iterable[Union[Hypothesis, Formula]],
    goal: Formula,
    config: Optional[DecideConfig] = None,
) -> DecisionResult:
    """Prove ``goal`` from ``hypotheses`` or report that it is not proved."""
    config = config if config is not None else DecideConfig()
    trace = Trace()
    context = prepare(Context.build(hypotheses, goal), config, trace)

    search = ClosureSearch(config.decidability, config.max_splits, trace)
    try:
        tree = search.refute(context)
    except SearchBudgetExhausted as exc:
        logger.info("Not proved: %s", exc)
        trace.diagnose(DiagnosticKind.BUDGET_EXHAUSTED, str(exc))
        return DecisionResult(
            Verdict.NOT_PROVED, context, None, trace.diagnostics, splits=search.splits
        )

    if tree.rule is Rule.STUCK:
        logger.info("Not proved; open branch: %s", tree.detail)
        trace.diagnose(DiagnosticKind.STUCK, tree.detail)
        return DecisionResult(
            Verdict.NOT_PROVED,
            context,
            None,
            trace.diagnostics,
            tree.detail,
            search.splits,
        )

    logger.info("Proved with %d splits", search.splits)
    certificate = Certificate(list(trace.steps), tree)
    return DecisionResult(
        Verdict.PROVED, context, certificate, trace.diagnostics, splits=search.splits
    )
