"""
Rule matching and fail-fast execution.

Given a request's (kind, modifier, payment method kind), select every
matching RuleSpec in declaration order and run its checks in order. The
first failing check raises; nothing after it is evaluated, so each commit
attempt reports exactly one error.

A request that matches no rule at all passes. Stricter behaviour for an
unrecognized kind/modifier pairing has to be added as a rule.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from paybuilder.engine.errors import ValidationError
from paybuilder.engine.rules import FieldCheck, RuleRegistry, RuleSpec

logger = logging.getLogger("paybuilder.rules")


@dataclass(frozen=True)
class RuleReport:
    """Matched rules for a request and the check that stopped it, if any."""

    matched: tuple[RuleSpec, ...]
    failure: Optional[FieldCheck] = None

    @property
    def passed(self) -> bool:
        return self.failure is None


def _key(request: Any):
    return (
        request.transaction_kind,
        request.transaction_modifier,
        request.payment_method_kind,
    )


def match_rules(request: Any, registry: RuleRegistry) -> list[RuleSpec]:
    """Rules in ``registry`` that apply to ``request``, in declaration order."""
    return registry.matching(*_key(request))


def explain(request: Any, registry: RuleRegistry) -> RuleReport:
    """Match and run the checks for ``request`` without raising."""
    matched = match_rules(request, registry)
    for rule in matched:
        for check in rule.checks:
            if not check.evaluate(request):
                return RuleReport(tuple(matched), check)
    return RuleReport(tuple(matched))


def first_failure(request: Any, registry: RuleRegistry) -> Optional[FieldCheck]:
    """Return the first failing check for ``request``, or None if all pass."""
    return explain(request, registry).failure


def validate_request(request: Any, registry: RuleRegistry) -> int:
    """
    Run the applicable checks against ``request``.

    Returns:
        Number of rules that matched (zero is not an error).

    Raises:
        ValidationError: On the first failing check.
    """
    kind, modifier, pm_kind = _key(request)
    report = explain(request, registry)

    if not report.matched:
        logger.debug(
            "No %s rules for kind=%s modifier=%s payment_method=%s",
            registry.flavor,
            kind.name,
            modifier.value,
            pm_kind.value if pm_kind else "-",
        )
        return 0

    check = report.failure
    if check is not None:
        logger.info(
            "Validation failed | flavor=%s kind=%s modifier=%s | %s %s",
            registry.flavor,
            kind.name,
            modifier.value,
            check.label,
            check.outcome.value,
        )
        raise ValidationError(check.label, check.outcome, kind, modifier)

    logger.debug("Validation passed | %d %s rule(s) matched", len(report.matched), registry.flavor)
    return len(report.matched)
