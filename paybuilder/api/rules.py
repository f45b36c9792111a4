"""
Rule table inspection.

GET  /rules?flavor=authorization — Dump a builder flavor's validation rules in
                                   declaration order (the order the matcher runs them).
POST /rules/explain              — Show which authorization rules a request
                                   matches and the first check it fails, without dispatching.
"""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from paybuilder.api.transactions import TransactionIn, build_request
from paybuilder.engine.matcher import explain
from paybuilder.engine.rules import RULE_TABLES, authorization_rules

router = APIRouter(prefix="/rules", tags=["rules"])


class CheckOut(BaseModel):
    field: str
    label: str
    outcome: str


class RuleOut(BaseModel):
    position: int
    kinds: Optional[list[str]]
    modifier: Optional[str]
    payment_method_kind: Optional[str]
    checks: list[CheckOut]


class ExplainOut(BaseModel):
    transaction_kind: str
    modifier: str
    payment_method_kind: Optional[str]
    passed: bool
    matched: list[RuleOut]
    failure: Optional[CheckOut]


@router.get("", response_model=list[RuleOut])
async def list_rules(flavor: str = Query("authorization")):
    """List the validation rules for a builder flavor."""
    table = RULE_TABLES.get(flavor)
    if table is None:
        raise HTTPException(status_code=404, detail=f"Unknown builder flavor: {flavor}")

    rules: list[dict[str, Any]] = []
    for position, rule in enumerate(table()):
        rules.append({"position": position, **rule.describe()})
    return rules


@router.post("/explain", response_model=ExplainOut)
async def explain_request(body: TransactionIn):
    """Dry-run the authorization rules against a request body."""
    builder = build_request(body)
    registry = authorization_rules()
    report = explain(builder, registry)

    positions = {id(rule): i for i, rule in enumerate(registry)}
    failure = report.failure
    return ExplainOut(
        transaction_kind=builder.transaction_kind.name,
        modifier=builder.transaction_modifier.value,
        payment_method_kind=builder.payment_method_kind.value if builder.payment_method_kind else None,
        passed=report.passed,
        matched=[{"position": positions[id(rule)], **rule.describe()} for rule in report.matched],
        failure=(
            {"field": failure.field, "label": failure.label, "outcome": failure.outcome.value}
            if failure is not None else None
        ),
    )
