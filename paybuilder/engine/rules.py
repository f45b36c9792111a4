"""
Declarative validation rules for request builders.

A RuleSpec maps a key of (set of transaction kinds, exact processing
modifier, optional payment method kind) to an ordered list of field checks.
Each builder flavor owns one RuleRegistry, populated once and shared
read-only across every request of that flavor.

Key semantics:
  - kinds: a TransactionKind combination; None matches every kind
  - modifier: exact match; None matches every modifier (payment-method rules)
  - payment_method_kind: None means the rule is unscoped
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, Optional

from paybuilder.engine.errors import BuilderError
from paybuilder.models.enums import (
    PaymentMethodKind,
    ProcessingModifier,
    RuleOutcome,
    TransactionKind,
)


def _label_for(field: str) -> str:
    # "billing_address" -> "BillingAddress"
    return "".join(part.capitalize() for part in field.split("_"))


@dataclass(frozen=True)
class FieldCheck:
    """A single required-present or required-absent assertion on one field."""

    field: str
    label: str
    outcome: RuleOutcome = RuleOutcome.REQUIRED

    def evaluate(self, request: Any) -> bool:
        value = getattr(request, self.field, None)
        if self.outcome is RuleOutcome.REQUIRED:
            return value is not None
        return value is None


def require(field: str, label: Optional[str] = None) -> FieldCheck:
    return FieldCheck(field=field, label=label or _label_for(field), outcome=RuleOutcome.REQUIRED)


def forbid(field: str, label: Optional[str] = None) -> FieldCheck:
    return FieldCheck(field=field, label=label or _label_for(field), outcome=RuleOutcome.FORBIDDEN)


@dataclass(frozen=True)
class RuleSpec:
    """Ordered field checks that apply to one (kinds, modifier, payment method) key."""

    checks: tuple[FieldCheck, ...]
    kinds: Optional[TransactionKind] = None
    modifier: Optional[ProcessingModifier] = ProcessingModifier.NONE
    payment_method_kind: Optional[PaymentMethodKind] = None

    def matches(
        self,
        kind: TransactionKind,
        modifier: ProcessingModifier,
        payment_method_kind: Optional[PaymentMethodKind] = None,
    ) -> bool:
        if self.kinds is not None and kind not in self.kinds:
            return False
        if self.modifier is not None and modifier != self.modifier:
            return False
        if self.payment_method_kind is not None and payment_method_kind != self.payment_method_kind:
            return False
        return True

    def describe(self) -> dict[str, Any]:
        """Plain-data view of the rule, used by the rules endpoint."""
        kinds = None
        if self.kinds is not None:
            kinds = [k.name for k in TransactionKind if k in self.kinds]
        return {
            "kinds": kinds,
            "modifier": self.modifier.value if self.modifier is not None else None,
            "payment_method_kind": self.payment_method_kind.value if self.payment_method_kind else None,
            "checks": [
                {"field": c.field, "label": c.label, "outcome": c.outcome.value}
                for c in self.checks
            ],
        }


class RuleRegistry:
    """
    Ordered, append-only collection of RuleSpecs for one builder flavor.

    Registries are populated at setup time and then frozen. A frozen
    registry carries no per-request state, so one instance can serve any
    number of concurrent commits without locking.
    """

    def __init__(self, flavor: str):
        self.flavor = flavor
        self._rules: list[RuleSpec] = []
        self._frozen = False

    def add(
        self,
        *checks: FieldCheck,
        kinds: Optional[TransactionKind] = None,
        modifier: Optional[ProcessingModifier] = ProcessingModifier.NONE,
        payment_method_kind: Optional[PaymentMethodKind] = None,
    ) -> RuleSpec:
        if self._frozen:
            raise BuilderError(f"Rule registry '{self.flavor}' is frozen")
        if not checks:
            raise BuilderError("A rule needs at least one field check")
        rule = RuleSpec(
            checks=tuple(checks),
            kinds=kinds,
            modifier=modifier,
            payment_method_kind=payment_method_kind,
        )
        self._rules.append(rule)
        return rule

    def freeze(self) -> "RuleRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def matching(
        self,
        kind: TransactionKind,
        modifier: ProcessingModifier,
        payment_method_kind: Optional[PaymentMethodKind] = None,
    ) -> list[RuleSpec]:
        """Every rule whose key matches, in declaration order."""
        return [r for r in self._rules if r.matches(kind, modifier, payment_method_kind)]

    def __iter__(self) -> Iterator[RuleSpec]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


K = TransactionKind
M = ProcessingModifier


@lru_cache(maxsize=None)
def authorization_rules() -> RuleRegistry:
    """Rule table for charges, authorizations, balance inquiries, aliases, etc."""
    rules = RuleRegistry("authorization")

    rules.add(
        require("amount"), require("currency"), require("payment_method"),
        kinds=K.AUTH | K.SALE | K.REFUND | K.ADD_VALUE,
    )
    rules.add(
        require("amount"), require("currency"),
        kinds=K.AUTH | K.SALE, modifier=M.HOSTED_REQUEST,
    )
    rules.add(
        require("currency"), forbid("amount"),
        kinds=K.VERIFY, modifier=M.HOSTED_REQUEST,
    )
    rules.add(
        require("amount"), require("currency"), require("offline_auth_code"),
        kinds=K.AUTH | K.SALE, modifier=M.OFFLINE,
    )
    rules.add(
        require("amount"), require("currency"), require("payment_method"),
        kinds=K.BENEFIT_WITHDRAWAL, modifier=M.CASH_BACK,
    )
    rules.add(require("payment_method"), kinds=K.BALANCE)
    rules.add(require("alias_action"), require("alias"), kinds=K.ALIAS)
    rules.add(require("replacement_card"), kinds=K.REPLACE)

    # ACH always needs a billing address, whatever the kind or modifier
    rules.add(require("billing_address"), modifier=None, payment_method_kind=PaymentMethodKind.ACH)

    return rules.freeze()


@lru_cache(maxsize=None)
def management_rules() -> RuleRegistry:
    """Rule table for follow-up operations on existing transactions and tokens."""
    rules = RuleRegistry("management")

    rules.add(require("transaction_id"), kinds=K.CAPTURE | K.EDIT | K.HOLD | K.RELEASE)
    rules.add(require("tax_type"), kinds=K.EDIT, modifier=M.LEVEL_II)
    rules.add(require("amount"), kinds=K.REFUND)
    rules.add(require("payment_method"), kinds=K.TOKEN_UPDATE | K.TOKEN_DELETE)

    return rules.freeze()


RULE_TABLES = {
    "authorization": authorization_rules,
    "management": management_rules,
}
