from paybuilder.models.audit import AuditLog, Base
from paybuilder.models.base import Address, EcommerceInfo, HostedPaymentData, ThreeDSecure
from paybuilder.models.enums import (
    AddressType,
    AliasAction,
    BuilderState,
    InquiryType,
    PaymentMethodKind,
    ProcessingModifier,
    RecurringSequence,
    RecurringType,
    RuleOutcome,
    TaxType,
    TransactionKind,
    TransactionStatus,
)

__all__ = [
    "Base",
    "AuditLog",
    "Address",
    "EcommerceInfo",
    "HostedPaymentData",
    "ThreeDSecure",
    "AddressType",
    "AliasAction",
    "BuilderState",
    "InquiryType",
    "PaymentMethodKind",
    "ProcessingModifier",
    "RecurringSequence",
    "RecurringType",
    "RuleOutcome",
    "TaxType",
    "TransactionKind",
    "TransactionStatus",
]
