"""Payment transaction request builders with declarative field validation."""

from paybuilder.engine.errors import (
    BuilderError,
    CapabilityError,
    ConfigurationError,
    DispatchError,
    PaymentError,
    ValidationError,
)
from paybuilder.models.builders import AuthorizationBuilder, ManagementBuilder
from paybuilder.models.enums import PaymentMethodKind, ProcessingModifier, TransactionKind
from paybuilder.models.payment_methods import (
    CreditCardData,
    DebitTrackData,
    EBTCardData,
    ECheck,
    GiftCard,
    TransactionReference,
)
from paybuilder.models.transaction import Transaction
from paybuilder.providers.container import services

__all__ = [
    "AuthorizationBuilder",
    "ManagementBuilder",
    "Transaction",
    "TransactionKind",
    "ProcessingModifier",
    "PaymentMethodKind",
    "CreditCardData",
    "DebitTrackData",
    "EBTCardData",
    "ECheck",
    "GiftCard",
    "TransactionReference",
    "services",
    "PaymentError",
    "BuilderError",
    "ValidationError",
    "CapabilityError",
    "ConfigurationError",
    "DispatchError",
]
