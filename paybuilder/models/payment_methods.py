"""
Payment methods and their builder factories.

Builders only ever look at a payment method's ``kind`` tag and two
capability queries (``has_serial_number`` and ``is_transaction_reference``);
everything else here is data the gateway connector reads.

Factory methods are the usual entry point for building a request:

    txn = await card.charge(Decimal("10.00")).with_currency("USD").execute()
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Optional

from paybuilder.engine.errors import BuilderError, DispatchError
from paybuilder.models.base import ThreeDSecure
from paybuilder.models.builders import AuthorizationBuilder, ManagementBuilder
from paybuilder.models.enums import (
    AliasAction,
    InquiryType,
    PaymentMethodKind,
    ProcessingModifier,
    TransactionKind,
)
from paybuilder.providers.container import DEFAULT_CONFIG

logger = logging.getLogger("paybuilder.builder")


@dataclass
class PaymentMethod:
    """Tagged base for every payment method."""

    kind: ClassVar[PaymentMethodKind]

    @property
    def is_transaction_reference(self) -> bool:
        return self.kind is PaymentMethodKind.REFERENCE

    @property
    def has_serial_number(self) -> bool:
        return False


@dataclass
class TransactionReference(PaymentMethod):
    """Targets a previous transaction by gateway or client transaction id."""

    kind: ClassVar[PaymentMethodKind] = PaymentMethodKind.REFERENCE

    transaction_id: Optional[str] = None
    client_transaction_id: Optional[str] = None
    original_kind: Optional[PaymentMethodKind] = None
    auth_code: Optional[str] = None


@dataclass
class Credit(PaymentMethod):
    """Card-based credit payment method."""

    kind: ClassVar[PaymentMethodKind] = PaymentMethodKind.CREDIT

    card_type: str = "Unknown"
    token: Optional[str] = None
    three_d_secure: Optional[ThreeDSecure] = None

    def _secure_builder(self, transaction_kind: TransactionKind, amount: Optional[Decimal]) -> AuthorizationBuilder:
        # Amount, currency and order id default to the 3-D Secure result, if any
        secure = self.three_d_secure
        if secure is None:
            return AuthorizationBuilder(transaction_kind, self).with_amount(amount)
        return (
            AuthorizationBuilder(transaction_kind, self)
            .with_amount(amount if amount is not None else secure.amount)
            .with_currency(secure.currency)
            .with_order_id(secure.order_id)
        )

    def authorize(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return self._secure_builder(TransactionKind.AUTH, amount)

    def charge(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return self._secure_builder(TransactionKind.SALE, amount)

    def add_value(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.ADD_VALUE, self).with_amount(amount)

    def balance_inquiry(self, inquiry: Optional[InquiryType] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.BALANCE, self).with_balance_inquiry_type(inquiry)

    def refund(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.REFUND, self).with_amount(amount)

    def reverse(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.REVERSAL, self).with_amount(amount)

    def verify(self) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.VERIFY, self)

    async def tokenize(self, config_name: str = DEFAULT_CONFIG) -> Optional[str]:
        """Verify the card with the issuer and return a multi-use token."""
        response = await (
            AuthorizationBuilder(TransactionKind.VERIFY, self)
            .with_request_multi_use_token(True)
            .execute(config_name)
        )
        return response.token

    async def update_token_expiry(self, config_name: str = DEFAULT_CONFIG) -> bool:
        """
        Push this card's expiry date to the stored token.

        Returns:
            True on success, False if the gateway rejected the update.

        Raises:
            BuilderError: If the card carries no token.
        """
        if not self.token:
            raise BuilderError("Token cannot be empty")

        try:
            await ManagementBuilder(TransactionKind.TOKEN_UPDATE).with_payment_method(self).execute(config_name)
        except DispatchError as e:
            logger.warning("Token expiry update failed: %s", e)
            return False
        return True

    async def delete_token(self, config_name: str = DEFAULT_CONFIG) -> bool:
        """
        Delete the stored token for this card.

        Returns:
            True on success, False if the gateway rejected the deletion.

        Raises:
            BuilderError: If the card carries no token.
        """
        if not self.token:
            raise BuilderError("Token cannot be empty")

        try:
            await ManagementBuilder(TransactionKind.TOKEN_DELETE).with_payment_method(self).execute(config_name)
        except DispatchError as e:
            logger.warning("Token deletion failed: %s", e)
            return False
        return True


@dataclass
class CreditCardData(Credit):
    """Manually entered card."""

    number: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    cvn: Optional[str] = None
    card_holder_name: Optional[str] = None
    card_present: bool = False


@dataclass
class DebitTrackData(PaymentMethod):
    """Swiped debit card with PIN."""

    kind: ClassVar[PaymentMethodKind] = PaymentMethodKind.DEBIT

    value: Optional[str] = None
    pin_block: Optional[str] = None

    def charge(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.SALE, self).with_amount(amount)

    def add_value(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.ADD_VALUE, self).with_amount(amount)

    def refund(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.REFUND, self).with_amount(amount)

    def reverse(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.REVERSAL, self).with_amount(amount)


@dataclass
class ECheck(PaymentMethod):
    """ACH bank account debit. Every ACH request needs a billing address."""

    kind: ClassVar[PaymentMethodKind] = PaymentMethodKind.ACH

    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    account_type: str = "checking"
    check_holder_name: Optional[str] = None
    sec_code: str = "WEB"

    def charge(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.SALE, self).with_amount(amount)


@dataclass
class EBTCardData(PaymentMethod):
    """
    Electronic benefits card.

    A non-empty ``serial_number`` marks a paper voucher; setting such a card
    on a builder switches the request to the VOUCHER modifier.
    """

    kind: ClassVar[PaymentMethodKind] = PaymentMethodKind.EBT

    number: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    pin_block: Optional[str] = None
    serial_number: Optional[str] = None
    approval_code: Optional[str] = None

    @property
    def has_serial_number(self) -> bool:
        return bool(self.serial_number)

    def charge(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.SALE, self).with_amount(amount)

    def refund(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.REFUND, self).with_amount(amount)

    def balance_inquiry(self, inquiry: InquiryType = InquiryType.FOODSTAMP) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.BALANCE, self).with_balance_inquiry_type(inquiry)

    def benefit_withdrawal(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        """Cash withdrawal against the card. Voucher cards keep the VOUCHER modifier."""
        builder = AuthorizationBuilder(TransactionKind.BENEFIT_WITHDRAWAL, self).with_amount(amount)
        if not self.has_serial_number:
            builder.with_modifier(ProcessingModifier.CASH_BACK)
        return builder


@dataclass
class GiftCard(PaymentMethod):
    """Stored value card, addressed by number, alias or token."""

    kind: ClassVar[PaymentMethodKind] = PaymentMethodKind.GIFT

    number: Optional[str] = None
    alias: Optional[str] = None
    token: Optional[str] = None
    pin: Optional[str] = None

    @classmethod
    def create(cls, alias: str) -> AuthorizationBuilder:
        """Issue a new gift card bound to ``alias`` (usually a phone number)."""
        return AuthorizationBuilder(TransactionKind.ALIAS, cls()).with_alias(AliasAction.CREATE, alias)

    def activate(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.ACTIVATE, self).with_amount(amount)

    def add_alias(self, alias: Optional[str]) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.ALIAS, self).with_alias(AliasAction.ADD, alias)

    def remove_alias(self, alias: Optional[str]) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.ALIAS, self).with_alias(AliasAction.DELETE, alias)

    def add_value(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.ADD_VALUE, self).with_amount(amount)

    def balance_inquiry(self, inquiry: Optional[InquiryType] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.BALANCE, self).with_balance_inquiry_type(inquiry)

    def charge(self, amount: Optional[Decimal] = None) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.SALE, self).with_amount(amount)

    def replace_with(self, new_card: Optional["GiftCard"]) -> AuthorizationBuilder:
        return AuthorizationBuilder(TransactionKind.REPLACE, self).with_replacement_card(new_card)
