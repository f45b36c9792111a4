"""
Transaction request builders.

A builder accumulates optional request fields through fluent ``with_*``
mutators and validates them only when committed. Mutators store one value,
overwrite whatever was there, and return the same builder. A few of them
also change the processing modifier:

  - with_cash_back        -> CASH_BACK
  - with_offline_auth_code -> OFFLINE
  - with_one_time_payment  -> RECURRING
  - with_payment_method    -> VOUCHER for an EBT card carrying a serial number

Commit (``execute`` / ``serialize``) runs the flavor's rule table through the
matcher, then hands the request to the configured gateway. A builder commits
once; it is single-owner and must not be shared between threads.
"""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Optional

from paybuilder.engine.errors import BuilderError, CapabilityError, ValidationError
from paybuilder.engine.matcher import validate_request
from paybuilder.engine.rules import RuleRegistry, authorization_rules, management_rules
from paybuilder.models.base import Address, EcommerceInfo, HostedPaymentData
from paybuilder.models.enums import (
    AddressType,
    AliasAction,
    BuilderState,
    InquiryType,
    PaymentMethodKind,
    ProcessingModifier,
    RecurringSequence,
    RecurringType,
    TaxType,
    TransactionKind,
)
from paybuilder.providers.container import DEFAULT_CONFIG, services

if TYPE_CHECKING:
    from paybuilder.models.payment_methods import GiftCard, PaymentMethod, TransactionReference
    from paybuilder.models.transaction import Transaction

logger = logging.getLogger("paybuilder.builder")

_TERMINAL = (BuilderState.DISPATCHED, BuilderState.REJECTED)


class TransactionBuilder:
    """Shared state and commit machinery for every builder flavor."""

    def __init__(self, transaction_kind: TransactionKind, payment_method: Optional["PaymentMethod"] = None):
        self._transaction_kind = transaction_kind
        self.transaction_modifier = ProcessingModifier.NONE
        self.payment_method: Optional["PaymentMethod"] = None
        self.state = BuilderState.CREATED
        if payment_method is not None:
            self._assign_payment_method(payment_method)

    @property
    def transaction_kind(self) -> TransactionKind:
        return self._transaction_kind

    @property
    def payment_method_kind(self) -> Optional[PaymentMethodKind]:
        return self.payment_method.kind if self.payment_method is not None else None

    def setup_validations(self) -> RuleRegistry:
        raise NotImplementedError

    def _configured(self):
        if self.state is BuilderState.CREATED:
            self.state = BuilderState.CONFIGURING
        return self

    def _assign_payment_method(self, value: Optional["PaymentMethod"]) -> None:
        self.payment_method = value
        if value is not None and value.has_serial_number:
            self.transaction_modifier = ProcessingModifier.VOUCHER

    def _reference(self) -> "TransactionReference":
        """The current payment method as a prior-transaction reference, creating one if needed."""
        from paybuilder.models.payment_methods import TransactionReference

        if self.payment_method is None or not self.payment_method.is_transaction_reference:
            self.payment_method = TransactionReference()
        return self.payment_method

    def with_modifier(self, value: ProcessingModifier):
        self.transaction_modifier = value
        return self._configured()

    def with_payment_method(self, value: Optional["PaymentMethod"]):
        self._assign_payment_method(value)
        return self._configured()

    def with_transaction_id(self, value: Optional[str]):
        """Target a previous gateway transaction by its id."""
        self._reference().transaction_id = value
        return self._configured()

    def validate(self) -> int:
        """
        Run the flavor's rule table against this request.

        Returns:
            Number of rules that matched.

        Raises:
            BuilderError: If the builder was already committed.
            ValidationError: On the first failing field check.
        """
        if self.state in _TERMINAL:
            raise BuilderError(f"{type(self).__name__} was already committed ({self.state.value})")

        self.state = BuilderState.COMMITTING
        try:
            return validate_request(self, self.setup_validations())
        except ValidationError:
            self.state = BuilderState.REJECTED
            raise

    async def _dispatch(self, submit: Callable[[Any], Any]):
        try:
            result = await submit(self)
        except Exception:
            self.state = BuilderState.REJECTED
            raise
        self.state = BuilderState.DISPATCHED
        return result


class AuthorizationBuilder(TransactionBuilder):
    """Builds charges, authorizations, verifies, balance inquiries, aliases and similar requests."""

    def __init__(self, transaction_kind: TransactionKind, payment_method: Optional["PaymentMethod"] = None):
        self.alias: Optional[str] = None
        self.alias_action: Optional[AliasAction] = None
        self.allow_duplicates = False
        self.allow_partial_auth = False
        self.amount: Optional[Decimal] = None
        self.auth_amount: Optional[Decimal] = None
        self.balance_inquiry_type: Optional[InquiryType] = None
        self.billing_address: Optional[Address] = None
        self.cash_back_amount: Optional[Decimal] = None
        self.client_transaction_id: Optional[str] = None
        self.convenience_amount: Optional[Decimal] = None
        self.currency: Optional[str] = None
        self.customer_id: Optional[str] = None
        self.customer_ip_address: Optional[str] = None
        self.cvn: Optional[str] = None
        self.description: Optional[str] = None
        self.dynamic_descriptor: Optional[str] = None
        self.ecommerce_info: Optional[EcommerceInfo] = None
        self.gratuity: Optional[Decimal] = None
        self.hosted_payment_data: Optional[HostedPaymentData] = None
        self.invoice_number: Optional[str] = None
        self.level_ii_request = False
        self.offline_auth_code: Optional[str] = None
        self.one_time_payment = False
        self.order_id: Optional[str] = None
        self.product_id: Optional[str] = None
        self.recurring_sequence: Optional[RecurringSequence] = None
        self.recurring_type: Optional[RecurringType] = None
        self.replacement_card: Optional["GiftCard"] = None
        self.request_multi_use_token = False
        self.schedule_id: Optional[str] = None
        self.shipping_address: Optional[Address] = None
        self.shipping_amount: Optional[Decimal] = None
        self.timestamp: Optional[str] = None
        super().__init__(transaction_kind, payment_method)

    def setup_validations(self) -> RuleRegistry:
        return authorization_rules()

    def with_address(self, value: Address, address_type: AddressType = AddressType.BILLING):
        """Set the billing or shipping address; a second call with the same type overwrites."""
        value.type = address_type
        if address_type is AddressType.BILLING:
            self.billing_address = value
        else:
            self.shipping_address = value
        return self._configured()

    def with_alias(self, action: AliasAction, value: Optional[str]):
        self.alias = value
        self.alias_action = action
        return self._configured()

    def with_allow_duplicates(self, value: bool):
        """Skip the gateway's duplicate checking."""
        self.allow_duplicates = value
        return self._configured()

    def with_allow_partial_auth(self, value: bool):
        self.allow_partial_auth = value
        return self._configured()

    def with_amount(self, value: Optional[Decimal]):
        self.amount = value
        return self._configured()

    def with_auth_amount(self, value: Optional[Decimal]):
        """Specialized authorization amount; most requests only need ``with_amount``."""
        self.auth_amount = value
        return self._configured()

    def with_balance_inquiry_type(self, value: Optional[InquiryType]):
        self.balance_inquiry_type = value
        return self._configured()

    def with_cash_back(self, value: Optional[Decimal]):
        """Set the cash back amount (debit/EBT). Forces the CASH_BACK modifier."""
        self.cash_back_amount = value
        self.transaction_modifier = ProcessingModifier.CASH_BACK
        return self._configured()

    def with_client_transaction_id(self, value: Optional[str]):
        """
        Set an application-generated transaction id.

        For reversals and refunds the id targets the original transaction, so
        it is attached to a prior-transaction reference payment method (one is
        created if the current payment method is not already a reference).
        """
        if self.transaction_kind in (TransactionKind.REVERSAL | TransactionKind.REFUND):
            self._reference().client_transaction_id = value
        else:
            self.client_transaction_id = value
        return self._configured()

    def with_commercial_request(self, value: bool):
        """Flag that commercial purchase cards (Level II) are expected."""
        self.level_ii_request = value
        return self._configured()

    def with_convenience_amount(self, value: Optional[Decimal]):
        self.convenience_amount = value
        return self._configured()

    def with_currency(self, value: Optional[str]):
        self.currency = value
        return self._configured()

    def with_customer_id(self, value: Optional[str]):
        self.customer_id = value
        return self._configured()

    def with_customer_ip_address(self, value: Optional[str]):
        self.customer_ip_address = value
        return self._configured()

    def with_cvn(self, value: Optional[str]):
        self.cvn = value
        return self._configured()

    def with_description(self, value: Optional[str]):
        self.description = value
        return self._configured()

    def with_dynamic_descriptor(self, value: Optional[str]):
        self.dynamic_descriptor = value
        return self._configured()

    def with_ecommerce_info(self, value: Optional[EcommerceInfo]):
        self.ecommerce_info = value
        return self._configured()

    def with_gratuity(self, value: Optional[Decimal]):
        self.gratuity = value
        return self._configured()

    def with_hosted_payment_data(self, value: HostedPaymentData, config_name: str = DEFAULT_CONFIG):
        """
        Attach hosted payment page data.

        Raises:
            CapabilityError: If the configured gateway has no hosted payment
                support. Nothing is stored in that case.
        """
        client = services.get_client(config_name)
        if not client.supports_hosted_payments:
            raise CapabilityError("Your current gateway does not support hosted payments.")
        self.hosted_payment_data = value
        return self._configured()

    def with_invoice_number(self, value: Optional[str]):
        self.invoice_number = value
        return self._configured()

    def with_offline_auth_code(self, value: Optional[str]):
        """Set the code obtained from the issuer by phone. Forces the OFFLINE modifier."""
        self.offline_auth_code = value
        self.transaction_modifier = ProcessingModifier.OFFLINE
        return self._configured()

    def with_one_time_payment(self, value: bool):
        """Use a recurring profile for a one-off payment. Forces the RECURRING modifier."""
        self.one_time_payment = value
        self.transaction_modifier = ProcessingModifier.RECURRING
        return self._configured()

    def with_order_id(self, value: Optional[str]):
        self.order_id = value
        return self._configured()

    def with_product_id(self, value: Optional[str]):
        self.product_id = value
        return self._configured()

    def with_recurring_info(self, recurring_type: RecurringType, sequence: RecurringSequence):
        self.recurring_type = recurring_type
        self.recurring_sequence = sequence
        return self._configured()

    def with_replacement_card(self, value: Optional["GiftCard"]):
        self.replacement_card = value
        return self._configured()

    def with_request_multi_use_token(self, value: bool):
        """Ask the gateway to store the card and return a multi-use token on success."""
        self.request_multi_use_token = value
        return self._configured()

    def with_schedule_id(self, value: Optional[str]):
        self.schedule_id = value
        return self._configured()

    def with_shipping_amount(self, value: Optional[Decimal]):
        self.shipping_amount = value
        return self._configured()

    def with_timestamp(self, value: Optional[str]):
        self.timestamp = value
        return self._configured()

    async def execute(self, config_name: str = DEFAULT_CONFIG) -> "Transaction":
        """
        Validate the request and submit it to the configured gateway.

        Raises:
            ConfigurationError: No gateway under ``config_name``.
            ValidationError: On the first failing field check; nothing is sent.
            DispatchError: Whatever the gateway raises, unchanged.
        """
        client = services.get_client(config_name)
        self.validate()
        logger.info(
            "Dispatching %s (%s) to %s",
            self.transaction_kind.name,
            self.transaction_modifier.value,
            client.name,
        )
        return await self._dispatch(client.process_authorization)

    async def serialize(self, config_name: str = DEFAULT_CONFIG) -> str:
        """
        Validate the request as a hosted payment page request and serialize it.

        Raises:
            CapabilityError: If the gateway has no hosted payment support.
        """
        client = services.get_client(config_name)
        self.transaction_modifier = ProcessingModifier.HOSTED_REQUEST
        self.validate()

        if not client.supports_hosted_payments:
            self.state = BuilderState.REJECTED
            raise CapabilityError("Your current gateway does not support hosted payments.")
        return await self._dispatch(client.serialize_request)


class ManagementBuilder(TransactionBuilder):
    """Builds follow-up requests: captures, refunds, voids and token maintenance."""

    def __init__(self, transaction_kind: TransactionKind, payment_method: Optional["PaymentMethod"] = None):
        self.amount: Optional[Decimal] = None
        self.currency: Optional[str] = None
        self.description: Optional[str] = None
        self.gratuity: Optional[Decimal] = None
        self.po_number: Optional[str] = None
        self.tax_amount: Optional[Decimal] = None
        self.tax_type: Optional[TaxType] = None
        super().__init__(transaction_kind, payment_method)

    @property
    def transaction_id(self) -> Optional[str]:
        if self.payment_method is not None and self.payment_method.is_transaction_reference:
            return self.payment_method.transaction_id
        return None

    def setup_validations(self) -> RuleRegistry:
        return management_rules()

    def with_amount(self, value: Optional[Decimal]):
        self.amount = value
        return self._configured()

    def with_currency(self, value: Optional[str]):
        self.currency = value
        return self._configured()

    def with_description(self, value: Optional[str]):
        self.description = value
        return self._configured()

    def with_gratuity(self, value: Optional[Decimal]):
        self.gratuity = value
        return self._configured()

    def with_po_number(self, value: Optional[str]):
        self.po_number = value
        self.transaction_modifier = ProcessingModifier.LEVEL_II
        return self._configured()

    def with_tax_amount(self, value: Optional[Decimal]):
        self.tax_amount = value
        self.transaction_modifier = ProcessingModifier.LEVEL_II
        return self._configured()

    def with_tax_type(self, value: Optional[TaxType]):
        self.tax_type = value
        self.transaction_modifier = ProcessingModifier.LEVEL_II
        return self._configured()

    async def execute(self, config_name: str = DEFAULT_CONFIG) -> "Transaction":
        client = services.get_client(config_name)
        self.validate()
        logger.info("Dispatching %s follow-up to %s", self.transaction_kind.name, client.name)
        return await self._dispatch(client.manage_transaction)
