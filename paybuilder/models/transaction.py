"""Gateway result of a dispatched request."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from paybuilder.models.builders import ManagementBuilder
from paybuilder.models.enums import PaymentMethodKind, TransactionKind, TransactionStatus
from paybuilder.models.payment_methods import TransactionReference


@dataclass
class Transaction:
    """
    A completed transaction as reported by the gateway.

    Follow-up operations start from here: ``txn.capture()``, ``txn.refund(...)``
    and friends return a ManagementBuilder targeting this transaction.
    """

    transaction_id: str
    status: TransactionStatus
    response_code: str
    response_message: str = ""
    transaction_kind: Optional[TransactionKind] = None
    authorized_amount: Optional[Decimal] = None
    balance_amount: Optional[Decimal] = None
    token: Optional[str] = None
    client_transaction_id: Optional[str] = None
    payment_method_kind: Optional[PaymentMethodKind] = None
    gateway: str = ""

    @property
    def reference(self) -> TransactionReference:
        return TransactionReference(
            transaction_id=self.transaction_id,
            client_transaction_id=self.client_transaction_id,
            original_kind=self.payment_method_kind,
        )

    def capture(self, amount: Optional[Decimal] = None) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.CAPTURE, self.reference).with_amount(amount)

    def edit(self) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.EDIT, self.reference)

    def hold(self) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.HOLD, self.reference)

    def release(self) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.RELEASE, self.reference)

    def refund(self, amount: Optional[Decimal] = None) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.REFUND, self.reference).with_amount(amount)

    def reverse(self, amount: Optional[Decimal] = None) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.REVERSAL, self.reference).with_amount(amount)

    def void(self) -> ManagementBuilder:
        return ManagementBuilder(TransactionKind.VOID, self.reference)
