"""
Mock gateway for tests and the demo API.

Simulates a real gateway connector:
  - Configurable latency
  - Optional hosted payment page support
  - Forced failures (raises the DispatchError you hand it)
  - Realistic transaction ids and multi-use tokens

Every submitted builder is recorded in ``submissions`` so callers can assert
on exactly what was dispatched.
"""

import asyncio
import json
import random
import uuid
from decimal import Decimal
from typing import Any, Optional

from paybuilder.config import settings
from paybuilder.engine.errors import DispatchError
from paybuilder.models.builders import AuthorizationBuilder, ManagementBuilder, TransactionBuilder
from paybuilder.models.enums import TransactionKind, TransactionStatus
from paybuilder.models.transaction import Transaction
from paybuilder.providers.base import Dispatcher


def _cents(amount: Optional[Decimal]) -> Optional[int]:
    """Convert a decimal amount to minor units."""
    if amount is None:
        return None
    return int((Decimal(amount) * 100).quantize(Decimal("1")))


class MockGateway(Dispatcher):
    """In-memory gateway that approves everything it is sent unless told to fail."""

    def __init__(
        self,
        supports_hosted_payments: Optional[bool] = None,
        latency_ms: Optional[int] = None,
        fail_with: Optional[DispatchError] = None,
    ):
        self._supports_hosted = (
            supports_hosted_payments
            if supports_hosted_payments is not None
            else settings.mock_supports_hosted_payments
        )
        self._latency_ms = latency_ms if latency_ms is not None else settings.mock_latency_ms
        self.fail_with = fail_with
        self.submissions: list[TransactionBuilder] = []

    @property
    def name(self) -> str:
        return "mock_gateway"

    @property
    def supports_hosted_payments(self) -> bool:
        return self._supports_hosted

    async def _submit(self, builder: TransactionBuilder) -> None:
        # Simulate network latency
        if self._latency_ms > 0:
            jitter = random.uniform(0.5, 1.5)
            await asyncio.sleep(self._latency_ms * jitter / 1000)

        self.submissions.append(builder)
        if self.fail_with is not None:
            raise self.fail_with

    async def process_authorization(self, builder: AuthorizationBuilder) -> Transaction:
        await self._submit(builder)

        token = None
        if builder.request_multi_use_token:
            token = f"tok_{uuid.uuid4().hex[:20]}"

        balance = None
        if builder.transaction_kind is TransactionKind.BALANCE:
            balance = Decimal("100.00")

        return Transaction(
            transaction_id=f"txn_{uuid.uuid4().hex[:16]}",
            status=TransactionStatus.APPROVED,
            response_code="00",
            response_message="APPROVAL",
            transaction_kind=builder.transaction_kind,
            authorized_amount=builder.auth_amount if builder.auth_amount is not None else builder.amount,
            balance_amount=balance,
            token=token,
            client_transaction_id=builder.client_transaction_id,
            payment_method_kind=builder.payment_method_kind,
            gateway=self.name,
        )

    async def manage_transaction(self, builder: ManagementBuilder) -> Transaction:
        await self._submit(builder)

        return Transaction(
            transaction_id=builder.transaction_id or f"txn_{uuid.uuid4().hex[:16]}",
            status=TransactionStatus.APPROVED,
            response_code="00",
            response_message="SUCCESS",
            transaction_kind=builder.transaction_kind,
            authorized_amount=builder.amount,
            payment_method_kind=builder.payment_method_kind,
            gateway=self.name,
        )

    async def serialize_request(self, builder: AuthorizationBuilder) -> str:
        await self._submit(builder)

        payload: dict[str, Any] = {
            "TRANSACTION_TYPE": builder.transaction_kind.name,
            "AMOUNT": _cents(builder.amount),
            "CURRENCY": builder.currency,
            "ORDER_ID": builder.order_id or uuid.uuid4().hex[:20],
            "AUTO_SETTLE_FLAG": "1" if builder.transaction_kind is TransactionKind.SALE else "0",
            "CARD_STORAGE_ENABLE": "1" if builder.request_multi_use_token else "0",
        }
        if builder.billing_address is not None:
            payload["BILLING_CODE"] = builder.billing_address.postal_code
            payload["BILLING_CO"] = builder.billing_address.country
        if builder.hosted_payment_data is not None:
            hpp = builder.hosted_payment_data
            payload["OFFER_SAVE_CARD"] = "1" if hpp.offer_to_save_card else "0"
            payload["PAYER_EXIST"] = "1" if hpp.customer_exists else "0"
            payload["PAYER_REF"] = hpp.customer_key
            payload["PMT_REF"] = hpp.payment_key
            payload.update(hpp.supplementary_data)
        return json.dumps({k: v for k, v in payload.items() if v is not None})
