"""
Transaction endpoints.

POST /transactions        — Build an authorization request and dispatch it.
POST /transactions/hosted — Build a hosted payment page request and serialize it.
GET  /transactions/audit  — Audit trail of commit attempts.

Builder errors map to HTTP statuses: ValidationError → 422,
CapabilityError → 501, ConfigurationError → 503, DispatchError → 502.
Every commit attempt is written to the audit trail.
"""

import json
from decimal import Decimal
from typing import Awaitable, Callable, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paybuilder.audit.logger import log_event
from paybuilder.config import settings
from paybuilder.database import get_session
from paybuilder.engine.errors import (
    CapabilityError,
    ConfigurationError,
    DispatchError,
    ValidationError,
)
from paybuilder.models.audit import AuditLog
from paybuilder.models.base import Address, HostedPaymentData
from paybuilder.models.builders import AuthorizationBuilder
from paybuilder.models.enums import AddressType, AliasAction, TransactionKind
from paybuilder.models.payment_methods import (
    CreditCardData,
    DebitTrackData,
    EBTCardData,
    ECheck,
    GiftCard,
    PaymentMethod,
    TransactionReference,
)
from paybuilder.models.transaction import Transaction

router = APIRouter(prefix="/transactions", tags=["transactions"])


class AddressIn(BaseModel):
    street_address_1: Optional[str] = None
    street_address_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class PaymentMethodIn(BaseModel):
    type: Literal["card", "debit", "ach", "ebt", "gift", "reference"]
    number: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    cvn: Optional[str] = None
    card_holder_name: Optional[str] = None
    token: Optional[str] = None
    track_data: Optional[str] = None
    pin_block: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    check_holder_name: Optional[str] = None
    serial_number: Optional[str] = None
    alias: Optional[str] = None
    transaction_id: Optional[str] = None

    def build(self) -> PaymentMethod:
        if self.type == "card":
            return CreditCardData(
                number=self.number,
                exp_month=self.exp_month,
                exp_year=self.exp_year,
                cvn=self.cvn,
                card_holder_name=self.card_holder_name,
                token=self.token,
            )
        if self.type == "debit":
            return DebitTrackData(value=self.track_data, pin_block=self.pin_block)
        if self.type == "ach":
            return ECheck(
                account_number=self.account_number,
                routing_number=self.routing_number,
                check_holder_name=self.check_holder_name,
            )
        if self.type == "ebt":
            return EBTCardData(
                number=self.number,
                exp_month=self.exp_month,
                exp_year=self.exp_year,
                pin_block=self.pin_block,
                serial_number=self.serial_number,
            )
        if self.type == "gift":
            return GiftCard(number=self.number, alias=self.alias, token=self.token)
        return TransactionReference(transaction_id=self.transaction_id)


class TransactionIn(BaseModel):
    kind: str = "SALE"
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    payment_method: Optional[PaymentMethodIn] = None
    billing_address: Optional[AddressIn] = None
    shipping_address: Optional[AddressIn] = None
    offline_auth_code: Optional[str] = None
    cash_back_amount: Optional[Decimal] = None
    alias: Optional[str] = None
    alias_action: Optional[AliasAction] = None
    order_id: Optional[str] = None
    invoice_number: Optional[str] = None
    description: Optional[str] = None
    client_transaction_id: Optional[str] = None
    request_multi_use_token: bool = False
    allow_duplicates: bool = False


class HostedTransactionIn(TransactionIn):
    offer_to_save_card: bool = False
    customer_key: Optional[str] = None


class TransactionOut(BaseModel):
    transaction_id: str
    status: str
    response_code: str
    response_message: str
    transaction_kind: Optional[str]
    authorized_amount: Optional[Decimal]
    balance_amount: Optional[Decimal]
    token: Optional[str]
    client_transaction_id: Optional[str]
    payment_method_kind: Optional[str]
    gateway: str


class HostedOut(BaseModel):
    payload: dict


class AuditEntry(BaseModel):
    id: int
    action: str
    transaction_kind: Optional[str]
    modifier: Optional[str]
    payment_method_kind: Optional[str]
    transaction_id: Optional[str]
    details: Optional[dict] = None
    timestamp: Optional[str]


def _parse_kind(name: str) -> TransactionKind:
    try:
        return TransactionKind[name.upper()]
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown transaction kind: {name}") from None


def build_request(body: TransactionIn) -> AuthorizationBuilder:
    """Assemble an authorization builder from a request body. Never validates."""
    payment_method = body.payment_method.build() if body.payment_method else None
    builder = (
        AuthorizationBuilder(_parse_kind(body.kind), payment_method)
        .with_amount(body.amount)
        .with_currency(body.currency)
        .with_order_id(body.order_id)
        .with_invoice_number(body.invoice_number)
        .with_description(body.description)
        .with_request_multi_use_token(body.request_multi_use_token)
        .with_allow_duplicates(body.allow_duplicates)
    )

    if body.billing_address is not None:
        builder.with_address(Address(**body.billing_address.model_dump()), AddressType.BILLING)
    if body.shipping_address is not None:
        builder.with_address(Address(**body.shipping_address.model_dump()), AddressType.SHIPPING)
    if body.offline_auth_code is not None:
        builder.with_offline_auth_code(body.offline_auth_code)
    if body.cash_back_amount is not None:
        builder.with_cash_back(body.cash_back_amount)
    if body.alias is not None or body.alias_action is not None:
        builder.with_alias(body.alias_action, body.alias)
    if body.client_transaction_id is not None:
        builder.with_client_transaction_id(body.client_transaction_id)
    return builder


def _transaction_to_response(txn: Transaction) -> TransactionOut:
    return TransactionOut(
        transaction_id=txn.transaction_id,
        status=txn.status.value,
        response_code=txn.response_code,
        response_message=txn.response_message,
        transaction_kind=txn.transaction_kind.name if txn.transaction_kind else None,
        authorized_amount=txn.authorized_amount,
        balance_amount=txn.balance_amount,
        token=txn.token,
        client_transaction_id=txn.client_transaction_id,
        payment_method_kind=txn.payment_method_kind.value if txn.payment_method_kind else None,
        gateway=txn.gateway,
    )


async def _commit(
    session: AsyncSession,
    builder: AuthorizationBuilder,
    commit: Callable[[str], Awaitable],
):
    """Run a builder commit, auditing the outcome and mapping errors to HTTP."""
    try:
        return await commit(settings.default_config_name)

    except ValidationError as e:
        detail = {"field": e.field, "outcome": e.outcome.value, "message": str(e)}
        await log_event(session, "validation_failed", builder, details=detail)
        await session.commit()
        raise HTTPException(status_code=422, detail=detail) from e

    except CapabilityError as e:
        await log_event(session, "capability_unsupported", builder, details={"error": str(e)})
        await session.commit()
        raise HTTPException(status_code=501, detail=str(e)) from e

    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    except DispatchError as e:
        await log_event(session, "dispatch_failed", builder, details={
            "error": str(e),
            "status_code": e.status_code,
            "response_code": e.response_code,
        })
        await session.commit()
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("", response_model=TransactionOut, status_code=201)
async def create_transaction(body: TransactionIn, session: AsyncSession = Depends(get_session)):
    """Build, validate and dispatch an authorization-flavor request."""
    builder = build_request(body)
    txn = await _commit(session, builder, builder.execute)

    await log_event(session, "transaction_dispatched", builder, transaction_id=txn.transaction_id, details={
        "amount": txn.authorized_amount,
        "status": txn.status.value,
        "gateway": txn.gateway,
    })
    await session.commit()
    return _transaction_to_response(txn)


@router.post("/hosted", response_model=HostedOut)
async def serialize_hosted(body: HostedTransactionIn, session: AsyncSession = Depends(get_session)):
    """Build and validate a hosted payment page request, returning the serialized payload."""
    builder = build_request(body)
    hosted = HostedPaymentData(offer_to_save_card=body.offer_to_save_card, customer_key=body.customer_key)
    try:
        builder.with_hosted_payment_data(hosted, settings.default_config_name)
    except CapabilityError as e:
        await log_event(session, "capability_unsupported", builder, details={"error": str(e)})
        await session.commit()
        raise HTTPException(status_code=501, detail=str(e)) from e
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    payload = await _commit(session, builder, builder.serialize)

    await log_event(session, "hosted_request_serialized", builder, details={"amount": builder.amount})
    await session.commit()
    return HostedOut(payload=json.loads(payload))


@router.get("/audit", response_model=list[AuditEntry])
async def list_audit(session: AsyncSession = Depends(get_session)):
    """Audit trail of commit attempts, oldest first."""
    result = await session.execute(select(AuditLog).order_by(AuditLog.id))
    return [
        AuditEntry(
            id=log.id,
            action=log.action,
            transaction_kind=log.transaction_kind,
            modifier=log.modifier,
            payment_method_kind=log.payment_method_kind,
            transaction_id=log.transaction_id,
            details=json.loads(log.details) if log.details else None,
            timestamp=log.timestamp.isoformat() if log.timestamp else None,
        )
        for log in result.scalars().all()
    ]
