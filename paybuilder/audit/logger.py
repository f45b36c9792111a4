"""
Immutable audit trail for commit attempts.

Every commit that passes through the API gets an append-only entry with:
  - Action (transaction_dispatched, validation_failed, ...)
  - Transaction kind, modifier and payment method kind of the builder
  - Gateway transaction id, when one was issued
  - Details (failing field, error message, amounts)
  - Timestamp (UTC)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from paybuilder.models.audit import AuditLog
from paybuilder.models.builders import TransactionBuilder

logger = logging.getLogger("paybuilder.audit")


def _default(value: Any) -> str:
    # Decimal amounts and enums
    return str(getattr(value, "value", value))


async def log_event(
    session: AsyncSession,
    action: str,
    builder: Optional[TransactionBuilder] = None,
    transaction_id: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """
    Create an immutable audit log entry.

    Args:
        session: Database session.
        action: What happened (e.g. "transaction_dispatched", "validation_failed").
        builder: The builder that was committed, if any.
        transaction_id: Gateway transaction id, if one was issued.
        details: Arbitrary context (serialized to JSON).

    Returns:
        The created AuditLog record.
    """
    payload = json.dumps(details, default=_default) if details else None
    entry = AuditLog(
        action=action,
        transaction_kind=builder.transaction_kind.name if builder else None,
        modifier=builder.transaction_modifier.value if builder else None,
        payment_method_kind=builder.payment_method_kind.value if builder and builder.payment_method_kind else None,
        transaction_id=transaction_id,
        details=payload,
        timestamp=datetime.now(timezone.utc),
    )
    session.add(entry)
    logger.info(
        "AUDIT | kind=%s modifier=%s action=%s txn=%s | %s",
        entry.transaction_kind or "-",
        entry.modifier or "-",
        action,
        transaction_id or "-",
        payload[:200] if payload else "",
    )
    return entry
