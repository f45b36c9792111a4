"""SQLAlchemy models for the commit audit trail."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLog(Base):
    """
    Immutable audit trail entry.

    One entry per commit attempt that reaches the API: dispatched, rejected
    by a field check, refused for a missing gateway capability, or failed at
    the gateway. Entries are append-only and never modified.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(50), nullable=False, index=True)
    transaction_kind = Column(String(30), nullable=True)
    modifier = Column(String(30), nullable=True)
    payment_method_kind = Column(String(20), nullable=True)
    transaction_id = Column(String(100), nullable=True, index=True)
    details = Column(Text, nullable=True)  # JSON: {"field": "Amount", ...}
    timestamp = Column(DateTime(timezone=True), default=_utcnow)
