from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, Text, ForeignKey, DateTime, func
from typing import Optional

from .base import Base, utcnow


class BankTransaction(Base):
    """Incoming bank deposit as reported by the bank feed. One row per external id."""
    __tablename__ = 'bank_transactions'
    STATUS_MATCHED = 'matched'
    STATUS_UNMATCHED = 'unmatched'
    # matched a deposit code but the credit was refused (e.g. top-up in an unexpected state)
    STATUS_REJECTED = 'rejected'
    ALL_STATUSES = (STATUS_MATCHED, STATUS_UNMATCHED, STATUS_REJECTED)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    external_tx_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    memo: Mapped[Optional[str]] = mapped_column(Text)
    depositor: Mapped[Optional[str]] = mapped_column(String(64))
    occurred_at: Mapped[Optional[str]] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    deposit_code: Mapped[Optional[str]] = mapped_column(String(64))
    matched_topup_id: Mapped[Optional[int]] = mapped_column(ForeignKey('topup_requests.id'))
    matched_store_id: Mapped[Optional[int]] = mapped_column(ForeignKey('stores.id'))
    note: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
