from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, ForeignKey, DateTime, func
from typing import Optional

from .base import Base, utcnow


class TopupRequest(Base):
    __tablename__ = 'topup_requests'
    # Status lifecycle: requested -> paid (terminal, reached exactly once)
    STATUS_REQUESTED = 'requested'
    STATUS_PAID = 'paid'
    ALL_STATUSES = (STATUS_REQUESTED, STATUS_PAID)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id'), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    depositor_name: Mapped[Optional[str]] = mapped_column(String(64))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_REQUESTED, index=True)
    # "{head_office_id}-{store_id}-{id}"; assigned right after the id is known
    deposit_code: Mapped[Optional[str]] = mapped_column(String(64), unique=True, index=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    paid_at: Mapped[Optional[str]] = mapped_column(DateTime(timezone=True))
