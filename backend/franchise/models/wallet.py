from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, ForeignKey, DateTime, Index, func
from typing import Optional

from .base import Base, utcnow


class Wallet(Base):
    """Materialized balance of a store; always equal to the sum of its ledger entries."""
    __tablename__ = 'wallets'
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id'), primary_key=True, autoincrement=False)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())


class LedgerEntry(Base):
    """Append-only balance event. Credits are positive, debits negative."""
    __tablename__ = 'ledger_entries'
    TYPE_CHARGE = 'CHARGE'
    TYPE_ORDER_DEBIT = 'ORDER_DEBIT'
    ALL_TYPES = (TYPE_CHARGE, TYPE_ORDER_DEBIT)
    REF_TOPUP = 'TOPUP'
    REF_BANK = 'BANK'
    REF_ORDER = 'ORDER'
    ALL_REF_TYPES = (REF_TOPUP, REF_BANK, REF_ORDER)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id'), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ref_type: Mapped[str] = mapped_column(String(16), nullable=False)
    ref_id: Mapped[int] = mapped_column(Integer, nullable=False)
    memo: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())


Index('ix_ledger_entries_store_created', LedgerEntry.store_id, LedgerEntry.created_at)
