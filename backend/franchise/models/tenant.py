from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, ForeignKey, DateTime, func
from typing import Optional

from .base import Base, utcnow


class HeadOffice(Base):
    __tablename__ = 'head_offices'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # Shared with franchisees to join / browse; compared upper-cased
    invite_code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    stores = relationship('Store', back_populates='head_office')


class Store(Base):
    __tablename__ = 'stores'
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_INACTIVE = 'INACTIVE'
    ALL_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    head_office_id: Mapped[int] = mapped_column(ForeignKey('head_offices.id'), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_ACTIVE)
    merchant_code_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    head_office = relationship('HeadOffice', back_populates='stores')

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def set_merchant_code(self, raw: str):
        from franchise.services.codes import hash_code
        self.merchant_code_hash = hash_code(raw)

    def verify_merchant_code(self, raw: str) -> bool:
        from franchise.services.codes import check_code
        return check_code(self.merchant_code_hash, raw)
