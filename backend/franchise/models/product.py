from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, ForeignKey, DateTime, func

from .base import Base, utcnow


class Product(Base):
    __tablename__ = 'products'
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_SOLD_OUT = 'SOLD_OUT'
    STATUS_INACTIVE = 'INACTIVE'
    ALL_STATUSES = (STATUS_ACTIVE, STATUS_SOLD_OUT, STATUS_INACTIVE)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    head_office_id: Mapped[int] = mapped_column(ForeignKey('head_offices.id'), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # Whole currency units, no fractions
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_ACTIVE, index=True)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())
