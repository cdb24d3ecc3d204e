from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import BigInteger, Integer, String, ForeignKey, DateTime, func

from .base import Base, utcnow


class Order(Base):
    """Settled order. Rows and their items are never updated after insert."""
    __tablename__ = 'orders'
    STATUS_PENDING = 'pending'
    ALL_STATUSES = (STATUS_PENDING,)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id'), nullable=False, index=True)
    # Copied from the store at creation time
    head_office_id: Mapped[int] = mapped_column(ForeignKey('head_offices.id'), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_PENDING, index=True)
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    items = relationship('OrderItem', back_populates='order', order_by='OrderItem.id', lazy='selectin')


class OrderItem(Base):
    __tablename__ = 'order_items'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id'), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey('products.id'), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    line_total: Mapped[int] = mapped_column(BigInteger, nullable=False)
    order = relationship('Order', back_populates='items')
