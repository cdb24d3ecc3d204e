"""Order settlement: price an order against the catalog and pay it from the wallet.

Pricing, the wallet debit, the order row, its items and the ORDER_DEBIT ledger
entry are written in one transaction. Any failure (unknown product, short
balance, database error) leaves no trace of the attempt.
"""
from __future__ import annotations
import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from franchise.config.limits import MAX_ID, MAX_QTY
from franchise.db import unit_of_work
from franchise.errors import InvalidProduct, InvalidQuantity, NotFound, ProductMismatch, ProductUnavailable
from franchise.models import LedgerEntry, Order, OrderItem, Product
from franchise.services import ledger, tenants, wallet
from franchise.utils.validation import positive_int

logger = logging.getLogger(__name__)


def normalize_items(items: Optional[Iterable[Dict[str, Any]]]) -> "OrderedDict[int, int]":
    """Validate requested lines and merge repeated product ids.

    Returns product id -> quantity, in first-seen order.
    """
    if not items:
        raise InvalidQuantity('items must contain at least one line')
    lines: "OrderedDict[int, int]" = OrderedDict()
    for raw in items:
        if not isinstance(raw, dict):
            raise InvalidQuantity('each item needs productId and qty')
        product_id = positive_int(raw.get('productId'), InvalidProduct, 'productId', MAX_ID)
        qty = positive_int(raw.get('qty'), InvalidQuantity, 'qty', MAX_QTY)
        lines[product_id] = lines.get(product_id, 0) + qty
        if lines[product_id] > MAX_QTY:
            raise InvalidQuantity(f'qty must not exceed {MAX_QTY}')
    return lines


def place_order(session: Session, store_id: int, items: Iterable[Dict[str, Any]]) -> Order:
    lines = normalize_items(items)
    with unit_of_work(session):
        store = tenants.get_active_store(session, store_id)
        products = {
            p.id: p
            for p in session.execute(
                select(Product).where(Product.head_office_id == store.head_office_id, Product.id.in_(list(lines)))
            ).scalars()
        }
        # Ids outside the store's own catalog are refused outright; never priced from another tenant
        for product_id in lines:
            product = products.get(product_id)
            if product is None:
                raise ProductMismatch(product_id)
            if product.status != Product.STATUS_ACTIVE:
                raise ProductUnavailable(product_id)

        priced = [(products[pid], qty, products[pid].price * qty) for pid, qty in lines.items()]
        total = sum(line_total for _, _, line_total in priced)

        # Locks the wallet row (materialized at zero if absent); raises InsufficientFunds when short
        wallet.debit(session, store.id, total)

        order = Order(
            store_id=store.id,
            head_office_id=store.head_office_id,
            status=Order.STATUS_PENDING,
            total_amount=total,
        )
        session.add(order)
        session.flush()
        for product, qty, line_total in priced:
            session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                qty=qty,
                unit_price=product.price,
                line_total=line_total,
            ))
        ledger.append(
            session,
            store.id,
            LedgerEntry.TYPE_ORDER_DEBIT,
            -total,
            LedgerEntry.REF_ORDER,
            order.id,
            memo=f'order #{order.id}',
        )
    session.refresh(order)
    logger.info('order %s placed by store %s total=%s', order.id, store_id, total)
    return order


def get_order(session: Session, order_id: int, store_id: Optional[int] = None) -> Order:
    order = session.get(Order, order_id)
    # Another store's order is reported exactly like a missing one
    if order is None or (store_id is not None and order.store_id != store_id):
        raise NotFound(f'Order {order_id} not found')
    return order


def store_orders_query(session: Session, store_id: int):
    return session.query(Order).filter(Order.store_id == store_id)


def head_office_orders_query(session: Session, head_office_id: int, status: Optional[str] = None):
    q = session.query(Order).filter(Order.head_office_id == head_office_id)
    if status:
        q = q.filter(Order.status == status)
    return q


def list_head_office_orders(session: Session, head_office_id: int, status: Optional[str] = None) -> List[Order]:
    return head_office_orders_query(session, head_office_id, status).order_by(Order.id.desc()).all()
