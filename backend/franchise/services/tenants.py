"""Head offices, stores and the read-only catalog.

Plumbing around the points core: invite-code verification, store join and
login, store status administration and product listing.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from franchise.db import unit_of_work
from franchise.errors import InvalidState, NotFound, Unauthorized
from franchise.models import HeadOffice, Product, Store
from franchise.services.codes import generate_code, normalize_code

logger = logging.getLogger(__name__)


def get_store(session: Session, store_id: int) -> Store:
    store = session.get(Store, store_id)
    if store is None:
        raise NotFound(f'Store {store_id} not found')
    return store


def get_active_store(session: Session, store_id: int) -> Store:
    store = get_store(session, store_id)
    if not store.is_active:
        raise InvalidState(f'Store {store_id} is inactive')
    return store


def create_head_office(session: Session, name: str, invite_code: Optional[str] = None) -> HeadOffice:
    if not name or not name.strip():
        raise ValueError('name required')
    code = normalize_code(invite_code) or generate_code()
    with unit_of_work(session):
        if session.execute(select(HeadOffice).where(HeadOffice.invite_code == code)).scalar_one_or_none():
            raise InvalidState(f'Invite code {code} already in use')
        ho = HeadOffice(name=name.strip(), invite_code=code)
        session.add(ho)
        session.flush()
    logger.info('head office %s created', ho.id)
    return ho


def find_head_office(session: Session, invite_code: Optional[str]) -> HeadOffice:
    code = normalize_code(invite_code)
    ho = None
    if code:
        ho = session.execute(select(HeadOffice).where(HeadOffice.invite_code == code)).scalar_one_or_none()
    if ho is None:
        raise NotFound('Unknown head office code')
    return ho


def verify_head_office(session: Session, invite_code: Optional[str]) -> Tuple[HeadOffice, List[Store]]:
    """Resolve an invite code to its head office and branch list (ordered by name)."""
    ho = find_head_office(session, invite_code)
    stores = session.execute(
        select(Store).where(Store.head_office_id == ho.id).order_by(Store.name.asc(), Store.id.asc())
    ).scalars().all()
    return ho, list(stores)


def join_store(session: Session, invite_code: Optional[str], name: str, address: Optional[str] = None) -> Tuple[Store, str]:
    """Create a store under the head office owning ``invite_code``.

    Returns the store and its merchant code. The plain code is not stored and
    cannot be recovered later.
    """
    if not name or not name.strip():
        raise ValueError('name required')
    with unit_of_work(session):
        ho = find_head_office(session, invite_code)
        merchant_code = generate_code()
        store = Store(head_office_id=ho.id, name=name.strip(), address=address, status=Store.STATUS_ACTIVE)
        store.set_merchant_code(merchant_code)
        session.add(store)
        session.flush()
    logger.info('store %s joined head office %s', store.id, store.head_office_id)
    return store, merchant_code


def authenticate_store(session: Session, store_id, merchant_code: Optional[str]) -> Store:
    try:
        store = session.get(Store, int(store_id))
    except (TypeError, ValueError):
        store = None
    # Same answer for unknown store, wrong code and inactive store
    if store is None or not store.is_active or not store.verify_merchant_code(merchant_code):
        raise Unauthorized('Merchant code does not match')
    return store


def set_store_status(session: Session, store_id: int, status: str) -> Store:
    if status not in Store.ALL_STATUSES:
        raise InvalidState(f'Unknown store status {status}')
    with unit_of_work(session):
        store = get_store(session, store_id)
        store.status = status
    logger.info('store %s set to %s', store_id, status)
    return store


def products_query(session: Session, head_office_id: int, include_inactive: bool = False):
    q = session.query(Product).filter(Product.head_office_id == head_office_id)
    if not include_inactive:
        q = q.filter(Product.status != Product.STATUS_INACTIVE)
    return q


def list_products(session: Session, head_office_id: int, include_inactive: bool = False) -> List[Product]:
    return products_query(session, head_office_id, include_inactive).order_by(Product.id.desc()).all()
