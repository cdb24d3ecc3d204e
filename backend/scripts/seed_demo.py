#!/usr/bin/env python
"""Idempotent seed script for a demo head office, its stores and catalog.

Usage:
    python backend/scripts/seed_demo.py                  # seed normally
    python backend/scripts/seed_demo.py --dry-run        # run logic then rollback (no DB changes)
    python backend/scripts/seed_demo.py --invite DEMO-HQ --stores 3
    python backend/scripts/seed_demo.py --fund 50000     # also credit each new store through an approved top-up

Merchant codes are printed once for stores created by this run; only their
hashes are stored, so rerunning cannot show them again.
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from franchise import create_app, get_database, get_db  # type: ignore
from franchise.models import HeadOffice, LedgerEntry, Product, Store, TopupRequest
from franchise.models.base import utcnow
from franchise.services import ledger, wallet
from franchise.services.codes import generate_code, normalize_code
from franchise.services.topups import make_deposit_code

DEMO_PRODUCTS = [
    ('Americano beans 1kg', 18000),
    ('Milk 1L x 12', 24000),
    ('Paper cups 1000', 32000),
    ('Vanilla syrup', 9000),
]


def ensure_head_office(session, name: str, invite_code: str):
    code = normalize_code(invite_code)
    ho = session.execute(select(HeadOffice).where(HeadOffice.invite_code == code)).scalar_one_or_none()
    if ho:
        return ho, False
    ho = HeadOffice(name=name, invite_code=code)
    session.add(ho)
    session.flush()
    return ho, True


def ensure_products(session, ho):
    existing = {p.name for p in session.execute(select(Product).where(Product.head_office_id == ho.id)).scalars()}
    created = 0
    for name, price in DEMO_PRODUCTS:
        if name not in existing:
            session.add(Product(head_office_id=ho.id, name=name, price=price, status=Product.STATUS_ACTIVE))
            created += 1
    return created


def ensure_stores(session, ho, count: int):
    existing = {s.name for s in session.execute(select(Store).where(Store.head_office_id == ho.id)).scalars()}
    created = []
    for i in range(1, count + 1):
        name = f'{ho.name} Branch {i}'
        if name in existing:
            continue
        code = generate_code()
        store = Store(head_office_id=ho.id, name=name, address=f'{i} Demo street', status=Store.STATUS_ACTIVE)
        store.set_merchant_code(code)
        session.add(store)
        session.flush()
        created.append((store, code))
    return created


def fund(session, store, amount: int):
    """Paid top-up plus matching credit, the same rows a manual approval writes."""
    topup = TopupRequest(store_id=store.id, amount=amount, status=TopupRequest.STATUS_PAID, paid_at=utcnow())
    session.add(topup)
    session.flush()
    topup.deposit_code = make_deposit_code(store.head_office_id, store.id, topup.id)
    wallet.credit(session, store.id, amount)
    ledger.append(session, store.id, LedgerEntry.TYPE_CHARGE, amount, LedgerEntry.REF_TOPUP, topup.id, memo='demo seed')


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed a demo franchise tenant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_demo.py\n  dry run: seed_demo.py --dry-run\n  bigger tenant: seed_demo.py --stores 5 --fund 100000\n""")
    )
    p.add_argument('--name', default='Demo Coffee HQ', help='Head office name')
    p.add_argument('--invite', default='DEMO-HQ', help='Head office invite code')
    p.add_argument('--stores', type=int, default=2, help='Number of demo stores to ensure')
    p.add_argument('--fund', type=int, default=0, metavar='POINTS', help='Credit each newly created store with POINTS')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        # Bootstrap schema if migrations were not run; in real env prefer alembic upgrade
        get_database().create_all()

    with app.app_context():
        session = get_db()
        ho, ho_created = ensure_head_office(session, args.name, args.invite)
        created_p = ensure_products(session, ho)
        new_stores = ensure_stores(session, ho, args.stores)
        if args.fund > 0:
            for store, _ in new_stores:
                fund(session, store, args.fund)
        if args.dry_run:
            session.rollback()
            print(f"[DRY-RUN] (rolled back) Head office would create: {int(ho_created)}, "
                  f"Products: {created_p}, Stores: {len(new_stores)}")
            return
        session.commit()
        print(f"[DONE] Head office {ho.id} ({ho.invite_code}) created: {int(ho_created)}, "
              f"Products created: {created_p}, Stores created: {len(new_stores)}")
        for store, code in new_stores:
            print(f"  store {store.id} '{store.name}' merchant code: {code}")


if __name__ == '__main__':
    main()
