"""Per-store balance cache kept in lockstep with the ledger.

``credit`` and ``debit`` are the only mutators and both run under an exclusive
lock on the wallet row, so the read-check-write sequence of two concurrent
callers on the same store serializes. Wallets of different stores never
contend. A store without a wallet row simply has a zero balance; the row is
created the first time it is locked.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from franchise.errors import InsufficientFunds
from franchise.models import Wallet
from franchise.services import ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletSnapshot:
    store_id: int
    balance: int
    credited: bool = False

    def to_json(self):
        return {'storeId': self.store_id, 'balance': self.balance, 'credited': self.credited}


def get_balance(session: Session, store_id: int) -> int:
    balance = session.execute(select(Wallet.balance).where(Wallet.store_id == store_id)).scalar_one_or_none()
    return balance or 0


def _locked(store_id: int):
    # populate_existing: a wallet already in the identity map must be re-read under the lock
    return (
        select(Wallet)
        .where(Wallet.store_id == store_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


def lock_wallet(session: Session, store_id: int) -> Wallet:
    wallet = session.execute(_locked(store_id)).scalar_one_or_none()
    if wallet is not None:
        return wallet
    try:
        with session.begin_nested():
            session.add(Wallet(store_id=store_id, balance=0))
    except IntegrityError:
        # Another transaction created the row first; its lock is waited on below
        logger.debug('wallet for store %s created concurrently', store_id)
    return session.execute(_locked(store_id)).scalar_one()


def credit(session: Session, store_id: int, amount: int) -> Wallet:
    if amount <= 0:
        raise ValueError('credit amount must be positive')
    wallet = lock_wallet(session, store_id)
    wallet.balance = wallet.balance + amount
    session.flush()
    return wallet


def debit(session: Session, store_id: int, amount: int) -> Wallet:
    if amount < 0:
        raise ValueError('debit amount must not be negative')
    wallet = lock_wallet(session, store_id)
    if amount > wallet.balance:
        raise InsufficientFunds(needed=amount - wallet.balance)
    wallet.balance = wallet.balance - amount
    session.flush()
    return wallet


def verify(session: Session, store_id: int) -> dict:
    """Compare the cached balance with the ledger it is derived from."""
    balance = get_balance(session, store_id)
    total = ledger.ledger_sum(session, store_id)
    if balance != total:
        logger.error('wallet drift for store %s: balance=%s ledger=%s', store_id, balance, total)
    return {'storeId': store_id, 'balance': balance, 'ledgerSum': total, 'consistent': balance == total}
