"""Append-only ledger of balance-affecting events.

Rules:
- entries are only ever added, never updated or deleted; corrections are new
  offsetting entries
- ``append`` never commits: it must share the caller's transaction with the
  wallet mutation it records
"""
from __future__ import annotations
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from franchise.config.pagination import normalize_pagination
from franchise.models import LedgerEntry
from franchise.utils.validation import clip


def append(session: Session, store_id: int, type: str, amount: int, ref_type: str, ref_id: int,
           memo: Optional[str] = None) -> LedgerEntry:
    if type not in LedgerEntry.ALL_TYPES:
        raise ValueError(f'unknown ledger entry type {type}')
    if ref_type not in LedgerEntry.ALL_REF_TYPES:
        raise ValueError(f'unknown ledger ref type {ref_type}')
    entry = LedgerEntry(
        store_id=store_id,
        type=type,
        amount=amount,
        ref_type=ref_type,
        ref_id=ref_id,
        memo=clip(memo, 255),
    )
    session.add(entry)
    session.flush()
    return entry


def history_query(session: Session, store_id: int):
    return (
        session.query(LedgerEntry)
        .filter(LedgerEntry.store_id == store_id)
        .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
    )


def history(session: Session, store_id: int, limit: Optional[int] = None, offset: int = 0) -> List[LedgerEntry]:
    """Entries of a store, newest first."""
    limit, offset = normalize_pagination(limit, offset)
    return history_query(session, store_id).offset(offset).limit(limit).all()


def ledger_sum(session: Session, store_id: int) -> int:
    total = session.execute(
        select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(LedgerEntry.store_id == store_id)
    ).scalar_one()
    return int(total)
