"""Bank deposit reconciliation.

Incoming transfers carry a deposit code ("{head_office_id}-{store_id}-{topup_id}")
somewhere in their memo. Ingestion records every external transaction exactly
once and, when the memo names an existing top-up, credits it through
``topups.settle_topup`` in the same transaction as the record. A crash between
the two therefore cannot leave a transaction recorded but uncredited, or
credited but unrecorded.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from franchise.db import unit_of_work
from franchise.errors import DomainError
from franchise.models import BankTransaction, LedgerEntry
from franchise.services import topups
from franchise.utils.validation import clip, positive_int

logger = logging.getLogger(__name__)

# three dash-joined integers, not cut out of a longer number; longer digit runs are never ids
DEPOSIT_CODE_RE = re.compile(r"(?<!\d)(\d{1,18})-(\d{1,18})-(\d{1,18})(?!\d)")

EXTERNAL_ID_LENGTH = 128
DEPOSITOR_LENGTH = 64


@dataclass(frozen=True)
class DepositCode:
    head_office_id: int
    store_id: int
    topup_id: int

    def __str__(self):
        return topups.make_deposit_code(self.head_office_id, self.store_id, self.topup_id)


@dataclass
class IngestResult:
    transaction: BankTransaction
    matched: bool
    duplicate: bool = False
    credited: bool = False
    balance: Optional[int] = None

    def to_json(self):
        tx = self.transaction
        return {
            'id': tx.id,
            'externalTxId': tx.external_tx_id,
            'matched': self.matched,
            'duplicate': self.duplicate,
            'credited': self.credited,
            'status': tx.status,
            'depositCode': tx.deposit_code,
            'topupId': tx.matched_topup_id,
            'storeId': tx.matched_store_id,
            'balance': self.balance,
        }


def iter_deposit_codes(text: Optional[str]) -> Iterator[DepositCode]:
    for m in DEPOSIT_CODE_RE.finditer(text or ''):
        yield DepositCode(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def parse_deposit_code(text: Optional[str]) -> Optional[DepositCode]:
    return next(iter_deposit_codes(text), None)


def _find_existing(session: Session, external_tx_id: str) -> Optional[BankTransaction]:
    return session.execute(
        select(BankTransaction).where(BankTransaction.external_tx_id == external_tx_id)
    ).scalar_one_or_none()


def _match_topup(session: Session, memo: Optional[str]):
    for code in iter_deposit_codes(memo):
        topup = topups.find_by_deposit_code(session, str(code))
        if topup is not None:
            return code, topup
    return parse_deposit_code(memo), None


def _record_and_apply(session: Session, external_tx_id: str, amount: int, memo: Optional[str],
                      depositor: Optional[str], occurred_at: Optional[datetime]) -> IngestResult:
    existing = _find_existing(session, external_tx_id)
    if existing is not None:
        return IngestResult(existing, matched=existing.matched_topup_id is not None, duplicate=True)

    code, topup = _match_topup(session, memo)
    tx = BankTransaction(
        external_tx_id=external_tx_id,
        amount=amount,
        memo=memo,
        depositor=depositor,
        occurred_at=occurred_at,
        status=BankTransaction.STATUS_UNMATCHED,
        deposit_code=str(code) if code else None,
    )
    session.add(tx)
    # unique external_tx_id: a concurrent delivery of the same id fails here
    session.flush()

    if topup is None:
        tx.note = 'no deposit code in memo' if code is None else 'deposit code matches no top-up'
        logger.warning('bank transaction %s unmatched (%s)', external_tx_id, tx.note)
        return IngestResult(tx, matched=False)

    tx.matched_topup_id = topup.id
    tx.matched_store_id = topup.store_id
    result = IngestResult(tx, matched=True)
    try:
        with session.begin_nested():
            snapshot = topups.settle_topup(
                session, topup.id, memo=f'bank {external_tx_id}', ref_type=LedgerEntry.REF_BANK,
            )
    except DomainError as e:
        # Credit refused: keep the record so the event is not replayed, leave it for an operator
        tx.status = BankTransaction.STATUS_REJECTED
        tx.note = e.message[:255]
        logger.warning('bank transaction %s matched top-up %s but was rejected: %s', external_tx_id, topup.id, e.message)
        return result

    tx.status = BankTransaction.STATUS_MATCHED
    result.credited = snapshot.credited
    result.balance = snapshot.balance
    if amount != topup.amount:
        tx.note = f'amount {amount} differs from requested {topup.amount}'
        logger.warning('bank transaction %s: %s', external_tx_id, tx.note)
    elif not snapshot.credited:
        tx.note = 'top-up already paid'
    return result


def ingest_bank_transaction(session: Session, external_tx_id: str, amount, memo: Optional[str] = None,
                            depositor: Optional[str] = None, occurred_at: Optional[datetime] = None) -> IngestResult:
    external_tx_id = (external_tx_id or '').strip()
    if not external_tx_id:
        raise ValueError('external_tx_id required')
    if len(external_tx_id) > EXTERNAL_ID_LENGTH:
        raise ValueError(f'external_tx_id longer than {EXTERNAL_ID_LENGTH} characters')
    amount = positive_int(amount)
    depositor = clip(depositor, DEPOSITOR_LENGTH)
    memo = None if memo is None else str(memo)
    try:
        with unit_of_work(session):
            result = _record_and_apply(session, external_tx_id, amount, memo, depositor, occurred_at)
    except IntegrityError:
        # Lost the race against a redelivery of the same event
        existing = _find_existing(session, external_tx_id)
        if existing is None:
            raise
        result = IngestResult(existing, matched=existing.matched_topup_id is not None, duplicate=True)
    if result.duplicate:
        logger.info('bank transaction %s already recorded; ignored', external_tx_id)
    elif result.credited:
        logger.info('bank transaction %s credited top-up %s', external_tx_id, result.transaction.matched_topup_id)
    return result


def bank_transactions_query(session: Session, status: Optional[str] = None):
    q = session.query(BankTransaction)
    if status:
        q = q.filter(BankTransaction.status == status)
    return q

