"""Top-up requests and the single place where they turn into wallet credit.

``apply_topup_paid`` is shared by manual approval and bank matching. It locks
the top-up row before looking at its status, so two callers racing on the
same request serialize: the first credits, the second sees ``paid`` and
returns the balance without crediting again.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import current_app, has_app_context
from sqlalchemy import select
from sqlalchemy.orm import Session

from franchise.db import unit_of_work
from franchise.errors import NotFound
from franchise.models import LedgerEntry, TopupRequest
from franchise.models.base import utcnow
from franchise.services import ledger, tenants, wallet
from franchise.services.wallet import WalletSnapshot
from franchise.utils.fsm import TransitionValidator
from franchise.utils.validation import clip, positive_int

logger = logging.getLogger(__name__)

TOPUP_FSM = TransitionValidator({
    TopupRequest.STATUS_REQUESTED: {TopupRequest.STATUS_PAID},
    TopupRequest.STATUS_PAID: set(),
})

DEPOSIT_CODE_SEPARATOR = '-'


def make_deposit_code(head_office_id: int, store_id: int, topup_id: int) -> str:
    # Unique because topup_id is; no lookup needed
    return DEPOSIT_CODE_SEPARATOR.join(str(part) for part in (head_office_id, store_id, topup_id))


def deposit_guide(topup: TopupRequest, config: Optional[dict] = None) -> dict:
    """Bank details a franchisee needs to pay a top-up (configuration pass-through)."""
    if config is None:
        config = current_app.config if has_app_context() else {}
    return {
        'bankName': config.get('DEPOSIT_BANK_NAME', ''),
        'accountNo': config.get('DEPOSIT_ACCOUNT_NO', ''),
        'accountHolder': config.get('DEPOSIT_ACCOUNT_HOLDER', ''),
        'amount': topup.amount,
        'depositCode': topup.deposit_code,
        'memo': f'Put {topup.deposit_code} in the transfer memo',
    }


def request_topup(session: Session, store_id: int, amount, depositor_name: Optional[str] = None) -> TopupRequest:
    amount = positive_int(amount)
    depositor_name = clip(depositor_name, 64)
    with unit_of_work(session):
        store = tenants.get_active_store(session, store_id)
        topup = TopupRequest(
            store_id=store.id,
            amount=amount,
            depositor_name=depositor_name,
            status=TopupRequest.STATUS_REQUESTED,
        )
        session.add(topup)
        session.flush()
        topup.deposit_code = make_deposit_code(store.head_office_id, store.id, topup.id)
        session.flush()
    logger.info('top-up %s requested by store %s amount=%s', topup.id, store_id, amount)
    return topup


def _lock_topup(session: Session, topup_id: int) -> TopupRequest:
    topup = session.execute(
        select(TopupRequest)
        .where(TopupRequest.id == topup_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if topup is None:
        raise NotFound(f'Top-up {topup_id} not found')
    return topup


def settle_topup(session: Session, topup_id: int, memo: Optional[str], ref_type: str) -> WalletSnapshot:
    """Credit a top-up inside the caller's transaction (no commit)."""
    topup = _lock_topup(session, topup_id)
    if topup.status == TopupRequest.STATUS_PAID:
        logger.info('top-up %s already paid; no credit applied', topup_id)
        return WalletSnapshot(topup.store_id, wallet.get_balance(session, topup.store_id), credited=False)
    TOPUP_FSM.assert_can_transition(topup.status, TopupRequest.STATUS_PAID)
    topup.status = TopupRequest.STATUS_PAID
    topup.paid_at = utcnow()
    w = wallet.credit(session, topup.store_id, topup.amount)
    ledger.append(
        session,
        topup.store_id,
        LedgerEntry.TYPE_CHARGE,
        topup.amount,
        ref_type,
        topup.id,
        memo=memo,
    )
    return WalletSnapshot(topup.store_id, w.balance, credited=True)


def apply_topup_paid(session: Session, topup_id: int, memo: Optional[str] = None,
                     ref_type: str = LedgerEntry.REF_TOPUP) -> WalletSnapshot:
    with unit_of_work(session):
        snapshot = settle_topup(session, topup_id, memo, ref_type)
    if snapshot.credited:
        logger.info('top-up %s credited via %s; store %s balance=%s',
                    topup_id, ref_type, snapshot.store_id, snapshot.balance)
    return snapshot


def get_topup(session: Session, topup_id: int, store_id: Optional[int] = None) -> TopupRequest:
    topup = session.get(TopupRequest, topup_id)
    if topup is None or (store_id is not None and topup.store_id != store_id):
        raise NotFound(f'Top-up {topup_id} not found')
    return topup


def find_by_deposit_code(session: Session, deposit_code: str) -> Optional[TopupRequest]:
    return session.execute(
        select(TopupRequest).where(TopupRequest.deposit_code == deposit_code)
    ).scalar_one_or_none()


def topups_query(session: Session, store_id: Optional[int] = None, status: Optional[str] = None):
    q = session.query(TopupRequest)
    if store_id is not None:
        q = q.filter(TopupRequest.store_id == store_id)
    if status:
        q = q.filter(TopupRequest.status == status)
    return q
