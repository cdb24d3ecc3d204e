from __future__ import annotations
from datetime import datetime, timezone
from flask import Blueprint, request, abort
from franchise import get_db
from franchise.decorators.audit import audit_log
from franchise.decorators.auth import require_permissions
from franchise.models import BankTransaction, LedgerEntry, Store, TopupRequest
from franchise.routes._json import bank_transaction_json, store_json, topup_json
from franchise.services import bank, tenants, topups, wallet
from franchise.utils.filters import apply_filters
from franchise.utils.listing import paginate
from franchise.utils.validation import validate_status

admin_bp = Blueprint('admin', __name__)


def _parse_occurred_at(raw):
    if raw in (None, ''):
        return None
    try:
        dt = datetime.fromisoformat(str(raw).replace('Z', '+00:00'))
    except ValueError:
        abort(400, description='occurredAt must be ISO 8601')
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@admin_bp.post('/head-offices')
@require_permissions('ADMIN.TENANT.MANAGE')
@audit_log('HEAD_OFFICE.CREATE', entity='HeadOffice', entity_id_key='id', meta_keys=['name'])
def create_head_office():
    data = request.json or {}
    name = (data.get('name') or '').strip()
    if not name:
        abort(400, description='name required')
    ho = tenants.create_head_office(get_db(), name, data.get('inviteCode'))
    return {'id': ho.id, 'name': ho.name, 'inviteCode': ho.invite_code}, 201


@admin_bp.patch('/stores/<int:store_id>')
@require_permissions('ADMIN.TENANT.MANAGE')
@audit_log('STORE.STATUS.SET', entity='Store', entity_id_key='id', meta_keys=['status'])
def update_store(store_id: int):
    data = request.json or {}
    status = validate_status(data.get('status'), Store.ALL_STATUSES)
    store = tenants.set_store_status(get_db(), store_id, status)
    return store_json(store)


@admin_bp.get('/topups')
@require_permissions('ADMIN.TOPUP.READ')
def list_topups():
    q = topups.topups_query(get_db())
    q = apply_filters(q, {
        'status': {'column': TopupRequest.status, 'choices': TopupRequest.ALL_STATUSES},
        'storeId': {'column': TopupRequest.store_id, 'coerce': int},
    }, request.args)
    return paginate(q.order_by(TopupRequest.id.asc()), topup_json)


@admin_bp.post('/topups/<int:topup_id>/approve')
@require_permissions('ADMIN.TOPUP.APPROVE')
@audit_log('TOPUP.APPROVE', entity='TopupRequest', entity_id_arg='topup_id', meta_keys=['storeId', 'balance', 'credited'])
def approve_topup(topup_id: int):
    """Manual approval; approving an already paid top-up is a no-op."""
    data = request.get_json(silent=True) or {}
    memo = data.get('memo') or f'manual approval of top-up {topup_id}'
    snapshot = topups.apply_topup_paid(get_db(), topup_id, memo=memo, ref_type=LedgerEntry.REF_TOPUP)
    return snapshot.to_json()


@admin_bp.post('/bank-transactions')
@require_permissions('ADMIN.BANK.INGEST')
@audit_log('BANK.INGEST', entity='BankTransaction', entity_id_key='id',
           meta_keys=['externalTxId', 'matched', 'duplicate', 'credited', 'status'])
def ingest_bank_transaction():
    data = request.json or {}
    external_tx_id = str(data.get('externalTxId') or '').strip()
    if not external_tx_id:
        abort(400, description='externalTxId required')
    if len(external_tx_id) > bank.EXTERNAL_ID_LENGTH:
        abort(400, description=f'externalTxId longer than {bank.EXTERNAL_ID_LENGTH} characters')
    result = bank.ingest_bank_transaction(
        get_db(),
        external_tx_id,
        data.get('amount'),
        memo=data.get('memo'),
        depositor=data.get('depositor'),
        occurred_at=_parse_occurred_at(data.get('occurredAt')),
    )
    return result.to_json(), (200 if result.duplicate else 201)


@admin_bp.get('/bank-transactions')
@require_permissions('ADMIN.BANK.READ')
def list_bank_transactions():
    q = bank.bank_transactions_query(get_db())
    q = apply_filters(q, {'status': {'column': BankTransaction.status, 'choices': BankTransaction.ALL_STATUSES}}, request.args)
    return paginate(q.order_by(BankTransaction.id.desc()), bank_transaction_json)


@admin_bp.get('/stores/<int:store_id>/wallet')
@require_permissions('ADMIN.WALLET.AUDIT')
def verify_wallet(store_id: int):
    session = get_db()
    tenants.get_store(session, store_id)
    return wallet.verify(session, store_id)
