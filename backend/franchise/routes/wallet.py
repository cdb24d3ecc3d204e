from __future__ import annotations
from flask import Blueprint, request, abort
from franchise import get_db
from franchise.config.pagination import normalize_pagination
from franchise.decorators.auth import require_permissions
from franchise.models import TopupRequest
from franchise.routes._json import ledger_entry_json, topup_json
from franchise.services import ledger, topups, wallet
from franchise.services.policy import current_store_id
from franchise.utils.filters import apply_filters
from franchise.utils.listing import list_response, paginate

wallet_bp = Blueprint('wallet', __name__)


@wallet_bp.get('')
@require_permissions('WALLET.READ')
def get_wallet():
    store_id = current_store_id()
    return {'storeId': store_id, 'balance': wallet.get_balance(get_db(), store_id)}


@wallet_bp.get('/ledger')
@require_permissions('WALLET.READ')
def ledger_history():
    """Ledger entries of the caller's store, newest first."""
    session = get_db()
    store_id = current_store_id()
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    entries = ledger.history(session, store_id, limit, offset)
    total = ledger.history_query(session, store_id).order_by(None).count()
    return list_response([ledger_entry_json(e) for e in entries], total, limit, offset)


@wallet_bp.post('/topups')
@require_permissions('WALLET.TOPUP')
def request_topup():
    data = request.json or {}
    topup = topups.request_topup(get_db(), current_store_id(), data.get('amount'), data.get('depositorName'))
    body = topup_json(topup)
    body['depositGuide'] = topups.deposit_guide(topup)
    return body, 201


@wallet_bp.get('/topups')
@require_permissions('WALLET.READ')
def list_topups():
    q = topups.topups_query(get_db(), store_id=current_store_id())
    q = apply_filters(q, {'status': {'column': TopupRequest.status, 'choices': TopupRequest.ALL_STATUSES}}, request.args)
    return paginate(q.order_by(TopupRequest.id.desc()), topup_json)


@wallet_bp.get('/topups/<int:topup_id>')
@require_permissions('WALLET.READ')
def get_topup(topup_id: int):
    topup = topups.get_topup(get_db(), topup_id, store_id=current_store_id())
    body = topup_json(topup)
    if topup.status == TopupRequest.STATUS_REQUESTED:
        body['depositGuide'] = topups.deposit_guide(topup)
    return body
