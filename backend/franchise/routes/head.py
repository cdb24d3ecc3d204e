from __future__ import annotations
from flask import Blueprint, request, abort
from franchise import get_db
from franchise.decorators.auth import require_permissions
from franchise.models import Order
from franchise.routes._json import order_json
from franchise.services import orders, tenants, wallet
from franchise.services.policy import assert_head_office_access, current_head_office_id
from franchise.utils.filters import apply_filters
from franchise.utils.listing import paginate
from franchise.utils.sorting import apply_multi_sort

head_bp = Blueprint('head', __name__)


def _own_head_office_id() -> int:
    head_office_id = current_head_office_id()
    if head_office_id is None:
        abort(403, description='Head office token required')
    requested = request.args.get('headOfficeId', type=int)
    if requested is not None:
        assert_head_office_access(requested)
    return head_office_id


@head_bp.get('/orders')
@require_permissions('HEAD.ORDER.READ')
def list_orders():
    """Orders placed by every store of the head office, optionally filtered by status/store."""
    q = orders.head_office_orders_query(get_db(), _own_head_office_id())
    q = apply_filters(q, {
        'status': {'column': Order.status},
        'storeId': {'column': Order.store_id, 'coerce': int},
    }, request.args)
    q = apply_multi_sort(q, request.args.get('sort'), {
        'id': Order.id,
        'total_amount': Order.total_amount,
        'created_at': Order.created_at,
        'store_id': Order.store_id,
    }, Order.id)
    return paginate(q, order_json)


@head_bp.get('/stores/<int:store_id>/wallet')
@require_permissions('HEAD.WALLET.READ')
def store_wallet(store_id: int):
    session = get_db()
    store = tenants.get_store(session, store_id)
    assert_head_office_access(store.head_office_id)
    return {'storeId': store.id, 'balance': wallet.get_balance(session, store.id)}
