from __future__ import annotations
from flask import Blueprint, request
from franchise import get_db
from franchise.decorators.auth import require_permissions
from franchise.models import Order
from franchise.routes._json import order_json
from franchise.services import orders
from franchise.services.policy import current_store_id
from franchise.utils.listing import paginate
from franchise.utils.sorting import apply_multi_sort

orders_bp = Blueprint('orders', __name__)

SORTABLE = {
    'id': Order.id,
    'total_amount': Order.total_amount,
    'created_at': Order.created_at,
}


@orders_bp.post('')
@require_permissions('ORDER.CREATE')
def place_order():
    data = request.json or {}
    order = orders.place_order(get_db(), current_store_id(), data.get('items'))
    return order_json(order), 201


@orders_bp.get('')
@require_permissions('ORDER.READ')
def list_orders():
    q = orders.store_orders_query(get_db(), current_store_id())
    q = apply_multi_sort(q, request.args.get('sort'), SORTABLE, Order.id)
    return paginate(q, lambda o: order_json(o, with_items=False))


@orders_bp.get('/<int:order_id>')
@require_permissions('ORDER.READ')
def get_order(order_id: int):
    return order_json(orders.get_order(get_db(), order_id, store_id=current_store_id()))
