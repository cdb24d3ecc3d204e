from __future__ import annotations
from flask import Blueprint, request, abort
from franchise import get_db
from franchise.decorators.auth import require_permissions
from franchise.models import Product
from franchise.routes._json import product_json
from franchise.services import tenants
from franchise.services.policy import current_head_office_id
from franchise.utils.filters import apply_filters
from franchise.utils.listing import paginate

cat_bp = Blueprint('catalog', __name__)


@cat_bp.get('/products')
@require_permissions('CAT.READ')
def list_products():
    """Catalog of the caller's head office, newest first. Admins pass headOfficeId."""
    head_office_id = current_head_office_id()
    requested = request.args.get('headOfficeId', type=int)
    if head_office_id is None:
        if requested is None:
            abort(400, description='headOfficeId required')
        head_office_id = requested
    elif requested is not None and requested != head_office_id:
        abort(403, description='Head office access denied')
    q = tenants.products_query(get_db(), head_office_id)
    q = apply_filters(q, {'status': {'column': Product.status, 'choices': Product.ALL_STATUSES}}, request.args)
    return paginate(q.order_by(Product.id.desc()), product_json)
