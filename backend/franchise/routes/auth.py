from __future__ import annotations
import hmac
from flask import Blueprint, request, abort, current_app
from flask_jwt_extended import create_access_token
from franchise import get_db
from franchise.constants.permissions import ROLE_ADMIN, ROLE_HEAD_OFFICE, ROLE_STORE, permissions_for
from franchise.errors import Unauthorized
from franchise.services import tenants
from franchise.routes._json import branch_json, head_office_json, store_json

auth_bp = Blueprint('auth', __name__)


def issue_token(identity: str, role: str, **claims) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    extra = {'role': role, 'perms': permissions_for(role)}
    extra.update({k: v for k, v in claims.items() if v is not None})
    return create_access_token(identity=identity, additional_claims=extra)


def store_token(store) -> str:
    return issue_token(f'store:{store.id}', ROLE_STORE, store_id=store.id, head_office_id=store.head_office_id)


@auth_bp.post('/verify-head')
def verify_head():
    """Step 1 of the store app: invite code -> head office and its branches."""
    data = request.json or {}
    ho, stores = tenants.verify_head_office(get_db(), data.get('inviteCode'))
    current_app.logger.info('head office %s verified', ho.id)
    token = issue_token(f'head:{ho.id}', ROLE_HEAD_OFFICE, head_office_id=ho.id)
    return {
        'success': True,
        'headOffice': head_office_json(ho),
        'branches': [branch_json(s) for s in stores],
        'access_token': token,
    }


@auth_bp.post('/join-store')
def join_store():
    data = request.json or {}
    name = (data.get('name') or '').strip()
    if not name:
        abort(400, description='name required')
    store, merchant_code = tenants.join_store(get_db(), data.get('inviteCode'), name, data.get('address'))
    return {
        'success': True,
        'store': store_json(store),
        # shown once; only the hash is kept
        'merchantCode': merchant_code,
        'access_token': store_token(store),
    }, 201


@auth_bp.post('/login-store')
def login_store():
    """Step 2: branch id + merchant code -> store token."""
    data = request.json or {}
    if data.get('storeId') is None or not data.get('merchantCode'):
        abort(400, description='storeId & merchantCode required')
    store = tenants.authenticate_store(get_db(), data.get('storeId'), data.get('merchantCode'))
    current_app.logger.info('store %s logged in', store.id)
    return {'success': True, 'store': store_json(store), 'access_token': store_token(store)}


@auth_bp.post('/admin-token')
def admin_token():
    data = request.json or {}
    configured = current_app.config.get('ADMIN_SECRET') or ''
    supplied = data.get('secret') or ''
    if not configured or not hmac.compare_digest(str(supplied).encode(), configured.encode()):
        current_app.logger.warning('rejected admin token request from %s', request.remote_addr)
        raise Unauthorized()
    return {'access_token': issue_token('admin', ROLE_ADMIN)}
