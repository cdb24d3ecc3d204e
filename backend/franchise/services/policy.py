"""Token-based access checks: which permissions, store and head office the caller holds."""
from __future__ import annotations
from typing import List, Optional, Set
from flask import abort
from flask_jwt_extended import get_jwt


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def missing_permissions(*codes: str) -> List[str]:
    perms = current_permissions()
    return [c for c in codes if c not in perms]


def current_store_id() -> int:
    store_id = get_jwt().get('store_id')
    if store_id is None:
        abort(403, description='Store token required')
    return int(store_id)


def current_head_office_id() -> Optional[int]:
    ho = get_jwt().get('head_office_id')
    return int(ho) if ho is not None else None


def assert_head_office_access(head_office_id: int):
    claimed = current_head_office_id()
    if claimed is None or claimed != head_office_id:
        abort(403, description='Head office access denied')
