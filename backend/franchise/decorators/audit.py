from __future__ import annotations
"""Audit logging decorator for privileged route handlers.

Usage examples:

@audit_log('TOPUP.APPROVE', entity='TopupRequest', entity_id_arg='topup_id', meta_keys=['balance', 'credited'])
def approve_topup(topup_id): ...

@audit_log('BANK.INGEST', entity='BankTransaction', entity_id_key='id',
           meta_builder=lambda data, rv, args, kwargs: {'matched': data.get('matched')})
def ingest(): ...

Parameters:
  action: required audit action code (e.g. TOPUP.APPROVE)
  entity: optional entity label (TopupRequest, Store, HeadOffice)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: name of the path parameter to use for entity_id (fallback if entity_id_key absent).
  meta_keys: list of keys to project from returned JSON into meta dict (shallow copy).
  meta_builder: callable returning a meta dict; receives (data, original_return_value, args, kwargs). If provided it overrides meta_keys.

The audit row is written after the handler's own unit of work has committed and
only when the handler returned normally; failures raise before this point.
"""

from functools import wraps
from typing import Any, Callable, Iterable, Optional

from flask import current_app

from franchise.services.audit import add_audit
from franchise import get_db


def _extract_payload(rv: Any):
    """Return the JSON-able dict of a Flask return value (dict, (dict, status), (dict, status, headers))."""
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            data = _extract_payload(rv)
            if not isinstance(data, dict):
                data = {}
            entity_id = None
            if entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            if meta_builder:
                meta = meta_builder(data, rv, args, kwargs)
            elif meta_keys:
                meta = {k: data.get(k) for k in meta_keys if k in data}
            else:
                meta = None
            session = get_db()
            try:
                add_audit(action, entity, entity_id, meta)
                session.commit()
            except Exception:
                # The operation itself is already committed; losing its audit row must not turn it into a 500
                session.rollback()
                current_app.logger.exception('audit write failed for %s', action)
            return rv
        return wrapper
    return outer
