from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from franchise import get_db
from franchise.models import AuditLog


def current_actor() -> str:
    try:
        ident = get_jwt_identity()
    except (RuntimeError, JWTExtendedException):
        ident = None  # no JWT context (scripts, tests calling services directly)
    return str(ident) if ident is not None else 'system'


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. TOPUP.APPROVE, BANK.INGEST, STORE.STATUS.SET
      entity: optional entity name (TopupRequest, Store, etc.)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (will be shallow copied)
    """
    session = get_db()
    log = AuditLog(
        actor=current_actor(),
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
