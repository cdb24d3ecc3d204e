from __future__ import annotations
"""List endpoint helpers: pagination window, payload envelope and ETag validation."""
import hashlib
from typing import Iterable, Tuple
from flask import request, abort, make_response
from sqlalchemy.orm import Query
from franchise.config.pagination import normalize_pagination


def apply_pagination(q: Query) -> Tuple[Query, int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.order_by(None).count()
    return q.offset(offset).limit(limit), total, limit, offset


def compute_etag(ids: Iterable, total: int, limit: int, offset: int) -> str:
    seed = f"{list(ids)}|{total}|{limit}|{offset}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }


def list_response(rows: list, total: int, limit: int, offset: int):
    """Paginated JSON response with an ETag; answers 304 when If-None-Match matches.

    Listed records are immutable or only move forward in status, so ids plus
    the window are enough to detect change except for status moves, which are
    folded in through the ``status`` key when present.
    """
    ids = [(r.get('id'), r.get('status')) for r in rows]
    etag = compute_etag(ids, total, limit, offset)
    inm = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag:
        resp = make_response('', 304)
    else:
        resp = make_response(build_list_payload(rows, total, limit, offset))
    resp.headers['ETag'] = etag
    return resp


def paginate(q: Query, to_json):
    paged_q, total, limit, offset = apply_pagination(q)
    rows = [to_json(r) for r in paged_q.all()]
    return list_response(rows, total, limit, offset)
