"""JSON shapes shared by the blueprints (camelCase, matching the store app client)."""
from __future__ import annotations


def _iso(ts):
    return ts.isoformat() if ts is not None else None


def head_office_json(ho):
    return {'id': ho.id, 'name': ho.name}


def store_json(s):
    # merchant_code_hash never leaves the server
    return {
        'id': s.id,
        'name': s.name,
        'address': s.address,
        'headOfficeId': s.head_office_id,
        'status': s.status,
    }


def branch_json(s):
    return {'id': s.id, 'name': s.name, 'address': s.address}


def product_json(p):
    return {'id': p.id, 'headOfficeId': p.head_office_id, 'name': p.name, 'price': p.price, 'status': p.status}


def order_item_json(i):
    return {
        'productId': i.product_id,
        'qty': i.qty,
        'unitPrice': i.unit_price,
        'lineTotal': i.line_total,
    }


def order_json(o, with_items: bool = True):
    body = {
        'id': o.id,
        'storeId': o.store_id,
        'headOfficeId': o.head_office_id,
        'status': o.status,
        'totalAmount': o.total_amount,
        'createdAt': _iso(o.created_at),
    }
    if with_items:
        body['items'] = [order_item_json(i) for i in o.items]
    return body


def ledger_entry_json(e):
    return {
        'id': e.id,
        'type': e.type,
        'amount': e.amount,
        'refType': e.ref_type,
        'refId': e.ref_id,
        'memo': e.memo,
        'createdAt': _iso(e.created_at),
    }


def topup_json(t):
    return {
        'id': t.id,
        'storeId': t.store_id,
        'amount': t.amount,
        'depositorName': t.depositor_name,
        'status': t.status,
        'depositCode': t.deposit_code,
        'createdAt': _iso(t.created_at),
        'paidAt': _iso(t.paid_at),
    }


def bank_transaction_json(tx):
    return {
        'id': tx.id,
        'externalTxId': tx.external_tx_id,
        'amount': tx.amount,
        'memo': tx.memo,
        'depositor': tx.depositor,
        'occurredAt': _iso(tx.occurred_at),
        'status': tx.status,
        'depositCode': tx.deposit_code,
        'topupId': tx.matched_topup_id,
        'storeId': tx.matched_store_id,
        'note': tx.note,
    }
