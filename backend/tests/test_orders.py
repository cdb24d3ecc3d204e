import pytest
from franchise import get_db
from franchise.errors import InsufficientFunds, InvalidProduct, InvalidQuantity, InvalidState, ProductMismatch, ProductUnavailable
from franchise.models import LedgerEntry, Order, OrderItem, Product, Store
from franchise.services import ledger, orders, tenants, wallet
from tests.test_utils_seed import fund_store, seed_product, seed_tenant, store_headers


def test_order_debits_wallet_and_writes_ledger(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 5000)
    with app_instance.app_context():
        session = get_db()
        order = orders.place_order(session, t['store_id'], [{'productId': t['coffee_id'], 'qty': 2}])
        assert order.total_amount == 4000
        assert order.status == Order.STATUS_PENDING
        assert order.head_office_id == t['head_office_id']
        assert [(i.product_id, i.qty, i.unit_price, i.line_total) for i in order.items] == [(t['coffee_id'], 2, 2000, 4000)]
        assert wallet.get_balance(session, t['store_id']) == 1000
        newest = ledger.history(session, t['store_id'])[0]
        assert newest.type == LedgerEntry.TYPE_ORDER_DEBIT
        assert newest.amount == -4000
        assert newest.ref_type == LedgerEntry.REF_ORDER
        assert newest.ref_id == order.id
        assert wallet.verify(session, t['store_id'])['consistent'] is True


def test_insufficient_funds_leaves_no_trace(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 1000)
    with app_instance.app_context():
        session = get_db()
        with pytest.raises(InsufficientFunds) as exc:
            orders.place_order(session, t['store_id'], [{'productId': t['coffee_id'], 'qty': 2}])
        assert exc.value.needed == 3000
        assert session.query(Order).count() == 0
        assert wallet.get_balance(session, t['store_id']) == 1000
        assert len(ledger.history(session, t['store_id'])) == 1


def test_exact_balance_order_empties_wallet(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 3500)
    with app_instance.app_context():
        session = get_db()
        order = orders.place_order(session, t['store_id'], [
            {'productId': t['coffee_id'], 'qty': 1},
            {'productId': t['tea_id'], 'qty': 1},
        ])
        assert order.total_amount == 3500
        assert wallet.get_balance(session, t['store_id']) == 0


def test_repeated_product_lines_are_merged(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 10000)
    with app_instance.app_context():
        order = orders.place_order(get_db(), t['store_id'], [
            {'productId': t['tea_id'], 'qty': 1},
            {'productId': t['coffee_id'], 'qty': 1},
            {'productId': t['tea_id'], 'qty': 2},
        ])
        assert [(i.product_id, i.qty) for i in order.items] == [(t['tea_id'], 3), (t['coffee_id'], 1)]
        assert order.total_amount == 3 * 1500 + 2000


def test_other_head_office_product_is_refused(app_instance):
    a = seed_tenant(app_instance, 'Alpha')
    b = seed_tenant(app_instance, 'Beta')
    fund_store(app_instance, a['store_id'], 10000)
    with app_instance.app_context():
        session = get_db()
        with pytest.raises(ProductMismatch) as exc:
            orders.place_order(session, a['store_id'], [{'productId': b['coffee_id'], 'qty': 1}])
        assert exc.value.product_id == b['coffee_id']
        assert wallet.get_balance(session, a['store_id']) == 10000
        with pytest.raises(ProductMismatch):
            orders.place_order(session, a['store_id'], [{'productId': 424242, 'qty': 1}])
        assert session.query(Order).count() == 0
        assert session.query(OrderItem).count() == 0
        assert [e.type for e in ledger.history(session, a['store_id'])] == [LedgerEntry.TYPE_CHARGE]


def test_unavailable_product_is_refused(app_instance):
    t = seed_tenant(app_instance)
    sold_out = seed_product(app_instance, t['head_office_id'], 'Sold out', 100, Product.STATUS_SOLD_OUT)
    fund_store(app_instance, t['store_id'], 1000)
    with app_instance.app_context():
        with pytest.raises(ProductUnavailable):
            orders.place_order(get_db(), t['store_id'], [{'productId': sold_out, 'qty': 1}])


@pytest.mark.parametrize('items', [
    [],
    None,
    ['nope'],
    [{'productId': 1, 'qty': 0}],
    [{'productId': 1, 'qty': -1}],
    [{'productId': 1, 'qty': 1.5}],
    [{'productId': 1, 'qty': True}],
    [{'productId': 1, 'qty': 10_001}],
    [{'productId': 1, 'qty': 6000}, {'productId': 1, 'qty': 5000}],
])
def test_invalid_lines_are_rejected(items):
    with pytest.raises(InvalidQuantity):
        orders.normalize_items(items)


@pytest.mark.parametrize('product_id', [None, 0, 'abc', 1.5, 2 ** 31, 10 ** 20])
def test_invalid_product_ids_are_rejected(product_id):
    with pytest.raises(InvalidProduct) as exc:
        orders.normalize_items([{'productId': product_id, 'qty': 1}])
    assert exc.value.code == 'INVALID_PRODUCT'


def test_inactive_store_cannot_order(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 5000)
    with app_instance.app_context():
        session = get_db()
        tenants.set_store_status(session, t['store_id'], Store.STATUS_INACTIVE)
        with pytest.raises(InvalidState):
            orders.place_order(session, t['store_id'], [{'productId': t['coffee_id'], 'qty': 1}])


def test_order_api(client, app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 5000)
    headers = store_headers(app_instance, t['store_id'])
    r = client.post('/orders', json={'items': [{'productId': t['coffee_id'], 'qty': 2}]}, headers=headers)
    assert r.status_code == 201, r.get_json()
    body = r.get_json()
    assert body['totalAmount'] == 4000
    assert body['items'] == [{'productId': t['coffee_id'], 'qty': 2, 'unitPrice': 2000, 'lineTotal': 4000}]

    short = client.post('/orders', json={'items': [{'productId': t['coffee_id'], 'qty': 2}]}, headers=headers)
    assert short.status_code == 409
    err = short.get_json()['error']
    assert err['code'] == 'INSUFFICIENT_FUNDS'
    assert err['needed'] == 3000

    listed = client.get('/orders', headers=headers).get_json()
    assert listed['pagination']['total'] == 1
    assert 'items' not in listed['data'][0]
    single = client.get(f"/orders/{body['id']}", headers=headers)
    assert single.status_code == 200
    assert single.get_json()['items'][0]['qty'] == 2
    assert client.get('/wallet', headers=headers).get_json()['balance'] == 1000


def test_order_api_errors(client, app_instance):
    a = seed_tenant(app_instance, 'Alpha')
    b = seed_tenant(app_instance, 'Beta')
    headers = store_headers(app_instance, a['store_id'])
    mismatch = client.post('/orders', json={'items': [{'productId': b['coffee_id'], 'qty': 1}]}, headers=headers)
    assert mismatch.status_code == 422
    assert mismatch.get_json()['error']['productId'] == b['coffee_id']
    bad_qty = client.post('/orders', json={'items': [{'productId': a['coffee_id'], 'qty': 0}]}, headers=headers)
    assert bad_qty.status_code == 400
    assert bad_qty.get_json()['error']['code'] == 'INVALID_QUANTITY'
    huge_qty = client.post('/orders', json={'items': [{'productId': a['coffee_id'], 'qty': 10 ** 20}]}, headers=headers)
    assert huge_qty.status_code == 400
    assert huge_qty.get_json()['error']['code'] == 'INVALID_QUANTITY'
    bad_product = client.post('/orders', json={'items': [{'productId': 'coffee', 'qty': 1}]}, headers=headers)
    assert bad_product.status_code == 400
    assert bad_product.get_json()['error']['code'] == 'INVALID_PRODUCT'


def test_store_cannot_read_other_store_order(client, app_instance):
    a = seed_tenant(app_instance, 'Alpha')
    b = seed_tenant(app_instance, 'Beta')
    fund_store(app_instance, a['store_id'], 5000)
    r = client.post('/orders', json={'items': [{'productId': a['tea_id'], 'qty': 1}]},
                    headers=store_headers(app_instance, a['store_id']))
    order_id = r.get_json()['id']
    other = client.get(f'/orders/{order_id}', headers=store_headers(app_instance, b['store_id']))
    assert other.status_code == 404
    assert client.get('/orders', headers=store_headers(app_instance, b['store_id'])).get_json()['data'] == []


def test_orders_sort(client, app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 10000)
    headers = store_headers(app_instance, t['store_id'])
    client.post('/orders', json={'items': [{'productId': t['tea_id'], 'qty': 1}]}, headers=headers)
    client.post('/orders', json={'items': [{'productId': t['coffee_id'], 'qty': 1}]}, headers=headers)
    by_total = client.get('/orders?sort=total_amount', headers=headers).get_json()
    assert [o['totalAmount'] for o in by_total['data']] == [1500, 2000]
    assert client.get('/orders?sort=bogus', headers=headers).status_code == 400
