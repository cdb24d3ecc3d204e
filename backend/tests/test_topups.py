import pytest
from franchise import get_db
from franchise.errors import InvalidAmount, InvalidState, NotFound
from franchise.models import LedgerEntry, Store, TopupRequest
from franchise.services import ledger, topups, wallet
from tests.test_utils_seed import admin_headers, seed_store, seed_tenant, store_headers


def test_request_topup_assigns_deposit_code(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        topup = topups.request_topup(get_db(), t['store_id'], 5000, ' Kim ')
        assert topup.status == TopupRequest.STATUS_REQUESTED
        assert topup.deposit_code == f"{t['head_office_id']}-{t['store_id']}-{topup.id}"
        assert topup.depositor_name == 'Kim'
        guide = topups.deposit_guide(topup)
        assert guide['bankName'] == 'Test Bank'
        assert guide['accountNo'] == '123-456-789'
        assert guide['depositCode'] == topup.deposit_code
        assert guide['amount'] == 5000


@pytest.mark.parametrize('amount', [0, -5, 1.5, True, None, 'abc', 10 ** 12 + 1, 10 ** 20, 1e20])
def test_request_topup_rejects_bad_amount(app_instance, amount):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        session = get_db()
        with pytest.raises(InvalidAmount):
            topups.request_topup(session, t['store_id'], amount)
        assert topups.topups_query(session).count() == 0


def test_request_topup_for_inactive_store(app_instance):
    t = seed_tenant(app_instance)
    inactive = seed_store(app_instance, t['head_office_id'], 'Closed', status=Store.STATUS_INACTIVE)
    with app_instance.app_context():
        with pytest.raises(InvalidState):
            topups.request_topup(get_db(), inactive, 1000)
        with pytest.raises(NotFound):
            topups.request_topup(get_db(), 9999, 1000)


def test_apply_topup_paid_credits_once(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        session = get_db()
        topup = topups.request_topup(session, t['store_id'], 5000)
        first = topups.apply_topup_paid(session, topup.id)
        second = topups.apply_topup_paid(session, topup.id)
        assert first.credited is True and first.balance == 5000
        assert second.credited is False and second.balance == 5000
        entries = ledger.history(session, t['store_id'])
        assert len(entries) == 1
        assert entries[0].type == LedgerEntry.TYPE_CHARGE
        assert entries[0].amount == 5000
        assert entries[0].ref_type == LedgerEntry.REF_TOPUP
        assert entries[0].ref_id == topup.id
        refreshed = topups.get_topup(session, topup.id)
        assert refreshed.status == TopupRequest.STATUS_PAID
        assert refreshed.paid_at is not None


def test_apply_unknown_topup(app_instance):
    with app_instance.app_context():
        with pytest.raises(NotFound):
            topups.apply_topup_paid(get_db(), 42)


def test_fsm_only_allows_requested_to_paid():
    assert topups.TOPUP_FSM.can_transition(TopupRequest.STATUS_REQUESTED, TopupRequest.STATUS_PAID)
    assert not topups.TOPUP_FSM.can_transition(TopupRequest.STATUS_PAID, TopupRequest.STATUS_REQUESTED)


def test_topup_api_flow(client, app_instance):
    t = seed_tenant(app_instance)
    headers = store_headers(app_instance, t['store_id'])
    r = client.post('/wallet/topups', json={'amount': 5000, 'depositorName': 'Kim'}, headers=headers)
    assert r.status_code == 201, r.get_json()
    body = r.get_json()
    assert body['status'] == 'requested'
    assert body['depositGuide']['depositCode'] == body['depositCode']
    topup_id = body['id']

    listed = client.get('/wallet/topups?status=requested', headers=headers).get_json()
    assert [x['id'] for x in listed['data']] == [topup_id]

    approved = client.post(f'/admin/topups/{topup_id}/approve', headers=admin_headers(app_instance))
    assert approved.status_code == 200, approved.get_json()
    assert approved.get_json() == {'storeId': t['store_id'], 'balance': 5000, 'credited': True}

    # Replayed approval changes nothing
    again = client.post(f'/admin/topups/{topup_id}/approve', headers=admin_headers(app_instance)).get_json()
    assert again['credited'] is False and again['balance'] == 5000

    assert client.get('/wallet', headers=headers).get_json() == {'storeId': t['store_id'], 'balance': 5000}
    single = client.get(f'/wallet/topups/{topup_id}', headers=headers).get_json()
    assert single['status'] == 'paid'
    assert 'depositGuide' not in single
    ledger_body = client.get('/wallet/ledger', headers=headers).get_json()
    assert ledger_body['pagination']['total'] == 1
    assert ledger_body['data'][0]['type'] == 'CHARGE'


def test_topup_api_rejects_bad_amount(client, app_instance):
    t = seed_tenant(app_instance)
    r = client.post('/wallet/topups', json={'amount': 0}, headers=store_headers(app_instance, t['store_id']))
    assert r.status_code == 400
    assert r.get_json()['error']['code'] == 'INVALID_AMOUNT'


def test_topup_of_other_store_is_not_found(client, app_instance):
    a = seed_tenant(app_instance, 'Alpha')
    b = seed_tenant(app_instance, 'Beta')
    r = client.post('/wallet/topups', json={'amount': 1000}, headers=store_headers(app_instance, a['store_id']))
    topup_id = r.get_json()['id']
    other = client.get(f'/wallet/topups/{topup_id}', headers=store_headers(app_instance, b['store_id']))
    assert other.status_code == 404


def test_admin_topup_queue_filters(client, app_instance):
    a = seed_tenant(app_instance, 'Alpha')
    b = seed_tenant(app_instance, 'Beta')
    client.post('/wallet/topups', json={'amount': 1000}, headers=store_headers(app_instance, a['store_id']))
    client.post('/wallet/topups', json={'amount': 2000}, headers=store_headers(app_instance, b['store_id']))
    headers = admin_headers(app_instance)
    all_rows = client.get('/admin/topups', headers=headers).get_json()
    assert [x['amount'] for x in all_rows['data']] == [1000, 2000]
    only_b = client.get(f"/admin/topups?storeId={b['store_id']}", headers=headers).get_json()
    assert [x['storeId'] for x in only_b['data']] == [b['store_id']]
    assert client.get('/admin/topups?status=bogus', headers=headers).status_code == 400


def test_approve_unknown_topup_is_404(client, app_instance):
    r = client.post('/admin/topups/999/approve', headers=admin_headers(app_instance))
    assert r.status_code == 404
    assert r.get_json()['error']['code'] == 'NOT_FOUND'


def test_topup_api_rejects_oversized_amount(client, app_instance):
    t = seed_tenant(app_instance)
    headers = store_headers(app_instance, t['store_id'])
    r = client.post('/wallet/topups', json={'amount': 10 ** 20}, headers=headers)
    assert r.status_code == 400
    assert r.get_json()['error']['code'] == 'INVALID_AMOUNT'
    assert client.get('/wallet/topups', headers=headers).get_json()['pagination']['total'] == 0


def test_long_depositor_name_is_clipped(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        topup = topups.request_topup(get_db(), t['store_id'], 5000, 'K' * 100)
        assert topup.depositor_name == 'K' * 64
