from tests.test_utils_seed import fund_store, seed_tenant, store_headers


def test_ledger_pagination_and_etag(client, app_instance):
    t = seed_tenant(app_instance)
    for amount in (100, 200, 300):
        fund_store(app_instance, t['store_id'], amount)
    headers = store_headers(app_instance, t['store_id'])
    r = client.get('/wallet/ledger?limit=2', headers=headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body['pagination'] == {'total': 3, 'limit': 2, 'offset': 0, 'returned': 2}
    assert [e['amount'] for e in body['data']] == [300, 200]
    etag = r.headers['ETag']

    cached = client.get('/wallet/ledger?limit=2', headers=dict(headers, **{'If-None-Match': f'"{etag}"'}))
    assert cached.status_code == 304

    tail = client.get('/wallet/ledger?limit=2&offset=2', headers=headers).get_json()
    assert [e['amount'] for e in tail['data']] == [100]
    assert tail['pagination']['returned'] == 1

    # A new entry changes the window, so the old tag no longer matches
    fund_store(app_instance, t['store_id'], 400)
    fresh = client.get('/wallet/ledger?limit=2', headers=dict(headers, **{'If-None-Match': etag}))
    assert fresh.status_code == 200


def test_bad_pagination_is_400(client, app_instance):
    t = seed_tenant(app_instance)
    headers = store_headers(app_instance, t['store_id'])
    assert client.get('/wallet/ledger?limit=abc', headers=headers).status_code == 400
    assert client.get('/orders?offset=x', headers=headers).status_code == 400
