import pytest
from franchise import get_db
from franchise.errors import InsufficientFunds
from franchise.models import LedgerEntry, Wallet
from franchise.services import ledger, wallet
from tests.test_utils_seed import fund_store, seed_tenant


def test_missing_wallet_reads_as_zero(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        session = get_db()
        assert wallet.get_balance(session, t['store_id']) == 0
        assert session.get(Wallet, t['store_id']) is None
        assert wallet.verify(session, t['store_id'])['consistent'] is True


def test_credit_creates_wallet_row_lazily(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        session = get_db()
        w = wallet.credit(session, t['store_id'], 700)
        session.commit()
        assert w.balance == 700
        assert wallet.get_balance(session, t['store_id']) == 700


def test_credit_rejects_non_positive(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        with pytest.raises(ValueError):
            wallet.credit(get_db(), t['store_id'], 0)


def test_debit_reports_shortfall_and_leaves_balance(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 1000)
    with app_instance.app_context():
        session = get_db()
        with pytest.raises(InsufficientFunds) as exc:
            wallet.debit(session, t['store_id'], 4000)
        session.rollback()
        assert exc.value.needed == 3000
        assert exc.value.to_dict()['needed'] == 3000
        assert wallet.get_balance(session, t['store_id']) == 1000


def test_debit_of_zero_is_allowed(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        session = get_db()
        assert wallet.debit(session, t['store_id'], 0).balance == 0
        with pytest.raises(ValueError):
            wallet.debit(session, t['store_id'], -1)


def test_ledger_append_validates_type_and_ref(app_instance):
    t = seed_tenant(app_instance)
    with app_instance.app_context():
        session = get_db()
        with pytest.raises(ValueError):
            ledger.append(session, t['store_id'], 'REFUND', 10, LedgerEntry.REF_TOPUP, 1)
        with pytest.raises(ValueError):
            ledger.append(session, t['store_id'], LedgerEntry.TYPE_CHARGE, 10, 'CASH', 1)


def test_history_newest_first_and_sum_matches_balance(app_instance):
    t = seed_tenant(app_instance)
    first = fund_store(app_instance, t['store_id'], 1000)
    second = fund_store(app_instance, t['store_id'], 2500)
    with app_instance.app_context():
        session = get_db()
        entries = ledger.history(session, t['store_id'])
        assert [e.ref_id for e in entries] == [second, first]
        assert all(e.type == LedgerEntry.TYPE_CHARGE for e in entries)
        assert ledger.ledger_sum(session, t['store_id']) == 3500
        assert ledger.history(session, t['store_id'], limit=1, offset=1)[0].ref_id == first
        report = wallet.verify(session, t['store_id'])
        assert report == {'storeId': t['store_id'], 'balance': 3500, 'ledgerSum': 3500, 'consistent': True}


def test_verify_flags_drift(app_instance):
    t = seed_tenant(app_instance)
    fund_store(app_instance, t['store_id'], 1000)
    with app_instance.app_context():
        session = get_db()
        # Simulate a cache written outside the ledger
        session.get(Wallet, t['store_id']).balance = 999
        session.commit()
        report = wallet.verify(session, t['store_id'])
        assert report['consistent'] is False
        assert report['ledgerSum'] == 1000


def test_wallets_are_isolated_per_store(app_instance):
    a = seed_tenant(app_instance, 'Alpha')
    b = seed_tenant(app_instance, 'Beta')
    fund_store(app_instance, a['store_id'], 5000)
    with app_instance.app_context():
        session = get_db()
        assert wallet.get_balance(session, b['store_id']) == 0
        assert ledger.history(session, b['store_id']) == []
