import os, sys, pytest
# Ensure backend directory is on path so 'franchise' can be imported without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from franchise import create_app, get_database

TEST_CONFIG = {
    'JWT_SECRET_KEY': 'test-secret',
    'ADMIN_SECRET': 's3cret',
    'DEPOSIT_BANK_NAME': 'Test Bank',
    'DEPOSIT_ACCOUNT_NO': '123-456-789',
    'DEPOSIT_ACCOUNT_HOLDER': 'Franchise HQ',
}


def make_app(database_url: str):
    app = create_app(dict(TEST_CONFIG, DATABASE_URL=database_url))
    get_database(app).create_all()
    return app


@pytest.fixture()
def app_instance():
    # Fresh in-memory database per test
    app = make_app('sqlite+pysqlite:///:memory:')
    yield app
    get_database(app).dispose()


@pytest.fixture()
def file_app(tmp_path):
    """App on a file database, for tests that hit it from several threads."""
    app = make_app(f"sqlite+pysqlite:///{tmp_path / 'franchise.db'}")
    yield app
    get_database(app).dispose()


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
