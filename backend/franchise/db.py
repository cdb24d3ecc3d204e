"""Data-access handle owned by the application factory.

``Database`` bundles the engine and a thread-scoped session factory. One
instance lives for the whole process (``create_app`` stores it in
``app.extensions``) and is handed to whatever needs a session.
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base


def _use_immediate_transactions(engine: Engine):
    """SQLite has no row locks: take the write lock when each transaction begins.

    Disabling pysqlite's own transaction handling is also what makes SAVEPOINT
    behave (SQLAlchemy pysqlite recipe).
    """
    @event.listens_for(engine, 'connect')
    def _on_connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def _on_begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql('BEGIN IMMEDIATE')


class Database:
    def __init__(self, url: str, echo: bool = False):
        self.url = url
        if url.startswith('sqlite'):
            if url.endswith(':memory:'):
                # Ensure a single shared in-memory SQLite database across all sessions
                self.engine = create_engine(
                    url,
                    echo=echo,
                    future=True,
                    connect_args={'check_same_thread': False},
                    poolclass=StaticPool,
                )
            else:
                self.engine = create_engine(
                    url,
                    echo=echo,
                    future=True,
                    connect_args={'check_same_thread': False, 'timeout': 30},
                )
            _use_immediate_transactions(self.engine)
        else:
            self.engine = create_engine(url, echo=echo, future=True, pool_pre_ping=True)
        self.session = scoped_session(sessionmaker(bind=self.engine, expire_on_commit=False, autoflush=False))

    def create_all(self):
        Base.metadata.create_all(self.engine)

    def remove(self):
        self.session.remove()

    def dispose(self):
        self.session.remove()
        self.engine.dispose()


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


__all__ = ['Database', 'unit_of_work']
