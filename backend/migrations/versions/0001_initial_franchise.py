"""tenants, catalog, wallets, ledger, top-ups, orders, bank transactions, audit

Revision ID: 0001_initial_franchise
Revises: 
Create Date: 2026-10-16
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_franchise'
down_revision = None
branch_labels = None
depends_on = None


def _ts(name, nullable=True, server_default=True):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable,
                     server_default=sa.func.now() if server_default else None)


def upgrade():
    op.create_table('head_offices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('invite_code', sa.String(length=32), nullable=False),
        _ts('created_at'),
    )
    op.create_index('ix_head_offices_invite_code', 'head_offices', ['invite_code'], unique=True)

    op.create_table('stores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('head_office_id', sa.Integer(), sa.ForeignKey('head_offices.id'), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('address', sa.String(length=255)),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='ACTIVE'),
        sa.Column('merchant_code_hash', sa.String(length=255), nullable=False),
        _ts('created_at'),
    )
    op.create_index('ix_stores_head_office_id', 'stores', ['head_office_id'])

    op.create_table('products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('head_office_id', sa.Integer(), sa.ForeignKey('head_offices.id'), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='ACTIVE'),
        _ts('updated_at'),
    )
    op.create_index('ix_products_head_office_id', 'products', ['head_office_id'])
    op.create_index('ix_products_status', 'products', ['status'])

    op.create_table('wallets',
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id'), primary_key=True, autoincrement=False),
        sa.Column('balance', sa.BigInteger(), nullable=False, server_default='0'),
        _ts('updated_at'),
    )

    op.create_table('ledger_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id'), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('ref_type', sa.String(length=16), nullable=False),
        sa.Column('ref_id', sa.Integer(), nullable=False),
        sa.Column('memo', sa.String(length=255)),
        _ts('created_at'),
    )
    op.create_index('ix_ledger_entries_store_created', 'ledger_entries', ['store_id', 'created_at'])

    op.create_table('topup_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id'), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('depositor_name', sa.String(length=64)),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='requested'),
        sa.Column('deposit_code', sa.String(length=64)),
        _ts('created_at'),
        _ts('paid_at', server_default=False),
    )
    op.create_index('ix_topup_requests_store_id', 'topup_requests', ['store_id'])
    op.create_index('ix_topup_requests_status', 'topup_requests', ['status'])
    op.create_index('ix_topup_requests_deposit_code', 'topup_requests', ['deposit_code'], unique=True)

    op.create_table('orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id'), nullable=False),
        sa.Column('head_office_id', sa.Integer(), sa.ForeignKey('head_offices.id'), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('total_amount', sa.BigInteger(), nullable=False),
        _ts('created_at'),
    )
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])
    op.create_index('ix_orders_head_office_id', 'orders', ['head_office_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table('order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.BigInteger(), nullable=False),
        sa.Column('line_total', sa.BigInteger(), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table('bank_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('external_tx_id', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('memo', sa.Text()),
        sa.Column('depositor', sa.String(length=64)),
        sa.Column('occurred_at', sa.DateTime(timezone=True)),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('deposit_code', sa.String(length=64)),
        sa.Column('matched_topup_id', sa.Integer(), sa.ForeignKey('topup_requests.id')),
        sa.Column('matched_store_id', sa.Integer(), sa.ForeignKey('stores.id')),
        sa.Column('note', sa.String(length=255)),
        _ts('created_at'),
    )
    op.create_index('ix_bank_transactions_external_tx_id', 'bank_transactions', ['external_tx_id'], unique=True)
    op.create_index('ix_bank_transactions_status', 'bank_transactions', ['status'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('meta', sa.JSON()),
        _ts('created_at'),
    )
    op.create_index('ix_audit_logs_actor', 'audit_logs', ['actor'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for table in ('audit_logs', 'bank_transactions', 'order_items', 'orders', 'topup_requests',
                  'ledger_entries', 'wallets', 'products', 'stores', 'head_offices'):
        op.drop_table(table)
