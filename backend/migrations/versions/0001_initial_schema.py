"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the stockroom schema:
- users: accounts with loginid/email uniqueness and role
- products, warehouses, transfers: catalog and location log
- receipts, receipt_lines, delivery_orders: order flow
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('loginid', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('loginid', name='uq_users_loginid'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_loginid', 'users', ['loginid'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=True),
        sa.Column('category', sa.String(length=128), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_sku', 'products', ['sku'])
    op.create_index('ix_products_created_at', 'products', ['created_at'])
    op.create_index('ix_products_category_name', 'products', ['category', 'name'])

    op.create_table(
        'warehouses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('shortcode', sa.String(length=32), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_warehouses_created_at', 'warehouses', ['created_at'])

    op.create_table(
        'transfers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('from_location', sa.String(length=255), nullable=True),
        sa.Column('to_location', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transfers_product_id', 'transfers', ['product_id'])
    op.create_index('ix_transfers_created_at', 'transfers', ['created_at'])

    op.create_table(
        'receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_no', sa.Integer(), nullable=False),
        sa.Column('supplier', sa.String(length=255), nullable=False),
        sa.Column('order_type', sa.String(length=16), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_receipts_order_no', 'receipts', ['order_no'])
    op.create_index('ix_receipts_created_at', 'receipts', ['created_at'])

    op.create_table(
        'receipt_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('receipt_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_receipt_lines_quantity'),
        sa.CheckConstraint('unit_price >= 0', name='ck_receipt_lines_unit_price'),
        sa.ForeignKeyConstraint(['receipt_id'], ['receipts.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_receipt_lines_receipt_id', 'receipt_lines', ['receipt_id'])
    op.create_index('ix_receipt_lines_product_id', 'receipt_lines', ['product_id'])

    op.create_table(
        'delivery_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('receipt_id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('shipped_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('recipient_name', sa.String(length=255), nullable=False),
        sa.Column('shipping_address', sa.Text(), nullable=False),
        sa.Column('tracking_number', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['receipt_id'], ['receipts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('receipt_id', name='uq_delivery_orders_receipt'),
        sa.UniqueConstraint('order_number', name='uq_delivery_orders_order_number'),
        sa.UniqueConstraint('tracking_number', name='uq_delivery_orders_tracking_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_delivery_orders_status', 'delivery_orders', ['status'])
    op.create_index('ix_delivery_orders_created_at', 'delivery_orders', ['created_at'])


def downgrade():
    op.drop_table('delivery_orders')
    op.drop_table('receipt_lines')
    op.drop_table('receipts')
    op.drop_table('transfers')
    op.drop_table('warehouses')
    op.drop_table('products')
    op.drop_table('users')
