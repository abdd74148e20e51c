"""Initial schema

Order chain (sale orders, purchase orders, dispatches, invoices, payments),
lens variant stock ledger, sequence counters and expenses.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Masters
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(200), nullable=True),
        sa.Column('role', sa.String(30), nullable=False, server_default='sales'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('shop_name', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'lens_variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sku', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('cost_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('is_rx', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('min_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('stock >= 0', name='ck_lens_variants_stock_non_negative'),
    )

    op.create_table(
        'sequence_counters',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('current_value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lens_variant_id', sa.Integer(), sa.ForeignKey('lens_variants.id'), nullable=False),
        sa.Column('movement_type', sa.String(10), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('stock_after', sa.Integer(), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
    )
    op.create_index('ix_stock_movements_lens_variant_id', 'stock_movements', ['lens_variant_id'])

    # Sale orders
    op.create_table(
        'sale_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_no', sa.String(50), nullable=False, unique=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='DRAFT'),

        # Header
        sa.Column('customer_ref_no', sa.String(100), nullable=True),
        sa.Column('order_date', sa.Date(), nullable=True),
        sa.Column('order_type', sa.String(50), nullable=True),
        sa.Column('delivery_schedule', sa.DateTime(), nullable=True),
        sa.Column('remark', sa.Text(), nullable=True),
        sa.Column('item_ref_no', sa.String(100), nullable=True),
        sa.Column('free_lens', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('urgent_order', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('free_fitting', sa.Boolean(), nullable=False, server_default=sa.false()),

        # Prescription
        sa.Column('right_eye', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('left_eye', sa.Boolean(), nullable=False, server_default=sa.false()),
        *[
            sa.Column(f'{side}_{field}', sa.String(20), nullable=True)
            for side in ('right', 'left')
            for field in ('spherical', 'cylindrical', 'axis', 'add', 'dia')
        ],

        # Courier assignment
        sa.Column('dispatch_status', sa.String(30), nullable=False, server_default='Pending'),
        sa.Column('assigned_person_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('dispatch_reference', sa.String(100), nullable=True),
        sa.Column('estimated_date', sa.Date(), nullable=True),
        sa.Column('estimated_time', sa.String(20), nullable=True),
        sa.Column('actual_date', sa.Date(), nullable=True),
        sa.Column('actual_time', sa.String(20), nullable=True),
        sa.Column('dispatch_notes', sa.Text(), nullable=True),

        # Header pricing
        sa.Column('lens_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('fitting_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, server_default='0'),

        # Lifecycle timestamps
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('production_started_at', sa.DateTime(), nullable=True),
        sa.Column('ready_at', sa.DateTime(), nullable=True),
        sa.Column('dispatched_at', sa.DateTime(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),

        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),

        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_sale_orders_customer_id', 'sale_orders', ['customer_id'])
    op.create_index('ix_sale_orders_status', 'sale_orders', ['status'])
    op.create_index('ix_sale_orders_dispatch_status', 'sale_orders', ['dispatch_status'])
    op.create_index('ix_sale_orders_is_deleted', 'sale_orders', ['is_deleted'])
    op.create_index('ix_sale_orders_created_at', 'sale_orders', ['created_at'])

    op.create_table(
        'sale_order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sale_order_id', sa.Integer(),
                  sa.ForeignKey('sale_orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lens_variant_id', sa.Integer(), sa.ForeignKey('lens_variants.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('effective_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('line_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_rx', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stock_deducted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_sale_order_items_sale_order_id', 'sale_order_items', ['sale_order_id'])
    op.create_index('ix_sale_order_items_lens_variant_id', 'sale_order_items', ['lens_variant_id'])

    # Purchasing
    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('po_number', sa.String(50), nullable=False, unique=True),
        sa.Column('vendor_id', sa.Integer(), sa.ForeignKey('vendors.id'), nullable=False),
        sa.Column('sale_order_id', sa.Integer(), sa.ForeignKey('sale_orders.id'), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='PENDING'),
        sa.Column('total_value', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('ordered_at', sa.DateTime(), nullable=True),
        sa.Column('received_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_purchase_orders_vendor_id', 'purchase_orders', ['vendor_id'])
    op.create_index('ix_purchase_orders_sale_order_id', 'purchase_orders', ['sale_order_id'])
    op.create_index('ix_purchase_orders_status', 'purchase_orders', ['status'])
    op.create_index('ix_purchase_orders_created_at', 'purchase_orders', ['created_at'])

    op.create_table(
        'purchase_order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('purchase_order_id', sa.Integer(),
                  sa.ForeignKey('purchase_orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lens_variant_id', sa.Integer(), sa.ForeignKey('lens_variants.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('line_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    # Dispatch
    op.create_table(
        'dispatches',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('dc_number', sa.String(50), nullable=False, unique=True),
        sa.Column('sale_order_id', sa.Integer(), sa.ForeignKey('sale_orders.id'),
                  nullable=False, unique=True),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_address', sa.Text(), nullable=True),
        sa.Column('customer_phone', sa.String(30), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('delivery_method', sa.String(50), nullable=True),
        sa.Column('dispatch_date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='PENDING'),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_dispatches_status', 'dispatches', ['status'])

    # Invoicing
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invoice_no', sa.String(50), nullable=False, unique=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_invoices_created_at', 'invoices', ['created_at'])

    op.create_table(
        'invoice_sale_orders',
        sa.Column('invoice_id', sa.Integer(),
                  sa.ForeignKey('invoices.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('sale_order_id', sa.Integer(), sa.ForeignKey('sale_orders.id'),
                  primary_key=True, unique=True),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invoice_id', sa.Integer(),
                  sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('mode', sa.String(30), nullable=False),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('recorded_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])
    op.create_index('ix_payments_paid_at', 'payments', ['paid_at'])

    # Expenses
    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_expenses_type', 'expenses', ['type'])
    op.create_index('ix_expenses_date', 'expenses', ['date'])


def downgrade() -> None:
    op.drop_table('expenses')
    op.drop_table('payments')
    op.drop_table('invoice_sale_orders')
    op.drop_table('invoices')
    op.drop_table('dispatches')
    op.drop_table('purchase_order_items')
    op.drop_table('purchase_orders')
    op.drop_table('sale_order_items')
    op.drop_table('sale_orders')
    op.drop_table('stock_movements')
    op.drop_table('sequence_counters')
    op.drop_table('lens_variants')
    op.drop_table('vendors')
    op.drop_table('customers')
    op.drop_table('users')
