"""create_shift_ledger_tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=False, **kwargs)


def upgrade() -> None:
    op.create_table(
        'sales',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('cashier', sa.String(length=100), nullable=False),
        sa.Column('payment_method', sa.String(length=30), nullable=False),
        _money('subtotal', server_default='0'),
        _money('discount_amount', server_default='0'),
        _money('total_amount'),
        _money('profit', server_default='0'),
        _money('return_delivery_fee', server_default='0'),
    )
    op.create_index('ix_sales_created_at', 'sales', ['created_at'])
    op.create_index('ix_sales_payment_method', 'sales', ['payment_method'])

    op.create_table(
        'sale_items',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column(
            'sale_id',
            sa.String(length=64),
            sa.ForeignKey('sales.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('color', sa.String(length=50), nullable=True),
        sa.Column('size', sa.String(length=50), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        _money('unit_price'),
        _money('purchase_price', server_default='0'),
        sa.Column('returned_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.CheckConstraint('returned_qty >= 0', name='sale_item_returned_qty_non_negative'),
        sa.CheckConstraint('returned_qty <= quantity', name='sale_item_returned_qty_within_quantity'),
    )
    op.create_index('ix_sale_items_sale_id', 'sale_items', ['sale_id'])

    op.create_table(
        'daily_expenses',
        sa.Column('id', sa.String(length=64), primary_key=True),
        _money('amount'),
        sa.Column('notes', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('cashier', sa.String(length=100), nullable=False),
        sa.Column('is_deficit', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint('amount > 0', name='daily_expense_amount_positive'),
    )
    op.create_index('ix_daily_expenses_date', 'daily_expenses', ['date'])
    op.create_index('ix_daily_expenses_is_deficit', 'daily_expenses', ['is_deficit'])

    op.create_table(
        'shifts',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=False),
        sa.Column('ended_by', sa.String(length=100), nullable=False),
        sa.Column('sales', postgresql.JSONB(), nullable=False),
        sa.Column('returns', postgresql.JSONB(), nullable=False),
        sa.Column('expenses', postgresql.JSONB(), nullable=False),
        _money('total_sales'),
        _money('total_cash_sales'),
        _money('total_instapay_sales'),
        _money('total_vcash_sales'),
        _money('total_returns_value'),
        _money('total_daily_expenses'),
        _money('expected_in_drawer'),
        _money('actual_amount'),
        _money('expected_amount'),
        _money('difference'),
        sa.Column('reconciliation_type', sa.String(length=20), nullable=False),
    )
    op.create_index('ix_shifts_ended_at', 'shifts', ['ended_at'])

    # Single config row; the cutoff stays NULL until the first close
    op.create_table(
        'app_config',
        sa.Column('key', sa.String(length=50), primary_key=True),
        sa.Column('last_shift_report_time', sa.DateTime(), nullable=True),
    )
    op.execute("INSERT INTO app_config (key, last_shift_report_time) VALUES ('main', NULL)")


def downgrade() -> None:
    op.drop_table('app_config')
    op.drop_index('ix_shifts_ended_at', table_name='shifts')
    op.drop_table('shifts')
    op.drop_index('ix_daily_expenses_is_deficit', table_name='daily_expenses')
    op.drop_index('ix_daily_expenses_date', table_name='daily_expenses')
    op.drop_table('daily_expenses')
    op.drop_index('ix_sale_items_sale_id', table_name='sale_items')
    op.drop_table('sale_items')
    op.drop_index('ix_sales_payment_method', table_name='sales')
    op.drop_index('ix_sales_created_at', table_name='sales')
    op.drop_table('sales')
