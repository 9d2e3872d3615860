"""initial marketplace schema

Revision ID: 5b1f0c2a7d41
Revises:
Create Date: 2026-10-19 09:12:44.310582

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

# revision identifiers, used by Alembic.
revision: str = '5b1f0c2a7d41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ROLE = sa.Enum('SUPER_ADMIN', 'ADMIN', 'VENDOR', 'USER', name='role')
ACCOUNT_STATUS = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='accountstatus')
ORDER_STATUS = sa.Enum(
    'PENDING', 'APPROVED', 'PROCESSING', 'IN_TRANSIT', 'DELIVERED',
    'CANCELLED', 'REJECTED', 'RETURNED',
    name='orderstatus',
)
PAYMENT_STATUS = sa.Enum('PENDING', 'PAID', 'REFUNDING', 'REFUNDED', name='paymentstatus')
TRANSFER_STATUS = sa.Enum('PROCESSING', 'COMPLETED', 'FAILED', name='transferstatus')
PAYMENT_TYPE = sa.Enum('CHARGE', 'REFUND', name='paymenttype')

MONEY = sa.Numeric(precision=12, scale=2)


def upgrade():
    op.create_table(
        'auth',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('password', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('role', ROLE, nullable=False),
        sa.Column('status', ACCOUNT_STATUS, nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_auth_email'), 'auth', ['email'], unique=True)

    op.create_table(
        'otp',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_id', sa.Integer(), nullable=False),
        sa.Column('code', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('type', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['auth_id'], ['auth.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('auth_id'),
    )

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('postal_code', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('delivery_address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['auth_id'], ['auth.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('auth_id'),
    )

    op.create_table(
        'admin',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['auth_id'], ['auth.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('auth_id'),
    )

    op.create_table(
        'vendor',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('postal_code', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('pickup_address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('bank_name', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('account_number', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('account_name', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('paystack_recipient_code', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['auth_id'], ['auth.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('auth_id'),
    )

    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('status', ACCOUNT_STATUS, nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_category_name'), 'category', ['name'], unique=True)

    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('price', MONEY, nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_product_stock_non_negative'),
        sa.ForeignKeyConstraint(['category_id'], ['category.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendor.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_product_name'), 'product', ['name'], unique=False)
    op.create_index(op.f('ix_product_vendor_id'), 'product', ['vendor_id'], unique=False)
    op.create_index(op.f('ix_product_category_id'), 'product', ['category_id'], unique=False)

    op.create_table(
        'order',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total_price', MONEY, nullable=False),
        sa.Column('status', ORDER_STATUS, nullable=False),
        sa.Column('payment_status', PAYMENT_STATUS, nullable=False),
        sa.Column('paystack_reference', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_order_user_id'), 'order', ['user_id'], unique=False)
    op.create_index(op.f('ix_order_status'), 'order', ['status'], unique=False)
    op.create_index(op.f('ix_order_paystack_reference'), 'order', ['paystack_reference'], unique=False)

    op.create_table(
        'orderitem',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('price', MONEY, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_orderitem_quantity_positive'),
        sa.ForeignKeyConstraint(['order_id'], ['order.id']),
        sa.ForeignKeyConstraint(['product_id'], ['product.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', 'product_id', name='uq_orderitem_order_product'),
    )
    op.create_index(op.f('ix_orderitem_order_id'), 'orderitem', ['order_id'], unique=False)
    op.create_index(op.f('ix_orderitem_product_id'), 'orderitem', ['product_id'], unique=False)

    op.create_table(
        'payment',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('platform_fee', MONEY, nullable=False),
        sa.Column('vendor_amount', MONEY, nullable=False),
        sa.Column('status', PAYMENT_STATUS, nullable=False),
        sa.Column('type', PAYMENT_TYPE, nullable=False),
        sa.Column('paystack_reference', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('transfer_status', TRANSFER_STATUS, nullable=True),
        sa.Column('paystack_transfer_reference', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['order.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendor.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_payment_order_id'), 'payment', ['order_id'], unique=False)
    op.create_index(op.f('ix_payment_vendor_id'), 'payment', ['vendor_id'], unique=False)
    op.create_index(op.f('ix_payment_paystack_reference'), 'payment', ['paystack_reference'], unique=True)
    op.create_index(
        op.f('ix_payment_paystack_transfer_reference'), 'payment',
        ['paystack_transfer_reference'], unique=True,
    )

    op.create_table(
        'order_event',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('label', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_by', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['order.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_order_event_order_id'), 'order_event', ['order_id'], unique=False)
    op.create_index(op.f('ix_order_event_event_type'), 'order_event', ['event_type'], unique=False)


def downgrade():
    op.drop_table('order_event')
    op.drop_table('payment')
    op.drop_table('orderitem')
    op.drop_table('order')
    op.drop_table('product')
    op.drop_table('category')
    op.drop_table('vendor')
    op.drop_table('admin')
    op.drop_table('user')
    op.drop_table('otp')
    op.drop_table('auth')

    bind = op.get_bind()
    for enum in (PAYMENT_TYPE, TRANSFER_STATUS, PAYMENT_STATUS, ORDER_STATUS, ACCOUNT_STATUS, ROLE):
        enum.drop(bind, checkfirst=True)
