"""create ledger tables

Revision ID: 001_create_ledger_tables
Revises:
Create Date: 2026-10-18

거래 장부 초기 스키마:
- 5개 enum 타입 생성
- users, parties, transactions, buy_items, sell_items, payments,
  party_payments, payment_allocations, audit_logs, notifications 테이블 생성
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "001_create_ledger_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# =========================================================================
# Enum 객체 (create_type=False, 컬럼 정의 시 재사용)
# =========================================================================
ENUM_TYPES = [
    ('user_role', ['ADMIN', 'STAFF']),
    ('transaction_kind', ['BUY', 'SELL']),
    ('party_payment_status', ['ACTIVE', 'REVERSED']),
    ('notification_type', ['CREATE', 'UPDATE', 'DELETE']),
    ('audit_action', [
        'PARTY_CREATE', 'TRANSACTION_CREATE',
        'PAYMENT_CREATE', 'PAYMENT_DELETE',
        'PARTY_PAYMENT_CREATE', 'PARTY_PAYMENT_REVERSE',
    ]),
]

user_role_enum, transaction_kind_enum, party_payment_status_enum, notification_type_enum, audit_action_enum = (
    postgresql.ENUM(*values, name=name, create_type=False) for name, values in ENUM_TYPES
)


def upgrade() -> None:
    conn = op.get_bind()

    # =========================================================================
    # 1. Enum 타입 생성
    # =========================================================================
    for name, values in ENUM_TYPES:
        exists = conn.execute(sa.text(
            "SELECT 1 FROM pg_type WHERE typname = :name"
        ), {"name": name}).fetchone()
        if not exists:
            vals = ", ".join(f"'{v}'" for v in values)
            conn.execute(sa.text(f"CREATE TYPE {name} AS ENUM ({vals})"))

    # =========================================================================
    # 2. 사용자
    # =========================================================================
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('role', user_role_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # =========================================================================
    # 3. 거래처
    # =========================================================================
    op.create_table(
        'parties',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, comment='거래처명'),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('credit_balance', sa.Numeric(18, 2), nullable=False, server_default='0',
                  comment='초과 입금 적립액'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_by', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('credit_balance >= 0', name='ck_party_credit_nonneg'),
    )

    # =========================================================================
    # 4. 거래 + 매입/판매 항목
    # =========================================================================
    op.create_table(
        'transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('kind', transaction_kind_enum, nullable=False),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        sa.Column('party_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('parties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('total_weight', sa.Numeric(18, 3), nullable=False, server_default='0'),
        sa.Column('total_payment', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('invoice_image', sa.String(500), nullable=True),
        sa.Column('receipt_image', sa.String(500), nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_transactions_party_date', 'transactions', ['party_id', 'transaction_date'])
    op.create_index('ix_transactions_kind', 'transactions', ['kind'])

    op.create_table(
        'buy_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('transaction_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('hny_weight', sa.Numeric(18, 3), nullable=False, server_default='0'),
        sa.Column('hny_rate', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('black_weight', sa.Numeric(18, 3), nullable=False, server_default='0'),
        sa.Column('black_rate', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('transportation_charges', sa.Numeric(18, 2), nullable=False, server_default='0'),
    )
    op.create_index('ix_buy_items_transaction_id', 'buy_items', ['transaction_id'])

    op.create_table(
        'sell_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('transaction_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('item_name', sa.String(200), nullable=True),
        sa.Column('count', sa.Numeric(18, 3), nullable=False, server_default='0'),
        sa.Column('weight_per_item', sa.Numeric(18, 3), nullable=False, server_default='0'),
        sa.Column('rate_per_item', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('total_weight', sa.Numeric(18, 3), nullable=False, server_default='0'),
        sa.Column('transportation_charges', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('payment_due_days', sa.Integer(), nullable=True),
        sa.Column('total_amount', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('payment_received', sa.Numeric(18, 2), nullable=False, server_default='0',
                  comment='수금 누적액'),
        sa.Column('balance_left', sa.Numeric(18, 2), nullable=False, server_default='0',
                  comment='미수 잔액'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_sell_items_transaction_id', 'sell_items', ['transaction_id'])
    op.create_index('ix_sell_items_balance', 'sell_items', ['balance_left'])

    # =========================================================================
    # 5. 직접 입금
    # =========================================================================
    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('sell_item_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('sell_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='ck_payment_amount_positive'),
    )
    op.create_index('ix_payments_sell_item_id', 'payments', ['sell_item_id'])
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])

    # =========================================================================
    # 6. 거래처 일괄 입금 + 배분
    # =========================================================================
    op.create_table(
        'party_payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('party_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('parties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', party_payment_status_enum, nullable=False, server_default='ACTIVE'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('delete_reason', sa.Text(), nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='ck_pp_amount_positive'),
        sa.CheckConstraint(
            "(status = 'ACTIVE' AND deleted_at IS NULL AND deleted_by IS NULL) OR "
            "(status = 'REVERSED' AND deleted_at IS NOT NULL AND deleted_by IS NOT NULL)",
            name='ck_pp_reversal_fields',
        ),
    )
    op.create_index('ix_pp_party_date', 'party_payments', ['party_id', 'payment_date'])
    op.create_index('ix_pp_status', 'party_payments', ['status'])

    op.create_table(
        'payment_allocations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('party_payment_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('party_payments.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('sell_item_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('sell_items.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('allocation_order', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='ck_pa_amount_positive'),
        sa.UniqueConstraint('party_payment_id', 'sell_item_id', name='uq_pa_payment_item'),
    )
    op.create_index('ix_pa_party_payment', 'payment_allocations', ['party_payment_id'])
    op.create_index('ix_pa_sell_item', 'payment_allocations', ['sell_item_id'])

    # =========================================================================
    # 7. 감사로그 / 관리자 알림
    # =========================================================================
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('action', audit_action_enum, nullable=False),
        sa.Column('target_type', sa.String(50), nullable=False),
        sa.Column('target_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('before_data', postgresql.JSONB(), nullable=True),
        sa.Column('after_data', postgresql.JSONB(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_user_created', 'audit_logs', ['user_id', 'created_at'])
    op.create_index('ix_audit_logs_target', 'audit_logs', ['target_type', 'target_id'])

    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', notification_type_enum, nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_created', 'notifications', ['user_id', 'created_at'])


def downgrade() -> None:
    for table in (
        'notifications', 'audit_logs', 'payment_allocations', 'party_payments',
        'payments', 'sell_items', 'buy_items', 'transactions', 'parties', 'users',
    ):
        op.drop_table(table)

    for name, _ in reversed(ENUM_TYPES):
        op.execute(f"DROP TYPE IF EXISTS {name}")
