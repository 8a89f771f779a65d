"""create users, sessions, transactions, and budgets tables

Revision ID: 3c1f9a7d2b40
Revises: 
Create Date: 2026-01-04 10:12:41.532190

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('db_id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('id', sa.Uuid, nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('last_login_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sa.UniqueConstraint('username', name='uq_user_username'),
    )
    op.create_table(
        'sessions',
        sa.Column('db_id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('id', sa.Uuid, nullable=False, unique=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('token_hash', name='uq_session_token_hash'),
    )
    op.create_index('idx_sessions_user', 'sessions', ['user_id'])
    op.create_index('idx_sessions_expires_at', 'sessions', ['expires_at'])

    op.create_table(
        'transactions',
        sa.Column('db_id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('id', sa.Uuid, nullable=False, unique=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id', ondelete='CASCADE'), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('kind', sa.Enum('INCOME', 'EXPENSE', name='transaction_kind'), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='ck_transaction_amount_positive'),
    )
    op.create_index('idx_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])
    op.create_index('idx_transactions_user_kind_category', 'transactions', ['user_id', 'kind', 'category'])

    op.create_table(
        'budgets',
        sa.Column('budget_id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.Date, nullable=False),  # first day of the month
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'month', 'category', name='uq_user_month_category'),
        sa.CheckConstraint('amount > 0', name='ck_budget_amount_positive'),
    )
    op.create_index('idx_budgets_user_month', 'budgets', ['user_id', 'month'])


def downgrade() -> None:
    op.drop_table('budgets')
    op.drop_table('transactions')
    op.drop_table('sessions')
    op.drop_table('users')
    sa.Enum(name='transaction_kind').drop(op.get_bind(), checkfirst=True)
