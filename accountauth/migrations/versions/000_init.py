"""create user_account table

Revision ID: 0001
Revises: 
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'user_account',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('reset_key', sa.String(length=64), nullable=False),
        sa.Column('reset_key_expires_at', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('failed_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lockout_started_at', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('email_verified_at', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('email_changed_at', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.BigInteger(), nullable=False),
        sa.UniqueConstraint('email', name='uq_user_account_email'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_account_reset_key', 'user_account', ['reset_key'])


def downgrade() -> None:
    op.drop_index('ix_user_account_reset_key', table_name='user_account')
    op.drop_table('user_account')
