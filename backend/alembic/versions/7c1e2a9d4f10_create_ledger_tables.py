"""create ledger tables

Revision ID: 7c1e2a9d4f10
Revises:
Create Date: 2026-10-16 10:12:41.532870

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '7c1e2a9d4f10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Account types, accounts, journal entries, ledger lines and entry number counters."""
    op.create_table(
        'account_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index(op.f('ix_account_types_id'), 'account_types', ['id'], unique=False)

    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type_id', sa.Integer(), nullable=False),
        sa.Column('parent_account_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['type_id'], ['account_types.id']),
        sa.ForeignKeyConstraint(['parent_account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_accounts_id'), 'accounts', ['id'], unique=False)
    op.create_index(op.f('ix_accounts_account_number'), 'accounts', ['account_number'], unique=True)
    op.create_index(op.f('ix_accounts_type_id'), 'accounts', ['type_id'], unique=False)
    op.create_index(op.f('ix_accounts_parent_account_id'), 'accounts', ['parent_account_id'], unique=False)

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_number', sa.String(length=30), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reference', sa.String(length=50), nullable=True),
        sa.Column('is_posted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('posted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_journal_entries_id'), 'journal_entries', ['id'], unique=False)
    op.create_index(op.f('ix_journal_entries_entry_number'), 'journal_entries', ['entry_number'], unique=True)
    op.create_index(op.f('ix_journal_entries_date'), 'journal_entries', ['date'], unique=False)
    op.create_index(op.f('ix_journal_entries_reference'), 'journal_entries', ['reference'], unique=False)
    op.create_index(op.f('ix_journal_entries_is_posted'), 'journal_entries', ['is_posted'], unique=False)

    op.create_table(
        'ledger_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('debit', sa.Numeric(precision=15, scale=2), nullable=False, server_default='0'),
        sa.Column('credit', sa.Numeric(precision=15, scale=2), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('debit >= 0', name='check_ledger_line_debit_non_negative'),
        sa.CheckConstraint('credit >= 0', name='check_ledger_line_credit_non_negative'),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ledger_lines_id'), 'ledger_lines', ['id'], unique=False)
    op.create_index(op.f('ix_ledger_lines_journal_entry_id'), 'ledger_lines', ['journal_entry_id'], unique=False)
    op.create_index(op.f('ix_ledger_lines_account_id'), 'ledger_lines', ['account_id'], unique=False)

    op.create_table(
        'entry_sequences',
        sa.Column('prefix', sa.String(length=10), nullable=False),
        sa.Column('period', sa.String(length=6), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('prefix', 'period'),
    )


def downgrade() -> None:
    op.drop_table('entry_sequences')
    op.drop_index(op.f('ix_ledger_lines_account_id'), table_name='ledger_lines')
    op.drop_index(op.f('ix_ledger_lines_journal_entry_id'), table_name='ledger_lines')
    op.drop_index(op.f('ix_ledger_lines_id'), table_name='ledger_lines')
    op.drop_table('ledger_lines')
    op.drop_index(op.f('ix_journal_entries_is_posted'), table_name='journal_entries')
    op.drop_index(op.f('ix_journal_entries_reference'), table_name='journal_entries')
    op.drop_index(op.f('ix_journal_entries_date'), table_name='journal_entries')
    op.drop_index(op.f('ix_journal_entries_entry_number'), table_name='journal_entries')
    op.drop_index(op.f('ix_journal_entries_id'), table_name='journal_entries')
    op.drop_table('journal_entries')
    op.drop_index(op.f('ix_accounts_parent_account_id'), table_name='accounts')
    op.drop_index(op.f('ix_accounts_type_id'), table_name='accounts')
    op.drop_index(op.f('ix_accounts_account_number'), table_name='accounts')
    op.drop_index(op.f('ix_accounts_id'), table_name='accounts')
    op.drop_table('accounts')
    op.drop_index(op.f('ix_account_types_id'), table_name='account_types')
    op.drop_table('account_types')
