"""Per-user collection store and invoice number sequences

Revision ID: 20261019_kv_store
Revises:
Create Date: 2026-10-19

This migration adds:
1. kv_entries: one JSON array per (collection, user) key
2. invoice_sequences: per-user invoice number counter
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_kv_store'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('kv_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_kv_entries')),
        sa.UniqueConstraint('key', name='uq_kv_entries_key'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('kv_entries', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_kv_entries_key'), ['key'], unique=False)

    op.create_table('invoice_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_invoice_sequences')),
        sa.UniqueConstraint('user_id', name='uq_invoice_sequences_user'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('invoice_sequences', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_invoice_sequences_user_id'), ['user_id'], unique=False)


def downgrade():
    with op.batch_alter_table('invoice_sequences', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_invoice_sequences_user_id'))
    op.drop_table('invoice_sequences')

    with op.batch_alter_table('kv_entries', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_kv_entries_key'))
    op.drop_table('kv_entries')
