"""create_qr_analytics_tables

Revision ID: 4c1e2a7b9d30
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '4c1e2a7b9d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'states',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('state_name', sa.String(100), nullable=True),
        sa.Column('state_code', sa.String(10), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_states_state_name'), 'states', ['state_name'], unique=False)

    op.create_table(
        'brands',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('brand_name', sa.String(200), nullable=False),
        sa.Column('brand_code', sa.String(20), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'qr_batches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('batch_code', sa.String(64), nullable=True),
        sa.Column('state_id', sa.Integer(), nullable=True),
        sa.Column('brand_id', sa.Integer(), nullable=True),
        sa.Column('total_codes', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['state_id'], ['states.id']),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('batch_code'),
    )
    op.create_index(op.f('ix_qr_batches_state_id'), 'qr_batches', ['state_id'], unique=False)
    op.create_index(op.f('ix_qr_batches_brand_id'), 'qr_batches', ['brand_id'], unique=False)
    op.create_index(op.f('ix_qr_batches_created_at'), 'qr_batches', ['created_at'], unique=False)
    op.create_index(
        'idx_batches_state_created', 'qr_batches', ['state_id', 'created_at'], unique=False
    )

    op.create_table(
        'qr_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('serial_number', sa.String(32), nullable=False),
        sa.Column('serial_number_num', sa.BigInteger(), nullable=True),
        sa.Column('code', sa.String(255), nullable=True),
        sa.Column('state_id', sa.Integer(), nullable=True),
        sa.Column('state_code', sa.String(10), nullable=True),
        sa.Column('brand_id', sa.Integer(), nullable=True),
        sa.Column('batch_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['state_id'], ['states.id']),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id']),
        sa.ForeignKeyConstraint(['batch_id'], ['qr_batches.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_qr_codes_serial_number'), 'qr_codes', ['serial_number'], unique=False)
    op.create_index('idx_stateid_serial', 'qr_codes', ['state_id', 'serial_number'], unique=False)
    op.create_index(
        'idx_batch_serial_num', 'qr_codes', ['batch_id', 'serial_number_num'], unique=False
    )


def downgrade() -> None:
    op.drop_index('idx_batch_serial_num', table_name='qr_codes')
    op.drop_index('idx_stateid_serial', table_name='qr_codes')
    op.drop_index(op.f('ix_qr_codes_serial_number'), table_name='qr_codes')
    op.drop_table('qr_codes')
    op.drop_index('idx_batches_state_created', table_name='qr_batches')
    op.drop_index(op.f('ix_qr_batches_created_at'), table_name='qr_batches')
    op.drop_index(op.f('ix_qr_batches_brand_id'), table_name='qr_batches')
    op.drop_index(op.f('ix_qr_batches_state_id'), table_name='qr_batches')
    op.drop_table('qr_batches')
    op.drop_table('brands')
    op.drop_index(op.f('ix_states_state_name'), table_name='states')
    op.drop_table('states')
