"""Initial bindings schema

Revision ID: 001_bindings
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_bindings'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the bindings table:
    - id is the primary key (custom or generated)
    - expire_on is NULL for bindings that never expire by time
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'bindings' in existing_tables:
        return

    op.create_table(
        'bindings',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('bound_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ttl', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expire_on', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_requests', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('counter', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expired_url', sa.Text(), nullable=False, server_default=''),
        sa.Column('exhausted_url', sa.Text(), nullable=False, server_default=''),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index('ix_bindings_bound_at', 'bindings', ['bound_at'])
    op.create_index('ix_bindings_expire_on', 'bindings', ['expire_on'])


def downgrade() -> None:
    op.drop_index('ix_bindings_expire_on', table_name='bindings')
    op.drop_index('ix_bindings_bound_at', table_name='bindings')
    op.drop_table('bindings')
