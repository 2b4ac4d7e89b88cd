"""add_court_blocks

Revision ID: 5b7e9c1d2f48
Revises: 8d4e6b2f1a37
Create Date: 2026-10-19 09:41:27.118304

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b7e9c1d2f48'
down_revision: Union[str, None] = '8d4e6b2f1a37'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'court_blocks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('court', sa.String(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('end_time > start_time', name='ck_court_blocks_end_after_start'),
    )
    op.create_index('ix_court_blocks_id', 'court_blocks', ['id'])
    op.create_index('ix_court_blocks_court_interval', 'court_blocks', ['court', 'start_time', 'end_time'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_court_blocks_court_interval', table_name='court_blocks')
    op.drop_index('ix_court_blocks_id', table_name='court_blocks')
    op.drop_table('court_blocks')
