"""Add optimistic version counter to defense upgrades

Revision ID: c3a9e5f20b71
Revises: 4b7e2c1d9a10
Create Date: 2026-10-19 16:41:05.302117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c3a9e5f20b71'
down_revision: Union[str, Sequence[str], None] = '4b7e2c1d9a10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # SQLite requires batch mode for column changes
    with op.batch_alter_table('defense_upgrades', schema=None) as batch_op:
        batch_op.add_column(
            sa.Column('version', sa.Integer(), nullable=False, server_default='1')
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('defense_upgrades', schema=None) as batch_op:
        batch_op.drop_column('version')
