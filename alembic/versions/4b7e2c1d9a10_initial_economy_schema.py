"""Initial economy schema

Revision ID: 4b7e2c1d9a10
Revises:
Create Date: 2026-10-19 10:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2c1d9a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(), nullable=False, unique=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('profile_picture', sa.String(), nullable=True),
        sa.Column('credits', sa.Float(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('standing_defender_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=True),
        sa.Column('defense_upgrade_id', sa.Integer(), nullable=True),
        sa.Column('offense_upgrade_id', sa.Integer(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('credits >= 0', name='ck_players_credits'),
        sa.CheckConstraint('rank >= 0', name='ck_players_rank'),
        sa.CheckConstraint("role IN ('USER', 'ADMIN')", name='ck_players_role'),
    )
    op.create_index('idx_players_active_rank', 'players', ['is_active', 'rank'])

    op.create_table(
        'defense_upgrades',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False, unique=True),
        sa.Column('uses', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('uses >= 0', name='ck_defense_upgrades_uses'),
    )
    op.create_table(
        'offense_upgrades',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Player -> upgrade references close the cycle once both tables exist
    with op.batch_alter_table('players', schema=None) as batch_op:
        batch_op.create_foreign_key(
            'fk_players_defense_upgrade', 'defense_upgrades', ['defense_upgrade_id'], ['id']
        )
        batch_op.create_foreign_key(
            'fk_players_offense_upgrade', 'offense_upgrades', ['offense_upgrade_id'], ['id']
        )

    op.create_table(
        'hacks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('attacker_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('defender_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('credits', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('Defended', 'Succeeded')", name='ck_hacks_status'),
        sa.CheckConstraint('credits >= 0', name='ck_hacks_credits'),
    )
    op.create_index('idx_hacks_attacker', 'hacks', ['attacker_id'])
    op.create_index('idx_hacks_defender', 'hacks', ['defender_id'])
    op.create_index('idx_hacks_created', 'hacks', ['created_at'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('transaction_type', sa.String(), nullable=False),
        sa.Column('credits', sa.Float(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('credits > 0', name='ck_transactions_credits'),
        sa.CheckConstraint("transaction_type IN ('RECEIVE', 'SEND')", name='ck_transactions_type'),
    )
    op.create_index('idx_transactions_player', 'transactions', ['player_id'])
    op.create_index('idx_transactions_created', 'transactions', ['created_at'])

    op.create_table(
        'bonus_cycles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cycle', sa.Integer(), nullable=False, unique=True),
        sa.Column('players_credited', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('bonus_cycles')
    op.drop_index('idx_transactions_created', table_name='transactions')
    op.drop_index('idx_transactions_player', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('idx_hacks_created', table_name='hacks')
    op.drop_index('idx_hacks_defender', table_name='hacks')
    op.drop_index('idx_hacks_attacker', table_name='hacks')
    op.drop_table('hacks')
    # SQLite requires batch mode for constraint changes
    with op.batch_alter_table('players', schema=None) as batch_op:
        batch_op.drop_constraint('fk_players_offense_upgrade', type_='foreignkey')
        batch_op.drop_constraint('fk_players_defense_upgrade', type_='foreignkey')
    op.drop_table('offense_upgrades')
    op.drop_table('defense_upgrades')
    op.drop_index('idx_players_active_rank', table_name='players')
    op.drop_table('players')
