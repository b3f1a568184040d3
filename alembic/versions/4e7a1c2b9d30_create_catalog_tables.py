"""Create catalog tables

Revision ID: 4e7a1c2b9d30
Revises:
Create Date: 2026-10-17 09:12:44.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e7a1c2b9d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'games',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('players_min', sa.Integer(), nullable=False),
        sa.Column('players_max', sa.Integer(), nullable=False),
        sa.Column('popularity', sa.Integer(), nullable=False),
        sa.Column('tagline', sa.String(), nullable=True),
        sa.Column('cover_image', sa.String(), nullable=True),
        sa.Column('rules_url', sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('players_min >= 1', name='ck_games_players_min'),
        sa.CheckConstraint('players_min <= players_max', name='ck_games_players_range'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'expansions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('game_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['game_id'], ['games.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_expansions_game', 'expansions', ['game_id'], unique=False)
    op.create_table(
        'expansion_modules',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('game_id', sa.String(), nullable=False),
        sa.Column('expansion_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['game_id'], ['games.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['expansion_id'], ['expansions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_expansion_modules_owner', 'expansion_modules', ['game_id', 'expansion_id'], unique=False
    )
    op.create_table(
        'steps',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('game_id', sa.String(), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('visual_asset', sa.String(), nullable=True),
        sa.Column('visual_animation', sa.String(), nullable=True),
        sa.Column('conditions', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('step_order >= 1', name='ck_steps_order_positive'),
        sa.CheckConstraint('length(text) > 0', name='ck_steps_text_not_empty'),
        sa.ForeignKeyConstraint(['game_id'], ['games.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    # Not unique: a reorder rewrites one row at a time
    op.create_index('idx_steps_game_order', 'steps', ['game_id', 'step_order'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_steps_game_order', table_name='steps')
    op.drop_table('steps')
    op.drop_index('idx_expansion_modules_owner', table_name='expansion_modules')
    op.drop_table('expansion_modules')
    op.drop_index('idx_expansions_game', table_name='expansions')
    op.drop_table('expansions')
    op.drop_table('games')
