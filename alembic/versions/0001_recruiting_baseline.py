"""Recruiting baseline: schools, games, players, player game profiles

Revision ID: 0001_recruiting_baseline
Revises:
Create Date: 2026-01-12 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_recruiting_baseline'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the profile tables read by talent search.

    Uses IF NOT EXISTS semantics via inspection so databases that already
    carry the platform schema can be stamped forward.
    """
    bind = op.get_bind()
    existing = set(sa.inspect(bind).get_table_names())

    if 'schools' not in existing:
        op.create_table(
            'schools',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column('name', sa.String(255), nullable=False),
            sa.Column('type', sa.String(20), nullable=False),
            sa.Column('state', sa.String(100), nullable=True),
        )

    if 'games' not in existing:
        op.create_table(
            'games',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column('name', sa.String(100), nullable=False),
            sa.Column('short_name', sa.String(20), nullable=False),
        )

    if 'players' not in existing:
        op.create_table(
            'players',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column('first_name', sa.String(100), nullable=False),
            sa.Column('last_name', sa.String(100), nullable=False),
            sa.Column('username', sa.String(100), nullable=True),
            sa.Column('location', sa.String(255), nullable=True),
            sa.Column('bio', sa.Text(), nullable=True),
            sa.Column('school', sa.String(255), nullable=True),
            sa.Column(
                'school_id',
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey('schools.id', ondelete='SET NULL'),
                nullable=True,
            ),
            sa.Column('class_year', sa.String(10), nullable=True),
            sa.Column('gpa', sa.Numeric(3, 2), nullable=True),
            sa.Column('intended_major', sa.String(255), nullable=True),
            sa.Column(
                'main_game_id',
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey('games.id', ondelete='SET NULL'),
                nullable=True,
            ),
        )

    if 'player_game_profiles' not in existing:
        op.create_table(
            'player_game_profiles',
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column(
                'player_id',
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey('players.id', ondelete='CASCADE'),
                nullable=False,
            ),
            sa.Column(
                'game_id',
                postgresql.UUID(as_uuid=True),
                sa.ForeignKey('games.id', ondelete='CASCADE'),
                nullable=False,
            ),
            sa.Column('username', sa.String(100), nullable=False),
            sa.Column('rank', sa.String(50), nullable=True),
            sa.Column('role', sa.String(50), nullable=True),
            sa.Column('agents', postgresql.ARRAY(sa.String(50)), nullable=False, server_default='{}'),
            sa.Column('play_style', sa.String(100), nullable=True),
        )
        op.create_index('ix_player_game_profiles_player_id', 'player_game_profiles', ['player_id'])


def downgrade() -> None:
    op.drop_index('ix_player_game_profiles_player_id', table_name='player_game_profiles')
    op.drop_table('player_game_profiles')
    op.drop_table('players')
    op.drop_table('games')
    op.drop_table('schools')
