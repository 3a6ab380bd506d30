"""Add pgvector extension and player_embeddings table

Revision ID: 0002_player_embeddings
Revises: 0001_recruiting_baseline
Create Date: 2026-01-12 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0002_player_embeddings'
down_revision: Union[str, None] = '0001_recruiting_baseline'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# text-embedding-004 output size
EMBEDDING_DIMENSIONS = 768


def upgrade() -> None:
    """
    Creates:
    1. The vector extension
    2. player_embeddings, one row per player (cascade on player delete)
    3. An HNSW cosine index for ORDER BY embedding <=> :query LIMIT n
    """
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        'player_embeddings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column(
            'player_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('players.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSIONS), nullable=False),
        sa.Column('embedding_text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('player_id', name='uq_player_embeddings_player_id'),
    )

    op.execute(
        """
        CREATE INDEX ix_player_embeddings_embedding_hnsw
        ON player_embeddings
        USING hnsw (embedding vector_cosine_ops)
        """
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS ix_player_embeddings_embedding_hnsw")
    op.drop_table('player_embeddings')
