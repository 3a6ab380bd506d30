"""
PlayerEmbedding model.

One row per successfully embedded player: the vector and the exact text it
was derived from. Rows are overwritten in place on refresh and removed with
the player (FK cascade).
"""

import uuid
from datetime import datetime
from typing import List

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, ForeignKey, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from talent_search.core.config import settings
from talent_search.db.base import Base


class PlayerEmbedding(Base):
    """Derived cache of a player's profile in embedding space."""

    __tablename__ = "player_embeddings"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    player_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    embedding: Mapped[List[float]] = mapped_column(Vector(settings.EMBEDDING_DIMENSIONS), nullable=False)
    # Kept for auditability and to detect unchanged profiles
    embedding_text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<PlayerEmbedding(player_id={self.player_id})>"
