"""Repository for player embedding rows."""

from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import TextClause

from talent_search.models.player import Player
from talent_search.models.player_embedding import PlayerEmbedding
from talent_search.schemas.talent_search import VectorSearchResult


class PlayerEmbeddingRepository:
    """CRUD, coverage and similarity helpers for PlayerEmbedding."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(self, player_id: UUID, embedding: Sequence[float], embedding_text: str) -> PlayerEmbedding:
        stmt = (
            insert(PlayerEmbedding)
            .values(
                player_id=player_id,
                embedding=list(embedding),
                embedding_text=embedding_text,
            )
            .on_conflict_do_update(
                index_elements=[PlayerEmbedding.player_id],
                set_={
                    "embedding": list(embedding),
                    "embedding_text": embedding_text,
                    "updated_at": func.now(),
                },
            )
            .returning(PlayerEmbedding)
        )
        result = await self.db.execute(stmt)
        await self.db.flush()
        return result.scalar_one()

    async def delete(self, player_id: UUID) -> int:
        result = await self.db.execute(delete(PlayerEmbedding).where(PlayerEmbedding.player_id == player_id))
        return int(result.rowcount or 0)

    async def exists(self, player_id: UUID) -> bool:
        result = await self.db.execute(
            select(select(PlayerEmbedding.id).where(PlayerEmbedding.player_id == player_id).exists())
        )
        return bool(result.scalar())

    async def get_embedding_text(self, player_id: UUID) -> Optional[str]:
        result = await self.db.execute(
            select(PlayerEmbedding.embedding_text).where(PlayerEmbedding.player_id == player_id)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(PlayerEmbedding))
        return int(result.scalar_one())

    def _missing_query(self):
        return (
            select(Player.id)
            .outerjoin(PlayerEmbedding, PlayerEmbedding.player_id == Player.id)
            .where(PlayerEmbedding.id.is_(None))
        )

    async def count_missing(self) -> int:
        subq = self._missing_query().subquery()
        result = await self.db.execute(select(func.count()).select_from(subq))
        return int(result.scalar_one())

    async def coverage(self) -> Tuple[int, int]:
        """Embedded and missing player counts from a single snapshot."""
        stmt = (
            select(
                func.count(PlayerEmbedding.id),
                func.count(Player.id).filter(PlayerEmbedding.id.is_(None)),
            )
            .select_from(Player)
            .outerjoin(PlayerEmbedding, PlayerEmbedding.player_id == Player.id)
        )
        row = (await self.db.execute(stmt)).one()
        return int(row[0]), int(row[1])

    async def list_missing_player_ids(self) -> List[UUID]:
        result = await self.db.execute(self._missing_query().order_by(Player.id))
        return list(result.scalars().all())

    async def search(self, statement: TextClause, params: dict) -> List[VectorSearchResult]:
        result = await self.db.execute(statement, params)
        return [
            VectorSearchResult(player_id=row.player_id, similarity=float(row.similarity))
            for row in result
        ]
