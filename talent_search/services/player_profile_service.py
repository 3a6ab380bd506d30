"""Session-per-call access to player profiles for the refresh fan-out."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talent_search.repositories.player_repository import PlayerRepository
from talent_search.schemas.talent_search import PlayerEmbeddingInput


class PlayerProfileService:
    """Reads player ids and embedding projections, one session per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_player_ids(self) -> List[UUID]:
        async with self.session_factory() as session:
            return await PlayerRepository(session).list_ids()

    async def get_embedding_input(self, player_id: UUID) -> Optional[PlayerEmbeddingInput]:
        async with self.session_factory() as session:
            return await PlayerRepository(session).get_embedding_input(player_id)
