"""
Embedding store backed by Postgres + pgvector.

Every operation runs in its own short-lived session so the refresh fan-out
can call the store concurrently. Database failures surface as QueryError,
a missing ``vector`` type as NotConfigured.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talent_search.core.config import settings
from talent_search.errors import InvalidSearchFilters, NotConfigured, QueryError
from talent_search.repositories.player_embedding_repository import PlayerEmbeddingRepository
from talent_search.schemas.talent_search import TalentSearchFilters, VectorSearchResult
from talent_search.services.similarity_query import build_similarity_statement


logger = logging.getLogger(__name__)

UNDEFINED_OBJECT_SQLSTATE = "42704"


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _is_missing_vector_extension(exc: DBAPIError) -> bool:
    if _sqlstate(exc) == UNDEFINED_OBJECT_SQLSTATE and "vector" in str(exc.orig).lower():
        return True
    return 'type "vector" does not exist' in str(exc).lower()


class EmbeddingStore:
    """Persistence and similarity search for player embeddings."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], dimensions: Optional[int] = None):
        self.session_factory = session_factory
        self.dimensions = dimensions if dimensions is not None else settings.EMBEDDING_DIMENSIONS

    @asynccontextmanager
    async def _repository(self) -> AsyncIterator[PlayerEmbeddingRepository]:
        async with self.session_factory() as session:
            try:
                yield PlayerEmbeddingRepository(session)
                await session.commit()
            except DBAPIError as exc:
                await session.rollback()
                if _is_missing_vector_extension(exc):
                    raise NotConfigured("pgvector extension is not installed in the database") from exc
                raise QueryError(f"Embedding store query failed: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise QueryError(f"Embedding store query failed: {exc}") from exc
            except Exception:
                await session.rollback()
                raise

    def _check_dimensions(self, embedding: Sequence[float]) -> None:
        if not self.dimensions:
            raise NotConfigured("Embedding dimensionality is not configured")
        if len(embedding) != self.dimensions:
            raise QueryError(f"Embedding has {len(embedding)} dimensions, expected {self.dimensions}")

    async def upsert(self, player_id: UUID, embedding: Sequence[float], embedding_text: str) -> None:
        """Create or overwrite the player's embedding (last write wins)."""
        self._check_dimensions(embedding)
        async with self._repository() as repo:
            await repo.upsert(player_id, embedding, embedding_text)
        logger.debug("Stored embedding for player %s", player_id)

    async def delete(self, player_id: UUID) -> None:
        async with self._repository() as repo:
            await repo.delete(player_id)

    async def exists(self, player_id: UUID) -> bool:
        async with self._repository() as repo:
            return await repo.exists(player_id)

    async def get_embedding_text(self, player_id: UUID) -> Optional[str]:
        async with self._repository() as repo:
            return await repo.get_embedding_text(player_id)

    async def count_embedded(self) -> int:
        async with self._repository() as repo:
            return await repo.count()

    async def count_missing(self) -> int:
        async with self._repository() as repo:
            return await repo.count_missing()

    async def coverage(self) -> Tuple[int, int]:
        """(embedded, missing) read in one statement, so no player is counted twice."""
        async with self._repository() as repo:
            return await repo.coverage()

    async def list_missing_player_ids(self) -> List[UUID]:
        async with self._repository() as repo:
            return await repo.list_missing_player_ids()

    async def search_by_similarity(
        self,
        query_embedding: Sequence[float],
        filters: TalentSearchFilters,
    ) -> List[VectorSearchResult]:
        """Players ranked by descending cosine similarity, at most ``filters.limit``."""
        self._check_dimensions(query_embedding)
        if not filters.gpa_range_is_valid():
            raise InvalidSearchFilters(f"min_gpa ({filters.min_gpa}) is greater than max_gpa ({filters.max_gpa})")

        statement = build_similarity_statement(query_embedding, filters, dimensions=self.dimensions)
        async with self._repository() as repo:
            results = await repo.search(statement.to_text(), statement.params)
        logger.debug("Similarity search returned %s result(s)", len(results))
        return results
