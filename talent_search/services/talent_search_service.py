"""Semantic talent search: embed the recruiter query, rank stored players."""

import logging
from typing import List

from talent_search.errors import InvalidSearchFilters
from talent_search.schemas.talent_search import TalentSearchFilters, VectorSearchResult
from talent_search.services.embedding_provider import EmbeddingProvider
from talent_search.services.embedding_store import EmbeddingStore


logger = logging.getLogger(__name__)


class TalentSearchService:
    def __init__(self, store: EmbeddingStore, provider: EmbeddingProvider):
        self.store = store
        self.provider = provider

    def is_available(self) -> bool:
        return self.provider.is_configured()

    async def search(self, query_text: str, filters: TalentSearchFilters) -> List[VectorSearchResult]:
        """
        Rank players by similarity to ``query_text`` under ``filters``.

        Filters are checked before the provider is called. Query embeddings
        are not cached. No matches yields an empty list; provider and store
        failures propagate.
        """
        query = (query_text or "").strip()
        if not query:
            raise InvalidSearchFilters("Search query must not be empty")
        if not filters.gpa_range_is_valid():
            raise InvalidSearchFilters(f"min_gpa ({filters.min_gpa}) is greater than max_gpa ({filters.max_gpa})")

        query_embedding = await self.provider.embed_query(query)
        results = await self.store.search_by_similarity(query_embedding, filters)
        logger.info("Talent search matched %s player(s) (limit=%s)", len(results), filters.limit)
        return results
