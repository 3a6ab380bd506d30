"""
FastAPI dependencies.

Services are wired from the shared session factory and the configured
embedding provider; tests replace these through ``app.dependency_overrides``.
"""

from fastapi import Depends

from talent_search.db.session import async_session_maker, get_db  # noqa: F401
from talent_search.services.embedding_provider import EmbeddingProvider, get_embedding_provider
from talent_search.services.embedding_refresh_service import EmbeddingRefreshService
from talent_search.services.embedding_store import EmbeddingStore
from talent_search.services.player_analysis_service import PlayerAnalysisService
from talent_search.services.player_profile_service import PlayerProfileService
from talent_search.services.talent_search_service import TalentSearchService


def get_provider() -> EmbeddingProvider:
    return get_embedding_provider()


def get_embedding_store() -> EmbeddingStore:
    return EmbeddingStore(async_session_maker)


def get_player_profile_service() -> PlayerProfileService:
    return PlayerProfileService(async_session_maker)


def get_talent_search_service(
    store: EmbeddingStore = Depends(get_embedding_store),
    provider: EmbeddingProvider = Depends(get_provider),
) -> TalentSearchService:
    return TalentSearchService(store, provider)


def get_embedding_refresh_service(
    players: PlayerProfileService = Depends(get_player_profile_service),
    store: EmbeddingStore = Depends(get_embedding_store),
    provider: EmbeddingProvider = Depends(get_provider),
) -> EmbeddingRefreshService:
    return EmbeddingRefreshService(players, store, provider)


def get_player_analysis_service(
    players: PlayerProfileService = Depends(get_player_profile_service),
    provider: EmbeddingProvider = Depends(get_provider),
) -> PlayerAnalysisService:
    return PlayerAnalysisService(players, provider)
