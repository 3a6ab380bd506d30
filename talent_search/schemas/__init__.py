from talent_search.schemas.embedding import (
    EmbeddingRefreshOptions,
    EmbeddingRefreshResult,
    EmbeddingStats,
    PlayerEmbeddingRead,
)
from talent_search.schemas.talent_search import (
    CoachContext,
    GameProfileSummary,
    PlayerAnalysis,
    PlayerEmbeddingInput,
    TalentSearchAvailability,
    TalentSearchFilters,
    TalentSearchRequest,
    TalentSearchResponse,
    VectorSearchResult,
)

__all__ = [
    "EmbeddingRefreshOptions",
    "EmbeddingRefreshResult",
    "EmbeddingStats",
    "PlayerEmbeddingRead",
    "CoachContext",
    "GameProfileSummary",
    "PlayerAnalysis",
    "PlayerEmbeddingInput",
    "TalentSearchAvailability",
    "TalentSearchFilters",
    "TalentSearchRequest",
    "TalentSearchResponse",
    "VectorSearchResult",
]
