"""
Recruiter talent search endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from talent_search.core.dependencies import get_player_analysis_service, get_talent_search_service
from talent_search.errors import EmbeddingError, embedding_app_error
from talent_search.schemas.talent_search import (
    CoachContext,
    PlayerAnalysis,
    TalentSearchAvailability,
    TalentSearchRequest,
    TalentSearchResponse,
)
from talent_search.services.player_analysis_service import PlayerAnalysisService
from talent_search.services.talent_search_service import TalentSearchService

router = APIRouter(prefix="/api/talent-search", tags=["Talent Search"])


@router.post("", response_model=TalentSearchResponse)
async def search_talent(
    payload: TalentSearchRequest,
    service: TalentSearchService = Depends(get_talent_search_service),
):
    """Rank players by semantic similarity to the query, under the given filters."""
    try:
        results = await service.search(payload.query, payload.to_filters())
    except EmbeddingError as exc:
        raise embedding_app_error(exc) from exc
    return TalentSearchResponse(query=payload.query, results=results, total_count=len(results))


@router.get("/availability", response_model=TalentSearchAvailability)
async def talent_search_availability(
    service: TalentSearchService = Depends(get_talent_search_service),
):
    if service.is_available():
        return TalentSearchAvailability(is_available=True, message="AI search is available")
    return TalentSearchAvailability(
        is_available=False,
        message="AI search is not configured. Please contact the administrator.",
    )


@router.post("/players/{player_id}/analysis", response_model=PlayerAnalysis)
async def analyze_player(
    player_id: UUID,
    coach: Optional[CoachContext] = None,
    service: PlayerAnalysisService = Depends(get_player_analysis_service),
):
    """Overview, strengths and growth areas for one player, tailored to the coach."""
    try:
        return await service.analyze(player_id, coach)
    except EmbeddingError as exc:
        raise embedding_app_error(exc) from exc
