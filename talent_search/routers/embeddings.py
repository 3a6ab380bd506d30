"""
Embedding maintenance endpoints: batch refresh, coverage, single-player upsert.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from talent_search.core.dependencies import get_embedding_refresh_service
from talent_search.errors import EmbeddingError, embedding_app_error
from talent_search.schemas.embedding import (
    EmbeddingRefreshOptions,
    EmbeddingRefreshResult,
    EmbeddingStats,
    PlayerEmbeddingRead,
)
from talent_search.services.embedding_refresh_service import EmbeddingRefreshService

router = APIRouter(prefix="/api/embeddings", tags=["Embeddings"])


@router.post("/refresh", response_model=EmbeddingRefreshResult)
async def refresh_embeddings(
    options: EmbeddingRefreshOptions,
    service: EmbeddingRefreshService = Depends(get_embedding_refresh_service),
):
    """Run a batched refresh; partial failures are reported in the summary."""
    try:
        return await service.refresh(options)
    except EmbeddingError as exc:
        raise embedding_app_error(exc) from exc


@router.get("/stats", response_model=EmbeddingStats)
async def embedding_stats(
    service: EmbeddingRefreshService = Depends(get_embedding_refresh_service),
):
    try:
        return await service.stats()
    except EmbeddingError as exc:
        raise embedding_app_error(exc) from exc


@router.put("/players/{player_id}", response_model=PlayerEmbeddingRead)
async def upsert_player_embedding(
    player_id: UUID,
    skip_unchanged: bool = False,
    service: EmbeddingRefreshService = Depends(get_embedding_refresh_service),
):
    """Re-embed one player after a profile change."""
    try:
        return await service.refresh_player(player_id, skip_unchanged=skip_unchanged)
    except EmbeddingError as exc:
        raise embedding_app_error(exc) from exc


@router.delete("/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player_embedding(
    player_id: UUID,
    service: EmbeddingRefreshService = Depends(get_embedding_refresh_service),
):
    try:
        await service.delete_player(player_id)
    except EmbeddingError as exc:
        raise embedding_app_error(exc) from exc
