"""
Embedding refresh schemas.

Options and summaries for batch refreshes, coverage statistics, and the
single-player upsert path.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from talent_search.core.config import settings


class EmbeddingRefreshOptions(BaseModel):
    """How a refresh run selects players and paces provider calls."""

    only_missing: bool = True
    batch_size: int = Field(default_factory=lambda: settings.EMBEDDING_REFRESH_BATCH_SIZE, ge=1, le=50)
    batch_delay_ms: int = Field(default_factory=lambda: settings.EMBEDDING_REFRESH_BATCH_DELAY_MS, ge=0, le=10000)
    # List the target players without calling the provider or writing
    dry_run: bool = False
    # Skip the provider call when the rebuilt text equals the stored text
    skip_unchanged: bool = False


class EmbeddingRefreshResult(BaseModel):
    """Summary of a refresh run for operator follow-up."""

    target_count: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_ids: List[UUID] = Field(default_factory=list)
    unchanged: int = 0
    dry_run: bool = False
    planned_ids: List[UUID] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class EmbeddingStats(BaseModel):
    total_embeddings: int
    missing_embeddings: int
    total_players: int
    coverage_percent: int
    is_configured: bool


class PlayerEmbeddingRead(BaseModel):
    """Result of re-embedding one player."""

    model_config = ConfigDict(from_attributes=True)

    player_id: UUID
    embedding_text: str
    updated: bool = True
