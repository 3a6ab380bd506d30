"""
Embedding refresh orchestration.

Targets are split into sequential batches. Players inside a batch are
embedded concurrently and awaited together; the next batch starts only
after the configured delay. Per-player failures are recorded and never
abort the run. A missing provider configuration aborts before any batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence
from uuid import UUID

from talent_search.errors import NotConfigured, PlayerNotFound, ProviderUnavailable
from talent_search.schemas.embedding import (
    EmbeddingRefreshOptions,
    EmbeddingRefreshResult,
    EmbeddingStats,
    PlayerEmbeddingRead,
)
from talent_search.services.embedding_provider import EmbeddingProvider
from talent_search.services.embedding_store import EmbeddingStore
from talent_search.services.embedding_text import build_player_embedding_text
from talent_search.services.player_profile_service import PlayerProfileService
from talent_search.utils.time import utc_now


logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


def split_batches(ids: Sequence[UUID], batch_size: int) -> List[List[UUID]]:
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [list(ids[i:i + batch_size]) for i in range(0, len(ids), batch_size)]


def coverage_percent(embedded: int, missing: int) -> int:
    total = embedded + missing
    if total == 0:
        return 0
    return int(embedded / total * 100 + 0.5)


class EmbeddingRefreshService:
    """Builds, embeds and stores player profile text."""

    def __init__(
        self,
        players: PlayerProfileService,
        store: EmbeddingStore,
        provider: EmbeddingProvider,
        *,
        sleeper: Optional[Sleeper] = None,
    ):
        self.players = players
        self.store = store
        self.provider = provider
        self.sleeper = sleeper or asyncio.sleep

    def ensure_configured(self) -> None:
        if not self.provider.is_configured():
            raise ProviderUnavailable("Embedding provider is not configured")

    async def refresh_player(self, player_id: UUID, *, skip_unchanged: bool = False) -> PlayerEmbeddingRead:
        """
        Re-embed one player now.

        Every failure propagates: the caller asked for this write and must
        know when it did not happen.
        """
        self.ensure_configured()

        player = await self.players.get_embedding_input(player_id)
        if player is None:
            raise PlayerNotFound(player_id)

        embedding_text = build_player_embedding_text(player)
        if skip_unchanged:
            stored_text = await self.store.get_embedding_text(player_id)
            if stored_text == embedding_text:
                return PlayerEmbeddingRead(player_id=player_id, embedding_text=embedding_text, updated=False)

        embedding = await self.provider.embed_player_text(embedding_text)
        await self.store.upsert(player_id, embedding, embedding_text)
        return PlayerEmbeddingRead(player_id=player_id, embedding_text=embedding_text, updated=True)

    async def delete_player(self, player_id: UUID) -> None:
        await self.store.delete(player_id)

    async def _target_ids(self, only_missing: bool) -> List[UUID]:
        if only_missing:
            return await self.store.list_missing_player_ids()
        return await self.players.list_player_ids()

    async def refresh(self, options: Optional[EmbeddingRefreshOptions] = None) -> EmbeddingRefreshResult:
        """Refresh embeddings in paced batches and summarize the outcome."""
        options = options or EmbeddingRefreshOptions()
        result = EmbeddingRefreshResult(dry_run=options.dry_run, started_at=utc_now())

        if not options.dry_run:
            self.ensure_configured()

        target_ids = await self._target_ids(options.only_missing)
        result.target_count = len(target_ids)

        if options.dry_run:
            result.planned_ids = list(target_ids)
            result.finished_at = utc_now()
            logger.info("Dry run: %s player(s) would be embedded", len(target_ids))
            return result

        batches = split_batches(target_ids, options.batch_size)
        logger.info(
            "Refreshing embeddings for %s player(s) in %s batch(es) (only_missing=%s)",
            len(target_ids),
            len(batches),
            options.only_missing,
        )

        for index, batch in enumerate(batches):
            outcomes = await asyncio.gather(
                *(self.refresh_player(player_id, skip_unchanged=options.skip_unchanged) for player_id in batch),
                return_exceptions=True,
            )

            for player_id, outcome in zip(batch, outcomes):
                result.processed += 1
                if isinstance(outcome, NotConfigured):
                    raise outcome
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    result.failed += 1
                    result.failed_ids.append(player_id)
                    logger.error("Embedding failed for player %s: %s", player_id, outcome)
                    continue
                result.succeeded += 1
                if not outcome.updated:
                    result.unchanged += 1

            logger.info(
                "Batch %s/%s done: processed=%s succeeded=%s failed=%s",
                index + 1,
                len(batches),
                result.processed,
                result.succeeded,
                result.failed,
            )

            if index < len(batches) - 1 and options.batch_delay_ms > 0:
                await self.sleeper(options.batch_delay_ms / 1000)

        result.finished_at = utc_now()
        return result

    async def stats(self) -> EmbeddingStats:
        embedded, missing = await self.store.coverage()
        return EmbeddingStats(
            total_embeddings=embedded,
            missing_embeddings=missing,
            total_players=embedded + missing,
            coverage_percent=coverage_percent(embedded, missing),
            is_configured=self.provider.is_configured(),
        )
