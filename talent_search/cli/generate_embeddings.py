"""Generate player embeddings from the command line.

Exits non-zero when the provider is not configured or any player failed.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from talent_search.core.config import settings
from talent_search.db.session import async_session_maker, engine
from talent_search.errors import NotConfigured
from talent_search.schemas.embedding import EmbeddingRefreshOptions, EmbeddingRefreshResult
from talent_search.services.embedding_provider import get_embedding_provider
from talent_search.services.embedding_refresh_service import EmbeddingRefreshService
from talent_search.services.embedding_store import EmbeddingStore
from talent_search.services.player_profile_service import PlayerProfileService

logger = logging.getLogger("talent_search.cli.generate_embeddings")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate player embeddings for AI talent search")
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument(
        "--only-missing",
        dest="only_missing",
        action="store_true",
        default=True,
        help="Only embed players without an embedding (default)",
    )
    scope.add_argument("--all", dest="only_missing", action="store_false", help="Re-embed every player")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.EMBEDDING_REFRESH_BATCH_SIZE,
        help="Players embedded concurrently per batch (1-50)",
    )
    parser.add_argument(
        "--batch-delay",
        type=int,
        default=settings.EMBEDDING_REFRESH_BATCH_DELAY_MS,
        help="Pause between batches in milliseconds",
    )
    parser.add_argument("--dry-run", action="store_true", help="List target players without embedding them")
    parser.add_argument(
        "--skip-unchanged",
        action="store_true",
        help="Skip players whose profile text matches the stored embedding text",
    )
    return parser


def _log_summary(result: EmbeddingRefreshResult) -> None:
    if result.dry_run:
        logger.info("Dry run: %s player(s) would be embedded", result.target_count)
        for player_id in result.planned_ids:
            logger.info("  %s", player_id)
        return

    logger.info(
        "Processed %s, succeeded %s (unchanged %s), failed %s",
        result.processed,
        result.succeeded,
        result.unchanged,
        result.failed,
    )
    for player_id in result.failed_ids:
        logger.warning("  failed: %s", player_id)


async def run_refresh(options: EmbeddingRefreshOptions) -> int:
    service = EmbeddingRefreshService(
        PlayerProfileService(async_session_maker),
        EmbeddingStore(async_session_maker),
        get_embedding_provider(),
    )
    try:
        stats = await service.stats()
        logger.info(
            "Coverage before run: %s/%s players (%s%%)",
            stats.total_embeddings,
            stats.total_players,
            stats.coverage_percent,
        )
        result = await service.refresh(options)
    except NotConfigured as exc:
        logger.error("Cannot generate embeddings: %s", exc)
        return 2
    finally:
        await engine.dispose()

    _log_summary(result)
    return 1 if result.failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        options = EmbeddingRefreshOptions(
            only_missing=args.only_missing,
            batch_size=args.batch_size,
            batch_delay_ms=args.batch_delay,
            dry_run=args.dry_run,
            skip_unchanged=args.skip_unchanged,
        )
    except ValueError as exc:
        parser.error(str(exc))

    return asyncio.run(run_refresh(options))


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
