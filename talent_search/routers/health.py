"""Health check router."""

import logging
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talent_search.core.dependencies import get_db, get_provider
from talent_search.services.embedding_provider import EmbeddingProvider

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_alembic_head() -> Optional[str]:
    project_root = Path(__file__).resolve().parents[2]
    cfg_path = project_root / "alembic.ini"
    script_location = project_root / "alembic"
    if not cfg_path.exists() or not script_location.exists():
        return None

    config = Config(str(cfg_path))
    config.set_main_option("script_location", str(script_location))
    script = ScriptDirectory.from_config(config)
    return script.get_current_head()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    provider: EmbeddingProvider = Depends(get_provider),
):
    """DB, pgvector, alembic and embedding provider checks."""

    db_ok = False
    pgvector_version: Optional[str] = None
    alembic_current: Optional[str] = None
    alembic_head: Optional[str] = None

    try:
        await db.execute(text("SELECT 1"))
        db_ok = True
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check database probe failed: %s", exc)

    if db_ok:
        try:
            result = await db.execute(text("SELECT extversion FROM pg_extension WHERE extname = 'vector'"))
            pgvector_version = result.scalar_one_or_none()
        except SQLAlchemyError:
            pgvector_version = None
        try:
            version_result = await db.execute(text("SELECT version_num FROM alembic_version"))
            alembic_current = version_result.scalar_one_or_none()
        except SQLAlchemyError:
            alembic_current = None

    try:
        alembic_head = _load_alembic_head()
    except Exception:  # noqa: BLE001
        alembic_head = None

    alembic_head_ok = bool(alembic_current and alembic_head and alembic_current == alembic_head)

    return {
        "api_ok": True,
        "db_ok": db_ok,
        "pgvector_ok": pgvector_version is not None,
        "pgvector_version": pgvector_version,
        "alembic_head_ok": alembic_head_ok,
        "alembic_current": alembic_current,
        "alembic_head": alembic_head,
        "embedding_provider": provider.key,
        "embedding_provider_configured": provider.is_configured(),
    }
