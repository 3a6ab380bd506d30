"""Domain exceptions and structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Request, status
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Embedding pipeline errors
# ---------------------------------------------------------------------------

class EmbeddingError(Exception):
    """Base class for talent search and embedding refresh failures."""


class NotConfigured(EmbeddingError):
    """A required capability (provider credential, pgvector) is unavailable."""


class ProviderUnavailable(NotConfigured):
    """The embedding provider credential is missing; no call was attempted."""


class ProviderError(EmbeddingError):
    """The embedding provider was called but did not return a usable vector."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class QueryError(EmbeddingError):
    """A store query or mutation failed or was composed incorrectly."""


class InvalidSearchFilters(QueryError):
    """Search filters are contradictory or incomplete."""


class PlayerNotFound(EmbeddingError):
    """The player has no profile data to build embedding text from."""

    def __init__(self, player_id: UUID | str):
        super().__init__(f"Player not found: {player_id}")
        self.player_id = player_id


# ---------------------------------------------------------------------------
# API error envelope
# ---------------------------------------------------------------------------

def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = build_error_payload(code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def embedding_app_error(exc: EmbeddingError) -> AppError:
    """Translate a pipeline exception into the API error envelope."""
    if isinstance(exc, NotConfigured):
        return AppError(status.HTTP_412_PRECONDITION_FAILED, "EMBEDDINGS_NOT_CONFIGURED", str(exc))
    if isinstance(exc, InvalidSearchFilters):
        return AppError(status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_SEARCH_FILTERS", str(exc))
    if isinstance(exc, PlayerNotFound):
        return AppError(
            status.HTTP_404_NOT_FOUND,
            "PLAYER_NOT_FOUND",
            str(exc),
            {"player_id": str(exc.player_id)},
        )
    if isinstance(exc, ProviderError):
        details = {"status_code": exc.status_code} if exc.status_code is not None else None
        return AppError(status.HTTP_502_BAD_GATEWAY, "EMBEDDING_PROVIDER_ERROR", str(exc), details)
    if isinstance(exc, QueryError):
        return AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "EMBEDDING_QUERY_FAILED", str(exc))
    return AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "EMBEDDING_ERROR", str(exc))
