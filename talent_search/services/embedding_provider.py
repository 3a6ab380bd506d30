"""
Embedding provider clients.

The Gemini client calls the ``embedContent`` and ``generateContent`` REST
endpoints. The deterministic provider hashes tokens into a fixed-size
vector and returns a canned analysis, so local runs and tests never touch
the network.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import re
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from talent_search.core.config import settings
from talent_search.errors import ProviderError, ProviderUnavailable


logger = logging.getLogger(__name__)

TASK_RETRIEVAL_QUERY = "RETRIEVAL_QUERY"
TASK_RETRIEVAL_DOCUMENT = "RETRIEVAL_DOCUMENT"

Fetcher = Callable[[str, dict[str, Any], dict[str, str]], Awaitable[tuple[int, dict]]]


class EmbeddingProvider:
    """Interface for embedding providers."""

    key: str

    def is_configured(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    async def embed_query(self, text: str) -> List[float]:  # pragma: no cover - interface
        raise NotImplementedError

    async def embed_player_text(self, text: str) -> List[float]:  # pragma: no cover - interface
        raise NotImplementedError

    async def generate_analysis(self, prompt: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Google Gemini over REST: embeddings and player analysis text. No retries at this layer."""

    key = "gemini"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        analysis_model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        fetcher: Optional[Fetcher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_GEMINI_API_KEY
        self.model = model or settings.GEMINI_EMBEDDING_MODEL
        self.analysis_model = analysis_model or settings.GEMINI_ANALYSIS_MODEL
        self.base_url = (base_url or settings.GEMINI_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.EMBEDDING_REQUEST_TIMEOUT_SECONDS
        self.transport = transport
        self.fetcher = fetcher or self._http_post

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:embedContent"

    @property
    def analysis_endpoint(self) -> str:
        return f"{self.base_url}/models/{self.analysis_model}:generateContent"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def embed_query(self, text: str) -> List[float]:
        return await self._embed(text, TASK_RETRIEVAL_QUERY)

    async def embed_player_text(self, text: str) -> List[float]:
        return await self._embed(text, TASK_RETRIEVAL_DOCUMENT)

    async def generate_analysis(self, prompt: str) -> str:
        """Raw model text for an analysis prompt; parsing is left to the caller."""
        status_code, payload = await self._post(
            self.analysis_endpoint, self._build_generate_body(prompt), "Analysis", self.analysis_model
        )
        text = _candidate_text(payload)
        if not text:
            raise ProviderError("Failed to generate player analysis: empty response", status_code=status_code)
        return text

    def _build_request_body(self, text: str, task_type: str) -> dict[str, Any]:
        return {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]},
            "taskType": task_type,
        }

    def _build_generate_body(self, prompt: str) -> dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    async def _http_post(self, url: str, json_body: dict[str, Any], headers: dict[str, str]) -> tuple[int, dict]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(url, json=json_body, headers=headers)
        try:
            payload = resp.json()
        except ValueError:
            payload = {"text": resp.text}
        return resp.status_code, payload

    async def _post(self, url: str, body: dict[str, Any], label: str, model: str) -> tuple[int, dict]:
        if not self.is_configured():
            raise ProviderUnavailable("Gemini API is not configured (GOOGLE_GEMINI_API_KEY missing)")

        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        try:
            status_code, payload = await self.fetcher(url, body, headers)
        except httpx.TimeoutException as exc:
            raise ProviderError(f"{label} request timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"{label} request failed: {exc}") from exc

        if status_code != 200:
            message = _error_message(payload) or "Gemini returned non-200"
            logger.warning("%s request failed: status=%s model=%s message=%s", label, status_code, model, message)
            raise ProviderError(message, status_code=status_code)
        return status_code, payload

    async def _embed(self, text: str, task_type: str) -> List[float]:
        status_code, payload = await self._post(
            self.endpoint, self._build_request_body(text, task_type), "Embedding", self.model
        )
        values = (payload.get("embedding") or {}).get("values") if isinstance(payload, dict) else None
        if not values:
            raise ProviderError("Failed to generate embedding: empty embedding returned", status_code=status_code)
        return [float(v) for v in values]


def _candidate_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text") or "" for part in parts).strip()


def _error_message(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("message")
    return payload.get("text")


_TOKEN_RE = re.compile(r"\w+")


class DeterministicEmbeddingProvider(EmbeddingProvider):
    """
    Offline provider that maps text to a stable unit vector.

    Word tokens are hashed into buckets with a signed weight, so texts that
    share words end up closer in cosine distance. Analysis text is a fixed
    JSON object. Used when EMBEDDING_MOCK_PROVIDER is enabled.
    """

    key = "deterministic"

    def __init__(self, dimensions: Optional[int] = None):
        self.dimensions = dimensions or settings.EMBEDDING_DIMENSIONS

    def is_configured(self) -> bool:
        return True

    async def embed_query(self, text: str) -> List[float]:
        return self.embed(text)

    async def embed_player_text(self, text: str) -> List[float]:
        return self.embed(text)

    def embed(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        for token in _TOKEN_RE.findall(text.lower()):
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "big") % self.dimensions
            sign = 1.0 if digest[4] % 2 == 0 else -1.0
            vector[bucket] += sign
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            raise ProviderError("Failed to generate embedding: no tokens in text")
        return [v / norm for v in vector]

    async def generate_analysis(self, prompt: str) -> str:
        # Echoes the first profile clause so offline output differs per player
        profile = next((line for line in prompt.splitlines() if line.startswith("Player: ")), "Player: unknown")
        name_clause = profile.split(". ")[0]
        return json.dumps(
            {
                "overview": f"Offline analysis for {name_clause}.",
                "pros": ["Profile is complete enough to review"],
                "cons": ["Generated without a language model"],
            }
        )


def get_embedding_provider() -> EmbeddingProvider:
    """Provider selected by configuration."""
    if settings.EMBEDDING_MOCK_PROVIDER:
        return DeterministicEmbeddingProvider()
    return GeminiEmbeddingProvider()
