"""
Pytest configuration and shared fixtures.

Unit tests run against in-memory doubles of the player source, the
embedding store and the provider. Tests marked ``db`` need a Postgres
database with pgvector and run only when RUN_DB_TESTS=1.
"""

import os
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from talent_search.errors import ProviderError, ProviderUnavailable
from talent_search.schemas.talent_search import (
    GameProfileSummary,
    PlayerEmbeddingInput,
    TalentSearchFilters,
    VectorSearchResult,
)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)


# ---------------------------------------------------------------------------
# In-memory doubles
# ---------------------------------------------------------------------------

def make_player(first_name: str = "Alex", last_name: str = "Rivera", **fields) -> PlayerEmbeddingInput:
    return PlayerEmbeddingInput(id=fields.pop("id", uuid.uuid4()), first_name=first_name, last_name=last_name, **fields)


class FakePlayers:
    """Stands in for PlayerProfileService."""

    def __init__(self, players: Sequence[PlayerEmbeddingInput] = ()):
        self.players: Dict[uuid.UUID, PlayerEmbeddingInput] = {p.id: p for p in players}

    async def list_player_ids(self) -> List[uuid.UUID]:
        return list(self.players)

    async def get_embedding_input(self, player_id: uuid.UUID) -> Optional[PlayerEmbeddingInput]:
        return self.players.get(player_id)


class FakeStore:
    """Stands in for EmbeddingStore; records writes and search calls."""

    def __init__(self, players: FakePlayers, search_results: Optional[List[VectorSearchResult]] = None):
        self.players = players
        self.rows: Dict[uuid.UUID, Tuple[List[float], str]] = {}
        self.upserts: List[uuid.UUID] = []
        self.search_calls: List[Tuple[List[float], TalentSearchFilters]] = []
        self.search_results = search_results or []

    async def upsert(self, player_id, embedding, embedding_text) -> None:
        self.rows[player_id] = (list(embedding), embedding_text)
        self.upserts.append(player_id)

    async def delete(self, player_id) -> None:
        self.rows.pop(player_id, None)

    async def exists(self, player_id) -> bool:
        return player_id in self.rows

    async def get_embedding_text(self, player_id) -> Optional[str]:
        row = self.rows.get(player_id)
        return row[1] if row else None

    async def list_missing_player_ids(self) -> List[uuid.UUID]:
        return [pid for pid in self.players.players if pid not in self.rows]

    async def coverage(self) -> Tuple[int, int]:
        embedded = sum(1 for pid in self.players.players if pid in self.rows)
        return embedded, len(self.players.players) - embedded

    async def search_by_similarity(self, query_embedding, filters) -> List[VectorSearchResult]:
        self.search_calls.append((list(query_embedding), filters))
        return [r for r in self.search_results if r.similarity >= filters.min_similarity][: filters.limit]


ANALYSIS_JSON = '{"overview": "Composed shot-caller.", "pros": ["Aim", "Comms"], "cons": ["Agent pool"]}'


class StubProvider:
    """Deterministic provider; texts containing a marker fail with ProviderError."""

    key = "stub"

    def __init__(
        self,
        *,
        configured: bool = True,
        fail_marker: Optional[str] = None,
        analysis_text: str = ANALYSIS_JSON,
    ):
        self.configured = configured
        self.fail_marker = fail_marker
        self.analysis_text = analysis_text
        self.calls: List[str] = []
        self.prompts: List[str] = []

    def is_configured(self) -> bool:
        return self.configured

    async def _embed(self, text: str) -> List[float]:
        if not self.configured:
            raise ProviderUnavailable("stub provider not configured")
        self.calls.append(text)
        if self.fail_marker and self.fail_marker in text:
            raise ProviderError("stub provider failure")
        return [float(len(text) % 7), 1.0, 0.0, 0.5]

    async def embed_query(self, text: str) -> List[float]:
        return await self._embed(text)

    async def embed_player_text(self, text: str) -> List[float]:
        return await self._embed(text)

    async def generate_analysis(self, prompt: str) -> str:
        if not self.configured:
            raise ProviderUnavailable("stub provider not configured")
        self.prompts.append(prompt)
        if self.fail_marker and self.fail_marker in prompt:
            raise ProviderError("stub provider failure")
        return self.analysis_text


@pytest.fixture
def full_player() -> PlayerEmbeddingInput:
    return make_player(
        username="rivera_fps",
        location="Austin, TX",
        bio="Shot-caller who reviews VODs every week.",
        school="Westlake High School",
        school_type="HIGH_SCHOOL",
        class_year="2026",
        gpa=3.8,
        intended_major="Computer Science",
        main_game="VALORANT",
        game_profiles=[
            GameProfileSummary(
                game="VALORANT",
                username="rivera#NA1",
                rank="Immortal 2",
                role="Duelist",
                agents=["Jett", "Raze"],
                play_style="Aggressive",
            ),
            GameProfileSummary(game="Rocket League", rank="Champion 1"),
        ],
    )

