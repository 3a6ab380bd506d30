"""API surface with services wired to in-memory doubles."""

import uuid

import pytest
from fastapi.testclient import TestClient

from talent_search.core.dependencies import (
    get_embedding_refresh_service,
    get_player_analysis_service,
    get_talent_search_service,
)
from talent_search.main import app
from talent_search.schemas.talent_search import VectorSearchResult
from talent_search.services.embedding_refresh_service import EmbeddingRefreshService
from talent_search.services.player_analysis_service import FALLBACK_OVERVIEW, PlayerAnalysisService
from talent_search.services.talent_search_service import TalentSearchService
from tests.conftest import FakePlayers, FakeStore, StubProvider, make_player


pytestmark = pytest.mark.unit


async def _no_sleep(_seconds):
    return None


@pytest.fixture
def wiring():
    players = FakePlayers([make_player("Sam", "Lee"), make_player("Ana", "Cruz")])
    store = FakeStore(players)
    provider = StubProvider()
    state = {"players": players, "store": store, "provider": provider}

    app.dependency_overrides[get_talent_search_service] = lambda: TalentSearchService(state["store"], state["provider"])
    app.dependency_overrides[get_embedding_refresh_service] = lambda: EmbeddingRefreshService(
        state["players"], state["store"], state["provider"], sleeper=_no_sleep
    )
    app.dependency_overrides[get_player_analysis_service] = lambda: PlayerAnalysisService(
        state["players"], state["provider"]
    )
    yield state
    app.dependency_overrides.clear()


@pytest.fixture
def client(wiring):
    return TestClient(app)


def test_search_returns_ranked_results(client, wiring):
    player_id = uuid.uuid4()
    wiring["store"].search_results = [VectorSearchResult(player_id=player_id, similarity=0.8)]

    response = client.post("/api/talent-search", json={"query": "duelist from texas", "min_similarity": 0.5})

    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 1
    assert body["results"][0]["player_id"] == str(player_id)


def test_search_with_no_matches_is_200_with_empty_results(client):
    response = client.post("/api/talent-search", json={"query": "anything"})

    assert response.status_code == 200
    assert response.json()["results"] == []


def test_contradictory_gpa_returns_error_envelope(client):
    response = client.post("/api/talent-search", json={"query": "igl", "min_gpa": 3.8, "max_gpa": 3.0})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_SEARCH_FILTERS"


def test_search_when_not_configured_is_distinguishable(client, wiring):
    wiring["provider"] = StubProvider(configured=False)

    response = client.post("/api/talent-search", json={"query": "igl"})

    assert response.status_code == 412
    assert response.json()["error"]["code"] == "EMBEDDINGS_NOT_CONFIGURED"


def test_provider_failure_is_502(client, wiring):
    wiring["provider"] = StubProvider(fail_marker="igl")

    response = client.post("/api/talent-search", json={"query": "igl"})

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EMBEDDING_PROVIDER_ERROR"


def test_availability(client, wiring):
    assert client.get("/api/talent-search/availability").json()["is_available"] is True

    wiring["provider"] = StubProvider(configured=False)
    assert client.get("/api/talent-search/availability").json()["is_available"] is False


def test_refresh_and_stats(client, wiring):
    response = client.post("/api/embeddings/refresh", json={"only_missing": True, "batch_size": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["processed"] == 2
    assert body["succeeded"] == 2
    assert body["failed_ids"] == []

    stats = client.get("/api/embeddings/stats").json()
    assert stats["coverage_percent"] == 100
    assert stats["missing_embeddings"] == 0


def test_refresh_rejects_out_of_range_batch_size(client):
    response = client.post("/api/embeddings/refresh", json={"batch_size": 500})
    assert response.status_code == 422


def test_upsert_unknown_player_is_404(client):
    response = client.put(f"/api/embeddings/players/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PLAYER_NOT_FOUND"


def test_upsert_and_delete_player(client, wiring):
    player_id = next(iter(wiring["players"].players))

    response = client.put(f"/api/embeddings/players/{player_id}")
    assert response.status_code == 200
    assert response.json()["embedding_text"].startswith("Player: ")
    assert player_id in wiring["store"].rows

    response = client.delete(f"/api/embeddings/players/{player_id}")
    assert response.status_code == 204
    assert player_id not in wiring["store"].rows


def test_upsert_player_with_unrecognised_school_type(client, wiring):
    player = make_player("Kai", "Moss", school="Northside Academy", school_type="ACADEMY")
    wiring["players"].players[player.id] = player

    response = client.put(f"/api/embeddings/players/{player.id}")

    assert response.status_code == 200
    assert "School Type" not in response.json()["embedding_text"]


def test_player_analysis_with_coach_context(client, wiring):
    player_id = next(iter(wiring["players"].players))

    response = client.post(
        f"/api/talent-search/players/{player_id}/analysis",
        json={"school_name": "Ohio State", "school_type": "UNIVERSITY", "games": ["VALORANT"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["overview"] == "Composed shot-caller."
    assert body["pros"] == ["Aim", "Comms"]
    assert body["is_cached"] is False
    assert "a coach at Ohio State (university)" in wiring["provider"].prompts[0]


def test_player_analysis_without_body_and_malformed_output(client, wiring):
    wiring["provider"] = StubProvider(analysis_text="not json at all")
    player_id = next(iter(wiring["players"].players))

    response = client.post(f"/api/talent-search/players/{player_id}/analysis")

    assert response.status_code == 200
    assert response.json()["overview"] == FALLBACK_OVERVIEW


def test_player_analysis_errors(client, wiring):
    response = client.post(f"/api/talent-search/players/{uuid.uuid4()}/analysis")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PLAYER_NOT_FOUND"

    wiring["provider"] = StubProvider(configured=False)
    player_id = next(iter(wiring["players"].players))
    response = client.post(f"/api/talent-search/players/{player_id}/analysis")
    assert response.status_code == 412
    assert response.json()["error"]["code"] == "EMBEDDINGS_NOT_CONFIGURED"
