import uuid

import pytest

from talent_search.errors import PlayerNotFound, ProviderError, ProviderUnavailable
from talent_search.schemas.embedding import EmbeddingRefreshOptions
from talent_search.services.embedding_refresh_service import (
    EmbeddingRefreshService,
    coverage_percent,
    split_batches,
)
from tests.conftest import FakePlayers, FakeStore, StubProvider, make_player


pytestmark = pytest.mark.unit


class RecordingSleeper:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def _ids(count):
    # Sorted so list order is predictable
    return sorted(uuid.uuid4() for _ in range(count))


def _service(players, *, provider=None, store=None, sleeper=None):
    fake_players = FakePlayers(players)
    store = store or FakeStore(fake_players)
    provider = provider or StubProvider()
    sleeper = sleeper or RecordingSleeper()
    service = EmbeddingRefreshService(fake_players, store, provider, sleeper=sleeper)
    return service, store, provider, sleeper


@pytest.mark.asyncio
async def test_one_failing_player_does_not_abort_the_batch():
    ids = _ids(5)
    players = [make_player(f"Player{i}", "Test", id=pid) for i, pid in enumerate(ids, start=1)]
    players[2] = make_player("Broken", "Test", id=ids[2], bio="FAIL-ME")
    service, store, _, _ = _service(players, provider=StubProvider(fail_marker="FAIL-ME"))

    result = await service.refresh(EmbeddingRefreshOptions(only_missing=False, batch_size=5, batch_delay_ms=0))

    assert (result.processed, result.succeeded, result.failed) == (5, 4, 1)
    assert result.failed_ids == [ids[2]]
    assert set(store.rows) == {ids[0], ids[1], ids[3], ids[4]}


@pytest.mark.asyncio
async def test_not_configured_aborts_before_any_write():
    players = [make_player() for _ in range(3)]
    service, store, _, sleeper = _service(players, provider=StubProvider(configured=False))

    with pytest.raises(ProviderUnavailable):
        await service.refresh(EmbeddingRefreshOptions(only_missing=False))

    assert store.rows == {}
    assert store.upserts == []
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_delay_only_between_batches():
    players = [make_player() for _ in range(7)]
    service, store, _, sleeper = _service(players)

    result = await service.refresh(EmbeddingRefreshOptions(only_missing=False, batch_size=3, batch_delay_ms=250))

    # 7 players -> batches of 3, 3, 1
    assert sleeper.delays == [0.25, 0.25]
    assert result.succeeded == 7
    assert len(store.rows) == 7


@pytest.mark.asyncio
async def test_single_batch_never_sleeps():
    service, _, _, sleeper = _service([make_player(), make_player()])

    await service.refresh(EmbeddingRefreshOptions(only_missing=False, batch_size=10, batch_delay_ms=1000))

    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_only_missing_targets_players_without_embeddings():
    players = [make_player() for _ in range(4)]
    service, store, provider, _ = _service(players)
    already = players[0].id
    store.rows[already] = ([0.0, 0.0, 0.0, 1.0], "old text")

    result = await service.refresh(EmbeddingRefreshOptions(only_missing=True, batch_delay_ms=0))

    assert result.target_count == 3
    assert already not in store.upserts
    assert store.rows[already][1] == "old text"
    assert len(provider.calls) == 3


@pytest.mark.asyncio
async def test_dry_run_lists_targets_without_provider_calls():
    players = [make_player() for _ in range(3)]
    service, store, provider, _ = _service(players, provider=StubProvider(configured=False))

    result = await service.refresh(EmbeddingRefreshOptions(only_missing=True, dry_run=True))

    assert result.dry_run is True
    assert set(result.planned_ids) == {p.id for p in players}
    assert result.processed == 0
    assert provider.calls == []
    assert store.rows == {}


@pytest.mark.asyncio
async def test_skip_unchanged_avoids_provider_call():
    player = make_player("Sam", "Lee")
    service, store, provider, _ = _service([player])
    store.rows[player.id] = ([1.0, 0.0, 0.0, 0.0], "Player: Sam Lee")

    result = await service.refresh(
        EmbeddingRefreshOptions(only_missing=False, skip_unchanged=True, batch_delay_ms=0)
    )

    assert result.succeeded == 1
    assert result.unchanged == 1
    assert provider.calls == []


@pytest.mark.asyncio
async def test_player_deleted_mid_run_is_recorded_as_failure():
    players = [make_player(), make_player()]
    service, store, _, _ = _service(players)
    gone = players[1].id
    list_before_delete = service.players.list_player_ids

    async def list_then_delete():
        ids = await list_before_delete()
        del service.players.players[gone]
        return ids

    service.players.list_player_ids = list_then_delete

    result = await service.refresh(EmbeddingRefreshOptions(only_missing=False, batch_delay_ms=0))

    assert result.failed_ids == [gone]
    assert result.succeeded == 1


@pytest.mark.asyncio
async def test_refresh_player_propagates_errors():
    player = make_player(bio="FAIL-ME")
    service, store, _, _ = _service([player], provider=StubProvider(fail_marker="FAIL-ME"))

    with pytest.raises(ProviderError):
        await service.refresh_player(player.id)
    with pytest.raises(PlayerNotFound):
        await service.refresh_player(uuid.uuid4())
    assert store.rows == {}


@pytest.mark.asyncio
async def test_refresh_player_stores_built_text():
    player = make_player("Sam", "Lee", location="Ohio")
    service, store, _, _ = _service([player])

    read = await service.refresh_player(player.id)

    assert read.updated is True
    assert read.embedding_text == "Player: Sam Lee. Location: Ohio"
    assert store.rows[player.id][1] == read.embedding_text


@pytest.mark.asyncio
async def test_delete_player_is_idempotent():
    player = make_player()
    service, store, _, _ = _service([player])
    await service.refresh_player(player.id)

    await service.delete_player(player.id)
    await service.delete_player(player.id)

    assert player.id not in store.rows


@pytest.mark.asyncio
async def test_stats_reports_coverage():
    players = [make_player() for _ in range(3)]
    service, store, _, _ = _service(players)
    await service.refresh_player(players[0].id)

    stats = await service.stats()

    assert stats.total_embeddings == 1
    assert stats.missing_embeddings == 2
    assert stats.total_players == 3
    assert stats.coverage_percent == 33
    assert stats.is_configured is True


def test_coverage_percent_rounds_and_handles_empty():
    assert coverage_percent(0, 0) == 0
    assert coverage_percent(2, 1) == 67
    assert coverage_percent(1, 1) == 50


def test_split_batches_preserves_order():
    ids = _ids(5)
    assert split_batches(ids, 2) == [ids[0:2], ids[2:4], ids[4:5]]
    assert split_batches([], 3) == []
