import uuid

import pytest
from pydantic import ValidationError

from talent_search.core.config import settings
from talent_search.schemas.embedding import EmbeddingRefreshOptions
from talent_search.schemas.talent_search import PlayerEmbeddingInput, TalentSearchFilters, TalentSearchRequest
from talent_search.services.embedding_text import build_player_embedding_text


pytestmark = pytest.mark.unit


def test_filter_defaults_come_from_settings():
    filters = TalentSearchFilters()

    assert filters.limit == settings.TALENT_SEARCH_DEFAULT_LIMIT
    assert filters.min_similarity == settings.TALENT_SEARCH_DEFAULT_MIN_SIMILARITY
    assert filters.roles is None


@pytest.mark.parametrize(
    "field,value",
    [
        ("limit", 0),
        ("limit", 101),
        ("min_similarity", -0.1),
        ("min_similarity", 1.5),
        ("min_gpa", 4.5),
        ("max_gpa", -1),
        ("school_types", ["MIDDLE_SCHOOL"]),
    ],
)
def test_out_of_range_filters_rejected(field, value):
    with pytest.raises(ValidationError):
        TalentSearchFilters(**{field: value})


def test_list_filters_are_trimmed_and_deduplicated():
    filters = TalentSearchFilters(locations=[" Texas ", "Texas", ""], roles=["  "], class_years=["2025", "2025"])

    assert filters.locations == ["Texas"]
    assert filters.roles is None
    assert filters.class_years == ["2025"]


def test_gpa_range_check():
    assert TalentSearchFilters(min_gpa=3.0).gpa_range_is_valid()
    assert TalentSearchFilters(min_gpa=3.0, max_gpa=3.0).gpa_range_is_valid()
    assert not TalentSearchFilters(min_gpa=3.5, max_gpa=3.0).gpa_range_is_valid()


def test_request_splits_into_filters():
    request = TalentSearchRequest(query="controller main", limit=5, roles=["Controller"])

    filters = request.to_filters()

    assert isinstance(filters, TalentSearchFilters)
    assert filters.limit == 5
    assert filters.roles == ["Controller"]


def test_request_requires_query():
    with pytest.raises(ValidationError):
        TalentSearchRequest(query="")


def test_refresh_option_bounds():
    assert EmbeddingRefreshOptions().only_missing is True
    with pytest.raises(ValidationError):
        EmbeddingRefreshOptions(batch_size=0)
    with pytest.raises(ValidationError):
        EmbeddingRefreshOptions(batch_size=51)


def test_unrecognised_school_type_is_dropped():
    player = PlayerEmbeddingInput(
        id=uuid.uuid4(), first_name="Kai", last_name="Moss", school="Northside Academy", school_type="ACADEMY"
    )

    assert player.school_type is None
    assert build_player_embedding_text(player) == "Player: Kai Moss. School: Northside Academy"


def test_known_school_type_is_kept():
    player = PlayerEmbeddingInput(id=uuid.uuid4(), first_name="Kai", last_name="Moss", school_type="COLLEGE")

    assert player.school_type == "COLLEGE"
