"""
Talent search Pydantic schemas.

Player projection used for embedding text, search filters, and ranked results.
"""

from datetime import datetime
from typing import List, Literal, Optional, get_args
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from talent_search.core.config import settings


SchoolType = Literal["HIGH_SCHOOL", "COLLEGE", "UNIVERSITY"]
SCHOOL_TYPES = get_args(SchoolType)


# ============================================================================
# Embedding input
# ============================================================================

class GameProfileSummary(BaseModel):
    """Per-game details included in a player's embedding text."""

    game: str
    username: Optional[str] = None
    rank: Optional[str] = None
    role: Optional[str] = None
    agents: List[str] = Field(default_factory=list)
    play_style: Optional[str] = None


class PlayerEmbeddingInput(BaseModel):
    """Projection of a player profile used to build embedding text."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    first_name: str
    last_name: str
    username: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    school: Optional[str] = None
    school_type: Optional[SchoolType] = None
    class_year: Optional[str] = None
    gpa: Optional[float] = None
    intended_major: Optional[str] = None
    main_game: Optional[str] = None
    game_profiles: List[GameProfileSummary] = Field(default_factory=list)

    @field_validator("school_type", mode="before")
    @classmethod
    def _known_school_type(cls, value):
        """schools.type is free text; values outside SchoolType are treated as unknown."""
        return value if value in SCHOOL_TYPES else None


# ============================================================================
# Search
# ============================================================================

class TalentSearchFilters(BaseModel):
    """
    Structured constraints for a similarity search.

    Dimensions are combined with AND; values inside a multi-valued
    dimension (class_years, school_types, locations, roles) with OR.
    """

    limit: int = Field(default_factory=lambda: settings.TALENT_SEARCH_DEFAULT_LIMIT, ge=1, le=100)
    min_similarity: float = Field(
        default_factory=lambda: settings.TALENT_SEARCH_DEFAULT_MIN_SIMILARITY,
        ge=0.0,
        le=1.0,
    )
    game_id: Optional[UUID] = None
    class_years: Optional[List[str]] = None
    school_types: Optional[List[SchoolType]] = None
    locations: Optional[List[str]] = None
    min_gpa: Optional[float] = Field(None, ge=0.0, le=4.0)
    max_gpa: Optional[float] = Field(None, ge=0.0, le=4.0)
    roles: Optional[List[str]] = None

    @field_validator("class_years", "locations", "roles")
    @classmethod
    def _normalize_text_values(cls, values: Optional[List[str]]) -> Optional[List[str]]:
        """Trim, drop blanks and duplicates; an empty list means no constraint."""
        if values is None:
            return None
        cleaned: List[str] = []
        for value in values:
            text = value.strip()
            if text and text not in cleaned:
                cleaned.append(text)
        return cleaned or None

    @field_validator("school_types")
    @classmethod
    def _normalize_school_types(cls, values: Optional[List[str]]) -> Optional[List[str]]:
        if not values:
            return None
        return list(dict.fromkeys(values))

    def gpa_range_is_valid(self) -> bool:
        if self.min_gpa is None or self.max_gpa is None:
            return True
        return self.min_gpa <= self.max_gpa


class TalentSearchRequest(TalentSearchFilters):
    """Recruiter search request: free-text query plus filters."""

    query: str = Field(..., min_length=1, max_length=1000)

    def to_filters(self) -> TalentSearchFilters:
        return TalentSearchFilters.model_validate(self.model_dump(exclude={"query"}))


class VectorSearchResult(BaseModel):
    """A matching player and its cosine similarity to the query."""

    player_id: UUID
    similarity: float


class TalentSearchResponse(BaseModel):
    query: str
    results: List[VectorSearchResult]
    total_count: int


class TalentSearchAvailability(BaseModel):
    is_available: bool
    message: str


# ============================================================================
# Player analysis
# ============================================================================

class CoachContext(BaseModel):
    """Who is asking for the analysis; personalises the prompt."""

    school_name: Optional[str] = Field(None, max_length=255)
    school_type: Optional[SchoolType] = None
    games: List[str] = Field(default_factory=list, max_length=20)

    @field_validator("games")
    @classmethod
    def _clean_games(cls, values: List[str]) -> List[str]:
        return [value.strip() for value in values if value.strip()]


class PlayerAnalysis(BaseModel):
    overview: str
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    generated_at: datetime
    is_cached: bool = False
