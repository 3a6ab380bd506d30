"""
Similarity search statement composition.

Each optional filter dimension is a small pure function returning a
Predicate: an SQL fragment plus the named parameters it references. The
statement renderer joins the active predicates with AND and checks that
every placeholder in the final SQL has exactly one bound value.

Aliases: ``pe`` player_embeddings, ``p`` players, ``pgp``
player_game_profiles, ``s`` schools.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from pgvector.sqlalchemy import Vector
from sqlalchemy import Numeric, Text, bindparam, text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from talent_search.errors import InvalidSearchFilters, QueryError
from talent_search.schemas.talent_search import TalentSearchFilters


_PLACEHOLDER_RE = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")

QUERY_EMBEDDING_PARAM = "query_embedding"
DISTANCE_EXPR = "(pe.embedding <=> CAST(:query_embedding AS vector))"


@dataclass(frozen=True)
class Predicate:
    """A WHERE fragment and the values for the placeholders it uses."""

    fragment: str
    params: Dict[str, Any] = field(default_factory=dict)
    bind_types: Dict[str, TypeEngine] = field(default_factory=dict)


@dataclass(frozen=True)
class SimilarityStatement:
    sql: str
    params: Dict[str, Any]
    bind_types: Dict[str, TypeEngine]

    def to_text(self) -> TextClause:
        binds = [bindparam(name, type_=type_) for name, type_ in self.bind_types.items()]
        return text(self.sql).bindparams(*binds)


def placeholders(sql: str) -> List[str]:
    """Named placeholders in order of first appearance. ``::`` casts are ignored."""
    seen: List[str] = []
    for name in _PLACEHOLDER_RE.findall(sql):
        if name not in seen:
            seen.append(name)
    return seen


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def similarity_threshold_predicate(min_similarity: float) -> Predicate:
    return Predicate(
        f"1 - {DISTANCE_EXPR} >= :min_similarity",
        {"min_similarity": float(min_similarity)},
    )


def game_predicate(game_id) -> Optional[Predicate]:
    if game_id is None:
        return None
    return Predicate(
        "EXISTS (SELECT 1 FROM player_game_profiles pgp "
        "WHERE pgp.player_id = p.id AND pgp.game_id = :game_id)",
        {"game_id": game_id},
        {"game_id": UUID(as_uuid=True)},
    )


def class_year_predicate(class_years: Optional[Sequence[str]]) -> Optional[Predicate]:
    if not class_years:
        return None
    return Predicate(
        "p.class_year = ANY(:class_years)",
        {"class_years": list(class_years)},
        {"class_years": ARRAY(Text)},
    )


def school_type_predicate(school_types: Optional[Sequence[str]]) -> Optional[Predicate]:
    if not school_types:
        return None
    return Predicate(
        "EXISTS (SELECT 1 FROM schools s "
        "WHERE s.id = p.school_id AND s.type = ANY(:school_types))",
        {"school_types": list(school_types)},
        {"school_types": ARRAY(Text)},
    )


def location_predicate(locations: Optional[Sequence[str]]) -> Optional[Predicate]:
    """Case-insensitive substring match; any of the values may match."""
    if not locations:
        return None
    clauses = []
    params: Dict[str, Any] = {}
    for index, location in enumerate(locations):
        name = f"location_{index}"
        clauses.append(f"p.location ILIKE :{name} ESCAPE '\\'")
        params[name] = f"%{escape_like(location)}%"
    return Predicate("(" + " OR ".join(clauses) + ")", params)


def gpa_predicates(min_gpa: Optional[float], max_gpa: Optional[float]) -> List[Predicate]:
    if min_gpa is not None and max_gpa is not None and min_gpa > max_gpa:
        raise InvalidSearchFilters(f"min_gpa ({min_gpa}) is greater than max_gpa ({max_gpa})")
    predicates = []
    if min_gpa is not None:
        predicates.append(_gpa_bound("p.gpa >= :min_gpa", "min_gpa", min_gpa))
    if max_gpa is not None:
        predicates.append(_gpa_bound("p.gpa <= :max_gpa", "max_gpa", max_gpa))
    return predicates


def _gpa_bound(fragment: str, name: str, value: float) -> Predicate:
    # Decimal from the typed text: 3.1 binds as 3.1, not as the nearest binary float
    return Predicate(fragment, {name: Decimal(str(value))}, {name: Numeric(3, 2)})


def role_predicate(roles: Optional[Sequence[str]]) -> Optional[Predicate]:
    if not roles:
        return None
    return Predicate(
        "EXISTS (SELECT 1 FROM player_game_profiles pgp "
        "WHERE pgp.player_id = p.id AND pgp.role = ANY(:roles))",
        {"roles": list(roles)},
        {"roles": ARRAY(Text)},
    )


def build_predicates(filters: TalentSearchFilters) -> List[Predicate]:
    """Threshold first, then every active filter dimension."""
    predicates: List[Predicate] = [similarity_threshold_predicate(filters.min_similarity)]
    for predicate in (
        game_predicate(filters.game_id),
        class_year_predicate(filters.class_years),
        school_type_predicate(filters.school_types),
        location_predicate(filters.locations),
    ):
        if predicate is not None:
            predicates.append(predicate)
    predicates.extend(gpa_predicates(filters.min_gpa, filters.max_gpa))
    role = role_predicate(filters.roles)
    if role is not None:
        predicates.append(role)
    return predicates


# ---------------------------------------------------------------------------
# Statement
# ---------------------------------------------------------------------------

def build_similarity_statement(
    query_embedding: Sequence[float],
    filters: TalentSearchFilters,
    *,
    dimensions: int,
) -> SimilarityStatement:
    """Compose the ranked, filtered similarity query for one search."""
    predicates = build_predicates(filters)

    params: Dict[str, Any] = {QUERY_EMBEDDING_PARAM: list(query_embedding), "limit": filters.limit}
    bind_types: Dict[str, TypeEngine] = {QUERY_EMBEDDING_PARAM: Vector(dimensions)}
    for predicate in predicates:
        for name, value in predicate.params.items():
            if name in params:
                raise QueryError(f"Duplicate search parameter: {name}")
            params[name] = value
        bind_types.update(predicate.bind_types)

    where = "\n  AND ".join(predicate.fragment for predicate in predicates)
    sql = (
        "SELECT pe.player_id AS player_id,\n"
        f"       1 - {DISTANCE_EXPR} AS similarity\n"
        "FROM player_embeddings pe\n"
        "JOIN players p ON p.id = pe.player_id\n"
        f"WHERE {where}\n"
        f"ORDER BY {DISTANCE_EXPR} ASC\n"
        "LIMIT :limit"
    )

    used = set(placeholders(sql))
    if used != set(params):
        missing = sorted(used - set(params))
        unused = sorted(set(params) - used)
        raise QueryError(f"Search parameters out of sync (missing={missing}, unused={unused})")

    return SimilarityStatement(sql=sql, params=params, bind_types=bind_types)
