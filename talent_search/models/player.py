"""
Recruiting platform models read by the talent search pipeline.

These tables are owned by the main platform (profiles, schools, games).
This service only reads them to build embedding text and to apply
structured search filters.
"""

import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talent_search.db.base import Base


class School(Base):
    """School a player attends; type is HIGH_SCHOOL, COLLEGE or UNIVERSITY."""

    __tablename__ = "schools"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class Game(Base):
    """Competitive title (e.g. VALORANT, League of Legends)."""

    __tablename__ = "games"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    short_name: Mapped[str] = mapped_column(String(20), nullable=False)


class Player(Base):
    """Player profile fields that feed embedding text and search filters."""

    __tablename__ = "players"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Free-text school name, used when the player is not linked to a school row
    school: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    school_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("schools.id", ondelete="SET NULL"),
        nullable=True,
    )
    class_year: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    gpa: Mapped[Optional[Decimal]] = mapped_column(Numeric(3, 2), nullable=True)
    intended_major: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    main_game_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("games.id", ondelete="SET NULL"),
        nullable=True,
    )

    school_ref: Mapped[Optional[School]] = relationship(School, lazy="raise")
    main_game: Mapped[Optional[Game]] = relationship(Game, lazy="raise")
    game_profiles: Mapped[List["PlayerGameProfile"]] = relationship(
        "PlayerGameProfile",
        back_populates="player",
        order_by="PlayerGameProfile.id",
        lazy="raise",
    )


class PlayerGameProfile(Base):
    """Per-game profile: in-game identity, rank, role and agent pool."""

    __tablename__ = "player_game_profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    player_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    game_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=False,
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    rank: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    agents: Mapped[List[str]] = mapped_column(ARRAY(String(50)), nullable=False, default=list)
    play_style: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    player: Mapped[Player] = relationship(Player, back_populates="game_profiles")
    game: Mapped[Game] = relationship(Game, lazy="raise")
