"""Repository for reading player profiles that feed embedding text."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from talent_search.models.player import Player, PlayerGameProfile
from talent_search.schemas.talent_search import GameProfileSummary, PlayerEmbeddingInput


class PlayerRepository:
    """Read-only access to players and their related school and game rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_ids(self) -> List[UUID]:
        result = await self.db.execute(select(Player.id).order_by(Player.id))
        return list(result.scalars().all())

    async def get_by_id(self, player_id: UUID) -> Optional[Player]:
        result = await self.db.execute(
            select(Player)
            .where(Player.id == player_id)
            .options(
                selectinload(Player.school_ref),
                selectinload(Player.main_game),
                selectinload(Player.game_profiles).selectinload(PlayerGameProfile.game),
            )
        )
        return result.scalar_one_or_none()

    async def get_embedding_input(self, player_id: UUID) -> Optional[PlayerEmbeddingInput]:
        player = await self.get_by_id(player_id)
        if player is None:
            return None
        return to_embedding_input(player)


def to_embedding_input(player: Player) -> PlayerEmbeddingInput:
    """Project a loaded Player onto the fields used for embedding text."""
    school_ref = player.school_ref
    school_name = school_ref.name if school_ref is not None else player.school
    school_type = school_ref.type if school_ref is not None else None

    profiles = [
        GameProfileSummary(
            game=profile.game.name,
            username=profile.username,
            rank=profile.rank,
            role=profile.role,
            agents=list(profile.agents or []),
            play_style=profile.play_style,
        )
        for profile in player.game_profiles
    ]

    return PlayerEmbeddingInput(
        id=player.id,
        first_name=player.first_name,
        last_name=player.last_name,
        username=player.username,
        location=player.location,
        bio=player.bio,
        school=school_name,
        school_type=school_type,
        class_year=player.class_year,
        gpa=float(player.gpa) if player.gpa is not None else None,
        intended_major=player.intended_major,
        main_game=player.main_game.name if player.main_game is not None else None,
        game_profiles=profiles,
    )
