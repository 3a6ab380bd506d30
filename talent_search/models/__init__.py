"""
Models package.

Import all models here so they are registered with SQLAlchemy.
"""

from talent_search.models.player import Game, Player, PlayerGameProfile, School
from talent_search.models.player_embedding import PlayerEmbedding

__all__ = [
    "School",
    "Game",
    "Player",
    "PlayerGameProfile",
    "PlayerEmbedding",
]
