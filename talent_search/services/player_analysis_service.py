"""
Coach-facing AI analysis of a single player.

The prompt wraps the player's embedding text with the coach's context and
asks the model for a JSON object with ``overview``, ``pros`` and ``cons``.
Model output that cannot be parsed yields a fallback analysis instead of
an error.
"""

import json
import logging
from typing import Any, List, Optional
from uuid import UUID

from talent_search.errors import PlayerNotFound, ProviderUnavailable
from talent_search.schemas.talent_search import CoachContext, PlayerAnalysis, PlayerEmbeddingInput
from talent_search.services.embedding_provider import EmbeddingProvider
from talent_search.services.embedding_text import build_player_embedding_text
from talent_search.services.player_profile_service import PlayerProfileService
from talent_search.utils.time import utc_now


logger = logging.getLogger(__name__)

MISSING_OVERVIEW = "Unable to generate overview for this player."
FALLBACK_OVERVIEW = "Unable to generate detailed analysis at this time. Please try again later."

_COACH_SCHOOL_TYPES = {
    "HIGH_SCHOOL": "high school",
    "COLLEGE": "college",
    "UNIVERSITY": "university",
}


def describe_coach(coach: CoachContext) -> str:
    if not coach.school_name:
        return "a coach"
    description = f"a coach at {coach.school_name}"
    if coach.school_type:
        description += f" ({_COACH_SCHOOL_TYPES[coach.school_type]})"
    return description


def build_analysis_prompt(player: PlayerEmbeddingInput, coach: CoachContext) -> str:
    games_line = f"The coach's team competes in: {', '.join(coach.games)}." if coach.games else ""
    return (
        f"You are an esports recruiting assistant helping {describe_coach(coach)} evaluate a potential player.\n"
        f"{games_line}\n"
        "\n"
        "Analyze the following player profile and provide a structured assessment:\n"
        "\n"
        f"{build_player_embedding_text(player)}\n"
        "\n"
        "Please provide your analysis in the following JSON format (no markdown, just pure JSON):\n"
        "{\n"
        '  "overview": "A 2-3 sentence overview of the player highlighting their key attributes and '
        'potential fit for collegiate/scholastic esports.",\n'
        '  "pros": ["strength 1", "strength 2", "strength 3"],\n'
        '  "cons": ["area for improvement 1", "area for improvement 2"]\n'
        "}\n"
        "\n"
        "Focus on:\n"
        "- Competitive gaming experience and achievements\n"
        "- Academic standing and potential\n"
        "- Game-specific skills and versatility\n"
        "- Team fit and coachability indicators\n"
        "- Be balanced and constructive in the cons section - frame them as growth areas rather than weaknesses\n"
        "\n"
        "Important: Return ONLY the JSON object, no additional text or formatting."
    )


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if the model added one."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def parse_analysis_response(text: str) -> PlayerAnalysis:
    try:
        parsed = json.loads(strip_code_fence(text))
    except ValueError:
        logger.warning("Unparseable player analysis response: %.200s", text)
        return PlayerAnalysis(overview=FALLBACK_OVERVIEW, generated_at=utc_now())
    if not isinstance(parsed, dict):
        logger.warning("Player analysis response is not a JSON object: %.200s", text)
        return PlayerAnalysis(overview=FALLBACK_OVERVIEW, generated_at=utc_now())

    overview = parsed.get("overview")
    return PlayerAnalysis(
        overview=overview if isinstance(overview, str) and overview.strip() else MISSING_OVERVIEW,
        pros=_string_list(parsed.get("pros")),
        cons=_string_list(parsed.get("cons")),
        generated_at=utc_now(),
    )


class PlayerAnalysisService:
    def __init__(self, players: PlayerProfileService, provider: EmbeddingProvider):
        self.players = players
        self.provider = provider

    async def analyze(self, player_id: UUID, coach: Optional[CoachContext] = None) -> PlayerAnalysis:
        """Generate a fresh analysis; provider failures propagate, bad model output does not."""
        if not self.provider.is_configured():
            raise ProviderUnavailable("AI analysis is not available (GOOGLE_GEMINI_API_KEY missing)")

        player = await self.players.get_embedding_input(player_id)
        if player is None:
            raise PlayerNotFound(player_id)

        prompt = build_analysis_prompt(player, coach or CoachContext())
        text = await self.provider.generate_analysis(prompt)
        logger.info("Generated analysis for player %s (%s chars)", player_id, len(text))
        return parse_analysis_response(text)
