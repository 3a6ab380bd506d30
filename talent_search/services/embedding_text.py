"""Build the natural-language description of a player that gets embedded."""

from typing import List

from talent_search.schemas.talent_search import GameProfileSummary, PlayerEmbeddingInput


CLAUSE_DELIMITER = ". "

SCHOOL_TYPE_LABELS = {
    "HIGH_SCHOOL": "High School",
    "COLLEGE": "College",
    "UNIVERSITY": "University",
}


def _present(value) -> bool:
    return value is not None and value != ""


def format_gpa(gpa: float) -> str:
    """3.5 -> '3.5', 4.0 -> '4'."""
    return f"{gpa:g}"


def build_game_profile_text(profile: GameProfileSummary) -> str:
    details: List[str] = [profile.game]
    if _present(profile.rank):
        details.append(f"Rank: {profile.rank}")
    if _present(profile.role):
        details.append(f"Role: {profile.role}")
    if profile.agents:
        details.append(f"Plays: {', '.join(profile.agents)}")
    if _present(profile.play_style):
        details.append(f"Style: {profile.play_style}")
    return ", ".join(details)


def build_player_embedding_text(player: PlayerEmbeddingInput) -> str:
    """
    Deterministic, clause-ordered description of a player.

    Absent fields are omitted rather than rendered as placeholders, so a
    player with only a name still yields "Player: <first> <last>".
    Free text such as the bio is included verbatim.
    """
    parts: List[str] = [f"Player: {player.first_name} {player.last_name}"]

    if _present(player.username):
        parts.append(f"Username: {player.username}")
    if _present(player.location):
        parts.append(f"Location: {player.location}")
    if _present(player.school):
        parts.append(f"School: {player.school}")
    if player.school_type:
        parts.append(f"School Type: {SCHOOL_TYPE_LABELS[player.school_type]}")
    if _present(player.class_year):
        parts.append(f"Class Year: {player.class_year}")
    if player.gpa is not None:
        parts.append(f"GPA: {format_gpa(player.gpa)}")
    if _present(player.intended_major):
        parts.append(f"Intended Major: {player.intended_major}")
    if _present(player.bio):
        parts.append(f"Bio: {player.bio}")
    if _present(player.main_game):
        parts.append(f"Main Game: {player.main_game}")
    if player.game_profiles:
        games = "; ".join(build_game_profile_text(profile) for profile in player.game_profiles)
        parts.append(f"Games: {games}")

    return CLAUSE_DELIMITER.join(parts)
