"""
Box Score Transformers

Converts ESPN game summary payloads into PlayerObservation records.
Malformed or missing stat fields become 0; parsing never raises.
"""

import re
from typing import Any, Optional

from schemas.players import GameSummary, PlayerObservation


# Positions in an ESPN athlete "stats" array
STAT_INDEX = {
    "minutes": 0,
    "three_pointers": 2,  # "made-attempted"
    "rebounds": 6,
    "assists": 7,
    "steals": 8,
    "blocks": 9,
    "turnovers": 10,
    "points": 13,
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def safe_int(value: Any) -> int:
    """
    Parse the leading integer of a value, falling back to 0.

    Examples:
        >>> safe_int("12")
        12
        >>> safe_int("7abc")
        7
        >>> safe_int("--")
        0
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else 0

    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def made_from_split(value: Any) -> int:
    """Made count from a "made-attempted" field, e.g. "3-7" -> 3."""
    if not value:
        return 0
    return safe_int(str(value).split("-")[0])


def _stat(stats: list, name: str) -> Any:
    index = STAT_INDEX[name]
    return stats[index] if index < len(stats) else None


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def parse_athlete(
    entry: dict,
    team_name: str,
    game: GameSummary,
) -> Optional[PlayerObservation]:
    """
    Build an observation from one athlete entry of a team's box score.

    Returns None when the entry is not an object or has no athlete id to
    key alerts on.
    """
    entry = _as_dict(entry)
    athlete = _as_dict(entry.get("athlete"))
    player_id = athlete.get("id")
    if player_id is None or player_id == "":
        return None

    stats = _as_list(entry.get("stats"))

    return PlayerObservation(
        player_id=player_id,
        name=athlete.get("displayName") or "Unknown",
        team=team_name,
        game_id=game.id,
        game=game.short_name or game.name,
        minutes=str(_stat(stats, "minutes") or "0"),
        points=safe_int(_stat(stats, "points")),
        rebounds=safe_int(_stat(stats, "rebounds")),
        assists=safe_int(_stat(stats, "assists")),
        three_pointers=made_from_split(_stat(stats, "three_pointers")),
        steals=safe_int(_stat(stats, "steals")),
        blocks=safe_int(_stat(stats, "blocks")),
        turnovers=safe_int(_stat(stats, "turnovers")),
    )


def parse_box_score(summary: dict, game: GameSummary) -> list[PlayerObservation]:
    """
    Extract every athlete's stat line from an ESPN game summary.

    Args:
        summary: JSON body of the ESPN summary endpoint
        game: The scoreboard entry the summary belongs to

    Returns:
        Observations for all athletes in both teams' first stat group.
        Games without a box score yet return an empty list.
    """
    box_score = _as_dict(_as_dict(summary).get("boxscore"))
    teams = _as_list(box_score.get("players"))

    observations: list[PlayerObservation] = []
    for team in teams:
        team = _as_dict(team)
        team_name = _as_dict(team.get("team")).get("displayName") or ""
        statistics = _as_list(team.get("statistics"))
        if not statistics:
            continue

        for entry in _as_list(_as_dict(statistics[0]).get("athletes")):
            observation = parse_athlete(entry, team_name, game)
            if observation is not None:
                observations.append(observation)

    return observations
