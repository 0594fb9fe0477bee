"""
Roster Transformers

Pure helpers for ESPN fantasy league roster payloads.
"""

from typing import Optional


def get_roster_entries(data: Optional[dict], team_id) -> list[dict]:
    """Roster entries for one fantasy team from the mRoster view."""
    for roster_team in (data or {}).get("rosters") or []:
        if roster_team.get("id") == team_id:
            return (roster_team.get("roster") or {}).get("entries") or []
    return []


def team_display_name(team: dict, index: int) -> str:
    name = team.get("name") or f"{team.get('location', '')} {team.get('nickname', '')}".strip()
    return name or f"Team {index + 1}"


def extract_rostered_player_ids(data: Optional[dict]) -> list:
    """
    Unique player ids across every fantasy team's roster.

    Order follows first appearance in the payload.
    """
    seen = set()
    player_ids = []

    for roster_team in (data or {}).get("rosters") or []:
        for entry in (roster_team.get("roster") or {}).get("entries") or []:
            player_id = entry.get("playerId")
            if player_id and player_id not in seen:
                seen.add(player_id)
                player_ids.append(player_id)

    return player_ids
