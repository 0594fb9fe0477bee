"""
Data Transformers

Pure functions for transforming extracted data.
"""

from pipelines.transformers.box_score import (
    safe_int,
    made_from_split,
    parse_athlete,
    parse_box_score,
)
from pipelines.transformers.rosters import (
    extract_rostered_player_ids,
    get_roster_entries,
    team_display_name,
)

__all__ = [
    "safe_int",
    "made_from_split",
    "parse_athlete",
    "parse_box_score",
    "extract_rostered_player_ids",
    "get_roster_entries",
    "team_display_name",
]
