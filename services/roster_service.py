"""
Roster Service

Loads the set of player ids already owned in the fantasy league and
classifies players as available or rostered.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from core.logging import get_logger
from core.settings import ConfigurationError


log = get_logger("roster_service")

PlayerId = Union[int, str]


class RosterStatus(str, Enum):
    AVAILABLE = "available"
    ROSTERED = "rostered"


def normalize_player_id(player_id: PlayerId) -> str:
    """Ids from the scoreboard are strings, ids from the league API are ints."""
    return str(player_id).strip()


class RosterSet:
    """
    Immutable set of rostered player ids.

    An empty set means no roster information is available, in which case
    every player is classified as available.
    """

    def __init__(self, player_ids: Iterable[PlayerId] = ()):
        self._ids = frozenset(normalize_player_id(pid) for pid in player_ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, player_id: PlayerId) -> bool:
        return normalize_player_id(player_id) in self._ids

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def classify(self, player_id: PlayerId) -> RosterStatus:
        if player_id in self:
            return RosterStatus.ROSTERED
        return RosterStatus.AVAILABLE

    def is_available(self, player_id: PlayerId) -> bool:
        return self.classify(player_id) == RosterStatus.AVAILABLE

    def __repr__(self) -> str:
        return f"<RosterSet(size={len(self._ids)})>"


def load_roster_file(path: Optional[Union[str, Path]]) -> RosterSet:
    """
    Load a roster file containing a flat JSON array of player ids.

    A missing file (or no path configured) is not an error: monitoring runs
    without availability filtering.

    Raises:
        ConfigurationError: If the file exists but is not a JSON array
    """
    if not path:
        log.warning("roster_file_not_configured")
        return RosterSet()

    path = Path(path)
    if not path.exists():
        log.warning(
            "roster_file_not_found",
            path=str(path),
            detail="monitoring will continue but cannot filter by availability",
        )
        return RosterSet()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Roster file is not valid JSON: {path}: {e}")

    if not isinstance(data, list):
        raise ConfigurationError(f"Roster file must contain a JSON array: {path}")

    roster = RosterSet(pid for pid in data if pid is not None and pid != "")
    log.info("roster_loaded", path=str(path), player_count=len(roster))
    return roster
