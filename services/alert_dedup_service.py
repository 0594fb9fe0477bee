"""
Alert Deduplication Service

Remembers which players have already been alerted on a given calendar day.
State lives in memory only, so a restart re-alerts players already seen
that day.
"""

from datetime import datetime
from typing import Optional, Union

import pytz

from services.roster_service import PlayerId, normalize_player_id


# (player id, YYYY-MM-DD) -> time of the first alert
AlertedKey = tuple[str, str]


class AlertDeduplicator:
    """
    Per-day alert filter.

    The state mapping is injectable so the owner can share, inspect or
    persist it.
    """

    def __init__(
        self,
        timezone: Optional[Union[str, pytz.BaseTzInfo]] = None,
        state: Optional[dict[AlertedKey, datetime]] = None,
    ):
        if isinstance(timezone, str):
            timezone = pytz.timezone(timezone)
        self.timezone = timezone
        self.state: dict[AlertedKey, datetime] = state if state is not None else {}

    def alert_date(self, now: datetime) -> str:
        """Calendar date of `now` in the configured timezone (local if unset)."""
        if self.timezone is not None:
            now = now.astimezone(self.timezone)
        elif now.tzinfo is not None:
            now = now.astimezone()
        return now.date().isoformat()

    def key_for(self, player_id: PlayerId, now: datetime) -> AlertedKey:
        return (normalize_player_id(player_id), self.alert_date(now))

    def has_alerted(self, player_id: PlayerId, now: datetime) -> bool:
        return self.key_for(player_id, now) in self.state

    def should_alert(self, player_id: PlayerId, now: datetime) -> bool:
        """
        Record an alert for (player, today) and report whether it is new.

        Returns False if the player was already alerted on the same calendar
        day; otherwise records the key and returns True.
        """
        key = self.key_for(player_id, now)
        if key in self.state:
            return False
        self.state[key] = now
        return True

    def prune(self, now: datetime) -> int:
        """Drop keys from previous days. Returns the number removed."""
        today = self.alert_date(now)
        stale = [key for key in self.state if key[1] != today]
        for key in stale:
            del self.state[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self.state)
