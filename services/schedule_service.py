"""
Schedule Service

Game-time window gating: decides whether a monitoring cycle should fetch
anything at the current wall-clock time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytz

from core.settings import MonitoringConfig, parse_hhmm


@dataclass(frozen=True)
class GameTimeWindow:
    """
    Daily time-of-day window, both ends inclusive, in a named timezone.

    Windows whose start is after their end (spanning midnight) are not
    wrapped: they match no time of day.
    """

    start: str
    end: str
    timezone: str = "America/New_York"
    enabled: bool = True

    @classmethod
    def from_config(cls, monitoring: MonitoringConfig) -> "GameTimeWindow":
        return cls(
            start=monitoring.game_time_start,
            end=monitoring.game_time_end,
            timezone=monitoring.timezone,
            enabled=monitoring.only_during_game_times,
        )

    @property
    def start_minutes(self) -> int:
        hour, minute = parse_hhmm(self.start)
        return hour * 60 + minute

    @property
    def end_minutes(self) -> int:
        hour, minute = parse_hhmm(self.end)
        return hour * 60 + minute

    @property
    def crosses_midnight(self) -> bool:
        return self.start_minutes > self.end_minutes

    def describe(self) -> str:
        return f"{self.start} - {self.end} {self.timezone}"


def is_within_game_time(window: GameTimeWindow, now: Optional[datetime] = None) -> bool:
    """
    Check whether `now` falls inside the game-time window.

    Args:
        window: The configured window
        now: Current time. Naive datetimes are taken as process local time.
             Defaults to the current time.

    Returns:
        True if gating is disabled or the time of day in the window's
        timezone is within [start, end]
    """
    if not window.enabled:
        return True

    tz = pytz.timezone(window.timezone)
    if now is None:
        now = datetime.now(tz)
    local_now = now.astimezone(tz)

    current_minutes = local_now.hour * 60 + local_now.minute
    return window.start_minutes <= current_minutes <= window.end_minutes
