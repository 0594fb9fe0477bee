"""
Player Schemas

Models for games and per-player box score observations pulled from the
ESPN site API.
"""

from typing import Optional

from pydantic import BaseModel, field_validator


ESPN_BOX_SCORE_URL = "https://www.espn.com/nba/boxscore/_/gameId/{}"


class GameSummary(BaseModel):
    """One game on today's scoreboard."""

    id: str
    name: str = ""
    short_name: str = ""
    status: str = "Scheduled"
    home_team: str = ""
    away_team: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v) -> str:
        return str(v)


class PlayerObservation(BaseModel):
    """
    One athlete's stat line in one game, sampled at one poll.

    Counting stats default to 0; is_available stays None until the player
    has been classified against the roster set.
    """

    player_id: str
    name: str
    team: str
    game_id: str
    game: str
    minutes: str = "0"

    points: int = 0
    rebounds: int = 0
    assists: int = 0
    three_pointers: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0

    is_available: Optional[bool] = None

    @field_validator("player_id", "game_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v) -> str:
        """ESPN ids arrive as strings or ints depending on the feed."""
        return str(v)

    @property
    def box_score_url(self) -> str:
        return ESPN_BOX_SCORE_URL.format(self.game_id)

    def summary(self) -> str:
        return f"{self.name}: {self.points}pts, {self.rebounds}reb, {self.assists}ast"
