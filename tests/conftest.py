from datetime import datetime
from unittest.mock import MagicMock

import pytest
import pytz

from core.settings import ThresholdConfig
from schemas.players import GameSummary, PlayerObservation
from services.notification_service import NotificationResult


EASTERN = pytz.timezone("America/New_York")


def eastern(year=2025, month=1, day=15, hour=20, minute=0) -> datetime:
    return EASTERN.localize(datetime(year, month, day, hour, minute))


def make_game(game_id="401585001", short_name="BOS @ NYK", status="In Progress") -> GameSummary:
    return GameSummary(
        id=game_id,
        name="Boston Celtics at New York Knicks",
        short_name=short_name,
        status=status,
        home_team="NYK",
        away_team="BOS",
    )


def make_player(player_id="3917376", name="Jalen Brunson", **stats) -> PlayerObservation:
    return PlayerObservation(
        player_id=player_id,
        name=name,
        team="New York Knicks",
        game_id=stats.pop("game_id", "401585001"),
        game="BOS @ NYK",
        minutes=stats.pop("minutes", "34"),
        **stats,
    )


def athlete_entry(player_id, name, stats):
    return {"athlete": {"id": player_id, "displayName": name}, "stats": stats}


def stat_line(minutes="34", threes="3-7", reb="5", ast="6", stl="1", blk="0", to="2", pts="25"):
    """An ESPN athlete stats array in site API order."""
    return [minutes, "9-18", threes, "4-4", "1", "4", reb, ast, stl, blk, to, "3", "+7", pts]


def summary_payload(*teams):
    """teams: (team display name, [athlete entries]) pairs."""
    return {
        "boxscore": {
            "players": [
                {"team": {"displayName": name}, "statistics": [{"athletes": athletes}]}
                for name, athletes in teams
            ]
        }
    }


@pytest.fixture
def points_thresholds() -> ThresholdConfig:
    return ThresholdConfig(points=20, rebounds=0, assists=0, three_pointers=0, steals=0, blocks=0, turnovers=99)


@pytest.fixture
def strict_thresholds() -> ThresholdConfig:
    return ThresholdConfig(points=20, rebounds=5, assists=5, three_pointers=2, steals=1, blocks=1, turnovers=3)


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.send_player_alert.return_value = NotificationResult(success=True, message_id="msg-1")
    return mock


@pytest.fixture
def scoreboard():
    mock = MagicMock()
    mock.get_today_games.return_value = [make_game()]
    mock.get_box_score.return_value = []
    return mock


@pytest.fixture
def config_data() -> dict:
    return {
        "thresholds": {
            "points": 20,
            "rebounds": 0,
            "assists": 0,
            "threePointers": 0,
            "steals": 0,
            "blocks": 0,
            "turnovers": 99,
        },
        "monitoring": {
            "checkIntervalMinutes": 5,
            "onlyDuringGameTimes": True,
            "gameTimeStart": "18:00",
            "gameTimeEnd": "23:59",
            "timezone": "America/New_York",
        },
        "email": {
            "from": {"user": "monitor@example.com", "appPassword": "app-password"},
            "to": "me@example.com",
            "dryRun": True,
        },
        "espn": {"leagueId": 1497752245, "swid": "{ABC-123}", "espnS2": "s2cookie"},
        "apiToken": "test-token",
    }
