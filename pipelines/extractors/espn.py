"""
ESPN Extractors

Fetches data from the public ESPN NBA site API (scoreboard, box scores)
and the ESPN Fantasy Basketball league API (team rosters).
"""

from typing import Optional, Union

from core.resilience import (
    FETCH_ERRORS,
    ClientError,
    RequestPacer,
    ResilientHTTPClient,
    espn_fantasy_circuit,
    espn_site_circuit,
)
from core.settings import EspnConfig, HttpConfig
from pipelines.extractors.base import BaseExtractor
from pipelines.transformers import parse_box_score
from schemas.players import GameSummary, PlayerObservation


ESPN_SCOREBOARD_ENDPOINT = "https://site.api.espn.com/apis/site/v2/sports/basketball/nba/scoreboard"
ESPN_SUMMARY_ENDPOINT = "https://site.api.espn.com/apis/site/v2/sports/basketball/nba/summary"
ESPN_FANTASY_ENDPOINT = (
    "https://lm-api-reads.fantasy.espn.com/apis/v3/games/fba/seasons/{}/segments/0/leagues/{}"
)


def parse_scoreboard(data: dict) -> list[GameSummary]:
    """Convert the scoreboard "events" list into GameSummary records."""
    games = []
    for event in (data or {}).get("events") or []:
        competitions = event.get("competitions") or [{}]
        competitors = competitions[0].get("competitors") or []
        home = next((c for c in competitors if c.get("homeAway") == "home"), {})
        away = next((c for c in competitors if c.get("homeAway") == "away"), {})

        games.append(GameSummary(
            id=event["id"],
            name=event.get("name", ""),
            short_name=event.get("shortName", ""),
            status=((event.get("status") or {}).get("type") or {}).get("description") or "Scheduled",
            home_team=(home.get("team") or {}).get("abbreviation", ""),
            away_team=(away.get("team") or {}).get("abbreviation", ""),
        ))
    return games


class ESPNScoreboardExtractor(BaseExtractor):
    """
    Extractor for the ESPN NBA site API.

    Provides methods to fetch:
    - Today's scoreboard (games)
    - Per-game box scores

    Monitoring cycles never retry a request; the next cycle is the retry.
    Request pacing comes from the injected client's RequestPacer.
    """

    def __init__(self, http_client: Optional[ResilientHTTPClient] = None):
        super().__init__("espn_scoreboard", http_client or ResilientHTTPClient(max_retries=1))

    @classmethod
    def from_settings(cls, http: HttpConfig, request_delay_seconds: float) -> "ESPNScoreboardExtractor":
        return cls(ResilientHTTPClient(
            max_retries=1,
            timeout=http.timeout,
            circuit_breaker=espn_site_circuit,
            pacer=RequestPacer(min_interval=request_delay_seconds),
        ))

    def get_today_games(self) -> list[GameSummary]:
        """
        Fetch today's NBA games from the scoreboard.

        Raises:
            NetworkError, RateLimitError, ServerError, ClientError on failure
        """
        self.log.debug("request_start", endpoint=ESPN_SCOREBOARD_ENDPOINT)
        data = self.http.get_json(ESPN_SCOREBOARD_ENDPOINT)
        games = parse_scoreboard(data)
        self.log.debug("request_complete", game_count=len(games))
        return games

    def get_game_summary(self, game_id: str) -> dict:
        """Fetch the raw summary (box score) payload for one game."""
        self.log.debug("request_start", endpoint=ESPN_SUMMARY_ENDPOINT, game_id=game_id)
        return self.http.get_json(ESPN_SUMMARY_ENDPOINT, params={"event": game_id})

    def get_box_score(self, game: GameSummary) -> list[PlayerObservation]:
        """
        Fetch one game's box score as player observations.

        Returns an empty list for games whose box score is not published yet.
        """
        summary = self.get_game_summary(game.id)
        players = parse_box_score(summary, game)
        self.log.debug("box_score_parsed", game_id=game.id, player_count=len(players))
        return players


class ESPNFantasyExtractor(BaseExtractor):
    """
    Extractor for the ESPN Fantasy Basketball league API.

    Private leagues (and completed seasons) need the SWID and espn_s2
    cookies from a logged-in browser session.
    """

    def __init__(
        self,
        league_id: Union[int, str],
        swid: Optional[str] = None,
        espn_s2: Optional[str] = None,
        http_client: Optional[ResilientHTTPClient] = None,
    ):
        super().__init__("espn_fantasy", http_client or ResilientHTTPClient(circuit_breaker=espn_fantasy_circuit))
        self.league_id = league_id
        self.swid = swid
        self.espn_s2 = espn_s2

    @classmethod
    def from_config(cls, espn: EspnConfig, http: Optional[HttpConfig] = None) -> "ESPNFantasyExtractor":
        http = http or HttpConfig()
        if espn.league_id is None:
            raise ValueError("espn.leagueId is required to query the fantasy API")

        return cls(
            league_id=espn.league_id,
            swid=espn.swid.get_secret_value() if espn.swid else None,
            espn_s2=espn.espn_s2.get_secret_value() if espn.espn_s2 else None,
            http_client=ResilientHTTPClient(
                max_retries=http.retry_max_attempts,
                base_delay=http.retry_base_delay,
                max_delay=http.retry_max_delay,
                timeout=http.timeout,
                circuit_breaker=espn_fantasy_circuit,
            ),
        )

    @property
    def cookies(self) -> dict[str, str]:
        cookies = {}
        if self.swid:
            cookies["SWID"] = self.swid
        if self.espn_s2:
            cookies["espn_s2"] = self.espn_s2
        return cookies

    def get_league_view(self, season: int, view: str) -> dict:
        """
        Fetch one view (e.g. "mTeam", "mRoster") of the league for a season.

        Raises:
            NetworkError, RateLimitError, ServerError, ClientError on failure
        """
        endpoint = ESPN_FANTASY_ENDPOINT.format(season, self.league_id)
        self.log.debug("request_start", endpoint=endpoint, view=view)
        return self.http.get_json(endpoint, params={"view": view}, cookies=self.cookies)

    def get_season_rosters(self, season: int) -> Optional[dict]:
        """
        Fetch teams and rosters for a season.

        Returns:
            Dict with teams, rosters, settings and status, or None when
            either view could not be fetched
        """
        try:
            teams_data = self.get_league_view(season, "mTeam")
        except FETCH_ERRORS as e:
            self._log_fetch_error("mTeam", season, e)
            return None

        if not teams_data or not teams_data.get("teams"):
            self.log.warning("teams_missing", season=season)
            return None

        try:
            roster_data = self.get_league_view(season, "mRoster")
        except FETCH_ERRORS as e:
            self._log_fetch_error("mRoster", season, e)
            return None

        if not roster_data:
            self.log.warning("rosters_missing", season=season)
            return None

        return {
            "teams": teams_data.get("teams"),
            "rosters": roster_data.get("teams"),
            "settings": teams_data.get("settings"),
            "status": teams_data.get("status"),
        }

    def _log_fetch_error(self, view: str, season: int, error: Exception) -> None:
        status_code = getattr(error, "status_code", None)
        self.log.error(
            "league_view_fetch_failed",
            view=view,
            season=season,
            error=str(error),
            error_type=type(error).__name__,
            status_code=status_code,
            auth_hint="check SWID/espn_s2 cookies" if isinstance(error, ClientError) else None,
        )


__all__ = [
    "ESPN_SCOREBOARD_ENDPOINT",
    "ESPN_SUMMARY_ENDPOINT",
    "ESPN_FANTASY_ENDPOINT",
    "parse_scoreboard",
    "ESPNScoreboardExtractor",
    "ESPNFantasyExtractor",
]
