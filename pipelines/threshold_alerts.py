"""
Threshold Alerts Pipeline

One monitoring cycle: pulls today's NBA box scores from ESPN, finds players
whose live stat line clears the configured thresholds, drops players already
rostered in the fantasy league, and emails one batched alert for players not
yet alerted today.

Safe to call on any interval; the per-day deduplicator prevents repeat
alerts for the same player.
"""

from typing import Optional

from core.settings import Settings, ThresholdConfig
from pipelines.base import BasePipeline, PipelineSkipped
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.extractors import ESPNScoreboardExtractor
from schemas.players import GameSummary, PlayerObservation
from services.alert_dedup_service import AlertDeduplicator
from services.notification_service import NotificationService
from services.roster_service import RosterSet
from services.schedule_service import GameTimeWindow, is_within_game_time
from services.threshold_service import meets_thresholds


class ThresholdAlertsPipeline(BasePipeline):
    """
    Check live box scores and alert on players clearing the thresholds.

    This pipeline:
    1. Checks the game-time window (when gating is enabled)
    2. Fetches today's scoreboard
    3. Fetches each game's box score, one at a time
    4. Evaluates every player against the thresholds and roster set
    5. Sends one notification for all newly qualifying players
    """

    config = PipelineConfig(
        name="threshold_alerts",
        display_name="Threshold Alerts",
        description="Emails alerts for available players clearing stat thresholds",
    )

    def __init__(
        self,
        thresholds: ThresholdConfig,
        window: GameTimeWindow,
        scoreboard: ESPNScoreboardExtractor,
        notifier: NotificationService,
        roster: Optional[RosterSet] = None,
        deduplicator: Optional[AlertDeduplicator] = None,
    ):
        super().__init__()
        self.thresholds = thresholds
        self.window = window
        self.timezone = window.timezone
        self.scoreboard = scoreboard
        self.notifier = notifier
        self.roster = roster if roster is not None else RosterSet()
        self.deduplicator = deduplicator if deduplicator is not None else AlertDeduplicator(timezone=window.timezone)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        notifier: NotificationService,
        roster: Optional[RosterSet] = None,
    ) -> "ThresholdAlertsPipeline":
        return cls(
            thresholds=settings.thresholds,
            window=GameTimeWindow.from_config(settings.monitoring),
            scoreboard=ESPNScoreboardExtractor.from_settings(
                settings.http,
                request_delay_seconds=settings.monitoring.request_delay_seconds,
            ),
            notifier=notifier,
            roster=roster,
        )

    def execute(self, ctx: PipelineContext) -> None:
        """Execute one monitoring cycle."""
        now = ctx.now

        # Step 1: Game-time gate
        if not is_within_game_time(self.window, now):
            raise PipelineSkipped(f"Outside game time window ({self.window.describe()})")

        pruned = self.deduplicator.prune(now)
        if pruned:
            ctx.log.debug("alert_history_pruned", removed=pruned)

        # Step 2: Today's games
        games = self._fetch_games(ctx)
        if not games:
            ctx.log.info("no_games_today")
            return

        ctx.log.info(
            "games_found",
            game_count=len(games),
            games=[f"{g.short_name} - {g.status}" for g in games],
        )

        # Step 3-4: Box scores, one game at a time
        alerts: list[PlayerObservation] = []
        for game in games:
            alerts.extend(self._process_game(ctx, game))

        # Step 5: One notification for the whole batch
        if not alerts:
            ctx.log.info("no_new_alerts")
            return

        ctx.increment_records(len(alerts))
        ctx.log.info(
            "new_alerts",
            alert_count=len(alerts),
            players=[
                f"{'available' if p.is_available else 'rostered'} {p.summary()}"
                for p in alerts
            ],
        )

        result = self.notifier.send_player_alert(alerts)
        ctx.notified = result.success
        if not result.success:
            # Keys stay recorded: these players will not be re-sent today
            ctx.log.error(
                "alert_delivery_failed",
                alert_count=len(alerts),
                error=result.error,
            )

    def _fetch_games(self, ctx: PipelineContext) -> list[GameSummary]:
        try:
            return self.scoreboard.get_today_games()
        except Exception as e:
            ctx.log.warning(
                "schedule_fetch_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    def _process_game(self, ctx: PipelineContext, game: GameSummary) -> list[PlayerObservation]:
        """Fetch one box score and return the players to alert on."""
        try:
            players = self.scoreboard.get_box_score(game)
        except Exception as e:
            ctx.games_failed += 1
            ctx.log.warning(
                "game_fetch_failed",
                game_id=game.id,
                game=game.short_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        ctx.games_checked += 1
        ctx.log.debug("game_analyzed", game_id=game.id, game=game.short_name, player_count=len(players))
        return self.select_alerts(players, ctx.now)

    def select_alerts(self, players: list[PlayerObservation], now) -> list[PlayerObservation]:
        """
        Filter observations down to the players that should be alerted now.

        A player is selected when they clear the thresholds, are available
        (or no roster is loaded), and have not been alerted yet today.
        """
        selected = []
        for player in players:
            if not meets_thresholds(player, self.thresholds):
                continue

            player.is_available = self.roster.is_available(player.player_id)
            if not (player.is_available or self.roster.is_empty):
                continue

            if self.deduplicator.should_alert(player.player_id, now):
                selected.append(player)

        return selected
