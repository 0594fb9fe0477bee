"""
Fantasy Basketball Threshold Monitor

Polls the ESPN scoreboard during game time and emails an alert when an
unrostered player's live stat line clears the configured thresholds.

Usage:
    hoops-monitor --config config.json
    hoops-monitor --once

Environment Variables:
    MONITOR_CONFIG_PATH - Config file used when --config is not given
    MONITOR_EMAIL__FROM__APP_PASSWORD - SMTP app password (keeps it out of the file)
    MONITOR_LOG_LEVEL / MONITOR_LOG_FORMAT - Logging overrides
"""

import argparse
import asyncio
import sys
from typing import Optional

from core.logging import get_logger, setup_logging
from core.scheduler import MonitorScheduler
from core.settings import ConfigurationError, Settings, load_settings
from pipelines import build_monitor_pipeline
from schemas.common import ApiStatus
from services.notification_service import NotificationService, NotifierSetupError
from services.roster_service import load_roster_file
from services.schedule_service import GameTimeWindow
from services.threshold_service import describe_thresholds


log = get_logger("monitor")


def build_scheduler(settings: Settings) -> MonitorScheduler:
    """
    Wire the notifier, roster and pipeline into a scheduler.

    Raises:
        NotifierSetupError: If no email transport can be configured
        ConfigurationError: If the roster file exists but is invalid
    """
    notifier = NotificationService.from_settings(settings)
    roster = load_roster_file(settings.roster_file)
    pipeline = build_monitor_pipeline(settings, notifier=notifier, roster=roster)
    return MonitorScheduler(pipeline, settings.monitoring.check_interval_minutes)


def log_configuration(settings: Settings, scheduler: MonitorScheduler) -> None:
    """Log the startup summary."""
    window = GameTimeWindow.from_config(settings.monitoring)
    roster = getattr(scheduler.pipeline, "roster", None)

    log.info(
        "monitor_configured",
        thresholds=describe_thresholds(settings.thresholds),
        check_interval_minutes=settings.monitoring.check_interval_minutes,
        game_window=window.describe() if window.enabled else "disabled",
        roster_size=len(roster) if roster is not None else 0,
        recipients=settings.email.to,
    )

    if roster is not None and roster.is_empty:
        log.warning("roster_empty", detail="every qualifying player will be reported as available")

    if window.enabled and window.crosses_midnight:
        log.warning(
            "game_window_crosses_midnight",
            window=window.describe(),
            detail="windows are not wrapped past midnight; no cycle will fetch",
        )


async def run_once(scheduler: MonitorScheduler) -> int:
    result = await scheduler.trigger()
    if result is None or result.status == ApiStatus.ERROR.value:
        return 1
    return 0


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hoops-monitor",
        description="Email alerts for available NBA players clearing stat thresholds",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the JSON config (default: $MONITOR_CONFIG_PATH or ./config.json)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single monitoring cycle and exit",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        setup_logging(json_format=False)
        log.error("configuration_invalid", error=str(e))
        return 1

    setup_logging(
        log_level=settings.log_level,
        json_format=settings.log_format == "json",
        service_name=settings.service_name,
    )

    try:
        scheduler = build_scheduler(settings)
    except (ConfigurationError, NotifierSetupError) as e:
        log.error("monitor_setup_failed", error=str(e), error_type=type(e).__name__)
        return 1

    log_configuration(settings, scheduler)

    try:
        if args.once:
            return asyncio.run(run_once(scheduler))
        asyncio.run(scheduler.run_forever())
    except KeyboardInterrupt:
        print("\n👋 Stopping monitor... Goodbye!")

    return 0


if __name__ == "__main__":
    sys.exit(main())
