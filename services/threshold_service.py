"""
Threshold Service

Pure logic for deciding whether a stat line clears the configured
thresholds. No I/O - takes an observation and returns a decision.
"""

from core.settings import ThresholdConfig
from schemas.players import PlayerObservation


def meets_thresholds(player: PlayerObservation, thresholds: ThresholdConfig) -> bool:
    """
    Check a player's stat line against the thresholds.

    Every counting stat must reach its minimum and turnovers must not exceed
    the maximum; failing any single comparison disqualifies the player.
    """
    return (
        player.points >= thresholds.points
        and player.rebounds >= thresholds.rebounds
        and player.assists >= thresholds.assists
        and player.three_pointers >= thresholds.three_pointers
        and player.steals >= thresholds.steals
        and player.blocks >= thresholds.blocks
        and player.turnovers <= thresholds.turnovers
    )


def describe_thresholds(thresholds: ThresholdConfig) -> list[str]:
    """Human readable threshold lines, used in logs and the alert email."""
    return [
        f"Points: {thresholds.points:g}+ | Rebounds: {thresholds.rebounds:g}+ | "
        f"Assists: {thresholds.assists:g}+ | 3PM: {thresholds.three_pointers:g}+",
        f"Steals: {thresholds.steals:g}+ | Blocks: {thresholds.blocks:g}+ | "
        f"Turnovers: {thresholds.turnovers:g} max",
    ]
