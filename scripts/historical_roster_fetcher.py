"""
Historical Roster Fetcher

Diagnostic for the ESPN fantasy league API. Fetches team rosters for the
last completed season and the current season, saves whatever comes back,
and explains whether roster data can be retrieved yet.

The saved {season}_rostered_player_ids.json file is in the format the
monitor's rosterFile setting expects.

This script:
1. Fetches the mTeam and mRoster views for the historical season
2. Analyzes and saves the rosters (full snapshot + player id list)
3. Pauses, then does the same for the current season
4. Prints a comparison and a diagnosis

Usage:
    python -m scripts.historical_roster_fetcher --config config.json
    python -m scripts.historical_roster_fetcher --league-id 12345 --swid "{...}" --espn-s2 "..."
"""

import argparse
import json
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import SecretStr

from core.logging import setup_logging
from core.resilience import RequestPacer
from core.settings import ConfigurationError, EspnConfig, HttpConfig, load_espn_config
from pipelines.extractors import ESPNFantasyExtractor
from pipelines.transformers import (
    extract_rostered_player_ids,
    get_roster_entries,
    team_display_name,
)


SEASON_PAUSE_SECONDS = 2.0
SAMPLE_PLAYER_COUNT = 3


@dataclass
class RosterAnalysis:
    season: int
    has_rosters: bool = False
    player_count: int = 0
    teams_with_rosters: int = 0
    team_count: int = 0


class Diagnosis(str, Enum):
    API_WORKS_CURRENT_NOT_READY = "api_works_current_not_ready"
    CANNOT_RETRIEVE = "cannot_retrieve"
    EVERYTHING_WORKS = "everything_works"
    UNEXPECTED = "unexpected"


def diagnose(historical: RosterAnalysis, current: RosterAnalysis) -> Diagnosis:
    if historical.has_rosters and not current.has_rosters:
        return Diagnosis.API_WORKS_CURRENT_NOT_READY
    if not historical.has_rosters and not current.has_rosters:
        return Diagnosis.CANNOT_RETRIEVE
    if historical.has_rosters and current.has_rosters:
        return Diagnosis.EVERYTHING_WORKS
    return Diagnosis.UNEXPECTED


def analyze_roster_data(data: Optional[dict], season: int) -> RosterAnalysis:
    """Print a per-team breakdown of the season's rosters and summarize it."""
    print(f"\n{'=' * 60}")
    print(f"ANALYZING {season} SEASON DATA")
    print("=" * 60)

    analysis = RosterAnalysis(season=season)
    if not data:
        print("❌ No data received")
        return analysis

    teams = data.get("teams") or []
    analysis.team_count = len(teams)

    print("\n📋 Basic Info:")
    print(f"  League Name: {(data.get('settings') or {}).get('name') or 'N/A'}")
    print(f"  Number of Teams: {len(teams)}")

    status = data.get("status")
    if status:
        print(f"  Is Active: {status.get('isActive')}")
        print(f"  Current Matchup Period: {status.get('currentMatchupPeriod')}")
        print(f"  Latest Scoring Period: {status.get('latestScoringPeriod')}")

    if teams:
        print("\n📊 Team Roster Analysis:")
        print("-" * 60)

    for idx, team in enumerate(teams):
        name = team_display_name(team, idx)
        abbrev = team.get("abbrev") or "N/A"
        entries = get_roster_entries(data, team.get("id"))

        if not entries:
            print(f"  {idx + 1:>2}. {abbrev:<6} {name:<25} ❌ No roster data")
            continue

        analysis.player_count += len(entries)
        analysis.teams_with_rosters += 1
        print(f"  {idx + 1:>2}. {abbrev:<6} {name:<25} {len(entries)} players")

        if idx == 0:
            print("\n     Sample Players:")
            for entry in entries[:SAMPLE_PLAYER_COUNT]:
                player = (entry.get("playerPoolEntry") or {}).get("player")
                if player:
                    full_name = f"{player.get('firstName', '')} {player.get('lastName', '')}".strip()
                    pro_team = player.get("proTeamAbbreviation") or "FA"
                    print(f"     - {full_name} ({pro_team}) - ESPN ID: {entry.get('playerId')}")
            if len(entries) > SAMPLE_PLAYER_COUNT:
                print(f"     ... and {len(entries) - SAMPLE_PLAYER_COUNT} more")

    analysis.has_rosters = analysis.teams_with_rosters > 0

    print("\n📈 Summary:")
    print(f"  Teams with rosters: {analysis.teams_with_rosters}/{analysis.team_count}")
    print(f"  Total players: {analysis.player_count}")
    return analysis


def save_season_files(data: dict, season: int, output_dir: Path) -> list:
    """
    Write the full roster snapshot and the rostered player id list.

    Returns:
        The unique rostered player ids that were written
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    rosters_path = output_dir / f"{season}_season_rosters.json"
    with open(rosters_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    print(f"\n✅ {season} roster data saved to: {rosters_path}")

    player_ids = extract_rostered_player_ids(data)
    ids_path = output_dir / f"{season}_rostered_player_ids.json"
    with open(ids_path, "w", encoding="utf-8") as f:
        json.dump(player_ids, f, indent=2)
    print(f"✅ Player IDs saved to: {ids_path}")
    print(f"   Total unique players: {len(player_ids)}")

    return player_ids


def fetch_and_analyze(
    extractor: ESPNFantasyExtractor,
    season: int,
    label: str,
    output_dir: Path,
) -> RosterAnalysis:
    print("\n\n" + "█" * 60)
    print(f"{label} ({season})")
    print("█" * 60)
    print(f"\nFetching season {season} data...")

    data = extractor.get_season_rosters(season)
    if data is None:
        print("❌ Could not fetch roster data")

    analysis = analyze_roster_data(data, season)
    if analysis.has_rosters:
        save_season_files(data, season, output_dir)
    return analysis


def print_comparison(historical: RosterAnalysis, current: RosterAnalysis) -> None:
    print("\n\n" + "═" * 60)
    print("COMPARISON RESULTS")
    print("═" * 60)

    for label, analysis in (("Historical", historical), ("Current", current)):
        print(f"\n{analysis.season} Season ({label}):")
        print(f"  ✅ Has Rosters: {'YES' if analysis.has_rosters else 'NO'}")
        print(f"  📊 Total Players: {analysis.player_count}")
        print(f"  👥 Teams with Data: {analysis.teams_with_rosters}")


def print_diagnosis(diagnosis: Diagnosis, historical: RosterAnalysis, current: RosterAnalysis) -> None:
    print("\n\n" + "═" * 60)
    print("DIAGNOSIS & RECOMMENDATIONS")
    print("═" * 60)

    if diagnosis == Diagnosis.API_WORKS_CURRENT_NOT_READY:
        print("\n🎯 DIAGNOSIS: API Works, But Current Season Not Ready")
        print("\n✅ The API and authentication work; historical rosters retrieved.")
        print(f"⚠️  {current.season} season rosters are not populated yet (ESPN sync timing).")
        print("\n💡 Solutions:")
        print(f"   1. Use {historical.season}_rostered_player_ids.json as the monitor's rosterFile for now")
        print(f"   2. Check {current.season} again in a few hours/days")
    elif diagnosis == Diagnosis.CANNOT_RETRIEVE:
        print("\n❌ DIAGNOSIS: Cannot Retrieve Rosters")
        print("\n⚠️  Even the completed season has no roster data; authentication may be failing.")
        print("\n💡 Solutions:")
        print("   1. Verify the cookies are fresh and correct")
        print("   2. Check the cookie format (SWID needs curly braces)")
        print("   3. Log into ESPN again and copy new cookies")
    elif diagnosis == Diagnosis.EVERYTHING_WORKS:
        print("\n✅ DIAGNOSIS: Everything Works!")
        print("\n🎉 Both seasons have roster data.")
        print(f"   Point rosterFile at {current.season}_rostered_player_ids.json")
    else:
        print("\n🤔 DIAGNOSIS: Unexpected Results")
        print(f"\n   {current.season} has rosters but {historical.season} doesn't - this is unusual")
        print("   Review the JSON files to understand the data structure")


def compare_seasons(
    extractor: ESPNFantasyExtractor,
    historical_season: int,
    current_season: int,
    output_dir: Path,
    pacer: Optional[RequestPacer] = None,
) -> Diagnosis:
    """Fetch, analyze and save both seasons, then print the diagnosis."""
    pacer = pacer or RequestPacer(min_interval=SEASON_PAUSE_SECONDS)

    print("HISTORICAL ROSTER FETCHER - SEASON COMPARISON\n")
    print(f"League ID: {extractor.league_id}")
    print(f"Historical Season: {historical_season} (completed)")
    print(f"Current Season: {current_season}")
    print(f"Authentication: {'✅ Configured' if extractor.cookies else '⚠️  No cookies (public leagues only)'}")

    pacer.wait()
    historical = fetch_and_analyze(extractor, historical_season, "TEST 1: HISTORICAL SEASON", output_dir)

    # Pause between seasons to stay clear of rate limits
    pacer.wait()
    current = fetch_and_analyze(extractor, current_season, "TEST 2: CURRENT SEASON", output_dir)

    print_comparison(historical, current)
    diagnosis = diagnose(historical, current)
    print_diagnosis(diagnosis, historical, current)

    generated = [a.season for a in (historical, current) if a.has_rosters]
    if generated:
        print("\n\n📁 Generated Files:")
        for season in generated:
            print(f"   ✅ {output_dir / f'{season}_season_rosters.json'} - Full roster data")
            print(f"   ✅ {output_dir / f'{season}_rostered_player_ids.json'} - Just player IDs")

    return diagnosis


def resolve_espn_config(args: argparse.Namespace) -> EspnConfig:
    """
    Read the espn section of the config file, then apply CLI overrides.

    A missing default config file is fine when the flags supply the league.
    """
    try:
        espn = load_espn_config(args.config)
    except ConfigurationError:
        if args.config:
            raise
        espn = EspnConfig()

    overrides = {}
    if args.league_id:
        overrides["league_id"] = args.league_id
    if args.swid:
        overrides["swid"] = SecretStr(args.swid)
    if args.espn_s2:
        overrides["espn_s2"] = SecretStr(args.espn_s2)
    if args.historical_season:
        overrides["historical_season"] = args.historical_season
    if args.current_season:
        overrides["current_season"] = args.current_season

    return espn.model_copy(update=overrides)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare ESPN fantasy roster availability across seasons")
    parser.add_argument("--config", default=None, help="Config file with an espn section (default: ./config.json)")
    parser.add_argument("--league-id", default=None, help="ESPN fantasy league ID")
    parser.add_argument("--swid", default=None, help="SWID cookie, including the curly braces")
    parser.add_argument("--espn-s2", default=None, help="espn_s2 cookie")
    parser.add_argument("--historical-season", type=int, default=None, help="Completed season year")
    parser.add_argument("--current-season", type=int, default=None, help="Current season year")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Where to write the JSON files")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(log_level="WARNING", json_format=False, service_name="historical-roster-fetcher")

    try:
        espn = resolve_espn_config(args)
        extractor = ESPNFantasyExtractor.from_config(espn, HttpConfig())
    except (ConfigurationError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    compare_seasons(
        extractor,
        historical_season=espn.historical_season,
        current_season=espn.current_season,
        output_dir=args.output_dir,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
