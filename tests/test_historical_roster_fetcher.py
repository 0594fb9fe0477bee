import json
from unittest.mock import MagicMock

import pytest

from pipelines.transformers import extract_rostered_player_ids
from scripts.historical_roster_fetcher import (
    Diagnosis,
    RosterAnalysis,
    analyze_roster_data,
    compare_seasons,
    diagnose,
    parse_args,
    resolve_espn_config,
    save_season_files,
)


def season_data(entries_by_team):
    return {
        "teams": [
            {"id": team_id, "name": f"Team {team_id}", "abbrev": f"T{team_id}"}
            for team_id in entries_by_team
        ],
        "rosters": [
            {"id": team_id, "roster": {"entries": [{"playerId": pid} for pid in player_ids]}}
            for team_id, player_ids in entries_by_team.items()
        ],
        "settings": {"name": "Office League"},
        "status": {"isActive": True, "currentMatchupPeriod": 20, "latestScoringPeriod": 140},
    }


def test_extract_rostered_player_ids_is_unique():
    data = season_data({1: [3917376, 1966], 2: [1966, 4066261, None]})

    assert extract_rostered_player_ids(data) == [3917376, 1966, 4066261]


def test_extract_rostered_player_ids_without_rosters():
    assert extract_rostered_player_ids(None) == []
    assert extract_rostered_player_ids({"teams": []}) == []


def test_analyze_roster_data(capsys):
    analysis = analyze_roster_data(season_data({1: [3917376, 1966], 2: []}), 2025)

    assert analysis.has_rosters
    assert analysis.player_count == 2
    assert analysis.teams_with_rosters == 1
    assert analysis.team_count == 2
    output = capsys.readouterr().out
    assert "Office League" in output
    assert "No roster data" in output


def test_analyze_missing_data():
    analysis = analyze_roster_data(None, 2026)

    assert analysis == RosterAnalysis(season=2026)


@pytest.mark.parametrize(
    "historical,current,expected",
    [
        (True, False, Diagnosis.API_WORKS_CURRENT_NOT_READY),
        (False, False, Diagnosis.CANNOT_RETRIEVE),
        (True, True, Diagnosis.EVERYTHING_WORKS),
        (False, True, Diagnosis.UNEXPECTED),
    ],
)
def test_diagnose(historical, current, expected):
    result = diagnose(
        RosterAnalysis(season=2025, has_rosters=historical),
        RosterAnalysis(season=2026, has_rosters=current),
    )

    assert result == expected


def test_save_season_files(tmp_path):
    data = season_data({1: [3917376, 1966], 2: [1966]})

    player_ids = save_season_files(data, 2025, tmp_path)

    assert player_ids == [3917376, 1966]
    assert json.loads((tmp_path / "2025_rostered_player_ids.json").read_text()) == [3917376, 1966]
    assert json.loads((tmp_path / "2025_season_rosters.json").read_text()) == data


def test_compare_seasons_current_not_ready(tmp_path):
    extractor = MagicMock()
    extractor.league_id = 1497752245
    extractor.cookies = {"SWID": "{ABC}"}
    extractor.get_season_rosters.side_effect = [season_data({1: [3917376]}), None]
    pacer = MagicMock()

    diagnosis = compare_seasons(extractor, 2025, 2026, tmp_path, pacer=pacer)

    assert diagnosis == Diagnosis.API_WORKS_CURRENT_NOT_READY
    assert [c.args[0] for c in extractor.get_season_rosters.call_args_list] == [2025, 2026]
    assert pacer.wait.call_count == 2
    assert (tmp_path / "2025_rostered_player_ids.json").exists()
    assert not (tmp_path / "2026_season_rosters.json").exists()


def test_cli_flags_override_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"espn": {"leagueId": 111, "swid": "{OLD}", "historicalSeason": 2024}}))
    args = parse_args(["--config", str(path), "--swid", "{NEW}", "--current-season", "2027"])

    espn = resolve_espn_config(args)

    assert espn.league_id == 111
    assert espn.swid.get_secret_value() == "{NEW}"
    assert espn.historical_season == 2024
    assert espn.current_season == 2027
