import json

import pytest

from core.settings import ConfigurationError
from services.roster_service import RosterSet, RosterStatus, load_roster_file


def test_int_and_string_ids_match():
    roster = RosterSet([123])

    assert roster.classify("123") == RosterStatus.ROSTERED
    assert "123" in roster
    assert not roster.is_available("123")


def test_unlisted_player_is_available():
    roster = RosterSet(["4066261", 3112335])

    assert roster.classify("1966") == RosterStatus.AVAILABLE
    assert roster.is_available(1966)
    assert len(roster) == 2


def test_empty_roster_treats_everyone_as_available():
    roster = RosterSet()

    assert roster.is_empty
    assert roster.is_available("3917376")


def test_load_roster_file(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps([3917376, "4066261", None, ""]))

    roster = load_roster_file(path)

    assert len(roster) == 2
    assert "3917376" in roster
    assert 4066261 in roster


def test_missing_roster_file_is_empty(tmp_path):
    roster = load_roster_file(tmp_path / "missing.json")

    assert roster.is_empty


def test_no_roster_file_configured_is_empty():
    assert load_roster_file(None).is_empty


def test_malformed_roster_file_raises(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text("[1, 2,")

    with pytest.raises(ConfigurationError, match="not valid JSON"):
        load_roster_file(path)


def test_non_array_roster_file_raises(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({"players": [1, 2]}))

    with pytest.raises(ConfigurationError, match="JSON array"):
        load_roster_file(path)
