from datetime import datetime

import pytz

from services.alert_dedup_service import AlertDeduplicator
from tests.conftest import eastern


def test_same_day_alerts_once():
    dedup = AlertDeduplicator(timezone="America/New_York")
    now = eastern(hour=20)

    assert dedup.should_alert("3917376", now) is True
    assert dedup.should_alert("3917376", eastern(hour=22)) is False


def test_next_day_alerts_again():
    dedup = AlertDeduplicator(timezone="America/New_York")

    assert dedup.should_alert("3917376", eastern(day=15)) is True
    assert dedup.should_alert("3917376", eastern(day=16)) is True


def test_key_uses_configured_timezone():
    dedup = AlertDeduplicator(timezone="America/New_York")
    # 02:30 UTC on the 16th is still the evening of the 15th in New York
    late_game = pytz.utc.localize(datetime(2025, 1, 16, 2, 30))

    assert dedup.key_for(3917376, late_game) == ("3917376", "2025-01-15")


def test_int_and_string_ids_share_a_key():
    dedup = AlertDeduplicator(timezone="America/New_York")
    now = eastern()

    assert dedup.should_alert(3917376, now) is True
    assert dedup.has_alerted("3917376", now)
    assert dedup.should_alert("3917376", now) is False


def test_injected_state_is_shared():
    state = {}
    dedup = AlertDeduplicator(timezone="America/New_York", state=state)

    dedup.should_alert("1966", eastern())

    assert state == {("1966", "2025-01-15"): eastern()}


def test_prune_drops_previous_days():
    dedup = AlertDeduplicator(timezone="America/New_York")
    dedup.should_alert("1966", eastern(day=14))
    dedup.should_alert("3917376", eastern(day=15))

    removed = dedup.prune(eastern(day=15))

    assert removed == 1
    assert len(dedup) == 1
    assert dedup.has_alerted("3917376", eastern(day=15))
