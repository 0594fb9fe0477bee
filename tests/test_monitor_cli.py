import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import monitor
from schemas.pipeline import PipelineResult
from services.roster_service import RosterSet


@pytest.fixture(autouse=True)
def keep_default_logging(monkeypatch):
    """Leave structlog unconfigured so loggers never cache a captured stdout."""
    monkeypatch.setattr(monitor, "setup_logging", lambda **kwargs: None)


@pytest.fixture
def config_path(tmp_path, config_data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data))
    return str(path)


def fake_scheduler(status="success"):
    scheduler = MagicMock()
    scheduler.pipeline.roster = RosterSet([1966])
    scheduler.trigger = AsyncMock(return_value=PipelineResult(
        status=status,
        message="threshold_alerts completed successfully",
        started_at="2025-01-15T20:00:00-05:00",
    ))
    return scheduler


def test_missing_config_exits_1(tmp_path):
    assert monitor.main(["--config", str(tmp_path / "missing.json")]) == 1


def test_notifier_setup_failure_exits_1(tmp_path, config_data):
    config_data["email"] = {"to": []}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data))

    assert monitor.main(["--config", str(path)]) == 1


def test_once_runs_a_single_cycle(config_path):
    scheduler = fake_scheduler()

    with patch("monitor.build_scheduler", return_value=scheduler):
        assert monitor.main(["--config", config_path, "--once"]) == 0

    scheduler.trigger.assert_awaited_once()
    scheduler.run_forever.assert_not_called()


def test_once_exits_1_when_cycle_fails(config_path):
    with patch("monitor.build_scheduler", return_value=fake_scheduler(status="error")):
        assert monitor.main(["--config", config_path, "--once"]) == 1


def test_interrupt_exits_cleanly(config_path, capsys):
    with patch("monitor.build_scheduler", return_value=fake_scheduler()), \
            patch("monitor.asyncio.run", side_effect=KeyboardInterrupt):
        assert monitor.main(["--config", config_path]) == 0

    assert "Goodbye!" in capsys.readouterr().out


def test_build_scheduler_wires_roster_and_interval(tmp_path, config_data):
    roster_path = tmp_path / "roster.json"
    roster_path.write_text(json.dumps([3917376, 1966]))
    config_data["rosterFile"] = str(roster_path)
    config_data["monitoring"]["checkIntervalMinutes"] = 2
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config_data))

    settings = monitor.load_settings(str(config_path))
    scheduler = monitor.build_scheduler(settings)

    assert scheduler.interval_minutes == 2
    assert len(scheduler.pipeline.roster) == 2
    assert scheduler.pipeline.window.enabled
