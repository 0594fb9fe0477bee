import smtplib
from unittest.mock import patch

import pytest

from core.settings import EmailConfig, SenderConfig, Settings
from services.notification_service import (
    NotificationService,
    NotifierSetupError,
    build_subject,
)
from tests.conftest import make_player


@pytest.fixture
def players():
    return [
        make_player(player_id="3917376", name="Jalen Brunson", points=32, assists=9, is_available=True),
        make_player(player_id="1966", name="LeBron James", points=28, rebounds=11, is_available=False),
    ]


def smtp_email(**overrides) -> EmailConfig:
    values = dict(
        sender=SenderConfig(user="monitor@example.com", app_password="app-password"),
        to=["me@example.com"],
    )
    values.update(overrides)
    return EmailConfig(**values)


def test_subject_names_single_player(players):
    assert build_subject(players[:1]) == "🏀 FANTASY ALERT: Jalen Brunson Available!"


def test_subject_counts_multiple_players(players):
    assert build_subject(players) == "🏀 FANTASY ALERT: 2 Players Available!"


def test_alert_html_lists_every_player(players, strict_thresholds):
    service = NotificationService(smtp_email(), strict_thresholds)

    html = service._build_alert_html(players)

    assert "Jalen Brunson" in html
    assert "LeBron James" in html
    assert "AVAILABLE" in html
    assert "ROSTERED" in html
    assert "https://www.espn.com/nba/boxscore/_/gameId/401585001" in html
    assert "Turnovers: 3 max" in html


def test_dry_run_does_not_send(players, strict_thresholds):
    service = NotificationService(smtp_email(dry_run=True), strict_thresholds)

    with patch("services.notification_service.smtplib.SMTP") as smtp:
        result = service.send_player_alert(players)

    assert result.success
    assert result.message_id == "dry-run"
    smtp.assert_not_called()


def test_empty_batch_sends_nothing(strict_thresholds):
    service = NotificationService(smtp_email(), strict_thresholds)

    with patch("services.notification_service.smtplib.SMTP") as smtp:
        result = service.send_player_alert([])

    assert result.success
    smtp.assert_not_called()


def test_smtp_delivery(players, strict_thresholds):
    service = NotificationService(smtp_email(), strict_thresholds)

    with patch("services.notification_service.smtplib.SMTP") as smtp:
        result = service.send_player_alert(players)

    assert result.success
    smtp.assert_called_once_with("smtp.gmail.com", 587, timeout=10)
    server = smtp.return_value.__enter__.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("monitor@example.com", "app-password")
    from_address, to, _ = server.sendmail.call_args.args
    assert from_address == "monitor@example.com"
    assert to == ["me@example.com"]


def test_smtp_failure_is_returned_not_raised(players, strict_thresholds):
    service = NotificationService(smtp_email(), strict_thresholds)

    with patch("services.notification_service.smtplib.SMTP") as smtp:
        smtp.return_value.__enter__.return_value.login.side_effect = smtplib.SMTPAuthenticationError(
            535, b"Username and Password not accepted"
        )
        result = service.send_player_alert(players)

    assert result.success is False
    assert "Username and Password not accepted" in result.error


def test_resend_used_when_api_key_configured(players, strict_thresholds):
    service = NotificationService(smtp_email(resend_api_key="re_key"), strict_thresholds)

    with patch("resend.Emails.send", return_value={"id": "re_123"}) as send:
        result = service.send_player_alert(players)

    assert service.transport == "resend"
    assert result.success
    assert result.message_id == "re_123"
    params = send.call_args.args[0]
    assert params["to"] == ["me@example.com"]
    assert params["subject"] == "🏀 FANTASY ALERT: 2 Players Available!"


def test_from_settings_requires_recipients(config_data):
    config_data["email"]["to"] = []
    settings = Settings(**config_data)

    with pytest.raises(NotifierSetupError, match="recipient"):
        NotificationService.from_settings(settings)


def test_from_settings_requires_smtp_credentials(config_data):
    config_data["email"] = {"to": "me@example.com", "from": {"user": "monitor@example.com"}}
    settings = Settings(**config_data)

    with pytest.raises(NotifierSetupError, match="appPassword"):
        NotificationService.from_settings(settings)


def test_from_settings_dry_run(config_data):
    service = NotificationService.from_settings(Settings(**config_data))

    assert service.transport == "dry_run"
    assert service.email.to == ["me@example.com"]
