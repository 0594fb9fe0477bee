"""
Notification Service

Sends the batched player alert email. Uses Resend when an API key is
configured, SMTP (Gmail app password by default) otherwise, and only logs
the message in dry-run mode.
"""

import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Optional

import pytz
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.logging import get_logger
from core.settings import EmailConfig, Settings, ThresholdConfig
from schemas.players import PlayerObservation
from services.threshold_service import describe_thresholds


TEMPLATES_DIR = Path(__file__).parent / "templates"


class NotifierSetupError(Exception):
    """Raised when no email transport can be configured."""

    pass


@dataclass
class NotificationResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


def build_subject(players: list[PlayerObservation]) -> str:
    if len(players) == 1:
        return f"🏀 FANTASY ALERT: {players[0].name} Available!"
    return f"🏀 FANTASY ALERT: {len(players)} Players Available!"


class NotificationService:
    """Sends player threshold alerts via email."""

    def __init__(
        self,
        email: EmailConfig,
        thresholds: ThresholdConfig,
        timezone: str = "America/New_York",
    ):
        self.log = get_logger("notification_service")
        self.email = email
        self.thresholds = thresholds
        self.timezone = timezone
        self._templates = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(["html"]),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationService":
        """
        Build the service after checking a transport is usable.

        Raises:
            NotifierSetupError: If there are no recipients, or neither dry
                                run, a Resend key, nor SMTP credentials are set
        """
        email = settings.email
        if not email.to:
            raise NotifierSetupError("email.to must list at least one recipient")

        if not (email.dry_run or email.resend_api_key):
            if not email.sender.user or not email.sender.app_password:
                raise NotifierSetupError(
                    "email.from.user and email.from.appPassword are required for SMTP delivery"
                )

        service = cls(email, settings.thresholds, timezone=settings.monitoring.timezone)
        service.log.info("email_transport_configured", transport=service.transport, to=email.to)
        return service

    @property
    def transport(self) -> str:
        if self.email.dry_run:
            return "dry_run"
        if self.email.resend_api_key:
            return "resend"
        return "smtp"

    @property
    def from_address(self) -> str:
        return self.email.sender.user or "alerts@localhost"

    def send_player_alert(self, players: list[PlayerObservation]) -> NotificationResult:
        """
        Send one alert email covering every player in the batch.

        Args:
            players: Qualifying players, each with is_available set

        Returns:
            NotificationResult with success status. Delivery errors are
            reported here, never raised.
        """
        if not players:
            return NotificationResult(success=True)

        subject = build_subject(players)
        html_body = self._build_alert_html(players)
        text_body = self._build_alert_text(players)

        self.log.info(
            "sending_player_alert",
            to=self.email.to,
            player_count=len(players),
            subject=subject,
        )

        result = self._send_email(self.email.to, subject, html_body, text_body)
        if result.success:
            for player in players:
                self.log.info("player_alerted", player=player.name, player_id=player.player_id)
        return result

    def _sent_at(self) -> str:
        now = datetime.now(pytz.timezone(self.timezone))
        return now.strftime("%Y-%m-%d %I:%M %p %Z")

    def _build_alert_html(self, players: list[PlayerObservation]) -> str:
        template = self._templates.get_template("player_alert.html")
        return template.render(
            players=players,
            threshold_lines=describe_thresholds(self.thresholds),
            sent_at=self._sent_at(),
        )

    def _build_alert_text(self, players: list[PlayerObservation]) -> str:
        """Plain-text alternative to the HTML body."""
        lines = ["Fantasy Basketball Alert", ""]

        for i, player in enumerate(players, 1):
            badge = "AVAILABLE" if player.is_available else "ROSTERED"
            lines.append(f"  {i}. {player.name} ({player.team}) - {badge}")
            lines.append(f"     {player.game} | {player.minutes} min")
            lines.append(
                f"     {player.points} pts, {player.rebounds} reb, {player.assists} ast, "
                f"{player.three_pointers} 3pm, {player.steals} stl, {player.blocks} blk, "
                f"{player.turnovers} to"
            )
            lines.append(f"     {player.box_score_url}")

        lines.append("")
        lines.extend(describe_thresholds(self.thresholds))
        lines.append(f"Sent at {self._sent_at()}")
        return "\n".join(lines)

    def _send_email(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: str,
    ) -> NotificationResult:
        """Deliver through the configured transport."""
        if self.email.dry_run:
            self.log.info(
                "email_stub",
                to=to,
                subject=subject,
                body_preview=text_body[:200],
            )
            return NotificationResult(success=True, message_id="dry-run")

        if self.email.resend_api_key:
            return self._send_via_resend(to, subject, html_body, text_body)
        return self._send_via_smtp(to, subject, html_body, text_body)

    def _send_via_resend(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: str,
    ) -> NotificationResult:
        try:
            import resend

            resend.api_key = self.email.resend_api_key.get_secret_value()
            result = resend.Emails.send({
                "from": f"Fantasy Basketball Monitor <{self.from_address}>",
                "to": to,
                "subject": subject,
                "html": html_body,
                "text": text_body,
            })
            message_id = result.get("id") if isinstance(result, dict) else getattr(result, "id", None)
            self.log.info("email_sent", to=to, message_id=message_id, transport="resend")
            return NotificationResult(success=True, message_id=message_id)
        except Exception as e:
            self.log.error("email_send_failed", to=to, error=str(e), transport="resend")
            return NotificationResult(success=False, error=str(e))

    def _send_via_smtp(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        text_body: str,
    ) -> NotificationResult:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = ", ".join(to)
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.email.smtp_host, self.email.smtp_port, timeout=10) as server:
                server.starttls()
                server.login(
                    self.email.sender.user,
                    self.email.sender.app_password.get_secret_value(),
                )
                server.sendmail(self.from_address, to, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            self.log.error("email_send_failed", to=to, error=str(e), transport="smtp")
            return NotificationResult(success=False, error=str(e))

        self.log.info("email_sent", to=to, transport="smtp")
        return NotificationResult(success=True)
