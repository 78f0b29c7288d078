"""Best-effort email notifications for new inquiries and demo bookings.

Messages are built while the lead is still attached to its session and
delivered afterwards, usually as a FastAPI background task. Delivery failures
are logged and never reach the caller: the lead has already been committed.
"""

import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from fastapi import BackgroundTasks

from backend.app.core.errors import UpstreamNotificationError
from backend.app.core.settings import Settings, get_settings
from backend.app.models.lead import Lead

logger = logging.getLogger(__name__)

SENDER_NAME = "AI Hub"


@dataclass(frozen=True)
class Notification:
    subject: str
    text: str
    html: str
    # None means the internal inbox (the configured sender account)
    to: Optional[str] = None


def contact_notification(lead: Lead) -> Notification:
    e = html.escape
    return Notification(
        subject=f"New inquiry from {lead.full_name}",
        text=f"New inquiry for {lead.business_info}",
        html=(
            "<h3>New Inquiry</h3>"
            f"<p><b>Name:</b> {e(lead.full_name)}</p>"
            f"<p><b>Email:</b> {e(lead.email)}</p>"
            f"<p><b>Business:</b> {e(lead.business_info)}</p>"
            f"<p><b>Type:</b> {e(lead.inquiry_type)}</p>"
            f"<p><b>Message:</b> {e(lead.message or '-')}</p>"
        ),
    )


def demo_confirmation(lead: Lead, is_reschedule: bool = False) -> Notification:
    details = lead.demo_details
    subject = "Your AI Hub demo has been rescheduled" if is_reschedule else "Your AI Hub demo is booked"
    when = details.preferred_date.strftime("%a %b %d %Y")
    e = html.escape
    return Notification(
        to=lead.email,
        subject=subject,
        text=(
            f"Hi {lead.first_name},\n\nYour demo details:\n"
            f"Date: {when}\nTime: {details.preferred_time} ({details.timezone})\nType: {details.demo_type}\n\n"
            "We look forward to speaking with you!"
        ),
        html=(
            f"<h3>{subject}</h3><p>Hi {e(lead.first_name)},</p><p>Your demo details:</p>"
            f"<ul><li>Date: {when}</li><li>Time: {e(details.preferred_time)} ({e(details.timezone)})</li>"
            f"<li>Type: {e(details.demo_type)}</li></ul>"
            "<p>We look forward to speaking with you!</p>"
        ),
    )


class SmtpMailer:
    """Sends notifications through the configured SMTP account."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.email_user)

    def build_message(self, notification: Notification) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f"{SENDER_NAME} <{self.settings.email_user}>"
        message["To"] = notification.to or self.settings.email_user
        message["Subject"] = notification.subject
        message.set_content(notification.text)
        message.add_alternative(notification.html, subtype="html")
        return message

    def send(self, notification: Notification) -> bool:
        if not self.enabled:
            logger.debug("Email disabled, skipping %r", notification.subject)
            return False
        try:
            # Header values with CR or LF are rejected here with ValueError
            message = self.build_message(notification)
            with smtplib.SMTP(
                self.settings.email_host,
                self.settings.email_port,
                timeout=self.settings.email_timeout_seconds,
            ) as smtp:
                smtp.starttls()
                smtp.login(self.settings.email_user, self.settings.email_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            raise UpstreamNotificationError(f"Failed to send {notification.subject!r}") from exc
        return True


class NotificationDispatcher:
    def __init__(self, mailer, background_tasks: Optional[BackgroundTasks] = None):
        self.mailer = mailer
        self.background_tasks = background_tasks

    def dispatch(self, notification: Notification) -> None:
        if self.background_tasks is not None:
            self.background_tasks.add_task(self.deliver, notification)
        else:
            self.deliver(notification)

    def deliver(self, notification: Notification) -> bool:
        try:
            return bool(self.mailer.send(notification))
        except UpstreamNotificationError:
            logger.warning("Notification delivery failed: %s", notification.subject, exc_info=True)
            return False
