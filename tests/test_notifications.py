import smtplib
from datetime import date

import pytest
from fastapi import BackgroundTasks

from backend.app.core.errors import UpstreamNotificationError
from backend.app.core.settings import Settings
from backend.app.db.base import DemoDetails, Lead
from backend.app.services import notifications
from backend.app.services.notifications import (
    Notification,
    NotificationDispatcher,
    SmtpMailer,
    contact_notification,
    demo_confirmation,
)


def make_settings(monkeypatch, user="sales@aihub.test") -> Settings:
    monkeypatch.setenv("EMAIL_USER", user)
    monkeypatch.setenv("EMAIL_PASS", "app-password")
    monkeypatch.setenv("EMAIL_HOST", "smtp.aihub.test")
    monkeypatch.setenv("EMAIL_PORT", "2525")
    return Settings()


def make_lead(with_demo=False) -> Lead:
    lead = Lead(
        first_name="Ann",
        last_name="Lee",
        email="ann@x.com",
        business_name="Ann's Shop",
        business_type="retail",
        inquiry_type="demo" if with_demo else "pricing",
        message=None,
    )
    if with_demo:
        lead.demo_details = DemoDetails(
            preferred_date=date(2030, 3, 14),
            preferred_time="09:00",
            demo_type="ai-support-bot",
            timezone="Asia/Kolkata",
        )
    return lead


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        self.credentials = (user, password)

    def send_message(self, message):
        self.sent.append(message)


class BrokenSMTP(FakeSMTP):
    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")


class RaisingMailer:
    def __init__(self):
        self.calls = 0

    def send(self, notification):
        self.calls += 1
        raise UpstreamNotificationError("down")


def test_contact_notification_content():
    notification = contact_notification(make_lead())
    assert notification.subject == "New inquiry from Ann Lee"
    assert notification.to is None
    assert "Ann&#x27;s Shop (retail)" in notification.html
    assert "<p><b>Message:</b> -</p>" in notification.html


def test_demo_confirmation_content():
    notification = demo_confirmation(make_lead(with_demo=True))
    assert notification.to == "ann@x.com"
    assert notification.subject == "Your AI Hub demo is booked"
    assert "Date: Thu Mar 14 2030" in notification.text
    assert "09:00 (Asia/Kolkata)" in notification.text

    rescheduled = demo_confirmation(make_lead(with_demo=True), is_reschedule=True)
    assert rescheduled.subject == "Your AI Hub demo has been rescheduled"


def test_mailer_disabled_without_account(monkeypatch):
    monkeypatch.setattr(notifications.smtplib, "SMTP", BrokenSMTP)
    mailer = SmtpMailer(make_settings(monkeypatch, user=""))
    assert mailer.enabled is False
    assert mailer.send(Notification(subject="s", text="t", html="<p>t</p>")) is False


def test_mailer_builds_multipart_message(monkeypatch):
    mailer = SmtpMailer(make_settings(monkeypatch))
    message = mailer.build_message(Notification(subject="Hello", text="plain", html="<p>rich</p>", to="ann@x.com"))
    assert message["From"] == "AI Hub <sales@aihub.test>"
    assert message["To"] == "ann@x.com"
    assert message["Subject"] == "Hello"
    assert message.is_multipart()

    internal = mailer.build_message(Notification(subject="Hello", text="plain", html="<p>rich</p>"))
    assert internal["To"] == "sales@aihub.test"


def test_mailer_sends_over_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)
    mailer = SmtpMailer(make_settings(monkeypatch))

    assert mailer.send(Notification(subject="Hello", text="plain", html="<p>rich</p>")) is True
    smtp = FakeSMTP.instances[-1]
    assert (smtp.host, smtp.port) == ("smtp.aihub.test", 2525)
    assert smtp.timeout == mailer.settings.email_timeout_seconds
    assert smtp.credentials == ("sales@aihub.test", "app-password")
    assert smtp.sent[0]["Subject"] == "Hello"


def test_mailer_wraps_smtp_failures(monkeypatch):
    monkeypatch.setattr(notifications.smtplib, "SMTP", BrokenSMTP)
    mailer = SmtpMailer(make_settings(monkeypatch))
    with pytest.raises(UpstreamNotificationError):
        mailer.send(Notification(subject="Hello", text="plain", html="<p>rich</p>"))


def test_dispatcher_swallows_delivery_errors():
    mailer = RaisingMailer()
    dispatcher = NotificationDispatcher(mailer)
    assert dispatcher.deliver(Notification(subject="s", text="t", html="h")) is False
    dispatcher.dispatch(Notification(subject="s", text="t", html="h"))
    assert mailer.calls == 2


def test_dispatcher_defers_to_background_tasks():
    mailer = RaisingMailer()
    tasks = BackgroundTasks()
    dispatcher = NotificationDispatcher(mailer, background_tasks=tasks)
    dispatcher.dispatch(Notification(subject="s", text="t", html="h"))
    assert mailer.calls == 0
    assert len(tasks.tasks) == 1


def test_builders_escape_user_supplied_html():
    lead = make_lead(with_demo=True)
    lead.first_name = "<a href='https://evil.test'>Click</a>"
    lead.business_name = "<b>Shop</b>"
    lead.message = "<script>alert(1)</script>"

    confirmation = demo_confirmation(lead)
    assert "<a href=" not in confirmation.html
    assert "Hi &lt;a href=&#x27;https://evil.test&#x27;&gt;Click&lt;/a&gt;," in confirmation.html

    contact = contact_notification(lead)
    assert "<script>" not in contact.html
    assert "<b>Shop</b>" not in contact.html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in contact.html


def test_mailer_wraps_header_injection(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)
    mailer = SmtpMailer(make_settings(monkeypatch))
    with pytest.raises(UpstreamNotificationError):
        mailer.send(Notification(subject="Hi\nBcc: x@evil.test", text="t", html="h"))
    assert FakeSMTP.instances == []


def test_dispatcher_contains_header_errors_from_lead_names(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)
    dispatcher = NotificationDispatcher(SmtpMailer(make_settings(monkeypatch)))
    lead = make_lead()
    lead.first_name = "An\nBcc: x@evil.test"

    assert dispatcher.deliver(contact_notification(lead)) is False
    assert FakeSMTP.instances == []
