"""Request-scoped providers for services injected into the routers."""

from fastapi import BackgroundTasks, Depends, Request

from backend.app.core.settings import get_settings
from backend.app.services.activity_log import ActivityLog, get_activity_log
from backend.app.services.chat import ChatCompletionClient
from backend.app.services.leads import RequestContext
from backend.app.services.notifications import NotificationDispatcher, SmtpMailer


def get_mailer() -> SmtpMailer:
    return SmtpMailer(get_settings())


def get_notification_dispatcher(
    background_tasks: BackgroundTasks,
    mailer: SmtpMailer = Depends(get_mailer),
) -> NotificationDispatcher:
    # Delivery runs after the response is sent
    return NotificationDispatcher(mailer, background_tasks=background_tasks)


def get_chat_client() -> ChatCompletionClient:
    return ChatCompletionClient.from_settings(get_settings())


def get_request_context(request: Request) -> RequestContext:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for and get_settings().trust_proxy_headers:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return RequestContext.from_values(ip_address, request.headers.get("user-agent"), request.query_params)


__all__ = [
    "ActivityLog",
    "get_activity_log",
    "get_chat_client",
    "get_mailer",
    "get_notification_dispatcher",
    "get_request_context",
]
