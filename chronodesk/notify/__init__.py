"""Tenant notifications: email transports and dispatch reminders."""

from __future__ import annotations

from .config import EmailConfig
from .reminders import (
    REMINDER_SUBJECT,
    ReminderService,
    ReminderSummary,
    reminder_message,
)
from .transport import (
    EmailMessage,
    EmailTransport,
    LogOnlyEmailTransport,
    SendGridEmailTransport,
    create_email_transport,
)

__all__ = [
    "REMINDER_SUBJECT",
    "EmailConfig",
    "EmailMessage",
    "EmailTransport",
    "LogOnlyEmailTransport",
    "ReminderService",
    "ReminderSummary",
    "SendGridEmailTransport",
    "create_email_transport",
    "reminder_message",
]
