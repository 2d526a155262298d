"""Dispatch-day reminder emails to tenant contacts.

On a tenant's dispatch day its contact receives a short German notice that
the monthly statements are being sent. Delivery is best effort: one failed
message is logged and the remaining tenants are still notified.
"""

from __future__ import annotations

import typing as typ

import msgspec

from chronodesk.errors import EmailDeliveryError
from chronodesk.logging import get_logger, log_error, log_info
from chronodesk.notify.transport import EmailMessage
from chronodesk.statements.selection import select_due_tenants

if typ.TYPE_CHECKING:
    import datetime as dt

    from chronodesk.notify.transport import EmailTransport
    from chronodesk.tenants.models import TenantInfo
    from chronodesk.tenants.protocol import StatementDataSource

logger = get_logger(__name__)

REMINDER_SUBJECT = "Ihr Berichtsversand bei ChronoDesk"
_REMINDER_BODY = (
    "Hallo {company},\n\n"
    "heute werden Ihre Monatsberichte per PDF verschickt. "
    "Bei Fragen melden Sie sich gerne.\n\n"
    "Viele Grüße\n"
    "Ihr ChronoDesk Team"
)


def reminder_message(tenant: TenantInfo) -> EmailMessage:
    """Build the reminder for ``tenant``.

    Raises
    ------
    ValueError
        If the tenant has no contact email.

    """
    if not tenant.contact_email:
        msg = f"tenant {tenant.slug} has no contact email"
        raise ValueError(msg)
    return EmailMessage(
        to=tenant.contact_email,
        subject=REMINDER_SUBJECT,
        text=_REMINDER_BODY.format(company=tenant.display_name),
    )


class ReminderSummary(msgspec.Struct, kw_only=True):
    """Counts and tenant slugs of one reminder run."""

    today: str
    sent: list[str] = msgspec.field(default_factory=list)
    skipped_no_email: list[str] = msgspec.field(default_factory=list)
    failed: list[str] = msgspec.field(default_factory=list)

    def to_json(self) -> bytes:
        """Encode the summary as JSON."""
        return msgspec.json.encode(self)


class ReminderService:
    """Notify active tenants that today is their dispatch day."""

    def __init__(
        self,
        data_source: StatementDataSource,
        transport: EmailTransport,
    ) -> None:
        """Configure the service with a tenant source and an email transport."""
        self._data_source = data_source
        self._transport = transport

    async def send_reminders(self, today: dt.date) -> ReminderSummary:
        """Send one reminder per active tenant due ``today``.

        Raises
        ------
        DataFetchError
            If the tenant registry cannot be read.

        """
        tenants = await self._data_source.list_tenants()
        due = select_due_tenants(tenants, today, active_only=True)
        summary = ReminderSummary(today=today.isoformat())

        for tenant in due:
            if not tenant.contact_email:
                summary.skipped_no_email.append(tenant.slug)
                continue
            try:
                await self._transport.send(reminder_message(tenant))
            except EmailDeliveryError as exc:
                log_error(
                    logger,
                    "Reminder for tenant %s failed: %s",
                    tenant.slug,
                    exc,
                    exc_info=exc,
                )
                summary.failed.append(tenant.slug)
                continue
            log_info(
                logger,
                "Sent reminder to %s for tenant %s",
                tenant.contact_email,
                tenant.slug,
            )
            summary.sent.append(tenant.slug)

        return summary


__all__ = ["REMINDER_SUBJECT", "ReminderService", "ReminderSummary", "reminder_message"]
