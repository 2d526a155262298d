"""EmailTransport port with SendGrid and log-only adapters."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import httpx
import msgspec

from chronodesk.errors import EmailDeliveryError
from chronodesk.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from chronodesk.notify.config import EmailConfig

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400


@dc.dataclass(frozen=True, slots=True)
class EmailMessage:
    """A plain-text message to one recipient."""

    to: str
    subject: str
    text: str


@typ.runtime_checkable
class EmailTransport(typ.Protocol):
    """Port for delivering email messages."""

    async def send(self, message: EmailMessage) -> None:
        """Deliver ``message``.

        Raises
        ------
        EmailDeliveryError
            If the provider rejects or cannot receive the message.

        """
        ...


class _Address(msgspec.Struct):
    email: str


class _Personalization(msgspec.Struct):
    to: list[_Address]


class _Content(msgspec.Struct):
    type: str
    value: str


class _SendGridPayload(msgspec.Struct):
    personalizations: list[_Personalization]
    subject: str
    content: list[_Content]
    # ``from`` is reserved in Python; renamed on the wire.
    sender: _Address = msgspec.field(name="from")


def _payload(message: EmailMessage, sender: str) -> bytes:
    return msgspec.json.encode(
        _SendGridPayload(
            personalizations=[_Personalization(to=[_Address(email=message.to)])],
            subject=message.subject,
            content=[_Content(type="text/plain", value=message.text)],
            sender=_Address(email=sender),
        )
    )


class SendGridEmailTransport:
    """Send messages through the SendGrid v3 mail send API.

    Parameters
    ----------
    config
        API key, sender and endpoint. ``config.api_key`` must be set.
    http_client
        Optional ``httpx.AsyncClient`` for testing. If not provided, the
        instance creates and owns its own client.

    """

    def __init__(
        self,
        config: EmailConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the transport with configuration."""
        if config.api_key is None:
            msg = "SendGridEmailTransport requires an API key"
            raise ValueError(msg)
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, message: EmailMessage) -> None:
        """POST ``message`` to SendGrid."""
        try:
            response = await self._client.post(
                self._config.endpoint,
                headers=self._headers,
                content=_payload(message, self._config.sender),
            )
        except httpx.RequestError as exc:
            msg = f"SendGrid request failed: {exc}"
            raise EmailDeliveryError(msg) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            msg = f"SendGrid rejected message with HTTP {response.status_code}"
            raise EmailDeliveryError(msg, status_code=response.status_code)


class LogOnlyEmailTransport:
    """Log messages instead of sending them; used without an API key."""

    def __init__(self) -> None:
        """Start with an empty record of logged messages."""
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        """Record and log ``message``."""
        self.sent.append(message)
        log_info(
            logger,
            "Email delivery disabled; would send %r to %s",
            message.subject,
            message.to,
        )


def create_email_transport(
    config: EmailConfig,
) -> SendGridEmailTransport | LogOnlyEmailTransport:
    """Return the SendGrid transport when delivery is enabled, else log-only."""
    if config.delivery_enabled:
        return SendGridEmailTransport(config)
    return LogOnlyEmailTransport()


__all__ = [
    "EmailMessage",
    "EmailTransport",
    "LogOnlyEmailTransport",
    "SendGridEmailTransport",
    "create_email_transport",
]
