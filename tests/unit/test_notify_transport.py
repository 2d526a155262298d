"""Unit tests for email configuration and transports."""

from __future__ import annotations

import json
import secrets

import httpx
import pytest

from chronodesk.errors import ConfigurationError, EmailDeliveryError
from chronodesk.notify import (
    EmailConfig,
    EmailMessage,
    EmailTransport,
    LogOnlyEmailTransport,
    SendGridEmailTransport,
    create_email_transport,
)
from tests.helpers.femtologging_capture import capture_logs

_API_KEY = secrets.token_hex(8)
_MESSAGE = EmailMessage(to="office@acme.example", subject="Hallo", text="Grüße")


class TestEmailConfig:
    """Tests for ``EmailConfig.from_env``."""

    def test_without_key_delivery_is_disabled(self) -> None:
        """No API key means messages are only logged."""
        config = EmailConfig.from_env()
        assert config.delivery_enabled is False

    def test_reads_key_and_sender(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Key and sender are read from the environment."""
        monkeypatch.setenv("CHRONODESK_SENDGRID_API_KEY", _API_KEY)
        monkeypatch.setenv("CHRONODESK_MAIL_FROM", "bericht@chronodesk.example")

        config = EmailConfig.from_env()

        assert config.api_key == _API_KEY
        assert config.sender == "bericht@chronodesk.example"
        assert config.delivery_enabled is True

    def test_key_requires_sender(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A key without a sender is a configuration error."""
        monkeypatch.setenv("CHRONODESK_SENDGRID_API_KEY", _API_KEY)
        with pytest.raises(ConfigurationError, match="CHRONODESK_MAIL_FROM"):
            EmailConfig.from_env()

    def test_sender_must_be_address(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Senders without ``@`` are rejected."""
        monkeypatch.setenv("CHRONODESK_MAIL_FROM", "chronodesk")
        with pytest.raises(ConfigurationError, match="an email address"):
            EmailConfig.from_env()


def _sendgrid(
    status: int,
) -> tuple[SendGridEmailTransport, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code=status)

    transport = SendGridEmailTransport(
        EmailConfig(api_key=_API_KEY, sender="bericht@chronodesk.example"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(_handler)),
    )
    return transport, requests


class TestSendGridEmailTransport:
    """Tests for ``SendGridEmailTransport``."""

    @pytest.mark.asyncio
    async def test_posts_v3_payload(self) -> None:
        """The payload names the sender under ``from``."""
        transport, requests = _sendgrid(202)

        await transport.send(_MESSAGE)

        request = requests[0]
        assert str(request.url) == "https://api.sendgrid.com/v3/mail/send"
        assert request.headers["Authorization"] == f"Bearer {_API_KEY}"
        assert json.loads(request.content) == {
            "personalizations": [{"to": [{"email": "office@acme.example"}]}],
            "subject": "Hallo",
            "content": [{"type": "text/plain", "value": "Grüße"}],
            "from": {"email": "bericht@chronodesk.example"},
        }

    @pytest.mark.asyncio
    async def test_rejection_raises(self) -> None:
        """Error statuses surface as EmailDeliveryError."""
        transport, _ = _sendgrid(401)

        with pytest.raises(EmailDeliveryError) as excinfo:
            await transport.send(_MESSAGE)

        assert excinfo.value.status_code == 401

    def test_requires_api_key(self) -> None:
        """The SendGrid transport cannot be built without a key."""
        with pytest.raises(ValueError, match="API key"):
            SendGridEmailTransport(EmailConfig())


@pytest.mark.asyncio
async def test_log_only_transport_records_and_logs() -> None:
    """Without delivery, messages are recorded and logged."""
    transport = LogOnlyEmailTransport()
    assert isinstance(transport, EmailTransport)

    with capture_logs("chronodesk.notify.transport") as capture:
        await transport.send(_MESSAGE)
        capture.wait_for_count(1)

    assert transport.sent == [_MESSAGE]
    assert "office@acme.example" in capture.records[0].message


@pytest.mark.asyncio
async def test_create_email_transport_selects_adapter() -> None:
    """Delivery settings decide which adapter is used."""
    assert isinstance(create_email_transport(EmailConfig()), LogOnlyEmailTransport)

    sendgrid = create_email_transport(
        EmailConfig(api_key=_API_KEY, sender="bericht@chronodesk.example")
    )
    assert isinstance(sendgrid, SendGridEmailTransport)
    await sendgrid.aclose()
