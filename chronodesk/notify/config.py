"""Configuration for outbound email."""

from __future__ import annotations

import dataclasses as dc
import os

from chronodesk.errors import ConfigurationError

DEFAULT_MAIL_FROM = "noreply@chronodesk.invalid"
SENDGRID_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"


@dc.dataclass(frozen=True, slots=True)
class EmailConfig:
    """Email provider settings.

    Attributes
    ----------
    api_key
        SendGrid API key. When ``None`` messages are only logged.
    sender
        ``From`` address; must be a verified SendGrid sender.
    endpoint
        SendGrid v3 mail send URL.
    timeout_s
        HTTP request timeout in seconds.

    """

    api_key: str | None = None
    sender: str = DEFAULT_MAIL_FROM
    endpoint: str = SENDGRID_ENDPOINT
    timeout_s: float = 30.0

    @property
    def delivery_enabled(self) -> bool:
        """Return whether messages are actually sent."""
        return self.api_key is not None

    @classmethod
    def from_env(cls) -> EmailConfig:
        """Create configuration from environment variables.

        Reads ``CHRONODESK_SENDGRID_API_KEY`` (optional) and
        ``CHRONODESK_MAIL_FROM``. A sender is required once an API key is
        set.

        Raises
        ------
        ConfigurationError
            If an API key is configured without a valid sender address.

        """
        api_key = os.environ.get("CHRONODESK_SENDGRID_API_KEY", "").strip() or None
        sender = os.environ.get("CHRONODESK_MAIL_FROM", "").strip()
        if not sender:
            if api_key is not None:
                raise ConfigurationError.missing_env("CHRONODESK_MAIL_FROM")
            return cls(api_key=None)
        if "@" not in sender:
            raise ConfigurationError.invalid_env(
                "CHRONODESK_MAIL_FROM", sender, "an email address"
            )
        return cls(api_key=api_key, sender=sender)
