# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SMTP email sender using aiosmtplib.

The client composes an HTML message from a rendered template and delivers
it through the configured SMTP server.

Configuration (via environment variables, see ``SMTPSettings``):
- SMTP_HOST: SMTP server hostname
- SMTP_PORT: SMTP server port (default: 587)
- SMTP_USERNAME: SMTP authentication username
- SMTP_PASSWORD: SMTP authentication password
- SMTP_USE_TLS: Use implicit TLS (default: false)
- SMTP_START_TLS: Use STARTTLS (default: true)
- SMTP_FROM_ADDRESS: Sender address
- SMTP_REPLY_TO_ADDRESS: Reply-To address
"""

from email.message import EmailMessage
from typing import TYPE_CHECKING, Protocol

import aiosmtplib
from opentelemetry.trace import Tracer

from elemo.core.config.settings import SMTPSettings
from elemo.core.tracing import default_tracer
from elemo.infrastructure.email.template import Template

if TYPE_CHECKING:
    from elemo.core.context import RequestContext


class EmailComposeError(Exception):
    """Raised when an email cannot be composed."""


class EmailDeliveryError(Exception):
    """Raised when the SMTP server rejects or fails to accept an email."""


class EmailSender(Protocol):
    """Anything able to deliver a templated email."""

    async def send_email(
        self,
        ctx: "RequestContext",
        subject: str,
        to: str,
        template: Template,
    ) -> None: ...


class SMTPClient:
    """Email sender backed by an SMTP server.

    Example:
        >>> client = SMTPClient(get_settings().smtp)
        >>> await client.send_email(ctx, "Welcome", "ada@example.com", template)
    """

    def __init__(self, settings: SMTPSettings, tracer: Tracer | None = None) -> None:
        self.settings = settings
        self.tracer = tracer or default_tracer()

    def compose_message(self, subject: str, to: str, template: Template) -> EmailMessage:
        """Build the MIME message of an email.

        Raises:
            EmailComposeError: If the template cannot be rendered.
        """
        try:
            html_body = template.render()
        except Exception as e:
            raise EmailComposeError(f"cannot compose email to {to}") from e

        message = EmailMessage()
        message["From"] = self.settings.from_address
        message["To"] = to
        message["Subject"] = subject
        message["Reply-To"] = self.settings.reply_to_address
        message["Auto-Submitted"] = "auto-generated"
        message["Precedence"] = "bulk"
        message.set_content(html_body, subtype="html", charset="utf-8", cte="8bit")

        return message

    async def send_email(
        self,
        ctx: "RequestContext",
        subject: str,
        to: str,
        template: Template,
    ) -> None:
        """Compose and deliver an email.

        Raises:
            EmailComposeError: If the template cannot be rendered.
            EmailDeliveryError: If the SMTP exchange fails.
        """
        with self.tracer.start_as_current_span("smtp.SMTPClient/send_email"):
            message = self.compose_message(subject, to, template)

            settings = self.settings
            try:
                await aiosmtplib.send(
                    message,
                    hostname=settings.host,
                    port=settings.port,
                    username=settings.username or None,
                    password=settings.password.get_secret_value() or None,
                    use_tls=settings.use_tls,
                    start_tls=settings.start_tls and not settings.use_tls,
                    timeout=settings.timeout,
                )
            except aiosmtplib.SMTPException as e:
                raise EmailDeliveryError(f"cannot deliver email to {to}: {e}") from e
