# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email service for transactional messages.

Four messages are supported, each bound to a template under
``<templates_dir>/email/`` and a typed data record:

| Operation                          | Template                     |
|------------------------------------|------------------------------|
| send_auth_password_reset_email     | password-reset.html          |
| send_organization_invitation_email | organization-invite.html     |
| send_system_license_expiry_email   | license-expiry-reminder.html |
| send_user_welcome_email            | user-welcome.html            |

Links in the emails are ``https://<hostname>/<path>`` URLs built from the
SMTP hostname setting.
"""

from datetime import datetime
from pathlib import Path

from elemo.core.config.settings import SMTPSettings
from elemo.core.context import RequestContext
from elemo.core.errors import EmailSendError, NoSMTPClientError
from elemo.core.tracing import traced
from elemo.domains.base import BaseService, Option
from elemo.infrastructure.email import (
    EmailSender,
    LicenseExpiryTemplateData,
    OrganizationInviteTemplateData,
    PasswordResetTemplateData,
    TemplateData,
    UserWelcomeTemplateData,
    new_template,
)
from elemo.models import Organization, User
from elemo.utils.datetime import format_rfc850
from elemo.utils.url import build_https_url

RENEW_EMAIL_ADDRESS = "renew@elemo.app"
LOGIN_PATH = "/auth/login"

PASSWORD_RESET_TEMPLATE = "email/password-reset.html"
ORGANIZATION_INVITE_TEMPLATE = "email/organization-invite.html"
LICENSE_EXPIRY_TEMPLATE = "email/license-expiry-reminder.html"
USER_WELCOME_TEMPLATE = "email/user-welcome.html"


class EmailService(BaseService):
    """Service sending templated transactional emails.

    Example:
        >>> service = EmailService(SMTPClient(settings.smtp), settings.smtp)
        >>> await service.send_user_welcome_email(ctx, user)
    """

    def __init__(
        self,
        sender: EmailSender | None,
        smtp_settings: SMTPSettings | None = None,
        *opts: Option,
    ) -> None:
        super().__init__(*opts)

        if sender is None:
            raise NoSMTPClientError()

        self.sender = sender
        self.smtp_settings = smtp_settings or SMTPSettings()

    @property
    def templates_dir(self) -> Path:
        return Path(self.smtp_settings.templates_dir)

    def _url(self, path: str = "") -> str:
        return build_https_url(self.smtp_settings.hostname, path)

    async def _send(
        self,
        ctx: RequestContext,
        template_name: str,
        to: str,
        build_data: type[TemplateData],
        **fields: str,
    ) -> None:
        try:
            data = build_data(
                hostname=self.smtp_settings.hostname,
                support_email=self.smtp_settings.support_address,
                **fields,
            )
            template = new_template(self.templates_dir / template_name, data)
            await self.sender.send_email(ctx, data.subject, to, template)
        except Exception as e:
            raise EmailSendError() from e

    @traced
    async def send_auth_password_reset_email(
        self,
        ctx: RequestContext,
        reset_path: str,
        user: User,
    ) -> None:
        """Send a password reset link to a user.

        Args:
            ctx: Request context.
            reset_path: Path of the reset page, including its token.
            user: Recipient.

        Raises:
            EmailSendError: If the email cannot be rendered or sent.
        """
        await self._send(
            ctx,
            PASSWORD_RESET_TEMPLATE,
            user.email,
            PasswordResetTemplateData,
            subject="Reset your password",
            first_name=user.first_name,
            last_name=user.last_name,
            password_reset_url=self._url(reset_path),
        )

    @traced
    async def send_organization_invitation_email(
        self,
        ctx: RequestContext,
        path: str,
        organization: Organization,
        user: User,
    ) -> None:
        """Invite a user to join an organization.

        Raises:
            EmailSendError: If the email cannot be rendered or sent.
        """
        await self._send(
            ctx,
            ORGANIZATION_INVITE_TEMPLATE,
            user.email,
            OrganizationInviteTemplateData,
            subject=f"You have been invited to join {organization.name}",
            first_name=user.first_name,
            last_name=user.last_name,
            organization_name=organization.name,
            invitation_url=self._url(path),
        )

    @traced
    async def send_system_license_expiry_email(
        self,
        ctx: RequestContext,
        license_id: str,
        email: str,
        organization: str,
        expires_at: datetime,
    ) -> None:
        """Remind the license holder that the license is about to expire.

        Raises:
            EmailSendError: If the email cannot be rendered or sent.
        """
        await self._send(
            ctx,
            LICENSE_EXPIRY_TEMPLATE,
            email,
            LicenseExpiryTemplateData,
            subject=f"Your license for {organization} is about to expire",
            license_id=license_id,
            license_email=email,
            license_organization=organization,
            license_expires_at=format_rfc850(expires_at),
            server_url=self._url(),
            renew_email=RENEW_EMAIL_ADDRESS,
        )

    @traced
    async def send_user_welcome_email(self, ctx: RequestContext, user: User) -> None:
        """Welcome a new user.

        Raises:
            EmailSendError: If the email cannot be rendered or sent.
        """
        await self._send(
            ctx,
            USER_WELCOME_TEMPLATE,
            user.email,
            UserWelcomeTemplateData,
            subject=f"Welcome to {self.smtp_settings.hostname}",
            first_name=user.first_name,
            last_name=user.last_name,
            login_url=self._url(LOGIN_PATH),
        )
