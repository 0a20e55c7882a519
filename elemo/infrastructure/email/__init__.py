# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email templates and SMTP delivery."""

from elemo.infrastructure.email.smtp import (
    EmailComposeError,
    EmailDeliveryError,
    EmailSender,
    SMTPClient,
)
from elemo.infrastructure.email.template import (
    LicenseExpiryTemplateData,
    OrganizationInviteTemplateData,
    PasswordResetTemplateData,
    Template,
    TemplateData,
    TemplateInvalidError,
    TemplateRenderError,
    UserWelcomeTemplateData,
    new_template,
)

__all__ = [
    "EmailComposeError",
    "EmailDeliveryError",
    "EmailSender",
    "LicenseExpiryTemplateData",
    "OrganizationInviteTemplateData",
    "PasswordResetTemplateData",
    "SMTPClient",
    "Template",
    "TemplateData",
    "TemplateInvalidError",
    "TemplateRenderError",
    "UserWelcomeTemplateData",
    "new_template",
]
