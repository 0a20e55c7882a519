# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email domain."""

from elemo.domains.email.service import RENEW_EMAIL_ADDRESS, EmailService

__all__ = ["EmailService", "RENEW_EMAIL_ADDRESS"]
