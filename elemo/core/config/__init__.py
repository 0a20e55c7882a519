# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package.

Example:
    >>> from elemo.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.environment
    'development'
"""

from elemo.core.config.settings import (
    LicenseSettings,
    OTelSettings,
    Settings,
    SMTPSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LicenseSettings",
    "OTelSettings",
    "SMTPSettings",
    "Settings",
    "clear_settings_cache",
    "get_settings",
]
