# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""License domain: license evaluation and loading."""

from elemo.domains.license.loader import LicenseLoadError, load_license
from elemo.domains.license.service import (
    LICENSE_READER_ROLES,
    QUOTA_COUNTERS,
    LicenseService,
)

__all__ = [
    "LICENSE_READER_ROLES",
    "LicenseLoadError",
    "LicenseService",
    "QUOTA_COUNTERS",
    "load_license",
]
