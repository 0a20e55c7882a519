# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""License document loader.

A license is distributed as a YAML document:

    id: 123456789
    email: info@example.com
    organization: ACME Inc.
    expires_at: 2030-01-01T00:00:00Z
    features:
      - components
    quotas:
      documents: 100
      namespaces: 10
      organizations: 1
      projects: 20
      roles: 10
      users: 25

Example:
    >>> license = load_license(Path("config/license.yaml"))
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from elemo.models import InvalidLicenseError, License


class LicenseLoadError(Exception):
    """Raised when a license document cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load license '{path}': {reason}")


def load_license(path: Path) -> License:
    """Load and validate a license document.

    Args:
        path: Path to the YAML license document.

    Returns:
        The validated license.

    Raises:
        LicenseLoadError: If the file is missing or unreadable, is not a
            YAML mapping, or does not describe a complete license.
    """
    if not path.is_file():
        raise LicenseLoadError(path, "File does not exist")

    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LicenseLoadError(path, f"Cannot read file: {e}") from e
    except yaml.YAMLError as e:
        raise LicenseLoadError(path, f"Invalid YAML syntax: {e}") from e

    if not isinstance(parsed, dict):
        raise LicenseLoadError(
            path, f"YAML root must be a mapping, got {type(parsed).__name__}"
        )

    # YAML reads numeric ids as integers
    if "id" in parsed:
        parsed["id"] = str(parsed["id"])

    try:
        license = License.model_validate(parsed)
        license.ensure_valid()
    except (ValidationError, InvalidLicenseError) as e:
        raise LicenseLoadError(path, str(e)) from e

    return license
