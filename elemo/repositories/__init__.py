# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repository contracts and repository errors."""

from elemo.repositories.base import (
    LicenseRepository,
    OrganizationRepository,
    PermissionRepository,
    Pingable,
    UserRepository,
)
from elemo.repositories.errors import (
    AlreadyExistsError,
    NotFoundError,
    PermissionReadError,
    RepositoryError,
    ResourceCountReadError,
)

__all__ = [
    "AlreadyExistsError",
    "LicenseRepository",
    "NotFoundError",
    "OrganizationRepository",
    "PermissionReadError",
    "PermissionRepository",
    "Pingable",
    "RepositoryError",
    "ResourceCountReadError",
    "UserRepository",
]
