# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Organization domain."""

from elemo.domains.organization.service import (
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_OWNER,
    OrganizationService,
    combine_roles,
    compute_virtual_roles,
    names_from_email,
)

__all__ = [
    "OrganizationService",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "ROLE_OWNER",
    "combine_roles",
    "compute_virtual_roles",
    "names_from_email",
]
