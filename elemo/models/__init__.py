# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain models shared by repositories and services."""

from elemo.models.errors import (
    InvalidIDError,
    InvalidLicenseError,
    InvalidOrganizationDetailsError,
    InvalidPermissionDetailsError,
    InvalidUserDetailsError,
    ModelValidationError,
)
from elemo.models.id import ID, ResourceType, validate_id
from elemo.models.license import License, Quota
from elemo.models.organization import (
    Organization,
    OrganizationMember,
    OrganizationStatus,
)
from elemo.models.permission import Permission, PermissionKind, SystemRole
from elemo.models.system import HealthCheckComponent, HealthStatus, VersionInfo
from elemo.models.user import UNUSABLE_PASSWORD, User, UserStatus

__all__ = [
    "HealthCheckComponent",
    "HealthStatus",
    "ID",
    "InvalidIDError",
    "InvalidLicenseError",
    "InvalidOrganizationDetailsError",
    "InvalidPermissionDetailsError",
    "InvalidUserDetailsError",
    "License",
    "ModelValidationError",
    "Organization",
    "OrganizationMember",
    "OrganizationStatus",
    "Permission",
    "PermissionKind",
    "Quota",
    "ResourceType",
    "SystemRole",
    "UNUSABLE_PASSWORD",
    "User",
    "UserStatus",
    "VersionInfo",
    "validate_id",
]
