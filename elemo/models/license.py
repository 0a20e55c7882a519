# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""License model.

A license states who may run the platform, until when, which optional
features are unlocked and how many live resources of each quota-governed
kind may exist. The value is frozen for the lifetime of the process.

Example:
    >>> license = License(
    ...     id="123456789",
    ...     email="info@example.com",
    ...     organization="ACME Inc.",
    ...     expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
    ...     quotas={Quota.USERS: 10},
    ... )
    >>> license.within_threshold(Quota.USERS, 9)
    True
"""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from elemo.models.errors import InvalidLicenseError
from elemo.utils.datetime import ensure_utc, utc_now


class Quota(str, Enum):
    """Resource kinds whose live count is capped by the license."""

    DOCUMENTS = "documents"
    NAMESPACES = "namespaces"
    ORGANIZATIONS = "organizations"
    PROJECTS = "projects"
    ROLES = "roles"
    USERS = "users"


class License(BaseModel):
    """An immutable platform license.

    Attributes:
        id: License identifier.
        email: Contact address of the license holder.
        organization: Name of the licensed organization.
        expires_at: Expiry instant in UTC.
        features: Enabled feature flags.
        quotas: Maximum live count per quota.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    organization: str
    expires_at: datetime
    features: frozenset[str] = Field(default_factory=frozenset)
    quotas: dict[Quota, int] = Field(default_factory=dict)

    @field_validator("expires_at")
    @classmethod
    def _expires_at_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("quotas")
    @classmethod
    def _quotas_unsigned(cls, value: dict[Quota, int]) -> dict[Quota, int]:
        for quota, limit in value.items():
            if limit < 0:
                raise ValueError(f"quota {quota.value} must not be negative")
        return value

    def expired(self, now: datetime | None = None) -> bool:
        """Check whether the license has expired."""
        return (now or utc_now()) >= self.expires_at

    def expires_within(self, window: timedelta, now: datetime | None = None) -> bool:
        """Check whether the license expires within a time window from now."""
        return self.expires_at - (now or utc_now()) <= window

    def has_feature(self, feature: str) -> bool:
        return feature in self.features

    def within_threshold(self, quota: Quota, count: int) -> bool:
        """Check whether ``count`` live resources leave room for one more.

        Unknown quotas are never within threshold.
        """
        limit = self.quotas.get(quota)
        if limit is None:
            return False
        return count < limit

    def ensure_valid(self) -> None:
        """Check that the license is complete.

        Raises:
            InvalidLicenseError: If the holder details or features are
                missing, or a quota is missing or zero.
        """
        if not self.id or not self.email or not self.organization:
            raise InvalidLicenseError("license holder details are missing")
        if not self.features:
            raise InvalidLicenseError("license has no features")
        for quota in Quota:
            if self.quotas.get(quota, 0) <= 0:
                raise InvalidLicenseError(f"license quota {quota.value} is missing")
