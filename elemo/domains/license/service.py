# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""License service for license validity, features and quotas.

The license is loaded once at startup and never changes while the process
runs. Other services consult this one before creating quota-governed
resources:

    >>> if not await license_service.within_threshold(ctx, Quota.USERS):
    ...     raise UserCreateError() from QuotaExceededError()

The service is also ``Pingable``: an expired license makes the system
health check report the license as unhealthy.
"""

from datetime import timedelta

from elemo.core.context import RequestContext, ctx_user_id
from elemo.core.errors import (
    LicenseGetError,
    LicenseInvalidError,
    LicenseReminderError,
    NoEmailServiceError,
    NoLicenseError,
    NoLicenseRepositoryError,
    NoPermissionError,
    NoPermissionRepositoryError,
    NoUserError,
    QuotaInvalidError,
    QuotaUsageGetError,
)
from elemo.core.tracing import traced
from elemo.domains.base import BaseService, Option
from elemo.models import License, Quota, SystemRole
from elemo.repositories import LicenseRepository

# Counter of the license repository backing each quota
QUOTA_COUNTERS: dict[Quota, str] = {
    Quota.DOCUMENTS: "document_count",
    Quota.NAMESPACES: "namespace_count",
    Quota.ORGANIZATIONS: "active_organization_count",
    Quota.PROJECTS: "project_count",
    Quota.ROLES: "role_count",
    Quota.USERS: "active_user_count",
}

# System roles allowed to read the license
LICENSE_READER_ROLES = (SystemRole.OWNER, SystemRole.ADMIN, SystemRole.SUPPORT)

DEFAULT_REMINDER_WINDOW = timedelta(days=30)


class LicenseService(BaseService):
    """Service evaluating the platform license.

    Requires a license, a license repository and a permission repository
    (or permission service). An email service is optional and only used
    for expiry reminders.

    Example:
        >>> service = LicenseService(
        ...     license,
        ...     license_repo,
        ...     with_permission_repository(permission_repo),
        ... )
        >>> await service.expired(ctx)
        False
    """

    def __init__(
        self,
        license: License | None,
        license_repo: LicenseRepository | None,
        *opts: Option,
    ) -> None:
        super().__init__(*opts)

        if license is None:
            raise NoLicenseError()

        if license_repo is None:
            raise NoLicenseRepositoryError()

        if self.permission_repo is None and self.permission_service is None:
            raise NoPermissionRepositoryError()

        self._license = license
        self.license_repo = license_repo
        self._resolve_permission_service()

    @traced
    async def expired(self, ctx: RequestContext) -> bool:
        """Check whether the license has expired."""
        return self._license.expired()

    @traced
    async def has_feature(self, ctx: RequestContext, feature: str) -> bool:
        """Check whether the license enables a feature."""
        return self._license.has_feature(feature)

    @traced
    async def within_threshold(self, ctx: RequestContext, quota: Quota | str) -> bool:
        """Check whether one more resource of a quota fits in the license.

        Args:
            ctx: Request context.
            quota: Quota to evaluate.

        Returns:
            True if the live count is below the licensed maximum.

        Raises:
            QuotaInvalidError: If the quota is unknown. The repository is
                not consulted.
            QuotaUsageGetError: If the live count cannot be read.
        """
        try:
            counter = QUOTA_COUNTERS[Quota(quota)]
        except (ValueError, KeyError) as e:
            raise QuotaInvalidError(f"invalid quota: {quota!r}") from e

        try:
            count = await getattr(self.license_repo, counter)()
        except Exception as e:
            raise QuotaUsageGetError() from e

        return self._license.within_threshold(Quota(quota), count)

    @traced
    async def get_license(self, ctx: RequestContext) -> License:
        """Return a copy of the license.

        Only system owners, admins and support staff may read it.

        Raises:
            LicenseGetError: If there is no principal or it lacks the role.
        """
        if ctx_user_id(ctx) is None:
            raise LicenseGetError() from NoUserError()

        if not await self.permission_service.ctx_user_has_system_role(ctx, *LICENSE_READER_ROLES):
            raise LicenseGetError() from NoPermissionError()

        return self._license.model_copy(deep=True)

    @traced
    async def ping(self, ctx: RequestContext) -> None:
        """Raise if the license is no longer valid.

        Raises:
            LicenseInvalidError: If the license has expired.
        """
        if await self.expired(ctx):
            raise LicenseInvalidError()

    @traced
    async def send_expiry_reminder(
        self,
        ctx: RequestContext,
        window: timedelta = DEFAULT_REMINDER_WINDOW,
    ) -> bool:
        """Email the license holder when the license is about to expire.

        Args:
            ctx: Request context.
            window: How long before expiry reminders start.

        Returns:
            True if a reminder was sent, False if expiry is further away.

        Raises:
            LicenseReminderError: If no email service is configured or the
                email cannot be sent.
        """
        if not self._license.expires_within(window):
            return False

        if self.email_service is None:
            raise LicenseReminderError() from NoEmailServiceError()

        try:
            await self.email_service.send_system_license_expiry_email(
                ctx,
                self._license.id,
                self._license.email,
                self._license.organization,
                self._license.expires_at,
            )
        except Exception as e:
            raise LicenseReminderError() from e

        return True
