# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared dependency bundle and option protocol of every service.

Services are configured with option callables produced by the ``with_*``
helpers below. Construction runs in three steps:

1. defaults are set (a structlog logger and a no-op tracer);
2. options are applied in order, the first failing option aborts;
3. the concrete service checks the collaborators it cannot work without.

Example:
    >>> service = UserService(
    ...     with_user_repository(user_repo),
    ...     with_permission_repository(permission_repo),
    ...     with_license_service(license_service),
    ...     with_tracer(get_tracer("elemo")),
    ... )

Each missing collaborator has its own error class, so a misconfigured
service fails loudly with a precise reason.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import Tracer

from elemo.core.errors import (
    LicenseExpiredError,
    NoEmailServiceError,
    NoLicenseServiceError,
    NoLoggerError,
    NoOrganizationRepositoryError,
    NoPermissionRepositoryError,
    NoPermissionServiceError,
    NoTracerError,
    NoUserRepositoryError,
    OperationError,
    QuotaExceededError,
)
from elemo.core.tracing import default_tracer
from elemo.models import Quota
from elemo.repositories import (
    OrganizationRepository,
    PermissionRepository,
    UserRepository,
)
from elemo.utils.logging import get_logger

if TYPE_CHECKING:
    from elemo.core.context import RequestContext
    from elemo.domains.email.service import EmailService
    from elemo.domains.license.service import LicenseService
    from elemo.domains.permission.service import PermissionService

Option = Callable[["BaseService"], None]


class BaseService:
    """Base class holding the collaborators shared by all services.

    Attributes:
        logger: Structured logger.
        tracer: OpenTelemetry tracer used by ``@traced`` operations.
        permission_repo: Permission store.
        user_repo: User store.
        organization_repo: Organization store.
        license_service: License policy collaborator.
        permission_service: High-level permission collaborator.
        email_service: Transactional email collaborator.
    """

    def __init__(self, *opts: Option) -> None:
        self.logger: Any = get_logger(type(self).__module__)
        self.tracer: Tracer = default_tracer()
        self.permission_repo: PermissionRepository | None = None
        self.user_repo: UserRepository | None = None
        self.organization_repo: OrganizationRepository | None = None
        self.license_service: "LicenseService | None" = None
        self.permission_service: "PermissionService | None" = None
        self.email_service: "EmailService | None" = None

        for opt in opts:
            opt(self)

    def _resolve_permission_service(self) -> "PermissionService | None":
        """Return the permission service, building one from the repository.

        A service configured with only a permission repository gets a
        ``PermissionService`` sharing its logger and tracer.
        """
        if self.permission_service is None and self.permission_repo is not None:
            from elemo.domains.permission.service import PermissionService

            self.permission_service = PermissionService(
                with_permission_repository(self.permission_repo),
                with_logger(self.logger),
                with_tracer(self.tracer),
            )
        return self.permission_service

    async def _ensure_license_active(
        self,
        ctx: "RequestContext",
        error: type[OperationError],
    ) -> None:
        """Raise ``error`` if the license has expired or cannot be checked."""
        try:
            expired = await self.license_service.expired(ctx)
        except Exception as e:
            raise error() from e
        if expired:
            raise error() from LicenseExpiredError()

    async def _ensure_within_quota(
        self,
        ctx: "RequestContext",
        quota: Quota,
        error: type[OperationError],
    ) -> None:
        """Raise ``error`` if one more resource would exceed the quota."""
        try:
            within = await self.license_service.within_threshold(ctx, quota)
        except Exception as e:
            raise error() from e
        if not within:
            raise error() from QuotaExceededError()


def with_logger(logger: Any) -> Option:
    """Set the logger of a service.

    Raises:
        NoLoggerError: When applied with no logger.
    """

    def apply(service: BaseService) -> None:
        if logger is None:
            raise NoLoggerError()
        service.logger = logger

    return apply


def with_tracer(tracer: Tracer | None) -> Option:
    """Set the tracer of a service.

    Raises:
        NoTracerError: When applied with no tracer.
    """

    def apply(service: BaseService) -> None:
        if tracer is None:
            raise NoTracerError()
        service.tracer = tracer

    return apply


def with_permission_repository(repo: PermissionRepository | None) -> Option:
    def apply(service: BaseService) -> None:
        if repo is None:
            raise NoPermissionRepositoryError()
        service.permission_repo = repo

    return apply


def with_user_repository(repo: UserRepository | None) -> Option:
    def apply(service: BaseService) -> None:
        if repo is None:
            raise NoUserRepositoryError()
        service.user_repo = repo

    return apply


def with_organization_repository(repo: OrganizationRepository | None) -> Option:
    def apply(service: BaseService) -> None:
        if repo is None:
            raise NoOrganizationRepositoryError()
        service.organization_repo = repo

    return apply


def with_license_service(license_service: "LicenseService | None") -> Option:
    def apply(service: BaseService) -> None:
        if license_service is None:
            raise NoLicenseServiceError()
        service.license_service = license_service

    return apply


def with_permission_service(permission_service: "PermissionService | None") -> Option:
    def apply(service: BaseService) -> None:
        if permission_service is None:
            raise NoPermissionServiceError()
        service.permission_service = permission_service

    return apply


def with_email_service(email_service: "EmailService | None") -> Option:
    def apply(service: BaseService) -> None:
        if email_service is None:
            raise NoEmailServiceError()
        service.email_service = email_service

    return apply
