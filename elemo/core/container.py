# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wiring of the service layer.

``build_services`` constructs every service from the repositories provided
by the storage layer and shares one logger and one tracer between them.

Example:
    >>> settings = get_settings()
    >>> setup_logging(settings)
    >>> setup_telemetry(settings.otel)
    >>> services = build_services(
    ...     settings=settings,
    ...     license_repo=license_repo,
    ...     permission_repo=permission_repo,
    ...     user_repo=user_repo,
    ...     organization_repo=organization_repo,
    ...     resources={HealthCheckComponent.GRAPH_DATABASE: graph_db},
    ...     tracer=get_tracer(),
    ... )
    >>> await services.user.get(ctx, user_id)
"""

import platform
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from opentelemetry.trace import Tracer

from elemo.core.config.settings import Settings
from elemo.domains.base import (
    Option,
    with_email_service,
    with_license_service,
    with_logger,
    with_organization_repository,
    with_permission_repository,
    with_permission_service,
    with_tracer,
    with_user_repository,
)
from elemo.domains.email import EmailService
from elemo.domains.license import LicenseService, load_license
from elemo.domains.organization import OrganizationService
from elemo.domains.permission import PermissionService
from elemo.domains.system import SystemService
from elemo.domains.user import UserService
from elemo.infrastructure.email import EmailSender, SMTPClient
from elemo.models import HealthCheckComponent, License, VersionInfo
from elemo.repositories import (
    LicenseRepository,
    OrganizationRepository,
    PermissionRepository,
    Pingable,
    UserRepository,
)


@dataclass(frozen=True)
class ServiceContainer:
    """All services of the application layer."""

    permission: PermissionService
    license: LicenseService
    email: EmailService
    user: UserService
    organization: OrganizationService
    system: SystemService


def version_info_from_settings(settings: Settings) -> VersionInfo:
    return VersionInfo(
        version=settings.version,
        commit=settings.commit,
        date=settings.build_date,
        python_version=platform.python_version(),
    )


def build_services(
    *,
    settings: Settings,
    license_repo: LicenseRepository,
    permission_repo: PermissionRepository,
    user_repo: UserRepository,
    organization_repo: OrganizationRepository,
    resources: Mapping[str, Pingable],
    license: License | None = None,
    sender: EmailSender | None = None,
    version: VersionInfo | None = None,
    tracer: Tracer | None = None,
    logger: Any = None,
) -> ServiceContainer:
    """Construct and wire every service.

    Args:
        settings: Application settings.
        license_repo: Counters of quota-governed resources.
        permission_repo: Permission store.
        user_repo: User store.
        organization_repo: Organization store.
        resources: Resources probed by the health check, in addition to
            the license which is always probed.
        license: The license; loaded from ``settings.license.path`` when
            omitted.
        sender: Email sender; an ``SMTPClient`` when omitted.
        version: Disclosed build identifiers; taken from settings when
            omitted.
        tracer: Tracer shared by all services.
        logger: Logger shared by all services.

    Returns:
        The wired services.

    Raises:
        LicenseLoadError: If the license must be loaded and cannot be.
        MissingDependencyError: If a collaborator is missing.
    """
    observability: list[Option] = []
    if tracer is not None:
        observability.append(with_tracer(tracer))
    if logger is not None:
        observability.append(with_logger(logger))

    if license is None:
        license = load_license(settings.license.path)

    if sender is None:
        sender = SMTPClient(settings.smtp, tracer=tracer)

    permission_service = PermissionService(
        with_permission_repository(permission_repo),
        *observability,
    )
    email_service = EmailService(sender, settings.smtp, *observability)
    license_service = LicenseService(
        license,
        license_repo,
        with_permission_service(permission_service),
        with_email_service(email_service),
        *observability,
    )
    user_service = UserService(
        with_user_repository(user_repo),
        with_permission_service(permission_service),
        with_license_service(license_service),
        *observability,
    )
    organization_service = OrganizationService(
        with_organization_repository(organization_repo),
        with_permission_service(permission_service),
        with_license_service(license_service),
        with_user_repository(user_repo),
        with_email_service(email_service),
        *observability,
    )
    system_service = SystemService(
        {**resources, HealthCheckComponent.LICENSE: license_service},
        version or version_info_from_settings(settings),
        *observability,
    )

    return ServiceContainer(
        permission=permission_service,
        license=license_service,
        email=email_service,
        user=user_service,
        organization=organization_service,
        system=system_service,
    )
