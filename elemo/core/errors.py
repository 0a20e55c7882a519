# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy of the service layer.

Every failure raised by a service operation is an exception whose class
names the stage where it happened (for example ``UserUpdateError``) and
whose ``__cause__`` is the underlying error:

    >>> try:
    ...     await user_service.update(ctx, user_id, {})
    ... except UserUpdateError as exc:
    ...     has_error_kind(exc, NoPatchDataError)
    True

Callers may therefore match either on the stage (``except UserUpdateError``)
or on the cause (``has_error_kind(exc, NotFoundError)``).
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    message = "service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    def __str__(self) -> str:
        text = super().__str__()
        if self.__cause__ is not None:
            return f"{text}: {self.__cause__}"
        return text


def has_error_kind(error: BaseException | None, kind: type[BaseException]) -> bool:
    """Check whether an error or any error in its cause chain is of a kind.

    Args:
        error: The raised error.
        kind: Exception class to look for.

    Returns:
        True if ``error`` or one of its causes is an instance of ``kind``.
    """
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, kind):
            return True
        seen.add(id(error))
        error = error.__cause__
    return False




# =============================================================================
# Construction
# =============================================================================


class MissingDependencyError(ServiceError):
    """Raised when a service is constructed without a required collaborator."""

    message = "missing dependency"


class NoLoggerError(MissingDependencyError):
    """Raised when a ``None`` logger is passed to a service."""

    message = "no logger provided"


class NoTracerError(MissingDependencyError):
    """Raised when a ``None`` tracer is passed to a service."""

    message = "no tracer provided"


class NoPermissionRepositoryError(MissingDependencyError):
    message = "no permission repository provided"


class NoUserRepositoryError(MissingDependencyError):
    message = "no user repository provided"


class NoOrganizationRepositoryError(MissingDependencyError):
    message = "no organization repository provided"


class NoLicenseRepositoryError(MissingDependencyError):
    message = "no license repository provided"


class NoLicenseServiceError(MissingDependencyError):
    message = "no license service provided"


class NoPermissionServiceError(MissingDependencyError):
    """Raised when neither a permission service nor a permission repository is set."""

    message = "no permission service provided"


class NoEmailServiceError(MissingDependencyError):
    """Raised when a service that sends email has no email service."""

    message = "no email service provided"


class NoSMTPClientError(MissingDependencyError):
    """Raised when the email service is built without a sender."""

    message = "no SMTP client provided"


class NoLicenseError(MissingDependencyError):
    message = "no license provided"


class NoVersionInfoError(MissingDependencyError):
    message = "no version info provided"


class NoResourcesError(MissingDependencyError):
    """Raised when the system service has no resource to check."""

    message = "no resources provided"


# =============================================================================
# Authorization
# =============================================================================


class AuthorizationError(ServiceError):
    """Raised when the request principal may not perform an operation."""

    message = "not authorized"


class NoUserError(AuthorizationError):
    """Raised when the request context carries no principal."""

    message = "no user provided"


class NoPermissionError(AuthorizationError):
    """Raised when the principal lacks the permission or role required."""

    message = "no permission"


# =============================================================================
# Validation
# =============================================================================


class InvalidInputError(ServiceError):
    """Raised when an operation receives malformed input."""

    message = "invalid input"


class InvalidEmailError(InvalidInputError):
    message = "invalid email address"


class InvalidPaginationParamsError(InvalidInputError):
    """Raised when the offset is negative or the limit is not positive."""

    message = "invalid pagination parameters"


class NoPatchDataError(InvalidInputError):
    """Raised when an update receives an empty patch."""

    message = "no patch data provided"


class OrganizationMemberAlreadyExistsError(InvalidInputError):
    """Raised when inviting a user who is already a member."""

    message = "user is already a member of the organization"


class InvalidUserStatusError(InvalidInputError):
    """Raised when inviting a user who is neither active nor pending."""

    message = "invalid user status"


# =============================================================================
# Operations
# =============================================================================


class OperationError(ServiceError):
    """Raised when a service operation fails; the cause tells why."""

    message = "operation failed"


class UserCreateError(OperationError):
    message = "failed to create user"


class UserGetError(OperationError):
    message = "failed to get user"


class UserGetAllError(OperationError):
    message = "failed to get users"


class UserUpdateError(OperationError):
    message = "failed to update user"


class UserDeleteError(OperationError):
    """Raised when a user cannot be deleted, softly or for good."""

    message = "failed to delete user"


class OrganizationCreateError(OperationError):
    message = "failed to create organization"


class OrganizationGetError(OperationError):
    message = "failed to get organization"


class OrganizationGetAllError(OperationError):
    message = "failed to get organizations"


class OrganizationUpdateError(OperationError):
    message = "failed to update organization"


class OrganizationDeleteError(OperationError):
    message = "failed to delete organization"


class OrganizationMemberAddError(OperationError):
    message = "failed to add member to organization"


class OrganizationMembersGetError(OperationError):
    message = "failed to get members of organization"


class OrganizationMemberRemoveError(OperationError):
    message = "failed to remove member from organization"


class OrganizationMemberInviteError(OperationError):
    """Raised when an invitation cannot be recorded or delivered."""

    message = "failed to invite member to organization"


class OrganizationInviteRevokeError(OperationError):
    message = "failed to revoke organization invitation"


class PermissionCreateError(OperationError):
    message = "failed to create permission"


class PermissionGetBySubjectAndTargetError(OperationError):
    message = "failed to get permission by subject and target"


class PermissionHasPermissionError(OperationError):
    """Raised when a permission lookup fails; ``ctx_user_*`` checks never raise it."""

    message = "failed to check if permission has permission"


class PermissionHasSystemRoleError(OperationError):
    message = "failed to check if permission has system role"


class PermissionDeleteError(OperationError):
    message = "failed to delete permission"


class EmailSendError(OperationError):
    """Raised when an email cannot be rendered or handed to the sender."""

    message = "failed to send email"


class LicenseGetError(OperationError):
    message = "failed to get license"


class LicenseInvalidError(OperationError):
    """Raised by the license health check when the license expired."""

    message = "license is invalid"


class LicenseExpiredError(OperationError):
    """Raised as the cause when a mutating operation meets an expired license."""

    message = "license expired"


class LicenseReminderError(OperationError):
    message = "failed to send license expiry reminder"


class QuotaInvalidError(OperationError):
    """Raised for a quota name the license does not know."""

    message = "invalid quota"


class QuotaUsageGetError(OperationError):
    """Raised when a resource counter cannot be read."""

    message = "failed to get usage of quota"


class QuotaExceededError(OperationError):
    """Raised when creating or reactivating a resource would breach its quota."""

    message = "quota exceeded"


class SystemHealthCheckError(OperationError):
    """Raised when at least one resource is unhealthy; the first failure is the cause."""

    message = "system health check failed"
