# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repository contracts consumed by the services.

Storage engines implement these abstract classes. Every method is a
coroutine so it can be cancelled by the caller; implementations raise
errors from ``elemo.repositories.errors`` or any other exception, which
the services chain as the cause of their own errors.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from elemo.models import (
    ID,
    Organization,
    OrganizationMember,
    Permission,
    PermissionKind,
    SystemRole,
    User,
)

if TYPE_CHECKING:
    from elemo.core.context import RequestContext


@runtime_checkable
class Pingable(Protocol):
    """A collaborator exposing a liveness check."""

    async def ping(self, ctx: "RequestContext") -> None:
        """Raise if the collaborator is not healthy."""
        ...


class UserRepository(ABC):
    """Storage of users."""

    @abstractmethod
    async def create(self, user: User) -> None:
        """Persist a new user and assign its id."""

    @abstractmethod
    async def get(self, id: ID) -> User:
        """Return a user.

        Raises:
            NotFoundError: If the user does not exist.
        """

    @abstractmethod
    async def get_by_email(self, email: str) -> User:
        """Return the user with the given email.

        Raises:
            NotFoundError: If no user has this email.
        """

    @abstractmethod
    async def get_all(self, offset: int, limit: int) -> list[User]:
        """Return a page of users."""

    @abstractmethod
    async def update(self, id: ID, patch: dict[str, Any]) -> User:
        """Apply a partial update and return the updated user."""

    @abstractmethod
    async def delete(self, id: ID) -> None:
        """Remove a user permanently."""


class OrganizationRepository(ABC):
    """Storage of organizations and their membership."""

    @abstractmethod
    async def create(self, owner: ID, organization: Organization) -> None:
        """Persist a new organization owned by ``owner``.

        The owner becomes the first member and is granted ``all`` on the
        organization.
        """

    @abstractmethod
    async def get(self, id: ID) -> Organization:
        """Return an organization including its member ids."""

    @abstractmethod
    async def get_all(self, user_id: ID, offset: int, limit: int) -> list[Organization]:
        """Return a page of the organizations ``user_id`` belongs to."""

    @abstractmethod
    async def update(self, id: ID, patch: dict[str, Any]) -> Organization:
        """Apply a partial update and return the updated organization."""

    @abstractmethod
    async def delete(self, id: ID) -> None:
        """Remove an organization permanently."""

    @abstractmethod
    async def add_member(self, organization_id: ID, user_id: ID) -> None:
        """Add a user to an organization."""

    @abstractmethod
    async def remove_member(self, organization_id: ID, user_id: ID) -> None:
        """Remove a user from an organization."""

    @abstractmethod
    async def get_members(self, organization_id: ID) -> list[OrganizationMember]:
        """Return the members of an organization with their persisted roles."""

    @abstractmethod
    async def add_invitation(self, organization_id: ID, user_id: ID, token: str) -> None:
        """Record a pending invitation of ``user_id`` redeemable with ``token``."""

    @abstractmethod
    async def remove_invitation(self, organization_id: ID, user_id: ID) -> None:
        """Drop the pending invitation of ``user_id``."""


class PermissionRepository(ABC):
    """Storage of permissions and system role assignments.

    Read methods may raise ``PermissionReadError``, which permission
    checks treat as "denied".
    """

    @abstractmethod
    async def create(self, permission: Permission) -> None:
        """Persist a permission and assign its id."""

    @abstractmethod
    async def get(self, id: ID) -> Permission:
        """Return a permission.

        Raises:
            NotFoundError: If the permission does not exist.
        """

    @abstractmethod
    async def get_by_subject_and_target(self, subject: ID, target: ID) -> list[Permission]:
        """Return the permissions ``subject`` holds on ``target``."""

    @abstractmethod
    async def has_permission(self, subject: ID, target: ID, *kinds: PermissionKind) -> bool:
        """Check whether ``subject`` holds any of ``kinds`` on ``target``."""

    @abstractmethod
    async def has_system_role(self, subject: ID, *roles: SystemRole) -> bool:
        """Check whether ``subject`` holds any of the system ``roles``."""

    @abstractmethod
    async def delete(self, id: ID) -> None:
        """Remove a permission."""


class LicenseRepository(ABC):
    """Live counters of quota-governed resources."""

    @abstractmethod
    async def active_user_count(self) -> int:
        """Count active and pending users."""

    @abstractmethod
    async def active_organization_count(self) -> int:
        """Count active organizations."""

    @abstractmethod
    async def document_count(self) -> int:
        """Count documents."""

    @abstractmethod
    async def namespace_count(self) -> int:
        """Count namespaces."""

    @abstractmethod
    async def project_count(self) -> int:
        """Count projects."""

    @abstractmethod
    async def role_count(self) -> int:
        """Count roles."""
