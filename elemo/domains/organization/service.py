# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Organization service for organization and membership management.

This module provides the OrganizationService that handles:
- Organization creation, gated by the ``organizations`` license quota
- Organization lookup, update and soft or hard deletion
- Membership: adding members (gated by the ``users`` quota), listing
  members with their roles, removing members
- Invitations: emailing a join link to an existing or a new pending user,
  revoking it again

Member roles combine the roles persisted for the member with virtual roles
derived from the permissions the member holds on the organization: a
holder of ``*`` is an ``Owner``, a holder of ``write`` an ``Admin``.

Example:
    >>> await organization_service.create(ctx, owner_id, organization)
    >>> await organization_service.add_member(ctx, organization.id, user_id)
    >>> members = await organization_service.get_members(ctx, organization.id)
"""

import re
import secrets
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlencode

from elemo.core.context import RequestContext, ctx_user_id
from elemo.core.errors import (
    InvalidEmailError,
    InvalidPaginationParamsError,
    InvalidUserStatusError,
    NoEmailServiceError,
    NoLicenseServiceError,
    NoOrganizationRepositoryError,
    NoPatchDataError,
    NoPermissionError,
    NoPermissionServiceError,
    NoUserError,
    NoUserRepositoryError,
    OrganizationCreateError,
    OrganizationDeleteError,
    OrganizationGetAllError,
    OrganizationGetError,
    OrganizationInviteRevokeError,
    OrganizationMemberAddError,
    OrganizationMemberAlreadyExistsError,
    OrganizationMemberInviteError,
    OrganizationMemberRemoveError,
    OrganizationMembersGetError,
    OrganizationUpdateError,
)
from elemo.core.tracing import traced
from elemo.domains.base import BaseService, Option
from elemo.models import (
    ID,
    UNUSABLE_PASSWORD,
    Organization,
    OrganizationMember,
    OrganizationStatus,
    Permission,
    PermissionKind,
    Quota,
    ResourceType,
    User,
    UserStatus,
    validate_id,
)
from elemo.repositories import NotFoundError, OrganizationRepository, UserRepository

ROLE_OWNER = "Owner"
ROLE_ADMIN = "Admin"
ROLE_MEMBER = "Member"

# Holding all of these amounts to holding ``*``
OWNER_KINDS = frozenset({PermissionKind.READ, PermissionKind.WRITE, PermissionKind.DELETE})

INVITATION_PATH = "/organizations/join"
INVITATION_TOKEN_BYTES = 32


def names_from_email(email: str) -> tuple[str, str]:
    """Guess a first and last name from the local part of an email.

    Example:
        >>> names_from_email("ada.lovelace@example.com")
        ('Ada', 'Lovelace')
    """
    local_part = email.partition("@")[0]
    parts = [part for part in re.split(r"[._+-]+", local_part) if part]
    if not parts:
        return "", ""
    return parts[0].capitalize(), " ".join(part.capitalize() for part in parts[1:])


def compute_virtual_roles(permissions: Iterable[Permission]) -> list[str]:
    """Derive the virtual roles of a member from its permissions.

    ``*`` or ``read`` with ``write`` and ``delete`` makes an Owner,
    ``write`` an Admin and ``read`` without ``delete`` a Member.
    """
    kinds = {permission.kind for permission in permissions}

    if PermissionKind.ALL in kinds or OWNER_KINDS <= kinds:
        return [ROLE_OWNER]
    if PermissionKind.WRITE in kinds:
        return [ROLE_ADMIN]
    if PermissionKind.READ in kinds and PermissionKind.DELETE not in kinds:
        return [ROLE_MEMBER]
    return []


def combine_roles(virtual_roles: Iterable[str], roles: Iterable[str]) -> list[str]:
    """Merge virtual and persisted roles, keeping the first occurrence."""
    return list(dict.fromkeys([*virtual_roles, *roles]))


class OrganizationService(BaseService):
    """Service for managing organizations and their members.

    Requires an organization repository, a permission service (or a
    permission repository to build one from), a license service, a user
    repository and an email service.
    """

    organization_repo: OrganizationRepository
    user_repo: UserRepository

    def __init__(self, *opts: Option) -> None:
        super().__init__(*opts)

        if self.organization_repo is None:
            raise NoOrganizationRepositoryError()

        if self._resolve_permission_service() is None:
            raise NoPermissionServiceError()

        if self.license_service is None:
            raise NoLicenseServiceError()

        if self.user_repo is None:
            raise NoUserRepositoryError()

        if self.email_service is None:
            raise NoEmailServiceError()

    @traced
    async def create(self, ctx: RequestContext, owner: ID, organization: Organization) -> None:
        """Create an organization owned by ``owner``.

        The owner becomes the first member of the organization and holds
        every permission on it.

        Raises:
            OrganizationCreateError: If the license expired, the input is
                invalid, the principal is not allowed, the quota is
                exhausted or the repository fails.
        """
        await self._ensure_license_active(ctx, OrganizationCreateError)

        try:
            validate_id(owner)
            organization.ensure_valid()
        except Exception as e:
            raise OrganizationCreateError() from e

        if not await self.permission_service.ctx_user_permitted(
            ctx, ID.nil(ResourceType.ORGANIZATION), PermissionKind.CREATE
        ):
            raise OrganizationCreateError() from NoPermissionError()

        if organization.status == OrganizationStatus.ACTIVE:
            await self._ensure_within_quota(ctx, Quota.ORGANIZATIONS, OrganizationCreateError)

        try:
            await self.organization_repo.create(owner, organization)
        except Exception as e:
            raise OrganizationCreateError() from e

    @traced
    async def get(self, ctx: RequestContext, id: ID) -> Organization:
        """Get an organization, including its member ids.

        Raises:
            OrganizationGetError: If the id is invalid or the repository
                fails.
        """
        try:
            validate_id(id)
            return await self.organization_repo.get(id)
        except Exception as e:
            raise OrganizationGetError() from e

    @traced
    async def get_all(self, ctx: RequestContext, offset: int, limit: int) -> list[Organization]:
        """Get a page of the organizations the principal belongs to.

        Raises:
            OrganizationGetAllError: If the pagination is invalid, there is
                no principal or the repository fails.
        """
        if offset < 0 or limit <= 0:
            raise OrganizationGetAllError() from InvalidPaginationParamsError()

        user_id = ctx_user_id(ctx)
        if user_id is None:
            raise OrganizationGetAllError() from NoUserError()

        try:
            return await self.organization_repo.get_all(user_id, offset, limit)
        except Exception as e:
            raise OrganizationGetAllError() from e

    @traced
    async def update(
        self,
        ctx: RequestContext,
        id: ID,
        patch: dict[str, Any],
    ) -> Organization:
        """Update an organization.

        Needs ``write`` on the organization. Reactivating an organization
        requires room in the ``organizations`` quota.

        Raises:
            OrganizationUpdateError: If the license expired, the id is
                invalid, the principal is not allowed, the patch is empty,
                the quota is exhausted or the repository fails.
        """
        await self._ensure_license_active(ctx, OrganizationUpdateError)

        try:
            validate_id(id)
        except Exception as e:
            raise OrganizationUpdateError() from e

        if not await self.permission_service.ctx_user_permitted(ctx, id, PermissionKind.WRITE):
            raise OrganizationUpdateError() from NoPermissionError()

        if not patch:
            raise OrganizationUpdateError() from NoPatchDataError()

        if patch.get("status") == OrganizationStatus.ACTIVE:
            await self._ensure_within_quota(ctx, Quota.ORGANIZATIONS, OrganizationUpdateError)

        try:
            return await self.organization_repo.update(id, patch)
        except Exception as e:
            raise OrganizationUpdateError() from e

    @traced
    async def delete(self, ctx: RequestContext, id: ID, force: bool = False) -> None:
        """Delete an organization.

        Needs ``delete`` on the organization. A soft delete marks it
        ``deleted``; ``force`` removes it.

        Raises:
            OrganizationDeleteError: If the license expired, the id is
                invalid, the principal is not allowed or the repository
                fails.
        """
        await self._ensure_license_active(ctx, OrganizationDeleteError)

        try:
            validate_id(id)
        except Exception as e:
            raise OrganizationDeleteError() from e

        if not await self.permission_service.ctx_user_permitted(ctx, id, PermissionKind.DELETE):
            raise OrganizationDeleteError() from NoPermissionError()

        try:
            if force:
                await self.organization_repo.delete(id)
            else:
                await self.organization_repo.update(id, {"status": OrganizationStatus.DELETED})
        except Exception as e:
            raise OrganizationDeleteError() from e

    @traced
    async def add_member(self, ctx: RequestContext, organization_id: ID, user_id: ID) -> None:
        """Add a user to an organization.

        Needs ``write`` on the organization and room in the ``users``
        quota. The new member is granted ``read`` on the organization; a
        failed grant is logged and does not fail the operation.

        Raises:
            OrganizationMemberAddError: If the license expired, an id is
                invalid, the principal is not allowed, the quota is
                exhausted or the repository fails.
        """
        await self._ensure_license_active(ctx, OrganizationMemberAddError)

        try:
            validate_id(organization_id)
            validate_id(user_id)
        except Exception as e:
            raise OrganizationMemberAddError() from e

        if not await self.permission_service.ctx_user_permitted(
            ctx, organization_id, PermissionKind.WRITE
        ):
            raise OrganizationMemberAddError() from NoPermissionError()

        await self._ensure_within_quota(ctx, Quota.USERS, OrganizationMemberAddError)

        try:
            await self.organization_repo.add_member(organization_id, user_id)
        except Exception as e:
            raise OrganizationMemberAddError() from e

        permission = Permission(kind=PermissionKind.READ, subject=user_id, target=organization_id)
        try:
            await self.permission_service.create(ctx, permission)
        except Exception as e:
            self.logger.warning(
                "failed to assign read permission to new member",
                error=str(e),
                user_id=str(user_id),
                organization_id=str(organization_id),
            )

    @traced
    async def get_members(self, ctx: RequestContext, organization_id: ID) -> list[OrganizationMember]:
        """Get the members of an organization with their roles.

        Needs ``read`` on the organization.

        Raises:
            OrganizationMembersGetError: If the id is invalid, the principal
                is not allowed or a repository fails.
        """
        try:
            validate_id(organization_id)
        except Exception as e:
            raise OrganizationMembersGetError() from e

        if not await self.permission_service.ctx_user_permitted(
            ctx, organization_id, PermissionKind.READ
        ):
            raise OrganizationMembersGetError() from NoPermissionError()

        try:
            members = await self.organization_repo.get_members(organization_id)
        except Exception as e:
            raise OrganizationMembersGetError() from e

        result: list[OrganizationMember] = []
        for member in members:
            try:
                permissions = await self.permission_service.get_by_subject_and_target(
                    ctx, member.id, organization_id
                )
            except Exception as e:
                raise OrganizationMembersGetError() from e

            roles = combine_roles(compute_virtual_roles(permissions), member.roles)
            result.append(member.model_copy(update={"roles": roles}))

        return result

    @traced
    async def remove_member(self, ctx: RequestContext, organization_id: ID, user_id: ID) -> None:
        """Remove a user from an organization.

        Needs ``write`` on the organization. The member's permissions on
        the organization are revoked first; revocation failures are logged
        and do not fail the operation.

        Raises:
            OrganizationMemberRemoveError: If the license expired, an id is
                invalid, the principal is not allowed or the repository
                fails.
        """
        await self._ensure_license_active(ctx, OrganizationMemberRemoveError)

        try:
            validate_id(organization_id)
            validate_id(user_id)
        except Exception as e:
            raise OrganizationMemberRemoveError() from e

        if not await self.permission_service.ctx_user_permitted(
            ctx, organization_id, PermissionKind.WRITE
        ):
            raise OrganizationMemberRemoveError() from NoPermissionError()

        await self._revoke_member_permissions(ctx, organization_id, user_id)

        try:
            await self.organization_repo.remove_member(organization_id, user_id)
        except Exception as e:
            raise OrganizationMemberRemoveError() from e

    @traced
    async def invite_member(self, ctx: RequestContext, organization_id: ID, email: str) -> User:
        """Invite a user to an organization by email.

        Needs ``write`` on the organization. An unknown email gets a
        pending user with an unusable password. The invitation is recorded
        with a one-time token and emailed to the invitee.

        Returns:
            The invited user.

        Raises:
            OrganizationMemberInviteError: If the license expired, the input
                is invalid, the principal is not allowed, the user already
                belongs to the organization or cannot join it, a repository
                fails or the email cannot be sent.
        """
        await self._ensure_license_active(ctx, OrganizationMemberInviteError)

        try:
            validate_id(organization_id)
        except Exception as e:
            raise OrganizationMemberInviteError() from e

        if not email:
            raise OrganizationMemberInviteError() from InvalidEmailError()

        if not await self.permission_service.ctx_user_permitted(
            ctx, organization_id, PermissionKind.WRITE
        ):
            raise OrganizationMemberInviteError() from NoPermissionError()

        user = await self._get_or_create_invitee(email)

        if user.status not in (UserStatus.ACTIVE, UserStatus.PENDING):
            raise OrganizationMemberInviteError() from InvalidUserStatusError()

        try:
            is_member = await self.permission_service.has_permission(
                ctx, user.id, organization_id, PermissionKind.READ
            )
            organization = await self.organization_repo.get(organization_id)
        except Exception as e:
            raise OrganizationMemberInviteError() from e

        if is_member:
            raise OrganizationMemberInviteError() from OrganizationMemberAlreadyExistsError()

        token = secrets.token_urlsafe(INVITATION_TOKEN_BYTES)
        try:
            await self.organization_repo.add_invitation(organization_id, user.id, token)
        except Exception as e:
            raise OrganizationMemberInviteError() from e

        query = urlencode({"organization": str(organization_id), "token": token})
        try:
            await self.email_service.send_organization_invitation_email(
                ctx, f"{INVITATION_PATH}?{query}", organization, user
            )
        except Exception as e:
            raise OrganizationMemberInviteError() from e

        return user

    @traced
    async def revoke_invitation(self, ctx: RequestContext, organization_id: ID, user_id: ID) -> None:
        """Revoke a pending invitation.

        Needs ``write`` on the organization. A pending user left without
        any organization is deleted.

        Raises:
            OrganizationInviteRevokeError: If the license expired, an id is
                invalid, the principal is not allowed or the user cannot be
                read. Cleanup failures are logged.
        """
        await self._ensure_license_active(ctx, OrganizationInviteRevokeError)

        try:
            validate_id(organization_id)
            validate_id(user_id)
        except Exception as e:
            raise OrganizationInviteRevokeError() from e

        if not await self.permission_service.ctx_user_permitted(
            ctx, organization_id, PermissionKind.WRITE
        ):
            raise OrganizationInviteRevokeError() from NoPermissionError()

        try:
            user = await self.user_repo.get(user_id)
        except Exception as e:
            raise OrganizationInviteRevokeError() from e

        try:
            await self.organization_repo.remove_invitation(organization_id, user_id)
        except Exception as e:
            self.logger.warning(
                "failed to remove invitation during revocation",
                error=str(e),
                user_id=str(user_id),
                organization_id=str(organization_id),
            )

        try:
            await self.organization_repo.remove_member(organization_id, user_id)
        except Exception as e:
            self.logger.warning(
                "failed to remove member during invitation revocation",
                error=str(e),
                user_id=str(user_id),
                organization_id=str(organization_id),
            )

        if user.status == UserStatus.PENDING:
            await self._delete_orphaned_pending_user(user_id)

    async def _delete_orphaned_pending_user(self, user_id: ID) -> None:
        try:
            if await self.organization_repo.get_all(user_id, 0, 1):
                return
            await self.user_repo.delete(user_id)
        except Exception as e:
            self.logger.warning(
                "failed to delete pending user after invitation revocation",
                error=str(e),
                user_id=str(user_id),
            )
            return

        self.logger.info("deleted pending user after invitation revocation", user_id=str(user_id))

    async def _get_or_create_invitee(self, email: str) -> User:
        try:
            return await self.user_repo.get_by_email(email)
        except NotFoundError:
            pass
        except Exception as e:
            raise OrganizationMemberInviteError() from e

        first_name, last_name = names_from_email(email)
        user = User(
            id=ID.new(ResourceType.USER),
            username=secrets.token_hex(10),
            email=email,
            password=UNUSABLE_PASSWORD,
            status=UserStatus.PENDING,
            first_name=first_name,
            last_name=last_name,
        )
        try:
            user.ensure_valid()
            await self.user_repo.create(user)
        except Exception as e:
            raise OrganizationMemberInviteError() from e

        self.logger.info(
            "created pending user for invitation",
            user_id=str(user.id),
        )
        return user

    async def _revoke_member_permissions(
        self,
        ctx: RequestContext,
        organization_id: ID,
        user_id: ID,
    ) -> None:
        try:
            permissions = await self.permission_service.get_by_subject_and_target(
                ctx, user_id, organization_id
            )
        except Exception as e:
            self.logger.warning(
                "failed to get permissions when removing member",
                error=str(e),
                user_id=str(user_id),
                organization_id=str(organization_id),
            )
            return

        for permission in permissions:
            try:
                await self.permission_service.delete(ctx, permission.id)
            except Exception as e:
                self.logger.warning(
                    "failed to delete permission when removing member",
                    error=str(e),
                    permission_id=str(permission.id),
                    user_id=str(user_id),
                    organization_id=str(organization_id),
                )
