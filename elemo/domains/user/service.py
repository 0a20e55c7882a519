# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for user management.

This module provides the UserService that handles:
- User creation, gated by the ``users`` license quota
- User lookup by id, by email and by page
- Self-service and delegated profile updates
- Soft deletion (status ``deleted``, credentials scrubbed) and hard deletion

Every operation runs in its own span and raises a ``User*Error`` chained
to the underlying cause.

Example:
    >>> user_service = UserService(
    ...     with_user_repository(user_repo),
    ...     with_permission_repository(permission_repo),
    ...     with_license_service(license_service),
    ... )
    >>> await user_service.create(ctx, user)
    >>> await user_service.delete(ctx, user.id)  # soft delete
"""

from typing import Any

from elemo.core.context import RequestContext, ctx_user_id
from elemo.core.errors import (
    InvalidEmailError,
    InvalidPaginationParamsError,
    NoLicenseServiceError,
    NoPatchDataError,
    NoPermissionError,
    NoPermissionRepositoryError,
    NoUserError,
    NoUserRepositoryError,
    UserCreateError,
    UserDeleteError,
    UserGetAllError,
    UserGetError,
    UserUpdateError,
)
from elemo.core.tracing import traced
from elemo.domains.base import BaseService, Option
from elemo.models import (
    ID,
    UNUSABLE_PASSWORD,
    PermissionKind,
    Quota,
    ResourceType,
    User,
    UserStatus,
    validate_id,
)
from elemo.repositories import UserRepository


class UserService(BaseService):
    """Service for managing users.

    Requires a user repository, a permission repository (or permission
    service) and a license service.
    """

    user_repo: UserRepository

    def __init__(self, *opts: Option) -> None:
        super().__init__(*opts)

        if self.user_repo is None:
            raise NoUserRepositoryError()

        if self._resolve_permission_service() is None:
            raise NoPermissionRepositoryError()

        if self.license_service is None:
            raise NoLicenseServiceError()

    @traced
    async def create(self, ctx: RequestContext, user: User) -> None:
        """Create a new user.

        The principal needs ``create`` on the user resource type. Creating
        an active user also requires room in the ``users`` quota.

        Args:
            ctx: Request context.
            user: User to create; the repository assigns its id.

        Raises:
            UserCreateError: If the license expired, the user is invalid,
                the principal is not allowed, the quota is exhausted or the
                repository fails.
        """
        await self._ensure_license_active(ctx, UserCreateError)

        try:
            user.ensure_valid()
        except Exception as e:
            raise UserCreateError() from e

        if not await self.permission_service.ctx_user_permitted(
            ctx, ID.nil(ResourceType.USER), PermissionKind.CREATE
        ):
            raise UserCreateError() from NoPermissionError()

        if user.status == UserStatus.ACTIVE:
            await self._ensure_within_quota(ctx, Quota.USERS, UserCreateError)

        try:
            await self.user_repo.create(user)
        except Exception as e:
            raise UserCreateError() from e

    @traced
    async def get(self, ctx: RequestContext, id: ID) -> User:
        """Get a user by id.

        Raises:
            UserGetError: If the id is invalid or the repository fails.
        """
        try:
            validate_id(id)
            return await self.user_repo.get(id)
        except Exception as e:
            raise UserGetError() from e

    @traced
    async def get_by_email(self, ctx: RequestContext, email: str) -> User:
        """Get a user by email address.

        Raises:
            UserGetError: If the email is empty or the repository fails.
        """
        if not email:
            raise UserGetError() from InvalidEmailError()

        try:
            return await self.user_repo.get_by_email(email)
        except Exception as e:
            raise UserGetError() from e

    @traced
    async def get_all(self, ctx: RequestContext, offset: int, limit: int) -> list[User]:
        """Get a page of users.

        Raises:
            UserGetAllError: If ``offset`` is negative, ``limit`` is not
                positive or the repository fails.
        """
        if offset < 0 or limit <= 0:
            raise UserGetAllError() from InvalidPaginationParamsError()

        try:
            return await self.user_repo.get_all(offset, limit)
        except Exception as e:
            raise UserGetAllError() from e

    @traced
    async def update(self, ctx: RequestContext, id: ID, patch: dict[str, Any]) -> User:
        """Update a user.

        Users may always update themselves; updating someone else needs
        ``write`` on that user. Reactivating a user requires room in the
        ``users`` quota.

        Args:
            ctx: Request context.
            id: User to update.
            patch: Fields to change.

        Returns:
            The updated user.

        Raises:
            UserUpdateError: If the license expired, the id is invalid,
                there is no principal, the principal is not allowed, the
                patch is empty, the quota is exhausted or the repository
                fails.
        """
        await self._ensure_license_active(ctx, UserUpdateError)

        try:
            validate_id(id)
        except Exception as e:
            raise UserUpdateError() from e

        user_id = ctx_user_id(ctx)
        if user_id is None:
            raise UserUpdateError() from NoUserError()

        if user_id != id and not await self.permission_service.ctx_user_permitted(
            ctx, id, PermissionKind.WRITE
        ):
            raise UserUpdateError() from NoPermissionError()

        if not patch:
            raise UserUpdateError() from NoPatchDataError()

        if patch.get("status") == UserStatus.ACTIVE:
            await self._ensure_within_quota(ctx, Quota.USERS, UserUpdateError)

        try:
            return await self.user_repo.update(id, patch)
        except Exception as e:
            raise UserUpdateError() from e

    @traced
    async def delete(self, ctx: RequestContext, id: ID, force: bool = False) -> None:
        """Delete a user.

        Nobody may delete themselves; deleting someone else needs
        ``delete`` on that user. A soft delete marks the user ``deleted``
        and makes its password unusable; ``force`` removes the record.

        Raises:
            UserDeleteError: If the license expired, the id is invalid,
                there is no principal, the principal is not allowed or the
                repository fails.
        """
        await self._ensure_license_active(ctx, UserDeleteError)

        try:
            validate_id(id)
        except Exception as e:
            raise UserDeleteError() from e

        user_id = ctx_user_id(ctx)
        if user_id is None:
            raise UserDeleteError() from NoUserError()

        if user_id == id or not await self.permission_service.ctx_user_permitted(
            ctx, id, PermissionKind.DELETE
        ):
            raise UserDeleteError() from NoPermissionError()

        try:
            if force:
                await self.user_repo.delete(id)
            else:
                await self.user_repo.update(
                    id,
                    {"status": UserStatus.DELETED, "password": UNUSABLE_PASSWORD},
                )
        except Exception as e:
            raise UserDeleteError() from e
