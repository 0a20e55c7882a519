# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Permission service: the authorization gate of every other service.

The ``ctx_user_*`` checks answer "may the principal of this request do
this?" and never raise: a missing principal, a permission read failure or
any other repository error all mean "no". The plain checks and the write
operations raise operation errors chained to their cause.

Example:
    >>> permitted = await permission_service.ctx_user_permitted(
    ...     ctx, organization_id, PermissionKind.WRITE
    ... )
"""

from elemo.core.context import RequestContext, ctx_user_id
from elemo.core.errors import (
    NoPermissionError,
    NoPermissionRepositoryError,
    NoUserError,
    PermissionCreateError,
    PermissionDeleteError,
    PermissionGetBySubjectAndTargetError,
    PermissionHasPermissionError,
    PermissionHasSystemRoleError,
)
from elemo.core.tracing import EVENT_CHECK_PERMISSION, EVENT_PERMISSION_CHECKED, add_event, traced
from elemo.domains.base import BaseService, Option
from elemo.models import ID, Permission, PermissionKind, SystemRole, validate_id
from elemo.repositories import PermissionRepository

# Roles allowed to manage any permission
PERMISSION_ADMIN_ROLES = (SystemRole.OWNER, SystemRole.ADMIN)


class PermissionService(BaseService):
    """Service checking and managing permissions.

    Requires a permission repository.
    """

    permission_repo: PermissionRepository

    def __init__(self, *opts: Option) -> None:
        super().__init__(*opts)

        if self.permission_repo is None:
            raise NoPermissionRepositoryError()

    @traced
    async def has_permission(
        self,
        ctx: RequestContext,
        subject: ID,
        target: ID,
        *kinds: PermissionKind,
    ) -> bool:
        """Check whether a subject holds any of the kinds on a target.

        ``PermissionKind.ALL`` is always added to the requested kinds.

        Raises:
            PermissionHasPermissionError: If the ids are invalid or the
                repository fails.
        """
        try:
            validate_id(subject)
            validate_id(target)
            return await self.permission_repo.has_permission(
                subject, target, *_with_all(kinds)
            )
        except Exception as e:
            raise PermissionHasPermissionError() from e

    @traced
    async def ctx_user_permitted(
        self,
        ctx: RequestContext,
        target: ID,
        *kinds: PermissionKind,
    ) -> bool:
        """Check whether the request principal holds any of the kinds on a target.

        Args:
            ctx: Request context carrying the principal.
            target: Resource the permission is checked on.
            *kinds: Accepted permission kinds; ``ALL`` is always accepted.

        Returns:
            False when there is no principal or the lookup fails, otherwise
            the answer of the permission repository.
        """
        user_id = ctx_user_id(ctx)
        if user_id is None:
            return False

        add_event(EVENT_CHECK_PERMISSION, target=str(target))
        try:
            permitted = await self.permission_repo.has_permission(
                user_id, target, *_with_all(kinds)
            )
        except Exception:
            # PermissionReadError or any other failure: fail closed
            permitted = False
        add_event(EVENT_PERMISSION_CHECKED, permitted=permitted)

        return permitted

    @traced
    async def has_system_role(
        self,
        ctx: RequestContext,
        subject: ID,
        *roles: SystemRole,
    ) -> bool:
        """Check whether a subject holds any of the system roles.

        Raises:
            PermissionHasSystemRoleError: If the id is invalid or the
                repository fails.
        """
        try:
            validate_id(subject)
            return await self.permission_repo.has_system_role(subject, *roles)
        except Exception as e:
            raise PermissionHasSystemRoleError() from e

    @traced
    async def ctx_user_has_system_role(self, ctx: RequestContext, *roles: SystemRole) -> bool:
        """Check whether the request principal holds any of the system roles.

        Returns:
            False when there is no principal or the lookup fails.
        """
        user_id = ctx_user_id(ctx)
        if user_id is None:
            return False

        add_event(EVENT_CHECK_PERMISSION, roles=[role.value for role in roles])
        try:
            has_role = await self.permission_repo.has_system_role(user_id, *roles)
        except Exception:
            has_role = False
        add_event(EVENT_PERMISSION_CHECKED, permitted=has_role)

        return has_role

    @traced
    async def get_by_subject_and_target(
        self,
        ctx: RequestContext,
        subject: ID,
        target: ID,
    ) -> list[Permission]:
        """Return the permissions a subject holds on a target.

        Raises:
            PermissionGetBySubjectAndTargetError: If the ids are invalid or
                the repository fails.
        """
        try:
            validate_id(subject)
            validate_id(target)
            return await self.permission_repo.get_by_subject_and_target(subject, target)
        except Exception as e:
            raise PermissionGetBySubjectAndTargetError() from e

    @traced
    async def create(self, ctx: RequestContext, permission: Permission) -> None:
        """Persist a permission without authorizing the principal.

        Used by other services when a grant follows from an operation the
        principal was already authorized for.

        Raises:
            PermissionCreateError: If the permission is invalid or the
                repository fails.
        """
        try:
            permission.ensure_valid()
            await self.permission_repo.create(permission)
        except Exception as e:
            raise PermissionCreateError() from e

    @traced
    async def ctx_user_create(self, ctx: RequestContext, permission: Permission) -> None:
        """Persist a permission on behalf of the request principal.

        The principal must hold ``write`` on the permission target, or be a
        system owner or admin.

        Raises:
            PermissionCreateError: If the principal is missing or not
                allowed, the permission is invalid or the repository fails.
        """
        if ctx_user_id(ctx) is None:
            raise PermissionCreateError() from NoUserError()

        if not await self._may_manage(ctx, permission.target, PermissionKind.WRITE):
            raise PermissionCreateError() from NoPermissionError()

        try:
            permission.ensure_valid()
            await self.permission_repo.create(permission)
        except Exception as e:
            raise PermissionCreateError() from e

    @traced
    async def delete(self, ctx: RequestContext, id: ID) -> None:
        """Remove a permission without authorizing the principal.

        Raises:
            PermissionDeleteError: If the id is invalid or the repository
                fails.
        """
        try:
            validate_id(id)
            await self.permission_repo.delete(id)
        except Exception as e:
            raise PermissionDeleteError() from e

    @traced
    async def ctx_user_delete(self, ctx: RequestContext, id: ID) -> None:
        """Remove a permission on behalf of the request principal.

        The principal must hold ``delete`` on the target of the permission,
        or be a system owner or admin.

        Raises:
            PermissionDeleteError: If the id is invalid, the principal is
                missing or not allowed, or the repository fails.
        """
        if ctx_user_id(ctx) is None:
            raise PermissionDeleteError() from NoUserError()

        try:
            validate_id(id)
            permission = await self.permission_repo.get(id)
        except Exception as e:
            raise PermissionDeleteError() from e

        if not await self._may_manage(ctx, permission.target, PermissionKind.DELETE):
            raise PermissionDeleteError() from NoPermissionError()

        try:
            await self.permission_repo.delete(id)
        except Exception as e:
            raise PermissionDeleteError() from e

    async def _may_manage(self, ctx: RequestContext, target: ID, kind: PermissionKind) -> bool:
        if await self.ctx_user_has_system_role(ctx, *PERMISSION_ADMIN_ROLES):
            return True
        return await self.ctx_user_permitted(ctx, target, kind)


def _with_all(kinds: tuple[PermissionKind, ...]) -> list[PermissionKind]:
    requested = list(kinds)
    if PermissionKind.ALL not in requested:
        requested.append(PermissionKind.ALL)
    return requested
