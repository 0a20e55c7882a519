# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the permission service."""

import pytest

from elemo.core.errors import (
    NoPermissionError,
    NoPermissionRepositoryError,
    NoUserError,
    PermissionCreateError,
    PermissionDeleteError,
    PermissionGetBySubjectAndTargetError,
    PermissionHasPermissionError,
    PermissionHasSystemRoleError,
    has_error_kind,
)
from elemo.core.tracing import EVENT_CHECK_PERMISSION, EVENT_PERMISSION_CHECKED
from elemo.domains.base import with_permission_repository, with_tracer
from elemo.domains.permission import PermissionService
from elemo.models import (
    ID,
    InvalidPermissionDetailsError,
    Permission,
    PermissionKind,
    ResourceType,
    SystemRole,
)
from elemo.repositories import NotFoundError, PermissionReadError


@pytest.fixture
def permission_service(permission_repo, tracer):
    """Create permission service with mock repository."""
    return PermissionService(with_permission_repository(permission_repo), with_tracer(tracer))


@pytest.fixture
def organization_id() -> ID:
    return ID.new(ResourceType.ORGANIZATION)


class TestPermissionServiceInit:
    """Tests for permission service construction."""

    def test_requires_repository(self) -> None:
        """Test the repository is required."""
        with pytest.raises(NoPermissionRepositoryError):
            PermissionService()


class TestCtxUserPermitted:
    """Tests for checking the principal's permissions."""

    @pytest.mark.asyncio
    async def test_permitted(self, permission_service, permission_repo, ctx, principal_id, organization_id) -> None:
        """Test ALL is always added to the requested kinds."""
        permitted = await permission_service.ctx_user_permitted(ctx, organization_id, PermissionKind.WRITE)

        assert permitted is True
        permission_repo.has_permission.assert_awaited_once_with(
            principal_id, organization_id, PermissionKind.WRITE, PermissionKind.ALL
        )

    @pytest.mark.asyncio
    async def test_no_principal(self, permission_service, permission_repo, anonymous_ctx, organization_id) -> None:
        """Test a request without principal is never permitted."""
        assert not await permission_service.ctx_user_permitted(anonymous_ctx, organization_id, PermissionKind.READ)

        permission_repo.has_permission.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [PermissionReadError(), NotFoundError(), RuntimeError("boom")])
    async def test_repository_failure_denies(
        self, permission_service, permission_repo, ctx, organization_id, error
    ) -> None:
        """Test any repository failure means denied."""
        permission_repo.has_permission.side_effect = error

        assert not await permission_service.ctx_user_permitted(ctx, organization_id, PermissionKind.READ)

    @pytest.mark.asyncio
    async def test_emits_span_and_events(
        self, permission_service, ctx, organization_id, span_exporter
    ) -> None:
        """Test the check records its span and events."""
        await permission_service.ctx_user_permitted(ctx, organization_id, PermissionKind.READ)

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "service.PermissionService/ctx_user_permitted"
        assert [event.name for event in span.events] == [EVENT_CHECK_PERMISSION, EVENT_PERMISSION_CHECKED]
        assert span.events[1].attributes["permitted"] is True


class TestCtxUserHasSystemRole:
    """Tests for checking the principal's system roles."""

    @pytest.mark.asyncio
    async def test_has_role(self, permission_service, permission_repo, ctx, principal_id) -> None:
        """Test roles are forwarded to the repository."""
        assert await permission_service.ctx_user_has_system_role(ctx, SystemRole.OWNER, SystemRole.ADMIN)

        permission_repo.has_system_role.assert_awaited_once_with(principal_id, SystemRole.OWNER, SystemRole.ADMIN)

    @pytest.mark.asyncio
    async def test_no_principal(self, permission_service, anonymous_ctx) -> None:
        """Test a request without principal holds no role."""
        assert not await permission_service.ctx_user_has_system_role(anonymous_ctx, SystemRole.OWNER)

    @pytest.mark.asyncio
    async def test_failure_denies(self, permission_service, permission_repo, ctx) -> None:
        """Test a failed lookup means no role."""
        permission_repo.has_system_role.side_effect = PermissionReadError()

        assert not await permission_service.ctx_user_has_system_role(ctx, SystemRole.OWNER)


class TestChecks:
    """Tests for the raising checks."""

    @pytest.mark.asyncio
    async def test_has_permission(self, permission_service, permission_repo, ctx, organization_id) -> None:
        """Test a subject check adds ALL."""
        subject = ID.new(ResourceType.USER)

        assert await permission_service.has_permission(ctx, subject, organization_id, PermissionKind.READ)

        permission_repo.has_permission.assert_awaited_once_with(
            subject, organization_id, PermissionKind.READ, PermissionKind.ALL
        )

    @pytest.mark.asyncio
    async def test_has_permission_failure(self, permission_service, permission_repo, ctx, organization_id) -> None:
        """Test repository failures are chained."""
        permission_repo.has_permission.side_effect = PermissionReadError()

        with pytest.raises(PermissionHasPermissionError) as exc_info:
            await permission_service.has_permission(ctx, ID.new(ResourceType.USER), organization_id)

        assert has_error_kind(exc_info.value, PermissionReadError)

    @pytest.mark.asyncio
    async def test_has_system_role_invalid_subject(self, permission_service, ctx) -> None:
        """Test the subject must be an id."""
        with pytest.raises(PermissionHasSystemRoleError):
            await permission_service.has_system_role(ctx, "User:1", SystemRole.OWNER)

    @pytest.mark.asyncio
    async def test_get_by_subject_and_target_failure(
        self, permission_service, permission_repo, ctx, organization_id
    ) -> None:
        """Test lookups chain their cause."""
        permission_repo.get_by_subject_and_target.side_effect = NotFoundError()

        with pytest.raises(PermissionGetBySubjectAndTargetError) as exc_info:
            await permission_service.get_by_subject_and_target(ctx, ID.new(ResourceType.USER), organization_id)

        assert has_error_kind(exc_info.value, NotFoundError)


class TestCreateAndDelete:
    """Tests for permission writes."""

    @pytest.mark.asyncio
    async def test_create(self, permission_service, permission_repo, ctx, organization_id) -> None:
        """Test a valid permission is persisted."""
        permission = Permission(kind=PermissionKind.READ, subject=ID.new(ResourceType.USER), target=organization_id)

        await permission_service.create(ctx, permission)

        permission_repo.create.assert_awaited_once_with(permission)

    @pytest.mark.asyncio
    async def test_create_invalid(self, permission_service, permission_repo, ctx, principal_id) -> None:
        """Test invalid permissions never reach the repository."""
        permission = Permission(kind=PermissionKind.READ, subject=principal_id, target=principal_id)

        with pytest.raises(PermissionCreateError) as exc_info:
            await permission_service.create(ctx, permission)

        assert has_error_kind(exc_info.value, InvalidPermissionDetailsError)
        permission_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ctx_user_create_without_principal(self, permission_service, anonymous_ctx, organization_id) -> None:
        """Test delegated grants need a principal."""
        permission = Permission(kind=PermissionKind.READ, subject=ID.new(ResourceType.USER), target=organization_id)

        with pytest.raises(PermissionCreateError) as exc_info:
            await permission_service.ctx_user_create(anonymous_ctx, permission)

        assert has_error_kind(exc_info.value, NoUserError)

    @pytest.mark.asyncio
    async def test_ctx_user_create_not_allowed(
        self, permission_service, permission_repo, ctx, organization_id
    ) -> None:
        """Test delegated grants need write on the target or an admin role."""
        permission_repo.has_permission.return_value = False
        permission_repo.has_system_role.return_value = False
        permission = Permission(kind=PermissionKind.READ, subject=ID.new(ResourceType.USER), target=organization_id)

        with pytest.raises(PermissionCreateError) as exc_info:
            await permission_service.ctx_user_create(ctx, permission)

        assert has_error_kind(exc_info.value, NoPermissionError)
        permission_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ctx_user_create_with_write(
        self, permission_service, permission_repo, ctx, organization_id
    ) -> None:
        """Test write on the target is enough to grant."""
        permission_repo.has_system_role.return_value = False
        permission = Permission(kind=PermissionKind.READ, subject=ID.new(ResourceType.USER), target=organization_id)

        await permission_service.ctx_user_create(ctx, permission)

        permission_repo.create.assert_awaited_once_with(permission)

    @pytest.mark.asyncio
    async def test_delete_failure(self, permission_service, permission_repo, ctx) -> None:
        """Test delete chains its cause."""
        permission_repo.delete.side_effect = NotFoundError()

        with pytest.raises(PermissionDeleteError) as exc_info:
            await permission_service.delete(ctx, ID.new(ResourceType.PERMISSION))

        assert has_error_kind(exc_info.value, NotFoundError)


class TestCtxUserDelete:
    """Tests for revoking permissions on behalf of the principal."""

    @pytest.fixture
    def permission(self, organization_id) -> Permission:
        return Permission(
            id=ID.new(ResourceType.PERMISSION),
            kind=PermissionKind.READ,
            subject=ID.new(ResourceType.USER),
            target=organization_id,
        )

    @pytest.mark.asyncio
    async def test_without_principal(self, permission_service, permission_repo, anonymous_ctx, permission) -> None:
        """Test revocation needs a principal."""
        with pytest.raises(PermissionDeleteError) as exc_info:
            await permission_service.ctx_user_delete(anonymous_ctx, permission.id)

        assert has_error_kind(exc_info.value, NoUserError)
        permission_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_allowed(self, permission_service, permission_repo, ctx, principal_id, permission) -> None:
        """Test revocation needs delete on the target or an admin role."""
        permission_repo.get.return_value = permission
        permission_repo.has_permission.return_value = False
        permission_repo.has_system_role.return_value = False

        with pytest.raises(PermissionDeleteError) as exc_info:
            await permission_service.ctx_user_delete(ctx, permission.id)

        assert has_error_kind(exc_info.value, NoPermissionError)
        permission_repo.has_permission.assert_awaited_once_with(
            principal_id, permission.target, PermissionKind.DELETE, PermissionKind.ALL
        )
        permission_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_with_delete(self, permission_service, permission_repo, ctx, permission) -> None:
        """Test delete on the target is enough to revoke."""
        permission_repo.get.return_value = permission
        permission_repo.has_system_role.return_value = False

        await permission_service.ctx_user_delete(ctx, permission.id)

        permission_repo.delete.assert_awaited_once_with(permission.id)

    @pytest.mark.asyncio
    async def test_system_admin(self, permission_service, permission_repo, ctx, permission) -> None:
        """Test system owners and admins revoke anything."""
        permission_repo.get.return_value = permission
        permission_repo.has_permission.return_value = False

        await permission_service.ctx_user_delete(ctx, permission.id)

        permission_repo.has_permission.assert_not_awaited()
        permission_repo.delete.assert_awaited_once_with(permission.id)

    @pytest.mark.asyncio
    async def test_missing_permission(self, permission_service, permission_repo, ctx, permission) -> None:
        """Test an unknown permission is reported with its cause."""
        permission_repo.get.side_effect = NotFoundError()

        with pytest.raises(PermissionDeleteError) as exc_info:
            await permission_service.ctx_user_delete(ctx, permission.id)

        assert has_error_kind(exc_info.value, NotFoundError)
        permission_repo.delete.assert_not_awaited()
