# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across the unit tests:
- Request contexts with and without a principal
- Repository doubles built from the repository contracts
- A valid license and a tracer recording spans in memory
"""

from collections.abc import Generator
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from elemo.core.config import clear_settings_cache
from elemo.core.context import RequestContext
from elemo.models import ID, License, Quota, ResourceType, User
from elemo.repositories import (
    LicenseRepository,
    NotFoundError,
    OrganizationRepository,
    PermissionRepository,
    UserRepository,
)
from elemo.utils.datetime import utc_now


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Reload settings from the environment around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def principal_id() -> ID:
    """Provide the id of the user performing requests."""
    return ID.new(ResourceType.USER)


@pytest.fixture
def ctx(principal_id: ID) -> RequestContext:
    """Provide a context carrying a principal."""
    return RequestContext(user_id=principal_id, request_id="req-1")


@pytest.fixture
def anonymous_ctx() -> RequestContext:
    """Provide a context without a principal."""
    return RequestContext(request_id="req-anonymous")


# =============================================================================
# Tracing Fixtures
# =============================================================================


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Provide an exporter collecting finished spans."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter):
    """Provide an SDK tracer exporting to the in-memory exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("elemo.tests")


def span_names(exporter: InMemorySpanExporter) -> list[str]:
    """Return the names of the finished spans in completion order."""
    return [span.name for span in exporter.get_finished_spans()]


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def permission_repo() -> AsyncMock:
    """Create a permission repository granting everything."""
    repo = AsyncMock(spec=PermissionRepository)
    repo.has_permission.return_value = True
    repo.has_system_role.return_value = True
    repo.get_by_subject_and_target.return_value = []
    return repo


@pytest.fixture
def user_repo() -> AsyncMock:
    """Create a mock user repository."""
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def organization_repo() -> AsyncMock:
    """Create a mock organization repository."""
    repo = AsyncMock(spec=OrganizationRepository)
    repo.get_members.return_value = []
    return repo


@pytest.fixture
def license_repo() -> AsyncMock:
    """Create a license repository reporting a single resource of each kind."""
    repo = AsyncMock(spec=LicenseRepository)
    for counter in (
        "active_user_count",
        "active_organization_count",
        "document_count",
        "namespace_count",
        "project_count",
        "role_count",
    ):
        getattr(repo, counter).return_value = 1
    return repo


@pytest.fixture
def license_service_double() -> AsyncMock:
    """Create a license service with an active license and free quotas."""
    service = AsyncMock()
    service.expired.return_value = False
    service.within_threshold.return_value = True
    return service


# =============================================================================
# Model Fixtures
# =============================================================================


def make_license(**overrides: Any) -> License:
    """Build a complete license expiring in a year."""
    values: dict[str, Any] = {
        "id": "123456789",
        "email": "info@example.com",
        "organization": "ACME Inc.",
        "expires_at": utc_now() + timedelta(days=365),
        "features": frozenset({"components", "custom_statuses"}),
        "quotas": {quota: 10 for quota in Quota},
    }
    values.update(overrides)
    return License(**values)


@pytest.fixture
def license() -> License:
    """Provide a valid license."""
    return make_license()


def make_user(**overrides: Any) -> User:
    """Build a valid active user."""
    values: dict[str, Any] = {
        "id": ID.new(ResourceType.USER),
        "username": "ada",
        "email": "ada@example.com",
        "password": "super-secret-password",
        "first_name": "Ada",
        "last_name": "Lovelace",
    }
    values.update(overrides)
    return User(**values)


@pytest.fixture
def sample_user() -> User:
    """Provide a valid user."""
    return make_user()


class InMemoryUserRepository(UserRepository):
    """User repository keeping users in a dict."""

    def __init__(self, *users: User) -> None:
        self.users: dict[ID, User] = {user.id: user for user in users}

    async def create(self, user: User) -> None:
        if user.id.is_nil():
            user = user.model_copy(update={"id": ID.new(ResourceType.USER)})
        self.users[user.id] = user

    async def get(self, id: ID) -> User:
        try:
            return self.users[id]
        except KeyError:
            raise NotFoundError() from None

    async def get_by_email(self, email: str) -> User:
        for user in self.users.values():
            if user.email == email:
                return user
        raise NotFoundError()

    async def get_all(self, offset: int, limit: int) -> list[User]:
        return list(self.users.values())[offset : offset + limit]

    async def update(self, id: ID, patch: dict[str, Any]) -> User:
        user = (await self.get(id)).model_copy(update=patch)
        self.users[id] = user
        return user

    async def delete(self, id: ID) -> None:
        await self.get(id)
        del self.users[id]


@pytest.fixture
def license_factory():
    """Provide the license builder."""
    return make_license


@pytest.fixture
def user_factory():
    """Provide the user builder."""
    return make_user


@pytest.fixture
def memory_user_repo() -> InMemoryUserRepository:
    """Provide an empty in-memory user repository."""
    return InMemoryUserRepository()


@pytest.fixture
def finished_span_names(span_exporter: InMemorySpanExporter):
    """Provide a callable listing the names of the finished spans."""
    return lambda: span_names(span_exporter)
