# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from pydantic import ValidationError

from elemo.models import (
    ID,
    UNUSABLE_PASSWORD,
    InvalidIDError,
    InvalidLicenseError,
    InvalidOrganizationDetailsError,
    InvalidPermissionDetailsError,
    InvalidUserDetailsError,
    Organization,
    Permission,
    PermissionKind,
    Quota,
    ResourceType,
    UserStatus,
    validate_id,
)


class TestID:
    """Tests for typed identifiers."""

    def test_nil(self) -> None:
        """Test nil ids render with a zero UUID."""
        id_ = ID.nil(ResourceType.USER)

        assert id_.is_nil()
        assert str(id_) == "User:00000000-0000-0000-0000-000000000000"

    def test_new_is_unique(self) -> None:
        """Test generated ids differ."""
        assert ID.new(ResourceType.USER) != ID.new(ResourceType.USER)

    def test_types_are_part_of_identity(self) -> None:
        """Test ids of different types with one value are different."""
        value = UUID("7f1a3b1e-0000-4000-8000-000000000001")

        assert ID(value, ResourceType.USER) != ID(value, ResourceType.ORGANIZATION)

    def test_parse(self) -> None:
        """Test parsing the string form."""
        id_ = ID.new(ResourceType.ORGANIZATION)

        assert ID.parse(str(id_)) == id_

    @pytest.mark.parametrize("text", ["", "User", "User:not-a-uuid", "Nope:00000000-0000-0000-0000-000000000000"])
    def test_parse_invalid(self, text: str) -> None:
        """Test malformed ids are rejected."""
        with pytest.raises(InvalidIDError):
            ID.parse(text)

    def test_validate_id_rejects_other_values(self) -> None:
        """Test only ID instances are valid ids."""
        with pytest.raises(InvalidIDError):
            validate_id("User:00000000-0000-0000-0000-000000000000")


class TestUser:
    """Tests for user validation."""

    def test_valid_user(self, sample_user) -> None:
        """Test a complete user passes validation."""
        sample_user.ensure_valid()

    def test_full_name(self, sample_user) -> None:
        """Test the full name joins first and last names."""
        assert sample_user.full_name == "Ada Lovelace"

    def test_password_hidden_from_repr(self, sample_user) -> None:
        """Test the password never appears in the repr."""
        assert sample_user.password not in repr(sample_user)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": ""},
            {"email": "not-an-email"},
            {"username": "ab"},
            {"username": "Ada"},
            {"username": "a" * 21},
            {"password": "short"},
            {"status": UserStatus.DELETED},
        ],
    )
    def test_invalid_user(self, user_factory, overrides: dict) -> None:
        """Test each broken rule is reported."""
        with pytest.raises(InvalidUserDetailsError):
            user_factory(**overrides).ensure_valid()

    def test_deleted_user_with_unusable_password(self, user_factory) -> None:
        """Test deleted users are valid once their password is scrubbed."""
        user_factory(status=UserStatus.DELETED, password=UNUSABLE_PASSWORD).ensure_valid()


class TestOrganization:
    """Tests for organization validation."""

    def test_valid(self) -> None:
        """Test a complete organization passes validation."""
        Organization(name="ACME", email="info@acme.com").ensure_valid()

    @pytest.mark.parametrize(
        "values",
        [
            {"name": "", "email": "info@acme.com"},
            {"name": "x" * 121, "email": "info@acme.com"},
            {"name": "ACME", "email": "acme"},
        ],
    )
    def test_invalid(self, values: dict) -> None:
        """Test broken rules are reported."""
        with pytest.raises(InvalidOrganizationDetailsError):
            Organization(**values).ensure_valid()


class TestPermission:
    """Tests for permission validation."""

    def test_subject_must_differ_from_target(self) -> None:
        """Test a permission on oneself is invalid."""
        id_ = ID.new(ResourceType.USER)
        permission = Permission(kind=PermissionKind.READ, subject=id_, target=id_)

        with pytest.raises(InvalidPermissionDetailsError):
            permission.ensure_valid()

    def test_valid(self) -> None:
        """Test a permission between two resources is valid."""
        Permission(
            kind=PermissionKind.ALL,
            subject=ID.new(ResourceType.USER),
            target=ID.new(ResourceType.ORGANIZATION),
        ).ensure_valid()


class TestLicense:
    """Tests for the license value."""

    def test_expired(self, license_factory) -> None:
        """Test expiry compares against the current time."""
        now = datetime.now(timezone.utc)

        assert license_factory(expires_at=now - timedelta(hours=1)).expired()
        assert not license_factory(expires_at=now + timedelta(hours=1)).expired()

    def test_naive_expiry_is_utc(self, license_factory) -> None:
        """Test naive datetimes are read as UTC."""
        license = license_factory(expires_at=datetime(2030, 1, 1))

        assert license.expires_at == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_expires_within(self, license_factory) -> None:
        """Test the reminder window."""
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        license = license_factory(expires_at=now + timedelta(days=10))

        assert license.expires_within(timedelta(days=30), now=now)
        assert not license.expires_within(timedelta(days=5), now=now)

    def test_within_threshold(self, license_factory) -> None:
        """Test one more resource must fit below the limit."""
        license = license_factory(quotas={Quota.USERS: 2})

        assert license.within_threshold(Quota.USERS, 1)
        assert not license.within_threshold(Quota.USERS, 2)
        assert not license.within_threshold(Quota.PROJECTS, 0)

    def test_negative_quota_rejected(self, license_factory) -> None:
        """Test quotas cannot be negative."""
        with pytest.raises(ValidationError):
            license_factory(quotas={Quota.USERS: -1})

    def test_frozen(self, license) -> None:
        """Test the license cannot be mutated."""
        with pytest.raises(ValidationError):
            license.email = "other@example.com"

    def test_has_feature(self, license) -> None:
        """Test feature lookup."""
        assert license.has_feature("components")
        assert not license.has_feature("unknown")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"id": ""},
            {"features": frozenset()},
            {"quotas": {Quota.USERS: 1}},
            {"quotas": {**{quota: 1 for quota in Quota}, Quota.ROLES: 0}},
        ],
    )
    def test_incomplete_license(self, license_factory, overrides: dict) -> None:
        """Test incomplete licenses are rejected."""
        with pytest.raises(InvalidLicenseError):
            license_factory(**overrides).ensure_valid()
