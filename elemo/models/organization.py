# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Organization and membership models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, ValidationError

from elemo.models.errors import InvalidIDError, InvalidOrganizationDetailsError
from elemo.models.id import ID, ResourceType
from elemo.models.user import UserStatus

_email_adapter = TypeAdapter(EmailStr)


class OrganizationStatus(str, Enum):
    """Lifecycle status of an organization."""

    ACTIVE = "active"
    DELETED = "deleted"


class Organization(BaseModel):
    """An organization grouping users, namespaces and teams.

    The member, namespace and team lists are a snapshot taken when the
    organization was read; membership changes go through the repository.
    """

    id: ID = Field(default_factory=lambda: ID.nil(ResourceType.ORGANIZATION))
    name: str = ""
    email: str = ""
    logo: str = ""
    website: str = ""
    status: OrganizationStatus = OrganizationStatus.ACTIVE
    members: list[ID] = Field(default_factory=list)
    namespaces: list[ID] = Field(default_factory=list)
    teams: list[ID] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def ensure_valid(self) -> None:
        """Check the business rules of the organization record.

        Raises:
            InvalidOrganizationDetailsError: If any rule is violated.
        """
        if not 1 <= len(self.name) <= 120:
            raise InvalidOrganizationDetailsError(f"invalid name: {self.name!r}")
        try:
            _email_adapter.validate_python(self.email)
        except ValidationError as e:
            raise InvalidOrganizationDetailsError(f"invalid email: {self.email!r}") from e
        try:
            for id_ in (self.id, *self.members, *self.namespaces, *self.teams):
                id_.ensure_valid()
        except InvalidIDError as e:
            raise InvalidOrganizationDetailsError() from e


class OrganizationMember(BaseModel):
    """A member of an organization annotated with its roles."""

    id: ID
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    picture: str = ""
    status: UserStatus = UserStatus.ACTIVE
    roles: list[str] = Field(default_factory=list)
