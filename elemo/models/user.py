# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, ValidationError

from elemo.models.errors import InvalidIDError, InvalidUserDetailsError
from elemo.models.id import ID, ResourceType

UNUSABLE_PASSWORD = "!unusable-password"

_email_adapter = TypeAdapter(EmailStr)


class UserStatus(str, Enum):
    """Lifecycle status of a user."""

    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"
    DELETED = "deleted"


class User(BaseModel):
    """A user of the platform.

    Attributes:
        id: User identifier; nil until the repository assigns one.
        username: Lowercase handle, 3 to 20 characters.
        email: Unique email address.
        password: Password hash or ``UNUSABLE_PASSWORD``.
        status: Lifecycle status.
        first_name: Given name.
        last_name: Family name.
        picture: Avatar URL.
        title: Job title.
        bio: Short biography.
        phone: Phone number.
        address: Postal address.
        links: Profile links.
        languages: Spoken language codes.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: ID = Field(default_factory=lambda: ID.nil(ResourceType.USER))
    username: str = ""
    email: str = ""
    password: str = Field(default="", repr=False)
    status: UserStatus = UserStatus.ACTIVE
    first_name: str = ""
    last_name: str = ""
    picture: str = ""
    title: str = ""
    bio: str = ""
    phone: str = ""
    address: str = ""
    links: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def ensure_valid(self) -> None:
        """Check the business rules of the user record.

        Raises:
            InvalidUserDetailsError: If any rule is violated.
        """
        try:
            self.id.ensure_valid()
        except InvalidIDError as e:
            raise InvalidUserDetailsError() from e

        if not self.email:
            raise InvalidUserDetailsError("email is required")
        try:
            _email_adapter.validate_python(self.email)
        except ValidationError as e:
            raise InvalidUserDetailsError(f"invalid email: {self.email!r}") from e

        if not 3 <= len(self.username) <= 20 or self.username != self.username.lower():
            raise InvalidUserDetailsError(f"invalid username: {self.username!r}")

        if len(self.password) < 8:
            raise InvalidUserDetailsError("password is too short")

        if self.status == UserStatus.DELETED and self.password != UNUSABLE_PASSWORD:
            raise InvalidUserDetailsError("deleted users must have an unusable password")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
