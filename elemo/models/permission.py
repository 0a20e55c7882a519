# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Permission model, permission kinds and system roles."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from elemo.models.errors import InvalidIDError, InvalidPermissionDetailsError
from elemo.models.id import ID, ResourceType


class PermissionKind(str, Enum):
    """What a permission allows on its target.

    ``ALL`` grants every other kind.
    """

    ALL = "*"
    CREATE = "create"
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class SystemRole(str, Enum):
    """Platform-wide roles held independently of any resource."""

    OWNER = "Owner"
    ADMIN = "Admin"
    SUPPORT = "Support"


class Permission(BaseModel):
    """A permission granted to a subject on a target."""

    id: ID = Field(default_factory=lambda: ID.nil(ResourceType.PERMISSION))
    kind: PermissionKind
    subject: ID
    target: ID
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def ensure_valid(self) -> None:
        """Check the permission record.

        Raises:
            InvalidPermissionDetailsError: If the ids are malformed or the
                subject equals the target.
        """
        try:
            for id_ in (self.id, self.subject, self.target):
                id_.ensure_valid()
        except InvalidIDError as e:
            raise InvalidPermissionDetailsError() from e
        if self.subject == self.target:
            raise InvalidPermissionDetailsError("permission subject and target are equal")
