# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Typed resource identifiers.

An ID pairs an opaque UUID with the type of resource it identifies, so a
user id never compares equal to an organization id with the same value.
The nil id of a resource type addresses the type itself; permission checks
for "create a user" target ``ID.nil(ResourceType.USER)``.

Example:
    >>> user_id = ID.new(ResourceType.USER)
    >>> str(ID.nil(ResourceType.USER))
    'User:00000000-0000-0000-0000-000000000000'
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID, uuid4

from elemo.models.errors import InvalidIDError

NIL_UUID = UUID(int=0)


class ResourceType(str, Enum):
    """Kinds of resources an ID can point to."""

    ASSIGNMENT = "Assignment"
    ATTACHMENT = "Attachment"
    COMMENT = "Comment"
    DOCUMENT = "Document"
    ISSUE = "Issue"
    LABEL = "Label"
    NAMESPACE = "Namespace"
    NOTIFICATION = "Notification"
    ORGANIZATION = "Organization"
    PERMISSION = "Permission"
    PROJECT = "Project"
    ROLE = "Role"
    TODO = "Todo"
    USER = "User"


@dataclass(frozen=True)
class ID:
    """Identifier of a resource.

    Attributes:
        value: Unique value of the identifier.
        type: Resource type the identifier belongs to.
    """

    value: UUID
    type: ResourceType

    @classmethod
    def new(cls, resource_type: ResourceType) -> "ID":
        """Generate a fresh identifier for a resource type."""
        return cls(value=uuid4(), type=ResourceType(resource_type))

    @classmethod
    def nil(cls, resource_type: ResourceType) -> "ID":
        """Return the nil identifier of a resource type."""
        return cls(value=NIL_UUID, type=ResourceType(resource_type))

    @classmethod
    def parse(cls, text: str) -> "ID":
        """Parse an identifier from its ``<Type>:<uuid>`` form.

        Raises:
            InvalidIDError: If the text is not a valid identifier.
        """
        type_name, _, raw = text.partition(":")
        try:
            return cls(value=UUID(raw), type=ResourceType(type_name))
        except ValueError as e:
            raise InvalidIDError(f"invalid id: {text!r}") from e

    def is_nil(self) -> bool:
        return self.value == NIL_UUID

    def ensure_valid(self) -> None:
        """Check that the identifier has a UUID value and a known type.

        Raises:
            InvalidIDError: If the value or the type is malformed.
        """
        if not isinstance(self.value, UUID):
            raise InvalidIDError()
        if not isinstance(self.type, ResourceType):
            raise InvalidIDError("invalid resource type")

    def __str__(self) -> str:
        type_name = self.type.value if isinstance(self.type, ResourceType) else self.type
        return f"{type_name}:{self.value}"


def validate_id(value: object) -> ID:
    """Ensure an arbitrary value is a valid ID.

    Raises:
        InvalidIDError: If ``value`` is not an ID or is malformed.
    """
    if not isinstance(value, ID):
        raise InvalidIDError()
    value.ensure_valid()
    return value
