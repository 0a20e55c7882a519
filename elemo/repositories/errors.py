# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Errors raised by repository implementations.

Services never swallow these; they are raised as the cause of the
operation error, except ``PermissionReadError`` which permission checks
treat as "denied".
"""


class RepositoryError(Exception):
    """Base exception for repository errors."""

    message = "repository error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NotFoundError(RepositoryError):
    message = "not found"


class AlreadyExistsError(RepositoryError):
    message = "already exists"


class PermissionReadError(RepositoryError):
    message = "failed to read permission"


class ResourceCountReadError(RepositoryError):
    message = "failed to read resource count"
