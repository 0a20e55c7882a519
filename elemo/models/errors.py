# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Validation errors raised by domain models."""


class ModelValidationError(ValueError):
    """Base exception for invalid model values."""

    message = "invalid model"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidIDError(ModelValidationError):
    message = "invalid id"


class InvalidUserDetailsError(ModelValidationError):
    message = "invalid user details"


class InvalidOrganizationDetailsError(ModelValidationError):
    message = "invalid organization details"


class InvalidPermissionDetailsError(ModelValidationError):
    message = "invalid permission details"


class InvalidLicenseError(ModelValidationError):
    message = "invalid license"
