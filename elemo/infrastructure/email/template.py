# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email templates rendered with Jinja2.

A template pairs the path of an HTML file with a typed data record. The
record is validated when the template is created; rendering happens when
the email is composed.

Example:
    >>> data = UserWelcomeTemplateData(
    ...     subject="Welcome to example.com",
    ...     hostname="example.com",
    ...     support_email="support@example.com",
    ...     first_name="Ada",
    ...     login_url="https://example.com/auth/login",
    ... )
    >>> template = new_template(Path("templates/email/user-welcome.html"), data)
    >>> html = template.render()
"""

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from pydantic import BaseModel, Field


class TemplateInvalidError(Exception):
    """Raised when a template has no path or no data."""


class TemplateRenderError(Exception):
    """Raised when a template cannot be rendered."""


class TemplateData(BaseModel):
    """Fields shared by every email template."""

    subject: str = Field(..., min_length=1)
    hostname: str = Field(..., min_length=1)
    support_email: str = Field(..., min_length=1)


class PasswordResetTemplateData(TemplateData):
    first_name: str = ""
    last_name: str = ""
    password_reset_url: str = Field(..., min_length=1)


class OrganizationInviteTemplateData(TemplateData):
    first_name: str = ""
    last_name: str = ""
    organization_name: str = Field(..., min_length=1)
    invitation_url: str = Field(..., min_length=1)


class LicenseExpiryTemplateData(TemplateData):
    license_id: str = Field(..., min_length=1)
    license_email: str = Field(..., min_length=1)
    license_organization: str = Field(..., min_length=1)
    license_expires_at: str = Field(..., min_length=1)
    server_url: str = Field(..., min_length=1)
    renew_email: str = Field(..., min_length=1)


class UserWelcomeTemplateData(TemplateData):
    first_name: str = ""
    last_name: str = ""
    login_url: str = Field(..., min_length=1)


@lru_cache(maxsize=8)
def _environment(directory: str) -> Environment:
    return Environment(loader=FileSystemLoader(directory), autoescape=select_autoescape())


class Template:
    """An HTML email template bound to its data.

    Attributes:
        path: Path of the template file.
        data: Values exposed to the template.
    """

    def __init__(self, path: Path, data: TemplateData) -> None:
        self.path = Path(path)
        self.data = data

    def render(self) -> str:
        """Render the template.

        Raises:
            TemplateRenderError: If the file is missing or rendering fails.
        """
        env = _environment(str(self.path.parent))
        try:
            return env.get_template(self.path.name).render(**self.data.model_dump())
        except TemplateError as e:
            raise TemplateRenderError(f"cannot render template '{self.path}': {e}") from e

    def __repr__(self) -> str:
        return f"Template(path={str(self.path)!r}, data={type(self.data).__name__})"


def new_template(path: Path | str, data: TemplateData | None) -> Template:
    """Create a template.

    Raises:
        TemplateInvalidError: If the path is empty or there is no data.
    """
    if str(path) in ("", "."):
        raise TemplateInvalidError("template path is empty")
    if data is None:
        raise TemplateInvalidError("template data is missing")
    return Template(Path(path), data)
