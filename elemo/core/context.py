# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request-scoped context passed explicitly to every service operation.

The context carries the principal, the id of the user on whose behalf the
operation runs. Its absence is an authorization failure, never a
validation failure.

Example:
    >>> ctx = RequestContext(user_id=ID.new(ResourceType.USER))
    >>> await user_service.update(ctx, ctx.user_id, {"first_name": "Ada"})
"""

from dataclasses import dataclass, field, replace
from typing import Any

from elemo.models.id import ID


@dataclass(frozen=True)
class RequestContext:
    """Request-scoped values.

    Attributes:
        user_id: The principal, if the request is authenticated.
        request_id: Correlation id of the request, if any.
        extra: Transport specific values the services do not interpret.
    """

    user_id: ID | None = None
    request_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def with_user(self, user_id: ID | None) -> "RequestContext":
        """Return a copy of the context acting as another principal."""
        return replace(self, user_id=user_id)


def ctx_user_id(ctx: RequestContext | None) -> ID | None:
    """Extract the principal from a context.

    Returns:
        The principal's id, or None if there is none.
    """
    if ctx is None or not isinstance(ctx.user_id, ID):
        return None
    return ctx.user_id
