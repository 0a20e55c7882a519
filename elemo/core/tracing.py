# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Span-per-operation envelope for service methods.

Every public service coroutine is decorated with ``@traced``; the decorator
opens a span named ``service.<ServiceClass>/<method>`` on the service's
tracer and closes it on every exit path, including cancellation. Errors
pass through untouched.

Example:
    class UserService(BaseService):
        @traced
        async def get(self, ctx, id): ...

    # emits span "service.UserService/get"
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Tracer

R = TypeVar("R")

# Informational span events
EVENT_CHECK_PERMISSION = "check permission"
EVENT_PERMISSION_CHECKED = "permission checked"


class _HasTracer(Protocol):
    tracer: Tracer


def default_tracer() -> Tracer:
    """Return the tracer services use when none is configured."""
    return trace.NoOpTracer()


def span_name(service: object, operation: str) -> str:
    """Build the span name of a service operation."""
    return f"service.{type(service).__name__}/{operation}"


def traced(
    func: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """Wrap a service coroutine in a span."""
    operation = func.__name__

    @functools.wraps(func)
    async def wrapper(self: _HasTracer, *args: Any, **kwargs: Any) -> R:
        with self.tracer.start_as_current_span(span_name(self, operation)):
            return await func(self, *args, **kwargs)

    return wrapper


def add_event(name: str, **attributes: Any) -> None:
    """Add an event to the span of the running operation."""
    trace.get_current_span().add_event(name, attributes=attributes or None)
