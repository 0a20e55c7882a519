# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System service for liveness, health and version disclosure.

The health check probes every registered resource concurrently:

1. every resource starts as ``unknown``;
2. one task per resource pings it and records ``healthy`` or
   ``unhealthy`` under a shared lock;
3. failures are offered to a single-slot queue, so only the first one is
   kept; the others are visible through the statuses alone;
4. once every task finished, the statuses and the first failure (if any)
   are returned.

Example:
    >>> statuses, error = await system_service.get_health(ctx)
    >>> statuses
    {'graph_database': <HealthStatus.HEALTHY: 'healthy'>, ...}
"""

import asyncio
import contextlib
from collections.abc import Mapping
from types import MappingProxyType

from elemo.core.context import RequestContext
from elemo.core.errors import NoResourcesError, NoVersionInfoError, SystemHealthCheckError
from elemo.core.tracing import add_event, traced
from elemo.domains.base import BaseService, Option
from elemo.models import HealthStatus, VersionInfo
from elemo.repositories import Pingable


def _display_name(name: object) -> str:
    return str(getattr(name, "value", name))


class SystemService(BaseService):
    """Service reporting the state of the running system.

    Args:
        resources: Named resources probed by the health check.
        version: Build identifiers disclosed by ``get_version``.

    Raises:
        NoVersionInfoError: If ``version`` is None.
        NoResourcesError: If ``resources`` is None or empty.
    """

    def __init__(
        self,
        resources: Mapping[str, Pingable] | None,
        version: VersionInfo | None,
        *opts: Option,
    ) -> None:
        super().__init__(*opts)

        if version is None:
            raise NoVersionInfoError()

        if not resources:
            raise NoResourcesError()

        self._version = version
        self._resources: Mapping[str, Pingable] = MappingProxyType(dict(resources))

    @property
    def resources(self) -> Mapping[str, Pingable]:
        return self._resources

    @traced
    async def get_heartbeat(self, ctx: RequestContext) -> None:
        """Liveness probe; always succeeds."""

    @traced
    async def get_version(self, ctx: RequestContext) -> VersionInfo:
        """Return a copy of the build identifiers."""
        return self._version.model_copy()

    @traced
    async def get_health(
        self,
        ctx: RequestContext,
    ) -> tuple[dict[str, HealthStatus], SystemHealthCheckError | None]:
        """Probe every resource concurrently.

        Returns:
            The status of every resource, none of them ``unknown``, and the
            first failure wrapped in ``SystemHealthCheckError``, or None if
            every resource is healthy.
        """
        statuses = {name: HealthStatus.UNKNOWN for name in self._resources}
        lock = asyncio.Lock()
        errors: asyncio.Queue[SystemHealthCheckError] = asyncio.Queue(maxsize=1)

        async def check(name: str, resource: Pingable) -> None:
            add_event(f"Check {_display_name(name)} health")

            status = HealthStatus.HEALTHY
            try:
                await resource.ping(ctx)
            except Exception as e:
                status = HealthStatus.UNHEALTHY
                error = SystemHealthCheckError()
                error.__cause__ = e
                # first error wins
                with contextlib.suppress(asyncio.QueueFull):
                    errors.put_nowait(error)

            async with lock:
                statuses[name] = status

        await asyncio.gather(*(check(name, resource) for name, resource in self._resources.items()))

        first_error = None if errors.empty() else errors.get_nowait()
        return statuses, first_error
