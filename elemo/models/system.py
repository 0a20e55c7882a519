# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System health and version models."""

from enum import Enum

from pydantic import BaseModel


class HealthStatus(str, Enum):
    """Health of a probed resource."""

    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthCheckComponent(str, Enum):
    """Well-known names of the resources probed by the health check."""

    GRAPH_DATABASE = "graph_database"
    RELATIONAL_DATABASE = "relational_database"
    CACHE_DATABASE = "cache_database"
    MESSAGE_QUEUE = "message_queue"
    LICENSE = "license"


class VersionInfo(BaseModel):
    """Build identifiers disclosed by the system service."""

    version: str
    commit: str = ""
    date: str = ""
    python_version: str = ""
