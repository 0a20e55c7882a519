# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""OpenTelemetry integration."""

from elemo.infrastructure.telemetry.setup import get_tracer, setup_telemetry

__all__ = ["get_tracer", "setup_telemetry"]
