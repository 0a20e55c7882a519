# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System domain."""

from elemo.domains.system.service import SystemService

__all__ = ["SystemService"]
