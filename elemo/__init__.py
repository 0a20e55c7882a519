# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Elemo application service layer.

Authorization, license policy, validation and tracing around the
repositories of a multi-tenant collaboration platform.
"""

__version__ = "0.1.0"
