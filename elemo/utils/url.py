# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""URL composition for links embedded in emails."""

import re
from urllib.parse import urlsplit

_REPEATED_SLASHES = re.compile(r"/{2,}")


def build_https_url(hostname: str, path: str = "") -> str:
    """Build an ``https://`` URL from a hostname and a path.

    Any scheme already present on ``hostname`` is dropped, and the path is
    joined with exactly one separator.

    Args:
        hostname: Host, optionally with a port or a scheme.
        path: Path, optionally with a query string.

    Returns:
        The absolute URL.

    Example:
        >>> build_https_url("https://example.com/", "//reset")
        'https://example.com/reset'
    """
    host = hostname.strip()
    if "://" in host:
        host = urlsplit(host).netloc
    host = host.strip("/")

    path, sep, query = path.partition("?")
    path = path.strip()
    if path:
        path = _REPEATED_SLASHES.sub("/", "/" + path)

    url = f"https://{host}{path}"
    if sep:
        url = f"{url}?{query}"
    return url
