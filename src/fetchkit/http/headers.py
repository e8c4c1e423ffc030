# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110), while request descriptors keep
header keys exactly as supplied. Lookups therefore go through `header_value`.
"""

from __future__ import annotations

from collections.abc import Mapping

Headers = dict[str, str]

RETRY_COUNT_HEADER = "Retry-Count"
CORRELATION_ID_HEADER = "X-Correlation-ID"

_DEFAULT_HEADERS: Mapping[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def default_headers() -> Headers:
    """Return a new, independently owned copy of the default request headers."""
    return dict(_DEFAULT_HEADERS)


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """
    Return a header value using case-insensitive key matching.

    Fast-paths the exact key before falling back to a full scan.
    """
    if not headers or not name:
        return default

    if name in headers:
        value = headers[name]
        return default if value is None else str(value).strip()

    lower = name.lower()
    for key, value in headers.items():
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def media_type(content_type: str | None) -> str:
    """
    Return the bare, lowercased media type of a Content-Type value.

    `application/json; charset=utf-8` -> `application/json`
    """
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


__all__ = [
    "CORRELATION_ID_HEADER",
    "Headers",
    "RETRY_COUNT_HEADER",
    "default_headers",
    "header_value",
    "media_type",
]
