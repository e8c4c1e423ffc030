# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL validation for request descriptors."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import httpx

from ..errors import MissingURLError, ParseError

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_PATH_DELIMITERS = ("/", "?", "#")


def _first_segment(raw: str) -> str:
    end = len(raw)
    for delim in _PATH_DELIMITERS:
        idx = raw.find(delim)
        if idx != -1:
            end = min(end, idx)
    return raw[:end]


def parse_url(raw: str | None) -> httpx.URL:
    """
    Validate a request URL string and return it parsed.

    Raises MissingURLError for an empty value and ParseError for malformed input.
    Scheme support is left to the transport, which reports unknown schemes at dispatch.
    """
    if not raw:
        raise MissingURLError()

    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw):
        raise ParseError(f'parse "{raw}": invalid control character in URL')

    segment = _first_segment(raw)
    if ":" in segment:
        scheme = segment.split(":", 1)[0]
        if not scheme:
            raise ParseError(f'parse "{raw}": missing protocol scheme')
        if not _SCHEME_RE.match(scheme):
            raise ParseError(f'parse "{raw}": first path segment in URL cannot contain colon')

    try:
        urlsplit(raw)
        return httpx.URL(raw)
    except (ValueError, httpx.InvalidURL) as exc:
        raise ParseError(f'parse "{raw}": {exc}') from exc


__all__ = ["parse_url"]
