# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from collections.abc import Iterator
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNSUPPORTED_PROTOCOL = "UNSUPPORTED_PROTOCOL"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FetchError(Exception):
    """
    Base class for every failure raised by fetchkit.

    `body` holds the raw response bytes when a response was received (even if it
    could not be decoded) and is None for failures raised before dispatch.
    """

    def __init__(self, message: str, *, body: bytes | None = None, status_code: int | None = None):
        super().__init__(message)
        self.body = body
        self.status_code = status_code


class ConfigError(FetchError):
    """TLS material is missing, unreadable or not parsable."""


class MissingURLError(FetchError):
    """The request has no URL."""

    def __init__(self, message: str = "missing URL", **kwargs):
        super().__init__(message, **kwargs)


class ParseError(FetchError):
    """The request URL is malformed."""


class EncodeError(FetchError):
    """The request body cannot be serialized."""


class RequestBuildError(FetchError):
    """The transport-level request could not be built (e.g. invalid method token)."""


class TransportError(FetchError):
    """Network-level failure while dispatching the request."""

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR, **kwargs):
        super().__init__(message, **kwargs)
        self.category = category


class DeadlineExceededError(TransportError):
    """The client timeout or the caller's deadline fired before the response arrived."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.TIMEOUT)
        super().__init__(message, **kwargs)


class UnexpectedStatusCodeError(FetchError):
    """The response status differs from the expected one; the error body was decoded."""

    def __init__(self, expected: int, actual: int, *, body: bytes | None = None):
        super().__init__(f"unexpected status code: expected {expected}, got {actual}", body=body, status_code=actual)
        self.expected = expected
        self.actual = actual


class DecodeError(FetchError):
    """The response body could not be decoded into the selected target."""


class UnsupportedContentTypeError(DecodeError):
    """The response content type has no decoder."""

    def __init__(self, content_type: str | None, **kwargs):
        super().__init__(f"invalid content type: {content_type or '<none>'}", **kwargs)
        self.content_type = content_type


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps the low-level socket/ssl errors, so the whole cause chain is inspected.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, httpx.UnsupportedProtocol):
        return ErrorCategory.UNSUPPORTED_PROTOCOL

    for link in _exception_chain(exc):
        if isinstance(link, (ssl.SSLError, ssl.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(link, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNSUPPORTED_PROTOCOL: "Unsupported URL scheme",
        ErrorCategory.UNKNOWN_ERROR: "Network error",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "ConfigError",
    "DeadlineExceededError",
    "DecodeError",
    "EncodeError",
    "ErrorCategory",
    "FetchError",
    "MissingURLError",
    "ParseError",
    "RequestBuildError",
    "TransportError",
    "UnexpectedStatusCodeError",
    "UnsupportedContentTypeError",
    "categorize_exception",
    "error_category_to_reason",
]
