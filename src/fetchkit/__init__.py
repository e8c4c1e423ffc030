# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fetchkit package entrypoint.

fetchkit wraps httpx in a fluent request builder: a reusable Client carries the
transport (TLS, timeout, logger) and a per-call Request describes method, URL,
headers, body, the expected status and where to decode success and error bodies.
"""

from .config import FetchSettings, load_settings
from .errors import (
    ConfigError,
    DeadlineExceededError,
    DecodeError,
    EncodeError,
    ErrorCategory,
    FetchError,
    MissingURLError,
    ParseError,
    RequestBuildError,
    TransportError,
    UnexpectedStatusCodeError,
    UnsupportedContentTypeError,
)
from .http import (
    Client,
    ErrorBody,
    Request,
    new_client,
    new_request,
    with_http_client,
    with_logger,
    with_timeout,
    with_tls_config,
    with_transport,
)
from .log import setup_logging
from .tls import tls_config
from .utils.context import request_context
from .version import __version__

__all__ = [
    "Client",
    "ConfigError",
    "DeadlineExceededError",
    "DecodeError",
    "EncodeError",
    "ErrorBody",
    "ErrorCategory",
    "FetchError",
    "FetchSettings",
    "MissingURLError",
    "ParseError",
    "Request",
    "RequestBuildError",
    "TransportError",
    "UnexpectedStatusCodeError",
    "UnsupportedContentTypeError",
    "load_settings",
    "new_client",
    "new_request",
    "request_context",
    "setup_logging",
    "tls_config",
    "with_http_client",
    "with_logger",
    "with_timeout",
    "with_tls_config",
    "with_transport",
    "__version__",
]
