# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .client import (
    Client,
    ClientConfig,
    ClientOption,
    new_client,
    with_http_client,
    with_logger,
    with_timeout,
    with_tls_config,
    with_transport,
)
from .codec import decode_body, encode_body
from .headers import RETRY_COUNT_HEADER, Headers, default_headers, header_value, media_type
from .models import ErrorBody
from .request import Request, new_request
from .url import parse_url

__all__ = [
    "Client",
    "ClientConfig",
    "ClientOption",
    "ErrorBody",
    "Headers",
    "RETRY_COUNT_HEADER",
    "Request",
    "decode_body",
    "default_headers",
    "encode_body",
    "header_value",
    "media_type",
    "new_client",
    "new_request",
    "parse_url",
    "with_http_client",
    "with_logger",
    "with_timeout",
    "with_tls_config",
    "with_transport",
]
