# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Reusable httpx-backed client and its configuration options.

A Client is built once with `new_client(*options)` and shared by many requests.
Options are applied in the order given:

- `with_tls_config` / `with_transport` replace the transport wholesale.
- `with_timeout` sets the timeout applied to every request.
- `with_http_client` replaces the whole httpx client. Transport and timeout options
  applied *before* it are discarded, so pass it first.
- `with_logger` replaces the default `fetchkit` logger.
"""

from __future__ import annotations

import logging
import ssl
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..config import FetchSettings, load_settings
from ..errors import DeadlineExceededError, ErrorCategory, TransportError, categorize_exception
from ..log import default_logger

_KEEP_CLIENT_TIMEOUT: Any = object()


@dataclass
class ClientConfig:
    """Mutable assembly state that options act upon before the Client is built."""

    settings: FetchSettings = field(default_factory=load_settings)
    timeout: Any = None
    transport: httpx.BaseTransport | None = None
    tls_context: ssl.SSLContext | None = None
    http_client: httpx.Client | None = None
    logger: logging.Logger | None = None

    def __post_init__(self) -> None:
        if self.timeout is None:
            self.timeout = self.settings.timeout


ClientOption = Callable[[ClientConfig], None]


def with_tls_config(tls_context: ssl.SSLContext) -> ClientOption:
    """Use a transport carrying `tls_context`, replacing any previously configured transport."""

    def apply(config: ClientConfig) -> None:
        if config.http_client is not None:
            if config.timeout is _KEEP_CLIENT_TIMEOUT:
                config.timeout = config.http_client.timeout
            config.http_client = None
        config.transport = httpx.HTTPTransport(verify=tls_context)
        config.tls_context = tls_context

    return apply


def with_transport(transport: httpx.BaseTransport) -> ClientOption:
    """Use a custom httpx transport (e.g. `httpx.MockTransport`), replacing any previous one."""

    def apply(config: ClientConfig) -> None:
        if config.http_client is not None:
            if config.timeout is _KEEP_CLIENT_TIMEOUT:
                config.timeout = config.http_client.timeout
            config.http_client = None
        config.transport = transport
        config.tls_context = None

    return apply


def with_timeout(seconds: float | None) -> ClientOption:
    """Apply a timeout (seconds) to every request issued through the client. None disables it."""

    def apply(config: ClientConfig) -> None:
        config.timeout = seconds

    return apply


def with_http_client(http_client: httpx.Client) -> ClientOption:
    """
    Use a fully configured httpx client.

    Warning: this overrides transport and timeout settings applied by earlier options.
    A later `with_timeout` is applied per request; `http_client` itself is not modified.
    """

    def apply(config: ClientConfig) -> None:
        config.http_client = http_client
        config.transport = None
        config.tls_context = None
        config.timeout = _KEEP_CLIENT_TIMEOUT

    return apply


def with_logger(logger: logging.Logger) -> ClientOption:
    """Log through `logger` instead of the package default."""

    def apply(config: ClientConfig) -> None:
        config.logger = logger

    return apply


def _as_timeout(value: Any) -> httpx.Timeout:
    if isinstance(value, httpx.Timeout):
        return value
    return httpx.Timeout(value)


class Client:
    """Synchronous httpx client wrapper shared across requests."""

    def __init__(
        self,
        http_client: httpx.Client,
        *,
        logger: logging.Logger | None = None,
        tls_context: ssl.SSLContext | None = None,
        timeout: httpx.Timeout | None = None,
    ):
        self.http_client = http_client
        self._timeout = timeout
        self.logger = logger or default_logger()
        self.tls_context = tls_context

    @property
    def timeout(self) -> httpx.Timeout:
        """Timeout applied to each request; falls back to the httpx client's own."""
        if self._timeout is not None:
            return self._timeout
        return self.http_client.timeout

    def build_request(
        self,
        method: str,
        url: httpx.URL,
        *,
        content: bytes,
        headers: dict[str, str],
        timeout: float | None | httpx.Timeout,
    ) -> httpx.Request:
        """Build a transport request; descriptor headers override the client defaults."""
        request = self.http_client.build_request(method, url, content=content, timeout=_as_timeout(timeout))
        for key, value in headers.items():
            request.headers[key] = value
        return request

    def dispatch(self, request: httpx.Request) -> httpx.Response:
        """Send `request` and return the fully read response, mapping failures to TransportError."""
        try:
            response = self.http_client.send(request)
        except httpx.TimeoutException as exc:
            raise DeadlineExceededError(f'{request.method.title()} "{request.url}": context deadline exceeded: {exc}') from exc
        except httpx.HTTPError as exc:
            category = categorize_exception(exc)
            if category is ErrorCategory.UNSUPPORTED_PROTOCOL:
                message = f'{request.method.title()} "{request.url}": unsupported protocol scheme "{request.url.scheme}"'
            else:
                message = f'{request.method.title()} "{request.url}": {exc}'
            raise TransportError(message, category=category) from exc
        return response

    def close(self) -> None:
        self.http_client.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


def new_client(*options: ClientOption, settings: FetchSettings | None = None) -> Client:
    """Build a Client from the defaults in `settings` (env-backed) and `options`, applied in order."""
    config = ClientConfig(settings=settings or load_settings())
    for option in options:
        option(config)

    timeout = None
    if config.http_client is not None:
        http_client = config.http_client
        if config.timeout is not _KEEP_CLIENT_TIMEOUT:
            timeout = _as_timeout(config.timeout)
    else:
        http_client = httpx.Client(
            transport=config.transport,
            timeout=_as_timeout(config.timeout),
            follow_redirects=config.settings.follow_redirects,
            verify=config.settings.verify_ssl,
            headers={"User-Agent": config.settings.user_agent},
        )

    return Client(http_client, logger=config.logger, tls_context=config.tls_context, timeout=timeout)


__all__ = [
    "Client",
    "ClientConfig",
    "ClientOption",
    "new_client",
    "with_http_client",
    "with_logger",
    "with_timeout",
    "with_tls_config",
    "with_transport",
]
