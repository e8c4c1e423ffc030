# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request descriptors and their execution protocol."""

from __future__ import annotations

import re
from typing import Any

import httpx

from ..errors import (
    DeadlineExceededError,
    DecodeError,
    FetchError,
    RequestBuildError,
    UnexpectedStatusCodeError,
)
from ..utils.context import get_request_context, request_context
from .client import Client
from .codec import decode_body, encode_body
from .headers import CORRELATION_ID_HEADER, RETRY_COUNT_HEADER, Headers, default_headers, header_value
from .models import ErrorBody
from .url import parse_url

DEFAULT_METHOD = "GET"
DEFAULT_EXPECTED_STATUS = 200

# RFC 9110 token characters.
_METHOD_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def _effective_timeout(client_timeout: httpx.Timeout, remaining: float | None) -> httpx.Timeout:
    if remaining is None:
        return client_timeout

    def bound(value: float | None) -> float:
        return remaining if value is None else min(value, remaining)

    return httpx.Timeout(
        connect=bound(client_timeout.connect),
        read=bound(client_timeout.read),
        write=bound(client_timeout.write),
        pool=bound(client_timeout.pool),
    )


class Request:
    """
    Per-call request descriptor built through chainable setters.

    Defaults: method GET, `Content-Type`/`Accept: application/json` headers, expected
    status 200, no retries, no success target and an `ErrorBody` error target.

    A Request is not safe to share between concurrent `send` calls: retries rewrite
    its headers and every attempt overwrites its result fields.
    """

    def __init__(self) -> None:
        self.method: str = DEFAULT_METHOD
        self.url: str = ""
        self.headers: Headers = default_headers()
        self.body: Any = None
        self.retries: int = 0
        self.expected_status_code: int = DEFAULT_EXPECTED_STATUS

        self._response_target: Any = None
        self._error_target: Any = ErrorBody()
        self._response: Any = None
        self._error_response: Any = self._error_target
        self._status_code: int = 0
        self._raw_body: bytes = b""

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url or '<no url>'}>"

    # Builder

    def set_method(self, method: str) -> Request:
        self.method = method
        return self

    def set_url(self, url: str | httpx.URL) -> Request:
        self.url = str(url)
        return self

    def set_request_body(self, body: Any) -> Request:
        self.body = body
        return self

    def set_response_body(self, target: Any) -> Request:
        """Decode a response with the expected status into `target`."""
        self._response_target = target
        self._response = target
        return self

    def set_error_response_body(self, target: Any) -> Request:
        """Decode a response with any other status into `target`."""
        self._error_target = target
        self._error_response = target
        return self

    def set_expected_status_code(self, status_code: int) -> Request:
        self.expected_status_code = status_code
        return self

    def enable_retries(self, retries: int) -> Request:
        self.retries = retries
        return self

    def add_header(self, key: str, value: str) -> Request:
        self.headers[key] = value
        return self

    def set_auth_token(self, token: str) -> Request:
        return self.add_header("Authorization", f"Bearer {token}")

    # Results

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def response(self) -> Any:
        return self._response

    @property
    def error_response(self) -> Any:
        return self._error_response

    @property
    def raw_body(self) -> bytes:
        return self._raw_body

    def get_status_code(self) -> int:
        return self._status_code

    def get_response(self) -> Any:
        return self._response

    def get_error_response(self) -> Any:
        return self._error_response

    # Execution

    def send(self, client: Client, *, timeout: float | None = None) -> bytes:
        """
        Execute the request and return the raw response body.

        With retries enabled, up to `retries` attempts are made, each tagged with a
        zero-based `Retry-Count` header; the first successful attempt wins and the
        error of the final attempt is raised when all of them fail. `timeout` bounds
        the whole call, retries included, on top of the client timeout.
        """
        with request_context(timeout=timeout):
            if self.retries <= 0:
                return self._attempt(client)

            attempt = 0
            while True:
                self.add_header(RETRY_COUNT_HEADER, str(attempt))
                try:
                    return self._attempt(client)
                except FetchError as exc:
                    client.logger.debug("attempt %d/%d of %r failed: %s", attempt + 1, self.retries, self, exc)
                    attempt += 1
                    if attempt >= self.retries:
                        raise

    do = send

    def _build(self, client: Client) -> httpx.Request:
        logger = client.logger
        try:
            url = parse_url(self.url)
        except FetchError as exc:
            logger.error("error parsing request URL: %s", exc)
            raise

        content = b""
        if self.body is not None:
            try:
                content = encode_body(self.body)
            except FetchError as exc:
                logger.error("error encoding request body: %s", exc)
                raise

        method = self.method or DEFAULT_METHOD
        if not _METHOD_TOKEN_RE.fullmatch(method):
            logger.error("error creating request: invalid method %r", method)
            raise RequestBuildError(f"net/http: invalid method {method!r}")

        context = get_request_context()
        headers = dict(self.headers)
        if context.correlation_id and not header_value(headers, CORRELATION_ID_HEADER):
            headers[CORRELATION_ID_HEADER] = context.correlation_id

        return client.build_request(
            method,
            url,
            content=content,
            headers=headers,
            timeout=_effective_timeout(client.timeout, context.remaining()),
        )

    def _attempt(self, client: Client) -> bytes:
        logger = client.logger
        self._status_code = 0
        self._raw_body = b""
        http_request = self._build(client)

        try:
            if get_request_context().expired:
                raise DeadlineExceededError(f'{http_request.method.title()} "{http_request.url}": context deadline exceeded')
            response = client.dispatch(http_request)
        except FetchError as exc:
            logger.error("error sending request: %s", exc)
            raise

        self._status_code = response.status_code
        raw = response.content
        self._raw_body = raw
        content_type = response.headers.get("content-type")

        if response.status_code != self.expected_status_code:
            logger.error("unexpected status code: expected %d, got %d", self.expected_status_code, response.status_code)
            try:
                self._error_response = decode_body(content_type, raw, self._error_target)
            except DecodeError as exc:
                logger.error("error decoding error response: %s", exc)
                exc.body = raw
                exc.status_code = response.status_code
                raise
            raise UnexpectedStatusCodeError(self.expected_status_code, response.status_code, body=raw)

        # Nothing was asked for and nothing came back (e.g. 204).
        if not raw and self._response_target is None:
            return raw

        try:
            self._response = decode_body(content_type, raw, self._response_target)
        except DecodeError as exc:
            logger.error("error decoding response: %s", exc)
            exc.body = raw
            exc.status_code = response.status_code
            raise
        return raw


def new_request() -> Request:
    """Return a Request with default values."""
    return Request()


__all__ = ["DEFAULT_EXPECTED_STATUS", "DEFAULT_METHOD", "Request", "new_request"]
