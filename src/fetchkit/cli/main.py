# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""fetchkit CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import load_settings
from ..errors import FetchError, TransportError, error_category_to_reason
from ..http import Client, Request, new_client, with_timeout, with_tls_config
from ..log import setup_logging
from ..tls import tls_config

CLI_TEXT_TRUNCATION_BYTES = 4096


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    suffix_bytes = suffix.encode("utf-8")
    keep = max_bytes - len(suffix_bytes)
    if keep <= 0:
        return suffix_bytes[:max_bytes].decode("utf-8", errors="ignore")
    prefix = raw[:keep].decode("utf-8", errors="ignore")
    return prefix + suffix


def _header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"invalid header {raw!r}, expected 'Name: value'")
    return name.strip(), value.strip()


def _json_body(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"request body is not valid JSON: {exc}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fetchkit", description="Send an HTTP request and decode its JSON/XML response")
    parser.add_argument("url", help="Target URL")
    parser.add_argument("-X", "--method", default="GET", help="HTTP method (default: GET)")
    parser.add_argument("-H", "--header", dest="headers", action="append", type=_header, default=[], help="Extra header 'Name: value' (repeatable)")
    parser.add_argument("-d", "--data", type=_json_body, default=None, help="JSON request body")
    parser.add_argument("--expect", type=int, default=200, help="Expected status code (default: 200)")
    parser.add_argument("--retries", type=int, default=0, help="Number of attempts when the request fails")
    parser.add_argument("--timeout", type=float, default=None, help="Client timeout in seconds")
    parser.add_argument("--bearer", default=None, help="Bearer token for the Authorization header")
    parser.add_argument("--ca", default="", help="CA certificate (PEM)")
    parser.add_argument("--cert", default="", help="Client certificate (PEM)")
    parser.add_argument("--key", default="", help="Client private key (PEM)")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON summary instead of the raw body")
    parser.add_argument("--log-level", default=None, help="Logging level (default: FETCHKIT_LOG_LEVEL or WARNING)")
    return parser


def build_client(args: argparse.Namespace) -> Client:
    settings = load_settings()
    if args.insecure:
        settings.verify_ssl = False

    options = []
    if args.cert or args.key:
        options.append(with_tls_config(tls_config(args.ca, args.cert, args.key, insecure_skip_verify=args.insecure)))
    if args.timeout is not None:
        options.append(with_timeout(args.timeout))
    return new_client(*options, settings=settings)


def build_request(args: argparse.Namespace) -> Request:
    request = (
        Request()
        .set_method(args.method.upper())
        .set_url(args.url)
        .set_expected_status_code(args.expect)
        .enable_retries(args.retries)
        .set_error_response_body(None)
    )
    if args.data is not None:
        request.set_request_body(args.data)
    if args.bearer:
        request.set_auth_token(args.bearer)
    for name, value in args.headers:
        request.add_header(name, value)
    return request


def _error_reason(error: FetchError) -> str:
    if isinstance(error, TransportError):
        return error_category_to_reason(error.category)
    return ""


def _print_summary(request: Request, body: bytes | None, error: FetchError | None) -> None:
    error_info = None
    if error is not None:
        error_info = {"type": type(error).__name__, "message": str(error), "reason": _error_reason(error)}
    payload: dict[str, Any] = {
        "status_code": request.status_code or None,
        "response": request.response,
        "error_response": request.error_response,
        "error": error_info,
        "body": None if body is None else _truncate_text_bytes(body.decode("utf-8", errors="replace"), CLI_TEXT_TRUNCATION_BYTES),
    }
    json.dump(payload, sys.stdout, indent=2, sort_keys=True, default=str)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        client = build_client(args)
    except FetchError as exc:
        print(f"fetchkit: {exc}", file=sys.stderr)
        return 2

    request = build_request(args)
    with client:
        try:
            body: bytes | None = request.send(client)
            error: FetchError | None = None
        except FetchError as exc:
            body, error = exc.body, exc

    if args.json:
        _print_summary(request, body, error)
    elif body:
        sys.stdout.write(body.decode("utf-8", errors="replace"))
        if not body.endswith(b"\n"):
            sys.stdout.write("\n")

    if error is not None:
        reason = _error_reason(error)
        suffix = f" ({reason})" if reason else ""
        print(f"fetchkit: {type(error).__name__}: {error}{suffix}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
