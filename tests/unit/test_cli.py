# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json

import httpx
import pytest

from fetchkit.cli import main as cli
from fetchkit.http import new_client, with_transport


@pytest.fixture
def served(monkeypatch):
    """Route CLI clients to an in-process handler; returns the recorded requests."""
    seen: list[httpx.Request] = []
    routes = {
        "/ok": (200, b'{"status": "ok"}'),
        "/created": (201, b'{"id": 1}'),
        "/missing": (404, b'{"error": "not found"}'),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/down":
            raise httpx.ConnectError("connection refused", request=request)
        status, body = routes.get(request.url.path, (500, b'{"error": "boom"}'))
        return httpx.Response(status, content=body, headers={"Content-Type": "application/json"})

    real_new_client = new_client

    def fake_new_client(*options, settings=None):
        return real_new_client(*options, with_transport(httpx.MockTransport(handler)), settings=settings)

    monkeypatch.setattr(cli, "new_client", fake_new_client)
    return seen


def test_cli_prints_body_on_success(served, capsys):
    code = cli.main(["http://example.test/ok"])
    out = capsys.readouterr().out
    assert code == 0
    assert out == '{"status": "ok"}\n'
    assert served[0].method == "GET"


def test_cli_sends_method_headers_body_and_token(served, capsys):
    code = cli.main(
        [
            "http://example.test/created",
            "-X",
            "post",
            "-H",
            "X-Trace: abc",
            "-d",
            '{"name": "x"}',
            "--expect",
            "201",
            "--bearer",
            "tok",
        ]
    )
    assert code == 0
    request = served[0]
    assert request.method == "POST"
    assert request.headers["X-Trace"] == "abc"
    assert request.headers["Authorization"] == "Bearer tok"
    assert json.loads(request.content) == {"name": "x"}
    capsys.readouterr()


def test_cli_reports_unexpected_status(served, capsys):
    code = cli.main(["http://example.test/missing"])
    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == '{"error": "not found"}\n'
    assert "UnexpectedStatusCodeError" in captured.err


def test_cli_json_summary(served, capsys):
    code = cli.main(["http://example.test/missing", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["status_code"] == 404
    assert payload["error_response"] == {"error": "not found"}
    assert payload["error"]["type"] == "UnexpectedStatusCodeError"
    assert payload["body"] == '{"error": "not found"}'


def test_cli_retries(served, capsys):
    code = cli.main(["http://example.test/broken", "--retries", "2"])
    capsys.readouterr()
    assert code == 1
    assert [r.headers["Retry-Count"] for r in served] == ["0", "1"]


def test_cli_rejects_bad_header_and_body(capsys):
    with pytest.raises(SystemExit):
        cli.main(["http://example.test/", "-H", "no-colon"])
    with pytest.raises(SystemExit):
        cli.main(["http://example.test/", "-d", "{not json"])
    capsys.readouterr()


def test_cli_tls_configuration_error(capsys):
    code = cli.main(["https://example.test/", "--cert", "client.crt"])
    assert code == 2
    assert "TLS key and cert file paths not provided" in capsys.readouterr().err


def test_cli_reports_transport_failure_reason(served, capsys):
    code = cli.main(["http://example.test/down"])
    assert code == 1
    assert "(Network connectivity issue)" in capsys.readouterr().err

    code = cli.main(["http://example.test/down", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["status_code"] is None
    assert payload["body"] is None
    assert payload["error"]["type"] == "TransportError"
    assert payload["error"]["reason"] == "Network connectivity issue"
