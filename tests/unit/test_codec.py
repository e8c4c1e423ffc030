# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import math
from dataclasses import dataclass, field
from typing import Optional

import pytest

from fetchkit.errors import DecodeError, EncodeError, UnsupportedContentTypeError
from fetchkit.http.codec import decode_body, encode_body, parse_xml
from fetchkit.http.headers import default_headers, header_value, media_type


@dataclass
class Owner:
    name: str = ""


@dataclass
class Repo:
    repo_id: int = field(default=0, metadata={"json": "id", "xml": "id"})
    name: str = ""
    private: bool = False
    owner: Owner = field(default_factory=Owner)


def test_decode_json_into_dict():
    result: dict = {}
    decoded = decode_body("application/json", b'{"key": "value"}', result)
    assert decoded is result
    assert result == {"key": "value"}


def test_decode_json_without_target_returns_generic_value():
    assert decode_body("application/json; charset=utf-8", b"[1, 2, 3]") == [1, 2, 3]


def test_decode_json_populates_dataclass_in_place_with_nested_fields():
    repo = Repo()
    decoded = decode_body(
        "application/json",
        b'{"id": 42, "name": "fetchkit", "private": true, "owner": {"name": "theori"}, "extra": 1}',
        repo,
    )
    assert decoded is repo
    assert repo == Repo(repo_id=42, name="fetchkit", private=True, owner=Owner(name="theori"))


def test_decode_json_builds_dataclass_from_type():
    repo = decode_body("application/json", b'{"id": 1, "owner": {"name": "x"}}', Repo)
    assert repo == Repo(repo_id=1, owner=Owner(name="x"))


def test_decode_json_into_list_replaces_contents():
    items = ["stale"]
    decode_body("application/json", b'["a", "b"]', items)
    assert items == ["a", "b"]


def test_decode_json_shape_mismatch_is_decode_error():
    with pytest.raises(DecodeError):
        decode_body("application/json", b"[1]", Repo())
    with pytest.raises(DecodeError):
        decode_body("application/json", b'"text"', {})
    with pytest.raises(DecodeError):
        decode_body("application/json", b"{}", list)


def test_decode_json_syntax_error():
    with pytest.raises(DecodeError):
        decode_body("application/json", b"{]", {})
    with pytest.raises(DecodeError):
        decode_body("application/json", b"", None)


def test_decode_xml_into_dataclass():
    @dataclass
    class Keyed:
        key: str = ""

    result = Keyed()
    decode_body("application/xml", b"<struct><key>value</key></struct>", result)
    assert result.key == "value"


def test_decode_xml_coerces_scalars_and_nests():
    body = b"<repo><id>7</id><name>fetchkit</name><private>true</private><owner><name>theori</name></owner></repo>"
    repo = decode_body("application/xml", body, Repo)
    assert repo == Repo(repo_id=7, name="fetchkit", private=True, owner=Owner(name="theori"))


def test_decode_xml_bad_scalar_is_decode_error():
    with pytest.raises(DecodeError):
        decode_body("application/xml", b"<repo><id>seven</id></repo>", Repo)


def test_parse_xml_generic_shape():
    parsed = parse_xml(b'<list kind="tags"><item>a</item><item>b</item><note>n</note></list>')
    assert parsed == {"@kind": "tags", "item": ["a", "b"], "note": "n"}


@dataclass
class Team:
    name: str = ""
    lead: Owner = field(default_factory=Owner)
    members: list[Owner] = field(default_factory=list)
    backup: Owner | None = None
    sponsor: Optional[Owner] = None


def test_decode_json_null_keeps_nested_struct_and_clears_optional():
    team = Team(name="core", lead=Owner(name="kept"), backup=Owner(name="old"))
    decode_body("application/json", b'{"name": null, "lead": null, "backup": null, "sponsor": null}', team)
    assert team == Team(name="core", lead=Owner(name="kept"))

    built = decode_body("application/json", b'{"lead": null, "name": "x"}', Team)
    assert built == Team(name="x")


def test_decode_json_nested_lists_and_optionals_become_dataclasses():
    body = b'{"members": [{"name": "a"}, {"name": "b"}], "backup": {"name": "c"}, "sponsor": {"name": "d"}}'
    team = decode_body("application/json", body, Team)
    assert team.members == [Owner(name="a"), Owner(name="b")]
    assert team.backup == Owner(name="c")
    assert team.sponsor == Owner(name="d")


def test_decode_xml_nested_lists_and_optionals_become_dataclasses():
    body = b"<team><members><name>a</name></members><backup><name>c</name></backup></team>"
    team = decode_body("application/xml", body, Team())
    assert team.members == [Owner(name="a")]
    assert team.backup == Owner(name="c")


@pytest.mark.parametrize("body", [b"<struct></struct>", b"<struct/>", b"<struct>  </struct>"])
def test_decode_empty_xml_element_leaves_defaults(body):
    repo = Repo(name="unchanged")
    assert decode_body("application/xml", body, repo) == Repo(name="unchanged")
    assert decode_body("application/xml", body, Repo) == Repo()
    assert decode_body("application/xml", b"<team><name>t</name><lead/></team>", Team) == Team(name="t")


def test_decode_xml_syntax_error():
    with pytest.raises(DecodeError):
        decode_body("application/xml", b"<open>", None)


@pytest.mark.parametrize("content_type", ["application/invalid", "text/plain", "", None])
def test_unsupported_content_type(content_type):
    with pytest.raises(UnsupportedContentTypeError) as exc_info:
        decode_body(content_type, b"{}", None)
    assert "invalid content type" in str(exc_info.value)


def test_unsupported_target_type():
    with pytest.raises(DecodeError):
        decode_body("application/json", b"{}", object())


def test_encode_body_dataclass_uses_wire_names():
    assert encode_body(Repo(repo_id=3, name="n")) == b'{"id": 3, "name": "n", "private": false, "owner": {"name": ""}}'


def test_encode_body_rejects_non_finite_and_unknown_values():
    with pytest.raises(EncodeError):
        encode_body({"A": math.inf})
    with pytest.raises(EncodeError):
        encode_body({"A": float("nan")})
    with pytest.raises(EncodeError):
        encode_body({"A": object()})


def test_header_helpers():
    headers = default_headers()
    headers["X-Test"] = "1"
    assert "X-Test" not in default_headers()
    assert header_value(headers, "content-type") == "application/json"
    assert header_value(headers, "missing", "fallback") == "fallback"
    assert media_type("Application/XML; charset=utf-8") == "application/xml"
    assert media_type(None) == ""
