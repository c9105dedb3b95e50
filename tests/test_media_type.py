"""Tests for media type parsing, rendering and specificity."""

from __future__ import annotations

import dataclasses

import pytest
from mitmproxy.http import Headers

from httpreader import media_type
from httpreader.media_type import MediaType
from httpreader.media_type import MediaTypeFormatError


def test_try_parse_with_parameter():
    parsed = MediaType.try_parse("text/html; charset=utf-8")

    assert parsed is not None
    assert parsed.type == "text"
    assert parsed.sub_type == "html"
    assert parsed.tree == ""
    assert parsed.suffix == ""
    assert dict(parsed.parameters) == {"charset": "utf-8"}


def test_try_parse_tree_and_suffix():
    parsed = MediaType.try_parse("Application/VND.Api+JSON;Version=2")

    assert parsed == MediaType("application", "api", "vnd", "json", {"version": "2"})
    assert str(parsed) == "application/vnd.api+json; version=2"


@pytest.mark.parametrize(
    "text",
    [
        "bad type",
        "",
        "text",
        "text/html/extra",
        "/html",
        "text/",
        "te@xt/html",
        "application/a.b.c",
        "application/.json",
        "text/html+x+y",
        "text/html+",
        "text/html;",
        "text/html; charset",
        "text/html; a=b=c",
        "text/html; charset=\"utf-8\"",
        "text/plain; version=1.0",
        "text/html; a=1; a=2",
        "text/x\u00b2",
        "text/html; level=\u00b9",
    ],
)
def test_try_parse_rejects_malformed(text):
    assert MediaType.try_parse(text) is None


def test_parse_raises_format_error():
    with pytest.raises(MediaTypeFormatError):
        MediaType.parse("not a media type")

    assert issubclass(MediaTypeFormatError, ValueError)


@pytest.mark.parametrize(
    "value",
    [
        media_type.HTML,
        media_type.BINARY,
        MediaType("application", "api", tree="vnd"),
        MediaType("image", "svg", suffix="xml"),
        MediaType("text", "html", parameters={"charset": "utf-8", "level": "1"}),
        MediaType("application", "feed", "vnd", "json", {"q_value": "high-1"}),
    ],
)
def test_parse_inverts_render(value):
    assert MediaType.parse(str(value)) == value


def test_components_are_lower_cased():
    value = MediaType("TEXT", "HTML", parameters={"CharSet": "UTF-8"})

    assert str(value) == "text/html; charset=utf-8"
    assert value == MediaType.parse("text/html;charset=utf-8")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"type": "", "sub_type": "html"},
        {"type": "text", "sub_type": ""},
        {"type": "te xt", "sub_type": "html"},
        {"type": "text", "sub_type": "html", "tree": "a.b"},
        {"type": "text", "sub_type": "html", "parameters": {"charset": ""}},
    ],
)
def test_constructor_rejects_invalid_components(kwargs):
    with pytest.raises(MediaTypeFormatError):
        MediaType(**kwargs)


def test_values_are_immutable():
    value = MediaType.parse("text/html; charset=utf-8")

    with pytest.raises(dataclasses.FrozenInstanceError):
        value.type = "image"  # type: ignore[misc]
    with pytest.raises(TypeError):
        value.parameters["charset"] = "ascii"  # type: ignore[index]


def test_equality_hash_and_ordering():
    assert MediaType("text", "html") == media_type.HTML
    assert hash(MediaType("text", "html")) == hash(media_type.HTML)
    assert media_type.HTML != media_type.CSS
    assert media_type.HTML != "text/html"

    assert sorted([media_type.HTML, media_type.CSS, media_type.JSON]) == [
        media_type.JSON,
        media_type.CSS,
        media_type.HTML,
    ]
    assert media_type.CSS < media_type.HTML
    assert len({media_type.HTML, MediaType.parse("text/html")}) == 1


@pytest.mark.parametrize("value", list(media_type.WELL_KNOWN.values()))
def test_is_more_specific_is_reflexive(value):
    assert value.is_more_specific(value)


def test_extra_parameters_are_more_specific():
    with_charset = MediaType.parse("text/html; charset=utf-8")

    assert with_charset.is_more_specific(media_type.HTML)
    assert not media_type.HTML.is_more_specific(with_charset)


def test_conflicting_parameters_do_not_match():
    utf8 = MediaType.parse("text/html; charset=utf-8")
    ascii_ = MediaType.parse("text/html; charset=ascii")

    assert not utf8.is_more_specific(ascii_)
    assert not ascii_.is_more_specific(utf8)


def test_type_and_subtype_must_match():
    assert not media_type.CSS.is_more_specific(media_type.HTML)
    assert not media_type.TEXT_XML.is_more_specific(media_type.XML)


def test_tree_and_suffix_only_constrain_when_reference_has_them():
    specific = MediaType.parse("application/vnd.api+json")
    plain = MediaType.parse("application/api")

    assert specific.is_more_specific(plain)
    assert not plain.is_more_specific(specific)
    assert not specific.is_more_specific(MediaType.parse("application/prs.api+json"))
    assert not specific.is_more_specific(MediaType.parse("application/vnd.api+xml"))


def test_from_headers():
    assert MediaType.from_headers(Headers(content_type="text/html")) == media_type.HTML
    assert MediaType.from_headers(Headers(content_type="garbage")) is None
    assert MediaType.from_headers(Headers()) is None


def test_well_known_table_is_read_only():
    assert media_type.WELL_KNOWN["html"] is media_type.HTML
    assert str(media_type.BINARY) == "application/octet-stream"

    with pytest.raises(TypeError):
        media_type.WELL_KNOWN["html"] = media_type.CSS  # type: ignore[index]


def test_decimal_digits_are_token_characters():
    assert MediaType.parse("video/mp4; level=3") == MediaType("video", "mp4", parameters={"level": "3"})
    with pytest.raises(MediaTypeFormatError):
        MediaType("audio", "mp³")
