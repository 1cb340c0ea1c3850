"""
py.test test suite for media types.
"""
import pytest

from honyaku.exc import InvalidMediaTypeError
from honyaku.mediatype import ALL, HTML, JSON, OCTETSTREAM, PLAIN, TEXT, MediaType, acceptable


def test_valueof():
    mtype = MediaType.valueof("Text/HTML; charset=UTF-8")
    assert mtype.type == "text"
    assert mtype.subtype == "html"
    assert mtype.name == "text/html"
    assert mtype.charset == "UTF-8"
    assert mtype == HTML.with_params(charset="UTF-8")
    assert MediaType.valueof(mtype) is mtype


def test_valueof_lone_wildcard():
    assert MediaType.valueof("*") == ALL


@pytest.mark.parametrize("value", ["", "text", "text/html/x", "*/html", "text/html;q=abc", "text/html;q=2"])
def test_valueof_invalid(value):
    with pytest.raises(InvalidMediaTypeError):
        MediaType.valueof(value)

    # also a ValueError
    with pytest.raises(ValueError):
        MediaType.valueof(value)


def test_parse_orders_by_quality_then_specificity():
    types = MediaType.parse("text/*;q=0.8, */*;q=0.1, application/json, text/html")
    assert [t.name for t in types] == ["application/json", "text/html", "text/*", "*/*"]
    assert types[2].quality == 0.8


def test_parse_keeps_refused_types_last():
    types = MediaType.parse("application/json;q=0, text/plain")
    assert types == [PLAIN, JSON]
    assert types[-1].quality == 0

    assert MediaType.parse("*/*;q=0") == [ALL]


def test_acceptable_skips_refused_types():
    declared = [HTML, JSON]

    pairs = list(acceptable(MediaType.parse("text/html;q=0, */*;q=0.5"), declared))
    assert [d for _, d in pairs] == [JSON]

    # a more specific accepted type wins over a broad refusal
    pairs = list(acceptable(MediaType.parse("*/*;q=0, text/html"), declared))
    assert [d for _, d in pairs] == [HTML]

    assert list(acceptable(MediaType.parse("text/*;q=0, text/html;q=0.5"), declared)) == [(HTML, HTML)]
    assert list(acceptable(MediaType.parse("*/*;q=0"), declared)) == []


@pytest.mark.parametrize("header", [None, "", "   "])
def test_parse_missing_header(header):
    assert MediaType.parse(header) == [ALL]


@pytest.mark.parametrize("a, b, expected", [
    ("*/*", "application/json", True),
    ("text/*", "text/html", True),
    ("text/html", "text/html", True),
    ("text/html", "text/plain", False),
    ("text/*", "application/json", False),
    ("application/*+json", "application/vnd.api+json", True),
    ("application/*+json", "application/json", True),
    ("application/*+json", "application/xml", False),
    ("text/html; charset=utf-8", "text/html", True),
])
def test_matches_is_symmetric(a, b, expected):
    a, b = MediaType.valueof(a), MediaType.valueof(b)
    assert a.matches(b) is expected
    assert b.matches(a) is expected


def test_equality_ignores_quality():
    assert MediaType.valueof("text/html;q=0.5") == HTML
    assert hash(MediaType.valueof("text/html;q=0.5")) == hash(HTML)
    assert MediaType.valueof("text/html;level=1") != HTML


def test_str():
    assert str(JSON) == "application/json"
    assert str(JSON.with_params(charset="utf-8")) == "application/json; charset=utf-8"


def test_flags():
    assert HTML.is_text
    assert JSON.is_text
    assert MediaType.valueof("application/vnd.api+json").is_text
    assert not OCTETSTREAM.is_text

    assert ALL.is_wildcard
    assert TEXT.is_wildcard
    assert not HTML.is_wildcard
    assert (HTML.specificity, TEXT.specificity, ALL.specificity) == (0, 1, 2)


def test_by_path():
    assert MediaType.by_path("static/index.html") == HTML
    assert MediaType.by_path("archive.no-such-extension") is None


def test_matcher():
    matcher = MediaType.matcher(["application/json", "text/*"])
    assert matcher.matches("text/plain")
    assert not matcher.matches("image/png")
    assert matcher.first(["image/png", "text/css", "application/json"]) == MediaType.valueof("text/css")
    assert matcher.first(["image/png"]) is None
    assert matcher.filter(["image/png", "text/css", JSON]) == [MediaType.valueof("text/css"), JSON]
