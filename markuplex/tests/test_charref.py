import pytest

from markuplex._charref import CharacterReferenceResolver
from markuplex._inputstream import HTMLUnicodeInputStream


def resolve(text, fromAttribute=False, entities=None):
    """Resolve the reference at the start of text, which is everything
    after the "&". Returns the replacement, the unconsumed input and the
    warning codes raised."""
    stream = HTMLUnicodeInputStream(text)
    warnings = []

    def warn(code, datavars=None):
        warnings.append((code, datavars))

    resolver = CharacterReferenceResolver(stream, warn, entities)
    result = resolver.consume(fromAttribute)
    return result, stream.data[stream.tell():], [code for code, _ in warnings]


@pytest.mark.parametrize("text", ["", " x", "\tx", "<p>", "&amp;"])
def test_not_a_reference(text):
    assert resolve(text) == ("&", text, [])


@pytest.mark.parametrize("text, expected", [
    ("amp;", "&"),
    ("lt;rest", "<"),
    ("notin;", "\u2209"),
    ("NotNestedGreaterGreater;", "\u2aa2\u0338"),
    ("AMP;", "&"),
])
def test_named(text, expected):
    result, remaining, warnings = resolve(text)
    assert result == expected
    assert remaining == text[text.index(";") + 1:]
    assert warnings == []


def test_named_without_semicolon():
    assert resolve("amp") == ("&", "", ["named-entity-without-semicolon"])


def test_longest_legacy_prefix():
    assert resolve("notit;") == ("\xac", "it;", ["named-entity-without-semicolon"])


def test_unknown_name_with_known_prefix():
    assert resolve("notavalidname;") == ("\xac", "avalidname;",
                                         ["named-entity-without-semicolon"])


def test_unknown_name():
    assert resolve("xyz;") == ("&", "xyz;", ["expected-named-entity"])
    assert resolve("xyz") == ("&", "xyz", [])
    assert resolve("AB") == ("&", "AB", [])


def test_attribute_keeps_legacy_name_before_alphanumeric():
    assert resolve("notavalidname;", fromAttribute=True) == (
        "&", "notavalidname;", ["named-entity-without-semicolon"])
    assert resolve("amp=1", fromAttribute=True) == (
        "&", "amp=1", ["named-entity-without-semicolon"])


def test_attribute_resolves_legacy_name_before_other_characters():
    assert resolve("lt x", fromAttribute=True) == (
        "<", " x", ["named-entity-without-semicolon"])
    assert resolve("amp;x", fromAttribute=True) == ("&", "x", [])


@pytest.mark.parametrize("text, expected, remaining", [
    ("#65;", "A", ""),
    ("#x41;b", "A", "b"),
    ("#X6a;", "j", ""),
    ("#0000000065;", "A", ""),
    ("#x1F600;", "\U0001F600", ""),
])
def test_numeric(text, expected, remaining):
    assert resolve(text) == (expected, remaining, [])


def test_numeric_without_semicolon():
    assert resolve("#65x") == ("A", "x", ["numeric-entity-without-semicolon"])
    assert resolve("#x41g") == ("A", "g", ["numeric-entity-without-semicolon"])


@pytest.mark.parametrize("text", ["#", "#;", "#x;", "#Xg", "#a"])
def test_numeric_without_digits(text):
    assert resolve(text) == ("&", text, ["expected-numeric-entity"])


def test_null_reference():
    assert resolve("#0;") == ("\ufffd", "", ["null-character-reference"])
    assert resolve("#x0") == ("\ufffd", "", ["numeric-entity-without-semicolon",
                                               "null-character-reference"])


@pytest.mark.parametrize("text", ["#x110000;", "#xD800;", "#xDFFF;",
                                  "#99999999999999999999999;"])
def test_out_of_range(text):
    assert resolve(text) == ("\ufffd", "", ["illegal-codepoint-for-numeric-entity"])


def test_out_of_range_datavars():
    stream = HTMLUnicodeInputStream("#x123456789abcdef;")
    warnings = []
    resolver = CharacterReferenceResolver(stream, lambda code, datavars=None:
                                          warnings.append((code, datavars)))
    assert resolver.consume() == "\ufffd"
    assert warnings == [("illegal-codepoint-for-numeric-entity", {"charAsInt": 0x110000})]


@pytest.mark.parametrize("text, expected", [
    ("#128;", "\u20ac"),
    ("#x80;", "\u20ac"),
    ("#x9F;", "\u0178"),
    ("#x92;", "\u2019"),
])
def test_windows_1252_remapping(text, expected):
    assert resolve(text) == (expected, "", ["illegal-codepoint-for-numeric-entity"])


@pytest.mark.parametrize("text, expected", [
    ("#x81;", "\x81"),
    ("#x1;", "\x01"),
    ("#xFFFF;", "\uffff"),
    ("#xFDD0;", "\ufdd0"),
    ("#x10FFFE;", "\U0010fffe"),
])
def test_kept_with_warning(text, expected):
    assert resolve(text) == (expected, "", ["illegal-codepoint-for-numeric-entity"])


@pytest.mark.parametrize("text", ["#9;", "#10;", "#x20;"])
def test_whitespace_references(text):
    result, remaining, warnings = resolve(text)
    assert warnings == []
    assert remaining == ""


def test_custom_entities():
    entities = {"foo;": "bar", "foo": "baz", "foobar;": "qux"}
    assert resolve("foo;", entities=entities) == ("bar", "", [])
    assert resolve("foobar;", entities=entities) == ("qux", "", [])
    assert resolve("foob", entities=entities) == ("baz", "b",
                                                  ["named-entity-without-semicolon"])
    assert resolve("amp;", entities=entities) == ("&", "amp;", ["expected-named-entity"])
