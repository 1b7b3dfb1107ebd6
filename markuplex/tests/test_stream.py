import codecs
import http.client
from io import BytesIO

import pytest

from markuplex.constants import EOF, ReconsumeError
from markuplex._inputstream import (HTMLInputStream, HTMLUnicodeInputStream,
                                    HTMLBinaryInputStream)


def test_char_ascii():
    stream = HTMLInputStream(b"'", override_encoding='ascii')
    assert stream.charEncoding[0].name == 'windows-1252'
    assert stream.consume() == "'"


def test_char_utf8():
    stream = HTMLInputStream('\u2018'.encode('utf-8'), override_encoding='utf-8')
    assert stream.charEncoding[0].name == 'utf-8'
    assert stream.consume() == '\u2018'


def test_char_win1252():
    stream = HTMLInputStream("\xa9\xf1\u2019".encode('windows-1252'), useChardet=False)
    assert stream.charEncoding == (stream.charEncoding[0], "tentative")
    assert stream.charEncoding[0].name == 'windows-1252'
    assert stream.consume() == "\xa9"
    assert stream.consume() == "\xf1"
    assert stream.consume() == "\u2019"


def test_bom():
    stream = HTMLInputStream(codecs.BOM_UTF8 + b"'")
    assert stream.charEncoding[0].name == 'utf-8'
    assert stream.charEncoding[1] == "certain"
    assert stream.consume() == "'"


def test_bom_beats_override():
    stream = HTMLInputStream(codecs.BOM_UTF8 + b"x", override_encoding="windows-1252")
    assert stream.charEncoding[0].name == 'utf-8'


def test_utf_16():
    stream = HTMLInputStream((' ' * 1025).encode('utf-16'))
    assert stream.charEncoding[0].name in ['utf-16le', 'utf-16be']
    assert len(stream.charsUntil(' ', True)) == 1025


def test_transport_encoding():
    stream = HTMLInputStream(b"\xc1", transport_encoding="koi8-r")
    assert stream.charEncoding[0].name == 'koi8-r'
    assert stream.consume() == "\u0430"


def test_override_beats_transport():
    stream = HTMLInputStream(b"x", override_encoding="utf-8", transport_encoding="koi8-r")
    assert stream.charEncoding[0].name == 'utf-8'


def test_unknown_label_is_ignored():
    stream = HTMLInputStream(b"x", transport_encoding="no-such-encoding", useChardet=False)
    assert stream.charEncoding[0].name == 'windows-1252'


def test_default_encoding():
    stream = HTMLInputStream(b"x", default_encoding="iso-8859-7", useChardet=False)
    assert stream.charEncoding[0].name == 'iso-8859-7'
    assert stream.charEncoding[1] == "tentative"


def test_bad_default_encoding():
    stream = HTMLInputStream(b"x", default_encoding="bogus", useChardet=False)
    assert stream.charEncoding[0].name == 'windows-1252'


def test_undecodable_bytes():
    stream = HTMLInputStream(b"a\xffb", override_encoding="utf-8")
    assert stream.charsUntil("x") == "a\uFFFDb"


def test_encoding_with_text_input():
    with pytest.raises(TypeError):
        HTMLInputStream("x", override_encoding="utf-8")


def test_text_file_object():
    stream = HTMLInputStream(BytesIO(b"abc"), useChardet=False)
    assert isinstance(stream, HTMLBinaryInputStream)
    assert stream.charsUntil("c") == "ab"


def test_newlines():
    stream = HTMLBinaryInputStream(codecs.BOM_UTF8 + b"a\nbb\r\nccc\rddddxe")
    assert stream.position() == (1, 0)
    assert stream.charsUntil('c') == "a\nbb\n"
    assert stream.position() == (3, 0)
    assert stream.charsUntil('x') == "ccc\ndddd"
    assert stream.position() == (4, 4)
    assert stream.charsUntil('e') == "x"
    assert stream.position() == (4, 5)


def test_newlines2():
    stream = HTMLInputStream("\r" * 10 + "\n")
    assert stream.charsUntil('x') == "\n" * 10


def test_position():
    stream = HTMLUnicodeInputStream("abc\nd")
    assert stream.position() == (1, 0)
    assert stream.consume() == "a"
    assert stream.position() == (1, 1)
    assert stream.consume() == "b"
    assert stream.position() == (1, 2)
    assert stream.consume() == "c"
    assert stream.position() == (1, 3)
    assert stream.consume() == "\n"
    assert stream.position() == (2, 0)
    stream.reconsume()
    assert stream.position() == (1, 3)
    assert stream.consume() == "\n"
    assert stream.consume() == "d"
    assert stream.position() == (2, 1)


def test_peek_does_not_advance():
    stream = HTMLUnicodeInputStream("ab")
    assert stream.peek() == "a"
    assert stream.peek() == "a"
    assert stream.consume() == "a"
    assert stream.peek() == "b"
    stream.consume()
    assert stream.peek() is EOF


def test_eof_is_sticky():
    stream = HTMLUnicodeInputStream("a")
    assert stream.consume() == "a"
    assert stream.consume() is EOF
    assert stream.consume() is EOF
    stream.reconsume()
    assert stream.consume() is EOF
    assert stream.tell() == 1


def test_reconsume_twice():
    stream = HTMLUnicodeInputStream("ab")
    stream.consume()
    stream.reconsume()
    with pytest.raises(ReconsumeError):
        stream.reconsume()
    assert stream.consume() == "a"


def test_reconsume_before_consume():
    stream = HTMLUnicodeInputStream("ab")
    with pytest.raises(ReconsumeError):
        stream.reconsume()


def test_match_ahead():
    stream = HTMLUnicodeInputStream("DocType x")
    assert not stream.matchAhead("doctype")
    assert stream.tell() == 0
    assert stream.matchAhead("doctype", ignoreCase=True)
    assert stream.tell() == 7
    assert not stream.matchAhead(" xy")
    assert stream.consume() == " "


def test_seek_and_tell():
    stream = HTMLUnicodeInputStream("abcdef")
    assert stream.charsUntil("d") == "abc"
    assert stream.tell() == 3
    stream.seek(1)
    assert stream.consume() == "b"
    stream.seek(6)
    assert stream.consume() is EOF


def test_invalid_codepoints():
    stream = HTMLUnicodeInputStream("a\u0001b\uFDD0")
    assert stream.consume() == "a"
    assert stream.errors == []
    assert stream.charsUntil("x") == "\u0001b\uFDD0"
    assert stream.errors == ["invalid-codepoint", "invalid-codepoint"]


def test_invalid_codepoint_reported_once():
    stream = HTMLUnicodeInputStream("\u0001")
    stream.consume()
    stream.seek(0)
    stream.consume()
    assert stream.errors == ["invalid-codepoint"]


def test_lone_surrogate():
    stream = HTMLUnicodeInputStream("a\ud800b")
    assert stream.charsUntil("x") == "a\uFFFDb"
    assert stream.errors == ["invalid-codepoint"]


def test_nul_is_left_to_the_tokenizer():
    stream = HTMLUnicodeInputStream("\u0000")
    assert stream.consume() == "\u0000"
    assert stream.errors == []


def test_python_issue_20007():
    """
    Make sure we have a work-around for Python bug #20007
    http://bugs.python.org/issue20007
    """
    class FakeSocket(object):
        def makefile(self, _mode, _bufsize=None):
            return BytesIO(b"HTTP/1.1 200 Ok\r\n\r\nText")

    source = http.client.HTTPResponse(FakeSocket())
    source.begin()
    stream = HTMLInputStream(source, useChardet=False)
    assert stream.charsUntil(" ") == "Text"


def test_binary_input_is_decoded():
    stream = HTMLBinaryInputStream(b"abc", override_encoding="utf-8")
    assert stream.data == "abc"
    assert stream.consume() == "a"


def test_binary_file_object_is_decoded():
    source = BytesIO(codecs.BOM_UTF8 + b"<p>hi")
    stream = HTMLInputStream(source, override_encoding="windows-1252")
    assert stream.charEncoding[0].name == "utf-8"
    assert stream.data == "<p>hi"


def test_detected_encoding_is_kept():
    stream = HTMLBinaryInputStream(b"\xc1\xc2", transport_encoding="koi8-r")
    assert stream.charEncoding == (stream.charEncoding[0], "certain")
    assert stream.charEncoding[0].name == "koi8-r"
    assert stream.data == "\u0430\u0431"
