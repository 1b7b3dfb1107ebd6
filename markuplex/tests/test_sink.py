import logging

import markuplex
from markuplex import TokenSink, HTMLTokenizer, Characters, EndOfStream, ParseWarning


def test_coalesce():
    assert list(markuplex.tokenize("a&amp;b")) == [Characters("a&b"), EndOfStream()]


def test_no_coalesce():
    assert list(markuplex.tokenize("a&amp;b", coalesce=False)) == [
        Characters("a"), Characters("&"), Characters("b"), EndOfStream()]


def test_warnings_break_runs():
    tokens = list(markuplex.tokenize("a&ampb"))
    assert tokens == [Characters("a"),
                      ParseWarning("named-entity-without-semicolon", position=(1, 5)),
                      Characters("&b"),
                      EndOfStream()]


def test_hidden_warnings_are_recorded():
    sink = markuplex.tokenize("a&ampb", keepWarnings=False)
    assert list(sink) == [Characters("a&b"), EndOfStream()]
    assert [warning.data for warning in sink.errors] == ["named-entity-without-semicolon"]
    assert sink.errors[0].position == (1, 5)


def test_single_pass():
    sink = TokenSink(HTMLTokenizer("<p>"))
    assert len(list(sink)) == 2
    assert list(sink) == []


def test_empty_document():
    assert list(markuplex.tokenize("")) == [EndOfStream()]
    assert list(markuplex.tokenize(b"", useChardet=False)) == [EndOfStream()]


def test_warning_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="markuplex"):
        list(markuplex.tokenize("a&ampb"))
    assert ("markuplex.sink", logging.DEBUG,
            "Line 1 Col 5 Named entity didn't end with ';'.") in caplog.record_tuples
