"""
HTML tokenizer based on the WHATWG HTML Living Standard. The tokenizer
turns a document into tags, text, comments and doctypes, and recovers from
malformed markup the way browsers do, reporting each recovery as a
ParseWarning instead of failing.

Example usage::

    import markuplex
    with open("my_document.html", "rb") as f:
        for token in markuplex.tokenize(f):
            print(token)

Text is decoded first when bytes are given; see HTMLBinaryInputStream for
the encoding options.
"""

import logging

from .constants import State
from ._tokens import (Token, StartTag, EndTag, Characters, Comment, Doctype,
                      EndOfStream, ParseWarning)
from ._tokenizer import HTMLTokenizer
from .sink import TokenSink

__all__ = ["tokenize", "HTMLTokenizer", "TokenSink", "State", "Token",
           "StartTag", "EndTag", "Characters", "Comment", "Doctype",
           "EndOfStream", "ParseWarning"]

# this has to be at the top level, see how setup.py parses this
#: Distribution version number.
__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

_sinkOptions = ("coalesce", "keepWarnings")


def tokenize(doc, **kwargs):
    """Tokenize a document and return the TokenSink to iterate over.

    doc can be a str, bytes or a file object returning either. Keyword
    arguments go to TokenSink (coalesce, keepWarnings) or HTMLTokenizer
    (everything else, including the input stream's encoding options).
    """
    sinkKwargs = {name: kwargs.pop(name) for name in _sinkOptions if name in kwargs}
    return TokenSink(HTMLTokenizer(doc, **kwargs), **sinkKwargs)
