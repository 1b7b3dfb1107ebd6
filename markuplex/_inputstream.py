import codecs
import logging
import re
from bisect import bisect_left
from collections import deque
from io import BytesIO, StringIO

import webencodings

from .constants import EOF, ReconsumeError, asciiUpper2Lower

log = logging.getLogger(__name__)

invalid_unicode_no_surrogate = "[\u0001-\u0008\u000B\u000E-\u001F\u007F-\u009F\uFDD0-\uFDEF\uFFFE\uFFFF\U0001FFFE\U0001FFFF\U0002FFFE\U0002FFFF\U0003FFFE\U0003FFFF\U0004FFFE\U0004FFFF\U0005FFFE\U0005FFFF\U0006FFFE\U0006FFFF\U0007FFFE\U0007FFFF\U0008FFFE\U0008FFFF\U0009FFFE\U0009FFFF\U000AFFFE\U000AFFFF\U000BFFFE\U000BFFFF\U000CFFFE\U000CFFFF\U000DFFFE\U000DFFFF\U000EFFFE\U000EFFFF\U000FFFFE\U000FFFFF\U0010FFFE\U0010FFFF]"  # noqa

invalid_unicode_re = re.compile(invalid_unicode_no_surrogate[:-1] + "\uD800-\uDFFF]")

surrogates_re = re.compile("[\uD800-\uDFFF]")

# Cache for charsUntil()
charsUntilRegEx = {}


def lookupEncoding(encoding):
    """Return the webencodings Encoding for a label, or None if the label is
    unknown"""
    if isinstance(encoding, bytes):
        try:
            encoding = encoding.decode("ascii")
        except UnicodeDecodeError:
            return None

    if encoding is not None:
        try:
            return webencodings.lookup(encoding)
        except AttributeError:
            return None
    else:
        return None


def HTMLInputStream(source, **kwargs):
    if hasattr(source, "read"):
        isUnicode = isinstance(source.read(0), str)
    else:
        isUnicode = isinstance(source, str)

    if isUnicode:
        encodings = [x for x in kwargs if x.endswith("_encoding") and kwargs[x] is not None]
        if encodings:
            raise TypeError("Cannot set an encoding with a unicode input, set %r" % encodings)

        return HTMLUnicodeInputStream(source)
    else:
        return HTMLBinaryInputStream(source, **kwargs)


class HTMLUnicodeInputStream(object):
    """Provides a unicode stream of characters to the HTMLTokenizer.

    The whole document is read and preprocessed up front: newlines are
    normalized to LF and lone surrogates are replaced with U+FFFD. Invalid
    codepoints are reported in self.errors as the cursor moves past them.

    The cursor supports single character lookahead (peek), a single
    pending step back (reconsume) and absolute repositioning (tell/seek)
    for the character reference resolver.
    """

    def __init__(self, source):
        """Initialises the HTMLInputStream.

        source can be either a file-object or a string.
        """
        self.charEncoding = (lookupEncoding("utf-8"), "certain")
        self.dataStream = self.openStream(source)

        self.reset()

    def reset(self):
        data = self.dataStream.read()
        data = data.replace("\r\n", "\n")
        data = data.replace("\r", "\n")

        self.errors = []
        self._invalidOffsets = deque(m.start() for m in invalid_unicode_re.finditer(data))
        self._newLines = [m.start() for m in re.finditer("\n", data)]

        # Note U+0000 is dealt with in the tokenizer
        self.data = surrogates_re.sub("\uFFFD", data)
        self.length = len(self.data)
        self.offset = 0

        self._reconsumable = False
        self._lastWasEOF = False

    def openStream(self, source):
        """Produces a file object from source.

        source can be either a file object or a string.
        """
        # Already a file object
        if hasattr(source, 'read'):
            stream = source
        else:
            stream = StringIO(source)

        return stream

    def _reportErrors(self, offset):
        invalid = self._invalidOffsets
        while invalid and invalid[0] < offset:
            invalid.popleft()
            self.errors.append("invalid-codepoint")

    def position(self):
        """Returns (line, col) of the current position in the stream."""
        line = bisect_left(self._newLines, self.offset)
        if line == 0:
            col = self.offset
        else:
            col = self.offset - (self._newLines[line - 1] + 1)
        return (line + 1, col)

    def consume(self):
        """ Read one character from the stream. Return EOF when EOF is
        reached; further calls keep returning EOF.
        """
        offset = self.offset
        self._reconsumable = True
        if offset >= self.length:
            self._lastWasEOF = True
            return EOF

        self._lastWasEOF = False
        char = self.data[offset]
        self.offset = offset + 1
        if self._invalidOffsets and self._invalidOffsets[0] <= offset:
            self._reportErrors(offset + 1)

        return char

    def peek(self):
        if self.offset >= self.length:
            return EOF
        return self.data[self.offset]

    def reconsume(self):
        # Only one character may be handed back at once; it must be
        # consumed again before any further call to reconsume
        if not self._reconsumable:
            raise ReconsumeError("reconsume() called without an intervening consume()")
        self._reconsumable = False
        if not self._lastWasEOF:
            self.offset -= 1

    def charsUntil(self, characters, opposite=False):
        """ Returns a string of characters from the stream up to but not
        including any character in 'characters' or EOF. 'characters' must be
        a hashable container of ASCII characters.
        """

        # Use a cache of regexps to find the required characters
        try:
            chars = charsUntilRegEx[(characters, opposite)]
        except KeyError:
            if __debug__:
                for c in characters:
                    assert(ord(c) < 128)
            regex = "".join(["\\x%02x" % ord(c) for c in sorted(characters)])
            if not opposite:
                regex = "^%s" % regex
            chars = charsUntilRegEx[(characters, opposite)] = re.compile("[%s]+" % regex)

        self._reconsumable = False
        m = chars.match(self.data, self.offset)
        if m is None:
            return ""

        start, end = self.offset, m.end()
        self.offset = end
        if self._invalidOffsets and self._invalidOffsets[0] < end:
            self._reportErrors(end)
        return self.data[start:end]

    def matchAhead(self, text, ignoreCase=False):
        """Consume text if it comes next in the stream. With ignoreCase, the
        input is ASCII-lowercased before comparing, so text must be given in
        lowercase."""
        end = self.offset + len(text)
        candidate = self.data[self.offset:end]
        if ignoreCase:
            candidate = candidate.translate(asciiUpper2Lower)
        if candidate != text:
            return False

        self._reconsumable = False
        self.offset = end
        if self._invalidOffsets and self._invalidOffsets[0] < end:
            self._reportErrors(end)
        return True

    def tell(self):
        return self.offset

    def seek(self, pos):
        assert 0 <= pos <= self.length
        self._reconsumable = False
        self.offset = pos
        if self._invalidOffsets and self._invalidOffsets[0] < pos:
            self._reportErrors(pos)


class HTMLBinaryInputStream(HTMLUnicodeInputStream):
    """Provides a unicode stream of characters to the HTMLTokenizer.

    This class takes care of character encoding before handing the decoded
    text to HTMLUnicodeInputStream.
    """

    def __init__(self, source, override_encoding=None, transport_encoding=None,
                 default_encoding="windows-1252", useChardet=True):
        """Initialises the HTMLInputStream.

        HTMLInputStream(source, [encoding]) -> Normalized stream from source
        for use by markuplex.

        source can be either a file-object or a bytes string.

        The optional encoding parameters must be a string that indicates
        the encoding. A byte order mark always wins; otherwise
        override_encoding is used if given, then transport_encoding (the
        charset of the HTTP response, typically), then chardet's guess
        when chardet is installed, and default_encoding as a last resort.
        """
        # Raw Stream - read once into memory; determineEncoding leaves it
        #              at the start of the text, past any BOM
        self.rawStream = self.openStream(source)

        # Number of bytes to use when using detecting encoding using chardet
        self.numBytesChardet = 100

        # Things from args
        self.override_encoding = override_encoding
        self.transport_encoding = transport_encoding
        self.default_encoding = default_encoding

        # Determine encoding
        self.charEncoding = self.determineEncoding(useChardet)
        assert self.charEncoding[0] is not None
        log.debug("Decoding input as %s (%s)", self.charEncoding[0].name,
                  self.charEncoding[1])

        # reset() decodes from where determineEncoding left rawStream
        self.reset()

    def reset(self):
        self.dataStream = self.charEncoding[0].codec_info.streamreader(self.rawStream, 'replace')
        HTMLUnicodeInputStream.reset(self)

    def openStream(self, source):
        """Produces a file object from source.

        source can be either a file object or a bytes string.
        """
        # Already a file object; read it once so it can be seeked
        if hasattr(source, 'read'):
            stream = BytesIO(source.read())
        else:
            stream = BytesIO(source)

        return stream

    def determineEncoding(self, chardet=True):
        # BOMs take precedence over everything
        # This will also read past the BOM if present
        charEncoding = self.detectBOM(), "certain"
        if charEncoding[0] is not None:
            return charEncoding

        # If we've been overriden, we've been overriden
        charEncoding = lookupEncoding(self.override_encoding), "certain"
        if charEncoding[0] is not None:
            return charEncoding

        # Now check the transport layer
        charEncoding = lookupEncoding(self.transport_encoding), "certain"
        if charEncoding[0] is not None:
            return charEncoding

        # Guess with chardet, if available
        if chardet:
            try:
                from chardet.universaldetector import UniversalDetector
            except ImportError:
                pass
            else:
                buffers = []
                detector = UniversalDetector()
                while not detector.done:
                    buffer = self.rawStream.read(self.numBytesChardet)
                    assert isinstance(buffer, bytes)
                    if not buffer:
                        break
                    buffers.append(buffer)
                    detector.feed(buffer)
                detector.close()
                encoding = lookupEncoding(detector.result['encoding'])
                self.rawStream.seek(0)
                if encoding is not None:
                    return encoding, "tentative"

        # Try the default encoding
        charEncoding = lookupEncoding(self.default_encoding), "tentative"
        if charEncoding[0] is not None:
            return charEncoding

        # Fall back to windows-1252 if even that label is unknown
        return lookupEncoding("windows-1252"), "tentative"

    def detectBOM(self):
        """Attempts to detect at BOM at the start of the stream. If
        an encoding can be determined from the BOM return the name of the
        encoding otherwise return None"""
        bomDict = {
            codecs.BOM_UTF8: 'utf-8',
            codecs.BOM_UTF16_LE: 'utf-16le', codecs.BOM_UTF16_BE: 'utf-16be',
        }

        # Go to beginning of file and read in 3 bytes
        string = self.rawStream.read(3)
        assert isinstance(string, bytes)

        # Try detecting the BOM using bytes from the string
        encoding = bomDict.get(string[:3])         # UTF-8
        seek = 3
        if not encoding:
            encoding = bomDict.get(string[:2])     # UTF-16
            seek = 2

        # Set the read position past the BOM if one was found, otherwise
        # set it to the start of the stream
        if encoding:
            self.rawStream.seek(seek)
            return lookupEncoding(encoding)
        else:
            self.rawStream.seek(0)
            return None
