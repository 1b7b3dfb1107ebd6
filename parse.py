#!/usr/bin/env python
"""usage: %prog [options] filename-or-url

Tokenize a document and print one token per line, with optional timing
"""

import logging
import sys
import time
from optparse import OptionParser
from urllib.error import URLError
from urllib.request import urlopen

import markuplex
from markuplex import ParseWarning

log = logging.getLogger("markuplex.parse")


def fetch(location):
    """Return (body, charset) for a file name or an http(s) URL.

    charset is the one declared by the server, if any."""
    if location.startswith(("http://", "https://")):
        response = urlopen(location)
        try:
            return response.read(), response.headers.get_content_charset()
        finally:
            response.close()
    with open(location, "rb") as fp:
        return fp.read(), None


def parse(argv=None):
    optParser = getOptParser()
    opts, args = optParser.parse_args(argv)

    if not args:
        sys.stderr.write("No filename provided. Use -h for help\n")
        return 1

    if opts.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        body, charset = fetch(args[-1])
    except (IOError, URLError) as e:
        sys.stderr.write("Could not read %s: %s\n" % (args[-1], e))
        return 1
    log.debug("Read %d bytes from %s", len(body), args[-1])

    kwargs = {"coalesce": not opts.raw,
              "transport_encoding": charset,
              "override_encoding": opts.encoding}
    if opts.state is not None:
        kwargs["initialState"] = opts.state

    try:
        sink = markuplex.tokenize(body, **kwargs)
    except (ValueError, LookupError) as e:
        sys.stderr.write("%s\n" % e)
        return 1

    t0 = time.time()
    tokens = list(sink)
    t1 = time.time()
    printOutput(sink, tokens, opts)
    t2 = time.time()
    if opts.time:
        sys.stdout.write("\n\nRun took: %fs (plus %fs to print the output)\n" % (t1 - t0, t2 - t1))
    return 0


def printOutput(sink, tokens, opts):
    for token in tokens:
        if isinstance(token, ParseWarning):
            continue
        sys.stdout.write("%r\n" % token)
    if opts.error:
        errList = []
        for warning in sink.errors:
            errList.append("Line %i Col %i" % warning.position + " " + warning.message)
        sys.stderr.write("\nParse errors:\n" + "\n".join(errList) + "\n")


def getOptParser():
    parser = OptionParser(usage=__doc__)

    parser.add_option("-t", "--time",
                      action="store_true", default=False, dest="time",
                      help="Time the run using time.time (may not be accurate on all platforms, especially for short runs)")

    parser.add_option("-e", "--error", action="store_true", default=False,
                      dest="error", help="Print a list of parse errors")

    parser.add_option("-r", "--raw", action="store_true", default=False,
                      dest="raw", help="Do not merge adjacent character tokens")

    parser.add_option("-s", "--state", action="store", type="string",
                      dest="state", help="Initial tokenizer state, e.g. rcdataState")

    parser.add_option("", "--encoding", action="store", type="string",
                      dest="encoding", help="Decode the input with this encoding")

    parser.add_option("-v", "--verbose", action="store_true", default=False,
                      dest="verbose", help="Log debug information to stderr")

    return parser


if __name__ == "__main__":
    sys.exit(parse())
