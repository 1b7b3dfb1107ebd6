import logging

from ._tokens import Characters, EndOfStream, ParseWarning

log = logging.getLogger(__name__)


class TokenSink(object):
    """Pull-driven consumer side of a tokenizer.

    Iterating the sink yields the tokenizer's tokens in order, ending with
    exactly one EndOfStream. Every ParseWarning seen is also kept in
    self.errors.

    coalesce -- merge runs of Characters tokens that are not separated by
                another visible token into one token
    keepWarnings -- yield ParseWarning tokens as well as recording them
    """

    def __init__(self, tokenizer, coalesce=True, keepWarnings=True):
        self.tokenizer = tokenizer
        self.coalesce = coalesce
        self.keepWarnings = keepWarnings
        self.errors = []

    def __iter__(self):
        pending = []
        for token in self.tokenizer:
            if isinstance(token, ParseWarning):
                self.recordWarning(token)
                if not self.keepWarnings:
                    continue
            if self.coalesce and isinstance(token, Characters):
                pending.append(token.data)
                continue
            if pending:
                yield Characters("".join(pending))
                pending = []
            yield token
            if isinstance(token, EndOfStream):
                return

    def recordWarning(self, warning):
        self.errors.append(warning)
        if warning.position is not None:
            log.debug("Line %d Col %d %s", warning.position[0], warning.position[1],
                      warning.message)
        else:
            log.debug("%s", warning.message)
