import codecs
import json
import re

import pytest

from markuplex import HTMLTokenizer, State
from markuplex import StartTag, EndTag, Characters, Comment, Doctype, ParseWarning


class TokenizerTestParser(object):
    def __init__(self, initialState, lastStartTag=None):
        self._state = initialState
        self._lastStartTag = lastStartTag

    def parse(self, stream):
        # The data-driven tests exercise the tokenizer on its own, so the
        # content model never changes behind their back
        tokenizer = HTMLTokenizer(stream, initialState=self._state,
                                  lastStartTag=self._lastStartTag,
                                  switchContentModel=False)
        self.outputTokens = []
        self.errors = []

        for token in tokenizer:
            if isinstance(token, ParseWarning):
                self.errors.append(token.data)
            elif isinstance(token, StartTag):
                output = ["StartTag", token.name, token.attributes]
                if token.self_closing:
                    output.append(True)
                self.outputTokens.append(output)
            elif isinstance(token, EndTag):
                self.outputTokens.append(["EndTag", token.name])
            elif isinstance(token, Characters):
                self.outputTokens.append(["Character", token.data])
            elif isinstance(token, Comment):
                self.outputTokens.append(["Comment", token.data])
            elif isinstance(token, Doctype):
                self.outputTokens.append(["DOCTYPE", token.name, token.public_id,
                                          token.system_id, not token.force_quirks])

        return self.outputTokens


def concatenateCharacterTokens(tokens):
    outputTokens = []
    for token in tokens:
        if token[0] == "Character" and outputTokens and outputTokens[-1][0] == "Character":
            outputTokens[-1] = ["Character", outputTokens[-1][1] + token[1]]
        else:
            outputTokens.append(token)
    return outputTokens


def _doCapitalize(match):
    return match.group(1).upper()

_capitalizeRe = re.compile(r"\W+(\w)").sub


def capitalize(s):
    s = s.lower()
    s = _capitalizeRe(_doCapitalize, s)
    return s


class TokenizerFile(pytest.File):
    def collect(self):
        with codecs.open(str(self.path), "r", encoding="utf-8") as fp:
            tests = json.load(fp)
        if 'tests' in tests:
            for i, test in enumerate(tests['tests']):
                yield TokenizerTestCollector.from_parent(self, name=str(i), testdata=test)


class TokenizerTestCollector(pytest.Collector):
    def __init__(self, *, testdata, **kwargs):
        super(TokenizerTestCollector, self).__init__(**kwargs)
        if 'initialStates' not in testdata:
            testdata["initialStates"] = ["Data state"]
        self.testdata = testdata

    def collect(self):
        for initialState in self.testdata["initialStates"]:
            initialState = capitalize(initialState)
            yield TokenizerTest.from_parent(self, name=initialState,
                                            test=self.testdata,
                                            initialState=State(initialState))


class TokenizerTest(pytest.Item):
    def __init__(self, *, test, initialState, **kwargs):
        super(TokenizerTest, self).__init__(**kwargs)
        self.test = test
        self.initialState = initialState

    def runtest(self):
        expected = concatenateCharacterTokens(self.test['output'])
        parser = TokenizerTestParser(self.initialState, self.test.get('lastStartTag'))
        received = concatenateCharacterTokens(parser.parse(self.test['input']))

        errorMsg = "\n".join(["\n\nInitial state:",
                              self.initialState.value,
                              "\nInput:", self.test['input'],
                              "\nExpected:", repr(expected),
                              "\nReceived:", repr(received)])
        assert expected == received, errorMsg

        if 'errors' in self.test:
            expectedErrors = [error['code'] for error in self.test['errors']]
            errorMsg = "\n".join(["\n\nInitial state:",
                                  self.initialState.value,
                                  "\nInput:", self.test['input'],
                                  "\nExpected errors:", repr(expectedErrors),
                                  "\nReceived errors:", repr(parser.errors)])
            assert expectedErrors == parser.errors, errorMsg

    def repr_failure(self, excinfo):
        excinfo.traceback = excinfo.traceback.cut(path=__file__)

        return excinfo.getrepr(funcargs=True,
                               showlocals=False,
                               style="short", tbfilter=False)

    def reportinfo(self):
        return self.path, None, "%s: %s" % (self.name, self.test.get('description', ''))
