import logging
from collections import deque

from .constants import State, EOF
from .constants import spaceCharacters, asciiLetters, asciiUpper2Lower
from .constants import rcdataElements, rawtextElements

from ._inputstream import HTMLInputStream
from ._charref import CharacterReferenceResolver
from ._tokens import TokenBuilder, Characters, StartTag, EndTag, EndOfStream, ParseWarning

log = logging.getLogger(__name__)

contentModelStates = {"script": State.SCRIPT_DATA, "plaintext": State.PLAINTEXT}
contentModelStates.update((name, State.RCDATA) for name in rcdataElements)
contentModelStates.update((name, State.RAWTEXT) for name in rawtextElements)

attributeValueStates = frozenset([
    State.ATTRIBUTE_VALUE_DOUBLE_QUOTED,
    State.ATTRIBUTE_VALUE_SINGLE_QUOTED,
    State.ATTRIBUTE_VALUE_UNQUOTED,
])

tagEndCharacters = spaceCharacters | frozenset(("/", ">"))

unquotedAttributeStops = frozenset(("&", ">", '"', "'", "=", "<", "`", "\u0000")) | spaceCharacters


class HTMLTokenizer(object):
    """ This class takes care of tokenizing HTML.

    * self.state
      The State member whose handler runs on the next step.

    * self.builder
      Holds the token that is currently being built.

    * self.returnStates
      States to go back to once a character reference has been resolved.

    * self.stream
      Points to HTMLInputStream object.

    Every handler consumes at least one character or changes state, and
    returns False only once the input is exhausted in a text state.
    """

    def __init__(self, stream, initialState=State.DATA, lastStartTag=None,
                 switchContentModel=True, entities=None, **kwargs):

        self.stream = HTMLInputStream(stream, **kwargs)
        self.builder = TokenBuilder()
        self.resolver = CharacterReferenceResolver(self.stream, self.warn, entities)

        self.handlers = {state: getattr(self, state.value) for state in State}
        if not isinstance(initialState, State):
            initialState = State(initialState)
        self.state = initialState
        self.returnStates = []
        self.switchContentModel = switchContentModel

        # Used to decide whether an end tag closes raw text
        if lastStartTag is not None:
            lastStartTag = lastStartTag.translate(asciiUpper2Lower)
        self.lastStartTagName = lastStartTag
        self.temporaryBuffer = ""

        self.tokenQueue = deque([])
        self.finished = False

    def __iter__(self):
        """ This is where the magic happens.

        We do our usually processing through the states and when we have a token
        to return we yield the token which pauses processing until the next token
        is requested. The last token is always a single EndOfStream.
        """
        if self.finished:
            return
        log.debug("Tokenizing from %s", self.state.name)
        tokens = warnings = 0

        # Start processing. When EOF is reached self.step will return False
        # instead of True and the loop will terminate.
        more = True
        while more:
            more = self.step()
            while self.tokenQueue:
                token = self.tokenQueue.popleft()
                if isinstance(token, ParseWarning):
                    warnings += 1
                else:
                    tokens += 1
                yield token

        self.finished = True
        log.debug("Finished tokenizing: %d tokens, %d warnings", tokens, warnings)
        yield EndOfStream()

    def step(self):
        """Run a single transition, queueing whatever it emits."""
        mark = len(self.tokenQueue)
        more = self.handlers[self.state]()
        # Codepoint errors from the stream belong before this step's tokens
        if self.stream.errors:
            position = self.stream.position()
            for code in reversed(self.stream.errors):
                self.tokenQueue.insert(mark, ParseWarning(code, position=position))
            del self.stream.errors[:]
        return more

    def warn(self, code, datavars=None):
        self.tokenQueue.append(ParseWarning(code, datavars, self.stream.position()))

    def emitCharacters(self, data):
        self.tokenQueue.append(Characters(data))

    def emitCurrentToken(self):
        """This method is a generic handler for emitting the token being built.
        It also picks the next state: the data state, or the content model of
        a start tag whose contents are not markup.
        """
        token = self.builder.finish()
        self.state = State.DATA
        if isinstance(token, EndTag):
            if token.attributes:
                self.warn("attributes-in-end-tag")
                token.attributes = {}
            if token.self_closing:
                self.warn("self-closing-flag-on-end-tag")
                token.self_closing = False
        elif isinstance(token, StartTag):
            self.lastStartTagName = token.name
            if self.switchContentModel:
                self.state = contentModelStates.get(token.name, State.DATA)
        self.tokenQueue.append(token)

    def abandonCurrentToken(self):
        self.builder.abandon()
        self.state = State.DATA

    def emitCurrentDoctype(self, forceQuirks=False):
        if forceQuirks:
            self.builder.current.force_quirks = True
        self.emitCurrentToken()

    def enterCharacterReference(self):
        self.returnStates.append(self.state)
        self.state = State.CHARACTER_REFERENCE

    # Below are the various tokenizer states worked out.
    def dataState(self):
        data = self.stream.consume()
        if data == "&":
            self.enterCharacterReference()
        elif data == "<":
            self.state = State.TAG_OPEN
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\u0000")
        elif data is EOF:
            # Tokenization ends.
            return False
        else:
            chars = self.stream.charsUntil(("&", "<", "\u0000"))
            self.emitCharacters(data + chars)
        return True

    def characterReferenceState(self):
        returnState = self.returnStates.pop()
        if returnState in attributeValueStates:
            self.builder.appendAttributeValue(self.resolver.consume(fromAttribute=True))
        else:
            self.emitCharacters(self.resolver.consume())
        self.state = returnState
        return True

    def rcdataState(self):
        data = self.stream.consume()
        if data == "&":
            self.enterCharacterReference()
        elif data == "<":
            self.state = State.RCDATA_LESS_THAN_SIGN
        elif data is EOF:
            # Tokenization ends.
            return False
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
        else:
            chars = self.stream.charsUntil(("&", "<", "\u0000"))
            self.emitCharacters(data + chars)
        return True

    def rawtextState(self):
        return self.rawTextData(State.RAWTEXT_LESS_THAN_SIGN)

    def scriptDataState(self):
        return self.rawTextData(State.SCRIPT_DATA_LESS_THAN_SIGN)

    def rawTextData(self, lessThanSignState):
        data = self.stream.consume()
        if data == "<":
            self.state = lessThanSignState
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
        elif data is EOF:
            # Tokenization ends.
            return False
        else:
            chars = self.stream.charsUntil(("<", "\u0000"))
            self.emitCharacters(data + chars)
        return True

    def plaintextState(self):
        data = self.stream.consume()
        if data is EOF:
            # Tokenization ends.
            return False
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
        else:
            self.emitCharacters(data + self.stream.charsUntil(("\u0000",)))
        return True

    def tagOpenState(self):
        data = self.stream.consume()
        if data == "!":
            self.state = State.MARKUP_DECLARATION_OPEN
        elif data == "/":
            self.state = State.END_TAG_OPEN
        elif data in asciiLetters:
            self.builder.startTag(StartTag, data)
            self.state = State.TAG_NAME
        elif data == ">":
            self.warn("expected-tag-name-but-got-right-bracket")
            self.emitCharacters("<>")
            self.state = State.DATA
        elif data == "?":
            self.warn("expected-tag-name-but-got-question-mark")
            self.builder.startComment()
            self.stream.reconsume()
            self.state = State.BOGUS_COMMENT
        else:
            self.warn("expected-tag-name")
            self.emitCharacters("<")
            self.stream.reconsume()
            self.state = State.DATA
        return True

    def closeTagOpenState(self):
        data = self.stream.consume()
        if data in asciiLetters:
            self.builder.startTag(EndTag, data)
            self.state = State.TAG_NAME
        elif data == ">":
            self.warn("expected-closing-tag-but-got-right-bracket")
            self.state = State.DATA
        elif data is EOF:
            self.warn("expected-closing-tag-but-got-eof")
            self.emitCharacters("</")
            self.state = State.DATA
        else:
            self.warn("expected-closing-tag-but-got-char", {"data": data})
            self.builder.startComment()
            self.stream.reconsume()
            self.state = State.BOGUS_COMMENT
        return True

    def tagNameState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = State.BEFORE_ATTRIBUTE_NAME
        elif data == ">":
            self.emitCurrentToken()
        elif data is EOF:
            self.warn("eof-in-tag-name")
            self.abandonCurrentToken()
        elif data == "/":
            self.state = State.SELF_CLOSING_START_TAG
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendTagName("\uFFFD")
        else:
            self.builder.appendTagName(data)
            # (Don't use charsUntil here, because tag names are
            # very short and it's faster to not do anything fancy)
        return True

    # RCDATA, RAWTEXT and script data all look for the end tag matching
    # the last start tag in the same way; only the state to fall back to
    # differs.
    def rawTextLessThanSign(self, endTagOpenState, fallbackState):
        data = self.stream.consume()
        if data == "/":
            self.temporaryBuffer = ""
            self.state = endTagOpenState
        else:
            self.emitCharacters("<")
            self.stream.reconsume()
            self.state = fallbackState
        return True

    def rawTextEndTagOpen(self, endTagNameState, fallbackState):
        data = self.stream.consume()
        if data in asciiLetters:
            self.temporaryBuffer = data
            self.state = endTagNameState
        else:
            self.emitCharacters("</")
            self.stream.reconsume()
            self.state = fallbackState
        return True

    def rawTextEndTagName(self, fallbackState):
        appropriate = (self.lastStartTagName is not None and
                       self.temporaryBuffer.translate(asciiUpper2Lower) == self.lastStartTagName)
        data = self.stream.consume()
        if data in spaceCharacters and appropriate:
            self.builder.startTag(EndTag, self.temporaryBuffer)
            self.state = State.BEFORE_ATTRIBUTE_NAME
        elif data == "/" and appropriate:
            self.builder.startTag(EndTag, self.temporaryBuffer)
            self.state = State.SELF_CLOSING_START_TAG
        elif data == ">" and appropriate:
            self.builder.startTag(EndTag, self.temporaryBuffer)
            self.emitCurrentToken()
        elif data in asciiLetters:
            self.temporaryBuffer += data
        else:
            self.emitCharacters("</" + self.temporaryBuffer)
            self.stream.reconsume()
            self.state = fallbackState
        return True

    def rcdataLessThanSignState(self):
        return self.rawTextLessThanSign(State.RCDATA_END_TAG_OPEN, State.RCDATA)

    def rcdataEndTagOpenState(self):
        return self.rawTextEndTagOpen(State.RCDATA_END_TAG_NAME, State.RCDATA)

    def rcdataEndTagNameState(self):
        return self.rawTextEndTagName(State.RCDATA)

    def rawtextLessThanSignState(self):
        return self.rawTextLessThanSign(State.RAWTEXT_END_TAG_OPEN, State.RAWTEXT)

    def rawtextEndTagOpenState(self):
        return self.rawTextEndTagOpen(State.RAWTEXT_END_TAG_NAME, State.RAWTEXT)

    def rawtextEndTagNameState(self):
        return self.rawTextEndTagName(State.RAWTEXT)

    def scriptDataLessThanSignState(self):
        data = self.stream.consume()
        if data == "/":
            self.temporaryBuffer = ""
            self.state = State.SCRIPT_DATA_END_TAG_OPEN
        elif data == "!":
            self.emitCharacters("<!")
            self.state = State.SCRIPT_DATA_ESCAPE_START
        else:
            self.emitCharacters("<")
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA
        return True

    def scriptDataEndTagOpenState(self):
        return self.rawTextEndTagOpen(State.SCRIPT_DATA_END_TAG_NAME, State.SCRIPT_DATA)

    def scriptDataEndTagNameState(self):
        return self.rawTextEndTagName(State.SCRIPT_DATA)

    def scriptDataEscapeStartState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
            self.state = State.SCRIPT_DATA_ESCAPE_START_DASH
        else:
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA
        return True

    def scriptDataEscapeStartDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
            self.state = State.SCRIPT_DATA_ESCAPED_DASH_DASH
        else:
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA
        return True

    def scriptDataEscapedState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
            self.state = State.SCRIPT_DATA_ESCAPED_DASH
        elif data == "<":
            self.state = State.SCRIPT_DATA_ESCAPED_LESS_THAN_SIGN
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
        elif data is EOF:
            self.warn("eof-in-script-html-comment-like-text")
            self.state = State.DATA
        else:
            chars = self.stream.charsUntil(("<", "-", "\u0000"))
            self.emitCharacters(data + chars)
        return True

    def scriptDataEscapedDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
            self.state = State.SCRIPT_DATA_ESCAPED_DASH_DASH
        elif data == "<":
            self.state = State.SCRIPT_DATA_ESCAPED_LESS_THAN_SIGN
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
            self.state = State.SCRIPT_DATA_ESCAPED
        elif data is EOF:
            self.warn("eof-in-script-html-comment-like-text")
            self.state = State.DATA
        else:
            self.emitCharacters(data)
            self.state = State.SCRIPT_DATA_ESCAPED
        return True

    def scriptDataEscapedDashDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
        elif data == "<":
            self.state = State.SCRIPT_DATA_ESCAPED_LESS_THAN_SIGN
        elif data == ">":
            self.emitCharacters(">")
            self.state = State.SCRIPT_DATA
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
            self.state = State.SCRIPT_DATA_ESCAPED
        elif data is EOF:
            self.warn("eof-in-script-html-comment-like-text")
            self.state = State.DATA
        else:
            self.emitCharacters(data)
            self.state = State.SCRIPT_DATA_ESCAPED
        return True

    def scriptDataEscapedLessThanSignState(self):
        data = self.stream.consume()
        if data == "/":
            self.temporaryBuffer = ""
            self.state = State.SCRIPT_DATA_ESCAPED_END_TAG_OPEN
        elif data in asciiLetters:
            self.emitCharacters("<")
            self.temporaryBuffer = ""
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPE_START
        else:
            self.emitCharacters("<")
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA_ESCAPED
        return True

    def scriptDataEscapedEndTagOpenState(self):
        return self.rawTextEndTagOpen(State.SCRIPT_DATA_ESCAPED_END_TAG_NAME,
                                      State.SCRIPT_DATA_ESCAPED)

    def scriptDataEscapedEndTagNameState(self):
        return self.rawTextEndTagName(State.SCRIPT_DATA_ESCAPED)

    def scriptDataDoubleEscapeStartState(self):
        data = self.stream.consume()
        if data in tagEndCharacters:
            self.emitCharacters(data)
            if self.temporaryBuffer == "script":
                self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
            else:
                self.state = State.SCRIPT_DATA_ESCAPED
        elif data in asciiLetters:
            self.emitCharacters(data)
            self.temporaryBuffer += data.translate(asciiUpper2Lower)
        else:
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA_ESCAPED
        return True

    def scriptDataDoubleEscapedState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED_DASH
        elif data == "<":
            self.emitCharacters("<")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED_LESS_THAN_SIGN
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
        elif data is EOF:
            self.warn("eof-in-script-html-comment-like-text")
            self.state = State.DATA
        else:
            self.emitCharacters(data)
        return True

    def scriptDataDoubleEscapedDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED_DASH_DASH
        elif data == "<":
            self.emitCharacters("<")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED_LESS_THAN_SIGN
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        elif data is EOF:
            self.warn("eof-in-script-html-comment-like-text")
            self.state = State.DATA
        else:
            self.emitCharacters(data)
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        return True

    def scriptDataDoubleEscapedDashDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.emitCharacters("-")
        elif data == "<":
            self.emitCharacters("<")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED_LESS_THAN_SIGN
        elif data == ">":
            self.emitCharacters(">")
            self.state = State.SCRIPT_DATA
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.emitCharacters("\uFFFD")
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        elif data is EOF:
            self.warn("eof-in-script-html-comment-like-text")
            self.state = State.DATA
        else:
            self.emitCharacters(data)
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        return True

    def scriptDataDoubleEscapedLessThanSignState(self):
        data = self.stream.consume()
        if data == "/":
            self.emitCharacters("/")
            self.temporaryBuffer = ""
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPE_END
        else:
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        return True

    def scriptDataDoubleEscapeEndState(self):
        data = self.stream.consume()
        if data in tagEndCharacters:
            self.emitCharacters(data)
            if self.temporaryBuffer == "script":
                self.state = State.SCRIPT_DATA_ESCAPED
            else:
                self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        elif data in asciiLetters:
            self.emitCharacters(data)
            self.temporaryBuffer += data.translate(asciiUpper2Lower)
        else:
            self.stream.reconsume()
            self.state = State.SCRIPT_DATA_DOUBLE_ESCAPED
        return True

    def beforeAttributeNameState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.stream.charsUntil(spaceCharacters, True)
        elif data in asciiLetters:
            self.builder.startAttribute(data)
            self.state = State.ATTRIBUTE_NAME
        elif data == ">":
            self.emitCurrentToken()
        elif data == "/":
            self.state = State.SELF_CLOSING_START_TAG
        elif data in ("'", '"', "=", "<"):
            self.warn("invalid-character-in-attribute-name")
            self.builder.startAttribute(data)
            self.state = State.ATTRIBUTE_NAME
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.startAttribute("\uFFFD")
            self.state = State.ATTRIBUTE_NAME
        elif data is EOF:
            self.warn("expected-attribute-name-but-got-eof")
            self.abandonCurrentToken()
        else:
            self.builder.startAttribute(data)
            self.state = State.ATTRIBUTE_NAME
        return True

    def attributeNameState(self):
        data = self.stream.consume()
        leavingThisState = True
        emitToken = False
        if data == "=":
            self.state = State.BEFORE_ATTRIBUTE_VALUE
        elif data in asciiLetters:
            self.builder.appendAttributeName(data + self.stream.charsUntil(asciiLetters, True))
            leavingThisState = False
        elif data == ">":
            # The duplicate check below needs the attribute still open
            emitToken = True
        elif data in spaceCharacters:
            self.state = State.AFTER_ATTRIBUTE_NAME
        elif data == "/":
            self.state = State.SELF_CLOSING_START_TAG
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendAttributeName("\uFFFD")
            leavingThisState = False
        elif data in ("'", '"', "<"):
            self.warn("invalid-character-in-attribute-name")
            self.builder.appendAttributeName(data)
            leavingThisState = False
        elif data is EOF:
            self.warn("eof-in-attribute-name")
            self.abandonCurrentToken()
        else:
            self.builder.appendAttributeName(data)
            leavingThisState = False

        if leavingThisState:
            # The earlier value is only replaced when the attribute is
            # committed, but the warning is reported as soon as the name
            # is known.
            if self.builder.isDuplicateAttribute():
                self.warn("duplicate-attribute", {"name": self.builder.attributeName})
            if emitToken:
                self.emitCurrentToken()
        return True

    def afterAttributeNameState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.stream.charsUntil(spaceCharacters, True)
        elif data == "=":
            self.state = State.BEFORE_ATTRIBUTE_VALUE
        elif data == ">":
            self.emitCurrentToken()
        elif data in asciiLetters:
            self.builder.startAttribute(data)
            self.state = State.ATTRIBUTE_NAME
        elif data == "/":
            self.state = State.SELF_CLOSING_START_TAG
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.startAttribute("\uFFFD")
            self.state = State.ATTRIBUTE_NAME
        elif data in ("'", '"', "<"):
            self.warn("invalid-character-after-attribute-name")
            self.builder.startAttribute(data)
            self.state = State.ATTRIBUTE_NAME
        elif data is EOF:
            self.warn("expected-end-of-tag-but-got-eof")
            self.abandonCurrentToken()
        else:
            self.builder.startAttribute(data)
            self.state = State.ATTRIBUTE_NAME
        return True

    def beforeAttributeValueState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.stream.charsUntil(spaceCharacters, True)
        elif data == "\"":
            self.state = State.ATTRIBUTE_VALUE_DOUBLE_QUOTED
        elif data == "&":
            self.stream.reconsume()
            self.state = State.ATTRIBUTE_VALUE_UNQUOTED
        elif data == "'":
            self.state = State.ATTRIBUTE_VALUE_SINGLE_QUOTED
        elif data == ">":
            self.warn("expected-attribute-value-but-got-right-bracket")
            self.emitCurrentToken()
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendAttributeValue("\uFFFD")
            self.state = State.ATTRIBUTE_VALUE_UNQUOTED
        elif data in ("=", "<", "`"):
            self.warn("equals-in-unquoted-attribute-value")
            self.builder.appendAttributeValue(data)
            self.state = State.ATTRIBUTE_VALUE_UNQUOTED
        elif data is EOF:
            self.warn("expected-attribute-value-but-got-eof")
            self.abandonCurrentToken()
        else:
            self.builder.appendAttributeValue(data)
            self.state = State.ATTRIBUTE_VALUE_UNQUOTED
        return True

    def attributeValueDoubleQuotedState(self):
        return self.quotedAttributeValue('"', "eof-in-attribute-value-double-quote")

    def attributeValueSingleQuotedState(self):
        return self.quotedAttributeValue("'", "eof-in-attribute-value-single-quote")

    def quotedAttributeValue(self, quote, eofCode):
        data = self.stream.consume()
        if data == quote:
            self.state = State.AFTER_ATTRIBUTE_VALUE
        elif data == "&":
            self.enterCharacterReference()
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendAttributeValue("\uFFFD")
        elif data is EOF:
            self.warn(eofCode)
            self.abandonCurrentToken()
        else:
            self.builder.appendAttributeValue(data + self.stream.charsUntil((quote, "&", "\u0000")))
        return True

    def attributeValueUnQuotedState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = State.BEFORE_ATTRIBUTE_NAME
        elif data == "&":
            self.enterCharacterReference()
        elif data == ">":
            self.emitCurrentToken()
        elif data in ('"', "'", "=", "<", "`"):
            self.warn("unexpected-character-in-unquoted-attribute-value")
            self.builder.appendAttributeValue(data)
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendAttributeValue("\uFFFD")
        elif data is EOF:
            self.warn("eof-in-attribute-value-no-quotes")
            self.abandonCurrentToken()
        else:
            self.builder.appendAttributeValue(data + self.stream.charsUntil(unquotedAttributeStops))
        return True

    def afterAttributeValueState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = State.BEFORE_ATTRIBUTE_NAME
        elif data == ">":
            self.emitCurrentToken()
        elif data == "/":
            self.state = State.SELF_CLOSING_START_TAG
        elif data is EOF:
            self.warn("unexpected-EOF-after-attribute-value")
            self.abandonCurrentToken()
        else:
            self.warn("unexpected-character-after-attribute-value")
            self.stream.reconsume()
            self.state = State.BEFORE_ATTRIBUTE_NAME
        return True

    def selfClosingStartTagState(self):
        data = self.stream.consume()
        if data == ">":
            self.builder.setSelfClosing()
            self.emitCurrentToken()
        elif data is EOF:
            self.warn("unexpected-EOF-after-solidus-in-tag")
            self.abandonCurrentToken()
        else:
            self.warn("unexpected-character-after-solidus-in-tag")
            self.stream.reconsume()
            self.state = State.BEFORE_ATTRIBUTE_NAME
        return True

    def bogusCommentState(self):
        data = self.stream.consume()
        if data == ">" or data is EOF:
            self.emitCurrentToken()
        elif data == "\u0000":
            self.builder.appendComment("\uFFFD")
        else:
            self.builder.appendComment(data + self.stream.charsUntil((">", "\u0000")))
        return True

    def markupDeclarationOpenState(self):
        if self.stream.matchAhead("--"):
            self.builder.startComment()
            self.state = State.COMMENT_START
        elif self.stream.matchAhead("doctype", ignoreCase=True):
            self.builder.startDoctype()
            self.state = State.DOCTYPE
        elif self.stream.matchAhead("[CDATA["):
            # No foreign content here, so this is only ever a comment
            self.warn("cdata-in-html-content")
            self.builder.startComment("[CDATA[")
            self.state = State.BOGUS_COMMENT
        else:
            self.warn("expected-dashes-or-doctype")
            self.builder.startComment()
            self.state = State.BOGUS_COMMENT
        return True

    def commentStartState(self):
        data = self.stream.consume()
        if data == "-":
            self.state = State.COMMENT_START_DASH
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendComment("\uFFFD")
            self.state = State.COMMENT
        elif data == ">":
            self.warn("incorrect-comment")
            self.emitCurrentToken()
        elif data is EOF:
            self.warn("eof-in-comment")
            self.emitCurrentToken()
        else:
            self.builder.appendComment(data)
            self.state = State.COMMENT
        return True

    def commentStartDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.state = State.COMMENT_END
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendComment("-\uFFFD")
            self.state = State.COMMENT
        elif data == ">":
            self.warn("incorrect-comment")
            self.emitCurrentToken()
        elif data is EOF:
            self.warn("eof-in-comment")
            self.emitCurrentToken()
        else:
            self.builder.appendComment("-" + data)
            self.state = State.COMMENT
        return True

    def commentState(self):
        data = self.stream.consume()
        if data == "-":
            self.state = State.COMMENT_END_DASH
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendComment("\uFFFD")
        elif data is EOF:
            self.warn("eof-in-comment")
            self.emitCurrentToken()
        else:
            self.builder.appendComment(data + self.stream.charsUntil(("-", "\u0000")))
        return True

    def commentEndDashState(self):
        data = self.stream.consume()
        if data == "-":
            self.state = State.COMMENT_END
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendComment("-\uFFFD")
            self.state = State.COMMENT
        elif data is EOF:
            self.warn("eof-in-comment-end-dash")
            self.emitCurrentToken()
        else:
            self.builder.appendComment("-" + data)
            self.state = State.COMMENT
        return True

    def commentEndState(self):
        data = self.stream.consume()
        if data == ">":
            self.emitCurrentToken()
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendComment("--\uFFFD")
            self.state = State.COMMENT
        elif data == "!":
            self.warn("unexpected-bang-after-double-dash-in-comment")
            self.state = State.COMMENT_END_BANG
        elif data == "-":
            self.warn("unexpected-dash-after-double-dash-in-comment")
            self.builder.appendComment(data)
        elif data is EOF:
            self.warn("eof-in-comment-double-dash")
            self.emitCurrentToken()
        else:
            self.warn("unexpected-char-in-comment")
            self.builder.appendComment("--" + data)
            self.state = State.COMMENT
        return True

    def commentEndBangState(self):
        data = self.stream.consume()
        if data == ">":
            self.emitCurrentToken()
        elif data == "-":
            self.builder.appendComment("--!")
            self.state = State.COMMENT_END_DASH
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.appendComment("--!\uFFFD")
            self.state = State.COMMENT
        elif data is EOF:
            self.warn("eof-in-comment-end-bang-state")
            self.emitCurrentToken()
        else:
            self.builder.appendComment("--!" + data)
            self.state = State.COMMENT
        return True

    def doctypeState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = State.BEFORE_DOCTYPE_NAME
        elif data == ">":
            # Reported once, as a missing name, by the next state
            self.stream.reconsume()
            self.state = State.BEFORE_DOCTYPE_NAME
        elif data is EOF:
            self.warn("expected-doctype-name-but-got-eof")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.warn("need-space-after-doctype")
            self.stream.reconsume()
            self.state = State.BEFORE_DOCTYPE_NAME
        return True

    def beforeDoctypeNameState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            pass
        elif data == ">":
            self.warn("expected-doctype-name-but-got-right-bracket")
            self.emitCurrentDoctype(forceQuirks=True)
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.current.name = "\uFFFD"
            self.state = State.DOCTYPE_NAME
        elif data is EOF:
            self.warn("expected-doctype-name-but-got-eof")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.builder.current.name = data.translate(asciiUpper2Lower)
            self.state = State.DOCTYPE_NAME
        return True

    def doctypeNameState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = State.AFTER_DOCTYPE_NAME
        elif data == ">":
            self.emitCurrentDoctype()
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            self.builder.current.name += "\uFFFD"
        elif data is EOF:
            self.warn("eof-in-doctype-name")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.builder.current.name += data.translate(asciiUpper2Lower)
        return True

    def afterDoctypeNameState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            pass
        elif data == ">":
            self.emitCurrentDoctype()
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.stream.reconsume()
            if self.stream.matchAhead("public", ignoreCase=True):
                self.state = State.AFTER_DOCTYPE_PUBLIC_KEYWORD
            elif self.stream.matchAhead("system", ignoreCase=True):
                self.state = State.AFTER_DOCTYPE_SYSTEM_KEYWORD
            else:
                # The character is left for the bogus doctype state to drop
                self.warn("expected-space-or-right-bracket-in-doctype", {"data": data})
                self.builder.current.force_quirks = True
                self.state = State.BOGUS_DOCTYPE
        return True

    def afterDoctypePublicKeywordState(self):
        return self.afterDoctypeKeyword(State.BEFORE_DOCTYPE_PUBLIC_IDENTIFIER)

    def afterDoctypeSystemKeywordState(self):
        return self.afterDoctypeKeyword(State.BEFORE_DOCTYPE_SYSTEM_IDENTIFIER)

    def afterDoctypeKeyword(self, identifierState):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = identifierState
        elif data in ("'", '"'):
            self.warn("unexpected-char-in-doctype")
            self.stream.reconsume()
            self.state = identifierState
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.stream.reconsume()
            self.state = identifierState
        return True

    def beforeDoctypePublicIdentifierState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            pass
        elif data == "\"":
            self.builder.current.public_id = ""
            self.state = State.DOCTYPE_PUBLIC_IDENTIFIER_DOUBLE_QUOTED
        elif data == "'":
            self.builder.current.public_id = ""
            self.state = State.DOCTYPE_PUBLIC_IDENTIFIER_SINGLE_QUOTED
        elif data == ">":
            self.warn("unexpected-end-of-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.warn("unexpected-char-in-doctype")
            self.builder.current.force_quirks = True
            self.state = State.BOGUS_DOCTYPE
        return True

    def doctypePublicIdentifierDoubleQuotedState(self):
        return self.doctypeIdentifier("public_id", '"', State.AFTER_DOCTYPE_PUBLIC_IDENTIFIER)

    def doctypePublicIdentifierSingleQuotedState(self):
        return self.doctypeIdentifier("public_id", "'", State.AFTER_DOCTYPE_PUBLIC_IDENTIFIER)

    def doctypeSystemIdentifierDoubleQuotedState(self):
        return self.doctypeIdentifier("system_id", '"', State.AFTER_DOCTYPE_SYSTEM_IDENTIFIER)

    def doctypeSystemIdentifierSingleQuotedState(self):
        return self.doctypeIdentifier("system_id", "'", State.AFTER_DOCTYPE_SYSTEM_IDENTIFIER)

    def doctypeIdentifier(self, field, quote, afterState):
        doctype = self.builder.current
        data = self.stream.consume()
        if data == quote:
            self.state = afterState
        elif data == "\u0000":
            self.warn("invalid-codepoint")
            setattr(doctype, field, getattr(doctype, field) + "\uFFFD")
        elif data == ">":
            self.warn("unexpected-end-of-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            chars = self.stream.charsUntil((quote, ">", "\u0000"))
            setattr(doctype, field, getattr(doctype, field) + data + chars)
        return True

    def afterDoctypePublicIdentifierState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            self.state = State.BETWEEN_DOCTYPE_PUBLIC_AND_SYSTEM_IDENTIFIERS
        elif data == ">":
            self.emitCurrentDoctype()
        elif data == '"':
            self.warn("unexpected-char-in-doctype")
            self.builder.current.system_id = ""
            self.state = State.DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED
        elif data == "'":
            self.warn("unexpected-char-in-doctype")
            self.builder.current.system_id = ""
            self.state = State.DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.warn("unexpected-char-in-doctype")
            self.builder.current.force_quirks = True
            self.state = State.BOGUS_DOCTYPE
        return True

    def betweenDoctypePublicAndSystemIdentifiersState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            pass
        elif data == ">":
            self.emitCurrentDoctype()
        elif data == '"':
            self.builder.current.system_id = ""
            self.state = State.DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED
        elif data == "'":
            self.builder.current.system_id = ""
            self.state = State.DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.warn("unexpected-char-in-doctype")
            self.builder.current.force_quirks = True
            self.state = State.BOGUS_DOCTYPE
        return True

    def beforeDoctypeSystemIdentifierState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            pass
        elif data == "\"":
            self.builder.current.system_id = ""
            self.state = State.DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED
        elif data == "'":
            self.builder.current.system_id = ""
            self.state = State.DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED
        elif data == ">":
            self.warn("unexpected-char-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.warn("unexpected-char-in-doctype")
            self.builder.current.force_quirks = True
            self.state = State.BOGUS_DOCTYPE
        return True

    def afterDoctypeSystemIdentifierState(self):
        data = self.stream.consume()
        if data in spaceCharacters:
            pass
        elif data == ">":
            self.emitCurrentDoctype()
        elif data is EOF:
            self.warn("eof-in-doctype")
            self.emitCurrentDoctype(forceQuirks=True)
        else:
            self.warn("unexpected-char-in-doctype")
            self.state = State.BOGUS_DOCTYPE
        return True

    def bogusDoctypeState(self):
        data = self.stream.consume()
        if data == ">" or data is EOF:
            self.emitCurrentDoctype()
        return True
