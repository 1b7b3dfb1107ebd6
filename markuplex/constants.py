import string
from enum import Enum
from html.entities import html5 as _html5Entities

EOF = None

E = {
    "invalid-codepoint":
        "Invalid codepoint in stream.",
    "null-character-reference":
        "Numeric character reference to U+0000, replaced with U+FFFD.",
    "illegal-codepoint-for-numeric-entity":
        "Numeric entity represents an illegal codepoint: "
        "U+%(charAsInt)08x.",
    "numeric-entity-without-semicolon":
        "Numeric entity didn't end with ';'.",
    "expected-numeric-entity":
        "Numeric entity expected but none found.",
    "named-entity-without-semicolon":
        "Named entity didn't end with ';'.",
    "expected-named-entity":
        "Named entity expected. Got none.",
    "attributes-in-end-tag":
        "End tag contains unexpected attributes.",
    "self-closing-flag-on-end-tag":
        "End tag contains unexpected self-closing flag.",
    "expected-tag-name-but-got-right-bracket":
        "Expected tag name. Got '>' instead.",
    "expected-tag-name-but-got-question-mark":
        "Expected tag name. Got '?' instead. (HTML doesn't "
        "support processing instructions.)",
    "expected-tag-name":
        "Expected tag name. Got something else instead",
    "expected-closing-tag-but-got-right-bracket":
        "Expected closing tag. Got '>' instead. Ignoring '</>'.",
    "expected-closing-tag-but-got-eof":
        "Expected closing tag. Unexpected end of file.",
    "expected-closing-tag-but-got-char":
        "Expected closing tag. Unexpected character '%(data)s' found.",
    "eof-in-tag-name":
        "Unexpected end of file in the tag name.",
    "expected-attribute-name-but-got-eof":
        "Unexpected end of file. Expected attribute name instead.",
    "eof-in-attribute-name":
        "Unexpected end of file in attribute name.",
    "invalid-character-in-attribute-name":
        "Invalid character in attribute name",
    "invalid-character-after-attribute-name":
        "Invalid character after attribute name.",
    "duplicate-attribute":
        "Duplicate attribute %(name)s on tag; the later value is kept.",
    "expected-end-of-tag-but-got-eof":
        "Unexpected end of file. Expected = or end of tag.",
    "expected-attribute-value-but-got-eof":
        "Unexpected end of file. Expected attribute value.",
    "expected-attribute-value-but-got-right-bracket":
        "Expected attribute value. Got '>' instead.",
    "equals-in-unquoted-attribute-value":
        "Unexpected = in unquoted attribute",
    "unexpected-character-in-unquoted-attribute-value":
        "Unexpected character in unquoted attribute",
    "eof-in-attribute-value-double-quote":
        "Unexpected end of file in attribute value (\").",
    "eof-in-attribute-value-single-quote":
        "Unexpected end of file in attribute value (').",
    "eof-in-attribute-value-no-quotes":
        "Unexpected end of file in attribute value.",
    "unexpected-EOF-after-attribute-value":
        "Unexpected end of file after attribute value.",
    "unexpected-character-after-attribute-value":
        "Unexpected character after attribute value.",
    "unexpected-EOF-after-solidus-in-tag":
        "Unexpected end of file in tag. Expected >",
    "unexpected-character-after-solidus-in-tag":
        "Unexpected character after / in tag. Expected >",
    "expected-dashes-or-doctype":
        "Expected '--' or 'DOCTYPE'. Not found.",
    "cdata-in-html-content":
        "CDATA section outside foreign content, treated as a comment.",
    "incorrect-comment":
        "Incorrect comment.",
    "eof-in-comment":
        "Unexpected end of file in comment.",
    "eof-in-comment-end-dash":
        "Unexpected end of file in comment (-)",
    "eof-in-comment-double-dash":
        "Unexpected end of file in comment (--).",
    "eof-in-comment-end-bang-state":
        "Unexpected end of file in comment (--!).",
    "unexpected-dash-after-double-dash-in-comment":
        "Unexpected '-' after '--' found in comment.",
    "unexpected-bang-after-double-dash-in-comment":
        "Unexpected ! after -- in comment",
    "unexpected-char-in-comment":
        "Unexpected character in comment found.",
    "need-space-after-doctype":
        "No space after literal string 'DOCTYPE'.",
    "expected-doctype-name-but-got-right-bracket":
        "Unexpected > character. Expected DOCTYPE name.",
    "expected-doctype-name-but-got-eof":
        "Unexpected end of file. Expected DOCTYPE name.",
    "eof-in-doctype-name":
        "Unexpected end of file in DOCTYPE name.",
    "eof-in-doctype":
        "Unexpected end of file in DOCTYPE.",
    "expected-space-or-right-bracket-in-doctype":
        "Expected space or '>'. Got '%(data)s'",
    "unexpected-end-of-doctype":
        "Unexpected end of DOCTYPE.",
    "unexpected-char-in-doctype":
        "Unexpected character in DOCTYPE.",
    "eof-in-script-html-comment-like-text":
        "Unexpected end of file in escaped script data.",
}


class State(Enum):
    """Tokenizer states.

    Each value names the HTMLTokenizer method that handles the state, so
    the dispatch table can be built with a single getattr per member.
    """
    DATA = "dataState"
    CHARACTER_REFERENCE = "characterReferenceState"
    RCDATA = "rcdataState"
    RAWTEXT = "rawtextState"
    SCRIPT_DATA = "scriptDataState"
    PLAINTEXT = "plaintextState"
    TAG_OPEN = "tagOpenState"
    END_TAG_OPEN = "closeTagOpenState"
    TAG_NAME = "tagNameState"
    RCDATA_LESS_THAN_SIGN = "rcdataLessThanSignState"
    RCDATA_END_TAG_OPEN = "rcdataEndTagOpenState"
    RCDATA_END_TAG_NAME = "rcdataEndTagNameState"
    RAWTEXT_LESS_THAN_SIGN = "rawtextLessThanSignState"
    RAWTEXT_END_TAG_OPEN = "rawtextEndTagOpenState"
    RAWTEXT_END_TAG_NAME = "rawtextEndTagNameState"
    SCRIPT_DATA_LESS_THAN_SIGN = "scriptDataLessThanSignState"
    SCRIPT_DATA_END_TAG_OPEN = "scriptDataEndTagOpenState"
    SCRIPT_DATA_END_TAG_NAME = "scriptDataEndTagNameState"
    SCRIPT_DATA_ESCAPE_START = "scriptDataEscapeStartState"
    SCRIPT_DATA_ESCAPE_START_DASH = "scriptDataEscapeStartDashState"
    SCRIPT_DATA_ESCAPED = "scriptDataEscapedState"
    SCRIPT_DATA_ESCAPED_DASH = "scriptDataEscapedDashState"
    SCRIPT_DATA_ESCAPED_DASH_DASH = "scriptDataEscapedDashDashState"
    SCRIPT_DATA_ESCAPED_LESS_THAN_SIGN = "scriptDataEscapedLessThanSignState"
    SCRIPT_DATA_ESCAPED_END_TAG_OPEN = "scriptDataEscapedEndTagOpenState"
    SCRIPT_DATA_ESCAPED_END_TAG_NAME = "scriptDataEscapedEndTagNameState"
    SCRIPT_DATA_DOUBLE_ESCAPE_START = "scriptDataDoubleEscapeStartState"
    SCRIPT_DATA_DOUBLE_ESCAPED = "scriptDataDoubleEscapedState"
    SCRIPT_DATA_DOUBLE_ESCAPED_DASH = "scriptDataDoubleEscapedDashState"
    SCRIPT_DATA_DOUBLE_ESCAPED_DASH_DASH = "scriptDataDoubleEscapedDashDashState"
    SCRIPT_DATA_DOUBLE_ESCAPED_LESS_THAN_SIGN = "scriptDataDoubleEscapedLessThanSignState"
    SCRIPT_DATA_DOUBLE_ESCAPE_END = "scriptDataDoubleEscapeEndState"
    BEFORE_ATTRIBUTE_NAME = "beforeAttributeNameState"
    ATTRIBUTE_NAME = "attributeNameState"
    AFTER_ATTRIBUTE_NAME = "afterAttributeNameState"
    BEFORE_ATTRIBUTE_VALUE = "beforeAttributeValueState"
    ATTRIBUTE_VALUE_DOUBLE_QUOTED = "attributeValueDoubleQuotedState"
    ATTRIBUTE_VALUE_SINGLE_QUOTED = "attributeValueSingleQuotedState"
    ATTRIBUTE_VALUE_UNQUOTED = "attributeValueUnQuotedState"
    AFTER_ATTRIBUTE_VALUE = "afterAttributeValueState"
    SELF_CLOSING_START_TAG = "selfClosingStartTagState"
    BOGUS_COMMENT = "bogusCommentState"
    MARKUP_DECLARATION_OPEN = "markupDeclarationOpenState"
    COMMENT_START = "commentStartState"
    COMMENT_START_DASH = "commentStartDashState"
    COMMENT = "commentState"
    COMMENT_END_DASH = "commentEndDashState"
    COMMENT_END = "commentEndState"
    COMMENT_END_BANG = "commentEndBangState"
    DOCTYPE = "doctypeState"
    BEFORE_DOCTYPE_NAME = "beforeDoctypeNameState"
    DOCTYPE_NAME = "doctypeNameState"
    AFTER_DOCTYPE_NAME = "afterDoctypeNameState"
    AFTER_DOCTYPE_PUBLIC_KEYWORD = "afterDoctypePublicKeywordState"
    BEFORE_DOCTYPE_PUBLIC_IDENTIFIER = "beforeDoctypePublicIdentifierState"
    DOCTYPE_PUBLIC_IDENTIFIER_DOUBLE_QUOTED = "doctypePublicIdentifierDoubleQuotedState"
    DOCTYPE_PUBLIC_IDENTIFIER_SINGLE_QUOTED = "doctypePublicIdentifierSingleQuotedState"
    AFTER_DOCTYPE_PUBLIC_IDENTIFIER = "afterDoctypePublicIdentifierState"
    BETWEEN_DOCTYPE_PUBLIC_AND_SYSTEM_IDENTIFIERS = "betweenDoctypePublicAndSystemIdentifiersState"
    AFTER_DOCTYPE_SYSTEM_KEYWORD = "afterDoctypeSystemKeywordState"
    BEFORE_DOCTYPE_SYSTEM_IDENTIFIER = "beforeDoctypeSystemIdentifierState"
    DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED = "doctypeSystemIdentifierDoubleQuotedState"
    DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED = "doctypeSystemIdentifierSingleQuotedState"
    AFTER_DOCTYPE_SYSTEM_IDENTIFIER = "afterDoctypeSystemIdentifierState"
    BOGUS_DOCTYPE = "bogusDoctypeState"


spaceCharacters = frozenset([
    "\t",
    "\n",
    "\u000C",
    " ",
    "\r"
])

asciiLowercase = frozenset(string.ascii_lowercase)
asciiUppercase = frozenset(string.ascii_uppercase)
asciiLetters = frozenset(string.ascii_letters)
digits = frozenset(string.digits)
hexDigits = frozenset(string.hexdigits)
asciiAlphanumeric = asciiLetters | digits

asciiUpper2Lower = {ord(c): ord(c.lower()) for c in string.ascii_uppercase}

rcdataElements = frozenset([
    "title",
    "textarea"
])

rawtextElements = frozenset([
    "style",
    "xmp",
    "iframe",
    "noembed",
    "noframes"
])

# Numeric references in the C1 range map through windows-1252
replacementCharacters = {
    0x80: "€",
    0x82: "‚",
    0x83: "ƒ",
    0x84: "„",
    0x85: "…",
    0x86: "†",
    0x87: "‡",
    0x88: "ˆ",
    0x89: "‰",
    0x8A: "Š",
    0x8B: "‹",
    0x8C: "Œ",
    0x8E: "Ž",
    0x91: "‘",
    0x92: "’",
    0x93: "“",
    0x94: "”",
    0x95: "•",
    0x96: "–",
    0x97: "—",
    0x98: "˜",
    0x99: "™",
    0x9A: "š",
    0x9B: "›",
    0x9C: "œ",
    0x9E: "ž",
    0x9F: "Ÿ",
}

nonCharacters = frozenset(
    list(range(0xFDD0, 0xFDF0)) +
    [plane | low for plane in range(0, 0x110000, 0x10000)
     for low in (0xFFFE, 0xFFFF)])

# The full WHATWG named character reference table. Keys carry the
# trailing ";" except for the legacy names that may appear without it.
entities = dict(_html5Entities)


class ReconsumeError(Exception):
    """Raised when the input cursor is asked to step back twice in a row."""
    pass
