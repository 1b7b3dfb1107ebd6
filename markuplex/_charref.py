from .constants import EOF, spaceCharacters, asciiAlphanumeric, digits, hexDigits
from .constants import entities as defaultEntities
from .constants import nonCharacters, replacementCharacters

from ._trie import Trie

entitiesTrie = Trie(defaultEntities)


def isControl(charAsInt):
    return (0x0001 <= charAsInt <= 0x0008 or
            charAsInt == 0x000B or
            0x000D <= charAsInt <= 0x001F or
            0x007F <= charAsInt <= 0x009F)


class CharacterReferenceResolver(object):
    """Resolves the text following an "&".

    consume() is called with the stream positioned just after the "&" and
    returns the replacement text. When nothing resolves it returns "&" and
    leaves the stream where it found it, so the characters that follow are
    tokenized again by the state that pushed the reference.

    warn is a callable taking a code from constants.E and optional datavars.
    """

    def __init__(self, stream, warn, entities=None):
        self.stream = stream
        self.warn = warn
        if entities is None:
            self.entities = defaultEntities
            self.trie = entitiesTrie
        else:
            self.entities = entities
            self.trie = Trie(entities)

    def consume(self, fromAttribute=False):
        start = self.stream.tell()
        char = self.stream.peek()
        if char is EOF or char in spaceCharacters or char in ("<", "&"):
            return "&"
        elif char == "#":
            return self.consumeNumeric(start)
        else:
            return self.consumeNamed(start, fromAttribute)

    def consumeNumeric(self, start):
        stream = self.stream
        stream.consume()

        allowed = digits
        radix = 10
        if stream.peek() in ("x", "X"):
            stream.consume()
            allowed = hexDigits
            radix = 16

        text = stream.charsUntil(allowed, True)
        if not text:
            self.warn("expected-numeric-entity")
            stream.seek(start)
            return "&"

        # Anything with more than eight significant digits is out of range
        significant = text.lstrip("0")
        if len(significant) > 8:
            charAsInt = 0x110000
        else:
            charAsInt = int(significant or "0", radix)

        if stream.peek() == ";":
            stream.consume()
        else:
            self.warn("numeric-entity-without-semicolon")

        return self.codepointToText(charAsInt)

    def codepointToText(self, charAsInt):
        if charAsInt == 0:
            self.warn("null-character-reference")
            return "\uFFFD"
        elif charAsInt > 0x10FFFF or 0xD800 <= charAsInt <= 0xDFFF:
            self.warn("illegal-codepoint-for-numeric-entity",
                      {"charAsInt": min(charAsInt, 0x110000)})
            return "\uFFFD"
        elif charAsInt in replacementCharacters:
            self.warn("illegal-codepoint-for-numeric-entity", {"charAsInt": charAsInt})
            return replacementCharacters[charAsInt]
        elif charAsInt in nonCharacters or isControl(charAsInt):
            self.warn("illegal-codepoint-for-numeric-entity", {"charAsInt": charAsInt})
        return chr(charAsInt)

    def consumeNamed(self, start, fromAttribute):
        stream = self.stream
        # Walk forward while the text read so far is still the prefix of
        # some name, then take the longest name it actually contains
        name = ""
        while True:
            char = stream.peek()
            if char is EOF or not self.trie.has_keys_with_prefix(name + char):
                break
            name += stream.consume()

        try:
            entityName = self.trie.longest_prefix(name)
        except KeyError:
            entityName = None

        if entityName is None:
            stream.seek(start)
            run = stream.charsUntil(asciiAlphanumeric, True)
            if run and stream.peek() == ";":
                self.warn("expected-named-entity")
            stream.seek(start)
            return "&"

        stream.seek(start + len(entityName))
        if entityName[-1] != ";":
            self.warn("named-entity-without-semicolon")
            following = stream.peek()
            if (fromAttribute and following is not EOF and
                    (following in asciiAlphanumeric or following == "=")):
                stream.seek(start)
                return "&"
        return self.entities[entityName]
