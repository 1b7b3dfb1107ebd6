from .constants import E, asciiUpper2Lower


class Token(object):
    """Base class for everything the tokenizer yields.

    Tokens compare equal when they are of the same class and carry the same
    fields, which is what the tests rely on.
    """

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    __hash__ = None

    def __repr__(self):
        fields = ", ".join("%s=%r" % item for item in sorted(vars(self).items()))
        return "%s(%s)" % (type(self).__name__, fields)


class Doctype(Token):
    def __init__(self, name=None, public_id=None, system_id=None, force_quirks=False):
        self.name = name
        self.public_id = public_id
        self.system_id = system_id
        self.force_quirks = force_quirks


class Characters(Token):
    def __init__(self, data):
        self.data = data


class Comment(Token):
    def __init__(self, data=""):
        self.data = data


class Tag(Token):
    def __init__(self, name, attributes=None):
        self.name = name
        self.attributes = dict(attributes or {})
        self.self_closing = False


class StartTag(Tag):
    pass


class EndTag(Tag):
    pass


class EndOfStream(Token):
    pass


class ParseWarning(Token):
    """Malformed but recoverable input.

    data is the code (a key of constants.E), datavars fills in the message
    and position is the (line, col) of the cursor when it was raised.
    """

    def __init__(self, data, datavars=None, position=None):
        self.data = data
        self.datavars = datavars or {}
        self.position = position

    @property
    def message(self):
        return E[self.data] % self.datavars


class TokenBuilder(object):
    """Accumulates the token under construction between tokenizer steps.

    Attribute names and values are built in separate phases; an attribute
    is only written to the tag when the next one starts or the tag is
    finished, at which point a repeated name overwrites the earlier value.
    """

    def __init__(self):
        self.current = None
        self._clearAttribute()

    def _clearAttribute(self):
        self.attributeName = ""
        self.attributeValue = ""
        self._attributeOpen = False

    def start(self, token):
        assert self.current is None, "%r was neither emitted nor abandoned" % self.current
        self.current = token
        return token

    def startTag(self, tagClass, name):
        return self.start(tagClass(name.translate(asciiUpper2Lower)))

    def startComment(self, data=""):
        return self.start(Comment(data))

    def startDoctype(self):
        return self.start(Doctype())

    def appendTagName(self, text):
        self.current.name += text.translate(asciiUpper2Lower)

    def appendComment(self, text):
        self.current.data += text

    def setSelfClosing(self):
        self.current.self_closing = True

    def startAttribute(self, text):
        self.commitAttribute()
        self.attributeName = text.translate(asciiUpper2Lower)
        self._attributeOpen = True

    def appendAttributeName(self, text):
        self.attributeName += text.translate(asciiUpper2Lower)

    def appendAttributeValue(self, text):
        self.attributeValue += text

    def isDuplicateAttribute(self):
        return self._attributeOpen and self.attributeName in self.current.attributes

    def commitAttribute(self):
        if self._attributeOpen:
            self.current.attributes[self.attributeName] = self.attributeValue
        self._clearAttribute()

    def finish(self):
        """Return the completed token and clear the builder for the next one."""
        if isinstance(self.current, Tag):
            self.commitAttribute()
        token = self.current
        self.current = None
        return token

    def abandon(self):
        self.current = None
        self._clearAttribute()
