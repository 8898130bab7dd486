import re

from .constants import ASCII_WHITESPACE, VOID_ELEMENTS
from .errors import SourceEmpty, UnexpectedChar
from .node import Tag
from .scalars import parse_string, read_until, read_until_str, skip_whitespace
from .tokens import CommentToken, DoctypeToken, EndTag, StartTag

_TAG_NAME_TERMINATORS = ASCII_WHITESPACE + ">"
_ATTR_NAME_TERMINATORS = ASCII_WHITESPACE + "=>"
_ATTR_VALUE_TERMINATORS = ">"
_WHITESPACE_PATTERN = re.compile(r"[ \t\n\r\f]+")


def split_whitespace(value):
    """Split on ASCII whitespace, dropping empty pieces."""
    return [part for part in _WHITESPACE_PATTERN.split(value) if part]


class ParserOpts:
    __slots__ = ("allow_bare_attributes", "lowercase_tag_names", "strip_whitespace_text", "void_elements")

    def __init__(
        self,
        void_elements=None,
        lowercase_tag_names=False,
        strip_whitespace_text=False,
        allow_bare_attributes=False,
    ):
        self.void_elements = frozenset(void_elements) if void_elements is not None else VOID_ELEMENTS
        self.lowercase_tag_names = bool(lowercase_tag_names)
        self.strip_whitespace_text = bool(strip_whitespace_text)
        self.allow_bare_attributes = bool(allow_bare_attributes)

    def __repr__(self):
        return (
            f"ParserOpts(lowercase_tag_names={self.lowercase_tag_names}, "
            f"strip_whitespace_text={self.strip_whitespace_text}, "
            f"allow_bare_attributes={self.allow_bare_attributes})"
        )


class Tokenizer:
    """Reads one tag, comment or DOCTYPE from the markup following a ``<``.

    The tokenizer and the tree builder (its `sink`) call each other: once a
    non-void start tag has been read, the sink fills in the tag's contents up
    to the matching end tag before the `StartTag` token is returned.
    """

    __slots__ = ("opts", "sink", "source")

    def __init__(self, source, sink=None, opts=None):
        self.source = source
        self.sink = sink
        self.opts = opts or ParserOpts()

    def next_token(self):
        """Read the next token. The ``<`` must already be consumed."""
        source = self.source
        item = source.next()
        if item is None:
            raise SourceEmpty.from_code("eof-before-tag-name", source=source)
        if item[1] == "/":
            return self._end_tag()
        source.move_back(1)

        prelim = self._read_until(_TAG_NAME_TERMINATORS, "eof-in-tag-name")
        term = source.next()[1]

        if prelim.startswith("!--"):
            return self._comment(prelim[3:] + term)
        if prelim.upper() == "!DOCTYPE":
            return self._doctype(term)
        return self._start_tag(prelim, term)

    def _read_until(self, stops, code, **details):
        source = self.source
        start = source.pointer
        try:
            return read_until(source, stops)
        except SourceEmpty as e:
            text = source.read_substr(start, source.pointer - start)
            raise SourceEmpty.from_code(code, source=source, text=text, **details) from e

    def _end_tag(self):
        source = self.source
        name = self._read_until(">", "eof-in-end-tag").rstrip()
        source.next()
        source.consume_read()
        if self.opts.lowercase_tag_names:
            name = name.lower()
        return EndTag(name)

    def _comment(self, body):
        source = self.source
        if body.endswith("-->"):
            data = body[:-3]
        else:
            try:
                data = body + read_until_str(source, "-->")
            except SourceEmpty as e:
                raise SourceEmpty.from_code("eof-in-comment", source=source, text=body) from e
        source.consume_read()
        return CommentToken(data)

    def _doctype(self, term):
        source = self.source
        data = ""
        if term != ">":
            data = self._read_until(">", "eof-in-doctype")
            source.next()
        source.consume_read()
        return DoctypeToken(data)

    def _start_tag(self, name, term):
        source = self.source
        self_closing = False
        if name.endswith("/") and len(name) > 1:
            name = name[:-1]
            self_closing = True
        if not name:
            raise UnexpectedChar.from_code("empty-tag-name", source=source, char=term)
        if self.opts.lowercase_tag_names:
            name = name.lower()

        tag = Tag(name)
        if term != ">" and self._read_attributes(tag):
            self_closing = True
        source.consume_read()

        if self_closing or name in self.opts.void_elements:
            return StartTag(tag, self_closing)
        tag.contents = self.sink.build_contents(name)
        return StartTag(tag)

    def _read_attributes(self, tag):
        """Read attributes up to and including ``>``; True if the tag self-closed."""
        source = self.source
        while True:
            skip_whitespace(source)
            item = source.peek()
            if item is None:
                raise SourceEmpty.from_code("eof-in-tag", source=source, tag_name=tag.name)
            if item[1] == ">":
                source.next()
                return False
            if source.lookahead(2) == "/>":
                source.move_forward(2)
                return True

            attr = self._read_until(_ATTR_NAME_TERMINATORS, "eof-in-attribute-name", tag_name=tag.name)
            if not attr:
                raise UnexpectedChar.from_code("missing-attribute-name", source=source, tag_name=tag.name)
            skip_whitespace(source)
            item = source.peek()
            if item is None:
                raise SourceEmpty.from_code("eof-in-tag", source=source, tag_name=tag.name)
            if item[1] != "=":
                if not self.opts.allow_bare_attributes:
                    raise UnexpectedChar.from_code("missing-attribute-value", source=source, attr=attr, char=item[1])
                self._set_attribute(tag, attr, "")
                continue

            source.next()
            source.consume_read()
            value = parse_string(source, stops=_ATTR_VALUE_TERMINATORS)
            self._set_attribute(tag, attr, value)

    def _set_attribute(self, tag, name, value):
        if name == "class":
            tag.classes = split_whitespace(value)
        elif name == "id":
            tag.ids = split_whitespace(value)
        else:
            tag.attributes[name] = value
