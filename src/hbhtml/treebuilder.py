from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from .errors import ParseError, SourceEmpty, with_context
from .node import Comment, Tag, Text
from .tokenizer import ParserOpts, Tokenizer
from .tokens import CommentToken, DoctypeToken, EndTag, StartTag

if TYPE_CHECKING:
    from .node import Node
    from .source import Source
    from .tokens import Token

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds the node tree by pulling text and tokens from a source.

    Children are collected recursively: every non-void start tag read by the
    tokenizer calls back into `build_contents` until its end tag is found.
    """

    __slots__ = ("doctype", "opts", "source", "tokenizer")

    doctype: str | None
    opts: ParserOpts
    source: Source
    tokenizer: Tokenizer

    def __init__(self, source: Source, opts: ParserOpts | None = None) -> None:
        self.source = source
        self.opts = opts or ParserOpts()
        self.doctype = None
        self.tokenizer = Tokenizer(source, self, self.opts)

    def _read_text(self) -> tuple[str, bool]:
        """Consume text up to and including the next ``<``.

        Returns the text and whether a ``<`` was found before the end of input.
        """
        source = self.source
        while True:
            item = source.next()
            if item is None:
                return source.extract(source.pointer), False
            if item[1] == "<":
                text = source.read_substr(0, item[0])
                source.consume(source.pointer)
                return text, True

    def _append_text(self, contents: list[Node], text: str) -> None:
        if not text:
            return
        if self.opts.strip_whitespace_text and not text.strip(" \t\n\r\f"):
            return
        contents.append(Text(text))

    def _next_top_level_token(self) -> Token:
        # Each open tag holds a few interpreter frames until its end tag is read
        try:
            return self.tokenizer.next_token()
        except RecursionError as e:
            raise ParseError.from_code(
                "nesting-too-deep", source=self.source, limit=sys.getrecursionlimit()
            ) from e

    def build_contents(self, tag_name: str) -> list[Node]:
        """Read children of `tag_name` up to and including its end tag."""
        contents: list[Node] = []
        try:
            while True:
                text, found = self._read_text()
                self._append_text(contents, text)
                if not found:
                    raise SourceEmpty.from_code("expected-closing-tag-but-got-eof", source=self.source, tag_name=tag_name)

                token = self.tokenizer.next_token()
                if isinstance(token, EndTag):
                    if token.name != tag_name:
                        raise ParseError.from_code(
                            "mismatched-end-tag", source=self.source, found=token.name, expected=tag_name
                        )
                    return contents
                if isinstance(token, StartTag):
                    contents.append(token.tag)
                elif isinstance(token, CommentToken):
                    contents.append(Comment(token.data))
                else:
                    raise ParseError.from_code(
                        "unexpected-doctype", source=self.source, doctype=token.data, tag_name=tag_name
                    )
        except ParseError as e:
            e.add_context(f"Failed to parse contents of <{tag_name}>", self.source.get_context())
            raise

    @with_context("Failed to parse HTML document")
    def build_document(self) -> list[Node]:
        """Read the whole source as a document; sets `doctype` if one is declared."""
        nodes: list[Node] = []
        while True:
            text, found = self._read_text()
            self._append_text(nodes, text)
            if not found:
                return nodes

            token = self._next_top_level_token()
            if isinstance(token, StartTag):
                nodes.append(token.tag)
            elif isinstance(token, CommentToken):
                nodes.append(Comment(token.data))
            elif isinstance(token, DoctypeToken):
                if self.doctype is not None:
                    raise ParseError.from_code(
                        "duplicate-doctype", source=self.source, first=self.doctype, second=token.data
                    )
                logger.debug("Found DOCTYPE %r", token.data)
                self.doctype = token.data
            else:
                raise ParseError.from_code("unexpected-end-tag", source=self.source, tag_name=token.name)

    @with_context("Failed to parse HTML tag")
    def build_tag(self) -> Tag:
        """Read a source holding exactly one tag, optionally surrounded by whitespace."""
        tag: Tag | None = None
        while True:
            text, found = self._read_text()
            if text.strip():
                code = "text-before-tag" if tag is None else "text-after-tag"
                raise ParseError.from_code(code, source=self.source, text=text)
            if not found:
                break

            token = self._next_top_level_token()
            if isinstance(token, StartTag):
                if tag is not None:
                    raise ParseError.from_code("second-tag", source=self.source, first=tag.name, second=token.tag.name)
                tag = token.tag
            elif isinstance(token, CommentToken):
                raise ParseError.from_code("unexpected-comment", source=self.source, text=token.data)
            elif isinstance(token, DoctypeToken):
                raise ParseError.from_code("unexpected-doctype-in-tag", source=self.source, text=token.data)
            else:
                raise ParseError.from_code("unexpected-end-tag", source=self.source, tag_name=token.name)

        if tag is None:
            raise ParseError.from_code("no-tag-found", source=self.source)
        return tag
