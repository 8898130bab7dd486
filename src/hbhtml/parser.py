"""hbhtml document entry points."""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING

from .encoding import decode_html
from .errors import SourceError
from .node import Tag, nodes_equal
from .query import HtmlQuery
from .serialize import document_to_html
from .source import StrSource, read_source
from .tokenizer import ParserOpts
from .treebuilder import TreeBuilder

if TYPE_CHECKING:
    import os
    from collections.abc import Iterator

    from .node import Node
    from .selector import Selector

logger = logging.getLogger(__name__)


def _to_source(html: str | bytes | bytearray | memoryview | None, encoding: str | None, name: str) -> tuple[StrSource, str | None]:
    if isinstance(html, (bytes, bytearray, memoryview)):
        try:
            text, chosen = decode_html(html, transport_encoding=encoding)
        except LookupError as e:
            raise SourceError.from_code("decode-error", name=name, error=e) from e
        return StrSource(text, name=name), chosen
    return StrSource(str(html) if html is not None else "", name=name), None


class HtmlDocument:
    """A parsed HTML document: an optional DOCTYPE and a list of top-level nodes.

    Parsing is strict: a mismatched or stray end tag, a second DOCTYPE or an
    unterminated construct raises a `ParseError`.
    """

    __slots__ = ("doctype", "encoding", "nodes", "opts")

    doctype: str | None
    encoding: str | None
    nodes: list[Node]
    opts: ParserOpts

    def __init__(
        self,
        html: str | bytes | bytearray | memoryview | None = None,
        *,
        encoding: str | None = None,
        opts: ParserOpts | None = None,
        name: str = "<html>",
    ) -> None:
        self.opts = opts or ParserOpts()
        source, self.encoding = _to_source(html, encoding, name)
        self._parse(source)

    @classmethod
    def from_file(
        cls,
        path_or_file: str | os.PathLike[str] | IO[str] | IO[bytes],
        *,
        encoding: str | None = None,
        opts: ParserOpts | None = None,
    ) -> HtmlDocument:
        """Parse a document from a path or an open file."""
        source = read_source(path_or_file, encoding=encoding)
        return cls(source.text, opts=opts, name=source.name)

    def _parse(self, source: StrSource) -> None:
        builder = TreeBuilder(source, self.opts)
        self.nodes = builder.build_document()
        self.doctype = builder.doctype
        logger.debug("Parsed %s: %d top-level nodes", source.name, len(self.nodes))

    def __repr__(self) -> str:
        return f"<HtmlDocument doctype={self.doctype!r} nodes={len(self.nodes)}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HtmlDocument):
            return NotImplemented
        return self.doctype == other.doctype and nodes_equal(self.nodes, other.nodes)

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def query(self) -> HtmlQuery:
        """Start a query rooted at the top-level nodes."""
        return HtmlQuery(self.nodes)

    def find(self, selector: str | Selector) -> HtmlQuery:
        return self.query().find(selector)

    def find_with_tag(self, tag: str) -> HtmlQuery:
        return self.query().find_with_tag(tag)

    def to_html(self, pretty: bool = False) -> str:
        """Serialize the document; with the default settings it parses back to an equal document."""
        return document_to_html(self.doctype, self.nodes, pretty=pretty, void_elements=self.opts.void_elements)

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        parts = [node.to_text(separator=separator, strip=strip) for node in self.nodes if node.name != "#comment"]
        return separator.join(part for part in parts if part)


def parse_tag(html: str, *, opts: ParserOpts | None = None) -> Tag:
    """Parse a string holding exactly one tag, optionally surrounded by whitespace."""
    return TreeBuilder(StrSource(html, name="<tag>"), opts).build_tag()
