from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any, Union

from .serialize import to_html

if TYPE_CHECKING:
    from .query import HtmlQuery
    from .selector import Selector


def _to_text_collect(node: Any, parts: list[str], strip: bool) -> None:
    name: str = node.name

    if name == "#text":
        data: str = node.data
        if strip:
            data = data.strip()
        if data:
            parts.append(data)
        return

    if name == "#comment":
        return

    for child in node.contents:
        _to_text_collect(child, parts, strip=strip)


class Tag:
    """An element: a name, its class/id lists, other attributes and children.

    Two tags are equal when their names match, their classes and ids are
    equal as multisets and their remaining attributes are equal. Contents are
    not compared; use `tree_equal` for a deep comparison.
    """

    __slots__ = ("attributes", "classes", "contents", "ids", "name")

    name: str
    classes: list[str]
    ids: list[str]
    attributes: dict[str, str]
    contents: list[Node]

    def __init__(
        self,
        name: str,
        classes: list[str] | None = None,
        ids: list[str] | None = None,
        attributes: dict[str, str] | None = None,
        contents: list[Node] | None = None,
    ) -> None:
        self.name = name
        self.classes = classes if classes is not None else []
        self.ids = ids if ids is not None else []
        self.attributes = attributes if attributes is not None else {}
        self.contents = contents if contents is not None else []

    def __repr__(self) -> str:
        return f"<Tag {self.name} classes={self.classes} ids={self.ids} attributes={self.attributes}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return (
            self.name == other.name
            and Counter(self.classes) == Counter(other.classes)
            and Counter(self.ids) == Counter(other.ids)
            and self.attributes == other.attributes
        )

    __hash__ = None  # type: ignore[assignment]

    def get(self, name: str, default: str | None = None) -> str | None:
        """Attribute value by name; ``class`` and ``id`` are rebuilt from their lists."""
        if name == "class":
            return " ".join(self.classes) if self.classes else default
        if name == "id":
            return " ".join(self.ids) if self.ids else default
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def children(self) -> list[Tag]:
        """Child tags, without text and comments."""
        return [node for node in self.contents if isinstance(node, Tag)]

    @property
    def text(self) -> str:
        return self.to_text(separator="", strip=False)

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        """Return the concatenated text of this tag's descendants.

        Comments are skipped.
        """
        parts: list[str] = []
        _to_text_collect(self, parts, strip=strip)
        return separator.join(parts)

    def to_html(self, pretty: bool = False) -> str:
        return to_html(self, pretty=pretty)

    def query(self, selector: str | Selector) -> HtmlQuery:
        """Find tags matching `selector` inside this tag (the tag itself included).

        Tags keep no parent pointers, so the query treats this tag as the root
        of its own tree: `:root` matches it and sibling combinators cannot see
        past it. Use `HtmlDocument.find` or `QueryResult.find` to keep the
        surrounding document in view.
        """
        from .query import HtmlQuery

        return HtmlQuery([self]).find(selector)


class Text:
    __slots__ = ("data",)

    name = "#text"

    data: str

    def __init__(self, data: str) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"Text({self.data!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Text):
            return NotImplemented
        return self.data == other.data

    __hash__ = None  # type: ignore[assignment]

    @property
    def text(self) -> str:
        return self.data

    def to_text(self, separator: str = " ", strip: bool = True) -> str:  # noqa: ARG002
        return self.data.strip() if strip else self.data

    def to_html(self) -> str:
        return to_html(self)


class Comment:
    __slots__ = ("data",)

    name = "#comment"

    data: str

    def __init__(self, data: str) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"Comment({self.data!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Comment):
            return NotImplemented
        return self.data == other.data

    __hash__ = None  # type: ignore[assignment]

    def to_html(self) -> str:
        return to_html(self)


Node = Union[Tag, Text, Comment]


def tree_equal(a: Node, b: Node) -> bool:
    """Deep equality: node equality plus pairwise equal contents."""
    if a != b:
        return False
    if isinstance(a, Tag) and isinstance(b, Tag):
        return nodes_equal(a.contents, b.contents)
    return True


def nodes_equal(a: list[Node], b: list[Node]) -> bool:
    return len(a) == len(b) and all(tree_equal(x, y) for x, y in zip(a, b))
