from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import ParseError
from .matcher import SelectorMatcher
from .node import Tag
from .selector import Relationship, Selector, SelectorItem, SelectorRule, parse_selector

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .node import Node

logger = logging.getLogger(__name__)

# A step in a result path: the list holding the node, and the node's index in it.
PathStep = tuple["list[Node]", int]


class QueryResult:
    """A matched node together with the path leading to it from the root list.

    The path stores (sibling list, index) pairs from the outermost ancestor
    down to the node itself, so no parent pointers are needed.
    """

    __slots__ = ("path",)

    path: list[PathStep]

    def __init__(self, path: list[PathStep]) -> None:
        self.path = path

    def __repr__(self) -> str:
        node = self.node
        name = node.name if isinstance(node, Tag) else type(node).__name__
        return f"<QueryResult {name} at {list(self.key())}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryResult):
            return NotImplemented
        return len(self.path) == len(other.path) and all(
            a[0] is b[0] and a[1] == b[1] for a, b in zip(self.path, other.path)
        )

    __hash__ = None  # type: ignore[assignment]

    def key(self) -> tuple[int, ...]:
        """Indices along the path; sorting by key gives document order."""
        return tuple(index for _, index in self.path)

    @property
    def node(self) -> Node:
        siblings, index = self.path[-1]
        return siblings[index]

    @property
    def siblings(self) -> list[Node]:
        return self.path[-1][0]

    @property
    def index(self) -> int:
        return self.path[-1][1]

    @property
    def parent(self) -> Node | None:
        if len(self.path) < 2:
            return None
        return self.node_at(len(self.path) - 2)

    def node_at(self, index: int) -> Node:
        """The node at position `index` of the path (0 is the outermost)."""
        siblings, i = self.path[index]
        return siblings[i]

    def ancestry(self) -> Iterator[Node]:
        """Walk bottom-up from the node itself to its outermost ancestor."""
        for siblings, index in reversed(self.path):
            yield siblings[index]

    def ancestors(self) -> Iterator[Node]:
        """Like `ancestry` but without the node itself."""
        for siblings, index in reversed(self.path[:-1]):
            yield siblings[index]

    def parent_result(self) -> QueryResult | None:
        if len(self.path) < 2:
            return None
        return QueryResult(self.path[:-1])

    def previous_sibling_result(self) -> QueryResult | None:
        """The closest earlier sibling that is a tag (text and comments are skipped)."""
        siblings, index = self.path[-1]
        for i in range(index - 1, -1, -1):
            if isinstance(siblings[i], Tag):
                return QueryResult([*self.path[:-1], (siblings, i)])
        return None

    def move_to_parent(self) -> None:
        if len(self.path) < 2:
            raise ParseError.from_code("no-parent")
        self.path.pop()

    def move_to_previous_sibling(self) -> None:
        previous = self.previous_sibling_result()
        if previous is None:
            raise ParseError.from_code("no-previous-sibling")
        self.path[-1] = previous.path[-1]

    def descendants(self) -> Iterator[QueryResult]:
        node = self.node
        if isinstance(node, Tag):
            yield from iter_results(node.contents, self.path)

    def matches(self, selector: str | Selector) -> bool:
        if isinstance(selector, str):
            selector = parse_selector(selector)
        return _matcher.matches(self, selector)

    def find(self, selector: str | Selector) -> HtmlQuery:
        """Search the descendants of this result."""
        return HtmlQuery(self.path[0][0], [self]).find(selector)


def iter_results(siblings: list[Node], prefix: list[PathStep] | None = None) -> Iterator[QueryResult]:
    """Depth-first walk over every tag in `siblings` and below, in document order."""
    prefix = prefix or []
    for index, node in enumerate(siblings):
        if isinstance(node, Tag):
            path = [*prefix, (siblings, index)]
            yield QueryResult(path)
            yield from iter_results(node.contents, path)


def tag_selector(tag: str) -> Selector:
    return Selector([SelectorRule([(Relationship.CURRENT, SelectorItem(tag=tag))])])


# Global matcher instance
_matcher: SelectorMatcher = SelectorMatcher()


class HtmlQuery:
    """Successive narrowing of a node list by selectors.

    While there are no results `find` searches the whole root list.
    Otherwise it searches only below the results of the previous one, so a
    `find` that matched nothing makes the next one start from the root again.
    """

    __slots__ = ("results", "root")

    root: list[Node]
    results: list[QueryResult]

    def __init__(self, root: list[Node], results: list[QueryResult] | None = None) -> None:
        self.root = root
        self.results = list(results) if results is not None else []

    def __repr__(self) -> str:
        return f"<HtmlQuery {len(self.results)} results>"

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[QueryResult]:
        return iter(self.results)

    def find(self, selector: str | Selector) -> HtmlQuery:
        """Keep the tags matching `selector`; returns self for chaining."""
        if isinstance(selector, str):
            selector = parse_selector(selector)

        if self.results:
            bases = self.results
            candidates: Iterator[QueryResult] = (found for base in bases for found in base.descendants())
        else:
            bases = []
            candidates = iter_results(self.root)

        seen: set[tuple[int, ...]] = set()
        results: list[QueryResult] = []
        for result in candidates:
            key = result.key()
            if key in seen:
                continue
            seen.add(key)
            if _matcher.matches(result, selector):
                results.append(result)

        # Results below different bases can interleave
        if len(bases) > 1:
            results.sort(key=QueryResult.key)

        logger.debug("find(%r) narrowed %d results to %d", selector, len(bases), len(results))
        self.results = results
        return self

    def find_with_tag(self, tag: str) -> HtmlQuery:
        return self.find(tag_selector(tag))

    def reset(self) -> HtmlQuery:
        """Forget the results so the next `find` searches from the root again."""
        self.results = []
        return self

    def nodes(self) -> list[Node]:
        return [result.node for result in self.results]

    def first(self) -> Node | None:
        return self.results[0].node if self.results else None
