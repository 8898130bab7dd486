from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import (
    CHECKABLE_INPUT_TYPES,
    DISABLEABLE_ELEMENTS,
    REQUIRABLE_ELEMENTS,
    TEXT_CONTROL_ELEMENTS,
)
from .node import Comment, Tag, Text
from .selector import AttributeOp, AttributeSelector, Refiner, RefinerKind, Relationship

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .query import QueryResult
    from .selector import Selector, SelectorItem, SelectorRule


def _flag(node: Tag, name: str) -> bool:
    """Boolean attribute check; a literal "false" counts as absent."""
    value = node.get(name)
    return value is not None and value.lower() != "false"


class SelectorMatcher:
    """Matches selectors against query results (a node plus its path)."""

    __slots__ = ()

    def matches(self, result: QueryResult, selector: Selector) -> bool:
        if selector.rules is None:
            return True
        if not isinstance(result.node, Tag):
            return False
        return any(self._matches_rule(result, rule) for rule in selector.rules)

    def _matches_rule(self, result: QueryResult, rule: SelectorRule) -> bool:
        parts = rule.parts
        if not parts:
            return False
        if not self._matches_item(result, parts[-1][1]):
            return False
        return self._matches_chain(result, parts, len(parts) - 2)

    def _matches_chain(self, current: QueryResult, parts: list[tuple[Relationship, SelectorItem]], i: int) -> bool:
        """Find witnesses for parts[i], parts[i-1], ... walking left from `current`."""
        if i < 0:
            return True
        relationship, item = parts[i]
        for candidate in self._candidates(current, relationship):
            if self._matches_item(candidate, item) and self._matches_chain(candidate, parts, i - 1):
                return True
        return False

    def _candidates(self, result: QueryResult, relationship: Relationship) -> Iterator[QueryResult]:
        if relationship is Relationship.PARENT:
            parent = result.parent_result()
            if parent is not None:
                yield parent
        elif relationship is Relationship.ANCESTOR:
            ancestor = result.parent_result()
            while ancestor is not None:
                yield ancestor
                ancestor = ancestor.parent_result()
        elif relationship is Relationship.PREVIOUS_SIBLING_ONCE:
            sibling = result.previous_sibling_result()
            if sibling is not None:
                yield sibling
        elif relationship is Relationship.PREVIOUS_SIBLING:
            sibling = result.previous_sibling_result()
            while sibling is not None:
                yield sibling
                sibling = sibling.previous_sibling_result()
        else:
            yield result

    def _matches_item(self, result: QueryResult, item: SelectorItem) -> bool:
        node = result.node
        if not isinstance(node, Tag):
            return False
        if item.tag is not None and node.name != item.tag:
            return False
        if any(cls not in node.classes for cls in item.classes):
            return False
        if any(id_ not in node.ids for id_ in item.ids):
            return False
        if not all(self._matches_attribute(node, attr) for attr in item.attributes):
            return False
        return all(self._matches_refiner(result, refiner) for refiner in item.refiners)

    def _matches_attribute(self, node: Tag, selector: AttributeSelector) -> bool:
        """Match an attribute selector."""
        attr_value = node.get(selector.name)
        if attr_value is None:
            return False

        op = selector.op
        if op is AttributeOp.PRESENT:
            return True

        value = selector.value or ""

        if op is AttributeOp.EQUALS:
            return attr_value == value

        if op is AttributeOp.CONTAINS_WORD:
            # Space-separated word match
            return value in attr_value.split()

        if op is AttributeOp.EQUALS_OR_BEGINS_WITH:
            # Hyphen-separated prefix match (e.g., lang="en-US" matches [lang|="en"])
            return attr_value == value or attr_value.startswith(value + "-")

        if op is AttributeOp.BEGINS_WITH:
            return attr_value.startswith(value) if value else False

        if op is AttributeOp.ENDS_WITH:
            return attr_value.endswith(value) if value else False

        # AttributeOp.CONTAINS
        return value in attr_value if value else False

    def _matches_refiner(self, result: QueryResult, refiner: Refiner) -> bool:
        """Match a pseudo-class against the result's node."""
        node = result.node
        assert isinstance(node, Tag)
        kind = refiner.kind

        if kind is RefinerKind.CHECKED or kind is RefinerKind.DEFAULT:
            return self._is_checked(node)

        if kind is RefinerKind.DISABLED:
            return node.name in DISABLEABLE_ELEMENTS and _flag(node, "disabled")

        if kind is RefinerKind.ENABLED:
            return node.name in DISABLEABLE_ELEMENTS and not _flag(node, "disabled")

        if kind is RefinerKind.REQUIRED:
            return node.name in REQUIRABLE_ELEMENTS and _flag(node, "required")

        if kind is RefinerKind.OPTIONAL:
            return node.name in REQUIRABLE_ELEMENTS and not _flag(node, "required")

        if kind is RefinerKind.READ_WRITE:
            return self._is_writable(node)

        if kind is RefinerKind.READ_ONLY:
            return not self._is_writable(node)

        if kind is RefinerKind.EMPTY:
            return self._is_empty(node)

        if kind is RefinerKind.ROOT:
            return len(result.path) == 1

        if kind is RefinerKind.NOT:
            assert refiner.selector is not None
            return not self.matches(result, refiner.selector)

        # Positional refiners
        elements = self._get_element_siblings(result)
        if kind in (
            RefinerKind.FIRST_OF_TYPE,
            RefinerKind.LAST_OF_TYPE,
            RefinerKind.ONLY_OF_TYPE,
            RefinerKind.NTH_OF_TYPE,
            RefinerKind.NTH_LAST_OF_TYPE,
        ):
            elements = [el for el in elements if el.name == node.name]
        position = self._index_of(elements, node) + 1

        if kind is RefinerKind.FIRST_CHILD or kind is RefinerKind.FIRST_OF_TYPE:
            return position == 1
        if kind is RefinerKind.LAST_CHILD or kind is RefinerKind.LAST_OF_TYPE:
            return position == len(elements)
        if kind is RefinerKind.ONLY_CHILD or kind is RefinerKind.ONLY_OF_TYPE:
            return len(elements) == 1

        assert refiner.nth is not None
        if kind is RefinerKind.NTH_LAST_CHILD or kind is RefinerKind.NTH_LAST_OF_TYPE:
            return refiner.nth.matches(len(elements) - position + 1)
        return refiner.nth.matches(position)

    def _get_element_siblings(self, result: QueryResult) -> list[Tag]:
        """Tags sharing the node's sibling list (text and comments excluded)."""
        return [n for n in result.siblings if isinstance(n, Tag)]

    def _index_of(self, elements: list[Tag], node: Tag) -> int:
        for i, element in enumerate(elements):
            if element is node:
                return i
        raise ValueError(f"{node!r} is not among its siblings")

    def _is_checked(self, node: Tag) -> bool:
        if node.name == "option":
            return _flag(node, "selected")
        if node.name == "input":
            input_type = (node.get("type") or "").lower()
            return input_type in CHECKABLE_INPUT_TYPES and _flag(node, "checked")
        return False

    def _is_writable(self, node: Tag) -> bool:
        if node.name in TEXT_CONTROL_ELEMENTS:
            return not _flag(node, "readonly") and not _flag(node, "disabled")
        return _flag(node, "contenteditable")

    def _is_empty(self, node: Tag) -> bool:
        for child in node.contents:
            if isinstance(child, Comment):
                continue
            if isinstance(child, Text) and not child.data.strip():
                continue
            return False
        return True
