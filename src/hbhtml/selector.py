# CSS selector parsing for hbhtml
# Supports a subset of CSS Selectors Level 3

from __future__ import annotations

import enum
import re

from .errors import ParseError, SelectorError
from .scalars import QUOTES, consume_whitespace, parse_num, read_quoted, skip_whitespace
from .source import StrSource


class Relationship(enum.Enum):
    """How an item relates to the item on its right."""

    CURRENT = ""  # the matched node itself (last item only)
    ANCESTOR = " "
    PARENT = ">"
    PREVIOUS_SIBLING = "~"
    PREVIOUS_SIBLING_ONCE = "+"


class AttributeOp(enum.Enum):
    PRESENT = ""
    EQUALS = "="
    EQUALS_OR_BEGINS_WITH = "|="
    BEGINS_WITH = "^="
    ENDS_WITH = "$="
    CONTAINS = "*="
    CONTAINS_WORD = "~="


class NthKind(enum.Enum):
    SPECIFIC = "specific"
    ODD = "odd"
    EVEN = "even"
    FUNCTIONAL = "functional"


class RefinerKind(enum.Enum):
    CHECKED = "checked"
    DEFAULT = "default"
    DISABLED = "disabled"
    ENABLED = "enabled"
    OPTIONAL = "optional"
    REQUIRED = "required"
    READ_ONLY = "read-only"
    READ_WRITE = "read-write"
    EMPTY = "empty"
    FIRST_CHILD = "first-child"
    LAST_CHILD = "last-child"
    ONLY_CHILD = "only-child"
    FIRST_OF_TYPE = "first-of-type"
    LAST_OF_TYPE = "last-of-type"
    ONLY_OF_TYPE = "only-of-type"
    NTH_CHILD = "nth-child"
    NTH_LAST_CHILD = "nth-last-child"
    NTH_OF_TYPE = "nth-of-type"
    NTH_LAST_OF_TYPE = "nth-last-of-type"
    NOT = "not"
    ROOT = "root"


NTH_REFINERS = frozenset(
    {RefinerKind.NTH_CHILD, RefinerKind.NTH_LAST_CHILD, RefinerKind.NTH_OF_TYPE, RefinerKind.NTH_LAST_OF_TYPE}
)


class AttributeSelector:
    """An attribute predicate such as ``[href]`` or ``[lang|="en"]``."""

    __slots__ = ("name", "op", "value")

    name: str
    op: AttributeOp
    value: str | None

    def __init__(self, name: str, op: AttributeOp = AttributeOp.PRESENT, value: str | None = None) -> None:
        self.name = name
        self.op = op
        self.value = value

    def __repr__(self) -> str:
        if self.op is AttributeOp.PRESENT:
            return f"AttributeSelector({self.name!r})"
        return f"AttributeSelector({self.name!r}, {self.op.value!r}, {self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeSelector):
            return NotImplemented
        return (self.name, self.op, self.value) == (other.name, other.op, other.value)

    __hash__ = None  # type: ignore[assignment]


class Nth:
    """Argument of the ``:nth-*`` refiners: odd, even, k or an+b."""

    __slots__ = ("a", "b", "kind")

    kind: NthKind
    a: int
    b: int

    def __init__(self, kind: NthKind, a: int = 0, b: int = 0) -> None:
        self.kind = kind
        self.a = a
        self.b = b

    @classmethod
    def specific(cls, index: int) -> Nth:
        return cls(NthKind.SPECIFIC, 0, index)

    @classmethod
    def odd(cls) -> Nth:
        return cls(NthKind.ODD, 2, 1)

    @classmethod
    def even(cls) -> Nth:
        return cls(NthKind.EVEN, 2, 0)

    @classmethod
    def functional(cls, a: int, b: int) -> Nth:
        return cls(NthKind.FUNCTIONAL, a, b)

    def __repr__(self) -> str:
        if self.kind is NthKind.FUNCTIONAL:
            return f"Nth({self.a}n{self.b:+d})"
        if self.kind is NthKind.SPECIFIC:
            return f"Nth({self.b})"
        return f"Nth({self.kind.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Nth):
            return NotImplemented
        return (self.kind, self.a, self.b) == (other.kind, other.a, other.b)

    __hash__ = None  # type: ignore[assignment]

    def matches(self, index: int) -> bool:
        """Check if 1-based index matches An+B formula."""
        a, b = self.a, self.b
        if a == 0:
            return index == b
        # Solve: index = a*n + b for non-negative integer n
        diff = index - b
        if a > 0:
            return diff >= 0 and diff % a == 0
        return diff <= 0 and diff % a == 0


class Refiner:
    """A pseudo-class. `nth` is set for the ``:nth-*`` family, `selector` for ``:not``."""

    __slots__ = ("kind", "nth", "selector")

    kind: RefinerKind
    nth: Nth | None
    selector: Selector | None

    def __init__(self, kind: RefinerKind, nth: Nth | None = None, selector: Selector | None = None) -> None:
        self.kind = kind
        self.nth = nth
        self.selector = selector

    def __repr__(self) -> str:
        if self.nth is not None:
            return f"Refiner({self.kind.value}, {self.nth!r})"
        if self.selector is not None:
            return f"Refiner({self.kind.value}, {self.selector!r})"
        return f"Refiner({self.kind.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Refiner):
            return NotImplemented
        return (self.kind, self.nth, self.selector) == (other.kind, other.nth, other.selector)

    __hash__ = None  # type: ignore[assignment]


class SelectorItem:
    """A compound selector such as ``p.x#main[data-k~="v"]:first-child``."""

    __slots__ = ("attributes", "classes", "ids", "refiners", "tag")

    tag: str | None
    classes: list[str]
    ids: list[str]
    attributes: list[AttributeSelector]
    refiners: list[Refiner]

    def __init__(
        self,
        tag: str | None = None,
        classes: list[str] | None = None,
        ids: list[str] | None = None,
        attributes: list[AttributeSelector] | None = None,
        refiners: list[Refiner] | None = None,
    ) -> None:
        self.tag = tag
        self.classes = classes or []
        self.ids = ids or []
        self.attributes = attributes or []
        self.refiners = refiners or []

    def __repr__(self) -> str:
        parts = [f"SelectorItem({self.tag!r}"]
        if self.classes:
            parts.append(f", classes={self.classes!r}")
        if self.ids:
            parts.append(f", ids={self.ids!r}")
        if self.attributes:
            parts.append(f", attributes={self.attributes!r}")
        if self.refiners:
            parts.append(f", refiners={self.refiners!r}")
        parts.append(")")
        return "".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectorItem):
            return NotImplemented
        return (
            self.tag == other.tag
            and self.classes == other.classes
            and self.ids == other.ids
            and self.attributes == other.attributes
            and self.refiners == other.refiners
        )

    __hash__ = None  # type: ignore[assignment]


class SelectorRule:
    """A chain of items; each item carries its relationship to the next one."""

    __slots__ = ("parts",)

    parts: list[tuple[Relationship, SelectorItem]]

    def __init__(self, parts: list[tuple[Relationship, SelectorItem]] | None = None) -> None:
        self.parts = parts or []

    def __repr__(self) -> str:
        return f"SelectorRule({self.parts!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectorRule):
            return NotImplemented
        return self.parts == other.parts

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self.parts)


class Selector:
    """Either Any (``rules is None``) or a list of alternative rules."""

    __slots__ = ("rules",)

    rules: list[SelectorRule] | None

    def __init__(self, rules: list[SelectorRule] | None = None) -> None:
        self.rules = rules

    @classmethod
    def any(cls) -> Selector:
        return cls(None)

    @property
    def is_any(self) -> bool:
        return self.rules is None

    def __repr__(self) -> str:
        if self.rules is None:
            return "Selector(*)"
        return f"Selector({self.rules!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selector):
            return NotImplemented
        return self.rules == other.rules

    __hash__ = None  # type: ignore[assignment]


_COMBINATORS = {
    ">": Relationship.PARENT,
    "~": Relationship.PREVIOUS_SIBLING,
    "+": Relationship.PREVIOUS_SIBLING_ONCE,
}
_ITEM_PART_STARTS = ".#:["
_INVALID_NAME_CHARS = frozenset("()[]\"'")
_ATTR_NAME_TERMINATORS = "]=|^$*~"
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_NTH_PATTERN = re.compile(r"^([+-]?\d*)n(?:([+-])(\d+))?$")


def _read_run(source: StrSource, stops: str) -> str:
    """Read from the pointer up to a stop character or the end of input."""
    start = source.pointer
    while True:
        item = source.peek()
        if item is None or item[1] in stops:
            return source.read_substr(start, source.pointer - start)
        source.next()


class SelectorParser:
    """Parses one selector rule (no top-level commas) with a character cursor."""

    __slots__ = ("source", "text")

    text: str
    source: StrSource

    def __init__(self, text: str) -> None:
        self.text = text
        self.source = StrSource(text, name="<selector>")

    def _error(self, code: str, source: StrSource | None = None, **details: object) -> ParseError:
        return SelectorError.from_code(code, source=source or self.source, **details)

    def parse_rule(self) -> SelectorRule:
        source = self.source
        consume_whitespace(source)
        rule = SelectorRule()
        while not source.at_end():
            item_text = self._read_item_text()
            if not item_text:
                item = source.peek()
                raise self._error("expected-selector-item", char=item[1] if item else "")
            try:
                item = self._parse_item(item_text)
            except ParseError as e:
                e.add_context(f"Failed to parse selector item {item_text!r}", source.get_context())
                raise
            rule.parts.append((self._read_combinator(), item))
        return rule

    def _read_item_text(self) -> str:
        """Read up to the next unquoted whitespace or combinator outside brackets."""
        source = self.source
        depth = 0
        quote: str | None = None
        while True:
            item = source.peek()
            if item is None:
                break
            ch = item[1]
            if quote is not None:
                if ch == quote:
                    quote = None
            elif ch in QUOTES:
                quote = ch
            elif ch in "([":
                depth += 1
            elif ch in ")]":
                depth -= 1
            elif depth <= 0 and (ch.isspace() or ch in _COMBINATORS):
                break
            source.next()
        return source.extract(source.pointer)

    def _read_combinator(self) -> Relationship:
        source = self.source
        found: str | None = None
        while True:
            item = source.peek()
            if item is None:
                break
            ch = item[1]
            if ch in _COMBINATORS:
                if found is not None and found != ch:
                    raise self._error("conflicting-combinators", first=found, second=ch)
                found = ch
            elif not ch.isspace():
                break
            source.next()
        source.consume_read()

        if source.at_end():
            if found is not None:
                raise self._error("dangling-combinator", combinator=found)
            return Relationship.CURRENT
        if found is None:
            return Relationship.ANCESTOR
        return _COMBINATORS[found]

    def _parse_item(self, text: str) -> SelectorItem:
        source = StrSource(text, name="<selector item>")
        item = SelectorItem()

        tag = self._read_name(source, text, "")
        if tag and tag != "*":
            item.tag = tag

        while True:
            entry = source.next()
            if entry is None:
                return item
            ch = entry[1]
            if ch in ".#":
                name = self._read_name(source, text, ch)
                if not name:
                    raise self._error("expected-name", source, prefix=ch, item=text)
                if ch == ".":
                    item.classes.append(name)
                else:
                    item.ids.append(name)
            elif ch == "[":
                source.consume_read()
                item.attributes.append(self._parse_attribute(source, text))
            elif ch == ":":
                source.consume_read()
                item.refiners.append(self._parse_refiner(source, text))
            else:
                raise self._error("unexpected-selector-char", source, char=ch, item=text)

    def _read_name(self, source: StrSource, text: str, prefix: str) -> str:
        name = _read_run(source, _ITEM_PART_STARTS)
        for ch in name:
            if ch in _INVALID_NAME_CHARS or ch.isspace():
                raise self._error("unexpected-selector-char", source, char=ch, item=text)
        source.consume_read()
        return name

    def _parse_attribute(self, source: StrSource, text: str) -> AttributeSelector:
        """Parse the inside of ``[...]``; the opening bracket is already consumed."""
        skip_whitespace(source)
        name = _read_run(source, _ATTR_NAME_TERMINATORS).strip()
        if not name:
            raise self._error("expected-attribute-name", source, text=text)
        entry = source.next()
        if entry is None:
            raise self._error("unterminated-attribute-selector", source, text=text)
        if entry[1] == "]":
            source.consume_read()
            return AttributeSelector(name)

        op = entry[1]
        if op != "=":
            entry = source.next()
            if entry is None or entry[1] != "=":
                raise self._error("expected-attribute-operator", source, text=op + (entry[1] if entry else ""))
            op += "="

        skip_whitespace(source)
        entry = source.peek()
        if entry is not None and entry[1] in QUOTES:
            source.next()
            try:
                value = read_quoted(source, entry[1])
            except ParseError as e:
                raise self._error("unterminated-attribute-selector", source, text=text) from e
            skip_whitespace(source)
            entry = source.next()
            if entry is None or entry[1] != "]":
                raise self._error("unterminated-attribute-selector", source, text=text)
        else:
            value = self._read_attribute_value(source, text).strip()

        source.consume_read()
        return AttributeSelector(name, AttributeOp(op), value)

    def _read_attribute_value(self, source: StrSource, text: str) -> str:
        # Nested brackets are part of the value
        start = source.pointer
        depth = 0
        while True:
            entry = source.next()
            if entry is None:
                raise self._error("unterminated-attribute-selector", source, text=text)
            i, ch = entry
            if ch == "[":
                depth += 1
            elif ch == "]":
                if depth == 0:
                    return source.read_substr(start, i - start)
                depth -= 1

    def _parse_refiner(self, source: StrSource, text: str) -> Refiner:
        """Parse a pseudo-class; the leading ``:`` is already consumed."""
        name = _read_run(source, _ITEM_PART_STARTS + "(")
        if not name:
            raise self._error("expected-name", source, prefix=":", item=text)

        arg: str | None = None
        entry = source.peek()
        source.consume_read()
        if entry is not None and entry[1] == "(":
            arg = self._read_refiner_argument(source, name)

        try:
            kind = RefinerKind(name.lower())
        except ValueError:
            raise self._error("unknown-refiner", source, name=name) from None

        if kind in NTH_REFINERS:
            if arg is None:
                raise self._error("refiner-needs-argument", source, name=name)
            return Refiner(kind, nth=parse_nth(arg, name))
        if kind is RefinerKind.NOT:
            if arg is None or not arg.strip():
                raise self._error("refiner-needs-argument", source, name=name)
            try:
                return Refiner(kind, selector=parse_selector(arg))
            except ParseError as e:
                e.add_context(f"Failed to parse :not({arg})", source.get_context())
                raise
        if arg is not None:
            raise self._error("refiner-takes-no-argument", source, name=name)
        return Refiner(kind)

    def _read_refiner_argument(self, source: StrSource, name: str) -> str:
        """Read the text between ``(`` and its matching ``)``; quoted parentheses do not count."""
        source.next()
        start = source.pointer
        depth = 0
        quote: str | None = None
        while True:
            entry = source.next()
            if entry is None:
                raise self._error("unterminated-refiner", source, name=name)
            i, ch = entry
            if quote is not None:
                if ch == quote:
                    quote = None
            elif ch in QUOTES:
                quote = ch
            elif ch == "(":
                depth += 1
            elif ch == ")":
                if depth == 0:
                    arg = source.read_substr(start, i - start)
                    source.consume_read()
                    return arg
                depth -= 1


def parse_nth(expr: str, name: str = "nth-child") -> Nth:
    """Parse an nth expression like '2n+1', 'odd', 'even', '3'."""
    compact = "".join(expr.split()).lower()
    if compact == "odd":
        return Nth.odd()
    if compact == "even":
        return Nth.even()
    if _INT_PATTERN.match(compact):
        return Nth.specific(parse_num(StrSource(compact), int))

    match = _NTH_PATTERN.match(compact)
    if match is None:
        raise SelectorError.from_code("invalid-nth-expression", expr=expr, name=name)
    a_part, sign, b_part = match.groups()
    if a_part in ("", "+"):
        a = 1
    elif a_part == "-":
        a = -1
    else:
        a = int(a_part)
    b = int(sign + b_part) if b_part else 0
    return Nth.functional(a, b)


def split_selector_list(selector_string: str) -> list[str]:
    """Split on commas that are outside brackets and quotes."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    for i, ch in enumerate(selector_string):
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in QUOTES:
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == "," and depth <= 0:
            parts.append(selector_string[start:i])
            start = i + 1
    parts.append(selector_string[start:])
    return parts


def parse_rule(rule_string: str) -> SelectorRule:
    """Parse a single rule; empty input gives an empty rule."""
    return SelectorParser(rule_string).parse_rule()


def parse_selector(selector_string: str) -> Selector:
    """Parse a CSS selector string (possibly a comma-separated list)."""
    if not selector_string or not selector_string.strip():
        raise SelectorError.from_code("empty-selector")

    text = selector_string.strip()
    if text == "*":
        return Selector.any()

    rules: list[SelectorRule] = []
    for part in split_selector_list(text):
        if not part.strip():
            raise SelectorError.from_code("empty-selector-rule", selector=selector_string)
        rules.append(parse_rule(part))
    return Selector(rules)
