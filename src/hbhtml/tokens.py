from __future__ import annotations

from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .node import Tag


class StartTag:
    """A start tag; `tag` already holds its contents unless the tag is void."""

    __slots__ = ("self_closing", "tag")

    tag: Tag
    self_closing: bool

    def __init__(self, tag: Tag, self_closing: bool = False) -> None:
        self.tag = tag
        self.self_closing = bool(self_closing)

    def __repr__(self) -> str:
        return f"StartTag({self.tag.name!r})"


class EndTag:
    __slots__ = ("name",)

    name: str

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"EndTag({self.name!r})"


class CommentToken:
    __slots__ = ("data",)

    data: str

    def __init__(self, data: str) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"CommentToken({self.data!r})"


class DoctypeToken:
    __slots__ = ("data",)

    data: str

    def __init__(self, data: str) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"DoctypeToken({self.data!r})"


Token = Union[StartTag, EndTag, CommentToken, DoctypeToken]
