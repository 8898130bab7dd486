"""Character cursor over an in-memory document.

A source exposes a *window*: the not-yet-consumed suffix of the text. Inside
the window a *pointer* marks how far a parser has read speculatively. Parsers
read with `next`/`peek`, rewind with `move_back`/`reset_pointer_loc`, and
commit what they read with `consume`/`extract`.
"""

from __future__ import annotations

import os
from typing import IO, Protocol, runtime_checkable

from .encoding import decode_html
from .errors import SourceEmpty, SourceError, SourceInvalidState

CONTEXT_WIDTH = 80

_CONTEXT_TRANSLATION = str.maketrans({"\n": " ", "\r": " ", "\t": " ", "\f": " "})


@runtime_checkable
class Source(Protocol):
    """Operations the scalar parsers, tokenizer and selector parser rely on."""

    name: str

    @property
    def pointer(self) -> int: ...

    @property
    def offset(self) -> int: ...

    def __len__(self) -> int: ...

    def next(self) -> tuple[int, str] | None: ...

    def peek(self) -> tuple[int, str] | None: ...

    def move_back(self, n: int) -> None: ...

    def move_forward(self, n: int) -> None: ...

    def consume(self, n: int) -> None: ...

    def extract(self, n: int) -> str: ...

    def read_substr(self, start: int, n: int) -> str: ...

    def lookahead(self, n: int) -> str: ...

    def get_pointer_loc(self) -> int: ...

    def reset_pointer_loc(self) -> None: ...

    def get_context(self) -> str: ...

    def line_col(self, offset: int | None = None) -> tuple[int, int]: ...

    def line_text(self, line: int) -> str: ...


class StrSource:
    __slots__ = ("_pointer", "_window_start", "name", "text")

    text: str
    name: str
    _window_start: int
    _pointer: int

    def __init__(self, text: str, name: str = "<string>") -> None:
        self.text = text
        self.name = name
        self._window_start = 0
        self._pointer = 0

    def __repr__(self) -> str:
        return f"<StrSource {self.name} window_start={self._window_start} pointer={self._pointer}>"

    def __len__(self) -> int:
        return len(self.text) - self._window_start

    @property
    def window(self) -> str:
        return self.text[self._window_start :]

    @property
    def window_start(self) -> int:
        return self._window_start

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def offset(self) -> int:
        """Absolute position of the pointer in the full text."""
        return self._window_start + self._pointer

    def at_end(self) -> bool:
        return self.offset >= len(self.text)

    def next(self) -> tuple[int, str] | None:
        pos = self._window_start + self._pointer
        if pos >= len(self.text):
            return None
        result = (self._pointer, self.text[pos])
        self._pointer += 1
        return result

    def peek(self) -> tuple[int, str] | None:
        pos = self._window_start + self._pointer
        if pos >= len(self.text):
            return None
        return (self._pointer, self.text[pos])

    def lookahead(self, n: int) -> str:
        """Up to `n` characters from the pointer, without moving it."""
        pos = self._window_start + self._pointer
        return self.text[pos : pos + n]

    def move_back(self, n: int) -> None:
        if n > self._pointer:
            raise SourceInvalidState.from_code("move-back-past-start", source=self, pointer=self._pointer, n=n)
        self._pointer -= n

    def move_forward(self, n: int) -> None:
        if self._pointer + n > len(self):
            raise SourceInvalidState.from_code(
                "move-forward-past-end", source=self, pointer=self._pointer, n=n, length=len(self)
            )
        self._pointer += n

    def consume(self, n: int) -> None:
        if n > len(self):
            raise SourceEmpty.from_code("consume-past-end", source=self, n=n, remaining=len(self))
        self._window_start += n
        self._pointer = self._pointer - n if self._pointer > n else 0

    def extract(self, n: int) -> str:
        if n > len(self):
            raise SourceEmpty.from_code("extract-past-end", source=self, n=n, remaining=len(self))
        start = self._window_start
        result = self.text[start : start + n]
        self.consume(n)
        return result

    def read_substr(self, start: int, n: int) -> str:
        if start + n > len(self):
            raise SourceEmpty.from_code("substr-out-of-range", source=self, n=n, start=start, remaining=len(self))
        begin = self._window_start + start
        return self.text[begin : begin + n]

    def get_pointer_loc(self) -> int:
        return self._pointer

    def reset_pointer_loc(self) -> None:
        self._pointer = 0

    def consume_read(self) -> None:
        """Commit everything read so far."""
        self.consume(self._pointer)

    def line_col(self, offset: int | None = None) -> tuple[int, int]:
        """1-based line and column for an absolute offset (default: the pointer)."""
        if offset is None:
            offset = self.offset
        offset = min(offset, len(self.text))
        line = self.text.count("\n", 0, offset) + 1
        last_newline = self.text.rfind("\n", 0, offset)
        return line, offset - last_newline

    def line_text(self, line: int) -> str:
        lines = self.text.split("\n")
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""

    def get_context(self) -> str:
        """An excerpt around the pointer with a caret under the current character."""
        offset = min(self.offset, len(self.text))
        start = max(0, offset - CONTEXT_WIDTH // 2)
        end = min(len(self.text), start + CONTEXT_WIDTH)
        excerpt = self.text[start:end].translate(_CONTEXT_TRANSLATION)
        return f"{excerpt}\n{' ' * (offset - start)}^\n"


def read_source(
    path_or_file: str | os.PathLike[str] | IO[str] | IO[bytes],
    *,
    encoding: str | None = None,
    name: str | None = None,
) -> StrSource:
    """Load a file (path or file object) into a `StrSource`.

    Bytes are decoded with `encoding.decode_html`; I/O and decoding failures
    are raised as `SourceError`.
    """
    if isinstance(path_or_file, (str, os.PathLike)):
        name = name or os.fspath(path_or_file)
        try:
            with open(path_or_file, "rb") as fp:
                data: str | bytes = fp.read()
        except OSError as e:
            raise SourceError.from_code("io-error", name=name, error=e) from e
    else:
        name = name or getattr(path_or_file, "name", None) or "<file>"
        try:
            data = path_or_file.read()
        except OSError as e:
            raise SourceError.from_code("io-error", name=name, error=e) from e

    if isinstance(data, str):
        return StrSource(data, name=str(name))
    try:
        text, _ = decode_html(data, transport_encoding=encoding)
    except LookupError as e:
        raise SourceError.from_code("decode-error", name=name, error=e) from e
    return StrSource(text, name=str(name))
