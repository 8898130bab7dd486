"""Error kinds and message definitions for the hbhtml parsers.

Every failure raised while reading a source, tokenizing HTML, parsing a
selector or walking a query is a `ParseError` (or one of its subclasses).
Errors carry a stack of context frames: each higher level operation that
was in progress when the error propagated appends a frame describing what
it was doing and where the cursor was.
"""

from __future__ import annotations

import enum
import functools
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from .source import Source

F = TypeVar("F", bound="Callable[..., Any]")


class ErrorKind(enum.Enum):
    PARSE = "parse"
    SOURCE_EMPTY = "source-empty"
    UNEXPECTED_CHAR = "unexpected-char"
    SOURCE_INVALID_STATE = "source-invalid-state"
    SOURCE = "source"


def generate_error_message(code: str, **details: Any) -> str:
    """Generate a human-readable error message from an error code.

    Args:
        code: The error code string (kebab-case format)
        **details: Values substituted into the message template

    Returns:
        Human-readable error message string. Unknown codes are returned as-is.
    """
    messages = {
        # ================================================================
        # SOURCE ERRORS
        # ================================================================
        "move-back-past-start": "Attempted to move pointer ({pointer}) back {n} places past the start of the window",
        "move-forward-past-end": "Attempted to move pointer ({pointer}) forward {n} places past the end of the window ({length})",
        "consume-past-end": "Attempted to consume {n} chars when only {remaining} remain",
        "extract-past-end": "Attempted to extract {n} chars when only {remaining} remain",
        "substr-out-of-range": "Attempted to read {n} chars from position {start} when only {remaining} remain",
        "pointer-not-reset": "Parser has already been used, and has left a pointer at position {pointer} (which should be 0)",
        "io-error": "Could not read from {name}: {error}",
        "decode-error": "Could not decode {name}: {error}",
        # ================================================================
        # SCALAR ERRORS
        # ================================================================
        "word-source-empty": "Could not parse word as there are none left in the source",
        "expected-word": "Could not parse word because {char!r} is not alphanumeric",
        "string-source-empty": "Could not parse string as there are none left in the source",
        "unterminated-string": "End of string {text!r} not found before the end of the source",
        "brackets-source-empty": "Could not parse brackets as there are none left in the source",
        "expected-bracket": "Could not parse brackets as {char!r} was found instead of a bracket",
        "unterminated-brackets": "Could not find the closing {close!r} before the end of the source",
        "num-source-empty": "Could not parse num as there are none left in the source",
        "invalid-number": "Could not parse {type} from {text!r}",
        "symbol-source-empty": "Could not parse symbol as there are none left in the source",
        "expected-symbol": "Could not parse symbol because {char!r} is not classified as a symbol",
        "match-source-empty": "Could not match {expected!r} as there are none left in the source",
        "empty-match-string": "Cannot match a str as the str provided is empty",
        "read-until-source-empty": "End of source encountered before any of {stops!r} was found (read {text!r})",
        "read-until-str-source-empty": "End of source encountered before {literal!r} was found (read {text!r})",
        # ================================================================
        # HTML ERRORS
        # ================================================================
        "eof-before-tag-name": "End of file without reading any chars in this tag",
        "eof-in-end-tag": "End of file while reading end tag </{text}",
        "eof-in-tag-name": "End of file while reading tag name {text!r}",
        "eof-in-comment": "End of file while reading comment {text!r}",
        "eof-in-doctype": "End of file while reading DOCTYPE {text!r}",
        "empty-tag-name": "Expected a tag name after '<' but found {char!r}",
        "missing-attribute-name": "Expected an attribute name in <{tag_name}> but found '='",
        "eof-in-tag": "End of file while reading attributes of <{tag_name}>",
        "eof-in-attribute-name": "End of file while reading attribute {text!r} of <{tag_name}>",
        "missing-attribute-value": "Expected value for attribute {attr!r}, got {char!r} instead of '='",
        "expected-closing-tag-but-got-eof": "End of file without finding closing tag </{tag_name}>",
        "mismatched-end-tag": "Incorrect end tag </{found}> found but expected </{expected}>",
        "unexpected-end-tag": "Found end tag </{tag_name}> before any start tag",
        "unexpected-doctype": "DOCTYPE {doctype!r} found in the middle of <{tag_name}> content",
        "duplicate-doctype": "Doctype was defined twice, first {first!r} and second {second!r}",
        "text-before-tag": "Found text {text!r} before the start of the tag",
        "text-after-tag": "Found text {text!r} after the end of the tag",
        "unexpected-comment": "Found HTML comment {text!r} where a single tag was expected",
        "unexpected-doctype-in-tag": "Found DOCTYPE {text!r} where a single tag was expected",
        "second-tag": "Found second tag <{second}> after the first tag <{first}>",
        "no-tag-found": "No tag found",
        "nesting-too-deep": "Tags are nested too deeply to parse (recursion limit is {limit})",
        # ================================================================
        # SELECTOR ERRORS
        # ================================================================
        "empty-selector": "Empty selector",
        "empty-selector-rule": "Empty rule in selector list {selector!r}",
        "expected-selector-item": "Expected a selector item but found {char!r}",
        "conflicting-combinators": "Found combinators {first!r} and {second!r} between the same selector items",
        "dangling-combinator": "Combinator {combinator!r} is not followed by a selector item",
        "unexpected-selector-char": "Unexpected character {char!r} in selector item {item!r}",
        "expected-name": "Expected a name after {prefix!r} in selector item {item!r}",
        "expected-attribute-name": "Expected attribute name in {text!r}",
        "expected-attribute-operator": "Expected an attribute operator ending in '=' but found {text!r}",
        "unterminated-attribute-selector": "Attribute selector {text!r} is not closed by ']'",
        "unknown-refiner": "Unsupported pseudo-class: :{name}",
        "refiner-takes-no-argument": "Pseudo-class :{name} does not take an argument",
        "refiner-needs-argument": "Pseudo-class :{name} requires an argument in brackets",
        "unterminated-refiner": "Pseudo-class :{name} is missing its closing ')'",
        "invalid-nth-expression": "Invalid expression {expr!r} for :{name}()",
        # ================================================================
        # QUERY ERRORS
        # ================================================================
        "no-parent": "No parent to move to",
        "no-previous-sibling": "No siblings to move to",
    }

    template = messages.get(code)
    if template is None:
        return code
    try:
        return template.format(**details)
    except (KeyError, IndexError):
        return template


class ContextFrame:
    """One step of context recorded while an error propagated."""

    __slots__ = ("excerpt", "msg")

    msg: str
    excerpt: str | None

    def __init__(self, msg: str, excerpt: str | None = None) -> None:
        self.msg = msg
        self.excerpt = excerpt

    def __repr__(self) -> str:
        return f"ContextFrame({self.msg!r})"


class ParseError(ValueError):
    """Aggregate error raised by every hbhtml parser.

    `kind` identifies which family the error belongs to; the subclasses below
    fix it so callers can either catch `ParseError` or a specific kind.
    """

    kind: ErrorKind = ErrorKind.PARSE

    code: str
    msg: str
    offset: int | None
    line: int | None
    column: int | None
    excerpt: str | None
    frames: list[ContextFrame]
    _line_text: str | None
    _source_name: str | None

    def __init__(self, msg: str = "", *, code: str | None = None, offset: int | None = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.code = code or msg
        self.offset = offset
        self.line = None
        self.column = None
        self.excerpt = None
        self.frames = []
        self._line_text = None
        self._source_name = None

    @classmethod
    def from_code(cls, code: str, *, source: Source | None = None, **details: Any) -> ParseError:
        """Build an error from the message table, locating it on `source` if given."""
        err = cls(generate_error_message(code, **details), code=code)
        if source is not None:
            err.locate(source)
        return err

    def locate(self, source: Source) -> ParseError:
        """Record where in `source` the error happened (first location wins)."""
        if self.offset is None:
            self.offset = source.offset
            self.line, self.column = source.line_col(self.offset)
            self.excerpt = source.get_context()
            self._line_text = source.line_text(self.line)
            self._source_name = source.name
        return self

    def add_context(self, msg: str, excerpt: str | None = None) -> ParseError:
        """Append a context frame and return the error for re-raising."""
        self.frames.append(ContextFrame(msg, excerpt))
        return self

    @property
    def messages(self) -> list[str]:
        """All messages, outermost context first and the original message last."""
        return [frame.msg for frame in reversed(self.frames)] + [self.msg]

    def __str__(self) -> str:
        lines = self.messages
        out = [lines[0]]
        out.extend(f"...because... {line}" for line in lines[1:])
        if self.line is not None and self.column is not None:
            out.append(f"at line {self.line}, column {self.column}:")
        if self.excerpt:
            out.append(self.excerpt)
        return "\n".join(out)

    def __repr__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{type(self).__name__}({self.code!r}, line={self.line}, column={self.column})"
        return f"{type(self).__name__}({self.code!r})"

    def as_exception(self) -> SyntaxError:
        """Convert to a SyntaxError with source location for enhanced display."""
        exc = SyntaxError(self.msg)
        exc.msg = self.msg
        if self.line is None or self.column is None or self._line_text is None:
            return exc
        exc.filename = self._source_name or "<html>"
        exc.lineno = self.line
        exc.offset = self.column
        exc.text = self._line_text
        exc.end_lineno = self.line
        exc.end_offset = self.column + 1
        return exc


class SourceEmpty(ParseError):
    """The cursor ran out of input in the middle of a token."""

    kind = ErrorKind.SOURCE_EMPTY


class UnexpectedChar(ParseError):
    """A character that cannot appear at a decision point was found."""

    kind = ErrorKind.UNEXPECTED_CHAR


class SourceInvalidState(ParseError):
    """A cursor precondition was violated (e.g. a parser started mid-token)."""

    kind = ErrorKind.SOURCE_INVALID_STATE


class SourceError(ParseError):
    """Wraps an I/O or decoding error raised while reading a source."""

    kind = ErrorKind.SOURCE


class SelectorError(ParseError):
    """Raised when a CSS selector is invalid."""


def convert_error(exc: BaseException) -> ParseError:
    """Map any exception onto the parser's error kinds.

    The original exception is kept as ``__cause__``.
    """
    if isinstance(exc, ParseError):
        return exc
    converted: ParseError
    if isinstance(exc, (OSError, UnicodeError)):
        converted = SourceError(str(exc) or type(exc).__name__, code="io-error")
    elif isinstance(exc, (EOFError, StopIteration)):
        converted = SourceEmpty(str(exc) or "Unexpected end of input", code="source-empty")
    else:
        converted = ParseError(str(exc) or type(exc).__name__, code=type(exc).__name__)
    converted.__cause__ = exc
    return converted


def _source_of(obj: Any) -> Source | None:
    if hasattr(obj, "get_context"):
        return obj  # type: ignore[no-any-return]
    return getattr(obj, "source", None)


def with_context(msg: str) -> Callable[[F], F]:
    """Decorator adding a context frame to errors escaping the wrapped call.

    The first positional argument must be a `Source`, or an object exposing one
    as ``.source`` (tokenizers, tree builders); its caret excerpt is recorded
    with the frame. I/O and decoding errors are converted first.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(first: Any, *args: Any, **kwargs: Any) -> Any:
            try:
                return func(first, *args, **kwargs)
            except ParseError as e:
                source = _source_of(first)
                e.add_context(msg, source.get_context() if source is not None else None)
                raise
            except (OSError, UnicodeError, EOFError) as e:
                source = _source_of(first)
                err = convert_error(e)
                err.add_context(msg, source.get_context() if source is not None else None)
                raise err from e

        return wrapper  # type: ignore[return-value]

    return decorator
