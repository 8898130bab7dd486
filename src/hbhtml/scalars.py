"""Small parsers for words, strings, brackets, numbers and symbols.

The ``parse_*``, ``match_*`` and ``consume_whitespace`` functions must be
called with the source pointer at 0 (a parser that left the pointer elsewhere
has not committed its work). On success they consume what they read. When they
fail the pointer is reset to 0 so the caller can try something else.

The ``read_*`` helpers are lower level: they read from the current pointer
without committing, for callers assembling larger tokens.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from .errors import ParseError, SourceEmpty, SourceInvalidState, UnexpectedChar

if TYPE_CHECKING:
    from .source import Source

N = TypeVar("N")

BRACKET_PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}
QUOTES = ('"', "'")
_SPECIAL_FLOATS = {"inf", "infinity", "nan"}


def _require_fresh(source: Source) -> None:
    if source.pointer != 0:
        raise SourceInvalidState.from_code("pointer-not-reset", source=source, pointer=source.pointer)


def _fail(source: Source, err: ParseError) -> ParseError:
    source.reset_pointer_loc()
    return err


def skip_whitespace(source: Source) -> None:
    """Advance the pointer past whitespace without committing it."""
    while True:
        item = source.peek()
        if item is None or not item[1].isspace():
            return
        source.next()


def consume_whitespace(source: Source) -> None:
    _require_fresh(source)
    skip_whitespace(source)
    source.consume(source.pointer)


def read_word(source: Source) -> str:
    """Read a run of alphanumeric characters after optional whitespace."""
    skip_whitespace(source)
    start = source.pointer
    while True:
        item = source.peek()
        if item is None:
            if source.pointer == start:
                raise _fail(source, SourceEmpty.from_code("word-source-empty", source=source))
            break
        if not item[1].isalnum():
            if source.pointer == start:
                raise _fail(source, UnexpectedChar.from_code("expected-word", source=source, char=item[1]))
            break
        source.next()
    return source.read_substr(start, source.pointer - start)


def parse_word(source: Source) -> str:
    _require_fresh(source)
    word = read_word(source)
    source.consume(source.pointer)
    return word


def read_until(source: Source, stops: str) -> str:
    """Read up to (not including) the first character in `stops`.

    Raises SourceEmpty if the source ends first. The pointer is left on the
    stop character.
    """
    start = source.pointer
    while True:
        item = source.peek()
        if item is None:
            text = source.read_substr(start, source.pointer - start)
            raise SourceEmpty.from_code("read-until-source-empty", source=source, stops=stops, text=text)
        if item[1] in stops:
            return source.read_substr(start, source.pointer - start)
        source.next()


def read_until_str(source: Source, literal: str) -> str:
    """Read up to `literal` and leave the pointer just past it."""
    start = source.pointer
    first = literal[0]
    while True:
        item = source.next()
        if item is None:
            text = source.read_substr(start, source.pointer - start)
            raise SourceEmpty.from_code("read-until-str-source-empty", source=source, literal=literal, text=text)
        i, ch = item
        if ch != first:
            continue
        rest = literal[1:]
        if rest and source.read_substr(i + 1, min(len(rest), len(source) - i - 1)) != rest:
            continue
        source.move_forward(len(rest))
        return source.read_substr(start, i - start)


def read_quoted(source: Source, quote: str) -> str:
    """Read the body of a string whose opening `quote` was just read."""
    start = source.pointer
    while True:
        item = source.next()
        if item is None:
            text = source.read_substr(start, source.pointer - start)
            raise SourceEmpty.from_code("unterminated-string", source=source, text=quote + text)
        i, ch = item
        if ch == quote:
            return source.read_substr(start, i - start)


def parse_string(source: Source, stops: str | None = None) -> str:
    """Parse a quoted string, or a bareword when no quote leads.

    Without `stops` a bareword is a word (alphanumerics only). With `stops`
    a bareword runs until one of those characters (or whitespace) and may be
    empty.
    """
    _require_fresh(source)
    skip_whitespace(source)
    item = source.peek()
    if item is None:
        raise _fail(source, SourceEmpty.from_code("string-source-empty", source=source))
    if item[1] in QUOTES:
        source.next()
        try:
            value = read_quoted(source, item[1])
        except ParseError:
            source.reset_pointer_loc()
            raise
        source.consume(source.pointer)
        return value
    if stops is None:
        source.reset_pointer_loc()
        return parse_word(source)

    start = source.pointer
    while True:
        item = source.peek()
        if item is None:
            text = source.read_substr(start, source.pointer - start)
            raise _fail(source, SourceEmpty.from_code("unterminated-string", source=source, text=text))
        if item[1] in stops or item[1].isspace():
            break
        source.next()
    value = source.read_substr(start, source.pointer - start)
    source.consume(source.pointer)
    return value


def parse_brackets(source: Source) -> str:
    """Parse a bracketed group and return the text between the outer brackets.

    Nested brackets of the same kind are included in the result.
    """
    _require_fresh(source)
    skip_whitespace(source)
    item = source.next()
    if item is None:
        raise _fail(source, SourceEmpty.from_code("brackets-source-empty", source=source))
    opening = item[1]
    closing = BRACKET_PAIRS.get(opening)
    if closing is None:
        source.move_back(1)
        raise _fail(source, UnexpectedChar.from_code("expected-bracket", source=source, char=opening))

    level = 1
    start = source.pointer
    while True:
        item = source.next()
        if item is None:
            raise _fail(source, SourceEmpty.from_code("unterminated-brackets", source=source, close=closing))
        i, ch = item
        if ch == opening:
            level += 1
        elif ch == closing:
            level -= 1
            if level == 0:
                value = source.read_substr(start, i - start)
                source.consume(source.pointer)
                return value


def _read_digits(source: Source) -> int:
    count = 0
    while True:
        item = source.peek()
        if item is None or not ("0" <= item[1] <= "9"):
            return count
        source.next()
        count += 1


def _read_exponent(source: Source) -> None:
    item = source.peek()
    if item is None or item[1] not in "eE":
        return
    source.next()
    read = 1
    item = source.peek()
    if item is not None and item[1] in "+-":
        source.next()
        read += 1
    if _read_digits(source) == 0:
        # Not an exponent after all ("2em"); leave it for the caller.
        source.move_back(read)


def parse_num(source: Source, num_type: type[N] = int) -> N:  # type: ignore[assignment]
    """Parse a number and convert it with `num_type`.

    Integer types accept an optional sign and digits. Any other type (float,
    Decimal, ...) also accepts a fraction, an exponent, and inf/infinity/nan.
    """
    _require_fresh(source)
    skip_whitespace(source)
    is_float = not issubclass(num_type, int)
    start = source.pointer

    item = source.peek()
    if item is None:
        raise _fail(source, SourceEmpty.from_code("num-source-empty", source=source))
    if item[1] in "+-":
        source.next()
        item = source.peek()
        if item is None:
            raise _fail(source, SourceEmpty.from_code("num-source-empty", source=source))

    if is_float and item[1].lower() in "in":
        word = read_word(source)
        if word.lower() not in _SPECIAL_FLOATS:
            text = source.read_substr(start, source.pointer - start)
            raise _fail(source, UnexpectedChar.from_code("invalid-number", source=source, type=num_type.__name__, text=text))
    else:
        _read_digits(source)
        if is_float:
            item = source.peek()
            if item is not None and item[1] == ".":
                source.next()
                _read_digits(source)
            _read_exponent(source)

    text = source.read_substr(start, source.pointer - start)
    try:
        value = num_type(text)
    except (ValueError, ArithmeticError) as e:
        raise _fail(
            source, UnexpectedChar.from_code("invalid-number", source=source, type=num_type.__name__, text=text)
        ) from e
    source.consume(source.pointer)
    return value


def read_symbol(source: Source) -> str:
    """Read one character that is neither whitespace nor alphanumeric."""
    skip_whitespace(source)
    item = source.peek()
    if item is None:
        raise SourceEmpty.from_code("symbol-source-empty", source=source)
    ch = item[1]
    if ch.isspace() or ch.isalnum():
        raise UnexpectedChar.from_code("expected-symbol", source=source, char=ch)
    source.next()
    return ch


def parse_symbol(source: Source) -> str:
    _require_fresh(source)
    try:
        symbol = read_symbol(source)
    except ParseError:
        source.reset_pointer_loc()
        raise
    source.consume(source.pointer)
    return symbol


def match_char(source: Source, expected: str) -> bool:
    """Consume `expected` (after whitespace) if it is next; otherwise rewind."""
    _require_fresh(source)
    skip_whitespace(source)
    item = source.next()
    if item is None:
        raise _fail(source, SourceEmpty.from_code("match-source-empty", source=source, expected=expected))
    if item[1] != expected:
        source.reset_pointer_loc()
        return False
    source.consume(source.pointer)
    return True


def match_str(source: Source, expected: str) -> bool:
    _require_fresh(source)
    if not expected:
        raise SourceInvalidState.from_code("empty-match-string", source=source)
    skip_whitespace(source)
    for ch in expected:
        item = source.next()
        if item is None:
            raise _fail(source, SourceEmpty.from_code("match-source-empty", source=source, expected=expected))
        if item[1] != ch:
            source.reset_pointer_loc()
            return False
    source.consume(source.pointer)
    return True


def match_num(source: Source, expected: int | float) -> bool:
    return match_str(source, str(expected))
