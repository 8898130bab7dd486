import pytest

from hbhtml.errors import (
    ErrorKind,
    ParseError,
    SelectorError,
    SourceEmpty,
    SourceError,
    UnexpectedChar,
    convert_error,
    generate_error_message,
    with_context,
)
from hbhtml.source import StrSource


def test_message_table():
    assert (
        generate_error_message("mismatched-end-tag", found="b", expected="a")
        == "Incorrect end tag </b> found but expected </a>"
    )
    assert generate_error_message("no-such-code") == "no-such-code"
    # Missing details leave the template unformatted
    assert generate_error_message("eof-in-tag") == "End of file while reading attributes of <{tag_name}>"


def test_error_kinds():
    assert ParseError("x").kind is ErrorKind.PARSE
    assert SourceEmpty("x").kind is ErrorKind.SOURCE_EMPTY
    assert UnexpectedChar("x").kind is ErrorKind.UNEXPECTED_CHAR
    assert SourceError("x").kind is ErrorKind.SOURCE
    assert issubclass(SelectorError, ParseError)
    assert issubclass(ParseError, ValueError)


def test_from_code_locates_the_error():
    source = StrSource("ab\ncd")
    for _ in range(4):
        source.next()
    err = UnexpectedChar.from_code("expected-word", source=source, char="d")
    assert err.code == "expected-word"
    assert err.msg == "Could not parse word because 'd' is not alphanumeric"
    assert (err.offset, err.line, err.column) == (4, 2, 2)
    assert err.excerpt == "ab cd\n    ^\n"


def test_first_location_wins():
    source = StrSource("abc")
    err = ParseError.from_code("no-tag-found", source=source)
    source.next()
    err.locate(source)
    assert err.offset == 0


def test_context_frames_render_outermost_first():
    err = ParseError("inner")
    assert err.add_context("middle") is err
    err.add_context("outer")
    assert err.messages == ["outer", "middle", "inner"]
    assert str(err) == "outer\n...because... middle\n...because... inner"


def test_str_includes_location():
    source = StrSource("<a></b>")
    for _ in range(7):
        source.next()
    err = ParseError.from_code("mismatched-end-tag", source=source, found="b", expected="a")
    lines = str(err).split("\n")
    assert lines[0] == "Incorrect end tag </b> found but expected </a>"
    assert lines[1] == "at line 1, column 8:"
    assert lines[2] == "<a></b>"


def test_as_exception():
    source = StrSource("one\ntwo", name="page.html")
    for _ in range(5):
        source.next()
    exc = ParseError.from_code("no-tag-found", source=source).as_exception()
    assert isinstance(exc, SyntaxError)
    assert exc.filename == "page.html"
    assert exc.lineno == 2
    assert exc.offset == 2
    assert exc.text == "two"

    bare = ParseError("no location").as_exception()
    assert bare.lineno is None


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (OSError("disk"), SourceError),
        (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "bad"), SourceError),
        (EOFError(), SourceEmpty),
        (StopIteration(), SourceEmpty),
        (KeyError("k"), ParseError),
    ],
)
def test_convert_error(exc, expected):
    converted = convert_error(exc)
    assert type(converted) is expected
    assert converted.__cause__ is exc


def test_convert_error_passes_parse_errors_through():
    err = UnexpectedChar("x")
    assert convert_error(err) is err


@with_context("Failed to read the thing")
def _failing_reader(source, exc):
    source.next()
    raise exc


def test_with_context_adds_a_frame():
    source = StrSource("xyz")
    with pytest.raises(UnexpectedChar) as excinfo:
        _failing_reader(source, UnexpectedChar("inner"))
    err = excinfo.value
    assert err.messages == ["Failed to read the thing", "inner"]
    assert err.frames[0].excerpt == "xyz\n ^\n"


def test_with_context_converts_foreign_errors():
    source = StrSource("xyz")
    original = OSError("gone")
    with pytest.raises(SourceError) as excinfo:
        _failing_reader(source, original)
    assert excinfo.value.messages == ["Failed to read the thing", "gone"]
    assert excinfo.value.__cause__ is original


def test_with_context_leaves_other_errors_alone():
    with pytest.raises(KeyError):
        _failing_reader(StrSource("xyz"), KeyError("k"))
