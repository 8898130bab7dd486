import io

import pytest

from hbhtml.encoding import decode_html, normalize_encoding_label, sniff_html_encoding
from hbhtml.errors import ErrorKind, SourceEmpty, SourceError, SourceInvalidState
from hbhtml.source import Source, StrSource, read_source


def _advance(source, n):
    for _ in range(n):
        source.next()


# --- Cursor ---

def test_next_walks_every_character():
    """next() yields (pointer, char) pairs and None once the text runs out."""
    source = StrSource("Something")
    seen = [source.next() for _ in range(9)]
    assert seen == [(i, ch) for i, ch in enumerate("Something")]
    assert source.next() is None
    assert source.peek() is None


def test_peek_does_not_move():
    source = StrSource("ab")
    assert source.peek() == (0, "a")
    assert source.peek() == (0, "a")
    assert source.pointer == 0


def test_move_back_and_forward():
    source = StrSource("Something")
    _advance(source, 3)
    source.move_back(2)
    assert source.next() == (1, "o")

    source = StrSource("Something")
    _advance(source, 3)
    source.move_forward(2)
    assert source.next() == (5, "h")


def test_move_past_bounds_is_invalid_state():
    source = StrSource("abc")
    source.next()
    with pytest.raises(SourceInvalidState) as excinfo:
        source.move_back(2)
    assert excinfo.value.kind is ErrorKind.SOURCE_INVALID_STATE
    assert source.pointer == 1

    with pytest.raises(SourceInvalidState):
        source.move_forward(3)


def test_consume_shrinks_the_window():
    """Consuming fewer chars than were read keeps the rest of the read ahead."""
    source = StrSource("Something")
    _advance(source, 3)
    source.consume(2)
    assert len(source) == 7
    assert source.pointer == 1
    assert source.next() == (1, "e")


def test_consume_more_than_read_resets_pointer():
    source = StrSource("Something")
    source.next()
    source.consume(4)
    assert source.pointer == 0
    assert source.window == "thing"


def test_consume_past_end_is_source_empty():
    source = StrSource("abc")
    with pytest.raises(SourceEmpty):
        source.consume(4)
    assert len(source) == 3


def test_extract_returns_consumed_text():
    source = StrSource("Something")
    _advance(source, 3)
    assert source.extract(2) == "So"
    assert source.next() == (1, "e")
    assert source.offset == 4


def test_read_substr_is_window_relative():
    source = StrSource("Something")
    assert source.read_substr(0, 2) == "So"
    _advance(source, 5)
    assert source.read_substr(4, 2) == "th"
    assert source.get_pointer_loc() == 5

    source.consume(3)
    assert source.read_substr(0, 2) == "et"
    with pytest.raises(SourceEmpty):
        source.read_substr(4, 3)


def test_pointer_reset():
    source = StrSource("Something")
    _advance(source, 3)
    assert source.get_pointer_loc() == 3
    source.reset_pointer_loc()
    assert source.get_pointer_loc() == 0
    assert source.next() == (0, "S")


def test_lookahead():
    source = StrSource("/>rest")
    assert source.lookahead(2) == "/>"
    assert source.lookahead(10) == "/>rest"
    assert source.pointer == 0


def test_line_col_and_line_text():
    source = StrSource("ab\ncd")
    assert source.line_col(0) == (1, 1)
    assert source.line_col(4) == (2, 2)
    assert source.line_text(2) == "cd"
    assert source.line_text(3) == ""


def test_get_context_points_at_the_pointer():
    source = StrSource("line one\nline two")
    _advance(source, 5)
    assert source.get_context() == "line one line two\n     ^\n"


def test_get_context_window_is_bounded():
    source = StrSource("x" * 200)
    _advance(source, 100)
    excerpt, caret, _ = source.get_context().split("\n")
    assert len(excerpt) == 80
    assert caret == " " * 40 + "^"


def test_str_source_satisfies_protocol():
    assert isinstance(StrSource(""), Source)


# --- Loading ---

def test_read_source_from_path(tmp_path):
    path = tmp_path / "page.html"
    path.write_bytes(b"<p>hello</p>")
    source = read_source(path)
    assert source.text == "<p>hello</p>"
    assert source.name == str(path)


def test_read_source_missing_file():
    with pytest.raises(SourceError) as excinfo:
        read_source("/nonexistent/page.html")
    assert excinfo.value.code == "io-error"
    assert isinstance(excinfo.value.__cause__, OSError)


def test_read_source_from_file_objects():
    assert read_source(io.StringIO("<b>x</b>")).text == "<b>x</b>"
    assert read_source(io.StringIO("")).name == "<file>"
    assert read_source(io.BytesIO(b"\xef\xbb\xbfhi")).text == "hi"


def test_read_source_unknown_encoding():
    with pytest.raises(SourceError) as excinfo:
        read_source(io.BytesIO(b"hi"), encoding="no-such-codec")
    assert excinfo.value.code == "decode-error"


# --- Encoding ---

def test_meta_charset_is_honoured():
    data = b'<meta charset="windows-1252"><p>caf\xe9</p>'
    text, enc = decode_html(data)
    assert enc == "windows-1252"
    assert "café" in text


def test_bom_wins_over_meta():
    data = b"\xff\xfe" + '<meta charset="latin1">hé'.encode("utf-16-le")
    text, enc = decode_html(data)
    assert enc == "utf-16-le"
    assert text.endswith("hé")


def test_default_is_utf8_with_replacement():
    text, enc = decode_html(b"ok \xff")
    assert enc == "utf-8"
    assert text == "ok \ufffd"


def test_encoding_labels():
    assert normalize_encoding_label("latin1") == "windows-1252"
    assert normalize_encoding_label("UTF8") == "utf-8"
    assert normalize_encoding_label("bogus") is None
    assert normalize_encoding_label("") is None
    with pytest.raises(LookupError):
        sniff_html_encoding(b"", transport_encoding="bogus")
