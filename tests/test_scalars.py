import math

import pytest

from hbhtml.errors import SourceEmpty, SourceInvalidState, UnexpectedChar
from hbhtml.scalars import (
    consume_whitespace,
    match_char,
    match_num,
    match_str,
    parse_brackets,
    parse_num,
    parse_string,
    parse_symbol,
    parse_word,
    read_until,
    read_until_str,
)
from hbhtml.source import StrSource


def test_mixed_sequence():
    """Words, symbols, strings, numbers and brackets read off one source in turn."""
    source = StrSource(
        'This is a word. And some "Strings, amazing!" 1 -2 12.3 +inf -infinity '
        "infinity -nan (Or something like that) 2! 1.0"
    )
    assert parse_word(source) == "This"
    assert parse_word(source) == "is"
    assert parse_word(source) == "a"
    assert parse_word(source) == "word"
    assert parse_symbol(source) == "."
    consume_whitespace(source)
    assert parse_word(source) == "And"
    assert parse_word(source) == "some"
    assert parse_string(source) == "Strings, amazing!"
    assert parse_num(source, int) == 1
    assert parse_num(source, int) == -2
    assert parse_num(source, float) == 12.3
    assert parse_num(source, float) == math.inf
    assert parse_num(source, float) == -math.inf
    assert parse_num(source, float) == math.inf
    assert math.isnan(parse_num(source, float))
    assert parse_brackets(source) == "Or something like that"
    assert parse_num(source, int) == 2
    assert parse_symbol(source) == "!"
    assert parse_num(source, int) == 1
    assert parse_symbol(source) == "."
    assert parse_num(source, int) == 0
    with pytest.raises(SourceEmpty):
        parse_word(source)


def test_parsers_require_a_fresh_pointer():
    source = StrSource("word")
    source.next()
    with pytest.raises(SourceInvalidState):
        parse_word(source)


def test_word_errors_reset_the_pointer():
    source = StrSource("  !bang")
    with pytest.raises(UnexpectedChar):
        parse_word(source)
    assert source.pointer == 0
    assert len(source) == 7

    with pytest.raises(SourceEmpty):
        parse_word(StrSource("   "))


def test_quoted_strings():
    assert parse_string(StrSource("'single'")) == "single"
    assert parse_string(StrSource('"with > inside"')) == "with > inside"

    source = StrSource('"abc')
    with pytest.raises(SourceEmpty):
        parse_string(source)
    assert source.pointer == 0


def test_bareword_with_stops():
    source = StrSource("value>rest")
    assert parse_string(source, stops=">") == "value"
    assert source.window == ">rest"

    source = StrSource(">")
    assert parse_string(source, stops=">") == ""

    with pytest.raises(SourceEmpty):
        parse_string(StrSource("unterminated"), stops=">")


def test_nested_brackets():
    source = StrSource("(a (b) c) rest")
    assert parse_brackets(source) == "a (b) c"
    assert source.window == " rest"

    assert parse_brackets(StrSource("[x[y]]")) == "x[y]"


def test_bracket_errors():
    source = StrSource("(abc")
    with pytest.raises(SourceEmpty):
        parse_brackets(source)
    assert source.pointer == 0

    source = StrSource("abc")
    with pytest.raises(UnexpectedChar):
        parse_brackets(source)
    assert source.pointer == 0


def test_numbers():
    assert parse_num(StrSource("1e3"), float) == 1000.0
    assert parse_num(StrSource("+7"), int) == 7

    source = StrSource("2em")
    assert parse_num(source, float) == 2.0
    assert source.window == "em"


@pytest.mark.parametrize(
    ("text", "num_type", "error"),
    [
        ("abc", int, UnexpectedChar),
        ("e5", float, UnexpectedChar),
        ("inx", float, UnexpectedChar),
        ("-", int, SourceEmpty),
        ("", float, SourceEmpty),
    ],
)
def test_invalid_numbers(text, num_type, error):
    source = StrSource(text)
    with pytest.raises(error):
        parse_num(source, num_type)
    assert source.pointer == 0


def test_int_stops_at_fraction():
    source = StrSource("1.5")
    assert parse_num(source, int) == 1
    assert source.window == ".5"


def test_symbol_errors():
    with pytest.raises(UnexpectedChar):
        parse_symbol(StrSource("a"))
    with pytest.raises(UnexpectedChar):
        parse_symbol(StrSource("\u00e9"))
    with pytest.raises(SourceEmpty):
        parse_symbol(StrSource(" "))


def test_match_str_conserves_the_cursor():
    source = StrSource("  hello world")
    assert match_str(source, "hello") is True
    assert len(source) == 6
    assert source.pointer == 0

    assert match_str(source, "planet") is False
    assert len(source) == 6
    assert source.pointer == 0

    assert match_str(source, "world") is True
    assert len(source) == 0

    with pytest.raises(SourceEmpty):
        match_str(source, "x")
    assert source.pointer == 0


def test_match_str_rejects_empty_pattern():
    with pytest.raises(SourceInvalidState):
        match_str(StrSource("abc"), "")


def test_match_char_and_num():
    source = StrSource("42 = x")
    assert match_num(source, 43) is False
    assert match_num(source, 42) is True
    assert match_char(source, "x") is False
    assert match_char(source, "=") is True
    assert source.window == " x"


def test_read_until():
    source = StrSource("Something else <")
    assert read_until(source, " <") == "Something"
    assert source.pointer == 9

    source = StrSource("Something else <")
    assert read_until(source, "<") == "Something else "

    with pytest.raises(SourceEmpty):
        read_until(StrSource("no stop"), "<")


def test_read_until_str():
    source = StrSource("Something else <")
    assert read_until_str(source, "else") == "Something "
    assert source.pointer == 14

    with pytest.raises(SourceEmpty):
        read_until_str(StrSource("ab-"), "-->")


def test_non_ascii_letters_are_words_not_symbols():
    source = StrSource("caf\u00e9!")
    assert parse_word(source) == "caf\u00e9"
    assert parse_symbol(source) == "!"
