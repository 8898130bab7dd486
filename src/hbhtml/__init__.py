from .errors import (
    ErrorKind,
    ParseError,
    SelectorError,
    SourceEmpty,
    SourceError,
    SourceInvalidState,
    UnexpectedChar,
)
from .matcher import SelectorMatcher
from .node import Comment, Tag, Text, tree_equal
from .parser import HtmlDocument, parse_tag
from .query import HtmlQuery, QueryResult
from .selector import Selector, parse_selector
from .source import Source, StrSource, read_source
from .tokenizer import ParserOpts

__all__ = [
    "Comment",
    "ErrorKind",
    "HtmlDocument",
    "HtmlQuery",
    "ParseError",
    "ParserOpts",
    "QueryResult",
    "Selector",
    "SelectorError",
    "SelectorMatcher",
    "Source",
    "SourceEmpty",
    "SourceError",
    "SourceInvalidState",
    "StrSource",
    "Tag",
    "Text",
    "UnexpectedChar",
    "parse_selector",
    "parse_tag",
    "read_source",
    "tree_equal",
]
