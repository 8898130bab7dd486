#!/usr/bin/env python3
"""Command-line interface for hbhtml."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, NoReturn

from . import HtmlDocument
from .errors import ParseError, SelectorError

if TYPE_CHECKING:
    from .node import Tag

EXIT_NO_MATCH = 1
EXIT_BAD_SELECTOR = 2
EXIT_BAD_HTML = 3


def _get_version() -> str:
    try:
        return version("hbhtml")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hbhtml",
        description="Parse an HTML file strictly and print the tags a CSS selector picks out.",
        epilog=(
            "Examples:\n"
            "  hbhtml index.html --selector 'nav a[href^=http]'\n"
            "  hbhtml index.html --selector 'table tr:nth-child(odd) > td' --format text\n"
            "  curl -s https://example.com | hbhtml - --selector title --first\n"
            "\n"
            "Exit status is 1 when the selector matched nothing, 2 when the\n"
            "selector is invalid and 3 when the HTML could not be read or parsed.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", nargs="?", help="file to read ('-' for standard input)")
    parser.add_argument("--selector", "-s", help="CSS selector; without one the whole document is printed")
    parser.add_argument(
        "--format",
        choices=("html", "text"),
        default="html",
        help="print matches as markup or as their text content (default: %(default)s)",
    )
    parser.add_argument("--pretty", action="store_true", help="indent html output")
    parser.add_argument("--first", action="store_true", help="stop after the first match")
    parser.add_argument(
        "--separator",
        default=" ",
        help="string placed between text runs in text output (default: one space)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log parser and query activity to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")
    return parser


def _load(path: str) -> HtmlDocument:
    if path == "-":
        return HtmlDocument(sys.stdin.read(), name="<stdin>")
    return HtmlDocument.from_file(path)


def _render(node: HtmlDocument | Tag, args: argparse.Namespace) -> str:
    if args.format == "text":
        return node.to_text(separator=args.separator)
    return node.to_html(pretty=args.pretty)


def main(argv: list[str] | None = None) -> NoReturn | None:
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if not args.path:
        parser.print_help(sys.stderr)
        raise SystemExit(EXIT_NO_MATCH)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s", stream=sys.stderr)

    try:
        doc = _load(args.path)
    except ParseError as e:
        print(e, file=sys.stderr)
        raise SystemExit(EXIT_BAD_HTML) from e

    if not args.selector:
        print(_render(doc, args))
        return None

    try:
        query = doc.find(args.selector)
    except SelectorError as e:
        print(e, file=sys.stderr)
        raise SystemExit(EXIT_BAD_SELECTOR) from e

    matches = query.nodes()
    if not matches:
        raise SystemExit(EXIT_NO_MATCH)
    for node in matches[:1] if args.first else matches:
        print(_render(node, args))
    return None


if __name__ == "__main__":
    main()
