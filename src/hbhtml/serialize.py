"""HTML serialization for hbhtml nodes and documents.

Text and attribute values are written back verbatim: the parser never decodes
character references, so escaping them here would change the document on a
second parse.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from .constants import VOID_ELEMENTS


def _choose_attr_quote(value: str) -> str:
    if '"' in value:
        # Only a bareword can hold both quotes, and barewords have no whitespace or ">"
        return "" if "'" in value else "'"
    return '"'


def _serialize_attr(parts: list[str], key: str, value: str) -> None:
    quote = _choose_attr_quote(value)
    parts.extend([" ", key, "=", quote, value, quote])


def serialize_start_tag(node: Any) -> str:
    parts: list[str] = ["<", node.name]
    if node.ids:
        _serialize_attr(parts, "id", " ".join(node.ids))
    if node.classes:
        _serialize_attr(parts, "class", " ".join(node.classes))
    for key, value in node.attributes.items():
        _serialize_attr(parts, key, value)
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def serialize_doctype(doctype: str) -> str:
    return f"<!DOCTYPE {doctype}>"


def to_html(
    node: Any,
    indent: int = 0,
    indent_size: int = 2,
    *,
    pretty: bool = False,
    void_elements: Collection[str] = VOID_ELEMENTS,
) -> str:
    """Convert a node to HTML.

    With ``pretty=False`` (the default) the output parses back to an equal tree.
    """
    return _node_to_html(node, indent, indent_size, pretty, void_elements)


def document_to_html(
    doctype: str | None,
    nodes: list[Any],
    *,
    pretty: bool = False,
    void_elements: Collection[str] = VOID_ELEMENTS,
) -> str:
    parts: list[str] = []
    if doctype is not None:
        parts.append(serialize_doctype(doctype))
    for child in nodes:
        child_html = _node_to_html(child, 0, 2, pretty, void_elements)
        if child_html or not pretty:
            parts.append(child_html)
    return "\n".join(parts) if pretty else "".join(parts)


def _node_to_html(node: Any, indent: int, indent_size: int, pretty: bool, void_elements: Collection[str]) -> str:
    prefix = " " * (indent * indent_size) if pretty else ""
    newline = "\n" if pretty else ""
    name: str = node.name

    if name == "#text":
        text: str = node.data
        if pretty:
            text = text.strip()
            return f"{prefix}{text}" if text else ""
        return text

    if name == "#comment":
        return f"{prefix}<!--{node.data}-->"

    open_tag = serialize_start_tag(node)
    children: list[Any] = node.contents

    if name in void_elements and not children:
        return f"{prefix}{open_tag}"

    if not children:
        return f"{prefix}{open_tag}{serialize_end_tag(name)}"

    # Text-only children stay on one line
    if pretty and all(c.name == "#text" for c in children):
        return f"{prefix}{open_tag}{node.to_text(separator='', strip=False).strip()}{serialize_end_tag(name)}"

    parts = [f"{prefix}{open_tag}"]
    for child in children:
        child_html = _node_to_html(child, indent + 1, indent_size, pretty, void_elements)
        if child_html or not pretty:
            parts.append(child_html)
    parts.append(f"{prefix}{serialize_end_tag(name)}")
    return newline.join(parts) if pretty else "".join(parts)
