"""Byte decoding for HTML documents.

Documents handed over as bytes are decoded before tokenizing. The encoding is
picked from (in order) an explicit label, a byte order mark, a
``<meta charset>`` declaration near the start of the document, and finally
UTF-8. Undecodable bytes are replaced rather than rejected.
"""

from __future__ import annotations

import codecs
import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

# How far into the document a <meta> declaration is looked for.
PRESCAN_LIMIT = 1024

_META_CHARSET_RE = re.compile(
    rb"""<meta[\s/][^>]*?charset\s*=\s*["']?\s*([a-zA-Z0-9_:.\-]+)""",
    re.IGNORECASE,
)

# HTML treats these labels differently from Python's codec registry.
_LABEL_OVERRIDES = {
    "utf-7": "windows-1252",
    "utf7": "windows-1252",
    "x-utf-7": "windows-1252",
    "iso-8859-1": "windows-1252",
    "iso8859-1": "windows-1252",
    "latin1": "windows-1252",
    "latin-1": "windows-1252",
    "l1": "windows-1252",
    "ascii": "windows-1252",
    "us-ascii": "windows-1252",
}

_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def normalize_encoding_label(label: str | bytes | None) -> str | None:
    """Map an encoding label onto a codec name, or None if it is unknown."""
    if not label:
        return None
    if isinstance(label, bytes):
        label = label.decode("ascii", "ignore")
    s = label.strip().lower()
    if not s:
        return None
    if s in _LABEL_OVERRIDES:
        return _LABEL_OVERRIDES[s]
    try:
        name = codecs.lookup(s).name
    except LookupError:
        return None
    if name == "cp1252":
        return "windows-1252"
    return name


def _sniff_bom(data: bytes) -> tuple[str | None, int]:
    for bom, name in _BOMS:
        if data.startswith(bom):
            return name, len(bom)
    return None, 0


def _prescan_for_meta_charset(data: bytes) -> str | None:
    match = _META_CHARSET_RE.search(data[:PRESCAN_LIMIT])
    if match is None:
        return None
    enc = normalize_encoding_label(match.group(1))
    # A document that could be read as ASCII can't really be UTF-16.
    if enc is not None and enc.startswith("utf-16"):
        return DEFAULT_ENCODING
    return enc


def sniff_html_encoding(data: bytes, transport_encoding: str | None = None) -> tuple[str, int]:
    """Pick an encoding for `data`; returns the codec name and the BOM length to skip.

    Raises LookupError if `transport_encoding` is given but not a known label.
    """
    if transport_encoding:
        transport = normalize_encoding_label(transport_encoding)
        if transport is None:
            raise LookupError(f"unknown encoding: {transport_encoding}")
        return transport, 0

    bom_enc, bom_len = _sniff_bom(data)
    if bom_enc:
        return bom_enc, bom_len

    meta_enc = _prescan_for_meta_charset(data)
    if meta_enc:
        return meta_enc, 0

    return DEFAULT_ENCODING, 0


def decode_html(data: bytes | bytearray | memoryview, transport_encoding: str | None = None) -> tuple[str, str]:
    """Decode an HTML byte string.

    Returns (text, encoding_name).
    """
    data = bytes(data)
    enc, bom_len = sniff_html_encoding(data, transport_encoding=transport_encoding)
    payload = data[bom_len:] if bom_len else data
    logger.debug("Decoding %d bytes as %s", len(payload), enc)
    codec = "cp1252" if enc == "windows-1252" else enc
    return payload.decode(codec, "replace"), enc
