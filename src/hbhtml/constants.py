"""Element sets shared by the tokenizer, serializer and matcher."""

from __future__ import annotations

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "command",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements :disabled and :enabled apply to.
DISABLEABLE_ELEMENTS: frozenset[str] = frozenset(
    {"button", "fieldset", "input", "optgroup", "option", "select", "textarea"}
)

# Elements :required and :optional apply to.
REQUIRABLE_ELEMENTS: frozenset[str] = frozenset({"input", "select", "textarea"})

# Elements whose editability comes from the readonly attribute rather than contenteditable.
TEXT_CONTROL_ELEMENTS: frozenset[str] = frozenset({"input", "textarea"})

CHECKABLE_INPUT_TYPES: frozenset[str] = frozenset({"checkbox", "radio"})

ASCII_WHITESPACE = " \t\n\r\f"
