"""Tag serialization with the cheapest attribute quoting, plus a tree dump
in the html5lib test format used by the test suite and ``--debug``."""

from __future__ import annotations

import re
from typing import Any

from .entities import encode_attr_value
from .node import (
    Bang,
    Comment,
    Document,
    Element,
    ElementClosingTag,
    Instruction,
    Namespace,
    RawAttrValue,
    ScriptOrStyleContent,
    Text,
    Verbatim,
)

_UNQUOTED_FORBIDDEN_PATTERN = re.compile(r"[\t\n\f\r >]")
# The HTML syntax forbids these too, although tokenizers accept them
_UNQUOTED_FORBIDDEN_STRICT_PATTERN = re.compile(r"[\t\n\f\r >\"'=<`]")


def _can_unquote_attr_value(value: str, *, spec_compliant: bool = False) -> bool:
    if not value:
        return False
    # A leading quote would open a quoted value
    if value[0] in {'"', "'"}:
        return False
    pattern = _UNQUOTED_FORBIDDEN_STRICT_PATTERN if spec_compliant else _UNQUOTED_FORBIDDEN_PATTERN
    return pattern.search(value) is None


def serialize_attr_value(value: str, *, spec_compliant: bool = False) -> str:
    """Shortest of the unquoted, double-quoted and single-quoted spellings.

    Ties go to unquoted, then double quotes.
    """
    best = None
    if _can_unquote_attr_value(value, spec_compliant=spec_compliant):
        best = encode_attr_value(value, "")
    for quote in ('"', "'"):
        candidate = quote + encode_attr_value(value, quote) + quote
        if best is None or len(candidate) < len(best):
            best = candidate
    return best


def serialize_start_tag(
    name: str,
    attrs: list[tuple[str, str | RawAttrValue | None]],
    *,
    self_closing: bool = False,
    keep_spaces_between_attributes: bool = False,
    spec_compliant_unquoted: bool = False,
) -> str:
    """Serialize a start tag. A ``None`` value writes the attribute name alone."""
    parts: list[str] = ["<", name]
    need_space = True
    last_unquoted = False
    for key, value in attrs:
        if need_space or keep_spaces_between_attributes:
            parts.append(" ")
        parts.append(key)
        if value is None:
            need_space = True
            last_unquoted = False
            continue

        if isinstance(value, RawAttrValue):
            parts.extend(["=", value.quote, value.code, value.quote])
            quoted = bool(value.quote)
        else:
            serialized = serialize_attr_value(value, spec_compliant=spec_compliant_unquoted)
            parts.extend(["=", serialized])
            quoted = serialized[0] in {'"', "'"}
        # The closing quote already separates the next attribute
        need_space = not quoted
        last_unquoted = not quoted

    if self_closing:
        # "a=b/>" would read the slash into the value
        parts.append(" />" if last_unquoted else "/>")
    else:
        parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


_CLOSING_MARKERS = {
    ElementClosingTag.OMITTED: " (omitted)",
    ElementClosingTag.PRESENT: "",
    ElementClosingTag.SELF_CLOSING: " (self-closing)",
    ElementClosingTag.VOID: " (void)",
}


def to_test_format(node: Any, indent: int = 0) -> str:
    """Convert a Document or node to an html5lib-style tree dump.

    Attributes keep source order; elements whose end tag was not written as
    ``</name>`` carry a marker such as ``(omitted)``.
    """
    if isinstance(node, Document):
        return "\n".join(_node_to_test_format(child, 0) for child in node.children)
    return _node_to_test_format(node, indent)


def _node_to_test_format(node: Any, indent: int) -> str:
    padding = " " * indent
    unterminated = "" if getattr(node, "ended", True) else " (unterminated)"

    if isinstance(node, Text):
        return f'| {padding}"{node.value}"'
    if isinstance(node, Comment):
        return f"| {padding}<!--{node.code}-->{unterminated}"
    if isinstance(node, Bang):
        return f"| {padding}<!{node.code}>{unterminated}"
    if isinstance(node, Instruction):
        return f"| {padding}<?{node.code}?>{unterminated}"
    if isinstance(node, Verbatim):
        return f"| {padding}verbatim {node.code!r}{unterminated}"
    if isinstance(node, ScriptOrStyleContent):
        return f'| {padding}{node.lang.value} "{node.code}"'

    element: Element = node
    if element.namespace is Namespace.HTML:
        qualified = element.name
    else:
        qualified = f"{element.namespace.value} {element.name}"
    sections = [f"| {padding}<{qualified}>{_CLOSING_MARKERS[element.closing_tag]}"]
    for attr_name, value in element.attributes.items():
        if isinstance(value, RawAttrValue):
            sections.append(f"| {padding}  {attr_name}={value.quote}{value.code}{value.quote} (verbatim)")
        else:
            sections.append(f'| {padding}  {attr_name}="{value}"')
    sections.extend(_node_to_test_format(child, indent + 2) for child in element.children)
    return "\n".join(sections)
