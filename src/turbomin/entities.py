"""HTML5 character references: decoding on input, shortest encoding on output.

Decoding follows WHATWG §13.2.5.72-80 (named and numeric character reference
states). Encoding does the inverse with the fewest bytes: a character is only
escaped where leaving it bare would change how the output is tokenized, and a
reference only carries its ``;`` where dropping it would let the tokenizer read
a longer name or more digits.
"""

import html.entities
import re

from .entity_trie import Trie

# Python's HTML5 table already lists the legacy names that may appear without
# a semicolon ("amp", "not", "copy", ...) as separate keys.
NAMED_ENTITIES = Trie(html.entities.html5)

# HTML5 numeric character reference replacements (§13.2.5.80)
NUMERIC_REPLACEMENTS = {
    0x00: "\ufffd",  # NULL
    0x80: "\u20ac",  # EURO SIGN
    0x82: "\u201a",  # SINGLE LOW-9 QUOTATION MARK
    0x83: "\u0192",  # LATIN SMALL LETTER F WITH HOOK
    0x84: "\u201e",  # DOUBLE LOW-9 QUOTATION MARK
    0x85: "\u2026",  # HORIZONTAL ELLIPSIS
    0x86: "\u2020",  # DAGGER
    0x87: "\u2021",  # DOUBLE DAGGER
    0x88: "\u02c6",  # MODIFIER LETTER CIRCUMFLEX ACCENT
    0x89: "\u2030",  # PER MILLE SIGN
    0x8a: "\u0160",  # LATIN CAPITAL LETTER S WITH CARON
    0x8b: "\u2039",  # SINGLE LEFT-POINTING ANGLE QUOTATION MARK
    0x8c: "\u0152",  # LATIN CAPITAL LIGATURE OE
    0x8e: "\u017d",  # LATIN CAPITAL LETTER Z WITH CARON
    0x91: "\u2018",  # LEFT SINGLE QUOTATION MARK
    0x92: "\u2019",  # RIGHT SINGLE QUOTATION MARK
    0x93: "\u201c",  # LEFT DOUBLE QUOTATION MARK
    0x94: "\u201d",  # RIGHT DOUBLE QUOTATION MARK
    0x95: "\u2022",  # BULLET
    0x96: "\u2013",  # EN DASH
    0x97: "\u2014",  # EM DASH
    0x98: "\u02dc",  # SMALL TILDE
    0x99: "\u2122",  # TRADE MARK SIGN
    0x9a: "\u0161",  # LATIN SMALL LETTER S WITH CARON
    0x9b: "\u203a",  # SINGLE RIGHT-POINTING ANGLE QUOTATION MARK
    0x9c: "\u0153",  # LATIN SMALL LIGATURE OE
    0x9e: "\u017e",  # LATIN SMALL LETTER Z WITH CARON
    0x9f: "\u0178",  # LATIN CAPITAL LETTER Y WITH DIAERESIS
}

_DECIMAL_DIGITS = "0123456789"
_HEX_DIGITS = "0123456789abcdefABCDEF"

_TEXT_SPECIAL_PATTERN = re.compile("[&<\r]")
_RCDATA_END_PATTERNS = {}
_ATTR_SPECIAL_PATTERNS = {
    '"': re.compile('[&"\r]'),
    "'": re.compile("[&'\r]"),
    "": re.compile("[&\r]"),
}


def decode_numeric_entity(digits, is_hex=False):
    """Decode the digits of a numeric reference like &#60; or &#x3C;."""
    digits = digits.lstrip("0")
    if not digits:
        return NUMERIC_REPLACEMENTS[0]
    if len(digits) > 8:
        # Far outside the code point range, and too long for int() limits
        return "\ufffd"
    codepoint = int(digits, 16 if is_hex else 10)

    replacement = NUMERIC_REPLACEMENTS.get(codepoint)
    if replacement is not None:
        return replacement
    if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
        return "\ufffd"
    return chr(codepoint)


def match_reference(text, start, in_attribute=False):
    """Match a character reference whose ``&`` sits just before ``text[start]``.

    Returns:
        tuple: (end, decoded) where ``end`` is the index after the reference,
        or None when the ampersand is literal.
    """
    length = len(text)
    if start < length and text[start] == "#":
        j = start + 1
        is_hex = j < length and text[j] in "xX"
        if is_hex:
            j += 1
        allowed = _HEX_DIGITS if is_hex else _DECIMAL_DIGITS
        digits_start = j
        while j < length and text[j] in allowed:
            j += 1
        if j == digits_start:
            return None
        decoded = decode_numeric_entity(text[digits_start:j], is_hex=is_hex)
        if j < length and text[j] == ";":
            j += 1
        return j, decoded

    try:
        name, value = NAMED_ENTITIES.longest_prefix_item(text, start)
    except KeyError:
        return None
    end = start + len(name)
    # Legacy names without ";" stay literal in attributes before alnum or "="
    if in_attribute and name[-1] != ";" and end < length:
        next_char = text[end]
        if next_char == "=" or (next_char.isascii() and next_char.isalnum()):
            return None
    return end, value


def decode_entities_in_text(text, in_attribute=False):
    """Decode all character references in text or an attribute value."""
    if "&" not in text:
        return text

    result = []
    i = 0
    while True:
        amp = text.find("&", i)
        if amp == -1:
            result.append(text[i:])
            break
        result.append(text[i:amp])
        match = match_reference(text, amp + 1, in_attribute)
        if match is None:
            result.append("&")
            i = amp + 1
            continue
        i, decoded = match
        result.append(decoded)
    return "".join(result)


def _named_reference(name, text, end):
    # Bare "&name" is safe when the tokenizer would not extend it into a
    # longer name using the characters that follow.
    candidate = name + text[end : end + NAMED_ENTITIES.max_length]
    matched, _ = NAMED_ENTITIES.longest_prefix_item(candidate)
    if matched == name:
        return "&" + name
    return "&" + name + ";"


def _numeric_reference(codepoint, text, end):
    next_char = text[end : end + 1]
    if next_char and next_char in "0123456789;":
        return f"&#{codepoint};"
    return f"&#{codepoint}"


def _ends_rcdata(text, end, name):
    # Same test the tokenizer uses to find the end of the element
    pattern = _RCDATA_END_PATTERNS.get(name)
    if pattern is None:
        pattern = re.compile("/" + re.escape(name) + r"[\t\n\f\r />]", re.IGNORECASE)
        _RCDATA_END_PATTERNS[name] = pattern
    return pattern.match(text, end) is not None


def encode_text(text, *, rcdata=None, escape_chevron=False):
    """Escape decoded text so it tokenizes back to the same characters.

    Args:
        rcdata: name of the title/textarea the text belongs to. Only its own
            end tag (``</name`` and a tag name terminator) ends the element.
        escape_chevron: ``<%`` opens template syntax and must be escaped.
    """

    def replace(match):
        char = match.group()
        end = match.end()
        if char == "&":
            if match_reference(text, end) is None:
                return "&"
            return _named_reference("amp", text, end)
        if char == "<":
            next_char = text[end : end + 1]
            if rcdata:
                needed = _ends_rcdata(text, end, rcdata)
            else:
                needed = next_char in ("!", "/", "?") or (next_char.isascii() and next_char.isalpha())
                if escape_chevron and next_char == "%":
                    needed = True
            if not needed:
                return "<"
            return _named_reference("lt", text, end)
        return _numeric_reference(13, text, end)

    return _TEXT_SPECIAL_PATTERN.sub(replace, text)


def encode_attr_value(value, quote):
    """Escape an attribute value delimited by ``quote`` (``""`` when unquoted)."""

    def replace(match):
        char = match.group()
        end = match.end()
        if char == "&":
            if match_reference(value, end, in_attribute=True) is None:
                return "&"
            # "&amp" followed by an alphanumeric would stay literal in an attribute
            if value[end] == "#":
                return "&amp"
            return "&amp;"
        if char == '"':
            return _numeric_reference(34, value, end)
        if char == "'":
            return _numeric_reference(39, value, end)
        return _numeric_reference(13, value, end)

    return _ATTR_SPECIAL_PATTERNS[quote].sub(replace, value)
