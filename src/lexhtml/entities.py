"""HTML5 character reference resolution.

Implements the character reference rules of the WHATWG tokenizer (§13.2.5.72
onwards) as a pure function over the input buffer. Supports both named
references (&amp;, &nbsp;, &NotEqualTilde;) and numeric references (&#60;,
&#x3C;).
"""

import html.entities

from .entity_trie import Trie

# Python's complete HTML5 entity list. Keys include the trailing semicolon
# (e.g., "amp;", "lang;"); the legacy names that may appear without one are
# present a second time without it (e.g., "amp").
_HTML5_ENTITIES = html.entities.html5

# Legacy named character references that can be used without semicolons.
# These are the ISO-8859-1 names carried over from HTML4 plus "AMP", "GT", ...
LEGACY_ENTITIES = frozenset(key for key in _HTML5_ENTITIES if not key.endswith(";"))

ENTITY_TRIE = Trie(_HTML5_ENTITIES)

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

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_DEC_DIGITS = frozenset("0123456789")
_ASCII_WHITESPACE_CODES = frozenset((0x09, 0x0A, 0x0C, 0x0D, 0x20))

# More significant digits than this can only be out of range
_MAX_SIGNIFICANT_DIGITS = 8


def _is_ascii_alnum(c):
    return c.isascii() and c.isalnum()


def _is_noncharacter(codepoint):
    return 0xFDD0 <= codepoint <= 0xFDEF or (codepoint & 0xFFFE) == 0xFFFE


def _is_control(codepoint):
    return codepoint <= 0x1F or 0x7F <= codepoint <= 0x9F


def resolve_codepoint(codepoint):
    """Map a numeric reference's code point to its replacement text.

    Returns:
        tuple: (text, error_code or None)
    """
    if codepoint == 0:
        return "\ufffd", "null-character-reference"
    if codepoint > 0x10FFFF:
        return "\ufffd", "character-reference-outside-unicode-range"
    if 0xD800 <= codepoint <= 0xDFFF:
        return "\ufffd", "surrogate-character-reference"
    if _is_noncharacter(codepoint):
        return chr(codepoint), "noncharacter-character-reference"
    if codepoint == 0x0D or (_is_control(codepoint) and codepoint not in _ASCII_WHITESPACE_CODES):
        return NUMERIC_REPLACEMENTS.get(codepoint, chr(codepoint)), "control-character-reference"
    return chr(codepoint), None


def decode_numeric_entity(text, is_hex=False):
    """Decode the digits of a numeric character reference like &#60; or &#x3C;.

    Args:
        text: The numeric part (without &# or ;)
        is_hex: Whether this is hexadecimal (&#x) or decimal (&#)

    Returns:
        The decoded character, or None if ``text`` holds no valid digits
    """
    digits = _HEX_DIGITS if is_hex else _DEC_DIGITS
    if not text or any(c not in digits for c in text):
        return None
    significant = text.lstrip("0")
    if len(significant) > _MAX_SIGNIFICANT_DIGITS:
        codepoint = 0x110000
    else:
        codepoint = int(significant or "0", 16 if is_hex else 10)
    return resolve_codepoint(codepoint)[0]


def _match_numeric(text, pos):
    # ``pos`` points just past "#"
    length = len(text)
    start = pos
    is_hex = False
    if pos < length and text[pos] in "xX":
        is_hex = True
        pos += 1
    digits = _HEX_DIGITS if is_hex else _DEC_DIGITS
    digit_start = pos
    while pos < length and text[pos] in digits:
        pos += 1
    if pos == digit_start:
        return None, start, ["absence-of-digits-in-numeric-character-reference"]

    errors = []
    significant = text[digit_start:pos].lstrip("0")
    if pos < length and text[pos] == ";":
        pos += 1
    else:
        errors.append("missing-semicolon-after-character-reference")

    if len(significant) > _MAX_SIGNIFICANT_DIGITS:
        codepoint = 0x110000
    else:
        codepoint = int(significant or "0", 16 if is_hex else 10)
    value, error = resolve_codepoint(codepoint)
    if error:
        errors.append(error)
    return value, pos, errors


def _match_named(text, pos, in_attribute):
    length = len(text)
    try:
        name, value = ENTITY_TRIE.longest_prefix_item(text, pos)
    except KeyError:
        # Ambiguous ampersand: an alphanumeric run ending in ";" is an error,
        # either way the characters stay in the input as literal text.
        end = pos
        while end < length and _is_ascii_alnum(text[end]):
            end += 1
        if end > pos and end < length and text[end] == ";":
            return None, pos, ["unknown-named-character-reference"]
        return None, pos, []

    end = pos + len(name)
    if name.endswith(";"):
        return value, end, []
    if name not in LEGACY_ENTITIES:
        return None, pos, []
    if in_attribute and end < length:
        next_char = text[end]
        if next_char == "=" or _is_ascii_alnum(next_char):
            return None, pos, []
    return value, end, ["missing-semicolon-after-character-reference"]


def match_character_reference(text, pos, in_attribute=False):
    """Resolve the character reference starting right after an ``&``.

    Args:
        text: The full input buffer
        pos: Index of the first character after ``&``
        in_attribute: Whether the reference appears in an attribute value

    Returns:
        tuple: (value, end, errors). ``value`` is the resolved text or None when
        nothing matched, ``end`` the index just past the consumed reference
        (``pos`` when nothing matched) and ``errors`` a list of parse error codes.
    """
    if pos >= len(text):
        return None, pos, []
    c = text[pos]
    if c == "#":
        value, end, errors = _match_numeric(text, pos + 1)
        if value is None:
            return None, pos, errors
        return value, end, errors
    if _is_ascii_alnum(c):
        return _match_named(text, pos, in_attribute)
    return None, pos, []


def decode_entities_in_text(text, in_attribute=False):
    """Decode all HTML character references in ``text``.

    Unmatched ampersands are kept literally.
    """
    if "&" not in text:
        return text

    result = []
    i = 0
    length = len(text)
    while i < length:
        next_amp = text.find("&", i)
        if next_amp == -1:
            result.append(text[i:])
            break
        if next_amp > i:
            result.append(text[i:next_amp])

        value, end, _errors = match_character_reference(text, next_amp + 1, in_attribute)
        if value is None:
            result.append("&")
            i = next_amp + 1
        else:
            result.append(value)
            i = end

    return "".join(result)
