"""Centralized error message definitions and exception types for tokenization.

Parse error codes follow the kebab-case names of the WHATWG tokenization
chapter. Parse errors are never raised by the tokenizer itself; they are
collected as ``ParseError`` objects. The exceptions defined here are for strict
mode and for internal invariant violations.
"""

from __future__ import annotations

_MESSAGES = {
    # Tag errors
    "eof-before-tag-name": "Unexpected end of file before tag name",
    "eof-in-tag": "Unexpected end of file in tag",
    "invalid-first-character-of-tag-name": "Invalid first character of tag name",
    "missing-end-tag-name": "Empty end tag </> is not allowed",
    "unexpected-question-mark-instead-of-tag-name": "Unexpected ? instead of tag name",
    "unexpected-solidus-in-tag": "Unexpected / in tag",
    "end-tag-with-attributes": "End tag has attributes",
    "end-tag-with-trailing-solidus": "End tag has a trailing /",
    # Attribute errors
    "duplicate-attribute": "Duplicate attribute name",
    "missing-attribute-value": "Missing attribute value",
    "missing-whitespace-between-attributes": "Missing whitespace between attributes",
    "unexpected-character-in-attribute-name": "Unexpected character in attribute name",
    "unexpected-character-in-unquoted-attribute-value": "Unexpected character in unquoted attribute value",
    "unexpected-equals-sign-before-attribute-name": "Unexpected = before attribute name",
    # Comment errors
    "abrupt-closing-of-empty-comment": "Comment ended abruptly with -->",
    "eof-in-comment": "Unexpected end of file in comment",
    "incorrectly-closed-comment": "Comment ended with --!> instead of -->",
    "incorrectly-opened-comment": "Incorrectly opened comment",
    "nested-comment": "Nested comment <!-- inside comment",
    # DOCTYPE errors
    "eof-in-doctype": "Unexpected end of file in DOCTYPE declaration",
    "missing-doctype-name": "Expected DOCTYPE name but got >",
    "missing-whitespace-before-doctype-name": "Missing whitespace after <!DOCTYPE",
    "invalid-character-sequence-after-doctype-name": "Expected PUBLIC or SYSTEM after DOCTYPE name",
    "missing-whitespace-after-doctype-public-keyword": "Missing whitespace after PUBLIC keyword",
    "missing-whitespace-after-doctype-system-keyword": "Missing whitespace after SYSTEM keyword",
    "missing-doctype-public-identifier": "Missing DOCTYPE public identifier",
    "missing-doctype-system-identifier": "Missing DOCTYPE system identifier",
    "missing-quote-before-doctype-public-identifier": "Missing quote before DOCTYPE public identifier",
    "missing-quote-before-doctype-system-identifier": "Missing quote before DOCTYPE system identifier",
    "abrupt-doctype-public-identifier": "DOCTYPE public identifier ended abruptly",
    "abrupt-doctype-system-identifier": "DOCTYPE system identifier ended abruptly",
    "missing-whitespace-between-doctype-public-and-system-identifiers": "Missing whitespace between DOCTYPE identifiers",
    "unexpected-character-after-doctype-system-identifier": "Unexpected character after system identifier",
    # CDATA errors
    "eof-in-cdata": "Unexpected end of file in CDATA section",
    "cdata-in-html-content": "CDATA section only allowed in SVG/MathML content",
    # NULL character errors
    "unexpected-null-character": "Unexpected NULL character (U+0000)",
    # Character reference errors
    "absence-of-digits-in-numeric-character-reference": "Numeric character reference has no digits",
    "character-reference-outside-unicode-range": "Character reference outside the Unicode range",
    "control-character-reference": "Invalid control character in character reference",
    "missing-semicolon-after-character-reference": "Missing semicolon after character reference",
    "noncharacter-character-reference": "Character reference to a noncharacter",
    "null-character-reference": "Character reference to U+0000",
    "surrogate-character-reference": "Character reference to a surrogate",
    "unknown-named-character-reference": "Unknown named character reference",
}


def generate_error_message(code: str) -> str:
    """Generate human-readable error message from error code.

    Unknown codes fall back to the code itself.
    """
    return _MESSAGES.get(code, code)


class StrictModeError(SyntaxError):
    """Raised when strict mode encounters a parse error.

    Inherits from SyntaxError so the line/column of the offending markup is
    shown in tracebacks.
    """

    def __init__(self, error):
        self.error = error
        super().__init__(str(error))
        self.lineno = error.line
        self.offset = error.column


class TokenizerInvariantError(RuntimeError):
    """The tokenizer reached a state it has no transition for.

    This is a bug in the tokenizer, never a property of the input markup.
    """
