import sys

from .entities import match_character_reference
from .errors import StrictModeError, TokenizerInvariantError, generate_error_message
from .tokens import Attribute, CharacterToken, CommentToken, Doctype, DoctypeToken, EOFToken, ParseError, Tag

_WHITESPACE = frozenset("\t\n\f ")
_UNQUOTED_VALUE_ILLEGAL = frozenset("\"'<=`")
_ATTR_NAME_ILLEGAL = frozenset("\"'<")
_REPLACEMENT = "\ufffd"
_ASCII_UPPER_TABLE = str.maketrans({chr(code): chr(code - 32) for code in range(97, 123)})


def _is_ascii_alpha(c):
    return ("a" <= c <= "z") or ("A" <= c <= "Z")


def _ascii_lower(c):
    if "A" <= c <= "Z":
        return chr(ord(c) + 32)
    return c


class TokenizerOpts:
    __slots__ = ("cdata_sections", "debug", "discard_bom", "exact_errors")

    def __init__(self, exact_errors=False, discard_bom=True, cdata_sections=True, debug=False):
        self.exact_errors = bool(exact_errors)
        self.discard_bom = bool(discard_bom)
        self.cdata_sections = bool(cdata_sections)
        self.debug = bool(debug)


class Tokenizer:
    """HTML tokenizer state machine.

    The tokenizer owns the input buffer, the current state and the scratch
    buffers of whatever token is in progress. Each call to ``step`` performs
    exactly one transition and appends any completed tokens to the queue it is
    given. Completed tokens are fresh objects; the tokenizer never touches a
    token again once it has been queued.
    """

    DATA = 0
    TAG_OPEN = 1
    END_TAG_OPEN = 2
    TAG_NAME = 3
    BEFORE_ATTRIBUTE_NAME = 4
    ATTRIBUTE_NAME = 5
    AFTER_ATTRIBUTE_NAME = 6
    BEFORE_ATTRIBUTE_VALUE = 7
    ATTRIBUTE_VALUE_DOUBLE = 8
    ATTRIBUTE_VALUE_SINGLE = 9
    ATTRIBUTE_VALUE_UNQUOTED = 10
    AFTER_ATTRIBUTE_VALUE_QUOTED = 11
    SELF_CLOSING_START_TAG = 12
    BOGUS_COMMENT = 13
    MARKUP_DECLARATION_OPEN = 14
    COMMENT_START = 15
    COMMENT_START_DASH = 16
    COMMENT = 17
    COMMENT_LESS_THAN_SIGN = 18
    COMMENT_LESS_THAN_SIGN_BANG = 19
    COMMENT_LESS_THAN_SIGN_BANG_DASH = 20
    COMMENT_LESS_THAN_SIGN_BANG_DASH_DASH = 21
    COMMENT_END_DASH = 22
    COMMENT_END = 23
    COMMENT_END_BANG = 24
    DOCTYPE = 25
    BEFORE_DOCTYPE_NAME = 26
    DOCTYPE_NAME = 27
    AFTER_DOCTYPE_NAME = 28
    AFTER_DOCTYPE_PUBLIC_KEYWORD = 29
    BEFORE_DOCTYPE_PUBLIC_IDENTIFIER = 30
    DOCTYPE_PUBLIC_IDENTIFIER_DOUBLE_QUOTED = 31
    DOCTYPE_PUBLIC_IDENTIFIER_SINGLE_QUOTED = 32
    AFTER_DOCTYPE_PUBLIC_IDENTIFIER = 33
    BETWEEN_DOCTYPE_PUBLIC_AND_SYSTEM_IDENTIFIERS = 34
    AFTER_DOCTYPE_SYSTEM_KEYWORD = 35
    BEFORE_DOCTYPE_SYSTEM_IDENTIFIER = 36
    DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED = 37
    DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED = 38
    AFTER_DOCTYPE_SYSTEM_IDENTIFIER = 39
    BOGUS_DOCTYPE = 40
    CDATA_SECTION = 41
    CDATA_SECTION_BRACKET = 42
    CDATA_SECTION_END = 43
    CHARACTER_REFERENCE = 44
    EOF = 45

    __slots__ = (
        "_tokens",
        "buffer",
        "collect_errors",
        "column",
        "current_attr_discard",
        "current_attr_name",
        "current_attr_names",
        "current_attr_value",
        "current_char",
        "current_comment",
        "current_doctype_force_quirks",
        "current_doctype_name",
        "current_doctype_public",
        "current_doctype_system",
        "current_tag_attrs",
        "current_tag_kind",
        "current_tag_name",
        "current_tag_self_closing",
        "env_debug",
        "errors",
        "length",
        "line",
        "opts",
        "pos",
        "reconsume",
        "return_state",
        "state",
        "strict",
    )

    def __init__(self, html, opts=None, collect_errors=False, strict=False):
        self.opts = opts or TokenizerOpts()
        self.env_debug = self.opts.debug
        self.strict = bool(strict)
        self.collect_errors = bool(collect_errors) or self.strict
        self.errors = []

        html = html or ""
        if html and html[0] == "\ufeff" and self.opts.discard_bom:
            html = html[1:]
        if "\r" in html:
            html = html.replace("\r\n", "\n").replace("\r", "\n")

        self.buffer = html
        self.length = len(html)
        self.pos = 0
        self.reconsume = False
        self.current_char = None
        self.line = 1
        self.column = 0

        self.state = self.DATA
        self.return_state = self.DATA
        self._tokens = None

        self.current_tag_kind = Tag.START
        self.current_tag_name = []
        self.current_tag_attrs = []
        self.current_tag_self_closing = False
        self.current_attr_names = set()
        self.current_attr_name = []
        self.current_attr_value = []
        self.current_attr_discard = False
        self.current_comment = []
        self.current_doctype_name = None
        self.current_doctype_public = None
        self.current_doctype_system = None
        self.current_doctype_force_quirks = False

    @property
    def finished(self):
        return self.state == self.EOF

    def step(self, tokens):
        """Perform one transition, appending completed tokens to ``tokens``."""
        state = self.state
        self._tokens = tokens
        if state == self.DATA:
            self._state_data()
        elif state == self.TAG_OPEN:
            self._state_tag_open()
        elif state == self.END_TAG_OPEN:
            self._state_end_tag_open()
        elif state == self.TAG_NAME:
            self._state_tag_name()
        elif state == self.BEFORE_ATTRIBUTE_NAME:
            self._state_before_attribute_name()
        elif state == self.ATTRIBUTE_NAME:
            self._state_attribute_name()
        elif state == self.AFTER_ATTRIBUTE_NAME:
            self._state_after_attribute_name()
        elif state == self.BEFORE_ATTRIBUTE_VALUE:
            self._state_before_attribute_value()
        elif state == self.ATTRIBUTE_VALUE_DOUBLE:
            self._state_attribute_value_quoted('"')
        elif state == self.ATTRIBUTE_VALUE_SINGLE:
            self._state_attribute_value_quoted("'")
        elif state == self.ATTRIBUTE_VALUE_UNQUOTED:
            self._state_attribute_value_unquoted()
        elif state == self.AFTER_ATTRIBUTE_VALUE_QUOTED:
            self._state_after_attribute_value_quoted()
        elif state == self.SELF_CLOSING_START_TAG:
            self._state_self_closing_start_tag()
        elif state == self.BOGUS_COMMENT:
            self._state_bogus_comment()
        elif state == self.MARKUP_DECLARATION_OPEN:
            self._state_markup_declaration_open()
        elif state == self.COMMENT_START:
            self._state_comment_start()
        elif state == self.COMMENT_START_DASH:
            self._state_comment_start_dash()
        elif state == self.COMMENT:
            self._state_comment()
        elif state == self.COMMENT_LESS_THAN_SIGN:
            self._state_comment_less_than_sign()
        elif state == self.COMMENT_LESS_THAN_SIGN_BANG:
            self._state_comment_less_than_sign_bang()
        elif state == self.COMMENT_LESS_THAN_SIGN_BANG_DASH:
            self._state_comment_less_than_sign_bang_dash()
        elif state == self.COMMENT_LESS_THAN_SIGN_BANG_DASH_DASH:
            self._state_comment_less_than_sign_bang_dash_dash()
        elif state == self.COMMENT_END_DASH:
            self._state_comment_end_dash()
        elif state == self.COMMENT_END:
            self._state_comment_end()
        elif state == self.COMMENT_END_BANG:
            self._state_comment_end_bang()
        elif state == self.DOCTYPE:
            self._state_doctype()
        elif state == self.BEFORE_DOCTYPE_NAME:
            self._state_before_doctype_name()
        elif state == self.DOCTYPE_NAME:
            self._state_doctype_name()
        elif state == self.AFTER_DOCTYPE_NAME:
            self._state_after_doctype_name()
        elif state == self.AFTER_DOCTYPE_PUBLIC_KEYWORD:
            self._state_after_doctype_keyword(public=True)
        elif state == self.BEFORE_DOCTYPE_PUBLIC_IDENTIFIER:
            self._state_before_doctype_identifier(public=True)
        elif state == self.DOCTYPE_PUBLIC_IDENTIFIER_DOUBLE_QUOTED:
            self._state_doctype_identifier_quoted('"', public=True)
        elif state == self.DOCTYPE_PUBLIC_IDENTIFIER_SINGLE_QUOTED:
            self._state_doctype_identifier_quoted("'", public=True)
        elif state == self.AFTER_DOCTYPE_PUBLIC_IDENTIFIER:
            self._state_after_doctype_public_identifier()
        elif state == self.BETWEEN_DOCTYPE_PUBLIC_AND_SYSTEM_IDENTIFIERS:
            self._state_between_doctype_public_and_system_identifiers()
        elif state == self.AFTER_DOCTYPE_SYSTEM_KEYWORD:
            self._state_after_doctype_keyword(public=False)
        elif state == self.BEFORE_DOCTYPE_SYSTEM_IDENTIFIER:
            self._state_before_doctype_identifier(public=False)
        elif state == self.DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED:
            self._state_doctype_identifier_quoted('"', public=False)
        elif state == self.DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED:
            self._state_doctype_identifier_quoted("'", public=False)
        elif state == self.AFTER_DOCTYPE_SYSTEM_IDENTIFIER:
            self._state_after_doctype_system_identifier()
        elif state == self.BOGUS_DOCTYPE:
            self._state_bogus_doctype()
        elif state == self.CDATA_SECTION:
            self._state_cdata_section()
        elif state == self.CDATA_SECTION_BRACKET:
            self._state_cdata_section_bracket()
        elif state == self.CDATA_SECTION_END:
            self._state_cdata_section_end()
        elif state == self.CHARACTER_REFERENCE:
            self._state_character_reference()
        elif state == self.EOF:
            msg = "step() called after the end-of-input token was emitted"
            raise TokenizerInvariantError(msg)
        else:
            msg = f"No transition defined for tokenizer state {state!r}"
            raise TokenizerInvariantError(msg)

        if self.env_debug and self.state != state:
            self.debug(f"{state_name(state)} -> {state_name(self.state)}")

    def debug(self, message, indent=4):
        if self.env_debug:
            print(f"{' ' * indent}[{self.line}:{self.column}] {message}", file=sys.stderr)

    # ---------------------
    # State handlers
    # ---------------------

    def _state_data(self):
        c = self._get_char()
        if c == "&":
            self.return_state = self.DATA
            self.state = self.CHARACTER_REFERENCE
            return
        if c == "<":
            self.state = self.TAG_OPEN
            return
        if c is None:
            self._emit_eof()
            return
        if c == "\0":
            self._emit_error("unexpected-null-character")
            c = _REPLACEMENT
        self._emit_char(c)

    def _state_tag_open(self):
        c = self._get_char()
        if c == "!":
            self.state = self.MARKUP_DECLARATION_OPEN
            return
        if c == "/":
            self.state = self.END_TAG_OPEN
            return
        if c is None:
            self._emit_error("eof-before-tag-name")
            self._emit_char("<")
            self._emit_eof()
            return
        if _is_ascii_alpha(c):
            self._start_tag(Tag.START)
            self._reconsume_in(self.TAG_NAME)
            return
        if c == "?":
            self._emit_error("unexpected-question-mark-instead-of-tag-name")
            self.current_comment.clear()
            self._reconsume_in(self.BOGUS_COMMENT)
            return
        self._emit_error("invalid-first-character-of-tag-name")
        self._emit_char("<")
        self._reconsume_in(self.DATA)

    def _state_end_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-before-tag-name")
            self._emit_char("<")
            self._emit_char("/")
            self._emit_eof()
            return
        if _is_ascii_alpha(c):
            self._start_tag(Tag.END)
            self._reconsume_in(self.TAG_NAME)
            return
        if c == ">":
            self._emit_error("missing-end-tag-name")
            self.state = self.DATA
            return
        self._emit_error("invalid-first-character-of-tag-name")
        self.current_comment.clear()
        self._reconsume_in(self.BOGUS_COMMENT)

    def _state_tag_name(self):
        c = self._get_char()
        if c in _WHITESPACE:
            self.state = self.BEFORE_ATTRIBUTE_NAME
        elif c == "/":
            self.state = self.SELF_CLOSING_START_TAG
        elif c == ">":
            self._emit_current_tag()
            self.state = self.DATA
        elif c is None:
            self._eof_in_tag()
        elif c == "\0":
            self._emit_error("unexpected-null-character")
            self.current_tag_name.append(_REPLACEMENT)
        else:
            self.current_tag_name.append(_ascii_lower(c))

    def _state_before_attribute_name(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c is None or c == "/" or c == ">":
            self._reconsume_in(self.AFTER_ATTRIBUTE_NAME)
            return
        self._finish_attribute()
        if c == "=":
            self._emit_error("unexpected-equals-sign-before-attribute-name")
            self.current_attr_name.append(c)
            self.state = self.ATTRIBUTE_NAME
            return
        self._reconsume_in(self.ATTRIBUTE_NAME)

    def _state_attribute_name(self):
        c = self._get_char()
        if c is None or c in _WHITESPACE or c == "/" or c == ">":
            self._finish_attribute_name()
            self._reconsume_in(self.AFTER_ATTRIBUTE_NAME)
            return
        if c == "=":
            self._finish_attribute_name()
            self.state = self.BEFORE_ATTRIBUTE_VALUE
            return
        if c == "\0":
            self._emit_error("unexpected-null-character")
            self.current_attr_name.append(_REPLACEMENT)
            return
        if c in _ATTR_NAME_ILLEGAL:
            self._emit_error("unexpected-character-in-attribute-name")
        self.current_attr_name.append(_ascii_lower(c))

    def _state_after_attribute_name(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c == "/":
            self.state = self.SELF_CLOSING_START_TAG
            return
        if c == "=":
            self.state = self.BEFORE_ATTRIBUTE_VALUE
            return
        if c == ">":
            self._emit_current_tag()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_tag()
            return
        self._finish_attribute()
        self._reconsume_in(self.ATTRIBUTE_NAME)

    def _state_before_attribute_value(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c == '"':
            self.state = self.ATTRIBUTE_VALUE_DOUBLE
            return
        if c == "'":
            self.state = self.ATTRIBUTE_VALUE_SINGLE
            return
        if c == ">":
            self._emit_error("missing-attribute-value")
            self._emit_current_tag()
            self.state = self.DATA
            return
        self._reconsume_in(self.ATTRIBUTE_VALUE_UNQUOTED)

    def _state_attribute_value_quoted(self, quote):
        c = self._get_char()
        if c == quote:
            self._finish_attribute()
            self.state = self.AFTER_ATTRIBUTE_VALUE_QUOTED
            return
        if c == "&":
            self.return_state = self.state
            self.state = self.CHARACTER_REFERENCE
            return
        if c is None:
            self._eof_in_tag()
            return
        if c == "\0":
            self._emit_error("unexpected-null-character")
            c = _REPLACEMENT
        self.current_attr_value.append(c)

    def _state_attribute_value_unquoted(self):
        c = self._get_char()
        if c in _WHITESPACE:
            self._finish_attribute()
            self.state = self.BEFORE_ATTRIBUTE_NAME
            return
        if c == "&":
            self.return_state = self.ATTRIBUTE_VALUE_UNQUOTED
            self.state = self.CHARACTER_REFERENCE
            return
        if c == ">":
            self._emit_current_tag()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_tag()
            return
        if c == "\0":
            self._emit_error("unexpected-null-character")
            c = _REPLACEMENT
        elif c in _UNQUOTED_VALUE_ILLEGAL:
            self._emit_error("unexpected-character-in-unquoted-attribute-value")
        self.current_attr_value.append(c)

    def _state_after_attribute_value_quoted(self):
        c = self._get_char()
        if c in _WHITESPACE:
            self.state = self.BEFORE_ATTRIBUTE_NAME
            return
        if c == "/":
            self.state = self.SELF_CLOSING_START_TAG
            return
        if c == ">":
            self._emit_current_tag()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_tag()
            return
        self._emit_error("missing-whitespace-between-attributes")
        self._reconsume_in(self.BEFORE_ATTRIBUTE_NAME)

    def _state_self_closing_start_tag(self):
        c = self._get_char()
        if c == ">":
            self.current_tag_self_closing = True
            self._emit_current_tag()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_tag()
            return
        self._emit_error("unexpected-solidus-in-tag")
        self._reconsume_in(self.BEFORE_ATTRIBUTE_NAME)

    def _state_bogus_comment(self):
        c = self._get_char()
        if c == ">":
            self._emit_comment()
            self.state = self.DATA
        elif c is None:
            self._emit_comment()
            self._emit_eof()
        elif c == "\0":
            self._emit_error("unexpected-null-character")
            self.current_comment.append(_REPLACEMENT)
        else:
            self.current_comment.append(c)

    def _state_markup_declaration_open(self):
        if self._consume_if("--"):
            self.current_comment.clear()
            self.state = self.COMMENT_START
            return
        if self._consume_case_insensitive("DOCTYPE"):
            self.state = self.DOCTYPE
            return
        if self._consume_if("[CDATA["):
            if self.opts.cdata_sections:
                self.state = self.CDATA_SECTION
                return
            self._emit_error("cdata-in-html-content")
            self.current_comment.clear()
            self.current_comment.append("[CDATA[")
            self.state = self.BOGUS_COMMENT
            return
        self._emit_error("incorrectly-opened-comment")
        self.current_comment.clear()
        self.state = self.BOGUS_COMMENT

    def _state_comment_start(self):
        c = self._get_char()
        if c == "-":
            self.state = self.COMMENT_START_DASH
            return
        if c == ">":
            self._emit_error("abrupt-closing-of-empty-comment")
            self._emit_comment()
            self.state = self.DATA
            return
        self._reconsume_in(self.COMMENT)

    def _state_comment_start_dash(self):
        c = self._get_char()
        if c == "-":
            self.state = self.COMMENT_END
            return
        if c == ">":
            self._emit_error("abrupt-closing-of-empty-comment")
            self._emit_comment()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_comment()
            return
        self.current_comment.append("-")
        self._reconsume_in(self.COMMENT)

    def _state_comment(self):
        c = self._get_char()
        if c == "<":
            self.current_comment.append(c)
            self.state = self.COMMENT_LESS_THAN_SIGN
        elif c == "-":
            self.state = self.COMMENT_END_DASH
        elif c is None:
            self._eof_in_comment()
        elif c == "\0":
            self._emit_error("unexpected-null-character")
            self.current_comment.append(_REPLACEMENT)
        else:
            self.current_comment.append(c)

    def _state_comment_less_than_sign(self):
        c = self._get_char()
        if c == "!":
            self.current_comment.append(c)
            self.state = self.COMMENT_LESS_THAN_SIGN_BANG
        elif c == "<":
            self.current_comment.append(c)
        else:
            self._reconsume_in(self.COMMENT)

    def _state_comment_less_than_sign_bang(self):
        c = self._get_char()
        if c == "-":
            self.state = self.COMMENT_LESS_THAN_SIGN_BANG_DASH
        else:
            self._reconsume_in(self.COMMENT)

    def _state_comment_less_than_sign_bang_dash(self):
        c = self._get_char()
        if c == "-":
            self.state = self.COMMENT_LESS_THAN_SIGN_BANG_DASH_DASH
        else:
            self._reconsume_in(self.COMMENT_END_DASH)

    def _state_comment_less_than_sign_bang_dash_dash(self):
        c = self._get_char()
        if c != ">" and c is not None:
            self._emit_error("nested-comment")
        self._reconsume_in(self.COMMENT_END)

    def _state_comment_end_dash(self):
        c = self._get_char()
        if c == "-":
            self.state = self.COMMENT_END
            return
        if c is None:
            self._eof_in_comment()
            return
        self.current_comment.append("-")
        self._reconsume_in(self.COMMENT)

    def _state_comment_end(self):
        c = self._get_char()
        if c == ">":
            self._emit_comment()
            self.state = self.DATA
        elif c == "!":
            self.state = self.COMMENT_END_BANG
        elif c == "-":
            self.current_comment.append("-")
        elif c is None:
            self._eof_in_comment()
        else:
            self.current_comment.append("--")
            self._reconsume_in(self.COMMENT)

    def _state_comment_end_bang(self):
        c = self._get_char()
        if c == "-":
            self.current_comment.append("--!")
            self.state = self.COMMENT_END_DASH
        elif c == ">":
            self._emit_error("incorrectly-closed-comment")
            self._emit_comment()
            self.state = self.DATA
        elif c is None:
            self._eof_in_comment()
        else:
            self.current_comment.append("--!")
            self._reconsume_in(self.COMMENT)

    def _state_doctype(self):
        c = self._get_char()
        if c in _WHITESPACE:
            self.state = self.BEFORE_DOCTYPE_NAME
            return
        if c == ">":
            self._reconsume_in(self.BEFORE_DOCTYPE_NAME)
            return
        if c is None:
            self._start_doctype()
            self._eof_in_doctype()
            return
        self._emit_error("missing-whitespace-before-doctype-name")
        self._reconsume_in(self.BEFORE_DOCTYPE_NAME)

    def _state_before_doctype_name(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        self._start_doctype()
        if c == ">":
            self._emit_error("missing-doctype-name")
            self.current_doctype_force_quirks = True
            self._emit_doctype()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_doctype()
            return
        if c == "\0":
            self._emit_error("unexpected-null-character")
            c = _REPLACEMENT
        self.current_doctype_name = [_ascii_lower(c)]
        self.state = self.DOCTYPE_NAME

    def _state_doctype_name(self):
        c = self._get_char()
        if c in _WHITESPACE:
            self.state = self.AFTER_DOCTYPE_NAME
        elif c == ">":
            self._emit_doctype()
            self.state = self.DATA
        elif c is None:
            self._eof_in_doctype()
        elif c == "\0":
            self._emit_error("unexpected-null-character")
            self.current_doctype_name.append(_REPLACEMENT)
        else:
            self.current_doctype_name.append(_ascii_lower(c))

    def _state_after_doctype_name(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c == ">":
            self._emit_doctype()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_doctype()
            return
        # The keyword check includes the character just consumed.
        if self._consume_keyword("PUBLIC"):
            self.state = self.AFTER_DOCTYPE_PUBLIC_KEYWORD
            return
        if self._consume_keyword("SYSTEM"):
            self.state = self.AFTER_DOCTYPE_SYSTEM_KEYWORD
            return
        self._emit_error("invalid-character-sequence-after-doctype-name")
        self.current_doctype_force_quirks = True
        self._reconsume_in(self.BOGUS_DOCTYPE)

    def _state_after_doctype_keyword(self, public):
        keyword = "public" if public else "system"
        c = self._get_char()
        if c in _WHITESPACE:
            if public:
                self.state = self.BEFORE_DOCTYPE_PUBLIC_IDENTIFIER
            else:
                self.state = self.BEFORE_DOCTYPE_SYSTEM_IDENTIFIER
            return
        if c == '"' or c == "'":
            self._emit_error(f"missing-whitespace-after-doctype-{keyword}-keyword")
            self._open_doctype_identifier(c, public)
            return
        if c == ">":
            self._emit_error(f"missing-doctype-{keyword}-identifier")
            self.current_doctype_force_quirks = True
            self._emit_doctype()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_doctype()
            return
        self._emit_error(f"missing-quote-before-doctype-{keyword}-identifier")
        self.current_doctype_force_quirks = True
        self._reconsume_in(self.BOGUS_DOCTYPE)

    def _state_before_doctype_identifier(self, public):
        keyword = "public" if public else "system"
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c == '"' or c == "'":
            self._open_doctype_identifier(c, public)
            return
        if c == ">":
            self._emit_error(f"missing-doctype-{keyword}-identifier")
            self.current_doctype_force_quirks = True
            self._emit_doctype()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_doctype()
            return
        self._emit_error(f"missing-quote-before-doctype-{keyword}-identifier")
        self.current_doctype_force_quirks = True
        self._reconsume_in(self.BOGUS_DOCTYPE)

    def _state_doctype_identifier_quoted(self, quote, public):
        buffer = self.current_doctype_public if public else self.current_doctype_system
        c = self._get_char()
        if c == quote:
            if public:
                self.state = self.AFTER_DOCTYPE_PUBLIC_IDENTIFIER
            else:
                self.state = self.AFTER_DOCTYPE_SYSTEM_IDENTIFIER
            return
        if c == ">":
            self._emit_error("abrupt-doctype-public-identifier" if public else "abrupt-doctype-system-identifier")
            self.current_doctype_force_quirks = True
            self._emit_doctype()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_doctype()
            return
        if c == "\0":
            self._emit_error("unexpected-null-character")
            c = _REPLACEMENT
        buffer.append(c)

    def _state_after_doctype_public_identifier(self):
        c = self._get_char()
        if c in _WHITESPACE:
            self.state = self.BETWEEN_DOCTYPE_PUBLIC_AND_SYSTEM_IDENTIFIERS
            return
        if c == ">":
            self._emit_doctype()
            self.state = self.DATA
            return
        if c == '"' or c == "'":
            self._emit_error("missing-whitespace-between-doctype-public-and-system-identifiers")
            self._open_doctype_identifier(c, public=False)
            return
        if c is None:
            self._eof_in_doctype()
            return
        self._emit_error("missing-quote-before-doctype-system-identifier")
        self.current_doctype_force_quirks = True
        self._reconsume_in(self.BOGUS_DOCTYPE)

    def _state_between_doctype_public_and_system_identifiers(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c == ">":
            self._emit_doctype()
            self.state = self.DATA
            return
        if c == '"' or c == "'":
            self._open_doctype_identifier(c, public=False)
            return
        if c is None:
            self._eof_in_doctype()
            return
        self._emit_error("missing-quote-before-doctype-system-identifier")
        self.current_doctype_force_quirks = True
        self._reconsume_in(self.BOGUS_DOCTYPE)

    def _state_after_doctype_system_identifier(self):
        c = self._get_char()
        if c in _WHITESPACE:
            return
        if c == ">":
            self._emit_doctype()
            self.state = self.DATA
            return
        if c is None:
            self._eof_in_doctype()
            return
        # Trailing garbage does not force quirks mode here.
        self._emit_error("unexpected-character-after-doctype-system-identifier")
        self._reconsume_in(self.BOGUS_DOCTYPE)

    def _state_bogus_doctype(self):
        c = self._get_char()
        if c == ">":
            self._emit_doctype()
            self.state = self.DATA
        elif c is None:
            self.current_doctype_force_quirks = True
            self._emit_doctype()
            self._emit_eof()
        elif c == "\0":
            self._emit_error("unexpected-null-character")

    def _state_cdata_section(self):
        c = self._get_char()
        if c == "]":
            self.state = self.CDATA_SECTION_BRACKET
        elif c is None:
            self._emit_error("eof-in-cdata")
            self._emit_eof()
        elif c == "\0":
            self._emit_error("unexpected-null-character")
            self._emit_char(_REPLACEMENT)
        else:
            self._emit_char(c)

    def _state_cdata_section_bracket(self):
        c = self._get_char()
        if c == "]":
            self.state = self.CDATA_SECTION_END
            return
        self._emit_char("]")
        self._reconsume_in(self.CDATA_SECTION)

    def _state_cdata_section_end(self):
        c = self._get_char()
        if c == "]":
            self._emit_char("]")
            return
        if c == ">":
            self.state = self.DATA
            return
        self._emit_char("]")
        self._emit_char("]")
        self._reconsume_in(self.CDATA_SECTION)

    def _state_character_reference(self):
        return_state = self.return_state
        in_attribute = return_state != self.DATA
        value, end, errors = match_character_reference(self.buffer, self.pos, in_attribute)
        for code in errors:
            self._emit_error(code)
        if value is None:
            value = "&"
        else:
            self._advance(end - self.pos)
        if in_attribute:
            self.current_attr_value.append(value)
        else:
            for ch in value:
                self._emit_char(ch)
        self.state = return_state

    # ---------------------
    # Low-level helpers
    # ---------------------

    def _get_char(self):
        if self.reconsume:
            self.reconsume = False
            return self.current_char

        if self.pos >= self.length:
            self.current_char = None
            return None

        c = self.buffer[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        self.current_char = c
        return c

    def _reconsume_in(self, state):
        self.reconsume = True
        self.state = state

    def _advance(self, count):
        # Only used for lookahead literals, which never span a newline.
        self.pos += count
        self.column += count

    def _consume_if(self, literal):
        end = self.pos + len(literal)
        if end > self.length:
            return False
        if self.buffer[self.pos : end] != literal:
            return False
        self._advance(len(literal))
        return True

    def _consume_case_insensitive(self, literal):
        end = self.pos + len(literal)
        if end > self.length:
            return False
        if self.buffer[self.pos : end].translate(_ASCII_UPPER_TABLE) != literal:
            return False
        self._advance(len(literal))
        return True

    def _consume_keyword(self, keyword):
        # Matches ``keyword`` starting at the character most recently consumed.
        start = self.pos - 1
        end = start + len(keyword)
        if end > self.length:
            return False
        if self.buffer[start:end].translate(_ASCII_UPPER_TABLE) != keyword:
            return False
        self._advance(len(keyword) - 1)
        return True

    def _start_tag(self, kind):
        self.current_tag_kind = kind
        self.current_tag_name.clear()
        self.current_tag_attrs = []
        self.current_tag_self_closing = False
        self.current_attr_names.clear()
        self._start_attribute()

    def _start_attribute(self):
        self.current_attr_name.clear()
        self.current_attr_value.clear()
        self.current_attr_discard = False

    def _finish_attribute_name(self):
        name = "".join(self.current_attr_name)
        if name in self.current_attr_names:
            self._emit_error("duplicate-attribute")
            self.current_attr_discard = True

    def _finish_attribute(self):
        if self.current_attr_name and not self.current_attr_discard:
            name = "".join(self.current_attr_name)
            self.current_attr_names.add(name)
            self.current_tag_attrs.append(Attribute(name, "".join(self.current_attr_value)))
        self._start_attribute()

    def _emit_current_tag(self):
        self._finish_attribute()
        kind = self.current_tag_kind
        attrs = self.current_tag_attrs
        self_closing = self.current_tag_self_closing
        if kind == Tag.END:
            if attrs:
                self._emit_error("end-tag-with-attributes")
            if self_closing:
                self._emit_error("end-tag-with-trailing-solidus")
                self_closing = False
        name = sys.intern("".join(self.current_tag_name))
        self.current_tag_attrs = []
        self.current_tag_name.clear()
        self.current_tag_self_closing = False
        self._emit_token(Tag(kind, name, attrs, self_closing))

    def _eof_in_tag(self):
        self._emit_error("eof-in-tag")
        self._emit_current_tag()
        self._emit_eof()

    def _emit_comment(self):
        data = "".join(self.current_comment)
        self.current_comment.clear()
        self._emit_token(CommentToken(data))

    def _eof_in_comment(self):
        self._emit_error("eof-in-comment")
        self._emit_comment()
        self._emit_eof()

    def _start_doctype(self):
        self.current_doctype_name = None
        self.current_doctype_public = None
        self.current_doctype_system = None
        self.current_doctype_force_quirks = False

    def _open_doctype_identifier(self, quote, public):
        if public:
            self.current_doctype_public = []
            if quote == '"':
                self.state = self.DOCTYPE_PUBLIC_IDENTIFIER_DOUBLE_QUOTED
            else:
                self.state = self.DOCTYPE_PUBLIC_IDENTIFIER_SINGLE_QUOTED
        else:
            self.current_doctype_system = []
            if quote == '"':
                self.state = self.DOCTYPE_SYSTEM_IDENTIFIER_DOUBLE_QUOTED
            else:
                self.state = self.DOCTYPE_SYSTEM_IDENTIFIER_SINGLE_QUOTED

    def _emit_doctype(self):
        name = "".join(self.current_doctype_name) if self.current_doctype_name is not None else None
        public_id = "".join(self.current_doctype_public) if self.current_doctype_public is not None else None
        system_id = "".join(self.current_doctype_system) if self.current_doctype_system is not None else None
        doctype = Doctype(
            name=name, public_id=public_id, system_id=system_id, force_quirks=self.current_doctype_force_quirks,
        )
        self._start_doctype()
        self._emit_token(DoctypeToken(doctype))

    def _eof_in_doctype(self):
        self._emit_error("eof-in-doctype")
        self.current_doctype_force_quirks = True
        self._emit_doctype()
        self._emit_eof()

    def _emit_char(self, c):
        self._emit_token(CharacterToken(c))

    def _emit_eof(self):
        self._emit_token(EOFToken())
        self.state = self.EOF

    def _emit_token(self, token):
        if self.env_debug:
            self.debug(f"emit {token!r}", indent=2)
        self._tokens.append(token)

    def _emit_error(self, code):
        if not self.collect_errors and not self.opts.exact_errors:
            return
        error = ParseError(code, line=self.line, column=self.column, message=generate_error_message(code))
        if self.collect_errors:
            self.errors.append(error)
        if self.opts.exact_errors:
            self._emit_token(error)
        if self.strict:
            raise StrictModeError(error)


_STATE_NAMES = {
    value: name for name, value in vars(Tokenizer).items() if name.isupper() and isinstance(value, int)
}


def state_name(state):
    """Return the constant name of a tokenizer state, for diagnostics."""
    return _STATE_NAMES.get(state, f"<unknown state {state!r}>")
