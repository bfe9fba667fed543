"""Tests for the tokenizer state machine."""

import contextlib
import io
import unittest

from lexhtml import (
    Attribute,
    CharacterToken,
    CommentToken,
    Doctype,
    DoctypeToken,
    EOFToken,
    ParseError,
    StrictModeError,
    Tag,
    Tokenizer,
    TokenizerInvariantError,
    TokenizerOpts,
    tokenize,
)
from lexhtml.tokenizer import state_name


def _tokens(html, opts=None):
    return list(tokenize(html, opts))


def _codes(html, opts=None):
    stream = tokenize(html, opts, collect_errors=True)
    list(stream)
    return [error.code for error in stream.errors]


def _text(tokens):
    return "".join(token.data for token in tokens if isinstance(token, CharacterToken))


def _chars(text):
    return [CharacterToken(c) for c in text]


class TestTags(unittest.TestCase):
    def test_text_and_nested_tags(self):
        tokens = _tokens("<p>a<b>c</b></p>")
        assert tokens == [
            Tag(Tag.START, "p"),
            CharacterToken("a"),
            Tag(Tag.START, "b"),
            CharacterToken("c"),
            Tag(Tag.END, "b"),
            Tag(Tag.END, "p"),
            EOFToken(),
        ]

    def test_names_are_lowercased(self):
        tokens = _tokens('<DIV ID="x" Class=y></DiV>')
        assert tokens[0] == Tag(Tag.START, "div", [Attribute("id", "x"), Attribute("class", "y")])
        assert tokens[1] == Tag(Tag.END, "div")

    def test_only_ascii_letters_are_lowercased(self):
        tokens = _tokens("<\u00c9A>")
        assert tokens[0] == CharacterToken("<")
        tokens = _tokens("<A\u00c9>")
        assert tokens[0].name == "a\u00c9"

    def test_self_closing(self):
        assert _tokens("<br/>")[0] == Tag(Tag.START, "br", self_closing=True)
        assert _tokens("<br>")[0] == Tag(Tag.START, "br", self_closing=False)
        assert _tokens('<img src="x" />')[0] == Tag(Tag.START, "img", [Attribute("src", "x")], True)

    def test_duplicate_attribute_first_wins(self):
        tokens = _tokens("<input id=1 id=2>")
        assert tokens[0].attrs == [Attribute("id", "1")]
        assert _codes("<input id=1 id=2>") == ["duplicate-attribute"]

    def test_duplicate_attribute_is_case_insensitive(self):
        tokens = _tokens('<a HREF="one" href="two" hReF=three>')
        assert tokens[0].attrs == [Attribute("href", "one")]

    def test_attribute_forms(self):
        tag = _tokens("<a b c=\"1\" d='2' e=3 f = 4>")[0]
        assert tag.attrs == [
            Attribute("b", ""),
            Attribute("c", "1"),
            Attribute("d", "2"),
            Attribute("e", "3"),
            Attribute("f", "4"),
        ]
        assert tag.get("d") == "2"
        assert tag.get("missing", "default") == "default"

    def test_empty_quoted_attribute_value(self):
        assert _tokens('<a b="">')[0].attrs == [Attribute("b", "")]

    def test_attribute_value_keeps_case(self):
        assert _tokens('<a title="Hello World">')[0].get("title") == "Hello World"

    def test_unquoted_value_with_illegal_characters(self):
        tag = _tokens("<a href=x<y>")[0]
        assert tag.attrs == [Attribute("href", "x<y")]
        assert _codes("<a href=x<y>") == ["unexpected-character-in-unquoted-attribute-value"]

    def test_unexpected_character_in_attribute_name(self):
        tag = _tokens('<a b"c=1>')[0]
        assert tag.attrs == [Attribute('b"c', "1")]
        assert _codes('<a b"c=1>') == ["unexpected-character-in-attribute-name"]

    def test_equals_sign_before_attribute_name(self):
        tag = _tokens("<a =x>")[0]
        assert tag.attrs == [Attribute("=x", "")]
        assert _codes("<a =x>") == ["unexpected-equals-sign-before-attribute-name"]

    def test_missing_attribute_value(self):
        tag = _tokens("<a b=>")[0]
        assert tag.attrs == [Attribute("b", "")]
        assert _codes("<a b=>") == ["missing-attribute-value"]

    def test_missing_whitespace_between_attributes(self):
        tag = _tokens('<a b="1"c="2">')[0]
        assert tag.attrs == [Attribute("b", "1"), Attribute("c", "2")]
        assert _codes('<a b="1"c="2">') == ["missing-whitespace-between-attributes"]

    def test_solidus_inside_tag(self):
        tag = _tokens("<a x/y>")[0]
        assert tag.attrs == [Attribute("x", ""), Attribute("y", "")]
        assert not tag.self_closing
        assert _codes("<a x/y>") == ["unexpected-solidus-in-tag"]

    def test_end_tag_with_attributes(self):
        tokens = _tokens('</p class="x">')
        assert tokens[0] == Tag(Tag.END, "p", [Attribute("class", "x")])
        assert _codes('</p class="x">') == ["end-tag-with-attributes"]

    def test_end_tag_with_trailing_solidus(self):
        tag = _tokens("</br/>")[0]
        assert tag.kind == Tag.END
        assert tag.name == "br"
        assert tag.self_closing is False
        assert _codes("</br/>") == ["end-tag-with-trailing-solidus"]

    def test_invalid_first_character_of_tag_name(self):
        tokens = _tokens("a < b")
        assert _text(tokens) == "a < b"
        assert _codes("a < b") == ["invalid-first-character-of-tag-name"]

    def test_empty_end_tag_is_dropped(self):
        assert _tokens("a</>b") == _chars("ab") + [EOFToken()]
        assert _codes("</>") == ["missing-end-tag-name"]

    def test_end_tag_with_invalid_name_becomes_comment(self):
        assert _tokens("</ x>") == [CommentToken(" x"), EOFToken()]

    def test_question_mark_becomes_comment(self):
        tokens = _tokens('<?xml version="1.0"?>')
        assert tokens == [CommentToken('?xml version="1.0"?'), EOFToken()]
        assert _codes("<?x>") == ["unexpected-question-mark-instead-of-tag-name"]

    def test_null_in_tag_and_attribute_names(self):
        tag = _tokens('<a\x00 b\x00="c\x00">')[0]
        assert tag.name == "a\ufffd"
        assert tag.attrs == [Attribute("b\ufffd", "c\ufffd")]

    def test_emitted_tags_are_independent(self):
        tokens = _tokens('<a x="1"><b y="2">')
        assert tokens[0].attrs == [Attribute("x", "1")]
        assert tokens[1].attrs == [Attribute("y", "2")]
        assert tokens[0].attrs is not tokens[1].attrs


class TestEndOfInput(unittest.TestCase):
    def test_empty_input(self):
        assert _tokens("") == [EOFToken()]

    def test_eof_in_tag_name(self):
        assert _tokens("<div") == [Tag(Tag.START, "div"), EOFToken()]
        assert _codes("<div") == ["eof-in-tag"]

    def test_eof_in_attribute_value(self):
        tokens = _tokens('<div class="a')
        assert tokens == [Tag(Tag.START, "div", [Attribute("class", "a")]), EOFToken()]

    def test_eof_after_attribute_name(self):
        assert _tokens("<a b") == [Tag(Tag.START, "a", [Attribute("b", "")]), EOFToken()]

    def test_eof_in_self_closing_tag(self):
        assert _tokens("<br/") == [Tag(Tag.START, "br"), EOFToken()]

    def test_eof_in_end_tag(self):
        assert _tokens("</p") == [Tag(Tag.END, "p"), EOFToken()]

    def test_eof_before_tag_name(self):
        assert _tokens("<") == [CharacterToken("<"), EOFToken()]
        assert _tokens("</") == [CharacterToken("<"), CharacterToken("/"), EOFToken()]
        assert _codes("<") == ["eof-before-tag-name"]

    def test_eof_in_bogus_comment(self):
        assert _tokens("<!x") == [CommentToken("x"), EOFToken()]

    def test_single_eof_token_for_malformed_input(self):
        samples = [
            "<", "</", "<!", "<!-", "<!--", "<!---", "<!-- a -", "<!DOCTYPE",
            "<!DOCTYPE html PUBLIC \"x", "<![CDATA[", "<a b='", "&", "&#", "&#x",
            "<a/", "<a =", "</a b", "<?", "<!--<!--", "<!DOCTYPE html SYSTEM 'x' y",
        ]
        for html in samples:
            tokens = _tokens(html)
            assert isinstance(tokens[-1], EOFToken), html
            assert sum(isinstance(token, EOFToken) for token in tokens) == 1, html


class TestComments(unittest.TestCase):
    def test_simple_comment(self):
        assert _tokens("<!-- hi -->") == [CommentToken(" hi "), EOFToken()]

    def test_empty_comments(self):
        assert _tokens("<!---->")[0] == CommentToken("")
        assert _tokens("<!-->")[0] == CommentToken("")
        assert _tokens("<!--->")[0] == CommentToken("")
        assert _codes("<!-->") == ["abrupt-closing-of-empty-comment"]

    def test_dashes_inside_comment(self):
        assert _tokens("<!--a-b--c-->")[0] == CommentToken("a-b--c")
        assert _tokens("<!--a--->")[0] == CommentToken("a-")

    def test_incorrectly_closed_comment(self):
        assert _tokens("<!--a--!>")[0] == CommentToken("a")
        assert _codes("<!--a--!>") == ["incorrectly-closed-comment"]

    def test_bang_inside_comment_end(self):
        assert _tokens("<!--a--!b-->")[0] == CommentToken("a--!b")

    def test_nested_comment(self):
        assert _tokens("<!--<!--x-->")[0] == CommentToken("<!--x")
        assert _codes("<!--<!--x-->") == ["nested-comment"]

    def test_less_than_signs_in_comment(self):
        assert _tokens("<!--a<<b-->")[0] == CommentToken("a<<b")
        assert _tokens("<!--<!-->")[0] == CommentToken("<!")

    def test_eof_in_comment(self):
        assert _tokens("<!-- a") == [CommentToken(" a"), EOFToken()]
        assert _codes("<!-- a") == ["eof-in-comment"]

    def test_incorrectly_opened_comment(self):
        assert _tokens("<!foo>") == [CommentToken("foo"), EOFToken()]
        assert _codes("<!foo>") == ["incorrectly-opened-comment"]

    def test_null_in_comment(self):
        assert _tokens("<!--\x00-->")[0] == CommentToken("\ufffd")


class TestDoctype(unittest.TestCase):
    def _doctype(self, html):
        tokens = _tokens(html)
        assert isinstance(tokens[0], DoctypeToken)
        return tokens[0].doctype

    def test_minimal(self):
        assert self._doctype("<!DOCTYPE html>") == Doctype("html", None, None, False)

    def test_case_insensitive_keyword_and_name(self):
        assert self._doctype("<!doctype HTML>") == Doctype("html")
        assert self._doctype("<!DoCtYpE html>") == Doctype("html")

    def test_public_and_system_identifiers(self):
        doctype = self._doctype(
            '<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN" "http://www.w3.org/TR/html4/strict.dtd">'
        )
        assert doctype == Doctype(
            "html",
            "-//W3C//DTD HTML 4.01//EN",
            "http://www.w3.org/TR/html4/strict.dtd",
            False,
        )

    def test_system_identifier_only(self):
        assert self._doctype("<!DOCTYPE html SYSTEM 'about:legacy-compat'>") == Doctype(
            "html", None, "about:legacy-compat"
        )

    def test_lowercase_keywords(self):
        assert self._doctype('<!DOCTYPE html public "a" "b">') == Doctype("html", "a", "b")

    def test_empty_identifiers(self):
        assert self._doctype('<!DOCTYPE html PUBLIC "" "">') == Doctype("html", "", "")

    def test_missing_name(self):
        assert self._doctype("<!DOCTYPE>") == Doctype(None, None, None, True)
        assert _codes("<!DOCTYPE>") == ["missing-doctype-name"]

    def test_missing_whitespace_before_name(self):
        assert self._doctype("<!DOCTYPEhtml>") == Doctype("html")
        assert _codes("<!DOCTYPEhtml>") == ["missing-whitespace-before-doctype-name"]

    def test_missing_public_identifier(self):
        assert self._doctype("<!DOCTYPE html PUBLIC>") == Doctype("html", None, None, True)
        assert _codes("<!DOCTYPE html PUBLIC>") == ["missing-doctype-public-identifier"]

    def test_missing_whitespace_after_keyword(self):
        assert self._doctype('<!DOCTYPE html PUBLIC"x">') == Doctype("html", "x")
        assert _codes('<!DOCTYPE html PUBLIC"x">') == ["missing-whitespace-after-doctype-public-keyword"]
        assert self._doctype("<!DOCTYPE html SYSTEM'y'>") == Doctype("html", None, "y")

    def test_missing_quote_forces_quirks(self):
        assert self._doctype("<!DOCTYPE html PUBLIC x>") == Doctype("html", None, None, True)

    def test_unknown_keyword_is_bogus(self):
        tokens = _tokens("<!DOCTYPE html foo>bar")
        assert tokens[0] == DoctypeToken(Doctype("html", force_quirks=True))
        assert _text(tokens) == "bar"
        assert _codes("<!DOCTYPE html foo>") == ["invalid-character-sequence-after-doctype-name"]

    def test_abrupt_identifier(self):
        assert self._doctype('<!DOCTYPE html PUBLIC "abc>') == Doctype("html", "abc", None, True)
        assert self._doctype("<!DOCTYPE html SYSTEM 'abc>") == Doctype("html", None, "abc", True)

    def test_missing_whitespace_between_identifiers(self):
        assert self._doctype('<!DOCTYPE html PUBLIC "a""b">') == Doctype("html", "a", "b")
        assert _codes('<!DOCTYPE html PUBLIC "a""b">') == [
            "missing-whitespace-between-doctype-public-and-system-identifiers"
        ]

    def test_garbage_after_system_identifier_keeps_standards_mode(self):
        assert self._doctype('<!DOCTYPE html SYSTEM "x" junk>') == Doctype("html", None, "x", False)
        assert _codes('<!DOCTYPE html SYSTEM "x" junk>') == ["unexpected-character-after-doctype-system-identifier"]

    def test_eof_in_doctype_forces_quirks(self):
        assert _tokens("<!DOCTYPE html") == [DoctypeToken(Doctype("html", force_quirks=True)), EOFToken()]
        assert _tokens("<!DOCTYPE") == [DoctypeToken(Doctype(force_quirks=True)), EOFToken()]
        assert self._doctype('<!DOCTYPE html PUBLIC "a') == Doctype("html", "a", None, True)
        assert self._doctype('<!DOCTYPE html SYSTEM "x" junk') == Doctype("html", None, "x", True)
        assert _codes("<!DOCTYPE html") == ["eof-in-doctype"]


class TestCharacterData(unittest.TestCase):
    def test_one_token_per_character(self):
        assert _tokens("ab") == [CharacterToken("a"), CharacterToken("b"), EOFToken()]

    def test_null_replaced(self):
        assert _tokens("a\x00b") == _chars("a\ufffdb") + [EOFToken()]
        assert _codes("a\x00b") == ["unexpected-null-character"]

    def test_newlines_normalized(self):
        assert _text(_tokens("a\r\nb\rc\n")) == "a\nb\nc\n"

    def test_byte_order_mark(self):
        assert _tokens("\ufeffa") == [CharacterToken("a"), EOFToken()]
        assert _text(_tokens("\ufeffa", TokenizerOpts(discard_bom=False))) == "\ufeffa"
        assert _text(_tokens("a\ufeff")) == "a\ufeff"

    def test_stray_greater_than(self):
        assert _text(_tokens("a>b")) == "a>b"

    def test_cdata_section(self):
        assert _tokens("<![CDATA[a<b]]>") == _chars("a<b") + [EOFToken()]

    def test_cdata_brackets(self):
        assert _text(_tokens("<![CDATA[x]y]]]>")) == "x]y]"
        assert _text(_tokens("<![CDATA[x]]y]]>")) == "x]]y"

    def test_null_in_cdata_replaced(self):
        html = "<![CDATA[a\x00b]]>"
        assert _tokens(html) == _chars("a\ufffdb") + [EOFToken()]
        assert _codes(html) == ["unexpected-null-character"]

    def test_eof_in_cdata(self):
        assert _tokens("<![CDATA[ab") == _chars("ab") + [EOFToken()]
        assert _codes("<![CDATA[ab") == ["eof-in-cdata"]

    def test_cdata_as_bogus_comment(self):
        opts = TokenizerOpts(cdata_sections=False)
        assert _tokens("<![CDATA[a<b]]>", opts) == [CommentToken("[CDATA[a<b]]"), EOFToken()]
        assert _codes("<![CDATA[x]]>", opts) == ["cdata-in-html-content"]

    def test_lowercase_cdata_is_bogus_comment(self):
        assert _tokens("<![cdata[x]]>") == [CommentToken("[cdata[x]]"), EOFToken()]


class TestCharacterReferences(unittest.TestCase):
    def test_numeric(self):
        assert _tokens("&#65;") == [CharacterToken("A"), EOFToken()]
        assert _tokens("&#x41;") == [CharacterToken("A"), EOFToken()]
        assert _tokens("&#X41;") == [CharacterToken("A"), EOFToken()]

    def test_named(self):
        assert _tokens("&amp;") == [CharacterToken("&"), EOFToken()]
        assert _text(_tokens("a &lt; b")) == "a < b"

    def test_named_with_two_code_points(self):
        assert _tokens("&NotEqualTilde;") == _chars("\u2242\u0338") + [EOFToken()]

    def test_legacy_without_semicolon(self):
        assert _text(_tokens("&ampx")) == "&x"
        assert _text(_tokens("&notit;")) == "\u00acit;"
        assert _codes("&amp") == ["missing-semicolon-after-character-reference"]

    def test_unmatched_ampersand(self):
        assert _text(_tokens("a & b")) == "a & b"
        assert _text(_tokens("&")) == "&"
        assert _text(_tokens("&foo;")) == "&foo;"
        assert _codes("&foo;") == ["unknown-named-character-reference"]
        assert _codes("a & b") == []

    def test_numeric_without_digits(self):
        assert _text(_tokens("&#;")) == "&#;"
        assert _text(_tokens("&#xg")) == "&#xg"
        assert _codes("&#;") == ["absence-of-digits-in-numeric-character-reference"]

    def test_numeric_replacements(self):
        assert _text(_tokens("&#0;")) == "\ufffd"
        assert _text(_tokens("&#128;")) == "\u20ac"
        assert _text(_tokens("&#xD800;")) == "\ufffd"
        assert _text(_tokens("&#x110000;")) == "\ufffd"
        assert _codes("&#128;") == ["control-character-reference"]

    def test_reference_followed_by_markup(self):
        tokens = _tokens("&lt;<b>")
        assert tokens == [CharacterToken("<"), Tag(Tag.START, "b"), EOFToken()]

    def test_reference_in_attribute_values(self):
        assert _tokens('<a title="&copy;">')[0].get("title") == "\u00a9"
        assert _tokens("<a title='x&amp;y'>")[0].get("title") == "x&y"
        assert _tokens("<a title=&lt;>")[0].get("title") == "<"

    def test_ambiguous_ampersand_in_attribute(self):
        assert _tokens('<a href="?a=1&copy=2">')[0].get("href") == "?a=1&copy=2"
        assert _tokens('<a href="&copy2">')[0].get("href") == "&copy2"
        assert _tokens('<a href="&copy">')[0].get("href") == "\u00a9"
        assert _tokens('<a href="&foo">')[0].get("href") == "&foo"


class TestErrorsAndOptions(unittest.TestCase):
    def test_no_errors_by_default(self):
        stream = tokenize("a\x00")
        list(stream)
        assert stream.errors == []

    def test_error_positions(self):
        stream = tokenize("ab\n\x00", collect_errors=True)
        list(stream)
        assert stream.errors == [ParseError("unexpected-null-character", line=2, column=1)]
        assert stream.errors[0].message == "Unexpected NULL character (U+0000)"

    def test_well_formed_markup_has_no_errors(self):
        html = '<!DOCTYPE html><html lang="en"><body><p class=x>Hi &amp; bye</p><!-- c --></body></html>'
        assert _codes(html) == []

    def test_exact_errors_in_stream(self):
        tokens = _tokens("\x00", TokenizerOpts(exact_errors=True))
        assert tokens == [
            ParseError("unexpected-null-character", line=1, column=1),
            CharacterToken("\ufffd"),
            EOFToken(),
        ]

    def test_strict_mode_raises(self):
        with self.assertRaises(StrictModeError) as cm:
            list(tokenize("<p>\x00</p>", strict=True))
        assert cm.exception.error.code == "unexpected-null-character"
        assert cm.exception.lineno == 1
        assert isinstance(cm.exception, SyntaxError)

    def test_strict_mode_passes_clean_markup(self):
        tokens = list(tokenize("<p>ok</p>", strict=True))
        assert tokens[-1] == EOFToken()

    def test_debug_output(self):
        buffer = io.StringIO()
        with contextlib.redirect_stderr(buffer):
            _tokens("<p>", TokenizerOpts(debug=True))
        output = buffer.getvalue()
        assert "DATA -> TAG_OPEN" in output
        assert "emit <start:p>" in output

    def test_debug_off_is_silent(self):
        buffer = io.StringIO()
        with contextlib.redirect_stderr(buffer):
            _tokens("<p>")
        assert buffer.getvalue() == ""


class TestStep(unittest.TestCase):
    def test_step_performs_one_transition(self):
        tokenizer = Tokenizer("<p>")
        queue = []
        tokenizer.step(queue)
        assert tokenizer.state == Tokenizer.TAG_OPEN
        assert queue == []
        tokenizer.step(queue)
        assert tokenizer.state == Tokenizer.TAG_NAME
        tokenizer.step(queue)
        tokenizer.step(queue)
        assert queue == [Tag(Tag.START, "p")]
        assert tokenizer.state == Tokenizer.DATA

    def test_step_after_eof_raises(self):
        tokenizer = Tokenizer("")
        queue = []
        tokenizer.step(queue)
        assert queue == [EOFToken()]
        assert tokenizer.finished
        with self.assertRaises(TokenizerInvariantError):
            tokenizer.step(queue)

    def test_unknown_state_raises(self):
        tokenizer = Tokenizer("x")
        tokenizer.state = 999
        with self.assertRaises(TokenizerInvariantError):
            tokenizer.step([])

    def test_state_names(self):
        assert state_name(Tokenizer.DATA) == "DATA"
        assert state_name(Tokenizer.CHARACTER_REFERENCE) == "CHARACTER_REFERENCE"
        assert state_name(-1) == "<unknown state -1>"


if __name__ == "__main__":
    unittest.main()
