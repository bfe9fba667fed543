"""Naive markup serialization of token sequences."""

from .tokens import CharacterToken, CommentToken, DoctypeToken, EOFToken, ParseError, Tag


def _escape_text(text):
    return text.replace("&", "&amp;").replace("<", "&lt;")


def _escape_attr(value):
    return value.replace("&", "&amp;").replace('"', "&quot;")


def _tag_to_html(tag):
    if tag.kind == Tag.END:
        return f"</{tag.name}>"
    parts = [f"<{tag.name}"]
    for attr in tag.attrs:
        if attr.value == "":
            parts.append(f" {attr.name}")
        else:
            parts.append(f' {attr.name}="{_escape_attr(attr.value)}"')
    parts.append("/>" if tag.self_closing else ">")
    return "".join(parts)


def _quote_identifier(identifier):
    # Identifiers cannot be escaped, so pick the quote they do not contain.
    if '"' in identifier:
        return f"'{identifier}'"
    return f'"{identifier}"'


def _doctype_to_html(doctype):
    parts = ["<!DOCTYPE"]
    if doctype.name:
        parts.append(f" {doctype.name}")
    if doctype.public_id is not None:
        parts.append(f" PUBLIC {_quote_identifier(doctype.public_id)}")
        if doctype.system_id is not None:
            parts.append(f" {_quote_identifier(doctype.system_id)}")
    elif doctype.system_id is not None:
        parts.append(f" SYSTEM {_quote_identifier(doctype.system_id)}")
    parts.append(">")
    return "".join(parts)


def token_to_html(token):
    """Serialize a single token. End-of-input and parse errors serialize to ''."""
    if isinstance(token, CharacterToken):
        return _escape_text(token.data)
    if isinstance(token, Tag):
        return _tag_to_html(token)
    if isinstance(token, CommentToken):
        return f"<!--{token.data}-->"
    if isinstance(token, DoctypeToken):
        return _doctype_to_html(token.doctype)
    if isinstance(token, (EOFToken, ParseError)):
        return ""
    msg = f"Cannot serialize {token!r}"
    raise TypeError(msg)


def to_html(tokens):
    """Reconstruct markup from a token sequence.

    Tags are written as ``<name attr="value">``, so well-formed input with
    quoted attributes tokenizes back to an equivalent sequence.
    """
    return "".join(token_to_html(token) for token in tokens)
