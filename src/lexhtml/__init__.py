from .arena import Arena
from .entities import decode_entities_in_text, match_character_reference
from .errors import StrictModeError, TokenizerInvariantError
from .serialize import to_html
from .stream import TokenStream, tokenize
from .tokenizer import Tokenizer, TokenizerOpts
from .tokens import (
    Attribute,
    CharacterToken,
    CommentToken,
    Doctype,
    DoctypeToken,
    EOFToken,
    ParseError,
    Tag,
)

__all__ = [
    "Arena",
    "Attribute",
    "CharacterToken",
    "CommentToken",
    "Doctype",
    "DoctypeToken",
    "EOFToken",
    "ParseError",
    "StrictModeError",
    "Tag",
    "TokenStream",
    "Tokenizer",
    "TokenizerInvariantError",
    "TokenizerOpts",
    "decode_entities_in_text",
    "match_character_reference",
    "to_html",
    "tokenize",
]
