from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any

from .tokenizer import Tokenizer, TokenizerOpts

if TYPE_CHECKING:
    from .tokens import ParseError


class TokenStream:
    """Pull-based iterator over the tokens of one input string.

    The stream owns the tokenizer and its output queue. Each pull steps the
    tokenizer until at least one token is queued or the input is exhausted,
    then hands out a single token. The sequence ends with exactly one
    ``EOFToken``; pulling after that raises ``StopIteration``. A stream cannot
    be restarted.
    """

    __slots__ = ("_queue", "tokenizer")

    def __init__(
        self,
        html: str,
        opts: TokenizerOpts | None = None,
        *,
        collect_errors: bool = False,
        strict: bool = False,
    ) -> None:
        self.tokenizer = Tokenizer(html, opts, collect_errors=collect_errors, strict=strict)
        self._queue: deque[Any] = deque()

    @property
    def errors(self) -> list[ParseError]:
        return self.tokenizer.errors

    def __iter__(self) -> TokenStream:
        return self

    def __next__(self) -> Any:
        queue = self._queue
        tokenizer = self.tokenizer
        while not queue and not tokenizer.finished:
            tokenizer.step(queue)
        if queue:
            return queue.popleft()
        raise StopIteration


def tokenize(
    html: str,
    opts: TokenizerOpts | None = None,
    *,
    collect_errors: bool = False,
    strict: bool = False,
) -> TokenStream:
    """Tokenize ``html`` lazily. See ``TokenStream``."""
    return TokenStream(html, opts, collect_errors=collect_errors, strict=strict)
