# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Low-level token emission.

:class:`StreamBuilder` appends tokens one at a time. The higher-level
generator and the renderer are both written on top of it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from derivekit.errors import LexerError, MalformedFragment
from derivekit.model.tokens import (
    CALL_SITE,
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    Spacing,
    Span,
    TokenTree,
    with_span,
)
from derivekit.parser.lexer import tokenize

# ###############
# Public Interface
# ###############


class StreamBuilder:
    """Accumulates a token sequence. Every emitting method returns the builder itself."""

    def __init__(self) -> None:
        self._tokens: list[TokenTree] = []

    @property
    def tokens(self) -> list[TokenTree]:
        """Return a copy of the tokens emitted so far."""
        return list(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def extend(self, tokens: Iterable[TokenTree]) -> StreamBuilder:
        self._tokens.extend(tokens)
        return self

    def ident(self, name: str | Ident) -> StreamBuilder:
        """Emit an identifier. Plain strings are checked to be a single identifier."""
        self._tokens.append(name if isinstance(name, Ident) else parse_ident(name))
        return self

    def punct(self, char: str) -> StreamBuilder:
        self._tokens.append(Punct(char))
        return self

    def puncts(self, chars: str) -> StreamBuilder:
        """Emit a multi-character operator such as ``->`` or ``::`` as joint puncts."""
        for index, char in enumerate(chars):
            spacing = Spacing.JOINT if index < len(chars) - 1 else Spacing.ALONE
            self._tokens.append(Punct(char, spacing))
        return self

    def lifetime(self, name: str) -> StreamBuilder:
        """Emit ``'name``. The name is given without the quote."""
        self._tokens.append(Punct("'", Spacing.JOINT))
        return self.ident(name)

    def lit_str(self, value: str) -> StreamBuilder:
        self._tokens.append(Literal.string(value))
        return self

    def lit_int(self, value: int) -> StreamBuilder:
        self._tokens.append(Literal.integer(value))
        return self

    def group(self, delimiter: Delimiter, tokens: Sequence[TokenTree] = ()) -> StreamBuilder:
        """Emit a group around a ready-made token sequence."""
        self._tokens.append(Group(delimiter, tuple(tokens)))
        return self

    def group_with(self, delimiter: Delimiter, build: Callable[[StreamBuilder], object]) -> StreamBuilder:
        """Emit a group whose contents are produced by *build* on a fresh builder."""
        inner = StreamBuilder()
        build(inner)
        self._tokens.append(Group(delimiter, tuple(inner._tokens)))
        return self

    def push_parsed(self, code: str) -> StreamBuilder:
        """Lex *code* and append its tokens.

        Raises:
            MalformedFragment: If *code* is not a balanced token sequence.
        """
        self._tokens.extend(parse_fragment(code))
        return self

    def set_span_on_all_tokens(self, span: Span) -> StreamBuilder:
        """Replace the span of every token, nested ones included, with *span*."""
        self._tokens = respan(self._tokens, span)
        return self


def parse_fragment(code: str) -> list[TokenTree]:
    """Lex a raw code fragment into call-site tokens.

    Raises:
        MalformedFragment: If the fragment cannot be lexed, e.g. because its
            delimiters are unbalanced.
    """
    try:
        tokens = tokenize(code)
    except LexerError as exc:
        raise MalformedFragment(f"Malformed code fragment {code!r}: {exc.message}", code) from exc
    return respan(tokens, CALL_SITE)


def parse_ident(name: str) -> Ident:
    """Turn *name* into an identifier token.

    Raises:
        MalformedFragment: If *name* is not exactly one identifier.
    """
    tokens = parse_fragment(name)
    if len(tokens) != 1 or not isinstance(tokens[0], Ident):
        raise MalformedFragment(f"Expected an identifier, got {name!r}", name)
    return tokens[0]


def fragment(value: str | Sequence[TokenTree]) -> list[TokenTree]:
    """Accept either source text or ready-made tokens. Text is lexed with :func:`parse_fragment`."""
    if isinstance(value, str):
        return parse_fragment(value)
    return list(value)


def respan(tokens: Iterable[TokenTree], span: Span) -> list[TokenTree]:
    """Return copies of *tokens* carrying *span*, recursing into groups."""
    result: list[TokenTree] = []
    for token in tokens:
        if isinstance(token, Group):
            result.append(Group(token.delimiter, tuple(respan(token.tokens, span)), span))
        else:
            result.append(with_span(token, span))
    return result
