# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Token tree representation shared by the lexer, parser and generator.

A token sequence is a flat list of token trees. Nested regions delimited by
parentheses, brackets or braces are represented by a single :class:`Group`
token, so a sequence is balanced by construction.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Span:
    """A source location attached to tokens and errors.

    Spans are only used for diagnostics. Tokens never compare on their span.

    Attributes:
        line: 1-based line number, or 0 for synthesized tokens.
        column: 1-based column number, or 0 for synthesized tokens.
    """

    line: int
    column: int

    @property
    def is_call_site(self) -> bool:
        """Return True if this span does not point into any source text."""
        return self.line == 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


# Location used for every token the generator synthesizes.
CALL_SITE = Span(0, 0)


class Delimiter(enum.Enum):
    """The delimiter pair enclosing a :class:`Group`."""

    PARENTHESIS = "()"
    BRACKET = "[]"
    BRACE = "{}"
    NONE = ""

    @property
    def open(self) -> str:
        return self.value[:1]

    @property
    def close(self) -> str:
        return self.value[1:]


class Spacing(enum.Enum):
    """Whether a punct is immediately followed by another punct character."""

    ALONE = "alone"
    JOINT = "joint"


@dataclass(frozen=True)
class Ident:
    """An identifier or keyword, e.g. ``struct``, ``Foo`` or ``self``."""

    name: str
    span: Span = field(default=CALL_SITE, compare=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Punct:
    """A single punctuation character.

    Multi-character operators such as ``->``, ``::`` or ``>>`` are sequences of
    puncts where every character but the last has :attr:`Spacing.JOINT`.
    """

    char: str
    spacing: Spacing = Spacing.ALONE
    span: Span = field(default=CALL_SITE, compare=False)

    @property
    def is_joint(self) -> bool:
        return self.spacing == Spacing.JOINT

    def __str__(self) -> str:
        return self.char


@dataclass(frozen=True)
class Literal:
    """A literal token kept in its source form, e.g. ``5u8`` or ``"hi"``."""

    text: str
    span: Span = field(default=CALL_SITE, compare=False)

    @classmethod
    def string(cls, value: str, span: Span = CALL_SITE) -> Literal:
        """Create a double-quoted string literal with the required escapes."""
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
        return cls(f'"{escaped}"', span)

    @classmethod
    def integer(cls, value: int, span: Span = CALL_SITE) -> Literal:
        """Create an unsuffixed integer literal."""
        return cls(str(value), span)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Group:
    """A delimited, nested token sequence."""

    delimiter: Delimiter
    tokens: tuple[TokenTree, ...] = ()
    span: Span = field(default=CALL_SITE, compare=False)

    def __str__(self) -> str:
        return to_source([self])


TokenTree = Ident | Punct | Literal | Group

PUNCT_CHARS = frozenset("=<>!~+-*/%^&|@.,;:#$?'")


def span_of(token: TokenTree | None, fallback: Span = CALL_SITE) -> Span:
    """Return the span of *token*, or *fallback* when there is no token."""
    if token is None:
        return fallback
    return token.span


def is_punct(token: TokenTree | None, char: str) -> bool:
    """Return True if *token* is the punct *char*."""
    return isinstance(token, Punct) and token.char == char


def is_ident(token: TokenTree | None, name: str | None = None) -> bool:
    """Return True if *token* is an identifier, optionally with the given name."""
    return isinstance(token, Ident) and (name is None or token.name == name)


def is_group(token: TokenTree | None, delimiter: Delimiter | None = None) -> bool:
    """Return True if *token* is a group, optionally with the given delimiter."""
    return isinstance(token, Group) and (delimiter is None or token.delimiter == delimiter)


def with_span(token: TokenTree, span: Span) -> TokenTree:
    """Return a copy of *token* carrying *span*. Group contents keep their spans."""
    if isinstance(token, Ident):
        return Ident(token.name, span)
    if isinstance(token, Punct):
        return Punct(token.char, token.spacing, span)
    if isinstance(token, Literal):
        return Literal(token.text, span)
    return Group(token.delimiter, token.tokens, span)


def to_source(tokens: Iterable[TokenTree]) -> str:
    """Print a token sequence as source text.

    Tokens are separated by single spaces, except that a joint punct is glued
    to the token that follows it (so ``->`` and ``'a`` print intact). Brace
    groups are padded on the inside, parentheses and brackets are not.
    """
    parts: list[str] = []
    glue_next = False
    for token in tokens:
        text = _token_text(token)
        if parts and not glue_next:
            parts.append(" ")
        parts.append(text)
        glue_next = isinstance(token, Punct) and token.is_joint
    return "".join(parts)


# ################
# Implementation
# ################


def _token_text(token: TokenTree) -> str:
    if isinstance(token, Group):
        inner = to_source(token.tokens)
        if token.delimiter == Delimiter.BRACE:
            return "{ " + inner + " }" if inner else "{}"
        return f"{token.delimiter.open}{inner}{token.delimiter.close}"
    return str(token)
