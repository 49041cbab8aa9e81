# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error types raised while parsing declarations or generating code.

Every error carries an optional :class:`Span` and can be turned into a
``compile_error! { "..." }`` token sequence, which a macro entry point returns
in place of the generated code so the host compiler reports the problem at the
offending source location.
"""

from derivekit.model.tokens import CALL_SITE, Delimiter, Group, Ident, Literal, Punct, Span, TokenTree, with_span

# ###############
# Public Interface
# ###############


class DeriveError(Exception):
    """Base class for all toolkit errors. Also used directly for custom errors.

    Attributes:
        message: Human-readable description of the problem.
        span: Source location of the problem, or None if unknown.
    """

    def __init__(self, message: str, span: Span | None = None) -> None:
        if span is not None and not span.is_call_site:
            super().__init__(f"Line {span.line}, column {span.column}: {message}")
        else:
            super().__init__(message)
        self.message = message
        self.span = span

    def to_token_stream(self) -> list[TokenTree]:
        """Return the diagnostic token sequence anchored at this error's span."""
        return self.throw_with_span(self.span if self.span is not None else CALL_SITE)

    def throw_with_span(self, span: Span) -> list[TokenTree]:
        """Return the diagnostic token sequence anchored at *span*.

        The sequence is ``compile_error ! { "<message>" }`` with every token,
        including the string literal inside the group, carrying *span*.
        """
        literal = with_span(Literal.string(self.message), span)
        return [
            Ident("compile_error", span),
            Punct("!", span=span),
            Group(Delimiter.BRACE, (literal,), span),
        ]


class ParseError(DeriveError):
    """Raised when a token sequence does not match the declaration grammar."""


class UnexpectedEnd(ParseError):
    """Raised when the input ends before the grammar is satisfied."""


class UnexpectedToken(ParseError):
    """Raised when a token is present but violates the grammar."""


class LexerError(ParseError):
    """Raised when source text cannot be split into a balanced token tree."""


class MalformedFragment(ParseError):
    """Raised when a raw code fragment pushed into a builder cannot be lexed.

    Attributes:
        code: The fragment text that failed to lex.
    """

    def __init__(self, message: str, code: str, span: Span | None = None) -> None:
        super().__init__(message, span)
        self.code = code


class BuilderMisuse(DeriveError):
    """Raised when a builder is used after :meth:`Generator.finish` consumed it."""
