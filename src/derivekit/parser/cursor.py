# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Position-tracking cursor over a token sequence.

The cursor only moves forward, except through :meth:`TokenCursor.restore`,
which jumps back to a position captured by :meth:`TokenCursor.checkpoint`.
Checkpoints are plain integer positions, so restoring is O(1) and never
duplicates or drops a token.
"""

from collections.abc import Collection, Sequence

from derivekit.errors import UnexpectedEnd, UnexpectedToken
from derivekit.model.tokens import CALL_SITE, Delimiter, Group, Ident, Punct, Span, TokenTree, to_source

# ###############
# Public Interface
# ###############


class TokenCursor:
    """A cursor over one level of a token tree.

    Groups are single tokens at this level; to descend into a group, create a
    new cursor over ``group.tokens``.

    Args:
        tokens: The token sequence to walk.
        end_span: Span reported when the input ends unexpectedly. For a cursor
            over a group's contents this is the span of the group itself.
    """

    def __init__(self, tokens: Sequence[TokenTree], end_span: Span = CALL_SITE) -> None:
        self._tokens = list(tokens)
        self._pos = 0
        self._end_span = end_span

    # ------------------------------------------------------------------
    # Core movement
    # ------------------------------------------------------------------

    @property
    def position(self) -> int:
        return self._pos

    @property
    def end_span(self) -> Span:
        return self._end_span

    def peek(self, offset: int = 0) -> TokenTree | None:
        """Return the token *offset* positions ahead without consuming it, or None past the end."""
        index = self._pos + offset
        if index < len(self._tokens):
            return self._tokens[index]
        return None

    def advance(self) -> TokenTree:
        """Consume and return the current token.

        Raises:
            UnexpectedEnd: If there are no tokens left.
        """
        if self._pos >= len(self._tokens):
            raise UnexpectedEnd("Unexpected end of input", self._end_span)
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def checkpoint(self) -> int:
        """Return a handle for the current position."""
        return self._pos

    def restore(self, checkpoint: int) -> None:
        """Move back (or forward) to a position returned by :meth:`checkpoint`."""
        if not 0 <= checkpoint <= len(self._tokens):
            raise ValueError(f"Invalid checkpoint: {checkpoint}")
        self._pos = checkpoint

    def span_of(self, start: int, stop: int | None = None) -> Span:
        """Return the span of the token range ``[start, stop)``.

        The span of a range is the span of its first token. An empty range
        reports the span of the token at *start*, or the end span.
        """
        if start < len(self._tokens):
            return self._tokens[start].span
        return self._end_span

    def tokens_between(self, start: int, stop: int) -> list[TokenTree]:
        return self._tokens[start:stop]

    def remaining(self) -> list[TokenTree]:
        return self._tokens[self._pos :]

    def current_span(self) -> Span:
        """Return the span of the current token, or the end span past the end."""
        return self.span_of(self._pos)

    # ------------------------------------------------------------------
    # Typed lookahead and consumption
    # ------------------------------------------------------------------

    def peek_punct(self, char: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return isinstance(token, Punct) and token.char == char

    def peek_ident(self, name: str | None = None, offset: int = 0) -> bool:
        token = self.peek(offset)
        return isinstance(token, Ident) and (name is None or token.name == name)

    def peek_group(self, delimiter: Delimiter | None = None, offset: int = 0) -> bool:
        token = self.peek(offset)
        return isinstance(token, Group) and (delimiter is None or token.delimiter == delimiter)

    def is_joint_pair(self, first: str, second: str, offset: int = 0) -> bool:
        """Return True if the next two tokens form the operator *first* + *second*, e.g. ``->``."""
        token = self.peek(offset)
        return isinstance(token, Punct) and token.char == first and token.is_joint and self.peek_punct(second, offset + 1)

    def consume_punct_if(self, char: str) -> Punct | None:
        if self.peek_punct(char):
            token = self.advance()
            assert isinstance(token, Punct)
            return token
        return None

    def consume_ident_if(self, name: str) -> Ident | None:
        if self.peek_ident(name):
            token = self.advance()
            assert isinstance(token, Ident)
            return token
        return None

    def expect_punct(self, char: str) -> Punct:
        """Consume the punct *char*.

        Raises:
            UnexpectedEnd: If there are no tokens left.
            UnexpectedToken: If the current token is something else.
        """
        token = self.advance()
        if not (isinstance(token, Punct) and token.char == char):
            raise UnexpectedToken(f"Expected `{char}`, found {describe(token)}", token.span)
        return token

    def expect_ident(self, name: str | None = None) -> Ident:
        """Consume an identifier, optionally requiring a specific name.

        Raises:
            UnexpectedEnd: If there are no tokens left.
            UnexpectedToken: If the current token is not the expected identifier.
        """
        token = self.advance()
        if not isinstance(token, Ident) or (name is not None and token.name != name):
            expected = f"`{name}`" if name is not None else "identifier"
            raise UnexpectedToken(f"Expected {expected}, found {describe(token)}", token.span)
        return token

    def expect_group(self, delimiter: Delimiter) -> Group:
        """Consume a group delimited by *delimiter*.

        Raises:
            UnexpectedEnd: If there are no tokens left.
            UnexpectedToken: If the current token is not such a group.
        """
        token = self.advance()
        if not (isinstance(token, Group) and token.delimiter == delimiter):
            raise UnexpectedToken(f"Expected `{delimiter.open}`, found {describe(token)}", token.span)
        return token

    # ------------------------------------------------------------------
    # Balanced region reading
    # ------------------------------------------------------------------

    def read_until(self, stops: Collection[str], track_angles: bool = True) -> list[TokenTree]:
        """Consume tokens up to a stop punct outside any angle brackets.

        Groups are opaque, so commas inside ``(...)`` never stop the scan.
        Angle brackets are tracked with a depth counter: ``<`` opens a level
        and ``>`` closes one, so the joint pair ``>>`` closes two levels one
        character at a time. The arrow ``->`` never counts as a close. The
        stop punct itself is not consumed. Reaching the end of input also
        ends the region.

        Args:
            stops: Punct characters that end the region at depth zero.
            track_angles: Whether ``<`` and ``>`` nest. Turn this off for
                expressions, where they are comparison or shift operators.

        Returns:
            The tokens of the region.

        Raises:
            UnexpectedToken: If a ``>`` closes more levels than were opened and
                ``>`` is not a stop.
        """
        start = self._pos
        depth = 0
        while not self.at_end():
            token = self.peek()
            if isinstance(token, Punct) and not track_angles:
                if token.char in stops:
                    break
            elif isinstance(token, Punct):
                if token.char == "-" and token.is_joint and self.peek_punct(">", 1):
                    self._pos += 2
                    continue
                if depth == 0 and token.char in stops:
                    break
                if token.char == "<":
                    depth += 1
                elif token.char == ">":
                    if depth == 0:
                        raise UnexpectedToken("Unmatched `>`", token.span)
                    depth -= 1
            self._pos += 1
        return self._tokens[start : self._pos]


def describe(token: TokenTree | None) -> str:
    """Return a short human-readable description of *token* for error messages."""
    if token is None:
        return "end of input"
    if isinstance(token, Group):
        return f"`{token.delimiter.open}`"
    return f"`{to_source([token])}`"
