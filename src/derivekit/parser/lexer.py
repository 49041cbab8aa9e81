# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for Rust-like source fragments.

Converts raw source text into a token tree: identifiers, single-character
puncts, literals, and delimiter-bounded groups. Delimiters are balanced while
scanning, so every returned sequence is well-formed.
"""

from dataclasses import dataclass, field

from derivekit.errors import LexerError
from derivekit.model.tokens import (
    PUNCT_CHARS,
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    Spacing,
    Span,
    TokenTree,
)

# ###############
# Public Interface
# ###############


def tokenize(source: str) -> list[TokenTree]:
    """Tokenize source text into a token tree.

    Comments and whitespace are dropped. Outer doc comments (``/// text``)
    become ``# [doc = " text"]`` attribute tokens, inner doc comments
    (``//! text``) become ``# ! [doc = " text"]``.

    Args:
        source: The text to scan.

    Returns:
        The top-level token trees, in source order.

    Raises:
        LexerError: On unexpected characters, unterminated literals or comments,
            and unbalanced or mismatched delimiters.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_OPEN_DELIMITERS: dict[str, Delimiter] = {
    "(": Delimiter.PARENTHESIS,
    "[": Delimiter.BRACKET,
    "{": Delimiter.BRACE,
}

_CLOSE_DELIMITERS: dict[str, Delimiter] = {
    ")": Delimiter.PARENTHESIS,
    "]": Delimiter.BRACKET,
    "}": Delimiter.BRACE,
}


@dataclass
class _Frame:
    """An open delimiter and the tokens collected inside it so far."""

    delimiter: Delimiter | None
    span: Span
    tokens: list[TokenTree] = field(default_factory=list)


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._frames: list[_Frame] = [_Frame(None, Span(1, 1))]

    def tokenize(self) -> list[TokenTree]:
        """Run the scanner and return the top-level token trees."""
        while self._pos < len(self._source):
            self._skip_whitespace_and_comments()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        if len(self._frames) > 1:
            frame = self._frames[-1]
            assert frame.delimiter is not None
            raise LexerError(f"Unclosed delimiter {frame.delimiter.open!r}", frame.span)
        return self._frames[0].tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' at end of input."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _emit(self, token: TokenTree) -> None:
        self._frames[-1].tokens.append(token)

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip whitespace and plain comments; doc comments are turned into tokens."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n":
                self._advance()
            elif ch == "/" and self._peek() == "/":
                self._scan_line_comment()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _scan_line_comment(self) -> None:
        """Consume a line comment, emitting a doc attribute for ``///`` and ``//!``."""
        line = self._line
        col = self._column
        start = self._pos
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()
        text = self._source[start : self._pos]
        if text.startswith("///") and not text.startswith("////"):
            self._emit_doc_attribute(text[3:], inner=False, span=Span(line, col))
        elif text.startswith("//!"):
            self._emit_doc_attribute(text[3:], inner=True, span=Span(line, col))

    def _emit_doc_attribute(self, text: str, inner: bool, span: Span) -> None:
        self._emit(Punct("#", Spacing.JOINT if inner else Spacing.ALONE, span))
        if inner:
            self._emit(Punct("!", Spacing.ALONE, span))
        contents = (
            Ident("doc", span),
            Punct("=", Spacing.ALONE, span),
            Literal.string(text.rstrip("\r"), span),
        )
        self._emit(Group(Delimiter.BRACKET, contents, span))

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the matching '*/'. Block comments nest."""
        start_line = self._line
        start_col = self._column
        depth = 0
        while self._pos < len(self._source):
            if self._current() == "/" and self._peek() == "*":
                self._advance()  # /
                self._advance()  # *
                depth += 1
            elif self._current() == "*" and self._peek() == "/":
                self._advance()  # *
                self._advance()  # /
                depth -= 1
                if depth == 0:
                    return
            else:
                self._advance()
        raise LexerError("Unterminated block comment", Span(start_line, start_col))

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        span = Span(self._line, self._column)

        if ch in _OPEN_DELIMITERS:
            self._advance()
            self._frames.append(_Frame(_OPEN_DELIMITERS[ch], span))
        elif ch in _CLOSE_DELIMITERS:
            self._close_group(ch, span)
        elif ch == '"':
            self._scan_string(span, prefix="")
        elif ch == "'":
            self._scan_quote(span)
        elif ch.isdigit():
            self._scan_number(span)
        elif ch in "brc" and self._starts_prefixed_literal():
            self._scan_prefixed_literal(span)
        elif ch.isalpha() or ch == "_":
            self._scan_identifier(span)
        elif ch in PUNCT_CHARS:
            self._advance()
            nxt = self._current()
            # A lifetime quote never fuses with the punct before it.
            joint = nxt != "" and nxt != "'" and nxt in PUNCT_CHARS
            self._emit(Punct(ch, Spacing.JOINT if joint else Spacing.ALONE, span))
        else:
            raise LexerError(f"Unexpected character: {ch!r}", span)

    def _close_group(self, ch: str, span: Span) -> None:
        """Close the innermost open group with the delimiter *ch*."""
        delimiter = _CLOSE_DELIMITERS[ch]
        frame = self._frames[-1]
        if frame.delimiter is None:
            raise LexerError(f"Unmatched closing delimiter {ch!r}", span)
        if frame.delimiter != delimiter:
            raise LexerError(
                f"Mismatched closing delimiter {ch!r}, expected {frame.delimiter.close!r}",
                span,
            )
        self._advance()
        self._frames.pop()
        self._emit(Group(delimiter, tuple(frame.tokens), frame.span))

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_string(self, span: Span, prefix: str) -> None:
        """Scan a double-quoted string literal, keeping escapes in source form."""
        start = self._pos
        self._advance()  # opening "
        while self._pos < len(self._source):
            ch = self._current()
            if ch == "\\":
                self._advance()
                if self._pos >= len(self._source):
                    break
                self._advance()
            elif ch == '"':
                self._advance()  # closing "
                self._emit(Literal(prefix + self._source[start : self._pos], span))
                return
            else:
                self._advance()
        raise LexerError("Unterminated string literal", span)

    def _scan_raw_string(self, span: Span, prefix: str) -> None:
        """Scan ``r"..."`` or ``r#"..."#``; *prefix* holds the leading letters."""
        start = self._pos
        hashes = 0
        while self._current() == "#":
            self._advance()
            hashes += 1
        if self._current() != '"':
            raise LexerError("Invalid raw string literal", span)
        self._advance()  # opening "
        terminator = '"' + "#" * hashes
        while self._pos < len(self._source):
            if self._source.startswith(terminator, self._pos):
                for _ in terminator:
                    self._advance()
                self._emit(Literal(prefix + self._source[start : self._pos], span))
                return
            self._advance()
        raise LexerError("Unterminated raw string literal", span)

    def _scan_quote(self, span: Span) -> None:
        """Scan a character literal (``'x'``) or the quote of a lifetime (``'a``)."""
        nxt = self._peek()
        if nxt == "\\" or (nxt != "" and self._peek(2) == "'"):
            self._scan_char(span, prefix="")
        elif nxt.isalpha() or nxt == "_":
            self._advance()
            self._emit(Punct("'", Spacing.JOINT, span))
        else:
            raise LexerError(f"Unexpected character after quote: {nxt!r}", span)

    def _scan_char(self, span: Span, prefix: str) -> None:
        start = self._pos
        self._advance()  # opening '
        while self._pos < len(self._source) and self._current() not in "'\n":
            if self._current() == "\\":
                self._advance()
            self._advance()
        if self._current() != "'":
            raise LexerError("Unterminated character literal", span)
        self._advance()  # closing '
        self._emit(Literal(prefix + self._source[start : self._pos], span))

    def _starts_prefixed_literal(self) -> bool:
        """Return True for ``b"..."``, ``b'x'``, ``br"..."``, ``r"..."``, ``r#"..."#`` and ``c"..."``."""
        ch = self._current()
        nxt = self._peek()
        if ch == "r":
            return nxt == '"' or (nxt == "#" and self._raw_hashes_then_quote(1))
        if ch == "b":
            if nxt != "" and nxt in "\"'":
                return True
            return nxt == "r" and (self._peek(2) == '"' or (self._peek(2) == "#" and self._raw_hashes_then_quote(2)))
        if ch == "c":
            return nxt == '"'
        return False

    def _raw_hashes_then_quote(self, offset: int) -> bool:
        while self._peek(offset) == "#":
            offset += 1
        return self._peek(offset) == '"'

    def _scan_prefixed_literal(self, span: Span) -> None:
        prefix = self._advance()
        if prefix == "b" and self._current() == "r":
            prefix += self._advance()
        if prefix.endswith("r"):
            self._scan_raw_string(span, prefix)
        elif self._current() == "'":
            self._scan_char(span, prefix)
        else:
            self._scan_string(span, prefix)

    def _scan_number(self, span: Span) -> None:
        """Scan an integer or float literal, including type suffixes like ``5u8``."""
        start = self._pos
        is_hex = self._current() == "0" and self._peek() != "" and self._peek() in "xXoObB"
        while self._pos < len(self._source):
            ch = self._current()
            if ch.isalnum() or ch == "_":
                self._advance()
                if ch in "eE" and not is_hex and self._current() in "+-" and self._peek().isdigit():
                    self._advance()
            elif ch == "." and self._peek().isdigit() and not is_hex:
                self._advance()
            else:
                break
        self._emit(Literal(self._source[start : self._pos], span))

    def _scan_identifier(self, span: Span) -> None:
        """Scan an identifier or keyword, including raw identifiers (``r#type``)."""
        start = self._pos
        if self._current() == "r" and self._peek() == "#":
            self._advance()  # r
            self._advance()  # #
        while self._pos < len(self._source) and (self._current().isalnum() or self._current() == "_"):
            self._advance()
        self._emit(Ident(self._source[start : self._pos], span))
