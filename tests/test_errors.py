# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for error types and their diagnostic token sequences."""

import pytest

from derivekit.errors import (
    BuilderMisuse,
    DeriveError,
    LexerError,
    MalformedFragment,
    ParseError,
    UnexpectedEnd,
    UnexpectedToken,
)
from derivekit.model.tokens import CALL_SITE, Delimiter, Group, Ident, Literal, Punct, Span, to_source

# ###############
# Messages
# ###############


def test_message_includes_location() -> None:
    error = DeriveError("bad input", Span(2, 5))
    assert str(error) == "Line 2, column 5: bad input"
    assert error.message == "bad input"


def test_message_without_location() -> None:
    assert str(DeriveError("bad input")) == "bad input"
    assert str(DeriveError("bad input", CALL_SITE)) == "bad input"


@pytest.mark.parametrize("error_type", [UnexpectedEnd, UnexpectedToken, LexerError])
def test_parse_errors_share_a_base(error_type: type[ParseError]) -> None:
    assert issubclass(error_type, ParseError)
    assert issubclass(error_type, DeriveError)


def test_builder_misuse_is_not_a_parse_error() -> None:
    assert not issubclass(BuilderMisuse, ParseError)


def test_malformed_fragment_keeps_code() -> None:
    error = MalformedFragment("Malformed code fragment", "(a")
    assert error.code == "(a"
    assert isinstance(error, ParseError)


# ###############
# Diagnostic Tokens
# ###############


def test_token_stream_is_compile_error_invocation() -> None:
    tokens = DeriveError('bad "input"', Span(2, 5)).to_token_stream()
    assert tokens == [
        Ident("compile_error"),
        Punct("!"),
        Group(Delimiter.BRACE, (Literal('"bad \\"input\\""'),)),
    ]
    assert to_source(tokens) == 'compile_error ! { "bad \\"input\\"" }'


def test_every_diagnostic_token_carries_the_span() -> None:
    tokens = DeriveError("bad", Span(2, 5)).to_token_stream()
    assert all(token.span == Span(2, 5) for token in tokens)
    group = tokens[2]
    assert isinstance(group, Group)
    assert group.tokens[0].span == Span(2, 5)


def test_throw_with_span_overrides_location() -> None:
    tokens = DeriveError("bad", Span(2, 5)).throw_with_span(Span(7, 1))
    assert tokens[0].span == Span(7, 1)


def test_token_stream_without_span_uses_call_site() -> None:
    tokens = DeriveError("bad").to_token_stream()
    assert tokens[0].span == CALL_SITE
