# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""DeriveKit: parse type declarations and generate implementation code for derive macros."""

from derivekit.errors import (
    BuilderMisuse,
    DeriveError,
    LexerError,
    MalformedFragment,
    ParseError,
    UnexpectedEnd,
    UnexpectedToken,
)
from derivekit.expand import expand
from derivekit.generate import Generator, Receiver, StreamBuilder
from derivekit.parser import parse, tokenize

__version__ = "0.1.0"

__all__ = [
    "parse",
    "tokenize",
    "expand",
    "Generator",
    "Receiver",
    "StreamBuilder",
    "DeriveError",
    "ParseError",
    "UnexpectedEnd",
    "UnexpectedToken",
    "LexerError",
    "MalformedFragment",
    "BuilderMisuse",
]
