# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer, token cursor and declaration parser."""

from derivekit.parser.cursor import TokenCursor
from derivekit.parser.lexer import tokenize
from derivekit.parser.parser import parse, parse_attribute_items

__all__ = [
    "tokenize",
    "TokenCursor",
    "parse",
    "parse_attribute_items",
]
