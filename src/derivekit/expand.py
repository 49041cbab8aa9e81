# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point tying parsing, user derive logic and rendering together."""

from collections.abc import Callable, Sequence

from derivekit.errors import DeriveError
from derivekit.generate.generator import Generator
from derivekit.model.declaration import Declaration
from derivekit.model.tokens import TokenTree
from derivekit.parser.parser import parse

# ###############
# Public Interface
# ###############

DeriveFn = Callable[[Declaration, Generator], object]


def expand(tokens: str | Sequence[TokenTree], derive: DeriveFn) -> list[TokenTree]:
    """Run one derive over a declaration.

    Parses *tokens*, hands the declaration and a fresh :class:`Generator` to
    *derive*, and returns the rendered output. A :class:`DeriveError` raised
    anywhere along the way, including inside *derive*, is turned into its
    ``compile_error! { ... }`` token sequence instead of propagating.

    Args:
        tokens: The declaration's token sequence or source text.
        derive: Callback that adds implementation blocks to the generator.

    Returns:
        The generated tokens, or the diagnostic tokens on failure.
    """
    try:
        declaration = parse(tokens)
        generator = Generator.from_declaration(declaration)
        derive(declaration, generator)
        return generator.finish()
    except DeriveError as exc:
        return exc.to_token_stream()
