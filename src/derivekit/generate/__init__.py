# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Code generation: builders, the builder tree and its renderer."""

from derivekit.generate.generator import BodyBuilder, FnBuilder, Generator, ImplBuilder, MatchBuilder
from derivekit.generate.nodes import Receiver
from derivekit.generate.renderer import render
from derivekit.generate.stream_builder import StreamBuilder

__all__ = [
    "Generator",
    "ImplBuilder",
    "FnBuilder",
    "BodyBuilder",
    "MatchBuilder",
    "Receiver",
    "StreamBuilder",
    "render",
]
