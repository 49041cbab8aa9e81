# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serializes the builder tree into a token sequence.

The walk is depth-first: implementation blocks, then their items, then the
statements of each function, all in the order they were added. Every brace,
bracket and parenthesis is emitted as a :class:`Group` built from the tokens
the renderer itself produced, so the output is balanced by construction.
Raw statements are spliced unchanged, spans included.
"""

from collections.abc import Iterable, Sequence

from derivekit.generate.nodes import (
    Const,
    Expr,
    Function,
    ImplBlock,
    Let,
    Match,
    MatchArm,
    Raw,
    Receiver,
    Return,
    Statement,
    Tail,
)
from derivekit.generate.stream_builder import StreamBuilder
from derivekit.model.generics import GenericKind, GenericParams
from derivekit.model.tokens import Delimiter, TokenTree

# ###############
# Public Interface
# ###############


def render(blocks: Iterable[ImplBlock]) -> list[TokenTree]:
    """Render implementation blocks one after the other."""
    out = StreamBuilder()
    for block in blocks:
        out.extend(render_impl(block))
    return out.tokens


def render_impl(block: ImplBlock) -> list[TokenTree]:
    """Render ``impl<...> Interface for Target<...> where ... { items }``."""
    out = StreamBuilder()
    _emit_attributes(out, block.attributes)
    out.ident("impl")
    out.extend(block.generics.impl_generics(block.extra_lifetimes))
    if block.interface is not None:
        out.extend(block.interface)
        out.ident("for")
    out.ident(block.target)
    out.extend(block.generics.type_generics())
    out.extend(block.generics.where_tokens(block.extra_where))
    items = StreamBuilder()
    for item in block.items:
        if isinstance(item, Function):
            items.extend(render_function(item))
        else:
            items.extend(render_const(item))
    out.group(Delimiter.BRACE, items.tokens)
    return out.tokens


def render_function(function: Function) -> list[TokenTree]:
    """Render ``[pub] [async] fn name<...>(receiver, args) -> ret { body }``."""
    out = StreamBuilder()
    _emit_attributes(out, function.attributes)
    if function.is_pub:
        out.ident("pub")
    if function.is_async:
        out.ident("async")
    out.ident("fn").ident(function.name)
    # Lifetimes must precede type parameters.
    ordered = sorted(function.generics, key=lambda param: param.kind != GenericKind.LIFETIME)
    out.extend(GenericParams(params=ordered).impl_generics())
    out.group(Delimiter.PARENTHESIS, _signature_arguments(function))
    if function.return_type is not None:
        out.puncts("->").extend(function.return_type)
    out.group(Delimiter.BRACE, render_statements(function.body))
    return out.tokens


def render_const(const: Const) -> list[TokenTree]:
    return (
        StreamBuilder()
        .ident("const")
        .ident(const.name)
        .punct(":")
        .extend(const.type_tokens)
        .punct("=")
        .extend(const.value)
        .punct(";")
        .tokens
    )


def render_statements(statements: Iterable[Statement]) -> list[TokenTree]:
    out = StreamBuilder()
    for statement in statements:
        out.extend(render_statement(statement))
    return out.tokens


def render_statement(statement: Statement) -> list[TokenTree]:
    """Render a single statement."""
    out = StreamBuilder()
    if isinstance(statement, Return):
        out.ident("return")
        if statement.expr is not None:
            out.extend(statement.expr)
        out.punct(";")
    elif isinstance(statement, Let):
        out.ident("let")
        if statement.mutable:
            out.ident("mut")
        out.extend(statement.pattern)
        if statement.type_tokens is not None:
            out.punct(":").extend(statement.type_tokens)
        if statement.value is not None:
            out.punct("=").extend(statement.value)
        out.punct(";")
    elif isinstance(statement, Expr):
        out.extend(statement.tokens).punct(";")
    elif isinstance(statement, (Tail, Raw)):
        out.extend(statement.tokens)
    elif isinstance(statement, Match):
        out.ident("match").extend(statement.scrutinee)
        arms = StreamBuilder()
        for arm in statement.arms:
            arms.extend(_render_arm(arm))
        out.group(Delimiter.BRACE, arms.tokens)
    return out.tokens


# ################
# Implementation
# ################


def _emit_attributes(out: StreamBuilder, attributes: Sequence[Sequence[TokenTree]]) -> None:
    for attribute in attributes:
        out.punct("#").group(Delimiter.BRACKET, attribute)


def _signature_arguments(function: Function) -> list[TokenTree]:
    out = StreamBuilder()
    receiver = function.receiver
    if receiver in (Receiver.BY_REF, Receiver.BY_MUT_REF):
        out.punct("&")
    if receiver in (Receiver.BY_MUT_VALUE, Receiver.BY_MUT_REF):
        out.ident("mut")
    if receiver != Receiver.NONE:
        out.ident("self")
    for name, type_tokens in function.args:
        if len(out):
            out.punct(",")
        out.ident(name).punct(":").extend(type_tokens)
    return out.tokens


def _render_arm(arm: MatchArm) -> list[TokenTree]:
    out = StreamBuilder().extend(arm.pattern).puncts("=>")
    if arm.block is not None:
        out.group(Delimiter.BRACE, render_statements(arm.block))
    else:
        out.extend(arm.expr or []).punct(",")
    return out.tokens
