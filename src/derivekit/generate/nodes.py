# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""The builder tree: implementation blocks, their items, and statements.

These are plain records filled in by the builders in
:mod:`derivekit.generate.generator` and consumed by
:mod:`derivekit.generate.renderer`. Each node exclusively owns its children.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from derivekit.model.generics import GenericParam, GenericParams, WherePredicate
from derivekit.model.tokens import Ident, TokenTree

# ###############
# Public Interface
# ###############


class Receiver(Enum):
    """How a generated function refers to the instance it operates on."""

    NONE = "none"
    BY_VALUE = "self"
    BY_MUT_VALUE = "mut self"
    BY_REF = "&self"
    BY_MUT_REF = "&mut self"


@dataclass
class Return:
    """``return <expr>;``, or a bare ``return;`` when *expr* is None."""

    expr: list[TokenTree] | None = None


@dataclass
class Let:
    """``let [mut] <pattern> [: <type>] [= <value>];``"""

    pattern: list[TokenTree]
    value: list[TokenTree] | None = None
    type_tokens: list[TokenTree] | None = None
    mutable: bool = False


@dataclass
class Expr:
    """An expression statement, terminated with ``;``."""

    tokens: list[TokenTree]


@dataclass
class Tail:
    """A trailing expression without ``;``, the value of the block."""

    tokens: list[TokenTree]


@dataclass
class Raw:
    """Tokens spliced into the body verbatim."""

    tokens: list[TokenTree]


@dataclass
class MatchArm:
    """``<pattern> => <expr>,`` or ``<pattern> => { <statements> }``."""

    pattern: list[TokenTree]
    expr: list[TokenTree] | None = None
    block: list[Statement] | None = None


@dataclass
class Match:
    """``match <scrutinee> { <arms> }``"""

    scrutinee: list[TokenTree]
    arms: list[MatchArm] = field(default_factory=list)


Statement = Return | Let | Expr | Tail | Raw | Match


@dataclass
class Function:
    """A function inside an implementation block."""

    name: Ident
    attributes: list[list[TokenTree]] = field(default_factory=list)
    is_pub: bool = False
    is_async: bool = False
    receiver: Receiver = Receiver.NONE
    generics: list[GenericParam] = field(default_factory=list)
    args: list[tuple[Ident, list[TokenTree]]] = field(default_factory=list)
    return_type: list[TokenTree] | None = None
    body: list[Statement] = field(default_factory=list)


@dataclass
class Const:
    """``const <name>: <type> = <value>;`` inside an implementation block."""

    name: Ident
    type_tokens: list[TokenTree]
    value: list[TokenTree]


@dataclass
class ImplBlock:
    """``impl<...> [Interface for] Target<...> where ... { items }``.

    Attributes:
        target: Name of the implementing type.
        generics: Generic parameters forwarded to the header.
        interface: Interface path tokens, or None for an inherent block.
        extra_lifetimes: Impl-level lifetimes outlived by every forwarded lifetime.
        extra_where: Predicates appended to the forwarded where-clause.
        attributes: Contents of ``#[...]`` attributes placed before ``impl``.
        items: Functions and constants, in the order they were added.
    """

    target: Ident
    generics: GenericParams
    interface: list[TokenTree] | None = None
    extra_lifetimes: list[str] = field(default_factory=list)
    extra_where: list[WherePredicate] = field(default_factory=list)
    attributes: list[list[TokenTree]] = field(default_factory=list)
    items: list[Function | Const] = field(default_factory=list)
