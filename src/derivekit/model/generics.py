# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generic parameter lists and where-clauses of a parsed declaration."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic import Field as _Field

from derivekit.model.tokens import Ident, Punct, Spacing, TokenTree, to_source

# ###############
# Public Interface
# ###############

# A run of opaque tokens. Serialized as source text so that JSON dumps of the
# model stay readable.
Tokens = Annotated[list[TokenTree], PlainSerializer(to_source, return_type=str)]


class GenericKind(Enum):
    """The three kinds of generic parameter."""

    LIFETIME = "lifetime"
    TYPE = "type"
    CONST = "const"


class GenericParam(BaseModel):
    """A single generic parameter, e.g. ``'a: 'b``, ``T: Clone + Debug`` or ``const N: usize``.

    Attributes:
        kind: Whether this is a lifetime, type or const parameter.
        name: The parameter name. Lifetime names are stored without the quote.
        bounds: The declared bounds, each one a token run. Const params have none.
        const_type: The declared type of a const parameter.
        default: The default value tokens (``T = ()``), if any.
    """

    model_config = ConfigDict(frozen=True)

    kind: GenericKind
    name: Ident
    bounds: list[Tokens] = _Field(default_factory=list)
    const_type: Tokens | None = None
    default: Tokens | None = None

    def name_tokens(self) -> list[TokenTree]:
        """Return the tokens used to refer to this parameter, e.g. ``'a`` or ``T``."""
        if self.kind == GenericKind.LIFETIME:
            return lifetime_tokens(self.name)
        return [self.name]

    def declaration_tokens(self, extra_bounds: Sequence[Sequence[TokenTree]] = ()) -> list[TokenTree]:
        """Return the tokens declaring this parameter in an implementation header.

        Defaults are never included, since they are not allowed there.

        Args:
            extra_bounds: Additional bounds appended after the declared ones.
        """
        if self.kind == GenericKind.CONST:
            assert self.const_type is not None
            return [Ident("const"), self.name, Punct(":"), *self.const_type]
        tokens = self.name_tokens()
        bounds = [*self.bounds, *extra_bounds]
        if bounds:
            tokens.append(Punct(":"))
            tokens.extend(join_bounds(bounds))
        return tokens


class WherePredicate(BaseModel):
    """One ``bounded: Bound + Bound`` entry of a where-clause."""

    model_config = ConfigDict(frozen=True)

    bounded: Tokens
    bounds: list[Tokens] = _Field(default_factory=list)

    def to_tokens(self) -> list[TokenTree]:
        tokens: list[TokenTree] = [*self.bounded, Punct(":")]
        tokens.extend(join_bounds(self.bounds))
        return tokens


class GenericParams(BaseModel):
    """The ordered generic parameters of a declaration plus its where-clause.

    Parameter order is kept exactly as written, because implementation headers
    re-emit the parameters in the same order.

    Attributes:
        params: The generic parameters in source order.
        where_clause: The where-clause predicates, or None if there was no
            ``where`` keyword.
    """

    model_config = ConfigDict(frozen=True)

    params: list[GenericParam] = _Field(default_factory=list)
    where_clause: list[WherePredicate] | None = None

    @property
    def is_empty(self) -> bool:
        return not self.params

    def lifetimes(self) -> list[GenericParam]:
        return [p for p in self.params if p.kind == GenericKind.LIFETIME]

    def type_params(self) -> list[GenericParam]:
        return [p for p in self.params if p.kind == GenericKind.TYPE]

    def const_params(self) -> list[GenericParam]:
        return [p for p in self.params if p.kind == GenericKind.CONST]

    def names(self) -> list[str]:
        return [p.name.name for p in self.params]

    def impl_generics(self, extra_lifetimes: Iterable[str] = ()) -> list[TokenTree]:
        """Return ``<...>`` declaring every parameter with its bounds.

        Args:
            extra_lifetimes: Names of additional lifetimes declared before the
                original parameters. Each one is bounded to outlive every
                original lifetime, as in ``<'de: 'a + 'b, 'a, 'b>``.

        Returns:
            The header tokens, or an empty list when there is nothing to declare.
        """
        declared = [p.name_tokens() for p in self.lifetimes()]
        items: list[list[TokenTree]] = []
        for name in extra_lifetimes:
            tokens = lifetime_tokens(Ident(name))
            if declared:
                tokens.append(Punct(":"))
                tokens.extend(join_bounds(declared))
            items.append(tokens)
        items.extend(param.declaration_tokens() for param in self.params)
        return _angle_list(items)

    def type_generics(self) -> list[TokenTree]:
        """Return ``<...>`` naming every parameter without bounds, as used after the type name."""
        return _angle_list([p.name_tokens() for p in self.params])

    def where_tokens(self, extra: Sequence[WherePredicate] = ()) -> list[TokenTree]:
        """Return the ``where`` clause tokens, widened by *extra* predicates.

        Returns an empty list when there are no predicates at all.
        """
        predicates = [*(self.where_clause or []), *extra]
        if not predicates:
            return []
        tokens: list[TokenTree] = [Ident("where")]
        for index, predicate in enumerate(predicates):
            if index:
                tokens.append(Punct(","))
            tokens.extend(predicate.to_tokens())
        return tokens


def lifetime_tokens(name: Ident) -> list[TokenTree]:
    """Return ``'name`` as a joint quote followed by the identifier."""
    return [Punct("'", Spacing.JOINT), name]


def join_bounds(bounds: Iterable[Sequence[TokenTree]]) -> list[TokenTree]:
    """Join bound token runs with ``+``."""
    tokens: list[TokenTree] = []
    for index, bound in enumerate(bounds):
        if index:
            tokens.append(Punct("+"))
        tokens.extend(bound)
    return tokens


# ################
# Implementation
# ################


def _angle_list(items: list[list[TokenTree]]) -> list[TokenTree]:
    if not items:
        return []
    tokens: list[TokenTree] = [Punct("<")]
    for index, item in enumerate(items):
        if index:
            tokens.append(Punct(","))
        tokens.extend(item)
    tokens.append(Punct(">"))
    return tokens
