# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for aggregate and variant type declarations.

Converts a token sequence (or source text, which is tokenized first) into a
:class:`~derivekit.model.declaration.Declaration`. Parsing fails fast on the
first grammar violation and never returns a partially populated result.
"""

from collections.abc import Sequence
from typing import NoReturn

from derivekit.errors import UnexpectedEnd, UnexpectedToken
from derivekit.model.declaration import (
    AggregateBody,
    Attribute,
    AttributeItem,
    Body,
    DataKind,
    Declaration,
    Field,
    Fields,
    FieldShape,
    Variant,
    VariantsBody,
    Visibility,
)
from derivekit.model.generics import GenericKind, GenericParam, GenericParams, WherePredicate
from derivekit.model.tokens import CALL_SITE, Delimiter, Group, Ident, Punct, TokenTree
from derivekit.parser.cursor import TokenCursor, describe
from derivekit.parser.lexer import tokenize

# ###############
# Public Interface
# ###############


def parse(tokens: str | Sequence[TokenTree]) -> Declaration:
    """Parse one type declaration.

    Args:
        tokens: The declaration's token sequence, or its source text.

    Returns:
        The parsed declaration.

    Raises:
        LexerError: If source text cannot be tokenized.
        UnexpectedEnd: If the tokens end before the declaration is complete.
        UnexpectedToken: If a token violates the declaration grammar.
    """
    if isinstance(tokens, str):
        tokens = tokenize(tokens)
    end_span = tokens[-1].span if tokens else CALL_SITE
    return _Parser(TokenCursor(tokens, end_span)).parse()


def parse_attribute_items(attribute: Attribute) -> list[AttributeItem]:
    """Split the arguments of a ``path(...)`` attribute into items.

    ``#[my(skip, rename = "x", with(a, b))]`` yields ``skip`` without a value,
    ``rename`` with the value ``"x"`` and ``with`` with the value ``(a, b)``.

    Raises:
        UnexpectedToken: If the attribute has no argument list or an item is malformed.
        UnexpectedEnd: If an item ends after ``=``.
    """
    arguments = attribute.arguments
    if arguments is None:
        raise UnexpectedToken(f"Expected `{attribute.path}(...)` attribute", attribute.span)
    cursor = TokenCursor(arguments, attribute.span)
    items: list[AttributeItem] = []
    while not cursor.at_end():
        name = cursor.expect_ident()
        value: list[TokenTree] | None = None
        if cursor.consume_punct_if("="):
            value = cursor.read_until({","}, track_angles=False)
            if not value:
                _fail_at(cursor, "Expected a value after `=`")
        elif cursor.peek_group(Delimiter.PARENTHESIS):
            value = [cursor.advance()]
        items.append(AttributeItem(name=name, value=value))
        if not cursor.at_end():
            cursor.expect_punct(",")
    return items


def parse_where_predicate(tokens: Sequence[TokenTree]) -> WherePredicate:
    """Split ``Type: Bound + Bound`` into a where-clause predicate.

    The separating colon is the first one outside angle brackets that is not
    part of a ``::`` path separator.

    Raises:
        UnexpectedToken: If there is no such colon or nothing precedes it.
    """
    colon = _find_predicate_colon(tokens)
    if colon is None or colon == 0:
        span = tokens[0].span if tokens else CALL_SITE
        raise UnexpectedToken("Expected `:` in where-clause predicate", span)
    bounds = [bound for bound in _split_top_level(tokens[colon + 1 :], "+") if bound]
    return WherePredicate(bounded=list(tokens[:colon]), bounds=bounds)


# ################
# Implementation
# ################

_KEYWORDS: dict[str, DataKind] = {
    "struct": DataKind.AGGREGATE,
    "enum": DataKind.VARIANT,
}

_RESTRICTION_STARTS = frozenset({"crate", "self", "super", "in"})


def _fail_at(cursor: TokenCursor, message: str) -> NoReturn:
    """Raise at the cursor's current token, or UnexpectedEnd past the end."""
    if cursor.at_end():
        raise UnexpectedEnd(message, cursor.end_span)
    raise UnexpectedToken(message, cursor.current_span())


def _split_top_level(tokens: Sequence[TokenTree], char: str) -> list[list[TokenTree]]:
    """Split *tokens* on the punct *char* outside any angle brackets."""
    parts: list[list[TokenTree]] = [[]]
    depth = 0
    for index, token in enumerate(tokens):
        if isinstance(token, Punct):
            if token.char == "<":
                depth += 1
            elif token.char == ">" and not _is_arrow_tail(tokens, index):
                depth -= 1
            elif token.char == char and depth == 0:
                parts.append([])
                continue
        parts[-1].append(token)
    return parts


def _is_arrow_tail(tokens: Sequence[TokenTree], index: int) -> bool:
    previous = tokens[index - 1] if index > 0 else None
    return isinstance(previous, Punct) and previous.char == "-" and previous.is_joint


def _find_predicate_colon(tokens: Sequence[TokenTree]) -> int | None:
    """Return the index of the ``:`` separating a where predicate, skipping ``::`` paths."""
    depth = 0
    for index, token in enumerate(tokens):
        if not isinstance(token, Punct):
            continue
        if token.char == "<":
            depth += 1
        elif token.char == ">" and not _is_arrow_tail(tokens, index):
            depth -= 1
        elif token.char == ":" and depth == 0:
            previous = tokens[index - 1] if index > 0 else None
            following = tokens[index + 1] if index + 1 < len(tokens) else None
            if token.is_joint and isinstance(following, Punct) and following.char == ":":
                continue
            if isinstance(previous, Punct) and previous.char == ":" and previous.is_joint:
                continue
            return index
    return None


class _Parser:
    """Recursive-descent parser over a :class:`TokenCursor`."""

    def __init__(self, cursor: TokenCursor) -> None:
        self._cursor = cursor

    def parse(self) -> Declaration:
        """Parse the whole token sequence as one declaration."""
        cursor = self._cursor
        attributes = self._parse_attributes(cursor)
        visibility = self._parse_visibility(cursor)
        kind = self._parse_kind()
        name = cursor.expect_ident()
        generics = self._parse_generics()
        if kind == DataKind.AGGREGATE:
            body, generics = self._parse_aggregate_body(generics)
        else:
            body = self._parse_variants_body(name)
        if not cursor.at_end():
            token = cursor.peek()
            raise UnexpectedToken(f"Unexpected {describe(token)} after the body of `{name}`", cursor.current_span())
        return Declaration(
            attributes=attributes,
            visibility=visibility,
            kind=kind,
            name=name,
            generics=generics,
            body=body,
        )

    # ------------------------------------------------------------------
    # Attributes and visibility
    # ------------------------------------------------------------------

    def _parse_attributes(self, cursor: TokenCursor) -> list[Attribute]:
        """Parse ``#[...]`` and ``#![...]`` attributes. A doubled ``#`` is tolerated."""
        attributes: list[Attribute] = []
        while cursor.peek_punct("#"):
            cursor.advance()
            while cursor.consume_punct_if("#"):
                pass
            inner = cursor.consume_punct_if("!") is not None
            token = cursor.advance()
            if not (isinstance(token, Group) and token.delimiter == Delimiter.BRACKET):
                raise UnexpectedToken(f"Expected `[` after `#`, found {describe(token)}", token.span)
            attributes.append(self._make_attribute(token, inner))
        return attributes

    def _make_attribute(self, group: Group, inner: bool) -> Attribute:
        path_parts: list[str] = []
        for token in group.tokens:
            if isinstance(token, Ident):
                path_parts.append(token.name)
            elif isinstance(token, Punct) and token.char == ":":
                path_parts.append(":")
            else:
                break
        if not path_parts or path_parts[-1] == ":":
            raise UnexpectedToken("Expected attribute path", group.span)
        return Attribute(path="".join(path_parts), tokens=list(group.tokens), inner=inner, span=group.span)

    def _parse_visibility(self, cursor: TokenCursor) -> Visibility:
        """Parse ``pub`` or ``pub(crate)``-style visibility, if present."""
        if not cursor.consume_ident_if("pub"):
            return Visibility()
        group = cursor.peek()
        if isinstance(group, Group) and group.delimiter == Delimiter.PARENTHESIS:
            first = group.tokens[0] if group.tokens else None
            if isinstance(first, Ident) and first.name in _RESTRICTION_STARTS:
                cursor.advance()
                return Visibility(is_public=True, restriction=list(group.tokens))
        return Visibility(is_public=True)

    def _parse_kind(self) -> DataKind:
        token = self._cursor.advance()
        if isinstance(token, Ident) and token.name in _KEYWORDS:
            return _KEYWORDS[token.name]
        raise UnexpectedToken(f"Expected `struct` or `enum`, found {describe(token)}", token.span)

    # ------------------------------------------------------------------
    # Generics and where-clauses
    # ------------------------------------------------------------------

    def _parse_generics(self) -> GenericParams:
        """Parse ``<...>`` and a where-clause preceding the body, if present."""
        cursor = self._cursor
        params: list[GenericParam] = []
        if cursor.consume_punct_if("<"):
            while not cursor.peek_punct(">"):
                params.append(self._parse_generic_param())
                if not cursor.consume_punct_if(","):
                    break
            cursor.expect_punct(">")
            if cursor.is_joint_pair(">", ">"):
                raise UnexpectedToken(
                    "Unexpected shift operator `>>` after generic parameters", cursor.current_span()
                )
            if cursor.peek_punct(">"):
                raise UnexpectedToken("Unmatched `>` after generic parameters", cursor.current_span())
        where_clause = self._parse_where_clause(allow_brace_end=True)
        return GenericParams(params=params, where_clause=where_clause)

    def _parse_generic_param(self) -> GenericParam:
        cursor = self._cursor
        if cursor.consume_punct_if("'"):
            name = cursor.expect_ident()
            bounds = self._parse_bounds()
            return GenericParam(kind=GenericKind.LIFETIME, name=name, bounds=bounds)
        if cursor.consume_ident_if("const"):
            name = cursor.expect_ident()
            cursor.expect_punct(":")
            const_type = cursor.read_until({",", ">", "="})
            if not const_type:
                _fail_at(cursor, f"Expected a type for const parameter `{name}`")
            return GenericParam(kind=GenericKind.CONST, name=name, const_type=const_type, default=self._parse_default())
        name = cursor.expect_ident()
        bounds = self._parse_bounds()
        return GenericParam(kind=GenericKind.TYPE, name=name, bounds=bounds, default=self._parse_default())

    def _parse_bounds(self) -> list[list[TokenTree]]:
        if not self._cursor.consume_punct_if(":"):
            return []
        region = self._cursor.read_until({",", ">", "="})
        return [bound for bound in _split_top_level(region, "+") if bound]

    def _parse_default(self) -> list[TokenTree] | None:
        cursor = self._cursor
        if not cursor.consume_punct_if("="):
            return None
        default = cursor.read_until({",", ">"})
        if not default:
            _fail_at(cursor, "Expected a default value after `=`")
        return default

    def _parse_where_clause(self, allow_brace_end: bool) -> list[WherePredicate] | None:
        """Parse ``where A: B, C: D`` up to a brace group (if allowed) or ``;``."""
        cursor = self._cursor
        if not cursor.consume_ident_if("where"):
            return None
        predicates: list[WherePredicate] = []
        while not cursor.at_end() and not cursor.peek_punct(";"):
            if allow_brace_end and cursor.peek_group(Delimiter.BRACE):
                break
            region = self._read_predicate(allow_brace_end)
            if not region:
                _fail_at(cursor, "Expected a where-clause predicate")
            predicates.append(parse_where_predicate(region))
            if not cursor.consume_punct_if(","):
                break
        return predicates

    def _read_predicate(self, allow_brace_end: bool) -> list[TokenTree]:
        # A brace group at angle depth zero ends the clause; read_until only
        # stops on puncts, so the region is cut at the first such group.
        cursor = self._cursor
        start = cursor.checkpoint()
        region = cursor.read_until({",", ";"})
        if allow_brace_end:
            depth = 0
            for index, token in enumerate(region):
                if isinstance(token, Punct) and token.char == "<":
                    depth += 1
                elif isinstance(token, Punct) and token.char == ">" and not _is_arrow_tail(region, index):
                    depth -= 1
                elif isinstance(token, Group) and token.delimiter == Delimiter.BRACE and depth == 0:
                    cursor.restore(start + index)
                    return region[:index]
        return region

    # ------------------------------------------------------------------
    # Bodies
    # ------------------------------------------------------------------

    def _parse_aggregate_body(self, generics: GenericParams) -> tuple[Body, GenericParams]:
        """Parse ``{ fields }``, ``( fields ) [where ...];`` or ``;``."""
        cursor = self._cursor
        token = cursor.peek()
        if isinstance(token, Group) and token.delimiter == Delimiter.BRACE:
            cursor.advance()
            fields = self._parse_named_fields(token)
        elif isinstance(token, Group) and token.delimiter == Delimiter.PARENTHESIS:
            cursor.advance()
            fields = self._parse_positional_fields(token)
            if generics.where_clause is None:
                where_clause = self._parse_where_clause(allow_brace_end=False)
                if where_clause is not None:
                    generics = GenericParams(params=generics.params, where_clause=where_clause)
            cursor.expect_punct(";")
        elif isinstance(token, Punct) and token.char == ";":
            cursor.advance()
            fields = Fields(shape=FieldShape.UNIT)
        else:
            _fail_at(cursor, f"Expected `{{`, `(` or `;`, found {describe(token)}")
        return AggregateBody(fields=fields), generics

    def _parse_variants_body(self, name: Ident) -> Body:
        group = self._cursor.advance()
        if not (isinstance(group, Group) and group.delimiter == Delimiter.BRACE):
            raise UnexpectedToken(f"Expected `{{`, found {describe(group)}", group.span)
        cursor = TokenCursor(group.tokens, group.span)
        variants: list[Variant] = []
        while not cursor.at_end():
            variants.append(self._parse_variant(cursor))
            if not cursor.at_end():
                cursor.expect_punct(",")
        if not variants:
            raise UnexpectedToken(f"Variant type `{name}` has no variants", group.span)
        return VariantsBody(variants=variants)

    def _parse_variant(self, cursor: TokenCursor) -> Variant:
        attributes = self._parse_attributes(cursor)
        name = cursor.expect_ident()
        token = cursor.peek()
        if isinstance(token, Group) and token.delimiter == Delimiter.BRACE:
            cursor.advance()
            fields = self._parse_named_fields(token)
        elif isinstance(token, Group) and token.delimiter == Delimiter.PARENTHESIS:
            cursor.advance()
            fields = self._parse_positional_fields(token)
        else:
            fields = Fields(shape=FieldShape.UNIT)
        discriminant = None
        if cursor.consume_punct_if("="):
            discriminant = cursor.read_until({","}, track_angles=False)
            if not discriminant:
                _fail_at(cursor, f"Expected a discriminant for variant `{name}`")
        return Variant(name=name, fields=fields, discriminant=discriminant, attributes=attributes)

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def _parse_named_fields(self, group: Group) -> Fields:
        cursor = TokenCursor(group.tokens, group.span)
        items: list[Field] = []
        while not cursor.at_end():
            attributes = self._parse_attributes(cursor)
            visibility = self._parse_visibility(cursor)
            name = cursor.expect_ident()
            cursor.expect_punct(":")
            type_tokens = self._parse_field_type(cursor)
            items.append(Field(name=name, visibility=visibility, type_tokens=type_tokens, attributes=attributes))
            if not cursor.at_end():
                cursor.expect_punct(",")
        return Fields(shape=FieldShape.NAMED, items=items)

    def _parse_positional_fields(self, group: Group) -> Fields:
        cursor = TokenCursor(group.tokens, group.span)
        items: list[Field] = []
        while not cursor.at_end():
            attributes = self._parse_attributes(cursor)
            visibility = self._parse_visibility(cursor)
            type_tokens = self._parse_field_type(cursor)
            items.append(Field(visibility=visibility, type_tokens=type_tokens, attributes=attributes))
            if not cursor.at_end():
                cursor.expect_punct(",")
        return Fields(shape=FieldShape.POSITIONAL, items=items)

    def _parse_field_type(self, cursor: TokenCursor) -> list[TokenTree]:
        type_tokens = cursor.read_until({","})
        if not type_tokens:
            _fail_at(cursor, "Expected a field type")
        return type_tokens
