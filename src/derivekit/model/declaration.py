# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""The structured result of parsing one type declaration."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from derivekit.model.generics import GenericParams, Tokens
from derivekit.model.tokens import CALL_SITE, Delimiter, Group, Ident, Span, TokenTree, to_source
from derivekit.model.tokens import Literal as LiteralToken

# ###############
# Public Interface
# ###############


class DataKind(Enum):
    """The declaration keyword: an aggregate (``struct``) or a variant type (``enum``)."""

    AGGREGATE = "struct"
    VARIANT = "enum"


class FieldShape(Enum):
    """The three field list shapes shared by aggregates and variants."""

    NAMED = "named"
    POSITIONAL = "positional"
    UNIT = "unit"


class Visibility(BaseModel):
    """A visibility marker: nothing, ``pub`` or ``pub(<restriction>)``."""

    model_config = ConfigDict(frozen=True)

    is_public: bool = False
    restriction: Tokens | None = None

    def to_tokens(self) -> list[TokenTree]:
        if not self.is_public:
            return []
        tokens: list[TokenTree] = [Ident("pub")]
        if self.restriction is not None:
            tokens.append(Group(Delimiter.PARENTHESIS, tuple(self.restriction)))
        return tokens


class Attribute(BaseModel):
    """An attribute such as ``#[serde(rename = "x")]``.

    Attributes:
        path: The attribute path, e.g. ``serde`` or ``my_crate::attr``.
        tokens: The tokens inside the brackets, path included.
        inner: True for ``#![...]`` attributes.
        span: Location of the attribute group.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    tokens: Tokens
    inner: bool = False
    span: Span = CALL_SITE

    @property
    def arguments(self) -> list[TokenTree] | None:
        """Return the tokens inside ``path(...)``, or None if the attribute has another form."""
        last = self.tokens[-1] if self.tokens else None
        is_call = isinstance(last, Group) and last.delimiter == Delimiter.PARENTHESIS
        if is_call and self._path_length() == len(self.tokens) - 1:
            assert isinstance(last, Group)
            return list(last.tokens)
        return None

    @property
    def value(self) -> TokenTree | None:
        """Return the literal of a ``path = value`` attribute, or None."""
        count = self._path_length()
        rest = self.tokens[count:]
        if len(rest) == 2 and str(rest[0]) == "=":
            return rest[1]
        return None

    def arguments_of(self, prefix: str) -> list[TokenTree] | None:
        """Return the argument tokens if this is a ``prefix(...)`` attribute, else None."""
        if self.path != prefix:
            return None
        return self.arguments

    def _path_length(self) -> int:
        # Number of leading tokens that spell the path (idents and `::` puncts).
        count = 0
        for token in self.tokens:
            if isinstance(token, Ident) or str(token) == ":":
                count += 1
            else:
                break
        return count


class AttributeItem(BaseModel):
    """One comma-separated entry inside ``prefix(...)``: ``skip`` or ``rename = "x"``."""

    model_config = ConfigDict(frozen=True)

    name: Ident
    value: Tokens | None = None


class Field(BaseModel):
    """A named or positional field.

    Attributes:
        name: The field name, or None for positional fields.
        visibility: The field's visibility marker.
        type_tokens: The field type as an opaque token run.
        attributes: Attributes attached to the field.
    """

    model_config = ConfigDict(frozen=True)

    name: Ident | None = None
    visibility: Visibility = _Field(default_factory=Visibility)
    type_tokens: Tokens
    attributes: list[Attribute] = _Field(default_factory=list)

    @property
    def type_string(self) -> str:
        return to_source(self.type_tokens)

    @property
    def span(self) -> Span:
        if self.name is not None:
            return self.name.span
        return self.type_tokens[0].span if self.type_tokens else CALL_SITE


class FieldRef(BaseModel):
    """A way to refer to one field: by name or by positional index."""

    model_config = ConfigDict(frozen=True)

    index: int
    name: Ident | None = None

    def member(self) -> TokenTree:
        """Return the token that follows ``.`` in a member access, e.g. ``a`` or ``0``."""
        if self.name is not None:
            return self.name
        return LiteralToken.integer(self.index)

    def binding(self, prefix: str = "") -> Ident:
        """Return an identifier for binding this field in a pattern.

        Named fields become ``<prefix><name>``, positional ones
        ``<prefix><index>``.

        Raises:
            ValueError: If the field is positional and *prefix* is empty.
        """
        if self.name is not None:
            return Ident(f"{prefix}{self.name.name}", self.name.span)
        if not prefix:
            raise ValueError("Positional fields need a non-empty binding prefix")
        return Ident(f"{prefix}{self.index}")


class Fields(BaseModel):
    """A field list with its shape."""

    model_config = ConfigDict(frozen=True)

    shape: FieldShape
    items: list[Field] = _Field(default_factory=list)

    @property
    def delimiter(self) -> Delimiter | None:
        """Return the group delimiter for this shape, or None for unit."""
        if self.shape == FieldShape.NAMED:
            return Delimiter.BRACE
        if self.shape == FieldShape.POSITIONAL:
            return Delimiter.PARENTHESIS
        return None

    def names(self) -> list[FieldRef]:
        return [FieldRef(index=index, name=item.name) for index, item in enumerate(self.items)]

    def __len__(self) -> int:
        return len(self.items)


class Variant(BaseModel):
    """One alternative of a variant type."""

    model_config = ConfigDict(frozen=True)

    name: Ident
    fields: Fields = _Field(default_factory=lambda: Fields(shape=FieldShape.UNIT))
    discriminant: Tokens | None = None
    attributes: list[Attribute] = _Field(default_factory=list)


class AggregateBody(BaseModel):
    """The body of an aggregate type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["aggregate"] = "aggregate"
    fields: Fields


class VariantsBody(BaseModel):
    """The body of a variant type: a non-empty, ordered list of variants."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["variants"] = "variants"
    variants: list[Variant] = _Field(min_length=1)


Body = Annotated[AggregateBody | VariantsBody, _Field(discriminator="kind")]


class Declaration(BaseModel):
    """A parsed type declaration.

    Attributes:
        attributes: Attributes in source order. Doc comments appear as ``doc``.
        visibility: The declaration's visibility marker.
        kind: Aggregate or variant type.
        name: The declared type name.
        generics: Generic parameters and where-clause.
        body: The fields or the variants.
    """

    model_config = ConfigDict(frozen=True)

    attributes: list[Attribute] = _Field(default_factory=list)
    visibility: Visibility = _Field(default_factory=Visibility)
    kind: DataKind
    name: Ident
    generics: GenericParams = _Field(default_factory=GenericParams)
    body: Body

    def get_attributes(self, path: str) -> list[Attribute]:
        """Return every attribute with the given path, in source order."""
        return [attr for attr in self.attributes if attr.path == path]

    def attribute_map(self) -> dict[str, list[Attribute]]:
        """Return the attributes keyed by path. Duplicate paths accumulate in order."""
        result: dict[str, list[Attribute]] = {}
        for attr in self.attributes:
            result.setdefault(attr.path, []).append(attr)
        return result
