# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Token and declaration model for DeriveKit."""

from derivekit.model.declaration import (
    AggregateBody,
    Attribute,
    AttributeItem,
    Body,
    DataKind,
    Declaration,
    Field,
    FieldRef,
    Fields,
    FieldShape,
    Variant,
    VariantsBody,
    Visibility,
)
from derivekit.model.generics import GenericKind, GenericParam, GenericParams, Tokens, WherePredicate
from derivekit.model.tokens import (
    CALL_SITE,
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    Spacing,
    Span,
    TokenTree,
    to_source,
)

__all__ = [
    # Tokens
    "Span",
    "CALL_SITE",
    "Delimiter",
    "Spacing",
    "Ident",
    "Punct",
    "Literal",
    "Group",
    "TokenTree",
    "to_source",
    # Generics
    "GenericKind",
    "GenericParam",
    "GenericParams",
    "WherePredicate",
    "Tokens",
    # Declarations
    "DataKind",
    "FieldShape",
    "Visibility",
    "Attribute",
    "AttributeItem",
    "Field",
    "FieldRef",
    "Fields",
    "Variant",
    "AggregateBody",
    "VariantsBody",
    "Body",
    "Declaration",
]
