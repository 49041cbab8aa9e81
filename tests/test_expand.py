# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for the derive entry point."""

import pytest

from derivekit import expand
from derivekit.errors import DeriveError
from derivekit.expand import DeriveFn
from derivekit.generate import Generator, MatchBuilder, Receiver
from derivekit.model import AggregateBody, Declaration, Group, Ident, Literal, Span, VariantsBody, to_source
from derivekit.model.tokens import Delimiter
from derivekit.parser import parse_attribute_items

# ###############
# Test Helpers
# ###############


def _marker(declaration: Declaration, generator: Generator) -> None:
    generator.implement("Marker")


def _field_count(declaration: Declaration, generator: Generator) -> None:
    if isinstance(declaration.body, AggregateBody):
        count = len(declaration.body.fields)
    else:
        raise DeriveError("FieldCount only supports structs", declaration.name.span)
    generator.implement("FieldCount").add_const("COUNT", "usize", str(count))


def _variant_names(declaration: Declaration, generator: Generator) -> None:
    assert isinstance(declaration.body, VariantsBody)
    variants = declaration.body.variants

    def build_match(m: MatchBuilder) -> None:
        for variant in variants:
            pattern = f"Self::{variant.name}"
            if variant.fields.delimiter is Delimiter.PARENTHESIS:
                pattern += "(..)"
            elif variant.fields.delimiter is Delimiter.BRACE:
                pattern += " { .. }"
            m.arm(pattern, [Literal.string(variant.name.name)])

    generator.implement("VariantName").add_function("variant_name").receiver(Receiver.BY_REF).returns(
        "&'static str"
    ).body(lambda b: b.match_("self", build_match))


# ###############
# Success
# ###############


def test_expand_marker_derive() -> None:
    assert to_source(expand("struct Foo;", _marker)) == "impl Marker for Foo {}"


def test_expand_forwards_generics() -> None:
    assert to_source(expand("struct Foo<T>(T);", _marker)) == "impl < T > Marker for Foo < T > {}"


def test_expand_uses_declaration_data() -> None:
    tokens = expand("struct P { a: u8, b: u8, c: u8 }", _field_count)
    assert to_source(tokens) == "impl FieldCount for P { const COUNT : usize = 3 ; }"


def test_expand_match_over_variants() -> None:
    tokens = expand("enum E { A, B(u8), C { x: u8 } }", _variant_names)
    assert to_source(tokens) == (
        "impl VariantName for E { fn variant_name (& self) -> & 'static str "
        '{ match self { Self :: A => "A" , Self :: B (..) => "B" , Self :: C { .. } => "C" , } } }'
    )


def test_expand_reads_helper_attributes() -> None:
    def derive(declaration: Declaration, generator: Generator) -> None:
        (attribute,) = declaration.get_attributes("name")
        items = parse_attribute_items(attribute)
        value = items[0].value
        assert value is not None
        generator.implement("Named").add_const("NAME", "&'static str", value)

    tokens = expand('#[name(label = "point")] struct P;', derive)
    assert to_source(tokens) == 'impl Named for P { const NAME : & \'static str = "point" ; }'


def test_expand_field_named_like_literal_prefix() -> None:
    def derive(declaration: Declaration, generator: Generator) -> None:
        generator.implement("Get").add_function("get").receiver(Receiver.BY_REF).returns("u8").body(
            lambda b: b.tail("self.b")
        )

    tokens = expand("struct S { b: u8 }", derive)
    assert to_source(tokens) == "impl Get for S { fn get (& self) -> u8 { self . b } }"


# ###############
# Failure
# ###############


def test_parse_error_becomes_diagnostic() -> None:
    tokens = expand("struct ;", _marker)
    assert tokens[0] == Ident("compile_error")
    assert tokens[0].span == Span(1, 8)
    group = tokens[2]
    assert isinstance(group, Group)
    assert group.tokens == (Literal.string("Expected identifier, found `;`"),)


def test_derive_error_becomes_diagnostic() -> None:
    tokens = expand("enum E { A }", _field_count)
    assert tokens[0] == Ident("compile_error")
    assert tokens[0].span == Span(1, 6)
    assert to_source(tokens) == 'compile_error ! { "FieldCount only supports structs" }'


def test_builder_misuse_inside_derive_becomes_diagnostic() -> None:
    def derive(declaration: Declaration, generator: Generator) -> None:
        generator.finish()

    tokens = expand("struct Foo;", derive)
    assert tokens[0] == Ident("compile_error")


def _finish_twice(declaration: Declaration, generator: Generator) -> None:
    generator.finish()
    generator.implement("Late")


@pytest.mark.parametrize(
    ("source", "derive"),
    [
        ("struct ;", _marker),
        ("struct A { a: u8 ", _marker),
        ("struct A }", _marker),
        ("struct S(b", _marker),
        ("struct S { b: u8 } b", _marker),
        ("struct S { b: u8 }", lambda d, g: g.implement("")),
        ("struct S { b: u8 }", lambda d, g: g.implement("Get").with_where("T Copy")),
        ("struct S { b: u8 }", lambda d, g: g.implement("Get").with_lifetime("'de")),
        ("struct S { b: u8 }", lambda d, g: g.implement("Get").add_function("get").body(lambda b: b.raw("{"))),
        ("struct S { b: u8 }", lambda d, g: g.inherent_impl().add_function("get").body(lambda b: b.tail("self.b)"))),
        ("struct S { b: u8 }", _finish_twice),
    ],
)
def test_every_toolkit_failure_becomes_diagnostic(source: str, derive: DeriveFn) -> None:
    tokens = expand(source, derive)
    assert tokens[0] == Ident("compile_error")
    assert to_source(tokens[:2]) == "compile_error !"
    group = tokens[2]
    assert isinstance(group, Group)
    assert group.delimiter is Delimiter.BRACE
    assert len(group.tokens) == 1
    assert isinstance(group.tokens[0], Literal)


def test_other_exceptions_propagate() -> None:
    def derive(declaration: Declaration, generator: Generator) -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        expand("struct Foo;", derive)
