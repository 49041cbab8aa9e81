# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the token and declaration model."""

import json

import pytest
from pydantic import ValidationError

from derivekit.model import (
    AggregateBody,
    Attribute,
    Declaration,
    Delimiter,
    FieldRef,
    Fields,
    FieldShape,
    GenericKind,
    GenericParam,
    GenericParams,
    Group,
    Ident,
    Literal,
    Punct,
    Spacing,
    Span,
    VariantsBody,
    WherePredicate,
    to_source,
)
from derivekit.model.tokens import with_span
from derivekit.parser import parse, tokenize

# ###############
# Tokens
# ###############


class TestTokens:
    def test_tokens_compare_without_spans(self) -> None:
        assert Ident("a", Span(3, 4)) == Ident("a")
        assert with_span(Punct(";"), Span(1, 1)) == Punct(";")

    def test_punct_spacing_is_significant(self) -> None:
        assert Punct(">", Spacing.JOINT) != Punct(">", Spacing.ALONE)

    def test_delimiter_characters(self) -> None:
        assert Delimiter.BRACE.open == "{"
        assert Delimiter.BRACKET.close == "]"
        assert Delimiter.NONE.open == ""

    def test_string_literal_is_escaped(self) -> None:
        assert Literal.string('say "hi"\\').text == '"say \\"hi\\"\\\\"'
        assert Literal.string("a\nb").text == '"a\\nb"'

    def test_integer_literal(self) -> None:
        assert Literal.integer(42) == Literal("42")

    def test_with_span_keeps_group_contents(self) -> None:
        inner = Ident("x", Span(1, 2))
        group = with_span(Group(Delimiter.PARENTHESIS, (inner,)), Span(5, 5))
        assert group.span == Span(5, 5)
        assert isinstance(group, Group)
        assert group.tokens[0].span == Span(1, 2)


class TestToSource:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("a -> b", "a -> b"),
            ("&'a str", "& 'a str"),
            ("Decode<'de>", "Decode < 'de >"),
            ("f(x, y)", "f (x , y)"),
            ("{ a }", "{ a }"),
            ("{}", "{}"),
            ("[u8; 4]", "[u8 ; 4]"),
        ],
    )
    def test_printed_form(self, source: str, expected: str) -> None:
        assert to_source(tokenize(source)) == expected

    def test_printed_form_lexes_back_to_same_tokens(self) -> None:
        tokens = tokenize("impl<'a, T: Clone> Foo<'a, T> where T: Copy { fn f(&self) -> u8 { 1 } }")
        assert tokenize(to_source(tokens)) == tokens


# ###############
# Generics
# ###############


def _generics(source: str) -> GenericParams:
    return parse(source).generics


class TestGenerics:
    def test_parameter_kinds_keep_source_order(self) -> None:
        generics = _generics("struct S<'a, T, const N: usize>;")
        assert [p.kind for p in generics.params] == [GenericKind.LIFETIME, GenericKind.TYPE, GenericKind.CONST]
        assert [p.name.name for p in generics.lifetimes()] == ["a"]
        assert [p.name.name for p in generics.type_params()] == ["T"]
        assert [p.name.name for p in generics.const_params()] == ["N"]

    def test_impl_generics_drop_defaults(self) -> None:
        generics = _generics("struct S<'a, T: Clone = u8, const N: usize = 3> { x: &'a T }")
        assert to_source(generics.impl_generics()) == "< 'a , T : Clone , const N : usize >"

    def test_type_generics_name_parameters_only(self) -> None:
        generics = _generics("struct S<'a, T: Clone, const N: usize> { x: &'a T }")
        assert to_source(generics.type_generics()) == "< 'a , T , N >"

    def test_extra_lifetimes_outlive_declared_ones(self) -> None:
        generics = _generics("struct S<'a, 'b: 'a, T> { x: &'a T, y: &'b T }")
        assert to_source(generics.impl_generics(["x"])) == "< 'x : 'a + 'b , 'a , 'b : 'a , T >"

    def test_empty_generics_produce_no_tokens(self) -> None:
        generics = _generics("struct S;")
        assert generics.is_empty
        assert generics.impl_generics() == []
        assert generics.type_generics() == []
        assert generics.where_tokens() == []

    def test_where_clause_is_widened(self) -> None:
        generics = _generics("struct S<T> where T: Copy { t: T }")
        extra = WherePredicate(bounded=[Ident("T")], bounds=[[Ident("Debug")]])
        assert to_source(generics.where_tokens()) == "where T : Copy"
        assert to_source(generics.where_tokens([extra])) == "where T : Copy , T : Debug"

    def test_extra_predicates_without_original_clause(self) -> None:
        generics = _generics("struct S<T> { t: T }")
        assert generics.where_clause is None
        extra = WherePredicate(bounded=[Ident("T")], bounds=[[Ident("Clone")], [Ident("Send")]])
        assert to_source(generics.where_tokens([extra])) == "where T : Clone + Send"

    def test_declaration_tokens_accept_extra_bounds(self) -> None:
        param = GenericParam(kind=GenericKind.TYPE, name=Ident("T"), bounds=[[Ident("Clone")]])
        assert to_source(param.declaration_tokens([[Ident("Debug")]])) == "T : Clone + Debug"


# ###############
# Declarations
# ###############


class TestFieldRefs:
    def test_named_member_and_binding(self) -> None:
        ref = FieldRef(index=0, name=Ident("a"))
        assert ref.member() == Ident("a")
        assert ref.binding() == Ident("a")
        assert ref.binding("other_") == Ident("other_a")

    def test_positional_member_and_binding(self) -> None:
        ref = FieldRef(index=1)
        assert ref.member() == Literal("1")
        assert ref.binding("f") == Ident("f1")

    def test_positional_binding_needs_prefix(self) -> None:
        with pytest.raises(ValueError):
            FieldRef(index=0).binding()

    def test_fields_names(self) -> None:
        decl = parse("struct P(u8, u16);")
        assert isinstance(decl.body, AggregateBody)
        refs = decl.body.fields.names()
        assert [ref.index for ref in refs] == [0, 1]
        assert all(ref.name is None for ref in refs)


class TestFields:
    @pytest.mark.parametrize(
        ("shape", "delimiter"),
        [
            (FieldShape.NAMED, Delimiter.BRACE),
            (FieldShape.POSITIONAL, Delimiter.PARENTHESIS),
            (FieldShape.UNIT, None),
        ],
    )
    def test_delimiter_matches_shape(self, shape: FieldShape, delimiter: Delimiter | None) -> None:
        assert Fields(shape=shape).delimiter == delimiter

    def test_len(self) -> None:
        decl = parse("struct A { a: u8, b: u8 }")
        assert isinstance(decl.body, AggregateBody)
        assert len(decl.body.fields) == 2


class TestAttributes:
    def test_value_and_arguments(self) -> None:
        decl = parse('#[doc = "x"] #[serde(rename = "y")] #[serde(skip)] struct A;')
        doc, rename, skip = decl.attributes
        assert doc.value == Literal('"x"')
        assert doc.arguments is None
        assert rename.value is None
        assert to_source(rename.arguments or []) == 'rename = "y"'
        assert skip.arguments_of("serde") == [Ident("skip")]
        assert skip.arguments_of("doc") is None

    def test_attribute_map_accumulates_duplicates(self) -> None:
        decl = parse('#[doc = "x"] #[serde(rename = "y")] #[serde(skip)] struct A;')
        attribute_map = decl.attribute_map()
        assert list(attribute_map) == ["doc", "serde"]
        assert len(attribute_map["serde"]) == 2
        assert decl.get_attributes("serde") == attribute_map["serde"]
        assert decl.get_attributes("missing") == []

    def test_path_with_separator(self) -> None:
        decl = parse("#[my_crate::marker(x)] struct A;")
        (attribute,) = decl.attributes
        assert attribute.path == "my_crate::marker"
        assert attribute.arguments == [Ident("x")]

    def test_attribute_without_arguments(self) -> None:
        attribute = Attribute(path="inline", tokens=[Ident("inline")])
        assert attribute.arguments is None
        assert attribute.value is None


class TestDeclaration:
    def test_variant_body_must_not_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            VariantsBody(variants=[])

    def test_json_dump_prints_tokens_as_source(self) -> None:
        decl = parse("pub struct P<T: Clone> { x: Vec<T> }")
        data = json.loads(decl.model_dump_json())
        assert data["kind"] == "struct"
        assert data["name"]["name"] == "P"
        assert data["visibility"]["is_public"] is True
        assert data["body"]["kind"] == "aggregate"
        assert data["body"]["fields"]["items"][0]["type_tokens"] == "Vec < T >"
        assert data["generics"]["params"][0]["bounds"] == ["Clone"]

    def test_enum_json_dump(self) -> None:
        decl = parse("enum E { A, B(u8) }")
        data = json.loads(decl.model_dump_json())
        assert data["kind"] == "enum"
        assert data["body"]["kind"] == "variants"
        assert [v["fields"]["shape"] for v in data["body"]["variants"]] == ["unit", "positional"]

    def test_declaration_is_frozen(self) -> None:
        decl = parse("struct A;")
        assert isinstance(decl, Declaration)
        with pytest.raises(ValidationError):
            decl.name = Ident("B")  # type: ignore[misc]
