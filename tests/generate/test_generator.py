# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the implementation builders and the renderer."""

from collections.abc import Callable

import pytest

from derivekit.errors import BuilderMisuse, MalformedFragment, UnexpectedToken
from derivekit.generate import BodyBuilder, Generator, Receiver
from derivekit.model.tokens import CALL_SITE, Delimiter, Group, Ident, Literal, Punct, Span, to_source
from derivekit.parser import parse, tokenize

# ###############
# Test Helpers
# ###############


def _impl_source(generator: Generator) -> str:
    return to_source(generator.finish())


# ###############
# Implementation Headers
# ###############


class TestHeaders:
    def test_minimal_impl_block_tokens(self) -> None:
        generator = Generator("Name")
        generator.implement("Iface").add_function("f").receiver(Receiver.BY_REF).body(lambda b: b.raw("return 1;"))
        assert generator.finish() == [
            Ident("impl"),
            Ident("Iface"),
            Ident("for"),
            Ident("Name"),
            Group(
                Delimiter.BRACE,
                (
                    Ident("fn"),
                    Ident("f"),
                    Group(Delimiter.PARENTHESIS, (Punct("&"), Ident("self"))),
                    Group(Delimiter.BRACE, (Ident("return"), Literal("1"), Punct(";"))),
                ),
            ),
        ]

    def test_generics_and_where_clause_are_forwarded(self) -> None:
        decl = parse("struct Foo<'a, T: Clone = u8> where T: Copy { x: &'a T }")
        generator = Generator.from_declaration(decl)
        generator.implement("Show")
        assert _impl_source(generator) == "impl < 'a , T : Clone > Show for Foo < 'a , T > where T : Copy {}"

    def test_where_clause_is_widened(self) -> None:
        decl = parse("struct Foo<'a, T: Clone> where T: Copy { x: &'a T }")
        generator = Generator.from_declaration(decl)
        generator.implement("Show").bound_type_params("Debug").with_where("T: Into<u8>").with_lifetime("de")
        assert _impl_source(generator) == (
            "impl < 'de : 'a , 'a , T : Clone > Show for Foo < 'a , T > where T : Copy , T : Debug , T : Into < u8 > {}"
        )

    def test_impl_lifetime_outlives_borrowed_fields(self) -> None:
        generator = Generator.from_declaration(parse("struct S<'a> { x: &'a str }"))
        generator.implement("Decode<'de>").with_lifetime("de")
        assert _impl_source(generator) == "impl < 'de : 'a , 'a > Decode < 'de > for S < 'a > {}"

    def test_impl_lifetime_without_declared_lifetimes_is_unbounded(self) -> None:
        generator = Generator.from_declaration(parse("struct S<T> { t: T }"))
        generator.implement("Decode<'de>").with_lifetime("de")
        assert _impl_source(generator) == "impl < 'de , T > Decode < 'de > for S < T > {}"

    def test_bound_type_params_skips_lifetimes_and_consts(self) -> None:
        decl = parse("struct Foo<'a, A, const N: usize, B>(&'a A, B);")
        generator = Generator.from_declaration(decl)
        generator.implement("Clone").bound_type_params("Clone")
        assert _impl_source(generator).endswith("where A : Clone , B : Clone {}")

    def test_inherent_impl_and_block_order(self) -> None:
        generator = Generator.with_name("N")
        generator.implement("A")
        generator.inherent_impl()
        generator.implement("core::fmt::Debug")
        assert _impl_source(generator) == "impl A for N {} impl N {} impl core :: fmt :: Debug for N {}"

    def test_impl_attributes(self) -> None:
        generator = Generator("N")
        generator.implement("X").with_attr("automatically_derived")
        assert _impl_source(generator) == "# [automatically_derived] impl X for N {}"

    def test_empty_interface_is_rejected(self) -> None:
        with pytest.raises(MalformedFragment):
            Generator("N").implement("")

    def test_where_predicate_without_colon_is_rejected(self) -> None:
        with pytest.raises(UnexpectedToken):
            Generator("N").implement("X").with_where("T Clone")

    def test_with_generics_replaces_forwarded_parameters(self) -> None:
        generator = Generator("N")
        generator.inherent_impl().with_generics(parse("struct M<T>;").generics)
        assert _impl_source(generator) == "impl < T > N < T > {}"


# ###############
# Functions and Items
# ###############


class TestFunctions:
    def test_receiver_last_write_wins(self) -> None:
        generator = Generator("N")
        generator.inherent_impl().add_function("f").receiver(Receiver.BY_VALUE).receiver(Receiver.BY_MUT_REF)
        assert _impl_source(generator) == "impl N { fn f (& mut self) {} }"

    @pytest.mark.parametrize(
        ("receiver", "expected"),
        [
            (Receiver.NONE, "()"),
            (Receiver.BY_VALUE, "(self)"),
            (Receiver.BY_MUT_VALUE, "(mut self)"),
            (Receiver.BY_REF, "(& self)"),
        ],
    )
    def test_receiver_forms(self, receiver: Receiver, expected: str) -> None:
        generator = Generator("N")
        generator.inherent_impl().add_function("f").receiver(receiver)
        assert _impl_source(generator) == f"impl N {{ fn f {expected} {{}} }}"

    def test_full_signature(self) -> None:
        generator = Generator("N")
        (
            generator.inherent_impl()
            .add_function("get")
            .make_pub()
            .generic("U", "Into<u8>")
            .lifetime("b")
            .receiver(Receiver.BY_REF)
            .arg("value", "U")
            .returns("u8")
            .body(lambda b: b.let("x", "value.into()", type_="u8").tail("x"))
        )
        assert _impl_source(generator) == (
            "impl N { pub fn get < 'b , U : Into < u8 > > (& self , value : U) -> u8 "
            "{ let x : u8 = value . into () ; x } }"
        )

    def test_async_function_with_attribute(self) -> None:
        generator = Generator("N")
        generator.inherent_impl().add_function("run").as_async().with_attr("inline")
        assert _impl_source(generator) == "impl N { # [inline] async fn run () {} }"

    def test_lifetime_with_outlives_bound(self) -> None:
        generator = Generator("N")
        generator.inherent_impl().add_function("f").lifetime("a").lifetime("b", "a")
        assert _impl_source(generator) == "impl N { fn f < 'a , 'b : 'a > () {} }"

    def test_associated_const(self) -> None:
        generator = Generator("N")
        generator.implement("Id").add_const("ID", "u32", "7")
        assert _impl_source(generator) == "impl Id for N { const ID : u32 = 7 ; }"

    def test_invalid_function_name_is_rejected(self) -> None:
        with pytest.raises(MalformedFragment):
            Generator("N").inherent_impl().add_function("not a name")


# ###############
# Statements
# ###############


def _body_source(build: Callable[[BodyBuilder], object]) -> str:
    generator = Generator("N")
    generator.inherent_impl().add_function("f").body(build)
    tokens = generator.finish()
    block = tokens[-1]
    assert isinstance(block, Group)
    body = block.tokens[-1]
    assert isinstance(body, Group)
    return to_source(body.tokens)


class TestStatements:
    def test_return_forms(self) -> None:
        assert _body_source(lambda b: b.return_()) == "return ;"
        assert _body_source(lambda b: b.return_("x + 1")) == "return x + 1 ;"

    def test_let_forms(self) -> None:
        assert _body_source(lambda b: b.let("count", "0", mutable=True)) == "let mut count = 0 ;"
        assert _body_source(lambda b: b.let("x", type_="u8")) == "let x : u8 ;"

    def test_expression_and_tail(self) -> None:
        assert _body_source(lambda b: b.expr("f()").tail("true")) == "f () ; true"

    def test_match_with_arms(self) -> None:
        def build(b: BodyBuilder) -> None:
            b.match_("self", lambda m: m.arm("Self::A", "1").arm_block("Self::B", lambda a: a.return_("2")))

        assert _body_source(build) == "match self { Self :: A => 1 , Self :: B => { return 2 ; } }"

    def test_stream_statement(self) -> None:
        assert _body_source(lambda b: b.stream(lambda s: s.ident("a").puncts("+=").lit_int(1).punct(";"))) == "a += 1 ;"

    def test_statements_keep_insertion_order(self) -> None:
        assert _body_source(lambda b: b.let("a", "1").let("b", "2").tail("a + b")) == "let a = 1 ; let b = 2 ; a + b"

    def test_malformed_raw_fragment_is_rejected(self) -> None:
        with pytest.raises(MalformedFragment):
            Generator("N").inherent_impl().add_function("f").body(lambda b: b.raw("{"))


class TestSpans:
    def test_raw_text_gets_call_site_spans(self) -> None:
        generator = Generator("N")
        generator.inherent_impl().add_function("f").body(lambda b: b.raw("\n   y"))
        block = generator.finish()[-1]
        assert isinstance(block, Group)
        body = block.tokens[-1]
        assert isinstance(body, Group)
        assert body.tokens[0].span == CALL_SITE

    def test_raw_tokens_keep_their_spans(self) -> None:
        source_tokens = tokenize("  y")
        generator = Generator("N")
        generator.inherent_impl().add_function("f").body(lambda b: b.raw_tokens(source_tokens))
        block = generator.finish()[-1]
        assert isinstance(block, Group)
        body = block.tokens[-1]
        assert isinstance(body, Group)
        assert body.tokens[0].span == Span(1, 3)


# ###############
# Lifecycle
# ###############


class TestLifecycle:
    def test_finish_twice_raises(self) -> None:
        generator = Generator("N")
        generator.finish()
        with pytest.raises(BuilderMisuse, match="finish"):
            generator.finish()

    def test_generator_is_unusable_after_finish(self) -> None:
        generator = Generator("N")
        generator.finish()
        with pytest.raises(BuilderMisuse, match="implement"):
            generator.implement("X")

    def test_retained_sub_builders_are_unusable_after_finish(self) -> None:
        generator = Generator("N")
        impl = generator.implement("X")
        function = impl.add_function("f")
        generator.finish()
        with pytest.raises(BuilderMisuse):
            impl.add_function("g")
        with pytest.raises(BuilderMisuse):
            function.arg("x", "u8")

    def test_finish_without_blocks_is_empty(self) -> None:
        assert Generator("N").finish() == []

    def test_from_declaration_targets_the_declared_name(self) -> None:
        decl = parse("enum E<T> { A(T) }")
        generator = Generator.from_declaration(decl)
        assert generator.target_name == Ident("E")
        assert generator.generics.names() == ["T"]
