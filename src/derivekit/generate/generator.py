# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Fluent builder for implementation blocks, functions and statement bodies.

A :class:`Generator` is seeded with a type name and its generic parameters,
usually from a parsed :class:`~derivekit.model.declaration.Declaration`.
Sub-builders write into a builder tree owned by the generator. Calling
:meth:`Generator.finish` renders the tree and consumes it; any later call on
the generator or on one of its sub-builders raises :class:`BuilderMisuse`.

Example::

    generator = Generator.from_declaration(parse("struct Foo<T> { x: T }"))
    generator.implement("Greet").add_function("hi").receiver(Receiver.BY_REF).returns(
        "&'static str"
    ).body(lambda b: b.tail('"hi"'))
    tokens = generator.finish()
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from derivekit.errors import BuilderMisuse, MalformedFragment
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
from derivekit.generate.renderer import render
from derivekit.generate.stream_builder import StreamBuilder, fragment, parse_ident
from derivekit.model.declaration import Declaration
from derivekit.model.generics import GenericKind, GenericParam, GenericParams, WherePredicate, lifetime_tokens
from derivekit.model.tokens import Ident, TokenTree
from derivekit.parser.parser import parse_where_predicate

# ###############
# Public Interface
# ###############

# Text or ready-made tokens, accepted wherever a builder takes a type or expression.
Code = str | Sequence[TokenTree]


class Generator:
    """Accumulates implementation blocks for one target type.

    Args:
        name: The target type name.
        generics: The target's generic parameters. Defaults to none.
    """

    def __init__(self, name: str | Ident, generics: GenericParams | None = None) -> None:
        self._name = name if isinstance(name, Ident) else parse_ident(name)
        self._generics = generics if generics is not None else GenericParams()
        self._lifecycle = _Lifecycle()
        self._blocks: list[ImplBlock] = []

    @classmethod
    def from_declaration(cls, declaration: Declaration) -> Generator:
        """Create a generator targeting a parsed declaration, forwarding its generics."""
        return cls(declaration.name, declaration.generics)

    @classmethod
    def with_name(cls, name: str) -> Generator:
        """Create a generator for a non-generic type given only by name."""
        return cls(name)

    @property
    def target_name(self) -> Ident:
        return self._name

    @property
    def generics(self) -> GenericParams:
        return self._generics

    def implement(self, interface: Code) -> ImplBuilder:
        """Open ``impl <Interface> for <Target>``, forwarding the target's generics.

        Raises:
            BuilderMisuse: If called after :meth:`finish`.
            MalformedFragment: If *interface* is text that cannot be lexed.
        """
        self._lifecycle.ensure_open("implement")
        interface_tokens = fragment(interface)
        if not interface_tokens:
            raise MalformedFragment("Interface name must not be empty", "")
        return self._open(interface_tokens)

    def inherent_impl(self) -> ImplBuilder:
        """Open ``impl <Target>`` without an interface.

        Raises:
            BuilderMisuse: If called after :meth:`finish`.
        """
        self._lifecycle.ensure_open("inherent_impl")
        return self._open(None)

    def finish(self) -> list[TokenTree]:
        """Render every block in the order it was opened and consume the generator.

        Raises:
            BuilderMisuse: If called more than once.
        """
        self._lifecycle.ensure_open("finish")
        blocks, self._blocks = self._blocks, []
        self._lifecycle.close()
        return render(blocks)

    def _open(self, interface: list[TokenTree] | None) -> ImplBuilder:
        block = ImplBlock(target=self._name, generics=self._generics, interface=interface)
        self._blocks.append(block)
        return ImplBuilder(self._lifecycle, block)


class ImplBuilder:
    """Builds one implementation block. Obtained from :class:`Generator`."""

    def __init__(self, lifecycle: _Lifecycle, block: ImplBlock) -> None:
        self._lifecycle = lifecycle
        self._block = block

    def add_function(self, name: str) -> FnBuilder:
        """Append a function named *name* and return its builder."""
        self._lifecycle.ensure_open("add_function")
        function = Function(name=parse_ident(name))
        self._block.items.append(function)
        return FnBuilder(self._lifecycle, function)

    def add_const(self, name: str, type_: Code, value: Code) -> ImplBuilder:
        """Append ``const <name>: <type> = <value>;``."""
        self._lifecycle.ensure_open("add_const")
        self._block.items.append(Const(name=parse_ident(name), type_tokens=fragment(type_), value=fragment(value)))
        return self

    def with_attr(self, attribute: Code) -> ImplBuilder:
        """Add ``#[<attribute>]`` before ``impl``, e.g. ``automatically_derived``."""
        self._lifecycle.ensure_open("with_attr")
        self._block.attributes.append(fragment(attribute))
        return self

    def with_where(self, predicate: str | WherePredicate) -> ImplBuilder:
        """Widen the where-clause with a predicate such as ``T: Clone``.

        Raises:
            MalformedFragment: If the predicate text cannot be lexed.
            UnexpectedToken: If the predicate has no top-level ``:``.
        """
        self._lifecycle.ensure_open("with_where")
        if isinstance(predicate, str):
            predicate = parse_where_predicate(fragment(predicate))
        self._block.extra_where.append(predicate)
        return self

    def bound_type_params(self, bound: Code) -> ImplBuilder:
        """Add ``T: <bound>`` to the where-clause for every type parameter of the target."""
        self._lifecycle.ensure_open("bound_type_params")
        bound_tokens = fragment(bound)
        for param in self._block.generics.type_params():
            self._block.extra_where.append(WherePredicate(bounded=[param.name], bounds=[bound_tokens]))
        return self

    def with_lifetime(self, name: str) -> ImplBuilder:
        """Declare an impl-level lifetime (without the quote) that outlives every target lifetime."""
        self._lifecycle.ensure_open("with_lifetime")
        parse_ident(name)
        self._block.extra_lifetimes.append(name)
        return self

    def with_generics(self, generics: GenericParams) -> ImplBuilder:
        """Replace the forwarded generic parameters of this block."""
        self._lifecycle.ensure_open("with_generics")
        self._block.generics = generics
        return self


class FnBuilder:
    """Builds one function. Every method returns the builder itself."""

    def __init__(self, lifecycle: _Lifecycle, function: Function) -> None:
        self._lifecycle = lifecycle
        self._function = function

    def receiver(self, mode: Receiver) -> FnBuilder:
        """Set how the function takes ``self``. A later call overrides an earlier one."""
        self._lifecycle.ensure_open("receiver")
        self._function.receiver = mode
        return self

    def returns(self, type_: Code) -> FnBuilder:
        self._lifecycle.ensure_open("returns")
        self._function.return_type = fragment(type_)
        return self

    def generic(self, name: str, *bounds: Code) -> FnBuilder:
        """Add a type parameter ``<name: bound + bound>`` to the function."""
        self._lifecycle.ensure_open("generic")
        param = GenericParam(kind=GenericKind.TYPE, name=parse_ident(name), bounds=[fragment(b) for b in bounds])
        self._function.generics.append(param)
        return self

    def lifetime(self, name: str, *outlives: str) -> FnBuilder:
        """Add a lifetime parameter ``'name: 'other`` (names without the quote)."""
        self._lifecycle.ensure_open("lifetime")
        bounds = [lifetime_tokens(parse_ident(other)) for other in outlives]
        self._function.generics.append(GenericParam(kind=GenericKind.LIFETIME, name=parse_ident(name), bounds=bounds))
        return self

    def arg(self, name: str, type_: Code) -> FnBuilder:
        self._lifecycle.ensure_open("arg")
        self._function.args.append((parse_ident(name), fragment(type_)))
        return self

    def make_pub(self) -> FnBuilder:
        self._lifecycle.ensure_open("make_pub")
        self._function.is_pub = True
        return self

    def as_async(self) -> FnBuilder:
        self._lifecycle.ensure_open("as_async")
        self._function.is_async = True
        return self

    def with_attr(self, attribute: Code) -> FnBuilder:
        """Add ``#[<attribute>]`` before the function, e.g. ``inline``."""
        self._lifecycle.ensure_open("with_attr")
        self._function.attributes.append(fragment(attribute))
        return self

    def body(self, build: Callable[[BodyBuilder], object]) -> FnBuilder:
        """Fill the function body by calling *build* with a statement builder.

        Statements are appended, so calling this twice extends the body.
        """
        self._lifecycle.ensure_open("body")
        build(BodyBuilder(self._lifecycle, self._function.body))
        return self


class BodyBuilder:
    """Appends statements to a function body or a match arm block."""

    def __init__(self, lifecycle: _Lifecycle, statements: list[Statement]) -> None:
        self._lifecycle = lifecycle
        self._statements = statements

    def return_(self, expr: Code | None = None) -> BodyBuilder:
        """Push ``return <expr>;``, or ``return;`` without an expression."""
        return self._push("return_", Return(expr=None if expr is None else fragment(expr)))

    def let(self, pattern: Code, value: Code | None = None, type_: Code | None = None, mutable: bool = False) -> BodyBuilder:
        """Push ``let [mut] <pattern>[: <type>][ = <value>];``."""
        statement = Let(
            pattern=fragment(pattern),
            value=None if value is None else fragment(value),
            type_tokens=None if type_ is None else fragment(type_),
            mutable=mutable,
        )
        return self._push("let", statement)

    def expr(self, expr: Code) -> BodyBuilder:
        """Push an expression statement, ``<expr>;``."""
        return self._push("expr", Expr(tokens=fragment(expr)))

    def tail(self, expr: Code) -> BodyBuilder:
        """Push the trailing value expression of the block, without ``;``."""
        return self._push("tail", Tail(tokens=fragment(expr)))

    def match_(self, scrutinee: Code, build: Callable[[MatchBuilder], object]) -> BodyBuilder:
        """Push ``match <scrutinee> { ... }`` with arms added by *build*."""
        self._lifecycle.ensure_open("match_")
        match = Match(scrutinee=fragment(scrutinee))
        build(MatchBuilder(self._lifecycle, match))
        self._statements.append(match)
        return self

    def raw(self, code: str) -> BodyBuilder:
        """Push a raw code fragment, lexed but not otherwise checked.

        Raises:
            MalformedFragment: If the fragment's delimiters are unbalanced.
        """
        return self._push("raw", Raw(tokens=fragment(code)))

    def raw_tokens(self, tokens: Sequence[TokenTree]) -> BodyBuilder:
        """Push ready-made tokens unchanged, spans included."""
        return self._push("raw_tokens", Raw(tokens=list(tokens)))

    def stream(self, build: Callable[[StreamBuilder], object]) -> BodyBuilder:
        """Push the tokens emitted by *build* on a fresh :class:`StreamBuilder`."""
        self._lifecycle.ensure_open("stream")
        builder = StreamBuilder()
        build(builder)
        self._statements.append(Raw(tokens=builder.tokens))
        return self

    def _push(self, operation: str, statement: Statement) -> BodyBuilder:
        self._lifecycle.ensure_open(operation)
        self._statements.append(statement)
        return self


class MatchBuilder:
    """Adds arms to a ``match`` statement."""

    def __init__(self, lifecycle: _Lifecycle, match: Match) -> None:
        self._lifecycle = lifecycle
        self._match = match

    def arm(self, pattern: Code, expr: Code) -> MatchBuilder:
        """Add ``<pattern> => <expr>,``."""
        self._lifecycle.ensure_open("arm")
        self._match.arms.append(MatchArm(pattern=fragment(pattern), expr=fragment(expr)))
        return self

    def arm_block(self, pattern: Code, build: Callable[[BodyBuilder], object]) -> MatchBuilder:
        """Add ``<pattern> => { ... }`` with statements added by *build*."""
        self._lifecycle.ensure_open("arm_block")
        statements: list[Statement] = []
        build(BodyBuilder(self._lifecycle, statements))
        self._match.arms.append(MatchArm(pattern=fragment(pattern), block=statements))
        return self


# ################
# Implementation
# ################


class _Lifecycle:
    """Open/finished flag shared by a generator and all of its sub-builders."""

    def __init__(self) -> None:
        self._finished = False

    def ensure_open(self, operation: str) -> None:
        if self._finished:
            raise BuilderMisuse(f"Cannot call `{operation}` after `finish()`")

    def close(self) -> None:
        self._finished = True

