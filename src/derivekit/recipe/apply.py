# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Drives a :class:`Generator` from a parsed recipe."""

from derivekit.generate.generator import Generator, ImplBuilder
from derivekit.recipe.config import FunctionRecipe, ImplRecipe, Recipe

# ###############
# Public Interface
# ###############


def apply_recipe(recipe: Recipe, generator: Generator) -> None:
    """Add every implementation block of *recipe* to *generator*.

    The placeholder ``{name}`` in types, values and bodies is replaced by the
    target type name. Other braces are left alone, so Rust blocks need no
    escaping.

    Raises:
        DeriveError: If a type, value or body fragment is malformed.
    """
    for impl_recipe in recipe.implementations:
        _apply_impl(impl_recipe, generator)


# ################
# Implementation
# ################


def _apply_impl(impl_recipe: ImplRecipe, generator: Generator) -> None:
    name = generator.target_name.name
    if impl_recipe.interface is None:
        builder = generator.inherent_impl()
    else:
        builder = generator.implement(_substitute(impl_recipe.interface, name))
    for attribute in impl_recipe.attributes:
        builder.with_attr(attribute)
    if impl_recipe.bound_type_params is not None:
        builder.bound_type_params(_substitute(impl_recipe.bound_type_params, name))
    for predicate in impl_recipe.where:
        builder.with_where(_substitute(predicate, name))
    for const in impl_recipe.consts:
        builder.add_const(const.name, _substitute(const.type, name), _substitute(const.value, name))
    for function in impl_recipe.functions:
        _apply_function(function, builder, name)


def _apply_function(function: FunctionRecipe, builder: ImplBuilder, name: str) -> None:
    fn = builder.add_function(function.name).receiver(function.receiver)
    if function.public:
        fn.make_pub()
    if function.is_async:
        fn.as_async()
    for arg in function.args:
        fn.arg(arg.name, _substitute(arg.type, name))
    if function.returns is not None:
        fn.returns(_substitute(function.returns, name))
    if function.body:
        body = _substitute(function.body, name)
        fn.body(lambda b: b.raw(body))


def _substitute(text: str, name: str) -> str:
    return text.replace("{name}", name)
