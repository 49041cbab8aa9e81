# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarative YAML recipes describing implementation blocks."""

from derivekit.recipe.apply import apply_recipe
from derivekit.recipe.config import (
    ArgRecipe,
    ConstRecipe,
    FunctionRecipe,
    ImplRecipe,
    Recipe,
    RecipeError,
    load_recipe,
    parse_recipe,
)

__all__ = [
    "ArgRecipe",
    "ConstRecipe",
    "FunctionRecipe",
    "ImplRecipe",
    "Recipe",
    "RecipeError",
    "apply_recipe",
    "load_recipe",
    "parse_recipe",
]
