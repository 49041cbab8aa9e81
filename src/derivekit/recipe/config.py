# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for derive recipe files.

A recipe describes implementation blocks declaratively, so that simple
derives can be expanded from the command line without writing Python::

    implementations:
      - interface: Describe
        functions:
          - name: describe
            receiver: ref
            returns: "&'static str"
            body: '"{name}"'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from derivekit.generate.nodes import Receiver

# ###############
# Public Interface
# ###############


class RecipeError(Exception):
    """Raised when a recipe file is invalid or cannot be loaded."""


@dataclass
class ArgRecipe:
    """A function argument."""

    name: str
    type: str


@dataclass
class ConstRecipe:
    """An associated constant."""

    name: str
    type: str
    value: str


@dataclass
class FunctionRecipe:
    """A function inside an implementation block.

    Attributes:
        name: Function name.
        receiver: How the function takes ``self``.
        public: Whether the function is marked ``pub``.
        is_async: Whether the function is marked ``async``.
        args: Arguments after the receiver.
        returns: Return type text, if any.
        body: Raw body code. ``{name}`` is replaced by the target type name.
    """

    name: str
    receiver: Receiver = Receiver.NONE
    public: bool = False
    is_async: bool = False
    args: list[ArgRecipe] = field(default_factory=list)
    returns: str | None = None
    body: str = ""


@dataclass
class ImplRecipe:
    """An implementation block. Without an interface it becomes an inherent block."""

    interface: str | None = None
    attributes: list[str] = field(default_factory=list)
    where: list[str] = field(default_factory=list)
    bound_type_params: str | None = None
    consts: list[ConstRecipe] = field(default_factory=list)
    functions: list[FunctionRecipe] = field(default_factory=list)


@dataclass
class Recipe:
    """The parsed content of a recipe file."""

    implementations: list[ImplRecipe] = field(default_factory=list)


def load_recipe(path: Path) -> Recipe:
    """Load and parse a recipe file.

    Args:
        path: Path to the YAML recipe.

    Returns:
        A Recipe instance populated from the file.

    Raises:
        RecipeError: If the file cannot be read or the recipe is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RecipeError(f"Recipe file not found: {path}") from None
    except OSError as exc:
        raise RecipeError(f"Cannot read recipe file: {exc}") from exc

    return parse_recipe(text, source_label=str(path))


def parse_recipe(text: str, source_label: str = "<string>") -> Recipe:
    """Parse recipe YAML text into a Recipe.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        RecipeError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RecipeError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise RecipeError(f"{source_label}: recipe must be a YAML mapping")

    raw_impls = data.get("implementations", [])
    if not isinstance(raw_impls, list):
        raise RecipeError(f"{source_label}: 'implementations' must be a list")
    return Recipe(
        implementations=[
            _parse_impl(entry, f"{source_label}: implementations[{index}]") for index, entry in enumerate(raw_impls)
        ]
    )


# ################
# Implementation
# ################

_RECEIVERS: dict[str, Receiver] = {
    "none": Receiver.NONE,
    "value": Receiver.BY_VALUE,
    "mut-value": Receiver.BY_MUT_VALUE,
    "ref": Receiver.BY_REF,
    "mut-ref": Receiver.BY_MUT_REF,
}


def _parse_impl(entry: object, location: str) -> ImplRecipe:
    mapping = _require_mapping(entry, location)
    return ImplRecipe(
        interface=_optional_string(mapping, "interface", location),
        attributes=_string_list(mapping, "attributes", location),
        where=_string_list(mapping, "where", location),
        bound_type_params=_optional_string(mapping, "bound-type-params", location),
        consts=[
            _parse_const(item, f"{location}.consts[{index}]")
            for index, item in enumerate(_list(mapping, "consts", location))
        ],
        functions=[
            _parse_function(item, f"{location}.functions[{index}]")
            for index, item in enumerate(_list(mapping, "functions", location))
        ],
    )


def _parse_const(entry: object, location: str) -> ConstRecipe:
    mapping = _require_mapping(entry, location)
    return ConstRecipe(
        name=_require_string(mapping, "name", location),
        type=_require_string(mapping, "type", location),
        value=_require_string(mapping, "value", location),
    )


def _parse_function(entry: object, location: str) -> FunctionRecipe:
    mapping = _require_mapping(entry, location)
    receiver_name = _optional_string(mapping, "receiver", location) or "none"
    if receiver_name not in _RECEIVERS:
        valid = ", ".join(_RECEIVERS)
        raise RecipeError(f"{location}: unknown receiver '{receiver_name}' (expected one of: {valid})")
    args: list[ArgRecipe] = []
    for index, item in enumerate(_list(mapping, "args", location)):
        arg_location = f"{location}.args[{index}]"
        arg = _require_mapping(item, arg_location)
        args.append(ArgRecipe(name=_require_string(arg, "name", arg_location), type=_require_string(arg, "type", arg_location)))
    return FunctionRecipe(
        name=_require_string(mapping, "name", location),
        receiver=_RECEIVERS[receiver_name],
        public=_optional_bool(mapping, "public", location),
        is_async=_optional_bool(mapping, "async", location),
        args=args,
        returns=_optional_string(mapping, "returns", location),
        body=_optional_string(mapping, "body", location) or "",
    )


def _require_mapping(entry: object, location: str) -> dict[str, object]:
    if not isinstance(entry, dict):
        raise RecipeError(f"{location} must be a YAML mapping")
    return entry


def _require_string(mapping: dict[str, object], key: str, location: str) -> str:
    """Extract a required string field from a mapping, raising RecipeError if missing."""
    if key not in mapping:
        raise RecipeError(f"{location}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise RecipeError(f"{location}: '{key}' must be a string")
    return value


def _optional_string(mapping: dict[str, object], key: str, location: str) -> str | None:
    if key not in mapping or mapping[key] is None:
        return None
    return _require_string(mapping, key, location)


def _optional_bool(mapping: dict[str, object], key: str, location: str) -> bool:
    value = mapping.get(key, False)
    if not isinstance(value, bool):
        raise RecipeError(f"{location}: '{key}' must be true or false")
    return value


def _list(mapping: dict[str, object], key: str, location: str) -> list[object]:
    value = mapping.get(key, [])
    if not isinstance(value, list):
        raise RecipeError(f"{location}: '{key}' must be a list")
    return value


def _string_list(mapping: dict[str, object], key: str, location: str) -> list[str]:
    items = _list(mapping, key, location)
    for index, item in enumerate(items):
        if not isinstance(item, str):
            raise RecipeError(f"{location}: '{key}[{index}]' must be a string")
    return [str(item) for item in items]
