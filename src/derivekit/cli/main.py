# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the DeriveKit command-line interface."""

import argparse
import sys
from pathlib import Path

from derivekit.errors import DeriveError
from derivekit.generate.generator import Generator
from derivekit.model.tokens import to_source
from derivekit.parser.parser import parse
from derivekit.recipe.apply import apply_recipe
from derivekit.recipe.config import RecipeError, load_recipe

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the DeriveKit CLI."""
    parser = argparse.ArgumentParser(
        prog="derivekit",
        description="DeriveKit: derive-macro code generation toolkit",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # inspect subcommand
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the parsed declaration as JSON",
        description="Parse a struct or enum declaration and print its structure as JSON.",
    )
    inspect_parser.add_argument("file", help="File containing one struct or enum declaration")

    # expand subcommand
    expand_parser = subparsers.add_parser(
        "expand",
        help="Generate implementation code from a recipe",
        description=(
            "Parse a struct or enum declaration, apply the implementation blocks described "
            "by a YAML recipe and print the generated code."
        ),
    )
    expand_parser.add_argument("file", help="File containing one struct or enum declaration")
    expand_parser.add_argument(
        "--recipe",
        required=True,
        help="YAML recipe describing the implementation blocks to generate",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "inspect":
        return _cmd_inspect(args)
    if args.command == "expand":
        return _cmd_expand(args)
    return 0


def _read_source(path: Path) -> str | None:
    """Read a declaration file, printing an error and returning None on failure."""
    if not path.is_file():
        print(f"Error: file '{path}' does not exist.", file=sys.stderr)
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error: cannot read '{path}': {exc}", file=sys.stderr)
        return None


def _cmd_inspect(args: argparse.Namespace) -> int:
    """Handle the inspect subcommand."""
    source = _read_source(Path(args.file))
    if source is None:
        return 1

    try:
        declaration = parse(source)
    except DeriveError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(declaration.model_dump_json(indent=2))
    return 0


def _cmd_expand(args: argparse.Namespace) -> int:
    """Handle the expand subcommand."""
    source = _read_source(Path(args.file))
    if source is None:
        return 1

    try:
        recipe = load_recipe(Path(args.recipe))
    except RecipeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        declaration = parse(source)
        generator = Generator.from_declaration(declaration)
        apply_recipe(recipe, generator)
        tokens = generator.finish()
    except DeriveError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(to_source(tokens))
    return 0
