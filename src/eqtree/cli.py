"""Command-line interface for eqtree."""

from __future__ import annotations

import argparse
import sys
import tomllib
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from pathlib import Path
from typing import Any, TextIO

from eqtree.errors import EquationError

NUMERIC_TYPES: dict[str, Callable[[str], Any]] = {
    "float": float,
    "decimal": Decimal,
    "fraction": Fraction,
}
OUTPUT_FORMATS = ("tree", "infix", "tokens")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    equation: str | None
    input_file: Path | None
    numeric: str
    output_format: str
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="eqtree",
        description="Parse equations into expression trees",
    )
    p.add_argument(
        "equation",
        nargs="?",
        help="Equation to parse (default: read one equation per line from stdin)",
    )
    p.add_argument("-f", "--file", metavar="FILE", help="Read equations from FILE, one per line")
    p.add_argument(
        "--numeric",
        choices=sorted(NUMERIC_TYPES),
        default=None,
        help="Numeric type for literals (default: float)",
    )
    p.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: tree)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover eqtree.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump every pipeline stage to stderr")
    return p


def load_config(config_path: Path | None, search_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else search_dir / "eqtree.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace, search_dir: Path | None = None) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    if args.equation is not None and args.file is not None:
        raise argparse.ArgumentTypeError("give either an equation or --file, not both")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path, search_dir or Path("."))
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    numeric = "float"
    cfg_parse = config.get("parse")
    if isinstance(cfg_parse, dict):
        cfg_numeric = cfg_parse.get("numeric")
        if cfg_numeric is not None:
            if cfg_numeric not in NUMERIC_TYPES:
                raise argparse.ArgumentTypeError(f"unknown numeric type in config: {cfg_numeric}")
            numeric = cfg_numeric
    if args.numeric is not None:
        numeric = args.numeric

    output_format = "tree"
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_format = cfg_output.get("format")
        if cfg_format is not None:
            if cfg_format not in OUTPUT_FORMATS:
                raise argparse.ArgumentTypeError(f"unknown output format in config: {cfg_format}")
            output_format = cfg_format
    if args.format is not None:
        output_format = args.format

    return CliOptions(
        equation=args.equation,
        input_file=Path(args.file) if args.file else None,
        numeric=numeric,
        output_format=output_format,
        debug=args.debug,
    )


def process_equation(source: str, options: CliOptions, out: TextIO) -> None:
    """Run the pipeline on one equation and write the chosen output format."""
    from eqtree.debug import dump_raw_tokens, dump_tokens, dump_tree, format_tokens
    from eqtree.lexer import tokenize
    from eqtree.parser import build
    from eqtree.render import to_infix
    from eqtree.resolver import resolve

    numeric_type = NUMERIC_TYPES[options.numeric]

    raw = tokenize(source)
    if options.debug:
        dump_raw_tokens(raw, source)
    tokens = resolve(raw, source, numeric_type)
    if options.debug:
        dump_tokens(tokens)

    if options.output_format == "tokens":
        out.write(format_tokens(tokens) + "\n")
        return

    tree = build(tokens, source, numeric_type)
    if options.debug:
        dump_tree(tree)

    if options.output_format == "infix":
        out.write(to_infix(tree) + "\n")
    else:
        dump_tree(tree, file=out)


def read_equations(options: CliOptions) -> list[tuple[int, str]]:
    """Return (line number, equation) pairs, skipping blank lines."""
    if options.equation is not None:
        return [(1, options.equation)]
    if options.input_file is not None:
        text = options.input_file.read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()
    return [(n, line) for n, line in enumerate(text.splitlines(), 1) if line.strip()]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        equations = read_equations(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    filename = str(options.input_file) if options.input_file else "<stdin>"
    if options.equation is not None:
        filename = "<equation>"

    status = 0
    for line_no, source in equations:
        try:
            process_equation(source, options, sys.stdout)
        except EquationError as exc:
            print(exc.format(filename, line_no), file=sys.stderr)
            status = 1

    return status
