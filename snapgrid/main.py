"""CLI entry point for snapgrid.

    snapgrid <filename> <xmin> <ymin> <xmax> <ymax> <ny>

Samples the strain-rate invariant and velocity magnitude of a snapshot on a
uniform grid and streams `x y d2c vel` rows to stderr (or --output).
Geometry comes from SNAPGRID_AXI unless --geometry is given. With -v, log
records go to stdout while rows use stderr, so the row stream stays pure.
"""

import argparse
import logging
import sys

import yaml

from snapgrid.config import get_geometry, init_taichi
from snapgrid.errors import (
    ExtractionError,
    InvalidArgumentCount,
    InvalidArgumentError,
    InvalidGridResolution,
    InvalidNumericBound,
)
from snapgrid.params import (
    ExtractionBounds,
    RunParams,
    configure_grid,
    load_params,
)
from snapgrid.pipeline import Extraction

logger = logging.getLogger(__name__)

BOUND_NAMES = ("xmin", "ymin", "xmax", "ymax")
VALUE_OPTIONS = ("--params", "--output", "--geometry")


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message):
        raise InvalidArgumentCount(f"Expected 6 arguments ({message})")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="snapgrid",
        allow_abbrev=False,
        description="Sample derived fields of a snapshot on a uniform grid",
    )
    parser.add_argument("filename", help="Path to the snapshot (.npz)")
    for name in BOUND_NAMES:
        parser.add_argument(name, help=f"Sampling bound {name}")
    parser.add_argument("ny", help="Number of grid points in y (nx is derived)")
    parser.add_argument("--params", help="YAML file with run parameters")
    parser.add_argument("--output", help="Write rows to this file instead of stderr")
    parser.add_argument(
        "--geometry",
        choices=["axi", "planar"],
        help="Override SNAPGRID_AXI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    return parser


def _parse_bound(token: str, name: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise InvalidNumericBound(f"{name} must be a number, got {token!r}") from None


def _parse_ny(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise InvalidGridResolution(f"ny must be a positive integer, got {token!r}") from None


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _split_argv(argv: list[str]) -> list[str]:
    """Reorder argv so numeric tokens reach argparse after `--`.

    argparse only recognizes plain negative numbers like -1 or -.5; forms
    such as -1e-3, -1. or -2E0 would otherwise be read as unknown options.
    """
    options, positionals = [], []
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            positionals.extend(tokens)
        elif token in VALUE_OPTIONS:
            options.append(token)
            value = next(tokens, None)
            if value is not None:
                options.append(value)
        elif token.startswith("-") and not _is_number(token):
            options.append(token)
        else:
            positionals.append(token)
    return options + ["--"] + positionals


def parse_arguments(
    argv: list[str] | None = None,
    parser: argparse.ArgumentParser | None = None,
) -> tuple[ExtractionBounds, argparse.Namespace]:
    """Parse and validate the command line.

    Args:
        argv: Arguments after the program name (default: sys.argv[1:])
        parser: Parser to use (default: build_parser())

    Returns:
        (bounds, namespace) where namespace carries the optional flags

    Raises:
        InvalidArgumentCount: Wrong number of positionals or unknown flags
        InvalidNumericBound: Non-numeric or unordered bounds
        InvalidGridResolution: ny not a positive integer
    """
    parser = parser or build_parser()
    args = parser.parse_args(_split_argv(sys.argv[1:] if argv is None else argv))

    bounds = {name: _parse_bound(getattr(args, name), name) for name in BOUND_NAMES}
    ny = _parse_ny(args.ny)
    return ExtractionBounds(filename=args.filename, ny=ny, **bounds), args


def _setup_logging(verbose: bool, rows_to_stderr: bool) -> None:
    """Route log records away from the stream that carries rows."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stdout if rows_to_stderr else sys.stderr,
        force=True,
    )


def _fail(message: str, parser: argparse.ArgumentParser | None = None) -> int:
    print(f"Error: {message}", file=sys.stderr)
    if parser is not None:
        parser.print_usage(sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Run one extraction. Returns the process exit status."""
    parser = build_parser()
    try:
        bounds, args = parse_arguments(argv, parser)
        config = configure_grid(bounds)
    except InvalidArgumentError as e:
        return _fail(str(e), parser)

    _setup_logging(args.verbose, rows_to_stderr=args.output is None)

    try:
        geometry = get_geometry(args.geometry)
        params = load_params(args.params) if args.params else RunParams()
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        return _fail(str(e))

    backend = init_taichi()
    logger.info(
        "Backend %s, geometry %s (axes: %s)",
        backend,
        geometry.value,
        "/".join(geometry.axis_labels),
    )

    try:
        Extraction(config, geometry, params).run(args.output or sys.stderr)
    except (ExtractionError, OSError) as e:
        return _fail(str(e))
    return 0


def cli() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
