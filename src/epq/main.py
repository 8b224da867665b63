"""Entry-point for launching the CLI application."""
from __future__ import annotations

import argparse
import os
import sys
from typing import Sequence

from .data.paths import DEFINITIONS_ENV_VAR
from .data.repositories import ScenesRepository
from .presentation.cli.app import main as cli_main
from .services.scene_graph_validator import format_issue, has_errors, validate_scenes_repository


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="epq", description="El Palo de Queso text adventure.")
    parser.add_argument("--definitions", help="Directory holding the JSON definitions.")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check the scene graph for broken references and exit.",
    )
    return parser.parse_args(argv)


def validate(definitions: str | None = None) -> int:
    """Print scene graph issues; return a non-zero exit code when any is an error."""
    issues = validate_scenes_repository(ScenesRepository(definitions))
    for issue in issues:
        print(format_issue(issue))
    if not issues:
        print("Scene graph OK.")
    return 1 if has_errors(issues) else 0


def main(argv: Sequence[str] | None = None) -> None:
    """Run the CLI presentation layer."""
    args = _parse_args(argv)
    if args.definitions:
        os.environ[DEFINITIONS_ENV_VAR] = args.definitions
    if args.validate:
        sys.exit(validate(args.definitions))
    cli_main()


if __name__ == "__main__":
    main()
