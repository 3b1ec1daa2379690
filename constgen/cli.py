"""CLI entrypoints for constgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .logging import configure_logging
from .models import ConstGenError
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write log records to this file.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="constgen",
        description="Generate static constant lookup classes for annotated Java types.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Write a lookup class for every annotated constant provider.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Directory receiving generated sources (overrides .constgen.yml).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print generated sources instead of writing them.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List annotated constant providers and their targets.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_log_file_option(list_parser, suppress_default=True)
    _add_path_argument(list_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for constgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()

    if args.command == "generate":
        try:
            outcome = orchestrator.run_generate(
                args.path,
                output_dir=args.output,
                dry_run=bool(args.dry_run),
            )
        except (FileNotFoundError, ConstGenError) as exc:
            parser.exit(1, f"constgen generate failed: {exc}\n")
        if outcome.dry_run:
            for name in outcome.generated:
                print(f"// {name}")
                print(outcome.outputs[name], end="")
        else:
            for name in outcome.generated:
                print(f"Generated {name}")
        if outcome.has_errors:
            parser.exit(
                1,
                f"constgen generate reported {len(outcome.errors)} error(s). "
                "Run with --verbose for more details.\n",
            )
    elif args.command == "list":
        try:
            summaries = orchestrator.run_list(args.path)
        except (FileNotFoundError, ConstGenError) as exc:
            parser.exit(1, f"constgen list failed: {exc}\n")
        if not summaries:
            print("No constant providers found")
        for summary in summaries:
            print(
                f"{summary.qualified_name} -> {summary.target_identifier} "
                f"({summary.constants} constants)"
            )
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
