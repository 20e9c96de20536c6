"""CLI entrypoints for depgroups commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_OUTPUT
from .logging import configure_logging
from .models import TIERS
from .planner import PlanResult, Planner
from .writer import render_config, write_config


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depgroups",
        description="Generate framework-aware Dependabot grouping from project manifests.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records, with timestamps, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Detect ecosystems and write the dependency update policy.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    _add_path_argument(plan_parser)
    plan_parser.add_argument(
        "--tier",
        choices=TIERS,
        default=None,
        help="Licensing tier to plan for (defaults to the configured tier).",
    )
    plan_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Directory depth scanned when reporting nested manifests.",
    )
    plan_parser.add_argument(
        "--output",
        default=None,
        help=f"Output file relative to the project root (defaults to {DEFAULT_OUTPUT.as_posix()}).",
    )
    plan_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the configuration instead of writing it.",
    )

    detect_parser = subparsers.add_parser(
        "detect",
        help="Show detected ecosystems and frameworks without writing anything.",
    )
    _add_verbose_option(detect_parser, suppress_default=True)
    _add_path_argument(detect_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for depgroups commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    planner = Planner()

    if args.command == "plan":
        if args.max_depth is not None and args.max_depth < 0:
            parser.exit(1, "--max-depth must be zero or a positive integer\n")
        try:
            result = planner.plan(args.path, args.tier, max_depth=args.max_depth)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"depgroups plan failed: {exc}\nRun with --verbose for more details.\n")
        if result.configuration.is_empty:
            print("No supported manifests found; nothing to configure.")
            return
        if args.dry_run:
            sys.stdout.write(render_config(result))
            return
        output = Path(args.output) if args.output else _configured_output(result)
        written = write_config(result, output)
        print(f"Dependabot configuration written to {_relativize(written)}")
    elif args.command == "detect":
        try:
            result = planner.plan(args.path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"depgroups detect failed: {exc}\nRun with --verbose for more details.\n")
        _print_detection(result)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _configured_output(result: PlanResult) -> Path:
    return result.config.output if result.config is not None else DEFAULT_OUTPUT


def _print_detection(result: PlanResult) -> None:
    if not result.reports:
        print("No supported manifests found.")
    for name, report in result.reports.items():
        print(f"{name} ({report.manifest}): {len(report.dependencies)} dependencies")
        for framework in report.frameworks.values():
            marker = " [primary]" if framework.primary else ""
            print(f"  {framework.framework}{marker}: {', '.join(framework.packages)}")
    for path in result.nested:
        print(f"not monitored: {path}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
