"""CLI entrypoints for bundled-components commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .bundling import CompilationError
from .config import ConfigError, load_config
from .discovery import DuplicateComponentError, create_component_map
from .logging import configure_logging
from .plugin import BundledComponentsPlugin
from .validators import ValidationError


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a full debug log to this file.",
    )


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "--input",
        default="src",
        help="Template input directory, relative to the project root.",
    )


def _add_strict_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on missing requirements, section violations and compile errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundled-components",
        description="Bundle CSS/JS for the components a static site actually uses.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Resolve used components and write the CSS/JS bundles.",
    )
    _add_logging_options(build_parser, suppress_default=True)
    _add_project_arguments(build_parser)
    _add_strict_option(build_parser)
    build_parser.add_argument(
        "--output",
        default="_site",
        help="Build output directory, relative to the project root.",
    )
    build_parser.add_argument(
        "--minify",
        action="store_true",
        help="Minify the bundled output.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Report requirement and section diagnostics without bundling.",
    )
    _add_logging_options(check_parser, suppress_default=True)
    _add_project_arguments(check_parser)
    _add_strict_option(check_parser)

    components_parser = subparsers.add_parser(
        "components",
        help="List discovered components.",
    )
    _add_logging_options(components_parser, suppress_default=True)
    components_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )

    return parser


def _create_plugin(args: argparse.Namespace, parser: argparse.ArgumentParser) -> BundledComponentsPlugin:
    project_root = Path(args.path).expanduser().resolve()
    if not project_root.is_dir():
        parser.exit(1, f"Project path not found: {args.path}\n")
    try:
        options = load_config(project_root)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    if getattr(args, "strict", False):
        options.validation.strict = True
    if getattr(args, "minify", False):
        options.minify_output = True
    return BundledComponentsPlugin(options, project_root=project_root)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bundled-components commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    plugin = _create_plugin(args, parser)

    if args.command == "build":
        try:
            outcome = plugin.build(args.input, args.output)
        except (ValidationError, CompilationError, DuplicateComponentError) as exc:
            parser.exit(1, f"bundled-components build failed: {exc}\n")
        if outcome is None:
            print("No components used; nothing to bundle")
            return
        for written in (outcome.css_path, outcome.js_path):
            if written is not None:
                print(f"Wrote {_relativize(written)}")
    elif args.command == "check":
        try:
            context = plugin.before_build(args.input)
        except (ValidationError, DuplicateComponentError) as exc:
            parser.exit(1, f"bundled-components check failed: {exc}\n")
        if context is None:
            print("No components used")
            return
        print(f"Used: {', '.join(sorted(context.used))}")
        print(f"Needed: {', '.join(sorted(context.needed))}")
        problems = len(context.requirement_errors) + len(context.section_diagnostics)
        if problems:
            print(f"{problems} problem(s) found; see log output above")
        else:
            print("All requirements and sections are valid")
    elif args.command == "components":
        try:
            partials, sections = plugin.discover()
            create_component_map([*partials, *sections])
        except DuplicateComponentError as exc:
            parser.exit(1, f"{exc}\n")
        for kind, components in (("partial", partials), ("section", sections)):
            for component in components:
                requires = ", ".join(component.requirements) or "-"
                assets = ", ".join([*component.styles, *component.scripts]) or "-"
                print(f"{component.name}\t{kind}\t{component.type or '-'}\t{assets}\trequires: {requires}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
