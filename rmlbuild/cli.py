"""
Command-line interface.

    rmlbuild build example.rml     # rmlc, then ocamlc -> ./example
    rmlbuild clean                 # remove generated files from .
    rmlbuild info                  # show the toolchain in use
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .artifacts import ArtifactManager
from .compiler.pipeline import BuildPipeline
from .compiler.target import BuildTarget
from .utils.config import RmlBuildConfig
from .utils.constants import BuildStage
from .utils.exceptions import CompileFailure, ConfigurationError
from .utils.info import print_info
from .utils.logging import setup_logging

CONCURRENCY_NOTE = (
    "Builds are sequential and own the generated files of their directory; "
    "do not run two builds in the same directory at once."
)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="JSON or YAML configuration file")
    parser.add_argument("-C", "--directory", default=".",
                        help="Directory to build or clean in (default: current directory)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="count", default=0,
                           help="Log stage commands (-vv for debug output)")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rmlbuild",
        description="Build a ReactiveML source file into a native executable.",
        epilog=CONCURRENCY_NOTE,
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    for name in ("build", "all"):
        build_cmd = subparsers.add_parser(
            name,
            help="Compile SOURCE with rmlc and link it with ocamlc",
            epilog=CONCURRENCY_NOTE,
        )
        build_cmd.add_argument("source", help="ReactiveML source file (.rml)")
        build_cmd.add_argument("-o", "--output", help="Executable name (default: source base name)")
        build_cmd.add_argument("-I", dest="include_dirs", action="append", default=[],
                               metavar="DIR", help="Extra search directory for the linker")
        _add_common_arguments(build_cmd)
        build_cmd.set_defaults(handler=cmd_build)

    clean_cmd = subparsers.add_parser("clean", help="Remove generated files")
    clean_cmd.add_argument("-o", "--output", help="Also remove this executable")
    clean_cmd.add_argument("--dry-run", action="store_true",
                           help="List the files that would be removed")
    _add_common_arguments(clean_cmd)
    clean_cmd.set_defaults(handler=cmd_clean)

    info_cmd = subparsers.add_parser("info", help="Show toolchain information")
    info_cmd.add_argument("--config", help="JSON or YAML configuration file")
    info_cmd.set_defaults(handler=cmd_info, verbose=0, quiet=False)

    return parser


def _configure_logging(args, config: RmlBuildConfig) -> None:
    level = config.logging.level
    if args.quiet:
        level = "ERROR"
    elif args.verbose >= 2:
        level = "DEBUG"
    elif args.verbose == 1:
        level = "INFO"
    setup_logging(level, config.logging.log_file)


def _stage_label(stage: BuildStage, config) -> str:
    if stage is BuildStage.LOWER:
        return f"{stage.value} ({config.rml_compiler})"
    if stage is BuildStage.LINK:
        return f"{stage.value} ({config.ocaml_compiler})"
    return stage.value


def cmd_build(args, config: RmlBuildConfig) -> int:
    target = BuildTarget.from_source(args.source, args.output)
    build_config = config.to_build_config(target, args.directory, args.include_dirs)
    result = BuildPipeline(build_config).build()

    if result.success:
        print(result.executable)
        return 0

    label = _stage_label(result.stage, build_config)
    if isinstance(result.error, CompileFailure):
        print(f"rmlbuild: {label} failed with exit code {result.error.exit_code}",
              file=sys.stderr)
        if result.error.diagnostics:
            print(result.error.diagnostics, file=sys.stderr)
    else:
        print(f"rmlbuild: {label}: {result.error}", file=sys.stderr)
    return 1


def cmd_clean(args, config: RmlBuildConfig) -> int:
    manager = ArtifactManager(config.artifacts.transient_patterns, args.output)
    directory = Path(args.directory)

    if args.dry_run:
        for path in manager.collect(directory):
            print(path)
        return 0

    removed = manager.clean(directory)
    print(f"Removed {removed} file(s)")
    return 0


def cmd_info(args, config: RmlBuildConfig) -> int:
    print_info(config)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the rmlbuild command."""
    args = build_parser().parse_args(argv)

    try:
        config = RmlBuildConfig(args.config)
    except ConfigurationError as e:
        print(f"rmlbuild: {e}", file=sys.stderr)
        return 0 if args.command == "clean" else 1

    _configure_logging(args, config)
    return args.handler(args, config)


if __name__ == "__main__":
    sys.exit(main())
