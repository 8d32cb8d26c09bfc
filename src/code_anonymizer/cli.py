"""
Command-Line Interface for Code Anonymizer.

This module provides the command-line interface for the source anonymization tool.

Usage:
    code-anonymize src/ -o anonymized/
    code-anonymize main.c -I include/ --require-includes
    code-anonymize lib/ -l ocaml --ocaml-stdlib ~/.opam/default/lib/ocaml
    code-anonymize src/ -o anonymized/ --dry-run --verbose
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from code_anonymizer import __version__
from code_anonymizer.config import Config, create_default_config, merge_configs
from code_anonymizer.exceptions import ConfigError, UnsupportedLanguageError
from code_anonymizer.languages.base import supported_languages
from code_anonymizer.logging_config import setup_logging
from code_anonymizer.main import AnonymizationPipeline
from code_anonymizer.output.report import create_summary_report


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="code-anonymize",
        description="Anonymize C and OCaml source code while preserving its structure.",
        epilog="For more information, see the project documentation.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Input/Output
    parser.add_argument(
        "input",
        type=Path,
        help="Source file or directory to anonymize",
        metavar="INPUT",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output directory (default: write <name>_anon files beside the input)",
        metavar="DIR",
    )

    parser.add_argument(
        "-l", "--language",
        choices=supported_languages(),
        help="Source language (default: detect from file extension)",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Configuration file (JSON)",
        metavar="FILE",
    )

    parser.add_argument(
        "-I", "--include-path",
        type=Path,
        action="append",
        default=[],
        help="Additional directory to search for headers (can be specified multiple times)",
        metavar="DIR",
    )

    parser.add_argument(
        "--ocaml-stdlib",
        type=Path,
        help="OCaml standard library directory (default: detect)",
        metavar="DIR",
    )

    # Mapping options
    parser.add_argument(
        "--mapping-dir",
        type=Path,
        help="Directory for per-file rename tables (default: OUTPUT/mappings)",
        metavar="DIR",
    )

    parser.add_argument(
        "--no-mappings",
        action="store_true",
        help="Don't save rename tables",
    )

    # Transformation options
    parser.add_argument(
        "--keep-comments",
        action="store_true",
        help="Don't strip comments and blank lines",
    )

    parser.add_argument(
        "--no-reindent",
        action="store_true",
        help="Don't re-indent the output",
    )

    parser.add_argument(
        "--indent-width",
        type=int,
        default=4,
        help="Spaces per indent level (default: 4)",
        metavar="N",
    )

    parser.add_argument(
        "--require-includes",
        action="store_true",
        help="Fail when a header or the OCaml standard library cannot be found",
    )

    # Run modes
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Process files but don't write output",
    )

    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite existing output files",
    )

    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="File encoding (default: utf-8)",
    )

    # Output options
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log messages to FILE",
        metavar="FILE",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress normal output",
    )

    return parser


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = create_parser()
    return parser.parse_args(args)


def args_to_config(args: argparse.Namespace) -> Config:
    """
    Convert parsed arguments to Config object.

    Raises:
        ConfigError: If the configuration file cannot be loaded
    """
    config = create_default_config()

    config.input_path = args.input
    config.output_dir = args.output
    config.language = args.language
    config.include_paths = list(args.include_path or [])
    config.ocaml_stdlib_dir = args.ocaml_stdlib
    config.mapping_dir = args.mapping_dir
    config.save_mappings = not args.no_mappings

    config.strip_comments = not args.keep_comments
    config.reindent = not args.no_reindent
    config.indent_width = args.indent_width
    config.require_includes = args.require_includes

    config.dry_run = args.dry_run
    config.overwrite = args.overwrite
    config.encoding = args.encoding
    config.verbose = args.verbose
    config.quiet = args.quiet
    config.log_file = args.log_file
    if args.verbose:
        config.log_level = "DEBUG"
    elif args.quiet:
        config.log_level = "ERROR"

    # Load config file if provided
    if args.config:
        file_config = Config.load_from_file(args.config)
        # Command-line args override file config
        config = merge_configs(file_config, config)
    else:
        config = Config.from_dict(config.to_dict())

    return config


def run_anonymization(config: Config) -> int:
    """
    Run the full anonymization pipeline.

    Returns:
        Exit code (0 for success, 1 for errors)
    """
    if not config.quiet:
        print(f"Code Anonymizer v{__version__}", file=sys.stderr)
        print(f"Input: {config.input_path}", file=sys.stderr)
        print(f"Output: {config.output_dir or '(beside input)'}", file=sys.stderr)

    def on_file_start(file_path: Path, index: int, total: int) -> None:
        if config.verbose:
            print(f"Processing [{index}/{total}] {file_path}...", file=sys.stderr)

    pipeline = AnonymizationPipeline(config)
    result = pipeline.run(on_file_start=on_file_start)

    if result.errors:
        for error in result.errors:
            print(f"Error: {error}", file=sys.stderr)

    if not config.quiet and result.file_results:
        print(file=sys.stderr)
        print(create_summary_report(result.file_results), file=sys.stderr)
        print(f"\nCompleted in {result.processing_time:.2f} seconds", file=sys.stderr)

    return 0 if result.success else 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parsed = parse_args(args)
    try:
        config = args_to_config(parsed)
    except (ConfigError, UnsupportedLanguageError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_file, config.verbose)

    # Validate configuration
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    return run_anonymization(config)


if __name__ == "__main__":
    sys.exit(main())
