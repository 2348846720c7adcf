# File: modelforge/cli.py
"""
ModelForge - Command-Line Interface
====================================

Command-line front end built on the standard-library ``argparse`` module.

Usage examples::

    # Generate a zip archive into the current directory
    python -m modelforge models.yaml

    # Tar archive, MySQL backend, enterprise tier, into ./dist
    python -m modelforge models.json -o ./dist --format tar \\
        --database mysql --template enterprise

    # Validate only (no archive)
    python -m modelforge models.yaml --validate-only

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``modelforge`` logger tree.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("modelforge")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from modelforge import __version__
    from modelforge.models import (
        AuthStrategy,
        Database,
        ExportFormat,
        Framework,
        Language,
        TemplateTier,
    )

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="modelforge",
        description=(
            "ModelForge - backend project generator.\n\n"
            "Compiles a data-model description (JSON/YAML) into a complete "
            "Express + TypeScript service and packages it as an archive."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s models.yaml\n"
            "  %(prog)s models.json -o ./dist --format tar --template advanced\n"
            "  %(prog)s models.yaml --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ModelForge v{__version__}",
    )

    parser.add_argument(
        "input",
        type=str,
        metavar="INPUT",
        help="Path to the model document (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=".",
        metavar="DIR",
        help="Directory the archive is written to (default: current directory).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the models without generating code.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write the archive to disk.",
    )
    mode_group.add_argument(
        "--no-format",
        action="store_true",
        default=False,
        help="Skip the formatting pass over generated files.",
    )

    # --- Generation overrides ---
    gen_group = parser.add_argument_group("generation overrides")
    gen_group.add_argument(
        "--project-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the project name.",
    )
    gen_group.add_argument(
        "--framework",
        type=str,
        default=None,
        choices=[f.value for f in Framework],
        help="Target framework.",
    )
    gen_group.add_argument(
        "--database",
        type=str,
        default=None,
        choices=[d.value for d in Database],
        help="Target database engine.",
    )
    gen_group.add_argument(
        "--auth",
        type=str,
        default=None,
        choices=[a.value for a in AuthStrategy],
        help="Authentication strategy.",
    )
    gen_group.add_argument(
        "--language",
        type=str,
        default=None,
        choices=[lang.value for lang in Language],
        help="Target source language.",
    )
    gen_group.add_argument(
        "--no-tests",
        action="store_true",
        default=False,
        help="Do not generate or package test files.",
    )
    gen_group.add_argument(
        "--no-docs",
        action="store_true",
        default=False,
        help="Do not generate or package documentation files.",
    )

    # --- Export overrides ---
    export_group = parser.add_argument_group("export overrides")
    export_group.add_argument(
        "--format",
        type=str,
        default=None,
        choices=[f.value for f in ExportFormat],
        help="Archive format.",
    )
    export_group.add_argument(
        "--template",
        type=str,
        default=None,
        choices=[t.value for t in TemplateTier],
        help="Template tier of auxiliary deployment files.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all log output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Override builders
# ---------------------------------------------------------------------------


def _build_option_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """GenerationOptions overrides from CLI arguments."""
    overrides: Dict[str, Any] = {}
    if args.framework is not None:
        overrides["framework"] = args.framework
    if args.database is not None:
        overrides["database"] = args.database
    if args.auth is not None:
        overrides["authentication"] = args.auth
    if args.language is not None:
        overrides["language"] = args.language
    if args.no_tests:
        overrides["include_tests"] = False
    if args.no_docs:
        overrides["include_documentation"] = False
    return overrides


def _build_export_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """ExportOptions overrides from CLI arguments."""
    overrides: Dict[str, Any] = {}
    if args.format is not None:
        overrides["format"] = args.format
    if args.template is not None:
        overrides["template"] = args.template
    if args.no_tests:
        overrides["include_tests"] = False
    if args.no_docs:
        overrides["include_documentation"] = False
    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(input_path: Path) -> int:
    """
    Run validation only (no code generation).

    Returns the appropriate exit code.
    """
    from modelforge.generator import load_input_file
    from modelforge.utils import Timer
    from modelforge.validators import validate_models

    logger.info("Running validation-only mode for: %s", input_path)

    try:
        raw_data: Dict[str, Any] = load_input_file(input_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load input: %s", exc)
        return EXIT_INPUT_ERROR

    models: Any = raw_data.get("models")
    if not isinstance(models, list):
        logger.error("Input must contain a 'models' list.")
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_models(models)

    print(f"\n{'='*50}")
    print("  Model Validation Report")
    print(f"{'='*50}")
    print(f"  File:     {input_path.name}")
    print(f"  Models:   {len(models)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")
    if len(result) or result.circular_references:
        print()
        print(result.format_report())
    else:
        print("\n  All validations passed!")
    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(input_path: Path, output_dir: Path, args: argparse.Namespace) -> int:
    """
    Run the full pipeline and write the archive.

    Returns the appropriate exit code.
    """
    from modelforge.exporters import ArchiveError
    from modelforge.generator import (
        ModelValidationFailed,
        PipelineInput,
        PipelineReport,
        ProjectPipeline,
        load_input_file,
        parse_raw_input,
    )

    try:
        raw_data: Dict[str, Any] = load_input_file(input_path)
        parsed: PipelineInput = parse_raw_input(
            raw_data,
            option_overrides=_build_option_overrides(args),
            export_overrides=_build_export_overrides(args),
        )
    except (FileNotFoundError, ValueError, TypeError) as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_INPUT_ERROR

    project_name: Optional[str] = args.project_name or parsed.project_name
    pipeline: ProjectPipeline = ProjectPipeline(format_output=not args.no_format)

    try:
        report: PipelineReport = pipeline.run(
            parsed.models,
            parsed.options,
            parsed.export_options,
            project_name=project_name,
        )
    except ModelValidationFailed as exc:
        print(exc.result.format_report())
        return EXIT_VALIDATION_ERROR
    except ArchiveError as exc:
        logger.error("Export failed: %s", exc)
        return EXIT_EXPORT_ERROR
    except (LookupError, ValueError, TypeError) as exc:
        logger.error("Generation failed: %s", exc)
        return EXIT_GENERATION_ERROR

    if args.dry_run:
        logger.info("Dry-run mode: archive not written.")
    else:
        target: Path = output_dir / report.archive_name
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(report.archive)
        except OSError as exc:
            logger.error("Failed to write archive %s: %s", target, exc)
            return EXIT_EXPORT_ERROR
        logger.info("Archive written: %s", target)

    print(report.summary())
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    try:
        args: argparse.Namespace = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits 2 on bad arguments; map onto the input-error code
        sys.exit(EXIT_SUCCESS if exc.code in (0, None) else EXIT_INPUT_ERROR)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    input_path: Path = Path(args.input).resolve()
    if not input_path.exists():
        logger.error("Input file not found: %s", input_path)
        sys.exit(EXIT_INPUT_ERROR)
    if not input_path.is_file():
        logger.error("Input path is not a file: %s", input_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(input_path))

    output_dir: Path = Path(args.output).resolve()
    logger.info("Input:   %s", input_path)
    logger.info("Output:  %s", output_dir)

    exit_code: int = _run_generation(input_path, output_dir, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("modelforge.cli loaded.")
