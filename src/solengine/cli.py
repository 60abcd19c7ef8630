"""CLI entrypoint for SolEngine."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from pprint import pformat
from typing import Any

import typer
from loguru import logger

from solengine.engine import CheckerConfig, InvalidOutputFormatError, OutputFormat, build_default_engine
from solengine.parsing import SolidityParseError, SourceFile
from solengine.schema import CATEGORY_FEATURES, FeatureCategory
from solengine.settings import SolEngineSettings

app = typer.Typer(
    name="solengine",
    help="SolEngine: report which Solidity language features a source file uses.",
    no_args_is_help=True,
)

# Shapes the command line can print.
_CLI_FORMATS = (OutputFormat.JSON, OutputFormat.OBJECT)


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log checker activity (DEBUG)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors."),
) -> None:
    """Configure logging for every subcommand."""
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = SolEngineSettings().log_level
    _configure_logging(level)


@app.command()
def check(
    files: list[Path] = typer.Argument(..., help="Solidity source files to analyze."),
    feature: list[str] | None = typer.Option(
        None, "--feature", "-f", help="Only run these checkers (repeatable). Default: settings."
    ),
    format_: str | None = typer.Option(None, "--format", help="Output shape: json or object."),
    indent: int | None = typer.Option(None, "--indent", help="JSON indentation (default from settings)."),
) -> None:
    """Analyze files and print {filename: {feature: [site, ...]}}."""
    settings = SolEngineSettings()
    output_format = format_ or settings.output.format
    if output_format not in _CLI_FORMATS:
        logger.error("Unknown output format '{}' - use json or object", output_format)
        raise typer.Exit(code=1)

    try:
        results = asyncio.run(_run_check(files, feature or settings.checkers.active(), settings))
    except (SolidityParseError, InvalidOutputFormatError) as exc:
        logger.error("{}", exc)
        raise typer.Exit(code=1) from exc
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Cannot read source: {}", exc)
        raise typer.Exit(code=1) from exc

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(results, indent=indent if indent is not None else settings.output.indent))
    else:
        typer.echo(pformat(results, sort_dicts=False))


async def _run_check(files: list[Path], features: list[str], settings: SolEngineSettings) -> dict[str, Any]:
    """Async implementation of the ``solengine check`` command."""
    engine = build_default_engine(CheckerConfig.from_settings(settings), features=features)
    if not engine.checkers:
        logger.warning("No known checkers among: {}", ", ".join(features))

    results: dict[str, Any] = {}
    for path in files:
        source = SourceFile(filename=str(path), code=path.read_text(encoding="utf-8"))
        try:
            results[source.filename] = await engine.check(source)
        except SolidityParseError as exc:
            logger.error("Failed to parse {}", source.filename)
            raise SolidityParseError(f"{source.filename}: {exc}") from exc
        logger.info("{}: {} feature(s)", source.filename, len(results[source.filename]))
    return results


@app.command()
def features(
    category: str | None = typer.Option(None, "--category", "-c", help="Only list one category."),
) -> None:
    """List the feature catalog grouped by category."""
    if category is not None:
        try:
            categories = [FeatureCategory(category)]
        except ValueError as exc:
            choices = ", ".join(c.value for c in FeatureCategory)
            logger.error("Unknown category '{}' - use one of: {}", category, choices)
            raise typer.Exit(code=1) from exc
    else:
        categories = list(FeatureCategory)

    for cat in categories:
        typer.echo(f"{cat.value}:")
        for feat in CATEGORY_FEATURES[cat]:
            typer.echo(f"  {feat.value}")


if __name__ == "__main__":
    app()
