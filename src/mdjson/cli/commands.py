"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdjson.config import Settings, load_config
from mdjson.core.errors import ConfigurationError
from mdjson.core.export import write_output, write_outputs
from mdjson.core.models import InvalidItem
from mdjson.core.pipeline import run_batch, run_each
from mdjson.core.render import PipelineConfig
from mdjson.util.fs import iter_documents


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail("Invalid configuration", e)


def _pipeline_config(settings: Settings) -> PipelineConfig:
    try:
        return settings.pipeline_config()
    except ConfigurationError as e:
        _fail(str(e))


def _report(errors: list[InvalidItem]) -> None:
    """Print per-document errors and exit 1 if there were any."""
    for item in errors:
        typer.echo(f"  invalid: {item.message}", err=True)
    if errors:
        typer.echo(f"{len(errors)} document(s) failed", err=True)
        raise typer.Exit(1)


def build_cmd(
    path: Annotated[Path, typer.Argument(exists=True, readable=True, help="File or directory to process")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Consolidated output file name")] = None,
    flatten_index: Annotated[Optional[bool], typer.Option("--flatten-index/--no-flatten-index", help="Merge index/same-name files into their parent")] = None,
    strip_title: Annotated[Optional[bool], typer.Option("--strip-title/--keep-title", help="Remove the extracted <h1> from body")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    indent: Annotated[Optional[int], typer.Option("--indent", help="JSON indentation; 0 = compact")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
    ):
    """Consolidate every document under PATH into one nested JSON file."""
    _setup_logging(verbose)
    settings = _settings(overrides={
        "output_dir": out, "output_name": name, "flatten_index": flatten_index,
        "strip_title": strip_title, "parser_config": parser, "indent": indent,
    })
    config = _pipeline_config(settings)

    documents = iter_documents(path)
    if not documents:
        typer.echo(f"No files found under {path}.")
        raise typer.Exit(1)

    result = run_batch(documents, config)
    dest = write_output(result.output, Path(settings.output_dir))
    typer.echo(f"Consolidated {len(documents) - len(result.errors) - len(result.skipped)} document(s) into {dest}")
    _report(result.errors)


def convert_cmd(
    path: Annotated[Path, typer.Argument(exists=True, readable=True, help="File or directory to process")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    nest: Annotated[Optional[bool], typer.Option("--nest/--no-nest", help="Wrap each record under its path key")] = None,
    strip_title: Annotated[Optional[bool], typer.Option("--strip-title/--keep-title", help="Remove the extracted <h1> from body")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    indent: Annotated[Optional[int], typer.Option("--indent", help="JSON indentation; 0 = compact")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
    ):
    """Write one JSON file per document under PATH."""
    _setup_logging(verbose)
    settings = _settings(overrides={
        "output_dir": out, "nest": nest, "strip_title": strip_title,
        "parser_config": parser, "indent": indent,
    })
    config = _pipeline_config(settings)

    documents = iter_documents(path)
    if not documents:
        typer.echo(f"No files found under {path}.")
        raise typer.Exit(1)

    files, errors = run_each(documents, config)
    output_dir = Path(settings.output_dir)
    for dest in write_outputs(sorted(files, key=lambda f: f.path), output_dir):
        typer.echo(f"  -> {dest}")
    typer.echo(f"Converted {len(files)} document(s) to {output_dir}/")
    _report(errors)
