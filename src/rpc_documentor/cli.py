"""CLI entry point for rpc-documentor."""

import logging
from pathlib import Path
from typing import Any

import click

from rpc_documentor.compiler.assembler import compile_document
from rpc_documentor.compiler.validator import validate_document
from rpc_documentor.compiler.writer import write_document
from rpc_documentor.config import CONFIG_ENV_VAR, DocumentorConfig, load_config
from rpc_documentor.errors import DocumentorError
from rpc_documentor.model.loader import parse_route_description


def _configure_logging(config: DocumentorConfig, verbose: bool) -> None:
    level = logging.INFO if verbose else getattr(logging, config.log_level.value)
    logging.basicConfig(level=level, format="%(message)s", handlers=[logging.StreamHandler()])
    logging.getLogger("rpc_documentor").setLevel(level)


def _compile(routes_path: Path, config: DocumentorConfig) -> dict[str, Any]:
    """Parse the route description and compile it with the given config."""
    click.echo(f"Parsing {routes_path}...")
    description = parse_route_description(routes_path)
    click.echo(f"Found {len(description.routes)} routes.")

    registry = description.registry(config.shared_references)
    return compile_document(
        description.routes,
        registry,
        config.base_info(),
        separator=config.namespace_separator,
    )


config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help="Path to the documentor configuration file.",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """RPC Documentor: compile route descriptions into an OpenAPI 3.1 document."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("routes_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Output file, overrides the configured location.")
@click.option("--title", default=None, help="Document title, overrides the configured title.")
@click.option("--base-uri", default=None, help="Server URL, overrides the configured base URI.")
@click.pass_context
def write(ctx: click.Context, routes_path: Path, config_path: Path | None, output: Path | None, title: str | None, base_uri: str | None):
    """Write the OpenAPI document for the routes in ROUTES_PATH."""
    try:
        config = load_config(config_path, file_location=output, title=title, base_uri=base_uri)
        _configure_logging(config, ctx.obj["verbose"])

        document = _compile(routes_path, config)
        path = write_document(document, config.file_location)
    except (DocumentorError, OSError) as e:
        raise click.ClickException(str(e)) from e

    for doc_path, methods in document["paths"].items():
        for method in methods:
            click.echo(f"  {method.upper():7s} {doc_path}")
    click.echo(f"Document {document['info']['version']} saved to {path}")


@main.command()
@click.argument("routes_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@click.pass_context
def check(ctx: click.Context, routes_path: Path, config_path: Path | None):
    """Compile ROUTES_PATH in memory and report structural problems."""
    try:
        config = load_config(config_path)
        _configure_logging(config, ctx.obj["verbose"])

        document = _compile(routes_path, config)
    except DocumentorError as e:
        raise click.ClickException(str(e)) from e

    errors = validate_document(document)
    if errors:
        for pointer, message in errors.items():
            click.echo(f"  {pointer}: {message}")
        raise click.ClickException(f"{len(errors)} problems found")

    click.echo(f"Document is sound: {len(document['paths'])} paths, {len(document['components']['schemas'])} components.")
