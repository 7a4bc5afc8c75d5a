"""CLI entry point for swaggler."""

import json
import logging
import os
from pathlib import Path

import click

from swaggler.errors import MalformedInputError, SwagglerError
from swaggler.generator.merge import merge_with_existing
from swaggler.generator.openapi import OpenAPIOptions, generate_openapi
from swaggler.parser.curl import looks_like_curl, parse_curl, sanitize_curl
from swaggler.runner import DEFAULT_TIMEOUT, parse_response, run_curl
from swaggler.writer import save_document

logger = logging.getLogger(__name__)


def _read_text_arg(value: str) -> str:
    """Return the contents of ``value`` if it names a file, else ``value`` itself."""
    if os.path.isfile(value):
        return Path(value).read_text(encoding="utf-8").strip()
    return value.strip()


def _load_curl(curl: str | None, input_path: Path | None) -> str:
    if input_path is not None:
        return input_path.read_text(encoding="utf-8").strip()
    if curl:
        return _read_text_arg(curl)
    raise click.UsageError("Either --curl or --input option must be provided")


@click.group(context_settings={"auto_envvar_prefix": "SWAGGLER"})
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Swaggler: turn captured curl requests into OpenAPI documentation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("-c", "--curl", default=None, help="Curl command, or path to a file containing one.")
@click.option("-i", "--input", "input_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Path to a file containing the curl command.")
@click.option("-o", "--output", default=None, help="Output file path (default: swagger.yaml).")
@click.option("-p", "--output-path", default=None, help="Output file path; parent directories are created.")
@click.option("-n", "--name", default="", help="Operation name (operationId).")
@click.option("-s", "--schema", "url_template", default=None, help="URL template with parameters (e.g. /users/:id/edit).")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag for the operation. May be repeated.")
@click.option("-a", "--append", "append_path", default=None, help="Merge into an existing OpenAPI file.")
@click.option("--summary", default=None, help="Operation summary.")
@click.option("-x", "--skip-execution", is_flag=True, help="Do not run curl; use --response instead.")
@click.option("-r", "--response", default=None, help="JSON response (or a file containing it) used with --skip-execution.")
@click.option("--timeout", default=DEFAULT_TIMEOUT, type=float, show_default=True, help="Seconds to wait for curl.")
@click.pass_context
def generate(
    ctx: click.Context,
    curl: str | None,
    input_path: Path | None,
    output: str | None,
    output_path: str | None,
    name: str,
    url_template: str | None,
    tags: tuple[str, ...],
    append_path: str | None,
    summary: str | None,
    skip_execution: bool,
    response: str | None,
    timeout: float,
):
    """Generate OpenAPI documentation from a curl command and its response."""
    curl_command = _load_curl(curl, input_path)

    try:
        if not looks_like_curl(curl_command):
            raise MalformedInputError('Invalid curl command format. Command must start with "curl"')

        if skip_execution:
            if not response:
                raise click.UsageError("--response option is required when --skip-execution is used")
            response_data = parse_response(_read_text_arg(response))
        else:
            click.echo("Executing curl command...")
            response_data = run_curl(curl_command, timeout=timeout)

        sanitized = sanitize_curl(curl_command)
        click.echo(f"Sanitized curl command: {sanitized}")
        request = parse_curl(sanitized)

        options = OpenAPIOptions(
            operation_name=name or None,
            url_template=url_template,
            tags=list(tags),
            output_path=output_path or output,
            append_path=append_path,
            summary=summary,
        )
        document = generate_openapi(request, response_data, options)

        if append_path:
            document = merge_with_existing(document, append_path)
            click.echo(f"Appended to existing swagger file: {append_path}")

        written = save_document(document, options.output_path, options.append_path)
    except SwagglerError as e:
        click.echo(f"Error: {e.message}", err=True)
        if e.details:
            click.echo(f"Details: {json.dumps(e.details, default=str)}", err=True)
        logger.debug("Aborting with %s", e.code)
        ctx.exit(e.exit_code)

    click.echo(f"OpenAPI 3.0 documentation generated and saved to {written}")


@main.command()
@click.option("-c", "--curl", default=None, help="Curl command, or path to a file containing one.")
@click.option("-i", "--input", "input_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Path to a file containing the curl command.")
def sanitize(curl: str | None, input_path: Path | None):
    """Print a curl command with credential and browser headers removed."""
    click.echo(sanitize_curl(_load_curl(curl, input_path)))
