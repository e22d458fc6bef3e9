"""CLI entry point for mcp-forge."""

import json
import sys
from pathlib import Path

import click

from mcp_forge.composer import APISource, compose_apis
from mcp_forge.errors import ForgeError
from mcp_forge.generator import GENERATORS, get_generator, validate_files
from mcp_forge.logger import log_stage, setup_logging
from mcp_forge.mapper import MCPServerConfig, map_spec_to_server
from mcp_forge.mapper.naming import sanitize_server_name
from mcp_forge.parser import ParsedSpec, parse_openapi
from mcp_forge.versioning import compare_versions

LANGUAGES = sorted(GENERATORS)


def _parse_spec(spec_path: Path) -> ParsedSpec:
    """Parse an OpenAPI file, echoing warnings and failing on errors."""
    with log_stage("parse"):
        result = parse_openapi(spec_path.read_text(encoding="utf-8"))
    for warning in result.warnings:
        click.echo(f"warning: {warning}", err=True)
    if not result.success or result.spec is None:
        lines = [f"  {e.path or '<root>'}: {e.message}" for e in result.errors]
        raise click.ClickException(f"Failed to parse {spec_path}:\n" + "\n".join(lines))
    return result.spec


def _split_pair(value: str, what: str) -> tuple[str, str]:
    name, sep, rest = value.partition("=")
    if not sep or not name or not rest:
        raise click.BadParameter(f"expected {what}, got {value!r}")
    return name, rest


def _write_files(config: MCPServerConfig, output: Path, language: str, check: bool) -> None:
    try:
        generator = get_generator(language)
    except ForgeError as e:
        raise click.ClickException(str(e)) from e

    with log_stage(f"generate:{language}"):
        files = generator.generate(config)

    if check:
        with log_stage("validate"):
            errors = validate_files(files)
        if errors:
            lines = [f"  {name}: {message}" for name, message in sorted(errors.items())]
            raise click.ClickException("Generated files failed validation:\n" + "\n".join(lines))

    output.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        file_path = output / filename
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        click.echo(f"  Created {file_path}")

    click.echo(f"Generated {len(files)} files in {output} ({len(config.enabled_tools())} tools)")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """mcp-forge - turn OpenAPI specs into MCP servers."""
    setup_logging(verbose)


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the mapped server config as JSON.")
def parse(spec_path: Path, as_json: bool):
    """Parse a spec and show the tools it maps to."""
    spec = _parse_spec(spec_path)
    with log_stage("map"):
        config = map_spec_to_server(spec)

    if as_json:
        click.echo(json.dumps(config.to_json_dict(), indent=2))
        return

    click.echo(f"{spec.title} {spec.version}")
    click.echo(f"Base URL: {spec.base_url}")
    click.echo(f"Found {len(spec.endpoints)} endpoints, {len(config.tools)} tools.")
    for tool in config.tools:
        click.echo(f"  {tool.handler.method:<7} {tool.handler.path} -> {tool.name}")
    if config.env_vars:
        click.echo("Environment variables:")
        for env_var in config.env_vars:
            click.echo(f"  {env_var.name}")


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for the generated server.")
@click.option("-l", "--language", default="typescript", type=click.Choice(LANGUAGES), help="Target language.")
@click.option("--name", default=None, help="Override the server name.")
@click.option("--disable", "disabled", multiple=True, help="Tool name to leave out (repeatable).")
@click.option("--check", is_flag=True, help="Validate generated files before writing them.")
def generate(spec_path: Path, output: Path, language: str, name: str | None, disabled: tuple[str, ...], check: bool):
    """Generate an MCP server from one OpenAPI spec."""
    spec = _parse_spec(spec_path)
    with log_stage("map"):
        config = map_spec_to_server(spec)

    if name:
        config.name = sanitize_server_name(name)
    unknown = set(disabled) - {t.name for t in config.tools}
    if unknown:
        click.echo(f"warning: unknown tools: {', '.join(sorted(unknown))}", err=True)
    for tool in config.tools:
        if tool.name in disabled:
            tool.enabled = False

    _write_files(config, output, language, check)


@main.command()
@click.argument("apis", nargs=-1, required=True)
@click.option("-o", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for the generated server.")
@click.option("-l", "--language", default="typescript", type=click.Choice(LANGUAGES), help="Target language.")
@click.option("--name", default=None, help="Server name.")
@click.option("--description", default=None, help="Server description.")
@click.option("--disable", "disabled", multiple=True, help="API=TOOL to leave out (repeatable).")
@click.option("--check", is_flag=True, help="Validate generated files before writing them.")
def compose(
    apis: tuple[str, ...],
    output: Path,
    language: str,
    name: str | None,
    description: str | None,
    disabled: tuple[str, ...],
    check: bool,
):
    """Compose several APIs into one MCP server.

    Each API is given as NAME=PATH, e.g. weather=specs/weather.yaml.
    """
    disabled_by_api: dict[str, list[str]] = {}
    for value in disabled:
        api_name, tool = _split_pair(value, "API=TOOL")
        disabled_by_api.setdefault(api_name, []).append(tool)

    sources = []
    for value in apis:
        api_name, path = _split_pair(value, "NAME=PATH")
        spec_path = Path(path)
        if not spec_path.is_file():
            raise click.BadParameter(f"no such file: {path}", param_hint="APIS")
        sources.append(
            APISource(
                name=api_name,
                spec=spec_path.read_text(encoding="utf-8"),
                disabled_tools=disabled_by_api.get(api_name, []),
            )
        )

    with log_stage("compose"):
        result = compose_apis(sources, server_name=name, server_description=description)

    for warning in result.warnings:
        click.echo(f"warning: {warning}", err=True)
    for error in result.errors:
        click.echo(f"error: [{error.api}] {error.message}", err=True)
    if not result.success:
        raise click.ClickException("No APIs could be composed.")

    click.echo(f"Composed {', '.join(result.composed_apis)} into {result.config.name}")
    _write_files(result.config, output, language, check)


@main.command()
@click.argument("old_spec", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("new_spec", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the diff as JSON.")
@click.option("--disable", "disabled", multiple=True, help="Tool name disabled in the new version (repeatable).")
def diff(old_spec: Path, new_spec: Path, as_json: bool, disabled: tuple[str, ...]):
    """Compare two versions of a spec. Exits with status 1 on breaking changes."""
    try:
        with log_stage("diff"):
            result = compare_versions(
                old_spec.read_text(encoding="utf-8"),
                new_spec.read_text(encoding="utf-8"),
                disabled_tools=list(disabled),
            )
    except ForgeError as e:
        raise click.ClickException(str(e)) from e

    version_diff = result.diff
    if as_json:
        click.echo(json.dumps(version_diff.to_json_dict(), indent=2))
    else:
        click.echo(version_diff.summary)
        for change in version_diff.changes:
            click.echo(f"  [{change.severity.value}] {change.description}")
            for detail in change.details or []:
                click.echo(f"      {detail.field}: {detail.old_value or '-'} -> {detail.new_value or '-'}")
        if version_diff.migration_notes:
            click.echo("Migration notes:")
            for note in version_diff.migration_notes:
                click.echo(f"  - {note}")

    if not version_diff.is_backwards_compatible:
        sys.exit(1)
