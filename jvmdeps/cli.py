"""CLI entry point: jvmdeps.

Subcommands:
    jvmdeps classpath                         # dependencies.yml, compile scope
    jvmdeps classpath pom.xml -t maven2 -s test -d build/classes
    jvmdeps paths project.xml -t legacy-v1 --json
"""

from __future__ import annotations

import dataclasses
import json
import os
import sys
from pathlib import Path

import click

from jvmdeps.config import ResolverSettings
from jvmdeps.core.logging import setup_logging
from jvmdeps.exceptions import ResolverError
from jvmdeps.models import DIALECT_ALIASES, Dialect, Scope
from jvmdeps.registry import get_dialect
from jvmdeps.resolver import resolve_dependency_paths

_DIALECT_CHOICES = [d.value for d in Dialect] + sorted(DIALECT_ALIASES)
_SCOPE_CHOICES = [s.value for s in Scope]


def _resolve_options(func):
    """Options shared by every resolving subcommand."""
    options = [
        click.argument("manifest", required=False, type=click.Path(dir_okay=False)),
        click.option(
            "-t",
            "--type",
            "dialect",
            default=Dialect.NATIVE.value,
            type=click.Choice(_DIALECT_CHOICES),
            help="Manifest dialect",
        ),
        click.option(
            "-s",
            "--scope",
            default=Scope.COMPILE.value,
            type=click.Choice(_SCOPE_CHOICES),
            help="Classpath scope",
        ),
        click.option(
            "-d",
            "--dir",
            "directories",
            multiple=True,
            help="Directory appended after the resolved entries (repeatable)",
        ),
        click.option("--cache-dir", default=None, help="Cache root override"),
        click.option("--skip", is_flag=True, help="Skip resolution entirely"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve(
    verbose: bool,
    manifest: str | None,
    dialect: str,
    scope: str,
    directories: tuple[str, ...],
    cache_dir: str | None,
    skip: bool,
) -> list[str] | None:
    if skip:
        return None
    try:
        if manifest is None:
            manifest = get_dialect(dialect).default_manifest
        settings = ResolverSettings.from_env()
        if cache_dir:
            settings = dataclasses.replace(settings, cache_dir=Path(cache_dir).expanduser())
        return resolve_dependency_paths(
            manifest,
            dialect=dialect,
            scope=scope,
            directories=directories,
            verbose=verbose,
            settings=settings,
        )
    except ResolverError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """jvmdeps: resolve JVM library dependencies into a cached classpath."""
    setup_logging("DEBUG" if verbose else None)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command("classpath")
@_resolve_options
@click.pass_context
def classpath(ctx: click.Context, **options) -> None:
    """Print the separator-joined classpath for a manifest."""
    paths = _resolve(ctx.obj["verbose"], **options)
    if paths is not None:
        click.echo(os.pathsep.join(paths))


@main.command("paths")
@_resolve_options
@click.option("--json", "as_json", is_flag=True, help="Print a JSON array")
@click.pass_context
def paths(ctx: click.Context, as_json: bool, **options) -> None:
    """Print one resolved artifact path per line."""
    resolved = _resolve(ctx.obj["verbose"], **options)
    if resolved is None:
        return
    if as_json:
        click.echo(json.dumps(resolved, indent=2))
        return
    for path in resolved:
        click.echo(path)


if __name__ == "__main__":
    main()
