"""semverstore CLI"""

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from semverstore import __version__
from semverstore.cli.utils.logging import logger
from semverstore.model import Source
from semverstore.store import VersionStore, get_store
from semverstore.versioning import VersioningError, bump_from_params, parse_version

from .debug import add_debug_option


def _fail(error: Exception) -> NoReturn:
    logger.error(click.style("[ERROR]", fg="red", bold=True) + f" {error}")
    if logger.isEnabledFor(logging.DEBUG):
        logger.exception("Full traceback:")
    sys.exit(1)


def _load_store(config_path: str, max_retries: Optional[int]) -> VersionStore:
    try:
        source = Source.from_yaml(Path(config_path))
        return get_store(source, max_retries=max_retries)
    except VersioningError as e:
        _fail(e)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="YAML file describing where the version is stored.",
)
max_retries_option = click.option(
    "--max-retries",
    type=click.IntRange(min=1),
    default=None,
    help="Write attempts before giving up on a contended store.",
)


@click.group()
@click.version_option(__version__, prog_name="semverstore")
@click.pass_context
def cli(ctx):
    """
    Keep a semantic version in S3, GCS or a git repository.
    """
    ctx.ensure_object(dict)


@click.command(name="check")
@config_option
@max_retries_option
@click.option("--since", default=None, help="Only print the version if newer.")
def check(config_path, max_retries, since):
    """Print the stored version."""
    store = _load_store(config_path, max_retries)
    try:
        versions = store.check(parse_version(since) if since else None)
    except VersioningError as e:
        _fail(e)
    for version in versions:
        click.echo(str(version))


@click.command(name="bump")
@config_option
@max_retries_option
@click.option(
    "--bump",
    "component",
    type=click.Choice(["major", "minor", "patch", "final"], case_sensitive=False),
    default=None,
    help="Version component to bump.",
)
@click.option("--pre", default=None, help="Prerelease identifier, e.g. rc.")
@click.option(
    "--pre-without-version",
    is_flag=True,
    default=False,
    help="Use the bare prerelease identifier, without a counter.",
)
def bump(config_path, max_retries, component, pre, pre_without_version):
    """Bump the stored version and print the new one."""
    if not component and not pre:
        raise click.UsageError("give --bump, --pre or both")
    store = _load_store(config_path, max_retries)
    try:
        version = store.bump(bump_from_params(component, pre, pre_without_version))
    except VersioningError as e:
        _fail(e)
    click.echo(str(version))


@click.command(name="set")
@config_option
@max_retries_option
@click.argument("version")
def set_version(config_path, max_retries, version):
    """Store VERSION, whatever the current version is."""
    store = _load_store(config_path, max_retries)
    try:
        new_version = parse_version(version)
        store.set(new_version)
    except VersioningError as e:
        _fail(e)
    click.echo(str(new_version))


cli.add_command(add_debug_option(check))
cli.add_command(add_debug_option(bump))
cli.add_command(add_debug_option(set_version))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
