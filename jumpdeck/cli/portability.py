"""Moving profiles in and out: export, import, import-ssh.

Passwords never travel with an export; they stay in the credential backend.
"""

from pathlib import Path

import click
import structlog

from jumpdeck.config.settings import Config, load_config, save_config
from jumpdeck.exceptions import ConfigurationError, JumpdeckError
from jumpdeck.profiles.ssh_import import default_ssh_config_path, profiles_from_ssh_config

from .output import fail

log = structlog.get_logger(__name__)


@click.command(name="export")
@click.option(
    "--file",
    "file_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to write the profiles to",
)
@click.pass_context
def export_command(ctx: click.Context, file_path: Path) -> None:
    """Write all stored profiles to a YAML file (mode 0600)."""
    config: Config = ctx.obj["config"]
    exported = Config(profiles=dict(config.profiles))
    try:
        save_config(exported, file_path)
    except JumpdeckError as e:
        fail(e)

    click.echo(f"exported {len(exported.profiles)} profiles to {file_path}")


@click.command(name="import")
@click.option(
    "--file",
    "file_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File previously written by export",
)
@click.option("--overwrite", is_flag=True, help="Replace profiles that already exist")
@click.pass_context
def import_command(ctx: click.Context, file_path: Path, overwrite: bool) -> None:
    """Add the profiles from an exported YAML file."""
    config: Config = ctx.obj["config"]
    try:
        if not file_path.exists():
            raise ConfigurationError(f"import file not found: {file_path}")
        incoming = load_config(file_path)
        imported, skipped = config.import_profiles(incoming.list_profiles(), overwrite=overwrite)
        save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    log.info("profiles_imported", source=str(file_path), imported=imported, skipped=skipped)
    click.echo(f"imported {imported}, skipped {skipped}")


@click.command(name="import-ssh")
@click.option(
    "--file",
    "file_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="OpenSSH client config (default: ~/.ssh/config)",
)
@click.option("--group", default="", help="Group for the imported profiles")
@click.option("--prefix", default="", help="Prefix added to each profile name")
@click.option("--overwrite", is_flag=True, help="Replace profiles that already exist")
@click.option("--dry-run", is_flag=True, help="Show what would be imported without saving")
@click.pass_context
def import_ssh_command(
    ctx: click.Context,
    file_path: Path | None,
    group: str,
    prefix: str,
    overwrite: bool,
    dry_run: bool,
) -> None:
    """Create ssh profiles from the Host entries of an OpenSSH config.

    Wildcard patterns are skipped. The imported profiles can be edited
    like any other.

    Example:

        jumpdeck import-ssh --group work --prefix w-
    """
    config: Config = ctx.obj["config"]
    try:
        profiles = profiles_from_ssh_config(file_path or default_ssh_config_path(), group=group, prefix=prefix)
    except JumpdeckError as e:
        fail(e)

    if dry_run:
        for p in profiles:
            state = "exists" if p.name in config.profiles else "new"
            click.echo(f"  {p.name}\t{p.target}{f':{p.port}' if p.port else ''}\t({state})")
        click.echo(f"{len(profiles)} profiles found (dry run, nothing saved)")
        return

    imported, skipped = config.import_profiles(profiles, overwrite=overwrite)
    try:
        save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    click.echo(f"imported {imported}, skipped {skipped}")
    if skipped and not overwrite:
        click.echo(f"(use --overwrite to replace the {skipped} existing profiles)")
