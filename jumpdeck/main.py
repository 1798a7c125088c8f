"""CLI entry point for jumpdeck."""

import sys
from pathlib import Path

import click
import structlog

from jumpdeck import __version__
from jumpdeck.cli import (
    add_command,
    backends_command,
    clone_command,
    connect_command,
    edit_command,
    export_command,
    favorite_command,
    history_command,
    import_command,
    import_ssh_command,
    list_command,
    password_group,
    remove_command,
    rsync_command,
    run_command,
    scp_command,
    set_backend_command,
    show_command,
    tcp_test_command,
)
from jumpdeck.config.settings import JumpdeckSettings, default_config_path, load_config
from jumpdeck.connectors.registry import create_default_registry
from jumpdeck.credentials.selector import CredentialBackendSelector, default_factories
from jumpdeck.exceptions import ConfigurationError
from jumpdeck.utils.logging_config import configure_logging
from jumpdeck.utils.process import run_attached

log = structlog.get_logger(__name__)


@click.group()
@click.version_option(__version__, prog_name="jumpdeck")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: $XDG_CONFIG_HOME/jumpdeck/config.yaml)",
)
@click.option("--log-level", default=None, help="Logging level (default: WARNING)")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines")
@click.option(
    "--backend",
    default=None,
    help="Force a credential backend for this run (auto, 1password, keyring, file)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_json: bool,
    backend: str | None,
) -> None:
    """jumpdeck: connection profiles for ssh, sftp, telnet, mosh, ssm and gcloud."""
    settings = JumpdeckSettings()
    configure_logging(log_level or settings.log_level, json_output=log_json)

    obj = ctx.ensure_object(dict)
    path = config_path or default_config_path()
    obj.setdefault("config_path", path)

    if "config" not in obj:
        try:
            obj["config"] = load_config(path)
        except ConfigurationError as e:
            click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
            log.debug("config_error", exc_info=True)
            sys.exit(1)

    if "selector" not in obj:
        obj["selector"] = CredentialBackendSelector(
            forced=backend,
            config_default=obj["config"].default_backend,
            factories=default_factories(path.parent),
            settings=settings,
        )
    obj.setdefault("registry", create_default_registry())
    obj.setdefault("runner", run_attached)


cli.add_command(add_command)
cli.add_command(edit_command)
cli.add_command(clone_command)
cli.add_command(favorite_command)
cli.add_command(remove_command)
cli.add_command(list_command)
cli.add_command(show_command)
cli.add_command(connect_command)
cli.add_command(run_command)
cli.add_command(tcp_test_command)
cli.add_command(scp_command)
cli.add_command(rsync_command)
cli.add_command(history_command)
cli.add_command(export_command)
cli.add_command(import_command)
cli.add_command(import_ssh_command)
cli.add_command(password_group)
cli.add_command(backends_command)
cli.add_command(set_backend_command)


def main() -> None:
    cli(prog_name="jumpdeck")


if __name__ == "__main__":
    main()
