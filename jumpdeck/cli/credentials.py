"""Credential commands: password set/delete, backends, set-backend.

The active backend is chosen by (highest priority first):
    1. ``--backend`` / ``JUMPDECK_CREDENTIALS_BACKEND``
    2. ``defaultBackend`` in the config file
    3. Auto-detection: 1Password CLI, then OS keyring, then encrypted file
"""

import click

from jumpdeck.config.settings import Config, save_config
from jumpdeck.credentials.selector import CredentialBackendSelector
from jumpdeck.enums import BackendType
from jumpdeck.exceptions import ConfigurationError, CredentialError, JumpdeckError

from .output import fail

BACKEND_DESCRIPTIONS = {
    BackendType.ONEPASSWORD: "1Password CLI (op)",
    BackendType.KEYRING: "System keyring",
    BackendType.FILE: "Encrypted file (passwords.enc)",
}


@click.group(name="password")
def password_group():
    """Manage stored passwords for profiles."""
    pass


@password_group.command(name="set")
@click.argument("name")
@click.option(
    "--value",
    prompt="Password",
    hide_input=True,
    confirmation_prompt=True,
    help="Password (will prompt if not provided)",
)
@click.pass_context
def set_password(ctx: click.Context, name: str, value: str) -> None:
    """Store the password for profile NAME in the active backend."""
    config: Config = ctx.obj["config"]
    selector: CredentialBackendSelector = ctx.obj["selector"]
    try:
        config.get_raw_profile(name)
        selector.set_password(name, value.strip())
    except JumpdeckError as e:
        fail(e)

    click.echo(click.style(f"Password stored in {selector.get_active_backend().name}", fg="green"))


@password_group.command(name="delete")
@click.argument("name")
@click.pass_context
def delete_password(ctx: click.Context, name: str) -> None:
    """Delete the stored password for profile NAME."""
    selector: CredentialBackendSelector = ctx.obj["selector"]
    try:
        deleted = selector.delete_password(name)
    except CredentialError as e:
        fail(e)

    if deleted:
        click.echo(click.style("Password deleted", fg="green"))
    else:
        click.echo(click.style("No stored password", fg="yellow"))


@click.command(name="backends")
@click.pass_context
def backends_command(ctx: click.Context) -> None:
    """List credential backends and show which one is active."""
    config: Config = ctx.obj["config"]
    selector: CredentialBackendSelector = ctx.obj["selector"]

    click.echo(click.style("Credential backends:", bold=True))
    click.echo()
    status = selector.backend_status()
    signed_out = selector.signed_out_backends()

    try:
        active = selector.get_active_backend().name
        selection = selector.selection
    except CredentialError as e:
        active, selection = None, None
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)

    for backend_type, available in status.items():
        line = f"  {backend_type.value:<10} - {BACKEND_DESCRIPTIONS[backend_type]}"
        if available:
            line += click.style(" [available]", fg="green")
        else:
            line += click.style(" [not available]", fg="yellow")
            if backend_type in signed_out:
                line += " (not signed in, run: op signin)"
        if backend_type.value == active:
            line += click.style(" [ACTIVE]", bold=True)
        click.echo(line)

    click.echo()
    click.echo("Current configuration:")
    click.echo(f"  Active backend:   {active or 'none'}")
    if selection is not None:
        click.echo(f"  Selected by:      {selection.source}")
    if selector.forced:
        click.echo(f"  Forced backend:   {selector.forced}")
    click.echo(f"  Config default:   {config.default_backend or 'auto'}")


@click.command(name="set-backend")
@click.argument("backend")
@click.pass_context
def set_backend_command(ctx: click.Context, backend: str) -> None:
    """Set the default credential backend in the config file.

    BACKEND is one of: auto, 1password, keyring, file.
    """
    config: Config = ctx.obj["config"]
    try:
        backend_type = BackendType.parse(backend)
    except ValueError:
        valid = ", ".join(b.value for b in BackendType)
        fail(ConfigurationError(f"invalid backend: {backend} (must be one of: {valid})"))

    config.default_backend = backend_type.value
    try:
        path = save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    ctx.obj["selector"].set_default(backend_type)
    click.echo(f"Default backend set to: {backend_type}")
    click.echo(f"Config saved to: {path}")
    if ctx.obj["selector"].forced:
        click.echo(click.style("Note: the forced backend still takes precedence over this setting.", fg="yellow"))
