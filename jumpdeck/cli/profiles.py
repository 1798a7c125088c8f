"""Profile management commands: add, edit, clone, favorite, remove, list, show."""

import json
import sys

import click
import yaml

from jumpdeck.config.settings import Config, save_config
from jumpdeck.enums import Protocol
from jumpdeck.exceptions import CredentialError, JumpdeckError, ProfileValidationError
from jumpdeck.profiles.models import Profile

from .output import fail, warn


def _port_string(port: int) -> str:
    return str(port) if port > 0 else "default"


def _prompt_and_store_password(ctx: click.Context, name: str, prompt: str) -> bool:
    password = click.prompt(prompt, default="", hide_input=True, show_default=False, err=True).strip()
    if not password:
        return False
    try:
        ctx.obj["selector"].set_password(name, password)
    except CredentialError as e:
        fail(e)
    return True


@click.command(name="add")
@click.argument("name")
@click.option(
    "--protocol",
    "--type",
    "protocol",
    type=click.Choice(Protocol.values(), case_sensitive=False),
    default=None,
    help="Protocol (default: ssh, or inherited with --extends)",
)
@click.option("--host", default="", help="Host name or IP (instance name for gcloud)")
@click.option("--port", type=int, default=0, help="Port (0 = protocol default)")
@click.option("--user", "username", default="", help="Login user name")
@click.option("--identity", "identity_file", default="", help="Path to a private key file")
@click.option("--agent/--no-agent", "use_agent", default=False, help="Use the SSH agent")
@click.option("--proxy-jump", default="", help="Jump host spec passed to ssh -J")
@click.option("--extends", default="", help="Inherit unset fields from another profile")
@click.option("--group", default="", help="Group name for organizing profiles")
@click.option("--desc", "description", default="", help="Description")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--favorite", is_flag=True, help="Mark as favorite")
@click.option("--extra", "extra_args", multiple=True, help="Extra client argument (repeatable)")
@click.option("-L", "--local-forward", "local_forwards", multiple=True, help="Local forward spec (repeatable)")
@click.option("-R", "--remote-forward", "remote_forwards", multiple=True, help="Remote forward spec (repeatable)")
@click.option("-D", "--dynamic-forward", "dynamic_forwards", multiple=True, help="SOCKS port (repeatable)")
@click.option("--remote-command", default="", help="Command to run after connecting")
@click.option("--remote-dir", default="", help="Directory to cd into after connecting")
@click.option("--set-env", multiple=True, help="KEY=VALUE sent with ssh SetEnv (repeatable)")
@click.option("--aws-region", default="", help="AWS region (ssm)")
@click.option("--aws-profile", default="", help="AWS named profile (ssm)")
@click.option("--instance-id", default="", help="EC2 instance id (ssm)")
@click.option("--mosh-server", default="", help="Path to mosh-server on the remote host")
@click.option("--gcp-project", default="", help="GCP project (gcloud)")
@click.option("--gcp-zone", default="", help="GCP zone (gcloud)")
@click.option("--gcp-tunnel", "gcp_use_tunnel", is_flag=True, help="Tunnel through IAP (gcloud)")
@click.option("--ask-password", is_flag=True, help="Prompt for a password to store")
@click.pass_context
def add_command(ctx: click.Context, name: str, protocol: str | None, ask_password: bool, **fields) -> None:
    """Add or replace the profile NAME.

    Examples:

        jumpdeck add web --host web.example.com --user deploy

        jumpdeck add web-staging --extends web --host staging.example.com
    """
    config: Config = ctx.obj["config"]
    if protocol is None and not fields["extends"]:
        protocol = Protocol.SSH.value
    data = {key: list(value) if isinstance(value, tuple) else value for key, value in fields.items()}
    profile = Profile(name=name, protocol=(protocol or "").lower(), **data)

    try:
        config.upsert_profile(profile)
        save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    if ask_password:
        _prompt_and_store_password(ctx, name, "Password (leave empty to skip)")

    effective = config.get_profile(name)
    click.echo(
        f"Saved profile {name!r} ({effective.protocol or 'inherited'} "
        f"{effective.target}:{_port_string(effective.port)})"
    )


@click.command(name="remove")
@click.argument("name")
@click.option("--delete-password", is_flag=True, help="Also delete the stored password")
@click.pass_context
def remove_command(ctx: click.Context, name: str, delete_password: bool) -> None:
    """Remove the profile NAME."""
    config: Config = ctx.obj["config"]
    if not config.delete_profile(name):
        click.echo(click.style(f"Error: profile {name!r} not found", fg="red"), err=True)
        sys.exit(1)

    children = sorted(p.name for p in config.profiles.values() if p.extends == name)
    try:
        save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    if delete_password:
        try:
            ctx.obj["selector"].delete_password(name)
        except CredentialError as e:
            warn(f"failed to delete stored password: {e.message}")

    click.echo(f"Removed profile {name!r}")
    if children:
        warn(f"profiles still extend {name!r}: {', '.join(children)}")


@click.command(name="list")
@click.option("--tag", "tags", multiple=True, help="Only profiles carrying every given tag")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def list_command(ctx: click.Context, tags: tuple[str, ...], as_json: bool) -> None:
    """List profiles, favorites first, then by group and name."""
    config: Config = ctx.obj["config"]
    profiles = [config.get_profile(p.name) for p in config.list_profiles()]

    if tags:
        wanted = {t.lower() for t in tags}
        profiles = [p for p in profiles if wanted <= {t.lower() for t in p.tags}]

    if as_json:
        click.echo(json.dumps([p.to_yaml_dict() for p in profiles], indent=2))
        return

    profiles.sort(key=lambda p: not p.favorite)
    for p in profiles:
        marker = "*" if p.favorite else " "
        group = p.group or "default"
        tag_text = f" [{','.join(p.tags)}]" if p.tags else ""
        click.echo(f"{marker} {group}/{p.name}\t({p.protocol})\t{p.target}:{_port_string(p.port)}{tag_text}")


@click.command(name="show")
@click.argument("name")
@click.option("--raw", is_flag=True, help="Show the stored profile without inheritance applied")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def show_command(ctx: click.Context, name: str, raw: bool, as_json: bool) -> None:
    """Show a profile's details (inheritance resolved unless --raw)."""
    config: Config = ctx.obj["config"]
    try:
        profile = config.get_raw_profile(name) if raw else config.get_profile(name)
    except JumpdeckError as e:
        fail(e)

    data = profile.to_yaml_dict()
    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, default_flow_style=False), nl=False)


@click.command(name="edit")
@click.argument("name")
@click.option("--host", default=None, help="Host name or IP")
@click.option("--port", type=int, default=None, help="Port (0 = protocol default)")
@click.option("--user", "username", default=None, help="Login user name")
@click.option("--identity", "identity_file", default=None, help="Path to a private key file")
@click.option("--proxy-jump", default=None, help="Jump host spec passed to ssh -J")
@click.option("--extends", default=None, help="Parent profile (empty string to detach)")
@click.option("--group", default=None, help="Group name")
@click.option("--desc", "description", default=None, help="Description")
@click.option("--remote-command", default=None, help="Command to run after connecting")
@click.option("--remote-dir", default=None, help="Directory to cd into after connecting")
@click.option("--tag", "tags", multiple=True, help="Replace the tags (repeatable)")
@click.option("--clear-tags", is_flag=True, help="Remove all tags")
@click.option("--ask-password", is_flag=True, help="Prompt for a new password to store")
@click.pass_context
def edit_command(
    ctx: click.Context,
    name: str,
    tags: tuple[str, ...],
    clear_tags: bool,
    ask_password: bool,
    **fields,
) -> None:
    """Change fields of the stored profile NAME.

    Only the options given are changed; inherited values are left alone.

    Examples:

        jumpdeck edit web --host web2.example.com --port 2222

        jumpdeck edit web --tag prod --tag eu
    """
    config: Config = ctx.obj["config"]
    try:
        stored = config.get_raw_profile(name)
    except JumpdeckError as e:
        fail(e)

    update = {key: value for key, value in fields.items() if value is not None}
    if clear_tags:
        update["tags"] = []
    elif tags:
        update["tags"] = list(tags)

    if update:
        try:
            config.upsert_profile(stored.model_copy(update=update))
            save_config(config, ctx.obj["config_path"])
        except JumpdeckError as e:
            fail(e)

    if ask_password and _prompt_and_store_password(ctx, name, "New password (leave empty to skip)"):
        click.echo("Password updated.")

    if not update and not ask_password:
        warn("nothing to change; pass at least one option")
        return
    click.echo(f"Updated profile {name!r}")


@click.command(name="clone")
@click.argument("source")
@click.argument("new_name")
@click.option("--host", default=None, help="Host for the copy")
@click.option("--port", type=int, default=None, help="Port for the copy")
@click.option("--user", "username", default=None, help="User name for the copy")
@click.option("--group", default=None, help="Group for the copy")
@click.pass_context
def clone_command(ctx: click.Context, source: str, new_name: str, **fields) -> None:
    """Copy the stored profile SOURCE to NEW_NAME.

    Usage statistics and the favorite mark are not copied, nor is the
    stored password.

    Example:

        jumpdeck clone web web-staging --host staging.example.com
    """
    config: Config = ctx.obj["config"]
    try:
        stored = config.get_raw_profile(source)
        if new_name in config.profiles:
            raise ProfileValidationError(f"profile {new_name!r} already exists", field="name")

        update = {key: value for key, value in fields.items() if value is not None}
        update.update(name=new_name, favorite=False, use_count=0, last_used=None)
        config.upsert_profile(stored.model_copy(update=update))
        save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    click.echo(f"Cloned {source!r} -> {new_name!r}")


@click.command(name="favorite")
@click.argument("name")
@click.option("--unset", is_flag=True, help="Remove the favorite mark")
@click.pass_context
def favorite_command(ctx: click.Context, name: str, unset: bool) -> None:
    """Mark NAME as a favorite (listed first), or unmark it with --unset."""
    config: Config = ctx.obj["config"]
    try:
        stored = config.get_raw_profile(name)
        config.profiles[name] = stored.model_copy(update={"favorite": not unset})
        save_config(config, ctx.obj["config_path"])
    except JumpdeckError as e:
        fail(e)

    click.echo(f"{'unfavorited' if unset else 'favorited'} {name!r}")
