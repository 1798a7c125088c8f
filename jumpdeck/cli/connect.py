"""Connection commands: connect, run, test, scp, rsync."""

import sys
from datetime import UTC, datetime
from pathlib import Path

import click
import structlog

from jumpdeck.config.settings import Config, load_config, save_config
from jumpdeck.connectors.transfer import build_rsync_command, build_scp_command, split_transfer
from jumpdeck.engine.dispatcher import ConnectionDispatcher
from jumpdeck.enums import Protocol
from jumpdeck.exceptions import ConfigurationError, JumpdeckError, SubprocessFailedError
from jumpdeck.profiles.models import Profile
from jumpdeck.profiles.validation import default_port
from jumpdeck.utils.network import DEFAULT_TIMEOUT, tcp_connect_time

from .output import fail, interrupted, warn

log = structlog.get_logger(__name__)

TUNNELED_PROTOCOLS = {Protocol.SSM.value, Protocol.GCLOUD.value}


def record_usage(config_path: Path, name: str) -> None:
    """Bump ``lastUsed``/``useCount`` for ``name`` in the config file.

    The file is reloaded first so edits made while the session was open are
    kept. Failures are reported as warnings; the connection already succeeded.
    """
    try:
        config = load_config(config_path)
        stored = config.get_raw_profile(name)
        config.record_usage(
            stored.model_copy(update={"last_used": datetime.now(UTC), "use_count": stored.use_count + 1})
        )
        save_config(config, config_path)
    except JumpdeckError as e:
        log.debug("usage_update_failed", profile=name, exc_info=True)
        warn(f"failed to update usage stats: {e.message}")


@click.command(name="connect")
@click.argument("name")
@click.option("--no-forward", is_flag=True, help="Skip the profile's port forwards for this connection")
@click.pass_context
def connect_command(ctx: click.Context, name: str, no_forward: bool) -> None:
    """Connect to the profile NAME using its protocol's native tool."""
    config: Config = ctx.obj["config"]
    dispatcher = ConnectionDispatcher(
        ctx.obj["registry"],
        ctx.obj["selector"],
        runner=ctx.obj["runner"],
    )
    try:
        profile = config.get_profile(name)
        dispatcher.connect(profile, no_forward=no_forward)
    except JumpdeckError as e:
        fail(e)
    except KeyboardInterrupt:
        interrupted()

    record_usage(ctx.obj["config_path"], name)


def _run_transfer(ctx: click.Context, spec) -> None:
    exit_code = ctx.obj["runner"](spec)
    if exit_code != 0:
        raise SubprocessFailedError(
            f"{spec.executable} exited with status {exit_code}",
            exit_code=exit_code,
            command=spec.executable,
        )


@click.command(name="scp")
@click.argument("source")
@click.argument("destination")
@click.option("-r", "--recursive", is_flag=True, help="Recursively copy directories")
@click.option("-p", "--preserve", is_flag=True, help="Preserve timestamps and permissions")
@click.pass_context
def scp_command(ctx: click.Context, source: str, destination: str, recursive: bool, preserve: bool) -> None:
    """Copy files to or from a profile's host.

    Exactly one of SOURCE and DESTINATION is remote, written PROFILE:PATH.

    Examples:

        jumpdeck scp web:/var/log/app.log ./

        jumpdeck scp -r ./dist web:/srv/app
    """
    config: Config = ctx.obj["config"]
    try:
        src, dst, profile_name = split_transfer(source, destination)
        profile = config.get_profile(profile_name)
        spec = build_scp_command(profile, src, dst, recursive=recursive, preserve=preserve)
        _run_transfer(ctx, spec)
    except JumpdeckError as e:
        fail(e)
    except KeyboardInterrupt:
        interrupted()


@click.command(name="rsync")
@click.argument("source")
@click.argument("destination")
@click.option("--delete", is_flag=True, help="Delete destination files missing from the source")
@click.option("-n", "--dry-run", is_flag=True, help="Show what would be transferred")
@click.option("--verbose", is_flag=True, help="Verbose rsync output")
@click.option("--progress", is_flag=True, help="Show progress during transfer")
@click.option("--exclude", "excludes", multiple=True, help="Exclude pattern (repeatable)")
@click.pass_context
def rsync_command(
    ctx: click.Context,
    source: str,
    destination: str,
    delete: bool,
    dry_run: bool,
    verbose: bool,
    progress: bool,
    excludes: tuple[str, ...],
) -> None:
    """Sync directories with a profile's host using rsync.

    Examples:

        jumpdeck rsync ./dist/ web:/var/www/html/

        jumpdeck rsync --exclude "*.log" web:/app/ ./backup/
    """
    config: Config = ctx.obj["config"]
    try:
        src, dst, profile_name = split_transfer(source, destination)
        profile = config.get_profile(profile_name)
        spec = build_rsync_command(
            profile,
            src,
            dst,
            delete=delete,
            dry_run=dry_run,
            verbose=verbose,
            progress=progress,
            excludes=excludes,
        )
        _run_transfer(ctx, spec)
    except JumpdeckError as e:
        fail(e)
    except KeyboardInterrupt:
        interrupted()


@click.command(name="run", context_settings={"ignore_unknown_options": True})
@click.argument("name")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("-t", "--tty", is_flag=True, help="Force TTY allocation (for interactive commands)")
@click.pass_context
def run_command(ctx: click.Context, name: str, command: tuple[str, ...], tty: bool) -> None:
    """Run COMMAND on an SSH profile's host without an interactive shell.

    The remote command's exit status becomes jumpdeck's. Put ``--`` before
    COMMAND if it has options jumpdeck would otherwise read.

    Examples:

        jumpdeck run web uptime

        jumpdeck run web -- ls -la /var/log

        jumpdeck run --tty web top
    """
    config: Config = ctx.obj["config"]
    dispatcher = ConnectionDispatcher(
        ctx.obj["registry"],
        ctx.obj["selector"],
        runner=ctx.obj["runner"],
    )
    try:
        profile = config.get_profile(name)
        dispatcher.run_command(profile, list(command), tty=tty)
    except JumpdeckError as e:
        fail(e)
    except KeyboardInterrupt:
        interrupted()


def _tcp_port(profile: Profile) -> int:
    if profile.port > 0:
        return profile.port
    return default_port(profile.protocol) or default_port(Protocol.SSH)


def _check_profile(profile: Profile, timeout: float, verbose: bool) -> bool | None:
    """Print one reachability line; None when the profile has no TCP endpoint."""
    if profile.protocol in TUNNELED_PROTOCOLS:
        click.echo(f"Testing {profile.name}... skipped (no direct TCP endpoint for {profile.protocol})")
        return None

    port = _tcp_port(profile)
    address = f"{profile.host}:{port}"
    click.echo(f"Testing {profile.name} ({address})... ", nl=False)
    try:
        elapsed = tcp_connect_time(profile.host, port, timeout=timeout)
    except OSError as e:
        log.debug("tcp_check_failed", profile=profile.name, address=address, error=str(e))
        click.echo(click.style(f"FAILED ({e})" if verbose else "FAILED", fg="red"))
        return False
    click.echo(click.style(f"OK ({round(elapsed * 1000)}ms)", fg="green"))
    return True


@click.command(name="test")
@click.argument("name", required=False)
@click.option("--all", "check_all", is_flag=True, help="Test every profile")
@click.option("--timeout", type=float, default=DEFAULT_TIMEOUT, show_default=True, help="Connect timeout in seconds")
@click.pass_context
def tcp_test_command(ctx: click.Context, name: str | None, check_all: bool, timeout: float) -> None:
    """Check that a profile's host accepts TCP connections on its port.

    Exits 1 if any reachable-by-TCP profile fails.

    Examples:

        jumpdeck test web --timeout 5

        jumpdeck test --all
    """
    config: Config = ctx.obj["config"]
    if not check_all and not name:
        fail(ConfigurationError("profile name required (or use --all)"))

    if not check_all:
        try:
            profile = config.get_profile(name)
        except JumpdeckError as e:
            fail(e)
        if _check_profile(profile, timeout, verbose=True) is False:
            sys.exit(1)
        return

    profiles = [config.get_profile(p.name) for p in config.list_profiles()]
    if not profiles:
        click.echo("No profiles found.")
        return

    results = [_check_profile(p, timeout, verbose=False) for p in profiles]
    passed = results.count(True)
    failed = results.count(False)
    click.echo(f"\nResults: {passed} passed, {failed} failed, {len(profiles)} total")
    if failed:
        sys.exit(1)
