"""Connection history and usage statistics from the stored profiles."""

import json
from collections import Counter
from datetime import UTC, datetime

import click

from jumpdeck.config.settings import Config
from jumpdeck.profiles.models import Profile


def format_time_ago(when: datetime | None, now: datetime | None = None) -> str:
    """Short relative description of ``when``, e.g. "3 hours ago"."""
    if when is None:
        return "never"
    now = now or datetime.now(UTC)
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    seconds = (now - when).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return "1 minute ago" if minutes == 1 else f"{minutes} minutes ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    if seconds < 7 * 86400:
        days = int(seconds // 86400)
        return "yesterday" if days == 1 else f"{days} days ago"
    return when.strftime("%Y-%m-%d")


def _last_used_key(profile: Profile) -> datetime:
    last = profile.last_used or datetime.min.replace(tzinfo=UTC)
    return last if last.tzinfo else last.replace(tzinfo=UTC)


def _show_recent(profiles: list[Profile], limit: int, as_json: bool) -> None:
    used = sorted((p for p in profiles if p.use_count > 0), key=_last_used_key, reverse=True)
    if limit > 0:
        used = used[:limit]

    if as_json:
        entries = [
            {
                "name": p.name,
                "host": p.host,
                "protocol": p.protocol,
                "lastUsed": p.last_used.isoformat() if p.last_used else None,
                "useCount": p.use_count,
            }
            for p in used
        ]
        click.echo(json.dumps(entries, indent=2))
        return

    if not used:
        click.echo("No connection history.")
        return

    click.echo("Recent connections:\n")
    for p in used:
        click.echo(f"  {p.name:<20}  {p.target}  (used {p.use_count}x, last: {format_time_ago(p.last_used)})")


def _show_stats(profiles: list[Profile], as_json: bool) -> None:
    if not profiles:
        click.echo("No profiles configured.")
        return

    by_protocol = Counter(p.protocol for p in profiles)
    by_group = Counter(p.group or "(default)" for p in profiles)
    used = [p for p in profiles if p.use_count > 0]
    most_used = max(used, key=lambda p: p.use_count, default=None)
    most_recent = max((p for p in profiles if p.last_used), key=_last_used_key, default=None)

    stats = {
        "totalProfiles": len(profiles),
        "usedProfiles": len(used),
        "totalConnections": sum(p.use_count for p in profiles),
        "favorites": sum(1 for p in profiles if p.favorite),
        "protocolCounts": dict(sorted(by_protocol.items())),
        "groupCounts": dict(sorted(by_group.items())),
    }
    if most_used:
        stats["mostUsed"] = {"name": most_used.name, "useCount": most_used.use_count}
    if most_recent:
        stats["mostRecent"] = {"name": most_recent.name, "lastUsed": most_recent.last_used.isoformat()}

    if as_json:
        click.echo(json.dumps(stats, indent=2))
        return

    click.echo("=== Connection Statistics ===\n")
    click.echo(f"  Total profiles:     {stats['totalProfiles']}")
    click.echo(f"  Used profiles:      {stats['usedProfiles']}")
    click.echo(f"  Total connections:  {stats['totalConnections']}")
    click.echo(f"  Favorites:          {stats['favorites']}\n")

    click.echo("By protocol:")
    for protocol, count in stats["protocolCounts"].items():
        click.echo(f"  {protocol or '(inherited)':<10} {count}")
    click.echo("\nBy group:")
    for group, count in stats["groupCounts"].items():
        click.echo(f"  {group:<15} {count}")
    click.echo()

    if most_used:
        click.echo(f"Most used:    {most_used.name} ({most_used.use_count} connections)")
    if most_recent:
        click.echo(f"Most recent:  {most_recent.name} ({format_time_ago(most_recent.last_used)})")


@click.command(name="history")
@click.option("-n", "--limit", type=int, default=10, show_default=True, help="Number of entries to show")
@click.option("--stats", is_flag=True, help="Show usage statistics instead")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def history_command(ctx: click.Context, limit: int, stats: bool, as_json: bool) -> None:
    """Show recently used profiles, most recent first.

    Examples:

        jumpdeck history -n 5

        jumpdeck history --stats --json
    """
    config: Config = ctx.obj["config"]
    profiles = [config.get_profile(p.name) for p in config.list_profiles()]
    if stats:
        _show_stats(profiles, as_json)
    else:
        _show_recent(profiles, limit, as_json)
