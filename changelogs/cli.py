"""CLI entrypoint for change log maintenance."""

from __future__ import annotations

import asyncio

import click

from changelogs import __version__
from changelogs.bootstrap import ChangeLogs, create_change_logs
from changelogs.config import settings
from changelogs.exceptions import ChangeLogError
from changelogs.models.enums import RecordAction
from changelogs.schemas.change_log import ChangeLogFilters, ChangeLogStatistics

TOP_ACTORS = 10


def _build_services() -> ChangeLogs:
    return create_change_logs(settings)


@click.group()
@click.version_option(__version__, prog_name="changelogs")
def cli() -> None:
    """changelogs - inspect and prune the change log."""
    from changelogs.main import configure_logging

    configure_logging()


@cli.command()
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=None,
    help="Delete entries older than this many days (defaults to CHANGE_LOGS_CLEANUP_DAYS)",
)
@click.option("--force", is_flag=True, help="Run even when retention is disabled, without confirmation")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
def cleanup(days: int | None, force: bool, yes: bool) -> None:
    """Delete change logs past the retention horizon."""
    if not settings.cleanup.enabled and not force:
        click.echo("Change log cleanup is disabled (CHANGE_LOGS_CLEANUP_ENABLED=false). Use --force to run anyway.")
        return

    services = _build_services()
    days = settings.cleanup.days if days is None else days
    cutoff = services.retention.cutoff_date(days)

    if not (force or yes):
        click.confirm(
            f"Delete change logs that occurred before {cutoff.isoformat()} ({days} days)?",
            abort=True,
        )

    try:
        deleted = asyncio.run(services.retention.cleanup(days, force=True))
    except ChangeLogError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Deleted {deleted} change log(s) older than {cutoff.isoformat()}.")


@cli.command()
@click.option("--user", "actor_id", type=str, default=None, help="Only entries by this actor id")
@click.option(
    "--action",
    type=click.Choice([a.value for a in RecordAction], case_sensitive=False),
    default=None,
    help="Only entries with this action",
)
@click.option("--model", "subject_type", type=str, default=None, help="Only entries of this subject type")
@click.option("--days", type=click.IntRange(min=0), default=None, help="Only entries of the last N days")
def stats(actor_id: str | None, action: str | None, subject_type: str | None, days: int | None) -> None:
    """Show change log statistics."""
    filters = ChangeLogFilters.within_days(days) if days is not None else ChangeLogFilters()
    filters = filters.merge(actor_id=actor_id, action=action, subject_type=subject_type)

    services = _build_services()
    try:
        result = asyncio.run(services.query.statistics(filters))
    except ChangeLogError as e:
        raise click.ClickException(str(e)) from e

    _print_statistics(result)


def _print_statistics(result: ChangeLogStatistics) -> None:
    click.echo(f"Total change logs: {result.total}")

    click.echo("\nBy action:")
    if not result.by_action:
        click.echo("  (none)")
    for name, count in sorted(result.by_action.items(), key=lambda item: (-item[1], item[0])):
        click.echo(f"  {name:<10} {count}")

    click.echo(f"\nTop {TOP_ACTORS} actors:")
    actors = sorted(result.by_actor.items(), key=lambda item: (-item[1], item[0]))[:TOP_ACTORS]
    if not actors:
        click.echo("  (none)")
    for actor, count in actors:
        click.echo(f"  {actor:<36} {count}")

    click.echo(f"\nLatest {len(result.recent)} change logs:")
    for entry in result.recent:
        field = f".{entry.field_name}" if entry.field_name else ""
        click.echo(
            f"  {entry.created_at:%Y-%m-%d %H:%M:%S}  {entry.action.value:<7} "
            f"{entry.subject_type}#{entry.subject_id}{field}  by {entry.actor_id or '-'}"
        )
