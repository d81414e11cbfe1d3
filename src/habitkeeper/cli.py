"""Command-line front end for HabitKeeper."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional

import click

from .config import BaseConfig
from .errors import HabitNotFoundError, ToggleCommitError
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelHabitRepository
from .logging_config import get_logger, setup_logging
from .models.frequency import FREQUENCY_KINDS, describe_frequency
from .services import calendar_log, habits
from .services.calendar_day import local_date, reference_day, start_of_local_day
from .services.users import ensure_local_user

logger = get_logger("cli")

_DAY_MARKS = {
    calendar_log.DayCompletion.ALL: "*",
    calendar_log.DayCompletion.PARTIAL: "+",
    calendar_log.DayCompletion.NONE: "-",
    calendar_log.DayCompletion.EMPTY: " ",
}


@dataclass
class CliContext:
    config: BaseConfig
    repository: SQLModelHabitRepository
    user_id: int

    @property
    def tz(self) -> Optional[tzinfo]:
        return self.config.TIMEZONE

    def reference_day(self, on: Optional[datetime]) -> datetime:
        if on is None:
            return reference_day(tz=self.tz)
        return start_of_local_day(on, self.tz)


_on_option = click.option(
    "--on",
    "on",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Evaluate as if today were this date (YYYY-MM-DD).",
)


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Track habits, streaks and monthly history."""

    config = BaseConfig()
    setup_logging(config)
    _, session_factory = bootstrap_database(config)
    user = ensure_local_user(session_factory)
    ctx.obj = CliContext(
        config=config,
        repository=SQLModelHabitRepository(session_factory),
        user_id=user.id,
    )


@main.command("add")
@click.argument("name")
@click.option(
    "--frequency",
    type=click.Choice(FREQUENCY_KINDS),
    default="daily",
    show_default=True,
)
@click.option("--days", type=int, default=None, help="Interval for every_x_days habits.")
@click.pass_obj
def add_habit(obj: CliContext, name: str, frequency: str, days: Optional[int]) -> None:
    """Create a habit."""

    try:
        habit = habits.create_habit(
            obj.repository,
            user_id=obj.user_id,
            name=name,
            frequency_kind=frequency,
            every_x_days=days,
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added #{habit.id} {habit.name} ({describe_frequency(habit.frequency)})")


@main.command("today")
@_on_option
@click.pass_obj
def list_today(obj: CliContext, on: Optional[datetime]) -> None:
    """List active habits with their state for today."""

    day = obj.reference_day(on)
    rows = habits.load_display_habits(
        obj.repository, user_id=obj.user_id, reference_day=day, tz=obj.tz
    )
    if not rows:
        click.echo("No active habits.")
        return

    click.echo(f"Habits for {local_date(day, obj.tz).isoformat()}")
    for row in rows:
        mark = "x" if row.is_completed_today else " "
        if row.is_completed_today:
            state = "done"
        elif row.is_due_today:
            state = "due today"
        else:
            state = "not due today"
        click.echo(
            f"[{mark}] #{row.habit.id} {row.habit.name} "
            f"({describe_frequency(row.habit.frequency)}) "
            f"streak {row.habit.streak} - {state}"
        )


@main.command("toggle")
@click.argument("habit_id", type=int)
@_on_option
@click.pass_obj
def toggle_habit(obj: CliContext, habit_id: int, on: Optional[datetime]) -> None:
    """Mark a habit complete for today, or undo today's completion."""

    command = habits.ToggleCommand(
        obj.repository,
        user_id=obj.user_id,
        tz=obj.tz,
        attempts=obj.config.TOGGLE_COMMIT_ATTEMPTS,
    )
    try:
        result = command.execute(habit_id, obj.reference_day(on))
    except (ValueError, HabitNotFoundError, ToggleCommitError) as exc:
        raise click.ClickException(str(exc)) from exc

    verb = "Completed" if result.is_completed_today else "Reopened"
    click.echo(f"{verb} #{habit_id} {result.habit.name} - streak {result.habit.streak}")


@main.command("calendar")
@click.option("--year", type=int, default=None)
@click.option("--month", type=click.IntRange(1, 12), default=None)
@click.pass_obj
def show_calendar(obj: CliContext, year: Optional[int], month: Optional[int]) -> None:
    """Show a month of logged habits."""

    today = local_date(reference_day(tz=obj.tz), obj.tz)
    year = year or today.year
    month = month or today.month

    start, end = calendar_log.month_bounds(year, month, obj.tz)
    entries = obj.repository.get_log_entries_between(start, end, user_id=obj.user_id)
    summaries = calendar_log.aggregate_month(entries, year=year, month=month, tz=obj.tz)

    click.echo(f"{calendar.month_name[month]} {year}")
    click.echo(" Su  Mo  Tu  We  Th  Fr  Sa")
    for week in calendar_log.month_grid(year, month):
        cells = []
        for day in week:
            if day is None:
                cells.append("    ")
                continue
            status = calendar_log.classify_day(summaries.get(day.isoformat()))
            cells.append(f"{day.day:>3}{_DAY_MARKS[status]}")
        click.echo("".join(cells).rstrip())

    for key in sorted(summaries):
        summary = summaries[key]
        click.echo(f"{key}: {summary.completed_count} of {summary.total_logged} habits completed")


@main.command("archive")
@click.argument("habit_id", type=int)
@click.pass_obj
def archive(obj: CliContext, habit_id: int) -> None:
    """Hide a habit from the daily list, keeping its history."""

    try:
        habit = habits.archive_habit(obj.repository, habit_id, user_id=obj.user_id)
    except HabitNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Archived #{habit.id} {habit.name}")


@main.command("delete")
@click.argument("habit_id", type=int)
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(obj: CliContext, habit_id: int, yes: bool) -> None:
    """Delete a habit and all of its logged history."""

    if not yes:
        click.confirm(
            f"Delete habit #{habit_id} and all its history? This cannot be undone.",
            abort=True,
        )
    try:
        habits.delete_habit(obj.repository, habit_id, user_id=obj.user_id)
    except HabitNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    logger.info("Habit deleted from CLI", extra={"habit_id": habit_id})
    click.echo(f"Deleted #{habit_id}")


if __name__ == "__main__":  # pragma: no cover
    main()
