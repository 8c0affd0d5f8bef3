"""Command line entry points for inspecting and editing the local ledger."""

from __future__ import annotations

from datetime import date

import click

from .config import BaseConfig
from .engine import HabitEngine, create_engine_context
from .logging_config import setup_logging


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from exc


def _engine(ctx: click.Context) -> HabitEngine:
    return ctx.obj["engine"]


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Habit completion ledger and progress metrics."""

    config = BaseConfig()
    setup_logging(config)
    ctx.ensure_object(dict)
    ctx.obj["engine"] = create_engine_context(config)


@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema (idempotent)."""

    engine = _engine(ctx)
    click.echo(f"Database ready in {engine.config.DATA_DIR}")


@main.command("add")
@click.argument("name")
@click.option("--frequency", type=click.Choice(["daily", "weekly", "monthly"]), default="daily")
@click.option("--days", "task_days", default="", help="Comma-separated weekdays, e.g. mon,wed,fri")
@click.option("--category", default="misc")
@click.option("--goal", "goal_id", default=None, help="Link the habit to a goal id")
@click.option("--target", "target_date", default=None, help="Create a goal with this target date")
@click.option("--goal-value", type=int, default=None, help="Track a numeric daily target instead of done/not done")
@click.option("--unit", default="count")
@click.pass_context
def add(ctx, name, frequency, task_days, category, goal_id, target_date, goal_value, unit) -> None:
    """Create a habit, or a goal when --target is given."""

    engine = _engine(ctx)
    try:
        if target_date:
            habit = engine.add_goal(name, _parse_day(target_date), category=category)
        else:
            habit = engine.add_habit(
                name,
                frequency=frequency,
                task_days=task_days,
                category=category,
                goal_id=goal_id,
                tracking_method="numeric" if goal_value else "boolean",
                goal_value=goal_value or 1,
                unit=unit,
            )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(habit.id)


@main.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived habits")
@click.pass_context
def list_habits(ctx, include_archived: bool) -> None:
    """List habits with their completion state today."""

    engine = _engine(ctx)
    today = engine.get_completions()
    for habit in engine.get_habits(include_archived=include_archived):
        mark = "x" if today.get(habit.id) else " "
        kind = "goal" if habit.is_goal else habit.frequency.value
        click.echo(f"[{mark}] {habit.id}  {habit.name} ({kind})")


@main.command("toggle")
@click.argument("habit_id")
@click.option("--date", "day", default=None, help="Day to toggle (default: today)")
@click.pass_context
def toggle(ctx, habit_id: str, day: str | None) -> None:
    """Flip a habit's completion for a day."""

    try:
        state = _engine(ctx).toggle_completion(habit_id, _parse_day(day))
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("completed" if state else "not completed")


@main.command("log")
@click.argument("habit_id")
@click.argument("value", type=int)
@click.option("--date", "day", default=None, help="Day to record (default: today)")
@click.pass_context
def log_value(ctx, habit_id: str, value: int, day: str | None) -> None:
    """Record a measured value for a numeric habit."""

    try:
        record = _engine(ctx).set_completion_value(habit_id, value, _parse_day(day))
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{record.value} ({'completed' if record.completed else 'not completed'})")


@main.command("streaks")
@click.argument("habit_id", required=False)
@click.pass_context
def show_streaks(ctx, habit_id: str | None) -> None:
    """Show current/best streak, perfect days and totals."""

    summary = _engine(ctx).get_streak_data(habit_id)
    click.echo(f"current streak: {summary.current_streak}")
    click.echo(f"best streak:    {summary.best_streak}")
    click.echo(f"perfect days:   {summary.perfect_days}")
    click.echo(f"completed:      {summary.total_completed}")


@main.command("heatmap")
@click.option("--days", type=int, default=None, help="Only print the trailing N days")
@click.pass_context
def heatmap(ctx, days: int | None) -> None:
    """Print the activity heatmap, oldest day first."""

    entries = _engine(ctx).get_heatmap_data()
    if days:
        entries = entries[-days:]
    for entry in entries:
        click.echo(f"{entry.day.isoformat()} {'#' * entry.count}")


@main.command("goal-progress")
@click.argument("goal_id")
@click.pass_context
def goal_progress(ctx, goal_id: str) -> None:
    """Show a goal's estimated completion percentage."""

    engine = _engine(ctx)
    goal = engine.habit_repo.get_by_id(goal_id)
    if goal is None:
        raise click.ClickException(f"Goal {goal_id} not found")
    breakdown = engine.goal_progress_breakdown(goal)
    if breakdown is None:
        click.echo("Ongoing (no progress data)")
        return
    click.echo(
        f"{breakdown.percent}% ({breakdown.completed}/{breakdown.expected} completions, "
        f"{breakdown.remaining} remaining)"
    )


@main.command("stats")
@click.option("--days", type=int, default=None, help="Limit to the trailing N days")
@click.pass_context
def stats(ctx, days: int | None) -> None:
    """Show consistency, perfect days and habit score."""

    try:
        summary = _engine(ctx).get_advanced_stats(days)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"consistency:    {summary.consistency_score}%")
    click.echo(f"perfect days:   {summary.perfect_days}")
    click.echo(f"completed:      {summary.total_habits_completed}")
    click.echo(f"per day:        {summary.average_habits_per_day}")
    click.echo(f"time invested:  {summary.total_time_invested_minutes} min")
    click.echo(f"habit score:    {summary.habit_score}")
