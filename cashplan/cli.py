"""
Command-Line Interface for CashPlan.

Purpose
-------
Runs forecasts, allocation schedules and suggestions on JSON plan files
without writing Python code.

Commands
--------
- forecast: Month-by-month cash projection with goal progress
- schedule: Monthly goal allocation plan with guidance
- suggest: Rule-based recommendations for the plan
- validate: Check a plan file and summarize its contents
- info: Show version and dependency information

Example Usage
-------------
    # 24-month forecast starting in the current month
    $ cashplan forecast plan.json --months 24 --anchor start

    # Stress test and save the result
    $ cashplan forecast plan.json --conservative --output forecast.json

    # Savings plan for the year
    $ cashplan schedule plan.json --start 2024-01-01

    # Show version
    $ cashplan --version
"""

from __future__ import annotations

import logging
import sys
from importlib import metadata
from datetime import date
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppSettings, ForecastConfig, default_config
from .exceptions import CashPlanError
from .plan import UserPlan
from .utils import format_currency

# Version
__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _configure_logging(settings: AppSettings, verbose: bool) -> None:
    level = "DEBUG" if (verbose or settings.debug) else settings.log_level
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=getattr(logging, level),
    )


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load(path: Path) -> UserPlan:
    from .serialization import load_plan

    try:
        return load_plan(path)
    except CashPlanError as e:
        _fail(f"could not load plan: {e}")


def _build_config(
    start: Optional[str],
    months: int,
    anchor: str,
    conservative: bool,
    include_goals: bool = True,
    starting_balance: Optional[float] = None,
) -> ForecastConfig:
    try:
        return default_config(
            start or date.today(),
            months=months,
            anchor=anchor,
            conservative_mode=conservative,
            include_goal_contributions=include_goals,
            starting_balance=starting_balance,
        )
    except CashPlanError as e:
        _fail(str(e))


_start_option = click.option(
    "--start", "-s",
    type=str,
    default=None,
    help="Reference date YYYY-MM-DD (default: today)",
)
_months_option = click.option(
    "--months", "-m",
    type=int,
    default=12,
    show_default=True,
    help="Forecast horizon in months",
)
_anchor_option = click.option(
    "--anchor",
    type=click.Choice(["january", "start"]),
    default="january",
    show_default=True,
    help="Start the horizon in January of the start year, or in the start month",
)
_conservative_option = click.option(
    "--conservative",
    is_flag=True,
    help="Stress test: income -10%, expenses +10%",
)


@click.group()
@click.version_option(version=__version__, prog_name="cashplan")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, quiet: bool, verbose: bool) -> None:
    """
    CashPlan - Household cash-flow forecasting and goal planning.

    Projects income, expenses and savings goals month by month and
    shows how each month's surplus should be split among goals.

    Use 'cashplan COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    _configure_logging(settings, verbose)
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console()


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_months_option
@_start_option
@_anchor_option
@_conservative_option
@click.option("--no-goals", is_flag=True, help="Do not allocate surplus to goals")
@click.option(
    "--starting-balance", "-b",
    type=float,
    default=None,
    help="Opening balance (default: the plan's current balance)",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the full result as JSON",
)
@click.pass_context
def forecast(
    ctx: click.Context,
    plan_file: Path,
    months: int,
    start: Optional[str],
    anchor: str,
    conservative: bool,
    no_goals: bool,
    starting_balance: Optional[float],
    output: Optional[Path],
) -> None:
    """
    Project the plan month by month.

    Example:
        cashplan forecast plan.json -m 24 --start 2024-01-01
    """
    from .forecast import generate_forecast
    from .serialization import save_result

    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    symbol = ctx.obj["settings"].currency_symbol

    plan = _load(plan_file)
    config = _build_config(
        start, months, anchor, conservative,
        include_goals=not no_goals, starting_balance=starting_balance,
    )
    result = generate_forecast(plan, config)
    summary = result.summary

    def money(value: float) -> str:
        return format_currency(value, symbol=symbol)

    if quiet:
        click.echo(f"Final balance: {money(summary.final_balance)}")
        click.echo(f"Lowest balance: {money(summary.lowest_balance)}")
        click.echo(f"Months with negative balance: {summary.months_with_negative_balance}")
    else:
        table = Table(title="Monthly Forecast", show_header=True)
        table.add_column("Month", style="cyan")
        for column in ("Start", "Income", "Expenses", "Goals", "Net", "End"):
            table.add_column(column, justify="right")
        for m in result.monthly_forecasts:
            style = "red" if m.ending_balance < 0 else None
            table.add_row(
                m.month,
                money(m.starting_balance),
                money(m.income),
                money(m.expenses),
                money(m.goal_contributions),
                money(m.net_change),
                money(m.ending_balance),
                style=style,
            )
        console.print(table)

        console.print(Panel(
            "\n".join([
                f"Total income: {money(summary.total_income)}",
                f"Total expenses: {money(summary.total_expenses)}",
                f"Goal contributions: {money(summary.total_goal_contributions)}",
                f"Final balance: {money(summary.final_balance)}",
                f"Lowest / highest balance: {money(summary.lowest_balance)} / "
                f"{money(summary.highest_balance)}",
                f"Months with negative balance: {summary.months_with_negative_balance}",
            ]),
            title="Summary",
            border_style="green" if summary.months_with_negative_balance == 0 else "red",
        ))

        if result.goal_progress:
            goals_table = Table(title="Goal Progress", show_header=True)
            goals_table.add_column("Goal", style="cyan")
            goals_table.add_column("Projected", justify="right")
            goals_table.add_column("Progress", justify="right")
            goals_table.add_column("Completion")
            goals_table.add_column("Status")
            for p in result.goal_progress:
                goals_table.add_row(
                    p.name,
                    money(p.projected_amount),
                    f"{p.projected_progress:.1f}%",
                    p.estimated_completion_month or "-",
                    "[green]on track[/green]" if p.on_track else "[red]behind[/red]",
                )
            console.print(goals_table)

    if output:
        save_result(result, output)
        if not quiet:
            click.echo(f"Results saved to {output}")


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_months_option
@_start_option
@_anchor_option
@_conservative_option
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the schedule as JSON",
)
@click.pass_context
def schedule(
    ctx: click.Context,
    plan_file: Path,
    months: int,
    start: Optional[str],
    anchor: str,
    conservative: bool,
    output: Optional[Path],
) -> None:
    """
    Show how each month's surplus should be split among goals.

    Example:
        cashplan schedule plan.json --start 2024-01-01
    """
    from .schedule import build_allocation_schedule
    from .serialization import save_json

    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    symbol = ctx.obj["settings"].currency_symbol

    plan = _load(plan_file)
    config = _build_config(start, months, anchor, conservative)
    result = build_allocation_schedule(plan, config, symbol=symbol)

    if quiet:
        for m in result.months:
            click.echo(f"{m.month}: {m.guidance}")
    else:
        table = Table(title="Goal Allocation Schedule", show_header=True)
        table.add_column("Month", style="cyan")
        table.add_column("Surplus", justify="right")
        table.add_column("Allocated", justify="right")
        table.add_column("Guidance")
        for m in result.months:
            table.add_row(
                m.month,
                format_currency(m.total_surplus, symbol=symbol),
                format_currency(m.total_allocated, symbol=symbol),
                m.guidance,
            )
        console.print(table)

        s = result.summary
        console.print(Panel(
            "\n".join([
                f"Total allocated: {format_currency(s.total_allocated, symbol=symbol)}",
                f"Average per month: {format_currency(s.average_monthly_allocation, symbol=symbol)}",
                f"Allocations on track: {s.goals_on_track}",
                f"Allocations behind schedule: {s.goals_behind_schedule}",
            ]),
            title="Summary",
        ))

    if output:
        save_json(result.to_dict(), output)
        if not quiet:
            click.echo(f"Schedule saved to {output}")


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_start_option
@_conservative_option
@click.option("--max", "max_suggestions", type=int, default=5, show_default=True,
              help="Maximum number of suggestions")
@click.option("--min-impact", type=float, default=10.0, show_default=True,
              help="Drop suggestions with a smaller monthly impact")
@click.option("--focus", "-f", multiple=True,
              type=click.Choice(["income", "expense", "goal", "general"]),
              help="Only these categories (repeatable)")
@click.pass_context
def suggest(
    ctx: click.Context,
    plan_file: Path,
    start: Optional[str],
    conservative: bool,
    max_suggestions: int,
    min_impact: float,
    focus: Tuple[str, ...],
) -> None:
    """
    Suggest changes that improve the plan.

    Example:
        cashplan suggest plan.json --focus goal --focus expense
    """
    from .suggestions import generate_suggestions

    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    symbol = ctx.obj["settings"].currency_symbol

    plan = _load(plan_file)
    try:
        suggestions = generate_suggestions(
            plan,
            start or date.today(),
            {
                "max_suggestions": max_suggestions,
                "min_impact_threshold": min_impact,
                "focus_areas": list(focus),
                "conservative_mode": conservative,
            },
            symbol=symbol,
        )
    except CashPlanError as e:
        _fail(str(e))

    if not suggestions:
        click.echo("No suggestions: the plan looks healthy.")
        return

    for s in suggestions:
        if quiet:
            click.echo(f"[{s.priority.value}] {s.title}")
        else:
            console.print(Panel(
                f"{s.description}\n\n[dim]Impact: {format_currency(s.estimated_impact, symbol=symbol)}/month[/dim]",
                title=f"{s.title} ({s.priority.value})",
                border_style="red" if s.priority.rank >= 3 else "blue",
            ))


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def validate(ctx: click.Context, plan_file: Path) -> None:
    """
    Validate a plan file.

    Checks that the file is valid JSON and that every record satisfies
    the plan invariants.

    Example:
        cashplan validate plan.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    symbol = ctx.obj["settings"].currency_symbol

    plan = _load(plan_file)

    if not quiet:
        info = (
            "[bold]Plan Valid[/bold]\n\n"
            f"[cyan]Income sources:[/cyan] {len(plan.income)}\n"
            f"[cyan]Expenses:[/cyan] {len(plan.expenses)}\n"
            f"[cyan]Goals:[/cyan] {len(plan.goals)} ({len(plan.active_goals)} active)\n"
            f"[cyan]Current balance:[/cyan] {format_currency(plan.current_balance, symbol=symbol)}"
        )
        console.print(Panel(info, title="Plan Summary", border_style="green"))
    else:
        click.echo("Plan is valid")
        click.echo(f"Income: {len(plan.income)}, expenses: {len(plan.expenses)}, goals: {len(plan.goals)}")


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display package and dependency information.
    """
    console = ctx.obj["console"]
    settings = ctx.obj["settings"]

    info_lines = [
        f"CashPlan Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]
    for name in ("numpy", "pandas", "pydantic", "pydantic-settings", "click", "rich"):
        info_lines.append(f"{name}: {metadata.version(name)}")
    info_lines.append(f"Log level: {settings.log_level}")

    if ctx.obj["quiet"]:
        for line in info_lines:
            click.echo(line)
    else:
        console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
