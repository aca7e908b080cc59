"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_store import JsonBookingStore
from ..config import AppConfig
from ..domain.exceptions import QueueWiseError
from ..domain.models import WEEKDAY_NAMES, weekday_index
from ..domain.queue_estimator import QueueEstimator
from ..domain.slot_generator import SlotGenerator
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="queuewise",
    help="Show bookable appointment slots and walk-in queue estimates",
    add_completion=False
)

console = Console()

CLI_ERRORS = (QueueWiseError, FileNotFoundError, ValueError)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True
    )


def _build_service(config: AppConfig) -> AvailabilityService:
    store = JsonBookingStore(data_file=config.data_file, timezone=config.timezone)
    return AvailabilityService(
        store=store,
        slot_generator=SlotGenerator(label_format=config.label_format),
        queue_estimator=QueueEstimator(),
        timezone=config.timezone
    )


def _parse_now(value: Optional[str], tz: str) -> DateTime:
    if not value:
        return pendulum.now(tz)
    parsed = pendulum.parse(value, tz=tz)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"--now needs a date and time, got '{value}'")
    return parsed


def _fail(message: object) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Appointment slots and queue estimates for service providers.
    """
    try:
        config = AppConfig.load(config_file)
    except CLI_ERRORS as e:
        _fail(e)

    _configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@app.command()
def slots(
    ctx: typer.Context,
    service_id: Annotated[str, typer.Argument(help="Service id")],
    provider_id: Annotated[str, typer.Argument(help="Provider id")],
    date: Annotated[Optional[str], typer.Option("--date", help="First day to list (YYYY-MM-DD). Defaults to today.")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Treat this moment as the current time (ISO 8601).")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Number of consecutive days to list.")] = None,
):
    """
    List bookable appointment slots for a service and provider.

    Examples:

        queuewise slots haircut alex

        queuewise slots haircut alex --date 2024-11-25 --days 3
    """
    config: AppConfig = ctx.obj
    tz = config.timezone

    try:
        current = _parse_now(now, tz)
        if date:
            first_day = pendulum.from_format(date, "YYYY-MM-DD", tz=tz).start_of("day")
        else:
            first_day = current.start_of("day")

        day_count = days if days is not None else config.defaults.days
        if day_count <= 0:
            raise ValueError("--days must be greater than zero")

        service = _build_service(config)

        for offset in range(day_count):
            day = first_day.add(days=offset)
            found = asyncio.run(
                service.available_slots(
                    service_id=service_id,
                    provider_id=provider_id,
                    target_date=day,
                    now=current
                )
            )
            _print_day(day, found)

    except CLI_ERRORS as e:
        _fail(e)


def _print_day(day: DateTime, found) -> None:
    title = f"{WEEKDAY_NAMES[weekday_index(day)]}, {day.format('DD.MM.YYYY')}"

    if not found:
        console.print(f"[bold]{title}[/bold]: [yellow]no available slots[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Slot", style="bold yellow")
    table.add_column("Time", style="dim")

    for slot in found:
        table.add_row(slot.display_label, f"{slot.start.format('HH:mm')} - {slot.end.format('HH:mm')}")

    console.print(table)
    console.print(f"[green]{len(found)} slot(s) available[/green]\n")


@app.command()
def eta(
    ctx: typer.Context,
    service_id: Annotated[str, typer.Argument(help="Service id")],
    provider_id: Annotated[str, typer.Argument(help="Provider id")],
    now: Annotated[Optional[str], typer.Option("--now", help="Treat this moment as the current time (ISO 8601).")] = None,
):
    """
    Estimate queue position and start time for someone joining now.
    """
    config: AppConfig = ctx.obj

    try:
        current = _parse_now(now, config.timezone)
        estimate = asyncio.run(
            _build_service(config).estimate_queue(
                service_id=service_id,
                provider_id=provider_id,
                now=current
            )
        )
    except CLI_ERRORS as e:
        _fail(e)

    console.print(estimate.format_display(config.label_format))


@app.command("free-from")
def free_from(
    ctx: typer.Context,
    provider_id: Annotated[str, typer.Argument(help="Provider id")],
    now: Annotated[Optional[str], typer.Option("--now", help="Treat this moment as the current time (ISO 8601).")] = None,
):
    """
    Show when a provider is through with today's reservations.
    """
    config: AppConfig = ctx.obj

    try:
        current = _parse_now(now, config.timezone)
        free = asyncio.run(_build_service(config).free_from(provider_id=provider_id, now=current))
    except CLI_ERRORS as e:
        _fail(e)

    if free is None:
        console.print(f"[yellow]{provider_id}: closed today[/yellow]")
        return

    console.print(f"{provider_id} is free from [bold]{free.format(config.label_format)}[/bold]")


@app.command()
def hours(
    ctx: typer.Context,
    company_id: Annotated[str, typer.Argument(help="Company id")],
):
    """
    Show a company's weekly operating hours.
    """
    config: AppConfig = ctx.obj

    try:
        weekly = asyncio.run(_build_service(config).weekly_hours(company_id))
    except CLI_ERRORS as e:
        _fail(e)

    table = Table(title=f"Working hours: {company_id}", show_header=True, header_style="bold cyan")
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")

    for index, name in enumerate(WEEKDAY_NAMES):
        windows = weekly.for_weekday(index)
        table.add_row(name, ", ".join(str(window) for window in windows) or "closed")

    console.print(table)


@app.command()
def companies(ctx: typer.Context):
    """
    List companies with their services and providers.
    """
    config: AppConfig = ctx.obj

    try:
        store = JsonBookingStore(data_file=config.data_file, timezone=config.timezone)
    except CLI_ERRORS as e:
        _fail(e)

    table = Table(title="Companies", show_header=True, header_style="bold cyan")
    table.add_column("Company", style="bold yellow")
    table.add_column("Services")
    table.add_column("Providers", style="dim")

    for company in store.list_companies():
        services = [
            f"{service.id} ({service.estimated_duration_minutes} min)"
            for service in store.services.values()
            if service.company_id == company.id
        ]
        providers = [
            provider.id for provider in store.providers.values()
            if provider.company_id == company.id
        ]
        table.add_row(company.id, ", ".join(services), ", ".join(providers))

    console.print(table)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]queuewise[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
