from __future__ import annotations

import json
import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from . import __version__
from .config import CONFIG_PATH, Config, load_config, save_config
from .models import PrayerDay, PrayerInstant, TimeFormat
from .output import build_next_panel, build_today_panel
from .prayer_api import PrayerApiError, fetch_prayer_day
from .prayer_logic import ResolutionError, countdown_text, find_next_prayer, local_now

app = typer.Typer(
    help="🕌 Prayer times in your terminal",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=True,
)
console = Console()
err_console = Console(stderr=True)


def _validate_time_format(value: str) -> TimeFormat:
    if value not in ("12h", "24h"):
        raise typer.BadParameter("time format must be either '12h' or '24h'")
    return value  # type: ignore[return-value]


def _require_text(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise typer.BadParameter(f"{label} must not be empty")
    return value


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"pray-cli {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


def _resolve_settings(
    base: Config,
    city: Optional[str],
    country: Optional[str],
    method: Optional[int],
    time_format: Optional[str],
) -> Config:
    settings = base
    if city is not None:
        settings = replace(settings, city=_require_text(city, "city"))
    if country is not None:
        settings = replace(settings, country=_require_text(country, "country").upper())
    if method is not None:
        settings = replace(settings, method=method)
    if time_format is not None:
        settings = replace(settings, time_format=_validate_time_format(time_format))
    return settings


def _fetch_day(settings: Config) -> PrayerDay:
    try:
        return fetch_prayer_day(settings.city, settings.country, settings.method)
    except PrayerApiError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Unexpected error:[/red] {exc}")
        raise typer.Exit(code=1)


def _resolve_next(day: PrayerDay, now: datetime) -> PrayerInstant:
    try:
        return find_next_prayer(day.schedule, now)
    except ResolutionError as exc:
        console.print(f"[red]Error finding next prayer:[/red] {exc}")
        raise typer.Exit(code=1)


def _show_today(settings: Config) -> None:
    day = _fetch_day(settings)
    now = local_now(day.time_zone)
    next_instant = _resolve_next(day, now)

    console.print(
        build_today_panel(
            city=settings.city,
            day=day,
            next_instant=next_instant,
            now=now,
            time_format=settings.time_format,
        )
    )


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    city: Optional[str] = typer.Option(
        None, "--city", envvar="PRAY_CITY", help="City name for prayer times."
    ),
    country: Optional[str] = typer.Option(
        None, "--country", envvar="PRAY_COUNTRY", help="Country name or ISO code."
    ),
    method: Optional[int] = typer.Option(
        None,
        "--method",
        envvar="PRAY_METHOD",
        min=0,
        help="AlAdhan calculation method id (4 = Umm Al-Qura).",
    ),
    time_format: Optional[str] = typer.Option(
        None, "--time-format", envvar="PRAY_TIME_FORMAT", help="Display format: 12h or 24h."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Show today's prayer times."""
    _ = version
    _configure_logging(verbose)
    ctx.obj = _resolve_settings(load_config(), city, country, method, time_format)

    if ctx.invoked_subcommand is None:
        _show_today(ctx.obj)


@app.command("next")
def next_command(
    ctx: typer.Context,
    city: Optional[str] = typer.Option(None, "--city", help="City name for prayer times."),
    country: Optional[str] = typer.Option(None, "--country", help="Country name or ISO code."),
    method: Optional[int] = typer.Option(None, "--method", min=0, help="Calculation method id."),
    time_format: Optional[str] = typer.Option(None, "--time-format", help="12h or 24h."),
    watch: bool = typer.Option(
        False, "--watch", help="Keep counting down until the prayer time arrives."
    ),
) -> None:
    """Show the next prayer time with countdown."""
    settings = _resolve_settings(ctx.obj or load_config(), city, country, method, time_format)
    day = _fetch_day(settings)
    next_instant = _resolve_next(day, local_now(day.time_zone))

    def _panel(now: datetime):
        return build_next_panel(
            city=settings.city,
            next_instant=next_instant,
            now=now,
            time_format=settings.time_format,
        )

    if not watch:
        console.print(_panel(local_now(day.time_zone)))
        return

    try:
        with Live(_panel(local_now(day.time_zone)), console=console, refresh_per_second=4) as live:
            while True:
                now = local_now(day.time_zone)
                live.update(_panel(now))
                if countdown_text(next_instant, now) is None:
                    break
                time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


def _print_config(config: Config) -> None:
    console.print_json(json.dumps(config.to_dict(), ensure_ascii=False, indent=2))
    console.print(f"[dim]Config path:[/dim] {CONFIG_PATH}")


@app.command("config")
def config_command(
    show: bool = typer.Option(False, "--show", help="Print current configuration."),
    city: Optional[str] = typer.Option(None, "--city"),
    country: Optional[str] = typer.Option(None, "--country"),
    method: Optional[int] = typer.Option(None, "--method", min=0),
    time_format: Optional[str] = typer.Option(
        None,
        "--time-format",
        help="Display format: 12h or 24h.",
    ),
) -> None:
    """Set the default city, country, calculation method and time format."""
    config = load_config()

    has_update_flags = any(
        value is not None for value in (city, country, method, time_format)
    )
    if not has_update_flags:
        if not show:
            console.print("[dim]Nothing to update. Pass --show to print the configuration.[/dim]")
        _print_config(config)
        return

    config = _resolve_settings(config, city, country, method, time_format)
    save_config(config)
    console.print("[green]Configuration saved.[/green]")
    _print_config(config)


if __name__ == "__main__":
    app()
