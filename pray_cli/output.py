from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .models import PRAYER_ORDER, PrayerDay, PrayerInstant, PrayerName, TimeFormat
from .prayer_logic import ParseError, countdown_text, parse_time

PRAYER_LABELS: Mapping[PrayerName, str] = MappingProxyType(
    {
        PrayerName.FAJR: "🌅 Fajr",
        PrayerName.SUNRISE: "☀️ Sunrise",
        PrayerName.DHUHR: "🌞 Dhuhr",
        PrayerName.ASR: "🌤️ Asr",
        PrayerName.MAGHRIB: "🌅 Maghrib",
        PrayerName.ISHA: "🌙 Isha",
    }
)

ARRIVED_MESSAGE = "🔔 Prayer time has arrived!"


def format_time_for_display(value: str, time_format: TimeFormat) -> str:
    head = value.split(" ", 1)[0]
    if time_format == "24h":
        return head

    try:
        parsed = datetime.strptime(head, "%H:%M")
    except ValueError:
        return head
    rendered = parsed.strftime("%I:%M %p")
    return rendered[1:] if rendered.startswith("0") else rendered


def _is_tomorrow(instant: PrayerInstant, now: datetime) -> bool:
    return instant.at.date() > now.date()


def _row_style(
    name: PrayerName,
    raw_time: str,
    now: datetime,
    next_instant: PrayerInstant | None,
) -> str | None:
    if next_instant is not None and name is next_instant.name:
        return "bold yellow"

    try:
        prayer_dt = parse_time(raw_time, now)
    except ParseError:
        # Unreadable time: place the row by its position relative to the next prayer.
        if next_instant is None:
            return None
        if _is_tomorrow(next_instant, now) or name.order < next_instant.name.order:
            return "dim"
        return None

    if prayer_dt <= now:
        return "dim"
    return None


def build_prayer_table(
    day: PrayerDay,
    next_instant: PrayerInstant | None,
    now: datetime,
    time_format: TimeFormat,
    labels: Mapping[PrayerName, str] = PRAYER_LABELS,
) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=False, box=None)
    table.add_column("", width=1)
    table.add_column("Prayer", style="bold")
    table.add_column("Time", justify="right", style="green")

    for name in PRAYER_ORDER:
        raw_time = day.schedule.get(name)
        is_next = next_instant is not None and name is next_instant.name

        label = labels[name]
        if is_next and _is_tomorrow(next_instant, now):
            label = f"{label} (tomorrow)"

        table.add_row(
            "▶" if is_next else "",
            label,
            format_time_for_display(raw_time, time_format),
            style=_row_style(name, raw_time, now, next_instant),
        )

    return table


def build_today_panel(
    city: str,
    day: PrayerDay,
    next_instant: PrayerInstant | None,
    now: datetime,
    time_format: TimeFormat,
    labels: Mapping[PrayerName, str] = PRAYER_LABELS,
) -> Panel:
    header = Text.assemble("🕌 Prayer Times for ", (city, "bold sky_blue1"))
    date_line = Text(f"📅 {day.readable_date} | {day.hijri}", style="sky_blue1")

    parts: list = [
        header,
        date_line,
        Text(""),
        build_prayer_table(day, next_instant, now, time_format, labels),
    ]

    if next_instant is not None:
        countdown = countdown_text(next_instant, now)
        if countdown is not None:
            parts.append(Text(""))
            parts.append(Text(f"⏰ Next prayer in {countdown}", style="bold red"))

    parts.append(Rule(style="dim"))
    parts.append(Text(f"📍 Method: {day.method_name}"))

    return Panel(Group(*parts), title="Prayer Times", border_style="green")


def build_next_panel(
    city: str,
    next_instant: PrayerInstant,
    now: datetime,
    time_format: TimeFormat,
    labels: Mapping[PrayerName, str] = PRAYER_LABELS,
) -> Panel:
    at = format_time_for_display(next_instant.at.strftime("%H:%M"), time_format)
    countdown = countdown_text(next_instant, now)

    body = Group(
        Text.assemble((f"{labels[next_instant.name]} at ", "bold yellow"), (at, "bold green")),
        Text(""),
        Text(f"⏰ In {countdown}" if countdown is not None else ARRIVED_MESSAGE, style="bold red"),
        Text(""),
        Text(f"📍 {city}", style="sky_blue1"),
    )
    return Panel(body, title="🕌 Next Prayer", border_style="yellow")
