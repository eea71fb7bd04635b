from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pray_cli import cli, config
from pray_cli.models import HijriDate, PrayerDay, PrayerSchedule
from pray_cli.prayer_api import PrayerApiError

TZ = timezone(timedelta(hours=3))
runner = CliRunner()


def _sample_day(**overrides: str) -> PrayerDay:
    times = {
        "Fajr": "05:15",
        "Sunrise": "06:35",
        "Dhuhr": "12:06",
        "Asr": "15:14",
        "Maghrib": "17:37",
        "Isha": "19:07",
    }
    times.update(overrides)
    return PrayerDay(
        schedule=PrayerSchedule.from_dict(times),
        readable_date="19 Oct 2026",
        hijri=HijriDate(day="07", month="Jumada al-Ula", year="1448"),
        method_name="Umm Al-Qura University, Makkah",
        time_zone="Asia/Riyadh",
    )


@pytest.fixture
def calls(tmp_path: Path, monkeypatch) -> list[tuple[str, str, int]]:
    for name in ("PRAY_CITY", "PRAY_COUNTRY", "PRAY_METHOD", "PRAY_TIME_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config" / "config.json")
    monkeypatch.setattr(cli, "local_now", lambda *_: datetime(2026, 10, 19, 18, 27, tzinfo=TZ))

    seen: list[tuple[str, str, int]] = []

    def _fake_fetch(city: str, country: str, method: int) -> PrayerDay:
        seen.append((city, country, method))
        return _sample_day()

    monkeypatch.setattr(cli, "fetch_prayer_day", _fake_fetch)
    return seen


def test_today_view(calls) -> None:
    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0, result.output
    assert "Prayer Times for Riyadh" in result.output
    assert "19 Oct 2026 | 07 Jumada al-Ula 1448 AH" in result.output
    assert "▶" in result.output
    assert "Next prayer in 40m" in result.output
    assert "Method: Umm Al-Qura University, Makkah" in result.output
    assert calls == [("Riyadh", "SA", 4)]


def test_next_view(calls) -> None:
    result = runner.invoke(cli.app, ["next"])

    assert result.exit_code == 0, result.output
    assert "Isha at 19:07" in result.output
    assert "In 40m" in result.output
    assert "Riyadh" in result.output


def test_next_view_twelve_hour_format(calls) -> None:
    result = runner.invoke(cli.app, ["next", "--time-format", "12h"])

    assert result.exit_code == 0, result.output
    assert "Isha at 7:07 PM" in result.output


def test_next_view_rolls_over_to_tomorrow(calls, monkeypatch) -> None:
    monkeypatch.setattr(cli, "local_now", lambda *_: datetime(2026, 10, 19, 20, 0, tzinfo=TZ))

    result = runner.invoke(cli.app, ["next"])

    assert result.exit_code == 0, result.output
    assert "Fajr at 05:15" in result.output
    assert "In 9h 15m" in result.output


def test_watch_exits_once_prayer_arrives(calls, monkeypatch) -> None:
    clock = iter(
        [
            datetime(2026, 10, 19, 19, 6, tzinfo=TZ),
            datetime(2026, 10, 19, 19, 6, 30, tzinfo=TZ),
            datetime(2026, 10, 19, 19, 6, 59, tzinfo=TZ),
        ]
    )
    last = datetime(2026, 10, 19, 19, 7, tzinfo=TZ)
    monkeypatch.setattr(cli, "local_now", lambda *_: next(clock, last))
    monkeypatch.setattr(cli.time, "sleep", lambda _: None)

    result = runner.invoke(cli.app, ["next", "--watch"])

    assert result.exit_code == 0, result.output
    assert "Prayer time has arrived!" in result.output


def test_flag_overrides_env_and_config(calls) -> None:
    config.save_config(config.Config(city="Cairo", country="EG", method=5))

    runner.invoke(cli.app, ["next"])
    runner.invoke(cli.app, ["next"], env={"PRAY_CITY": "Jeddah", "PRAY_METHOD": "2"})
    runner.invoke(cli.app, ["--city", "Mecca", "next", "--city", "Medina"])

    assert calls == [("Cairo", "EG", 5), ("Jeddah", "EG", 2), ("Medina", "EG", 5)]


def test_api_error_exits_with_code_1(calls, monkeypatch) -> None:
    def _boom(*_args, **_kwargs):
        raise PrayerApiError("API returned status 400 for city 'Atlantis'")

    monkeypatch.setattr(cli, "fetch_prayer_day", _boom)

    result = runner.invoke(cli.app, ["--city", "Atlantis"])

    assert result.exit_code == 1
    assert "Atlantis" in result.output


def test_resolution_error_exits_without_schedule(calls, monkeypatch) -> None:
    monkeypatch.setattr(cli, "fetch_prayer_day", lambda *_: _sample_day(Fajr="abc"))
    monkeypatch.setattr(cli, "local_now", lambda *_: datetime(2026, 10, 19, 20, 0, tzinfo=TZ))

    result = runner.invoke(cli.app, ["next"])

    assert result.exit_code == 1
    assert "Error finding next prayer" in result.output
    assert "Isha at" not in result.output


def test_invalid_time_format_is_rejected(calls) -> None:
    result = runner.invoke(cli.app, ["--time-format", "36h"])

    assert result.exit_code == 2
    assert calls == []


def test_config_command_saves(calls, tmp_path: Path) -> None:
    result = runner.invoke(
        cli.app, ["config", "--city", "Cairo", "--country", "eg", "--method", "5"]
    )

    assert result.exit_code == 0, result.output
    saved = json.loads((tmp_path / "config" / "config.json").read_text(encoding="utf-8"))
    assert saved == {"city": "Cairo", "country": "EG", "method": 5, "time_format": "24h"}
    assert calls == []


def test_clock_uses_provider_time_zone(calls, monkeypatch) -> None:
    zones: list[str | None] = []

    def _now(time_zone=None):
        zones.append(time_zone)
        return datetime(2026, 10, 19, 18, 27, tzinfo=TZ)

    monkeypatch.setattr(cli, "local_now", _now)

    assert runner.invoke(cli.app, []).exit_code == 0
    assert runner.invoke(cli.app, ["next"]).exit_code == 0
    assert zones and set(zones) == {"Asia/Riyadh"}


def test_config_command_rejects_blank_city(calls, tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["config", "--city", "   "])

    assert result.exit_code == 2
    assert not (tmp_path / "config" / "config.json").exists()


def test_city_flag_is_stripped(calls) -> None:
    result = runner.invoke(cli.app, ["next", "--city", "  Jeddah  "])

    assert result.exit_code == 0, result.output
    assert calls == [("Jeddah", "SA", 4)]
