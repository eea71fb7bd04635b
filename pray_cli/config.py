from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from .models import TimeFormat

CONFIG_DIR = Path.home() / ".config" / "pray"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_CITY = "Riyadh"
DEFAULT_COUNTRY = "SA"
DEFAULT_METHOD = 4  # Umm Al-Qura
DEFAULT_TIME_FORMAT: TimeFormat = "24h"


@dataclass
class Config:
    city: str = DEFAULT_CITY
    country: str = DEFAULT_COUNTRY
    method: int = DEFAULT_METHOD
    time_format: TimeFormat = DEFAULT_TIME_FORMAT

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "country": self.country,
            "method": self.method,
            "time_format": self.time_format,
        }


def _sanitize_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _sanitize_method(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_METHOD
    try:
        method = int(value)
    except (TypeError, ValueError):
        return DEFAULT_METHOD
    return method if method >= 0 else DEFAULT_METHOD


def _sanitize_time_format(value: Any) -> TimeFormat:
    if value in ("12h", "24h"):
        return cast(TimeFormat, value)
    return DEFAULT_TIME_FORMAT


def load_config() -> Config:
    if not CONFIG_PATH.exists():
        return Config()

    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return Config()

    if not isinstance(data, dict):
        return Config()

    return Config(
        city=_sanitize_text(data.get("city"), DEFAULT_CITY),
        country=_sanitize_text(data.get("country"), DEFAULT_COUNTRY).upper(),
        method=_sanitize_method(data.get("method")),
        time_format=_sanitize_time_format(data.get("time_format")),
    )


def save_config(config: Config) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(
        json.dumps(config.to_dict(), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
