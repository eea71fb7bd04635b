from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal

TimeFormat = Literal["12h", "24h"]


class PrayerName(str, Enum):
    FAJR = "Fajr"
    SUNRISE = "Sunrise"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"

    @property
    def order(self) -> int:
        return PRAYER_ORDER.index(self)

    def __str__(self) -> str:
        return self.value


PRAYER_ORDER: tuple[PrayerName, ...] = (
    PrayerName.FAJR,
    PrayerName.SUNRISE,
    PrayerName.DHUHR,
    PrayerName.ASR,
    PrayerName.MAGHRIB,
    PrayerName.ISHA,
)

# Sunrise is shown in the schedule but is never a "next prayer".
RESOLVABLE_PRAYERS: tuple[PrayerName, ...] = tuple(
    name for name in PRAYER_ORDER if name is not PrayerName.SUNRISE
)


@dataclass(frozen=True)
class PrayerSchedule:
    Fajr: str
    Sunrise: str
    Dhuhr: str
    Asr: str
    Maghrib: str
    Isha: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrayerSchedule":
        return cls(
            Fajr=str(data["Fajr"]),
            Sunrise=str(data["Sunrise"]),
            Dhuhr=str(data["Dhuhr"]),
            Asr=str(data["Asr"]),
            Maghrib=str(data["Maghrib"]),
            Isha=str(data["Isha"]),
        )

    def get(self, prayer: PrayerName) -> str:
        return getattr(self, PrayerName(prayer).value)


@dataclass(frozen=True)
class PrayerInstant:
    name: PrayerName
    at: datetime


@dataclass(frozen=True)
class HijriDate:
    day: str
    month: str
    year: str

    def __str__(self) -> str:
        return f"{self.day} {self.month} {self.year} AH"


@dataclass(frozen=True)
class PrayerDay:
    schedule: PrayerSchedule
    readable_date: str
    hijri: HijriDate
    method_name: str
    time_zone: str | None = None
