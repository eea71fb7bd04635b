from __future__ import annotations

import logging
from typing import Any

import httpx

from .models import PRAYER_ORDER, HijriDate, PrayerDay, PrayerSchedule

logger = logging.getLogger(__name__)

ALADHAN_BASE_URL = "https://api.aladhan.com/v1"
REQUEST_TIMEOUT_SEC = 20.0
USER_AGENT = "pray CLI"


class PrayerApiError(RuntimeError):
    pass


def _require_object(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise PrayerApiError(f"Unexpected response format from AlAdhan: missing {key!r}")
    return value


def _parse_schedule(timings: dict[str, Any]) -> PrayerSchedule:
    for name in PRAYER_ORDER:
        if not isinstance(timings.get(name.value), str):
            raise PrayerApiError(f"Missing time field: {name.value}")
    return PrayerSchedule.from_dict(timings)


def _parse_hijri(date_info: dict[str, Any]) -> HijriDate:
    hijri = date_info.get("hijri") or {}
    month = hijri.get("month") or {}
    return HijriDate(
        day=str(hijri.get("day", "")),
        month=str(month.get("en", "")),
        year=str(hijri.get("year", "")),
    )


def parse_prayer_day(payload: Any) -> PrayerDay:
    if not isinstance(payload, dict):
        raise PrayerApiError("Unexpected response format from AlAdhan")

    code = payload.get("code")
    if code != 200:
        raise PrayerApiError(f"AlAdhan API error: {payload.get('status', code)}")

    data = _require_object(payload, "data")
    timings = _require_object(data, "timings")
    date_info = _require_object(data, "date")
    meta = _require_object(data, "meta")
    method = meta.get("method") or {}

    return PrayerDay(
        schedule=_parse_schedule(timings),
        readable_date=str(date_info.get("readable", "")),
        hijri=_parse_hijri(date_info),
        method_name=str(method.get("name", "")),
        time_zone=meta.get("timezone"),
    )


def fetch_prayer_day(
    city: str,
    country: str,
    method: int,
    client: httpx.Client | None = None,
) -> PrayerDay:
    url = f"{ALADHAN_BASE_URL}/timingsByCity"
    params = {"city": city, "country": country, "method": str(method)}
    logger.debug("GET %s params=%s", url, params)

    try:
        if client is None:
            with httpx.Client(
                timeout=REQUEST_TIMEOUT_SEC,
                headers={"User-Agent": USER_AGENT},
            ) as owned:
                response = owned.get(url, params=params)
        else:
            response = client.get(url, params=params)
    except httpx.HTTPError as exc:
        logger.warning("Request to AlAdhan failed: %s", exc)
        raise PrayerApiError(f"Failed to fetch prayer times: {exc}") from exc

    if response.status_code != 200:
        logger.warning("AlAdhan returned %s: %s", response.status_code, response.text[:200])
        raise PrayerApiError(
            f"API returned status {response.status_code} for city {city!r}"
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise PrayerApiError("Invalid response from AlAdhan") from exc

    return parse_prayer_day(payload)
