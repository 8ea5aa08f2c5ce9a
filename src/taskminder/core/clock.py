# src/taskminder/core/clock.py

from __future__ import annotations

from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ValidationError


class Clock:
    """
    Wall clock bound to one time zone.

    tz_name=None (or blank) means the system local zone.
    "Today" is always the calendar date in that zone.
    """

    def __init__(self, tz_name: str | None = None) -> None:
        self.tz: tzinfo | None = None
        name = (tz_name or "").strip()
        if name:
            try:
                self.tz = ZoneInfo(name)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValidationError(f"unknown time zone: {name!r}") from exc

    def now(self) -> datetime:
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def localize(self, value: datetime) -> datetime:
        """Attach the clock zone to a naive datetime; aware values pass through."""
        if value.tzinfo is not None:
            return value
        if self.tz is None:
            return value.astimezone()
        return value.replace(tzinfo=self.tz)

    def to_local(self, value: datetime) -> datetime:
        if self.tz is None:
            return value.astimezone()
        return value.astimezone(self.tz)
