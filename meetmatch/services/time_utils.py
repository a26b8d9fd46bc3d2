# meetmatch/services/time_utils.py
from dataclasses import dataclass
from datetime import date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class InvalidParameters(ValueError):
    """Raised when scheduling input is malformed. Nothing is scanned."""


@dataclass(frozen=True)
class BusyInterval:
    """Half-open busy range [start, end) for one participant."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class TimeWindow:
    """Daily time-of-day bounds, e.g. 09:00–22:00."""

    start: time
    end: time

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeWindow":
        return cls(start=parse_hhmm(start), end=parse_hhmm(end))

    def anchor(self, day: date):
        """Return (window_start, window_end) as datetimes on `day`."""
        return datetime.combine(day, self.start), datetime.combine(day, self.end)


def parse_hhmm(value: str) -> time:
    """
    Parse "HH:MM" (24h) into a `time`.

    "9:30" is accepted, "24:00" and "09:60" are not.
    """
    try:
        hours_str, minutes_str = value.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
        return time(hours, minutes)
    except (AttributeError, ValueError) as e:
        raise InvalidParameters(f"invalid time of day {value!r}, expected HH:MM") from e


def overlaps(
    slot_start: datetime,
    slot_end: datetime,
    interval_start: datetime,
    interval_end: datetime,
) -> bool:
    # Half-open: touching boundaries (end == start) are not a conflict
    return slot_start < interval_end and slot_end > interval_start


def has_conflict(slot_start: datetime, slot_end: datetime, intervals) -> bool:
    return any(overlaps(slot_start, slot_end, iv.start, iv.end) for iv in intervals)


def validate_window(window: TimeWindow) -> None:
    if window.start >= window.end:
        raise InvalidParameters("window start must be before window end")


def validate_intervals(busy_by_participant) -> None:
    for participant_id, intervals in busy_by_participant.items():
        for iv in intervals:
            if iv.start.tzinfo is not None or iv.end.tzinfo is not None:
                raise InvalidParameters(
                    f"busy interval for {participant_id!r} must be naive reference-local time"
                )
            if iv.start >= iv.end:
                raise InvalidParameters(
                    f"busy interval for {participant_id!r} must end after it starts"
                )


def to_reference_time(value: datetime, timezone_name: str) -> datetime:
    """
    Naive local time in `timezone_name` for `value`.

    Naive values are assumed to already be reference-local and are
    returned unchanged.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    try:
        zone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidParameters(f"unknown timezone {timezone_name!r}") from e
    return value.astimezone(zone).replace(tzinfo=None)
