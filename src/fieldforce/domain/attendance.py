"""Domain models for attendance punches."""

from dataclasses import dataclass
from enum import StrEnum

from fieldforce.domain.geo import Coordinate

OPEN_END = "-"


class PunchStatus(StrEnum):
    """Whether the employee is currently punched in."""

    IN = "IN"
    OUT = "OUT"


class DayStatus(StrEnum):
    """Attendance classification of a day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"


@dataclass(frozen=True)
class AttendanceState:
    """Latest punch of the employee."""

    status: PunchStatus = PunchStatus.OUT
    punch_in_time: str | None = None
    punch_out_time: str | None = None
    location: str | None = None
    weather: str | None = None
    photo: str | None = None
    coordinate: Coordinate | None = None


@dataclass(frozen=True)
class AttendanceLog:
    """One day's attendance entry; times are HH:MM, ``-`` when open."""

    date: str
    start: str
    end: str
    weather: str
    status: DayStatus = DayStatus.PRESENT

    @property
    def is_open(self) -> bool:
        return self.end == OPEN_END

    @property
    def worked_hours(self) -> float | None:
        """Hours between start and end on the same day."""
        start = _minutes(self.start)
        end = _minutes(self.end)
        if start is None or end is None:
            return None
        return round((end - start) / 60, 2)


def _minutes(value: str) -> int | None:
    hours, _, minutes = value.partition(":")
    if not hours.isdigit() or not minutes.isdigit():
        return None
    return int(hours) * 60 + int(minutes)
