"""Attendance punch services."""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol

from fieldforce.domain.attendance import (
    OPEN_END,
    AttendanceLog,
    AttendanceState,
    DayStatus,
    PunchStatus,
)
from fieldforce.domain.checkpoints import CheckpointResult
from fieldforce.domain.geo import Coordinate

logger = logging.getLogger(__name__)


class AttendanceRepository(Protocol):
    """Persistence interface for the punch state and its history."""

    def get_state(self) -> AttendanceState:
        """Return the latest punch state."""

    def save_state(self, state: AttendanceState) -> None:
        """Replace the punch state."""

    def list_history(self) -> list[AttendanceLog]:
        """Return history entries, newest first."""

    def save_history(self, history: list[AttendanceLog]) -> None:
        """Replace the history entries."""


@dataclass(frozen=True)
class Surroundings:
    """Human-readable place and weather at a coordinate."""

    location: str
    weather: str


class SurroundingsProvider(Protocol):
    """Describes where a punch happened."""

    def describe(self, coordinate: Coordinate | None) -> Surroundings:
        """Return a place label and weather summary."""


MOCK_LOCATIONS = (
    "Sector 4, Tech Park",
    "Downtown Avenue",
    "Industrial Zone B",
    "Main Street, North",
)
MOCK_WEATHERS = ("Sunny, 28°C", "Cloudy, 24°C", "Rainy, 22°C", "Clear, 30°C")


@dataclass
class SimulatedSurroundingsProvider(SurroundingsProvider):
    """Picks a canned place and weather; no geocoding or weather lookup."""

    rng: random.Random = field(default_factory=random.Random)

    def describe(self, coordinate: Coordinate | None) -> Surroundings:
        return Surroundings(
            location=self.rng.choice(MOCK_LOCATIONS),
            weather=self.rng.choice(MOCK_WEATHERS),
        )


@dataclass
class AttendanceService:
    """Toggles the employee between punched in and punched out."""

    repository: AttendanceRepository
    surroundings: SurroundingsProvider
    clock: Callable[[], datetime] = datetime.now

    def get_state(self) -> AttendanceState:
        return self.repository.get_state()

    def list_history(self) -> list[AttendanceLog]:
        return self.repository.list_history()

    def punch(self, result: CheckpointResult) -> AttendanceState:
        """Apply a verified punch to the state and the history."""
        current = self.repository.get_state()
        surroundings = self.surroundings.describe(result.coordinate)
        now = self.clock()
        time_string = now.strftime("%H:%M")
        date_string = now.date().isoformat()
        short_weather = surroundings.weather.split(",")[0]
        history = self.repository.list_history()

        if current.status == PunchStatus.OUT:
            state = replace(
                current,
                status=PunchStatus.IN,
                punch_in_time=time_string,
                punch_out_time=None,
            )
            history.insert(
                0,
                AttendanceLog(
                    date=date_string,
                    start=time_string,
                    end=OPEN_END,
                    weather=short_weather,
                    status=DayStatus.PRESENT,
                ),
            )
        else:
            state = replace(current, status=PunchStatus.OUT, punch_out_time=time_string)
            history = _close_open_log(
                history,
                date_string,
                time_string,
                fallback=AttendanceLog(
                    date=date_string,
                    start=current.punch_in_time or OPEN_END,
                    end=time_string,
                    weather=short_weather,
                    status=DayStatus.PRESENT,
                ),
            )

        state = replace(
            state,
            location=surroundings.location,
            weather=surroundings.weather,
            photo=result.photo.data_url(),
            coordinate=result.coordinate,
        )
        self.repository.save_state(state)
        self.repository.save_history(history)
        logger.info(
            "Attendance punched %s", state.status, extra={"time": time_string}
        )
        return state


def _close_open_log(
    history: list[AttendanceLog],
    date_string: str,
    time_string: str,
    fallback: AttendanceLog,
) -> list[AttendanceLog]:
    for index, log in enumerate(history):
        if log.date == date_string and log.is_open:
            history[index] = replace(log, end=time_string)
            return history
    # Punched in on an earlier day or history was cleared.
    return [fallback, *history]
