"""Fake devices and helpers shared by the tests."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fieldforce.domain.checkpoints import (
    CameraFacing,
    CapturedPhoto,
    CheckpointResult,
    LivenessOutcome,
)
from fieldforce.domain.errors import CameraError, GeolocationError
from fieldforce.domain.geo import Coordinate

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
NOW = datetime(2025, 3, 10, 9, 30, tzinfo=UTC)
OFFICE = Coordinate(37.7749, -122.4194)
# One degree of latitude is about 111,195 m.
FIFTEEN_METERS_NORTH = Coordinate(37.7749 + 15 / 111_195, -122.4194)
TWO_FIFTY_METERS_NORTH = Coordinate(37.7749 + 250 / 111_195, -122.4194)


@dataclass
class FakeCameraStream:
    """Stream returning queued frames, then a default JPEG."""

    camera_facing: CameraFacing
    frames: list[bytes | Exception] = field(default_factory=list)
    released: bool = False

    @property
    def facing(self) -> CameraFacing:
        return self.camera_facing

    @property
    def is_active(self) -> bool:
        return not self.released

    def capture_frame(self) -> bytes:
        if self.frames:
            frame = self.frames.pop(0)
            if isinstance(frame, Exception):
                raise frame
            return frame
        return JPEG_BYTES

    def release(self) -> None:
        self.released = True


@dataclass
class FakeCamera:
    """Camera that records requests and can fail or hang."""

    error: CameraError | None = None
    hang: bool = False
    frames: dict[CameraFacing, list[bytes | Exception]] = field(default_factory=dict)
    requested: list[CameraFacing] = field(default_factory=list)
    streams: list[FakeCameraStream] = field(default_factory=list)

    async def acquire(self, facing: CameraFacing) -> FakeCameraStream:
        self.requested.append(facing)
        if self.hang:
            await asyncio.sleep(3600)
        if self.error is not None:
            raise self.error
        stream = FakeCameraStream(facing, list(self.frames.get(facing, [])))
        self.streams.append(stream)
        return stream

    @property
    def open_streams(self) -> int:
        return sum(1 for stream in self.streams if not stream.released)


@dataclass
class FakeGeolocation:
    """Geolocation returning a fixed coordinate."""

    coordinate: Coordinate = OFFICE
    error: GeolocationError | None = None
    delay_seconds: float = 0.0
    calls: int = 0

    async def get_fix(self, timeout_seconds: float) -> Coordinate:
        self.calls += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.coordinate


@dataclass
class FakeLivenessVerifier:
    """Verifier with a fixed verdict."""

    outcome: LivenessOutcome = LivenessOutcome.PASS
    actions: list[str] = field(default_factory=list)

    async def verify(self, stream: FakeCameraStream, action: str) -> LivenessOutcome:
        self.actions.append(action)
        return self.outcome


def make_result(  # noqa: PLR0913
    coordinate: Coordinate | None = OFFICE,
    distance_meters: float | None = None,
    within_radius: bool = True,
    overridden: bool = False,
    secondary: bool = False,
    captured_at: datetime = NOW,
) -> CheckpointResult:
    """Build a successful checkpoint result."""
    secondary_photo = (
        CapturedPhoto(
            data=JPEG_BYTES, facing=CameraFacing.ENVIRONMENT, captured_at=captured_at
        )
        if secondary
        else None
    )
    return CheckpointResult(
        photo=CapturedPhoto(
            data=JPEG_BYTES, facing=CameraFacing.USER, captured_at=captured_at
        ),
        secondary_photo=secondary_photo,
        coordinate=coordinate,
        distance_meters=distance_meters,
        within_radius=within_radius,
        captured_at=captured_at,
        overridden=overridden,
    )
