"""Liveness verification strategies."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from fieldforce.domain.checkpoints import LivenessOutcome, to_data_url
from fieldforce.domain.errors import FrameNotReadyError
from fieldforce.domain.liveness import LivenessVerdict
from fieldforce.services.checkpoints import CameraStream

logger = logging.getLogger(__name__)

LIVENESS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "decision": {"type": "string", "enum": ["pass", "fail", "inconclusive"]},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "notes": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": ["decision", "confidence", "notes"],
    "additionalProperties": False,
}


@dataclass
class TimedLivenessVerifier:
    """Stand-in verifier that passes after a fixed delay.

    No action detection takes place. The check succeeds as long as the camera
    stream is still alive when the delay elapses.
    """

    verify_seconds: float = 1.5

    async def verify(self, stream: CameraStream, action: str) -> LivenessOutcome:
        """Wait for the verification delay and pass if the stream is alive."""
        await asyncio.sleep(self.verify_seconds)
        if not stream.is_active:
            return LivenessOutcome.INCONCLUSIVE
        return LivenessOutcome.PASS


class LivenessClient(Protocol):
    """Interface for model-backed liveness assessment."""

    async def assess(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_urls: list[str],
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return a structured liveness verdict."""


@dataclass
class VisionLivenessVerifier:
    """Verifier that sends frames of the challenge to a vision model."""

    client: LivenessClient
    model: str
    reasoning_effort: str | None
    store: bool
    frame_count: int = 3
    frame_interval_seconds: float = 0.5
    min_confidence: float = 0.7

    async def verify(self, stream: CameraStream, action: str) -> LivenessOutcome:
        """Sample frames during the challenge and ask the model for a verdict."""
        frames = await self._sample_frames(stream)
        if not frames:
            return LivenessOutcome.INCONCLUSIVE
        prompt = (
            "These frames were taken a moment apart from a front camera while "
            f'the person was asked to: "{action}". '
            "Decide whether they show a live person performing that action "
            "rather than a photo, screen or mask. Answer pass, fail or "
            "inconclusive with a confidence between 0 and 1."
        )
        raw = await self.client.assess(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_urls=[to_data_url(frame) for frame in frames],
            schema=LIVENESS_SCHEMA,
            prompt=prompt,
        )
        verdict = LivenessVerdict.model_validate(raw)
        if verdict.decision == "pass" and verdict.confidence < self.min_confidence:
            logger.info(
                "Low-confidence liveness pass treated as inconclusive",
                extra={"confidence": verdict.confidence},
            )
            return LivenessOutcome.INCONCLUSIVE
        return LivenessOutcome(verdict.decision)

    async def _sample_frames(self, stream: CameraStream) -> list[bytes]:
        frames: list[bytes] = []
        for index in range(self.frame_count):
            if index:
                await asyncio.sleep(self.frame_interval_seconds)
            if not stream.is_active:
                break
            try:
                frames.append(stream.capture_frame())
            except FrameNotReadyError:
                continue
        return frames
