"""Models for vision-based liveness verdicts."""

from typing import Literal

from pydantic import BaseModel, Field


class LivenessVerdict(BaseModel):
    """Structured output of a liveness assessment."""

    decision: Literal["pass", "fail", "inconclusive"]
    confidence: float = Field(ge=0.0, le=1.0)
    notes: str | None = None
