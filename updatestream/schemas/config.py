"""Streaming configuration schema.

Loaded from defaults.toml and overridden by the environment and CLI flags.
Controls whether smooth rendering is applied and how the pacing scheduler
and word coalescer behave.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StreamingConfig(BaseModel):
    """Top-level configuration for consuming a message update stream."""

    base_url: str = Field(
        default="http://localhost:5173",
        description="Base URL of the conversation API",
    )
    smooth_updates: bool = Field(
        default=True,
        description="Apply word coalescing and typewriter pacing to the stream",
    )
    frame_interval_ms: float = Field(
        default=16.0, gt=0, description="Pacing frame period in milliseconds (~60fps)"
    )
    start_speed: float = Field(
        default=30.0, gt=0, description="Baseline pacing speed in characters per second"
    )
    idle_timeout_ms: float = Field(
        default=100.0, gt=0,
        description="Longest idle wait before the pacer re-checks its queues",
    )
    max_merge: int = Field(
        default=5, ge=1, description="Max text fragments merged into one word group"
    )
    request_timeout: float = Field(
        default=300.0, gt=0, description="HTTP timeout in seconds for connect and each read"
    )

    @property
    def frame_interval(self) -> float:
        """Frame period in seconds."""
        return self.frame_interval_ms / 1000

    @property
    def idle_timeout(self) -> float:
        """Idle wait in seconds."""
        return self.idle_timeout_ms / 1000
