"""Boundary for pose-estimation backends that measure exercise form from video."""
from __future__ import annotations

import logging
from typing import Protocol

from app.models.schemas import ObservedFormMetrics


logger = logging.getLogger(__name__)


class FrameMetricsProvider(Protocol):
    """Measures form metrics for a video or frame reference.

    Returns ``None`` when nothing could be measured; the form analysis then
    relies on the client-supplied metrics and the user's description.
    """

    def measure(self, exercise: str, frame_ref: str) -> ObservedFormMetrics | None:
        ...


class NullFrameMetricsProvider:
    """Default provider used until a real pose-estimation backend is wired in."""

    def measure(self, exercise: str, frame_ref: str) -> ObservedFormMetrics | None:
        logger.debug("No frame metrics backend configured; skipping %s (%s)", exercise, frame_ref)
        return None


def merge_metrics(
    observed: ObservedFormMetrics | None,
    measured: ObservedFormMetrics | None,
) -> ObservedFormMetrics | None:
    """Overlay measured values on top of client-observed ones."""

    if observed is None:
        return measured
    if measured is None:
        return observed
    updates = measured.model_dump(exclude_none=True)
    return observed.model_copy(update=updates)
