"""Exercise form assessment."""
from __future__ import annotations

import asyncio
import logging

from app.config import Settings
from app.models.records import FormAnalysis
from app.models.schemas import FormAnalysisRequest, ObservedFormMetrics
from app.services.ai_client import AIClient
from app.services.analyzer_base import DomainAnalyzer
from app.services.frame_metrics import FrameMetricsProvider, NullFrameMetricsProvider, merge_metrics
from app.services.recovery_pipeline import Domain


logger = logging.getLogger(__name__)

RESPONSE_SHAPE = """{
  "exercise": "...",
  "overallScore": 0-100,
  "metrics": {
    "depth": {"score": 0-100, "status": "good|needs_improvement|poor", "feedback": "..."},
    "backAngle": {"score": 0-100, "status": "good|needs_improvement|poor", "feedback": "...", "angle": 60},
    "kneeTracking": {"score": 0-100, "status": "good|needs_improvement|poor", "feedback": "..."}
  },
  "improvements": ["..."],
  "tips": ["..."],
  "nextSteps": ["..."]
}"""


def describe_metrics(metrics: ObservedFormMetrics) -> list[str]:
    labels = {
        "back_angle": ("Back angle", "degrees"),
        "knee_alignment": ("Knee alignment", ""),
        "depth": ("Depth", ""),
        "duration": ("Set duration", "seconds"),
        "frame_count": ("Frames analysed", ""),
    }
    lines = []
    for field, value in metrics.model_dump(exclude_none=True).items():
        label, unit = labels[field]
        lines.append(f"- {label}: {value} {unit}".rstrip())
    return lines


class FormAnalyzer(DomainAnalyzer):
    domain = Domain.FORM

    def __init__(
        self,
        client: AIClient | None = None,
        settings: Settings | None = None,
        frame_metrics: FrameMetricsProvider | None = None,
    ) -> None:
        super().__init__(client, settings)
        self.frame_metrics = frame_metrics or NullFrameMetricsProvider()

    def build_prompt(self, request: FormAnalysisRequest) -> str:
        lines = [f"Assess the user's form for the exercise: {request.exercise}."]
        if request.user_description:
            lines.extend(["", f"USER DESCRIPTION: {request.user_description}"])
        if request.metrics is not None:
            measured = describe_metrics(request.metrics)
            if measured:
                lines.extend(["", "MEASURED METRICS:", *measured])
        profile = request.profile
        if profile is not None:
            lines.extend(["", "USER PROFILE:", f"- Experience: {profile.experience}"])
            if profile.goals:
                lines.append(f"- Goals: {', '.join(profile.goals)}")
            if profile.injuries:
                lines.append(f"- Injuries: {', '.join(profile.injuries)}")
        lines.extend(["", "Respond with JSON in exactly this shape:", RESPONSE_SHAPE])
        return "\n".join(lines)

    async def analyze(self, request: FormAnalysisRequest) -> FormAnalysis:
        if request.frame_ref:
            measured = await asyncio.to_thread(self.frame_metrics.measure, request.exercise, request.frame_ref)
            if measured is not None:
                logger.debug("Frame metrics measured for %s", request.exercise)
                request = request.model_copy(update={"metrics": merge_metrics(request.metrics, measured)})
        return await super().analyze(request)
