"""Physique assessment from a single pose photo."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from app.models.records import PhysiqueAnalysis
from app.models.schemas import PhysiqueAnalysisRequest
from app.normalizers.physique import POSE_MUSCLE_GROUPS
from app.services.analyzer_base import DomainAnalyzer
from app.services.recovery_pipeline import Domain


logger = logging.getLogger(__name__)

RESPONSE_SHAPE = """{
  "metrics": {"muscleMass": 60-95, "bodyFat": 5-35, "symmetry": 1-10, "posture": 1-10, "overallConvexity": 1-10},
  "muscleGroups": {"<group>": {"development": 1-10, "convexity": 1-10, "symmetry": 1-10, "notes": "..."}},
  "insights": ["..."],
  "recommendations": ["..."],
  "weakPoints": ["<group>"],
  "strengthPoints": ["<group>"]
}"""


class PhysiqueAnalyzer(DomainAnalyzer):
    domain = Domain.PHYSIQUE

    def build_prompt(self, request: PhysiqueAnalysisRequest) -> str:
        profile = request.profile
        groups = ", ".join(POSE_MUSCLE_GROUPS.get(request.pose_type.lower(), {"overall": None}))
        lines = [
            f"Analyse this {request.pose_type} pose physique photo.",
            "",
            "USER PROFILE:",
            f"- Age: {profile.age}",
            f"- Gender: {profile.gender}",
            f"- Weight: {profile.weight} kg",
            f"- Height: {profile.height} cm",
            f"- Training experience: {profile.experience}",
        ]
        if profile.goals:
            lines.append(f"- Goals: {', '.join(profile.goals)}")
        if request.notes:
            lines.extend(["", f"USER NOTES: {request.notes}"])
        lines.extend(
            [
                "",
                f"Score only the muscle groups visible from this pose: {groups}.",
                "Respond with JSON in exactly this shape:",
                RESPONSE_SHAPE,
            ]
        )
        return "\n".join(lines)

    def build_messages(self, request: PhysiqueAnalysisRequest) -> list[dict[str, Any]]:
        messages = super().build_messages(request)
        if request.image:
            prompt = messages[-1]["content"]
            messages[-1]["content"] = [
                {"type": "text", "text": prompt},
                {"type": "image", "image": request.image},
            ]
        return messages

    async def analyze_poses(
        self,
        requests: list[PhysiqueAnalysisRequest],
    ) -> list[PhysiqueAnalysis | Exception]:
        """Analyse several poses concurrently.

        Each position holds either the record or the exception raised for
        that pose; one failing pose never cancels the others.
        """

        results = await asyncio.gather(*(self.analyze(request) for request in requests), return_exceptions=True)
        failures = sum(isinstance(result, Exception) for result in results)
        if failures:
            logger.warning("%d of %d pose analyses failed", failures, len(results))
        return list(results)
