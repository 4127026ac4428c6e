"""Workout program generation."""
from __future__ import annotations

from app.models.records import PhysiqueAnalysis
from app.models.schemas import WorkoutPlanRequest
from app.services.analyzer_base import DomainAnalyzer
from app.services.recovery_pipeline import Domain


RESPONSE_SHAPE = """{
  "plan": {
    "name": "...",
    "duration": "8 weeks",
    "description": "...",
    "schedule": [
      {"day": "Monday", "type": "...", "duration": 60, "restDay": false,
       "exercises": [{"name": "...", "sets": 3, "reps": "8-12", "weight": "...", "notes": "...", "targetMuscles": ["..."]}]}
    ]
  },
  "nutrition": {"dailyCalories": 2500, "macros": {"protein": 30, "carbs": 45, "fats": 25}, "tips": ["..."]},
  "progressTracking": {"metrics": ["..."], "checkpoints": ["..."]}
}"""


def physique_context(analysis: PhysiqueAnalysis) -> list[str]:
    """Prompt lines summarising a previous physique assessment."""

    lines = [
        "",
        "PHYSIQUE ANALYSIS:",
        f"- Body fat: {analysis.metrics.body_fat}%",
        f"- Symmetry: {analysis.metrics.symmetry}/10",
    ]
    if analysis.weak_points:
        lines.append(f"- Weak points to prioritise: {', '.join(analysis.weak_points)}")
    if analysis.strength_points:
        lines.append(f"- Strong points: {', '.join(analysis.strength_points)}")
    return lines


class WorkoutPlanner(DomainAnalyzer):
    domain = Domain.WORKOUT

    def build_prompt(self, request: WorkoutPlanRequest) -> str:
        lines = [
            "Create a personalised workout program.",
            "",
            "REQUIREMENTS:",
            f"- Goal: {request.goal}",
            f"- Experience: {request.experience}",
            f"- Training days per week: {request.days_per_week}",
            f"- Time per session: {request.time_per_session} minutes",
            f"- Equipment: {', '.join(request.equipment) or 'bodyweight only'}",
        ]
        if request.preferences:
            lines.append(f"- Preferences: {', '.join(request.preferences)}")
        if request.limitations:
            lines.append(f"- Limitations/injuries: {', '.join(request.limitations)}")
        stats = request.user_stats
        if stats is not None:
            known = {
                "Age": stats.age,
                "Gender": stats.gender,
                "Height (cm)": stats.height,
                "Weight (kg)": stats.weight,
            }
            lines.extend(f"- {label}: {value}" for label, value in known.items() if value is not None)
        if request.physique_analysis is not None:
            lines.extend(physique_context(request.physique_analysis))
        lines.extend(
            [
                "",
                "Include every day of the week; mark rest days with restDay true and no exercises.",
                "Nutrition macros are percentages of daily calories.",
                "Respond with JSON in exactly this shape:",
                RESPONSE_SHAPE,
            ]
        )
        return "\n".join(lines)
