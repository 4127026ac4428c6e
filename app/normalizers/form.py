"""Schema normalizer for exercise form assessments."""
from __future__ import annotations

import logging
from typing import Any

from app.models.records import (
    FORM_STATUSES,
    BackAngleAssessment,
    FormAnalysis,
    FormMetrics,
    MetricAssessment,
)
from app.models.schemas import FormAnalysisRequest
from app.normalizers.common import as_mapping, as_number, as_text, clamped_number, string_list_or


logger = logging.getLogger(__name__)

SCORE_RANGE = (0, 100)
DEFAULT_EXERCISE = "Unknown Exercise"
DEFAULT_OVERALL_SCORE = 75
DEFAULT_STATUS = "good"

# key -> (default score, default feedback)
METRIC_DEFAULTS = {
    "depth": (80, "Good depth achieved"),
    "backAngle": (70, "Consider adjusting back angle"),
    "kneeTracking": (85, "Knee tracking looks good"),
}
DEFAULT_BACK_ANGLE = 62

DEFAULT_IMPROVEMENTS = ("Focus on maintaining consistent form throughout the movement",)
DEFAULT_TIPS = ("Control the tempo on both the lowering and lifting phases",)
DEFAULT_NEXT_STEPS = ("Record another set next session to track your progress",)


def normalize_status(value: Any) -> str:
    """Restrict to the closed status set; anything else reads as ``good``."""

    status = as_text(value).lower()
    return status if status in FORM_STATUSES else DEFAULT_STATUS


def _metric_fields(value: Any, key: str) -> dict[str, Any]:
    data = as_mapping(value)
    score, feedback = METRIC_DEFAULTS[key]
    return {
        "score": clamped_number(data.get("score"), *SCORE_RANGE, score),
        "status": normalize_status(data.get("status")),
        "feedback": as_text(data.get("feedback"), feedback),
    }


def normalize_form_metrics(value: Any) -> FormMetrics:
    metrics = as_mapping(value)
    if not metrics:
        logger.debug("No form metrics object, using defaults")

    back_angle = as_mapping(metrics.get("backAngle"))
    angle = as_number(back_angle.get("angle"))
    return FormMetrics(
        depth=MetricAssessment(**_metric_fields(metrics.get("depth"), "depth")),
        back_angle=BackAngleAssessment(
            **_metric_fields(back_angle, "backAngle"),
            angle=angle if angle is not None else DEFAULT_BACK_ANGLE,
        ),
        knee_tracking=MetricAssessment(**_metric_fields(metrics.get("kneeTracking"), "kneeTracking")),
    )


def normalize_form_analysis(tree: Any, request: FormAnalysisRequest | None = None) -> FormAnalysis:
    """Map a recovered generic tree onto a :class:`FormAnalysis`. Never raises."""

    tree = as_mapping(tree)
    fallback_exercise = as_text(request.exercise, DEFAULT_EXERCISE) if request else DEFAULT_EXERCISE

    return FormAnalysis(
        exercise=as_text(tree.get("exercise"), fallback_exercise),
        overall_score=clamped_number(tree.get("overallScore"), *SCORE_RANGE, DEFAULT_OVERALL_SCORE),
        metrics=normalize_form_metrics(tree.get("metrics")),
        improvements=string_list_or(tree.get("improvements"), DEFAULT_IMPROVEMENTS),
        tips=string_list_or(tree.get("tips"), DEFAULT_TIPS),
        next_steps=string_list_or(tree.get("nextSteps"), DEFAULT_NEXT_STEPS),
    )
