"""Progress comparisons across physique assessments and form sessions."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Sequence

from app.models.records import FormAnalysis, PhysiqueAnalysis


logger = logging.getLogger(__name__)

METRIC_FIELDS = ("muscle_mass", "body_fat", "symmetry", "posture", "overall_convexity")
GROUP_FIELDS = ("development", "convexity", "symmetry")

# An issue is "common" when it shows up in at least this share of sessions
COMMON_ISSUE_SHARE = 0.3
MAX_RECURRING_ISSUES = 2


def compare_physique(current: PhysiqueAnalysis, previous: PhysiqueAnalysis) -> dict[str, Any]:
    """
    Compare two physique assessments.

    Only muscle groups present in both assessments are compared. A group
    counts as an improvement when its development score went up and as a
    decline when it went down.

    Args:
        current: The most recent assessment
        previous: The earlier assessment to compare against

    Returns:
        Dictionary with ``timeframe``, ``overall_changes`` (metric deltas),
        ``muscle_group_changes`` (per-group deltas), ``improvements`` and
        ``declines`` (group names).

    Example:
        >>> result = compare_physique(march, january)
        >>> result["overall_changes"]["body_fat"]
        -2.0
    """
    overall_changes = {
        field: round(getattr(current.metrics, field) - getattr(previous.metrics, field), 2)
        for field in METRIC_FIELDS
    }

    group_changes: dict[str, dict[str, float]] = {}
    for name, group in current.muscle_groups.items():
        before = previous.muscle_groups.get(name)
        if before is None:
            continue
        group_changes[name] = {
            field: round(getattr(group, field) - getattr(before, field), 2) for field in GROUP_FIELDS
        }

    return {
        "timeframe": f"{previous.date.isoformat()} to {current.date.isoformat()}",
        "overall_changes": overall_changes,
        "muscle_group_changes": group_changes,
        "improvements": [name for name, delta in group_changes.items() if delta["development"] > 0],
        "declines": [name for name, delta in group_changes.items() if delta["development"] < 0],
    }


def common_issues(analyses: Sequence[FormAnalysis]) -> list[str]:
    """Improvement items that recur in at least 30% of sessions, in first-seen order."""
    counts: Counter[str] = Counter()
    for analysis in analyses:
        counts.update(analysis.improvements)
    threshold = len(analyses) * COMMON_ISSUE_SHARE
    return [issue for issue, count in counts.items() if count >= threshold]


def form_recommendations(issues: Sequence[str], average_score: float) -> list[str]:
    if average_score < 60:
        recommendations = [
            "Focus on mastering basic movement patterns",
            "Consider working with a qualified trainer",
        ]
    elif average_score < 80:
        recommendations = [
            "Continue practicing with lighter weights",
            "Focus on consistency and control",
        ]
    else:
        recommendations = [
            "Great form! Consider progressive overload",
            "Explore advanced variations",
        ]

    if issues:
        recommendations.append(f"Address recurring issues: {', '.join(issues[:MAX_RECURRING_ISSUES])}")
    return recommendations


def build_form_report(analyses: Sequence[FormAnalysis]) -> dict[str, Any]:
    """
    Summarise a series of form sessions, oldest first.

    Args:
        analyses: Form assessments in chronological order

    Returns:
        Dictionary with a ``summary`` (session count, average and latest
        score, improvement from first to last session), ``common_issues``,
        ``recommendations`` and a per-session ``progress`` list.

    Raises:
        ValueError: If ``analyses`` is empty
    """
    if not analyses:
        raise ValueError("No form analyses provided")

    scores = [analysis.overall_score for analysis in analyses]
    average = sum(scores) / len(scores)
    improvement = scores[-1] - scores[0] if len(scores) > 1 else 0
    issues = common_issues(analyses)
    logger.debug("Form report over %d sessions | average=%.1f", len(scores), average)

    return {
        "summary": {
            "total_sessions": len(scores),
            "average_score": round(average, 1),
            "latest_score": scores[-1],
            "improvement": improvement,
        },
        "common_issues": issues,
        "recommendations": form_recommendations(issues, average),
        "progress": [
            {"session": index + 1, "exercise": analysis.exercise, "score": analysis.overall_score}
            for index, analysis in enumerate(analyses)
        ],
    }
