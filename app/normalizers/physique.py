"""Schema normalizer for physique assessments."""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable

from app.models.records import MuscleGroupAnalysis, PhysiqueAnalysis, PhysiqueMetrics
from app.normalizers.common import as_mapping, as_text, clamped_number, string_list, string_list_or


logger = logging.getLogger(__name__)

# key -> (low, high, default)
METRIC_RULES: dict[str, tuple[float, float, float]] = {
    "muscleMass": (60, 95, 75),
    "bodyFat": (5, 35, 15),
    "symmetry": (1, 10, 7),
    "posture": (1, 10, 8),
    "overallConvexity": (1, 10, 6),
}

GROUP_SCORE_RANGE = (1, 10)
WEAK_POINT_BELOW = 6
STRENGTH_POINT_FROM = 8

DEFAULT_INSIGHTS = ("Good overall muscle development for your experience level",)
DEFAULT_RECOMMENDATIONS = ("Continue with compound movements for overall development",)

# Groups visible per pose, used when the provider sends no muscleGroups object.
POSE_MUSCLE_GROUPS: dict[str, dict[str, tuple[int, int, int, str]]] = {
    "front": {
        "chest": (7, 6, 8, "Good chest development"),
        "shoulders": (6, 5, 7, "Balanced deltoid development"),
        "arms": (7, 6, 8, "Proportional arm development"),
        "abs": (6, 5, 8, "Core definition visible"),
        "quadriceps": (7, 6, 7, "Good quad development"),
    },
    "back": {
        "lats": (6, 5, 7, "V-taper development"),
        "traps": (7, 6, 8, "Upper back strength"),
        "rearDelts": (5, 4, 7, "Posterior shoulder development"),
        "spinalErectors": (6, 5, 8, "Lower back development"),
        "hamstrings": (6, 5, 7, "Posterior chain development"),
    },
    "side": {
        "shoulders": (7, 6, 8, "Shoulder development from side"),
        "chest": (6, 5, 7, "Chest thickness"),
        "arms": (7, 6, 8, "Arm development from side"),
        "abs": (6, 5, 7, "Core profile"),
        "glutes": (7, 6, 8, "Glute development"),
        "calves": (5, 4, 7, "Lower leg development"),
    },
    "legs": {
        "quadriceps": (7, 6, 8, "Quad development and separation"),
        "hamstrings": (6, 5, 7, "Hamstring development"),
        "calves": (5, 4, 7, "Calf development and shape"),
        "adductors": (6, 5, 8, "Inner thigh development"),
    },
    "glutes": {
        "glutes": (7, 6, 8, "Glute development and shape"),
        "hamstrings": (6, 5, 7, "Hamstring-glute tie-in"),
        "lowerBack": (6, 5, 8, "Lower back development"),
    },
}
_GENERIC_GROUPS = {"overall": (6, 5, 7, "General physique assessment")}


def visible_muscle_groups(pose_type: str) -> dict[str, MuscleGroupAnalysis]:
    """Baseline group table for a pose (unknown poses get a single ``overall`` group)."""

    table = POSE_MUSCLE_GROUPS.get(pose_type.strip().lower(), _GENERIC_GROUPS)
    return {
        name: MuscleGroupAnalysis(development=dev, convexity=conv, symmetry=sym, notes=notes)
        for name, (dev, conv, sym, notes) in table.items()
    }


def _group_score(value: Any) -> float:
    return clamped_number(value, *GROUP_SCORE_RANGE, 0.0)


def normalize_muscle_group(name: str, data: Any) -> MuscleGroupAnalysis:
    data = as_mapping(data)
    return MuscleGroupAnalysis(
        development=_group_score(data.get("development")),
        convexity=_group_score(data.get("convexity")),
        symmetry=_group_score(data.get("symmetry")),
        notes=as_text(data.get("notes"), f"{name} analysis pending"),
    )


def normalize_muscle_groups(value: Any, pose_type: str) -> dict[str, MuscleGroupAnalysis]:
    if not isinstance(value, dict):
        logger.debug("No muscleGroups object, using %s pose baseline", pose_type)
        return visible_muscle_groups(pose_type)

    groups: dict[str, MuscleGroupAnalysis] = {}
    for raw_name, data in value.items():
        name = as_text(raw_name)
        if name:
            groups[name] = normalize_muscle_group(name, data)
    return groups


def _points(
    tree: dict[str, Any],
    key: str,
    groups: dict[str, MuscleGroupAnalysis],
    selects: Callable[[MuscleGroupAnalysis], bool],
) -> list[str]:
    """Supplied list verbatim, or derived from ``groups`` when the key is absent."""

    supplied = tree.get(key)
    if isinstance(supplied, list):
        return string_list(supplied)
    return [name for name, group in groups.items() if selects(group)]


def normalize_metrics(value: Any) -> PhysiqueMetrics:
    metrics = as_mapping(value)
    resolved = {
        key: clamped_number(metrics.get(key), low, high, default)
        for key, (low, high, default) in METRIC_RULES.items()
    }
    return PhysiqueMetrics(
        muscle_mass=resolved["muscleMass"],
        body_fat=resolved["bodyFat"],
        symmetry=resolved["symmetry"],
        posture=resolved["posture"],
        overall_convexity=resolved["overallConvexity"],
    )


def normalize_physique_analysis(
    tree: Any,
    pose_type: str = "front",
    analyzed_on: dt.date | None = None,
) -> PhysiqueAnalysis:
    """Map a recovered generic tree onto a :class:`PhysiqueAnalysis`.

    Never raises. Metrics are clamped to their ranges, missing lists get
    canned sentences, and weak/strength points are derived from the muscle
    groups only when the tree omits them entirely.
    """

    tree = as_mapping(tree)
    pose = as_text(pose_type) or as_text(tree.get("poseType"), "front")

    # Some responses flatten the metrics onto the top level
    metrics_source = tree.get("metrics") if isinstance(tree.get("metrics"), dict) else tree
    groups = normalize_muscle_groups(tree.get("muscleGroups"), pose)

    return PhysiqueAnalysis(
        pose_type=pose,
        date=analyzed_on or dt.date.today(),
        metrics=normalize_metrics(metrics_source),
        insights=string_list_or(tree.get("insights"), DEFAULT_INSIGHTS),
        recommendations=string_list_or(tree.get("recommendations"), DEFAULT_RECOMMENDATIONS),
        muscle_groups=groups,
        weak_points=_points(tree, "weakPoints", groups, lambda g: g.development < WEAK_POINT_BELOW),
        strength_points=_points(tree, "strengthPoints", groups, lambda g: g.development >= STRENGTH_POINT_FROM),
    )
