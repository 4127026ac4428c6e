"""Small derived metrics shown alongside analysis results."""

from __future__ import annotations

import re

from app.models.records import FormAnalysis


_LEADING_INT = re.compile(r"^\s*(\d+)")

DEFAULT_REPS_FOR_INTENSITY = 10


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """
    Calculate body mass index rounded to one decimal.

    Args:
        weight_kg: Body weight in kilograms
        height_cm: Height in centimetres

    Raises:
        ValueError: If height is not positive

    Example:
        >>> calculate_bmi(70, 175)
        22.9
    """
    if height_cm <= 0:
        raise ValueError("Height must be positive")
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def form_grade(score: float) -> str:
    """Letter grade for a 0-100 form score."""
    for threshold, grade in ((90, "A"), (80, "B"), (70, "C"), (60, "D")):
        if score >= threshold:
            return grade
    return "F"


def workout_intensity(sets: int, reps: str) -> str:
    """
    Rough volume-based intensity label for one exercise.

    The lower bound of a rep range is used (``"8-12"`` counts as 8). Rep
    strings without a leading number (``"AMRAP"``) count as 10.

    Returns:
        ``"Low"`` below 20 total reps, ``"Moderate"`` below 40, else ``"High"``
    """
    match = _LEADING_INT.match(reps or "")
    per_set = int(match.group(1)) if match and int(match.group(1)) > 0 else DEFAULT_REPS_FOR_INTENSITY
    volume = sets * per_set
    if volume < 20:
        return "Low"
    if volume < 40:
        return "Moderate"
    return "High"


def summarize_form(analysis: FormAnalysis) -> str:
    metrics = analysis.metrics
    statuses = [metrics.depth.status, metrics.back_angle.status, metrics.knee_tracking.status]
    good = statuses.count("good")
    if good == len(statuses):
        return "Excellent form! Keep up the great work."
    if good >= len(statuses) / 2:
        return "Good form with room for improvement."
    return "Focus on the highlighted areas for better form."
