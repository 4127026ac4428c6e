"""Tests for derived fitness metrics."""

import pytest

from app.normalizers.form import normalize_form_analysis
from app.services.fitness_metrics import bmi_category, calculate_bmi, form_grade, summarize_form, workout_intensity


class TestBMI:
    def test_calculate_bmi(self):
        assert calculate_bmi(70, 175) == 22.9
        assert calculate_bmi(100, 180) == 30.9

    def test_invalid_height(self):
        with pytest.raises(ValueError):
            calculate_bmi(70, 0)

    @pytest.mark.parametrize(
        "bmi,category",
        [(17.0, "Underweight"), (18.5, "Normal weight"), (24.9, "Normal weight"), (27.0, "Overweight"), (30.0, "Obese")],
    )
    def test_bmi_category(self, bmi, category):
        assert bmi_category(bmi) == category


@pytest.mark.parametrize("score,grade", [(95, "A"), (90, "A"), (85, "B"), (72, "C"), (60, "D"), (59.9, "F")])
def test_form_grade(score, grade):
    assert form_grade(score) == grade


@pytest.mark.parametrize(
    "sets,reps,expected",
    [(2, "5", "Low"), (3, "8-12", "Moderate"), (3, "AMRAP", "Moderate"), (5, "10", "High"), (1, "20 minutes", "Moderate")],
)
def test_workout_intensity(sets, reps, expected):
    assert workout_intensity(sets, reps) == expected


class TestSummarizeForm:
    def test_all_good(self):
        analysis = normalize_form_analysis({})
        assert summarize_form(analysis) == "Excellent form! Keep up the great work."

    def test_mostly_good(self):
        analysis = normalize_form_analysis({"metrics": {"depth": {"status": "poor"}}})
        assert summarize_form(analysis) == "Good form with room for improvement."

    def test_mostly_poor(self):
        analysis = normalize_form_analysis(
            {"metrics": {"depth": {"status": "poor"}, "kneeTracking": {"status": "needs_improvement"}}}
        )
        assert summarize_form(analysis) == "Focus on the highlighted areas for better form."
