"""Tests for the per-domain schema normalizers."""

import datetime as dt

import pytest

from app.models.schemas import FormAnalysisRequest, NutritionRequest, WorkoutPlanRequest
from app.normalizers.form import normalize_form_analysis
from app.normalizers.nutrition import (
    calculate_bmr,
    calculate_daily_calories,
    normalize_nutrition_plan,
)
from app.normalizers.physique import DEFAULT_INSIGHTS, DEFAULT_RECOMMENDATIONS, normalize_physique_analysis
from app.normalizers.workout import normalize_workout_plan
from app.services.json_repair import parse_json
from app.services.recovery_pipeline import Domain, recover_record


HUGE = int("1" + "0" * 400)

HUGE_TREE = {
    "metrics": {"muscleMass": HUGE, "bodyFat": -HUGE, "depth": {"score": HUGE}},
    "muscleGroups": {"chest": {"development": HUGE}},
    "overallScore": HUGE,
    "dailyCalories": HUGE,
    "macros": {"protein": HUGE, "carbs": {"grams": HUGE, "percentage": HUGE}},
    "mealPlan": {"breakfast": [{"calories": HUGE, "cost": -HUGE}]},
    "plan": {"duration": HUGE, "schedule": [{"day": "Monday", "duration": HUGE, "exercises": [{"sets": HUGE}]}]},
}


@pytest.mark.parametrize(
    "normalize",
    [normalize_physique_analysis, normalize_workout_plan, normalize_nutrition_plan, normalize_form_analysis],
)
@pytest.mark.parametrize(
    "tree",
    [{}, [], [1, 2], "text", 42, None, HUGE, {"metrics": "bad", "plan": 3, "mealPlan": []}, HUGE_TREE],
)
def test_normalizers_never_raise(normalize, tree):
    assert normalize(tree) is not None


class TestPhysiqueNormalizer:
    """Physique clamping, defaults and derived points."""

    def test_empty_tree_gets_defaults(self):
        record = normalize_physique_analysis({}, analyzed_on=dt.date(2025, 1, 15))

        assert record.pose_type == "front"
        assert record.date == dt.date(2025, 1, 15)
        assert record.metrics.muscle_mass == 75
        assert record.metrics.body_fat == 15
        assert record.metrics.symmetry == 7
        assert record.metrics.posture == 8
        assert record.metrics.overall_convexity == 6
        assert record.insights == list(DEFAULT_INSIGHTS)
        assert record.recommendations == list(DEFAULT_RECOMMENDATIONS)
        assert set(record.muscle_groups) == {"chest", "shoulders", "arms", "abs", "quadriceps"}

    def test_metrics_are_clamped(self):
        record = normalize_physique_analysis(
            {"metrics": {"muscleMass": 200, "bodyFat": -5, "symmetry": 0, "posture": 11, "overallConvexity": "7"}}
        )

        assert record.metrics.muscle_mass == 95
        assert record.metrics.body_fat == 5
        assert record.metrics.symmetry == 1
        assert record.metrics.posture == 10
        assert record.metrics.overall_convexity == 7

    def test_huge_numbers_clamp_to_bounds(self):
        record = normalize_physique_analysis(
            {"metrics": {"muscleMass": HUGE, "bodyFat": -HUGE}, "muscleGroups": {"chest": {"development": HUGE}}}
        )

        assert record.metrics.muscle_mass == 95
        assert record.metrics.body_fat == 5
        assert record.muscle_groups["chest"].development == 10

    def test_float_overflow_literal_clamps(self):
        record = normalize_physique_analysis(parse_json('{"metrics": {"symmetry": 1e400, "posture": -1e400}}'))

        assert record.metrics.symmetry == 10
        assert record.metrics.posture == 1

    def test_huge_integer_through_pipeline(self):
        raw = '{"metrics": {"muscleMass": ' + str(HUGE) + "}}"
        record = recover_record(raw, Domain.PHYSIQUE)
        assert record.metrics.muscle_mass == 95

    def test_low_muscle_mass_clamped_to_floor(self):
        record = normalize_physique_analysis({"metrics": {"muscleMass": -5}})
        assert record.metrics.muscle_mass == 60

    def test_muscle_group_scores(self):
        record = normalize_physique_analysis(
            {"muscleGroups": {"chest": {"development": 12, "convexity": "high", "symmetry": 0.2}}}
        )
        chest = record.muscle_groups["chest"]

        assert chest.development == 10
        assert chest.convexity == 0
        assert chest.symmetry == 1
        assert chest.notes == "chest analysis pending"

    def test_points_derived_when_absent(self):
        record = normalize_physique_analysis(
            {
                "muscleGroups": {
                    "back": {"development": 4},
                    "legs": {"development": 6},
                    "arms": {"development": 8},
                    "chest": {"development": 9},
                }
            }
        )

        assert record.weak_points == ["back"]
        assert record.strength_points == ["arms", "chest"]

    def test_supplied_points_used_verbatim(self):
        record = normalize_physique_analysis(
            {
                "muscleGroups": {"back": {"development": 3}},
                "weakPoints": ["calves"],
                "strengthPoints": [],
            }
        )

        assert record.weak_points == ["calves"]
        assert record.strength_points == []

    def test_supplied_weak_points_not_recomputed(self):
        record = normalize_physique_analysis(
            {
                "muscleGroups": {"back": {"development": 7}, "chest": {"development": 8}},
                "weakPoints": ["back"],
            }
        )

        assert record.weak_points == ["back"]
        assert record.strength_points == ["chest"]

    def test_pose_specific_groups(self):
        record = normalize_physique_analysis({}, pose_type="back")
        assert "lats" in record.muscle_groups

    def test_unknown_pose_falls_back_to_overall(self):
        record = normalize_physique_analysis({}, pose_type="most-muscular")
        assert list(record.muscle_groups) == ["overall"]


class TestWorkoutNormalizer:
    """Workout plan defaults."""

    def test_empty_tree_generates_default_week(self):
        record = normalize_workout_plan({})

        assert record.plan.name == "Beginner Hypertrophy Program"
        assert record.plan.duration == "8 weeks"
        assert len(record.plan.schedule) == 7
        training_days = [day for day in record.plan.schedule if not day.rest_day]
        assert len(training_days) == 3
        assert all(len(day.exercises) == 4 for day in training_days)
        assert training_days[0].exercises[0].sets == 3
        assert record.nutrition.daily_calories == 2800
        assert (record.nutrition.macros.protein, record.nutrition.macros.carbs, record.nutrition.macros.fats) == (
            30,
            45,
            25,
        )
        assert record.progress_tracking.metrics
        assert record.progress_tracking.checkpoints

    @pytest.mark.parametrize(
        "goal,expected",
        [
            ("build_muscle", (30, 45, 25)),
            ("lose_weight", (40, 30, 30)),
            ("strength", (30, 40, 30)),
            ("endurance", (25, 55, 20)),
        ],
    )
    def test_macro_defaults_per_goal(self, goal, expected):
        record = normalize_workout_plan({}, WorkoutPlanRequest(goal=goal))
        macros = record.nutrition.macros
        assert (macros.protein, macros.carbs, macros.fats) == expected

    def test_exercise_defaults(self):
        record = normalize_workout_plan(
            {"plan": {"schedule": [{"day": "Monday", "exercises": [{"name": "Squat", "sets": "many"}]}]}}
        )
        day = record.plan.schedule[0]
        exercise = day.exercises[0]

        assert exercise.sets == 3
        assert exercise.reps == "8-12"
        assert exercise.target_muscles == ["Full Body"]
        assert not day.rest_day
        assert day.duration == 60

    def test_rest_day_inferred_from_missing_exercises(self):
        record = normalize_workout_plan({"plan": {"schedule": [{"day": "Sunday"}]}})
        day = record.plan.schedule[0]

        assert day.rest_day
        assert day.duration == 0

    def test_flat_plan_with_empty_schedule(self):
        record = normalize_workout_plan({"name": "Plan A", "schedule": []})

        assert record.plan.name == "Plan A"
        assert record.plan.schedule == []

    def test_advanced_push_pull_legs(self):
        request = WorkoutPlanRequest(goal="strength", experience="advanced", days_per_week=6)
        record = normalize_workout_plan({}, request)
        types = [day.type for day in record.plan.schedule]

        assert types[0].startswith("Push")
        assert types[1].startswith("Pull")
        assert types[2].startswith("Legs")
        assert record.plan.schedule[0].exercises[0].sets == 4
        assert len(record.plan.schedule[0].exercises) == 8

    def test_endurance_sessions_include_conditioning(self):
        record = normalize_workout_plan({}, WorkoutPlanRequest(goal="endurance", days_per_week=2))
        monday = record.plan.schedule[0]

        assert monday.type == "Full Body + HIIT"
        assert monday.exercises[-1].name == "HIIT Circuit"


class TestNutritionNormalizer:
    """Nutrition calculations and meal plan shaping."""

    def test_bmr_formula(self):
        male = NutritionRequest(weight=70, height=175, age=25, gender="male")
        female = NutritionRequest(weight=60, height=165, age=30, gender="female")

        assert calculate_bmr(male) == pytest.approx(1673.75)
        assert calculate_bmr(female) == pytest.approx(1320.25)

    def test_daily_calories_activity_and_goal(self):
        request = NutritionRequest(
            weight=60, height=165, age=30, gender="female", activity_level="sedentary", goal="lose_weight"
        )
        assert calculate_daily_calories(request) == 1267

    def test_empty_tree_gets_computed_defaults(self):
        record = normalize_nutrition_plan({})

        assert record.daily_calories == 2594
        assert record.macros.protein.grams == 195
        assert record.macros.protein.percentage == 30
        assert record.macros.carbs.grams == 259
        assert record.macros.fats.grams == 86
        for meal in (record.meal_plan.breakfast, record.meal_plan.lunch, record.meal_plan.dinner, record.meal_plan.snacks):
            assert len(meal) == 2
        assert record.tips
        assert record.supplements
        assert record.budget_breakdown is not None
        assert record.budget_breakdown.categories.protein == 40

    @pytest.mark.parametrize("value", ["abc", -100, 0, None, True])
    def test_invalid_calories_fall_back(self, value):
        assert normalize_nutrition_plan({"dailyCalories": value}).daily_calories == 2594

    def test_numeric_string_calories(self):
        assert normalize_nutrition_plan({"dailyCalories": "2200"}).daily_calories == 2200

    def test_meals_truncated_to_two(self):
        meals = [{"name": f"Meal {i}", "calories": 400} for i in range(4)]
        record = normalize_nutrition_plan({"mealPlan": {"breakfast": meals}})

        assert [meal.name for meal in record.meal_plan.breakfast] == ["Meal 0", "Meal 1"]

    def test_non_array_meal_gets_canned_pair(self):
        record = normalize_nutrition_plan({"mealPlan": {"lunch": "chicken"}})
        assert len(record.meal_plan.lunch) == 2

    def test_bare_macro_number_is_grams(self):
        record = normalize_nutrition_plan({"dailyCalories": 2000, "macros": {"protein": 150}})

        assert record.macros.protein.grams == 150
        assert record.macros.protein.percentage == pytest.approx(30.0)

    def test_no_budget_breakdown_without_budget(self):
        record = normalize_nutrition_plan({}, NutritionRequest(weekly_budget=0))
        assert record.budget_breakdown is None


class TestFormNormalizer:
    """Form scores and status coercion."""

    def test_empty_tree_gets_defaults(self):
        record = normalize_form_analysis({})

        assert record.exercise == "Unknown Exercise"
        assert record.overall_score == 75
        assert record.metrics.depth.score == 80
        assert record.metrics.back_angle.score == 70
        assert record.metrics.back_angle.angle == 62
        assert record.metrics.knee_tracking.score == 85
        assert record.metrics.depth.feedback == "Good depth achieved"
        assert len(record.improvements) == 1
        assert len(record.tips) == 1
        assert len(record.next_steps) == 1

    def test_request_exercise_used_as_fallback(self):
        record = normalize_form_analysis({}, FormAnalysisRequest(exercise="Squat"))
        assert record.exercise == "Squat"

    def test_scores_clamped_and_status_coerced(self):
        record = normalize_form_analysis(
            {
                "overallScore": -3,
                "metrics": {
                    "depth": {"score": 150, "status": "excellent"},
                    "kneeTracking": {"score": 40, "status": "poor"},
                },
            }
        )

        assert record.overall_score == 0
        assert record.metrics.depth.score == 100
        assert record.metrics.depth.status == "good"
        assert record.metrics.knee_tracking.status == "poor"

    def test_empty_lists_get_defaults(self):
        record = normalize_form_analysis({"improvements": [], "tips": "n/a", "nextSteps": ["Film from the side"]})

        assert record.improvements
        assert record.tips
        assert record.next_steps == ["Film from the side"]
