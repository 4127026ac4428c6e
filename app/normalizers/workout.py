"""Schema normalizer for workout programs."""
from __future__ import annotations

import logging
from typing import Any

from app.models.records import (
    Exercise,
    MacroSplit,
    PlanOverview,
    ProgressTracking,
    WorkoutDay,
    WorkoutNutrition,
    WorkoutPlan,
)
from app.models.schemas import WorkoutPlanRequest
from app.models.workout_library import (
    CONDITIONING_LIBRARY,
    EXERCISE_LIBRARY,
    EXERCISES_PER_SESSION,
    REST_DAY_TYPE,
    WEEK_DAYS,
    conditioning_for_session,
    template_for_session,
)
from app.normalizers.common import (
    as_mapping,
    as_text,
    clamped_number,
    positive_number,
    round_half_up,
    string_list_or,
)


logger = logging.getLogger(__name__)

DEFAULT_SETS = 3
DEFAULT_REPS = "8-12"
DEFAULT_TARGET_MUSCLES = ("Full Body",)
DEFAULT_DURATION = "8 weeks"

# Percentages of daily calories: protein / carbs / fats
GOAL_MACROS: dict[str, tuple[int, int, int]] = {
    "build_muscle": (30, 45, 25),
    "lose_weight": (40, 30, 30),
    "strength": (30, 40, 30),
    "endurance": (25, 55, 20),
}
GOAL_CALORIES = {"build_muscle": 2800, "lose_weight": 2000, "strength": 2600, "endurance": 2400}

GOAL_NAMES = {
    "build_muscle": "Hypertrophy",
    "lose_weight": "Fat Loss",
    "strength": "Strength Building",
    "endurance": "Endurance",
}
GOAL_DESCRIPTIONS = {
    "build_muscle": "focused on progressive overload and hypertrophy training",
    "lose_weight": "designed to maximize calorie burn and fat loss",
    "strength": "centered on building maximal strength and power",
    "endurance": "aimed at improving cardiovascular fitness and muscular endurance",
}

DEFAULT_NUTRITION_TIPS = (
    "Consume protein within 30 minutes after your workout",
    "Stay hydrated throughout the day",
    "Prioritize whole foods over processed options",
    "Adjust calorie intake based on your progress",
    "Consider tracking your food intake for better results",
)
DEFAULT_PROGRESS_METRICS = ("Weight", "Body measurements", "Progress photos", "Strength progression")
DEFAULT_CHECKPOINTS = (
    "Week 2: Initial progress assessment",
    "Week 4: Mid-program evaluation",
    "Week 8: Final results assessment",
)


def plan_name(request: WorkoutPlanRequest) -> str:
    goal = GOAL_NAMES.get(request.goal, "Custom")
    return f"{request.experience.capitalize()} {goal} Program"


def plan_description(request: WorkoutPlanRequest) -> str:
    focus = GOAL_DESCRIPTIONS.get(request.goal, "customized to your specific needs")
    return (
        f"A {request.days_per_week}-day per week program {focus}. Each workout is designed "
        f"to be completed in approximately {request.time_per_session} minutes."
    )


# Default schedule ------------------------------------------------------------


def _weekly_split(request: WorkoutPlanRequest) -> list[tuple[str, str | None]]:
    """(day, session type) pairs; ``None`` marks a rest day."""

    days = request.days_per_week
    if request.goal in ("build_muscle", "strength"):
        if days >= 6:
            sessions = ["Push (Chest, Shoulders, Triceps)", "Pull (Back, Biceps)", "Legs (Quads, Hamstrings, Calves)"] * 2
            sessions.append(None)
        elif days >= 4:
            sessions = ["Upper Body", "Lower Body", None, "Upper Body", "Lower Body", "Full Body" if days >= 5 else None, None]
        else:
            sessions = ["Full Body", None, "Full Body", None, "Full Body", None, None]
        return list(zip(WEEK_DAYS, sessions))

    rotation = ("Full Body + HIIT", "Upper Body + Cardio", "Lower Body + Cardio")
    return [(day, rotation[i % 3] if i < days else None) for i, day in enumerate(WEEK_DAYS)]


def session_exercises(session_type: str, experience: str) -> list[Exercise]:
    """Template exercises for a session label, scaled by experience."""

    exercises: list[Exercise] = []
    template = template_for_session(session_type)
    if template is not None:
        count = EXERCISES_PER_SESSION.get(experience, 4)
        for entry in EXERCISE_LIBRARY[template][:count]:
            sets = (3 if experience == "beginner" else 4) if entry.get("primary") else entry["sets"]
            exercises.append(
                Exercise(name=entry["name"], sets=sets, reps=entry["reps"], target_muscles=entry["targetMuscles"])
            )

    conditioning = conditioning_for_session(session_type)
    if conditioning is not None:
        entry = CONDITIONING_LIBRARY[conditioning]
        exercises.append(
            Exercise(
                name=entry["name"],
                sets=entry["sets"],
                reps=entry["reps"],
                notes=entry["notes"],
                target_muscles=entry["targetMuscles"],
            )
        )
    return exercises


def default_schedule(request: WorkoutPlanRequest) -> list[WorkoutDay]:
    schedule = []
    for day, session in _weekly_split(request):
        if session is None:
            schedule.append(WorkoutDay(day=day, type=REST_DAY_TYPE, duration=0, exercises=[], rest_day=True))
        else:
            schedule.append(
                WorkoutDay(
                    day=day,
                    type=session,
                    duration=request.time_per_session,
                    exercises=session_exercises(session, request.experience),
                    rest_day=False,
                )
            )
    return schedule


# Normalization -----------------------------------------------------------------


def _muscle_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    return string_list_or(value, DEFAULT_TARGET_MUSCLES)


def normalize_exercise(value: Any, position: int) -> Exercise:
    data = as_mapping(value)
    sets = positive_number(data.get("sets"))
    weight = as_text(data.get("weight"))
    notes = as_text(data.get("notes"))
    return Exercise(
        name=as_text(data.get("name"), f"Exercise {position + 1}"),
        sets=max(round_half_up(sets), 1) if sets is not None else DEFAULT_SETS,
        reps=as_text(data.get("reps"), DEFAULT_REPS),
        weight=weight or None,
        notes=notes or None,
        target_muscles=_muscle_list(data.get("targetMuscles")),
    )


def normalize_day(value: Any, position: int, request: WorkoutPlanRequest) -> WorkoutDay:
    data = as_mapping(value)
    raw_exercises = data.get("exercises")
    exercises = [
        normalize_exercise(item, index)
        for index, item in enumerate(raw_exercises if isinstance(raw_exercises, list) else [])
        if isinstance(item, dict)
    ]
    rest_day = data["restDay"] if isinstance(data.get("restDay"), bool) else not exercises
    duration = positive_number(data.get("duration"))
    if duration is None:
        duration_minutes = 0 if rest_day else request.time_per_session
    else:
        duration_minutes = round_half_up(duration)
    return WorkoutDay(
        day=as_text(data.get("day"), f"Day {position + 1}"),
        type=as_text(data.get("type"), REST_DAY_TYPE if rest_day else "Workout"),
        duration=duration_minutes,
        exercises=exercises,
        rest_day=rest_day,
    )


def normalize_schedule(value: Any, request: WorkoutPlanRequest) -> list[WorkoutDay]:
    """A supplied array is kept (even empty); anything else gets the default week."""

    if not isinstance(value, list):
        logger.debug("No schedule array, generating default %s week", request.goal)
        return default_schedule(request)
    return [normalize_day(item, index, request) for index, item in enumerate(value) if isinstance(item, dict)]


def normalize_workout_nutrition(value: Any, goal: str) -> WorkoutNutrition:
    data = as_mapping(value)
    macros = as_mapping(data.get("macros"))
    protein, carbs, fats = GOAL_MACROS.get(goal, GOAL_MACROS["build_muscle"])
    calories = positive_number(data.get("dailyCalories"))
    return WorkoutNutrition(
        daily_calories=round_half_up(calories) if calories is not None else GOAL_CALORIES.get(goal, 2600),
        macros=MacroSplit(
            protein=clamped_number(macros.get("protein"), 0, 100, protein),
            carbs=clamped_number(macros.get("carbs"), 0, 100, carbs),
            fats=clamped_number(macros.get("fats"), 0, 100, fats),
        ),
        tips=string_list_or(data.get("tips"), DEFAULT_NUTRITION_TIPS),
    )


def normalize_workout_plan(tree: Any, request: WorkoutPlanRequest | None = None) -> WorkoutPlan:
    """Map a recovered generic tree onto a :class:`WorkoutPlan`.

    Accepts both the nested ``{"plan": {...}}`` shape and a flat object
    carrying the plan fields at the top level. Never raises.
    """

    request = request or WorkoutPlanRequest()
    tree = as_mapping(tree)
    plan = tree["plan"] if isinstance(tree.get("plan"), dict) else tree
    tracking = as_mapping(tree.get("progressTracking"))

    return WorkoutPlan(
        plan=PlanOverview(
            name=as_text(plan.get("name"), plan_name(request)),
            duration=as_text(plan.get("duration"), DEFAULT_DURATION),
            description=as_text(plan.get("description"), plan_description(request)),
            schedule=normalize_schedule(plan.get("schedule"), request),
        ),
        nutrition=normalize_workout_nutrition(tree.get("nutrition"), request.goal),
        progress_tracking=ProgressTracking(
            metrics=string_list_or(tracking.get("metrics"), DEFAULT_PROGRESS_METRICS),
            checkpoints=string_list_or(tracking.get("checkpoints"), DEFAULT_CHECKPOINTS),
        ),
    )
