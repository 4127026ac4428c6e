"""Validated domain records produced by the schema normalizers.

Records are frozen pydantic models. Attribute names are snake_case and
serialise to the camelCase keys the mobile client and the provider use.
"""
from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


FormStatus = Literal["good", "needs_improvement", "poor"]
FORM_STATUSES: tuple[str, ...] = ("good", "needs_improvement", "poor")


class RecordModel(BaseModel):
    """Base for immutable records with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Physique ------------------------------------------------------------------


class PhysiqueMetrics(RecordModel):
    muscle_mass: float = Field(ge=60, le=95, description="Muscle mass percentage")
    body_fat: float = Field(ge=5, le=35, description="Body fat percentage")
    symmetry: float = Field(ge=1, le=10)
    posture: float = Field(ge=1, le=10)
    overall_convexity: float = Field(ge=1, le=10)


class MuscleGroupAnalysis(RecordModel):
    """Scores for one muscle group; 0 means the provider gave no score."""

    development: float = Field(ge=0, le=10)
    convexity: float = Field(ge=0, le=10)
    symmetry: float = Field(ge=0, le=10)
    notes: str


class PhysiqueAnalysis(RecordModel):
    """Schema for a single-pose physique assessment."""

    pose_type: str
    date: dt.date
    metrics: PhysiqueMetrics
    insights: list[str] = Field(min_length=1)
    recommendations: list[str] = Field(min_length=1)
    muscle_groups: dict[str, MuscleGroupAnalysis]
    weak_points: list[str]
    strength_points: list[str]


# Workout -------------------------------------------------------------------


class Exercise(RecordModel):
    name: str
    sets: int = Field(ge=1)
    reps: str
    weight: str | None = None
    notes: str | None = None
    target_muscles: list[str] = Field(min_length=1)


class WorkoutDay(RecordModel):
    day: str
    type: str
    duration: int = Field(ge=0, description="Session length in minutes")
    exercises: list[Exercise] = []
    rest_day: bool = False


class PlanOverview(RecordModel):
    name: str
    duration: str
    description: str
    schedule: list[WorkoutDay]


class MacroSplit(RecordModel):
    """Macro targets as percentages of daily calories."""

    protein: float = Field(ge=0, le=100)
    carbs: float = Field(ge=0, le=100)
    fats: float = Field(ge=0, le=100)


class WorkoutNutrition(RecordModel):
    daily_calories: int = Field(ge=0)
    macros: MacroSplit
    tips: list[str]


class ProgressTracking(RecordModel):
    metrics: list[str] = Field(min_length=1)
    checkpoints: list[str] = Field(min_length=1)


class WorkoutPlan(RecordModel):
    """Schema for a generated training program."""

    plan: PlanOverview
    nutrition: WorkoutNutrition
    progress_tracking: ProgressTracking


# Nutrition -----------------------------------------------------------------


class MacroAmount(RecordModel):
    grams: float = Field(ge=0)
    percentage: float = Field(ge=0, le=100)


class NutritionMacros(RecordModel):
    protein: MacroAmount
    carbs: MacroAmount
    fats: MacroAmount


class MealSuggestion(RecordModel):
    name: str
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fats: float = Field(ge=0)
    ingredients: list[str] = []
    prep_time: float | None = Field(default=None, ge=0, description="Minutes")
    cost: float | None = Field(default=None, ge=0)


class MealPlan(RecordModel):
    breakfast: list[MealSuggestion] = Field(min_length=1, max_length=2)
    lunch: list[MealSuggestion] = Field(min_length=1, max_length=2)
    dinner: list[MealSuggestion] = Field(min_length=1, max_length=2)
    snacks: list[MealSuggestion] = Field(min_length=1, max_length=2)


class BudgetCategories(RecordModel):
    protein: float = Field(ge=0)
    produce: float = Field(ge=0)
    grains: float = Field(ge=0)
    dairy: float = Field(ge=0)
    other: float = Field(ge=0)


class BudgetBreakdown(RecordModel):
    weekly_total: float = Field(ge=0)
    categories: BudgetCategories
    tips: list[str]


class NutritionPlan(RecordModel):
    """Schema for a daily nutrition plan."""

    daily_calories: int = Field(ge=0)
    macros: NutritionMacros
    meal_plan: MealPlan
    tips: list[str]
    supplements: list[str]
    budget_breakdown: BudgetBreakdown | None = None


# Form ----------------------------------------------------------------------


class MetricAssessment(RecordModel):
    score: float = Field(ge=0, le=100)
    status: FormStatus
    feedback: str


class BackAngleAssessment(MetricAssessment):
    angle: float = Field(description="Degrees")


class FormMetrics(RecordModel):
    depth: MetricAssessment
    back_angle: BackAngleAssessment
    knee_tracking: MetricAssessment


class FormAnalysis(RecordModel):
    """Schema for an exercise form assessment."""

    exercise: str
    overall_score: float = Field(ge=0, le=100)
    metrics: FormMetrics
    improvements: list[str] = Field(min_length=1)
    tips: list[str] = Field(min_length=1)
    next_steps: list[str] = Field(min_length=1)


DomainRecord = PhysiqueAnalysis | WorkoutPlan | NutritionPlan | FormAnalysis
