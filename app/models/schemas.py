"""Pydantic models describing API request payloads."""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.records import PhysiqueAnalysis


Experience = Literal["beginner", "intermediate", "advanced"]
Gender = Literal["male", "female"]
WorkoutGoal = Literal["build_muscle", "lose_weight", "strength", "endurance"]
NutritionGoal = Literal["build_muscle", "lose_weight", "maintain"]
ActivityLevel = Literal["sedentary", "light", "moderate", "very_active", "extra_active"]


class RequestModel(BaseModel):
    """Accept both snake_case and the camelCase keys sent by the mobile client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserProfile(RequestModel):
    """Profile context shared by the analysis prompts."""

    age: int = Field(default=25, ge=10, le=100)
    gender: Gender = "male"
    weight: float = Field(default=70, gt=0, description="Body weight in kg")
    height: float = Field(default=175, gt=0, description="Height in cm")
    experience: Experience = "beginner"
    goals: list[str] = []
    injuries: list[str] = []


class PhysiqueAnalysisRequest(RequestModel):
    """Schema for requesting a physique assessment of one pose."""

    pose_type: str = "front"
    image: str | None = Field(default=None, description="Base64 image or data URI")
    notes: str | None = None
    profile: UserProfile = Field(default_factory=UserProfile)


class PhysiqueBatchRequest(RequestModel):
    """Several poses analysed concurrently."""

    poses: list[PhysiqueAnalysisRequest] = Field(min_length=1, max_length=6)


class UserStats(RequestModel):
    age: int | None = None
    gender: Gender | None = None
    height: float | None = None
    weight: float | None = None


class WorkoutPlanRequest(RequestModel):
    """Schema for requesting a training program."""

    goal: WorkoutGoal = "build_muscle"
    experience: Experience = "beginner"
    days_per_week: int = Field(default=3, ge=1, le=7)
    time_per_session: int = Field(default=60, ge=10, le=240, description="Minutes")
    equipment: list[str] = []
    preferences: list[str] = []
    limitations: list[str] = []
    user_stats: UserStats | None = None
    physique_analysis: PhysiqueAnalysis | None = None


class NutritionRequest(RequestModel):
    """Schema for requesting a nutrition plan."""

    goal: NutritionGoal = "maintain"
    weight: float = Field(default=70, gt=0, description="kg")
    height: float = Field(default=175, gt=0, description="cm")
    age: int = Field(default=25, ge=10, le=100)
    gender: Gender = "male"
    activity_level: ActivityLevel = "moderate"
    dietary_restrictions: list[str] = []
    preferences: list[str] = []
    zip_code: str = ""
    weekly_budget: float = Field(default=100, ge=0)
    physique_analysis: PhysiqueAnalysis | None = None


class ObservedFormMetrics(RequestModel):
    """Metrics the client or a frame metrics backend already measured."""

    back_angle: float | None = None
    knee_alignment: str | None = None
    depth: str | None = None
    duration: float | None = Field(default=None, description="Seconds")
    frame_count: int | None = None


class FormAnalysisRequest(RequestModel):
    """Schema for requesting an exercise form assessment."""

    exercise: str
    user_description: str | None = None
    metrics: ObservedFormMetrics | None = None
    profile: UserProfile | None = None
    frame_ref: str | None = Field(
        default=None,
        description="Opaque video/frame reference handed to the frame metrics provider.",
    )


class RawRecoveryRequest(BaseModel):
    """Raw provider text submitted for offline recovery."""

    raw_text: str = Field(min_length=1)
    context: dict = {}
