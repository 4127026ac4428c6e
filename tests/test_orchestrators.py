"""Tests for the async domain orchestrators with a stubbed provider."""
from __future__ import annotations

import json

import pytest

from app.models.records import FormAnalysis, NutritionPlan, PhysiqueAnalysis, WorkoutPlan
from app.models.schemas import (
    FormAnalysisRequest,
    NutritionRequest,
    ObservedFormMetrics,
    PhysiqueAnalysisRequest,
    UserProfile,
    WorkoutPlanRequest,
)
from app.normalizers.workout import DEFAULT_DURATION, plan_description
from app.services.ai_client import TransportError
from app.services.form_analysis import FormAnalyzer
from app.services.nutrition_advisor import NutritionAdvisor
from app.services.physique_analyzer import PhysiqueAnalyzer
from app.services.recovery_errors import NoPayloadFound, Unparseable
from app.services.workout_planner import WorkoutPlanner


PHYSIQUE_PAYLOAD = {
    "metrics": {"muscleMass": 78, "bodyFat": 14, "symmetry": 8, "posture": 7, "overallConvexity": 7},
    "muscleGroups": {"chest": {"development": 8, "convexity": 7, "symmetry": 8, "notes": "Full upper chest"}},
    "insights": ["Solid base"],
    "recommendations": ["Add incline work"],
}


def _user_prompt(messages):
    content = messages[-1]["content"]
    if isinstance(content, list):
        return next(part["text"] for part in content if part["type"] == "text")
    return content


@pytest.mark.asyncio
async def test_physique_analyzer_recovers_record(stub_client, settings):
    client = stub_client("Analysis complete:\n```json\n" + json.dumps(PHYSIQUE_PAYLOAD) + "\n```")
    analyzer = PhysiqueAnalyzer(client=client, settings=settings)

    record = await analyzer.analyze(PhysiqueAnalysisRequest(pose_type="front"))

    assert isinstance(record, PhysiqueAnalysis)
    assert record.metrics.muscle_mass == 78
    assert record.strength_points == ["chest"]
    assert client.calls[0][0]["role"] == "system"


@pytest.mark.asyncio
async def test_physique_prompt_carries_image_and_profile(stub_client, settings):
    client = stub_client(json.dumps(PHYSIQUE_PAYLOAD))
    analyzer = PhysiqueAnalyzer(client=client, settings=settings)
    request = PhysiqueAnalysisRequest(
        pose_type="back",
        image="data:image/jpeg;base64,AAAA",
        profile=UserProfile(age=31, experience="advanced"),
    )

    await analyzer.analyze(request)

    parts = client.calls[0][-1]["content"]
    assert parts[1] == {"type": "image", "image": "data:image/jpeg;base64,AAAA"}
    prompt = _user_prompt(client.calls[0])
    assert "back pose" in prompt
    assert "Age: 31" in prompt
    assert "lats" in prompt


@pytest.mark.asyncio
async def test_analyze_poses_isolates_failures(stub_client, settings):
    def reply(messages):
        if "side pose" in _user_prompt(messages):
            return "Sorry, I cannot see the subject clearly."
        return json.dumps(PHYSIQUE_PAYLOAD)

    analyzer = PhysiqueAnalyzer(client=stub_client(reply), settings=settings)
    requests = [PhysiqueAnalysisRequest(pose_type=pose) for pose in ("front", "side", "back")]

    results = await analyzer.analyze_poses(requests)

    assert isinstance(results[0], PhysiqueAnalysis)
    assert isinstance(results[1], NoPayloadFound)
    assert isinstance(results[2], PhysiqueAnalysis)
    assert results[2].pose_type == "back"


@pytest.mark.asyncio
async def test_workout_planner_repairs_fenced_response(stub_client, settings, raw_response):
    planner = WorkoutPlanner(client=stub_client(raw_response("workout_fenced.txt")), settings=settings)

    record = await planner.analyze(WorkoutPlanRequest(goal="strength", days_per_week=4))

    assert isinstance(record, WorkoutPlan)
    assert record.plan.name == "Upper/Lower Strength"
    assert len(record.plan.schedule) == 2
    row = record.plan.schedule[0].exercises[1]
    assert row.sets == 3
    assert row.target_muscles == ["Full Body"]
    assert record.plan.schedule[1].rest_day


@pytest.mark.asyncio
async def test_workout_planner_prose_and_fenced_unquoted_plan(stub_client, settings):
    raw = "Here you go:\n```json\n{name: 'Plan A', schedule: [,],}\n```"
    request = WorkoutPlanRequest()
    planner = WorkoutPlanner(client=stub_client(raw), settings=settings)

    record = await planner.analyze(request)

    assert record.plan.name == "Plan A"
    assert record.plan.schedule == []
    assert record.plan.duration == DEFAULT_DURATION
    assert record.plan.description == plan_description(request)


@pytest.mark.asyncio
async def test_workout_prompt_includes_request(stub_client, settings):
    client = stub_client('{"plan": {"name": "X"}}')
    planner = WorkoutPlanner(client=client, settings=settings)

    await planner.analyze(
        WorkoutPlanRequest(goal="endurance", days_per_week=5, equipment=["Kettlebell"], limitations=["Knee pain"])
    )

    prompt = _user_prompt(client.calls[0])
    assert "Goal: endurance" in prompt
    assert "Training days per week: 5" in prompt
    assert "Kettlebell" in prompt
    assert "Knee pain" in prompt


@pytest.mark.asyncio
async def test_nutrition_advisor_truncated_response(stub_client, settings, raw_response):
    advisor = NutritionAdvisor(client=stub_client(raw_response("nutrition_truncated.txt")), settings=settings)

    record = await advisor.analyze(NutritionRequest(goal="build_muscle", zip_code="94107"))

    assert isinstance(record, NutritionPlan)
    assert record.daily_calories == 2200
    assert [meal.name for meal in record.meal_plan.breakfast] == ["Oats", "Eggs"]
    assert len(record.meal_plan.lunch) == 2
    assert record.budget_breakdown is not None


@pytest.mark.asyncio
async def test_nutrition_prompt_includes_targets(stub_client, settings):
    client = stub_client("{}")
    advisor = NutritionAdvisor(client=client, settings=settings)

    await advisor.analyze(NutritionRequest(zip_code="10001", weekly_budget=80))

    prompt = _user_prompt(client.calls[0])
    assert "Daily calories: 2594 kcal" in prompt
    assert "10001" in prompt
    assert "$80" in prompt


@pytest.mark.asyncio
async def test_form_analyzer_uses_frame_metrics(stub_client, settings):
    class FixedFrameMetrics:
        def __init__(self):
            self.seen = []

        def measure(self, exercise, frame_ref):
            self.seen.append((exercise, frame_ref))
            return ObservedFormMetrics(back_angle=45, frame_count=120)

    frames = FixedFrameMetrics()
    client = stub_client('{"overallScore": 82, "metrics": {"depth": {"score": 90, "status": "good"}}}')
    analyzer = FormAnalyzer(client=client, settings=settings, frame_metrics=frames)

    record = await analyzer.analyze(
        FormAnalysisRequest(exercise="Squat", frame_ref="video-1", metrics=ObservedFormMetrics(depth="parallel"))
    )

    assert isinstance(record, FormAnalysis)
    assert record.exercise == "Squat"
    assert record.overall_score == 82
    assert frames.seen == [("Squat", "video-1")]
    prompt = _user_prompt(client.calls[0])
    assert "Back angle: 45.0 degrees" in prompt
    assert "Depth: parallel" in prompt
    assert "Frames analysed: 120" in prompt


@pytest.mark.asyncio
async def test_form_analyzer_without_frames_skips_provider(stub_client, settings):
    client = stub_client("{}")
    analyzer = FormAnalyzer(client=client, settings=settings)

    record = await analyzer.analyze(FormAnalysisRequest(exercise="Deadlift"))

    assert record.exercise == "Deadlift"
    assert record.overall_score == 75


@pytest.mark.asyncio
async def test_unparseable_response_propagates(stub_client, settings):
    planner = WorkoutPlanner(client=stub_client('{"plan": tru}'), settings=settings)

    with pytest.raises(Unparseable):
        await planner.analyze(WorkoutPlanRequest())


@pytest.mark.asyncio
async def test_transport_error_propagates(settings):
    class FailingClient:
        def generate_text(self, messages):
            raise TransportError("toolkit", "Toolkit request failed (status=502)", 502)

    advisor = NutritionAdvisor(client=FailingClient(), settings=settings)

    with pytest.raises(TransportError) as exc_info:
        await advisor.analyze(NutritionRequest())

    assert exc_info.value.status_code == 502
