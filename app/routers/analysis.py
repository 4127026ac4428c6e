"""API endpoints for physique, workout, nutrition and form analysis."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, ValidationError

from app.config import get_settings
from app.models.records import (
    FormAnalysis,
    NutritionPlan,
    PhysiqueAnalysis,
    WorkoutPlan,
)
from app.models.schemas import (
    FormAnalysisRequest,
    NutritionRequest,
    PhysiqueAnalysisRequest,
    PhysiqueBatchRequest,
    RawRecoveryRequest,
    WorkoutPlanRequest,
)
from app.services.ai_client import TransportError
from app.services.fitness_metrics import bmi_category, calculate_bmi, form_grade, summarize_form, workout_intensity
from app.services.form_analysis import FormAnalyzer
from app.services.nutrition_advisor import NutritionAdvisor
from app.services.physique_analyzer import PhysiqueAnalyzer
from app.services.progress_tracker import build_form_report, compare_physique
from app.services.recovery_errors import RecoveryError
from app.services.recovery_pipeline import Domain, recover_record, request_from_context
from app.services.workout_planner import WorkoutPlanner


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["analysis"])

T = TypeVar("T")


class PhysiqueComparisonRequest(BaseModel):
    current: PhysiqueAnalysis
    previous: PhysiqueAnalysis


class FormReportRequest(BaseModel):
    analyses: list[FormAnalysis] = Field(min_length=1)


def get_physique_analyzer() -> PhysiqueAnalyzer:
    return PhysiqueAnalyzer()


def get_workout_planner() -> WorkoutPlanner:
    return WorkoutPlanner()


def get_nutrition_advisor() -> NutritionAdvisor:
    return NutritionAdvisor()


def get_form_analyzer() -> FormAnalyzer:
    return FormAnalyzer()


def transport_detail(err: TransportError) -> dict[str, Any]:
    return {
        "error": "provider_unavailable",
        "provider": err.provider,
        "message": err.message,
        "status_code": err.status_code,
    }


async def _guarded(domain: Domain, pending: Awaitable[T]) -> T:
    """Await an analysis and map its failures onto HTTP errors."""

    try:
        return await pending
    except RecoveryError as err:
        logger.warning("%s analysis returned no recoverable payload: %s", domain.value, err.message)
        raise HTTPException(status_code=502, detail=err.to_detail())
    except TransportError as err:
        logger.warning("%s analysis provider call failed: %s", domain.value, err.message)
        raise HTTPException(status_code=503, detail=transport_detail(err))
    except Exception:
        logger.exception("Failed to run %s analysis", domain.value)
        raise HTTPException(status_code=500, detail=f"Failed to run {domain.value} analysis")


@router.post("/physique", response_model=PhysiqueAnalysis)
async def analyze_physique(
    payload: PhysiqueAnalysisRequest,
    analyzer: PhysiqueAnalyzer = Depends(get_physique_analyzer),
):
    """Assess one pose photo."""

    logger.info("Handling physique analysis | pose=%s", payload.pose_type)
    return await _guarded(Domain.PHYSIQUE, analyzer.analyze(payload))


@router.post("/physique/batch")
async def analyze_physique_batch(
    payload: PhysiqueBatchRequest,
    analyzer: PhysiqueAnalyzer = Depends(get_physique_analyzer),
) -> dict[str, Any]:
    """
    Assess several poses concurrently.

    Returns:
        dict: ``results`` with one entry per pose in request order, each
        carrying either ``analysis`` or an ``error`` detail.
    """

    logger.info("Handling batch physique analysis | poses=%d", len(payload.poses))
    outcomes = await analyzer.analyze_poses(payload.poses)

    results = []
    for pose, outcome in zip(payload.poses, outcomes):
        entry: dict[str, Any] = {"poseType": pose.pose_type, "analysis": None, "error": None}
        if isinstance(outcome, PhysiqueAnalysis):
            entry["analysis"] = outcome.model_dump(mode="json", by_alias=True)
        elif isinstance(outcome, RecoveryError):
            entry["error"] = outcome.to_detail()
        elif isinstance(outcome, TransportError):
            entry["error"] = transport_detail(outcome)
        else:
            logger.error("Pose %s failed unexpectedly: %r", pose.pose_type, outcome)
            entry["error"] = {"error": "internal_error", "message": "Failed to run physique analysis"}
        results.append(entry)
    return {"results": results}


@router.post("/physique/compare")
async def compare_physique_progress(payload: PhysiqueComparisonRequest) -> dict[str, Any]:
    """Deltas between two physique assessments."""

    return compare_physique(payload.current, payload.previous)


@router.post("/workout", response_model=WorkoutPlan)
async def create_workout_plan(
    payload: WorkoutPlanRequest,
    planner: WorkoutPlanner = Depends(get_workout_planner),
):
    logger.info("Handling workout plan | goal=%s days=%d", payload.goal, payload.days_per_week)
    return await _guarded(Domain.WORKOUT, planner.analyze(payload))


@router.post("/nutrition", response_model=NutritionPlan)
async def create_nutrition_plan(
    payload: NutritionRequest,
    advisor: NutritionAdvisor = Depends(get_nutrition_advisor),
):
    logger.info("Handling nutrition plan | goal=%s", payload.goal)
    return await _guarded(Domain.NUTRITION, advisor.analyze(payload))


@router.post("/form")
async def analyze_form(
    payload: FormAnalysisRequest,
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
) -> dict[str, Any]:
    """Assess exercise form; the record is returned with its letter grade and summary."""

    logger.info("Handling form analysis | exercise=%s", payload.exercise)
    analysis = await _guarded(Domain.FORM, analyzer.analyze(payload))
    body = analysis.model_dump(mode="json", by_alias=True)
    body["grade"] = form_grade(analysis.overall_score)
    body["summary"] = summarize_form(analysis)
    return body


@router.post("/form/report")
async def create_form_report(payload: FormReportRequest) -> dict[str, Any]:
    report = build_form_report(payload.analyses)
    report["summary"]["grade"] = form_grade(report["summary"]["average_score"])
    return report


@router.get("/metrics/bmi")
async def get_bmi(
    weight: float = Query(gt=0, description="kg"),
    height: float = Query(gt=0, description="cm"),
) -> dict[str, Any]:
    bmi = calculate_bmi(weight, height)
    return {"bmi": bmi, "category": bmi_category(bmi)}


@router.get("/metrics/intensity")
async def get_workout_intensity(
    sets: int = Query(ge=1),
    reps: str = Query(min_length=1),
) -> dict[str, Any]:
    return {"sets": sets, "reps": reps, "intensity": workout_intensity(sets, reps)}


@router.post("/recover/{domain}")
async def recover_raw_response(domain: Domain, payload: RawRecoveryRequest) -> dict[str, Any]:
    """
    Run the recovery pipeline over a saved provider response.

    No provider call is made. ``context`` carries the same fields as the
    domain's analysis request and only feeds normalizer defaults.
    """

    try:
        request = request_from_context(domain, payload.context)
    except ValidationError as err:
        errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in err.errors()]
        raise HTTPException(status_code=422, detail=errors)

    try:
        record = recover_record(payload.raw_text, domain, request, get_settings().diagnostic_prefix_chars)
    except RecoveryError as err:
        logger.warning("Offline %s recovery failed: %s", domain.value, err.message)
        raise HTTPException(status_code=502, detail=err.to_detail())
    return record.model_dump(mode="json", by_alias=True)
