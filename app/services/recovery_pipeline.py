"""Locate -> repair -> normalize pipeline shared by every domain orchestrator."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Mapping

from pydantic import BaseModel

from app.models.records import DomainRecord
from app.models.schemas import (
    FormAnalysisRequest,
    NutritionRequest,
    PhysiqueAnalysisRequest,
    WorkoutPlanRequest,
)
from app.normalizers.form import normalize_form_analysis
from app.normalizers.nutrition import normalize_nutrition_plan
from app.normalizers.physique import normalize_physique_analysis
from app.normalizers.workout import normalize_workout_plan
from app.services.json_repair import GenericValue, attempt_repairs
from app.services.payload_locator import locate
from app.services.recovery_errors import DEFAULT_PREFIX_CHARS, RecoveryError


logger = logging.getLogger(__name__)


class Domain(str, Enum):
    """Which schema normalizer a recovered tree is mapped onto."""

    PHYSIQUE = "physique"
    WORKOUT = "workout"
    NUTRITION = "nutrition"
    FORM = "form"


REQUEST_MODELS: dict[Domain, type[BaseModel]] = {
    Domain.PHYSIQUE: PhysiqueAnalysisRequest,
    Domain.WORKOUT: WorkoutPlanRequest,
    Domain.NUTRITION: NutritionRequest,
    Domain.FORM: FormAnalysisRequest,
}


def _physique(tree: GenericValue, request: Any) -> DomainRecord:
    pose_type = request.pose_type if isinstance(request, PhysiqueAnalysisRequest) else "front"
    return normalize_physique_analysis(tree, pose_type=pose_type)


def _workout(tree: GenericValue, request: Any) -> DomainRecord:
    return normalize_workout_plan(tree, request if isinstance(request, WorkoutPlanRequest) else None)


def _nutrition(tree: GenericValue, request: Any) -> DomainRecord:
    return normalize_nutrition_plan(tree, request if isinstance(request, NutritionRequest) else None)


def _form(tree: GenericValue, request: Any) -> DomainRecord:
    return normalize_form_analysis(tree, request if isinstance(request, FormAnalysisRequest) else None)


NORMALIZERS: dict[Domain, Callable[[GenericValue, Any], DomainRecord]] = {
    Domain.PHYSIQUE: _physique,
    Domain.WORKOUT: _workout,
    Domain.NUTRITION: _nutrition,
    Domain.FORM: _form,
}


def recover_tree(raw: str, prefix_chars: int = DEFAULT_PREFIX_CHARS) -> GenericValue:
    """Locate the payload in ``raw`` and repair it into a generic tree.

    Raises :class:`NoPayloadFound` or :class:`Unparseable`; no record is
    synthesised when no tree could be recovered.
    """

    try:
        span = locate(raw, prefix_chars)
        outcome = attempt_repairs(span.extract(raw), prefix_chars)
    except RecoveryError as err:
        logger.warning("Payload recovery failed (%s): %s | prefix=%r", err.kind, err.message, err.raw_prefix)
        raise
    if outcome.step_count:
        logger.debug("Recovered %s payload after %d repair steps", span.kind.value, outcome.step_count)
    return outcome.value


def request_from_context(domain: Domain, context: Mapping[str, Any] | None) -> BaseModel | None:
    """Build the domain request model from a loose context mapping.

    Invalid context raises pydantic's ``ValidationError``. An empty context
    yields ``None`` so the normalizer falls back to its own defaults.
    """

    if not context:
        return None
    return REQUEST_MODELS[domain].model_validate(dict(context))


def normalize_tree(tree: GenericValue, domain: Domain, request: Any = None) -> DomainRecord:
    return NORMALIZERS[Domain(domain)](tree, request)


def recover_record(
    raw: str,
    domain: Domain,
    request: Any = None,
    prefix_chars: int = DEFAULT_PREFIX_CHARS,
) -> DomainRecord:
    """Run the full pipeline over one raw provider response."""

    tree = recover_tree(raw, prefix_chars)
    record = normalize_tree(tree, domain, request)
    logger.debug("Normalized %s record", Domain(domain).value)
    return record
