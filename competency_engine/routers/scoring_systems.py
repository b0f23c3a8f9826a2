"""
Scoring Systems Router - Competency Assessment Engine
competency_engine/routers/scoring_systems.py

Tenant management of scoring systems (list, default, create, update,
set-default, delete), plus installation of the per-cycle weight vector used
at completion.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from competency_engine.core.dependencies import get_lifecycle, get_scoring_system_service
from competency_engine.models.assessment import ErrorResponse
from competency_engine.models.scoring_system import (
    CreateScoringSystemRequest,
    ScoringSystem,
    UpdateScoringSystemRequest,
    WeightConfig,
)
from competency_engine.services.lifecycle import AssessmentLifecycle
from competency_engine.services.scoring_systems import ScoringSystemService

router = APIRouter(prefix="/api/v1/scoring-systems", tags=["Scoring Systems"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Scoring system not found"}}
CONFLICT = {409: {"model": ErrorResponse, "description": "Change conflicts with the system's state"}}
INVALID = {422: {"model": ErrorResponse, "description": "Invalid scoring system configuration"}}


class ScoringSystemView(BaseModel):
    system: ScoringSystem
    model_info: Dict[str, Any]


def _view(service: ScoringSystemService, system: ScoringSystem) -> ScoringSystemView:
    return ScoringSystemView(system=system, model_info=service.registry.resolve(system.id).describe())


@router.get(
    "",
    response_model=List[ScoringSystemView],
    summary="List scoring systems",
    description="Default system first, then by name.",
)
def list_scoring_systems(
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> List[ScoringSystemView]:
    return [_view(service, s) for s in service.list_systems()]


@router.post(
    "",
    response_model=ScoringSystemView,
    status_code=status.HTTP_201_CREATED,
    responses={**CONFLICT, **INVALID},
    summary="Create a custom scoring system",
    description="New systems are active and not the default.",
)
def create_scoring_system(
    payload: CreateScoringSystemRequest,
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> ScoringSystemView:
    return _view(service, service.create(payload))


@router.get(
    "/default",
    response_model=ScoringSystemView,
    summary="Get the default scoring system",
    description="Falls back to the first active system by name when none is flagged.",
)
def get_default_scoring_system(
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> ScoringSystemView:
    return _view(service, service.default())


@router.get(
    "/{scoring_system_id}",
    response_model=ScoringSystemView,
    responses=NOT_FOUND,
    summary="Get scoring system by ID",
)
def get_scoring_system(
    scoring_system_id: str,
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> ScoringSystemView:
    return _view(service, service.get(scoring_system_id))


@router.put(
    "/{scoring_system_id}",
    response_model=ScoringSystemView,
    responses={**NOT_FOUND, **CONFLICT, **INVALID},
    summary="Update a scoring system",
    description="Omitted fields keep their value. Stored results are unaffected.",
)
def update_scoring_system(
    scoring_system_id: str,
    payload: UpdateScoringSystemRequest,
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> ScoringSystemView:
    return _view(service, service.update(scoring_system_id, payload))


@router.post(
    "/{scoring_system_id}/set-default",
    response_model=ScoringSystemView,
    responses={**NOT_FOUND, **INVALID},
    summary="Make a scoring system the default",
)
def set_default_scoring_system(
    scoring_system_id: str,
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> ScoringSystemView:
    return _view(service, service.set_default(scoring_system_id))


@router.delete(
    "/{scoring_system_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
    summary="Delete a custom scoring system",
    description="The default system, built-in systems and systems used by "
                "in-progress assessments cannot be deleted.",
)
def delete_scoring_system(
    scoring_system_id: str,
    service: ScoringSystemService = Depends(get_scoring_system_service),
) -> None:
    service.delete(scoring_system_id)


@router.get(
    "/{scoring_system_id}/weights",
    response_model=WeightConfig,
    responses=NOT_FOUND,
    summary="Get the weight configuration used at completion",
)
def get_weights(
    scoring_system_id: str,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> WeightConfig:
    lifecycle.registry.get_system(scoring_system_id)
    return lifecycle.weights_for(scoring_system_id)


@router.put(
    "/{scoring_system_id}/weights",
    response_model=WeightConfig,
    responses=NOT_FOUND,
    summary="Install a weight configuration",
    description="Applies to assessments completed after the call; stored results are unaffected.",
)
def put_weights(
    scoring_system_id: str,
    payload: WeightConfig,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> WeightConfig:
    lifecycle.set_weights(scoring_system_id, payload)
    return lifecycle.weights_for(scoring_system_id)
