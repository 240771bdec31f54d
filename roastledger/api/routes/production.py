"""Roasting and blending endpoints."""

from fastapi import APIRouter, Depends, status

from roastledger.api.dependencies import (
    get_record_blend_use_case,
    get_record_roast_use_case,
    get_repos,
)
from roastledger.application.dto.converters import (
    blend_event_response,
    roast_event_response,
)
from roastledger.application.dto.requests import RecordBlendRequest, RecordRoastRequest
from roastledger.application.dto.responses import (
    BlendEventResponse,
    ErrorResponse,
    RecordBlendResponse,
    RecordRoastResponse,
    RoastEventResponse,
)
from roastledger.application.use_cases.record_blend import RecordBlendUseCase
from roastledger.application.use_cases.record_roast import RecordRoastUseCase
from roastledger.core.interfaces import Repositories

router = APIRouter(prefix="/api/production", tags=["production"])


@router.post(
    "/roasts",
    response_model=RecordRoastResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_roast(
    request: RecordRoastRequest,
    use_case: RecordRoastUseCase = Depends(get_record_roast_use_case),
) -> RecordRoastResponse:
    """Roast green beans into roasted stock."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/roasts", response_model=list[RoastEventResponse])
async def list_roasts(
    repos: Repositories = Depends(get_repos),
) -> list[RoastEventResponse]:
    roasts = await repos.roasts.list()
    return [roast_event_response(r) for r in roasts]


@router.get(
    "/roasts/{roast_event_id}",
    response_model=RoastEventResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_roast(
    roast_event_id: str,
    repos: Repositories = Depends(get_repos),
) -> RoastEventResponse:
    return roast_event_response(await repos.roasts.get(roast_event_id))


@router.post(
    "/blends",
    response_model=RecordBlendResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def record_blend(
    request: RecordBlendRequest,
    use_case: RecordBlendUseCase = Depends(get_record_blend_use_case),
) -> RecordBlendResponse:
    """Blend roasted stock into a new blend stock item."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/blends", response_model=list[BlendEventResponse])
async def list_blends(
    repos: Repositories = Depends(get_repos),
) -> list[BlendEventResponse]:
    blends = await repos.blends.list()
    return [blend_event_response(b) for b in blends]


@router.get(
    "/blends/{blend_event_id}",
    response_model=BlendEventResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_blend(
    blend_event_id: str,
    repos: Repositories = Depends(get_repos),
) -> BlendEventResponse:
    return blend_event_response(await repos.blends.get(blend_event_id))
