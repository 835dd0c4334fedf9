# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Shift and location assignment endpoints.
Thin HTTP layer — delegates ALL logic to AssignmentMutator.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from workforce.core.dependencies import get_assignment_mutator, require_manager
from workforce.core.errors import PreconditionError
from workforce.models.domain import OrgContext
from workforce.models.outcomes import CallOutcome
from workforce.schemas.members import LocationAssignRequest, ShiftAssignRequest
from workforce.services.assignment_mutator import AssignmentMutator

router = APIRouter(prefix="/api/v1", tags=["Assignments"])


def call_response(outcome: CallOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=200 if outcome.success else 502,
        content=outcome.model_dump(mode="json"),
    )


@router.post("/members/{member_id}/shift", response_model=CallOutcome)
async def assign_shift(
    member_id: str,
    payload: ShiftAssignRequest,
    ctx: OrgContext = Depends(require_manager),
    mutator: AssignmentMutator = Depends(get_assignment_mutator),
):
    """Append a shift assignment; the newest active one wins on read."""
    try:
        outcome = await mutator.assign_shift(
            ctx,
            member_id,
            payload.shift_id,
            payload.effective_from,
            payload.effective_until,
        )
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return call_response(outcome)


@router.post("/members/{member_id}/locations", response_model=CallOutcome)
async def assign_locations(
    member_id: str,
    payload: LocationAssignRequest,
    ctx: OrgContext = Depends(require_manager),
    mutator: AssignmentMutator = Depends(get_assignment_mutator),
):
    try:
        outcome = await mutator.assign_locations(
            ctx, member_id, payload.geofence_ids, assign_all=payload.assign_all,
        )
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return call_response(outcome)


@router.delete("/members/{member_id}/locations/{geofence_id}", response_model=CallOutcome)
async def remove_location(
    member_id: str,
    geofence_id: str,
    ctx: OrgContext = Depends(require_manager),
    mutator: AssignmentMutator = Depends(get_assignment_mutator),
):
    """Unlink one geofence. Unlinking an absent link succeeds."""
    try:
        outcome = await mutator.remove_location(ctx, member_id, geofence_id)
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return call_response(outcome)


@router.delete("/members/{member_id}/locations", response_model=CallOutcome)
async def remove_all_locations(
    member_id: str,
    ctx: OrgContext = Depends(require_manager),
    mutator: AssignmentMutator = Depends(get_assignment_mutator),
):
    try:
        outcome = await mutator.remove_all_locations(ctx, member_id)
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return call_response(outcome)
