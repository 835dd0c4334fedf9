# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Invitation endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from workforce.controllers.members_controller import batch_response
from workforce.core.dependencies import (
    get_bulk_orchestrator,
    get_invitation_service,
    get_refresh_pipeline,
    require_manager,
)
from workforce.core.errors import PreconditionError
from workforce.models.domain import BulkAction, OrgContext
from workforce.models.outcomes import BatchOutcome, CallOutcome
from workforce.schemas.members import InvitationListResponse, InviteRequest
from workforce.services.bulk_orchestrator import BulkOrchestrator
from workforce.services.invitation_service import InvitationService
from workforce.services.notifier import PresetConfirmation
from workforce.services.refresh_pipeline import MembershipRefreshPipeline

router = APIRouter(prefix="/api/v1", tags=["Invitations"])


@router.get("/invitations", response_model=InvitationListResponse)
async def list_invitations(
    ctx: OrgContext = Depends(require_manager),
    pipeline: MembershipRefreshPipeline = Depends(get_refresh_pipeline),
):
    """Pending invitations from the current view."""
    view = await pipeline.current_view(ctx)
    return InvitationListResponse(
        invitations=view.invitations, error=view.errors.get("invitations"),
    )


@router.post("/invitations", status_code=201, response_model=CallOutcome)
async def invite_member(
    payload: InviteRequest,
    ctx: OrgContext = Depends(require_manager),
    service: InvitationService = Depends(get_invitation_service),
):
    try:
        outcome = await service.invite_member(ctx, payload.email, payload.role)
    except PreconditionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not outcome.success:
        return JSONResponse(status_code=502, content=outcome.model_dump(mode="json"))
    return outcome


@router.delete("/invitations/{invitation_id}", response_model=BatchOutcome)
async def cancel_invitation(
    invitation_id: str,
    confirm: bool = Query(default=False),
    ctx: OrgContext = Depends(require_manager),
    orchestrator: BulkOrchestrator = Depends(get_bulk_orchestrator),
):
    """Cancel one pending invitation."""
    outcome = await orchestrator.apply_references(
        ctx, BulkAction.REMOVE, PresetConfirmation(confirm), invitation_ids=[invitation_id],
    )
    return batch_response(outcome)
