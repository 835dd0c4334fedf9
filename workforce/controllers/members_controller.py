# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Member listing and bulk mutation endpoints.
Thin HTTP layer — delegates ALL logic to the refresh pipeline and orchestrator.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from workforce.core.dependencies import (
    get_bulk_orchestrator,
    get_refresh_pipeline,
    require_manager,
)
from workforce.models.domain import BulkAction, MemberView, OrgContext
from workforce.models.outcomes import BatchOutcome, BatchStatus
from workforce.schemas.members import (
    BulkActionRequest,
    EmailCollectRequest,
    EmailCollectResponse,
    RoleChangeRequest,
)
from workforce.services.bulk_orchestrator import BulkOrchestrator
from workforce.services.notifier import PresetConfirmation
from workforce.services.refresh_pipeline import MembershipRefreshPipeline

router = APIRouter(prefix="/api/v1", tags=["Members"])

BATCH_HTTP_STATUS: dict[BatchStatus, int] = {
    BatchStatus.SETTLED: 200,
    BatchStatus.FAILED: 502,
    BatchStatus.REJECTED: 409,
}


def batch_response(outcome: BatchOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=BATCH_HTTP_STATUS[outcome.status],
        content=outcome.model_dump(mode="json"),
    )


@router.get("/members", response_model=MemberView)
async def list_members(
    refresh: bool = Query(default=False, description="Bypass the cached view"),
    ctx: OrgContext = Depends(require_manager),
    pipeline: MembershipRefreshPipeline = Depends(get_refresh_pipeline),
):
    """Enriched members and pending invitations of the organization."""
    if refresh:
        return await pipeline.refresh(ctx)
    return await pipeline.current_view(ctx)


@router.post("/members/bulk", response_model=BatchOutcome)
async def bulk_action(
    payload: BulkActionRequest,
    ctx: OrgContext = Depends(require_manager),
    orchestrator: BulkOrchestrator = Depends(get_bulk_orchestrator),
):
    """Apply one action to a selection of members and invitations."""
    outcome = await orchestrator.apply_references(
        ctx,
        payload.action,
        PresetConfirmation(payload.confirm),
        member_ids=payload.member_ids,
        invitation_ids=payload.invitation_ids,
        target_role=payload.target_role,
    )
    return batch_response(outcome)


@router.post("/members/bulk/emails", response_model=EmailCollectResponse)
async def collect_emails(
    payload: EmailCollectRequest,
    ctx: OrgContext = Depends(require_manager),
    pipeline: MembershipRefreshPipeline = Depends(get_refresh_pipeline),
    orchestrator: BulkOrchestrator = Depends(get_bulk_orchestrator),
):
    """Unique email addresses of the selection (for the caller's clipboard)."""
    view = await pipeline.current_view(ctx)
    selection, skipped = orchestrator.resolve_selection(
        view, payload.member_ids, payload.invitation_ids
    )
    return EmailCollectResponse(
        emails=orchestrator.collect_emails(selection), skipped=skipped
    )


@router.delete("/members/{member_ref}", response_model=BatchOutcome)
async def remove_member(
    member_ref: str,
    confirm: bool = Query(default=False),
    ctx: OrgContext = Depends(require_manager),
    orchestrator: BulkOrchestrator = Depends(get_bulk_orchestrator),
):
    """Remove one member, by id or email."""
    outcome = await orchestrator.apply_references(
        ctx, BulkAction.REMOVE, PresetConfirmation(confirm), member_ids=[member_ref],
    )
    return batch_response(outcome)


@router.put("/members/{member_id}/role", response_model=BatchOutcome)
async def change_member_role(
    member_id: str,
    payload: RoleChangeRequest,
    ctx: OrgContext = Depends(require_manager),
    orchestrator: BulkOrchestrator = Depends(get_bulk_orchestrator),
):
    outcome = await orchestrator.apply_references(
        ctx,
        BulkAction.CHANGE_ROLE,
        PresetConfirmation(payload.confirm),
        member_ids=[member_id],
        target_role=payload.role,
    )
    return batch_response(outcome)
