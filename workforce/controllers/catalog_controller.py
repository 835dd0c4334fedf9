# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Read-only shift and geofence catalogs of the organization.
"""

from fastapi import APIRouter, Depends, HTTPException

from workforce.core.dependencies import get_org_context, get_refresh_pipeline
from workforce.core.errors import ServiceError
from workforce.models.domain import Geofence, OrgContext, Shift
from workforce.services.refresh_pipeline import MembershipRefreshPipeline

router = APIRouter(prefix="/api/v1", tags=["Catalog"])


@router.get("/shifts", response_model=list[Shift])
async def list_shifts(
    ctx: OrgContext = Depends(get_org_context),
    pipeline: MembershipRefreshPipeline = Depends(get_refresh_pipeline),
):
    try:
        return await pipeline.list_shifts(ctx)
    except ServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/geofences", response_model=list[Geofence])
async def list_geofences(
    ctx: OrgContext = Depends(get_org_context),
    pipeline: MembershipRefreshPipeline = Depends(get_refresh_pipeline),
):
    try:
        return await pipeline.list_geofences(ctx)
    except ServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
