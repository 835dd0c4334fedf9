# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the resource service (shifts, schedules, geofences)."""
from typing import Any

from workforce.core.errors import ResourceServiceError
from workforce.core.logging import get_logger
from workforce.models.domain import OrgContext
from workforce.services.upstream import UpstreamClient

logger = get_logger(__name__)


class ResourceClient(UpstreamClient):
    service_label = "resource-service"
    error_class = ResourceServiceError

    # ── Reads ──

    async def fetch_shifts(self, ctx: OrgContext) -> Any:
        return await self._get("/schedules/shifts", "fetch_shifts", ctx)

    async def fetch_geofences(self, ctx: OrgContext) -> Any:
        return await self._get(
            "/geofence/get-by-organization", "fetch_geofences", ctx,
            params={"id": ctx.organization_id},
        )

    async def fetch_user_schedules(self, ctx: OrgContext, user_id: str) -> Any:
        return await self._get(f"/schedules/user/{user_id}", "fetch_user_schedules", ctx)

    async def fetch_user_geofences(self, ctx: OrgContext, user_id: str) -> Any:
        return await self._get(
            "/user-geofence/user-geofences", "fetch_user_geofences", ctx,
            params={"user_id": user_id},
        )

    # ── Writes ──

    async def assign_shift(self, ctx: OrgContext, payload: dict[str, Any]) -> Any:
        return await self._post("/schedules/assign", "assign_shift", ctx, json=payload)

    async def assign_geofences(self, ctx: OrgContext, payload: dict[str, Any]) -> Any:
        return await self._post("/user-geofence/assign", "assign_geofences", ctx, json=payload)

    async def remove_geofence(self, ctx: OrgContext, payload: dict[str, Any]) -> bool:
        """Unlink one geofence. Returns False when the link was already absent."""
        resp = await self._request(
            "POST", "/user-geofence/remove", "remove_geofence", ctx,
            json=payload, accept=(404,),
        )
        if resp.status_code == 404:
            logger.info(
                "Geofence link already absent: user=%s, geofence=%s",
                payload.get("user_id"), payload.get("geofence_id"),
            )
            return False
        return True

    async def remove_all_geofences(self, ctx: OrgContext, user_id: str) -> Any:
        return await self._post(
            "/user-geofence/remove-all", "remove_all_geofences", ctx,
            json={"user_id": user_id},
        )
