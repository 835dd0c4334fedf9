# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Shift and location assignment for a single member.
Each call targets one member and one semantic change; a successful call
invalidates that member's cached enrichment so the next read recomputes it.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Optional

from workforce.core.errors import PreconditionError, ServiceError
from workforce.core.logging import get_logger
from workforce.metrics.prometheus import MUTATIONS_TOTAL
from workforce.models.domain import OrgContext
from workforce.models.outcomes import CallOutcome
from workforce.repositories.view_repository import MemberViewRepository
from workforce.services.notifier import Notifier
from workforce.services.resource_client import ResourceClient

logger = get_logger(__name__)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _iso(value: datetime) -> str:
    return _aware(value).astimezone(timezone.utc).isoformat()


class AssignmentMutator:
    """Append-only shift assignment and additive location linking."""

    def __init__(
        self,
        resources: ResourceClient,
        views: MemberViewRepository,
        notifier: Notifier,
    ) -> None:
        self._resources = resources
        self._views = views
        self._notifier = notifier

    # ── Shifts ──

    async def assign_shift(
        self,
        ctx: OrgContext,
        member_id: str,
        shift_id: str,
        effective_from: datetime,
        effective_until: Optional[datetime] = None,
    ) -> CallOutcome:
        """Append a new schedule assignment. Prior assignments are left untouched."""
        if not member_id:
            raise PreconditionError("Member id is required")
        if not shift_id:
            raise PreconditionError("Select a shift and a start date")
        if effective_until is not None and _aware(effective_until) < _aware(effective_from):
            raise PreconditionError("effective_until must not be earlier than effective_from")

        payload = {
            "user_id": member_id,
            "shift_id": shift_id,
            "effective_from": _iso(effective_from),
            "effective_until": _iso(effective_until) if effective_until else None,
        }
        return await self._run(
            ctx, "assign_shift", member_id,
            lambda: self._resources.assign_shift(ctx, payload),
            success_message="Shift assigned",
        )

    # ── Locations ──

    async def assign_locations(
        self,
        ctx: OrgContext,
        member_id: str,
        geofence_ids: Iterable[str] = (),
        assign_all: bool = False,
    ) -> CallOutcome:
        """
        Link geofences to a member. With assign_all the explicit ids are
        ignored and the whole catalog is linked. Existing links are kept.
        """
        if not member_id:
            raise PreconditionError("Member id is required")
        ids = list(dict.fromkeys(g for g in geofence_ids if g))
        if not assign_all and not ids:
            raise PreconditionError("Select at least one location")

        payload = {
            "user_id": member_id,
            "geofence_ids": None if assign_all else ids,
            "assign_all": assign_all,
        }
        return await self._run(
            ctx, "assign_locations", member_id,
            lambda: self._resources.assign_geofences(ctx, payload),
            success_message="Locations assigned",
        )

    async def remove_location(
        self, ctx: OrgContext, member_id: str, geofence_id: str
    ) -> CallOutcome:
        """Idempotent unlink: an already-absent link is a successful no-op."""
        if not member_id or not geofence_id:
            raise PreconditionError("Member id and geofence id are required")
        payload = {"user_id": member_id, "geofence_id": geofence_id}
        return await self._run(
            ctx, "remove_location", member_id,
            lambda: self._resources.remove_geofence(ctx, payload),
            success_message="Location removed",
        )

    async def remove_all_locations(self, ctx: OrgContext, member_id: str) -> CallOutcome:
        if not member_id:
            raise PreconditionError("Member id is required")
        return await self._run(
            ctx, "remove_all_locations", member_id,
            lambda: self._resources.remove_all_geofences(ctx, member_id),
            success_message="All locations removed",
        )

    # ── Internal ──

    async def _run(
        self,
        ctx: OrgContext,
        operation: str,
        member_id: str,
        call: Callable[[], Awaitable[object]],
        success_message: str,
    ) -> CallOutcome:
        try:
            await call()
        except ServiceError as exc:
            MUTATIONS_TOTAL.labels(operation=operation, outcome="failure").inc()
            logger.warning(
                "Mutation failed: org=%s, operation=%s, member=%s, error=%s",
                ctx.organization_id, operation, member_id, exc,
            )
            await self._notifier.notify("error", f"{operation} failed. Please try again.")
            return CallOutcome(
                success=False, operation=operation, target=member_id, reason=str(exc),
            )

        self._views.invalidate(ctx.organization_id, member_id)
        MUTATIONS_TOTAL.labels(operation=operation, outcome="success").inc()
        logger.info(
            "Mutation applied: org=%s, operation=%s, member=%s",
            ctx.organization_id, operation, member_id,
        )
        await self._notifier.notify("success", success_message)
        return CallOutcome(success=True, operation=operation, target=member_id)
