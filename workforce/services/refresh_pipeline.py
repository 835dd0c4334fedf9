# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Membership refresh pipeline.
Builds the enriched member view: member list, invitation list and shift
catalog are fetched concurrently, then every member is enriched with its
active schedule and geofence links in a bounded concurrent fan-out.
A failure on one side or for one member never blinds the rest of the view.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from workforce.core.config import settings
from workforce.core.logging import get_logger
from workforce.metrics.prometheus import (
    ENRICHMENT_FAILURES,
    MEMBERS_IN_VIEW,
    PENDING_INVITATIONS,
    REFRESH_DURATION,
)
from workforce.models.domain import (
    EnrichedMember,
    Geofence,
    InvitationStatus,
    Member,
    MemberView,
    OrgContext,
    Shift,
    ShiftSummary,
)
from workforce.repositories.view_repository import MemberViewRepository
from workforce.services.identity_client import IdentityClient
from workforce.services.payloads import (
    decode_assignments,
    decode_geofences,
    decode_invitations,
    decode_members,
    decode_shifts,
    decode_user_geofences,
)
from workforce.services.resource_client import ResourceClient
from workforce.services.schedule_resolver import resolve_active_assignment

logger = get_logger(__name__)

LIST_ERROR_MESSAGES: dict[str, str] = {
    "members": "Could not load members. Please try again.",
    "invitations": "Could not load invitations. Please try again.",
    "shifts": "Could not load shifts. Shift names may be missing.",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MembershipRefreshPipeline:
    """Composes listing and per-member enrichment into one consistent view."""

    def __init__(
        self,
        identity: IdentityClient,
        resources: ResourceClient,
        views: MemberViewRepository,
        clock: Callable[[], datetime] = utcnow,
        concurrency: Optional[int] = None,
    ) -> None:
        self._identity = identity
        self._resources = resources
        self._views = views
        self._clock = clock
        self._concurrency = max(1, concurrency or settings.ENRICHMENT_CONCURRENCY)

    # ── Full refresh ──

    async def refresh(self, ctx: OrgContext) -> MemberView:
        """Recompute the whole view from the source of truth and store it."""
        org_id = ctx.organization_id
        resolved = self._views.stale_members(org_id)
        with REFRESH_DURATION.time():
            members_raw, invitations_raw, shifts_raw = await asyncio.gather(
                self._identity.list_members(ctx),
                self._identity.list_invitations(ctx),
                self._resources.fetch_shifts(ctx),
                return_exceptions=True,
            )
            errors: dict[str, str] = {}
            members = self._settle(
                ctx, "members", members_raw, errors,
                lambda payload: decode_members(payload, org_id),
            )
            invitations = self._settle(
                ctx, "invitations", invitations_raw, errors, decode_invitations,
            )
            shifts = self._settle(ctx, "shifts", shifts_raw, errors, decode_shifts)

            pending = [i for i in invitations if i.status is InvitationStatus.PENDING]
            enriched = await self._enrich_all(
                ctx, members, {s.id: s for s in shifts}, self._clock(),
            )
            view = MemberView(
                organization_id=org_id,
                members=enriched,
                invitations=pending,
                errors=errors,
                refreshed_at=self._clock(),
            )

        self._views.replace(org_id, view, resolved=resolved)
        MEMBERS_IN_VIEW.set(len(view.members))
        PENDING_INVITATIONS.set(len(view.invitations))
        logger.info(
            "View refreshed: org=%s, members=%d, invitations=%d, errors=%s",
            org_id, len(view.members), len(view.invitations), sorted(errors),
        )
        return view

    # ── Cached read ──

    async def current_view(self, ctx: OrgContext) -> MemberView:
        """Cached view; members invalidated by mutations are re-enriched first."""
        org_id = ctx.organization_id
        view = self._views.get(org_id)
        if view is None:
            return await self.refresh(ctx)

        stale = self._views.stale_members(org_id)
        if not stale:
            return view

        targets = [_base_member(m) for m in view.members if m.id in stale]
        shifts = await self._shift_index(ctx)
        recomputed = {
            m.id: m for m in await self._enrich_all(ctx, targets, shifts, self._clock())
        }
        updated = view.model_copy(
            update={"members": [recomputed.get(m.id, m) for m in view.members]}
        )
        self._views.replace(org_id, updated, resolved=stale)
        logger.info("Re-enriched %d stale member(s): org=%s", len(recomputed), org_id)
        return updated

    # ── Catalogs ──

    async def list_shifts(self, ctx: OrgContext) -> list[Shift]:
        return decode_shifts(await self._resources.fetch_shifts(ctx))

    async def list_geofences(self, ctx: OrgContext) -> list[Geofence]:
        return decode_geofences(await self._resources.fetch_geofences(ctx))

    # ── Enrichment ──

    async def enrich_member(
        self,
        ctx: OrgContext,
        member: Member,
        shifts: dict[str, Shift],
        now: datetime,
    ) -> EnrichedMember:
        """Attach schedule and location data. Never raises; failed lookups stay absent."""
        fields: dict[str, Any] = member.model_dump()
        fields["is_current_user"] = bool(
            ctx.actor_email and member.email
            and member.email.lower() == ctx.actor_email.lower()
        )
        if not member.id:
            return EnrichedMember(**fields)

        schedules_raw, geofences_raw = await asyncio.gather(
            self._resources.fetch_user_schedules(ctx, member.id),
            self._resources.fetch_user_geofences(ctx, member.id),
            return_exceptions=True,
        )
        failed: list[str] = []

        if isinstance(schedules_raw, BaseException):
            self._enrichment_failed(member, "schedule", schedules_raw)
            failed.append("schedule")
        else:
            active = resolve_active_assignment(now, decode_assignments(schedules_raw))
            if active is not None:
                fields["active_assignment"] = active
                shift = shifts.get(active.shift_id)
                if shift is not None:
                    fields["shift"] = ShiftSummary(id=shift.id, name=shift.name, color=shift.color)

        if isinstance(geofences_raw, BaseException):
            self._enrichment_failed(member, "geofences", geofences_raw)
            failed.append("geofences")
        else:
            fields["geofences"] = decode_user_geofences(geofences_raw)

        fields["enrichment_errors"] = failed
        return EnrichedMember(**fields)

    async def _enrich_all(
        self,
        ctx: OrgContext,
        members: list[Member],
        shifts: dict[str, Shift],
        now: datetime,
    ) -> list[EnrichedMember]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded(member: Member) -> EnrichedMember:
            async with semaphore:
                return await self.enrich_member(ctx, member, shifts, now)

        return list(await asyncio.gather(*(bounded(m) for m in members)))

    # ── Internal ──

    async def _shift_index(self, ctx: OrgContext) -> dict[str, Shift]:
        try:
            shifts = await self.list_shifts(ctx)
        except Exception as exc:
            logger.warning("Shift catalog unavailable: org=%s, error=%s", ctx.organization_id, exc)
            return {}
        return {s.id: s for s in shifts}

    def _settle(
        self,
        ctx: OrgContext,
        side: str,
        result: Any,
        errors: dict[str, str],
        decode: Callable[[Any], list],
    ) -> list:
        if isinstance(result, Exception):
            errors[side] = LIST_ERROR_MESSAGES[side]
            logger.warning(
                "Refresh side failed: org=%s, side=%s, error=%s",
                ctx.organization_id, side, result,
            )
            return []
        if isinstance(result, BaseException):
            raise result
        try:
            return decode(result)
        except ValidationError as exc:
            errors[side] = LIST_ERROR_MESSAGES[side]
            logger.warning(
                "Refresh side undecodable: org=%s, side=%s, error=%s",
                ctx.organization_id, side, exc.errors()[:1],
            )
            return []

    @staticmethod
    def _enrichment_failed(member: Member, lookup: str, exc: BaseException) -> None:
        if not isinstance(exc, Exception):
            raise exc
        ENRICHMENT_FAILURES.labels(lookup=lookup).inc()
        logger.warning(
            "Enrichment lookup failed: member=%s, lookup=%s, error=%s",
            member.id, lookup, exc,
        )


def _base_member(member: EnrichedMember) -> Member:
    return Member(**member.model_dump(include=set(Member.model_fields)))
