# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Bulk mutation orchestration.

A selection of members and invitations is partitioned by the action that
applies to each item, preconditions are checked before any network call,
and every applicable operation is then issued concurrently. The batch waits
for all operations to settle, reports one aggregate outcome, and always
ends with a refresh from the source of truth.
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, NamedTuple, Optional, Union

from workforce.core.errors import PreconditionError
from workforce.core.logging import get_logger
from workforce.metrics.prometheus import BATCH_OPERATIONS, BATCHES_TOTAL
from workforce.models.domain import (
    BulkAction,
    Invitation,
    Member,
    MemberStatus,
    MemberView,
    OrgContext,
    Role,
)
from workforce.models.outcomes import BatchOutcome, BatchStatus, SkippedItem
from workforce.repositories.view_repository import MemberViewRepository
from workforce.services.identity_client import IdentityClient
from workforce.services.notifier import Confirmation, Notifier
from workforce.services.refresh_pipeline import MembershipRefreshPipeline
from workforce.services.role_resolver import normalize_role

logger = get_logger(__name__)

SelectionItem = Union[Member, Invitation]

NO_APPLICABLE_ACTION = "no applicable action"
ROLE_UNCHANGED = "role unchanged"
NOT_FOUND = "not found"

NO_APPLICABLE_ACTION_MESSAGE = "No applicable action for the selected records."
ROLE_UNCHANGED_MESSAGE = "Selected members already have that role."

BATCH_FAILED_MESSAGE = "An error occurred. Please try again."
BATCH_SETTLED_MESSAGE = "Bulk actions completed"


class Operation(NamedTuple):
    name: str
    target: str
    member_id: Optional[str]
    call: Callable[[], Awaitable[Any]]


class BatchPlan(NamedTuple):
    operations: list[Operation]
    skipped: list[SkippedItem]


def _skip(item: SelectionItem, reason: str) -> SkippedItem:
    if isinstance(item, Invitation):
        return SkippedItem(kind="invitation", reference=item.id or item.email, reason=reason)
    return SkippedItem(kind="member", reference=item.identifier, reason=reason)


class BulkOrchestrator:
    """Partition, check, fan out, settle, refresh."""

    def __init__(
        self,
        identity: IdentityClient,
        pipeline: MembershipRefreshPipeline,
        views: MemberViewRepository,
        notifier: Notifier,
    ) -> None:
        self._identity = identity
        self._pipeline = pipeline
        self._views = views
        self._notifier = notifier

    # ── Selection helpers ──

    @staticmethod
    def resolve_selection(
        view: MemberView,
        member_ids: Iterable[str] = (),
        invitation_ids: Iterable[str] = (),
    ) -> tuple[list[SelectionItem], list[SkippedItem]]:
        """Map client references onto the server-side view; unknown ones are skipped."""
        selection: list[SelectionItem] = []
        skipped: list[SkippedItem] = []
        for reference in dict.fromkeys(member_ids):
            member = view.find_member(reference)
            if member is None:
                skipped.append(SkippedItem(kind="member", reference=reference, reason=NOT_FOUND))
            else:
                selection.append(member)
        for reference in dict.fromkeys(invitation_ids):
            invitation = view.find_invitation(reference)
            if invitation is None:
                skipped.append(
                    SkippedItem(kind="invitation", reference=reference, reason=NOT_FOUND)
                )
            else:
                selection.append(invitation)
        return selection, skipped

    @staticmethod
    def collect_emails(selection: Iterable[SelectionItem]) -> list[str]:
        """Unique non-empty emails, in selection order."""
        return list(dict.fromkeys(item.email for item in selection if item.email))

    # ── Planning (no network) ──

    def plan(
        self,
        ctx: OrgContext,
        action: BulkAction,
        selection: list[SelectionItem],
        target_role: Optional[Any] = None,
        skipped: Iterable[SkippedItem] = (),
    ) -> BatchPlan:
        """Partition the selection. Raises PreconditionError before any side effect."""
        skipped = list(skipped)
        if not selection and not skipped:
            raise PreconditionError("Select at least one record.")

        target: Optional[Role] = None
        if action is BulkAction.CHANGE_ROLE:
            target = normalize_role(target_role)
            if target not in (Role.ADMIN, Role.MEMBER):
                raise PreconditionError("Target role must be 'admin' or 'member'.")

        operations: list[Operation] = []
        planned_from = len(skipped)
        for item in selection:
            if isinstance(item, Invitation):
                operation = self._invitation_operation(ctx, action, item)
            else:
                operation = self._member_operation(ctx, action, item, target)
            if isinstance(operation, Operation):
                operations.append(operation)
            else:
                skipped.append(_skip(item, operation))

        if not operations:
            reasons = {item.reason for item in skipped[planned_from:]}
            if action is BulkAction.CHANGE_ROLE and reasons == {ROLE_UNCHANGED}:
                raise PreconditionError(ROLE_UNCHANGED_MESSAGE, skipped=skipped)
            raise PreconditionError(NO_APPLICABLE_ACTION_MESSAGE, skipped=skipped)
        return BatchPlan(operations, skipped)

    def _invitation_operation(
        self, ctx: OrgContext, action: BulkAction, invitation: Invitation
    ) -> Union[Operation, str]:
        if action is not BulkAction.REMOVE or invitation.is_terminal or not invitation.id:
            return NO_APPLICABLE_ACTION
        invitation_id = invitation.id
        return Operation(
            name="cancel_invitation",
            target=invitation_id,
            member_id=None,
            call=lambda: self._identity.cancel_invitation(ctx, invitation_id),
        )

    def _member_operation(
        self,
        ctx: OrgContext,
        action: BulkAction,
        member: Member,
        target: Optional[Role],
    ) -> Union[Operation, str]:
        if member.status is not MemberStatus.ACTIVE:
            return NO_APPLICABLE_ACTION

        if action is BulkAction.REMOVE:
            if not member.identifier:
                return NO_APPLICABLE_ACTION
            if member.role is Role.OWNER:
                raise PreconditionError("The organization owner cannot be removed.")
            identifier = member.identifier
            return Operation(
                name="remove_member",
                target=identifier,
                member_id=member.id or None,
                call=lambda: self._identity.remove_member(ctx, identifier),
            )

        if not member.id:
            return NO_APPLICABLE_ACTION
        if member.role is Role.OWNER:
            raise PreconditionError("The organization owner's role cannot be changed.")
        if member.role is target:
            return ROLE_UNCHANGED
        member_id = member.id
        return Operation(
            name="update_member_role",
            target=member_id,
            member_id=member_id,
            call=lambda: self._identity.update_member_role(ctx, member_id, target),
        )

    # ── Execution ──

    async def apply(
        self,
        ctx: OrgContext,
        action: BulkAction,
        selection: list[SelectionItem],
        confirmation: Confirmation,
        target_role: Optional[Any] = None,
        skipped: Iterable[SkippedItem] = (),
    ) -> BatchOutcome:
        """Run one batch. Returns a settled, failed or rejected outcome."""
        try:
            plan = self.plan(ctx, action, selection, target_role, skipped)
        except PreconditionError as exc:
            return await self._rejected(ctx, action, str(exc), exc.skipped or list(skipped))

        prompt = (
            f"Change the role of {len(plan.operations)} member(s) to '{normalize_role(target_role).value}'?"
            if action is BulkAction.CHANGE_ROLE
            else f"Process {len(plan.operations)} record(s)? This action cannot be undone."
        )
        if not await confirmation.confirm(prompt):
            return await self._rejected(ctx, action, "Confirmation declined.", plan.skipped)

        results = await asyncio.gather(
            *(operation.call() for operation in plan.operations),
            return_exceptions=True,
        )

        failures = 0
        for operation, result in zip(plan.operations, results):
            if isinstance(result, Exception):
                failures += 1
                BATCH_OPERATIONS.labels(operation=operation.name, outcome="failure").inc()
                logger.warning(
                    "Batch operation failed: org=%s, operation=%s, target=%s, error=%s",
                    ctx.organization_id, operation.name, operation.target, result,
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                BATCH_OPERATIONS.labels(operation=operation.name, outcome="success").inc()
            if operation.member_id:
                self._views.invalidate(ctx.organization_id, operation.member_id)

        # Unconditional, even after partial failure.
        view = await self._pipeline.refresh(ctx)

        status = BatchStatus.FAILED if failures else BatchStatus.SETTLED
        message = BATCH_FAILED_MESSAGE if failures else BATCH_SETTLED_MESSAGE
        BATCHES_TOTAL.labels(action=action.value, outcome=status.value).inc()
        logger.info(
            "Batch settled: org=%s, action=%s, attempted=%d, failed=%d, skipped=%d",
            ctx.organization_id, action.value, len(plan.operations), failures, len(plan.skipped),
        )
        await self._notifier.notify("error" if failures else "success", message)
        return BatchOutcome(
            status=status,
            action=action,
            attempted=len(plan.operations),
            skipped=plan.skipped,
            message=message,
            view=view,
        )

    async def apply_references(
        self,
        ctx: OrgContext,
        action: BulkAction,
        confirmation: Confirmation,
        member_ids: Iterable[str] = (),
        invitation_ids: Iterable[str] = (),
        target_role: Optional[Any] = None,
    ) -> BatchOutcome:
        """Resolve client references against the current view, then apply."""
        view = await self._pipeline.current_view(ctx)
        selection, skipped = self.resolve_selection(view, member_ids, invitation_ids)
        return await self.apply(ctx, action, selection, confirmation, target_role, skipped)

    async def _rejected(
        self,
        ctx: OrgContext,
        action: BulkAction,
        reason: str,
        skipped: list[SkippedItem],
    ) -> BatchOutcome:
        BATCHES_TOTAL.labels(action=action.value, outcome=BatchStatus.REJECTED.value).inc()
        logger.info(
            "Batch rejected: org=%s, action=%s, reason=%s",
            ctx.organization_id, action.value, reason,
        )
        await self._notifier.notify("warning", reason)
        return BatchOutcome(
            status=BatchStatus.REJECTED,
            action=action,
            skipped=skipped,
            message=reason,
        )
