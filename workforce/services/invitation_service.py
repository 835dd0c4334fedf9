# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Invitations — create through the identity service, then refresh.
Cancellation goes through the bulk orchestrator as a one-item batch.
"""

from workforce.core.errors import PreconditionError, ServiceError
from workforce.core.logging import get_logger
from workforce.metrics.prometheus import MUTATIONS_TOTAL
from workforce.models.domain import InvitableRole, OrgContext
from workforce.models.outcomes import CallOutcome
from workforce.services.identity_client import IdentityClient
from workforce.services.notifier import Notifier
from workforce.services.refresh_pipeline import MembershipRefreshPipeline

logger = get_logger(__name__)


class InvitationService:
    def __init__(
        self,
        identity: IdentityClient,
        pipeline: MembershipRefreshPipeline,
        notifier: Notifier,
    ) -> None:
        self._identity = identity
        self._pipeline = pipeline
        self._notifier = notifier

    async def invite_member(
        self,
        ctx: OrgContext,
        email: str,
        role: InvitableRole = InvitableRole.MEMBER,
    ) -> CallOutcome:
        email = (email or "").strip()
        if not email or "@" not in email:
            raise PreconditionError("A valid email address is required")
        role = InvitableRole(role)

        try:
            await self._identity.invite_member(ctx, email, role.value)
        except ServiceError as exc:
            MUTATIONS_TOTAL.labels(operation="invite_member", outcome="failure").inc()
            logger.warning(
                "Invitation failed: org=%s, email=%s, error=%s",
                ctx.organization_id, email, exc,
            )
            await self._notifier.notify("error", "Could not send the invitation. Please try again.")
            return CallOutcome(success=False, operation="invite_member", target=email, reason=str(exc))

        MUTATIONS_TOTAL.labels(operation="invite_member", outcome="success").inc()
        logger.info("Invitation sent: org=%s, email=%s, role=%s", ctx.organization_id, email, role.value)
        await self._pipeline.refresh(ctx)
        await self._notifier.notify("success", f"Invitation sent to {email}")
        return CallOutcome(success=True, operation="invite_member", target=email)
