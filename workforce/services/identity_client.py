# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the identity/session service (organization plugin endpoints)."""
from typing import Any

from workforce.core.errors import IdentityServiceError
from workforce.models.domain import OrgContext, Role
from workforce.services.upstream import UpstreamClient

ORG_PREFIX = "/api/auth/organization"


class IdentityClient(UpstreamClient):
    service_label = "identity-service"
    error_class = IdentityServiceError

    async def get_session(self, ctx: OrgContext) -> Any:
        return await self._get("/api/auth/get-session", "get_session", ctx)

    async def get_full_organization(self, ctx: OrgContext) -> Any:
        return await self._get(
            f"{ORG_PREFIX}/get-full-organization", "get_full_organization", ctx,
            params={"organizationId": ctx.organization_id},
        )

    async def list_members(self, ctx: OrgContext) -> Any:
        return await self._get(
            f"{ORG_PREFIX}/list-members", "list_members", ctx,
            params={"organizationId": ctx.organization_id},
        )

    async def list_invitations(self, ctx: OrgContext) -> Any:
        return await self._get(
            f"{ORG_PREFIX}/list-invitations", "list_invitations", ctx,
            params={"organizationId": ctx.organization_id},
        )

    async def remove_member(self, ctx: OrgContext, member_id_or_email: str) -> Any:
        return await self._post(
            f"{ORG_PREFIX}/remove-member", "remove_member", ctx,
            json={
                "memberIdOrEmail": member_id_or_email,
                "organizationId": ctx.organization_id,
            },
        )

    async def update_member_role(self, ctx: OrgContext, member_id: str, role: Role) -> Any:
        return await self._post(
            f"{ORG_PREFIX}/update-member-role", "update_member_role", ctx,
            json={
                "memberId": member_id,
                "role": Role(role).value,
                "organizationId": ctx.organization_id,
            },
        )

    async def invite_member(self, ctx: OrgContext, email: str, role: str) -> Any:
        return await self._post(
            f"{ORG_PREFIX}/invite-member", "invite_member", ctx,
            json={
                "email": email,
                "role": role,
                "organizationId": ctx.organization_id,
            },
        )

    async def cancel_invitation(self, ctx: OrgContext, invitation_id: str) -> Any:
        return await self._post(
            f"{ORG_PREFIX}/cancel-invitation", "cancel_invitation", ctx,
            json={"invitationId": invitation_id},
        )
