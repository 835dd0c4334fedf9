# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Acting user's effective role in the requested organization.
Session and full-organization payloads are fetched concurrently; either may
fail without blinding the other.
"""

import asyncio

from workforce.core.logging import get_logger
from workforce.models.domain import OrgContext, Role
from workforce.services.identity_client import IdentityClient
from workforce.services.role_resolver import (
    collect_session_role_hints,
    effective_role,
    role_from_member_list,
)

logger = get_logger(__name__)

MANAGER_ROLES = frozenset({Role.OWNER, Role.ADMIN})


async def load_actor_role(identity: IdentityClient, ctx: OrgContext) -> Role:
    session, organization = await asyncio.gather(
        identity.get_session(ctx),
        identity.get_full_organization(ctx),
        return_exceptions=True,
    )
    for label, result in (("session", session), ("organization", organization)):
        if isinstance(result, Exception):
            logger.warning(
                "Actor context lookup failed: org=%s, source=%s, error=%s",
                ctx.organization_id, label, result,
            )
        elif isinstance(result, BaseException):
            raise result

    organization = organization if isinstance(organization, dict) else {}
    session = session if isinstance(session, dict) else {}
    user = session.get("user") if isinstance(session.get("user"), dict) else {}

    # Membership record first, then organization-scoped, then session hints.
    hints = [role_from_member_list(organization.get("members"), user.get("id"))]
    hints += collect_session_role_hints(None, organization, ctx.organization_id)
    hints += collect_session_role_hints(session, None, ctx.organization_id)
    return effective_role(hints)


def can_manage(role: Role) -> bool:
    return role in MANAGER_ROLES
