# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire clients, repositories and services.
"""

from typing import Optional

import httpx
from fastapi import Depends, Header, HTTPException, Request

from workforce.core.config import settings
from workforce.core.logging import get_logger
from workforce.models.domain import OrgContext
from workforce.repositories.view_repository import MemberViewRepository
from workforce.services.access import can_manage, load_actor_role
from workforce.services.assignment_mutator import AssignmentMutator
from workforce.services.bulk_orchestrator import BulkOrchestrator
from workforce.services.identity_client import IdentityClient
from workforce.services.invitation_service import InvitationService
from workforce.services.notifier import NotificationClient
from workforce.services.refresh_pipeline import MembershipRefreshPipeline
from workforce.services.resource_client import ResourceClient

logger = get_logger(__name__)

FORWARDED_HEADERS: tuple[str, ...] = ("authorization", "cookie")

# ── Singleton repository instance (in-memory store) ──
_view_repo = MemberViewRepository()

# ── Client / service instances (built once the HTTP client exists) ──
_http_client: Optional[httpx.AsyncClient] = None
_identity_client: Optional[IdentityClient] = None
_resource_client: Optional[ResourceClient] = None
_notification_client: Optional[NotificationClient] = None
_refresh_pipeline: Optional[MembershipRefreshPipeline] = None
_assignment_mutator: Optional[AssignmentMutator] = None
_bulk_orchestrator: Optional[BulkOrchestrator] = None
_invitation_service: Optional[InvitationService] = None


def init_services(http_client: Optional[httpx.AsyncClient] = None) -> None:
    """Create the shared HTTP client and every service that depends on it."""
    global _http_client, _identity_client, _resource_client, _notification_client
    global _refresh_pipeline, _assignment_mutator, _bulk_orchestrator, _invitation_service

    _http_client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
    _identity_client = IdentityClient(_http_client, settings.IDENTITY_SERVICE_URL)
    _resource_client = ResourceClient(_http_client, settings.RESOURCE_SERVICE_URL)
    _notification_client = NotificationClient(_http_client)
    _refresh_pipeline = MembershipRefreshPipeline(
        identity=_identity_client,
        resources=_resource_client,
        views=_view_repo,
    )
    _assignment_mutator = AssignmentMutator(
        resources=_resource_client,
        views=_view_repo,
        notifier=_notification_client,
    )
    _bulk_orchestrator = BulkOrchestrator(
        identity=_identity_client,
        pipeline=_refresh_pipeline,
        views=_view_repo,
        notifier=_notification_client,
    )
    _invitation_service = InvitationService(
        identity=_identity_client,
        pipeline=_refresh_pipeline,
        notifier=_notification_client,
    )
    logger.info(
        "Services initialised: identity=%s, resources=%s",
        settings.IDENTITY_SERVICE_URL, settings.RESOURCE_SERVICE_URL,
    )


async def close_services() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


# ── FastAPI dependency functions ──

def get_view_repo() -> MemberViewRepository:
    return _view_repo


def get_identity_client() -> IdentityClient:
    assert _identity_client is not None
    return _identity_client


def get_refresh_pipeline() -> MembershipRefreshPipeline:
    assert _refresh_pipeline is not None
    return _refresh_pipeline


def get_assignment_mutator() -> AssignmentMutator:
    assert _assignment_mutator is not None
    return _assignment_mutator


def get_bulk_orchestrator() -> BulkOrchestrator:
    assert _bulk_orchestrator is not None
    return _bulk_orchestrator


def get_invitation_service() -> InvitationService:
    assert _invitation_service is not None
    return _invitation_service


# ── Request context ──

def get_org_context(
    request: Request,
    organization_id: str = Header(..., alias="X-Organization-ID", min_length=1),
    user_email: Optional[str] = Header(default=None, alias="X-User-Email"),
) -> OrgContext:
    """Explicit organization scope for the core, built from request headers."""
    auth_headers = {
        name: request.headers[name]
        for name in FORWARDED_HEADERS
        if name in request.headers
    }
    return OrgContext(
        organization_id=organization_id,
        actor_email=user_email,
        auth_headers=auth_headers,
    )


async def require_manager(
    ctx: OrgContext = Depends(get_org_context),
    identity: IdentityClient = Depends(get_identity_client),
) -> OrgContext:
    """Only owners and admins may read or change the workforce of an organization."""
    role = await load_actor_role(identity, ctx)
    if not can_manage(role):
        raise HTTPException(status_code=403, detail="Organization admin role required")
    return ctx.model_copy(update={"actor_role": role})
