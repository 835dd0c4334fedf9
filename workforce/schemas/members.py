# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from workforce.models.domain import BulkAction, InvitableRole, Invitation
from workforce.models.outcomes import SkippedItem


# ── Bulk Schemas ──

class BulkActionRequest(BaseModel):
    action: BulkAction
    member_ids: list[str] = Field(default_factory=list, description="Member ids or emails")
    invitation_ids: list[str] = Field(default_factory=list)
    target_role: Optional[InvitableRole] = Field(
        default=None, description="Required for change_role"
    )
    confirm: bool = Field(default=False, description="Caller confirmed the batch")


class EmailCollectRequest(BaseModel):
    member_ids: list[str] = Field(default_factory=list)
    invitation_ids: list[str] = Field(default_factory=list)


class EmailCollectResponse(BaseModel):
    emails: list[str]
    skipped: list[SkippedItem] = Field(default_factory=list)


# ── Single Member Schemas ──

class RoleChangeRequest(BaseModel):
    role: InvitableRole
    confirm: bool = False


class ShiftAssignRequest(BaseModel):
    shift_id: str = Field(..., min_length=1)
    effective_from: datetime
    effective_until: Optional[datetime] = None


class LocationAssignRequest(BaseModel):
    geofence_ids: list[str] = Field(default_factory=list)
    assign_all: bool = False


# ── Invitation Schemas ──

class InviteRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: InvitableRole = InvitableRole.MEMBER


class InvitationListResponse(BaseModel):
    invitations: list[Invitation]
    error: Optional[str] = None
