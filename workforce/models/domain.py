# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InvitableRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


TERMINAL_INVITATION_STATUSES = frozenset(
    {InvitationStatus.ACCEPTED, InvitationStatus.CANCELLED, InvitationStatus.EXPIRED}
)

_INVITATION_STATUS_SPELLINGS = {
    "canceled": InvitationStatus.CANCELLED.value,
    "rejected": InvitationStatus.CANCELLED.value,
}


class BulkAction(str, Enum):
    REMOVE = "remove"
    CHANGE_ROLE = "change_role"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps coming from upstream are taken as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OrgContext(BaseModel):
    """Explicit per-request organization scope; the core never reads ambient state."""
    organization_id: str = Field(..., min_length=1)
    actor_email: Optional[str] = None
    auth_headers: dict[str, str] = Field(default_factory=dict)
    actor_role: Optional[Role] = None


class Member(BaseModel):
    """An organization member as listed by the identity service."""
    id: str = ""
    email: str = ""
    name: str = ""
    role: Role = Role.MEMBER
    status: MemberStatus = MemberStatus.ACTIVE

    @property
    def identifier(self) -> str:
        """Identifier accepted by the identity service for removal."""
        return self.id or self.email


class Invitation(BaseModel):
    """A pending or settled invitation; accepts snake_case and camelCase."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    email: str = ""
    role: InvitableRole = InvitableRole.MEMBER
    status: InvitationStatus = InvitationStatus.PENDING
    inviter_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("inviter_id", "inviterId")
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )
    expires_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )

    @field_validator("email", mode="before")
    @classmethod
    def default_email(cls, v):
        return v or ""

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, v):
        if isinstance(v, str) and v.strip().lower() in ("admin", "member"):
            return v.strip().lower()
        return InvitableRole.MEMBER.value

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        if v is None or v == "":
            return InvitationStatus.PENDING.value
        if isinstance(v, str):
            v = v.strip().lower()
            return _INVITATION_STATUS_SPELLINGS.get(v, v)
        return v

    @field_validator("created_at", "expires_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return _as_utc(v)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_INVITATION_STATUSES


class ScheduleAssignment(BaseModel):
    """Append-only, time-bounded shift assignment of one member."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    user_id: str = Field(default="", validation_alias=AliasChoices("user_id", "userId"))
    shift_id: str = Field(..., validation_alias=AliasChoices("shift_id", "shiftId"))
    effective_from: datetime = Field(
        ..., validation_alias=AliasChoices("effective_from", "effectiveFrom")
    )
    effective_until: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("effective_until", "effectiveUntil")
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )

    @field_validator("effective_from", "effective_until", "created_at", mode="after")
    @classmethod
    def ensure_utc(cls, v):
        return _as_utc(v)


class Shift(BaseModel):
    """Reference data: a named, colored working window."""
    id: str
    name: str = ""
    color: str = ""
    start_time: str = ""
    end_time: str = ""
    days_of_week: list[str] = Field(default_factory=list)


class ShiftSummary(BaseModel):
    id: str
    name: str
    color: str


class Geofence(BaseModel):
    """Reference data: a geofenced location."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = ""
    type: str = ""
    center_latitude: Optional[str] = None
    center_longitude: Optional[str] = None
    radius: float = 0
    active: bool = True
    qr_code_url: Optional[str] = None


class EnrichedMember(Member):
    """
    Member plus schedule and location enrichment.
    geofences is None when the location lookup did not succeed.
    """
    is_current_user: bool = False
    shift: Optional[ShiftSummary] = None
    active_assignment: Optional[ScheduleAssignment] = None
    geofences: Optional[list[Geofence]] = None
    enrichment_errors: list[str] = Field(default_factory=list)


class MemberView(BaseModel):
    """Wholesale-replaced snapshot consumed by the UI and the orchestrator."""
    organization_id: str
    members: list[EnrichedMember] = Field(default_factory=list)
    invitations: list[Invitation] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    refreshed_at: datetime

    def find_member(self, reference: str) -> Optional[EnrichedMember]:
        for member in self.members:
            if reference and reference in (member.id, member.email):
                return member
        return None

    def find_invitation(self, invitation_id: str) -> Optional[Invitation]:
        for invitation in self.invitations:
            if invitation.id and invitation.id == invitation_id:
                return invitation
        return None
