# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Upstream payload decoding — pure, never raises.

Upstream list endpoints answer either with a bare JSON array or with the
array wrapped in an envelope field. Each payload is first classified into
a ListShape, then decoded by the branch for that shape. Records that fail
validation are dropped; callers compare counts if they care.
"""

from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from workforce.models.domain import (
    Geofence,
    Invitation,
    Member,
    MemberStatus,
    ScheduleAssignment,
    Shift,
)
from workforce.services.role_resolver import collect_member_role_hints, effective_role

ModelT = TypeVar("ModelT", bound=BaseModel)

EnvelopePath = tuple[str, ...]

DATA_ENVELOPES: tuple[EnvelopePath, ...] = (("data",),)
MEMBER_ENVELOPES: tuple[EnvelopePath, ...] = (
    ("members",),
    ("data", "members"),
    ("data",),
)
INVITATION_ENVELOPES: tuple[EnvelopePath, ...] = (
    ("invitations",),
    ("data", "invitations"),
    ("data",),
)
USER_GEOFENCE_ENVELOPES: tuple[EnvelopePath, ...] = (
    ("data", "assignments"),
    ("assignments",),
    ("data",),
)


class ListShape(str, Enum):
    BARE = "bare"
    WRAPPED = "wrapped"
    UNRECOGNIZED = "unrecognized"


def _follow(payload: Any, path: EnvelopePath) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _find_envelope(payload: Any, envelopes: Iterable[EnvelopePath]) -> Optional[list[Any]]:
    for path in envelopes:
        node = _follow(payload, path)
        if isinstance(node, list):
            return node
    return None


def classify_list_payload(payload: Any, envelopes: Iterable[EnvelopePath]) -> ListShape:
    if isinstance(payload, list):
        return ListShape.BARE
    if isinstance(payload, dict) and _find_envelope(payload, envelopes) is not None:
        return ListShape.WRAPPED
    return ListShape.UNRECOGNIZED


def unwrap_list(payload: Any, envelopes: Iterable[EnvelopePath] = DATA_ENVELOPES) -> list[Any]:
    envelopes = tuple(envelopes)
    shape = classify_list_payload(payload, envelopes)
    if shape is ListShape.BARE:
        return list(payload)
    if shape is ListShape.WRAPPED:
        return list(_find_envelope(payload, envelopes))
    return []


def _decode_each(model: type[ModelT], items: Iterable[Any]) -> list[ModelT]:
    decoded: list[ModelT] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            decoded.append(model.model_validate(item))
        except ValidationError:
            continue
    return decoded


# ── Identity payloads ──

def decode_invitations(payload: Any) -> list[Invitation]:
    return _decode_each(Invitation, unwrap_list(payload, INVITATION_ENVELOPES))


def decode_member(record: dict[str, Any], organization_id: Optional[str] = None) -> Member:
    user = record.get("user") if isinstance(record.get("user"), dict) else {}
    return Member(
        id=str(user.get("id") or record.get("userId") or record.get("user_id") or ""),
        email=user.get("email") or record.get("email") or "",
        name=user.get("name") or record.get("name") or "",
        role=effective_role(collect_member_role_hints(record, organization_id)),
        status=MemberStatus.ACTIVE,
    )


def decode_members(payload: Any, organization_id: Optional[str] = None) -> list[Member]:
    members: list[Member] = []
    for record in unwrap_list(payload, MEMBER_ENVELOPES):
        if not isinstance(record, dict):
            continue
        try:
            members.append(decode_member(record, organization_id))
        except ValidationError:
            continue
    return members


# ── Resource payloads ──

def decode_assignments(payload: Any) -> list[ScheduleAssignment]:
    return _decode_each(ScheduleAssignment, unwrap_list(payload, DATA_ENVELOPES))


def decode_shifts(payload: Any) -> list[Shift]:
    return _decode_each(Shift, unwrap_list(payload, DATA_ENVELOPES))


def decode_geofences(payload: Any) -> list[Geofence]:
    return _decode_each(Geofence, unwrap_list(payload, DATA_ENVELOPES))


def decode_user_geofences(payload: Any) -> list[Geofence]:
    """Geofence links of one user; link records carry the geofence nested."""
    items = []
    for item in unwrap_list(payload, USER_GEOFENCE_ENVELOPES):
        if isinstance(item, dict) and "geofence" in item:
            item = item["geofence"]
        if item:
            items.append(item)
    return _decode_each(Geofence, items)
