# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Role resolution — pure computation, no side effects.

Role hints come from several payloads that disagree more often than they
should. Hints are collected in priority order (direct membership record,
active-organization session role, generic "current member" hints, nested
organization-list lookups) and the first decidable one wins.
"""

from typing import Any, Iterable, Optional

from workforce.models.domain import Role

_ROLES: dict[str, Role] = {role.value: role for role in Role}

_CURRENT_MEMBER_KEYS: tuple[str, ...] = ("member", "currentMember", "membership")


def normalize_role(value: Any) -> Optional[Role]:
    """Map a raw hint onto the role domain; anything unrecognized is None."""
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        return _ROLES.get(value.strip().lower())
    return None


def resolve_role(candidates: Iterable[Any]) -> Optional[Role]:
    """Return the first decidable role in priority order, or None."""
    for candidate in candidates:
        role = normalize_role(candidate)
        if role is not None:
            return role
    return None


def effective_role(candidates: Iterable[Any]) -> Role:
    """Resolve, defaulting to member. Never escalates when undecidable."""
    return resolve_role(candidates) or Role.MEMBER


# ── Hint collection ──

def _role_of(payload: Any, key: str) -> Any:
    if not isinstance(payload, dict):
        return None
    nested = payload.get(key)
    if isinstance(nested, dict):
        return nested.get("role")
    return None


def _role_from_memberships(memberships: Any, organization_id: Optional[str]) -> Any:
    """Role of the membership entry for organization_id (or the first with a role)."""
    if not isinstance(memberships, list):
        return None
    for membership in memberships:
        if not isinstance(membership, dict):
            continue
        if organization_id:
            if organization_id in (
                membership.get("organizationId"),
                membership.get("organization_id"),
            ):
                return membership.get("role")
        elif membership.get("role"):
            return membership.get("role")
    return None


def _role_from_organizations(organizations: Any, organization_id: Optional[str]) -> Any:
    if not isinstance(organizations, list) or not organization_id:
        return None
    for organization in organizations:
        if isinstance(organization, dict) and organization.get("id") == organization_id:
            return organization.get("role")
    return None


def role_from_member_list(members: Any, user_id: Optional[str]) -> Any:
    """Role on the membership record of user_id inside a members[] listing."""
    if not isinstance(members, list) or not user_id:
        return None
    for record in members:
        if not isinstance(record, dict):
            continue
        user = record.get("user") if isinstance(record.get("user"), dict) else {}
        if user_id in (record.get("userId"), record.get("user_id"), user.get("id")):
            return record.get("role")
    return None


def collect_member_role_hints(
    record: dict[str, Any], organization_id: Optional[str] = None
) -> list[Any]:
    """Ordered hints for a membership record returned by list-members."""
    user = record.get("user") if isinstance(record.get("user"), dict) else {}
    return [
        record.get("role"),
        _role_of(record, "membership"),
        _role_from_memberships(user.get("memberships"), organization_id),
        _role_from_organizations(user.get("organizations"), organization_id),
    ]


def collect_session_role_hints(
    session_data: Optional[dict[str, Any]],
    organization: Optional[dict[str, Any]] = None,
    organization_id: Optional[str] = None,
) -> list[Any]:
    """Ordered hints for the acting user, from session and organization payloads."""
    session_data = session_data if isinstance(session_data, dict) else {}
    organization = organization if isinstance(organization, dict) else {}
    session = session_data.get("session") if isinstance(session_data.get("session"), dict) else {}
    user = session_data.get("user") if isinstance(session_data.get("user"), dict) else {}
    organization_id = organization_id or organization.get("id")

    hints: list[Any] = [
        _role_of(session, "activeOrganization"),
        _role_of(session, "organization"),
    ]
    for source in (organization, session, user):
        hints.extend(_role_of(source, key) for key in _CURRENT_MEMBER_KEYS)
    for source in (organization, session, user):
        hints.append(_role_from_memberships(source.get("memberships"), organization_id))
    hints.append(_role_from_organizations(organization.get("organizations"), organization_id))
    hints.append(_role_from_organizations(user.get("organizations"), organization_id))
    return hints
