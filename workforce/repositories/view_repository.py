# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Enriched member view cache.
One snapshot per organization, replaced wholesale on every refresh.
NO business rules here — pure storage plus a stale-member set.
"""

from typing import Optional

from workforce.models.domain import MemberView


class MemberViewRepository:
    """In-memory view storage keyed by organization id."""

    def __init__(self) -> None:
        self._views: dict[str, MemberView] = {}
        self._stale: dict[str, set[str]] = {}

    # ── Read ──

    def get(self, organization_id: str) -> Optional[MemberView]:
        return self._views.get(organization_id)

    def count(self) -> int:
        return len(self._views)

    def stale_members(self, organization_id: str) -> set[str]:
        return set(self._stale.get(organization_id, ()))

    # ── Write ──

    def replace(
        self,
        organization_id: str,
        view: MemberView,
        resolved: Optional[set[str]] = None,
    ) -> None:
        """Swap in a new snapshot. Only `resolved` stale marks are cleared when given."""
        self._views[organization_id] = view
        if resolved is None:
            self._stale.pop(organization_id, None)
            return
        remaining = self._stale.get(organization_id, set()) - resolved
        if remaining:
            self._stale[organization_id] = remaining
        else:
            self._stale.pop(organization_id, None)

    def invalidate(self, organization_id: str, member_id: str) -> None:
        """Force recompute of one member at next read."""
        if member_id:
            self._stale.setdefault(organization_id, set()).add(member_id)

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._views.clear()
        self._stale.clear()
