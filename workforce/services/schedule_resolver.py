# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Active schedule resolution — pure computation, no side effects.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from workforce.models.domain import ScheduleAssignment

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def is_active(assignment: ScheduleAssignment, now: datetime) -> bool:
    """True when the inclusive window contains now. Inverted windows never match."""
    if assignment.effective_from > now:
        return False
    return assignment.effective_until is None or assignment.effective_until >= now


def resolve_active_assignment(
    now: datetime,
    assignments: Iterable[ScheduleAssignment],
) -> Optional[ScheduleAssignment]:
    """
    Return the assignment in effect at `now`, or None.
    Overlapping windows: the most recently created assignment wins.
    Must be re-invoked per request since `now` advances.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    active = [a for a in assignments if is_active(a, now)]
    if not active:
        return None
    # max() keeps the first of equal created_at values
    return max(active, key=lambda a: a.created_at or _OLDEST)
