# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Result types handed to the view layer: one per call, one per batch.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from workforce.models.domain import BulkAction, MemberView


class CallOutcome(BaseModel):
    success: bool
    operation: str
    target: Optional[str] = None
    reason: Optional[str] = None


class BatchStatus(str, Enum):
    SETTLED = "settled"
    FAILED = "failed"
    REJECTED = "rejected"


class SkippedItem(BaseModel):
    kind: str
    reference: str
    reason: str


class BatchOutcome(BaseModel):
    status: BatchStatus
    action: BulkAction
    attempted: int = 0
    skipped: list[SkippedItem] = Field(default_factory=list)
    message: str = ""
    view: Optional[MemberView] = None
