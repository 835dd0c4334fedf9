# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy shared by services and controllers.

Resolution ambiguity (no active schedule, no decidable role) is NOT an
error and never appears here: resolvers return None for it.
"""

from typing import Optional


class WorkforceError(Exception):
    """Base class for every error raised by the workforce core."""


class PreconditionError(WorkforceError):
    """Rejected before any network call was issued."""

    def __init__(self, message: str = "", skipped: Optional[list] = None) -> None:
        self.skipped = list(skipped or [])
        super().__init__(message)


class ServiceError(WorkforceError):
    """An upstream call failed (transport error or non-success status)."""

    service: str = "upstream"

    def __init__(
        self,
        operation: str,
        status_code: Optional[int] = None,
        detail: str = "",
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        status = status_code if status_code is not None else "unreachable"
        message = f"{self.service} {operation} failed (status={status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class IdentityServiceError(ServiceError):
    service = "identity-service"


class ResourceServiceError(ServiceError):
    service = "resource-service"
