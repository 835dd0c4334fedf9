# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: User-facing notification and confirmation capabilities.
The core reports outcomes and asks for confirmation only through these
interfaces; the view layer decides how they reach a human.
"""

from typing import Optional

import httpx

from workforce.core.config import settings
from workforce.core.logging import get_logger
from workforce.metrics.prometheus import NOTIFICATIONS_SENT

logger = get_logger(__name__)


class Notifier:
    """Outcome reporting capability."""

    async def notify(self, level: str, message: str, recipient: Optional[str] = None) -> None:
        raise NotImplementedError


class Confirmation:
    """Confirmation capability consulted before destructive batches."""

    async def confirm(self, message: str) -> bool:
        raise NotImplementedError


class PresetConfirmation(Confirmation):
    """Answers with a decision taken up front (e.g. a `confirm` flag in the request)."""

    def __init__(self, approved: bool) -> None:
        self.approved = approved
        self.prompts: list[str] = []

    async def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.approved


class NotificationClient(Notifier):
    """Fire-and-forget notification sender via notification-service."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self._client = http_client
        self._base_url = settings.NOTIFICATION_SERVICE_URL if base_url is None else base_url

    async def notify(self, level: str, message: str, recipient: Optional[str] = None) -> None:
        """Send a notification. Failures are logged but never raised."""
        NOTIFICATIONS_SENT.labels(level=level).inc()
        if not self._base_url or self._client is None:
            logger.info("[%s] %s", level.upper(), message)
            return
        try:
            resp = await self._client.post(
                f"{self._base_url.rstrip('/')}/api/v1/notify",
                json={
                    "channel": "console",
                    "recipient": recipient or "workforce-console",
                    "message": message,
                    "severity": level,
                },
                timeout=settings.NOTIFICATION_TIMEOUT,
            )
            logger.info(
                "Notification sent: level=%s, status=%d", level, resp.status_code,
            )
        except httpx.HTTPError as exc:
            logger.warning("Notification failed: %s", exc)
