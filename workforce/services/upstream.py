# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Upstream HTTP base client — shared transport for identity and resource services.
Idempotent reads are retried with exponential backoff; writes are sent once.
Any non-success status or transport error raises a typed ServiceError.
"""

import asyncio
import time
from typing import Any, Iterable, Optional

import httpx

from workforce.core.config import settings
from workforce.core.errors import ServiceError
from workforce.core.logging import get_logger
from workforce.metrics.prometheus import UPSTREAM_LATENCY, UPSTREAM_REQUESTS, UPSTREAM_RETRIES
from workforce.models.domain import OrgContext

logger = get_logger(__name__)


def response_payload(resp: httpx.Response) -> Any:
    """Decoded JSON body, or None for an empty / non-JSON body."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


class UpstreamClient:
    """Async HTTP client bound to one upstream base URL."""

    service_label: str = "upstream"
    error_class: type[ServiceError] = ServiceError

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        ctx: Optional[OrgContext] = None,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        accept: Iterable[int] = (),
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        headers = dict(ctx.auth_headers) if ctx is not None else {}
        accepted = set(accept)

        is_retryable = method in settings.RETRY_SAFE_METHODS
        max_attempts = (1 + settings.RETRY_MAX_ATTEMPTS) if is_retryable else 1

        for attempt in range(1, max_attempts + 1):
            start = time.monotonic()
            try:
                resp = await self._client.request(
                    method, url, json=json, params=params, headers=headers,
                )
            except httpx.RequestError as exc:
                UPSTREAM_REQUESTS.labels(
                    service=self.service_label, operation=operation, status="error",
                ).inc()
                if attempt < max_attempts:
                    await self._backoff(attempt)
                    continue
                logger.warning(
                    "%s unreachable: operation=%s, error=%s",
                    self.service_label, operation, exc,
                )
                raise self.error_class(operation, detail=str(exc)) from exc

            UPSTREAM_LATENCY.labels(service=self.service_label).observe(
                time.monotonic() - start
            )
            UPSTREAM_REQUESTS.labels(
                service=self.service_label, operation=operation, status=str(resp.status_code),
            ).inc()

            if resp.status_code in settings.RETRY_STATUS_CODES and attempt < max_attempts:
                await self._backoff(attempt)
                continue
            if resp.is_success or resp.status_code in accepted:
                return resp

            logger.warning(
                "%s returned %s: operation=%s",
                self.service_label, resp.status_code, operation,
            )
            raise self.error_class(operation, resp.status_code, resp.text[:200])

        raise self.error_class(operation, detail="no attempt made")

    async def _backoff(self, attempt: int) -> None:
        UPSTREAM_RETRIES.labels(service=self.service_label, attempt=str(attempt)).inc()
        await asyncio.sleep(settings.RETRY_BACKOFF_BASE * (2 ** (attempt - 1)))

    async def _get(self, path: str, operation: str, ctx: Optional[OrgContext] = None,
                   params: Optional[dict[str, Any]] = None) -> Any:
        resp = await self._request("GET", path, operation, ctx, params=params)
        return response_payload(resp)

    async def _post(self, path: str, operation: str, ctx: Optional[OrgContext] = None,
                    json: Any = None) -> Any:
        resp = await self._request("POST", path, operation, ctx, json=json)
        return response_payload(resp)
