from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn

import httpx

from app.contracts.identity import ErrorResponse
from app.providers.common import decode_model, now_ms
from app.utils.exceptions import ProviderError, TransportError

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
_PROVIDER = "okta"


@dataclass(frozen=True)
class OktaConfig:
    domain: str
    api_token: str
    client_id: str
    client_secret: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls, settings: Settings) -> OktaConfig:
        return cls(
            domain=settings.okta_domain,
            api_token=settings.okta_api_token,
            client_id=settings.okta_client_id,
            client_secret=settings.okta_client_secret,
            timeout_seconds=settings.okta_timeout_seconds,
        )

    @property
    def api_base_url(self) -> str:
        return f"{self.domain.rstrip('/')}/api/v1"


class Deadline:
    """Request-scoped cancellation signal with an optional monotonic expiry.

    One deadline is shared by every round trip of an operation. Cancelling it
    aborts the request in flight and stops the remaining steps from being sent.
    """

    def __init__(self, expires_at: float | None = None) -> None:
        self.expires_at = expires_at
        self._cancelled = asyncio.Event()

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(time.monotonic() + seconds)

    @classmethod
    def cancelled_now(cls) -> Deadline:
        deadline = cls()
        deadline.cancel()
        return deadline

    def cancel(self) -> None:
        self._cancelled.set()

    async def wait_cancelled(self) -> None:
        await self._cancelled.wait()

    def remaining(self) -> float | None:
        if self.expires_at is None:
            return None
        return self.expires_at - time.monotonic()

    def check(self, *, operation: str) -> None:
        if self._cancelled.is_set():
            raise TransportError(f"{operation}: request cancelled", kind="cancelled", operation=operation)
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise TransportError(f"{operation}: request timed out", kind="timeout", operation=operation)


async def _until_cancelled(
    call: Awaitable[httpx.Response],
    deadline: Deadline | None,
    *,
    operation: str,
) -> httpx.Response:
    """Await ``call`` unless ``deadline`` is cancelled first, which aborts it."""
    if deadline is None:
        return await call

    request_task = asyncio.ensure_future(call)
    cancel_task = asyncio.ensure_future(deadline.wait_cancelled())
    try:
        done, _ = await asyncio.wait({request_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (request_task, cancel_task):
            if not task.done():
                task.cancel()

    if request_task in done:
        return request_task.result()

    await asyncio.gather(request_task, return_exceptions=True)
    raise TransportError(f"{operation}: request cancelled", kind="cancelled", operation=operation)


class OktaRequestExecutor:
    def __init__(
        self,
        config: OktaConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def config(self) -> OktaConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"SSWS {self._config.api_token}",
        }

    def _timeout_for(self, deadline: Deadline | None) -> float:
        timeout = self._config.timeout_seconds
        if deadline is None:
            return timeout
        remaining = deadline.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)

    async def request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        deadline: Deadline | None = None,
    ) -> httpx.Response:
        if deadline is not None:
            deadline.check(operation=operation)

        url = f"{self._config.api_base_url}{path}"
        start_ms = now_ms()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_for(deadline),
                transport=self._transport,
            ) as client:
                response = await _until_cancelled(
                    client.request(
                        method,
                        url,
                        headers=self._headers(),
                        params=params,
                        json=json,
                    ),
                    deadline,
                    operation=operation,
                )
        except httpx.TimeoutException as exc:
            logger.warning(
                "Okta request timed out",
                extra={"operation": operation, "method": method, "path": path, "duration_ms": now_ms() - start_ms},
            )
            raise TransportError(
                f"{operation}: request timed out: {exc}", kind="timeout", operation=operation
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Okta request failed",
                extra={
                    "operation": operation,
                    "method": method,
                    "path": path,
                    "error": f"{exc.__class__.__name__}: {exc}",
                },
            )
            raise TransportError(
                f"{operation}: request failed: {exc}", kind="network", operation=operation
            ) from exc

        if deadline is not None:
            deadline.check(operation=operation)

        logger.info(
            "Okta request completed",
            extra={
                "provider": _PROVIDER,
                "operation": operation,
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": now_ms() - start_ms,
            },
        )
        return response


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def raise_provider_error(response: httpx.Response, *, operation: str, action: str) -> NoReturn:
    """Decode an Okta error body and raise it as a ProviderError."""
    error = decode_model(response, ErrorResponse, operation=operation)
    causes = [cause.error_summary for cause in error.error_causes if cause.error_summary]
    raise ProviderError(
        f"failed to {action} (status: {response.status_code}): {error.error_summary or 'unknown error'}",
        status=response.status_code,
        code=error.error_code,
        summary=error.error_summary,
        link=error.error_link,
        error_id=error.error_id,
        causes=causes,
        operation=operation,
    )
