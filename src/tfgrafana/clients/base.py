from __future__ import annotations

import ssl
from typing import Any, Iterable

import httpx
import structlog
from circuitbreaker import CircuitBreakerError, circuit
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from tfgrafana.core.errors import ProviderError
from tfgrafana.version import USER_AGENT

logger = structlog.get_logger()

DEFAULT_RETRY_STATUS_CODES = ("429", "5xx")


class RetryableHTTPError(ProviderError):
    """HTTP errors that should be retried."""


class PermanentHTTPError(ProviderError):
    """HTTP errors that should not be retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class NotFoundError(PermanentHTTPError):
    """The remote object does not exist (HTTP 404)."""


def status_matches(status_code: int, patterns: Iterable[str]) -> bool:
    """Match a status code against patterns where ``x`` is a digit wildcard."""
    code = str(status_code)
    for pattern in patterns:
        pattern = pattern.strip().lower()
        if len(pattern) == len(code) and all(p == "x" or p == c for p, c in zip(pattern, code)):
            return True
    return False


class BaseHTTPClient:
    """Base HTTP client with retry logic and circuit breaker.

    Configuration is fixed at construction. A fresh ``httpx.AsyncClient`` is
    opened per request so one client can be shared by concurrent handlers.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        retries: int = 3,
        retry_status_codes: Iterable[str] = DEFAULT_RETRY_STATUS_CODES,
        retry_wait: float = 0.0,
        headers: dict[str, str] | None = None,
        verify: bool | ssl.SSLContext = True,
        user_agent: str = USER_AGENT,
        circuit_failure_threshold: int = 5,
        circuit_recovery_timeout: int = 60,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = max(retries, 0)
        self._retry_status_codes = tuple(retry_status_codes)
        self._retry_wait = retry_wait
        self._extra_headers = dict(headers or {})
        self._verify = verify
        self._user_agent = user_agent
        self._guarded_send = circuit(
            failure_threshold=circuit_failure_threshold,
            recovery_timeout=circuit_recovery_timeout,
            expected_exception=RetryableHTTPError,
            name=f"{type(self).__name__}:{self._base_url}:{id(self)}",
        )(self._send_with_retries)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        """Override to provide custom headers."""
        headers = {"Content-Type": "application/json", "User-Agent": self._user_agent}
        headers.update(self._extra_headers)
        return headers

    def is_retryable_status(self, status_code: int) -> bool:
        return status_matches(status_code, self._retry_status_codes)

    async def _send_with_retries(self, method: str, url: str, **kwargs: Any) -> Any:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(self._retries + 1),
            wait=wait_fixed(self._retry_wait),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, url, **kwargs)
        return None  # pragma: no cover - AsyncRetrying always returns or raises

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, verify=self._verify) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=headers,
                )

                if self.is_retryable_status(response.status_code):
                    logger.warning(
                        "http_retryable_error",
                        status=response.status_code,
                        method=method,
                        url=url,
                    )
                    raise RetryableHTTPError(f"HTTP {response.status_code}: {response.text}")

                response.raise_for_status()
                return response.json() if response.content else {}

        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            message = f"{method} {url} returned status {status}: {exc.response.text}"
            if status == 404:
                raise NotFoundError(message, status) from exc
            logger.error(
                "http_permanent_error",
                status=status,
                method=method,
                url=url,
                error=str(exc),
            )
            raise PermanentHTTPError(message, status) from exc
        except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableHTTPError(str(exc)) from exc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Execute HTTP request with retry and circuit breaker."""
        url = f"{self._base_url}{path}"
        req_headers = self._headers()
        if headers:
            req_headers.update(headers)
        try:
            return await self._guarded_send(method, url, params=params, json=json, headers=req_headers)
        except CircuitBreakerError as exc:
            raise ProviderError(str(exc), {"url": url}) from exc

    async def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Execute GET request."""
        return await self._request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Execute POST request."""
        return await self._request("POST", path, json=json, params=params, headers=headers)

    async def put(
        self,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Execute PUT request."""
        return await self._request("PUT", path, json=json, headers=headers)

    async def patch(
        self,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Execute PATCH request."""
        return await self._request("PATCH", path, json=json, headers=headers)

    async def delete(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Execute DELETE request."""
        return await self._request("DELETE", path, params=params, headers=headers)
