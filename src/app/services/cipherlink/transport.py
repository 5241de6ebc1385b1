"""
Cipherlink - HTTP Transport

CurlTransport wraps curl_cffi.AsyncSession with browser impersonation and maps
every failure to TransportError. It never retries: a failed call surfaces to
the caller, who decides whether to retry, switch account or abort.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession

from .exceptions import TransportError
from .utils import build_default_headers, merge_headers, sanitize_url

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Standardized response from a transport."""

    url: str
    status_code: int
    text: str
    headers: dict[str, str] = field(default_factory=dict)
    response_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """What the bootstrap and the protocol client need from HTTP."""

    async def get_text(self, url: str) -> str: ...

    async def post(self, url: str, headers: dict[str, str], body: str) -> TransportResponse: ...


class CurlTransport:
    """
    Async HTTP transport with TLS fingerprint impersonation.

    One session is shared by all calls; curl_cffi multiplexes concurrent
    requests on it, so the transport is safe to use from many tasks at once.
    """

    def __init__(
        self,
        impersonate: str = "chrome120",
        timeout: float = 30,
        user_agent: str | None = None,
        proxy: str | None = None,
    ) -> None:
        self._impersonate = impersonate
        self._timeout = timeout
        self._proxy = proxy
        self._default_headers = build_default_headers(user_agent)
        self._session: AsyncSession | None = None

    @classmethod
    def from_settings(cls, settings: Any) -> "CurlTransport":
        return cls(
            impersonate=settings.CIPHERLINK_IMPERSONATE,
            timeout=settings.CIPHERLINK_REQUEST_TIMEOUT,
            user_agent=settings.CIPHERLINK_USER_AGENT,
            proxy=settings.CIPHERLINK_PROXY_URL,
        )

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession(impersonate=self._impersonate, timeout=self._timeout)
            logger.debug(f"Created session: impersonate={self._impersonate}")
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "CurlTransport":
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get_text(self, url: str) -> str:
        """GET a page or script and return its text body."""
        response = await self._request("GET", url)
        return response.text

    async def post(self, url: str, headers: dict[str, str], body: str) -> TransportResponse:
        """POST a raw body with the given headers."""
        return await self._request("POST", url, headers=headers, data=body)

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | None = None,
    ) -> TransportResponse:
        session = self._get_session()
        kwargs: dict[str, Any] = {
            "headers": merge_headers(self._default_headers, headers),
            "timeout": self._timeout,
        }
        if data is not None:
            kwargs["data"] = data
        if self._proxy:
            kwargs["proxy"] = self._proxy

        safe_url = sanitize_url(url)
        start_time = time.time()
        try:
            response = await session.request(method, url, **kwargs)
        except CurlError as e:
            error_code = self._categorize_curl_error(e)
            logger.warning(f"{method} {safe_url} failed: {error_code}")
            raise TransportError(
                message=str(e),
                url=safe_url,
                error_code=error_code,
                is_timeout=error_code == "timeout",
            ) from e

        result = TransportResponse(
            url=url,
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        logger.debug(f"{method} {safe_url} -> {result.status_code} ({result.response_time_ms:.0f}ms)")

        if not result.ok:
            raise TransportError(
                message=f"HTTP {result.status_code}",
                url=safe_url,
                status_code=result.status_code,
                error_code="http_status",
                body=result.text,
            )
        return result

    @staticmethod
    def _categorize_curl_error(error: CurlError) -> str:
        """Categorize curl error."""
        error_str = str(error).lower()

        dns_indicators = ["no such host", "could not resolve host", "curl: (6)"]
        if any(ind in error_str for ind in dns_indicators):
            return "dns_error"

        connection_indicators = ["connection refused", "curl: (7)"]
        if any(ind in error_str for ind in connection_indicators):
            return "connection_refused"

        timeout_indicators = ["timed out", "timeout", "curl: (28)"]
        if any(ind in error_str for ind in timeout_indicators):
            return "timeout"

        return "unknown"
