"""
HTTP transport for SharePoint REST requests.

HttpClient issues one request with the runtime default headers applied,
retrying throttled (429) and unavailable (503) responses as well as
connection failures with exponential backoff.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
from multidict import CIMultiDict

from .runtime.config import RuntimeConfig, get_config
from .runtime.errors import ErrorCode, ErrorHandler, HttpRequestError, NetworkError, SPClientError


logger = logging.getLogger(__name__)


@dataclass
class RawResponse:
    """Response as received from the service, body fully read."""
    status: int
    reason: str = ""
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: bytes = b""

    def __post_init__(self):
        # header names are case-insensitive
        if not isinstance(self.headers, CIMultiDict):
            self.headers = CIMultiDict(self.headers)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def json(self) -> Any:
        return json.loads(self.body)


class HttpClient:
    """
    Transport client used by request contexts.

    Features:
    - One aiohttp session per client, created on first use
    - Default Accept/Content-Type/User-Agent headers
    - Retry of 429/503 responses honouring Retry-After
    - Retry of connection errors with exponential backoff
    """

    def __init__(self, config: Optional[RuntimeConfig] = None):
        """
        Initialize the client.

        Args:
            config: Configuration to use; the active runtime config when omitted
        """
        self._config = config
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def config(self) -> RuntimeConfig:
        return self._config if self._config is not None else get_config()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed transport session")
        self._session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            logger.debug("Created new transport session")
        return self._session

    def _build_headers(self, options: Dict[str, Any]) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json;odata=verbose;charset=utf-8",
            "User-Agent": self.config.user_agent,
            "X-ClientService-ClientTag": self.config.user_agent,
        }
        headers.update(self.config.headers)
        headers.update(options.get("headers") or {})
        return headers

    def _retry_delay(self, attempt: int, response: Optional[RawResponse] = None) -> float:
        if response is not None:
            retry_after = response.headers.get("Retry-After")
            if retry_after and retry_after.isdigit():
                return float(retry_after)
        return self.config.retry_delay * (self.config.retry_backoff ** attempt)

    @staticmethod
    def _network_error(error: Exception, method: str, url: str) -> NetworkError:
        if isinstance(error, aiohttp.InvalidURL):
            code = ErrorCode.INVALID_URL
        elif isinstance(error, asyncio.TimeoutError):
            code = ErrorCode.TIMEOUT
        elif isinstance(error, aiohttp.ClientConnectionError):
            code = ErrorCode.CONNECTION_FAILED
        else:
            code = ErrorCode.NETWORK_ERROR
        return NetworkError(
            f"Network error: {error}",
            code,
            details={"url": url, "method": method},
            cause=error,
        )

    async def _send(self, method: str, url: str, headers: Dict[str, str], body: Any) -> RawResponse:
        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        async with session.request(method, url, headers=headers, data=body, timeout=timeout) as response:
            payload = await response.read()
            return RawResponse(
                status=response.status,
                reason=response.reason or "",
                headers=CIMultiDict(response.headers),
                body=payload,
            )

    async def fetch(self, url: str, options: Optional[Dict[str, Any]] = None) -> RawResponse:
        """
        Send a request.

        Args:
            url: Absolute request url
            options: Request options (method, headers, body)

        Returns:
            The raw response; non-success statuses are returned, not raised

        Raises:
            NetworkError: If the request could not be delivered
        """
        options = options or {}
        method = options.get("method", "GET").upper()
        headers = self._build_headers(options)
        body = options.get("body")
        if body is not None and not isinstance(body, (str, bytes)):
            body = json.dumps(body)

        for attempt in range(self.config.max_retries + 1):
            response: Optional[RawResponse] = None
            error: SPClientError
            try:
                response = await self._send(method, url, headers, body)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                error = self._network_error(e, method, url)
            else:
                if response.ok:
                    return response
                error = HttpRequestError(
                    f"{method} {url} returned {response.status}", response.status, response.reason, response
                )

            if attempt == self.config.max_retries or not ErrorHandler.is_retryable(error):
                break

            delay = self._retry_delay(attempt, response)
            logger.debug(f"Retrying {method} {url} in {delay:.2f}s: {error.message}")
            await asyncio.sleep(delay)

        if response is not None:
            return response

        logger.warning(f"Giving up on {method} {url} after {attempt + 1} attempt(s)")
        raise error


_default_client: Optional[HttpClient] = None


def get_default_client() -> HttpClient:
    """Shared client following the active runtime configuration."""
    global _default_client
    if _default_client is None:
        _default_client = HttpClient()
    return _default_client


async def close_default_client() -> None:
    """Close the shared client's session; the next request opens a new one."""
    global _default_client
    if _default_client is not None:
        await _default_client.close()
        _default_client = None
