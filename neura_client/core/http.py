"""
Neura API Client
Thin async JSON client over the backend's fixed HTTP surface.
"""

import logging
from typing import Any, Optional

import httpx

from neura_client.config import settings
from neura_client.core.errors import ErrorCode, NeuraApiError

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Async HTTP client for the Neura backend.

    Handles:
    - Bearer token header
    - JSON encoding/decoding
    - Mapping transport errors and non-2xx responses to NeuraApiError

    No retries are performed here; callers decide whether to retry.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Backend root URL (default: settings.api_base_url)
            token: Bearer token for the signed-in user (default: settings.api_token)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.api_token
        self.timeout = timeout or settings.request_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _build_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            json: Optional JSON body
            params: Optional query parameters

        Returns:
            Decoded JSON (None for empty bodies)

        Raises:
            NeuraApiError: On transport failure, non-2xx status or a body
                that is not JSON
        """
        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._build_headers(),
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NeuraApiError(
                message=f"Request to {path} failed",
                endpoint=path,
                error_code=ErrorCode.SERVICE_UNAVAILABLE,
            ) from e

        if response.status_code >= 400:
            raise self._error_from_response(response, path)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            # e.g. a proxy's HTML error page served with 200
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise NeuraApiError(
                message=f"Invalid response from {path}",
                status_code=response.status_code,
                endpoint=path,
            ) from e

    @staticmethod
    def _error_from_response(response: httpx.Response, path: str) -> NeuraApiError:
        """Build a NeuraApiError from an error response, preferring the backend's message."""
        message = f"Request failed with status {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None

        # Backend errors arrive either as {"detail": ...} or {"error_code", "message"}
        if isinstance(body, dict):
            detail = body.get("detail", body)
            if isinstance(detail, dict):
                message = detail.get("message", message)
            elif isinstance(detail, str):
                message = detail

        if response.status_code == 401:
            error_code = ErrorCode.AUTH_EXPIRED
        elif response.status_code in (502, 503, 504):
            error_code = ErrorCode.SERVICE_UNAVAILABLE
        else:
            error_code = ErrorCode.INTERNAL_ERROR

        logger.info("%s returned %s: %s", path, response.status_code, message)
        return NeuraApiError(
            message=message,
            status_code=response.status_code,
            endpoint=path,
            error_code=error_code,
        )

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("PATCH", path, json=json)
