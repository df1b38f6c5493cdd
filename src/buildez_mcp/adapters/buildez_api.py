"""Async client for the Buildez website builder API."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from buildez_mcp.errors import (
    UpstreamConnectionError,
    UpstreamHTTPError,
    UpstreamResponseError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

API_TIMEOUT = 300.0
"""Seconds allowed for a full website generation request."""

CHECK_TIMEOUT = 10.0
"""Seconds allowed for a single web ID availability check."""


class BuildezAPI:
    """
    Thin JSON-over-HTTP client for the Buildez API.

    Each call opens its own ``httpx.AsyncClient`` and is cancelled as a
    whole once its timeout elapses, so a slow call never affects the next.

    Example:
        api = BuildezAPI("http://localhost:3000")
        selection = await api.select_plugins("Joe's Pizza: pizzeria", "Joe's Pizza")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the Buildez web app (e.g. "http://localhost:3000")
            timeout: Default request timeout in seconds
            transport: Optional httpx transport (used by tests to fake the API)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Send a JSON request and return the decoded response body.

        Args:
            endpoint: Path relative to the base URL (e.g. "/api/ai-builder")
            method: HTTP method
            body: JSON body, if any
            params: Query string parameters
            timeout: Override for the default timeout

        Returns:
            Decoded JSON response

        Raises:
            UpstreamHTTPError: If the API answers with a non-success status
            UpstreamTimeoutError: If the request exceeds its timeout
            UpstreamConnectionError: If the API cannot be reached
            UpstreamResponseError: If the response cannot be decoded or is not JSON
        """
        timeout = timeout or self.timeout

        try:
            response = await asyncio.wait_for(
                self._send(endpoint, method, body, params, timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError(endpoint, timeout) from e
        except httpx.TransportError as e:
            raise UpstreamConnectionError(endpoint, str(e) or type(e).__name__) from e
        except httpx.HTTPError as e:
            # Protocol-level failures such as undecodable content
            raise UpstreamResponseError(
                f"Invalid response from {endpoint}: {e}",
                endpoint=endpoint,
            ) from e

        if response.is_error:
            raise UpstreamHTTPError(response.status_code, response.text, endpoint=endpoint)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamResponseError(
                f"Invalid JSON response from {endpoint}",
                endpoint=endpoint,
            ) from e

    async def _send(
        self,
        endpoint: str,
        method: str,
        body: Optional[Dict[str, Any]],
        params: Optional[Dict[str, str]],
        timeout: float,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
        ) as client:
            logger.debug("%s %s%s", method, self.base_url, endpoint)
            return await client.request(
                method,
                endpoint,
                json=body,
                params=params,
                headers={"Content-Type": "application/json"},
            )

    async def check_web_id(self, web_id: str) -> bool:
        """Return True if the web ID is free on the Buildez platform."""
        payload = await self.request(
            "/api/check-webid",
            params={"webId": web_id},
            timeout=CHECK_TIMEOUT,
        )
        if not isinstance(payload, dict):
            raise UpstreamResponseError(
                "Unexpected web ID check response",
                endpoint="/api/check-webid",
            )
        return bool(payload.get("available"))

    async def select_plugins(self, prompt: str, business_name: str) -> Dict[str, Any]:
        """Ask the AI builder to pick plugins and a website type."""
        payload = await self.request(
            "/api/ai-builder",
            method="POST",
            body={"prompt": prompt, "businessName": business_name},
        )
        return payload if isinstance(payload, dict) else {}

    async def build_website(self, build_request: Dict[str, Any]) -> Dict[str, Any]:
        """Build a website from a plugin selection."""
        payload = await self.request(
            "/api/build-website",
            method="POST",
            body=build_request,
        )
        return payload if isinstance(payload, dict) else {}
