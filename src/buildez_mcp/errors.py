"""
Exception hierarchy for the Buildez MCP server.

Every failure raised while building a website derives from BuildezError so
the build operation can convert it into a structured failure result at a
single boundary.
"""

from typing import Optional


class BuildezError(Exception):
    """Base exception for Buildez MCP errors."""
    pass


class InvalidArgumentError(BuildezError):
    """Raised when a required operation argument is missing or empty."""
    pass


class BuildezAPIError(BuildezError):
    """Base exception for failures talking to the Buildez API."""
    
    def __init__(self, message: str, endpoint: Optional[str] = None):
        self.endpoint = endpoint
        super().__init__(message)


class UpstreamHTTPError(BuildezAPIError):
    """Raised when the Buildez API answers with a non-success status."""
    
    def __init__(self, status_code: int, body: str, endpoint: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API error ({status_code}): {body}", endpoint=endpoint)


class UpstreamResponseError(BuildezAPIError):
    """Raised when a response is malformed or reports a logical failure."""
    pass


class UpstreamTimeoutError(BuildezAPIError):
    """Raised when a request does not complete within its timeout."""
    
    def __init__(self, endpoint: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request to {endpoint} timed out after {timeout:g} seconds",
            endpoint=endpoint,
        )


class UpstreamConnectionError(BuildezAPIError):
    """Raised when the Buildez API cannot be reached."""
    
    def __init__(self, endpoint: str, reason: str):
        self.reason = reason
        super().__init__(
            f"Could not reach Buildez API at {endpoint}: {reason}",
            endpoint=endpoint,
        )
