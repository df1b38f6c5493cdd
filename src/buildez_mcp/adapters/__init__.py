"""
Adapter layer between MCP tools and the Buildez HTTP API.

Provides a consistent result type for tool operations and a thin async
client over the remote endpoints, so tools never deal with HTTP details.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class OperationResult:
    """Standardized result format for MCP tool operations."""
    
    success: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to the payload returned to MCP clients.
        
        Successful results flatten their data next to the message; failed
        results only carry the error message.
        """
        if self.success:
            return {"success": True, "message": self.message, **self.data}
        return {"success": False, "error": self.message}
    
    @classmethod
    def success_result(
        cls,
        message: str,
        data: Optional[Dict[str, Any]] = None
    ) -> "OperationResult":
        """Create success result."""
        return cls(success=True, message=message, data=data or {})
    
    @classmethod
    def error_result(
        cls,
        message: str,
        errors: Optional[List[str]] = None
    ) -> "OperationResult":
        """Create error result."""
        return cls(
            success=False,
            message=message,
            errors=errors or [message]
        )


from .buildez_api import API_TIMEOUT, CHECK_TIMEOUT, BuildezAPI

__all__ = ["OperationResult", "BuildezAPI", "API_TIMEOUT", "CHECK_TIMEOUT"]
