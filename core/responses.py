"""
Unified API response format.
All endpoints should return ApiResponse for consistency.
"""

from typing import TypeVar, Generic, Optional, Dict, Any
from pydantic import BaseModel

T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    """
    Unified API response wrapper.

    All API endpoints should return this format:
    {
        "success": true/false,
        "data": <payload or null>,
        "error": <error message or null>,
        "code": <error code for errors, null for success>,
        "meta": <optional metadata>
    }
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: T = None, meta: Dict[str, Any] = None) -> "ApiResponse[T]":
        """Create successful response."""
        return cls(success=True, data=data, meta=meta)

    @classmethod
    def fail(
        cls,
        message: str,
        code: str = "ERROR",
        meta: Dict[str, Any] = None,
    ) -> "ApiResponse":
        """Create error response."""
        return cls(success=False, error=message, code=code, meta=meta)

    @classmethod
    def from_exception(cls, exc: "AppException") -> "ApiResponse":
        """Create error response from AppException. Details travel in meta."""
        return cls(
            success=False,
            error=exc.message,
            code=exc.code,
            meta=exc.details or None,
        )
