"""
Custom exception hierarchy for the application.
All exceptions inherit from AppException for unified handling.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        status_code: HTTP status code for API responses
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# === Not Found Errors ===

class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, entity: str, identifier: str = None):
        message = f"{entity} not found"
        if identifier:
            message = f"{entity} '{identifier}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class PersonNotFoundError(NotFoundError):
    def __init__(self, person_id: str):
        super().__init__("Person", person_id)


class FaceNotFoundError(NotFoundError):
    def __init__(self, face_id: str):
        super().__init__("Face", face_id)


class AssetNotFoundError(NotFoundError):
    def __init__(self, asset_id: str):
        super().__init__("Asset", asset_id)


# === Conflict Errors ===

class ConflictError(AppException):
    """Request conflicts with the current state of a resource."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details
        )


class DuplicatePersonNameError(ConflictError):
    def __init__(self, name: str):
        super().__init__(
            message="A person with this name already exists",
            details={"name": name}
        )


# === Validation Errors ===

class ValidationError(AppException):
    """Input validation failed."""

    def __init__(self, message: str, field: str = None, code: str = "VALIDATION_ERROR"):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            details=details
        )


class InvalidImageError(AppException):
    """The vision provider rejected the image bytes."""

    def __init__(self, reason: str = "Invalid or corrupted image"):
        super().__init__(
            message=reason,
            code="INVALID_IMAGE",
            status_code=400,
            details={"field": "image"}
        )


# === Database Errors ===

class DatabaseError(AppException):
    """Database operation failed."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=f"Database error: {message}",
            code="DATABASE_ERROR",
            status_code=500,
            details=details
        )


# === Provider Errors ===

class ProviderError(AppException):
    """
    Vision provider call failed (access denied, throttling, outage).
    The provider's own message is kept so callers can see what went wrong.
    """

    def __init__(self, message: str, operation: str = None, provider_code: str = None):
        details = {}
        if operation:
            details["operation"] = operation
        if provider_code:
            details["provider_code"] = provider_code
        super().__init__(
            message=f"Face provider error: {message}",
            code="PROVIDER_ERROR",
            status_code=500,
            details=details
        )


class CollectionNotFoundError(ProviderError):
    """Raised when a collection is missing on the provider side."""

    def __init__(self, collection_id: str):
        super().__init__(
            message=f"Collection '{collection_id}' does not exist",
            operation="describe_collection",
            provider_code="ResourceNotFoundException"
        )
        self.collection_id = collection_id


# === Authentication Errors ===

class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401
        )


class InvalidTokenError(AuthenticationError):
    def __init__(self):
        super().__init__(message="Invalid or expired token")
