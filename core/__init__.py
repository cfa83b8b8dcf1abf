"""
Core package - foundation for the application.

Modules:
- config.py - Application settings via Pydantic Settings
- exceptions.py - Custom exception hierarchy
- responses.py - Unified API response format
- logging.py - Centralized logging configuration
"""

from core.config import Settings, get_settings
from core.exceptions import (
    AppException,
    NotFoundError,
    ConflictError,
    ValidationError,
    InvalidImageError,
    DatabaseError,
    ProviderError,
    AuthenticationError,
)
from core.responses import ApiResponse

__all__ = [
    'Settings',
    'get_settings',
    'AppException',
    'NotFoundError',
    'ConflictError',
    'ValidationError',
    'InvalidImageError',
    'DatabaseError',
    'ProviderError',
    'AuthenticationError',
    'ApiResponse',
]
