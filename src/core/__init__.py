"""
Core module with shared exceptions.

FastAPI dependency injection lives in src.core.dependencies; import it
directly to avoid a circular import with src.config.
"""

from src.core.exceptions import (
    ConfigurationError,
    DetectionServiceError,
    InvalidImageError,
    UpstreamError,
)


__all__ = [
    'ConfigurationError',
    'DetectionServiceError',
    'InvalidImageError',
    'UpstreamError',
]
