"""
Custom exceptions for the detection fan-out service.

Provides domain-specific exceptions for better error handling.
"""


class DetectionServiceError(Exception):
    """Base exception for detection-related errors."""

    def __init__(self, message: str, model_id: str | None = None):
        self.message = message
        self.model_id = model_id
        super().__init__(self.message)


class InvalidImageError(DetectionServiceError):
    """Raised when the submitted image is missing or cannot be used."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        message = f"Invalid image '{filename}': {reason}"
        super().__init__(message)


class UpstreamError(DetectionServiceError):
    """Raised when an upstream model answers with an error status or an unexpected body."""

    def __init__(self, model_id: str, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        message = f"Model '{model_id}' failed: {reason}"
        super().__init__(message, model_id)


class ConfigurationError(DetectionServiceError):
    """Raised when the model target configuration is invalid."""
