"""
Pydantic schemas for API request/response models.

Consolidated models used across all API endpoints for consistent typing.
"""

from src.schemas.common import HealthResponse, ServiceInfoResponse, TargetInfo
from src.schemas.detection import (
    AnalysisResult,
    AnalyzeRequest,
    AnalyzeResponse,
    DetectionBox,
    FailureOutcome,
    ImageMetadata,
    ImagePayload,
    MergedDetection,
    ModelOutcome,
    ModelTarget,
    SuccessOutcome,
    UpstreamResponse,
)


__all__ = [
    'AnalysisResult',
    'AnalyzeRequest',
    'AnalyzeResponse',
    'DetectionBox',
    'FailureOutcome',
    'HealthResponse',
    'ImageMetadata',
    'ImagePayload',
    'MergedDetection',
    'ModelOutcome',
    'ModelTarget',
    'ServiceInfoResponse',
    'SuccessOutcome',
    'TargetInfo',
    'UpstreamResponse',
]
