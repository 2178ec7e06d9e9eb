"""
Service layer containing business logic.

Separates business logic from API routes for cleaner architecture.
"""

from src.services.analysis import AnalysisService, merge_detections, reference_image
from src.services.image import ImageService


__all__ = [
    'AnalysisService',
    'ImageService',
    'merge_detections',
    'reference_image',
]
