"""
Health and Monitoring Router

Provides health checks and service info.
"""

import logging
import os

import psutil
from fastapi import APIRouter

from src.config import get_settings
from src.core.dependencies import ModelTargetsDep
from src.schemas.common import HealthResponse, ServiceInfoResponse, TargetInfo


logger = logging.getLogger(__name__)

router = APIRouter(
    tags=['Health & Monitoring'],
)


@router.get('/', response_model=ServiceInfoResponse)
def root(targets: ModelTargetsDep):
    """
    Service information endpoint.

    Lists the configured model targets. Credentials are never returned.
    """
    settings = get_settings()

    return ServiceInfoResponse(
        service=settings.api_title,
        version=settings.api_version,
        endpoints=['/api/analyze', '/api/analyze/upload', '/api/analyze/annotated'],
        targets=[TargetInfo(id=t.id, url=t.url) for t in targets],
    )


@router.get('/health', response_model=HealthResponse)
def health(targets: ModelTargetsDep):
    """
    Health check with process metrics.

    Reports 'degraded' when no model target is configured, since every
    analysis would then return an empty result.
    """
    settings = get_settings()
    process = psutil.Process(os.getpid())
    memory_info = process.memory_info()

    return HealthResponse(
        status='healthy' if targets else 'degraded',
        num_targets=len(targets),
        upstream_timeout=settings.upstream_timeout,
        memory_mb=round(memory_info.rss / 1024 / 1024, 2),
        cpu_percent=process.cpu_percent(),
        max_file_size_mb=settings.max_file_size_mb,
    )
