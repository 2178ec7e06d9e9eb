"""
FastAPI routers.

- analyze: image fan-out to the configured detection models
- health: health checks and service info
"""

from src.routers.analyze import router as analyze_router
from src.routers.health import router as health_router


__all__ = [
    'analyze_router',
    'health_router',
]
