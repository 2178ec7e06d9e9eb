"""
FastAPI dependency injection for shared resources.

Uses FastAPI's Depends() pattern for proper lifecycle management.
Resources are created once in the lifespan and reused across requests.
"""

import logging
from typing import Annotated

import httpx
from fastapi import Depends

from src.clients.upstream import UpstreamModelClient, create_http_client
from src.config.settings import Settings, get_settings
from src.schemas.detection import ModelTarget
from src.services.analysis import AnalysisService
from src.services.image import ImageService


logger = logging.getLogger(__name__)


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================
SettingsDep = Annotated[Settings, Depends(get_settings)]


# =============================================================================
# Application State (managed by lifespan context)
# =============================================================================
class AppState:
    """
    Application state container for shared resources.

    Resources are initialized in lifespan and accessed via dependencies.
    """

    def __init__(self):
        self.targets: list[ModelTarget] = []
        self._http_client: httpx.AsyncClient | None = None
        self._upstream_client: UpstreamModelClient | None = None


# Global app state - initialized in lifespan
app_state = AppState()


# =============================================================================
# Upstream Client Factory
# =============================================================================
class UpstreamClientFactory:
    """
    Factory for the shared upstream client.

    One httpx.AsyncClient (and its connection pool) serves every model target.
    """

    @staticmethod
    def get_client() -> UpstreamModelClient:
        """Get the shared upstream client (lazy initialization)."""
        if app_state._upstream_client is None:
            settings = get_settings()
            app_state._http_client = create_http_client(settings.upstream_timeout)
            app_state._upstream_client = UpstreamModelClient(http_client=app_state._http_client)
            logger.info('Upstream HTTP client ready')
        return app_state._upstream_client

    @staticmethod
    async def close() -> None:
        """Close the shared httpx client."""
        if app_state._http_client is not None:
            await app_state._http_client.aclose()
            logger.info('Upstream HTTP client closed')
        app_state._http_client = None
        app_state._upstream_client = None


def load_targets(settings: Settings | None = None) -> list[ModelTarget]:
    """Resolve configured targets into app state. Raises ConfigurationError if invalid."""
    settings = settings or get_settings()
    app_state.targets = settings.resolve_targets()
    return app_state.targets


# =============================================================================
# FastAPI Dependencies (use with Depends())
# =============================================================================
def get_upstream_client() -> UpstreamModelClient:
    """Dependency for the shared upstream client."""
    return UpstreamClientFactory.get_client()


def get_model_targets() -> list[ModelTarget]:
    """Dependency for the configured model targets."""
    return app_state.targets


def get_analysis_service(
    client: Annotated[UpstreamModelClient, Depends(get_upstream_client)],
) -> AnalysisService:
    """Dependency for the fan-out coordinator."""
    return AnalysisService(client)


def get_image_service(settings: SettingsDep) -> ImageService:
    """Dependency for the image intake service."""
    return ImageService(max_size_mb=settings.max_file_size_mb, jpeg_quality=settings.jpeg_quality)


# Type aliases for cleaner endpoint signatures
AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
ImageServiceDep = Annotated[ImageService, Depends(get_image_service)]
ModelTargetsDep = Annotated[list[ModelTarget], Depends(get_model_targets)]
