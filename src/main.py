"""
Multi-Model Detection FastAPI Service

Receives a still image captured by the camera page and fans it out to every
configured hosted detection model:
- /api/analyze            : JSON body with a data URL (camera capture)
- /api/analyze/upload     : multipart image upload
- /api/analyze/annotated  : multipart upload, returns the image with boxes drawn
- /health, /              : monitoring and service info

Run:
    uvicorn src.main:app --host 0.0.0.0 --port 8000
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from src.config import get_settings
from src.core.dependencies import UpstreamClientFactory, load_targets
from src.core.exceptions import InvalidImageError
from src.routers import analyze_router, health_router


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Manager
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager.

    Startup:
    - Resolve model targets (fails fast on invalid configuration)
    - Create the shared upstream HTTP client

    Shutdown:
    - Close the shared HTTP client and its connection pool
    """
    logger.info('=== STARTUP ===')

    targets = load_targets(get_settings())
    if targets:
        for target in targets:
            logger.info(f'Model target: {target.id} -> {target.url}')
    else:
        logger.warning('No model targets configured (set MODEL_TARGETS); analyses will be empty')

    UpstreamClientFactory.get_client()
    logger.info(f'=== SERVICE READY ({len(targets)} models) ===')

    yield

    logger.info('=== SHUTDOWN ===')
    await UpstreamClientFactory.close()
    logger.info('=== SHUTDOWN COMPLETE ===')


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=['*'],
    allow_headers=['*'],
)


# =============================================================================
# Performance Monitoring Middleware
# =============================================================================
@app.middleware('http')
async def performance_middleware(request: Request, call_next):
    """
    Reject oversized uploads early, add X-Process-Time and log slow requests.
    """
    start_time = time.time()
    settings = get_settings()

    if request.method == 'POST' and request.url.path.startswith('/api/analyze'):
        content_length = request.headers.get('content-length')
        if content_length and content_length.isdigit():
            # base64 and multipart framing inflate the body, allow for it
            limit = settings.max_file_size_bytes * 4 // 3 + 64 * 1024
            if int(content_length) > limit:
                logger.warning(
                    f'Request rejected: body of {int(content_length) / 1024 / 1024:.2f}MB '
                    f'exceeds {settings.max_file_size_mb}MB limit'
                )
                return ORJSONResponse(
                    status_code=413,
                    content={
                        'detail': f'File too large. Maximum size: {settings.max_file_size_mb}MB'
                    },
                )

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers['X-Process-Time'] = f'{duration_ms:.2f}ms'

    if duration_ms > settings.slow_request_threshold_ms:
        logger.warning(
            f'Slow request: {request.method} {request.url.path} - '
            f'{duration_ms:.2f}ms (threshold: {settings.slow_request_threshold_ms}ms)'
        )

    return response


# =============================================================================
# Exception Handlers
# =============================================================================
@app.exception_handler(InvalidImageError)
async def invalid_image_handler(request: Request, exc: InvalidImageError):
    logger.warning(f'Rejected {request.url.path}: {exc.message}')
    return ORJSONResponse(status_code=400, content={'detail': exc.message})


# =============================================================================
# Routers
# =============================================================================
app.include_router(health_router)
app.include_router(analyze_router)


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host='0.0.0.0', port=8000)
