"""
Analysis Router

Accepts a captured still image and fans it out to every configured
detection model. Partial failure is reported per model, never as an HTTP error.
"""

import logging

from fastapi import APIRouter, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from src.core.dependencies import AnalysisServiceDep, ImageServiceDep, ModelTargetsDep
from src.schemas.detection import AnalyzeRequest, AnalyzeResponse


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix='/api',
    tags=['Analysis'],
)


@router.post('/analyze', response_model=AnalyzeResponse)
async def analyze(
    request: AnalyzeRequest,
    service: AnalysisServiceDep,
    images: ImageServiceDep,
    targets: ModelTargetsDep,
):
    """
    Analyze a camera capture sent as a data URL.

    Body: {"image": "data:image/jpeg;base64,..."}

    Response includes:
    - results: success (detections + image size) or error message per model id
    - detections: merged boxes from every successful model, tagged with model_id
    - succeeded / failed: model counts

    Returns 400 only when the image itself is unusable.
    """
    payload = await run_in_threadpool(images.from_data_url, request.image)
    return await service.analyze_and_merge(payload, targets)


@router.post('/analyze/upload', response_model=AnalyzeResponse)
async def analyze_upload(
    service: AnalysisServiceDep,
    images: ImageServiceDep,
    targets: ModelTargetsDep,
    image: UploadFile = File(...),
):
    """
    Analyze an uploaded image file (JPEG/PNG). Non-JPEG input is re-encoded.

    Args:
        image: Image file

    Returns:
        AnalyzeResponse with per-model results and merged detections
    """
    filename = image.filename or 'uploaded_image'
    payload = await run_in_threadpool(images.from_upload, await image.read(), filename)
    return await service.analyze_and_merge(payload, targets)


@router.post(
    '/analyze/annotated',
    response_class=Response,
    responses={200: {'content': {'image/jpeg': {}}}},
)
async def analyze_annotated(
    service: AnalysisServiceDep,
    images: ImageServiceDep,
    targets: ModelTargetsDep,
    image: UploadFile = File(...),
):
    """
    Analyze an uploaded image and return it with the merged boxes drawn on it.

    Per-model success/failure counts are returned in the
    X-Models-Succeeded and X-Models-Failed headers.
    """
    filename = image.filename or 'uploaded_image'
    payload = await run_in_threadpool(images.from_upload, await image.read(), filename)
    result = await service.analyze_and_merge(payload, targets)

    return Response(
        content=await run_in_threadpool(images.annotate, payload, result.detections),
        media_type='image/jpeg',
        headers={
            'X-Models-Succeeded': str(result.succeeded),
            'X-Models-Failed': str(result.failed),
        },
    )
