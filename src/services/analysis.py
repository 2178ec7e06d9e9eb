"""
Analysis service fanning one image out to every configured model.

Each target is submitted concurrently; the call returns once all of them
have settled, with exactly one outcome per target id.
"""

import asyncio
import logging
import time

from src.clients.upstream import UpstreamModelClient
from src.core.exceptions import InvalidImageError
from src.schemas.detection import (
    AnalysisResult,
    AnalyzeResponse,
    ImageMetadata,
    ImagePayload,
    MergedDetection,
    ModelTarget,
    SuccessOutcome,
)


logger = logging.getLogger(__name__)


class AnalysisService:
    """Fan-out coordinator over a shared UpstreamModelClient."""

    def __init__(self, client: UpstreamModelClient):
        self.client = client

    async def analyze(
        self, image: ImagePayload | None, targets: list[ModelTarget]
    ) -> AnalysisResult:
        """
        Submit the image to every target concurrently and wait for all of them.

        A failing target yields a FailureOutcome entry; it never fails the call.

        Args:
            image: Encoded capture shared read-only by every submission
            targets: Configured model targets

        Returns:
            Outcome per target id, in target order

        Raises:
            InvalidImageError: If the image is missing or empty
        """
        if image is None or not image.data:
            raise InvalidImageError(getattr(image, 'filename', 'unknown'), 'No image provided')

        if not targets:
            logger.info('No model targets configured, nothing to analyze')
            return {}

        outcomes = await asyncio.gather(
            *(self.client.submit(target, image) for target in targets)
        )

        return {target.id: outcome for target, outcome in zip(targets, outcomes)}

    async def analyze_and_merge(
        self, image: ImagePayload | None, targets: list[ModelTarget]
    ) -> AnalyzeResponse:
        """
        Run analyze() and build the API response with merged detections.

        Returns:
            AnalyzeResponse with per-model results and the merged detection list
        """
        start = time.perf_counter()
        results = await self.analyze(image, targets)
        elapsed_ms = (time.perf_counter() - start) * 1000

        detections = merge_detections(results)
        succeeded = sum(1 for outcome in results.values() if isinstance(outcome, SuccessOutcome))

        logger.info(
            f'Analyzed {image.filename} with {len(results)} models: '
            f'{succeeded} ok, {len(results) - succeeded} failed, '
            f'{len(detections)} detections in {elapsed_ms:.1f}ms'
        )

        return AnalyzeResponse(
            results=results,
            detections=detections,
            num_detections=len(detections),
            image=reference_image(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            total_time_ms=round(elapsed_ms, 2),
        )


def merge_detections(results: AnalysisResult) -> list[MergedDetection]:
    """
    Concatenate detections of every successful model, in result order.

    Failed models contribute nothing. Boxes are copied verbatim and tagged
    with the id of the model that produced them.
    """
    merged = []
    for model_id, outcome in results.items():
        if not isinstance(outcome, SuccessOutcome):
            continue
        merged.extend(
            MergedDetection(**det.model_dump(), model_id=model_id) for det in outcome.detections
        )
    return merged


def reference_image(results: AnalysisResult) -> ImageMetadata | None:
    """Image dimensions reported by the first successful model, if any."""
    for outcome in results.values():
        if isinstance(outcome, SuccessOutcome):
            return outcome.image
    return None
