"""
Upstream detection model client.

Submits one encoded image to one hosted detection endpoint over HTTP and
normalizes the answer into a SuccessOutcome or FailureOutcome.

Usage:
    async with UpstreamModelClient() as client:
        outcome = await client.submit(target, image)

    # Or share the app-wide connection pool
    client = UpstreamModelClient(http_client=shared_httpx_client)
"""

import logging

import httpx
from pydantic import ValidationError

from src.core.exceptions import UpstreamError
from src.schemas.detection import (
    FailureOutcome,
    ImagePayload,
    ModelOutcome,
    ModelTarget,
    SuccessOutcome,
    UpstreamResponse,
)


logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


class UpstreamModelClient:
    """
    HTTP client for Roboflow-style hosted detection endpoints.

    submit() never raises: transport errors, error statuses and unexpected
    bodies all come back as FailureOutcome so one target cannot abort its siblings.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self._owns_client = http_client is None
        if http_client is None:
            http_client = create_http_client(timeout)
        self._http = http_client

    async def __aenter__(self) -> 'UpstreamModelClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def submit(self, target: ModelTarget, image: ImagePayload) -> ModelOutcome:
        """
        Send one image to one model target.

        Args:
            target: Upstream endpoint configuration
            image: Base64 JPEG payload (read only)

        Returns:
            SuccessOutcome with the upstream predictions unchanged, or FailureOutcome
        """
        problem = _check_inputs(target, image)
        if problem:
            logger.warning(f"Skipping model '{target.id}': {problem}")
            return FailureOutcome(message=problem)

        try:
            parsed = await self._post(target, image)

        except UpstreamError as e:
            logger.warning(e.message)
            return FailureOutcome(message=e.message)

        except httpx.TimeoutException as e:
            message = f"Model '{target.id}' timed out: {type(e).__name__}"
            logger.warning(message)
            return FailureOutcome(message=message)

        except httpx.HTTPError as e:
            message = f"Model '{target.id}' request failed: {type(e).__name__}: {e}"
            logger.warning(message)
            return FailureOutcome(message=message)

        except Exception as e:
            message = f"Model '{target.id}' unexpected error: {e!s}"
            logger.error(message)
            return FailureOutcome(message=message)

        logger.info(
            f"Model '{target.id}': {len(parsed.predictions)} detections "
            f'({parsed.image.width}x{parsed.image.height})'
        )
        return SuccessOutcome(detections=parsed.predictions, image=parsed.image)

    async def _post(self, target: ModelTarget, image: ImagePayload) -> UpstreamResponse:
        """Issue the POST and validate the body. Raises on any failure."""
        response = await self._http.post(
            target.url,
            params={'api_key': target.credential},
            content=image.data,
            headers={'Content-Type': FORM_CONTENT_TYPE},
        )

        if not response.is_success:
            raise UpstreamError(
                target.id,
                f'upstream returned status {response.status_code}',
                status_code=response.status_code,
            )

        try:
            return UpstreamResponse.model_validate(response.json())
        except ValueError as e:
            # ValidationError is a ValueError subclass, as is a JSON decode error
            kind = 'schema mismatch' if isinstance(e, ValidationError) else 'invalid JSON'
            raise UpstreamError(
                target.id, f'{kind} in response body: {e}', status_code=response.status_code
            ) from e


def create_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create an httpx client. Without a timeout, httpx's default applies."""
    if timeout is None:
        return httpx.AsyncClient()
    return httpx.AsyncClient(timeout=timeout)


def _check_inputs(target: ModelTarget, image: ImagePayload) -> str | None:
    if not target.id:
        return 'target id is empty'
    if not target.credential:
        return 'target credential is empty'
    if not target.endpoint_template:
        return 'target endpoint template is empty'
    if not image.data:
        return 'image data is empty'
    return None
