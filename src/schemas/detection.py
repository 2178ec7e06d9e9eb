"""
Detection-related Pydantic models.

Upstream models answer in the Roboflow hosted-inference format:
boxes are given by their centre point and extents in source image pixels.
These schemas carry that output through unchanged.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ModelTarget(BaseModel):
    """One configured upstream detection endpoint."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description='Unique key, also substituted into the endpoint URL')
    credential: str = Field(..., repr=False, description='Access token sent as api_key')
    endpoint_template: str = Field(..., description='URL pattern containing {id}')

    @property
    def url(self) -> str:
        return self.endpoint_template.format(id=self.id)


class ImagePayload(BaseModel):
    """A captured frame as base64 text, shared read-only by every submission."""

    model_config = ConfigDict(frozen=True)

    data: str = Field(..., repr=False, description='Base64-encoded JPEG bytes')
    filename: str = Field(default='capture.jpg', description='Name used in log messages')


class DetectionBox(BaseModel):
    """
    Individual object detection as returned by the upstream model.

    x/y are the box centre, width/height its extents, all in source image pixels.
    """

    model_config = ConfigDict(populate_by_name=True)  # Allow both 'class' and 'label'

    label: str = Field(..., alias='class', description='Detected class name')
    confidence: float = Field(..., ge=0.0, le=1.0, description='Detection confidence score')
    x: float = Field(..., description='Box centre x (pixels)')
    y: float = Field(..., description='Box centre y (pixels)')
    width: float = Field(..., description='Box width (pixels)')
    height: float = Field(..., description='Box height (pixels)')

    def corners(self) -> tuple[float, float, float, float]:
        """Return (x1, y1, x2, y2) for drawing."""
        half_w = self.width / 2
        half_h = self.height / 2
        return self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h


class ImageMetadata(BaseModel):
    """Source image metadata reported by the upstream model."""

    width: int = Field(..., description='Image width in pixels')
    height: int = Field(..., description='Image height in pixels')


class UpstreamResponse(BaseModel):
    """Expected body of a successful upstream response. Extra keys are ignored."""

    predictions: list[DetectionBox]
    image: ImageMetadata


class SuccessOutcome(BaseModel):
    """Settled result of a target that answered with detections."""

    status: Literal['success'] = 'success'
    detections: list[DetectionBox] = Field(default_factory=list)
    image: ImageMetadata


class FailureOutcome(BaseModel):
    """Settled result of a target whose submission failed."""

    status: Literal['error'] = 'error'
    message: str


ModelOutcome = Annotated[SuccessOutcome | FailureOutcome, Field(discriminator='status')]

# target id -> outcome, one entry per configured target
AnalysisResult = dict[str, ModelOutcome]


class MergedDetection(DetectionBox):
    """Detection tagged with the target that produced it."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str = Field(..., description='Id of the model target that reported the box')


class AnalyzeRequest(BaseModel):
    """JSON body of /api/analyze, as posted by the camera page."""

    image: str = Field(..., description='data:image/...;base64,... URL or bare base64 JPEG')


class AnalyzeResponse(BaseModel):
    """
    Response schema for analysis endpoints.

    Includes:
    - results: per-model outcome keyed by target id
    - detections: boxes of every successful model, merged in target order
    - image: dimensions reported by the first successful model
    - total_time_ms: fan-out wall time
    """

    results: AnalysisResult = Field(default_factory=dict, description='Outcome per model id')
    detections: list[MergedDetection] = Field(
        default_factory=list, description='Merged detections from successful models'
    )
    num_detections: int = Field(default=0, description='Number of merged detections')
    image: ImageMetadata | None = Field(None, description='Source image dimensions')
    succeeded: int = Field(default=0, description='Models that answered successfully')
    failed: int = Field(default=0, description='Models that failed')
    total_time_ms: float | None = Field(None, description='Fan-out time in milliseconds')
